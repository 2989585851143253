import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from cafe.core.cart_session import get_cart
from cafe.database import get_session
from cafe.repositories.menu_repo import MenuRepository
from cafe.repositories.order_repo import OrderRepository
from cafe.schemas.order import CheckoutRequest, CheckoutResult, OrderTrackingRead
from cafe.services.cart_service import CartStore
from cafe.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
service = OrderService(order_repo, MenuRepository())


@router.post(
    "/checkout",
    response_model=CheckoutResult,
    status_code=status.HTTP_201_CREATED,
)
def checkout(
    payload: CheckoutRequest,
    session: Session = Depends(get_session),
    cart: CartStore = Depends(get_cart),
):
    """
    Place an order from the caller's cart.

    The cart is emptied once the order has been saved.
    """
    return service.checkout(session, cart, payload)


@router.get("/{order_id}/track", response_model=OrderTrackingRead)
def track_order(order_id: uuid.UUID, session: Session = Depends(get_session)):
    """
    Public tracking view: order, items, add-ons and status progress.

    Anyone with the order id can track it.
    """
    return service.track_order(session, order_id)
