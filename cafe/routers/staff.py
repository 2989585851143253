import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from cafe.core.auth import check_staff_credentials, create_staff_token, require_staff
from cafe.database import get_session
from cafe.repositories.menu_repo import MenuRepository
from cafe.repositories.order_repo import OrderRepository
from cafe.schemas.order import BaristaBoard, OrderRead, OrderWithItemsRead
from cafe.schemas.staff import StaffLogin, StaffToken
from cafe.services.order_service import OrderService

router = APIRouter(prefix="/staff", tags=["Staff"])

order_repo = OrderRepository()
service = OrderService(order_repo, MenuRepository())


@router.post("/login", response_model=StaffToken)
def login(payload: StaffLogin):
    """
    Exchange the shared staff credentials for a bearer token.
    """
    if not check_staff_credentials(payload.username, payload.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    token, expires_at = create_staff_token()
    return StaffToken(access_token=token, expires_at=expires_at)


# -------- Cashier --------


@router.get(
    "/cashier/orders",
    response_model=list[OrderWithItemsRead],
    dependencies=[Depends(require_staff)],
)
def cashier_orders(session: Session = Depends(get_session)):
    """
    Pending orders waiting for the cashier, oldest first.
    """
    return service.cashier_queue(session)


@router.post(
    "/cashier/orders/{order_id}/accept",
    response_model=OrderRead,
    dependencies=[Depends(require_staff)],
)
def accept_order(order_id: uuid.UUID, session: Session = Depends(get_session)):
    return service.set_status(session, order_id, "accepted")


@router.post(
    "/cashier/orders/{order_id}/reject",
    response_model=OrderRead,
    dependencies=[Depends(require_staff)],
)
def reject_order(order_id: uuid.UUID, session: Session = Depends(get_session)):
    return service.set_status(session, order_id, "cancelled")


# -------- Barista --------


@router.get(
    "/barista/orders",
    response_model=BaristaBoard,
    dependencies=[Depends(require_staff)],
)
def barista_orders(session: Session = Depends(get_session)):
    """
    Barista board:
      - preparing: accepted + preparing orders
      - ready: orders waiting to be served
    """
    return service.barista_board(session)


@router.post(
    "/barista/orders/{order_id}/start",
    response_model=OrderRead,
    dependencies=[Depends(require_staff)],
)
def start_order(order_id: uuid.UUID, session: Session = Depends(get_session)):
    return service.set_status(session, order_id, "preparing")


@router.post(
    "/barista/orders/{order_id}/ready",
    response_model=OrderRead,
    dependencies=[Depends(require_staff)],
)
def mark_ready(order_id: uuid.UUID, session: Session = Depends(get_session)):
    return service.set_status(session, order_id, "ready")


@router.post(
    "/barista/orders/{order_id}/serve",
    response_model=OrderRead,
    dependencies=[Depends(require_staff)],
)
def mark_served(order_id: uuid.UUID, session: Session = Depends(get_session)):
    return service.set_status(session, order_id, "served")
