from fastapi import APIRouter, Depends, status

from cafe.core.cart_session import get_cart
from cafe.schemas.cart import CartLineItemCreate, CartQuantityUpdate, CartSummary
from cafe.services.cart_service import CartStore

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("", response_model=CartSummary)
def get_my_cart(cart: CartStore = Depends(get_cart)):
    """
    Get the caller's cart with line totals and cart totals.

    The cart is identified by the `cart_session` cookie; no login needed.
    """
    return cart.summary()


@router.post("/items", response_model=CartSummary, status_code=status.HTTP_201_CREATED)
def add_cart_item(
    payload: CartLineItemCreate,
    cart: CartStore = Depends(get_cart),
):
    """
    Add a customized product as a new line item.

    Returns the updated cart summary.
    """
    cart.add_item(payload)
    return cart.summary()


@router.patch("/items/{line_id}", response_model=CartSummary)
def update_cart_item(
    line_id: str,
    payload: CartQuantityUpdate,
    cart: CartStore = Depends(get_cart),
):
    """
    Change a line item's quantity. Zero or less removes it.

    Unknown line ids leave the cart unchanged.
    """
    cart.update_quantity(line_id, payload.quantity)
    return cart.summary()


@router.delete("/items/{line_id}", response_model=CartSummary)
def remove_cart_item(line_id: str, cart: CartStore = Depends(get_cart)):
    cart.remove_item(line_id)
    return cart.summary()


@router.delete("", response_model=CartSummary)
def clear_cart(cart: CartStore = Depends(get_cart)):
    """
    Clear the entire cart.

    Returns an empty cart summary.
    """
    cart.clear_cart()
    return cart.summary()
