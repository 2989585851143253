import uuid
from functools import lru_cache

from fastapi import Depends, Request, Response

from cafe.core.config import get_settings
from cafe.services.cart_service import CartRegistry, CartStore

settings = get_settings()

CART_COOKIE = "cart_session"
CART_COOKIE_MAX_AGE = 60 * 60 * 24 * settings.CART_SESSION_DAYS


@lru_cache
def get_cart_registry() -> CartRegistry:
    """
    Application-wide cart registry, created on first use.

    Snapshots live under CART_STORAGE_DIR, one sub-directory per
    cart session.
    """
    return CartRegistry.on_disk(settings.CART_STORAGE_DIR, settings.CART_STORAGE_KEY)


def _valid_session_id(raw: str | None) -> str | None:
    if not raw:
        return None
    try:
        return str(uuid.UUID(raw))
    except ValueError:
        return None


def get_cart(
    request: Request,
    response: Response,
    registry: CartRegistry = Depends(get_cart_registry),
) -> CartStore:
    """
    FastAPI dependency resolving the caller's cart.

    The cart session id comes from the `cart_session` cookie. Clients
    without a valid cookie get a new id, sent back as a cookie.
    """
    session_id = _valid_session_id(request.cookies.get(CART_COOKIE))
    if session_id is None:
        session_id = str(uuid.uuid4())
        response.set_cookie(
            CART_COOKIE,
            session_id,
            max_age=CART_COOKIE_MAX_AGE,
            httponly=True,
            samesite="lax",
        )
    return registry.open(session_id)
