import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from cafe.core.config import get_settings

settings = get_settings()

STAFF_ROLE = "staff"

# HTTP Bearer scheme:
# - auto_error=False => we raise our own 401 with a consistent message
bearer_scheme = HTTPBearer(auto_error=False)


def check_staff_credentials(username: str, password: str) -> bool:
    """
    Compare submitted credentials with the configured staff account.

    The staff portal shares one account; this is an access gate for the
    dashboards, not per-user authentication.
    """
    username_ok = secrets.compare_digest(username, settings.STAFF_USERNAME)
    password_ok = secrets.compare_digest(password, settings.STAFF_PASSWORD)
    return username_ok and password_ok


def create_staff_token(now: datetime | None = None) -> tuple[str, datetime]:
    """
    Issue a signed staff token.

    Returns:
        (token, expires_at)
    """
    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(minutes=settings.STAFF_TOKEN_MINUTES)
    claims = {
        "sub": settings.STAFF_USERNAME,
        "role": STAFF_ROLE,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    token = jwt.encode(claims, settings.STAFF_JWT_SECRET, algorithm=settings.STAFF_JWT_ALG)
    return token, expires_at


def decode_staff_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a staff token.

    Verification:
      - signature (STAFF_JWT_SECRET)
      - expiration time (exp)
      - role claim is "staff"

    Raises:
        HTTPException(401): if token is invalid/expired.
    """
    try:
        payload = jwt.decode(
            token,
            settings.STAFF_JWT_SECRET,
            algorithms=[settings.STAFF_JWT_ALG],
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    if payload.get("role") != STAFF_ROLE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Staff token required",
        )
    return payload


def require_staff(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict[str, Any]:
    """
    Enforce the staff gate on cashier, barista and admin routes.

    Returns:
        Decoded token claims.

    Raises:
        HTTPException(401): if the header is missing or the token is bad.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return decode_staff_token(credentials.credentials)
