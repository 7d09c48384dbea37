from __future__ import annotations

import hashlib
import hmac
from typing import Optional

from fastapi import Cookie, HTTPException, status

from .settings import get_settings

VERIFY_COOKIE = "blinko_verified"
VERIFY_MAX_AGE = 24 * 60 * 60


# PUBLIC_INTERFACE
def verification_token(password: str) -> str:
    """
    Derive the cookie value proving the caller knew the password.

    The value is an HMAC of a fixed label keyed by the password, so it cannot be
    forged without the password and changes when the password changes.
    """
    return hmac.new(password.encode("utf-8"), b"blinko-ics-verified", hashlib.sha256).hexdigest()


# PUBLIC_INTERFACE
def password_matches(candidate: str, expected: str) -> bool:
    """Constant-time password comparison."""
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


# PUBLIC_INTERFACE
def is_verified(cookie_value: Optional[str], password: Optional[str]) -> bool:
    """Return True if the cookie carries the token for the configured password."""
    if not password or not cookie_value:
        return False
    return hmac.compare_digest(cookie_value, verification_token(password))


# PUBLIC_INTERFACE
async def require_verification(blinko_verified: Optional[str] = Cookie(default=None)) -> None:
    """
    FastAPI dependency that requires the verification cookie only when BLINKO_PASSWORD
    is configured. Settings are read per request.

    Behavior:
    - If settings.blinko_password is unset: does nothing.
    - If set: requires the cookie issued by POST /api/verify; otherwise raises 401.

    Usage:
        @router.post("/api/sync", dependencies=[Depends(require_verification)]) ...

    Raises:
        HTTPException(401) if the cookie is missing or invalid.
    """
    password = get_settings().blinko_password
    if not password:
        return None
    if not is_verified(blinko_verified, password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Password verification required",
        )
    return None
