from __future__ import annotations

from typing import Dict, Optional

from fastapi import APIRouter, Cookie, HTTPException, status
from fastapi.responses import JSONResponse

from ..auth import VERIFY_COOKIE, VERIFY_MAX_AGE, is_verified, password_matches, verification_token
from ..schemas import VerifyRequest, VerifyResponse
from ..settings import get_settings

router = APIRouter(
    prefix="/api/verify",
    tags=["auth"],
)


# PUBLIC_INTERFACE
@router.post(
    "",
    summary="Verify Password",
    description="Check the manual sync password and set a verification cookie valid for 24 hours.",
    responses={
        200: {"description": "Password accepted"},
        401: {"description": "Wrong password"},
        500: {"description": "Password not configured"},
    },
)
def verify_password(payload: VerifyRequest) -> JSONResponse:
    """
    Exchange the password for an HttpOnly verification cookie.
    """
    password = get_settings().blinko_password
    if not password:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Password not configured")
    if not password_matches(payload.password, password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Wrong password, please try again")

    response = JSONResponse({"success": True})
    response.set_cookie(
        VERIFY_COOKIE,
        verification_token(password),
        max_age=VERIFY_MAX_AGE,
        httponly=True,
        samesite="strict",
    )
    return response


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=VerifyResponse,
    summary="Verification State",
    description="Report whether the caller holds a valid verification cookie.",
)
def verification_state(blinko_verified: Optional[str] = Cookie(default=None)) -> Dict[str, bool]:
    """
    Return {"verified": bool}.
    """
    return {"verified": is_verified(blinko_verified, get_settings().blinko_password)}
