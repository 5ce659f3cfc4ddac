"""
Admin authentication
====================

POST /admin/auth/sendOtp   -- issue a one-time code to the admin address
POST /admin/auth/verifyOtp -- exchange the code for an admin JWT
"""

from fastapi import APIRouter, Depends, Request

from limousine.api.dependencies import get_admin_auth
from limousine.api.middleware import limiter
from limousine.api.schemas import (
    Envelope,
    MessageResponse,
    TokenResponse,
    VerifyOtpRequest,
)
from limousine.config import settings
from limousine.services.account_service import AdminAuth

router = APIRouter(prefix="/admin/auth", tags=["admin - auth"])


@router.post("/sendOtp", response_model=MessageResponse, summary="Send an admin OTP")
@limiter.limit(settings.rate_limit)
async def send_otp(request: Request, auth: AdminAuth = Depends(get_admin_auth)):
    await auth.send_otp()
    return MessageResponse(message="OTP sent successfully")


@router.post(
    "/verifyOtp",
    response_model=Envelope[TokenResponse],
    summary="Verify the admin OTP",
    description="Codes are single-use and expire after the configured TTL.",
)
@limiter.limit(settings.rate_limit)
async def verify_otp(
    request: Request,
    body: VerifyOtpRequest,
    auth: AdminAuth = Depends(get_admin_auth),
):
    token = await auth.verify_otp(body.otp)
    return Envelope(data=TokenResponse(token=token))
