"""
Driver profile endpoints
========================

POST /driver/profile/login -- exchange credentials for a JWT
"""

from fastapi import APIRouter, Depends, Request

from limousine.api.dependencies import get_driver_accounts
from limousine.api.middleware import limiter
from limousine.api.schemas import (
    DriverLoginResponse,
    DriverResponse,
    Envelope,
    LoginRequest,
)
from limousine.config import settings
from limousine.services.account_service import DriverAccounts

router = APIRouter(prefix="/driver/profile", tags=["driver - profile"])


@router.post(
    "/login",
    response_model=Envelope[DriverLoginResponse],
    summary="Log in as a driver",
)
@limiter.limit(settings.rate_limit)
async def login(
    request: Request,
    body: LoginRequest,
    accounts: DriverAccounts = Depends(get_driver_accounts),
):
    token, driver = await accounts.login(body.email, body.password)
    return Envelope(
        data=DriverLoginResponse(token=token, driver=DriverResponse.model_validate(driver))
    )
