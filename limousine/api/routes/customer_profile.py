"""
Customer profile endpoints
==========================

POST /customer/profile/signup        -- create an account
POST /customer/profile/login         -- exchange credentials for a JWT
POST /customer/profile/postFcmToken  -- register the device push token
POST /customer/profile/updateProfile -- change name / phone number
"""

from fastapi import APIRouter, Depends, Request, status

from limousine.api.dependencies import get_customer_accounts, require_customer
from limousine.api.middleware import limiter
from limousine.api.schemas import (
    CustomerLoginResponse,
    CustomerResponse,
    Envelope,
    FcmTokenRequest,
    LoginRequest,
    SignupRequest,
    UpdateProfileRequest,
)
from limousine.config import settings
from limousine.domain.entities import Actor
from limousine.services.account_service import CustomerAccounts

router = APIRouter(prefix="/customer/profile", tags=["customer - profile"])


@router.post(
    "/signup",
    response_model=Envelope[CustomerResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a customer account",
)
@limiter.limit(settings.rate_limit)
async def signup(
    request: Request,
    body: SignupRequest,
    accounts: CustomerAccounts = Depends(get_customer_accounts),
):
    customer = await accounts.signup(
        body.name, body.email, body.password, phone_number=body.phone_number
    )
    return Envelope(data=CustomerResponse.model_validate(customer))


@router.post(
    "/login",
    response_model=Envelope[CustomerLoginResponse],
    summary="Log in as a customer",
)
@limiter.limit(settings.rate_limit)
async def login(
    request: Request,
    body: LoginRequest,
    accounts: CustomerAccounts = Depends(get_customer_accounts),
):
    token, customer = await accounts.login(body.email, body.password)
    return Envelope(
        data=CustomerLoginResponse(
            token=token, customer=CustomerResponse.model_validate(customer)
        )
    )


@router.post(
    "/postFcmToken",
    response_model=Envelope[CustomerResponse],
    summary="Register the device token used for push notifications",
)
@limiter.limit(settings.rate_limit)
async def post_fcm_token(
    request: Request,
    body: FcmTokenRequest,
    actor: Actor = Depends(require_customer),
    accounts: CustomerAccounts = Depends(get_customer_accounts),
):
    customer = await accounts.set_fcm_token(actor.user_id, body.fcm_token)
    return Envelope(data=CustomerResponse.model_validate(customer))


@router.post(
    "/updateProfile",
    response_model=Envelope[CustomerResponse],
    summary="Update name or phone number",
)
@limiter.limit(settings.rate_limit)
async def update_profile(
    request: Request,
    body: UpdateProfileRequest,
    actor: Actor = Depends(require_customer),
    accounts: CustomerAccounts = Depends(get_customer_accounts),
):
    customer = await accounts.update_profile(
        actor.user_id, name=body.name, phone_number=body.phone_number
    )
    return Envelope(data=CustomerResponse.model_validate(customer))
