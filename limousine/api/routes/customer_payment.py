"""
Customer payment endpoints
==========================

POST /customer/payment/createIntent -- open a provider payment intent
GET  /customer/payment/history      -- the caller's recorded payments
"""

from fastapi import APIRouter, Depends, Request

from limousine.api.dependencies import get_payment_service, require_customer
from limousine.api.middleware import limiter
from limousine.api.schemas import (
    CreatePaymentIntentRequest,
    Envelope,
    PaymentIntentResponse,
    PaymentResponse,
)
from limousine.config import settings
from limousine.domain.entities import Actor
from limousine.services.payment_service import PaymentService

router = APIRouter(prefix="/customer/payment", tags=["customer - payment"])


@router.post(
    "/createIntent",
    response_model=Envelope[PaymentIntentResponse],
    summary="Create a payment intent",
    description="The client confirms the intent with the provider, then "
    "passes its id to acceptQuote.",
)
@limiter.limit(settings.rate_limit)
async def create_intent(
    request: Request,
    body: CreatePaymentIntentRequest,
    actor: Actor = Depends(require_customer),
    payments: PaymentService = Depends(get_payment_service),
):
    intent = await payments.create_payment_intent(body.amount)
    return Envelope(data=PaymentIntentResponse.model_validate(intent))


@router.get(
    "/history",
    response_model=Envelope[list[PaymentResponse]],
    summary="Payment history, newest first",
)
@limiter.limit(settings.rate_limit)
async def history(
    request: Request,
    actor: Actor = Depends(require_customer),
    payments: PaymentService = Depends(get_payment_service),
):
    records = await payments.history(actor.user_id)
    return Envelope(data=[PaymentResponse.model_validate(p) for p in records])
