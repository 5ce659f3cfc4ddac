"""
Payment provider client.

The service layer talks to a ``PaymentProvider``; production wires in
``StripePaymentProvider``.  Amounts cross this boundary in minor units
(cents), exactly as the provider reports them.  The Stripe SDK is
synchronous, so every call runs in a worker thread.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Optional, Protocol

import stripe


class PaymentProviderError(Exception):
    """The provider rejected or failed a request."""


@dataclass(frozen=True)
class ProviderIntent:
    id: str
    status: str
    amount: int  # minor units
    currency: str
    client_secret: Optional[str] = None
    payment_method_types: list[str] = field(default_factory=list)
    latest_charge_id: Optional[str] = None


class PaymentProvider(Protocol):
    async def create_intent(self, amount: int, currency: str) -> ProviderIntent: ...

    async def retrieve_intent(self, intent_id: str) -> ProviderIntent: ...


def _charge_id(charge) -> Optional[str]:
    if charge is None:
        return None
    return charge if isinstance(charge, str) else charge.id


def _from_stripe(intent) -> ProviderIntent:
    return ProviderIntent(
        id=intent.id,
        status=intent.status,
        amount=intent.amount,
        currency=intent.currency,
        client_secret=intent.client_secret,
        payment_method_types=list(intent.payment_method_types or []),
        latest_charge_id=_charge_id(intent.latest_charge),
    )


class StripePaymentProvider:
    def __init__(self, api_key: str):
        self.api_key = api_key

    async def create_intent(self, amount: int, currency: str) -> ProviderIntent:
        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.create,
                api_key=self.api_key,
                amount=amount,
                currency=currency.lower(),
                automatic_payment_methods={"enabled": True},
            )
        except stripe.StripeError as exc:
            raise PaymentProviderError(exc.user_message or str(exc)) from exc
        return _from_stripe(intent)

    async def retrieve_intent(self, intent_id: str) -> ProviderIntent:
        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.retrieve, intent_id, api_key=self.api_key
            )
        except stripe.StripeError as exc:
            raise PaymentProviderError(exc.user_message or str(exc)) from exc
        return _from_stripe(intent)
