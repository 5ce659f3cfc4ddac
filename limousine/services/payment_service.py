"""
Payment coordination.

* ``create_payment_intent`` -- ask the provider for a client secret.
* ``verify_and_record_payment`` -- idempotent on the intent id: an intent
  already recorded is returned as-is, otherwise the provider must report
  it ``succeeded`` before a ``Payment`` row is written.  The insert runs
  in a savepoint so a concurrent verification that wins the unique
  intent id leaves this one returning the winner's row.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from limousine.domain.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from limousine.infrastructure.models import PaymentModel
from limousine.infrastructure.payments import PaymentProvider, PaymentProviderError
from limousine.infrastructure.repositories import (
    CustomerRepository,
    PaymentRepository,
)

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(
        self,
        session: AsyncSession,
        provider: PaymentProvider,
        currency: str = "USD",
    ):
        self.session = session
        self.payments = PaymentRepository(session)
        self.customers = CustomerRepository(session)
        self.provider = provider
        self.currency = currency

    async def create_payment_intent(self, amount: float) -> dict[str, str]:
        if not amount or amount <= 0:
            raise ValidationError("Amount must be greater than 0")
        try:
            intent = await self.provider.create_intent(
                round(amount * 100), self.currency
            )
        except PaymentProviderError as exc:
            raise ValidationError(f"Failed to create payment intent: {exc}") from exc
        logger.info("Created payment intent %s for %.2f", intent.id, amount)
        return {
            "clientSecret": intent.client_secret or "",
            "paymentIntentId": intent.id,
        }

    async def verify_and_record_payment(
        self, intent_id: str, customer_id: int
    ) -> PaymentModel:
        try:
            intent = await self.provider.retrieve_intent(intent_id)
        except PaymentProviderError as exc:
            raise ValidationError(f"Failed to verify payment: {exc}") from exc

        if intent.status != "succeeded":
            raise ValidationError(f"Payment not completed. Status: {intent.status}")

        existing = await self.payments.get_by_intent_id(intent_id)
        if existing is not None:
            return self._owned(existing, customer_id)

        try:
            async with self.session.begin_nested():
                payment = await self.payments.create(
                    customer_id=customer_id,
                    payment_intent_id=intent_id,
                    amount=intent.amount / 100,
                    currency=intent.currency.upper(),
                    payment_method=(
                        intent.payment_method_types[0]
                        if intent.payment_method_types
                        else None
                    ),
                    stripe_charge_id=intent.latest_charge_id,
                )
        except ConflictError:
            # A concurrent verification recorded the intent first
            existing = await self.payments.get_by_intent_id(intent_id)
            if existing is None:
                raise
            return self._owned(existing, customer_id)
        logger.info("Recorded payment %s (intent %s)", payment.id, intent_id)
        return payment

    @staticmethod
    def _owned(payment: PaymentModel, customer_id: int) -> PaymentModel:
        if payment.customer_id != customer_id:
            raise ForbiddenError("Payment belongs to another customer")
        return payment

    async def history(self, customer_id: int) -> list[PaymentModel]:
        if await self.customers.get_by_id(customer_id) is None:
            raise NotFoundError("Customer not found")
        return await self.payments.list_for_customer(customer_id)
