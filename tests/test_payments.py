"""Payment intent creation, verification and history."""

import pytest
import pytest_asyncio

from limousine.domain.errors import ForbiddenError, NotFoundError, ValidationError
from limousine.services.payment_service import PaymentService


@pytest_asyncio.fixture
async def payments(db_session, payment_provider):
    return PaymentService(db_session, payment_provider, currency="USD")


class TestCreatePaymentIntent:
    @pytest.mark.asyncio
    async def test_amount_is_sent_in_cents(self, payments, payment_provider):
        result = await payments.create_payment_intent(149.99)
        assert payment_provider.created == [(14999, "USD")]
        assert result["paymentIntentId"] == "pi_1"
        assert result["clientSecret"] == "pi_1_secret"

    @pytest.mark.parametrize("amount", [0, -5])
    @pytest.mark.asyncio
    async def test_non_positive_amount(self, payments, payment_provider, amount):
        with pytest.raises(ValidationError, match="Amount must be greater than 0"):
            await payments.create_payment_intent(amount)
        assert payment_provider.created == []

    @pytest.mark.asyncio
    async def test_provider_failure_is_a_validation_error(self, payments, payment_provider):
        payment_provider.fail_with = "Your card was declined."
        with pytest.raises(ValidationError, match="Failed to create payment intent"):
            await payments.create_payment_intent(10)


class TestVerifyAndRecordPayment:
    @pytest.mark.asyncio
    async def test_succeeded_intent_is_recorded(
        self, payments, payment_provider, make_customer
    ):
        customer = await make_customer()
        payment_provider.succeed("pi_ok", 12050, "usd")

        payment = await payments.verify_and_record_payment("pi_ok", customer.id)

        assert payment.amount == 120.5
        assert payment.currency == "USD"
        assert payment.payment_method == "card"
        assert payment.stripe_charge_id == "ch_pi_ok"
        assert payment.customer_id == customer.id

    @pytest.mark.asyncio
    async def test_verification_is_idempotent(
        self, payments, payment_provider, make_customer
    ):
        customer = await make_customer()
        payment_provider.succeed("pi_twice", 5000)

        first = await payments.verify_and_record_payment("pi_twice", customer.id)
        second = await payments.verify_and_record_payment("pi_twice", customer.id)

        assert first.id == second.id
        assert await payments.payments.count(payment_intent_id="pi_twice") == 1

    @pytest.mark.asyncio
    async def test_concurrent_verification_returns_the_recorded_row(
        self, payments, payment_provider, make_customer, monkeypatch
    ):
        customer = await make_customer()
        payment_provider.succeed("pi_race", 5000)
        first = await payments.verify_and_record_payment("pi_race", customer.id)

        # The other request read before the first one's insert landed
        lookup = payments.payments.get_by_intent_id
        calls = []

        async def stale_then_fresh(intent_id):
            calls.append(intent_id)
            if len(calls) == 1:
                return None
            return await lookup(intent_id)

        monkeypatch.setattr(payments.payments, "get_by_intent_id", stale_then_fresh)
        second = await payments.verify_and_record_payment("pi_race", customer.id)

        assert second.id == first.id
        assert calls == ["pi_race", "pi_race"]
        assert await payments.payments.count(payment_intent_id="pi_race") == 1

    @pytest.mark.asyncio
    async def test_incomplete_intent_is_not_recorded(
        self, payments, payment_provider, make_customer
    ):
        customer = await make_customer()
        intent = await payment_provider.create_intent(5000, "usd")
        with pytest.raises(
            ValidationError, match="Payment not completed. Status: requires_payment_method"
        ):
            await payments.verify_and_record_payment(intent.id, customer.id)
        assert await payments.payments.count() == 0

    @pytest.mark.asyncio
    async def test_unknown_intent(self, payments, make_customer):
        customer = await make_customer()
        with pytest.raises(ValidationError, match="Failed to verify payment"):
            await payments.verify_and_record_payment("pi_missing", customer.id)

    @pytest.mark.asyncio
    async def test_someone_elses_payment_is_forbidden(
        self, payments, payment_provider, make_customer
    ):
        owner = await make_customer()
        other = await make_customer()
        payment_provider.succeed("pi_owned", 5000)
        await payments.verify_and_record_payment("pi_owned", owner.id)

        with pytest.raises(ForbiddenError):
            await payments.verify_and_record_payment("pi_owned", other.id)


class TestPaymentHistory:
    @pytest.mark.asyncio
    async def test_newest_first_and_own_only(
        self, payments, payment_provider, make_customer
    ):
        customer = await make_customer()
        other = await make_customer()
        for intent_id in ("pi_a", "pi_b"):
            payment_provider.succeed(intent_id, 1000)
            await payments.verify_and_record_payment(intent_id, customer.id)
        payment_provider.succeed("pi_other", 1000)
        await payments.verify_and_record_payment("pi_other", other.id)

        history = await payments.history(customer.id)
        assert [p.payment_intent_id for p in history] == ["pi_b", "pi_a"]

    @pytest.mark.asyncio
    async def test_unknown_customer(self, payments):
        with pytest.raises(NotFoundError, match="Customer not found"):
            await payments.history(404)
