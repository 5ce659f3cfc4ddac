"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work).  The generic
``Repository`` provides create / find / update / delete / count; entity
repositories add the conditional updates the booking lifecycle relies on.

"Not found" is always a ``None`` (or ``False``) result.  Database failures
surface as ``PersistenceError`` (``ConflictError`` for constraint
violations) so callers can tell them apart.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Generic, Iterable, Optional, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .database import Base
from .models import (
    BookingModel,
    CustomerModel,
    DriverModel,
    NotificationModel,
    PaymentModel,
)
from limousine.domain.enums import BookingStatus, DriverStatus
from limousine.domain.errors import ConflictError, PersistenceError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def guarded(method):
    """
    Translate SQLAlchemy failures into ``PersistenceError``.

    Unique-constraint violations become ``ConflictError`` so services can
    turn a lost insert/update race into a caller-facing answer.
    """

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except IntegrityError as exc:
            logger.warning(
                "%s.%s hit a constraint: %s",
                type(self).__name__,
                method.__name__,
                exc.orig,
            )
            raise ConflictError("Database constraint violated") from exc
        except SQLAlchemyError as exc:
            logger.exception(
                "%s.%s failed", type(self).__name__, method.__name__
            )
            raise PersistenceError("Database operation failed") from exc

    return wrapper


class Repository(Generic[ModelT]):
    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    def _criteria(self, filters: dict[str, Any]) -> list:
        # None means "no filter on this column"
        return [
            getattr(self.model, key) == value
            for key, value in filters.items()
            if value is not None
        ]

    @guarded
    async def create(self, **values: Any) -> ModelT:
        obj = self.model(**values)
        self.session.add(obj)
        await self.session.flush()
        await self.session.refresh(obj)
        return obj

    @guarded
    async def get_by_id(self, obj_id: int) -> Optional[ModelT]:
        return await self.session.get(self.model, obj_id)

    @guarded
    async def find_one(self, **filters: Any) -> Optional[ModelT]:
        result = await self.session.execute(
            select(self.model).where(*self._criteria(filters)).limit(1)
        )
        return result.scalar_one_or_none()

    @guarded
    async def find_all(self, **filters: Any) -> list[ModelT]:
        result = await self.session.execute(
            select(self.model)
            .where(*self._criteria(filters))
            .order_by(self.model.id)
        )
        return list(result.scalars().all())

    @guarded
    async def update_by_id(self, obj_id: int, **patch: Any) -> Optional[ModelT]:
        obj = await self.session.get(self.model, obj_id)
        if obj is None:
            return None
        for key, value in patch.items():
            setattr(obj, key, value)
        await self.session.flush()
        await self.session.refresh(obj)
        return obj

    @guarded
    async def delete_by_id(self, obj_id: int) -> bool:
        obj = await self.session.get(self.model, obj_id)
        if obj is None:
            return False
        await self.session.delete(obj)
        await self.session.flush()
        return True

    @guarded
    async def count(self, **filters: Any) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(self.model)
            .where(*self._criteria(filters))
        )
        return result.scalar() or 0


class CustomerRepository(Repository[CustomerModel]):
    model = CustomerModel


class DriverRepository(Repository[DriverModel]):
    model = DriverModel

    @guarded
    async def claim_if_available(self, driver_id: int) -> bool:
        """Flip ``available -> on_trip`` only if the driver is still free."""
        result = await self.session.execute(
            update(DriverModel)
            .where(
                DriverModel.id == driver_id,
                DriverModel.status == DriverStatus.AVAILABLE,
            )
            .values(status=DriverStatus.ON_TRIP)
        )
        return result.rowcount == 1

    @guarded
    async def set_status(self, driver_id: int, status: DriverStatus) -> bool:
        result = await self.session.execute(
            update(DriverModel)
            .where(DriverModel.id == driver_id)
            .values(status=status)
        )
        return result.rowcount == 1


class BookingRepository(Repository[BookingModel]):
    model = BookingModel

    @guarded
    async def transition(
        self,
        booking: BookingModel,
        expected: BookingStatus,
        target: BookingStatus,
        **values: Any,
    ) -> bool:
        """
        Compare-and-swap the booking status.

        The row is only written while it still holds *expected*; a
        concurrent transition that got there first leaves rowcount at 0.
        """
        result = await self.session.execute(
            update(BookingModel)
            .where(
                BookingModel.id == booking.id,
                BookingModel.status == expected,
            )
            .values(status=target, **values)
        )
        if result.rowcount != 1:
            return False
        await self.session.refresh(booking)
        return True

    @guarded
    async def list_for_driver(
        self, driver_id: int, statuses: Iterable[BookingStatus]
    ) -> list[BookingModel]:
        result = await self.session.execute(
            select(BookingModel)
            .where(
                BookingModel.driver_id == driver_id,
                BookingModel.status.in_(list(statuses)),
            )
            .order_by(BookingModel.ride_time)
        )
        return list(result.scalars().all())

    @guarded
    async def find_by_payment(self, payment_id: int) -> Optional[BookingModel]:
        result = await self.session.execute(
            select(BookingModel).where(BookingModel.payment_id == payment_id)
        )
        return result.scalars().first()


class PaymentRepository(Repository[PaymentModel]):
    model = PaymentModel

    @guarded
    async def get_by_intent_id(self, intent_id: str) -> Optional[PaymentModel]:
        result = await self.session.execute(
            select(PaymentModel).where(PaymentModel.payment_intent_id == intent_id)
        )
        return result.scalar_one_or_none()

    @guarded
    async def list_for_customer(self, customer_id: int) -> list[PaymentModel]:
        result = await self.session.execute(
            select(PaymentModel)
            .where(PaymentModel.customer_id == customer_id)
            .order_by(PaymentModel.created_at.desc(), PaymentModel.id.desc())
        )
        return list(result.scalars().all())


class NotificationRepository(Repository[NotificationModel]):
    model = NotificationModel

    @guarded
    async def list_for_recipient(
        self, recipient_type: str, user_id: int
    ) -> list[NotificationModel]:
        result = await self.session.execute(
            select(NotificationModel)
            .where(
                NotificationModel.recipient_type == recipient_type,
                NotificationModel.user_id == user_id,
            )
            .order_by(
                NotificationModel.created_at.desc(), NotificationModel.id.desc()
            )
        )
        return list(result.scalars().all())
