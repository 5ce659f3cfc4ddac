"""
In-app notifications with optional push delivery.

A notification is always persisted.  Customers who registered a device
token additionally get a push through the configured ``PushSender``;
a failed push is logged and never propagates into the caller's
transition.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from limousine.domain.entities import Actor
from limousine.domain.enums import NotificationType, Role
from limousine.domain.errors import ForbiddenError, NotFoundError, ValidationError
from limousine.infrastructure.models import NotificationModel
from limousine.infrastructure.push import PushSender
from limousine.infrastructure.repositories import (
    CustomerRepository,
    NotificationRepository,
)

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, session: AsyncSession, push: Optional[PushSender] = None):
        self.notifications = NotificationRepository(session)
        self.customers = CustomerRepository(session)
        self.push = push

    async def notify_customer(
        self,
        customer_id: int,
        title: str,
        message: str,
        type: NotificationType = NotificationType.SYSTEM,
    ) -> NotificationModel:
        record = await self._store(Role.CUSTOMER, customer_id, title, message, type)
        customer = await self.customers.get_by_id(customer_id)
        if customer is not None and customer.fcm_token and self.push is not None:
            try:
                await self.push.send(
                    customer.fcm_token, title, message, {"type": type.value}
                )
            except Exception:
                logger.exception("Push delivery to customer %s failed", customer_id)
        return record

    async def notify_driver(
        self,
        driver_id: int,
        title: str,
        message: str,
        type: NotificationType = NotificationType.SYSTEM,
    ) -> NotificationModel:
        return await self._store(Role.DRIVER, driver_id, title, message, type)

    async def _store(
        self,
        recipient: Role,
        user_id: int,
        title: str,
        message: str,
        type: NotificationType,
    ) -> NotificationModel:
        return await self.notifications.create(
            user_id=user_id,
            recipient_type=recipient.value,
            title=title,
            message=message,
            type=type,
            read=False,
        )

    # ── Read paths ────────────────────────────────────────────────────

    async def list_for(self, actor: Actor) -> list[NotificationModel]:
        if actor.is_admin:
            raise ValidationError("Admins do not receive notifications")
        return await self.notifications.list_for_recipient(
            actor.role.value, actor.user_id
        )

    async def mark_read(self, actor: Actor, notification_id: int) -> NotificationModel:
        record = await self.notifications.get_by_id(notification_id)
        if record is None:
            raise NotFoundError("Notification not found")
        if record.recipient_type != actor.role.value or record.user_id != actor.user_id:
            raise ForbiddenError("You can only update your own notifications")
        return await self.notifications.update_by_id(notification_id, read=True)
