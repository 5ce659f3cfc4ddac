"""
Notification endpoints (customers and drivers)
==============================================

GET  /notifications/list     -- the caller's notifications, newest first
POST /notifications/markRead -- mark one of them as read
"""

from fastapi import APIRouter, Depends, Request

from limousine.api.dependencies import get_notification_service, require_user
from limousine.api.middleware import limiter
from limousine.api.schemas import Envelope, MarkReadRequest, NotificationResponse
from limousine.config import settings
from limousine.domain.entities import Actor
from limousine.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get(
    "/list",
    response_model=Envelope[list[NotificationResponse]],
    summary="List notifications",
)
@limiter.limit(settings.rate_limit)
async def list_notifications(
    request: Request,
    actor: Actor = Depends(require_user),
    notifications: NotificationService = Depends(get_notification_service),
):
    records = await notifications.list_for(actor)
    return Envelope(data=[NotificationResponse.model_validate(n) for n in records])


@router.post(
    "/markRead",
    response_model=Envelope[NotificationResponse],
    summary="Mark a notification as read",
)
@limiter.limit(settings.rate_limit)
async def mark_read(
    request: Request,
    body: MarkReadRequest,
    actor: Actor = Depends(require_user),
    notifications: NotificationService = Depends(get_notification_service),
):
    record = await notifications.mark_read(actor, body.notification_id)
    return Envelope(data=NotificationResponse.model_validate(record))
