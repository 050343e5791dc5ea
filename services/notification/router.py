"""
services/notification/router.py
In-app notifications for the authenticated account (any role).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from services.notification.sink import NotificationSink
from shared.middleware.auth import get_current_account
from shared.models.models import Account
from shared.schemas.schemas import (
    MarkReadRequest,
    MessageResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)

router = APIRouter(prefix="/bookings/notifications", tags=["Notifications"])


def get_sink(db: AsyncSession = Depends(get_db)) -> NotificationSink:
    return NotificationSink(db)


@router.get("", response_model=NotificationListResponse)
async def get_my_notifications(
    current_account: Account = Depends(get_current_account),
    sink: NotificationSink = Depends(get_sink),
):
    """Newest first, each with the service name of its booking."""
    notifications = await sink.list(current_account.id)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications]
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    current_account: Account = Depends(get_current_account),
    sink: NotificationSink = Depends(get_sink),
):
    return UnreadCountResponse(unread_count=await sink.unread_count(current_account.id))


@router.post("/mark-read", response_model=MessageResponse)
async def mark_read(
    data: MarkReadRequest,
    current_account: Account = Depends(get_current_account),
    sink: NotificationSink = Depends(get_sink),
):
    await sink.mark_read(data.notification_id, current_account.id)
    return MessageResponse(message="Notification marked as read")
