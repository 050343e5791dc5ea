"""
services/notification/sink.py
In-app notification store. Writes are fire-and-forget: a failed write is
rolled back and logged, never raised to the caller.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shared.models.models import AccountRole, Notification, NotificationType, utcnow
from shared.utils.errors import Forbidden, NotFound

logger = logging.getLogger(__name__)


class NotificationSink:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def notify(
        self,
        recipient_id: uuid.UUID,
        recipient_role: AccountRole,
        type: NotificationType,
        booking_id: Optional[uuid.UUID],
        message: str,
    ) -> Optional[Notification]:
        """Append one notification in its own commit. Returns None on failure."""
        try:
            notification = Notification(
                recipient_id=recipient_id,
                recipient_role=recipient_role,
                type=type,
                booking_id=booking_id,
                message=message,
            )
            self.db.add(notification)
            await self.db.commit()
            return notification
        except Exception:
            await self.db.rollback()
            logger.exception(
                "Failed to write %s notification for %s %s",
                getattr(type, "value", type), getattr(recipient_role, "value", recipient_role), recipient_id,
            )
            return None

    async def list(self, recipient_id: uuid.UUID) -> List[Notification]:
        result = await self.db.execute(
            select(Notification)
            .options(selectinload(Notification.booking))
            .where(Notification.recipient_id == recipient_id)
            .order_by(Notification.created_at.desc())
        )
        return list(result.scalars())

    async def mark_read(self, notification_id: uuid.UUID, acting_account_id: uuid.UUID) -> Notification:
        notification = await self.db.get(
            Notification, notification_id, options=[selectinload(Notification.booking)]
        )
        if not notification:
            raise NotFound("Notification not found")
        if notification.recipient_id != acting_account_id:
            raise Forbidden("Unauthorized access")

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = utcnow()
            await self.db.commit()
        return notification

    async def unread_count(self, recipient_id: uuid.UUID) -> int:
        count = await self.db.scalar(
            select(func.count(Notification.id)).where(
                Notification.recipient_id == recipient_id,
                Notification.is_read.is_(False),
            )
        )
        return count or 0
