"""
services/booking/assignment.py
Employee assignment and task completion. Completion is committed before the
provider and customer are notified; a failed notification never undoes it.
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from services.booking.store import BookingStore
from services.notification.sink import NotificationSink
from shared.models.models import (
    AccountRole,
    Booking,
    BookingStatus,
    Employee,
    NotificationType,
    Provider,
)
from shared.utils.errors import Forbidden, InvalidTransition, NotFound

logger = logging.getLogger(__name__)


class AssignmentManager:
    def __init__(self, db: AsyncSession, store: BookingStore, sink: NotificationSink):
        self.db = db
        self.store = store
        self.sink = sink

    async def assign(self, booking_id: uuid.UUID, employee_id: uuid.UUID, provider: Provider) -> Booking:
        booking = await self.store.get(booking_id)
        employee = await self.db.get(Employee, employee_id)
        if not employee:
            raise NotFound("Employee not found")

        if booking.status != BookingStatus.ACCEPTED:
            raise InvalidTransition("Only accepted bookings can be assigned")
        if booking.provider_id != provider.id:
            raise Forbidden("Booking belongs to another provider")
        if employee.provider_id != provider.id:
            raise Forbidden("Employee belongs to another provider")

        booking = await self.store.transition(
            booking, BookingStatus.ACCEPTED, {"assigned_employee_id": employee.id}
        )
        logger.info("Booking %s assigned to employee %s", booking.id, employee.id)
        return booking

    async def complete(self, booking_id: uuid.UUID, employee: Employee) -> Booking:
        booking = await self.store.get(booking_id)
        if booking.assigned_employee_id != employee.id:
            raise Forbidden("You are not assigned to this booking")
        if booking.status != BookingStatus.ACCEPTED:
            raise InvalidTransition("Only accepted bookings can be completed")

        booking = await self.store.transition(
            booking, BookingStatus.ACCEPTED, {"status": BookingStatus.COMPLETED}
        )
        logger.info("Booking %s completed by employee %s", booking.id, employee.id)

        # A failed write rolls the session back and expires loaded objects.
        booking_id, service = booking.id, booking.service
        provider_id, customer_id = booking.provider_id, booking.customer_id

        await self.sink.notify(
            recipient_id=provider_id,
            recipient_role=AccountRole.PROVIDER,
            type=NotificationType.TASK_COMPLETED,
            booking_id=booking_id,
            message=f"Task for {service} has been completed",
        )
        await self.sink.notify(
            recipient_id=customer_id,
            recipient_role=AccountRole.CUSTOMER,
            type=NotificationType.SERVICE_COMPLETED,
            booking_id=booking_id,
            message=f"Your {service} service has been completed",
        )
        return await self.store.get(booking_id, refresh=True)
