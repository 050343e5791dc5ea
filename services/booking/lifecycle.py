"""
services/booking/lifecycle.py
Booking state machine.

    Pending ──accept──▶ Accepted ──complete──▶ Completed
       │                   │ ▲
       └──reject──▶ Rejected └─assign─┘

Rejected and Completed are terminal. Every event goes through the store's
conditional update, so a failed event leaves the booking untouched.
"""

import logging
import uuid
from typing import Dict, NamedTuple

from sqlalchemy.ext.asyncio import AsyncSession

from services.booking.assignment import AssignmentManager
from services.booking.store import BookingStore, parse_status
from services.notification.sink import NotificationSink
from shared.models.models import AccountRole, Booking, BookingStatus, Employee, Provider
from shared.utils.errors import InvalidTransition

logger = logging.getLogger(__name__)


class Transition(NamedTuple):
    from_status: BookingStatus
    to_status: BookingStatus
    actor: AccountRole


TRANSITIONS: Dict[str, Transition] = {
    "accept": Transition(BookingStatus.PENDING, BookingStatus.ACCEPTED, AccountRole.PROVIDER),
    "reject": Transition(BookingStatus.PENDING, BookingStatus.REJECTED, AccountRole.PROVIDER),
    "assign": Transition(BookingStatus.ACCEPTED, BookingStatus.ACCEPTED, AccountRole.PROVIDER),
    "complete": Transition(BookingStatus.ACCEPTED, BookingStatus.COMPLETED, AccountRole.EMPLOYEE),
}

# Statuses a provider may request through the generic status endpoint.
STATUS_EVENTS = {
    BookingStatus.ACCEPTED: "accept",
    BookingStatus.REJECTED: "reject",
}


class LifecycleOrchestrator:
    def __init__(self, db: AsyncSession):
        self.store = BookingStore(db)
        self.sink = NotificationSink(db)
        self.assignments = AssignmentManager(db, self.store, self.sink)

    async def _decide(self, event: str, booking_id: uuid.UUID, provider: Provider) -> Booking:
        transition = TRANSITIONS[event]
        booking = await self.store.get(booking_id)
        if booking.status != transition.from_status:
            raise InvalidTransition(
                f"Cannot {event} a booking that is {booking.status.value}"
            )

        values = {"status": transition.to_status}
        if event == "accept":
            values["provider_id"] = provider.id

        booking = await self.store.transition(booking, transition.from_status, values)
        logger.info("Booking %s %s by provider %s", booking.id, transition.to_status.value, provider.id)
        return booking

    async def accept(self, booking_id: uuid.UUID, provider: Provider) -> Booking:
        return await self._decide("accept", booking_id, provider)

    async def reject(self, booking_id: uuid.UUID, provider: Provider) -> Booking:
        return await self._decide("reject", booking_id, provider)

    async def assign(self, booking_id: uuid.UUID, employee_id: uuid.UUID, provider: Provider) -> Booking:
        return await self.assignments.assign(booking_id, employee_id, provider)

    async def complete(self, booking_id: uuid.UUID, employee: Employee) -> Booking:
        return await self.assignments.complete(booking_id, employee)

    async def set_status(self, booking_id: uuid.UUID, status: str, provider: Provider) -> Booking:
        """Provider-facing status change: only Accepted and Rejected are reachable."""
        new_status = parse_status(status)
        booking = await self.store.get(booking_id)
        event = STATUS_EVENTS.get(new_status)
        if event is None:
            if new_status == BookingStatus.COMPLETED:
                raise InvalidTransition("Only the assigned employee can complete a booking")
            raise InvalidTransition(f"Cannot move a {booking.status.value} booking to {new_status.value}")
        return await self._decide(event, booking.id, provider)
