"""
services/booking/store.py
Persistence for bookings: creation, lookup, filtered listings and the
single-row conditional update every lifecycle transition goes through.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from shared.models.models import Booking, BookingStatus, utcnow
from shared.utils.errors import InvalidStatus, InvalidTransition, NotFound, ValidationFailed

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("service", "price", "address", "vehicle", "vehicle_model")

_SUMMARIES = (
    selectinload(Booking.customer),
    selectinload(Booking.provider),
    selectinload(Booking.assigned_employee),
)


@dataclass
class BookingFilter:
    status: Optional[BookingStatus] = None
    customer_id: Optional[uuid.UUID] = None
    provider_id: Optional[uuid.UUID] = None
    assigned_employee_id: Optional[uuid.UUID] = None
    # Completed-task listings sort by when the task was finished.
    order_by_update: bool = False


class BookingStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, customer_id: uuid.UUID, attributes: Dict[str, Any]) -> Booking:
        values = {}
        for field in REQUIRED_FIELDS:
            value = attributes.get(field)
            if value is None or not str(value).strip():
                raise ValidationFailed("All fields are required")
            values[field] = str(value).strip()

        booking = Booking(
            customer_id=customer_id,
            preferences=attributes.get("preferences"),
            status=BookingStatus.PENDING,
            version=0,
            **values,
        )
        self.db.add(booking)
        await self.db.commit()
        logger.info("Booking %s created by customer %s", booking.id, customer_id)
        return await self.get(booking.id, refresh=True)

    async def get(self, booking_id: uuid.UUID, *, refresh: bool = False) -> Booking:
        query = select(Booking).options(*_SUMMARIES).where(Booking.id == booking_id)
        if refresh:
            query = query.execution_options(populate_existing=True)
        booking = await self.db.scalar(query)
        if not booking:
            raise NotFound("Booking not found")
        return booking

    async def list(self, criteria: BookingFilter) -> List[Booking]:
        query = select(Booking).options(*_SUMMARIES)
        if criteria.status is not None:
            query = query.where(Booking.status == criteria.status)
        if criteria.customer_id is not None:
            query = query.where(Booking.customer_id == criteria.customer_id)
        if criteria.provider_id is not None:
            query = query.where(Booking.provider_id == criteria.provider_id)
        if criteria.assigned_employee_id is not None:
            query = query.where(Booking.assigned_employee_id == criteria.assigned_employee_id)

        order = Booking.updated_at if criteria.order_by_update else Booking.created_at
        result = await self.db.execute(query.order_by(order.desc()))
        return list(result.scalars())

    async def transition(
        self,
        booking: Booking,
        from_status: BookingStatus,
        values: Dict[str, Any],
    ) -> Booking:
        """
        Apply `values` only if the row still holds the version and status that
        were read. A lost race raises InvalidTransition and changes nothing.
        """
        expected_version = booking.version
        result = await self.db.execute(
            update(Booking)
            .where(
                Booking.id == booking.id,
                Booking.version == expected_version,
                Booking.status == from_status,
            )
            .values(version=expected_version + 1, updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            raise InvalidTransition("Booking was modified by another request")

        await self.db.commit()
        return await self.get(booking.id, refresh=True)


def parse_status(value: str) -> BookingStatus:
    try:
        return BookingStatus(value)
    except ValueError:
        raise InvalidStatus(f"Invalid status '{value}'")
