"""
services/booking/router.py
Booking lifecycle endpoints.
States: Pending → Accepted | Rejected; Accepted → Completed (by the assigned employee).
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from services.booking.lifecycle import LifecycleOrchestrator
from services.booking.store import BookingFilter
from shared.middleware.auth import acts_as_customer, acts_as_employee, acts_as_provider
from shared.models.models import BookingStatus, Customer, Employee, Provider
from shared.schemas.schemas import (
    AssignTaskRequest,
    BookingCreateRequest,
    BookingEnvelope,
    BookingListResponse,
    BookingResponse,
    BookingStatusRequest,
    CompleteTaskRequest,
)
from shared.utils.errors import Forbidden

router = APIRouter(prefix="/bookings", tags=["Bookings"])


# ── Helpers ───────────────────────────────────────────────────

def get_lifecycle(db: AsyncSession = Depends(get_db)) -> LifecycleOrchestrator:
    return LifecycleOrchestrator(db)


def _envelope(message: str, booking) -> BookingEnvelope:
    return BookingEnvelope(message=message, booking=BookingResponse.model_validate(booking))


async def _listing(lifecycle: LifecycleOrchestrator, **criteria) -> BookingListResponse:
    bookings = await lifecycle.store.list(BookingFilter(**criteria))
    return BookingListResponse(bookings=[BookingResponse.model_validate(b) for b in bookings])


# ── Creation ──────────────────────────────────────────────────

@router.post("/create", response_model=BookingEnvelope, status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingCreateRequest,
    current_customer: Customer = Depends(acts_as_customer),
    lifecycle: LifecycleOrchestrator = Depends(get_lifecycle),
):
    booking = await lifecycle.store.create(current_customer.id, data.model_dump())
    return _envelope("Booking created successfully", booking)


# ── Provider decisions ────────────────────────────────────────

@router.post("/booking-status", response_model=BookingEnvelope)
async def update_booking_status(
    data: BookingStatusRequest,
    current_provider: Provider = Depends(acts_as_provider),
    lifecycle: LifecycleOrchestrator = Depends(get_lifecycle),
):
    """Accept or reject a pending booking."""
    booking = await lifecycle.set_status(data.booking_id, data.status, current_provider)
    return _envelope(f"Booking {booking.status.value.lower()} successfully", booking)


@router.post("/assign-task", response_model=BookingEnvelope)
async def assign_task(
    data: AssignTaskRequest,
    current_provider: Provider = Depends(acts_as_provider),
    lifecycle: LifecycleOrchestrator = Depends(get_lifecycle),
):
    booking = await lifecycle.assign(data.booking_id, data.employee_id, current_provider)
    return _envelope("Task assigned successfully", booking)


# ── Employee completion ───────────────────────────────────────

@router.post("/complete-task", response_model=BookingEnvelope)
async def complete_task(
    data: CompleteTaskRequest,
    current_employee: Employee = Depends(acts_as_employee),
    lifecycle: LifecycleOrchestrator = Depends(get_lifecycle),
):
    if data.employee_id and data.employee_id != current_employee.id:
        raise Forbidden("Employee ID does not match the authenticated employee")
    booking = await lifecycle.complete(data.booking_id, current_employee)
    return _envelope("Task completed successfully", booking)


# ── Listings ──────────────────────────────────────────────────

@router.get("/booking-requests", response_model=BookingListResponse)
async def booking_requests(
    current_provider: Provider = Depends(acts_as_provider),
    lifecycle: LifecycleOrchestrator = Depends(get_lifecycle),
):
    return await _listing(lifecycle)


@router.get("/pending-bookings", response_model=BookingListResponse)
async def pending_bookings(
    current_provider: Provider = Depends(acts_as_provider),
    lifecycle: LifecycleOrchestrator = Depends(get_lifecycle),
):
    return await _listing(lifecycle, status=BookingStatus.PENDING)


@router.get("/provider-accepted-bookings", response_model=BookingListResponse)
async def provider_accepted_bookings(
    current_provider: Provider = Depends(acts_as_provider),
    lifecycle: LifecycleOrchestrator = Depends(get_lifecycle),
):
    return await _listing(lifecycle, status=BookingStatus.ACCEPTED, provider_id=current_provider.id)


@router.get("/accepted-bookings", response_model=BookingListResponse)
async def accepted_bookings(
    current_customer: Customer = Depends(acts_as_customer),
    lifecycle: LifecycleOrchestrator = Depends(get_lifecycle),
):
    return await _listing(lifecycle, status=BookingStatus.ACCEPTED, customer_id=current_customer.id)


@router.get("/rejected-bookings", response_model=BookingListResponse)
async def rejected_bookings(
    current_customer: Customer = Depends(acts_as_customer),
    lifecycle: LifecycleOrchestrator = Depends(get_lifecycle),
):
    return await _listing(lifecycle, status=BookingStatus.REJECTED, customer_id=current_customer.id)


@router.get("/my-bookings", response_model=BookingListResponse)
async def my_bookings(
    current_customer: Customer = Depends(acts_as_customer),
    lifecycle: LifecycleOrchestrator = Depends(get_lifecycle),
):
    return await _listing(lifecycle, customer_id=current_customer.id)


@router.get("/employee-assigned-bookings", response_model=BookingListResponse)
async def employee_assigned_bookings(
    current_employee: Employee = Depends(acts_as_employee),
    lifecycle: LifecycleOrchestrator = Depends(get_lifecycle),
):
    return await _listing(
        lifecycle, status=BookingStatus.ACCEPTED, assigned_employee_id=current_employee.id
    )


@router.get("/employee-completed-tasks", response_model=BookingListResponse)
async def employee_completed_tasks(
    current_employee: Employee = Depends(acts_as_employee),
    lifecycle: LifecycleOrchestrator = Depends(get_lifecycle),
):
    return await _listing(
        lifecycle,
        status=BookingStatus.COMPLETED,
        assigned_employee_id=current_employee.id,
        order_by_update=True,
    )
