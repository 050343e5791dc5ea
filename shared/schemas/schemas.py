"""
shared/schemas/schemas.py
All Pydantic v2 request/response schemas for the platform.
Wire format is camelCase (the mobile client's convention); Python code uses
snake_case field names.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from shared.models.models import (
    ApplicationStatus,
    BookingStatus,
    ComplaintStatus,
    NotificationType,
)


# ── Base ──────────────────────────────────────────────────────

class BaseSchema(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        use_enum_values=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class MessageResponse(BaseSchema):
    message: str


class AccountSummary(BaseSchema):
    """Public view of an account: never carries credentials."""
    id: uuid.UUID
    name: str
    email: Optional[str] = None


# ── Auth ──────────────────────────────────────────────────────

class LoginRequest(BaseSchema):
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: Literal["customer", "provider"] = "customer"


class ProviderLoginRequest(BaseSchema):
    email: EmailStr
    password: str = Field(..., min_length=1)


class EmployeeLoginRequest(BaseSchema):
    name: str = Field(..., min_length=1)
    referral_code: str = Field(..., min_length=1)


class AccountProfile(BaseSchema):
    id: uuid.UUID
    name: str
    email: Optional[str] = None
    provider_id: Optional[uuid.UUID] = None


class LoginResponse(BaseSchema):
    message: str = "Login successful"
    token: str
    role: str
    expires_in: int  # seconds
    account: AccountProfile


class VerifyEmailRequest(BaseSchema):
    email: EmailStr
    verification_code: str = Field(..., min_length=1)


# ── Customer ──────────────────────────────────────────────────

class CustomerRegisterRequest(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)


class CustomerResponse(BaseSchema):
    id: uuid.UUID
    name: str
    email: EmailStr
    created_at: datetime


class CustomerUpdateRequest(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None


class CustomerEnvelope(BaseSchema):
    message: str
    customer: CustomerResponse


# ── Provider ──────────────────────────────────────────────────

class Location(BaseSchema):
    longitude: float = Field(..., ge=-180, le=180)
    latitude: float = Field(..., ge=-90, le=90)


class ProviderRegisterRequest(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    contact_number: str = Field(..., min_length=1, max_length=30)
    city: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1)
    location: Location
    referral_code: Optional[str] = Field(None, min_length=4, max_length=50)


class ProviderResponse(BaseSchema):
    id: uuid.UUID
    name: str
    email: EmailStr
    contact_number: str
    city: str
    address: str
    referral_code: str
    location: Location


class ProviderUpdateRequest(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_number: Optional[str] = Field(None, min_length=1, max_length=30)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = Field(None, min_length=1)
    referral_code: Optional[str] = Field(None, min_length=4, max_length=50)


class ProviderEnvelope(BaseSchema):
    message: str
    provider: ProviderResponse


class ProviderLocationResponse(BaseSchema):
    id: uuid.UUID
    name: str
    address: str
    contact_number: str
    city: str
    location: Location


class ProviderLocationListResponse(BaseSchema):
    providers: List[ProviderLocationResponse]


class CheckEmailRequest(BaseSchema):
    email: EmailStr


class CheckEmailResponse(BaseSchema):
    exists: bool


# ── Employee ──────────────────────────────────────────────────

class EmployeeRegisterRequest(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    cnic: str
    referral_code: str = Field(..., min_length=1)


class EmployeeApplicationResponse(BaseSchema):
    id: uuid.UUID
    name: str
    cnic: str
    provider_id: uuid.UUID
    status: ApplicationStatus
    created_at: datetime


class EmployeeApplicationListResponse(BaseSchema):
    unverified_employees: List[EmployeeApplicationResponse]


class EmployeeDecisionRequest(BaseSchema):
    employee_id: uuid.UUID
    action: str


class EmployeeResponse(BaseSchema):
    id: uuid.UUID
    name: str
    cnic: str
    referral_code: str
    provider_id: uuid.UUID


class EmployeeListResponse(BaseSchema):
    employees: List[EmployeeResponse]


class EmployeeUpdateRequest(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    cnic: str


class EmployeeProfileEnvelope(BaseSchema):
    message: Optional[str] = None
    employee: EmployeeResponse


# ── Booking ───────────────────────────────────────────────────

class BookingCreateRequest(BaseSchema):
    # Presence is enforced by the booking store so every missing field
    # yields the same "All fields are required" message.
    model_config = ConfigDict(coerce_numbers_to_str=True)

    service: Optional[str] = None
    price: Optional[str] = None
    address: Optional[str] = None
    vehicle: Optional[str] = None
    vehicle_model: Optional[str] = None
    preferences: Optional[str] = Field(None, max_length=1000)


class BookingStatusRequest(BaseSchema):
    booking_id: uuid.UUID
    status: str


class AssignTaskRequest(BaseSchema):
    booking_id: uuid.UUID
    employee_id: uuid.UUID


class CompleteTaskRequest(BaseSchema):
    booking_id: uuid.UUID
    employee_id: Optional[uuid.UUID] = None


class BookingResponse(BaseSchema):
    id: uuid.UUID
    customer_id: uuid.UUID
    provider_id: Optional[uuid.UUID]
    assigned_employee_id: Optional[uuid.UUID]
    service: str
    price: str
    address: str
    vehicle: str
    vehicle_model: str
    preferences: Optional[str]
    status: BookingStatus
    version: int
    created_at: datetime
    updated_at: datetime
    # Populated summaries
    customer: Optional[AccountSummary] = None
    provider: Optional[AccountSummary] = None
    assigned_employee: Optional[AccountSummary] = None


class BookingEnvelope(BaseSchema):
    message: str
    booking: BookingResponse


class BookingListResponse(BaseSchema):
    bookings: List[BookingResponse]


# ── Notification ──────────────────────────────────────────────

class NotificationResponse(BaseSchema):
    id: uuid.UUID
    type: NotificationType
    booking_id: Optional[uuid.UUID]
    service: Optional[str] = None
    message: str
    is_read: bool
    read_at: Optional[datetime]
    created_at: datetime


class NotificationListResponse(BaseSchema):
    notifications: List[NotificationResponse]


class MarkReadRequest(BaseSchema):
    notification_id: uuid.UUID


class UnreadCountResponse(BaseSchema):
    unread_count: int


# ── Complaint ─────────────────────────────────────────────────

class ComplaintCreateRequest(BaseSchema):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    service_type: Optional[str] = Field(None, max_length=255)
    date_of_service: Optional[datetime] = None


class ComplaintStatusRequest(BaseSchema):
    status: Literal["Pending", "In Progress", "Resolved", "Rejected"]


class ComplaintResponse(BaseSchema):
    id: uuid.UUID
    customer_id: uuid.UUID
    title: str
    description: str
    service_type: Optional[str]
    date_of_service: Optional[datetime]
    status: ComplaintStatus
    created_at: datetime
    customer: Optional[AccountSummary] = None


# ── Feedback ──────────────────────────────────────────────────

class FeedbackCreateRequest(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    comment: str = Field(..., min_length=1)
    stars: int = Field(..., ge=1, le=5, strict=True)


class FeedbackResponse(BaseSchema):
    id: uuid.UUID
    name: str
    comment: str
    stars: int
    created_at: datetime
