"""
shared/models/models.py
All SQLAlchemy ORM models for the Car Wash Marketplace.
UUID primary keys throughout. Accounts are a tagged union of three tables
(Customer, Provider, Employee) sharing the AccountMixin identity interface.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import ClassVar, Dict, List, Optional, Type, Union

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from config.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Enumerations ──────────────────────────────────────────────

class AccountRole(str, PyEnum):
    CUSTOMER = "customer"
    PROVIDER = "provider"
    EMPLOYEE = "employee"


class BookingStatus(str, PyEnum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    COMPLETED = "Completed"


class NotificationType(str, PyEnum):
    TASK_COMPLETED = "TASK_COMPLETED"        # To the provider
    SERVICE_COMPLETED = "SERVICE_COMPLETED"  # To the customer


class ComplaintStatus(str, PyEnum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    REJECTED = "Rejected"


class ApplicationStatus(str, PyEnum):
    PENDING = "pending"


# ── Mixins ────────────────────────────────────────────────────

class TimestampMixin:
    """Adds created_at and updated_at to any model."""
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class AccountMixin:
    """Identity interface shared by every account variant."""
    ROLE: ClassVar[AccountRole]

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    @property
    def role(self) -> AccountRole:
        return self.ROLE


class CredentialMixin:
    """Email + bcrypt hash, shared by customers and providers (verified or not)."""
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)


class ProviderDetailsMixin:
    contact_number: Mapped[str] = mapped_column(String(30), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)

    @property
    def location(self) -> dict:
        return {"longitude": self.longitude, "latitude": self.latitude}


# ── Accounts ──────────────────────────────────────────────────

class Customer(AccountMixin, CredentialMixin, TimestampMixin, Base):
    """Verified customer account."""
    __tablename__ = "customers"
    ROLE = AccountRole.CUSTOMER

    is_verified: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    bookings: Mapped[List["Booking"]] = relationship(back_populates="customer")

    def __repr__(self) -> str:
        return f"<Customer {self.email}>"


class UnverifiedCustomer(CredentialMixin, Base):
    """Staging record held until the emailed code is confirmed."""
    __tablename__ = "unverified_customers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    verification_code: Mapped[str] = mapped_column(String(12), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


class Provider(AccountMixin, CredentialMixin, ProviderDetailsMixin, TimestampMixin, Base):
    """Verified car-wash provider. Owns employees through its referral code."""
    __tablename__ = "providers"
    ROLE = AccountRole.PROVIDER

    referral_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    employees: Mapped[List["Employee"]] = relationship(back_populates="provider")

    def __repr__(self) -> str:
        return f"<Provider {self.email}>"


class UnverifiedProvider(CredentialMixin, ProviderDetailsMixin, Base):
    __tablename__ = "unverified_providers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    referral_code: Mapped[str] = mapped_column(String(50), nullable=False)
    verification_code: Mapped[str] = mapped_column(String(12), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


class Employee(AccountMixin, TimestampMixin, Base):
    """
    Verified employee. Logs in with its name plus the referral code copied from
    its provider at approval time (a capability code, not a password).
    """
    __tablename__ = "employees"
    ROLE = AccountRole.EMPLOYEE

    normalized_name: Mapped[str] = mapped_column(String(255), nullable=False)
    cnic: Mapped[str] = mapped_column(String(13), nullable=False)
    provider_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("providers.id"), nullable=False
    )
    referral_code: Mapped[str] = mapped_column(String(50), nullable=False)

    provider: Mapped["Provider"] = relationship(back_populates="employees")

    __table_args__ = (
        Index("ix_employees_normalized_name", "normalized_name"),
        Index("ix_employees_provider_id", "provider_id"),
    )

    def __repr__(self) -> str:
        return f"<Employee {self.normalized_name}>"


class EmployeeApplication(Base):
    """Pending employee sign-up awaiting the provider's accept/reject."""
    __tablename__ = "employee_applications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    cnic: Mapped[str] = mapped_column(String(13), nullable=False)
    referral_code: Mapped[str] = mapped_column(String(50), nullable=False)
    provider_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("providers.id"), nullable=False
    )
    status: Mapped[ApplicationStatus] = mapped_column(
        Enum(ApplicationStatus), default=ApplicationStatus.PENDING, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (Index("ix_employee_applications_provider_id", "provider_id"),)


Account = Union[Customer, Provider, Employee]

ACCOUNT_MODELS: Dict[AccountRole, Type[Account]] = {
    AccountRole.CUSTOMER: Customer,
    AccountRole.PROVIDER: Provider,
    AccountRole.EMPLOYEE: Employee,
}


# ── Bookings ──────────────────────────────────────────────────

class Booking(TimestampMixin, Base):
    """
    A car-wash request. Never deleted.
    Pending → Accepted | Rejected; Accepted → Completed.
    `version` is bumped on every transition and guards conditional updates.
    """
    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("customers.id"), nullable=False
    )
    provider_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("providers.id"), nullable=True
    )
    assigned_employee_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("employees.id"), nullable=True
    )
    service: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[str] = mapped_column(String(50), nullable=False)   # e.g. "PKR 2000"
    address: Mapped[str] = mapped_column(Text, nullable=False)
    vehicle: Mapped[str] = mapped_column(String(100), nullable=False)
    vehicle_model: Mapped[str] = mapped_column(String(100), nullable=False)
    preferences: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus), default=BookingStatus.PENDING, nullable=False
    )
    version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    customer: Mapped["Customer"] = relationship(back_populates="bookings")
    provider: Mapped[Optional["Provider"]] = relationship()
    assigned_employee: Mapped[Optional["Employee"]] = relationship()
    notifications: Mapped[List["Notification"]] = relationship(back_populates="booking")

    __table_args__ = (
        Index("ix_bookings_status", "status"),
        Index("ix_bookings_customer_id", "customer_id"),
        Index("ix_bookings_provider_id", "provider_id"),
        Index("ix_bookings_assigned_employee_id", "assigned_employee_id"),
    )

    def __repr__(self) -> str:
        return f"<Booking {self.id} {self.status}>"


class Notification(Base):
    """In-app notification. Only the recipient may mark it read."""
    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    recipient_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    recipient_role: Mapped[AccountRole] = mapped_column(Enum(AccountRole), nullable=False)
    type: Mapped[NotificationType] = mapped_column(Enum(NotificationType), nullable=False)
    booking_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("bookings.id"), nullable=True
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    booking: Mapped[Optional["Booking"]] = relationship(back_populates="notifications")

    @property
    def service(self) -> Optional[str]:
        return self.booking.service if self.booking else None

    __table_args__ = (Index("ix_notifications_recipient_read", "recipient_id", "is_read"),)


# ── Complaints & Feedback ─────────────────────────────────────

class Complaint(TimestampMixin, Base):
    __tablename__ = "complaints"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("customers.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    service_type: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    date_of_service: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    status: Mapped[ComplaintStatus] = mapped_column(
        Enum(ComplaintStatus), default=ComplaintStatus.PENDING, nullable=False
    )

    customer: Mapped["Customer"] = relationship()


class Feedback(Base):
    """Public app feedback; not tied to an account."""
    __tablename__ = "feedback"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    stars: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint("stars >= 1 AND stars <= 5", name="ck_feedback_stars_range"),
    )
