"""
services/auth/identity.py
Identity store for the three account variants.

Customers and providers register into a staging table with a bcrypt hash and a
numeric verification code; verifying the code promotes the row into the
verified table and deletes the staging row. Employees apply with their
provider's referral code and are approved or rejected by that provider.
"""

import logging
import re
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from fastapi import Depends
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from config.settings import Settings, get_settings
from shared.models.models import (
    Account,
    AccountRole,
    ApplicationStatus,
    Customer,
    Employee,
    EmployeeApplication,
    Provider,
    UnverifiedCustomer,
    UnverifiedProvider,
)
from shared.utils.errors import (
    ConflictError,
    DuplicateEmail,
    Forbidden,
    InvalidCode,
    InvalidCredential,
    NotFound,
    ValidationFailed,
)
from shared.utils.security import (
    generate_referral_code,
    generate_verification_code,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

CNIC_PATTERN = re.compile(r"^\d{13}$")

# role → (verified model, staging model)
_EMAIL_ROLES = {
    AccountRole.CUSTOMER: (Customer, UnverifiedCustomer),
    AccountRole.PROVIDER: (Provider, UnverifiedProvider),
}

# Attributes copied from the staging row into the verified row.
_PROMOTED_FIELDS = {
    AccountRole.CUSTOMER: ("name", "email", "password_hash"),
    AccountRole.PROVIDER: (
        "name", "email", "password_hash", "contact_number", "city",
        "address", "longitude", "latitude", "referral_code",
    ),
}


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_name(name: str) -> str:
    return name.strip().lower()


def validate_cnic(cnic: str) -> str:
    cnic = (cnic or "").strip()
    if not CNIC_PATTERN.match(cnic):
        raise ValidationFailed("Invalid CNIC format. Please enter 13 digits without dashes")
    return cnic


@dataclass
class Registration:
    """Result of register(): the staging row and the code to deliver."""
    email: str
    name: str
    verification_code: str


class IdentityStore:
    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings

    # ── Lookups ───────────────────────────────────────────────

    async def _find_by_email(self, model, email: str):
        return await self.db.scalar(
            select(model).where(func.lower(model.email) == normalize_email(email))
        )

    async def email_exists(self, role: AccountRole, email: str) -> bool:
        """True if the email is taken by a verified or unverified record of the role."""
        verified_model, staging_model = _EMAIL_ROLES[role]
        for model in (verified_model, staging_model):
            if await self._find_by_email(model, email):
                return True
        return False

    async def referral_code_exists(self, code: str, exclude_provider_id: Optional[uuid.UUID] = None) -> bool:
        query = select(Provider.id).where(Provider.referral_code == code)
        if exclude_provider_id:
            query = query.where(Provider.id != exclude_provider_id)
        if await self.db.scalar(query):
            return True
        return bool(
            await self.db.scalar(
                select(UnverifiedProvider.id).where(UnverifiedProvider.referral_code == code)
            )
        )

    async def _unique_referral_code(self) -> str:
        while True:
            code = generate_referral_code(self.settings.REFERRAL_CODE_LENGTH)
            if not await self.referral_code_exists(code):
                return code

    # ── Registration & verification ───────────────────────────

    async def register(self, role: AccountRole, attributes: Dict[str, Any]) -> Registration:
        """
        Create an unverified record holding a password hash and a verification
        code. The caller commits once the code has been queued for delivery.
        """
        if role not in _EMAIL_ROLES:
            raise ValidationFailed("Invalid role specified")

        email = normalize_email(attributes["email"])
        if await self.email_exists(role, email):
            raise DuplicateEmail()

        _, staging_model = _EMAIL_ROLES[role]
        values = {
            "name": attributes["name"].strip(),
            "email": email,
            "password_hash": hash_password(attributes["password"]),
            "verification_code": generate_verification_code(self.settings.VERIFICATION_CODE_LENGTH),
        }
        if role == AccountRole.PROVIDER:
            values.update(await self._provider_details(attributes))

        record = staging_model(**values)
        self.db.add(record)
        await self.db.flush()

        logger.info("Registered unverified %s %s", role.value, record.id)
        return Registration(email=email, name=record.name, verification_code=record.verification_code)

    async def _provider_details(self, attributes: Dict[str, Any]) -> Dict[str, Any]:
        referral_code = attributes.get("referral_code")
        if referral_code:
            referral_code = referral_code.strip()
            if await self.referral_code_exists(referral_code):
                raise ConflictError("Referral code already in use")
        else:
            referral_code = await self._unique_referral_code()

        location = attributes["location"]
        return {
            "contact_number": attributes["contact_number"].strip(),
            "city": attributes["city"].strip(),
            "address": attributes["address"].strip(),
            "longitude": location["longitude"],
            "latitude": location["latitude"],
            "referral_code": referral_code,
        }

    async def verify(self, role: AccountRole, email: str, code: str) -> Account:
        """Promote the staging record to a verified account."""
        verified_model, staging_model = _EMAIL_ROLES[role]
        pending = await self._find_by_email(staging_model, email)
        if not pending:
            raise NotFound("User not found or already verified")
        if pending.verification_code != code.strip():
            raise InvalidCode()

        account = verified_model(
            **{field: getattr(pending, field) for field in _PROMOTED_FIELDS[role]},
            is_verified=True,
        )
        self.db.add(account)
        await self.db.execute(delete(staging_model).where(staging_model.id == pending.id))
        await self.db.commit()

        logger.info("Verified %s %s", role.value, account.id)
        return account

    async def create_verified(self, attributes: Dict[str, Any]) -> Customer:
        """Direct customer creation without the email round-trip."""
        if await self.email_exists(AccountRole.CUSTOMER, attributes["email"]):
            raise DuplicateEmail("Email already in use")
        customer = Customer(
            name=attributes["name"].strip(),
            email=normalize_email(attributes["email"]),
            password_hash=hash_password(attributes["password"]),
            is_verified=True,
        )
        self.db.add(customer)
        await self.db.commit()
        return customer

    # ── Authentication ────────────────────────────────────────

    async def authenticate(self, identifier: str, credential: str, role: AccountRole) -> Account:
        """
        Role-scoped login. Customers and providers use email + password;
        employees use their name + their provider's referral code.
        """
        if role == AccountRole.EMPLOYEE:
            return await self._authenticate_employee(identifier, credential)

        verified_model, _ = _EMAIL_ROLES[role]
        account = await self._find_by_email(verified_model, identifier)
        if not account:
            raise NotFound(f"No {role.value} found with this email")
        if not verify_password(credential, account.password_hash):
            raise InvalidCredential()
        return account

    async def _authenticate_employee(self, name: str, referral_code: str) -> Employee:
        result = await self.db.execute(
            select(Employee).where(Employee.normalized_name == normalize_name(name))
        )
        candidates = result.scalars().all()
        if not candidates:
            raise NotFound("Employee not found")
        for employee in candidates:
            if employee.referral_code == referral_code.strip():
                return employee
        raise InvalidCredential("Invalid referral code")

    # ── Profiles ──────────────────────────────────────────────

    async def update_customer(self, customer: Customer, updates: Dict[str, Any]) -> Customer:
        if "email" in updates:
            email = normalize_email(updates["email"])
            if email != customer.email and await self.email_exists(AccountRole.CUSTOMER, email):
                raise DuplicateEmail("Email already in use")
            customer.email = email
        if "name" in updates:
            customer.name = updates["name"].strip()
        await self.db.commit()
        return customer

    async def update_provider(self, provider: Provider, updates: Dict[str, Any]) -> Provider:
        code = updates.pop("referral_code", None)
        if code and code != provider.referral_code:
            if await self.referral_code_exists(code, exclude_provider_id=provider.id):
                raise ConflictError("Referral code already in use")
            provider.referral_code = code
        for field, value in updates.items():
            setattr(provider, field, value.strip() if isinstance(value, str) else value)
        await self.db.commit()
        return provider

    async def verified_providers(self) -> List[Provider]:
        result = await self.db.execute(
            select(Provider).where(Provider.is_verified.is_(True)).order_by(Provider.name)
        )
        return list(result.scalars())

    # ── Employees ─────────────────────────────────────────────

    async def apply(self, name: str, cnic: str, referral_code: str) -> EmployeeApplication:
        cnic = validate_cnic(cnic)
        provider = await self.db.scalar(
            select(Provider).where(Provider.referral_code == referral_code.strip())
        )
        if not provider:
            raise NotFound("Invalid referral code")

        for model in (Employee, EmployeeApplication):
            clash = await self.db.scalar(
                select(model.id).where(model.provider_id == provider.id, model.cnic == cnic)
            )
            if clash:
                raise ConflictError("An employee with this CNIC is already registered")

        application = EmployeeApplication(
            name=name.strip(),
            cnic=cnic,
            referral_code=provider.referral_code,
            provider_id=provider.id,
        )
        self.db.add(application)
        await self.db.commit()
        logger.info("Employee application %s for provider %s", application.id, provider.id)
        return application

    async def pending_applications(self, provider: Provider) -> List[EmployeeApplication]:
        result = await self.db.execute(
            select(EmployeeApplication)
            .where(
                EmployeeApplication.provider_id == provider.id,
                EmployeeApplication.status == ApplicationStatus.PENDING,
            )
            .order_by(EmployeeApplication.created_at)
        )
        return list(result.scalars())

    async def decide_application(
        self, application_id: uuid.UUID, action: str, provider: Provider
    ) -> Optional[Employee]:
        """Accept (returns the new Employee) or reject (returns None)."""
        if action not in ("accept", "reject"):
            raise ValidationFailed("Invalid action")

        application = await self.db.get(EmployeeApplication, application_id)
        if not application:
            raise NotFound("Employee not found")
        if application.provider_id != provider.id:
            raise Forbidden("Unauthorized: Application belongs to another provider")

        employee = None
        if action == "accept":
            employee = Employee(
                name=application.name.strip(),
                normalized_name=normalize_name(application.name),
                cnic=application.cnic,
                provider_id=provider.id,
                referral_code=provider.referral_code,
            )
            self.db.add(employee)

        await self.db.execute(
            delete(EmployeeApplication).where(EmployeeApplication.id == application.id)
        )
        await self.db.commit()
        logger.info("Employee application %s %sed by provider %s", application_id, action, provider.id)
        return employee

    async def provider_employees(self, provider: Provider) -> List[Employee]:
        result = await self.db.execute(
            select(Employee).where(Employee.provider_id == provider.id).order_by(Employee.name)
        )
        return list(result.scalars())

    async def get_employee_profile(self, employee_id: uuid.UUID, actor: Union[Provider, Employee]) -> Employee:
        employee = await self.db.get(Employee, employee_id)
        if not employee:
            raise NotFound("Employee not found")
        if not _may_view_employee(actor, employee):
            raise Forbidden()
        return employee

    async def update_employee_profile(self, employee: Employee, name: str, cnic: str) -> Employee:
        if not name or not name.strip():
            raise ValidationFailed("Name and CNIC are required")
        employee.cnic = validate_cnic(cnic)
        employee.name = name.strip()
        employee.normalized_name = normalize_name(name)
        await self.db.commit()
        return employee


def _may_view_employee(actor: Account, employee: Employee) -> bool:
    if isinstance(actor, Employee):
        return actor.id == employee.id
    if isinstance(actor, Provider):
        return actor.id == employee.provider_id
    return False


def get_identity_store(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> IdentityStore:
    return IdentityStore(db, settings)
