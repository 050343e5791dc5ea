"""
services/auth/router.py
Customer identity lifecycle: register → verify-email → login, plus direct
creation and profile endpoints. /login also serves providers (role-scoped).
"""

import logging

from fastapi import APIRouter, Depends, status

from services.auth.identity import IdentityStore, get_identity_store
from shared.middleware.auth import acts_as_customer, get_token_service
from shared.models.models import Account, AccountRole, Customer
from shared.schemas.schemas import (
    AccountProfile,
    CustomerEnvelope,
    CustomerRegisterRequest,
    CustomerResponse,
    CustomerUpdateRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    VerifyEmailRequest,
)
from shared.utils.security import TokenService
from tasks.notification_tasks import send_verification_email

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Customers"])


# ── Helpers ───────────────────────────────────────────────────

def build_login_response(account: Account, tokens: TokenService) -> LoginResponse:
    """Issue a token for the account and wrap it with its public profile."""
    return LoginResponse(
        token=tokens.issue(account.id, account.role),
        role=account.role.value,
        expires_in=tokens.expires_in,
        account=AccountProfile.model_validate(account),
    )


# ── Registration ──────────────────────────────────────────────

@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register_customer(
    data: CustomerRegisterRequest,
    store: IdentityStore = Depends(get_identity_store),
):
    registration = await store.register(AccountRole.CUSTOMER, data.model_dump())
    send_verification_email.delay(
        registration.email, registration.verification_code, registration.name
    )
    return MessageResponse(message="Registration successful. Please verify your email.")


@router.post("/verify-email", response_model=MessageResponse)
async def verify_customer_email(
    data: VerifyEmailRequest,
    store: IdentityStore = Depends(get_identity_store),
):
    await store.verify(AccountRole.CUSTOMER, data.email, data.verification_code)
    return MessageResponse(message="Email verified successfully.")


@router.post("/create-user", response_model=CustomerEnvelope, status_code=status.HTTP_201_CREATED)
async def create_customer(
    data: CustomerRegisterRequest,
    store: IdentityStore = Depends(get_identity_store),
):
    """Create a verified customer directly, skipping the email code."""
    customer = await store.create_verified(data.model_dump())
    return CustomerEnvelope(
        message="User registered successfully.",
        customer=CustomerResponse.model_validate(customer),
    )


# ── Login ─────────────────────────────────────────────────────

@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    store: IdentityStore = Depends(get_identity_store),
    tokens: TokenService = Depends(get_token_service),
):
    account = await store.authenticate(data.email, data.password, AccountRole(data.role))
    logger.info("%s %s logged in", account.role.value, account.id)
    return build_login_response(account, tokens)


# ── Profile ───────────────────────────────────────────────────

@router.get("/me", response_model=CustomerResponse)
async def get_me(current_customer: Customer = Depends(acts_as_customer)):
    return CustomerResponse.model_validate(current_customer)


@router.put("/update", response_model=CustomerEnvelope)
async def update_me(
    data: CustomerUpdateRequest,
    current_customer: Customer = Depends(acts_as_customer),
    store: IdentityStore = Depends(get_identity_store),
):
    customer = await store.update_customer(
        current_customer, data.model_dump(exclude_unset=True, exclude_none=True)
    )
    return CustomerEnvelope(
        message="Profile updated successfully",
        customer=CustomerResponse.model_validate(customer),
    )
