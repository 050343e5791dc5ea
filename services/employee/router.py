"""
services/employee/router.py
Employee applications (apply with a provider's referral code, provider
accepts or rejects), capability-code login and employee profiles.
"""

import logging
from typing import Union
from uuid import UUID

from fastapi import APIRouter, Depends, status

from services.auth.identity import IdentityStore, get_identity_store
from services.auth.router import build_login_response
from shared.middleware.auth import (
    RoleRequired,
    acts_as_employee,
    acts_as_provider,
    get_token_service,
)
from shared.models.models import AccountRole, Employee, Provider
from shared.schemas.schemas import (
    EmployeeApplicationListResponse,
    EmployeeApplicationResponse,
    EmployeeDecisionRequest,
    EmployeeListResponse,
    EmployeeLoginRequest,
    EmployeeProfileEnvelope,
    EmployeeRegisterRequest,
    EmployeeResponse,
    EmployeeUpdateRequest,
    LoginResponse,
    MessageResponse,
)
from shared.utils.errors import Forbidden
from shared.utils.security import TokenService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["Employees"])

acts_as_provider_or_employee = RoleRequired(AccountRole.PROVIDER, AccountRole.EMPLOYEE)


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register_employee(
    data: EmployeeRegisterRequest,
    store: IdentityStore = Depends(get_identity_store),
):
    await store.apply(data.name, data.cnic, data.referral_code)
    return MessageResponse(message="Employee registered and waiting for provider approval")


@router.get("/unverified", response_model=EmployeeApplicationListResponse)
async def list_unverified_employees(
    current_provider: Provider = Depends(acts_as_provider),
    store: IdentityStore = Depends(get_identity_store),
):
    applications = await store.pending_applications(current_provider)
    return EmployeeApplicationListResponse(
        unverified_employees=[EmployeeApplicationResponse.model_validate(a) for a in applications]
    )


@router.post("/verify", response_model=MessageResponse)
async def decide_employee(
    data: EmployeeDecisionRequest,
    current_provider: Provider = Depends(acts_as_provider),
    store: IdentityStore = Depends(get_identity_store),
):
    employee = await store.decide_application(data.employee_id, data.action, current_provider)
    if employee:
        return MessageResponse(message="Employee verified and added to Employee table")
    return MessageResponse(message="Employee rejected")


@router.post("/login", response_model=LoginResponse)
async def login_employee(
    data: EmployeeLoginRequest,
    store: IdentityStore = Depends(get_identity_store),
    tokens: TokenService = Depends(get_token_service),
):
    employee = await store.authenticate(data.name, data.referral_code, AccountRole.EMPLOYEE)
    logger.info("employee %s logged in", employee.id)
    return build_login_response(employee, tokens)


@router.get("/provider-employees", response_model=EmployeeListResponse)
async def list_provider_employees(
    current_provider: Provider = Depends(acts_as_provider),
    store: IdentityStore = Depends(get_identity_store),
):
    employees = await store.provider_employees(current_provider)
    return EmployeeListResponse(employees=[EmployeeResponse.model_validate(e) for e in employees])


@router.get("/profile/{employee_id}", response_model=EmployeeProfileEnvelope)
async def get_employee_profile(
    employee_id: UUID,
    current_account: Union[Provider, Employee] = Depends(acts_as_provider_or_employee),
    store: IdentityStore = Depends(get_identity_store),
):
    employee = await store.get_employee_profile(employee_id, current_account)
    return EmployeeProfileEnvelope(employee=EmployeeResponse.model_validate(employee))


@router.put("/profile/{employee_id}", response_model=EmployeeProfileEnvelope)
async def update_employee_profile(
    employee_id: UUID,
    data: EmployeeUpdateRequest,
    current_employee: Employee = Depends(acts_as_employee),
    store: IdentityStore = Depends(get_identity_store),
):
    if current_employee.id != employee_id:
        raise Forbidden("You can only update your own profile")
    employee = await store.update_employee_profile(current_employee, data.name, data.cnic)
    return EmployeeProfileEnvelope(
        message="Profile updated successfully",
        employee=EmployeeResponse.model_validate(employee),
    )
