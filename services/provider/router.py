"""
services/provider/router.py
Provider identity lifecycle and profile, plus the public location directory
the mobile map screen reads (cached in Redis).
"""

import logging

from fastapi import APIRouter, Depends, status

from config.redis_client import RedisCache, get_redis
from config.settings import Settings, get_settings
from services.auth.identity import IdentityStore, get_identity_store
from services.auth.router import build_login_response
from shared.middleware.auth import acts_as_provider, get_token_service
from shared.models.models import AccountRole, Provider
from shared.schemas.schemas import (
    CheckEmailRequest,
    CheckEmailResponse,
    LoginResponse,
    MessageResponse,
    ProviderEnvelope,
    ProviderLocationListResponse,
    ProviderLocationResponse,
    ProviderLoginRequest,
    ProviderRegisterRequest,
    ProviderResponse,
    ProviderUpdateRequest,
    VerifyEmailRequest,
)
from shared.utils.security import TokenService
from tasks.notification_tasks import send_verification_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/providers", tags=["Providers"])

LOCATIONS_CACHE_KEY = "providers:locations"


async def _invalidate_locations(redis) -> None:
    if redis:
        await RedisCache(redis).delete(LOCATIONS_CACHE_KEY)


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register_provider(
    data: ProviderRegisterRequest,
    store: IdentityStore = Depends(get_identity_store),
):
    registration = await store.register(AccountRole.PROVIDER, data.model_dump())
    send_verification_email.delay(
        registration.email, registration.verification_code, registration.name
    )
    return MessageResponse(message="Registration successful. Please verify your email.")


@router.post("/verifyemail", response_model=MessageResponse)
async def verify_provider_email(
    data: VerifyEmailRequest,
    store: IdentityStore = Depends(get_identity_store),
    redis=Depends(get_redis),
):
    await store.verify(AccountRole.PROVIDER, data.email, data.verification_code)
    await _invalidate_locations(redis)
    return MessageResponse(message="Email verified successfully")


@router.post("/login", response_model=LoginResponse)
async def login_provider(
    data: ProviderLoginRequest,
    store: IdentityStore = Depends(get_identity_store),
    tokens: TokenService = Depends(get_token_service),
):
    provider = await store.authenticate(data.email, data.password, AccountRole.PROVIDER)
    logger.info("provider %s logged in", provider.id)
    return build_login_response(provider, tokens)


@router.post("/check-email", response_model=CheckEmailResponse)
async def check_email(
    data: CheckEmailRequest,
    store: IdentityStore = Depends(get_identity_store),
):
    """Lets the signup screen warn about a taken email before submitting."""
    return CheckEmailResponse(exists=await store.email_exists(AccountRole.PROVIDER, data.email))


@router.get("/me", response_model=ProviderResponse)
async def get_provider_profile(current_provider: Provider = Depends(acts_as_provider)):
    return ProviderResponse.model_validate(current_provider)


@router.put("/update", response_model=ProviderEnvelope)
async def update_provider_profile(
    data: ProviderUpdateRequest,
    current_provider: Provider = Depends(acts_as_provider),
    store: IdentityStore = Depends(get_identity_store),
    redis=Depends(get_redis),
):
    provider = await store.update_provider(
        current_provider, data.model_dump(exclude_unset=True, exclude_none=True)
    )
    await _invalidate_locations(redis)
    return ProviderEnvelope(
        message="Profile updated successfully",
        provider=ProviderResponse.model_validate(provider),
    )


@router.get("/locations", response_model=ProviderLocationListResponse)
async def provider_locations(
    store: IdentityStore = Depends(get_identity_store),
    settings: Settings = Depends(get_settings),
    redis=Depends(get_redis),
):
    """All verified providers with their coordinates."""
    cache = RedisCache(redis, ttl=settings.REDIS_CACHE_TTL) if redis else None
    if cache:
        cached = await cache.get(LOCATIONS_CACHE_KEY)
        if cached is not None:
            return ProviderLocationListResponse.model_validate(cached)

    response = ProviderLocationListResponse(
        providers=[
            ProviderLocationResponse.model_validate(p) for p in await store.verified_providers()
        ]
    )
    if cache:
        await cache.set(LOCATIONS_CACHE_KEY, response.model_dump(mode="json", by_alias=True))
    return response
