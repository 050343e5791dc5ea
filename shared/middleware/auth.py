"""
shared/middleware/auth.py
FastAPI dependency functions for authentication and authorization.
JWT is validated here; handlers declare the capability they need
(acts_as_customer / acts_as_provider / acts_as_employee) and receive the
loaded account.
"""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from config.settings import Settings, get_settings
from shared.models.models import ACCOUNT_MODELS, Account, AccountRole
from shared.utils.errors import AuthenticationFailed
from shared.utils.security import TokenClaims, TokenService

security = HTTPBearer(auto_error=False)


def get_token_service(settings: Settings = Depends(get_settings)) -> TokenService:
    return TokenService(settings)


async def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """Extract and validate the JWT from the Authorization header."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return tokens.verify(credentials.credentials)


async def get_current_account(
    claims: TokenClaims = Depends(get_token_claims),
    db: AsyncSession = Depends(get_db),
) -> Account:
    """Load the account named by the token from the table of its role."""
    model = ACCOUNT_MODELS[claims.role]
    account = await db.get(model, claims.subject_id)
    if not account:
        raise AuthenticationFailed("User not found or token invalid")
    return account


class RoleRequired:
    """Dependency factory for role-based access control."""

    def __init__(self, *roles: AccountRole):
        self.roles = roles

    async def __call__(
        self,
        claims: TokenClaims = Depends(get_token_claims),
        db: AsyncSession = Depends(get_db),
    ) -> Account:
        if claims.role not in self.roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Required role: {[r.value for r in self.roles]}",
            )
        return await get_current_account(claims, db)


# Capability dependencies
acts_as_customer = RoleRequired(AccountRole.CUSTOMER)
acts_as_provider = RoleRequired(AccountRole.PROVIDER)
acts_as_employee = RoleRequired(AccountRole.EMPLOYEE)
