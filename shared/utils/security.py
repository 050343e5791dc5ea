"""
shared/utils/security.py
JWT issuing/verification, password hashing, and code generators.
"""

import secrets
import string
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from config.settings import Settings
from shared.models.models import AccountRole
from shared.utils.errors import MalformedToken, TokenExpired

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ── JWT ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class TokenClaims:
    subject_id: uuid.UUID
    role: AccountRole


class TokenService:
    """
    Issues and validates signed session tokens.
    Claims: {sub, role, iat, exp, type}. Every role uses the same `sub` field.
    Expiry is the only cancellation mechanism.
    """

    def __init__(self, settings: Settings):
        self.secret = settings.JWT_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.ttl = timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

    @property
    def expires_in(self) -> int:
        return int(self.ttl.total_seconds())

    def issue(self, subject_id: uuid.UUID, role: AccountRole) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(subject_id),
            "role": AccountRole(role).value,
            "iat": now,
            "exp": now + self.ttl,
            "type": "access",
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Raises TokenExpired or MalformedToken."""
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpired()
        except JWTError:
            raise MalformedToken()

        if payload.get("type") != "access":
            raise MalformedToken("Invalid token type")
        try:
            return TokenClaims(
                subject_id=uuid.UUID(payload["sub"]),
                role=AccountRole(payload["role"]),
            )
        except (KeyError, ValueError):
            raise MalformedToken()


# ── Password ──────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# ── Codes ─────────────────────────────────────────────────────

def generate_verification_code(length: int = 6) -> str:
    """Numeric code emailed at registration, e.g. '482913'."""
    first = secrets.choice("123456789")
    return first + "".join(secrets.choice(string.digits) for _ in range(length - 1))


def generate_referral_code(length: int = 8) -> str:
    alphabet = string.ascii_uppercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))
