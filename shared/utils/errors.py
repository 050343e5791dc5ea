"""
shared/utils/errors.py
Domain error hierarchy. Every error carries the HTTP status it maps to and a
short human-readable message; main.py renders them as {"message": ...}.
"""

from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ── 400 ───────────────────────────────────────────────────────

class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "All fields are required"


class ConflictError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Already exists"


class DuplicateEmail(ConflictError):
    default_message = "Email already registered"


class InvalidCode(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid verification code"


class InvalidStatus(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid status"


class InvalidTransition(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Booking cannot make this transition"


# ── 401 / 403 ─────────────────────────────────────────────────

class AuthenticationFailed(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class InvalidCredential(AuthenticationFailed):
    default_message = "Invalid email or password"


class TokenExpired(AuthenticationFailed):
    default_message = "Token has expired"


class MalformedToken(AuthenticationFailed):
    default_message = "Token is not valid"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


# ── 404 ───────────────────────────────────────────────────────

class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"
