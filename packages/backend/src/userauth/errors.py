"""Error taxonomy for the account service.

Learn: Services raise these; a single exception handler in main.py turns
them into `{"error": ..., "code": ...}` responses with the matching status.
Messages are written for API callers, so they never contain passwords,
hashes, tokens or the signing secret.
"""

from enum import Enum
from typing import Optional


class UserAuthError(Exception):
    """Base class. Subclasses set `code` and `status_code`."""

    code = "internal_error"
    status_code = 500
    message = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationError(UserAuthError):
    code = "validation_error"
    status_code = 422
    message = "Invalid input"


class HashingError(UserAuthError):
    code = "hashing_error"
    status_code = 500
    message = "Password could not be hashed"


class PersistenceError(UserAuthError):
    code = "persistence_error"
    status_code = 500
    message = "User store unavailable"


class ConflictError(UserAuthError):
    code = "conflict"
    status_code = 409
    message = "User already exists"


class NotFoundError(UserAuthError):
    code = "user_not_found"
    status_code = 404
    message = "User not found"


class InvalidCredentialsError(UserAuthError):
    code = "invalid_credentials"
    status_code = 401
    message = "Invalid credentials"


class ConfigurationError(UserAuthError):
    code = "configuration_error"
    status_code = 500
    message = "Service misconfigured"


class AuthFailure(str, Enum):
    MISSING_TOKEN = "missing_token"
    MALFORMED_TOKEN = "malformed_token"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"
    WRONG_IDENTITY = "wrong_identity"


_AUTH_MESSAGES = {
    AuthFailure.MISSING_TOKEN: "Authentication required",
    AuthFailure.MALFORMED_TOKEN: "Malformed token",
    AuthFailure.INVALID_SIGNATURE: "Invalid token signature",
    AuthFailure.EXPIRED: "Token has expired",
    AuthFailure.WRONG_IDENTITY: "Not authorized for this resource",
}


class AuthError(UserAuthError):
    """Request could not be authorized. Always surfaced as 401."""

    status_code = 401

    def __init__(self, reason: AuthFailure, message: Optional[str] = None):
        self.reason = reason
        self.code = reason.value
        super().__init__(message or _AUTH_MESSAGES[reason])
