"""Auth service — registration, login and the admin user listing.

Learn: Service layer separates business logic from HTTP routing.
API routes call the service, the service calls the store. Hashing is an
explicit step in register(): the candidate record is built with its
hash already computed, then handed to the store.

Failure outcomes are raised as typed errors (see userauth.errors);
the success value of login() is a LoginResult.
"""

from dataclasses import dataclass
from typing import Sequence

import structlog

from userauth.auth.access import AccessControl
from userauth.auth.jwt import TokenClaims, TokenIssuer
from userauth.auth.password import BCRYPT_MAX_BYTES, PasswordHasher
from userauth.db.models import User
from userauth.errors import (
    AuthError,
    AuthFailure,
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from userauth.services.user_store import UserStore

logger = structlog.get_logger()


@dataclass
class LoginResult:
    token: str
    user: User


class AuthService:
    """Business logic for accounts and credentials."""

    def __init__(
        self,
        store: UserStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        admin_name: str = "admin",
    ):
        self.store = store
        self.hasher = hasher
        self.issuer = issuer
        self.admin_name = admin_name

    # ─── Register ───────────────────────────────────────

    async def register(self, name: str, password: str, allow_reserved: bool = False) -> User:
        """Create an account.

        The admin name is reserved: only operator tooling (the CLI) passes
        allow_reserved=True. Over HTTP it is rejected like a taken name.
        """
        name = _clean_name(name)
        if not password or not password.strip():
            raise ValidationError("Password must not be empty")
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValidationError(
                f"Password must be at most {BCRYPT_MAX_BYTES} bytes"
            )
        if name == self.admin_name and not allow_reserved:
            logger.warning("user.reserved_name_rejected", user=name)
            raise ConflictError(f"User name '{name}' is reserved")

        # Cheap pre-check; the unique constraint still backs it up.
        if await self.store.find_by_name(name) is not None:
            raise ConflictError(f"User '{name}' already exists")

        password_hash = await self.hasher.hash_async(password)
        user = await self.store.create(User(name=name, password_hash=password_hash))
        logger.info("user.registered", user=name)
        return user

    # ─── Login ──────────────────────────────────────────

    async def login(self, name: str, password: str) -> LoginResult:
        name = _clean_name(name)
        user = await self.store.find_by_name(name)
        if user is None:
            logger.info("user.login_failed", user=name, reason="not_found")
            raise NotFoundError(f"User '{name}' not found")

        if not await self.hasher.verify_async(password or "", user.password_hash):
            logger.info("user.login_failed", user=name, reason="bad_password")
            raise InvalidCredentialsError()

        token = self.issuer.issue(user.name)
        logger.info("user.logged_in", user=name)
        return LoginResult(token=token, user=user)

    # ─── Listing ────────────────────────────────────────

    async def list_all(self, claims: TokenClaims) -> Sequence[User]:
        """All users, for the admin identity only."""
        if not AccessControl.require_identity(claims, self.admin_name):
            logger.warning("user.list_denied", user=claims.user)
            raise AuthError(AuthFailure.WRONG_IDENTITY)
        return await self.store.find_all()


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name must not be empty")
    if len(name) > 100:
        raise ValidationError("Name must be at most 100 characters")
    return name
