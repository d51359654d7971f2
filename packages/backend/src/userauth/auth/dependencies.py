"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers. The hasher, issuer
and validator are built once from settings (lru_cache) because they
only hold read-only configuration; the AuthService is built per request
around that request's database session.
"""

from datetime import timedelta
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from userauth.auth.access import AccessControl
from userauth.auth.jwt import TokenClaims, TokenIssuer, TokenValidator
from userauth.auth.password import PasswordHasher
from userauth.config import settings
from userauth.db.engine import get_db
from userauth.services.auth_service import AuthService
from userauth.services.user_store import SqlAlchemyUserStore


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(cost_factor=settings.hash_cost_factor)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    return TokenIssuer(
        secret=settings.jwt_secret,
        issuer=settings.token_issuer,
        ttl=timedelta(seconds=settings.token_ttl_seconds),
        algorithm=settings.jwt_algorithm,
    )


@lru_cache
def get_token_validator() -> TokenValidator:
    return TokenValidator(
        secret=settings.jwt_secret,
        issuer=settings.token_issuer,
        algorithm=settings.jwt_algorithm,
    )


def get_access_control(
    validator: TokenValidator = Depends(get_token_validator),
) -> AccessControl:
    return AccessControl(validator)


async def get_current_claims(
    authorization: Optional[str] = Header(None),
    access: AccessControl = Depends(get_access_control),
) -> TokenClaims:
    """Verified claims of the caller (401 if missing or invalid)."""
    return access.authorize(authorization)


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(
        store=SqlAlchemyUserStore(db),
        hasher=hasher,
        issuer=issuer,
        admin_name=settings.admin_name,
    )


def check_configuration() -> None:
    """Build every auth component once. Raises ConfigurationError early."""
    get_password_hasher()
    get_token_issuer()
    get_token_validator()
