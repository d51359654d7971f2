"""User API — registration, login, admin listing.

Learn: Routes stay thin. Each handler validates the body shape (pydantic),
calls AuthService, and wraps the result. Failures are UserAuthError
subclasses rendered by the exception handler in main.py:
- POST /users  → 201, 409 duplicate, 422 bad input, 500 store failure
- POST /login  → 200, 401 wrong password, 404 unknown user
- GET  /users  → 200 for the admin identity, 401 otherwise
"""

from fastapi import APIRouter, Depends

from userauth.auth.dependencies import get_auth_service, get_current_claims
from userauth.auth.jwt import TokenClaims
from userauth.schemas.user import (
    Credentials,
    LoginResponse,
    UserListResponse,
    UserRead,
    UserResponse,
)
from userauth.services.auth_service import AuthService

router = APIRouter()


@router.post("/users", response_model=UserResponse, status_code=201)
async def register(body: Credentials, svc: AuthService = Depends(get_auth_service)):
    """Create a new user account."""
    user = await svc.register(body.name, body.password)
    return UserResponse(result=UserRead.model_validate(user))


@router.post("/login", response_model=LoginResponse)
async def login(body: Credentials, svc: AuthService = Depends(get_auth_service)):
    """Name + password → bearer token."""
    outcome = await svc.login(body.name, body.password)
    return LoginResponse(
        token=outcome.token,
        result=UserRead.model_validate(outcome.user),
    )


@router.get("/users", response_model=UserListResponse)
async def list_users(
    claims: TokenClaims = Depends(get_current_claims),
    svc: AuthService = Depends(get_auth_service),
):
    """List every account (admin only, hashes omitted)."""
    users = await svc.list_all(claims)
    return UserListResponse(result=[UserRead.model_validate(u) for u in users])
