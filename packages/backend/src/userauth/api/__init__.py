"""API route aggregation.

All routers registered here get mounted in main.py under /api/v1.
The users router protects GET /users itself (per-route dependency),
since POST /users and POST /login must stay open.
"""

from fastapi import APIRouter

from userauth.api.health import router as health_router
from userauth.api.users import router as users_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(users_router, tags=["users", "auth"])
