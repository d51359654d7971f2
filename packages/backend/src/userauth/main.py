"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. It builds the auth components up front, so a missing signing
secret stops the process at startup (ConfigurationError) instead of
failing every request. Lifespan manages Redis and the database engine.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from userauth import __version__
from userauth.api import api_router
from userauth.auth.dependencies import check_configuration
from userauth.config import settings
from userauth.errors import AuthError, UserAuthError

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(
        "userauth.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    from userauth.cache.redis import close_redis, init_redis
    try:
        await init_redis()
        logger.info("userauth.redis_connected", url=settings.redis_url)
    except Exception as e:
        # Redis is optional; only rate limiting depends on it
        logger.warning("userauth.redis_unavailable", error=str(e))

    yield

    logger.info("userauth.shutdown")
    await close_redis()

    from userauth.db.engine import engine
    await engine.dispose()


async def handle_service_error(request: Request, exc: UserAuthError) -> JSONResponse:
    """Render any UserAuthError as {"error", "code"} with its status."""
    headers = None
    if isinstance(exc, AuthError):
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        logger.error("request.failed", code=exc.code, path=request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=headers,
    )


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    check_configuration()

    app = FastAPI(
        title="userauth",
        description="Minimal user-account service: register, login, admin listing",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RateLimit → Security → RequestId → handler

    from userauth.middleware.rate_limit import RateLimitMiddleware
    from userauth.middleware.request_id import RequestIdMiddleware
    from userauth.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(UserAuthError, handle_service_error)
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: userauth.main:app)
app = create_app()
