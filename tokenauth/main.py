"""Main FastAPI application entry point."""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tokenauth.api.dependencies import client_ip, get_token_service
from tokenauth.api.errors import auth_error_response, error_body
from tokenauth.api.v1.endpoints.auth.routes import router as auth_router
from tokenauth.api.v1.endpoints.health.routes import router as health_router
from tokenauth.config import get_settings
from tokenauth.core.auth.exceptions import AuthenticationException
from tokenauth.infrastructure.cache.rate_limiter import RateLimiter
from tokenauth.infrastructure.cache.redis_client import get_redis_client
from tokenauth.infrastructure.database.session import close_db_connections, create_tables
from tokenauth.utils.logging import setup_logging

logger = logging.getLogger("tokenauth")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events."""
    setup_logging()
    settings = get_settings()
    logger.info("Starting token auth service (environment=%s)", settings.environment)

    try:
        # Fails fast on a missing signing secret
        get_token_service()

        await create_tables()
        logger.info("Database tables ready")

        redis_client = None
        if settings.rate_limit_enabled:
            redis_client = get_redis_client()
            await redis_client.connect()
            if await redis_client.ping():
                logger.info("Redis connection established")
            else:
                logger.warning("Redis ping failed; rate limits are counted per process")

        app.state.redis_client = redis_client
        app.state.rate_limiter = RateLimiter(redis_client)

    except Exception:
        logger.exception("Startup failed")
        raise

    yield

    logger.info("Shutting down token auth service...")

    redis_client = getattr(app.state, "redis_client", None)
    if redis_client:
        await redis_client.disconnect()
        logger.info("Redis connection closed")

    await close_db_connections()
    logger.info("Database connections closed")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Token Auth Service",
        description="Email/password authentication with rotating refresh sessions",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(auth_router)

    register_exception_handlers(app)

    register_middleware(app)

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers."""

    @app.exception_handler(AuthenticationException)
    async def auth_exception_handler(request: Request, exc: AuthenticationException):
        """Render auth failures by kind; the reason stays in the log."""
        logger.info(
            "Auth failure on %s: %s (%s)", request.url.path, exc.kind.value, exc.details
        )
        return auth_error_response(exc)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle FastAPI HTTP exceptions."""
        code = "RATE_LIMITED" if exc.status_code == status.HTTP_429_TOO_MANY_REQUESTS else "HTTP_ERROR"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Reject malformed request bodies before they reach the service."""
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                **error_body("VALIDATION_ERROR", "Invalid request body"),
                "detail": [
                    {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                    for err in exc.errors()
                ],
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions, storage failures included."""
        logger.error("Unhandled exception: %s", exc, exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("INTERNAL_ERROR", "Internal server error"),
        )


def register_middleware(app: FastAPI) -> None:
    """Register custom middleware."""

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log all HTTP requests."""
        start_time = time.perf_counter()
        logger.info(
            "Request started: %s %s from %s",
            request.method, request.url.path, client_ip(request),
        )

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        logger.info(
            "Request completed: %s %s status=%s time=%.3fs",
            request.method, request.url.path, response.status_code, process_time,
        )

        return response

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        """Add security headers to responses."""
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"

        return response


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "tokenauth.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
