"""
FastAPI Application Entry Point

Restaurant Ordering API: catalog, feedback, accounts, orders and admin
reporting behind bearer-token authentication.

Endpoints:
    - POST /api/auth/register, POST /api/auth/login, GET /api/auth/me
    - GET /api/products[/category/{category}|/{id}] (admin writes)
    - POST/GET /api/feedback
    - POST /api/orders, GET /api/orders/user/{userId}, GET /api/orders/{id}
    - GET /api/dashboard, GET /api/reports/sales[.xlsx] (admin)
    - GET /health: System health check

Run:
    uvicorn restaurant_api.main:serve_app --factory --port 8080
"""

import logging
import time
from contextlib import asynccontextmanager
from http import HTTPStatus
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_api.core.config import Settings, get_settings, setup_logging
from restaurant_api.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    RestaurantAPIError,
)
from restaurant_api.database import build_engine, build_session_maker, get_db, init_db
from restaurant_api.routers import all_routers
from restaurant_api.schemas import HealthResponse
from restaurant_api.services.auth import PasswordHasher, TokenCodec
from restaurant_api.services.orders import OrderWriter

logger = logging.getLogger(__name__)


def _error_body(error: str, detail) -> dict:
    return {"success": False, "error": error, "detail": detail}


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application and its long-lived collaborators.

    The signing secret is resolved here, so a missing JWT_SECRET outside
    development stops the process before it serves a single request.

    Raises:
        ConfigurationError: Unsafe or missing configuration
    """
    settings = settings or get_settings()

    secret = settings.resolve_jwt_secret()
    unsafe = settings.validate_production_config()
    if unsafe:
        raise ConfigurationError(
            f"Unsafe configuration for ENV_MODE={settings.env_mode.value}: {', '.join(unsafe)}"
        )

    engine = build_engine(settings)
    session_maker = build_session_maker(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application startup and shutdown events.
        """
        # Startup
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {settings.app_name}")
        logger.info(f"   Version: {settings.app_version}")
        logger.info(f"   Environment: {settings.env_mode.value}")
        logger.info(f"   Debug: {settings.debug}")
        logger.info("=" * 60)

        await init_db(engine)
        logger.info("✅ Database initialized")
        logger.info(f"✅ Catalog pricing enforced: {settings.enforce_catalog_pricing}")
        logger.info("✅ Application ready!")

        yield  # Application runs

        # Shutdown
        logger.info("Shutting down...")
        await engine.dispose()
        logger.info("✅ Cleanup complete")

    app = FastAPI(
        title=settings.app_name,
        description="Restaurant ordering API with bearer-token authentication.",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_maker = session_maker
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.token_codec = TokenCodec(secret=secret)
    app.state.order_writer = OrderWriter(
        session_maker,
        enforce_catalog_pricing=settings.enforce_catalog_pricing,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials="*" not in settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({elapsed * 1000:.1f} ms)"
        )
        return response

    _register_exception_handlers(app, settings)
    _register_root_routes(app, settings)

    for router in all_routers:
        app.include_router(router)

    return app


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:

    @app.exception_handler(RestaurantAPIError)
    async def api_error_handler(request: Request, exc: RestaurantAPIError) -> JSONResponse:
        """Translate the application error taxonomy into JSON responses."""
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.reason}")

        headers = None
        if isinstance(exc, AuthenticationError):
            headers = {"WWW-Authenticate": "Bearer"}

        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(HTTPStatus(exc.status_code).phrase, exc.public_detail),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=_error_body("Invalid request", errors),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all exception handler."""
        logger.exception(f"Unhandled exception: {exc}")

        return JSONResponse(
            status_code=500,
            content=_error_body(
                "Internal Server Error",
                str(exc) if settings.debug else "An unexpected error occurred",
            ),
        )


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

def _register_root_routes(app: FastAPI, settings: Settings) -> None:

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        """API root with navigation links."""
        return {
            "message": f"🍽️ Welcome to {settings.app_name}",
            "version": settings.app_version,
            "environment": settings.env_mode.value,
            "documentation": "/docs",
            "health": "/health",
        }

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["Health"],
        summary="System Health Check",
    )
    async def health_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
        """Verify the database is reachable."""
        db_status = "healthy"
        try:
            await db.execute(text("SELECT 1"))
        except Exception as e:
            db_status = f"unhealthy: {e}"
            logger.error(f"Database health check failed: {e}")

        return HealthResponse(
            status="operational" if db_status == "healthy" else "degraded",
            database=db_status,
            timestamp=datetime.now(timezone.utc),
        )


# =============================================================================
# ENTRY POINTS
# =============================================================================

def serve_app() -> FastAPI:
    """uvicorn factory: configure logging, then build the app from the environment."""
    setup_logging()
    return create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "restaurant_api.main:serve_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development and settings.debug,
    )
