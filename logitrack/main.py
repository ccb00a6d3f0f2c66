"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Build the FastAPI application (create_app) with middleware and routers
  - Fail fast at startup when the JWT signing secret is missing
  - Initialize the PostgreSQL pool and seed default users

Collaborators:
  - platform/middleware.py: RequestContextMiddleware (instrumentation)
  - platform/metrics.py: RequestMetrics injected per app
  - api/*: routers and exception handlers

Notes:
  - Middleware order (last added = outermost):
    RequestContextMiddleware -> CORS -> routing -> access gate -> handler
  - Business routes live under /api/v1; /healthz is unversioned
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.admin_routes import router as admin_router
from .api.auth_routes import router as auth_router
from .api.exception_handlers import register_exception_handlers
from .api.health_routes import router as health_router
from .api.integration_routes import router as integration_router
from .api.metrics_routes import router as metrics_router
from .application.seed_users import seed_default_users
from .config import get_settings
from .container import get_token_service, get_user_repository
from .infrastructure.db.pool import close_pool, init_pool
from .platform.logger import logger
from .platform.metrics import PrometheusMetrics, RequestMetrics
from .platform.middleware import RequestContextMiddleware

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. Validates settings and wires storage."""
    settings = get_settings()
    logger.setLevel(settings.log_level.upper())

    # R: Raises ConfigurationError when JWT_SECRET is empty
    get_token_service()

    if settings.uses_postgres():
        init_pool(
            database_url=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )

    seed_default_users(settings, get_user_repository())

    logger.info(
        "LogiTrack API starting up",
        extra={
            "store": "postgres" if settings.uses_postgres() else "memory",
            "jwt_issuer": settings.jwt_issuer,
            "jwt_expires_minutes": settings.jwt_expires_minutes,
        },
    )
    yield

    close_pool()
    logger.info("LogiTrack API shutting down")


def _custom_openapi(app: FastAPI):
    def openapi():
        if app.openapi_schema:
            return app.openapi_schema
        from fastapi.openapi.utils import get_openapi

        schema = get_openapi(title=app.title, version=app.version, routes=app.routes)
        schema.setdefault("components", {})["securitySchemes"] = {
            "Bearer": {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": "Session token from /api/v1/auth/login",
            },
            "ApiKeyAuth": {
                "type": "apiKey",
                "in": "header",
                "name": get_settings().api_key_header,
                "description": "Integration API key",
            },
        }
        app.openapi_schema = schema
        return schema

    return openapi


def create_app(
    metrics: Optional[RequestMetrics] = None,
    prometheus: Optional[PrometheusMetrics] = None,
) -> FastAPI:
    """
    R: Build the application.

    Args:
        metrics: request aggregate to record into (new one if omitted)
        prometheus: Prometheus view (new private registry if omitted)
    """
    settings = get_settings()
    app = FastAPI(
        title="LogiTrack API",
        version="0.1.0",
        description="API for managing logistics processes in LogiTrack system.",
        lifespan=lifespan,
    )
    app.openapi = _custom_openapi(app)

    app.state.request_metrics = metrics or RequestMetrics()
    app.state.prometheus_metrics = prometheus or PrometheusMetrics()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins_list(),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=[
            "Content-Type",
            "Authorization",
            settings.api_key_header,
            "X-Request-Id",
        ],
    )
    # R: Added last so it wraps CORS, routing, the access gate and handlers
    app.add_middleware(
        RequestContextMiddleware,
        metrics=app.state.request_metrics,
        prometheus=app.state.prometheus_metrics,
    )

    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(admin_router, prefix=API_PREFIX)
    app.include_router(integration_router, prefix=API_PREFIX)
    app.include_router(metrics_router, prefix=API_PREFIX)
    app.include_router(health_router)

    register_exception_handlers(app)
    return app


app = create_app()
