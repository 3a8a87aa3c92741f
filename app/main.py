"""FastAPI application entrypoint and router wiring for the backend."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware

from app.api.auth import router as auth_router
from app.api.positions import router as positions_router
from app.api.tasks import router as tasks_router
from app.api.user_positions import router as user_positions_router
from app.api.users import router as users_router
from app.core.config import settings
from app.core.error_handling import install_error_handling
from app.core.logging import configure_logging, get_logger
from app.db.session import dispose_db, init_db
from app.schemas.health import HealthStatusResponse
from app.services.audit import close_audit_recorder, get_audit_recorder

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

configure_logging()
logger = get_logger(__name__)
OPENAPI_TAGS = [
    {
        "name": "auth",
        "description": "Login and registration endpoints that issue bearer tokens.",
    },
    {
        "name": "health",
        "description": "Service liveness/readiness probes used by infrastructure checks.",
    },
    {
        "name": "users",
        "description": "User CRUD. Every mutation is recorded in the audit trail.",
    },
    {
        "name": "tasks",
        "description": "Task CRUD. Every mutation is recorded in the audit trail.",
    },
    {
        "name": "positions",
        "description": "Position CRUD. Every mutation is recorded in the audit trail.",
    },
    {
        "name": "user-positions",
        "description": "User-to-position assignments. Mutations are recorded in the audit trail.",
    },
]


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Initialize application resources before serving requests."""
    logger.info(
        "app.lifecycle.starting environment=%s db_auto_migrate=%s",
        settings.environment,
        settings.db_auto_migrate,
    )
    if settings.uses_insecure_jwt_secret:
        logger.warning(
            "auth.jwt.insecure_dev_secret JWT_SECRET is unset; tokens are signed with a "
            "development-only key. Set JWT_SECRET before deploying.",
        )
    await init_db()
    await get_audit_recorder()
    logger.info("app.lifecycle.started")
    try:
        yield
    finally:
        await close_audit_recorder()
        await dispose_db()
        logger.info("app.lifecycle.stopped")


app = FastAPI(
    title="Todo Apps API",
    version="0.1.0",
    lifespan=lifespan,
    openapi_tags=OPENAPI_TAGS,
)

origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info("app.cors.enabled origins_count=%s", len(origins))
else:
    logger.info("app.cors.disabled")

install_error_handling(app)


@app.get(
    "/health",
    tags=["health"],
    response_model=HealthStatusResponse,
    summary="Health Check",
    description="Lightweight liveness probe endpoint.",
    responses={
        status.HTTP_200_OK: {
            "description": "Service is alive.",
            "content": {"application/json": {"example": {"ok": True}}},
        }
    },
)
def health() -> HealthStatusResponse:
    """Lightweight liveness probe endpoint."""
    return HealthStatusResponse(ok=True)


@app.get(
    "/healthz",
    tags=["health"],
    response_model=HealthStatusResponse,
    summary="Health Alias Check",
    description="Alias liveness probe endpoint for platform compatibility.",
)
def healthz() -> HealthStatusResponse:
    """Alias liveness probe endpoint for platform compatibility."""
    return HealthStatusResponse(ok=True)


@app.get(
    "/readyz",
    tags=["health"],
    response_model=HealthStatusResponse,
    summary="Readiness Check",
    description="Readiness probe endpoint for service orchestration checks.",
)
def readyz() -> HealthStatusResponse:
    """Readiness probe endpoint for service orchestration checks."""
    return HealthStatusResponse(ok=True)


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(tasks_router)
app.include_router(positions_router)
app.include_router(user_positions_router)

logger.debug("app.routes.registered count=%s", len(app.routes))
