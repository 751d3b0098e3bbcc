"""Assignment engine — FastAPI application factory."""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from assignment_engine.adapters.persistence.database import engine
from assignment_engine.application.use_cases.retention_sweep import RetentionSweep
from assignment_engine.config import settings
from assignment_engine.domain.errors import (
    EngineError,
    InvalidAssignee,
    NotFound,
    PermissionDenied,
    StorageFailure,
    TargetUserInactive,
    ValidationFailed,
)
from assignment_engine.infrastructure.api.dependencies import dispatcher_scope
from assignment_engine.infrastructure.api.routes_health import router as health_router
from assignment_engine.infrastructure.api.routes_notifications import router as notifications_router
from assignment_engine.infrastructure.api.routes_rules import router as rules_router
from assignment_engine.infrastructure.api.routes_work_orders import router as work_orders_router

logger = logging.getLogger(__name__)

_ERROR_STATUS: dict[type[EngineError], int] = {
    PermissionDenied: 403,
    NotFound: 404,
    TargetUserInactive: 409,
    InvalidAssignee: 422,
    ValidationFailed: 422,
    StorageFailure: 503,
}


def status_for(error: EngineError) -> int:
    for error_type, status in _ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 400


async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content={"error": str(exc)})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        async with engine.begin():
            pass  # Connection pool warmed up
        logger.info("Database connection established")
    except Exception as e:
        logger.warning("Database not available on startup: %s", e)

    sweep_task = None
    if settings.retention_sweep_enabled:
        sweep = RetentionSweep(dispatcher_scope, settings.notification_retention_days)
        sweep_task = asyncio.create_task(
            sweep.run_forever(settings.retention_sweep_interval_seconds)
        )
        logger.info(
            "Retention sweep scheduled every %ss (keep %d days)",
            settings.retention_sweep_interval_seconds, settings.notification_retention_days,
        )
    yield
    if sweep_task is not None:
        sweep_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweep_task
    await engine.dispose()


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Maintenance Assignment Engine",
        description="Rule-based work order assignment and notification dispatch",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS for the maintenance web client
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(EngineError, engine_error_handler)

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(rules_router, prefix="/api")
    app.include_router(work_orders_router, prefix="/api")
    app.include_router(notifications_router, prefix="/api")

    return app


app = create_app()
