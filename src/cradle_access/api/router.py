"""Root API router: health checks and the versioned module routers."""

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from cradle_access import __version__
from cradle_access.api.dependencies import DBSession
from cradle_access.config import settings
from cradle_access.core.permissions.models import Permission
from cradle_access.modules import discover_modules


logger = structlog.get_logger()


class HealthResponse(BaseModel):
    status: str


class InfoResponse(BaseModel):
    app: str
    version: str
    environment: str


health_router = APIRouter(tags=["health"])


@health_router.get("/health/live", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    return HealthResponse(status="alive")


@health_router.get("/health/ready")
async def readiness(db: DBSession) -> JSONResponse:
    """Ready once the database answers and the permission catalog is seeded.

    An unseeded instance reports 503 with ``catalog: "empty"``.
    """
    checks = {"database": "ok", "catalog": "ok"}
    try:
        seeded = await db.scalar(select(func.count()).select_from(Permission))
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.warning("readiness_database_error", error=str(exc))
        checks = {"database": "unavailable", "catalog": "unknown"}
    else:
        if not seeded:
            checks["catalog"] = "empty"

    ready = all(value == "ok" for value in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ready" if ready else "degraded", "checks": checks},
    )


@health_router.get("/info", response_model=InfoResponse)
async def info() -> InfoResponse:
    return InfoResponse(
        app=settings.app_name,
        version=__version__,
        environment=settings.environment,
    )


v1_router = APIRouter(prefix="/api/v1")
for module_router in discover_modules():
    v1_router.include_router(module_router)

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(v1_router)
