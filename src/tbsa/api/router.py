"""Root API router with health endpoints and module mounting."""

from datetime import UTC, datetime

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tbsa.api.dependencies import DBSession
from tbsa.core.auth.routes import router as auth_router
from tbsa.core.permissions.routes import router as permissions_router
from tbsa.modules import discover_modules


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    timestamp: datetime
    message: str


class ReadinessResponse(BaseModel):
    """Readiness check response schema."""

    status: str
    checks: dict[str, str]


health_router = APIRouter(prefix="/health", tags=["health"])


@health_router.get(
    "",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Returns 200 while the process is running.",
)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(UTC),
        message="Service is healthy",
    )


@health_router.head("", include_in_schema=False)
async def health_head() -> None:
    return None


@health_router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Checks database connectivity.",
)
async def readiness(db: DBSession) -> JSONResponse:
    checks: dict[str, str] = {}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as e:
        checks["database"] = type(e).__name__

    all_ok = all(v == "ok" for v in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if all_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if all_ok else "degraded",
            "checks": checks,
        },
    )


# Every endpoint lives under /api
api_router = APIRouter(prefix="/api")
api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(permissions_router)

for module_router in discover_modules():
    api_router.include_router(module_router)
