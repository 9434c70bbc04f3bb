"""Health check endpoints."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from court_vision.api.deps import AnalysisPipelineDep
from court_vision.config import settings
from court_vision.logging import get_logger

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    components: dict[str, bool] | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    database: bool
    redis: bool
    components: dict[str, bool] | None = None


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint that verifies the API is running.",
)
async def health_check() -> HealthResponse:
    """Basic health check - is the API up?

    Reports which components use a real provider rather than a stub.
    """
    from court_vision import __version__

    providers = {
        "annotation": settings.annotation_provider,
        "llm": settings.llm_provider,
        "storage": settings.storage_provider,
        "job_store": settings.job_store_provider,
    }

    return HealthResponse(
        status="healthy",
        version=__version__,
        components={k: v not in ("stub", "local", "memory") for k, v in providers.items()},
    )


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Comprehensive readiness check that verifies all dependencies.",
)
async def readiness_check(pipeline: AnalysisPipelineDep) -> ReadinessResponse:
    """Comprehensive readiness check including dependencies."""
    database_ok = False
    try:
        from court_vision.db.session import init_db

        init_db()
        database_ok = True
    except Exception as e:
        logger.error("database_health_check_failed", error=str(e))

    redis_ok = False
    try:
        import redis

        r = redis.from_url(settings.redis_url)
        r.ping()
        redis_ok = True
    except Exception as e:
        logger.error("redis_health_check_failed", error=str(e))

    components = await pipeline.health_check()

    ready = database_ok and redis_ok and all(components.values())

    return ReadinessResponse(
        ready=ready,
        database=database_ok,
        redis=redis_ok,
        components=components,
    )


@router.get(
    "/health/live",
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
    description="Simple liveness check for Kubernetes.",
)
async def liveness_check() -> dict[str, str]:
    """Kubernetes liveness check - is the process alive?"""
    return {"status": "alive"}
