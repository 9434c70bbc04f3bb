"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from court_vision import __version__
from court_vision.api.routes import health, videos
from court_vision.config import settings
from court_vision.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info("application_starting", version=__version__)

    if settings.job_store_provider.lower() == "sql":
        try:
            from court_vision.db.session import init_db

            init_db()
            logger.info("database_connected")
        except Exception as e:
            # Reported by /health/ready instead of failing startup
            logger.error("database_connection_failed", error=str(e))

    yield

    logger.info("application_shutting_down")


app = FastAPI(
    title="Court Vision",
    description="Basketball video analysis: annotation, feature summaries and video Q&A",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(videos.router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Root endpoint pointing at the docs."""
    return {
        "name": "Court Vision",
        "version": __version__,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "court_vision.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
