"""Celery worker configuration."""

from celery import Celery

from court_vision.config import settings
from court_vision.logging import setup_logging

# Setup logging before anything else
setup_logging()

celery_app = Celery(
    "court_vision",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Task execution: annotation alone may take up to 10 minutes
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=900,
    task_soft_time_limit=840,
    # Worker settings
    worker_prefetch_multiplier=1,
    worker_concurrency=4,
    # Result backend
    result_expires=86400,  # 24 hours
    task_routes={
        "analysis.analyze_video": {"queue": "analysis"},
    },
)

celery_app.autodiscover_tasks(["court_vision.jobs"])
