"""Celery application configuration"""

from celery import Celery
from tableside.config import settings
from tableside.log import configure_logging

configure_logging()

# Create Celery app
celery_app = Celery(
    "tableside",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "tableside.jobs.tasks",
    ],
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=120,  # 2 minutes
    worker_prefetch_multiplier=1,
    # Post-booking work is best effort: never redelivered, never retried
    task_acks_late=False,
    task_ignore_result=True,
)
