"""Celery application configuration."""

from celery import Celery

from vegan_aisle.config import get_settings

settings = get_settings()

app = Celery(
    "vegan_aisle",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["vegan_aisle.tasks.availability"],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    task_soft_time_limit=240,  # 4 minutes soft limit
    beat_schedule={
        "mark-stale-availability": {
            "task": "vegan_aisle.tasks.availability.mark_stale_availability",
            "schedule": 3600.0,  # hourly
        },
    },
)
