"""
Celery configuration for background schedule regeneration.
"""

from celery import Celery

from app.core.config import REDIS_URL, CELERY_QUEUE

celery_app = Celery(
    "rotation_scheduler",
    broker=REDIS_URL,
    backend=REDIS_URL,
    include=["app.tasks.scheduler_tasks"]
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="America/Los_Angeles",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=120,
    task_soft_time_limit=90,
    task_default_queue=CELERY_QUEUE,
    task_routes={"regenerate_schedule": {"queue": CELERY_QUEUE}},
    result_expires=3600,  # 1 hour
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=200,
)
