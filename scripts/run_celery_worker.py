"""
Run a Celery worker that rebuilds game schedules in the background.
"""

import sys
import os

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.celery_app import celery_app
from app.core.config import CELERY_QUEUE, LOG_LEVEL
from app.core.logging_config import setup_logging

if __name__ == "__main__":
    setup_logging()

    print("=" * 60)
    print("Youth Basketball Playing-Time - Celery Worker")
    print("=" * 60)
    print(f"Listening on queue '{CELERY_QUEUE}' for schedule regeneration")
    print("=" * 60)

    celery_app.worker_main([
        "worker",
        f"--loglevel={LOG_LEVEL.lower()}",
        f"--queues={CELERY_QUEUE}",
        "--concurrency=1",
        "--pool=solo" if os.name == "nt" else "--pool=prefork"  # Use solo pool on Windows
    ])
