# shopcart/celery_worker.py
from celery import Celery

from shopcart.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, CLEANUP_INTERVAL_SECONDS

celery_app = Celery(
    "cart",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# taski musza byc zaimportowane zeby Celery je zarejestrowal
celery_app.conf.imports = (
    "shopcart.tasks.cleanup",
)

celery_app.conf.beat_schedule = {
    "cleanup-inactive-lines": {
        "task": "shopcart.tasks.cleanup.cleanup_inactive_lines_task",
        "schedule": CLEANUP_INTERVAL_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"
