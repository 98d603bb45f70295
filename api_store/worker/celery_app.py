from celery import Celery
from celery.schedules import crontab

from api_store.core.config import settings

celery_app = Celery(
    "api_store",
    broker=f"redis://{settings.REDIS_HOST}:{settings.REDIS_PORT}/0",
    backend=f"redis://{settings.REDIS_HOST}:{settings.REDIS_PORT}/0",
)

celery_app.conf.task_routes = {"api_store.worker.tasks.*": {"queue": "maintenance"}}

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
)

celery_app.conf.imports = ("api_store.worker.tasks",)

celery_app.conf.beat_schedule = {
    "sweep-orphaned-catalog-rows": {
        "task": "api_store.worker.tasks.sweep_orphaned_catalog_rows",
        "schedule": crontab(hour="*", minute="0"),  # hourly
    },
}
