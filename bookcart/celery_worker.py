# bookcart/celery_worker.py
from celery import Celery

from bookcart.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_ALWAYS_EAGER,
)

celery_app = Celery(
    "bookcart",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# Explicite importuj taski, żeby Celery je zarejestrował
celery_app.conf.imports = (
    "bookcart.tasks.purge",
    "bookcart.services.notification_service",
)

celery_app.conf.beat_schedule = {
    "purge-guest-carts-hourly": {
        "task": "bookcart.tasks.purge.purge_guest_carts_task",
        "schedule": 60.0 * 60,
    },
}

celery_app.conf.timezone = "UTC"
celery_app.conf.task_always_eager = CELERY_TASK_ALWAYS_EAGER
