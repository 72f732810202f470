from celery import Celery
from lawconnect.core.config import settings

celery_app = Celery(
    "lawconnect",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["lawconnect.worker"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    beat_schedule={
        "sweep-expired-reset-tokens": {
            "task": "lawconnect.sweep_expired_reset_tokens",
            "schedule": settings.RESET_TOKEN_SWEEP_INTERVAL_SECONDS,
        },
    },
)
