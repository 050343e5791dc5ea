"""
tasks/celery_app.py
Celery application instance shared by all task modules.

Workers are started with:
    celery -A tasks.celery_app worker --loglevel=info --concurrency=4
"""

from celery import Celery

from config.settings import Settings, get_settings


def create_celery_app(settings: Settings) -> Celery:
    app = Celery(
        "car_wash_marketplace",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=["tasks.notification_tasks"],
    )

    app.conf.update(
        # Serialization
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="Asia/Karachi",
        enable_utc=True,

        # Reliability: acknowledge task AFTER execution, not before
        task_acks_late=True,
        task_reject_on_worker_lost=True,

        result_expires=3600,
        task_max_retries=3,

        task_annotations={
            "tasks.notification_tasks.send_verification_email": {"rate_limit": "20/s"},
        },
        task_routes={
            "tasks.notification_tasks.*": {"queue": "notifications"},
        },
        worker_prefetch_multiplier=1,

        # Tests run tasks inline without a broker.
        task_always_eager=settings.is_test,
        task_eager_propagates=False,
        task_store_eager_result=False,
    )
    return app


celery_app = create_celery_app(get_settings())
