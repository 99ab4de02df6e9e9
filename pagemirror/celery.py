from datetime import timedelta
import logging
from typing import Any
from celery import Celery, signals
from celery.app.task import Context

from pagemirror.config import get_settings

settings = get_settings()

redis_url = settings.REDIS_URL

celery_app = Celery(
    __name__,
    broker=redis_url,
    backend=redis_url,
    broker_connection_retry_on_startup=True,
    include=["pagemirror.tasks.mirror_document"],
    result_expires=timedelta(days=settings.TASK_RETENTION_DAYS),
)


@signals.setup_logging.connect
def setup_celery_logging(**kwargs: Any) -> None:
    logging.basicConfig(level=settings.LOG_LEVEL)


@signals.task_revoked.connect
def handle_task_revoked(
    *, request: Context, terminated: bool, signum: int, expired: bool, **kwargs: Any
) -> None:
    if not request:
        return

    task_id = request.id
    doc_id = request.kwargs["doc_id"] if request.kwargs else "unknown"
    type = "terminated" if terminated else "revoked"
    meta: dict[str, Any] = {
        "doc_id": doc_id,
        "message": f"Task was {type}.",
    }
    state = type.upper()
    celery_app.backend.store_result(task_id=task_id, result=meta, state=state)  # type: ignore
