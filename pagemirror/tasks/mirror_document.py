import asyncio
import logging
from pathlib import Path
from pydantic import ValidationError
from redis.lock import Lock
from typing import Any
from celery import current_task
from celery.exceptions import Ignore

from pagemirror.cache.sql.store import SqlPageCacheStore
from pagemirror.celery import celery_app
from pagemirror.common.redis import create_redis_client
from pagemirror.config import get_settings
from pagemirror.connectors.docs_client import DocsApiClient
from pagemirror.lock.service import LockService
from pagemirror.mirror.exceptions import MirrorException
from pagemirror.mirror.schemas import MirrorOptions
from pagemirror.mirror.service import DocumentMirrorService


@celery_app.task(name="Mirror Document Pages")
def mirror_document_task(
    doc_id: str,
    options_dict: dict[str, Any] | None = None,
    output_dir: str | None = None,
) -> dict[str, Any]:
    """Celery task to run one mirroring pass over a document."""
    settings = get_settings()
    redis_client = create_redis_client(settings.REDIS_URL)
    lock_service = LockService(redis_client)
    lock: Lock | None = None
    loop: asyncio.AbstractEventLoop | None = None
    cache_store: SqlPageCacheStore | None = None

    try:
        # Attempt to acquire the lock
        lock = lock_service.acquire_lock(doc_id, timeout=settings.LOCK_TIMEOUT)
        current_task.update_state(
            state="MIRRORING",
            meta={
                "doc_id": doc_id,
                "message": "Mirroring pages...",
            },
        )

        try:
            options = MirrorOptions(**(options_dict or {}))
        except ValidationError as e:
            raise MirrorException(f"Invalid mirror options: {e}")

        cache_store = SqlPageCacheStore(settings.PAGE_CACHE_URL)

        # Create a new event loop
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

        async def task_with_lock_renewal() -> dict[str, Any]:
            lock_renewal_task = asyncio.create_task(
                lock_service.renew_lock(lock, extend_time=settings.LOCK_TIMEOUT)
            )
            try:
                async with DocsApiClient(
                    base_url=settings.DOCS_API_BASE_URL,
                    user_agent=settings.USER_AGENT,
                    api_token=settings.DOCS_API_TOKEN,
                    list_pages_limit=settings.LIST_PAGES_LIMIT,
                    list_pages_max=settings.LIST_PAGES_MAX,
                    list_pages_delay=settings.LIST_PAGES_DELAY,
                    export_poll_interval=settings.EXPORT_POLL_INTERVAL,
                    export_max_polls=settings.EXPORT_MAX_POLLS,
                ) as client:
                    mirror_service = DocumentMirrorService(
                        page_source=client,
                        cache_store=cache_store,
                        settings=settings,
                        output_dir=Path(output_dir) if output_dir else None,
                    )
                    run = await mirror_service.mirror_document(doc_id, options)
                return {
                    "doc_id": doc_id,
                    "message": "Pages mirrored successfully.",
                    "created": run.created,
                    "updated": run.updated,
                    "skipped": run.skipped,
                    "errored": run.errored,
                    "output_dir": run.output_dir,
                }
            finally:
                lock_renewal_task.cancel()

        result = loop.run_until_complete(task_with_lock_renewal())
        return result
    except Exception as e:
        logging.exception(f"Failed to mirror document {doc_id}.")
        current_task.update_state(
            state="FAILURE",
            meta={
                "doc_id": doc_id,
                "message": "Failed to mirror document.",
                "error": str(e),
                "exc_type": type(e).__name__,
            },
        )
        raise Ignore()

    finally:
        if loop:
            loop.close()
        if cache_store:
            cache_store.close()
        if lock:
            lock_service.release_lock(lock)
        redis_client.close()
