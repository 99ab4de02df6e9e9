import asyncio
import logging
from redis.lock import Lock
from redis.exceptions import LockError

from pagemirror.common.redis import RedisClient
from pagemirror.common.exceptions import ResourceLockedException, ResourceType

logger = logging.getLogger(__name__)


class LockService:
    """Keeps a single writer per document across task workers."""

    def __init__(self, redis_client: RedisClient) -> None:
        self.redis_client = redis_client

    def acquire_lock(self, doc_id: str, timeout: int = 120) -> Lock:
        lock = self.redis_client.lock(f"lock:mirror:{doc_id}", timeout=timeout)
        acquired = lock.acquire(blocking=False)
        if acquired:
            return lock
        else:
            raise ResourceLockedException(ResourceType.DOCUMENT, doc_id)

    async def renew_lock(
        self, lock: Lock, extend_time: int = 120, renewal_interval: int = 30
    ):
        while True:
            await asyncio.sleep(renewal_interval)
            try:
                lock.extend(extend_time)
            except LockError:
                logger.exception("Failed to renew lock")
                break

    def release_lock(self, lock: Lock):
        try:
            lock.release()
        except LockError:
            logger.exception("Error releasing lock")
