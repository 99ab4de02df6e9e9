import pytest
from unittest.mock import Mock, patch
from redis.lock import Lock
from redis.exceptions import LockError
from pagemirror.lock.service import LockService
from pagemirror.common.redis import RedisClient
from pagemirror.common.exceptions import ResourceLockedException

@pytest.fixture
def mock_redis_client() -> Mock:
    return Mock(RedisClient)

@pytest.fixture
def lock_service(mock_redis_client: Mock) -> LockService:
    return LockService(redis_client=mock_redis_client)

def test_acquire_lock(lock_service: LockService, mock_redis_client: Mock) -> None:
    mock_lock = Mock(Lock)
    mock_lock.acquire.return_value = True
    mock_redis_client.lock.return_value = mock_lock
    lock = lock_service.acquire_lock("doc-1", timeout=60)
    assert lock is mock_lock
    mock_redis_client.lock.assert_called_with("lock:mirror:doc-1", timeout=60)

def test_acquire_lock_failure(lock_service: LockService, mock_redis_client: Mock) -> None:
    mock_lock = Mock(Lock)
    mock_lock.acquire.return_value = False
    mock_redis_client.lock.return_value = mock_lock
    with pytest.raises(ResourceLockedException, match="already a mirror task running for document 'doc-1'"):
        lock_service.acquire_lock("doc-1")

@pytest.mark.asyncio
async def test_renew_lock(lock_service: LockService) -> None:
    mock_lock = Mock(Lock)
    mock_lock.extend.side_effect = [None, LockError]
    with patch("asyncio.sleep", return_value=None):
        await lock_service.renew_lock(mock_lock, extend_time=60, renewal_interval=30)
    assert mock_lock.extend.call_count == 2

def test_release_lock(lock_service: LockService) -> None:
    mock_lock = Mock(Lock)
    lock_service.release_lock(mock_lock)
    mock_lock.release.assert_called()

def test_release_lock_failure(lock_service: LockService) -> None:
    mock_lock = Mock(Lock)
    mock_lock.release.side_effect = LockError
    with patch("logging.Logger.exception") as mock_logger_exception:
        lock_service.release_lock(mock_lock)
        mock_logger_exception.assert_called()
