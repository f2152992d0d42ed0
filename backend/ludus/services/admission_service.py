"""
Redis-backed admission lock for multi-worker deployments.

Every API worker takes the same Redis lock for an admission key, so two
requests for the same activity/date are serialized even when they land on
different processes.

Degraded mode:
  If Redis is disabled or fails while taking the lock, we fall back to the
  in-process LocalAdmissionLock and count the error. Cross-process
  serialization then rests on the activity row lock taken inside the
  admission transaction (SELECT ... FOR UPDATE on PostgreSQL).

The lock carries a TTL so a crashed worker cannot hold a key forever.
A request that outlives the TTL loses the lock; releasing it then raises
LockNotOwnedError, which we log.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from redis.asyncio.lock import Lock
from redis.exceptions import LockError, RedisError

from ludus.core.exceptions import AdmissionBusyError
from ludus.core.logging import get_logger
from ludus.core.metrics import admission_lock_wait, record_admission_lock, redis_lock_errors
from ludus.infrastructure.redis_client import get_redis
from ludus.services.interfaces.admission import AdmissionLock
from ludus.services.interfaces.local_admission import LocalAdmissionLock

logger = get_logger(__name__)


class RedisAdmissionLock(AdmissionLock):
    """
    Distributed admission lock.

    Use when:
    - More than one API worker serves bookings
    - Flash sales where the same activity/date is hammered
    """

    name = "redis"

    def __init__(
        self,
        timeout: float = 10.0,
        ttl: int = 30,
        fallback: Optional[LocalAdmissionLock] = None,
    ):
        self.timeout = timeout
        self.ttl = ttl
        self.fallback = fallback or LocalAdmissionLock(timeout=timeout)

    async def _acquire(self, key: str) -> Optional[Lock]:
        """Return the held lock, or None when Redis is unusable."""
        client = await get_redis()
        if client is None:
            return None

        lock = client.lock(f"lock:{key}", timeout=self.ttl, blocking_timeout=self.timeout)
        try:
            acquired = await lock.acquire()
        except RedisError as e:
            redis_lock_errors.inc()
            logger.error("admission_redis_lock_error", key=key, error=str(e))
            return None

        if not acquired:
            record_admission_lock(self.name, "timeout")
            logger.warning("admission_lock_timeout", key=key, timeout=self.timeout)
            raise AdmissionBusyError()
        return lock

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        started = time.perf_counter()
        lock = await self._acquire(key)

        if lock is None:
            record_admission_lock(self.name, "degraded")
            logger.warning("admission_lock_degraded", key=key, fallback=self.fallback.name)
            async with self.fallback.hold(key):
                yield
            return

        admission_lock_wait.observe(time.perf_counter() - started)
        record_admission_lock(self.name, "acquired")
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError as e:
                redis_lock_errors.inc()
                logger.warning("admission_lock_expired", key=key, ttl=self.ttl, error=str(e))
            except RedisError as e:
                redis_lock_errors.inc()
                logger.error("admission_redis_release_error", key=key, error=str(e))
