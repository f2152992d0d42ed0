"""
In-process admission lock: one asyncio.Lock per key.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from ludus.core.exceptions import AdmissionBusyError
from ludus.core.logging import get_logger
from ludus.core.metrics import admission_lock_wait, record_admission_lock
from ludus.services.interfaces.admission import AdmissionLock

logger = get_logger(__name__)


class LocalAdmissionLock(AdmissionLock):
    """
    Per-key asyncio locks, dropped once nobody holds or waits on them.

    Use when:
    - A single API worker process serves bookings
    - Tests and development
    """

    name = "local"

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def active_keys(self) -> list[str]:
        return list(self._locks)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        started = time.perf_counter()
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self.timeout)
            except asyncio.TimeoutError:
                record_admission_lock(self.name, "timeout")
                logger.warning("admission_lock_timeout", key=key, timeout=self.timeout)
                raise AdmissionBusyError()

            admission_lock_wait.observe(time.perf_counter() - started)
            record_admission_lock(self.name, "acquired")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                self._locks.pop(key, None)
