"""
Admission lock strategy interface.
Allows swapping between different ways of serializing booking admission.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import date
from typing import Optional


def admission_key(activity_id: int, booking_date: date, start_time: Optional[str] = None) -> str:
    """
    Key that serializes admissions competing for one capacity pool.

    start_time is only part of the key in slot granularity; callers pass None
    when every slot of a date shares the pool.
    """
    key = f"admission:{activity_id}:{booking_date.isoformat()}"
    if start_time:
        key = f"{key}:{start_time}"
    return key


class AdmissionLock(ABC):
    """
    Serializes the count-then-insert sequence per admission key.

    Implementations:
    - LocalAdmissionLock: asyncio locks, single process
    - RedisAdmissionLock: Redis lock, shared across workers
    """

    name: str = "abstract"

    @abstractmethod
    def hold(self, key: str) -> AbstractAsyncContextManager[None]:
        """
        Hold the lock for `key` for the duration of the `async with` block.

        Raises:
            AdmissionBusyError: the lock could not be taken in time
        """
