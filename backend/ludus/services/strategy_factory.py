"""
Admission lock factory.
Configures which serialization strategy guards booking admission.
"""

from typing import Optional

from ludus.core.config import get_settings
from ludus.services.interfaces.admission import AdmissionLock
from ludus.services.interfaces.local_admission import LocalAdmissionLock
from ludus.services.admission_service import RedisAdmissionLock

settings = get_settings()


def get_admission_strategy() -> AdmissionLock:
    """
    Build the configured admission lock.

    - local (default): single worker, in-process locks
    - redis: shared lock across workers

    Selected via the ADMISSION_STRATEGY env var.
    """
    if settings.ADMISSION_STRATEGY == "redis":
        return RedisAdmissionLock(
            timeout=settings.ADMISSION_LOCK_TIMEOUT,
            ttl=settings.ADMISSION_LOCK_TTL,
        )
    return LocalAdmissionLock(timeout=settings.ADMISSION_LOCK_TIMEOUT)


# Singleton instance
_strategy: Optional[AdmissionLock] = None


def get_admission() -> AdmissionLock:
    """Get admission lock singleton."""
    global _strategy
    if _strategy is None:
        _strategy = get_admission_strategy()
    return _strategy
