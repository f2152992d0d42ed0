"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .admission import AdmissionLock, admission_key
from .local_admission import LocalAdmissionLock

__all__ = ['AdmissionLock', 'LocalAdmissionLock', 'admission_key']
