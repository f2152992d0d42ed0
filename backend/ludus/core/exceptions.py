"""
Domain errors raised by the service layer.

Each error is an HTTPException so FastAPI turns it into a client-facing
response without extra handlers; services stay free of status-code plumbing.
"""

from fastapi import HTTPException, status


class LudusError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, headers: dict | None = None):
        super().__init__(status_code=self.status_code, detail=detail, headers=headers)


class NotFoundError(LudusError):
    status_code = status.HTTP_404_NOT_FOUND


class BadRequestError(LudusError):
    status_code = status.HTTP_400_BAD_REQUEST


class BookingRuleError(BadRequestError):
    """Request is well-formed but violates a booking rule (date, minimum size, policy)."""


class CapacityExceededError(LudusError):
    """Requested participants would overflow the remaining capacity for the date."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, requested: int, remaining: int):
        self.requested = requested
        self.remaining = remaining
        super().__init__(
            f"Not enough capacity. Requested: {requested}, Remaining: {remaining}"
        )


class AuthenticationError(LudusError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class PermissionDeniedError(LudusError):
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(LudusError):
    status_code = status.HTTP_409_CONFLICT


class AdmissionBusyError(ConflictError):
    def __init__(self, detail: str = "Booking failed due to high demand. Please try again."):
        super().__init__(detail)
