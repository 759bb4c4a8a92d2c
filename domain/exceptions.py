"""Domain Exceptions - scheduling verdicts surfaced to callers"""
from typing import List, Tuple

from domain.enums import ErrorKind

OUTSIDE_AVAILABILITY_MESSAGE = "These dates and times are not within the room's availabilities!"


class SchedulingError(ValueError):
    """Base class for every rejected scheduling request"""

    kind: ErrorKind = ErrorKind.VALIDATION_INPUT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}


class RoomUnavailableError(SchedulingError):
    kind = ErrorKind.ROOM_UNAVAILABLE

    def __init__(self, message: str = "This room is not available for booking."):
        super().__init__(message)


class TooSoonError(SchedulingError):
    kind = ErrorKind.TOO_SOON

    def __init__(self, min_days: int):
        super().__init__(f"Reservations for this room must be made later than {min_days} days from now.")
        self.min_days = min_days

    def to_dict(self) -> dict:
        return {**super().to_dict(), "min_days": self.min_days}


class TooLateError(SchedulingError):
    kind = ErrorKind.TOO_LATE

    def __init__(self, max_days: int):
        super().__init__(f"Reservations for this room must be made sooner than {max_days} days from now.")
        self.max_days = max_days

    def to_dict(self) -> dict:
        return {**super().to_dict(), "max_days": self.max_days}


class OutsideAvailabilityError(SchedulingError):
    kind = ErrorKind.OUTSIDE_AVAILABILITY

    def __init__(self, message: str = OUTSIDE_AVAILABILITY_MESSAGE):
        super().__init__(message)


class OverlapError(SchedulingError):
    kind = ErrorKind.OVERLAP

    def __init__(self, message: str = "This time slot overlaps an existing reservation for the room."):
        super().__init__(message)


class ValidationInputError(SchedulingError):
    kind = ErrorKind.VALIDATION_INPUT


class BatchRejectedError(SchedulingError):
    """
    Raised when at least one candidate of a batch fails validation.

    Carries the kind and message of the first failure plus every
    (candidate index, error) pair, so callers can show all of them.
    """

    def __init__(self, errors: List[Tuple[int, SchedulingError]]):
        if not errors:
            raise ValueError("BatchRejectedError needs at least one error")
        first = errors[0][1]
        super().__init__(first.message)
        self.kind = first.kind
        self.errors = errors

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "errors": [{"index": index, **error.to_dict()} for index, error in self.errors],
        }
