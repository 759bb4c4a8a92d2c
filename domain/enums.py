"""Domain Enums"""
from enum import Enum


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def from_date(cls, value) -> "Weekday":
        """Weekday of a date or datetime"""
        return list(cls)[value.weekday()]


class BookingStatus(str, Enum):
    COMMITTED = "COMMITTED"
    UPDATED = "UPDATED"


class ErrorKind(str, Enum):
    ROOM_UNAVAILABLE = "RoomUnavailable"
    TOO_SOON = "TooSoon"
    TOO_LATE = "TooLate"
    OUTSIDE_AVAILABILITY = "OutsideAvailability"
    OVERLAP = "Overlap"
    VALIDATION_INPUT = "ValidationInputError"
