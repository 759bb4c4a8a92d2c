"""Domain Services - scheduling rules that span several aggregates"""
import logging
from datetime import datetime
from typing import Optional, List, Tuple
from uuid import UUID

from domain.entities import Room, Reservation
from domain.enums import Weekday
from domain.exceptions import (
    RoomUnavailableError, TooSoonError, TooLateError, OutsideAvailabilityError, OverlapError
)
from domain.repositories import ReservationRepository
from domain.value_objects import TimeInterval, AvailabilityWindow

validation_logger = logging.getLogger("scheduler.validation")


class AvailabilityCalendar:
    """Answers whether an interval falls inside a room's weekly opening windows"""

    def windows_for(self, room: Room, weekday: Weekday) -> List[AvailabilityWindow]:
        return room.windows_for(weekday)

    def is_within_availability(self, room: Room, interval: TimeInterval) -> bool:
        # Every same-day piece of the interval needs its own covering window
        for day, start_offset, end_offset in interval.day_segments():
            windows = self.windows_for(room, Weekday.from_date(day))
            if not any(w.covers(start_offset, end_offset) for w in windows):
                return False
        return True


class AdvanceWindowPolicy:
    """Enforces how many days in advance a role may book a room"""

    def allowed_range(self, room: Room, role: Optional[str]) -> Tuple[int, Optional[int]]:
        """(min_days, max_days) for the role, max_days None meaning unbounded"""
        return room.advance_range_for(role)

    def check_advance(
        self,
        room: Room,
        role: Optional[str],
        reference_now: datetime,
        interval: TimeInterval
    ) -> None:
        min_days, max_days = self.allowed_range(room, role)
        if min_days == 0 and max_days == 0:
            return

        days_advance = interval.days_in_advance(reference_now)
        if days_advance < min_days:
            raise TooSoonError(min_days)
        if max_days is not None and days_advance > max_days:
            raise TooLateError(max_days)


class ConflictDetector:
    """Finds persisted reservations of the same room sharing an instant with a candidate"""

    def __init__(self, reservations: ReservationRepository):
        self.reservations = reservations

    def find_conflicts(
        self,
        room_id: UUID,
        interval: TimeInterval,
        exclude_reservation_id: Optional[UUID] = None
    ) -> List[Reservation]:
        existing = self.reservations.find_by_room(room_id, exclude_reservation_id)
        return [r for r in existing if r.conflicts_with(interval)]

    def has_conflict(
        self,
        room_id: UUID,
        interval: TimeInterval,
        exclude_reservation_id: Optional[UUID] = None
    ) -> bool:
        return bool(self.find_conflicts(room_id, interval, exclude_reservation_id))


class ReservationValidator:
    """
    Accepts or rejects a single candidate reservation.

    Checks run in a fixed order and the first failure is raised:
    room status, advance-booking range, availability windows, overlap.
    Nothing is written; callers commit on success.
    """

    def __init__(
        self,
        conflict_detector: ConflictDetector,
        calendar: Optional[AvailabilityCalendar] = None,
        advance_policy: Optional[AdvanceWindowPolicy] = None
    ):
        self.conflict_detector = conflict_detector
        self.calendar = calendar or AvailabilityCalendar()
        self.advance_policy = advance_policy or AdvanceWindowPolicy()

    def validate(
        self,
        room: Room,
        role: Optional[str],
        reference_now: datetime,
        interval: TimeInterval,
        exclude_reservation_id: Optional[UUID] = None
    ) -> None:
        if not room.is_open_for_booking() or room.is_barred_for(role):
            raise RoomUnavailableError()

        self.advance_policy.check_advance(room, role, reference_now, interval)

        if not self.calendar.is_within_availability(room, interval):
            raise OutsideAvailabilityError()

        if self.conflict_detector.has_conflict(room.room_id, interval, exclude_reservation_id):
            raise OverlapError()

        validation_logger.debug(
            "Accepted %s - %s for room %s (role %s)", interval.start, interval.end, room.room_id, role
        )
