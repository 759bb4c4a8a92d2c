"""Application Services - Business use cases"""
import logging
from uuid import UUID
from datetime import datetime, time
from typing import Callable, Dict, List, Optional, Tuple

from domain.repositories import UnitOfWork, ReferenceStore
from domain.entities import Room, Reservation, BookingRequest
from domain.enums import RoomStatus, Weekday
from domain.exceptions import (
    SchedulingError, OverlapError, ValidationInputError, BatchRejectedError
)
from domain.services import ConflictDetector, ReservationValidator
from domain.value_objects import TimeInterval, EventDetails, ReferenceArtifact, AvailabilityWindow, AdvanceRestriction

booking_logger = logging.getLogger("scheduler.booking")
rooms_logger = logging.getLogger("scheduler.rooms")


def build_interval(start: Optional[datetime], end: Optional[datetime]) -> TimeInterval:
    """Build a TimeInterval, reporting malformed input as ValidationInputError"""
    if start is None or end is None:
        raise ValidationInputError("Both start time and end time are required")
    # Reservations are wall-clock times of the room; aware input is converted to naive local time
    if start.tzinfo is not None:
        start = start.astimezone().replace(tzinfo=None)
    if end.tzinfo is not None:
        end = end.astimezone().replace(tzinfo=None)
    if end <= start:
        raise ValidationInputError("End time must be after start time")
    return TimeInterval(start=start, end=end)


class BookingService:
    """
    Service for BookingRequest use cases.

    Validates candidate reservations against persisted state and commits a
    whole booking request, or nothing, inside one unit of work.
    """

    def __init__(self, uow: UnitOfWork, reference_store: Optional[ReferenceStore] = None):
        self.uow = uow
        self.reference_store = reference_store

    def _validator(self) -> ReservationValidator:
        return ReservationValidator(ConflictDetector(self.uow.reservations))

    def _get_room(self, room_id: UUID) -> Room:
        room = self.uow.rooms.find_by_id(room_id)
        if room is None:
            raise ValidationInputError("Room not found")
        return room

    # ==================== SCHEDULING ====================
    def schedule(
        self,
        room_id: UUID,
        user_id: UUID,
        role: Optional[str],
        reference_now: datetime,
        intervals: List[TimeInterval],
        event: Optional[EventDetails] = None
    ) -> BookingRequest:
        """Create a booking request with all of its reservations, or none of them"""
        if not intervals:
            raise ValidationInputError("At least one reservation is required")

        with self.uow:
            room = self._get_room(room_id)
            validator = self._validator()

            errors: List[Tuple[int, SchedulingError]] = []
            seen: List[TimeInterval] = []
            for index, interval in enumerate(intervals):
                try:
                    if interval in seen:
                        raise OverlapError("This reservation is listed more than once in the request.")
                    validator.validate(room, role, reference_now, interval)
                except SchedulingError as e:
                    errors.append((index, e))
                seen.append(interval)

            if errors:
                booking_logger.info(
                    "Rejected booking request for room %s by user %s: %s (%d of %d candidates failed)",
                    room_id, user_id, errors[0][1].kind.value, len(errors), len(intervals)
                )
                raise BatchRejectedError(errors)

            booking_request = BookingRequest.create(
                user_id=user_id,
                room_id=room_id,
                intervals=intervals,
                event=event
            )
            self.uow.booking_requests.add(booking_request)
            for index, reservation in enumerate(booking_request.reservations):
                try:
                    self.uow.reservations.add(reservation)
                except OverlapError as e:
                    # storage exclusion constraint: candidates of one batch overlapping each other
                    raise BatchRejectedError([(index, e)])
            self.uow.commit()

        booking_logger.info(
            "Booking request %s committed for room %s by user %s with %d reservation(s)",
            booking_request.booking_request_id, room_id, user_id, len(intervals)
        )
        return booking_request

    def check_candidate(
        self,
        room_id: UUID,
        role: Optional[str],
        reference_now: datetime,
        interval: TimeInterval,
        exclude_reservation_id: Optional[UUID] = None
    ) -> None:
        """Dry-run validation of a single interval; raises on the first failure"""
        with self.uow:
            room = self._get_room(room_id)
            self._validator().validate(room, role, reference_now, interval, exclude_reservation_id)

    def reschedule(
        self,
        reservation_id: UUID,
        role: Optional[str],
        reference_now: datetime,
        new_interval: TimeInterval
    ) -> Optional[Reservation]:
        """Move one reservation to a new interval, leaving it untouched on any violation"""
        with self.uow:
            reservation = self.uow.reservations.find_by_id(reservation_id)
            if not reservation:
                return None

            room = self._get_room(reservation.room_id)
            try:
                self._validator().validate(
                    room, role, reference_now, new_interval, exclude_reservation_id=reservation_id
                )
            except SchedulingError as e:
                booking_logger.info("Rejected reschedule of reservation %s: %s", reservation_id, e.kind.value)
                raise

            reservation.move_to(new_interval)
            self.uow.reservations.update(reservation)

            booking_request = self.uow.booking_requests.find_by_id(reservation.booking_request_id)
            if booking_request:
                booking_request.replace_reservation(reservation)
                self.uow.booking_requests.update(booking_request)
            self.uow.commit()

        booking_logger.info(
            "Reservation %s moved to %s - %s", reservation_id, new_interval.start, new_interval.end
        )
        return reservation

    # ==================== LIFECYCLE ====================
    def attach_reference(self, booking_request_id: UUID, files: Dict[str, bytes]) -> Optional[BookingRequest]:
        """Store reference files and record their location on the booking request"""
        if self.reference_store is None:
            raise RuntimeError("No reference store configured")
        if not files:
            raise ValidationInputError("At least one reference file is required")

        with self.uow:
            booking_request = self.uow.booking_requests.find_by_id(booking_request_id)
            if not booking_request:
                return None
            path = self._reference_path(booking_request)

        self.reference_store.store(path, files)

        with self.uow:
            booking_request = self.uow.booking_requests.find_by_id(booking_request_id)
            if not booking_request:
                return None
            booking_request.attach_reference(ReferenceArtifact(path=path))
            self.uow.booking_requests.update(booking_request)
            self.uow.commit()

        booking_logger.info("Reference %s attached to booking request %s", path, booking_request_id)
        return booking_request

    def _reference_path(self, booking_request: BookingRequest) -> str:
        # A bundle keeps its path for life, even after the booking is rescheduled
        if booking_request.reference:
            return booking_request.reference.path
        path = ReferenceArtifact.path_for(booking_request.room_id, booking_request.first_start())
        taken = any(
            other.reference and other.reference.path == path
            for other in self.uow.booking_requests.find_by_room(booking_request.room_id)
            if other.booking_request_id != booking_request.booking_request_id
        )
        if taken:
            path = f"{path}_{booking_request.booking_request_id}"
        return path

    def delete_booking_request(self, booking_request_id: UUID) -> bool:
        """Delete a booking request, its reservations and its reference bundle"""
        with self.uow:
            booking_request = self.uow.booking_requests.find_by_id(booking_request_id)
            if not booking_request:
                return False
            removed = self.uow.reservations.delete_by_booking_request(booking_request_id)
            self.uow.booking_requests.delete(booking_request_id)
            self.uow.commit()

        if booking_request.reference and self.reference_store is not None:
            self.reference_store.delete(booking_request.reference.path)

        booking_logger.info(
            "Booking request %s deleted along with %d reservation(s)", booking_request_id, removed
        )
        return True

    # ==================== QUERIES ====================
    def get_booking_request(self, booking_request_id: UUID) -> Optional[BookingRequest]:
        """Get booking request by ID"""
        with self.uow:
            return self.uow.booking_requests.find_by_id(booking_request_id)

    def get_booking_requests_by_user(self, user_id: UUID) -> List[BookingRequest]:
        """Get all booking requests held by a user"""
        with self.uow:
            return self.uow.booking_requests.find_by_user(user_id)

    def get_all_booking_requests(self) -> List[BookingRequest]:
        """Get all booking requests"""
        with self.uow:
            return self.uow.booking_requests.find_all()

    def get_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        """Get reservation by ID"""
        with self.uow:
            return self.uow.reservations.find_by_id(reservation_id)

    def get_reservations_by_room(self, room_id: UUID) -> List[Reservation]:
        """Get reservations of a room ordered by start time"""
        with self.uow:
            reservations = self.uow.reservations.find_by_room(room_id)
        return sorted(reservations, key=lambda r: r.interval.start)


class RoomService:
    """Service for Room use cases"""

    def __init__(self, uow: UnitOfWork, reference_store: Optional[ReferenceStore] = None):
        self.uow = uow
        self.reference_store = reference_store

    def create_room(
        self,
        name: str,
        min_days_advance: int = 0,
        max_days_advance: Optional[int] = None,
        status: RoomStatus = RoomStatus.AVAILABLE,
        attributes: Optional[Dict[str, bool]] = None
    ) -> Room:
        """Create a room"""
        room = Room.create(
            name=name,
            min_days_advance=min_days_advance,
            max_days_advance=max_days_advance,
            status=status,
            attributes=attributes
        )
        with self.uow:
            self.uow.rooms.save(room)
            self.uow.commit()
        rooms_logger.info("Room %s (%s) created", room.room_id, room.name)
        return room

    def get_room(self, room_id: UUID) -> Optional[Room]:
        """Get room by ID"""
        with self.uow:
            return self.uow.rooms.find_by_id(room_id)

    def get_all_rooms(self) -> List[Room]:
        """Get all rooms"""
        with self.uow:
            return self.uow.rooms.find_all()

    def search_rooms(self, role: Optional[str]) -> List[Room]:
        """Rooms the role may book: open for booking and not barred for the role"""
        with self.uow:
            rooms = self.uow.rooms.find_all()
        return sorted(
            (r for r in rooms if r.is_open_for_booking() and not r.is_barred_for(role)),
            key=lambda r: r.name
        )

    def add_availability(
        self,
        room_id: UUID,
        weekday: Weekday,
        opening_time: time,
        closing_time: time
    ) -> Optional[AvailabilityWindow]:
        """Add a weekly availability window to a room"""
        return self._modify(room_id, lambda room: room.add_availability(weekday, opening_time, closing_time))

    def remove_availability(self, room_id: UUID, window_id: UUID) -> Optional[bool]:
        """Remove an availability window from a room"""
        return self._modify(room_id, lambda room: room.remove_availability(window_id))

    def set_restriction(
        self,
        room_id: UUID,
        role: str,
        min_days_advance: Optional[int] = None,
        max_days_advance: Optional[int] = None
    ) -> Optional[AdvanceRestriction]:
        """Set the advance-booking override of a role for a room"""
        return self._modify(
            room_id, lambda room: room.set_restriction(role, min_days_advance, max_days_advance)
        )

    def remove_restriction(self, room_id: UUID, role: str) -> Optional[bool]:
        """Remove the override of a role for a room"""
        return self._modify(room_id, lambda room: room.remove_restriction(role))

    def update_status(self, room_id: UUID, status: RoomStatus) -> Optional[Room]:
        """Open or close a room"""
        def change(room: Room) -> Room:
            room.change_status(status)
            return room
        return self._modify(room_id, change)

    def delete_room(self, room_id: UUID) -> bool:
        """Delete a room, its windows and restrictions, and every booking made for it"""
        with self.uow:
            if not self.uow.rooms.find_by_id(room_id):
                return False
            bookings = self.uow.booking_requests.find_by_room(room_id)
            for booking_request in bookings:
                self.uow.booking_requests.delete(booking_request.booking_request_id)
            self.uow.reservations.delete_by_room(room_id)
            self.uow.rooms.delete(room_id)
            self.uow.commit()

        if self.reference_store is not None:
            for booking_request in bookings:
                if booking_request.reference:
                    self.reference_store.delete(booking_request.reference.path)
        rooms_logger.info("Room %s deleted with %d booking request(s)", room_id, len(bookings))
        return True

    def _modify(self, room_id: UUID, change: Callable[[Room], object]):
        with self.uow:
            room = self.uow.rooms.find_by_id(room_id)
            if not room:
                return None
            try:
                result = change(room)
            except ValueError as e:
                raise ValueError(f"Cannot modify room: {str(e)}")
            self.uow.rooms.update(room)
            self.uow.commit()
        rooms_logger.info("Room %s updated (version %d)", room_id, room.version)
        return result
