"""Domain Entities - Aggregates"""
from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime, time
from typing import Optional, List, Dict, Tuple

from domain.enums import RoomStatus, Weekday, BookingStatus
from domain.value_objects import (
    TimeInterval, AvailabilityWindow, AdvanceRestriction, EventDetails, ReferenceArtifact
)


class Room(BaseModel):
    """Room Aggregate Root Entity"""

    # Identity
    room_id: UUID = Field(default_factory=uuid4)
    name: str

    # Status & defaults
    status: RoomStatus = RoomStatus.AVAILABLE
    min_days_advance: int = Field(ge=0, default=0)
    max_days_advance: Optional[int] = Field(ge=0, default=None)

    # Flags such as {"alcohol": True}
    attributes: Dict[str, bool] = {}

    # Collections (child entities)
    availabilities: List[AvailabilityWindow] = []
    restrictions: Dict[str, AdvanceRestriction] = {}

    # Metadata
    created_at: datetime = Field(default_factory=datetime.utcnow)
    modified_at: datetime = Field(default_factory=datetime.utcnow)
    version: int = 1

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        name: str,
        min_days_advance: int = 0,
        max_days_advance: Optional[int] = None,
        status: RoomStatus = RoomStatus.AVAILABLE,
        attributes: Optional[Dict[str, bool]] = None
    ) -> "Room":
        """Create new room with validation"""
        if not name or not name.strip():
            raise ValueError("Room name is required")
        Room._validate_advance_range(min_days_advance, max_days_advance)

        return Room(
            name=name.strip(),
            status=status,
            min_days_advance=min_days_advance,
            max_days_advance=max_days_advance,
            attributes=dict(attributes or {})
        )

    # ==================== MODIFICATION METHODS ====================
    def add_availability(self, weekday: Weekday, opening_time: time, closing_time: time) -> AvailabilityWindow:
        """Add a recurring weekly availability window"""
        window = AvailabilityWindow(
            weekday=weekday,
            opening_time=opening_time,
            closing_time=closing_time
        )
        self.availabilities.append(window)
        self._touch()
        return window

    def remove_availability(self, window_id: UUID) -> bool:
        """Remove an availability window"""
        remaining = [w for w in self.availabilities if w.window_id != window_id]
        if len(remaining) == len(self.availabilities):
            return False
        self.availabilities = remaining
        self._touch()
        return True

    def set_restriction(
        self,
        role: str,
        min_days_advance: Optional[int] = None,
        max_days_advance: Optional[int] = None
    ) -> AdvanceRestriction:
        """Override the advance-booking range for a role"""
        restriction = AdvanceRestriction(
            role=role,
            min_days_advance=min_days_advance,
            max_days_advance=max_days_advance
        )
        Room._validate_advance_range(*self._resolve(restriction))
        self.restrictions[role] = restriction
        self._touch()
        return restriction

    def remove_restriction(self, role: str) -> bool:
        """Drop a role override, falling back to room defaults"""
        if role not in self.restrictions:
            return False
        del self.restrictions[role]
        self._touch()
        return True

    def change_status(self, status: RoomStatus) -> None:
        """Open or close the room for bookings"""
        self.status = status
        self._touch()

    # ==================== QUERY METHODS ====================
    def is_open_for_booking(self) -> bool:
        return self.status == RoomStatus.AVAILABLE

    def windows_for(self, weekday: Weekday) -> List[AvailabilityWindow]:
        return [w for w in self.availabilities if w.weekday == weekday]

    def restriction_for(self, role: Optional[str]) -> Optional[AdvanceRestriction]:
        if role is None:
            return None
        return self.restrictions.get(role)

    def is_barred_for(self, role: Optional[str]) -> bool:
        restriction = self.restriction_for(role)
        return restriction is not None and restriction.bars_role

    def advance_range_for(self, role: Optional[str]) -> Tuple[int, Optional[int]]:
        restriction = self.restriction_for(role)
        if restriction is None:
            return self.min_days_advance, self.max_days_advance
        return self._resolve(restriction)

    # ==================== PRIVATE METHODS ====================
    def _resolve(self, restriction: AdvanceRestriction) -> Tuple[int, Optional[int]]:
        minimum = restriction.min_days_advance
        maximum = restriction.max_days_advance
        return (
            self.min_days_advance if minimum is None else minimum,
            self.max_days_advance if maximum is None else maximum,
        )

    @staticmethod
    def _validate_advance_range(min_days: int, max_days: Optional[int]) -> None:
        if min_days < 0:
            raise ValueError("min_days_advance cannot be negative")
        if max_days is not None and max_days < min_days:
            raise ValueError("max_days_advance must be greater than or equal to min_days_advance")

    def _touch(self) -> None:
        self.modified_at = datetime.utcnow()
        self.version += 1


class Reservation(BaseModel):
    """Reservation Entity - owned by a BookingRequest, refers to a Room"""

    # Identity
    reservation_id: UUID = Field(default_factory=uuid4)

    # References
    room_id: UUID
    booking_request_id: UUID

    # Value Objects
    interval: TimeInterval

    # Metadata
    created_at: datetime = Field(default_factory=datetime.utcnow)
    modified_at: datetime = Field(default_factory=datetime.utcnow)
    version: int = 1

    class Config:
        from_attributes = True

    @property
    def start_time(self) -> datetime:
        return self.interval.start

    @property
    def end_time(self) -> datetime:
        return self.interval.end

    def move_to(self, new_interval: TimeInterval) -> None:
        """Change the reserved interval"""
        self.interval = new_interval
        self.modified_at = datetime.utcnow()
        self.version += 1

    def conflicts_with(self, interval: TimeInterval) -> bool:
        return self.interval.overlaps(interval)


class BookingRequest(BaseModel):
    """BookingRequest Aggregate Root Entity"""

    # Identity
    booking_request_id: UUID = Field(default_factory=uuid4)

    # References to other contexts
    user_id: UUID
    room_id: UUID

    # Collections (child entities)
    reservations: List[Reservation] = []

    # Value Objects
    reference: Optional[ReferenceArtifact] = None
    event: Optional[EventDetails] = None

    # Status
    status: BookingStatus = BookingStatus.COMMITTED

    # Metadata
    created_at: datetime = Field(default_factory=datetime.utcnow)
    modified_at: datetime = Field(default_factory=datetime.utcnow)
    version: int = 1

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        user_id: UUID,
        room_id: UUID,
        intervals: List[TimeInterval],
        event: Optional[EventDetails] = None
    ) -> "BookingRequest":
        """Create a booking request together with its reservations"""
        if not intervals:
            raise ValueError("A booking request needs at least one reservation")

        booking = BookingRequest(user_id=user_id, room_id=room_id, event=event)
        booking.reservations = [
            Reservation(
                room_id=room_id,
                booking_request_id=booking.booking_request_id,
                interval=interval
            )
            for interval in intervals
        ]
        return booking

    # ==================== MODIFICATION METHODS ====================
    def attach_reference(self, reference: ReferenceArtifact) -> None:
        """Record the stored reference bundle"""
        self.reference = reference
        self._touch()

    def replace_reservation(self, reservation: Reservation) -> None:
        """Swap in an updated copy of one of the owned reservations"""
        for index, existing in enumerate(self.reservations):
            if existing.reservation_id == reservation.reservation_id:
                self.reservations[index] = reservation
                self.status = BookingStatus.UPDATED
                self._touch()
                return
        raise ValueError("Reservation does not belong to this booking request")

    # ==================== QUERY METHODS ====================
    def first_start(self) -> datetime:
        return min(r.interval.start for r in self.reservations)

    def _touch(self) -> None:
        self.modified_at = datetime.utcnow()
        self.version += 1
