"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import Optional, List
from uuid import UUID

from domain.entities import Room, Reservation, BookingRequest


class RoomRepository(ABC):
    """Repository interface for Room Aggregate (with its windows and restrictions)"""

    @abstractmethod
    def save(self, room: Room) -> Room:
        """Save room"""
        pass

    @abstractmethod
    def find_by_id(self, room_id: UUID) -> Optional[Room]:
        """Find room by ID"""
        pass

    @abstractmethod
    def find_all(self) -> List[Room]:
        """Find all rooms"""
        pass

    @abstractmethod
    def update(self, room: Room) -> Room:
        """Update room"""
        pass

    @abstractmethod
    def delete(self, room_id: UUID) -> bool:
        """Delete room together with its availabilities and restrictions"""
        pass


class ReservationRepository(ABC):
    """
    Repository interface for Reservations.

    Implementations must refuse to store two overlapping reservations for the
    same room and raise OverlapError instead.
    """

    @abstractmethod
    def add(self, reservation: Reservation) -> Reservation:
        """Insert reservation"""
        pass

    @abstractmethod
    def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        pass

    @abstractmethod
    def find_by_room(self, room_id: UUID, exclude_reservation_id: Optional[UUID] = None) -> List[Reservation]:
        """Find reservations of a room, optionally leaving one out"""
        pass

    @abstractmethod
    def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        pass

    @abstractmethod
    def delete_by_booking_request(self, booking_request_id: UUID) -> int:
        """Delete every reservation of a booking request, returns the count"""
        pass

    @abstractmethod
    def delete_by_room(self, room_id: UUID) -> int:
        """Delete every reservation of a room, returns the count"""
        pass


class BookingRequestRepository(ABC):
    """Repository interface for BookingRequest Aggregate"""

    @abstractmethod
    def add(self, booking_request: BookingRequest) -> BookingRequest:
        """Insert booking request"""
        pass

    @abstractmethod
    def find_by_id(self, booking_request_id: UUID) -> Optional[BookingRequest]:
        """Find booking request by ID"""
        pass

    @abstractmethod
    def find_by_user(self, user_id: UUID) -> List[BookingRequest]:
        """Find booking requests held by a user"""
        pass

    @abstractmethod
    def find_by_room(self, room_id: UUID) -> List[BookingRequest]:
        """Find booking requests for a room"""
        pass

    @abstractmethod
    def find_all(self) -> List[BookingRequest]:
        """Find all booking requests"""
        pass

    @abstractmethod
    def update(self, booking_request: BookingRequest) -> BookingRequest:
        """Update booking request"""
        pass

    @abstractmethod
    def delete(self, booking_request_id: UUID) -> bool:
        """Delete booking request"""
        pass


class UnitOfWork(ABC):
    """
    Transaction boundary around the repositories.

    Used as a context manager; changes are kept only when commit() is called
    before the block exits. Leaving the block without committing, or with an
    exception, rolls everything back.
    """

    rooms: RoomRepository
    reservations: ReservationRepository
    booking_requests: BookingRequestRepository

    def __enter__(self) -> "UnitOfWork":
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is not None or not self.committed:
                self.rollback()
        finally:
            self.end()

    @property
    @abstractmethod
    def committed(self) -> bool:
        pass

    @abstractmethod
    def begin(self) -> None:
        pass

    @abstractmethod
    def commit(self) -> None:
        pass

    @abstractmethod
    def rollback(self) -> None:
        pass

    @abstractmethod
    def end(self) -> None:
        """Release whatever begin() acquired"""
        pass


class ReferenceStore(ABC):
    """Storage for uploaded reference file bundles"""

    @abstractmethod
    def store(self, path: str, files: dict) -> str:
        """Store files (name -> bytes) under path, returns the path"""
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def delete(self, path: str) -> bool:
        pass
