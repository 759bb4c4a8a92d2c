"""In-Memory Repository Implementations"""
import copy
import threading
from typing import Optional, List, Dict
from uuid import UUID

from domain.repositories import (
    RoomRepository, ReservationRepository, BookingRequestRepository, UnitOfWork, ReferenceStore
)
from domain.entities import Room, Reservation, BookingRequest
from domain.exceptions import OverlapError


class InMemoryStore:
    """Shared tables behind the in-memory repositories"""

    def __init__(self):
        self.rooms: Dict[UUID, Room] = {}
        self.reservations: Dict[UUID, Reservation] = {}
        self.booking_requests: Dict[UUID, BookingRequest] = {}
        self.lock = threading.RLock()

    def snapshot(self) -> tuple:
        return (
            copy.deepcopy(self.rooms),
            copy.deepcopy(self.reservations),
            copy.deepcopy(self.booking_requests),
        )

    def restore(self, snapshot: tuple) -> None:
        self.rooms, self.reservations, self.booking_requests = snapshot


class InMemoryRoomRepository(RoomRepository):
    """In-memory implementation of RoomRepository"""

    def __init__(self, store: InMemoryStore):
        self._store = store

    def save(self, room: Room) -> Room:
        """Save room to memory"""
        self._store.rooms[room.room_id] = room.model_copy(deep=True)
        return room

    def find_by_id(self, room_id: UUID) -> Optional[Room]:
        """Find room by ID"""
        room = self._store.rooms.get(room_id)
        return room.model_copy(deep=True) if room else None

    def find_all(self) -> List[Room]:
        """Find all rooms"""
        return [r.model_copy(deep=True) for r in self._store.rooms.values()]

    def update(self, room: Room) -> Room:
        """Update room"""
        if room.room_id in self._store.rooms:
            self._store.rooms[room.room_id] = room.model_copy(deep=True)
            return room
        raise ValueError("Room not found")

    def delete(self, room_id: UUID) -> bool:
        """Delete room"""
        if room_id in self._store.rooms:
            del self._store.rooms[room_id]
            return True
        return False


class InMemoryReservationRepository(ReservationRepository):
    """In-memory implementation of ReservationRepository with a per-room exclusion constraint"""

    def __init__(self, store: InMemoryStore):
        self._store = store

    def add(self, reservation: Reservation) -> Reservation:
        """Insert reservation"""
        if reservation.reservation_id in self._store.reservations:
            raise ValueError("Reservation already exists")
        self._check_exclusion(reservation)
        self._store.reservations[reservation.reservation_id] = reservation.model_copy(deep=True)
        return reservation

    def find_by_id(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        reservation = self._store.reservations.get(reservation_id)
        return reservation.model_copy(deep=True) if reservation else None

    def find_by_room(self, room_id: UUID, exclude_reservation_id: Optional[UUID] = None) -> List[Reservation]:
        """Find reservations of a room"""
        return [
            r.model_copy(deep=True) for r in self._store.reservations.values()
            if r.room_id == room_id and r.reservation_id != exclude_reservation_id
        ]

    def update(self, reservation: Reservation) -> Reservation:
        """Update reservation"""
        if reservation.reservation_id not in self._store.reservations:
            raise ValueError("Reservation not found")
        self._check_exclusion(reservation)
        self._store.reservations[reservation.reservation_id] = reservation.model_copy(deep=True)
        return reservation

    def delete_by_booking_request(self, booking_request_id: UUID) -> int:
        """Delete reservations owned by a booking request"""
        return self._delete_where(lambda r: r.booking_request_id == booking_request_id)

    def delete_by_room(self, room_id: UUID) -> int:
        """Delete reservations of a room"""
        return self._delete_where(lambda r: r.room_id == room_id)

    def _delete_where(self, predicate) -> int:
        doomed = [rid for rid, r in self._store.reservations.items() if predicate(r)]
        for reservation_id in doomed:
            del self._store.reservations[reservation_id]
        return len(doomed)

    def _check_exclusion(self, reservation: Reservation) -> None:
        for other in self._store.reservations.values():
            if (
                other.room_id == reservation.room_id
                and other.reservation_id != reservation.reservation_id
                and other.conflicts_with(reservation.interval)
            ):
                raise OverlapError()


class InMemoryBookingRequestRepository(BookingRequestRepository):
    """In-memory implementation of BookingRequestRepository"""

    def __init__(self, store: InMemoryStore):
        self._store = store

    def add(self, booking_request: BookingRequest) -> BookingRequest:
        """Insert booking request"""
        if booking_request.booking_request_id in self._store.booking_requests:
            raise ValueError("Booking request already exists")
        self._store.booking_requests[booking_request.booking_request_id] = booking_request.model_copy(deep=True)
        return booking_request

    def find_by_id(self, booking_request_id: UUID) -> Optional[BookingRequest]:
        """Find booking request by ID"""
        booking = self._store.booking_requests.get(booking_request_id)
        return booking.model_copy(deep=True) if booking else None

    def find_by_user(self, user_id: UUID) -> List[BookingRequest]:
        """Find booking requests held by a user"""
        return [
            b.model_copy(deep=True) for b in self._store.booking_requests.values()
            if b.user_id == user_id
        ]

    def find_by_room(self, room_id: UUID) -> List[BookingRequest]:
        """Find booking requests for a room"""
        return [
            b.model_copy(deep=True) for b in self._store.booking_requests.values()
            if b.room_id == room_id
        ]

    def find_all(self) -> List[BookingRequest]:
        """Find all booking requests"""
        return [b.model_copy(deep=True) for b in self._store.booking_requests.values()]

    def update(self, booking_request: BookingRequest) -> BookingRequest:
        """Update booking request"""
        if booking_request.booking_request_id in self._store.booking_requests:
            self._store.booking_requests[booking_request.booking_request_id] = booking_request.model_copy(deep=True)
            return booking_request
        raise ValueError("Booking request not found")

    def delete(self, booking_request_id: UUID) -> bool:
        """Delete booking request"""
        if booking_request_id in self._store.booking_requests:
            del self._store.booking_requests[booking_request_id]
            return True
        return False


class InMemoryUnitOfWork(UnitOfWork):
    """
    Transaction over an InMemoryStore.

    begin() takes the store lock, so concurrent check-then-commit sequences run
    one after another, and snapshots the tables; rollback() puts the snapshot
    back.
    """

    def __init__(self, store: InMemoryStore):
        self._store = store
        self.rooms = InMemoryRoomRepository(store)
        self.reservations = InMemoryReservationRepository(store)
        self.booking_requests = InMemoryBookingRequestRepository(store)
        self._snapshot = None
        self._committed = False

    @property
    def committed(self) -> bool:
        return self._committed

    def begin(self) -> None:
        self._store.lock.acquire()
        self._snapshot = self._store.snapshot()
        self._committed = False

    def commit(self) -> None:
        self._snapshot = None
        self._committed = True

    def rollback(self) -> None:
        if self._snapshot is not None:
            self._store.restore(self._snapshot)
        self._committed = False

    def end(self) -> None:
        self._snapshot = None
        self._store.lock.release()


class InMemoryReferenceStore(ReferenceStore):
    """Keeps uploaded reference bundles in memory, keyed by path"""

    def __init__(self):
        self._bundles: Dict[str, Dict[str, bytes]] = {}

    def store(self, path: str, files: dict) -> str:
        bundle = self._bundles.setdefault(path, {})
        bundle.update(files)
        return path

    def exists(self, path: str) -> bool:
        return path in self._bundles

    def files(self, path: str) -> Dict[str, bytes]:
        return dict(self._bundles.get(path, {}))

    def delete(self, path: str) -> bool:
        return self._bundles.pop(path, None) is not None
