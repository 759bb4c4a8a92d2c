"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel, Field
from datetime import datetime, time
from uuid import UUID
from typing import Dict, List, Optional

from domain.enums import RoomStatus, Weekday


# ============================================================================
# ROOM SCHEMAS
# ============================================================================

class CreateRoomRequest(BaseModel):
    """Create room request DTO"""
    name: str
    status: RoomStatus = RoomStatus.AVAILABLE
    min_days_advance: int = Field(ge=0, default=0)
    max_days_advance: Optional[int] = Field(ge=0, default=None)
    attributes: Dict[str, bool] = {}


class UpdateRoomStatusRequest(BaseModel):
    """Update room status request DTO"""
    status: RoomStatus


class AvailabilityWindowRequest(BaseModel):
    """Add availability window request DTO"""
    weekday: Weekday
    opening_time: time
    closing_time: time


class RestrictionRequest(BaseModel):
    """Set role restriction request DTO; both bounds empty bars the role"""
    min_days_advance: Optional[int] = Field(None, ge=0)
    max_days_advance: Optional[int] = Field(None, ge=0)


class AvailabilityWindowResponse(BaseModel):
    """Availability window response DTO"""
    window_id: UUID
    weekday: str
    opening_time: time
    closing_time: time


class RestrictionResponse(BaseModel):
    """Role restriction response DTO"""
    role: str
    min_days_advance: Optional[int] = None
    max_days_advance: Optional[int] = None


class RoomResponse(BaseModel):
    """Room response DTO"""
    room_id: UUID
    name: str
    status: str
    min_days_advance: int
    max_days_advance: Optional[int] = None
    attributes: Dict[str, bool]
    availabilities: List[AvailabilityWindowResponse]
    restrictions: List[RestrictionResponse]
    created_at: datetime
    modified_at: datetime
    version: int


# ============================================================================
# BOOKING SCHEMAS
# ============================================================================

class IntervalRequest(BaseModel):
    """Candidate reservation interval DTO"""
    start_time: datetime
    end_time: datetime


class EventRequest(BaseModel):
    """Event metadata DTO (descriptive only)"""
    title: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    guest_speakers: Optional[str] = None
    attendees: Optional[int] = Field(None, ge=0)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    alcohol: bool = False


class CreateBookingRequest(BaseModel):
    """Create booking request DTO"""
    room_id: UUID
    reservations: List[IntervalRequest]
    event: Optional[EventRequest] = None


class CheckReservationRequest(BaseModel):
    """Dry-run validation request DTO"""
    room_id: UUID
    start_time: datetime
    end_time: datetime
    exclude_reservation_id: Optional[UUID] = None


class RescheduleReservationRequest(BaseModel):
    """Reschedule reservation request DTO"""
    start_time: datetime
    end_time: datetime


class ReservationResponse(BaseModel):
    """Reservation response DTO"""
    reservation_id: UUID
    room_id: UUID
    booking_request_id: UUID
    start_time: datetime
    end_time: datetime
    version: int


class BookingRequestResponse(BaseModel):
    """Booking request response DTO"""
    booking_request_id: UUID
    user_id: UUID
    room_id: UUID
    status: str
    reservations: List[ReservationResponse]
    reference: Optional[Dict[str, str]] = None
    event: Optional[EventRequest] = None
    created_at: datetime
    modified_at: datetime
    version: int


class CheckReservationResponse(BaseModel):
    """Dry-run validation response DTO"""
    valid: bool
    kind: Optional[str] = None
    message: Optional[str] = None


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class Token(BaseModel):
    """Token response DTO"""
    access_token: str
    token_type: str


class TokenData(BaseModel):
    """Token payload DTO"""
    username: Optional[str] = None


class UserResponse(BaseModel):
    """User response DTO"""
    user_id: UUID
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: str
    disabled: bool
