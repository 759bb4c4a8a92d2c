import logging
from fastapi import FastAPI, HTTPException, Depends, File, UploadFile
from uuid import UUID
from typing import List
from fastapi.security import OAuth2PasswordRequestForm

from api.schemas import (
    # Rooms
    CreateRoomRequest, UpdateRoomStatusRequest, AvailabilityWindowRequest, RestrictionRequest,
    RoomResponse, AvailabilityWindowResponse, RestrictionResponse,
    # Bookings
    CreateBookingRequest, CheckReservationRequest, RescheduleReservationRequest,
    BookingRequestResponse, ReservationResponse, CheckReservationResponse, EventRequest,
    # Auth
    Token, UserResponse
)

from api.dependencies import (
    get_current_active_user, fake_users_db, get_user,
    get_booking_service, get_room_service, get_clock
)
from infrastructure.config import get_settings
from infrastructure.logging_config import LogConfig
from infrastructure.security import verify_password, create_access_token
from domain.auth import User
from domain.clock import Clock
from domain.exceptions import SchedulingError, ValidationInputError
from domain.value_objects import EventDetails

from application.services import BookingService, RoomService, build_interval

settings = get_settings()
LogConfig().initialize_loggers(settings)
api_logger = logging.getLogger("scheduler.api")

app = FastAPI(
    title=settings.APP_TITLE,
    description="Room reservation scheduling: availability windows, advance-booking limits and conflict checks",
    version=settings.APP_VERSION
)

# ============================================================================
# HEALTH
# ============================================================================

@app.get("/api/health", tags=["Health"])
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

# ============================================================================
# AUTH ENDPOINTS
# ============================================================================

@app.post("/token", response_model=Token, tags=["Auth"])
def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends()):
    user = get_user(fake_users_db, form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=401,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token = create_access_token(data={"sub": user.username})
    return {"access_token": access_token, "token_type": "bearer"}

@app.get("/users/me", response_model=UserResponse, tags=["Auth"])
def read_users_me(current_user: User = Depends(get_current_active_user)):
    return current_user

# ============================================================================
# ROOM ENDPOINTS
# ============================================================================

@app.post("/api/rooms", response_model=RoomResponse, status_code=201, tags=["Rooms"])
def create_room(
    request: CreateRoomRequest,
    service: RoomService = Depends(get_room_service),
    current_user: User = Depends(get_current_active_user)
):
    """Create a room"""
    try:
        room = service.create_room(
            name=request.name,
            min_days_advance=request.min_days_advance,
            max_days_advance=request.max_days_advance,
            status=request.status,
            attributes=request.attributes
        )
        return _room_to_response(room)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/api/rooms", response_model=List[RoomResponse], tags=["Rooms"])
def get_all_rooms(
    service: RoomService = Depends(get_room_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get all rooms"""
    return [_room_to_response(r) for r in service.get_all_rooms()]

@app.get("/api/rooms/search", response_model=List[RoomResponse], tags=["Rooms"])
def search_rooms(
    service: RoomService = Depends(get_room_service),
    current_user: User = Depends(get_current_active_user)
):
    """Rooms the current user's role may book"""
    return [_room_to_response(r) for r in service.search_rooms(current_user.role)]

@app.get("/api/rooms/{room_id}", response_model=RoomResponse, tags=["Rooms"])
def get_room(
    room_id: UUID,
    service: RoomService = Depends(get_room_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get room by ID"""
    room = service.get_room(room_id)
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")
    return _room_to_response(room)

@app.patch("/api/rooms/{room_id}/status", response_model=RoomResponse, tags=["Rooms"])
def update_room_status(
    room_id: UUID,
    request: UpdateRoomStatusRequest,
    service: RoomService = Depends(get_room_service),
    current_user: User = Depends(get_current_active_user)
):
    """Open or close a room for bookings"""
    room = service.update_status(room_id, request.status)
    if not room:
        raise HTTPException(status_code=404, detail="Room not found")
    return _room_to_response(room)

@app.post("/api/rooms/{room_id}/availabilities", response_model=AvailabilityWindowResponse, status_code=201, tags=["Rooms"])
def add_availability(
    room_id: UUID,
    request: AvailabilityWindowRequest,
    service: RoomService = Depends(get_room_service),
    current_user: User = Depends(get_current_active_user)
):
    """Add a weekly availability window"""
    try:
        window = service.add_availability(
            room_id=room_id,
            weekday=request.weekday,
            opening_time=request.opening_time,
            closing_time=request.closing_time
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not window:
        raise HTTPException(status_code=404, detail="Room not found")
    return _window_to_response(window)

@app.delete("/api/rooms/{room_id}/availabilities/{window_id}", tags=["Rooms"])
def remove_availability(
    room_id: UUID,
    window_id: UUID,
    service: RoomService = Depends(get_room_service),
    current_user: User = Depends(get_current_active_user)
):
    """Remove a weekly availability window"""
    removed = service.remove_availability(room_id, window_id)
    if not removed:
        raise HTTPException(status_code=404, detail="Availability not found")
    return {"success": True, "message": "Availability removed"}

@app.put("/api/rooms/{room_id}/restrictions/{role}", response_model=RestrictionResponse, tags=["Rooms"])
def set_restriction(
    room_id: UUID,
    role: str,
    request: RestrictionRequest,
    service: RoomService = Depends(get_room_service),
    current_user: User = Depends(get_current_active_user)
):
    """Override the advance-booking range of a role for a room"""
    try:
        restriction = service.set_restriction(
            room_id=room_id,
            role=role,
            min_days_advance=request.min_days_advance,
            max_days_advance=request.max_days_advance
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not restriction:
        raise HTTPException(status_code=404, detail="Room not found")
    return RestrictionResponse(**restriction.model_dump())

@app.delete("/api/rooms/{room_id}/restrictions/{role}", tags=["Rooms"])
def remove_restriction(
    room_id: UUID,
    role: str,
    service: RoomService = Depends(get_room_service),
    current_user: User = Depends(get_current_active_user)
):
    """Remove the override of a role for a room"""
    removed = service.remove_restriction(room_id, role)
    if not removed:
        raise HTTPException(status_code=404, detail="Restriction not found")
    return {"success": True, "message": "Restriction removed"}

@app.delete("/api/rooms/{room_id}", tags=["Rooms"])
def delete_room(
    room_id: UUID,
    service: RoomService = Depends(get_room_service),
    current_user: User = Depends(get_current_active_user)
):
    """Delete a room and everything booked in it"""
    if not service.delete_room(room_id):
        raise HTTPException(status_code=404, detail="Room not found")
    return {"success": True, "message": "Room deleted"}

@app.get("/api/rooms/{room_id}/reservations", response_model=List[ReservationResponse], tags=["Rooms"])
def get_room_reservations(
    room_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get the reservations of a room ordered by start time"""
    return [_reservation_to_response(r) for r in service.get_reservations_by_room(room_id)]

# ============================================================================
# BOOKING ENDPOINTS
# ============================================================================

@app.post("/api/bookings", response_model=BookingRequestResponse, status_code=201, tags=["Bookings"])
def create_booking_request(
    request: CreateBookingRequest,
    service: BookingService = Depends(get_booking_service),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_active_user)
):
    """Create a booking request with one or more reservations, all or nothing"""
    try:
        intervals = [build_interval(r.start_time, r.end_time) for r in request.reservations]
        event = EventDetails(**request.event.model_dump()) if request.event else None
        booking_request = service.schedule(
            room_id=request.room_id,
            user_id=current_user.user_id,
            role=current_user.role,
            reference_now=clock.now(),
            intervals=intervals,
            event=event
        )
        return _booking_to_response(booking_request)
    except SchedulingError as e:
        raise _scheduling_error(e)

@app.get("/api/bookings", response_model=List[BookingRequestResponse], tags=["Bookings"])
def get_my_booking_requests(
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get the booking requests of the current user"""
    bookings = service.get_booking_requests_by_user(current_user.user_id)
    return [_booking_to_response(b) for b in bookings]

@app.get("/api/bookings/{booking_request_id}", response_model=BookingRequestResponse, tags=["Bookings"])
def get_booking_request(
    booking_request_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get booking request by ID"""
    booking_request = service.get_booking_request(booking_request_id)
    if not booking_request:
        raise HTTPException(status_code=404, detail="Booking request not found")
    return _booking_to_response(booking_request)

@app.post("/api/bookings/{booking_request_id}/reference", response_model=BookingRequestResponse, tags=["Bookings"])
def upload_reference(
    booking_request_id: UUID,
    files: List[UploadFile] = File(...),
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Upload reference files for a booking request"""
    try:
        contents = {f.filename: f.file.read() for f in files}
        booking_request = service.attach_reference(booking_request_id, contents)
    except SchedulingError as e:
        raise _scheduling_error(e)
    if not booking_request:
        raise HTTPException(status_code=404, detail="Booking request not found")
    return _booking_to_response(booking_request)

@app.delete("/api/bookings/{booking_request_id}", tags=["Bookings"])
def delete_booking_request(
    booking_request_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Delete a booking request and its reservations"""
    if not service.delete_booking_request(booking_request_id):
        raise HTTPException(status_code=404, detail="Booking request not found")
    return {"success": True, "message": "Booking request deleted"}

# ============================================================================
# RESERVATION ENDPOINTS
# ============================================================================

@app.post("/api/reservations/check", response_model=CheckReservationResponse, tags=["Reservations"])
def check_reservation(
    request: CheckReservationRequest,
    service: BookingService = Depends(get_booking_service),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_active_user)
):
    """Check whether an interval could be booked, without booking it"""
    try:
        service.check_candidate(
            room_id=request.room_id,
            role=current_user.role,
            reference_now=clock.now(),
            interval=build_interval(request.start_time, request.end_time),
            exclude_reservation_id=request.exclude_reservation_id
        )
    except SchedulingError as e:
        return CheckReservationResponse(valid=False, kind=e.kind.value, message=e.message)
    return CheckReservationResponse(valid=True)

@app.put("/api/reservations/{reservation_id}", response_model=ReservationResponse, tags=["Reservations"])
def reschedule_reservation(
    reservation_id: UUID,
    request: RescheduleReservationRequest,
    service: BookingService = Depends(get_booking_service),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_active_user)
):
    """Move a reservation to a new interval"""
    try:
        reservation = service.reschedule(
            reservation_id=reservation_id,
            role=current_user.role,
            reference_now=clock.now(),
            new_interval=build_interval(request.start_time, request.end_time)
        )
    except SchedulingError as e:
        raise _scheduling_error(e)
    if not reservation:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return _reservation_to_response(reservation)

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _scheduling_error(error: SchedulingError) -> HTTPException:
    """Convert a scheduling verdict to an HTTP error"""
    status_code = 422 if isinstance(error, ValidationInputError) else 400
    api_logger.debug("Request rejected with %s: %s", error.kind.value, error.message)
    return HTTPException(status_code=status_code, detail=error.to_dict())

def _window_to_response(window) -> AvailabilityWindowResponse:
    """Convert AvailabilityWindow to AvailabilityWindowResponse"""
    return AvailabilityWindowResponse(
        window_id=window.window_id,
        weekday=window.weekday.value,
        opening_time=window.opening_time,
        closing_time=window.closing_time
    )

def _room_to_response(room) -> RoomResponse:
    """Convert Room entity to RoomResponse"""
    return RoomResponse(
        room_id=room.room_id,
        name=room.name,
        status=room.status.value,
        min_days_advance=room.min_days_advance,
        max_days_advance=room.max_days_advance,
        attributes=room.attributes,
        availabilities=[_window_to_response(w) for w in room.availabilities],
        restrictions=[RestrictionResponse(**r.model_dump()) for r in room.restrictions.values()],
        created_at=room.created_at,
        modified_at=room.modified_at,
        version=room.version
    )

def _reservation_to_response(reservation) -> ReservationResponse:
    """Convert Reservation entity to ReservationResponse"""
    return ReservationResponse(
        reservation_id=reservation.reservation_id,
        room_id=reservation.room_id,
        booking_request_id=reservation.booking_request_id,
        start_time=reservation.start_time,
        end_time=reservation.end_time,
        version=reservation.version
    )

def _booking_to_response(booking_request) -> BookingRequestResponse:
    """Convert BookingRequest entity to BookingRequestResponse"""
    return BookingRequestResponse(
        booking_request_id=booking_request.booking_request_id,
        user_id=booking_request.user_id,
        room_id=booking_request.room_id,
        status=booking_request.status.value,
        reservations=[_reservation_to_response(r) for r in booking_request.reservations],
        reference={"path": booking_request.reference.path} if booking_request.reference else None,
        event=EventRequest(**booking_request.event.model_dump()) if booking_request.event else None,
        created_at=booking_request.created_at,
        modified_at=booking_request.modified_at,
        version=booking_request.version
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
