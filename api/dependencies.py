"""API Dependencies - Authentication, services and clock"""
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from application.services import BookingService, RoomService
from domain.auth import User, UserInDB
from domain.clock import Clock
from infrastructure.clock import SystemClock
from infrastructure.repositories.in_memory_repositories import (
    InMemoryStore, InMemoryUnitOfWork, InMemoryReferenceStore
)
from infrastructure.security import get_password_hash, decode_access_token
from api.schemas import TokenData

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

# Shared in-memory storage for the running process
store = InMemoryStore()
reference_store = InMemoryReferenceStore()
clock: Clock = SystemClock()

# Mock database for users
# In production, this would be a database call
_fake_users_db = {
    "admin": {
        "username": "admin",
        "full_name": "Admin User",
        "email": "admin@example.com",
        "plain_password": "admin123",  # Will be hashed on first access
        "role": "super-admin",
        "disabled": False,
        "user_id": "123e4567-e89b-12d3-a456-426614174000"
    },
    "student": {
        "username": "student",
        "full_name": "Student User",
        "email": "student@example.com",
        "plain_password": "student123",
        "role": "student",
        "disabled": False,
        "user_id": "123e4567-e89b-12d3-a456-426614174001"
    },
}

fake_users_db = _fake_users_db

# Cache for hashed passwords
_password_hash_cache = {}


def _get_hashed_password(username: str) -> str:
    """Lazily hash passwords on first access"""
    if username not in _password_hash_cache:
        user = _fake_users_db.get(username)
        if user and "plain_password" in user:
            _password_hash_cache[username] = get_password_hash(user["plain_password"])
    return _password_hash_cache.get(username, "")


def get_user(db, username: str):
    if username in db:
        user_dict = db[username].copy()
        if "plain_password" in user_dict:
            user_dict["hashed_password"] = _get_hashed_password(username)
            del user_dict["plain_password"]
        return UserInDB(**user_dict)
    return None


def get_booking_service() -> BookingService:
    return BookingService(InMemoryUnitOfWork(store), reference_store)


def get_room_service() -> RoomService:
    return RoomService(InMemoryUnitOfWork(store), reference_store)


def get_clock() -> Clock:
    return clock


def get_current_user(token: str = Depends(oauth2_scheme)) -> UserInDB:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        username: str = payload.get("sub")
        if username is None:
            raise credentials_exception
        token_data = TokenData(username=username)
    except JWTError:
        raise credentials_exception

    user = get_user(_fake_users_db, username=token_data.username)
    if user is None:
        raise credentials_exception
    return user


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if current_user.disabled:
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user
