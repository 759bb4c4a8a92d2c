"""Domain Value Objects"""
from pydantic import BaseModel, Field, validator
from datetime import date, datetime, time, timedelta
from uuid import UUID, uuid4
from typing import Optional

from domain.enums import Weekday

ONE_DAY = timedelta(days=1)


class TimeInterval(BaseModel):
    """Value Object for a reservation's [start, end) interval"""
    start: datetime
    end: datetime

    @validator('end')
    def end_after_start(cls, v, values):
        if 'start' in values and v <= values['start']:
            raise ValueError('End time must be after start time')
        return v

    def overlaps(self, other: "TimeInterval") -> bool:
        """Half-open overlap: touching endpoints do not overlap"""
        return self.start < other.end and other.start < self.end

    def days_in_advance(self, reference_now: datetime) -> int:
        """Whole days between reference_now and the start of the interval, truncated toward zero"""
        delta = self.start - reference_now
        days = abs(delta) // ONE_DAY
        return days if delta >= timedelta(0) else -days

    def duration(self) -> timedelta:
        return self.end - self.start

    def day_segments(self):
        """
        Split the interval into same-day pieces.

        Yields (day, start_offset, end_offset) where the offsets are measured
        from midnight of ``day``. An end offset of one full day means the
        segment runs until midnight.
        """
        day: date = self.start.date()
        while True:
            midnight = datetime.combine(day, time.min)
            next_midnight = midnight + ONE_DAY
            segment_start = max(self.start, midnight)
            segment_end = min(self.end, next_midnight)
            yield day, segment_start - midnight, segment_end - midnight
            if self.end <= next_midnight:
                break
            day = day + ONE_DAY

    class Config:
        frozen = True


class AvailabilityWindow(BaseModel):
    """Child Entity: a recurring weekly opening window of a room"""
    window_id: UUID = Field(default_factory=uuid4)
    weekday: Weekday
    opening_time: time
    closing_time: time

    @validator('closing_time')
    def closing_after_opening(cls, v, values):
        if 'opening_time' in values and v <= values['opening_time']:
            raise ValueError('Closing time must be after opening time')
        return v

    def opening_offset(self) -> timedelta:
        return _offset(self.opening_time)

    def closing_offset(self) -> timedelta:
        # time.max stands for "open until midnight"
        if self.closing_time == time.max:
            return ONE_DAY
        return _offset(self.closing_time)

    def covers(self, start_offset: timedelta, end_offset: timedelta) -> bool:
        """Check that [start_offset, end_offset) lies inside the window"""
        return self.opening_offset() <= start_offset and end_offset <= self.closing_offset()

    class Config:
        from_attributes = True


class AdvanceRestriction(BaseModel):
    """
    Child Entity: per-role override of a room's advance-booking range.

    A bound left as None falls back to the room default. A restriction with
    no bounds at all bars the role from the room.
    """
    role: str
    min_days_advance: Optional[int] = Field(default=None, ge=0)
    max_days_advance: Optional[int] = Field(default=None, ge=0)

    @validator('max_days_advance')
    def max_not_below_min(cls, v, values):
        minimum = values.get('min_days_advance')
        if v is not None and minimum is not None and v < minimum:
            raise ValueError('max_days_advance must be greater than or equal to min_days_advance')
        return v

    @property
    def bars_role(self) -> bool:
        return self.min_days_advance is None and self.max_days_advance is None

    class Config:
        frozen = True


class EventDetails(BaseModel):
    """Descriptive event metadata attached to a booking request"""
    title: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    guest_speakers: Optional[str] = None
    attendees: Optional[int] = Field(default=None, ge=0)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    alcohol: bool = False

    class Config:
        frozen = True


class ReferenceArtifact(BaseModel):
    """Location of the uploaded reference file bundle"""
    path: str

    @staticmethod
    def path_for(room_id: UUID, start: datetime) -> str:
        return f"{room_id}_{int(start.timestamp())}_reference"

    class Config:
        frozen = True


def _offset(value: time) -> timedelta:
    return timedelta(
        hours=value.hour,
        minutes=value.minute,
        seconds=value.second,
        microseconds=value.microsecond,
    )
