"""
Domain models (Pydantic).

These types are the contract between layers:
- API/CLI inputs (`RegisterRequest`, `EventCreate`, `RecurringEventCreate`, ...)
- stored documents (`User`, `Event`, `Booking`)
- partial updates (`UserPatch`, `EventPatch`)

Patches are applied by merging only the fields a client explicitly sent (and
that are not null) onto the stored document, then re-validating the result.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, EmailStr, Field, field_validator

from eventbook.scheduling.recurrence import RecurrenceType, normalize_frequency


# bcrypt only looks at the first 72 bytes, and bcrypt 5 rejects anything longer.
MAX_PASSWORD_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


Password = Annotated[str, Field(min_length=6), AfterValidator(_check_password_bytes)]


class PatchModel(BaseModel):
    """Base for optional-field update payloads."""

    def changes(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True, exclude_none=True)

    def merge_into(self, document: dict[str, Any]) -> dict[str, Any]:
        return {**document, **self.changes()}


# Users


class UserFields(BaseModel):
    first_name: str = Field(..., min_length=3, max_length=20)
    last_name: str = Field(..., min_length=5, max_length=50)
    email: EmailStr
    phone_number: str = Field(..., min_length=10, max_length=10)
    date_of_birth: date
    address: str = Field(..., min_length=1)


class RegisterRequest(UserFields):
    password: Password


class LoginRequest(BaseModel):
    email: str
    password: str


class User(UserFields):
    """A stored user document."""

    id: str
    password_hash: str
    is_admin: bool = False

    def public(self) -> "UserPublic":
        return UserPublic.model_validate(self.model_dump(exclude={"password_hash"}))


class UserPublic(UserFields):
    id: str
    is_admin: bool = False


class UserPatch(PatchModel):
    first_name: str | None = Field(default=None, min_length=3, max_length=20)
    last_name: str | None = Field(default=None, min_length=5, max_length=50)
    email: EmailStr | None = None
    password: Password | None = None
    phone_number: str | None = Field(default=None, min_length=10, max_length=10)
    date_of_birth: date | None = None
    address: str | None = Field(default=None, min_length=1)


# Events


class EventFields(BaseModel):
    name: str = Field(..., min_length=5)
    description: str = Field(..., min_length=10)
    location: str = Field(..., min_length=5)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class EventCreate(EventFields):
    date_time: datetime


class Event(EventFields):
    """A stored event document."""

    id: str
    short_id: str = Field(..., min_length=10, max_length=10)
    date_time: datetime


class EventPatch(PatchModel):
    name: str | None = Field(default=None, min_length=5)
    description: str | None = Field(default=None, min_length=10)
    location: str | None = Field(default=None, min_length=5)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    date_time: datetime | None = None


class RecurringEventCreate(EventFields):
    start_date: date
    end_date: date
    recurrence_type: RecurrenceType
    frequency: list[int]
    start_time: time | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _date_only(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and len(value.strip()) > 10:
            text = value.strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            return datetime.fromisoformat(text).date()
        return value

    @field_validator("frequency", mode="before")
    @classmethod
    def _normalize_frequency(cls, value: Any) -> list[int]:
        if value is None:
            raise ValueError("frequency is required")
        return list(normalize_frequency(value))


class NearbyEvent(Event):
    distance_km: float


# Bookings


class BookingUser(BaseModel):
    user_id: str
    first_name: str
    last_name: str
    phone_number: str
    email: str


class BookingEvent(BaseModel):
    event_id: str
    name: str
    date_time: datetime
    location: str


class Booking(BaseModel):
    """A stored booking: snapshots of the user and event at booking time."""

    id: str
    user: BookingUser
    event: BookingEvent
    created_at: datetime


class BookingCreate(BaseModel):
    event_id: str = Field(..., min_length=1)


class BookingConfirmation(BaseModel):
    booking: Booking
    qr_payload: str
