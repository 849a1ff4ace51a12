# ludoteca/app/schemas/bookings.py

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from ..utils.dates import parse_api_datetime


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class AttendanceStatus(str, Enum):
    PENDING = "PENDING"
    ATTENDED = "ATTENDED"
    NOT_ATTENDED = "NOT_ATTENDED"


# Admin status changes allowed from each status
ALLOWED_TRANSITIONS: dict[BookingStatus, set[BookingStatus]] = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CANCELLED, BookingStatus.PENDING},
    BookingStatus.CANCELLED: {BookingStatus.PENDING},
}


def _normalize_booking_status(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class BookingCreate(BaseModel):
    slot_id: int = Field(alias="slotId")
    guest: str
    phone: str
    guest_email: Optional[str] = Field(None, alias="guestEmail")
    number_of_kids: int = Field(1, ge=1)
    comments: Optional[str] = None
    pack: Optional[str] = None

    model_config = {"populate_by_name": True}

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Booking(BaseModel):
    id: int
    slot_id: Optional[int] = Field(None, alias="slotId")
    # Visit bookings use name/email/phone for the same data
    guest: str = Field("", validation_alias=AliasChoices("guest", "name"))
    contact_number: Optional[str] = Field(None, validation_alias=AliasChoices("contact_number", "phone"))
    guest_email: Optional[str] = Field(
        None, alias="guestEmail", validation_alias=AliasChoices("guestEmail", "guest_email", "email")
    )
    number_of_kids: int = 1
    comments: Optional[str] = None
    pack: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDING
    attendance_status: Optional[AttendanceStatus] = Field(None, alias="attendanceStatus")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    slot: Optional[dict] = None

    model_config = {"populate_by_name": True, "from_attributes": True}

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, v: Any) -> Any:
        return _normalize_booking_status(v)

    @field_validator("attendance_status", mode="before")
    @classmethod
    def _parse_attendance(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        return str(getattr(v, "value", v)).strip().upper()

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _parse_ts(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        return parse_api_datetime(v)

    def can_transition(self, target: BookingStatus) -> bool:
        return target in ALLOWED_TRANSITIONS.get(self.status, set())


class BookingUpdate(BaseModel):
    """Partial admin edit; only changed fields are sent."""
    guest: Optional[str] = None
    phone: Optional[str] = None
    number_of_kids: Optional[int] = Field(None, ge=1)
    comments: Optional[str] = None
    pack: Optional[str] = None
    slot_id: Optional[int] = Field(None, alias="slotId")

    model_config = {"populate_by_name": True}

    @classmethod
    def diff(cls, booking: Booking, **changes) -> "BookingUpdate":
        """Keep only values that differ from the current booking."""
        current = {
            "guest": booking.guest,
            "phone": booking.contact_number,
            "number_of_kids": booking.number_of_kids,
            "comments": booking.comments,
            "pack": booking.pack,
            "slot_id": booking.slot_id,
        }
        changed = {
            k: v for k, v in changes.items()
            if k in current and v is not None and v != current[k]
        }
        return cls(**changed)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
