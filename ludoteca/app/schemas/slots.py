# ludoteca/app/schemas/slots.py
"""
Pydantic schemas for slots.

Three variants share id/date/status:
- EventSlot (birthday party): fixed start/end time, binary availability
- RecurringSlot (daycare): open/close hour, capacity, available spots
- MeetingSlot (visit): fixed start/end time, capacity, available spots

Wire format is camelCase; Python attributes are snake_case.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from ..utils.schedule_helper import normalize_hour, time_str_to_minutes
from ..utils.dates import parse_api_date, parse_api_datetime


class SlotStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


def _normalize_status(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().upper()
    return value


class EventSlot(BaseModel):
    """Birthday slot: one booking occupies the whole slot."""
    id: int
    kind: Literal["event"] = "event"
    date: date
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    status: SlotStatus = SlotStatus.OPEN
    booked: bool = Field(False, alias="isBooked")

    model_config = {"populate_by_name": True, "from_attributes": True}

    @model_validator(mode="before")
    @classmethod
    def _booking_flag(cls, data: Any) -> Any:
        # The backend embeds the booking instead of a flag on some endpoints
        if isinstance(data, dict) and "isBooked" not in data and "booked" not in data:
            booking = data.get("booking") or data.get("bookings")
            if booking:
                data = {**data, "isBooked": True}
        return data

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v: Any) -> date:
        return parse_api_date(v)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_time(cls, v: Any) -> datetime:
        return parse_api_datetime(v)

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, v: Any) -> Any:
        return _normalize_status(v)

    @model_validator(mode="after")
    def _check_order(self) -> "EventSlot":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def capacity(self) -> int:
        return 1

    @property
    def available_spots(self) -> int:
        return 0 if self.booked else 1

    @property
    def is_bookable(self) -> bool:
        return self.status == SlotStatus.OPEN and not self.booked

    @property
    def is_fully_available(self) -> bool:
        return self.is_bookable

    @property
    def start_minutes(self) -> int:
        return self.start_time.hour * 60 + self.start_time.minute

    @property
    def sort_key(self) -> tuple[date, int]:
        return self.date, self.start_minutes


class RecurringSlot(BaseModel):
    """Daycare slot: shared by up to `capacity` children."""
    id: int
    kind: Literal["recurring"] = "recurring"
    date: date
    open_hour: str = Field(alias="openHour")
    close_hour: str = Field(alias="closeHour")
    capacity: int = Field(ge=0)
    available_spots: int = Field(alias="availableSpots", ge=0)
    status: SlotStatus = SlotStatus.OPEN

    model_config = {"populate_by_name": True, "from_attributes": True}

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v: Any) -> date:
        return parse_api_date(v)

    @field_validator("open_hour", "close_hour", mode="before")
    @classmethod
    def _parse_hour(cls, v: Any) -> str:
        return normalize_hour(v)

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, v: Any) -> Any:
        return _normalize_status(v)

    @model_validator(mode="after")
    def _check_invariants(self) -> "RecurringSlot":
        if time_str_to_minutes(self.close_hour) <= time_str_to_minutes(self.open_hour):
            raise ValueError("close_hour must be after open_hour")
        if self.available_spots > self.capacity:
            raise ValueError("available_spots cannot exceed capacity")
        return self

    @property
    def is_bookable(self) -> bool:
        return self.status == SlotStatus.OPEN and self.available_spots > 0

    @property
    def is_fully_available(self) -> bool:
        return self.status == SlotStatus.OPEN and self.available_spots == self.capacity

    @property
    def start_minutes(self) -> int:
        return time_str_to_minutes(self.open_hour)

    @property
    def sort_key(self) -> tuple[date, int]:
        return self.date, self.start_minutes

    def reserve(self, spots: int = 1) -> "RecurringSlot":
        """Copy with `spots` fewer available (confirmed booking)."""
        return self._with_spots(self.available_spots - spots)

    def release(self, spots: int = 1) -> "RecurringSlot":
        """Copy with `spots` more available (cancellation)."""
        return self._with_spots(self.available_spots + spots)

    def _with_spots(self, available: int) -> "RecurringSlot":
        if not 0 <= available <= self.capacity:
            raise ValueError(
                f"available_spots {available} outside 0..{self.capacity} for slot {self.id}"
            )
        return self.model_copy(update={"available_spots": available})


class MeetingSlot(BaseModel):
    """Visit slot: fixed start/end time shared by up to `capacity` families."""
    id: int
    kind: Literal["meeting"] = "meeting"
    date: date
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    capacity: int = Field(1, ge=0)
    available_spots: int = Field(alias="availableSpots", ge=0)
    status: SlotStatus = SlotStatus.OPEN

    model_config = {"populate_by_name": True, "from_attributes": True}

    @model_validator(mode="before")
    @classmethod
    def _default_spots(cls, data: Any) -> Any:
        # Freshly created slots come back without availableSpots
        if isinstance(data, dict) and "availableSpots" not in data and "available_spots" not in data:
            data = {**data, "availableSpots": data.get("capacity", 1)}
        return data

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v: Any) -> date:
        return parse_api_date(v)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_time(cls, v: Any) -> datetime:
        return parse_api_datetime(v)

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, v: Any) -> Any:
        return _normalize_status(v)

    @model_validator(mode="after")
    def _check_invariants(self) -> "MeetingSlot":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.available_spots > self.capacity:
            raise ValueError("available_spots cannot exceed capacity")
        return self

    @property
    def is_bookable(self) -> bool:
        return self.status == SlotStatus.OPEN and self.available_spots > 0

    @property
    def is_fully_available(self) -> bool:
        return self.status == SlotStatus.OPEN and self.available_spots == self.capacity

    @property
    def start_minutes(self) -> int:
        return self.start_time.hour * 60 + self.start_time.minute

    @property
    def sort_key(self) -> tuple[date, int]:
        return self.date, self.start_minutes


Slot = Union[EventSlot, RecurringSlot, MeetingSlot]


# Python attribute → wire name, for outgoing payloads
WIRE_NAMES: dict[str, str] = {
    "start_time": "startTime",
    "end_time": "endTime",
    "open_hour": "openHour",
    "close_hour": "closeHour",
    "available_spots": "availableSpots",
    "start_date": "startDate",
    "end_date": "endDate",
    "custom_dates": "customDates",
    "start_hour": "startHour",
    "end_hour": "endHour",
}
