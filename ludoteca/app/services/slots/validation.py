# ludoteca/app/services/slots/validation.py
"""
Slot input validation.

Turns console input (snake_case or camelCase keys, strings or typed values)
into backend payloads. Everything here raises ValidationError BEFORE any
network call is made.

    event_create_payload      {date, start_time, end_time, status?}
    meeting_create_payload    {date, start_time, end_time, capacity, status?}
    recurring_create_payload  {date, open_hour, close_hour, capacity, status?}
    generate_payload          {start_date | custom_dates, open_hour, close_hour, capacity}
    update_patch              partial update checked against the current slot
    range_payload             multi-slot update/delete of one day and hour window
"""

from datetime import date, datetime, time
from typing import Any, Optional

from ludoteca.app.errors import ValidationError
from ludoteca.app.schemas.slots import (
    WIRE_NAMES,
    EventSlot,
    MeetingSlot,
    RecurringSlot,
    Slot,
    SlotStatus,
)
from ludoteca.app.utils.dates import (
    parse_api_date,
    parse_api_datetime,
    to_api_date,
    to_api_datetime,
)
from ludoteca.app.utils.schedule_helper import (
    HOUR_RE,
    normalize_hour,
    time_str_to_minutes,
)


# ── Field readers ────────────────────────────────────────────────────────


def _get(data: dict, name: str) -> Any:
    """Value by attribute name or wire name; blank strings count as missing."""
    value = data.get(name)
    if value is None and name in WIRE_NAMES:
        value = data.get(WIRE_NAMES[name])
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _has(data: dict, name: str) -> bool:
    return _get(data, name) is not None


def _require(data: dict, *names: str) -> None:
    missing = [n for n in names if not _has(data, n)]
    if missing:
        raise ValidationError("errors:fill_required", f"missing fields: {', '.join(missing)}")


def _date(value: Any) -> date:
    try:
        return parse_api_date(value)
    except (TypeError, ValueError) as e:
        raise ValidationError("errors:invalid_dates", f"invalid date: {value!r}") from e


def _hour(value: Any) -> str:
    try:
        return normalize_hour(value)
    except (TypeError, ValueError) as e:
        raise ValidationError("errors:invalid_hour", f"invalid hour: {value!r}") from e


def _datetime(value: Any, day: Optional[date]) -> datetime:
    """Full datetime, or "HH:MM" combined with the slot's day."""
    if isinstance(value, time) and day is not None:
        return datetime.combine(day, value)
    if isinstance(value, str) and day is not None and HOUR_RE.match(value.strip()):
        hour = _hour(value)
        return datetime.combine(day, time.fromisoformat(hour))
    try:
        return parse_api_datetime(value)
    except (TypeError, ValueError) as e:
        raise ValidationError("errors:invalid_hour", f"invalid time: {value!r}") from e


def _capacity(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("errors:invalid_capacity", f"invalid capacity: {value!r}")
    try:
        capacity = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError("errors:invalid_capacity", f"invalid capacity: {value!r}") from e
    if capacity < 0 or capacity != float(value):
        raise ValidationError("errors:invalid_capacity", f"invalid capacity: {value!r}")
    return capacity


def _status(value: Any) -> SlotStatus:
    try:
        return SlotStatus(str(value).strip().upper())
    except ValueError as e:
        raise ValidationError("errors:invalid_status", f"invalid status: {value!r}") from e


# ── Ordering checks ──────────────────────────────────────────────────────


def check_event_times(start: datetime, end: datetime) -> None:
    if end <= start:
        raise ValidationError("errors:end_after_start", f"end {end} is not after start {start}")


def check_hours(open_hour: str, close_hour: str) -> None:
    if time_str_to_minutes(close_hour) <= time_str_to_minutes(open_hour):
        raise ValidationError(
            "errors:end_after_start",
            f"close hour {close_hour} is not after open hour {open_hour}",
        )


# ── Create ───────────────────────────────────────────────────────────────


def event_create_payload(data: dict) -> dict:
    """Birthday slot: date, start_time and end_time are required."""
    _require(data, "date", "start_time", "end_time")

    day = _date(_get(data, "date"))
    start = _datetime(_get(data, "start_time"), day)
    end = _datetime(_get(data, "end_time"), day)
    check_event_times(start, end)

    payload = {
        "date": to_api_date(day),
        "startTime": to_api_datetime(start),
        "endTime": to_api_datetime(end),
    }
    if _has(data, "status"):
        payload["status"] = _status(_get(data, "status")).value
    return payload


def meeting_create_payload(data: dict) -> dict:
    """Visit slot: the event fields plus a required capacity."""
    _require(data, "capacity")
    payload = event_create_payload(data)
    payload.update(_capacity_payload(data))
    return payload


def recurring_create_payload(data: dict) -> dict:
    """Daycare slot: date, open_hour, close_hour and capacity are required."""
    _require(data, "date", "open_hour", "close_hour", "capacity")

    day = _date(_get(data, "date"))
    open_hour = _hour(_get(data, "open_hour"))
    close_hour = _hour(_get(data, "close_hour"))
    check_hours(open_hour, close_hour)

    payload = {
        "date": to_api_date(day),
        "openHour": open_hour,
        "closeHour": close_hour,
    }
    payload.update(_capacity_payload(data))
    if _has(data, "status"):
        payload["status"] = _status(_get(data, "status")).value
    return payload


def _capacity_payload(data: dict) -> dict:
    capacity = _capacity(_get(data, "capacity"))
    payload = {"capacity": capacity}
    if _has(data, "available_spots"):
        available = _capacity(_get(data, "available_spots"))
        if available > capacity:
            raise ValidationError("errors:capacity_exceeded")
        payload["availableSpots"] = available
    return payload


def generate_payload(data: dict) -> dict:
    """
    Bulk generation template.

    Either start_date (optional end_date) or a non-empty custom_dates list,
    plus open_hour/close_hour/capacity for every generated slot.
    """
    _require(data, "open_hour", "close_hour", "capacity")

    custom = _get(data, "custom_dates") or []
    if not custom and not _has(data, "start_date"):
        raise ValidationError("errors:fill_required", "start_date or custom_dates required")

    open_hour = _hour(_get(data, "open_hour"))
    close_hour = _hour(_get(data, "close_hour"))
    check_hours(open_hour, close_hour)

    payload: dict = {
        "openHour": open_hour,
        "closeHour": close_hour,
        "capacity": _capacity(_get(data, "capacity")),
    }

    if custom:
        dates = sorted({_date(d) for d in custom})
        payload["customDates"] = [to_api_date(d) for d in dates]
        payload["startDate"] = to_api_date(dates[0])
    else:
        start = _date(_get(data, "start_date"))
        payload["startDate"] = to_api_date(start)
        if _has(data, "end_date"):
            end = _date(_get(data, "end_date"))
            if end < start:
                raise ValidationError("errors:invalid_dates", f"end_date {end} before start_date {start}")
            payload["endDate"] = to_api_date(end)

    return payload


def generated_dates(payload: dict) -> list[date]:
    """Dates a generate payload targets (start/end only when no custom list)."""
    if payload.get("customDates"):
        return [parse_api_date(d) for d in payload["customDates"]]
    start = parse_api_date(payload["startDate"])
    if payload.get("endDate"):
        return [start, parse_api_date(payload["endDate"])]
    return [start]


# ── Update ───────────────────────────────────────────────────────────────


def _event_patch(data: dict, current: Optional[EventSlot]) -> dict:
    patch: dict = {}
    day = _date(_get(data, "date")) if _has(data, "date") else None
    if day is not None:
        patch["date"] = day

    base_day = day or (current.date if current else None)
    if _has(data, "start_time"):
        patch["start_time"] = _datetime(_get(data, "start_time"), base_day)
    if _has(data, "end_time"):
        patch["end_time"] = _datetime(_get(data, "end_time"), base_day)

    # Moving the day carries the unchanged times along with it
    if day is not None and current is not None and day != current.date:
        shift = day - current.date
        patch.setdefault("start_time", current.start_time + shift)
        patch.setdefault("end_time", current.end_time + shift)

    start = patch.get("start_time", current.start_time if current else None)
    end = patch.get("end_time", current.end_time if current else None)
    if start is not None and end is not None:
        check_event_times(start, end)
    return patch


def _recurring_patch(data: dict, current: Optional[RecurringSlot]) -> dict:
    patch: dict = {}
    if _has(data, "date"):
        patch["date"] = _date(_get(data, "date"))
    if _has(data, "open_hour"):
        patch["open_hour"] = _hour(_get(data, "open_hour"))
    if _has(data, "close_hour"):
        patch["close_hour"] = _hour(_get(data, "close_hour"))

    open_hour = patch.get("open_hour", current.open_hour if current else None)
    close_hour = patch.get("close_hour", current.close_hour if current else None)
    if open_hour is not None and close_hour is not None:
        check_hours(open_hour, close_hour)

    patch.update(_capacity_patch(data, current))
    return patch


def _meeting_patch(data: dict, current: Optional[MeetingSlot]) -> dict:
    patch = _event_patch(data, current)
    patch.update(_capacity_patch(data, current))
    return patch


def _capacity_patch(data: dict, current: Optional[Slot]) -> dict:
    patch: dict = {}
    if _has(data, "capacity"):
        patch["capacity"] = _capacity(_get(data, "capacity"))
    if _has(data, "available_spots"):
        patch["available_spots"] = _capacity(_get(data, "available_spots"))

    capacity = patch.get("capacity", current.capacity if current else None)
    if "available_spots" in patch:
        if capacity is not None and patch["available_spots"] > capacity:
            raise ValidationError("errors:capacity_exceeded")
    elif "capacity" in patch and current is not None:
        # Keep the booked count; the server answer replaces this anyway
        booked = current.capacity - current.available_spots
        patch["available_spots"] = max(0, patch["capacity"] - booked)
    return patch


def update_patch(kind: str, data: dict, current: Optional[Slot] = None) -> dict:
    """
    Validated attribute patch (snake_case, typed values).

    Ordering is checked against the current slot when given, otherwise only
    between fields present in the patch.
    """
    if kind == "event":
        patch = _event_patch(data, current)
    elif kind == "meeting":
        patch = _meeting_patch(data, current)
    else:
        patch = _recurring_patch(data, current)

    if _has(data, "status"):
        patch["status"] = _status(_get(data, "status"))

    if not patch:
        raise ValidationError("errors:fill_required", "empty update")
    return patch


def patch_to_payload(patch: dict) -> dict:
    """Wire payload for a validated patch."""
    payload = {}
    for name, value in patch.items():
        if isinstance(value, SlotStatus):
            value = value.value
        elif isinstance(value, datetime):
            value = to_api_datetime(value)
        elif isinstance(value, date):
            value = to_api_date(value)
        payload[WIRE_NAMES.get(name, name)] = value
    return payload


# ── Ranges ───────────────────────────────────────────────────────────────


def range_payload(
    day: Any,
    start_hour: Any = None,
    end_hour: Any = None,
    capacity: Any = None,
    status: Any = None,
    *,
    hours_required: bool = True,
) -> dict:
    """Daycare multi-slot update/delete: one day plus an optional hour window."""
    if day is None or (hours_required and (start_hour is None or end_hour is None)):
        raise ValidationError("errors:fill_required", "date and hour window required")

    payload: dict = {"date": to_api_date(_date(day))}

    if start_hour is not None or end_hour is not None:
        if start_hour is None or end_hour is None:
            raise ValidationError("errors:fill_required", "both start_hour and end_hour required")
        start = _hour(start_hour)
        end = _hour(end_hour)
        check_hours(start, end)
        payload["startHour"] = start
        payload["endHour"] = end

    if capacity is not None:
        payload["capacity"] = _capacity(capacity)
    if status is not None:
        payload["status"] = _status(status).value
    return payload
