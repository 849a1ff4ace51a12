# ludoteca/app/services/bookings.py
"""
Booking repository.

Birthday bookings live under /api/bookings/*, daycare bookings under
/api/daycareBookings and visit bookings under /api/meetingBookings.
Status transitions are checked here before the request goes out.
"""

import logging
from datetime import date
from typing import Any, Optional

from pydantic import ValidationError as SchemaError

from ludoteca.app.errors import NetworkError, NotFoundError, ValidationError
from ludoteca.app.schemas.bookings import (
    AttendanceStatus,
    Booking,
    BookingCreate,
    BookingStatus,
    BookingUpdate,
)
from ludoteca.app.utils.api import ApiClient, api as default_api
from ludoteca.app.utils.dates import month_bounds, to_api_date

logger = logging.getLogger(__name__)


def _unwrap(data: Any) -> list:
    if data is None:
        return []
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("bookings", "data"):
            if isinstance(data.get(key), list):
                return data[key]
        if isinstance(data.get("booking"), dict):
            return [data["booking"]]
        if "id" in data:
            return [data]
    return []


def parse_bookings(data: Any) -> list[Booking]:
    bookings = []
    for raw in _unwrap(data):
        try:
            bookings.append(Booking.model_validate(raw))
        except SchemaError as e:
            logger.warning(f"Skipping malformed booking {raw!r}: {e.error_count()} errors")
    return bookings


def parse_booking(data: Any) -> Optional[Booking]:
    """Single booking; None when the server answered without a body."""
    if data is None:
        return None
    raw = data
    if isinstance(data, dict):
        for key in ("booking", "data"):
            if isinstance(data.get(key), dict):
                raw = data[key]
                break
    try:
        return Booking.model_validate(raw)
    except SchemaError as e:
        raise NetworkError("errors:invalid_response", f"invalid booking payload: {e}") from e


def check_transition(booking: Booking, status: BookingStatus | str) -> BookingStatus:
    """Validated target status for an admin status change."""
    try:
        target = BookingStatus(str(getattr(status, "value", status)).strip().lower())
    except ValueError as e:
        raise ValidationError("errors:invalid_status", f"invalid booking status: {status!r}") from e

    if target == booking.status:
        raise ValidationError("bookings:no_changes", f"booking {booking.id} already {target.value}")
    if not booking.can_transition(target):
        raise ValidationError(
            "bookings:invalid_transition",
            f"booking {booking.id}: {booking.status.value} → {target.value}",
        )
    return target


def parse_attendance(value: AttendanceStatus | str) -> AttendanceStatus:
    try:
        return AttendanceStatus(str(getattr(value, "value", value)).strip().upper())
    except ValueError as e:
        raise ValidationError("errors:invalid_status", f"invalid attendance: {value!r}") from e


class BookingRepository:
    """Birthday bookings."""

    kind = "event"
    # Contact fields the booking form must fill in
    requires_phone = True
    requires_email = False

    def __init__(self, client: ApiClient | None = None):
        self.api = client or default_api

    # ── Paths ────────────────────────────────────────────────────────────

    def list_path(self) -> str:
        return "/api/bookings/getBirthdayBookings"

    def create_path(self) -> str:
        return "/api/bookings/createBirthdayBooking"

    def status_path(self, booking_id: int) -> str:
        return f"/api/bookings/updateBirthdayBookingStatus/{booking_id}"

    def update_path(self, booking_id: int) -> str:
        return f"/api/bookings/updateBirthdayBooking/{booking_id}"

    def delete_path(self, booking_id: int) -> str:
        return f"/api/bookings/deleteBirthdayBooking/{booking_id}"

    # ── Queries ──────────────────────────────────────────────────────────

    async def fetch_all(self) -> list[Booking]:
        return parse_bookings(await self.api.get(self.list_path()))

    async def fetch_range(self, start: date, end: date) -> list[Booking]:
        data = await self.api.get(
            self.list_path(),
            params={"startDate": to_api_date(start), "endDate": to_api_date(end)},
        )
        return parse_bookings(data)

    async def fetch_by_month(self, year: int, month: int) -> list[Booking]:
        start, end = month_bounds(year, month)
        return await self.fetch_range(start, end)

    async def fetch_mine(self) -> list[Booking]:
        return parse_bookings(await self.api.get("/api/bookings/my"))

    # ── Mutations ────────────────────────────────────────────────────────

    def create_payload(self, booking: BookingCreate) -> dict:
        return booking.to_payload()

    def update_payload(self, update: BookingUpdate) -> dict:
        return update.to_payload()

    async def _call(self, request):
        """Await a request; a 404 here means the booking is gone."""
        try:
            return await request
        except NotFoundError as e:
            raise NotFoundError("bookings:not_found", str(e)) from e

    async def create(self, booking: BookingCreate) -> Optional[Booking]:
        result = await self.api.post(self.create_path(), json=self.create_payload(booking))
        created = parse_booking(result)
        logger.info(f"{self.kind} booking created for slot {booking.slot_id}")
        return created

    async def set_status(self, booking: Booking, status: BookingStatus | str) -> BookingStatus:
        target = check_transition(booking, status)
        await self._call(self.api.put(self.status_path(booking.id), json={"status": target.value}))
        logger.info(f"{self.kind} booking {booking.id}: {booking.status.value} → {target.value}")
        return target

    async def update(self, booking: Booking, **changes) -> BookingUpdate:
        """Send only the fields that differ from the current booking."""
        update = BookingUpdate.diff(booking, **changes)
        payload = self.update_payload(update)
        if not payload:
            raise ValidationError("bookings:no_changes", f"booking {booking.id}: nothing to update")
        await self._call(self.api.put(self.update_path(booking.id), json=payload))
        logger.info(f"{self.kind} booking {booking.id} updated: {sorted(payload)}")
        return update

    async def delete(self, booking_id: int) -> None:
        await self._call(self.api.delete(self.delete_path(booking_id)))
        logger.info(f"{self.kind} booking {booking_id} deleted")

    async def mark_attendance(self, booking_id: int, attendance: AttendanceStatus | str) -> Optional[Booking]:
        raise NotImplementedError(f"{self.kind} bookings have no attendance")


class DaycareBookingRepository(BookingRepository):
    """Daycare bookings; cancellation has its own endpoint."""

    kind = "recurring"

    def list_path(self) -> str:
        return "/api/daycareBookings"

    def create_path(self) -> str:
        return "/api/daycareBookings"

    def update_path(self, booking_id: int) -> str:
        return f"/api/daycareBookings/{booking_id}"

    def delete_path(self, booking_id: int) -> str:
        return f"/api/daycareBookings/deletedDaycareBooking/{booking_id}"

    async def fetch_mine(self) -> list[Booking]:
        return await self.fetch_all()

    async def set_status(self, booking: Booking, status: BookingStatus | str) -> BookingStatus:
        target = check_transition(booking, status)
        if target == BookingStatus.CANCELLED:
            await self._call(self.api.put(f"/api/daycareBookings/{booking.id}/cancel"))
        else:
            await self._call(self.api.put(self.update_path(booking.id), json={"status": target.value}))
        logger.info(f"daycare booking {booking.id}: {booking.status.value} → {target.value}")
        return target

    async def mark_attendance(self, booking_id: int, attendance: AttendanceStatus | str) -> Optional[Booking]:
        """Record whether the children came; returns the updated booking when echoed."""
        target = parse_attendance(attendance)
        result = await self._call(
            self.api.put(f"/api/daycareBookings/{booking_id}/attendance", json={"attendanceStatus": target.value})
        )
        logger.info(f"daycare booking {booking_id}: attendance {target.value}")
        return parse_booking(result)


class MeetingBookingRepository(BookingRepository):
    """Visit bookings: one family per booking, email instead of phone."""

    kind = "meeting"
    requires_phone = False
    requires_email = True

    def list_path(self) -> str:
        return "/api/meetingBookings"

    def create_path(self) -> str:
        return "/api/meetingBookings"

    def status_path(self, booking_id: int) -> str:
        return f"/api/meetingBookings/status/{booking_id}"

    def update_path(self, booking_id: int) -> str:
        return f"/api/meetingBookings/{booking_id}"

    def delete_path(self, booking_id: int) -> str:
        return f"/api/meetingBookings/{booking_id}"

    async def fetch_mine(self) -> list[Booking]:
        return await self.fetch_all()

    async def fetch_by_date(self, day: date) -> list[Booking]:
        return parse_bookings(await self.api.get(f"/api/meetingBookings/by-date/{to_api_date(day)}"))

    def create_payload(self, booking: BookingCreate) -> dict:
        payload = {
            "slotId": booking.slot_id,
            "name": booking.guest,
            "email": booking.guest_email,
            "phone": booking.phone or None,
            "comments": booking.comments,
        }
        return {k: v for k, v in payload.items() if v is not None}

    def update_payload(self, update: BookingUpdate) -> dict:
        payload = update.to_payload()
        if "guest" in payload:
            payload["name"] = payload.pop("guest")
        payload.pop("number_of_kids", None)
        payload.pop("pack", None)
        return payload
