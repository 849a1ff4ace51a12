# ludoteca/app/flows/admin/bookings.py
"""
Admin booking console: status changes, edits, deletion and daycare attendance.

Deleting a booking does not give the slot its capacity back; the slot
views pick up whatever the server reports on the next refresh.
"""

import logging
from typing import Optional

from ludoteca.app.errors import SlotError
from ludoteca.app.i18n.loader import DEFAULT_LANG, t
from ludoteca.app.schemas.bookings import AttendanceStatus, Booking, BookingStatus, BookingUpdate
from ludoteca.app.services.bookings import BookingRepository, parse_attendance
from ludoteca.app.utils.notify import LogNotifier, Notifier

from ..common.messages import report_error

logger = logging.getLogger(__name__)


class BookingAdminFlow:

    def __init__(
        self,
        bookings: BookingRepository,
        notifier: Notifier | None = None,
        lang: str = DEFAULT_LANG,
    ):
        self.bookings = bookings
        self.notifier = notifier or LogNotifier()
        self.lang = lang

    async def set_status(self, booking: Booking, status: BookingStatus | str) -> Optional[Booking]:
        """Returns a copy with the new status, None on failure."""
        try:
            target = await self.bookings.set_status(booking, status)
        except SlotError as e:
            report_error(self.notifier, e, self.lang, "bookings:status_error", f"booking {booking.id} status")
            return None
        self.notifier.success(t("bookings:status_success", self.lang))
        return booking.model_copy(update={"status": target})

    async def update_booking(self, booking: Booking, **changes) -> Optional[BookingUpdate]:
        """Only fields that differ from the booking are sent."""
        try:
            update = await self.bookings.update(booking, **changes)
        except SlotError as e:
            report_error(self.notifier, e, self.lang, "bookings:update_error", f"booking {booking.id} update")
            return None
        self.notifier.success(t("bookings:update_success", self.lang))
        return update

    async def delete_booking(self, booking_id: int) -> bool:
        if not await self.notifier.confirm(t("bookings:confirm_delete", self.lang), "danger"):
            return False
        try:
            await self.bookings.delete(booking_id)
        except SlotError as e:
            report_error(self.notifier, e, self.lang, "bookings:delete_error", f"booking {booking_id} delete")
            return False
        self.notifier.success(t("bookings:delete_success", self.lang))
        return True

    async def mark_attendance(self, booking: Booking, attendance: AttendanceStatus | str) -> Optional[Booking]:
        """Daycare only; returns the booking with its attendance set, None on failure."""
        try:
            target = parse_attendance(attendance)
            updated = await self.bookings.mark_attendance(booking.id, target)
        except SlotError as e:
            report_error(
                self.notifier, e, self.lang, "bookings:attendance_error", f"booking {booking.id} attendance"
            )
            return None
        self.notifier.success(t("bookings:attendance_success", self.lang))
        return updated or booking.model_copy(update={"attendance_status": target})
