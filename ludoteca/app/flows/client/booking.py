# ludoteca/app/flows/client/booking.py
"""
Client booking flow.

Flow:
1. Day selected in the calendar → selectable slots (bookable only)
2. Slot + contact form
3. Client-side checks (no request leaves before they pass)
4. POST booking → refresh that day's slots → clear the form
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ludoteca.app.errors import SlotError, ValidationError
from ludoteca.app.i18n.loader import DEFAULT_LANG, t
from ludoteca.app.schemas.bookings import Booking, BookingCreate
from ludoteca.app.schemas.slots import RecurringSlot, Slot, SlotStatus
from ludoteca.app.services.bookings import BookingRepository
from ludoteca.app.services.slots import BookingConfig, SlotStore, get_booking_config
from ludoteca.app.utils.notify import LogNotifier, Notifier
from ludoteca.app.utils.schedule_helper import format_slot_label

from ..common.messages import report_error

logger = logging.getLogger(__name__)


@dataclass
class BookingForm:
    slot_id: Optional[int] = None
    guest: str = ""
    phone: str = ""
    guest_email: str = ""
    number_of_kids: int = 1
    comments: str = ""
    pack: Optional[str] = None

    def clear(self) -> None:
        self.slot_id = None
        self.guest = ""
        self.phone = ""
        self.guest_email = ""
        self.number_of_kids = 1
        self.comments = ""
        self.pack = None


class BookingFlow:
    """Booking submission against one slot of the store."""

    def __init__(
        self,
        store: SlotStore,
        bookings: BookingRepository,
        notifier: Notifier | None = None,
        lang: str = DEFAULT_LANG,
        config: BookingConfig | None = None,
    ):
        self.store = store
        self.bookings = bookings
        self.notifier = notifier or LogNotifier()
        self.lang = lang
        self.config = config or get_booking_config()
        self.last_booking: Optional[Booking] = None

    def selectable_slots(self, day: Optional[date] = None) -> list[Slot]:
        """Only bookable slots: CLOSED, booked and full slots are left out."""
        day = day or self.store.selected_date
        slots = self.store.for_date(day) if day else self.store.all()
        return [s for s in slots if s.is_bookable]

    def slot_choices(self, day: Optional[date] = None) -> list[tuple[int, str]]:
        """(id, label) pairs for the slot picker, e.g. (7, "Lun 03.06 09:00-10:00")."""
        return [(s.id, format_slot_label(s, self.lang)) for s in self.selectable_slots(day)]

    def validate(self, form: BookingForm) -> tuple[Slot, BookingCreate]:
        """Raises ValidationError; never touches the network."""
        if form.slot_id is None:
            raise ValidationError("booking:select_slot")

        slot = self.store.get(form.slot_id)
        if slot is None:
            raise ValidationError("booking:slot_unavailable", f"slot {form.slot_id} not loaded")
        if slot.status == SlotStatus.CLOSED:
            raise ValidationError("booking:slot_closed", f"slot {slot.id} is closed")
        if not slot.is_bookable:
            raise ValidationError("booking:slot_unavailable", f"slot {slot.id} is not bookable")

        if not form.guest.strip():
            raise ValidationError("booking:name_required")
        if self.bookings.requires_phone and not form.phone.strip():
            raise ValidationError("booking:phone_required")
        if self.bookings.requires_email and not form.guest_email.strip():
            raise ValidationError("booking:email_required")
        if form.number_of_kids is None or form.number_of_kids < 1:
            raise ValidationError("booking:kids_required")
        if isinstance(slot, RecurringSlot) and form.number_of_kids > slot.available_spots:
            raise ValidationError(
                "booking:not_enough_spots",
                f"{form.number_of_kids} kids, {slot.available_spots} spots",
                params=(slot.available_spots,),
            )

        limit = self.config.max_comment_length
        if form.comments and len(form.comments) > limit:
            raise ValidationError("booking:comments_too_long", params=(limit,))

        request = BookingCreate(
            slot_id=slot.id,
            guest=form.guest.strip(),
            phone=form.phone.strip(),
            guest_email=form.guest_email.strip() or None,
            number_of_kids=form.number_of_kids,
            comments=form.comments.strip() or None,
            pack=form.pack,
        )
        return slot, request

    async def submit(self, form: BookingForm) -> bool:
        """
        Validate, POST and refresh the slot's day.

        Exactly one notification either way. On failure the cache and the
        form are left as they were.
        """
        try:
            slot, request = self.validate(form)
            self.last_booking = await self.bookings.create(request)
        except SlotError as e:
            report_error(self.notifier, e, self.lang, "booking:error", "booking submit")
            return False
        except Exception as e:
            report_error(self.notifier, e, self.lang, "errors:server", "booking submit")
            raise

        try:
            await self.store.refresh_day(slot.date)
        except SlotError as e:
            # Booking went through; the day shows fresh data on next selection
            logger.warning(f"refresh of {slot.date} after booking failed: {e}")
            self.store.fetched_days.discard(slot.date)

        logger.info(f"booking submitted: slot={slot.id} kids={request.number_of_kids}")
        form.clear()
        self.notifier.success(t("booking:success", self.lang))
        return True
