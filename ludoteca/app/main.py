"""
ludoteca/app/main.py

Wiring of the slot and booking core.

ONLY:
- logging and i18n setup
- one store per slot variant
- client and admin flows for a UI layer to drive

No business logic here.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ludoteca.app.auth import AuthClient
from ludoteca.app.config import LOG_LEVEL
from ludoteca.app.flows.admin.bookings import BookingAdminFlow
from ludoteca.app.flows.admin.slots import SlotAdminFlow
from ludoteca.app.flows.client.booking import BookingFlow
from ludoteca.app.i18n.loader import DEFAULT_LANG, MESSAGES_PATH, load_messages
from ludoteca.app.services.bookings import (
    BookingRepository,
    DaycareBookingRepository,
    MeetingBookingRepository,
)
from ludoteca.app.services.slots import (
    EventSlotRepository,
    MeetingSlotRepository,
    RecurringSlotRepository,
    SlotStore,
)
from ludoteca.app.utils.api import ApiClient
from ludoteca.app.utils.notify import LogNotifier, Notifier

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Setup
# ------------------------------------------------------------------

def setup_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@dataclass
class Console:
    """Everything a UI layer needs, per slot variant."""
    api: ApiClient
    auth: AuthClient
    birthday_slots: SlotStore
    daycare_slots: SlotStore
    meeting_slots: SlotStore
    birthday_booking: BookingFlow
    daycare_booking: BookingFlow
    meeting_booking: BookingFlow
    birthday_admin: SlotAdminFlow
    daycare_admin: SlotAdminFlow
    meeting_admin: SlotAdminFlow
    birthday_bookings_admin: BookingAdminFlow
    daycare_bookings_admin: BookingAdminFlow
    meeting_bookings_admin: BookingAdminFlow

    def close(self) -> None:
        """Drop results of fetches still in flight."""
        self.birthday_slots.close()
        self.daycare_slots.close()
        self.meeting_slots.close()


def build_console(
    client: Optional[ApiClient] = None,
    notifier: Optional[Notifier] = None,
    lang: str = DEFAULT_LANG,
) -> Console:
    client = client or ApiClient()
    notifier = notifier or LogNotifier()

    birthday_slots = SlotStore(EventSlotRepository(client))
    daycare_slots = SlotStore(RecurringSlotRepository(client))
    meeting_slots = SlotStore(MeetingSlotRepository(client))
    birthday_bookings = BookingRepository(client)
    daycare_bookings = DaycareBookingRepository(client)
    meeting_bookings = MeetingBookingRepository(client)

    return Console(
        api=client,
        auth=AuthClient(client),
        birthday_slots=birthday_slots,
        daycare_slots=daycare_slots,
        meeting_slots=meeting_slots,
        birthday_booking=BookingFlow(birthday_slots, birthday_bookings, notifier, lang),
        daycare_booking=BookingFlow(daycare_slots, daycare_bookings, notifier, lang),
        meeting_booking=BookingFlow(meeting_slots, meeting_bookings, notifier, lang),
        birthday_admin=SlotAdminFlow(birthday_slots, notifier, lang),
        daycare_admin=SlotAdminFlow(daycare_slots, notifier, lang),
        meeting_admin=SlotAdminFlow(meeting_slots, notifier, lang),
        birthday_bookings_admin=BookingAdminFlow(birthday_bookings, notifier, lang),
        daycare_bookings_admin=BookingAdminFlow(daycare_bookings, notifier, lang),
        meeting_bookings_admin=BookingAdminFlow(meeting_bookings, notifier, lang),
    )


# ------------------------------------------------------------------
# Entrypoint
# ------------------------------------------------------------------

async def main() -> None:
    """Load every slot variant once and log the month overview."""
    setup_logging()
    load_messages(MESSAGES_PATH)

    console = build_console()
    today = date.today()

    for name, store, admin in (
        ("birthday", console.birthday_slots, console.birthday_admin),
        ("daycare", console.daycare_slots, console.daycare_admin),
        ("meeting", console.meeting_slots, console.meeting_admin),
    ):
        await store.load_all()
        cal = admin.calendar(today.year, today.month)
        logger.info(
            f"{name}: {len(store)} slots, this month "
            f"available={sorted(cal.available_days)} booked={sorted(cal.booked_days)}"
        )


if __name__ == "__main__":
    asyncio.run(main())
