# ludoteca/app/flows/admin/slots.py
"""
Admin slot console.

Actions:
- create / generate / update / update_range
- delete (confirm) / delete_range (confirm) / delete_selected (confirm, bulk)
- selection: toggle, select_all(visible), clear_selection
- views: calendar(month), weeks(month), months(listing), page(week)

Every action ends with exactly one notification; a declined confirm ends
with none and sends nothing to the server.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from ludoteca.app.errors import PartialFailure, SlotError
from ludoteca.app.i18n.loader import DEFAULT_LANG, t
from ludoteca.app.schemas.slots import Slot
from ludoteca.app.services.slots import (
    BookingConfig,
    CalendarData,
    MonthGroup,
    SlotStore,
    WeekGroup,
    calendar_data,
    get_booking_config,
    group_by_week,
    month_listing,
)
from ludoteca.app.utils.dates import to_api_date
from ludoteca.app.utils.notify import LogNotifier, Notifier
from ludoteca.app.utils.pagination import Page, paginate

from ..common.messages import report_error

logger = logging.getLogger(__name__)


class SlotAdminFlow:

    def __init__(
        self,
        store: SlotStore,
        notifier: Notifier | None = None,
        lang: str = DEFAULT_LANG,
        config: BookingConfig | None = None,
    ):
        self.store = store
        self.notifier = notifier or LogNotifier()
        self.lang = lang
        self.config = config or get_booking_config()
        self.selected: set[int] = set()

    # ==============================================================
    # Views
    # ==============================================================

    def calendar(self, year: int, month: int) -> CalendarData:
        return calendar_data(self.store.slots.values(), year, month)

    def weeks(self, year: int, month: int) -> list[WeekGroup]:
        return group_by_week(self.store.slots.values(), year, month)

    def months(self, today: Optional[date] = None) -> list[MonthGroup]:
        return month_listing(
            self.store.slots.values(),
            today,
            months_back=self.config.listing_months - 1,
            loaded=self.store.loaded_months,
            loading=self.store.loading_months,
        )

    def page(self, week_slots: list[Slot], page: int = 0) -> Page[Slot]:
        return paginate(week_slots, page, self.config.items_per_page)

    # ==============================================================
    # Selection
    # ==============================================================

    def toggle(self, slot_id: int) -> bool:
        """Returns True when the slot ends up selected."""
        if slot_id in self.selected:
            self.selected.discard(slot_id)
            return False
        self.selected.add(slot_id)
        return True

    def select_all(self, visible: Iterable[Slot]) -> None:
        self.selected = {s.id for s in visible}

    def clear_selection(self) -> None:
        self.selected.clear()

    def is_selected(self, slot_id: int) -> bool:
        return slot_id in self.selected

    # ==============================================================
    # Mutations
    # ==============================================================

    async def create_slot(self, data: dict) -> Optional[Slot]:
        try:
            slot = await self.store.create(data)
        except SlotError as e:
            report_error(self.notifier, e, self.lang, "slots:create_error", "slot create")
            return None
        self.notifier.success(t("slots:create_success", self.lang))
        return slot

    async def generate_slots(self, data: dict) -> list[Slot]:
        try:
            slots = await self.store.generate(data)
        except SlotError as e:
            report_error(self.notifier, e, self.lang, "slots:create_error", "slot generate")
            return []
        self.notifier.success(t("slots:generate_success", self.lang, len(slots)))
        return slots

    async def update_slot(self, slot_id: int, data: dict) -> Optional[Slot]:
        try:
            slot = await self.store.update(slot_id, data)
        except SlotError as e:
            report_error(self.notifier, e, self.lang, "slots:update_error", f"slot {slot_id} update")
            return None
        self.notifier.success(t("slots:update_success", self.lang))
        return slot

    async def update_range(
        self,
        day: date,
        start_hour: str,
        end_hour: str,
        capacity: Optional[int] = None,
        status: Optional[str] = None,
    ) -> Optional[list[Slot]]:
        try:
            slots = await self.store.update_range(day, start_hour, end_hour, capacity, status)
        except SlotError as e:
            report_error(self.notifier, e, self.lang, "slots:update_error", f"range update {day}")
            return None
        self.notifier.success(t("slots:update_range_success", self.lang, to_api_date(day)))
        return slots

    async def delete_slot(self, slot_id: int) -> bool:
        if not await self.notifier.confirm(t("slots:confirm_delete", self.lang), "danger"):
            return False
        try:
            await self.store.delete(slot_id)
        except SlotError as e:
            report_error(self.notifier, e, self.lang, "slots:delete_error", f"slot {slot_id} delete")
            return False
        self.selected.discard(slot_id)
        self.notifier.success(t("slots:delete_success", self.lang))
        return True

    async def delete_range(
        self,
        day: date,
        start_hour: Optional[str] = None,
        end_hour: Optional[str] = None,
    ) -> bool:
        label = to_api_date(day)
        if not await self.notifier.confirm(t("slots:confirm_delete_range", self.lang, label), "danger"):
            return False
        try:
            await self.store.delete_range(day, start_hour, end_hour)
        except SlotError as e:
            report_error(self.notifier, e, self.lang, "slots:delete_error", f"range delete {day}")
            return False
        self.selected = {i for i in self.selected if i in self.store}
        self.notifier.success(t("slots:delete_range_success", self.lang, label))
        return True

    async def delete_selected(self) -> bool:
        """Bulk delete of the current selection."""
        if not self.selected:
            self.notifier.error(t("slots:select_at_least_one", self.lang))
            return False

        ids = sorted(self.selected)
        message = t("slots:confirm_delete_multiple", self.lang, len(ids))
        if not await self.notifier.confirm(message, "danger"):
            return False

        try:
            result = await self.store.delete_many(ids)
        except PartialFailure as e:
            self.selected.difference_update(e.succeeded)
            report_error(self.notifier, e, self.lang, "slots:delete_error", "bulk delete")
            return False
        except SlotError as e:
            report_error(self.notifier, e, self.lang, "slots:delete_error", "bulk delete")
            return False

        self.selected.difference_update(result.succeeded)
        self.notifier.success(t("slots:delete_multiple_success", self.lang, len(result.succeeded)))
        return True
