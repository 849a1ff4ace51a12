# ludoteca/app/services/slots/store.py
"""
In-memory slot cache and reconciliation with the server.

Holds id → Slot for everything loaded so far plus the months already
fetched ("YYYY-MM" keys), so a month is not fetched twice unless it is
invalidated.

Mutations:
- update   optimistic patch, replaced by the server answer;
           rolled back on NetworkError, slot dropped on NotFoundError
- delete   optimistic removal; restored on NetworkError, 404 is success
- delete_many  only the ids the server confirmed are removed

Staleness: reset()/close() bump an epoch; a fetch that started under an
older epoch is discarded instead of applied.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from pydantic import ValidationError as SchemaError

from ludoteca.app.errors import (
    BulkDeleteResult,
    NetworkError,
    NotFoundError,
    PartialFailure,
    SlotError,
    ValidationError,
)
from ludoteca.app.schemas.slots import Slot
from ludoteca.app.utils.dates import iter_months, month_bounds, month_key

from .availability import filter_by_date, sort_slots
from .repository import SlotRepository
from .validation import generate_payload, generated_dates, update_patch

logger = logging.getLogger(__name__)


class SlotStore:
    """Single source of truth for the loaded slots of one variant."""

    def __init__(self, repository: SlotRepository):
        self.repository = repository
        self.slots: dict[int, Slot] = {}
        self.loaded_months: set[str] = set()
        self.loading_months: set[str] = set()
        self.fetched_days: set[date] = set()
        self.selected_date: Optional[date] = None
        self.epoch = 0

    def __len__(self) -> int:
        return len(self.slots)

    def __contains__(self, slot_id: int) -> bool:
        return slot_id in self.slots

    def get(self, slot_id: int) -> Optional[Slot]:
        return self.slots.get(slot_id)

    def all(self) -> list[Slot]:
        return sort_slots(self.slots.values())

    def for_date(self, day: date) -> list[Slot]:
        return filter_by_date(self.slots.values(), day)

    @property
    def visible(self) -> list[Slot]:
        """Selected day's slots, or everything when no day is selected."""
        if self.selected_date is None:
            return self.all()
        return self.for_date(self.selected_date)

    def is_month_loaded(self, year: int, month: int) -> bool:
        return month_key(year, month) in self.loaded_months

    # ── Bookkeeping ──────────────────────────────────────────────────────

    def apply_create(self, created: Slot | Iterable[Slot]) -> int:
        """Add created slot(s); returns how many ids were new."""
        items = [created] if not isinstance(created, (list, tuple, set)) else list(created)
        added = 0
        for slot in items:
            if slot.id not in self.slots:
                added += 1
            self.slots[slot.id] = slot
        return added

    def apply_update(self, slot_id: int, patch: dict) -> Optional[Slot]:
        """
        Optimistically patch a cached slot.

        Returns the previous value (for rollback), None when not cached.
        The patched slot is re-validated so a patch can never break the
        model invariants.
        """
        current = self.slots.get(slot_id)
        if current is None:
            return None
        try:
            patched = type(current).model_validate({**current.model_dump(), **patch})
        except SchemaError as e:
            raise ValidationError(message=f"invalid patch for slot {slot_id}: {e}") from e
        self.slots[slot_id] = patched
        return current

    def apply_delete(self, slot_id: int) -> Optional[Slot]:
        """Remove from cache; absent ids are a no-op."""
        return self.slots.pop(slot_id, None)

    def merge_month(self, year: int, month: int, fetched: Iterable[Slot]) -> int:
        """Add only unseen ids and mark the month loaded; returns the count added."""
        added = 0
        for slot in fetched:
            if slot.id not in self.slots:
                self.slots[slot.id] = slot
                added += 1
        self.loaded_months.add(month_key(year, month))
        logger.debug(f"merged {month_key(year, month)}: {added} new, cache={len(self.slots)}")
        return added

    def replace(self, slot: Slot) -> None:
        self.slots[slot.id] = slot

    def replace_range(self, start: date, end: date, slots: Iterable[Slot]) -> None:
        """Drop cached slots inside [start, end] and put the fetched ones in."""
        for slot_id in [i for i, s in self.slots.items() if start <= s.date <= end]:
            del self.slots[slot_id]
        for slot in slots:
            self.slots[slot.id] = slot

    def invalidate_month(self, year: int, month: int) -> None:
        """Next load_month refetches; cached slots stay visible until then."""
        self.loaded_months.discard(month_key(year, month))
        self.fetched_days = {d for d in self.fetched_days if (d.year, d.month) != (year, month)}

    def reset(self) -> None:
        self.slots.clear()
        self.loaded_months.clear()
        self.loading_months.clear()
        self.fetched_days.clear()
        self.selected_date = None
        self.close()

    def close(self) -> None:
        """Discard results of fetches still in flight."""
        self.epoch += 1

    def _stale(self, epoch: int, what: str) -> bool:
        if epoch != self.epoch:
            logger.debug(f"discarding stale result: {what}")
            return True
        return False

    # ── Loading ──────────────────────────────────────────────────────────

    async def load_all(self, range_hint: Optional[tuple[date, date]] = None) -> int:
        """
        Fetch a window and replace the cached slots inside it; returns cache size.

        Months outside the window keep their slots and their loaded mark.
        """
        epoch = self.epoch
        start, end = range_hint or self.repository.default_window()
        slots = await self.repository.fetch_all((start, end))
        if self._stale(epoch, "load_all"):
            return len(self.slots)

        self.replace_range(start, end, slots)
        self.loaded_months.update(month_key(y, m) for y, m in iter_months(start, end))
        logger.info(f"{self.repository.kind} slots loaded: {len(self.slots)}")
        return len(self.slots)

    async def load_month(self, year: int, month: int, force: bool = False) -> int:
        """
        Fetch one month unless already loaded; returns new ids added.

        force=True refetches and lets the server answer replace the month.
        """
        key = month_key(year, month)
        if key in self.loaded_months and not force:
            return 0

        epoch = self.epoch
        self.loading_months.add(key)
        try:
            fetched = await self.repository.fetch_by_month(year, month)
        finally:
            self.loading_months.discard(key)

        if self._stale(epoch, f"month {key}"):
            return 0

        if not force:
            return self.merge_month(year, month, fetched)

        before = set(self.slots)
        start, end = month_bounds(year, month)
        self.replace_range(start, end, fetched)
        self.loaded_months.add(key)
        return len(set(self.slots) - before)

    async def refresh_day(self, day: date) -> list[Slot]:
        """Refetch one day; the server answer replaces the cached day."""
        epoch = self.epoch
        fetched = await self.repository.fetch_by_day(day)
        if self._stale(epoch, f"day {day}"):
            return self.for_date(day)

        self.replace_range(day, day, fetched)
        self.fetched_days.add(day)
        return self.for_date(day)

    async def select_date(self, day: Optional[date]) -> list[Slot]:
        """
        Select a day for the detail views.

        The first selection of a day fetches it; later selections only
        filter the cache.
        """
        self.selected_date = day
        if day is None:
            return self.all()
        if day not in self.fetched_days:
            return await self.refresh_day(day)
        return self.for_date(day)

    # ── Mutations ────────────────────────────────────────────────────────

    async def create(self, data: dict) -> Slot:
        slot = await self.repository.create(data)
        self.apply_create(slot)
        return slot

    async def generate(self, data: dict) -> list[Slot]:
        """
        Bulk-generate and merge the result.

        When the server does not echo the created slots, the months the
        template targets are reloaded and the new ids are returned.
        """
        payload = generate_payload(data)
        created = await self.repository.generate(data)
        if created:
            self.apply_create(created)
            return sort_slots(created)

        before = set(self.slots)
        dates = generated_dates(payload)
        if payload.get("customDates"):
            months = sorted({(d.year, d.month) for d in dates})
        else:
            months = list(iter_months(dates[0], dates[-1]))
        for year, month in months:
            self.invalidate_month(year, month)
            try:
                await self.load_month(year, month, force=True)
            except SlotError as e:
                logger.warning(f"reload of {month_key(year, month)} after generate failed: {e}")
        return sort_slots(s for i, s in self.slots.items() if i not in before)

    async def update(self, slot_id: int, data: dict) -> Slot:
        current = self.slots.get(slot_id)
        patch = update_patch(self.repository.kind, data, current)

        epoch = self.epoch
        previous = self.apply_update(slot_id, patch)
        try:
            slot = await self.repository.update(slot_id, data, current)
        except NotFoundError:
            logger.warning(f"slot {slot_id} no longer exists, dropping it from cache")
            self.apply_delete(slot_id)
            raise
        except NetworkError:
            if previous is not None and not self._stale(epoch, f"rollback {slot_id}"):
                logger.info(f"update of slot {slot_id} failed, rolling back")
                self.replace(previous)
            raise

        if not self._stale(epoch, f"update {slot_id}"):
            self.replace(slot)
        return slot

    async def delete(self, slot_id: int) -> None:
        epoch = self.epoch
        previous = self.apply_delete(slot_id)
        try:
            await self.repository.delete(slot_id)
        except NotFoundError:
            logger.info(f"slot {slot_id} already deleted on the server")
        except NetworkError:
            if previous is not None and not self._stale(epoch, f"restore {slot_id}"):
                logger.info(f"delete of slot {slot_id} failed, restoring it")
                self.replace(previous)
            raise

    async def delete_many(self, ids: Iterable[int]) -> BulkDeleteResult:
        """Reconcile the cache to the deletions the server confirmed."""
        try:
            result = await self.repository.delete_many(ids)
        except PartialFailure as e:
            for slot_id in e.succeeded:
                self.apply_delete(slot_id)
            raise
        for slot_id in result.succeeded:
            self.apply_delete(slot_id)
        return result

    async def update_range(self, day: date, start_hour: str, end_hour: str,
                           capacity: Optional[int] = None, status: Optional[str] = None) -> list[Slot]:
        await self.repository.update_range(day, start_hour, end_hour, capacity, status)
        return await self._refresh_after_mutation(day)

    async def delete_range(self, day: date, start_hour: Optional[str] = None,
                           end_hour: Optional[str] = None) -> list[Slot]:
        await self.repository.delete_range(day, start_hour, end_hour)
        return await self._refresh_after_mutation(day)

    async def _refresh_after_mutation(self, day: date) -> list[Slot]:
        """
        Refetch a day the server already changed.

        A failed refetch does not undo the mutation: the cached day is kept
        and marked unfetched so the next selection asks the server again.
        """
        try:
            return await self.refresh_day(day)
        except SlotError as e:
            logger.warning(f"refresh of {day} after a range change failed: {e}")
            self.fetched_days.discard(day)
            return self.for_date(day)
