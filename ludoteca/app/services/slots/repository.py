# ludoteca/app/services/slots/repository.py
"""
Slot repository: domain operations → REST calls.

Three variants share one base:
- EventSlotRepository      /api/birthdaySlots
- RecurringSlotRepository  /api/daycareSlots
- MeetingSlotRepository    /api/meetingSlots

Responses are normalised into schema objects. The backend answers either
with a bare list or with the list wrapped under "slots", "availableSlots"
or "data"; single objects may come wrapped under "slot".
"""

import asyncio
import logging
from datetime import date, timedelta
from typing import Any, Iterable, Optional

from pydantic import ValidationError as SchemaError

from ludoteca.app.errors import (
    BulkDeleteResult,
    NetworkError,
    NotFoundError,
    PartialFailure,
    ValidationError,
)
from ludoteca.app.schemas.slots import EventSlot, MeetingSlot, RecurringSlot, Slot
from ludoteca.app.utils.api import ApiClient, api as default_api
from ludoteca.app.utils.dates import add_months, month_bounds, to_api_date

from .config import BookingConfig, get_booking_config
from .validation import (
    event_create_payload,
    generate_payload,
    meeting_create_payload,
    patch_to_payload,
    range_payload,
    recurring_create_payload,
    update_patch,
)

logger = logging.getLogger(__name__)

LIST_KEYS = ("slots", "availableSlots", "data")


class SlotRepository:
    """Common fetch/normalise/delete logic."""

    kind: str = ""
    base_path: str = ""
    model: type = EventSlot

    def __init__(self, client: ApiClient | None = None, config: BookingConfig | None = None):
        self.api = client or default_api
        self.config = config or get_booking_config()

    # ── Normalisation ────────────────────────────────────────────────────

    def _unwrap_list(self, data: Any) -> list:
        if data is None:
            return []
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            for key in LIST_KEYS:
                if isinstance(data.get(key), list):
                    return data[key]
            if isinstance(data.get("slot"), dict):
                return [data["slot"]]
            if "id" in data:
                return [data]
            return []
        raise NetworkError("errors:invalid_response", f"unexpected payload type: {type(data).__name__}")

    def parse_many(self, data: Any) -> list[Slot]:
        """Parse a list response; malformed records are skipped."""
        slots = []
        for raw in self._unwrap_list(data):
            try:
                slots.append(self.model.model_validate(raw))
            except SchemaError as e:
                logger.warning(f"Skipping malformed {self.kind} slot {raw!r}: {e.error_count()} errors")
        return slots

    def parse_one(self, data: Any) -> Slot:
        """Parse a single-object response."""
        raw = data
        if isinstance(data, dict) and isinstance(data.get("slot"), dict):
            raw = data["slot"]
        try:
            return self.model.model_validate(raw)
        except SchemaError as e:
            logger.error(f"Invalid {self.kind} slot in response: {raw!r}")
            raise NetworkError("errors:invalid_response", f"invalid slot payload: {e}") from e

    # ── Fetch ────────────────────────────────────────────────────────────

    def default_window(self, today: date | None = None) -> tuple[date, date]:
        """FETCH_WINDOW_MONTHS back and forward, whole months."""
        today = today or date.today()
        months = self.config.fetch_window_months
        start = add_months(today, -months)
        end = add_months(today, months + 1) - timedelta(days=1)
        return start, end

    async def fetch_all(self, range_hint: Optional[tuple[date, date]] = None) -> list[Slot]:
        start, end = range_hint or self.default_window()
        return await self.fetch_range(start, end)

    async def fetch_range(self, start: date, end: date) -> list[Slot]:
        """Slots with start <= date <= end."""
        data = await self.api.get(
            self.list_path,
            params={"startDate": to_api_date(start), "endDate": to_api_date(end)},
        )
        slots = [s for s in self.parse_many(data) if start <= s.date <= end]
        logger.debug(f"{self.kind} slots {start}..{end}: {len(slots)}")
        return slots

    async def fetch_by_month(self, year: int, month: int) -> list[Slot]:
        """month is 1..12."""
        if not 1 <= month <= 12:
            raise ValueError(f"month must be 1..12, got {month}")
        start, end = month_bounds(year, month)
        return await self.fetch_range(start, end)

    async def fetch_by_day(self, day: date) -> list[Slot]:
        return await self.fetch_range(day, day)

    @property
    def list_path(self) -> str:
        return self.base_path

    # ── Mutations ────────────────────────────────────────────────────────

    def create_payload(self, data: dict) -> dict:
        raise NotImplementedError

    async def create(self, data: dict) -> Slot:
        payload = self.create_payload(data)
        result = await self.api.post(self.create_path, json=payload)
        slot = self.parse_one(result)
        logger.info(f"{self.kind} slot created: id={slot.id} date={slot.date}")
        return slot

    async def update(self, slot_id: int, data: dict, current: Optional[Slot] = None) -> Slot:
        """Partial update; ordering is checked against current when given."""
        patch = update_patch(self.kind, data, current)
        result = await self.api.put(self.item_path(slot_id), json=patch_to_payload(patch))
        slot = self.parse_one(result)
        logger.info(f"{self.kind} slot updated: id={slot_id}")
        return slot

    async def delete(self, slot_id: int) -> None:
        """NotFoundError when the slot is already gone."""
        await self.api.delete(self.item_path(slot_id))
        logger.info(f"{self.kind} slot deleted: id={slot_id}")

    async def delete_many(self, ids: Iterable[int]) -> BulkDeleteResult:
        """
        Delete concurrently; each deletion is attempted independently.

        A 404 counts as deleted. Raises PartialFailure (carrying the result)
        when anything else failed.
        """
        ids = list(dict.fromkeys(ids))
        outcomes = await asyncio.gather(
            *(self.delete(slot_id) for slot_id in ids),
            return_exceptions=True,
        )

        result = BulkDeleteResult()
        for slot_id, outcome in zip(ids, outcomes):
            if outcome is None or isinstance(outcome, NotFoundError):
                result.succeeded.append(slot_id)
            elif isinstance(outcome, Exception):
                result.failed[slot_id] = outcome
            else:
                raise outcome

        logger.info(
            f"{self.kind} bulk delete: {len(result.succeeded)} deleted, {len(result.failed)} failed"
        )
        if result.failed:
            raise PartialFailure(result)
        return result

    @property
    def create_path(self) -> str:
        return self.base_path

    def item_path(self, slot_id: int) -> str:
        return f"{self.base_path}/{slot_id}"

    # ── Recurring-only operations ────────────────────────────────────────

    async def generate(self, data: dict) -> list[Slot]:
        raise NotImplementedError(f"{self.kind} slots cannot be generated")

    async def update_range(self, day: date, start_hour: str, end_hour: str,
                           capacity: Optional[int] = None, status: Optional[str] = None) -> list[Slot]:
        raise NotImplementedError(f"{self.kind} slots have no range update")

    async def delete_range(self, day: date, start_hour: Optional[str] = None,
                           end_hour: Optional[str] = None) -> None:
        raise NotImplementedError(f"{self.kind} slots have no range delete")


class EventSlotRepository(SlotRepository):
    """Birthday slots."""

    kind = "event"
    base_path = "/api/birthdaySlots"
    model = EventSlot

    def create_payload(self, data: dict) -> dict:
        return event_create_payload(data)

    async def fetch_by_day(self, day: date) -> list[Slot]:
        data = await self.api.get(f"{self.base_path}/getSlotsByDay/{to_api_date(day)}")
        return [s for s in self.parse_many(data) if s.date == day]

    async def fetch_available(self) -> list[Slot]:
        """OPEN, unbooked birthday slots."""
        data = await self.api.get(f"{self.base_path}/availableSlots")
        return [s for s in self.parse_many(data) if s.is_bookable]


class RecurringSlotRepository(SlotRepository):
    """Daycare slots."""

    kind = "recurring"
    base_path = "/api/daycareSlots"
    model = RecurringSlot

    @property
    def list_path(self) -> str:
        return f"{self.base_path}/"

    @property
    def create_path(self) -> str:
        return f"{self.base_path}/daycare-slots"

    def item_path(self, slot_id: int) -> str:
        return f"{self.base_path}/daycare-slots/{slot_id}"

    def create_payload(self, data: dict) -> dict:
        return recurring_create_payload(data)

    async def fetch_available(
        self,
        day: date | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Slot]:
        """Open slots with spots left, for one day or a date range."""
        if day is not None:
            data = await self.api.get(f"{self.base_path}/available/date/{to_api_date(day)}")
        elif start is not None and end is not None:
            data = await self.api.get(
                self.list_path,
                params={
                    "startDate": to_api_date(start),
                    "endDate": to_api_date(end),
                    "availableOnly": "true",
                },
            )
        else:
            raise ValueError("fetch_available needs a day or a start/end range")
        return [s for s in self.parse_many(data) if s.is_bookable]

    async def generate(self, data: dict) -> list[Slot]:
        """
        Bulk generation from a template.

        Returns the created slots when the server echoes them, otherwise an
        empty list (the caller reloads the affected months).
        """
        payload = generate_payload(data)
        result = await self.api.post(f"{self.base_path}/generate-daycare-slots", json=payload)
        slots = self.parse_many(result)
        logger.info(
            f"daycare slots generated from {payload['startDate']}: "
            f"{len(slots) if slots else 'not echoed'}"
        )
        return slots

    async def update_range(self, day: date, start_hour: str, end_hour: str,
                           capacity: Optional[int] = None, status: Optional[str] = None) -> list[Slot]:
        """Update every slot of a day inside the hour window."""
        payload = range_payload(day, start_hour, end_hour, capacity, status)
        if "capacity" not in payload and "status" not in payload:
            raise ValidationError("errors:fill_required", "capacity or status required")
        result = await self.api.put(f"{self.base_path}/daycare-slots", json=payload)
        logger.info(f"daycare slots updated for {payload['date']} {start_hour}-{end_hour}")
        return self.parse_many(result)

    async def delete_range(self, day: date, start_hour: Optional[str] = None,
                           end_hour: Optional[str] = None) -> None:
        """Delete every slot of a day, or only those inside the hour window."""
        payload = range_payload(day, start_hour, end_hour, hours_required=False)
        await self.api.delete(f"{self.base_path}/daycare-slots", json=payload)
        logger.info(f"daycare slots deleted for {payload['date']}")


class MeetingSlotRepository(EventSlotRepository):
    """Visit slots; same routes as birthday slots minus /availableSlots."""

    kind = "meeting"
    base_path = "/api/meetingSlots"
    model = MeetingSlot

    def create_payload(self, data: dict) -> dict:
        return meeting_create_payload(data)

    async def fetch_available(self) -> list[Slot]:
        """Open visit slots with spots left, inside the default window."""
        return [s for s in await self.fetch_all() if s.is_bookable]
