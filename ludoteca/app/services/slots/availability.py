# ludoteca/app/services/slots/availability.py
"""
Calendar availability: pure functions of (slots, month).

Day level:
- full       zero free capacity across the day's slots
- available  every slot OPEN with its whole capacity free
- partial    anything else (mixed booked/free, mixed OPEN/CLOSED)

Week level: Monday-start weeks overlapping the month, only weeks with slots.
Month level: same rollup; the admin listing also shows empty months.

Days without slots have no entry at all.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, Optional

from ludoteca.app.schemas.slots import Slot, SlotStatus
from ludoteca.app.utils.dates import (
    add_months,
    month_key,
    week_start,
    weeks_in_month,
)


class DayStatus(str, Enum):
    AVAILABLE = "available"
    PARTIAL = "partial"
    FULL = "full"


@dataclass
class DayStats:
    day: int
    total: int
    available: int
    capacity: int
    available_capacity: int
    status: DayStatus


@dataclass
class CalendarData:
    year: int
    month: int
    days: dict[int, DayStats] = field(default_factory=dict)
    available_days: set[int] = field(default_factory=set)
    booked_days: set[int] = field(default_factory=set)

    def status(self, day: int) -> Optional[DayStatus]:
        stats = self.days.get(day)
        return stats.status if stats else None


@dataclass
class WeekGroup:
    start: date
    end: date
    slots: list
    total_slots: int
    available_slots: int
    total_capacity: int
    available_capacity: int

    @property
    def key(self) -> str:
        return self.start.isoformat()


@dataclass
class MonthGroup:
    year: int
    month: int
    slots: list
    total_slots: int
    available_slots: int
    total_capacity: int
    available_capacity: int
    loaded: bool = False
    loading: bool = False

    @property
    def key(self) -> str:
        return month_key(self.year, self.month)


# ── Helpers ──────────────────────────────────────────────────────────────


def sort_slots(slots: Iterable[Slot]) -> list[Slot]:
    """(date, start/open time) ascending, then id."""
    return sorted(slots, key=lambda s: (s.sort_key, s.id))


def filter_by_date(slots: Iterable[Slot], day: date) -> list[Slot]:
    return sort_slots(s for s in slots if s.date == day)


def _in_month(slots: Iterable[Slot], year: int, month: int) -> list[Slot]:
    return [s for s in slots if s.date.year == year and s.date.month == month]


def _rollup(slots: list[Slot]) -> dict:
    return {
        "total_slots": len(slots),
        "available_slots": sum(1 for s in slots if s.status == SlotStatus.OPEN),
        "total_capacity": sum(s.capacity for s in slots),
        "available_capacity": sum(s.available_spots for s in slots),
    }


# ── Day level ────────────────────────────────────────────────────────────


def classify_day(slots: list[Slot]) -> DayStatus:
    """Status of one non-empty day."""
    if sum(s.available_spots for s in slots) == 0:
        return DayStatus.FULL
    if all(s.is_fully_available for s in slots):
        return DayStatus.AVAILABLE
    return DayStatus.PARTIAL


def day_stats(slots: Iterable[Slot], year: int, month: int) -> dict[int, DayStats]:
    by_day: dict[int, list[Slot]] = {}
    for slot in _in_month(slots, year, month):
        by_day.setdefault(slot.date.day, []).append(slot)

    stats = {}
    for day, items in sorted(by_day.items()):
        stats[day] = DayStats(
            day=day,
            total=len(items),
            available=sum(1 for s in items if s.is_bookable),
            capacity=sum(s.capacity for s in items),
            available_capacity=sum(s.available_spots for s in items),
            status=classify_day(items),
        )
    return stats


def calendar_data(slots: Iterable[Slot], year: int, month: int) -> CalendarData:
    """
    Day stats plus the two colouring sets.

    A partial day belongs to both sets so the calendar can draw it half/half.
    """
    stats = day_stats(slots, year, month)
    data = CalendarData(year=year, month=month, days=stats)
    for day, s in stats.items():
        if s.status in (DayStatus.AVAILABLE, DayStatus.PARTIAL):
            data.available_days.add(day)
        if s.status in (DayStatus.FULL, DayStatus.PARTIAL):
            data.booked_days.add(day)
    return data


# ── Week / month level ───────────────────────────────────────────────────


def group_by_week(slots: Iterable[Slot], year: int, month: int) -> list[WeekGroup]:
    month_slots = _in_month(slots, year, month)

    by_week: dict[date, list[Slot]] = {}
    for slot in month_slots:
        by_week.setdefault(week_start(slot.date), []).append(slot)

    groups = []
    for start, end in weeks_in_month(year, month):
        items = by_week.get(start)
        if not items:
            continue
        items = sort_slots(items)
        groups.append(WeekGroup(start=start, end=end, slots=items, **_rollup(items)))
    return groups


def group_by_month(
    slots: Iterable[Slot],
    months: Iterable[tuple[int, int]],
    loaded: Iterable[str] = (),
    loading: Iterable[str] = (),
) -> list[MonthGroup]:
    """One group per (year, month) given, in the order given."""
    slots = list(slots)
    loaded = set(loaded)
    loading = set(loading)

    groups = []
    for year, month in months:
        items = sort_slots(_in_month(slots, year, month))
        key = month_key(year, month)
        groups.append(MonthGroup(
            year=year,
            month=month,
            slots=items,
            loaded=key in loaded,
            loading=key in loading,
            **_rollup(items),
        ))
    return groups


def listing_months(slots: Iterable[Slot], today: date, months_back: int = 11) -> list[tuple[int, int]]:
    """Current month, months_back previous months and every month with a slot; newest first."""
    months = {(d.year, d.month) for d in (add_months(today, -i) for i in range(months_back + 1))}
    months.update((s.date.year, s.date.month) for s in slots)
    return sorted(months, reverse=True)


def month_listing(
    slots: Iterable[Slot],
    today: Optional[date] = None,
    months_back: int = 11,
    loaded: Iterable[str] = (),
    loading: Iterable[str] = (),
) -> list[MonthGroup]:
    """Admin list view; empty months are kept with total_slots = 0."""
    slots = list(slots)
    today = today or date.today()
    return group_by_month(slots, listing_months(slots, today, months_back), loaded, loading)
