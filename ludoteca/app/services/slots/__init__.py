# ludoteca/app/services/slots/__init__.py
"""
Slot availability and scheduling.

Repository: REST calls, response normalisation
Availability: day/week/month statistics (pure)
Store: in-memory cache reconciled with server mutations
"""

from .config import BookingConfig, get_booking_config
from .repository import (
    EventSlotRepository,
    MeetingSlotRepository,
    RecurringSlotRepository,
    SlotRepository,
)
from .availability import (
    CalendarData,
    DayStats,
    DayStatus,
    MonthGroup,
    WeekGroup,
    calendar_data,
    classify_day,
    day_stats,
    filter_by_date,
    group_by_month,
    group_by_week,
    month_listing,
    sort_slots,
)
from .store import SlotStore

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "SlotRepository",
    "EventSlotRepository",
    "MeetingSlotRepository",
    "RecurringSlotRepository",
    "CalendarData",
    "DayStats",
    "DayStatus",
    "MonthGroup",
    "WeekGroup",
    "calendar_data",
    "classify_day",
    "day_stats",
    "filter_by_date",
    "group_by_month",
    "group_by_week",
    "month_listing",
    "sort_slots",
    "SlotStore",
]
