from datetime import date, datetime
from typing import Optional

from ludoteca.app.schemas.slots import EventSlot, RecurringSlot


class RecordingNotifier:
    """Notifier that remembers every call; confirm answers with `answer`."""

    def __init__(self, answer: bool = True):
        self.answer = answer
        self.successes: list[str] = []
        self.errors: list[str] = []
        self.confirms: list[tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

    async def confirm(self, message: str, variant: str = "danger") -> bool:
        self.confirms.append((message, variant))
        return self.answer

    @property
    def total(self) -> int:
        return len(self.successes) + len(self.errors)


def daycare_slot(slot_id: int, day: date, open_hour: str = "09:00", close_hour: str = "10:00",
                 capacity: int = 10, available: Optional[int] = None,
                 status: str = "OPEN") -> RecurringSlot:
    return RecurringSlot(
        id=slot_id,
        date=day,
        open_hour=open_hour,
        close_hour=close_hour,
        capacity=capacity,
        available_spots=capacity if available is None else available,
        status=status,
    )


def event_slot(slot_id: int, day: date, start: str = "10:00", end: str = "12:00",
               status: str = "OPEN", booked: bool = False) -> EventSlot:
    return EventSlot(
        id=slot_id,
        date=day,
        start_time=datetime.combine(day, datetime.strptime(start, "%H:%M").time()),
        end_time=datetime.combine(day, datetime.strptime(end, "%H:%M").time()),
        status=status,
        booked=booked,
    )
