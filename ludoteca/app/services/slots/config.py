# ludoteca/app/services/slots/config.py
"""
Slot console configuration.
"""

from dataclasses import dataclass
from functools import lru_cache

from ludoteca.app.config import settings


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for the slot console.

    Attributes:
        fetch_window_months: Default fetch_all window, months back and forward
        listing_months: Months always shown in the admin list (current + previous)
        items_per_page: Slots per page inside an expanded week
        max_comment_length: Booking comments limit
    """
    fetch_window_months: int = 12
    listing_months: int = 12
    items_per_page: int = 20
    max_comment_length: int = 500

    def __post_init__(self):
        """Validate configuration."""
        if self.fetch_window_months < 1:
            raise ValueError(f"fetch_window_months must be >= 1, got {self.fetch_window_months}")
        if self.listing_months < 1:
            raise ValueError(f"listing_months must be >= 1, got {self.listing_months}")
        if self.items_per_page < 1:
            raise ValueError(f"items_per_page must be >= 1, got {self.items_per_page}")


@lru_cache
def get_booking_config() -> BookingConfig:
    """
    Get slot configuration (singleton).

    Reads the environment-backed settings once.
    """
    return BookingConfig(
        fetch_window_months=settings.FETCH_WINDOW_MONTHS,
        items_per_page=settings.ITEMS_PER_PAGE,
    )
