"""
Error → notification text shared by the client and admin flows.

Used from:
- client/booking.py
- admin/slots.py
- admin/bookings.py
"""

import logging

from ludoteca.app.errors import SlotError
from ludoteca.app.i18n.loader import t

logger = logging.getLogger(__name__)

# Keys that say nothing specific; the action's own error text is used instead
GENERIC_KEYS = {"errors:server", "errors:network"}


def error_text(exc: BaseException, lang: str | None, fallback: str) -> str:
    if isinstance(exc, SlotError) and exc.key not in GENERIC_KEYS:
        return t(exc.key, lang, *exc.params)
    return t(fallback, lang)


def report_error(notifier, exc: BaseException, lang: str | None, fallback: str, action: str) -> None:
    """Log and notify once."""
    if isinstance(exc, SlotError):
        logger.warning(f"{action} failed: {exc.key} {exc}")
    else:
        logger.exception(f"{action} failed unexpectedly")
    notifier.error(error_text(exc, lang, fallback))
