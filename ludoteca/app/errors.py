"""
Error taxonomy for the slot and booking core.

Errors carry an i18n key, never a user-facing string. Flows translate the
key with ``t()`` when they notify the user.

    SlotError
    ├── ValidationError      input rejected before any network call
    ├── NetworkError         transport failure or non-2xx response
    │   └── SessionExpiredError
    ├── NotFoundError        404 for a slot/booking id
    └── PartialFailure       bulk delete where some deletions failed
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


__all__ = [
    "SlotError",
    "ValidationError",
    "NetworkError",
    "SessionExpiredError",
    "NotFoundError",
    "PartialFailure",
    "BulkDeleteResult",
    "translate_backend_error",
    "error_key",
]


class SlotError(Exception):
    """Base class for core errors."""

    default_key = "errors:server"

    def __init__(self, key: str | None = None, message: str | None = None, params: tuple = ()):
        self.key = key or self.default_key
        self.params = tuple(params)
        super().__init__(message or self.key)


class ValidationError(SlotError):
    """Required field missing or ordering/capacity constraint violated."""

    default_key = "errors:fill_required"


class NetworkError(SlotError):
    """Transport-level failure or non-2xx response."""

    default_key = "errors:network"

    def __init__(
        self,
        key: str | None = None,
        message: str | None = None,
        *,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        self.status_code = status_code
        self.detail = detail
        super().__init__(key, message)


class SessionExpiredError(NetworkError):
    """Token refresh failed; the user has to sign in again."""

    default_key = "errors:session_expired"


class NotFoundError(SlotError):
    """Update/delete referenced an id the server no longer has."""

    default_key = "errors:slot_not_found"


@dataclass
class BulkDeleteResult:
    succeeded: list[int] = field(default_factory=list)
    failed: dict[int, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class PartialFailure(SlotError):
    """Some deletions of a bulk delete failed."""

    default_key = "slots:delete_partial"

    def __init__(self, result: BulkDeleteResult):
        self.result = result
        super().__init__(
            message=f"{len(result.succeeded)} deleted, {len(result.failed)} failed",
            params=(len(result.succeeded), len(result.failed)),
        )

    @property
    def succeeded(self) -> list[int]:
        return self.result.succeeded

    @property
    def failed(self) -> dict[int, Exception]:
        return self.result.failed


# Backend messages (Spanish) → i18n keys. Exact match first.
BACKEND_ERRORS: dict[str, str] = {
    "Fechas inválidas. Por favor, verifica las fechas proporcionadas.": "errors:invalid_dates",
    "No se pueden crear slots con fechas pasadas.": "errors:past_date",
    "No se pueden crear slots con horarios pasados.": "errors:past_time",
    "No se pueden actualizar slots a fechas pasadas.": "errors:past_date",
    "No se pueden actualizar slots a horarios pasados.": "errors:past_time",
    "ID de slot inválido.": "errors:invalid_slot_id",
    "La hora de inicio debe ser anterior a la hora de fin.": "errors:end_after_start",
    "Slot no encontrado": "errors:slot_not_found",
    "Slot no encontrado.": "errors:slot_not_found",
    "No se puede eliminar un slot que tiene una reserva activa.": "errors:cannot_delete_with_booking",
    "Error interno del servidor.": "errors:server",
    "Internal server error": "errors:server",
    "Ya existe un slot con esa fecha y horario exacto": "errors:slot_exists",
    "El slot se solapa con otro existente": "errors:slot_overlaps",
    "La hora de fin debe ser posterior a la de inicio": "errors:end_after_start",
    "Debes proporcionar un parámetro ?date=dd-MM-yyyy": "errors:missing_date_param",
    "Session expired": "errors:session_expired",
}

# Fallback rules, first match wins.
BACKEND_ERROR_RULES: list[tuple[str, str, str]] = [
    ("prefix", "Ya existe", "errors:slot_exists"),
    ("prefix", "El slot", "errors:slot_overlaps"),
    ("contains", "hora de fin", "errors:end_after_start"),
    ("contains", "no encontrad", "errors:slot_not_found"),
]


def translate_backend_error(message: str | None, default: str = "errors:server") -> str:
    """Map a backend error message to an i18n key."""
    if not message:
        return default

    message = message.strip()
    if message in BACKEND_ERRORS:
        return BACKEND_ERRORS[message]

    for kind, needle, key in BACKEND_ERROR_RULES:
        if kind == "prefix" and message.startswith(needle):
            return key
        if kind == "contains" and needle in message:
            return key

    return default


def error_key(exc: BaseException) -> str:
    """i18n key for any exception; unknown errors map to the generic one."""
    if isinstance(exc, SlotError):
        return exc.key
    return "errors:server"
