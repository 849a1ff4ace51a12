"""
ludoteca/app/utils/notify.py

Toast / confirm collaborator.

The core only needs: success(msg), error(msg) and a yes/no confirm.
UI layers plug in their own implementation; LogNotifier is the default.
"""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    async def confirm(self, message: str, variant: str = "danger") -> bool: ...


class LogNotifier:
    """Writes notifications to the log and auto-confirms."""

    def __init__(self, auto_confirm: bool = True):
        self.auto_confirm = auto_confirm

    def success(self, message: str) -> None:
        logger.info(f"[success] {message}")

    def error(self, message: str) -> None:
        logger.warning(f"[error] {message}")

    async def confirm(self, message: str, variant: str = "danger") -> bool:
        logger.info(f"[confirm:{variant}] {message} -> {self.auto_confirm}")
        return self.auto_confirm
