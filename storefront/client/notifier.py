import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """User-facing notifications (toasts)."""

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Default notifier for headless use: notifications go to the log."""

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.warning(message)
