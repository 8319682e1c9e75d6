"""One-shot user notifications."""

import logging
from abc import ABC, abstractmethod


class Notifier(ABC):
    """Toast-style message sink. Messages are fire-and-forget."""

    @abstractmethod
    def success(self, message: str) -> None:
        pass

    @abstractmethod
    def error(self, message: str) -> None:
        pass


class LoggingNotifier(Notifier):
    """Notifier that writes messages to the log."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(__name__)

    def success(self, message: str) -> None:
        self.logger.info(message)

    def error(self, message: str) -> None:
        self.logger.error(message)
