"""User facing notifications emitted by the client services."""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def success(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...

    def info(self, message: str) -> None:
        ...


class LoggingNotifier:
    """Notifier that writes messages to the application log."""

    def __init__(self, log: logging.Logger = logger):
        self.log = log

    def success(self, message: str) -> None:
        self.log.info(message)

    def error(self, message: str) -> None:
        self.log.error(message)

    def info(self, message: str) -> None:
        self.log.info(message)
