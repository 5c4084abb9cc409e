"""
Operator-facing output for the keystore services.

Every service takes a ``Reporter`` instead of writing to a global logger, so
the caller decides where messages go:

    service = CertificateFingerprintService(reporter=LoggingReporter())
    service = CertificateFingerprintService(reporter=NullReporter())
"""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


# ANSI colors for terminal output
class Colors:
    RED = "\033[0;31m"
    GREEN = "\033[0;32m"
    YELLOW = "\033[1;33m"
    BOLD = "\033[1m"
    NC = "\033[0m"  # No Color

    @classmethod
    def disable(cls):
        """Disable colors (for non-TTY output)."""
        cls.RED = cls.GREEN = cls.YELLOW = cls.BOLD = cls.NC = ""

    @classmethod
    def bold(cls, text: str) -> str:
        return f"{cls.BOLD}{text}{cls.NC}"


class Reporter(Protocol):
    """Sink for messages meant for the operator."""

    def info(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingReporter:
    """Forwards messages to a stdlib logger."""

    def __init__(self, target: logging.Logger | None = None):
        self._logger = target or logger

    def info(self, message: str) -> None:
        self._logger.info("%s", message)

    def warning(self, message: str) -> None:
        self._logger.warning("%s", message)

    def error(self, message: str) -> None:
        self._logger.error("%s", message)


class NullReporter:
    """Discards everything."""

    def info(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass


def default_reporter() -> Reporter:
    return LoggingReporter()
