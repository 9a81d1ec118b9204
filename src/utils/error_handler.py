"""Error reporting abstractions for file and configuration loading."""

from __future__ import annotations

from abc import ABC, abstractmethod

import logfire


class ErrorHandler(ABC):
    """Interface for reporting errors.

    Implementations should avoid raising further exceptions and should emit
    concise diagnostics suitable for production logs.
    """

    @abstractmethod
    def handle(self, message: str, exc: Exception | None = None) -> None:
        """Record ``message`` with optional ``exc`` context."""


class LoggingErrorHandler(ErrorHandler):
    """Error handler that logs via ``logfire``."""

    def handle(self, message: str, exc: Exception | None = None) -> None:
        if exc:
            logfire.error(f"{message}: {exc}", error_type=type(exc).__name__)
        else:
            logfire.error(message)


class CollectingErrorHandler(ErrorHandler):
    """Error handler that keeps reported messages for later inspection.

    Lets callers inspect what a loader reported without parsing logs.
    """

    def __init__(self) -> None:
        self.messages: list[str] = []

    def handle(self, message: str, exc: Exception | None = None) -> None:
        self.messages.append(f"{message}: {exc}" if exc else message)
