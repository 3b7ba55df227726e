"""
Transfer progress reporting.

The engine never renders progress itself; it only calls a listener.
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class TransportProgressListener(Protocol):
    """Receives progress callbacks for one blob transfer."""

    def on_progress(self, current: int, total: Optional[int]) -> None:
        """Called periodically with bytes transferred so far and the expected total."""
        ...

    def on_success(self, total: int) -> None:
        """Called once when the transfer has completed."""
        ...


class NullProgress:
    """Listener that ignores every callback."""

    def on_progress(self, current: int, total: Optional[int]) -> None:
        pass

    def on_success(self, total: int) -> None:
        pass


class LoggingProgress:
    """Listener that reports transfers through the logging module."""

    def __init__(self, label: str):
        self.label = label

    def on_progress(self, current: int, total: Optional[int]) -> None:
        logger.debug(f"{self.label}: {current}/{total if total is not None else '?'} bytes")

    def on_success(self, total: int) -> None:
        logger.info(f"{self.label}: done ({total} bytes)")


__all__ = ["TransportProgressListener", "NullProgress", "LoggingProgress"]
