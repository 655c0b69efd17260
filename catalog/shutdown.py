"""Graceful shutdown for the catalog page loop.

A first SIGINT/SIGTERM asks the fetch loop to stop after the current page so
the pages fetched so far can still be written; a second one exits at once.
"""

import signal
import sys
import threading
from typing import Optional

from catalog.logging_config import get_logger

__all__ = [
    "ShutdownHandler",
    "get_shutdown_handler",
    "shutdown_requested",
]

logger = get_logger("shutdown")


class ShutdownHandler:
    """Process-wide stop flag driven by SIGINT/SIGTERM.

    Usage:
        handler = get_shutdown_handler().install()
        while not handler.shutdown_requested:
            fetch_next_page()
        handler.uninstall()
    """

    _instance: Optional["ShutdownHandler"] = None
    _lock = threading.Lock()

    def __init__(self) -> None:
        self._event = threading.Event()
        self._original_handlers: dict = {}
        self._installed = False

    @classmethod
    def get_instance(cls) -> "ShutdownHandler":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    def install(self) -> "ShutdownHandler":
        """Install signal handlers. Returns self for chaining."""
        if self._installed:
            return self
        for signum in (signal.SIGINT, signal.SIGTERM):
            self._original_handlers[signum] = signal.getsignal(signum)
            signal.signal(signum, self._handle_signal)
        self._installed = True
        return self

    def uninstall(self) -> None:
        """Restore the original signal handlers."""
        if not self._installed:
            return
        for signum, handler in self._original_handlers.items():
            if handler is not None:
                signal.signal(signum, handler)
        self._original_handlers.clear()
        self._installed = False

    def _handle_signal(self, signum: int, frame) -> None:
        logger.warning(
            f"Received {signal.Signals(signum).name}, finishing current page "
            "(press Ctrl+C again to force quit)"
        )
        self._event.set()
        signal.signal(signum, self._force_exit)

    def _force_exit(self, signum: int, frame) -> None:
        logger.error("Force quitting")
        sys.exit(1)

    @property
    def shutdown_requested(self) -> bool:
        return self._event.is_set()

    def request_shutdown(self) -> None:
        self._event.set()

    def reset(self) -> None:
        """Clear the stop flag (for tests or reuse)."""
        self._event.clear()


def get_shutdown_handler() -> ShutdownHandler:
    return ShutdownHandler.get_instance()


def shutdown_requested() -> bool:
    return get_shutdown_handler().shutdown_requested
