"""Cancel-and-restart timer on the running event loop."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class Debouncer:
    """Runs a callback once input has been quiet for ``delay`` seconds.

    Every ``trigger()`` cancels the pending run and schedules a new one.
    With no running event loop, or a zero delay, the callback runs
    immediately.
    """

    def __init__(self, delay: float, callback: Callable[[], Any], name: str = "debounce") -> None:
        self._delay = delay
        self._callback = callback
        self._name = name
        self._handle: asyncio.TimerHandle | None = None

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        """Restart the quiet period."""
        self.cancel()

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is None or self._delay <= 0:
            self._callback()
            return

        self._handle = loop.call_later(self._delay, self._fire)

    def flush(self) -> bool:
        """Run a pending callback now.

        Returns:
            True if a pending run was executed.
        """
        if self._handle is None:
            return False
        self.cancel()
        self._callback()
        return True

    def cancel(self) -> None:
        """Drop a pending run, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        try:
            self._callback()
        except Exception as e:
            logger.error(f"Debounced {self._name} failed: {e}", exc_info=True)
