"""Rest countdown between sets.

The timer only counts; it never schedules itself. Something outside calls
:meth:`RecoveryTimer.tick` once per second, normally
:class:`gymlog.ticker.RecoveryTicker` on the Kivy clock.
"""

from __future__ import annotations

import logging

from gymlog import RECOVERY_EXTEND_SECONDS
from gymlog.utils import format_seconds


class RecoveryTimer:
    """Per-session countdown with a remaining-seconds value and running flag.

    There is one timer per session, not per exercise: starting it again
    while it runs simply restarts the count.
    """

    def __init__(self) -> None:
        self.remaining: int = 0
        self.running: bool = False
        self._listeners: dict[str, list] = {"on_start": [], "on_complete": []}

    def bind(self, **callbacks) -> None:
        """Register ``on_start`` and/or ``on_complete`` callbacks.

        Callbacks receive the timer as their only argument.
        """

        for name, callback in callbacks.items():
            if name not in self._listeners:
                raise KeyError(f"Unknown timer event '{name}'")
            self._listeners[name].append(callback)

    def unbind(self, **callbacks) -> None:
        for name, callback in callbacks.items():
            if callback in self._listeners.get(name, []):
                self._listeners[name].remove(callback)

    def _dispatch(self, name: str) -> None:
        for callback in list(self._listeners[name]):
            callback(self)

    def start(self, seconds: int) -> None:
        """Restart the countdown at ``seconds``."""

        self.remaining = max(0, int(seconds))
        self.running = self.remaining > 0
        if self.running:
            self._dispatch("on_start")

    def tick(self) -> bool:
        """Advance one second. Return ``True`` when this tick finished recovery."""

        if not self.running:
            return False
        self.remaining = max(0, self.remaining - 1)
        if self.remaining == 0:
            self.running = False
            logging.info("Recovery complete")
            self._dispatch("on_complete")
            return True
        return False

    def extend(self, seconds: int = RECOVERY_EXTEND_SECONDS) -> None:
        """Add ``seconds`` to the remaining time without starting or stopping."""

        self.remaining += max(0, int(seconds))

    def cancel(self) -> None:
        """Stop immediately and clear the remaining time."""

        self.running = False
        self.remaining = 0

    @property
    def visible(self) -> bool:
        """Whether a countdown is worth showing."""

        return self.running or self.remaining > 0

    def display(self) -> str:
        return format_seconds(self.remaining)
