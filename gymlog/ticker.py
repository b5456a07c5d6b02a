"""Drive a :class:`RecoveryTimer` from the Kivy clock."""

from __future__ import annotations

from kivy.clock import Clock

from gymlog.recovery_timer import RecoveryTimer


class RecoveryTicker:
    """Schedule one timer tick per second while the timer runs.

    The clock event is created when the timer starts and dropped as soon as
    the timer stops, so an idle session costs nothing on the event loop.
    """

    def __init__(self, timer: RecoveryTimer, clock=Clock, interval: float = 1.0):
        self.timer = timer
        self.clock = clock
        self.interval = interval
        self._event = None
        timer.bind(on_start=self._on_timer_start)

    def _on_timer_start(self, _timer) -> None:
        self.ensure_running()

    def ensure_running(self) -> None:
        """Ensure the tick event is scheduled while the timer runs."""

        if self._event is None and self.timer.running:
            self._event = self.clock.schedule_interval(self._on_tick, self.interval)

    def _on_tick(self, _dt) -> bool | None:
        self.timer.tick()
        if not self.timer.running:
            self.stop()
            # returning False unschedules the interval
            return False
        return None

    def stop(self) -> None:
        if self._event is not None:
            self._event.cancel()
            self._event = None

    @property
    def scheduled(self) -> bool:
        return self._event is not None
