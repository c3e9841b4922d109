"""Resettable settle timer for the pump aggregator."""

from __future__ import annotations

import time
from collections.abc import Callable

from pump_autoswitch.models.enums import SettleState

Clock = Callable[[], float]


class DebounceTimer:
    """Periodic timer pushed back by every station event.

    The timer is armed on construction and fires every ``period`` seconds.
    ``reset`` moves the next fire to ``period`` seconds from now and marks
    the timer as waiting for the stations to settle; ``fire`` acknowledges a
    fire, returns to ``idle`` and schedules the next one.

    No wall-clock waiting happens here: the owner asks for ``remaining()`` and
    sleeps itself, so tests can drive the timer with a fake clock.
    """

    def __init__(self, period: float, *, clock: Clock = time.monotonic) -> None:
        if period <= 0:
            raise ValueError("period must be positive")
        self._period = period
        self._clock = clock
        self._deadline: float | None = clock() + period
        self._state = SettleState.idle

    @property
    def period(self) -> float:
        return self._period

    @property
    def state(self) -> SettleState:
        return self._state

    @property
    def deadline(self) -> float | None:
        """Clock value of the next fire, or ``None`` once cancelled."""
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._deadline is None

    def remaining(self) -> float | None:
        """Seconds until the next fire (never negative), ``None`` if cancelled."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def expired(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline

    def reset(self) -> None:
        if self._deadline is None:
            return
        self._deadline = self._clock() + self._period
        self._state = SettleState.pending_settle

    def fire(self) -> None:
        if self._deadline is None:
            return
        self._deadline = self._clock() + self._period
        self._state = SettleState.idle

    def cancel(self) -> None:
        self._deadline = None
        self._state = SettleState.idle


__all__ = ["Clock", "DebounceTimer"]
