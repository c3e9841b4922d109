"""Tests for pump_autoswitch.core.debounce — settle timer driven by a fake clock."""

from __future__ import annotations

import pytest

from pump_autoswitch.core.debounce import DebounceTimer
from pump_autoswitch.models.enums import SettleState

# ===================================================================
# Construction
# ===================================================================


class TestConstruction:
    def test_armed_one_period_after_creation(self, clock) -> None:
        clock.now = 10.0
        timer = DebounceTimer(5.0, clock=clock)

        assert timer.deadline == 15.0
        assert timer.remaining() == 5.0
        assert timer.state is SettleState.idle
        assert not timer.cancelled

    @pytest.mark.parametrize("period", [0, -1.0])
    def test_rejects_non_positive_period(self, period: float) -> None:
        with pytest.raises(ValueError):
            DebounceTimer(period)


# ===================================================================
# reset / expiry
# ===================================================================


class TestReset:
    def test_reset_pushes_deadline_back(self, clock) -> None:
        timer = DebounceTimer(5.0, clock=clock)
        clock.now = 3.0
        timer.reset()

        assert timer.deadline == 8.0
        assert timer.state is SettleState.pending_settle

    def test_never_expires_while_resets_arrive_faster_than_period(self, clock) -> None:
        timer = DebounceTimer(5.0, clock=clock)
        for _ in range(20):
            clock.advance(4.0)
            assert not timer.expired()
            timer.reset()

    def test_expires_after_quiet_period(self, clock) -> None:
        timer = DebounceTimer(5.0, clock=clock)
        clock.now = 2.5
        timer.reset()

        clock.now = 7.0
        assert not timer.expired()
        assert timer.remaining() == 0.5

        clock.now = 7.5
        assert timer.expired()
        assert timer.remaining() == 0.0

    def test_remaining_never_negative(self, clock) -> None:
        timer = DebounceTimer(1.0, clock=clock)
        clock.now = 100.0
        assert timer.remaining() == 0.0


# ===================================================================
# fire
# ===================================================================


class TestFire:
    def test_fire_returns_to_idle_and_rearms(self, clock) -> None:
        timer = DebounceTimer(5.0, clock=clock)
        timer.reset()
        clock.now = 5.0
        timer.fire()

        assert timer.state is SettleState.idle
        assert timer.deadline == 10.0
        assert not timer.expired()

    def test_keeps_ticking_without_events(self, clock) -> None:
        timer = DebounceTimer(2.0, clock=clock)
        fires = 0
        for _ in range(10):
            clock.advance(1.0)
            if timer.expired():
                timer.fire()
                fires += 1
        assert fires == 5


# ===================================================================
# cancel
# ===================================================================


class TestCancel:
    def test_cancelled_timer_never_expires(self, clock) -> None:
        timer = DebounceTimer(1.0, clock=clock)
        timer.cancel()
        clock.now = 50.0

        assert timer.cancelled
        assert timer.deadline is None
        assert timer.remaining() is None
        assert not timer.expired()

    def test_reset_and_fire_ignored_after_cancel(self, clock) -> None:
        timer = DebounceTimer(1.0, clock=clock)
        timer.cancel()
        timer.reset()
        timer.fire()

        assert timer.deadline is None
        assert timer.state is SettleState.idle
