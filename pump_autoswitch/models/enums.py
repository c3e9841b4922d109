"""Domain enums for pump-autoswitch."""

from __future__ import annotations

from enum import StrEnum


class SettleState(StrEnum):
    idle = "idle"
    pending_settle = "pending_settle"


class PumpCommand(StrEnum):
    on = "on"
    off = "off"

    @classmethod
    def for_state(cls, active: bool) -> PumpCommand:
        return cls.on if active else cls.off
