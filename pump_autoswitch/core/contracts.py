"""Interfaces of the collaborators driven by the pump aggregator."""

from __future__ import annotations

from typing import Protocol


class PumpActuator(Protocol):
    """Issues on/off commands to the pump.

    Implementations raise ``ActuationError`` when the command could not be
    delivered. Repeating the same command must be harmless.
    """

    async def set_pump(self, active: bool) -> None: ...


class Notifier(Protocol):
    """Delivers a human-readable message to the operator.

    Implementations raise ``NotifyError`` on failure.
    """

    async def notify(self, message: str) -> None: ...


__all__ = ["Notifier", "PumpActuator"]
