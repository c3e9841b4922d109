"""pump-autoswitch data models."""

from .enums import PumpCommand, SettleState
from .events import ZoneEvent
from .schemas import StationPayload

__all__ = [
    "PumpCommand",
    "SettleState",
    "StationPayload",
    "ZoneEvent",
]
