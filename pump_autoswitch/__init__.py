"""pump-autoswitch: drive a shared irrigation pump from station activity."""

from .config import Settings, get_settings
from .core import DebounceTimer, PumpAggregator
from .models import ZoneEvent

__all__ = [
    "DebounceTimer",
    "PumpAggregator",
    "Settings",
    "ZoneEvent",
    "get_settings",
]
