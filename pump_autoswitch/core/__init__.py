"""Pump decision engine."""

from __future__ import annotations

from .aggregator import PumpAggregator
from .contracts import Notifier, PumpActuator
from .debounce import DebounceTimer

__all__ = [
    "DebounceTimer",
    "Notifier",
    "PumpActuator",
    "PumpAggregator",
]
