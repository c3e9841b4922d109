"""Exception hierarchy for pump-autoswitch."""

from __future__ import annotations


class PumpAutoswitchError(Exception):
    """Base exception for all pump-autoswitch errors."""


class TransportError(PumpAutoswitchError):
    """Raised when the MQTT broker cannot be reached or subscribed to."""


class PayloadDecodeError(PumpAutoswitchError):
    """Raised when an inbound station message cannot be decoded."""


class ActuationError(PumpAutoswitchError):
    """Raised when the pump command could not be delivered."""


class NotifyError(PumpAutoswitchError):
    """Raised when a notification could not be delivered."""


class AggregatorClosedError(PumpAutoswitchError):
    """Raised when an event is submitted after the aggregator shut down."""


__all__ = [
    "ActuationError",
    "AggregatorClosedError",
    "NotifyError",
    "PayloadDecodeError",
    "PumpAutoswitchError",
    "TransportError",
]
