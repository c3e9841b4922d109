"""Typed events flowing from the MQTT bus into the pump aggregator."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ZoneEvent:
    """Latest on/off state reported for one irrigation station."""

    zone_id: str
    active: bool


__all__ = ["ZoneEvent"]
