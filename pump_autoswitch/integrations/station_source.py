"""Decode OpenSprinkler station messages into typed zone events."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from pydantic import ValidationError

from pump_autoswitch.config import Settings
from pump_autoswitch.exceptions import AggregatorClosedError, PayloadDecodeError
from pump_autoswitch.models.events import ZoneEvent
from pump_autoswitch.models.schemas import StationPayload

logger = logging.getLogger(__name__)

EventSink = Callable[[ZoneEvent], Awaitable[None]]


def parse_station_message(topic: str, payload: bytes) -> ZoneEvent:
    """Build a ``ZoneEvent`` from a ``{"state": 0|1}`` body.

    The topic is the zone identifier. ``state == 1`` means active, any other
    integer (or a missing ``state``) means inactive.

    Raises:
        PayloadDecodeError: If the body is not a JSON object with an integer
            ``state``.
    """
    try:
        parsed = StationPayload.model_validate_json(payload)
    except ValidationError as exc:
        raise PayloadDecodeError(f"invalid station payload on {topic}: {payload!r}") from exc
    return ZoneEvent(zone_id=topic, active=parsed.active)


class StationEventSource:
    """MQTT handler turning station messages into events for *sink*.

    Messages on other topics (such as the pump relay status, subscribed for
    debugging) are ignored. Undecodable bodies are logged, counted and
    dropped.
    """

    def __init__(self, sink: EventSink, *, topic_prefix: str = "opensprinkler/station") -> None:
        self._sink = sink
        self._topic_prefix = topic_prefix.strip("/")
        self.parse_failures = 0

    @classmethod
    def from_settings(cls, settings: Settings, sink: EventSink) -> StationEventSource:
        return cls(sink, topic_prefix=settings.station_topic_prefix)

    def accepts(self, topic: str) -> bool:
        return topic.startswith(self._topic_prefix)

    async def handle_message(self, topic: str, payload: bytes) -> None:
        if not self.accepts(topic):
            return

        try:
            event = parse_station_message(topic, payload)
        except PayloadDecodeError as exc:
            self.parse_failures += 1
            logger.error("Failed to parse message: %s", exc)
            return

        try:
            await self._sink(event)
        except AggregatorClosedError:
            logger.debug("Dropping %s, aggregator already shut down", event)


__all__ = ["EventSink", "StationEventSource", "parse_station_message"]
