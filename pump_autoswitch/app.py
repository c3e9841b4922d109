"""Wire the MQTT bus, the pump aggregator and Pushover together."""

from __future__ import annotations

import asyncio
import logging
import signal
from contextlib import suppress

from pump_autoswitch.config import Settings
from pump_autoswitch.core.aggregator import PumpAggregator
from pump_autoswitch.integrations.mqtt_client import MQTTClient
from pump_autoswitch.integrations.pump_actuator import MQTTPumpActuator
from pump_autoswitch.integrations.station_source import StationEventSource
from pump_autoswitch.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def install_signal_handlers(stop: asyncio.Event) -> None:
    """Set *stop* on SIGINT / SIGTERM."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)


async def run(
    settings: Settings,
    *,
    stop: asyncio.Event | None = None,
    mqtt: MQTTClient | None = None,
    notifier: NotificationService | None = None,
) -> None:
    """Run until *stop* is set (or a termination signal arrives).

    Connection and subscription failures raise ``TransportError`` before the
    aggregator starts.
    """
    if stop is None:
        stop = asyncio.Event()
        install_signal_handlers(stop)

    mqtt = mqtt or MQTTClient.from_settings(settings)
    notifier = notifier or NotificationService.from_settings(settings)

    await mqtt.connect()
    try:
        actuator = MQTTPumpActuator.from_settings(settings, mqtt)
        aggregator = PumpAggregator.from_settings(settings, actuator, notifier)
        source = StationEventSource.from_settings(settings, aggregator.submit)
        mqtt.add_handler(source.handle_message)

        # The relay topic is only subscribed to log the pump's own status.
        await mqtt.subscribe([*settings.station_topics, settings.pump_topic])
        logger.info("Watching %d stations", len(settings.station_topics))

        await aggregator.run(stop)
    finally:
        await mqtt.disconnect()


__all__ = ["install_signal_handlers", "run"]
