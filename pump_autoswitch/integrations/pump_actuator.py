"""Pump actuator publishing Shelly relay commands over MQTT."""

from __future__ import annotations

import asyncio
import logging

from pump_autoswitch.config import Settings
from pump_autoswitch.exceptions import ActuationError, TransportError
from pump_autoswitch.integrations.mqtt_client import MQTTClient
from pump_autoswitch.models.enums import PumpCommand

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 5.0  # seconds


class MQTTPumpActuator:
    """Switch the pump relay by publishing ``on`` / ``off`` to its command topic."""

    def __init__(
        self,
        client: MQTTClient,
        *,
        command_topic: str = "shellies/pump/relay/0/command",
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._client = client
        self._command_topic = command_topic
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings, client: MQTTClient) -> MQTTPumpActuator:
        return cls(
            client,
            command_topic=settings.pump_command_topic,
            timeout=settings.actuation_timeout,
        )

    async def set_pump(self, active: bool) -> None:
        """Publish the relay command for *active*.

        Raises:
            ActuationError: If the command was not acknowledged within the
                timeout or the broker rejected it.
        """
        command = PumpCommand.for_state(active)
        logger.debug("Switching pump: %s", command)

        try:
            async with asyncio.timeout(self._timeout):
                await self._client.publish(self._command_topic, command.value)
        except TimeoutError as exc:
            raise ActuationError(
                f"pump command {command} not delivered within {self._timeout}s"
            ) from exc
        except TransportError as exc:
            raise ActuationError(f"pump command {command} failed: {exc}") from exc


__all__ = ["MQTTPumpActuator"]
