"""MQTT integrations for pump-autoswitch."""

from .mqtt_client import MQTTClient
from .pump_actuator import MQTTPumpActuator
from .station_source import StationEventSource, parse_station_message

__all__ = [
    "MQTTClient",
    "MQTTPumpActuator",
    "StationEventSource",
    "parse_station_message",
]
