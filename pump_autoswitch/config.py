"""Application configuration powered by Pydantic settings."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import SplitResult, urlsplit

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_BROKER_SCHEMES = {"tcp": 1883, "mqtt": 1883, "ssl": 8883, "tls": 8883, "mqtts": 8883}
_LOG_LEVELS = ("DEBUG", "INFO", "WARN", "WARNING", "ERROR")


class Settings(BaseSettings):
    """Runtime configuration, built once at startup and passed to each component."""

    model_config = SettingsConfigDict(env_prefix="PUMP_AUTOSWITCH_", env_file=".env", extra="ignore")

    # Logging
    log_level: str = Field(default="INFO")

    # MQTT
    broker: str = Field(default="tcp://sarah.fritz.box:1883")
    mqtt_client_id: str = Field(default="pump-autoswitch")
    mqtt_username: str | None = Field(default=None)
    mqtt_password: str | None = Field(default=None)
    mqtt_keepalive: int = Field(default=60, gt=0)
    station_topic_prefix: str = Field(default="opensprinkler/station")
    station_count: int = Field(default=8, ge=1)
    pump_topic: str = Field(default="shellies/pump/relay/0")

    # Debounce
    debounce_seconds: float = Field(default=5.0, gt=0)
    queue_capacity: int = Field(default=10, ge=1)
    actuation_timeout: float = Field(default=5.0, gt=0)

    # Pushover
    pushover_user: str = Field(default="")
    pushover_token: str = Field(default="")
    pushover_url: str = Field(default="https://api.pushover.net/1/messages.json")
    notify_timeout: float = Field(default=10.0, gt=0)

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, v: Any) -> str:
        level = str(v).strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log level must be one of {', '.join(_LOG_LEVELS)}")
        return "WARNING" if level == "WARN" else level

    @field_validator("broker")
    @classmethod
    def _validate_broker(cls, v: str) -> str:
        parts = urlsplit(v if "://" in v else f"tcp://{v}")
        if parts.scheme not in _BROKER_SCHEMES:
            raise ValueError(f"unsupported broker scheme: {parts.scheme!r}")
        if not parts.hostname:
            raise ValueError("broker URL has no host")
        return v

    @computed_field  # type: ignore[prop-decorator]
    @property
    def broker_host(self) -> str:
        return self._broker_parts().hostname or ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def broker_port(self) -> int:
        parts = self._broker_parts()
        return parts.port or _BROKER_SCHEMES[parts.scheme]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def broker_uses_tls(self) -> bool:
        return _BROKER_SCHEMES[self._broker_parts().scheme] == 8883

    @computed_field  # type: ignore[prop-decorator]
    @property
    def station_topics(self) -> list[str]:
        """Return the MQTT topics of every irrigation station."""

        prefix = self.station_topic_prefix.strip("/")
        return [f"{prefix}/{n}" for n in range(self.station_count)]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pump_command_topic(self) -> str:
        return f"{self.pump_topic.strip('/')}/command"

    @property
    def log_level_value(self) -> int:
        return logging.getLevelNamesMapping()[self.log_level]

    @property
    def pushover_configured(self) -> bool:
        return bool(self.pushover_user and self.pushover_token)

    def _broker_parts(self) -> SplitResult:
        return urlsplit(self.broker if "://" in self.broker else f"tcp://{self.broker}")


def get_settings(**overrides: Any) -> Settings:
    """Build settings from the environment, applying explicit overrides.

    ``None`` overrides are ignored so unset command-line flags fall back to
    the environment or the defaults.
    """

    return Settings(**{key: value for key, value in overrides.items() if value is not None})


__all__ = ["Settings", "get_settings"]
