"""Tests for pump_autoswitch.config — defaults, env overrides, validation."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from pump_autoswitch.config import Settings, get_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    for key in ("BROKER", "LOG_LEVEL", "PUSHOVER_USER", "PUSHOVER_TOKEN", "DEBOUNCE_SECONDS"):
        monkeypatch.delenv(f"PUMP_AUTOSWITCH_{key}", raising=False)


# ===================================================================
# Defaults
# ===================================================================


class TestDefaults:
    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.broker == "tcp://sarah.fritz.box:1883"
        assert settings.broker_host == "sarah.fritz.box"
        assert settings.broker_port == 1883
        assert settings.broker_uses_tls is False
        assert settings.debounce_seconds == 5.0
        assert settings.queue_capacity == 10
        assert settings.log_level == "INFO"
        assert settings.mqtt_client_id == "pump-autoswitch"
        assert settings.pushover_configured is False

    def test_station_topics(self) -> None:
        topics = Settings().station_topics
        assert topics == [f"opensprinkler/station/{n}" for n in range(8)]

    def test_pump_command_topic(self) -> None:
        assert Settings().pump_command_topic == "shellies/pump/relay/0/command"


# ===================================================================
# Broker URL
# ===================================================================


class TestBroker:
    def test_explicit_port(self) -> None:
        settings = Settings(broker="tcp://10.0.0.5:11883")
        assert settings.broker_host == "10.0.0.5"
        assert settings.broker_port == 11883

    def test_tls_scheme_uses_tls_port(self) -> None:
        settings = Settings(broker="ssl://mqtt.example.com")
        assert settings.broker_uses_tls is True
        assert settings.broker_port == 8883

    def test_bare_host(self) -> None:
        settings = Settings(broker="localhost")
        assert settings.broker_host == "localhost"
        assert settings.broker_port == 1883

    @pytest.mark.parametrize("broker", ["http://example.com", "tcp://:1883"])
    def test_rejects_bad_broker(self, broker: str) -> None:
        with pytest.raises(ValidationError):
            Settings(broker=broker)


# ===================================================================
# Log level
# ===================================================================


class TestLogLevel:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("debug", logging.DEBUG), ("INFO", logging.INFO), ("WARN", logging.WARNING), ("error", logging.ERROR)],
    )
    def test_accepts_levels(self, raw: str, expected: int) -> None:
        assert Settings(log_level=raw).log_level_value == expected

    def test_rejects_unknown_level(self) -> None:
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")


# ===================================================================
# Environment and overrides
# ===================================================================


class TestGetSettings:
    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PUMP_AUTOSWITCH_BROKER", "tcp://broker.lan:1883")
        monkeypatch.setenv("PUMP_AUTOSWITCH_PUSHOVER_USER", "u")
        monkeypatch.setenv("PUMP_AUTOSWITCH_PUSHOVER_TOKEN", "t")

        settings = get_settings()

        assert settings.broker_host == "broker.lan"
        assert settings.pushover_configured is True

    def test_overrides_beat_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PUMP_AUTOSWITCH_LOG_LEVEL", "ERROR")
        assert get_settings(log_level="DEBUG").log_level == "DEBUG"

    def test_none_overrides_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PUMP_AUTOSWITCH_DEBOUNCE_SECONDS", "2.5")
        assert get_settings(debounce_seconds=None).debounce_seconds == 2.5

    def test_rejects_non_positive_debounce(self) -> None:
        with pytest.raises(ValidationError):
            get_settings(debounce_seconds=0)
