"""Pydantic schemas for inbound MQTT payloads."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, StrictInt, model_validator


class StationPayload(BaseModel):
    """Body of an ``opensprinkler/station/<n>`` message, e.g. ``{"state": 1}``.

    Keys match case-insensitively; a ``null`` body or ``null`` state reads as
    inactive.
    """

    model_config = ConfigDict(extra="ignore")

    state: StrictInt | None = 0

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:
        if data is None:
            return {}
        if isinstance(data, dict):
            return {str(key).lower(): value for key, value in data.items()}
        return data

    @property
    def active(self) -> bool:
        return self.state == 1
