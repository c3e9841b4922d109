"""Pushover notification service for pump-autoswitch.

Posts pump state changes and switching failures to the Pushover messages
API. Delivery is best effort: callers get a ``NotifyError`` and decide
whether to care.
"""

from __future__ import annotations

import logging

import httpx

from pump_autoswitch.config import Settings
from pump_autoswitch.exceptions import NotifyError

logger = logging.getLogger(__name__)

PUSHOVER_URL = "https://api.pushover.net/1/messages.json"
_TIMEOUT = 10.0  # seconds


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class NotificationService:
    """Send messages through Pushover.

    Usage::

        service = NotificationService(user="u...", token="a...")
        await service.notify("Pump turned on")

    A custom ``httpx.AsyncClient`` may be passed (e.g. with a mock
    transport); otherwise a short-lived client is created per message.
    """

    def __init__(
        self,
        *,
        user: str,
        token: str,
        url: str = PUSHOVER_URL,
        timeout: float = _TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._user = user
        self._token = token
        self._url = url
        self._timeout = timeout
        self._http = http_client

    @classmethod
    def from_settings(
        cls, settings: Settings, *, http_client: httpx.AsyncClient | None = None
    ) -> NotificationService:
        return cls(
            user=settings.pushover_user,
            token=settings.pushover_token,
            url=settings.pushover_url,
            timeout=settings.notify_timeout,
            http_client=http_client,
        )

    @property
    def configured(self) -> bool:
        return bool(self._user and self._token)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def notify(self, message: str) -> None:
        """POST *message* to Pushover.

        Without credentials the message is only logged.

        Raises:
            NotifyError: On non-2xx responses or transport failures.
        """
        if not self.configured:
            logger.warning("Pushover credentials not configured, skipping notification: %s", message)
            return

        payload = {"token": self._token, "user": self._user, "message": message}

        try:
            if self._http is not None:
                response = await self._http.post(self._url, json=payload, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Failed to post pushover message %r (status %d): %s",
                message,
                exc.response.status_code,
                exc.response.text[:200],
            )
            raise NotifyError(f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("Failed to post pushover message %r: %s", message, exc)
            raise NotifyError(str(exc) or type(exc).__name__) from exc

        logger.info("Pushover notification successful: %s", message)


__all__ = [
    "PUSHOVER_URL",
    "NotificationService",
]
