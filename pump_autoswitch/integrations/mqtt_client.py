"""Async MQTT client for the OpenSprinkler / Shelly bus."""

from __future__ import annotations

import asyncio
import logging
import ssl
from collections.abc import Awaitable, Callable
from contextlib import suppress

import aiomqtt

from pump_autoswitch.config import Settings
from pump_autoswitch.exceptions import TransportError

logger = logging.getLogger(__name__)


MessageHandler = Callable[[str, bytes], Awaitable[None]]


# ---------------------------------------------------------------------------
# MQTT Client
# ---------------------------------------------------------------------------


class MQTTClient:
    """aiomqtt-based client with background reconnection and handler dispatch.

    Handlers are awaited one at a time from the message loop, in arrival
    order, so a slow handler holds back the next message instead of letting
    them pile up.
    """

    _RECONNECT_DELAYS = (1, 2, 5, 10, 30, 60)
    _POLL_INTERVAL = 1.0

    def __init__(
        self,
        *,
        broker: str,
        port: int = 1883,
        client_id: str = "pump-autoswitch",
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = False,
        keepalive: int = 60,
        qos: int = 1,
    ) -> None:
        # Connection parameters
        self._broker = broker
        self._port = port
        self._client_id = client_id
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._keepalive = keepalive
        self._qos = qos

        # Internal state
        self._client_cm: aiomqtt.Client | None = None
        self._client: aiomqtt.Client | None = None
        self._connected = asyncio.Event()
        self._stop = False
        self._lock = asyncio.Lock()
        self._message_task: asyncio.Task[None] | None = None
        self._reconnect_task: asyncio.Task[None] | None = None

        self._handlers: list[MessageHandler] = []

        # Subscriptions to restore after reconnect
        self._subscriptions: set[str] = set()

    @classmethod
    def from_settings(cls, settings: Settings) -> MQTTClient:
        return cls(
            broker=settings.broker_host,
            port=settings.broker_port,
            client_id=settings.mqtt_client_id,
            username=settings.mqtt_username,
            password=settings.mqtt_password,
            use_tls=settings.broker_uses_tls,
            keepalive=settings.mqtt_keepalive,
        )

    @property
    def is_connected(self) -> bool:
        return self._connected.is_set()

    # ------------------------------------------------------------------
    # Public API — lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Connect to the broker once.

        A broker that cannot be reached at startup is fatal: the error is
        raised as ``TransportError`` without retrying. Connections lost later
        are restored by the background reconnect loop.
        """
        async with self._lock:
            if self._client:
                return

            try:
                await self._open_connection()
            except aiomqtt.MqttError as exc:
                logger.error("MQTT connect to %s:%s failed: %s", self._broker, self._port, exc)
                raise TransportError(
                    f"cannot connect to MQTT broker {self._broker}:{self._port}"
                ) from exc

            self._stop = False
            self._message_task = asyncio.create_task(
                self._message_loop(), name="mqtt-message-loop"
            )
            self._reconnect_task = asyncio.create_task(
                self._reconnect_loop(), name="mqtt-reconnect-loop"
            )
            logger.info("MQTT client connected to %s:%s", self._broker, self._port)

    async def disconnect(self) -> None:
        """Cleanly disconnect from the broker and cancel background tasks."""
        async with self._lock:
            self._stop = True
            self._connected.clear()
            await self._shutdown_tasks()
            if self._client_cm:
                with suppress(Exception):
                    await self._client_cm.__aexit__(None, None, None)
            self._client_cm = None
            self._client = None
            logger.info("MQTT disconnected from %s:%s", self._broker, self._port)

    # ------------------------------------------------------------------
    # Public API — subscribe / publish
    # ------------------------------------------------------------------

    async def subscribe(self, topics: str | list[str]) -> None:
        """Subscribe to one or more MQTT topics.

        Raises ``TransportError`` when the broker rejects the subscription.
        """
        if self._client is None:
            raise TransportError("MQTT client not connected")

        if isinstance(topics, str):
            topics = [topics]

        for topic in topics:
            try:
                await self._client.subscribe(topic, qos=self._qos)
            except aiomqtt.MqttError as exc:
                raise TransportError(f"cannot subscribe to {topic}") from exc
            self._subscriptions.add(topic)
            logger.debug("Subscribed to %s", topic)

    async def publish(self, topic: str, payload: str | bytes, *, retain: bool = False) -> None:
        """Publish *payload* to *topic*, waiting for a live connection first."""
        await self._connected.wait()
        if self._client is None:
            raise TransportError("MQTT client not connected")

        data = payload.encode() if isinstance(payload, str) else payload
        try:
            await self._client.publish(topic, payload=data, qos=self._qos, retain=retain)
        except aiomqtt.MqttError as exc:
            logger.error("Failed to publish to %s: %s", topic, exc)
            raise TransportError(f"cannot publish to {topic}") from exc
        logger.debug("Published to %s (%d bytes)", topic, len(data))

    # ------------------------------------------------------------------
    # Public API — handlers
    # ------------------------------------------------------------------

    def add_handler(self, handler: MessageHandler) -> None:
        """Register a coroutine invoked for every inbound message."""
        if handler not in self._handlers:
            self._handlers.append(handler)

    def remove_handler(self, handler: MessageHandler) -> None:
        with suppress(ValueError):
            self._handlers.remove(handler)

    # ------------------------------------------------------------------
    # Message handling
    # ------------------------------------------------------------------

    async def _handle_message(self, topic: str, payload: bytes) -> None:
        logger.debug("MQTT message incoming on %s: %r", topic, payload)
        for handler in list(self._handlers):
            try:
                await handler(topic, payload)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("MQTT handler raised an exception for %s", topic)

    # ------------------------------------------------------------------
    # Background loops
    # ------------------------------------------------------------------

    async def _message_loop(self) -> None:
        """Dispatch incoming messages until the connection drops."""
        if self._client is None:
            raise RuntimeError("MQTT client not connected")
        client = self._client
        try:
            async for message in client.messages:
                payload = message.payload if isinstance(message.payload, bytes) else b""
                await self._handle_message(message.topic.value, payload)
        except asyncio.CancelledError:
            raise
        except aiomqtt.MqttError as exc:
            logger.error("MQTT connection lost: %s", exc)
            self._connected.clear()
        finally:
            self._message_task = None

    async def _reconnect_loop(self) -> None:
        """Monitor the connection and automatically reconnect on failure.

        Backs off through ``_RECONNECT_DELAYS`` and then keeps retrying at the
        last delay until the connection is back or the client is stopped.
        """
        while not self._stop:
            await asyncio.sleep(self._POLL_INTERVAL)
            if self._connected.is_set():
                continue

            attempt = 0
            while not self._stop and not self._connected.is_set():
                delay = self._RECONNECT_DELAYS[min(attempt, len(self._RECONNECT_DELAYS) - 1)]
                logger.info("MQTT client reconnecting to %s:%s", self._broker, self._port)
                try:
                    await self._reopen()
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    logger.warning("MQTT reconnect failed (%s), retrying in %ss", exc, delay)
                    attempt += 1
                    if attempt == len(self._RECONNECT_DELAYS):
                        logger.error(
                            "MQTT reconnect exhausted backoff schedule; retrying every %ss",
                            self._RECONNECT_DELAYS[-1],
                        )
                    await asyncio.sleep(delay)
                    continue
                logger.info("MQTT client connected to %s:%s", self._broker, self._port)

    # ------------------------------------------------------------------
    # Internal helpers — connection management
    # ------------------------------------------------------------------

    async def _open_connection(self) -> None:
        """Create a new aiomqtt client and enter its context manager."""
        tls_ctx = ssl.create_default_context() if self._use_tls else None
        self._client_cm = aiomqtt.Client(
            hostname=self._broker,
            port=self._port,
            identifier=self._client_id,
            username=self._username,
            password=self._password,
            keepalive=self._keepalive,
            tls_context=tls_ctx,
        )
        self._client = await self._client_cm.__aenter__()
        self._connected.set()

    async def _reopen(self) -> None:
        """Tear down the old connection and establish a fresh one,
        restoring all active subscriptions."""
        async with self._lock:
            if self._client_cm:
                with suppress(Exception):
                    await self._client_cm.__aexit__(None, None, None)

            await self._open_connection()

            if self._client is None:
                raise RuntimeError("MQTT client not connected")
            for topic in self._subscriptions:
                await self._client.subscribe(topic, qos=self._qos)

            if self._message_task is None or self._message_task.done():
                self._message_task = asyncio.create_task(
                    self._message_loop(), name="mqtt-message-loop"
                )

    async def _shutdown_tasks(self) -> None:
        """Cancel the message and reconnect background tasks."""
        await self._cancel(self._message_task)
        await self._cancel(self._reconnect_task)
        self._message_task = None
        self._reconnect_task = None

    @staticmethod
    async def _cancel(task: asyncio.Task[None] | None) -> None:
        if not task or task.done():
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task


__all__ = ["MQTTClient", "MessageHandler"]
