"""Aggregate irrigation station states into a single pump decision."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from contextlib import suppress

from pump_autoswitch.config import Settings
from pump_autoswitch.core.contracts import Notifier, PumpActuator
from pump_autoswitch.core.debounce import Clock, DebounceTimer
from pump_autoswitch.exceptions import ActuationError, AggregatorClosedError, NotifyError
from pump_autoswitch.models.enums import SettleState
from pump_autoswitch.models.events import ZoneEvent

logger = logging.getLogger(__name__)

PUMP_ON_MESSAGE = "Pump turned on"
PUMP_OFF_MESSAGE = "Pump turned off"
PUMP_FAILURE_MESSAGE = "Failed to switch pump!"


class PumpAggregator:
    """Single owner of the station table, the tracked pump state and the settle timer.

    Events are fed through :meth:`submit` and processed by :meth:`run`, which
    waits on three wakeups: a new station event, the settle timer, or the
    shutdown event.

    * A station turning **on** is acted on immediately.
    * A station turning **off** only resets the timer; the pump is switched
      off once no event arrived for ``debounce_seconds``.
    * The pump is only commanded when the desired state differs from the
      tracked one. A failed command leaves the tracked state untouched so the
      next recompute tries again.
    * On shutdown the pump is switched off unconditionally.

    Usage::

        aggregator = PumpAggregator(actuator, notifier, debounce_seconds=5.0)
        task = asyncio.create_task(aggregator.run(stop_event))
        await aggregator.submit(ZoneEvent("opensprinkler/station/0", True))
    """

    def __init__(
        self,
        actuator: PumpActuator,
        notifier: Notifier,
        *,
        debounce_seconds: float = 5.0,
        queue_capacity: int = 10,
        clock: Clock = time.monotonic,
    ) -> None:
        self._actuator = actuator
        self._notifier = notifier
        self._timer = DebounceTimer(debounce_seconds, clock=clock)
        self._queue: asyncio.Queue[ZoneEvent] = asyncio.Queue(maxsize=queue_capacity)
        self._pending_get: asyncio.Future[ZoneEvent] | None = None

        self._zone_states: dict[str, bool] = {}
        self._is_pump_active = False
        self._closed = False

    @classmethod
    def from_settings(
        cls, settings: Settings, actuator: PumpActuator, notifier: Notifier
    ) -> PumpAggregator:
        return cls(
            actuator,
            notifier,
            debounce_seconds=settings.debounce_seconds,
            queue_capacity=settings.queue_capacity,
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def zone_states(self) -> Mapping[str, bool]:
        """Return a copy of the last-known state per station."""
        return dict(self._zone_states)

    @property
    def is_pump_active(self) -> bool:
        return self._is_pump_active

    @property
    def desired_pump_state(self) -> bool:
        return any(self._zone_states.values())

    @property
    def settle_state(self) -> SettleState:
        return self._timer.state

    @property
    def timer(self) -> DebounceTimer:
        return self._timer

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Inbound channel
    # ------------------------------------------------------------------

    async def submit(self, event: ZoneEvent) -> None:
        """Queue *event*, waiting while the queue is full."""
        if self._closed:
            raise AggregatorClosedError("pump aggregator is shut down")
        await self._queue.put(event)

    # ------------------------------------------------------------------
    # Reactive loop
    # ------------------------------------------------------------------

    async def run(self, shutdown: asyncio.Event) -> None:
        """Process events and timer fires until *shutdown* is set.

        Always ends with the fail-safe pump-off, also when the task is
        cancelled.
        """
        stop = asyncio.ensure_future(shutdown.wait())
        logger.info("Pump aggregator started (debounce %.1fs)", self._timer.period)
        try:
            while not shutdown.is_set():
                if self._pending_get is None:
                    self._pending_get = asyncio.ensure_future(self._queue.get())

                done, _ = await asyncio.wait(
                    {self._pending_get, stop},
                    timeout=self._timer.remaining(),
                    return_when=asyncio.FIRST_COMPLETED,
                )

                if stop in done:
                    break

                if self._pending_get in done:
                    event = self._pending_get.result()
                    self._pending_get = None
                    await self.handle_event(event)
                elif self._timer.expired():
                    await self.handle_timer()
        finally:
            stop.cancel()
            await self.shutdown()

    async def handle_event(self, event: ZoneEvent) -> None:
        """Record a station state and act on it if it switched on."""
        logger.debug("Station state updated: %s -> %s", event.zone_id, event.active)

        self._zone_states[event.zone_id] = event.active
        self._timer.reset()

        if not event.active:
            return
        await self.recompute()

    async def handle_timer(self) -> None:
        """Recompute after the stations have been quiet for a full period."""
        self._timer.fire()
        await self.recompute()

    async def recompute(self) -> bool:
        """Switch the pump if the desired state differs from the tracked one.

        Returns ``True`` when the pump was switched.
        """
        desired = self.desired_pump_state
        if desired == self._is_pump_active:
            return False

        try:
            await self._actuator.set_pump(desired)
        except ActuationError as exc:
            logger.error("Failed to switch pump %s: %s", "on" if desired else "off", exc)
            await self._notify(PUMP_FAILURE_MESSAGE)
            return False
        except Exception:
            logger.exception("Unexpected error switching pump %s", "on" if desired else "off")
            await self._notify(PUMP_FAILURE_MESSAGE)
            return False

        self._is_pump_active = desired
        logger.info("Pump switched %s", "on" if desired else "off")
        await self._notify(PUMP_ON_MESSAGE if desired else PUMP_OFF_MESSAGE)
        return True

    async def shutdown(self) -> None:
        """Close the inbound channel and switch the pump off.

        Runs at most once. The pump-off command is sent whatever the tracked
        state; its failure is logged and otherwise ignored.
        """
        if self._closed:
            return
        self._closed = True
        self._timer.cancel()

        if self._pending_get is not None:
            self._pending_get.cancel()
            with suppress(asyncio.CancelledError):
                await self._pending_get
            self._pending_get = None

        dropped = self._queue.qsize()
        if dropped:
            logger.warning("Discarding %d unprocessed station events", dropped)

        logger.info("Shutting down, switching pump off")
        try:
            await self._actuator.set_pump(False)
        except ActuationError as exc:
            logger.error("Failed to switch pump off on shutdown: %s", exc)
            return
        except Exception:
            logger.exception("Unexpected error switching pump off on shutdown")
            return
        self._is_pump_active = False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _notify(self, message: str) -> None:
        try:
            await self._notifier.notify(message)
        except NotifyError as exc:
            logger.warning("Could not deliver notification %r: %s", message, exc)
        except Exception:
            logger.exception("Unexpected error delivering notification %r", message)


__all__ = [
    "PUMP_FAILURE_MESSAGE",
    "PUMP_OFF_MESSAGE",
    "PUMP_ON_MESSAGE",
    "PumpAggregator",
]
