"""
Visibility-aware polling for the live dashboards.

`AdaptivePoller` re-runs a refresh callback on a fast interval while the
consumer reports pending work and on a slow interval otherwise. It stays
idle while disabled or while its `VisibilitySignal` says the viewer is
not looking, and catches up with one immediate refresh when the viewer
comes back.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[], Any]
VisibilityListener = Callable[[bool], None]


class PollerState(str, Enum):
    IDLE = "idle"
    FAST = "fast"
    SLOW = "slow"


class VisibilitySignal:
    """
    Current "is the viewer looking" flag plus change notifications.

    Listeners are only called when the value actually changes.
    """

    def __init__(self, visible: bool = True):
        self._visible = visible
        self._listeners: list[VisibilityListener] = []

    @property
    def visible(self) -> bool:
        return self._visible

    def set(self, visible: bool) -> None:
        if visible == self._visible:
            return
        self._visible = visible
        for listener in list(self._listeners):
            listener(visible)

    def subscribe(self, listener: VisibilityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


class AdaptivePoller:
    """
    Runs `callback` every `fast_interval` seconds while `has_activity` is
    true, every `slow_interval` seconds otherwise.

    Rules:
      - disabled or not visible => no timer
      - any change to enabled / intervals / has_activity replaces the timer
      - hidden -> visible while enabled => one immediate call, then ticks
      - at most one timer task at a time

    Async callbacks are started as tasks and not awaited, so a slow
    refresh can overlap with the next tick. Errors raised by the callback
    are logged; the next tick happens regardless.

    Usage:

        poller = AdaptivePoller(refresh, fast_interval=3, slow_interval=10)
        async with poller:
            ...
            poller.update(has_activity=bool(pending))
    """

    def __init__(
        self,
        callback: RefreshCallback,
        *,
        enabled: bool = True,
        fast_interval: float = 3.0,
        slow_interval: float = 10.0,
        has_activity: bool = False,
        visibility: VisibilitySignal | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.callback = callback
        self.enabled = enabled
        self.fast_interval = fast_interval
        self.slow_interval = slow_interval
        self.has_activity = has_activity
        self.visibility = visibility or VisibilitySignal()
        self._sleep = sleep

        self._timer: asyncio.Task | None = None
        self._in_flight: set[asyncio.Future] = set()
        self._unsubscribe: Callable[[], None] | None = None
        self._started = False

    # ---- introspection ----

    @property
    def state(self) -> PollerState:
        if self._timer is None:
            return PollerState.IDLE
        return PollerState.FAST if self.has_activity else PollerState.SLOW

    @property
    def interval(self) -> float | None:
        if self._timer is None:
            return None
        return self._current_interval()

    def _current_interval(self) -> float:
        return self.fast_interval if self.has_activity else self.slow_interval

    # ---- lifecycle ----

    def start(self) -> None:
        """Subscribe to visibility changes and install the timer."""
        if self._started:
            return
        self._started = True
        self._unsubscribe = self.visibility.subscribe(self._on_visibility_change)
        self._reschedule()

    async def stop(self, *, cancel_in_flight: bool = False) -> None:
        """
        Tear down the timer.

        In-flight async callbacks are left to finish unless
        `cancel_in_flight` is set, e.g. when the resource they write to
        is going away.
        """
        self._started = False
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        pending: list[asyncio.Future] = []
        timer = self._cancel_timer()
        if timer is not None:
            pending.append(timer)
        if cancel_in_flight:
            for future in list(self._in_flight):
                future.cancel()
                pending.append(future)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def __aenter__(self) -> "AdaptivePoller":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    def update(
        self,
        *,
        enabled: bool | None = None,
        fast_interval: float | None = None,
        slow_interval: float | None = None,
        has_activity: bool | None = None,
    ) -> None:
        """
        Change the polling configuration.

        The timer is only replaced when a value actually changes, so
        callers can push the same activity flag after every refresh.
        """
        changes = {
            "enabled": enabled,
            "fast_interval": fast_interval,
            "slow_interval": slow_interval,
            "has_activity": has_activity,
        }
        changed = False
        for name, value in changes.items():
            if value is not None and value != getattr(self, name):
                setattr(self, name, value)
                changed = True

        if changed and self._started:
            self._reschedule()

    # ---- timer ----

    def _cancel_timer(self) -> asyncio.Task | None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
        return timer

    def _reschedule(self) -> None:
        self._cancel_timer()
        if not (self.enabled and self.visibility.visible):
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.create_task(self._tick_forever(self._current_interval()))

    async def _tick_forever(self, interval: float) -> None:
        while True:
            await self._sleep(interval)
            self._fire()

    def _on_visibility_change(self, visible: bool) -> None:
        if visible and self.enabled:
            self._fire()
        self._reschedule()

    # ---- callback ----

    def _fire(self) -> None:
        try:
            result = self.callback()
        except Exception:
            logger.exception("Polling callback failed")
            return

        if inspect.isawaitable(result):
            future = asyncio.ensure_future(result)
            self._in_flight.add(future)
            future.add_done_callback(self._on_callback_done)

    def _on_callback_done(self, future: asyncio.Future) -> None:
        self._in_flight.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Polling callback failed", exc_info=exc)
