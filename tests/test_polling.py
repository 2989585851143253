import asyncio
import logging

from cafe.core.polling import AdaptivePoller, PollerState, VisibilitySignal


async def settle():
    for _ in range(10):
        await asyncio.sleep(0)


class ManualClock:
    """
    Fake `sleep` for the poller. Time only moves on `advance()`.
    """

    def __init__(self):
        self.now = 0.0
        self.delays: list[float] = []
        self._sleepers: list[tuple[float, asyncio.Future]] = []

    @property
    def pending(self) -> int:
        return sum(1 for _, fut in self._sleepers if not fut.done())

    async def sleep(self, delay: float) -> None:
        fut = asyncio.get_running_loop().create_future()
        entry = (self.now + delay, fut)
        self.delays.append(delay)
        self._sleepers.append(entry)
        try:
            await fut
        finally:
            self._sleepers.remove(entry)

    async def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            await settle()
            due = [s for s in self._sleepers if s[0] <= target and not s[1].done()]
            if not due:
                break
            deadline, fut = min(due, key=lambda s: s[0])
            self.now = deadline
            fut.set_result(None)
        self.now = target
        await settle()


def test_visibility_signal_notifies_on_change_only():
    signal = VisibilitySignal()
    seen = []
    unsubscribe = signal.subscribe(seen.append)

    signal.set(True)
    signal.set(False)
    signal.set(False)
    signal.set(True)
    unsubscribe()
    signal.set(False)

    assert seen == [False, True]
    assert signal.visible is False


def test_fast_interval_while_active():
    async def scenario():
        clock = ManualClock()
        calls = []
        poller = AdaptivePoller(
            lambda: calls.append(clock.now),
            fast_interval=3,
            slow_interval=10,
            has_activity=True,
            sleep=clock.sleep,
        )
        poller.start()
        assert poller.state is PollerState.FAST
        assert poller.interval == 3

        await clock.advance(9.5)
        await poller.stop()
        return calls

    assert asyncio.run(scenario()) == [3, 6, 9]


def test_slow_interval_without_activity():
    async def scenario():
        clock = ManualClock()
        calls = []
        async with AdaptivePoller(
            lambda: calls.append(clock.now),
            fast_interval=3,
            slow_interval=10,
            sleep=clock.sleep,
        ) as poller:
            assert poller.state is PollerState.SLOW
            await clock.advance(25)
        return calls

    assert asyncio.run(scenario()) == [10, 20]


def test_activity_change_restarts_timer_with_new_interval():
    async def scenario():
        clock = ManualClock()
        calls = []
        poller = AdaptivePoller(
            lambda: calls.append(clock.now),
            fast_interval=3,
            slow_interval=10,
            has_activity=True,
            sleep=clock.sleep,
        )
        poller.start()
        await clock.advance(7)
        poller.update(has_activity=False)
        await settle()
        assert poller.state is PollerState.SLOW
        assert clock.pending == 1

        await clock.advance(20)
        await poller.stop()
        return calls

    # Nothing at 9: the 3s timer was replaced at t=7.
    assert asyncio.run(scenario()) == [3, 6, 17, 27]


def test_update_with_same_values_keeps_timer():
    async def scenario():
        clock = ManualClock()
        calls = []
        poller = AdaptivePoller(
            lambda: calls.append(clock.now),
            fast_interval=3,
            slow_interval=10,
            has_activity=True,
            sleep=clock.sleep,
        )
        poller.start()
        await clock.advance(2)
        poller.update(has_activity=True, fast_interval=3, enabled=True)
        await clock.advance(1)
        await poller.stop()
        return calls

    assert asyncio.run(scenario()) == [3]


def test_interval_change_reschedules():
    async def scenario():
        clock = ManualClock()
        calls = []
        poller = AdaptivePoller(
            lambda: calls.append(clock.now),
            fast_interval=3,
            has_activity=True,
            sleep=clock.sleep,
        )
        poller.start()
        await clock.advance(2)
        poller.update(fast_interval=5)
        await clock.advance(10)
        await poller.stop()
        return calls

    assert asyncio.run(scenario()) == [7, 12]


def test_at_most_one_timer():
    async def scenario():
        clock = ManualClock()
        poller = AdaptivePoller(lambda: None, sleep=clock.sleep)
        poller.start()
        for i in range(20):
            poller.update(has_activity=i % 2 == 0)
            poller.update(slow_interval=10 + i)
        await settle()
        pending = clock.pending
        await poller.stop()
        return pending, clock.pending

    assert asyncio.run(scenario()) == (1, 0)


def test_hidden_stops_and_visible_fires_immediately():
    async def scenario():
        clock = ManualClock()
        visibility = VisibilitySignal()
        calls = []
        poller = AdaptivePoller(
            lambda: calls.append(clock.now),
            fast_interval=3,
            has_activity=True,
            visibility=visibility,
            sleep=clock.sleep,
        )
        poller.start()
        await clock.advance(4)

        visibility.set(False)
        await clock.advance(100)
        assert poller.state is PollerState.IDLE
        assert calls == [3]

        visibility.set(True)
        assert calls == [3, 104]

        await clock.advance(3)
        await poller.stop()
        return calls

    assert asyncio.run(scenario()) == [3, 104, 107]


def test_starting_hidden_does_not_poll():
    async def scenario():
        clock = ManualClock()
        calls = []
        poller = AdaptivePoller(
            lambda: calls.append(clock.now),
            visibility=VisibilitySignal(visible=False),
            sleep=clock.sleep,
        )
        poller.start()
        await clock.advance(60)
        state = poller.state
        await poller.stop()
        return calls, state

    assert asyncio.run(scenario()) == ([], PollerState.IDLE)


def test_disabled_never_fires_even_when_becoming_visible():
    async def scenario():
        clock = ManualClock()
        visibility = VisibilitySignal()
        calls = []
        poller = AdaptivePoller(
            lambda: calls.append(clock.now),
            enabled=False,
            fast_interval=3,
            has_activity=True,
            visibility=visibility,
            sleep=clock.sleep,
        )
        poller.start()
        await clock.advance(30)
        visibility.set(False)
        visibility.set(True)
        await clock.advance(30)
        assert calls == []
        assert poller.interval is None

        poller.update(enabled=True)
        await clock.advance(3)
        await poller.stop()
        return calls

    assert asyncio.run(scenario()) == [63]


def test_update_before_start_installs_nothing():
    async def scenario():
        clock = ManualClock()
        poller = AdaptivePoller(lambda: None, sleep=clock.sleep)
        poller.update(has_activity=True)
        await settle()
        return poller.state, clock.pending

    assert asyncio.run(scenario()) == (PollerState.IDLE, 0)


def test_stop_cancels_timer():
    async def scenario():
        clock = ManualClock()
        calls = []
        poller = AdaptivePoller(lambda: calls.append(clock.now), sleep=clock.sleep)
        poller.start()
        await clock.advance(10)
        await poller.stop()
        await clock.advance(100)
        return calls, poller.state, clock.pending

    assert asyncio.run(scenario()) == ([10], PollerState.IDLE, 0)


def test_failing_callback_is_logged_and_polling_continues(caplog):
    async def scenario():
        clock = ManualClock()
        calls = []

        def refresh():
            calls.append(clock.now)
            raise RuntimeError("db down")

        poller = AdaptivePoller(refresh, fast_interval=3, has_activity=True, sleep=clock.sleep)
        poller.start()
        await clock.advance(6)
        await poller.stop()
        return calls

    with caplog.at_level(logging.ERROR, logger="cafe.core.polling"):
        assert asyncio.run(scenario()) == [3, 6]
    assert "Polling callback failed" in caplog.text


def test_failing_async_callback_is_logged(caplog):
    async def scenario():
        clock = ManualClock()
        calls = []

        async def refresh():
            calls.append(clock.now)
            raise RuntimeError("timeout")

        poller = AdaptivePoller(refresh, fast_interval=3, has_activity=True, sleep=clock.sleep)
        poller.start()
        await clock.advance(6)
        await poller.stop()
        return calls

    with caplog.at_level(logging.ERROR, logger="cafe.core.polling"):
        assert asyncio.run(scenario()) == [3, 6]
    assert "RuntimeError: timeout" in caplog.text


def test_slow_async_callbacks_can_overlap():
    async def scenario():
        clock = ManualClock()
        release = asyncio.Event()
        started = []
        finished = []

        async def refresh():
            started.append(clock.now)
            await release.wait()
            finished.append(clock.now)

        poller = AdaptivePoller(refresh, fast_interval=3, has_activity=True, sleep=clock.sleep)
        poller.start()
        await clock.advance(9)
        in_progress = (list(started), list(finished))

        release.set()
        await settle()
        await poller.stop()
        return in_progress, len(finished)

    (started, finished), done = asyncio.run(scenario())
    assert started == [3, 6, 9]
    assert finished == []
    assert done == 3


def test_stop_can_cancel_in_flight_callbacks(caplog):
    async def scenario():
        clock = ManualClock()
        release = asyncio.Event()
        finished = []

        async def refresh():
            await release.wait()
            finished.append(clock.now)

        poller = AdaptivePoller(refresh, fast_interval=3, has_activity=True, sleep=clock.sleep)
        poller.start()
        await clock.advance(6)
        await poller.stop(cancel_in_flight=True)

        release.set()
        await settle()
        return finished, len(poller._in_flight)

    with caplog.at_level(logging.ERROR, logger="cafe.core.polling"):
        assert asyncio.run(scenario()) == ([], 0)
    assert "Polling callback failed" not in caplog.text
