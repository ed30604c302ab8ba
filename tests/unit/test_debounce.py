"""Tests for the quiet-period debouncer."""

import asyncio

from insightbites.pipeline.debounce import DEBOUNCE_SECONDS, Debouncer


class Recorder:
    def __init__(self):
        self.values: list[tuple[float, str]] = []
        self.t0 = asyncio.get_running_loop().time()

    def __call__(self, value):
        self.values.append((asyncio.get_running_loop().time() - self.t0, value))


class TestDebouncer:
    async def test_burst_propagates_last_value_once(self):
        recorder = Recorder()
        debouncer = Debouncer(recorder, delay=DEBOUNCE_SECONDS)

        debouncer.push("a")
        await asyncio.sleep(0.1)
        debouncer.push("ab")
        await asyncio.sleep(0.1)
        debouncer.push("abc")

        # Last push at ~200 ms, so nothing may propagate before ~700 ms
        await asyncio.sleep(0.45)
        assert recorder.values == []

        await debouncer.wait()
        assert [v for _, v in recorder.values] == ["abc"]
        assert recorder.values[0][0] >= 0.69

    async def test_single_push(self):
        recorder = Recorder()
        debouncer = Debouncer(recorder, delay=0.05)

        debouncer.push("x")
        assert debouncer.pending
        await debouncer.wait()

        assert [v for _, v in recorder.values] == ["x"]
        assert not debouncer.pending

    async def test_cancel_discards_pending_value(self):
        recorder = Recorder()
        debouncer = Debouncer(recorder, delay=0.05)

        debouncer.push("x")
        debouncer.cancel()
        await asyncio.sleep(0.1)

        assert recorder.values == []
        assert not debouncer.pending

    async def test_wait_without_pending_returns(self):
        debouncer = Debouncer(lambda value: None, delay=0.05)
        await asyncio.wait_for(debouncer.wait(), timeout=1)

    async def test_async_callback_awaited(self):
        seen = []

        async def callback(value):
            await asyncio.sleep(0.01)
            seen.append(value)

        debouncer = Debouncer(callback, delay=0.02)
        debouncer.push("abc")
        await debouncer.wait()

        assert seen == ["abc"]

    async def test_push_during_callback_does_not_cancel_it(self):
        seen = []
        started = asyncio.Event()

        async def callback(value):
            started.set()
            await asyncio.sleep(0.05)
            seen.append(value)

        debouncer = Debouncer(callback, delay=0.01)
        debouncer.push("first")
        await started.wait()
        debouncer.push("second")
        await debouncer.wait()

        assert seen == ["first", "second"]

    async def test_separate_pauses_propagate_separately(self):
        recorder = Recorder()
        debouncer = Debouncer(recorder, delay=0.02)

        debouncer.push("one")
        await debouncer.wait()
        debouncer.push("two")
        await debouncer.wait()

        assert [v for _, v in recorder.values] == ["one", "two"]
