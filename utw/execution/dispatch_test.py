"""Tests for the serialized dispatch loop."""

from __future__ import annotations

import asyncio

from utw.analysis.log_events import LineClassifier, TestStarted
from utw.execution.dispatch import DispatchLoop
from utw.reporting.aggregator import RunAggregator

STARTED_T1 = b"LogAutomationController: Display: Test Started. Name={T1} Path={Grp.T1}\n"


class RecordingSink:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def start_spinner(self, depth, label):
        self.calls.append(("spinner", depth, str(label)))

    def update_active_label(self, label):
        self.calls.append(("label", str(label)))

    def stop_and_persist(self, symbol, depth, text):
        self.calls.append(("persist", str(symbol), depth, str(text)))

    def print_plain_line(self, text):
        self.calls.append(("line", str(text)))

    def print_blank_line(self):
        self.calls.append(("blank",))


class RecordingAggregator(RunAggregator):
    """Aggregator that also records every applied event."""

    def __init__(self) -> None:
        super().__init__(RecordingSink(), "Grp", clock=lambda: 0.0)
        self.events: list = []

    def apply(self, event) -> None:
        self.events.append(event)
        super().apply(event)


class SuspendingDispatchLoop(DispatchLoop):
    """Dispatch loop that pauses after line ``a1`` until released."""

    def __init__(self, aggregator, classifier) -> None:
        super().__init__(aggregator, classifier)
        self.order: list[str] = []
        self.paused: asyncio.Event | None = None
        self.release: asyncio.Event | None = None

    async def _dispatch_line(self, line: str) -> None:
        self.order.append(line)
        await super()._dispatch_line(line)
        if line == "a1":
            self.paused.set()
            await self.release.wait()


def _make_loop() -> tuple[DispatchLoop, RecordingAggregator]:
    aggregator = RecordingAggregator()
    return DispatchLoop(aggregator, LineClassifier(clock=lambda: 1.0)), aggregator


class TestFeed:
    """Tests for awaiting a single chunk."""

    def test_split_pattern_scenario(self):
        """A pattern split across chunks yields one event, after the second chunk."""
        loop, aggregator = _make_loop()

        async def scenario():
            await loop.feed(b"LogAutomationController: Display: Test Sta")
            assert aggregator.events == []
            await loop.feed(b"rted. Name={T1} Path={Grp.T1}\n")

        asyncio.run(scenario())
        assert aggregator.events == [TestStarted(name="T1", path=("Grp",), time=1000.0)]

    def test_unmatched_lines_ignored(self):
        loop, aggregator = _make_loop()
        asyncio.run(loop.feed(b"LogInit: hello\nLogTemp: world\n"))
        assert aggregator.events == []
        assert loop.lines_dispatched == 2

    def test_countdown_uses_run_state(self):
        """Listed test names are consumed after a discovery line."""
        loop, aggregator = _make_loop()
        asyncio.run(loop.feed(
            b"LogAutomationCommandLine: Display: Found 1 automation tests based on 'Grp'\n"
            b"LogAutomationCommandLine: Display: \tGrp.T1\n"
            b"LogAutomationCommandLine: Display: \tNot.Counted\n"
        ))
        kinds = [type(e).__name__ for e in aggregator.events]
        assert kinds == ["TestsDiscovered", "CountdownTick"]
        assert aggregator.state.pending_discovery_count == 0


class TestSubmit:
    """Tests for batches scheduled while earlier ones are still running."""

    def test_batches_dispatch_in_arrival_order(self):
        """Batches submitted back to back are dispatched in order."""
        loop, aggregator = _make_loop()
        chunks = [
            f"LogAutomationController: Display: Test Started. Name={{T{i}}} Path={{G{i}.T{i}}}\n".encode()
            for i in range(20)
        ]

        async def scenario():
            for chunk in chunks:
                loop.submit(chunk)
            assert loop.backlog == 20
            await loop.drain()

        asyncio.run(scenario())
        assert [e.name for e in aggregator.events] == [f"T{i}" for i in range(20)]
        assert loop.backlog == 0

    def test_batches_never_interleave(self):
        """A batch suspended mid-dispatch holds back later batches, which then run in order."""
        aggregator = RecordingAggregator()
        loop = SuspendingDispatchLoop(aggregator, LineClassifier(clock=lambda: 1.0))

        async def scenario():
            loop.paused = asyncio.Event()
            loop.release = asyncio.Event()
            loop.submit(b"a1\na2\na3\n")
            await loop.paused.wait()

            loop.submit(b"b1\nb2\n")
            loop.submit(b"c1\n")
            for _ in range(10):
                await asyncio.sleep(0)
            assert loop.order == ["a1"]
            assert loop.backlog == 3

            loop.release.set()
            await loop.drain()

        asyncio.run(scenario())
        assert loop.order == ["a1", "a2", "a3", "b1", "b2", "c1"]
        assert loop.lines_dispatched == 6

    def test_partial_chunk_schedules_nothing(self):
        loop, _ = _make_loop()

        async def scenario():
            loop.submit(b"no newline yet")
            assert loop.backlog == 0
            await loop.drain()

        asyncio.run(scenario())
        assert loop.close() == len(b"no newline yet")

    def test_drain_before_summary(self):
        """Draining guarantees the summary sees every batch."""
        loop, aggregator = _make_loop()

        async def scenario():
            loop.submit(STARTED_T1)
            loop.submit(
                b"LogAutomationController: Display: Test Completed. "
                b"Result={Success} Name={T1} Path={Grp.T1}\n"
            )
            await loop.drain()
            return aggregator.close(0)

        summary = asyncio.run(scenario())
        assert summary.passing == 1


class TestErrorIsolation:
    def test_failing_line_does_not_stop_batch(self, capsys):
        """An exception on one line is reported and later lines still run."""
        loop, aggregator = _make_loop()
        calls = {"n": 0}
        original = aggregator.apply

        def flaky_apply(event) -> None:
            calls["n"] += 1
            if calls["n"] == 1:
                raise RuntimeError("bad event")
            original(event)

        aggregator.apply = flaky_apply
        asyncio.run(loop.feed(STARTED_T1 + STARTED_T1.replace(b"T1", b"T2")))
        assert [e.name for e in aggregator.events] == ["T2"]
        assert "bad event" in capsys.readouterr().err
