"""Aggregation of test events into run state and rendered progress.

The aggregator owns everything that changes while the engine runs: the
discovery countdown, pass/fail counters, deferred error messages, the
currently running test, and the group path cursor.  One instance is created
per run; every event goes through ``apply`` in arrival order and the run
ends with ``close`` once the engine's exit code is known.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable

from rich.text import Text

from utw.analysis.log_events import (
    AppError,
    CountdownTick,
    ModuleMissing,
    NoTestsMatched,
    RunComplete,
    TestCompleted,
    TestEvent,
    TestsDiscovered,
    TestStarted,
)
from utw.analysis.group_path import PathCursor
from utw.reporting import timing
from utw.reporting.status_sink import StatusSink, indented

STARTUP_LABEL = "Starting Unreal"
EXITED_BEFORE_FINISH = "(Unreal exited before test finished)"
NO_COMPLETION_REPORTED = "(no completion reported)"


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass
class ActiveTest:
    """The test whose spinner is currently shown."""

    name: str
    path: tuple[str, ...]
    start_time: float

    @property
    def depth(self) -> int:
        return len(self.path) + 1


@dataclass
class RunState:
    """Mutable state of a single run."""

    pending_discovery_count: int = 0
    passing: int = 0
    failing: int = 0
    errors: list[str] = field(default_factory=list)
    init_start_time: float | None = None
    run_start_time: float | None = None
    initialized: bool = False
    active_test: ActiveTest | None = None

    @property
    def countdown_active(self) -> bool:
        return self.pending_discovery_count > 0


@dataclass
class RunSummary:
    """Final record of a run, produced when the engine exits."""

    exit_code: int
    passing: int
    failing: int
    errors: list[str]
    aborted: bool = False


class RunAggregator:
    """Applies test events to a ``RunState`` and drives a ``StatusSink``.

    Args:
        sink: Display surface receiving render instructions.
        pattern: The test pattern the engine was asked to run, used in the
            "no tests matched" summary.
        clock: Wall-clock source in milliseconds, used to time engine
            startup.
    """

    def __init__(
        self,
        sink: StatusSink,
        pattern: str,
        clock: Callable[[], float] = _monotonic_ms,
    ) -> None:
        self.sink = sink
        self.pattern = pattern
        self.clock = clock
        self.state = RunState()
        self.cursor = PathCursor()

    def start(self) -> None:
        """Mark the engine as spawned and show the startup spinner."""
        self.state.init_start_time = self.clock()
        self.sink.start_spinner(0, STARTUP_LABEL)

    def apply(self, event: TestEvent) -> None:
        """Apply one event to the run state and render it."""
        if isinstance(event, CountdownTick):
            if self.state.pending_discovery_count > 0:
                self.state.pending_discovery_count -= 1
        elif isinstance(event, ModuleMissing):
            self.state.errors.append(
                f"Missing game module: {event.name}; did you compile the "
                f"right target for this configuration?"
            )
        elif isinstance(event, TestStarted):
            self._on_test_started(event)
        elif isinstance(event, TestCompleted):
            self._on_test_completed(event)
        elif isinstance(event, AppError):
            self._fail_active_test(EXITED_BEFORE_FINISH)
            self.sink.print_plain_line(
                Text(f"  Unreal App Error: {event.message}", style=timing.FAIL)
            )
        elif isinstance(event, RunComplete):
            start = self.state.run_start_time
            self.sink.print_blank_line()
            line = Text("  Tests finished ", style=timing.LIGHT)
            line.append_text(
                timing.time_text(
                    start if start is not None else event.time,
                    event.time,
                    ignore_speed=True,
                )
            )
            self.sink.print_plain_line(line)
        elif isinstance(event, NoTestsMatched):
            self.state.run_start_time = event.time
            self._mark_initialized()
        elif isinstance(event, TestsDiscovered):
            if self.state.run_start_time is None:
                self.state.run_start_time = event.time
            self.state.pending_discovery_count = event.count
            self._mark_initialized()

    def close(self, exit_code: int) -> RunSummary:
        """Render the final summary once the engine has exited.

        Args:
            exit_code: The engine's exit code.

        Returns:
            The run summary; its exit code is the engine's, unchanged.
        """
        state = self.state
        self.sink.print_blank_line()

        aborted = False
        if state.active_test is not None:
            aborted = True
            self._fail_active_test(EXITED_BEFORE_FINISH)
        elif not state.initialized:
            aborted = True
            self.sink.stop_and_persist(
                timing.success_symbol(False),
                0,
                Text("Unreal exited before initializing", style=timing.FAIL),
            )
            self.sink.print_blank_line()

        if aborted:
            for error in state.errors:
                self.sink.print_plain_line(Text(f"  {error}", style=timing.FAIL))
            self.sink.print_blank_line()

        if state.passing > 0:
            self.sink.print_plain_line(
                indented(1, Text(f"{state.passing} passing", style=timing.TOTAL_PASSING))
            )
        if state.failing > 0:
            self.sink.print_plain_line(
                indented(1, Text(f"{state.failing} failing", style=timing.FAIL))
            )
        if state.passing == 0 and state.failing == 0:
            self.sink.print_plain_line(
                indented(
                    1,
                    Text(
                        f'No tests matched the pattern "{self.pattern}"',
                        style=timing.WARNING,
                    ),
                )
            )
        self.sink.print_blank_line()

        return RunSummary(
            exit_code=exit_code,
            passing=state.passing,
            failing=state.failing,
            errors=list(state.errors),
            aborted=aborted,
        )

    def _mark_initialized(self) -> None:
        """Replace the startup spinner with the initialization time."""
        state = self.state
        if state.initialized:
            return
        state.initialized = True
        start = state.init_start_time
        now = self.clock()
        text = Text("Unreal Initialized ")
        text.append_text(
            timing.time_text(start if start is not None else now, now, ignore_speed=True)
        )
        self.sink.stop_and_persist("", 0, text)

    def _on_test_started(self, event: TestStarted) -> None:
        state = self.state
        if not state.initialized:
            if state.run_start_time is None:
                state.run_start_time = event.time
            self._mark_initialized()
        if state.active_test is not None:
            self._fail_active_test(NO_COMPLETION_REPORTED)

        rendered = self.cursor.advance(event.path)
        if rendered and rendered[0][0] == 1:
            self.sink.print_blank_line()
        for depth, label in rendered:
            self.sink.print_plain_line(indented(depth, label))

        state.active_test = ActiveTest(
            name=event.name, path=event.path, start_time=event.time
        )
        self.sink.start_spinner(state.active_test.depth, event.name)

    def _on_test_completed(self, event: TestCompleted) -> None:
        state = self.state
        active = state.active_test
        if event.success:
            state.passing += 1
        else:
            state.failing += 1

        start = active.start_time if active is not None else event.time
        depth = active.depth if active is not None else len(event.path) + 1
        text = Text(event.name, style=timing.PASS if event.success else timing.FAIL)
        text.append(" ")
        text.append_text(timing.time_text(start, event.time))
        self.sink.stop_and_persist(timing.success_symbol(event.success), depth, text)
        state.active_test = None

    def _fail_active_test(self, annotation: str) -> None:
        """Count the running test as failed and persist it, if there is one."""
        state = self.state
        active = state.active_test
        if active is None:
            return
        state.failing += 1
        self.sink.stop_and_persist(
            timing.success_symbol(False),
            active.depth,
            Text(f"{active.name} {annotation}", style=timing.FAIL),
        )
        self.sink.print_blank_line()
        state.active_test = None
