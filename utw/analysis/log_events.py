"""Classification of Unreal automation log lines into typed test events.

Only a fixed set of statements emitted by the automation framework is
recognized.  Each rule is tried in order and the first match wins; lines
matching no rule are ignored.  The discovery countdown rule only applies
while the run is still consuming the list of discovered test names, and
takes priority over every other rule during that window.

Engine log lines carry a fixed-width timestamp right after the opening
bracket, e.g.::

    [2024.03.01-10.22.05:123][  0]LogAutomationController: Display: ...
"""

from __future__ import annotations

import calendar
import datetime
import re
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

# Character range and format of the embedded engine timestamp
TIMESTAMP_SLICE = slice(1, 24)
TIMESTAMP_FORMAT = "%Y.%m.%d-%H.%M.%S:%f"

APP_ERROR_MARKER = "Error: appError called: "
RUN_COMPLETE_MARKER = "TEST COMPLETE"


@dataclass(frozen=True)
class ModuleMissing:
    """The engine could not load a game module."""

    name: str


@dataclass(frozen=True)
class TestsDiscovered:
    """The automation controller found ``count`` tests to run."""

    __test__ = False

    count: int
    time: float


@dataclass(frozen=True)
class NoTestsMatched:
    time: float


@dataclass(frozen=True)
class TestStarted:
    __test__ = False

    name: str
    path: tuple[str, ...]
    time: float


@dataclass(frozen=True)
class TestCompleted:
    __test__ = False

    name: str
    path: tuple[str, ...]
    success: bool
    time: float


@dataclass(frozen=True)
class AppError:
    """A fatal engine error, usually followed by the process exiting."""

    message: str


@dataclass(frozen=True)
class RunComplete:
    time: float


@dataclass(frozen=True)
class CountdownTick:
    """One discovered test name listed after the discovery line."""


TestEvent = Union[
    ModuleMissing,
    TestsDiscovered,
    NoTestsMatched,
    TestStarted,
    TestCompleted,
    AppError,
    RunComplete,
    CountdownTick,
]


def line_timestamp(line: str) -> float | None:
    """Extract the engine timestamp of a log line.

    Args:
        line: A complete log line.

    Returns:
        Epoch milliseconds (the engine logs in UTC), or None if the line
        does not start with a well-formed timestamp.
    """
    stamp = line[TIMESTAMP_SLICE]
    if len(stamp) != TIMESTAMP_SLICE.stop - TIMESTAMP_SLICE.start:
        return None
    try:
        parsed = datetime.datetime.strptime(stamp, TIMESTAMP_FORMAT)
    except ValueError:
        return None
    return calendar.timegm(parsed.timetuple()) * 1000.0 + parsed.microsecond / 1000.0


def split_test_path(path: str) -> tuple[str, ...]:
    """Split a dotted automation path into its groups, dropping the leaf name.

    Example: ``"Project.Inventory.AddItem"`` returns
    ``("Project", "Inventory")``.
    """
    return tuple(path.split(".")[:-1])


# Each rule receives the regex match and the line time.
_Constructor = Callable[["re.Match[str]", float], TestEvent]


@dataclass(frozen=True)
class _Rule:
    pattern: re.Pattern[str]
    build: _Constructor
    countdown_only: bool = False


_RULES: tuple[_Rule, ...] = (
    _Rule(
        re.compile(r"LogAutomationCommandLine: Display: \t(.*)"),
        lambda m, t: CountdownTick(),
        countdown_only=True,
    ),
    _Rule(
        re.compile(
            r"The game module '(.*)' could not be found\. Please ensure that "
            r"this module exists and that it is compiled\."
        ),
        lambda m, t: ModuleMissing(name=m.group(1)),
    ),
    _Rule(
        re.compile(
            r"LogAutomationController: Display: Test Started\. "
            r"Name=\{(.*?)\} Path=\{(.*)\}"
        ),
        lambda m, t: TestStarted(
            name=m.group(1), path=split_test_path(m.group(2)), time=t
        ),
    ),
    _Rule(
        re.compile(
            r"LogAutomationController: (?:Display|Error): Test Completed\. "
            r"Result=\{(.*?)\} Name=\{(.*?)\} Path=\{(.*)\}"
        ),
        lambda m, t: TestCompleted(
            name=m.group(2),
            path=split_test_path(m.group(3)),
            success=m.group(1) == "Success",
            time=t,
        ),
    ),
    _Rule(
        re.compile(re.escape(APP_ERROR_MARKER) + r"(.*)"),
        lambda m, t: AppError(message=m.group(1)),
    ),
    _Rule(
        re.compile(re.escape(RUN_COMPLETE_MARKER)),
        lambda m, t: RunComplete(time=t),
    ),
    _Rule(
        re.compile(r"LogAutomationCommandLine: Error: No automation tests matched"),
        lambda m, t: NoTestsMatched(time=t),
    ),
    _Rule(
        re.compile(
            r"LogAutomationCommandLine: Display: Found ([0-9]+) automation "
            r"tests based on"
        ),
        lambda m, t: TestsDiscovered(count=int(m.group(1)), time=t),
    ),
)


class LineClassifier:
    """Maps complete log lines to at most one ``TestEvent``.

    Lines without an embedded timestamp reuse the most recent timestamp
    seen on an earlier line; before any timestamp has been seen, the
    wall clock is used instead.  Both are epoch milliseconds in UTC, so a
    duration that spans the fallback and a later stamp stays consistent as
    long as the engine logs UTC times (its default).  An engine configured
    to log local times would shift such a duration by the UTC offset.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.time
        self.last_time: float | None = None

    def line_time(self, line: str) -> float:
        """Return the time of *line*, applying the fallback rule."""
        stamp = line_timestamp(line)
        if stamp is not None:
            self.last_time = stamp
            return stamp
        if self.last_time is not None:
            return self.last_time
        return self._clock() * 1000.0

    def classify(self, line: str, countdown_active: bool = False) -> TestEvent | None:
        """Classify one line.

        Args:
            line: A complete log line without its terminator.
            countdown_active: True while discovered test names are still
                being listed after a "Found N automation tests" line.

        Returns:
            The event for the first matching rule, or None.
        """
        line_time = self.line_time(line)
        for rule in _RULES:
            if rule.countdown_only and not countdown_active:
                continue
            match = rule.pattern.search(line)
            if match is not None:
                return rule.build(match, line_time)
        return None
