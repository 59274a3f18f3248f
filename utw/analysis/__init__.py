"""Engine log analysis: line reassembly, event classification, path diffing."""

from utw.analysis.line_buffer import LineReassembler
from utw.analysis.log_events import (
    AppError,
    CountdownTick,
    LineClassifier,
    ModuleMissing,
    NoTestsMatched,
    RunComplete,
    TestCompleted,
    TestEvent,
    TestsDiscovered,
    TestStarted,
    line_timestamp,
)
from utw.analysis.group_path import PathCursor

__all__ = [
    "AppError",
    "CountdownTick",
    "LineClassifier",
    "LineReassembler",
    "ModuleMissing",
    "NoTestsMatched",
    "PathCursor",
    "RunComplete",
    "TestCompleted",
    "TestEvent",
    "TestStarted",
    "TestsDiscovered",
    "line_timestamp",
]
