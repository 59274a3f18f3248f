"""Run reporting: aggregated run state and the live status display."""

from utw.reporting.aggregator import ActiveTest, RunAggregator, RunState, RunSummary
from utw.reporting.status_sink import ConsoleStatusSink, StatusSink

__all__ = [
    "ActiveTest",
    "ConsoleStatusSink",
    "RunAggregator",
    "RunState",
    "RunSummary",
    "StatusSink",
]
