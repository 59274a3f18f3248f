"""Engine execution: command assembly, process streaming, and dispatch."""

from utw.execution.command import build_engine_command
from utw.execution.dispatch import DispatchLoop
from utw.execution.runner import run_engine, stream_process

__all__ = [
    "DispatchLoop",
    "build_engine_command",
    "run_engine",
    "stream_process",
]
