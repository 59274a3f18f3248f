"""Running the engine and streaming its output into the dispatch loop."""

from __future__ import annotations

import asyncio
import sys

from utw.execution.dispatch import DispatchLoop
from utw.reporting.aggregator import RunAggregator, RunSummary

# Maximum bytes read from the engine's stdout per chunk
READ_CHUNK_SIZE = 64 * 1024


async def stream_process(
    command: list[str],
    dispatch: DispatchLoop,
    chunk_size: int = READ_CHUNK_SIZE,
) -> int:
    """Spawn *command* and submit its stdout to *dispatch* chunk by chunk.

    Args:
        command: Program and arguments to execute.
        dispatch: Dispatch loop receiving every chunk.
        chunk_size: Maximum number of bytes per read.

    Returns:
        The process exit code, once stdout is closed and every batch has
        been dispatched.

    Raises:
        FileNotFoundError: If the program does not exist.
        OSError: If the program cannot be started.
    """
    proc = await asyncio.create_subprocess_exec(
        *command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.DEVNULL,
    )
    assert proc.stdout is not None

    while True:
        chunk = await proc.stdout.read(chunk_size)
        if not chunk:
            break
        dispatch.submit(chunk)

    exit_code = await proc.wait()
    await dispatch.drain()

    dropped = dispatch.close()
    if dropped:
        print(
            f"Warning: discarded {dropped} bytes of unterminated engine output",
            file=sys.stderr,
        )
    return exit_code


async def run_engine(
    command: list[str],
    aggregator: RunAggregator,
    dispatch: DispatchLoop | None = None,
) -> RunSummary:
    """Run the engine to completion and return the run summary.

    The startup spinner is shown before the process is spawned; the summary
    is rendered after the last batch of output has been dispatched.
    """
    dispatch = dispatch or DispatchLoop(aggregator)
    aggregator.start()
    exit_code = await stream_process(command, dispatch)
    return aggregator.close(exit_code)
