"""Serialized dispatch of engine output to the run aggregator.

Chunks are reassembled into lines as soon as they arrive, which fixes the
order of lines across chunks.  The lines of one chunk form a batch; batches
are dispatched one at a time behind a single ``asyncio.Lock`` so that a
batch whose rendering yields to the event loop is never interleaved with
the next one.  ``asyncio.Lock`` wakes waiters in FIFO order, so batches are
dispatched in the order their chunks arrived.
"""

from __future__ import annotations

import asyncio
import sys

from utw.analysis.line_buffer import LineReassembler
from utw.analysis.log_events import LineClassifier
from utw.reporting.aggregator import RunAggregator


class DispatchLoop:
    """Feeds reassembled lines through the classifier into the aggregator."""

    def __init__(
        self,
        aggregator: RunAggregator,
        classifier: LineClassifier | None = None,
        reassembler: LineReassembler | None = None,
    ) -> None:
        self.aggregator = aggregator
        self.classifier = classifier or LineClassifier()
        self.reassembler = reassembler or LineReassembler()
        self._gate = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()
        self.lines_dispatched = 0

    @property
    def backlog(self) -> int:
        """Number of batches scheduled but not yet dispatched."""
        return len(self._tasks)

    def submit(self, chunk: bytes) -> None:
        """Reassemble *chunk* now and schedule its batch for dispatch.

        Must be called from within the running event loop.
        """
        lines = self.reassembler.feed(chunk)
        if not lines:
            return
        task = asyncio.get_running_loop().create_task(self._dispatch_batch(lines))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def feed(self, chunk: bytes) -> None:
        """Reassemble *chunk* and wait until its batch has been dispatched."""
        lines = self.reassembler.feed(chunk)
        await self._dispatch_batch(lines)

    async def drain(self) -> None:
        """Wait until every scheduled batch has been dispatched.

        Acquires the gate once after the scheduled batches finish, so the
        caller observes the run state only after the last batch released it.
        """
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
        async with self._gate:
            pass

    def close(self) -> int:
        """Discard any unterminated trailing fragment of the stream.

        Returns:
            Number of discarded bytes.
        """
        return self.reassembler.close()

    async def _dispatch_batch(self, lines: list[str]) -> None:
        async with self._gate:
            for line in lines:
                await self._dispatch_line(line)
            # Let the display and the stream reader run between batches.
            await asyncio.sleep(0)

    async def _dispatch_line(self, line: str) -> None:
        state = self.aggregator.state
        try:
            event = self.classifier.classify(
                line, countdown_active=state.countdown_active
            )
            if event is not None:
                self.aggregator.apply(event)
        except Exception as e:
            print(f"Warning: could not process engine output line: {e}",
                  file=sys.stderr)
        self.lines_dispatched += 1
