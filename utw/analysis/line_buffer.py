"""Reassembly of a chunked byte stream into complete log lines.

The engine writes its log to stdout in arbitrarily sized chunks, so a single
line can be split anywhere, including in the middle of a multi-byte UTF-8
sequence or between the ``\\r`` and ``\\n`` of a CRLF terminator.  The
reassembler carries the trailing partial line between calls as raw bytes and
only decodes a line once its terminator has arrived.
"""

from __future__ import annotations


class LineReassembler:
    """Turns byte chunks into an ordered sequence of complete lines."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        self._pending = b""

    @property
    def pending(self) -> bytes:
        """The partial line carried over from the previous chunk."""
        return self._pending

    def feed(self, chunk: bytes) -> list[str]:
        """Consume one chunk and return the lines it completes.

        Args:
            chunk: Raw bytes as read from the stream.

        Returns:
            Complete lines in stream order, without their terminators.
        """
        data = self._pending + chunk
        segments = data.split(b"\n")
        # The last segment is either empty (chunk ended on a boundary)
        # or an unterminated fragment.
        self._pending = segments.pop()
        return [self._decode(segment) for segment in segments]

    def close(self) -> int:
        """Discard any unterminated fragment at end of stream.

        Returns:
            Number of bytes that were discarded.
        """
        dropped = len(self._pending)
        self._pending = b""
        return dropped

    def _decode(self, segment: bytes) -> str:
        if segment.endswith(b"\r"):
            segment = segment[:-1]
        return segment.decode(self.encoding, errors="replace")
