"""Tracking of the test group hierarchy printed so far.

Automation test paths are dotted (``Project.Inventory.AddItem``) and are
printed as an indented tree of group headers.  Consecutive tests usually
share their leading groups, so only the part of a new path that differs
from the previously printed one is rendered.
"""

from __future__ import annotations

from typing import Sequence


def common_prefix_length(a: Sequence[str], b: Sequence[str]) -> int:
    """Number of leading segments that *a* and *b* have in common."""
    k = 0
    for left, right in zip(a, b):
        if left != right:
            break
        k += 1
    return k


class PathCursor:
    """Remembers the last rendered test path and diffs new paths against it."""

    def __init__(self) -> None:
        self.current: tuple[str, ...] = ()

    def advance(self, new_path: Sequence[str]) -> list[tuple[int, str]]:
        """Move the cursor to *new_path*.

        Args:
            new_path: Group segments of the test that is starting.

        Returns:
            ``(depth, label)`` pairs to print, depth starting at 1.  A first
            pair at depth 1 means the top-level group changed.
        """
        new_path = tuple(new_path)
        k = common_prefix_length(self.current, new_path)
        self.current = new_path
        return [(depth + 1, new_path[depth]) for depth in range(k, len(new_path))]
