"""Output styles and elapsed-time annotations."""

from __future__ import annotations

from rich.text import Text

# Rich style names for each kind of output
PASS = "bright_black"
FAIL = "red"
WARNING = "bright_yellow"
TOTAL_PASSING = "green"
LIGHT = "bright_black"
CHECKMARK = "green"

FAST = "bright_black"
MEDIUM = "yellow"
SLOW = "red"

# Durations above these thresholds (milliseconds) are highlighted
MEDIUM_THRESHOLD_MS = 200
SLOW_THRESHOLD_MS = 1000

SUCCESS_SYMBOL = "✓"
FAILURE_SYMBOL = "✗"


def speed_style(elapsed_ms: float) -> str:
    """Style for a duration: grey when fast, yellow when medium, red when slow."""
    if elapsed_ms > SLOW_THRESHOLD_MS:
        return SLOW
    if elapsed_ms > MEDIUM_THRESHOLD_MS:
        return MEDIUM
    return FAST


def time_text(start_ms: float, stop_ms: float, ignore_speed: bool = False) -> Text:
    """Render the elapsed time between two instants as ``(123ms)``.

    Args:
        start_ms: Start instant in milliseconds.
        stop_ms: Stop instant in milliseconds.
        ignore_speed: Always use the fast style instead of coloring by
            duration.

    Returns:
        Styled text with the truncated millisecond difference.
    """
    elapsed = stop_ms - start_ms
    style = FAST if ignore_speed else speed_style(elapsed)
    return Text(f"({int(elapsed)}ms)", style=style)


def success_symbol(success: bool) -> Text:
    if success:
        return Text(SUCCESS_SYMBOL, style=CHECKMARK)
    return Text(FAILURE_SYMBOL, style=FAIL)
