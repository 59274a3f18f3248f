"""Tests for elapsed-time text."""

from __future__ import annotations

from utw.reporting import timing


class TestTimeText:
    def test_format(self):
        assert timing.time_text(100.0, 142.9).plain == "(42ms)"

    def test_fast(self):
        assert timing.time_text(0, 200).style == timing.FAST

    def test_medium(self):
        assert timing.time_text(0, 201).style == timing.MEDIUM

    def test_slow(self):
        assert timing.time_text(0, 1001).style == timing.SLOW

    def test_ignore_speed(self):
        """Totals are never colored by duration."""
        assert timing.time_text(0, 5000, ignore_speed=True).style == timing.FAST


class TestSuccessSymbol:
    def test_symbols(self):
        assert timing.success_symbol(True).plain == "✓"
        assert timing.success_symbol(False).plain == "✗"
        assert timing.success_symbol(False).style == timing.FAIL
