"""
Tests for month key helpers.
"""

from datetime import date, datetime, timezone

import pytest

from src.services.exceptions import InvalidMonth
from src.utils.months import current_month, first_two_weeks, month_bounds, parse_month


class TestParseMonth:
    def test_valid(self):
        assert parse_month("2026-03") == (2026, 3)
        assert parse_month("1999-12") == (1999, 12)

    @pytest.mark.parametrize("value", ["2026-3", "2026-00", "2026-13", "26-03", "2026/03", "", None])
    def test_invalid(self, value):
        with pytest.raises(InvalidMonth):
            parse_month(value)

    def test_invalid_month_is_value_error(self):
        with pytest.raises(ValueError):
            parse_month("March")


def test_current_month():
    assert current_month(datetime(2026, 1, 31, 23, 59, tzinfo=timezone.utc)) == "2026-01"


def test_month_bounds_half_open():
    start, end = month_bounds("2026-02")
    assert start == datetime(2026, 2, 1, tzinfo=timezone.utc)
    assert end == datetime(2026, 3, 1, tzinfo=timezone.utc)


def test_month_bounds_december():
    _, end = month_bounds("2025-12")
    assert end == datetime(2026, 1, 1, tzinfo=timezone.utc)


def test_first_two_weeks():
    assert first_two_weeks("2026-03") == (date(2026, 3, 1), date(2026, 3, 14))
