"""
Tests for ISO date validation
"""

import calendar
import pytest
import sys
from datetime import date
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from extractor.iso_date import parse_iso, to_iso


def test_valid_components():
    assert to_iso(2026, 3, 15) == "2026-03-15"
    assert to_iso("2026", "3", "5") == "2026-03-05"
    assert to_iso("2026", "03", "05") == "2026-03-05"


@pytest.mark.parametrize("year,month,day", [
    (2026, 4, 31),
    (2026, 13, 1),
    (2026, 0, 10),
    (2026, 2, 29),
    (2026, 1, 0),
    ("20x6", 1, 1),
    (None, 1, 1),
])
def test_invalid_components_return_none(year, month, day):
    assert to_iso(year, month, day) is None


def test_leap_day():
    assert to_iso(2028, 2, 29) == "2028-02-29"


def test_round_trip_over_calendar_range():
    for year in range(2020, 2036):
        for month in range(1, 13):
            days_in_month = calendar.monthrange(year, month)[1]
            for day in range(1, 32):
                iso = to_iso(year, month, day)
                if day <= days_in_month:
                    assert iso is not None
                    parsed = date.fromisoformat(iso)
                    assert (parsed.year, parsed.month, parsed.day) == (year, month, day)
                else:
                    assert iso is None


def test_parse_iso_is_strict():
    assert parse_iso("2026-03-15") == date(2026, 3, 15)
    assert parse_iso("2026-3-15") is None
    assert parse_iso("2026-02-30") is None
    assert parse_iso(None) is None
    assert parse_iso(20260315) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
