"""
ISO date validation

Raw (year, month, day) components from a regex match are only trusted if
they form a real calendar date. Anything else returns None so the caller
moves on to its next rule.
"""

import re
from datetime import date
from typing import Optional, Union


DatePart = Union[int, str]

_ISO_SHAPE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def to_iso(year: DatePart, month: DatePart, day: DatePart) -> Optional[str]:
    """
    Build a YYYY-MM-DD string from raw components.

    Args:
        year:  Year as int or digit string ("2026")
        month: Month as int or digit string ("3", "03")
        day:   Day as int or digit string

    Returns:
        ISO date string, or None if the components are not a real date
        (day 31 in April, month 13, 29 Feb in a common year, non-digits).
    """
    try:
        dt = date(int(year), int(month), int(day))
    except (TypeError, ValueError):
        return None
    return dt.isoformat()


def parse_iso(value) -> Optional[date]:
    """Parse a strict YYYY-MM-DD string, None for anything else"""
    if not isinstance(value, str) or not _ISO_SHAPE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None
