"""
Date Grammar
============
Priority-ordered regex rules for label dates.

The FIRST rule that yields a valid calendar date wins; later rules are
never consulted. Order (most → least specific):

  Full numeric      2026-03-15   15.03.2026   03/15/2026
  Month name        Mar 15, 2026   15 Mar 2026   2026 Mar 15
  Partial numeric   2029/03  (day=01)          09-2029  (day=01)
  Partial named     Feb 2029 (day=01)          2029 Feb (day=01)
  Year only         2031     (01-01)

Partial matches carry a note saying which parts were assumed, so an
assumed day or month is never silent.

A match whose components fail calendar validation (31 April, month 13)
does not count; only the first match of each rule is considered, and
the cascade moves on to the next rule.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from loguru import logger

from extractor.iso_date import to_iso
from extractor.models import DateMatch
from text_normalizer import normalize_ocr_text


# ─── Month names ──────────────────────────────────────────────────────────────

MONTHS = {
    'jan': 1, 'january': 1,
    'feb': 2, 'february': 2, 'feburary': 2,   # common misspelling
    'mar': 3, 'march': 3,
    'apr': 4, 'april': 4,
    'may': 5,
    'jun': 6, 'june': 6,
    'jul': 7, 'july': 7,
    'aug': 8, 'august': 8,
    'sep': 9, 'sept': 9, 'september': 9,
    'oct': 10, 'october': 10,
    'nov': 11, 'november': 11,
    'dec': 12, 'december': 12,
}


def month_to_num(name: Optional[str]) -> int:
    """Month name or abbreviation → 1-12, 0 when unknown"""
    if not name:
        return 0
    return MONTHS.get(name.lower().replace('.', ''), 0)


# ─── Pattern pieces ───────────────────────────────────────────────────────────

_SEP = r'[-/.\s]'
_YEAR = r'(20\d{2})'
_MONTH_NUM = r'(0?[1-9]|1[0-2])'
_DAY = r'(0?[1-9]|[12]\d|3[01])'
_MONTH_NAME = (
    r'(Jan(?:uary)?|Feb(?:ruary|urary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|'
    r'Jul(?:y)?|Aug(?:ust)?|Sep(?:t|tember)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)'
)

Components = Tuple[object, object, object]


@dataclass(frozen=True)
class DateRule:
    """One grammar rule: a pattern plus how to read (year, month, day) from it."""
    name: str
    pattern: re.Pattern
    components: Callable[[re.Match], Components]
    note: Optional[str] = None

    def apply(self, text: str) -> DateMatch:
        m = self.pattern.search(text)
        if not m:
            return DateMatch.none()
        iso = to_iso(*self.components(m))
        if not iso:
            logger.debug(f"[DateGrammar] {self.name}: rejected invalid date {m.group(0)!r}")
            return DateMatch.none()
        return DateMatch(iso=iso, note=self.note)


def _rule(name: str, pattern: str, components, note: Optional[str] = None, flags: int = 0) -> DateRule:
    return DateRule(name, re.compile(pattern, flags), components, note)


DATE_RULES: List[DateRule] = [
    # ── Full numeric dates ────────────────────────────────────────────────────
    _rule('ymd', rf'\b{_YEAR}{_SEP}{_MONTH_NUM}{_SEP}{_DAY}\b',
          lambda m: (m.group(1), m.group(2), m.group(3))),
    _rule('dmy', rf'\b{_DAY}{_SEP}{_MONTH_NUM}{_SEP}{_YEAR}\b',
          lambda m: (m.group(3), m.group(2), m.group(1))),
    _rule('mdy', rf'\b{_MONTH_NUM}{_SEP}{_DAY}{_SEP}{_YEAR}\b',
          lambda m: (m.group(3), m.group(1), m.group(2))),

    # ── Month-name dates ──────────────────────────────────────────────────────
    _rule('mon_d_y', rf'\b{_MONTH_NAME}\.?\s+{_DAY}[, ]+\s*{_YEAR}\b',
          lambda m: (m.group(3), month_to_num(m.group(1)), m.group(2)),
          flags=re.IGNORECASE),
    _rule('d_mon_y', rf'\b{_DAY}\s+{_MONTH_NAME}\.?,?\s+{_YEAR}\b',
          lambda m: (m.group(3), month_to_num(m.group(2)), m.group(1)),
          flags=re.IGNORECASE),
    _rule('y_mon_d', rf'\b{_YEAR}\s+{_MONTH_NAME}\.?\s+{_DAY}\b',
          lambda m: (m.group(1), month_to_num(m.group(2)), m.group(3)),
          flags=re.IGNORECASE),

    # ── Partial dates (day assumed 01) ────────────────────────────────────────
    _rule('ym', rf'\b{_YEAR}{_SEP}{_MONTH_NUM}\b',
          lambda m: (m.group(1), m.group(2), 1),
          note='assumed day=01 from year-month'),
    _rule('my', rf'\b{_MONTH_NUM}{_SEP}{_YEAR}\b',
          lambda m: (m.group(2), m.group(1), 1),
          note='assumed day=01 from month-year'),
    _rule('mon_y', rf'\b{_MONTH_NAME}\b[ ,.-]*{_YEAR}\b',
          lambda m: (m.group(2), month_to_num(m.group(1)), 1),
          note='assumed day=01 from month name', flags=re.IGNORECASE),
    _rule('y_mon', rf'\b{_YEAR}\b[ ,.-]*{_MONTH_NAME}\b',
          lambda m: (m.group(1), month_to_num(m.group(2)), 1),
          note='assumed day=01 from year + month name', flags=re.IGNORECASE),

    # ── Year only (month and day assumed) ─────────────────────────────────────
    _rule('year', rf'\b{_YEAR}\b',
          lambda m: (m.group(1), 1, 1),
          note='assumed 01-01 from year only'),
]


def extract_date(text: str, rules: Optional[List[DateRule]] = None) -> DateMatch:
    """
    Find the best date in OCR text.

    Args:
        text: Raw or already-normalized OCR text (normalization is idempotent)
        rules: Rule cascade to use (default: DATE_RULES)

    Returns:
        DateMatch of the first matching rule, or DateMatch.none()
    """
    normalized = normalize_ocr_text(text)
    if not normalized:
        return DateMatch.none()

    for rule in rules or DATE_RULES:
        match = rule.apply(normalized)
        if match.matched:
            logger.debug(f"[DateGrammar] {rule.name} → {match.iso} (note={match.note!r})")
            return match

    return DateMatch.none()
