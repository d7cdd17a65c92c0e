"""
Extraction value types

Both types live for a single extraction call; nothing here is cached.
"""

from dataclasses import asdict, dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class DateMatch:
    """Best date found by the grammar, with a note when parts were assumed."""
    iso: Optional[str] = None
    note: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.iso is not None

    @classmethod
    def none(cls) -> "DateMatch":
        return cls()


@dataclass
class ExtractionResult:
    """
    Dates (and optionally a name) extracted from one OCR text.

    source records which path produced the dates:
      'regex' - deterministic grammar
      'llm'   - language model, possibly backfilled from regex
      'none'  - nothing found
    """
    production_iso: Optional[str] = None
    expiry_iso: Optional[str] = None
    best_before_iso: Optional[str] = None
    note: Optional[str] = None
    product_name: Optional[str] = None
    source: str = 'none'

    @property
    def has_dates(self) -> bool:
        return bool(self.production_iso or self.expiry_iso or self.best_before_iso)

    @classmethod
    def empty(cls) -> "ExtractionResult":
        return cls()

    @classmethod
    def from_date_match(cls, match: DateMatch) -> "ExtractionResult":
        """Regex results fill expiry and best-before with the same date."""
        if not match.matched:
            return cls.empty()
        return cls(
            expiry_iso=match.iso,
            best_before_iso=match.iso,
            note=match.note,
            source='regex',
        )

    def to_dict(self) -> Dict:
        return asdict(self)
