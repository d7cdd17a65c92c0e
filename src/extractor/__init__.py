"""
Extractor package - deterministic date grammar plus LLM-backed orchestration.

Usage
-----
from extractor import DateExtractionOrchestrator
orchestrator = DateExtractionOrchestrator(llm_client=None)
result = orchestrator.extract_dates_from_text("EXP 2029/03")
# result.expiry_iso == "2029-03-01"
"""

from extractor.date_grammar import DATE_RULES, DateRule, extract_date
from extractor.iso_date import to_iso
from extractor.models import DateMatch, ExtractionResult
from extractor.name_classifier import classify_product_name
from extractor.orchestrator import DateExtractionOrchestrator

__all__ = [
    "DATE_RULES",
    "DateRule",
    "extract_date",
    "to_iso",
    "DateMatch",
    "ExtractionResult",
    "classify_product_name",
    "DateExtractionOrchestrator",
]
