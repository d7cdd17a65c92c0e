"""
Tests for OCR text normalization
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from text_normalizer import OCRTextNormalizer, normalize_ocr_text


@pytest.fixture
def normalizer():
    return OCRTextNormalizer()


def test_empty_input_returns_empty_string(normalizer):
    assert normalizer.normalize("") == ""
    assert normalizer.normalize(None) == ""
    assert normalize_ocr_text("   ") == ""


def test_dash_variants_become_ascii(normalizer):
    assert normalizer.normalize("2026–03—15") == "2026-03-15"
    assert normalizer.normalize("2026―03‐15") == "2026-03-15"


def test_bullets_become_dots(normalizer):
    assert normalizer.normalize("15·03•2026") == "15.03.2026"


def test_pipe_becomes_one(normalizer):
    assert normalizer.normalize("2|/03/2026") == "21/03/2026"


def test_letter_o_next_to_digit(normalizer):
    assert normalizer.normalize("2O24-O1-15") == "2024-01-15"


def test_lowercase_l_next_to_digit(normalizer):
    assert normalizer.normalize("l5/03/2026") == "15/03/2026"


def test_words_without_digits_are_untouched(normalizer):
    text = "Olive Oil, low sodium"
    assert normalizer.normalize(text) == text


def test_consecutive_confusions_fixed(normalizer):
    assert normalizer.normalize("2OO5") == "2005"


def test_whitespace_collapsed_and_trimmed(normalizer):
    assert normalizer.normalize("  EXP   2026-03-15 \n\n ") == "EXP 2026-03-15"


def test_spaced_ymd_triple_hyphenated(normalizer):
    assert normalizer.normalize("BB 2026 03 15") == "BB 2026-03-15"


def test_spaced_dmy_triple_hyphenated(normalizer):
    assert normalizer.normalize("BB 15 3 2026") == "BB 15-3-2026"


@pytest.mark.parametrize("raw", [
    "2O24-O1-15",
    "Best before: 15  03  2026 | lot l23",
    "EXP– 2029/03 • batch 2024",
    "Olive Oil 2OOl",
    "1 2 2024 5 6",
    "Ingredients: water, salt",
    "",
])
def test_normalization_is_idempotent(raw):
    once = normalize_ocr_text(raw)
    assert normalize_ocr_text(once) == once


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
