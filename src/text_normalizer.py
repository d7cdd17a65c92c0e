"""
OCR Text Normalizer

Canonicalizes label OCR quirks before date matching:
1. Dash variants (en dash, em dash, horizontal bar) -> '-'
2. Bullets and interpuncts -> '.'
3. Pipe glyph -> '1'
4. 'O' -> '0' and 'l' -> '1' next to a digit
5. Whitespace runs collapsed, text trimmed
6. Space-separated Y M D / D M Y triples rewritten with hyphens

Each step is idempotent and the steps run in the order above, so
normalize(normalize(s)) == normalize(s).
"""

import re

from loguru import logger


_DASHES = re.compile(r'[\u2010-\u2015\u2212]')
_BULLETS = re.compile(r'[\u00b7\u2022\u2219]')
_O_NEAR_DIGIT = re.compile(r'O(?=\d)|(?<=\d)O')
_L_NEAR_DIGIT = re.compile(r'l(?=\d)|(?<=\d)l')
_MULTI_SPACE = re.compile(r'\s{2,}')

# Year always a 20xx token; month and day allow a missing zero pad
_SPACED_YMD = re.compile(r'\b(20\d{2})\s+(0?\d|1[0-2])\s+([0-3]?\d)\b')
_SPACED_DMY = re.compile(r'\b([0-3]?\d)\s+(0?\d|1[0-2])\s+(20\d{2})\b')


class OCRTextNormalizer:
    """
    Pattern-based OCR cleanup for label text.

    Corrections are context-guarded: letter/digit swaps only happen
    beside a digit so ordinary words ("Oil", "lot") are left alone.
    """

    def normalize(self, raw: str) -> str:
        """
        Normalize raw OCR text.

        Args:
            raw: OCR output, may be empty or None

        Returns:
            Normalized text ("" for empty input)
        """
        if not raw:
            return ''

        text = raw
        text = self._fix_dashes(text)
        text = self._fix_bullets(text)
        text = self._fix_pipes(text)
        text = self._fix_character_confusions(text)
        text = self._collapse_whitespace(text)
        text = self._hyphenate_spaced_dates(text)

        if text != raw:
            logger.debug(f"Normalized OCR text: {raw!r} → {text!r}")

        return text

    def _fix_dashes(self, text: str) -> str:
        return _DASHES.sub('-', text)

    def _fix_bullets(self, text: str) -> str:
        return _BULLETS.sub('.', text)

    def _fix_pipes(self, text: str) -> str:
        # OCR reads the digit 1 as a pipe in number columns
        return text.replace('|', '1')

    def _fix_character_confusions(self, text: str) -> str:
        """
        Digit-adjacent letter confusions.

        - O → 0 : "2O24" → "2024"
        - l → 1 : "2l" → "21"

        A single pass can miss runs like "OO1" where the first O only
        becomes digit-adjacent after the second is fixed, so repeat until
        stable.
        """
        while True:
            fixed = _O_NEAR_DIGIT.sub('0', text)
            fixed = _L_NEAR_DIGIT.sub('1', fixed)
            if fixed == text:
                return fixed
            text = fixed

    def _collapse_whitespace(self, text: str) -> str:
        return _MULTI_SPACE.sub(' ', text).strip()

    def _hyphenate_spaced_dates(self, text: str) -> str:
        text = _SPACED_YMD.sub(r'\1-\2-\3', text)
        text = _SPACED_DMY.sub(r'\1-\2-\3', text)
        return text


_default_normalizer = OCRTextNormalizer()


def normalize_ocr_text(raw: str) -> str:
    """Normalize OCR text with the shared, stateless normalizer"""
    return _default_normalizer.normalize(raw)
