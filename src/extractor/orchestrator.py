"""
Date Extraction Orchestrator

Sequencing per call:

  A. Regex      - deterministic grammar over normalized OCR text.
                  Any date found → return; the LLM is never called.
  B. LLM        - only on a regex miss, only if a client is configured,
                  bounded by a hard deadline. Timeout, provider error and
                  malformed output all count as an empty answer.
  C. Backfill   - every date field (and the note) the model left empty is
                  filled from a regex pass over the same text.

Nothing here raises to the caller: the worst case is an all-null
ExtractionResult, which means "ask the user".
"""

import asyncio
from typing import Callable, Dict, Optional, Protocol

from loguru import logger

from exceptions import ProviderError
from extractor.date_grammar import extract_date
from extractor.iso_date import parse_iso
from extractor.models import ExtractionResult


DEFAULT_LLM_TIMEOUT_MS = 3000

SYSTEM_PROMPT = """You extract product-related dates from OCR text.
Return strictly JSON with keys:
- product_name (string|null)
- production_date (YYYY-MM-DD|null)
- expiry_date (YYYY-MM-DD|null)
- best_before_date (YYYY-MM-DD|null)
- notes (string|null)
If the text only has a year-month (e.g., 2029/03 or Feb 2029), assume the first day of that month (YYYY-MM-01) and mention that in "notes".
If the text only has a year (e.g., 2029), assume 2029-01-01 and mention that in "notes"."""

_DATE_KEYS = {
    'production_date': 'production_iso',
    'expiry_date': 'expiry_iso',
    'best_before_date': 'best_before_iso',
}

Observer = Callable[[str, Dict], None]


class JSONCompletionClient(Protocol):
    async def complete_json(self, system_prompt: str, user_text: str, timeout_ms: int) -> Dict:
        ...


def log_observer(event: str, fields: Dict):
    """Default observer: scan events go to the log"""
    if event.startswith('llm.') and event != 'llm.success':
        logger.warning(f"[Extraction] {event} {fields}")
    else:
        logger.info(f"[Extraction] {event} {fields}")


def sanitize_llm_payload(payload) -> Dict[str, Optional[str]]:
    """
    Keep only well-formed fields from a model answer.

    Date fields survive only as real YYYY-MM-DD dates; notes and
    product_name only as non-empty strings. Unknown keys are dropped.
    """
    if not isinstance(payload, dict):
        return {}

    clean: Dict[str, Optional[str]] = {}
    for key in _DATE_KEYS:
        value = payload.get(key)
        clean[key] = value if parse_iso(value) else None

    for key in ('notes', 'product_name'):
        value = payload.get(key)
        clean[key] = value.strip() if isinstance(value, str) and value.strip() else None

    return clean


class DateExtractionOrchestrator:
    """
    Regex-first date extraction with a time-boxed LLM fallback.

    Args:
        llm_client: Object with an async complete_json(); None disables the LLM
        observer: Callable receiving (event, fields) for each pipeline step
        system_prompt: Prompt sent to the model
    """

    def __init__(
        self,
        llm_client: Optional[JSONCompletionClient] = None,
        observer: Optional[Observer] = None,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        self.llm_client = llm_client
        self.observer = observer or log_observer
        self.system_prompt = system_prompt

    @property
    def llm_enabled(self) -> bool:
        return self.llm_client is not None

    def _emit(self, event: str, **fields):
        try:
            self.observer(event, fields)
        except Exception as e:
            logger.warning(f"Observer failed on {event}: {e}")

    # ── State A ───────────────────────────────────────────────────────────────

    def extract_dates_from_text(self, ocr_text: str) -> ExtractionResult:
        """
        Regex-only extraction. Synchronous and always terminates.

        Returns:
            ExtractionResult with expiry == best-before, production None,
            or an all-null result when nothing matched
        """
        if not ocr_text or not ocr_text.strip():
            return ExtractionResult.empty()
        return ExtractionResult.from_date_match(extract_date(ocr_text))

    # ── State B + C ───────────────────────────────────────────────────────────

    async def _ask_llm(self, ocr_text: str, timeout_ms: int) -> Dict[str, Optional[str]]:
        """LLM answer, or {} on unavailability, timeout, error, or bad output."""
        if not self.llm_enabled:
            self._emit('llm.skipped', reason='not configured')
            return {}

        try:
            payload = await asyncio.wait_for(
                self.llm_client.complete_json(self.system_prompt, ocr_text or '', timeout_ms),
                timeout=timeout_ms / 1000,
            )
        except asyncio.TimeoutError:
            self._emit('llm.timeout', timeout_ms=timeout_ms)
            return {}
        except ProviderError as e:
            self._emit('llm.error', error=str(e))
            return {}
        except Exception as e:
            # Third-party client bugs must not break the scan
            self._emit('llm.error', error=f"{type(e).__name__}: {e}")
            return {}

        clean = sanitize_llm_payload(payload)
        self._emit('llm.success', fields=sorted(k for k, v in clean.items() if v))
        return clean

    async def extract_with_llm(self, ocr_text: str, timeout_ms: int = DEFAULT_LLM_TIMEOUT_MS) -> ExtractionResult:
        """
        LLM extraction with per-field regex backfill.

        The model's fields win wherever it gave one; every field it left
        empty is filled from the regex result for the same text.
        """
        answer = await self._ask_llm(ocr_text, timeout_ms)
        regex = self.extract_dates_from_text(ocr_text)

        llm_dates = {attr: answer.get(key) for key, attr in _DATE_KEYS.items()}
        merged = ExtractionResult(
            production_iso=llm_dates['production_iso'] or regex.production_iso,
            expiry_iso=llm_dates['expiry_iso'] or regex.expiry_iso,
            best_before_iso=llm_dates['best_before_iso'] or regex.best_before_iso,
            note=answer.get('notes') or regex.note,
            product_name=answer.get('product_name'),
        )

        if any(llm_dates.values()):
            merged.source = 'llm'
        elif merged.has_dates:
            merged.source = 'regex'
        return merged

    async def extract_dates_with_fallback(
        self,
        ocr_text: str,
        timeout_ms: int = DEFAULT_LLM_TIMEOUT_MS,
    ) -> ExtractionResult:
        """
        Full pipeline: regex, then (only on a miss) LLM + backfill.

        Args:
            ocr_text: Raw OCR text
            timeout_ms: Hard cap on the LLM call

        Returns:
            ExtractionResult, all-null when nothing could be found
        """
        result = self.extract_dates_from_text(ocr_text)
        if result.has_dates:
            self._emit('regex.hit', iso=result.expiry_iso, note=result.note)
            return result

        self._emit('regex.miss', chars=len(ocr_text or ''))
        if not ocr_text or not ocr_text.strip():
            return result

        return await self.extract_with_llm(ocr_text, timeout_ms)
