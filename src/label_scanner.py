"""
Label Scanning Pipeline
Combines Vision OCR and date extraction into one request-level workflow
"""

import time
from typing import Dict, Optional

from loguru import logger

from extractor import DateExtractionOrchestrator, ExtractionResult, classify_product_name
from providers import VisionOCRClient, build_llm_client
from settings import load_config, warn_missing_credentials
from utils import elapsed_ms, format_processing_time, ocr_preview, save_upload


class LabelScanner:
    """
    End-to-end label scanning pipeline

    Workflow (dates):
    1. Optionally keep the uploaded image
    2. OCR the image (failure propagates)
    3. Regex extraction, LLM fallback only on a miss
    4. Attach timings and an OCR preview

    Holds only read-only configuration and clients, so one instance is
    shared by all requests.
    """

    def __init__(
        self,
        config: Optional[Dict] = None,
        ocr_client: Optional[VisionOCRClient] = None,
        orchestrator: Optional[DateExtractionOrchestrator] = None,
    ):
        """Initialize all processing components"""
        logger.info("Initializing Label Scanner")

        self.config = config if config is not None else load_config()
        warn_missing_credentials(self.config)

        self.ocr_client = ocr_client or VisionOCRClient.from_config(self.config)
        self.orchestrator = orchestrator or DateExtractionOrchestrator(
            llm_client=build_llm_client(self.config)
        )

        self.llm_timeout_ms = int(self.config['llm'].get('timeout_ms') or 3000)
        self.keep_uploads = bool(self.config['server'].get('keep_uploads'))
        self.uploads_dir = self.config['server'].get('uploads_dir') or 'data/uploads'

        logger.success(
            f"Label Scanner ready (llm={'on' if self.orchestrator.llm_enabled else 'off'}, "
            f"timeout={self.llm_timeout_ms}ms)"
        )

    def _keep(self, image_b64: str):
        if self.keep_uploads:
            save_upload(image_b64, self.uploads_dir)

    async def scan_dates(self, image_b64: str) -> Dict:
        """
        OCR an image and extract its dates.

        Args:
            image_b64: Base64 image content

        Returns:
            {'result': ExtractionResult, 'ocr_text': str,
             'timing_ms': {'total': int, 'vision': int}}

        Raises:
            ProviderError: OCR was unavailable or failed
        """
        start = time.perf_counter()
        self._keep(image_b64)

        ocr = await self.ocr_client.ocr(image_b64)
        vision_ms = elapsed_ms(start)

        result = await self.orchestrator.extract_dates_with_fallback(ocr.raw_text, self.llm_timeout_ms)
        total_ms = elapsed_ms(start)

        logger.info(
            f"[SCAN] expiry={result.expiry_iso} best_before={result.best_before_iso} "
            f"production={result.production_iso} source={result.source} ({format_processing_time(total_ms)})"
        )

        return {
            'result': result,
            'ocr_text': ocr.raw_text,
            'ocr_preview': ocr_preview(ocr.raw_text),
            'timing_ms': {'total': total_ms, 'vision': vision_ms},
        }

    async def scan_name(self, image_b64: str) -> str:
        """Label/object detection, then name cleanup."""
        self._keep(image_b64)
        labels, objects = await self.ocr_client.detect_labels(image_b64)
        return classify_product_name(labels, objects)

    async def extract_from_text(self, ocr_text: str) -> ExtractionResult:
        """Text-only extraction: LLM first, regex backfill."""
        return await self.orchestrator.extract_with_llm(ocr_text, self.llm_timeout_ms)
