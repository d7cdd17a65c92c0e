"""
Google Vision client

Two calls are used:
  - TEXT_DETECTION for the raw label text fed to date extraction
  - LABEL_DETECTION + OBJECT_LOCALIZATION for product naming

Unlike the LLM, OCR failures are NOT degraded: without text there is
nothing to extract, so errors are raised to the route layer.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import httpx
from loguru import logger

from exceptions import OCRProviderError, ProviderNotConfiguredError


VISION_ENDPOINT = "https://vision.googleapis.com/v1/images:annotate"
DEFAULT_TIMEOUT_SECONDS = 8.0

TEXT_FEATURES = [{"type": "TEXT_DETECTION", "maxResults": 1}]
TEXT_FIELDS = "responses(fullTextAnnotation,textAnnotations)"

LABEL_FEATURES = [
    {"type": "LABEL_DETECTION", "maxResults": 10},
    {"type": "OBJECT_LOCALIZATION", "maxResults": 10},
]
LABEL_FIELDS = "responses(labelAnnotations(description,score),localizedObjectAnnotations(name,score))"


@dataclass
class OCRText:
    """Raw text for one image."""
    raw_text: str


def collect_ocr_text(response: Dict) -> str:
    """
    Join full-text annotation and the top-level text annotation.

    Args:
        response: One entry of the Vision `responses` array

    Returns:
        Newline-joined, trimmed text ("" when the image had no text)
    """
    blocks = []
    full_text = (response or {}).get('fullTextAnnotation') or {}
    if full_text.get('text'):
        blocks.append(full_text['text'])

    annotations = (response or {}).get('textAnnotations')
    if isinstance(annotations, list) and annotations and annotations[0].get('description'):
        blocks.append(annotations[0]['description'])

    return '\n'.join(blocks).strip()


class VisionOCRClient:
    """Async Google Vision `images:annotate` client over httpx."""

    def __init__(
        self,
        api_key: str,
        endpoint: str = VISION_ENDPOINT,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @classmethod
    def from_config(cls, config: Dict) -> "VisionOCRClient":
        ocr_config = config.get('ocr', {})
        return cls(
            api_key=ocr_config.get('api_key', ''),
            endpoint=ocr_config.get('endpoint') or VISION_ENDPOINT,
            timeout_seconds=float(ocr_config.get('timeout_seconds') or DEFAULT_TIMEOUT_SECONDS),
        )

    async def annotate(self, image_b64: str, features: List[Dict], fields: Optional[str] = None) -> Dict:
        """
        Run one annotate request for a single image.

        Returns:
            The first entry of `responses` (empty dict if absent)

        Raises:
            ProviderNotConfiguredError: No API key
            OCRProviderError: Non-2xx status, timeout, or transport failure
        """
        if not self.api_key:
            raise ProviderNotConfiguredError("GOOGLE_VISION_API_KEY is not configured", provider="vision")

        params = {"key": self.api_key}
        if fields:
            params["$fields"] = fields
        body = {"requests": [{"image": {"content": image_b64}, "features": features}]}

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.post(self.endpoint, params=params, json=body)
        except httpx.TimeoutException as e:
            raise OCRProviderError(f"Vision API timed out after {self.timeout_seconds}s") from e
        except httpx.HTTPError as e:
            raise OCRProviderError(f"Vision API request failed: {e}") from e

        if response.status_code >= 400:
            raise OCRProviderError(response.text, status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise OCRProviderError(f"Vision API returned invalid JSON: {e}") from e

        responses = payload.get('responses') or [{}]
        return responses[0] or {}

    async def ocr(self, image_b64: str) -> OCRText:
        """Text detection only."""
        result = await self.annotate(image_b64, TEXT_FEATURES, TEXT_FIELDS)
        text = collect_ocr_text(result)
        logger.info(f"[SCAN] OCR chars: {len(text)}")
        return OCRText(raw_text=text)

    async def detect_labels(self, image_b64: str) -> Tuple[List[Dict], List[Dict]]:
        """Label and object annotations for naming."""
        result = await self.annotate(image_b64, LABEL_FEATURES, LABEL_FIELDS)
        labels = result.get('labelAnnotations') or []
        objects = result.get('localizedObjectAnnotations') or []
        logger.debug(f"[NAME] {len(labels)} labels, {len(objects)} objects")
        return labels, objects
