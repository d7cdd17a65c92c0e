"""
Providers Package
External OCR (Google Vision) and language-model (OpenAI) clients
"""

from providers.vision_ocr import VisionOCRClient, OCRText, collect_ocr_text
from providers.llm_client import OpenAIJSONClient, build_llm_client

__all__ = [
    'VisionOCRClient',
    'OCRText',
    'collect_ocr_text',
    'OpenAIJSONClient',
    'build_llm_client',
]
