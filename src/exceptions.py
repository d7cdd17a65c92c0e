"""
Provider exception hierarchy

Only OCR failures are meant to reach the route layer. Everything raised by
the language-model client is caught inside the extraction orchestrator and
degrades to the regex result.
"""

from typing import Optional


class ScanError(Exception):
    """Base exception for label scanning errors."""


class ProviderError(ScanError):
    """An external provider (OCR or LLM) failed."""

    def __init__(self, message: str, provider: Optional[str] = None):
        self.message = message
        self.provider = provider
        super().__init__(message)


class ProviderNotConfiguredError(ProviderError):
    """Provider credentials are missing."""


class OCRProviderError(ProviderError):
    """OCR request failed: HTTP error, transport error, or timeout."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message, provider="vision")

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"Vision API HTTP {self.status_code}: {self.message}"
        return self.message


class LLMProviderError(ProviderError):
    """Language-model request failed."""

    def __init__(self, message: str):
        super().__init__(message, provider="openai")


class LLMResponseError(LLMProviderError):
    """Language-model answer was not a JSON object."""
