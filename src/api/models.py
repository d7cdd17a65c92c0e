"""
API Models - Request and Response schemas
Using Pydantic for automatic validation and documentation

Field names are camelCase because the mobile client reads them as-is.
"""

from pydantic import BaseModel, Field
from typing import Optional


# ─── Requests ─────────────────────────────────────────────────────────────────

class ExtractFromTextRequest(BaseModel):
    """OCR text produced elsewhere (e.g. on-device OCR)."""
    ocrText: Optional[str] = Field(None, description="Raw OCR text")


# ─── Date scan ────────────────────────────────────────────────────────────────

class ScanTiming(BaseModel):
    total: int  = Field(..., description="Whole request in milliseconds")
    vision: int = Field(..., description="OCR call in milliseconds")


class ScanDebug(BaseModel):
    ocrPreview: Optional[str] = Field(None, description="OCR text wrapped for display")


class ScanMeta(BaseModel):
    notes: Optional[str]  = Field(None, description="Assumptions made (e.g. 'assumed day=01 from year-month')")
    source: str           = Field("none", description="'regex' | 'llm' | 'none'")
    timingMs: Optional[ScanTiming] = None
    debug: Optional[ScanDebug] = None


class AnalyzeResponse(BaseModel):
    """Dates found on a label photo; all-null means 'enter manually'."""
    ok: bool = True
    productionDateISO: Optional[str] = Field(None, description="YYYY-MM-DD")
    expiryDateISO: Optional[str]     = Field(None, description="YYYY-MM-DD")
    bestBeforeDateISO: Optional[str] = Field(None, description="YYYY-MM-DD")
    meta: ScanMeta

    class Config:
        json_schema_extra = {
            "example": {
                "ok": True,
                "productionDateISO": None,
                "expiryDateISO": "2029-03-01",
                "bestBeforeDateISO": "2029-03-01",
                "meta": {
                    "notes": "assumed day=01 from year-month",
                    "source": "regex",
                    "timingMs": {"total": 912, "vision": 870},
                    "debug": {"ocrPreview": "Here's the transcribed text from the image:..."},
                },
            }
        }


class TextExtractionMeta(BaseModel):
    notes: Optional[str] = None
    source: str = "none"


class ExtractFromTextResponse(BaseModel):
    ok: bool = True
    productionDateISO: Optional[str] = None
    expiryDateISO: Optional[str]     = None
    bestBeforeDateISO: Optional[str] = None
    name: Optional[str]              = None
    meta: TextExtractionMeta


# ─── Name ─────────────────────────────────────────────────────────────────────

class NameResponse(BaseModel):
    ok: bool = True
    name: str = Field(..., description="Title-cased product name, at most three words")


# ─── Health & Error Models ────────────────────────────────────────────────────

class PingResponse(BaseModel):
    ok: bool = True
    time: str = Field(..., description="Server time, ISO 8601")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str  = Field("healthy",          description="Health status")
    service: str = Field("label-scan-api",   description="Service name")
    version: str = Field("1.0.0",            description="API version")


class ErrorResponse(BaseModel):
    """Error response."""
    ok: bool = False
    error: str = Field(..., description="Error message")
