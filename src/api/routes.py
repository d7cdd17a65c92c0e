"""
API Routes - All API endpoints
"""

import base64
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from api.models import (
    AnalyzeResponse,
    ErrorResponse,
    ExtractFromTextRequest,
    ExtractFromTextResponse,
    NameResponse,
    PingResponse,
    ScanDebug,
    ScanMeta,
    ScanTiming,
    TextExtractionMeta,
)
from exceptions import ScanError
from label_scanner import LabelScanner
from utils import looks_like_base64_image


# Create router
router = APIRouter()

_scanner: Optional[LabelScanner] = None


def get_scanner() -> LabelScanner:
    """Shared scanner, created on first use"""
    global _scanner
    if _scanner is None:
        _scanner = LabelScanner()
    return _scanner


# ==================== UTILITY FUNCTIONS ====================

def error_response(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


async def image_base64_from_request(request: Request) -> str:
    """
    Accept either multipart/form-data (field `image`) or JSON {imageBase64}.

    Returns:
        Base64 image content, "" when nothing usable was sent
    """
    content_type = request.headers.get('content-type', '')

    if content_type.startswith('multipart/form-data'):
        form = await request.form()
        upload = form.get('image')
        if isinstance(upload, UploadFile):
            data = await upload.read()
            return base64.b64encode(data).decode('ascii') if data else ''
        value = form.get('imageBase64')
        return value if looks_like_base64_image(value) else ''

    try:
        body = await request.json()
    except ValueError:
        return ''
    value = body.get('imageBase64') if isinstance(body, dict) else None
    return value if looks_like_base64_image(value) else ''


async def ocr_text_from_request(request: Request) -> str:
    """JSON {ocrText}; "" for a missing, malformed or non-object body"""
    try:
        body = await request.json()
    except ValueError:
        return ''
    if not isinstance(body, dict):
        return ''
    try:
        payload = ExtractFromTextRequest.model_validate(body)
    except ValidationError:
        return ''
    return (payload.ocrText or '').strip()


# ==================== API ENDPOINTS ====================

@router.get("/ping", response_model=PingResponse, tags=["Health"])
async def ping():
    return PingResponse(time=datetime.now(timezone.utc).isoformat())


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    responses={400: {"model": ErrorResponse}},
    tags=["Scan"],
)
async def analyze(request: Request, scanner: LabelScanner = Depends(get_scanner)):
    """
    **Extract dates from a label photo**

    Accepts multipart `image` or JSON `{"imageBase64": "..."}`.

    Pipeline: Vision OCR (text only) → regex → LLM fallback (time-boxed).

    **Example:**
    ```bash
    curl -X POST http://localhost:4000/api/analyze -F "image=@label.jpg"
    ```
    """
    image_b64 = await image_base64_from_request(request)
    if not image_b64:
        return error_response("image required")

    try:
        scan = await scanner.scan_dates(image_b64)
    except (ScanError, ValueError) as e:
        logger.error(f"[SCAN] ERROR: {e}")
        return error_response(str(e))

    result = scan['result']
    return AnalyzeResponse(
        productionDateISO=result.production_iso,
        expiryDateISO=result.expiry_iso,
        bestBeforeDateISO=result.best_before_iso,
        meta=ScanMeta(
            notes=result.note,
            source=result.source,
            timingMs=ScanTiming(**scan['timing_ms']),
            debug=ScanDebug(ocrPreview=scan['ocr_preview']),
        ),
    )


@router.post(
    "/analyze-name",
    response_model=NameResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    tags=["Scan"],
)
async def analyze_name(request: Request, scanner: LabelScanner = Depends(get_scanner)):
    """
    **Suggest a product name from a photo**

    Label + object detection, generic terms skipped, max three words.
    """
    image_b64 = await image_base64_from_request(request)
    if not image_b64:
        return error_response("image required")

    try:
        name = await scanner.scan_name(image_b64)
    except (ScanError, ValueError) as e:
        logger.error(f"[NAME] ERROR: {e}")
        return error_response(str(e), status_code=404)

    return NameResponse(name=name)


@router.post(
    "/extract-from-text",
    response_model=ExtractFromTextResponse,
    responses={400: {"model": ErrorResponse}},
    tags=["Scan"],
)
async def extract_from_text(request: Request, scanner: LabelScanner = Depends(get_scanner)):
    """
    **Extract dates from OCR text already on the client**

    LLM first (time-boxed), regex backfill for anything it missed.
    """
    ocr_text = await ocr_text_from_request(request)
    if not ocr_text:
        return error_response("ocrText required")

    result = await scanner.extract_from_text(ocr_text)
    return ExtractFromTextResponse(
        productionDateISO=result.production_iso,
        expiryDateISO=result.expiry_iso or result.best_before_iso,
        bestBeforeDateISO=result.best_before_iso,
        name=(result.product_name or '').strip() or None,
        meta=TextExtractionMeta(notes=result.note, source=result.source),
    )
