"""
Utility functions for label scanning
"""

import base64
import binascii
import os
import sys
import time
import uuid
from pathlib import Path
from typing import Optional

from loguru import logger


MIN_BASE64_LENGTH = 50


def ensure_directory(dir_path: str) -> str:
    """
    Ensure directory exists, create if it doesn't

    Args:
        dir_path: Directory path

    Returns:
        Absolute path to directory
    """
    path = Path(dir_path)
    path.mkdir(parents=True, exist_ok=True)
    return str(path.absolute())


def looks_like_base64_image(value) -> bool:
    """Cheap shape check used before sending a payload to OCR"""
    return isinstance(value, str) and len(value) >= MIN_BASE64_LENGTH


def save_upload(image_b64: str, uploads_dir: str) -> Path:
    """
    Decode a base64 image and write it under uploads_dir

    Args:
        image_b64: Base64 image content
        uploads_dir: Target directory (created if missing)

    Returns:
        Path of the written file
    """
    try:
        data = base64.b64decode(image_b64)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 image: {e}") from e

    ensure_directory(uploads_dir)
    file_path = Path(uploads_dir) / f"upload_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.jpg"
    file_path.write_bytes(data)

    logger.info(f"[SCAN] Saved upload: {file_path} ({len(data) / 1024:.1f} KB)")
    return file_path


def elapsed_ms(start: float) -> int:
    """Milliseconds since a time.perf_counter() reading"""
    return int((time.perf_counter() - start) * 1000)


def format_processing_time(milliseconds: int) -> str:
    """
    Format processing time in human-readable format

    Args:
        milliseconds: Time in milliseconds

    Returns:
        Formatted string (e.g., "1.23s", "456ms")
    """
    if milliseconds < 1000:
        return f"{milliseconds}ms"
    else:
        seconds = milliseconds / 1000
        return f"{seconds:.2f}s"


def ocr_preview(ocr_text: str) -> Optional[str]:
    """Debug preview of the OCR text returned alongside scan results"""
    if not ocr_text:
        return None
    return f"Here's the transcribed text from the image:\n\n```\n{ocr_text}\n```"


# Logging setup helper
def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Setup logging configuration

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path to a rotating log file
    """
    # Remove default handler
    logger.remove()

    # Add console handler
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=level
    )

    # Add file handler
    if log_file:
        ensure_directory(os.path.dirname(log_file) or ".")
        logger.add(
            log_file,
            rotation="10 MB",
            retention="30 days",
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
        )

    logger.info("Logging initialized")
