"""
API Package
Contains FastAPI routes and models
"""

from api.routes import router, get_scanner
from api.models import (
    AnalyzeResponse,
    ExtractFromTextResponse,
    NameResponse,
    HealthResponse,
    ErrorResponse
)

__all__ = [
    'router',
    'get_scanner',
    'AnalyzeResponse',
    'ExtractFromTextResponse',
    'NameResponse',
    'HealthResponse',
    'ErrorResponse'
]
