"""
Label Date Scan API - Main Application
FastAPI application for expiry / best-before date extraction from label photos

Run with: python main.py
Access API docs at: http://localhost:4000/docs
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from api.routes import router
from api.models import HealthResponse
from settings import load_config, allowed_origins
from utils import setup_logging

config = load_config()
setup_logging(config['logging']['level'], config['logging'].get('file'))

# Create FastAPI app
app = FastAPI(
    title="Label Date Scan API",
    description="Extract production, expiry and best-before dates from product label photos",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
origins = allowed_origins(config)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials='*' not in origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router, prefix="/api")


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": "Label Date Scan API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    return HealthResponse()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=int(config['server']['port']), reload=True)
