"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from physiofix import __version__
from physiofix.config import get_settings
from physiofix.api import api_router

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Starting {settings.app_name}")
    yield
    logger.info(f"Shutting down {settings.app_name}")


app = FastAPI(
    title=settings.app_name,
    description="""
    PhysioFix Motion Core API

    Real-time exercise analysis from per-frame pose landmarks: rep counting,
    form feedback, per-user calibration and movement safety alerts.

    ## Key Features

    - **Rep Counting**: Hysteresis state machine with debounce per exercise
    - **Form Feedback**: Exercise-specific cues (depth, knee valgus, back angle)
    - **Calibration**: Learns resting angle and range of motion per user
    - **Safety**: Detects excessive speed, knee collapse and shaking

    ## Sessions

    Open a session, stream 33-landmark frames to it, close it to persist
    the calibration.
    """,
    version=__version__,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": __version__
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "docs": "/docs",
        "health": "/health"
    }
