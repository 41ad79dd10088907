"""Health check and server version."""

from fastapi import APIRouter

from filedeck import __version__
from filedeck.schemas.system import HealthResponse, VersionResponse
from filedeck.services import get_file_manager

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Lightweight connectivity check."""
    return HealthResponse(version=__version__)


@router.get("/ping")
async def ping():
    """Ultra-lightweight ping."""
    return {"status": "ok"}


@router.get("/version", response_model=VersionResponse)
async def version():
    """Server build and storage directories, as reported to the widget."""
    return get_file_manager().version()
