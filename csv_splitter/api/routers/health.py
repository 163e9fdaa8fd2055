"""
Health check API endpoints.

Routes: GET /health, GET /health/storage

Dependencies: csv_splitter.configs
System role: Health check HTTP API
"""

import os

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from csv_splitter.api.deps.dependencies import get_settings_dependency
from csv_splitter.configs import Settings


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/storage", response_model=HealthResponse)
async def health_check_storage(
    settings: Settings = Depends(get_settings_dependency),
) -> HealthResponse:
    """Chunk storage health check: the chunks directory must be writable."""
    chunks_dir = settings.splitter.chunks_dir
    try:
        chunks_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise HTTPException(status_code=503, detail=f"Chunk storage unavailable: {e}")
    if not os.access(chunks_dir, os.W_OK):
        raise HTTPException(status_code=503, detail="Chunk storage is not writable")
    return HealthResponse(status="healthy", message="Chunk storage accessible")
