"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/settings", status_code=status.HTTP_200_OK)
def health_settings() -> dict:
    """Solver defaults currently in effect."""
    return {
        "max_iterations": settings.max_iterations,
        "time_limit_seconds": settings.time_limit_seconds,
        "acceptance": settings.acceptance,
        "operators": list(settings.operator_sequence),
    }
