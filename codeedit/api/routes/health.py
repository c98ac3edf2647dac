"""Health route."""

from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health_check() -> dict:
    """Liveness check -- always returns ok if the server is running."""
    return {"status": "ok"}
