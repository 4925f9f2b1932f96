"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
def ready(request: Request) -> dict[str, str]:
    """Ready once the fixtures load without a configuration error."""
    request.app.state.stub.refresh()
    return {"status": "ready"}
