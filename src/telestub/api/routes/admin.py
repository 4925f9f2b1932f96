"""Admin endpoints for fixture locations, caches and captured calls."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from telestub.api.routes.telegrams import encode_response

router = APIRouter(tags=["admin"])


class SourcesUpdate(BaseModel):
    """New fixture locations. Omitted fields keep their current value."""

    default_book_path: Optional[str] = None
    default_sheet_name: Optional[str] = None
    stub_book_path: Optional[str] = None
    stub_sheet_name: Optional[str] = None


@router.get("/sources")
def get_sources(request: Request) -> dict[str, Any]:
    return request.app.state.stub.describe()


@router.put("/sources")
def put_sources(update: SourcesUpdate, request: Request) -> dict[str, Any]:
    """Change fixture locations; cached data is discarded."""
    stub = request.app.state.stub
    stub.configure(**update.model_dump())
    return stub.describe()


@router.post("/reset")
def reset(request: Request) -> dict[str, str]:
    """Drop cached fixtures and captured calls."""
    request.app.state.stub.reset()
    return {"status": "reset"}


@router.get("/calls/{transaction_id}")
def get_calls(transaction_id: str, request: Request) -> dict[str, Any]:
    calls = request.app.state.stub.calls(transaction_id)
    return {"transaction_id": transaction_id, "calls": [encode_response(call) for call in calls]}
