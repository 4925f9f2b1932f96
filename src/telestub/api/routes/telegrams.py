"""Telegram endpoint: the simulated remote service."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Request

from telestub.fixtures.cells import coerce_cell, format_binary

router = APIRouter(tags=["telegrams"])


def decode_request(body: dict[str, Any]) -> dict[str, Any]:
    """Accept fixture tokens such as ``NUMBER(3)`` in JSON string values."""
    return {name: coerce_cell(value) if isinstance(value, str) else value for name, value in body.items()}


def encode_response(response: dict[str, Any]) -> dict[str, Any]:
    encoded: dict[str, Any] = {}
    for name, value in response.items():
        if isinstance(value, (bytes, bytearray)):
            encoded[name] = format_binary(bytes(value))
        elif isinstance(value, Decimal):
            encoded[name] = str(value)
        else:
            encoded[name] = value
    return encoded


@router.post("/telegrams/{transaction_id}")
def send_telegram(transaction_id: str, body: dict[str, Any], request: Request) -> dict[str, Any]:
    """Resolve a request against the loaded fixtures."""
    stub = request.app.state.stub
    return encode_response(stub.resolve(transaction_id, decode_request(body)))
