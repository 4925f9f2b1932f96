"""Recording of the requests a test sent, for later assertions."""

from __future__ import annotations

import threading
from typing import Any, Mapping

from telestub.core.types import FieldMap, TransactionId
from telestub.fixtures.cells import format_binary


def shape_request(request: Mapping[str, Any]) -> FieldMap:
    """Sort fields by name and render bytes as ``BINARY(0x..)`` text.

    The rendered form compares equal to what a fixture author writes, so
    expected requests can be kept in the same workbook as the responses.
    """
    shaped: FieldMap = {}
    for name in sorted(request):
        value = request[name]
        shaped[name] = format_binary(bytes(value)) if isinstance(value, (bytes, bytearray)) else value
    return shaped


class CallRecorder:
    """Per-telegram list of shaped requests in call order."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._calls: dict[TransactionId, list[FieldMap]] = {}

    def record(self, transaction_id: TransactionId, request: Mapping[str, Any]) -> None:
        shaped = shape_request(request)
        with self._lock:
            self._calls.setdefault(transaction_id, []).append(shaped)

    def calls(self, transaction_id: TransactionId) -> list[FieldMap]:
        with self._lock:
            return list(self._calls.get(transaction_id, []))

    def clear(self) -> None:
        with self._lock:
            self._calls.clear()
