"""Parsed fixture sheet model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ParsedSheet(BaseModel):
    """Key schema fragment and records read from one fixture sheet.

    ``records`` keeps rows in authoring order as ``(composite_key, record)``
    pairs so that callers decide how duplicates collapse.
    """

    key_lists: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    records: dict[str, list[tuple[str, dict[str, Any]]]] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def record_count(self, transaction_id: str) -> int:
        return len(self.records.get(transaction_id, []))
