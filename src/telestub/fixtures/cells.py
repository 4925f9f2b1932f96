"""Cell text handling: value tokens and composite-key rendering."""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from telestub.core.types import FieldValue

KEY_DELIMITER = "\t"
MISSING_KEY_VALUE = "null"
COMMENT_PREFIX = "//"

_SPACE_TOKEN = re.compile(r"SPACE\((\d+)\)")
_NUMBER_TOKEN = re.compile(r"NUMBER\(([+-]?\d+(?:\.\d+)?)\)")
_BINARY_TOKEN = re.compile(r"BINARY\(0[xX]((?:[0-9a-fA-F]{2})+)\)")


def cell_text(cell: Optional[str]) -> str:
    """Text of a cell, empty string for an empty cell."""
    return "" if cell is None else cell


def is_blank(cell: Optional[str]) -> bool:
    return not cell_text(cell).strip()


def is_comment(cell: Optional[str]) -> bool:
    return cell_text(cell).strip().startswith(COMMENT_PREFIX)


def coerce_cell(cell: Optional[str]) -> FieldValue:
    """Convert authored cell text into a field value.

    ``SPACE(n)`` -> n spaces, ``NUMBER(d)`` -> Decimal, ``BINARY(0x..)`` ->
    bytes. Any other text is returned as authored; an empty cell is None.
    """
    if cell is None:
        return None
    token = cell.strip()

    match = _SPACE_TOKEN.fullmatch(token)
    if match:
        return " " * int(match.group(1))

    match = _NUMBER_TOKEN.fullmatch(token)
    if match:
        return Decimal(match.group(1))

    match = _BINARY_TOKEN.fullmatch(token)
    if match:
        return bytes.fromhex(match.group(1))

    return cell


def format_binary(data: bytes) -> str:
    """Render bytes the way a fixture author writes them."""
    return f"BINARY(0x{data.hex().upper()})"


def has_value(value: Any) -> bool:
    """Whether a fixture value should overwrite a request value."""
    if isinstance(value, str):
        return value != ""
    return value is not None


def render_key_value(value: Any) -> str:
    if value is None:
        return MISSING_KEY_VALUE
    if isinstance(value, (bytes, bytearray)):
        return format_binary(bytes(value))
    return str(value)


def composite_key(key_fields: Iterable[str], fields: Mapping[str, Any]) -> str:
    """Join the rendered values of ``key_fields`` taken from ``fields``."""
    return KEY_DELIMITER.join(render_key_value(fields.get(name)) for name in key_fields)
