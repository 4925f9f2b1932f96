"""Fixture sheet parser.

A fixture sheet holds one ``LIST_MAP=socketResponseKey`` table declaring the
key fields of each transaction id, followed by ``LIST_MAP=<id>`` blocks. Each
block has a header row of field names and one data row per canned response::

    LIST_MAP=socketResponseKey
    T1      ACCOUNT   BRANCH
    T2      ACCOUNT

    LIST_MAP=T1
    ACCOUNT  BRANCH  STATUS   raiseException
    100      001     OK
    200      001              Exception

Rows whose first non-blank cell starts with ``//`` are comments.
"""

from __future__ import annotations

import re
from enum import Enum, auto
from typing import Any, Optional

from telestub.core.types import Grid, KeyList, Row
from telestub.fixtures.cells import cell_text, coerce_cell, composite_key, is_blank, is_comment
from telestub.models.fixtures import ParsedSheet

LIST_MAP = "LIST_MAP"
KEY_MARKER = f"{LIST_MAP}=socketResponseKey"

_WHITESPACE = re.compile(r"\s+")


class _State(Enum):
    SEEK_BLOCK_MARKER = auto()
    SEEK_HEADER_ROW = auto()
    COLLECT_RECORDS = auto()


def _cell(row: Row, column: int) -> Optional[str]:
    return row[column] if column < len(row) else None


def _first_text(row: Row) -> str:
    for cell in row:
        if not is_blank(cell):
            return cell_text(cell).strip()
    return ""


def is_blank_row(row: Row) -> bool:
    return all(is_blank(cell) for cell in row)


def is_comment_row(row: Row) -> bool:
    return _first_text(row).startswith("//")


def find_key_marker(grid: Grid) -> tuple[int, int] | None:
    """Locate the key table marker cell, ignoring whitespace inside it."""
    for row_index, row in enumerate(grid):
        for column, cell in enumerate(row):
            if _WHITESPACE.sub("", cell_text(cell)) == KEY_MARKER:
                return row_index, column
    return None


def _read_key_lists(grid: Grid, marker_row: int, marker_column: int) -> tuple[dict[str, KeyList], int]:
    key_lists: dict[str, KeyList] = {}
    index = marker_row + 1
    while index < len(grid):
        row = grid[index]
        index += 1
        if is_blank_row(row):
            break
        if is_comment_row(row):
            continue

        transaction_id = cell_text(_cell(row, marker_column)).strip()
        if not transaction_id:
            continue

        fields: list[str] = []
        for cell in row[marker_column + 1:]:
            name = cell_text(cell).strip()
            if not name or is_comment(name):
                break
            fields.append(name)
        key_lists[transaction_id] = tuple(fields)
    return key_lists, index


def _block_id(row: Row, known: dict[str, str]) -> str | None:
    """Canonical transaction id when ``row`` opens a ``LIST_MAP=<id>`` block."""
    text = _first_text(row)
    if not text or is_comment(text):
        return None
    parts = text.split("=")
    if len(parts) != 2 or parts[0].strip().upper() != LIST_MAP:
        return None
    return known.get(parts[1].strip().lower())


def _header_names(row: Row) -> list[str]:
    names: list[str] = []
    for cell in row:
        name = cell_text(cell).strip()
        if not name or is_comment(name):
            break
        names.append(name)
    return names


def _bind(header: list[str], row: Row) -> dict[str, Any]:
    return {name: coerce_cell(_cell(row, column)) for column, name in enumerate(header)}


def _collect_blocks(
    grid: Grid, start: int, key_lists: dict[str, KeyList]
) -> dict[str, list[tuple[str, dict[str, Any]]]]:
    known = {transaction_id.lower(): transaction_id for transaction_id in key_lists}
    records: dict[str, list[tuple[str, dict[str, Any]]]] = {}
    state = _State.SEEK_BLOCK_MARKER
    current = ""
    header: list[str] = []

    index = start
    while index < len(grid):
        row = grid[index]

        if state is _State.SEEK_BLOCK_MARKER:
            block = _block_id(row, known)
            if block is not None:
                current = block
                records.setdefault(current, [])
                state = _State.SEEK_HEADER_ROW

        elif state is _State.SEEK_HEADER_ROW:
            block = _block_id(row, known)
            if block is not None:
                current = block
                records.setdefault(current, [])
            elif not (is_blank_row(row) or is_comment_row(row)):
                header = _header_names(row)
                state = _State.COLLECT_RECORDS

        else:
            if is_blank_row(row):
                state = _State.SEEK_BLOCK_MARKER
            elif _block_id(row, known) is not None:
                # next block starts here; re-read this row as its marker
                state = _State.SEEK_BLOCK_MARKER
                continue
            elif not is_comment_row(row):
                record = _bind(header, row)
                records[current].append((composite_key(key_lists[current], record), record))

        index += 1
    return records


def parse_sheet(grid: Grid) -> ParsedSheet | None:
    """Parse one fixture sheet.

    Returns None when the sheet has no ``LIST_MAP=socketResponseKey`` marker,
    meaning it is not a fixture sheet.
    """
    marker = find_key_marker(grid)
    if marker is None:
        return None
    key_lists, next_row = _read_key_lists(grid, *marker)
    return ParsedSheet(key_lists=key_lists, records=_collect_blocks(grid, next_row, key_lists))
