"""Tests for the fixture inspection script."""

from __future__ import annotations

import json
import sys
from pathlib import Path

from tests.fakes import MemoryTabularReader, touch_book

# Make scripts/ importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent / "scripts"))

from inspect_fixtures import inspect_book, main  # noqa: E402

SHEET = "SocketResponse"

GRID = [
    ["LIST_MAP=socketResponseKey"],
    ["T2", "K", "SUB"],
    [],
    ["LIST_MAP=T2"],
    ["K", "SUB", "AMOUNT", "DATA"],
    ["1", None, "NUMBER(3)", "BINARY(0x0A)"],
]


class TestInspectBook:
    def test_summarizes_key_lists_and_records(self, tmp_path):
        reader = MemoryTabularReader()
        book = touch_book(tmp_path / "book.xlsx")
        reader.add_book(book, {SHEET: GRID})

        summary = inspect_book(book, SHEET, reader)

        assert summary["fixture_sheet"] is True
        telegram = summary["telegrams"]["T2"]
        assert telegram["key_fields"] == ["K", "SUB"]
        assert telegram["records"] == [
            {
                "key": ["1", "null"],
                "fields": {"K": "1", "SUB": None, "AMOUNT": "NUMBER(3)", "DATA": "BINARY(0x0A)"},
            }
        ]
        json.dumps(summary)

    def test_missing_sheet(self, tmp_path):
        reader = MemoryTabularReader()
        book = touch_book(tmp_path / "book.xlsx")
        reader.add_book(book, {"Other": GRID})

        summary = inspect_book(book, SHEET, reader)

        assert summary["fixture_sheet"] is False
        assert summary["reason"] == "no such sheet"

    def test_sheet_without_marker(self, tmp_path):
        reader = MemoryTabularReader()
        book = touch_book(tmp_path / "book.xlsx")
        reader.add_book(book, {SHEET: [["notes only"]]})

        assert inspect_book(book, SHEET, reader)["reason"] == "no key marker"


class TestMain:
    def test_unreadable_book_exits_nonzero(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.xlsx")]) == 1
        assert "error:" in capsys.readouterr().err
