"""Print the key schema and records a fixture workbook sheet yields.

Usage:
    python scripts/inspect_fixtures.py tests/resources/socketResponse.xlsx --sheet SocketResponse
"""

from __future__ import annotations

import argparse
import json
import sys
from decimal import Decimal
from pathlib import Path
from typing import Any

from telestub.core.exceptions import TelestubError
from telestub.core.protocols import ITabularReader
from telestub.fixtures.cells import KEY_DELIMITER, format_binary
from telestub.fixtures.parser import parse_sheet
from telestub.persistence.openpyxl_reader import OpenpyxlReader


def _json_value(value: Any) -> Any:
    """Render Decimal and bytes the way the workbook spells them."""
    if isinstance(value, Decimal):
        return f"NUMBER({value})"
    if isinstance(value, bytes):
        return format_binary(value)
    return value


def inspect_book(path: Path, sheet_name: str, reader: ITabularReader | None = None) -> dict[str, Any]:
    """Parse one sheet and return a JSON-ready summary."""
    reader = reader or OpenpyxlReader()
    grid = reader.open(path).sheet(sheet_name)
    if grid is None:
        return {"book": str(path), "sheet": sheet_name, "fixture_sheet": False, "reason": "no such sheet"}

    parsed = parse_sheet(grid)
    if parsed is None:
        return {"book": str(path), "sheet": sheet_name, "fixture_sheet": False, "reason": "no key marker"}

    telegrams: dict[str, Any] = {}
    for transaction_id, key_list in parsed.key_lists.items():
        telegrams[transaction_id] = {
            "key_fields": list(key_list),
            "records": [
                {
                    "key": key.split(KEY_DELIMITER),
                    "fields": {name: _json_value(value) for name, value in record.items()},
                }
                for key, record in parsed.records.get(transaction_id, [])
            ],
        }
    return {"book": str(path), "sheet": sheet_name, "fixture_sheet": True, "telegrams": telegrams}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Inspect a telegram stub fixture workbook")
    parser.add_argument("book", type=Path, help="Workbook path (.xlsx)")
    parser.add_argument("--sheet", default="SocketResponse", help="Sheet name")
    args = parser.parse_args(argv)

    try:
        summary = inspect_book(args.book, args.sheet)
    except TelestubError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(summary, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
