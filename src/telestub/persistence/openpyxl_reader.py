"""Workbook reader implementing ITabularReader with openpyxl."""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Optional

from openpyxl import load_workbook

from telestub.core.exceptions import FixtureSourceError
from telestub.core.types import Grid

logger = logging.getLogger(__name__)


def cell_to_text(value: Any) -> Optional[str]:
    """Render a typed cell value as the text a fixture author sees."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


class OpenpyxlWorkbook:
    """Sheets of a loaded workbook, materialized as text grids."""

    def __init__(self, sheets: dict[str, Grid]) -> None:
        self._sheets = sheets

    def sheet(self, name: str) -> Grid | None:
        return self._sheets.get(name)


class OpenpyxlReader:
    """Production ITabularReader for ``.xlsx`` fixture workbooks.

    Formula cells yield the value cached by the application that last saved
    the workbook.
    """

    def open(self, path: Path) -> OpenpyxlWorkbook:
        logger.debug("opening file: %s", Path(path).absolute())
        try:
            workbook = load_workbook(path, data_only=True)
        except Exception as exc:
            raise FixtureSourceError(path, f"file open error: {exc}") from exc
        try:
            sheets: dict[str, Grid] = {}
            for worksheet in workbook.worksheets:
                sheets[worksheet.title] = [
                    [cell_to_text(value) for value in row]
                    for row in worksheet.iter_rows(values_only=True)
                ]
            return OpenpyxlWorkbook(sheets)
        finally:
            workbook.close()
