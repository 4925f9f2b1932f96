"""In-memory backends for unit tests: dict-backed fakes."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from telestub.core.exceptions import FixtureSourceError, FormatMissingError
from telestub.core.types import Grid


class MemoryWorkbook:
    """Dict-backed IWorkbook."""

    def __init__(self, sheets: dict[str, Grid]) -> None:
        self._sheets = sheets

    def sheet(self, name: str) -> Grid | None:
        return self._sheets.get(name)


class MemoryTabularReader:
    """Dict-backed ITabularReader that counts how often books are opened."""

    def __init__(self) -> None:
        self._books: dict[Path, dict[str, Grid]] = {}
        self.open_count = 0
        self.opened: list[Path] = []

    def add_book(self, path: Path, sheets: dict[str, Grid]) -> None:
        self._books[Path(path).absolute()] = sheets

    def remove_book(self, path: Path) -> None:
        self._books.pop(Path(path).absolute(), None)

    def open(self, path: Path) -> MemoryWorkbook:
        path = Path(path).absolute()
        self.open_count += 1
        self.opened.append(path)
        if path not in self._books:
            raise FixtureSourceError(path, "file open error")
        return MemoryWorkbook(self._books[path])


class MemoryFormatOracle:
    """Dict-backed IFormatOracle."""

    def __init__(self) -> None:
        self._formats: dict[str, frozenset[str] | None] = {}

    def define(self, format_id: str, fields: Iterable[str] | None) -> None:
        self._formats[format_id] = frozenset(fields) if fields is not None else None

    def fields_for(self, format_id: str) -> frozenset[str] | None:
        if format_id not in self._formats:
            raise FormatMissingError(format_id)
        return self._formats[format_id]
