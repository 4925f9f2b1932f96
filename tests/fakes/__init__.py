"""Shared test doubles: the memory backends plus file helpers."""

from __future__ import annotations

import os
from pathlib import Path

from telestub.persistence.memory_backend import (
    MemoryFormatOracle,
    MemoryTabularReader,
    MemoryWorkbook,
)


def touch_book(path: Path) -> Path:
    """Create an (empty) workbook file so it has a modification stamp."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    return path.absolute()


def bump_mtime(path: Path, seconds: int = 5) -> None:
    """Move a file's modification time forward, independent of fs resolution."""
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + seconds * 1_000_000_000))


__all__ = [
    "MemoryFormatOracle",
    "MemoryTabularReader",
    "MemoryWorkbook",
    "bump_mtime",
    "touch_book",
]
