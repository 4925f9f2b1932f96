"""Last-modified bookkeeping for fixture workbooks.

A snapshot records the modification stamp of every workbook it was built
from. These helpers compare those stamps with the filesystem; they take no
locks and only stat files.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Mapping, Optional

ABSENT = -1

BOOK_PATTERN = re.compile(r".+\.xlsx")

Observed = Optional[Mapping[Path, int]]


def source_stamp(path: Path) -> int:
    """Modification time in nanoseconds, or ABSENT when the file is missing."""
    try:
        return path.stat().st_mtime_ns
    except FileNotFoundError:
        return ABSENT


def enumerate_stub_sources(location: Path | None) -> list[Path]:
    """Workbooks the stub repository is built from, in merge order.

    A directory contributes its non-hidden regular files named ``*.xlsx``
    (Excel lock files such as ``~$book.xlsx`` are hidden on the
    platforms that create them), sorted by path. Any other location is taken
    as a single explicit workbook whether or not it exists.
    """
    if location is None:
        return []
    location = location.absolute()
    if not location.is_dir():
        return [location]
    return sorted(
        entry for entry in location.iterdir()
        if entry.is_file()
        and not entry.name.startswith((".", "~$"))
        and BOOK_PATTERN.fullmatch(entry.name)
    )


def default_is_stale(path: Path, observed: Observed) -> bool:
    if observed is None:
        return True
    path = path.absolute()
    return observed.get(path, ABSENT) != source_stamp(path)


def stub_is_stale(sources: list[Path], observed: Observed) -> bool:
    """Stale when a workbook was added, removed or modified since the load."""
    if observed is None:
        return True
    if len(sources) != len(observed):
        return True
    return any(path not in observed or observed[path] != source_stamp(path) for path in sources)
