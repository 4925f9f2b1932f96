"""Protocol interfaces for the collaborators telestub consumes.

Structural typing, no inheritance required, easy to swap for in-memory
doubles in tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from telestub.core.types import Grid


# ---------------------------------------------------------------------------
# Tabular source reader
# ---------------------------------------------------------------------------

@runtime_checkable
class IWorkbook(Protocol):
    """An opened fixture workbook."""

    def sheet(self, name: str) -> Grid | None: ...


@runtime_checkable
class ITabularReader(Protocol):
    """Opens fixture workbooks. Raises FixtureSourceError when it cannot."""

    def open(self, path: Path) -> IWorkbook: ...


# ---------------------------------------------------------------------------
# Format oracle
# ---------------------------------------------------------------------------

@runtime_checkable
class IFormatOracle(Protocol):
    """Knows the field names of each telegram layout.

    ``fields_for`` returns the valid field names of a format, or ``None`` /
    an empty set when the layout places no constraint. Raises
    FormatMissingError when the format does not exist.
    """

    def fields_for(self, format_id: str) -> frozenset[str] | None: ...
