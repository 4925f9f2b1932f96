"""Fixture repositories: reload-if-stale ownership of one snapshot each.

The staleness check reads only the current snapshot and file stamps, so it
runs without a lock. A positive check takes the repository's own lock and
checks again before rebuilding, so concurrent callers reload once.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from telestub.core.exceptions import FixtureSourceError
from telestub.core.protocols import ITabularReader
from telestub.fixtures.freshness import (
    ABSENT,
    default_is_stale,
    enumerate_stub_sources,
    source_stamp,
    stub_is_stale,
)
from telestub.fixtures.index import (
    DefaultSnapshot,
    StubIndexBuilder,
    StubSnapshot,
    build_default_snapshot,
)
from telestub.fixtures.parser import KEY_MARKER, parse_sheet

logger = logging.getLogger(__name__)


class DefaultRepository:
    """Baseline response per transaction id, read from a single workbook.

    A missing workbook or sheet is not an error: the repository is empty.
    """

    def __init__(self, reader: ITabularReader, book_path: Path, sheet_name: str) -> None:
        self._reader = reader
        self._book_path = Path(book_path).absolute()
        self._sheet_name = sheet_name
        self._lock = threading.Lock()
        self._snapshot = DefaultSnapshot()

    @property
    def book_path(self) -> Path:
        return self._book_path

    @property
    def sheet_name(self) -> str:
        return self._sheet_name

    @property
    def snapshot(self) -> DefaultSnapshot:
        return self._snapshot

    def is_stale(self) -> bool:
        return default_is_stale(self._book_path, self._snapshot.observed)

    def refresh(self) -> DefaultSnapshot:
        if self.is_stale():
            with self._lock:
                if self.is_stale():
                    self._snapshot = self._load()
        return self._snapshot

    def invalidate(self) -> None:
        with self._lock:
            self._snapshot = DefaultSnapshot()

    def _load(self) -> DefaultSnapshot:
        path = self._book_path
        stamp = source_stamp(path)
        observed = {path: stamp}
        if stamp == ABSENT:
            logger.warning("default socket response workbook doesn't exist. [%s]", path)
            return build_default_snapshot(None, path, observed)

        grid = self._reader.open(path).sheet(self._sheet_name)
        if grid is None:
            logger.warning("default socket response worksheet doesn't exist. [%s] in [%s]",
                           self._sheet_name, path)
            return build_default_snapshot(None, path, observed)

        parsed = parse_sheet(grid)
        if parsed is None:
            logger.warning("default socket response worksheet doesn't have [%s]. [%s]",
                           KEY_MARKER, path)
        logger.debug("loaded default data from %s", path)
        return build_default_snapshot(parsed, path, observed)


class StubRepository:
    """Keyed responses merged from one workbook or a directory of workbooks."""

    def __init__(self, reader: ITabularReader, location: Path | None, sheet_name: str) -> None:
        self._reader = reader
        self._location = Path(location).absolute() if location is not None else None
        self._sheet_name = sheet_name
        self._lock = threading.Lock()
        self._snapshot = StubSnapshot()

    @property
    def location(self) -> Path | None:
        return self._location

    @property
    def sheet_name(self) -> str:
        return self._sheet_name

    @property
    def snapshot(self) -> StubSnapshot:
        return self._snapshot

    def sources(self) -> list[Path]:
        return enumerate_stub_sources(self._location)

    def is_stale(self) -> bool:
        return stub_is_stale(self.sources(), self._snapshot.observed)

    def refresh(self) -> StubSnapshot:
        if self.is_stale():
            with self._lock:
                if self.is_stale():
                    self._snapshot = self._load()
        return self._snapshot

    def invalidate(self) -> None:
        with self._lock:
            self._snapshot = StubSnapshot()

    def _load(self) -> StubSnapshot:
        builder = StubIndexBuilder()
        scanned = self._location is not None and self._location.is_dir()
        for path in self.sources():
            self._load_book(builder, path, scanned)
        snapshot = builder.build()
        logger.debug("loaded stub data for %d telegram(s) from %d workbook(s)",
                     len(snapshot.records), len(snapshot.observed or {}))
        return snapshot

    def _load_book(self, builder: StubIndexBuilder, path: Path, scanned: bool) -> None:
        stamp = source_stamp(path)
        builder.observe(path, stamp)

        if stamp == ABSENT:
            if not scanned:
                raise FixtureSourceError(path, "stub workbook doesn't exist")
            logger.warning("stub workbook disappeared before it was read. [%s]", path)
            return

        try:
            workbook = self._reader.open(path)
        except FixtureSourceError:
            if not scanned:
                raise
            logger.warning("stub workbook could not be read, skipped until it changes. [%s]",
                           path, exc_info=True)
            return

        grid = workbook.sheet(self._sheet_name)
        if grid is None:
            logger.warning("stub worksheet doesn't exist. [%s] in [%s]", self._sheet_name, path)
            return

        parsed = parse_sheet(grid)
        if parsed is None:
            logger.warning("stub worksheet doesn't have [%s]. [%s] in [%s]",
                           KEY_MARKER, self._sheet_name, path)
            return
        builder.add_sheet(parsed, path)
