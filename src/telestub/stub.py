"""Telegram stub: the test double that stands in for the remote service client.

Typical unit-test use::

    stub = create_stub()
    stub.use_test_workbook(__file__, "SocketResponse")
    response = stub.resolve("T1", {"ACCOUNT": "100"})
    assert stub.calls("T1") == [{"ACCOUNT": "100"}]
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Mapping

from telestub.capture import CallRecorder
from telestub.core.config import StubConfig
from telestub.core.exceptions import FixtureSourceError
from telestub.core.protocols import ITabularReader
from telestub.core.types import FieldMap, TransactionId
from telestub.fixtures.repository import DefaultRepository, StubRepository
from telestub.resolution.engine import ResolutionEngine

logger = logging.getLogger(__name__)

BOOK_EXTENSION = ".xlsx"


def mirrored_directory(test_file: Path, resources_root: Path) -> Path:
    """The directory under ``resources_root`` that mirrors a test module's.

    ``tests/unit/test_orders.py`` maps to ``<root>/tests/unit``. A module
    outside the working directory maps to the root itself.
    """
    try:
        relative = test_file.absolute().parent.relative_to(Path.cwd())
    except ValueError:
        return resources_root
    return resources_root / relative


def locate_test_workbook(test_file: Path | str, resources_root: Path | None = None) -> Path:
    """Find the ``.xlsx`` workbook named after a test module.

    Looks beside the module first, then in the mirrored directory under
    ``resources_root``.
    """
    test_file = Path(test_file)
    name = f"{test_file.stem}{BOOK_EXTENSION}"
    candidates = [test_file.parent / name]
    if resources_root is not None:
        candidates.append(mirrored_directory(test_file, Path(resources_root)) / name)

    for candidate in candidates:
        if candidate.is_file():
            return candidate.absolute()
    raise FixtureSourceError(candidates[-1], "can't get test data workbook")


class TelegramStub:
    """Reload-if-stale, then resolve, over a default and a stub repository.

    The two repositories reload independently under their own locks;
    ``resolve`` itself never locks.
    """

    def __init__(
        self,
        *,
        reader: ITabularReader,
        config: StubConfig,
        engine: ResolutionEngine | None = None,
    ) -> None:
        self._reader = reader
        self._config = config
        self._engine = engine or ResolutionEngine()
        self._recorder = CallRecorder()
        self._capture = config.capture_arguments
        self._configure_lock = threading.Lock()
        self._default = DefaultRepository(reader, config.default_book_path, config.default_sheet_name)
        self._stub = StubRepository(reader, config.stub_book_path, config.stub_sheet_name)

    @property
    def default_repository(self) -> DefaultRepository:
        return self._default

    @property
    def stub_repository(self) -> StubRepository:
        return self._stub

    @property
    def capture_arguments(self) -> bool:
        return self._capture

    def refresh(self) -> None:
        """Reload whichever repository is stale."""
        self._default.refresh()
        self._stub.refresh()

    def resolve(self, transaction_id: TransactionId, request: Mapping[str, Any]) -> FieldMap:
        """Return the canned response for a request.

        Raises InjectedFailure when the matched data asks for a failure, and
        FormatError when stub data disagrees with the telegram layouts.
        """
        if self._capture:
            self._recorder.record(transaction_id, request)
        defaults = self._default.refresh()
        stub = self._stub.refresh()
        return self._engine.resolve(transaction_id, request, stub, defaults)

    send = resolve

    def reset(self) -> None:
        """Drop cached fixtures and captured calls; the next call reloads everything."""
        self._default.invalidate()
        self._stub.invalidate()
        self._recorder.clear()
        self._capture = self._config.capture_arguments

    def configure(
        self,
        *,
        default_book_path: Path | str | None = None,
        default_sheet_name: str | None = None,
        stub_book_path: Path | str | None = None,
        stub_sheet_name: str | None = None,
    ) -> None:
        """Point the stub at other fixtures. Omitted values stay as they are.

        Both repositories are rebuilt, so cached data is discarded.
        """
        with self._configure_lock:
            default_path = default_book_path if default_book_path else self._default.book_path
            default_sheet = default_sheet_name or self._default.sheet_name
            stub_path = stub_book_path if stub_book_path else self._stub.location
            stub_sheet = stub_sheet_name or self._stub.sheet_name

            self._default = DefaultRepository(self._reader, Path(default_path), default_sheet)
            self._stub = StubRepository(
                self._reader, Path(stub_path) if stub_path is not None else None, stub_sheet
            )
        logger.debug("fixtures configured: default=%s[%s] stub=%s[%s]",
                     default_path, default_sheet, stub_path, stub_sheet)

    def use_test_workbook(self, test_file: Path | str, sheet_name: str | None = None) -> Path:
        """Serve the workbook that belongs to a test module and record calls.

        Captured calls from the previous test are cleared.
        """
        book = locate_test_workbook(test_file, self._config.resources_root)
        if book != self._stub.location or (sheet_name and sheet_name != self._stub.sheet_name):
            self.configure(stub_book_path=book, stub_sheet_name=sheet_name)
        self.refresh()
        self._recorder.clear()
        self._capture = True
        return book

    def calls(self, transaction_id: TransactionId) -> list[FieldMap]:
        """Requests sent for a telegram, in call order."""
        return self._recorder.calls(transaction_id)

    def clear_calls(self) -> None:
        self._recorder.clear()

    def describe(self) -> dict[str, Any]:
        return {
            "default_book_path": str(self._default.book_path),
            "default_sheet_name": self._default.sheet_name,
            "stub_book_path": str(self._stub.location) if self._stub.location else None,
            "stub_sheet_name": self._stub.sheet_name,
            "stub_sources": [str(path) for path in self._stub.sources()],
            "capture_arguments": self._capture,
        }
