"""Telestub exception hierarchy."""

from __future__ import annotations

from pathlib import Path


class TelestubError(Exception):
    """Base exception for all telestub errors."""


class FixtureSourceError(TelestubError):
    """A fixture workbook could not be located or opened."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"{message} [{self.path}]")


class FormatError(TelestubError):
    """Fixture data disagrees with the telegram layout definitions."""


class FormatMissingError(FormatError):
    """No layout definition exists for a format id."""

    def __init__(self, format_id: str, location: str = "") -> None:
        self.format_id = format_id
        self.location = location
        detail = f" [{location}]" if location else ""
        super().__init__(f"Layout definition for format {format_id!r} does not exist{detail}")


class FormatViolationError(FormatError):
    """A response field is not part of the response layout."""

    def __init__(self, transaction_id: str, field_name: str, source: str = "") -> None:
        self.transaction_id = transaction_id
        self.field_name = field_name
        self.source = source
        super().__init__(
            f"Field {field_name!r} of telegram {transaction_id!r} is not defined "
            f"in the response layout (fixture: {source or 'unknown'})"
        )


class DownstreamError(TelestubError):
    """The simulated remote service failed."""


class InjectedFailure(DownstreamError):
    """Failure requested by a fixture row through the raiseException field."""

    def __init__(self, transaction_id: str, setting: str) -> None:
        self.transaction_id = transaction_id
        self.setting = setting
        super().__init__(f"raiseException case: {setting} (telegram {transaction_id})")
