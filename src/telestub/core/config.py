"""Stub configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings


class StubConfig(BaseSettings):
    """Fixture workbook locations and capture behaviour."""

    model_config = {"env_prefix": "TELESTUB_STUB_"}

    default_book_path: Path = Path("tests/resources/default/defaultSocketResponse.xlsx")
    default_sheet_name: str = "SocketResponse"
    stub_book_path: Path | None = None  # single workbook or a directory of workbooks
    stub_sheet_name: str = "SocketResponse"
    resources_root: Path | None = None  # mirror root for per-test workbooks
    capture_arguments: bool = False


class FormatConfig(BaseSettings):
    """Telegram layout definitions used for response field checks."""

    model_config = {"env_prefix": "TELESTUB_FORMAT_"}

    layout_dir: Path | None = None  # None disables the check
    request_suffix: str = "S"
    response_suffix: str = "R"


class AppSettings(BaseSettings):
    """Root settings aggregating all sub-configs."""

    model_config = {"env_prefix": "TELESTUB_"}

    environment: Literal["dev", "ci"] = "dev"
    log_level: str = "INFO"

    stub: StubConfig = StubConfig()
    format: FormatConfig = FormatConfig()
