"""Pluggable fixture backends behind Protocol interfaces."""

from __future__ import annotations

from telestub.core.config import AppSettings
from telestub.persistence.layout_oracle import LayoutFileOracle
from telestub.persistence.openpyxl_reader import OpenpyxlReader
from telestub.resolution.engine import ResolutionEngine
from telestub.stub import TelegramStub


def create_stub(settings: AppSettings | None = None) -> TelegramStub:
    """Create a wired-up telegram stub from application settings."""
    if settings is None:
        settings = AppSettings()

    oracle = None
    if settings.format.layout_dir is not None:
        oracle = LayoutFileOracle(settings.format.layout_dir)

    engine = ResolutionEngine(
        format_oracle=oracle,
        request_suffix=settings.format.request_suffix,
        response_suffix=settings.format.response_suffix,
    )

    return TelegramStub(reader=OpenpyxlReader(), config=settings.stub, engine=engine)
