"""Layout-file backend implementing IFormatOracle.

Each telegram layout lives in ``<layout_dir>/<format_id>.json``::

    {"fields": ["ACCOUNT", {"name": "STATUS", "type": "X", "length": 2}]}

Only the field names matter here; the rest of the definition belongs to the
wire codec.
"""

from __future__ import annotations

import json
from pathlib import Path

from telestub.core.exceptions import FormatError, FormatMissingError


class LayoutFileOracle:
    """Production IFormatOracle reading JSON layout definitions."""

    SUFFIX = ".json"

    def __init__(self, layout_dir: Path) -> None:
        self._layout_dir = Path(layout_dir)

    def layout_path(self, format_id: str) -> Path:
        return self._layout_dir / f"{format_id}{self.SUFFIX}"

    def fields_for(self, format_id: str) -> frozenset[str] | None:
        path = self.layout_path(format_id)
        if not path.is_file():
            raise FormatMissingError(format_id, str(path.absolute()))
        try:
            definition = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise FormatError(f"Layout definition {path} cannot be read: {exc}") from exc

        fields = definition.get("fields") if isinstance(definition, dict) else None
        if not fields:
            return None
        names: set[str] = set()
        for entry in fields:
            if isinstance(entry, dict):
                if "name" not in entry:
                    raise FormatError(f"Layout definition {path} has a field without a name")
                names.add(str(entry["name"]))
            else:
                names.add(str(entry))
        return frozenset(names)
