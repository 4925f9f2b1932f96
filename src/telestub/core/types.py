"""Type aliases used across telestub."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Sequence, Union

TransactionId = str
FieldValue = Union[str, Decimal, bytes, None]
FieldMap = dict[str, Any]
KeyList = tuple[str, ...]
CompositeKey = str
Row = Sequence[Optional[str]]
Grid = Sequence[Row]
