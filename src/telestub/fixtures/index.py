"""Immutable fixture snapshots and the builders that merge parsed sheets.

A snapshot is built once per reload and then only read. Repositories swap
the whole object, so readers never see a half-built index.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional

from telestub.core.types import CompositeKey, FieldValue, KeyList, TransactionId
from telestub.models.fixtures import ParsedSheet

logger = logging.getLogger(__name__)

_EMPTY: Mapping = MappingProxyType({})


def _empty() -> Mapping:
    return MappingProxyType({})


class IndexedRecord(NamedTuple):
    """A fixture row and the workbook it came from."""

    fields: Mapping[str, FieldValue]
    source: Path


def merge_key_list(candidates: tuple[KeyList, ...], key_list: KeyList) -> tuple[KeyList, ...]:
    """Add a key list, keeping the most specific (longest) lists first.

    Equal-length lists keep the order in which they were first seen.
    """
    if key_list in candidates:
        return candidates
    return tuple(sorted(candidates + (key_list,), key=len, reverse=True))


@dataclass(frozen=True)
class StubSnapshot:
    key_schema: Mapping[TransactionId, tuple[KeyList, ...]] = field(default_factory=_empty)
    records: Mapping[TransactionId, Mapping[CompositeKey, IndexedRecord]] = field(default_factory=_empty)
    observed: Optional[Mapping[Path, int]] = None  # None: never loaded

    def candidates(self, transaction_id: TransactionId) -> tuple[KeyList, ...]:
        return self.key_schema.get(transaction_id, ())

    def lookup(self, transaction_id: TransactionId, key: CompositeKey) -> IndexedRecord | None:
        return self.records.get(transaction_id, _EMPTY).get(key)


@dataclass(frozen=True)
class DefaultSnapshot:
    records: Mapping[TransactionId, IndexedRecord] = field(default_factory=_empty)
    observed: Optional[Mapping[Path, int]] = None


def _freeze(record: Mapping[str, FieldValue], source: Path) -> IndexedRecord:
    return IndexedRecord(MappingProxyType(dict(record)), source)


@dataclass
class StubIndexBuilder:
    """Merges stub sheets in load order; later sources win per composite key."""

    key_schema: dict[TransactionId, tuple[KeyList, ...]] = field(default_factory=dict)
    records: dict[TransactionId, dict[CompositeKey, IndexedRecord]] = field(default_factory=dict)
    observed: dict[Path, int] = field(default_factory=dict)

    def observe(self, path: Path, stamp: int) -> None:
        self.observed[path] = stamp

    def add_sheet(self, parsed: ParsedSheet, source: Path) -> None:
        for transaction_id, key_list in parsed.key_lists.items():
            self.key_schema[transaction_id] = merge_key_list(
                self.key_schema.get(transaction_id, ()), key_list
            )
        for transaction_id, rows in parsed.records.items():
            by_key = self.records.setdefault(transaction_id, {})
            for key, record in rows:
                by_key[key] = _freeze(record, source)

    def build(self) -> StubSnapshot:
        return StubSnapshot(
            key_schema=MappingProxyType(dict(self.key_schema)),
            records=MappingProxyType(
                {tid: MappingProxyType(by_key) for tid, by_key in self.records.items()}
            ),
            observed=MappingProxyType(dict(self.observed)),
        )


def build_default_snapshot(
    parsed: ParsedSheet | None, source: Path, observed: Mapping[Path, int]
) -> DefaultSnapshot:
    """Keep the first authored row of each transaction id."""
    records: dict[TransactionId, IndexedRecord] = {}
    if parsed is not None:
        for transaction_id, rows in parsed.records.items():
            if not rows:
                continue
            if len(rows) > 1:
                logger.warning(
                    "default data for telegram %s has %d rows, only the first is used. [%s]",
                    transaction_id, len(rows), source,
                )
            records[transaction_id] = _freeze(rows[0][1], source)
    return DefaultSnapshot(
        records=MappingProxyType(records),
        observed=MappingProxyType(dict(observed)),
    )
