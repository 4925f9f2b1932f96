"""Tests for key schema merging and snapshot building."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from telestub.fixtures.index import (
    DefaultSnapshot,
    StubIndexBuilder,
    StubSnapshot,
    build_default_snapshot,
    merge_key_list,
)
from telestub.models.fixtures import ParsedSheet

BOOK_A = Path("/fixtures/a.xlsx")
BOOK_B = Path("/fixtures/b.xlsx")


def _sheet(key_lists, records) -> ParsedSheet:
    return ParsedSheet(key_lists=key_lists, records=records)


class TestMergeKeyList:
    def test_longest_first(self):
        candidates = merge_key_list((), ("A",))
        candidates = merge_key_list(candidates, ("A", "B"))
        assert candidates == (("A", "B"), ("A",))

    def test_equal_lengths_keep_first_seen_order(self):
        candidates = ()
        for key_list in [("B",), ("A", "C"), ("A",), ("Z", "Y")]:
            candidates = merge_key_list(candidates, key_list)
        assert candidates == (("A", "C"), ("Z", "Y"), ("B",), ("A",))

    def test_duplicates_are_ignored(self):
        candidates = merge_key_list((("A",),), ("A",))
        assert candidates == (("A",),)

    def test_order_of_fields_matters(self):
        candidates = merge_key_list((("A", "B"),), ("B", "A"))
        assert candidates == (("A", "B"), ("B", "A"))


class TestStubIndexBuilder:
    def test_later_source_wins_per_key(self):
        builder = StubIndexBuilder()
        builder.add_sheet(_sheet({"T1": ("K",)}, {"T1": [("1", {"K": "1", "R": "a"})]}), BOOK_A)
        builder.add_sheet(_sheet({"T1": ("K",)}, {"T1": [("1", {"K": "1", "R": "b"})]}), BOOK_B)

        hit = builder.build().lookup("T1", "1")

        assert hit.fields["R"] == "b"
        assert hit.source == BOOK_B

    def test_key_lists_from_several_books_accumulate(self):
        builder = StubIndexBuilder()
        builder.add_sheet(_sheet({"T1": ("K",)}, {}), BOOK_A)
        builder.add_sheet(_sheet({"T1": ("K", "J")}, {}), BOOK_B)
        assert builder.build().candidates("T1") == (("K", "J"), ("K",))

    def test_later_row_in_sheet_wins(self):
        builder = StubIndexBuilder()
        rows = [("1", {"R": "first"}), ("1", {"R": "second"})]
        builder.add_sheet(_sheet({"T1": ("K",)}, {"T1": rows}), BOOK_A)
        assert builder.build().lookup("T1", "1").fields["R"] == "second"

    def test_snapshot_is_read_only(self):
        builder = StubIndexBuilder()
        builder.observe(BOOK_A, 10)
        builder.add_sheet(_sheet({"T1": ("K",)}, {"T1": [("1", {"R": "a"})]}), BOOK_A)
        snapshot = builder.build()

        with pytest.raises(TypeError):
            snapshot.records["T1"]["2"] = None
        with pytest.raises(TypeError):
            snapshot.lookup("T1", "1").fields["R"] = "changed"
        assert snapshot.observed == {BOOK_A: 10}

    def test_unknown_lookups_are_misses(self):
        snapshot = StubIndexBuilder().build()
        assert snapshot.lookup("T1", "1") is None
        assert snapshot.candidates("T1") == ()


class TestDefaultSnapshot:
    def test_first_row_is_the_default(self, caplog):
        parsed = _sheet({"T1": ()}, {"T1": [("", {"A": "first"}), ("", {"A": "second"})]})

        with caplog.at_level(logging.WARNING):
            snapshot = build_default_snapshot(parsed, BOOK_A, {BOOK_A: 1})

        assert snapshot.records["T1"].fields == {"A": "first"}
        assert "only the first is used" in caplog.text

    def test_missing_sheet_gives_empty_defaults(self):
        snapshot = build_default_snapshot(None, BOOK_A, {BOOK_A: -1})
        assert dict(snapshot.records) == {}
        assert snapshot.observed == {BOOK_A: -1}


class TestEmptySnapshots:
    def test_stub_snapshot_defaults_to_empty_read_only_maps(self):
        snapshot = StubSnapshot()
        assert snapshot.observed is None
        assert snapshot.lookup("T1", "1") is None
        assert snapshot.candidates("T1") == ()
        with pytest.raises(TypeError):
            snapshot.records["T1"] = {}

    def test_default_snapshot_defaults_to_empty_read_only_map(self):
        snapshot = DefaultSnapshot()
        assert snapshot.observed is None
        assert dict(snapshot.records) == {}
        with pytest.raises(TypeError):
            snapshot.records["T1"] = None

    def test_empty_snapshots_do_not_share_state(self):
        assert StubSnapshot().records is not StubSnapshot().records
