"""Tests for the index naming convention."""

from __future__ import annotations

import re

import pytest

from openalias.adapters.base.exceptions import IndexNameConversionError
from openalias.models.naming import (
    alias_pattern,
    root_doctype_dataset,
    root_doctype_dataset_ts,
    split_index_name,
    versions_pattern,
)


class TestCompose:
    def test_root(self) -> None:
        assert root_doctype_dataset("book", "fr") == "book_fr"

    def test_with_timestamp(self) -> None:
        assert root_doctype_dataset_ts("book", "fr", "20210101") == "book_fr_20210101"

    def test_default_timestamp(self) -> None:
        name = root_doctype_dataset_ts("book", "fr")
        assert re.fullmatch(r"book_fr_\d{8}_\d{6}", name)

    def test_alias_pattern(self) -> None:
        assert alias_pattern("book", "fr") == "book_fr_*"

    def test_versions_pattern(self) -> None:
        assert versions_pattern("book_fr") == "book_fr_*"
        assert versions_pattern("book_fr") == alias_pattern("book", "fr")

    @pytest.mark.parametrize(("doc_type", "dataset"), [("", "fr"), ("book", ""), ("my_book", "fr"), ("book", "f*")])
    def test_reserved_characters(self, doc_type: str, dataset: str) -> None:
        with pytest.raises(IndexNameConversionError):
            root_doctype_dataset(doc_type, dataset)

    def test_empty_timestamp(self) -> None:
        with pytest.raises(IndexNameConversionError):
            root_doctype_dataset_ts("book", "fr", "")


class TestSplit:
    def test_split(self) -> None:
        assert split_index_name("book_fr_20210101") == ("book", "fr")

    def test_split_multipart_timestamp(self) -> None:
        assert split_index_name("book_fr-ne_20210101_120000") == ("book", "fr-ne")

    @pytest.mark.parametrize("name", ["book", "book_fr", "book__20210101", "_fr_20210101", "book_fr_"])
    def test_invalid_names(self, name: str) -> None:
        with pytest.raises(IndexNameConversionError):
            split_index_name(name)

    @pytest.mark.parametrize(
        ("doc_type", "dataset", "timestamp"),
        [
            ("book", "fr", "20210101"),
            ("poi", "fr-ne", "20210101_093000"),
            ("admin", "osm.europe", None),
        ],
    )
    def test_round_trip(self, doc_type: str, dataset: str, timestamp: str | None) -> None:
        assert split_index_name(root_doctype_dataset_ts(doc_type, dataset, timestamp)) == (doc_type, dataset)
