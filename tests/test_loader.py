"""Tests for src/doc_fixtures/loader.py — batch insertion and full loads.

Covers per-document failure isolation, accounting completeness, duplicate
policy across repeated loads, LoadError propagation for store failures,
and count verification.
"""

import math
import sqlite3
from unittest.mock import patch

import pytest

from doc_fixtures.errors import (
    LoadError,
    StoreUnavailableError,
    VerificationError,
)
from doc_fixtures.loader import insert_batch, load_all, verify_counts
from doc_fixtures.models import Document
from doc_fixtures.store import FixtureStore

# -----------------------------------------------------------------------
# insert_batch
# -----------------------------------------------------------------------


class TestInsertBatch:
    def test_all_inserted(self, store, make_doc):
        docs = [make_doc(s) for s in ("a", "b", "c")]
        result = insert_batch(store, docs, "red")
        assert result.collection == "red"
        assert result.inserted_count == 3
        assert result.failures == []
        assert result.inserted == [d.uri for d in docs]
        assert store.count("red") == 3

    def test_duplicate_mid_batch_continues(self, store, make_doc):
        store.insert(make_doc("b"), collections=["red"])
        docs = [make_doc("a"), make_doc("b"), make_doc("c")]

        result = insert_batch(store, docs, "red")

        assert result.inserted_count == len(docs) - 1
        assert len(result.failures) == 1
        uri, message = result.failures[0]
        assert uri == "/test/b.json"
        assert "already exists" in message
        assert result.inserted == ["/test/a.json", "/test/c.json"]
        assert store.count("red") == 3

    def test_malformed_document_isolated(self, store, make_doc):
        docs = [
            make_doc("a"),
            Document("/test/bad.json", {"v": math.nan}),
            Document("", {"id": "blank"}),
            make_doc("d"),
        ]
        result = insert_batch(store, docs, "blue")
        assert result.inserted == ["/test/a.json", "/test/d.json"]
        assert [uri for uri, _ in result.failures] == ["/test/bad.json", ""]
        assert result.attempted == len(docs)

    @pytest.mark.parametrize(
        "bad",
        [
            Document("/test/bad.json", {"id": "bad"}, permissions=None),
            Document("/test/bad.json", {"id": "bad"}, collections=None),
        ],
    )
    def test_invalid_fields_mid_batch_continue(self, store, make_doc, bad):
        docs = [make_doc("a"), bad, make_doc("c")]
        result = insert_batch(store, docs, "red")
        assert result.inserted == ["/test/a.json", "/test/c.json"]
        assert [uri for uri, _ in result.failures] == ["/test/bad.json"]
        assert store.count("red") == 2

    def test_locked_store_recorded_and_batch_continues(self, db_path, make_doc):
        store = FixtureStore(db_path, busy_timeout_ms=0)
        holder = sqlite3.connect(str(db_path), isolation_level=None)
        real_insert = store.insert

        def insert_then_release(doc, collections=(), overwrite=False):
            try:
                return real_insert(doc, collections=collections, overwrite=overwrite)
            finally:
                if holder.in_transaction:
                    holder.execute("ROLLBACK")

        try:
            holder.execute("BEGIN IMMEDIATE")
            with patch.object(store, "insert", side_effect=insert_then_release):
                result = insert_batch(store, [make_doc("a"), make_doc("b")], "red")
            assert result.inserted == ["/test/b.json"]
            assert len(result.failures) == 1
            assert result.failures[0][0] == "/test/a.json"
            assert "locked" in result.failures[0][1]
            assert store.count("red") == 1
        finally:
            holder.close()
            store.close()

    def test_duplicate_within_same_batch(self, store, make_doc):
        docs = [make_doc("a", v=1), make_doc("a", v=2)]
        result = insert_batch(store, docs, "red")
        assert result.inserted_count == 1
        assert result.failures[0][0] == "/test/a.json"
        assert store.get("/test/a.json").content["v"] == 1

    def test_overwrite_within_same_batch(self, store, make_doc):
        docs = [make_doc("a", v=1), make_doc("a", v=2)]
        result = insert_batch(store, docs, "red", overwrite=True)
        assert result.inserted_count == 2
        assert store.count("red") == 1
        assert store.get("/test/a.json").content["v"] == 2

    @pytest.mark.parametrize("size", [1, 2, 5])
    def test_accounting_is_complete(self, store, make_doc, size):
        store.insert(make_doc("s0"), collections=["red"])
        docs = [make_doc(f"s{i}") for i in range(size)]
        result = insert_batch(store, docs, "red")
        assert result.inserted_count + len(result.failures) == len(docs)

    def test_empty_batch_rejected(self, store):
        with pytest.raises(ValueError):
            insert_batch(store, [], "red")

    def test_empty_collection_rejected(self, store, make_doc):
        with pytest.raises(ValueError):
            insert_batch(store, [make_doc("a")], "")

    def test_store_error_propagates(self, make_doc):
        store = FixtureStore(":memory:")
        store.close()
        with pytest.raises(StoreUnavailableError):
            insert_batch(store, [make_doc("a")], "red")


# -----------------------------------------------------------------------
# load_all
# -----------------------------------------------------------------------


class TestLoadAll:
    def test_summary(self, store, make_doc):
        batches = [
            ([make_doc("r1"), make_doc("r2")], "red"),
            ([make_doc("b1")], "blue"),
        ]
        summary = load_all(store, batches)
        assert summary.per_collection_inserted == {"red": 2, "blue": 1}
        assert summary.total_inserted == 3
        assert summary.ok
        assert len(summary.batches) == 2

    def test_repeated_collection_accumulates(self, store, make_doc):
        batches = [([make_doc("a")], "red"), ([make_doc("b")], "red")]
        summary = load_all(store, batches)
        assert summary.per_collection_inserted == {"red": 2}

    def test_failures_collected_across_batches(self, store, make_doc):
        store.insert(make_doc("b1"), collections=["blue"])
        batches = [([make_doc("r1")], "red"), ([make_doc("b1"), make_doc("b2")], "blue")]
        summary = load_all(store, batches)
        assert summary.total_inserted == 2
        assert [uri for uri, _ in summary.failures] == ["/test/b1.json"]
        assert not summary.ok

    def test_store_failure_raises_load_error(self, make_doc):
        store = FixtureStore(":memory:")
        store.close()
        with pytest.raises(LoadError) as exc:
            load_all(store, [([make_doc("a")], "red")])
        assert isinstance(exc.value.__cause__, StoreUnavailableError)

    def test_store_failure_aborts_remaining_batches(self, store, make_doc):
        calls = []
        real_insert = store.insert

        def flaky_insert(doc, collections=(), overwrite=False):
            calls.append(doc.uri)
            if doc.uri == "/test/b1.json":
                raise StoreUnavailableError("store went away")
            return real_insert(doc, collections=collections, overwrite=overwrite)

        batches = [
            ([make_doc("r1")], "red"),
            ([make_doc("b1"), make_doc("b2")], "blue"),
            ([make_doc("g1")], "green"),
        ]
        with patch.object(store, "insert", side_effect=flaky_insert):
            with pytest.raises(LoadError):
                load_all(store, batches)

        assert calls == ["/test/r1.json", "/test/b1.json"]
        assert store.count("red") == 1
        assert store.count("green") == 0

    def test_read_only_store_fails_load(self, db_path, make_doc):
        FixtureStore(db_path).close()
        store = FixtureStore(db_path, read_only=True)
        try:
            with pytest.raises(LoadError):
                load_all(store, [([make_doc("a")], "red")])
        finally:
            store.close()

    def test_clear_resets_batch_collections(self, store, make_doc):
        store.insert(make_doc("old"), collections=["red"])
        store.insert(make_doc("keep"), collections=["green"])
        summary = load_all(store, [([make_doc("new")], "red")], clear=True)
        assert summary.ok
        assert store.uris("red") == ["/test/new.json"]
        assert store.count("green") == 1

    def test_empty_later_batch_rejected_before_any_write(self, store, make_doc):
        store.insert(make_doc("old"), collections=["red"])
        batches = [([make_doc("new")], "red"), ([], "blue")]
        with pytest.raises(ValueError):
            load_all(store, batches, clear=True)
        assert store.uris("red") == ["/test/old.json"]

    def test_blank_collection_rejected_before_any_write(self, store, make_doc):
        batches = [([make_doc("a")], "red"), ([make_doc("b")], "")]
        with pytest.raises(ValueError):
            load_all(store, batches)
        assert len(store) == 0

    def test_accepts_generator(self, store, make_doc):
        batches = (([make_doc(c)], c) for c in ("red", "blue"))
        summary = load_all(store, batches, clear=True)
        assert summary.total_inserted == 2


# -----------------------------------------------------------------------
# verify_counts
# -----------------------------------------------------------------------


class TestVerifyCounts:
    def test_match(self, store, make_doc):
        store.insert(make_doc("a"), collections=["red"])
        assert verify_counts(store, {"red": 1, "blue": 0}) == {"red": 1, "blue": 0}

    def test_mismatch(self, store, make_doc):
        store.insert(make_doc("a"), collections=["red"])
        with pytest.raises(VerificationError) as exc:
            verify_counts(store, {"red": 5, "blue": 0})
        assert exc.value.mismatches == {"red": (5, 1)}
        assert "expected 5, found 1" in str(exc.value)
