"""Tests for doc_fixtures package."""

import re

from doc_fixtures import BatchResult, LoadSummary, __version__, main


def test_version():
    """Test version is set and follows semver."""
    assert re.match(r"^\d+\.\d+\.\d+", __version__)


def test_main_is_cli():
    assert main.__name__ == "_cli"


def test_batch_result_counts():
    result = BatchResult("red", inserted=["/a", "/b"], failures=[("/c", "boom")])
    assert result.inserted_count == 2
    assert result.attempted == 3


def test_load_summary_aggregates():
    summary = LoadSummary()
    summary.add(BatchResult("red", inserted=["/a"]))
    summary.add(BatchResult("red", inserted=["/b"], failures=[("/c", "boom")]))
    summary.add(BatchResult("blue", inserted=["/d"]))
    assert summary.per_collection_inserted == {"red": 2, "blue": 1}
    assert summary.total_inserted == 3
    assert summary.failures == [("/c", "boom")]
    assert not summary.ok
    assert len(summary.batches) == 3


def test_empty_summary():
    summary = LoadSummary()
    assert summary.total_inserted == 0
    assert summary.ok
