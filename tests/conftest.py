"""Pytest configuration and fixtures."""

import pytest

from doc_fixtures.models import Document
from doc_fixtures.store import FixtureStore


@pytest.fixture
def store():
    """Fresh in-memory store for each test."""
    store = FixtureStore(":memory:")
    yield store
    store.close()


@pytest.fixture
def db_path(tmp_path):
    """Path for an on-disk store."""
    return tmp_path / "fixtures.db"


@pytest.fixture
def file_store(db_path):
    """Fresh SQLite file store for each test."""
    store = FixtureStore(db_path)
    yield store
    store.close()


@pytest.fixture
def make_doc():
    """Factory for small test documents: make_doc("a") -> /test/a.json."""

    def _make(slug: str, **content) -> Document:
        return Document(uri=f"/test/{slug}.json", content={"id": slug, **content})

    return _make
