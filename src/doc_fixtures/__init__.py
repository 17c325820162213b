"""doc-fixtures - Sample document loader with collection-scoped counts."""

from importlib.metadata import version

from doc_fixtures.__main__ import _cli as main
from doc_fixtures.loader import insert_batch, load_all, verify_counts
from doc_fixtures.models import BatchResult, Document, LoadSummary, Permission
from doc_fixtures.store import FixtureStore

__version__ = version("doc-fixtures")
__all__ = [
    "BatchResult",
    "Document",
    "FixtureStore",
    "LoadSummary",
    "Permission",
    "insert_batch",
    "load_all",
    "main",
    "verify_counts",
    "__version__",
]
