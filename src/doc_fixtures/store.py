"""URI-keyed document store with collection tags.

Documents live in SQLite: one row per URI holding the JSON payload and its
permissions, plus one row per (URI, collection) tag. Collection counts are
always computed from the tag table. Pass ``":memory:"`` as the path for a
throwaway in-memory store.

Errors are split in two: ``DocumentError`` for a bad or duplicate document,
or a lock that blocked its write (the caller may skip it and continue), and
``StoreUnavailableError`` when the database itself refuses the operation.
"""

import json
import math
import re
import sqlite3
import time
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from loguru import logger

from doc_fixtures.config import MEMORY_PATH
from doc_fixtures.errors import (
    DuplicateURIError,
    MalformedDocumentError,
    StoreUnavailableError,
    TransientStoreError,
)
from doc_fixtures.models import CAPABILITIES, Document, Permission, StoredDocument

_WORD_RE = re.compile(r"\w+")

# Primary result codes; extended codes keep these in the low byte
_SQLITE_BUSY = 5
_SQLITE_LOCKED = 6


def _now_ts() -> float:
    """Current timestamp as float."""
    return time.time()


def _as_names(collections: str | Iterable[str]) -> list[str]:
    """Accept a single collection name or any iterable of names."""
    if isinstance(collections, str):
        return [collections]
    return list(collections)


def _tag_names(collections: Any) -> frozenset[str]:
    """Collection tags from a single name or an iterable of names."""
    if isinstance(collections, str):
        return frozenset([collections])
    if collections is None or isinstance(collections, (dict, bytes)):
        raise MalformedDocumentError(f"Invalid collections: {collections!r}")
    try:
        return frozenset(collections)
    except TypeError as e:
        raise MalformedDocumentError(f"Invalid collections: {collections!r}") from e


def _is_transient(error: sqlite3.OperationalError) -> bool:
    """True for lock/busy errors that may clear up on a later attempt."""
    code = getattr(error, "sqlite_errorcode", None)
    if code is not None:
        return code & 0xFF in (_SQLITE_BUSY, _SQLITE_LOCKED)
    message = str(error).lower()
    return "locked" in message or "busy" in message


def _check_json_tree(value: Any, path: str) -> None:
    """Raise MalformedDocumentError unless ``value`` is a strict JSON tree."""
    if value is None or isinstance(value, (str, bool, int)):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise MalformedDocumentError(f"Non-finite number at {path}")
        return
    if isinstance(value, list):
        for i, item in enumerate(value):
            _check_json_tree(item, f"{path}[{i}]")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise MalformedDocumentError(
                    f"Non-string key {key!r} at {path}"
                )
            _check_json_tree(item, f"{path}.{key}")
        return
    raise MalformedDocumentError(
        f"Unsupported value of type {type(value).__name__} at {path}"
    )


def _encode(document: Document, tags: frozenset[str]) -> tuple[str, str]:
    """Validate a document and return (content JSON, permissions JSON)."""
    uri = document.uri
    if not isinstance(uri, str) or not uri.strip():
        raise MalformedDocumentError("Document URI must be a non-empty string")
    if not isinstance(document.content, dict):
        raise MalformedDocumentError(
            f"Payload must be a JSON object, got {type(document.content).__name__}"
        )
    _check_json_tree(document.content, "$")

    if not tags:
        raise MalformedDocumentError("Document must belong to at least one collection")
    for tag in tags:
        if not isinstance(tag, str) or not tag.strip():
            raise MalformedDocumentError(f"Invalid collection name: {tag!r}")

    if not isinstance(document.permissions, (tuple, list)):
        raise MalformedDocumentError(
            "Permissions must be a sequence, got "
            f"{type(document.permissions).__name__}"
        )
    for perm in document.permissions:
        if not isinstance(perm, Permission) or not perm.role:
            raise MalformedDocumentError(f"Invalid permission: {perm!r}")
        if perm.capability not in CAPABILITIES:
            raise MalformedDocumentError(f"Unknown capability: {perm.capability}")

    content = json.dumps(document.content, ensure_ascii=False, allow_nan=False)
    permissions = json.dumps([p.to_dict() for p in document.permissions])
    return content, permissions


def _contains_word(value: Any, words: list[str]) -> bool:
    """True if any string in the tree contains ``words`` as consecutive tokens."""
    if isinstance(value, str):
        tokens = [t.lower() for t in _WORD_RE.findall(value)]
        n = len(words)
        return any(tokens[i : i + n] == words for i in range(len(tokens) - n + 1))
    if isinstance(value, list):
        return any(_contains_word(item, words) for item in value)
    if isinstance(value, dict):
        return any(_contains_word(item, words) for item in value.values())
    return False


def _values_equal(actual: Any, expected: Any) -> bool:
    # bool is an int subclass; keep true/false distinct from 1/0
    if isinstance(actual, bool) != isinstance(expected, bool):
        return False
    return actual == expected


def _has_property(value: Any, name: str, expected: Any) -> bool:
    """True if a property ``name`` at any depth equals (or contains) ``expected``."""
    if isinstance(value, dict):
        for key, item in value.items():
            if key == name:
                if _values_equal(item, expected):
                    return True
                if isinstance(item, list) and any(
                    _values_equal(x, expected) for x in item
                ):
                    return True
            if _has_property(item, name, expected):
                return True
        return False
    if isinstance(value, list):
        return any(_has_property(item, name, expected) for item in value)
    return False


class FixtureStore:
    """SQLite-backed document store keyed by URI with collection tags."""

    def __init__(
        self,
        db_path: Path | str = MEMORY_PATH,
        read_only: bool = False,
        busy_timeout_ms: int = 5000,
    ):
        self._db_path = db_path
        self._read_only = read_only
        self._memory = str(db_path) == MEMORY_PATH
        timeout = busy_timeout_ms / 1000

        try:
            if self._memory:
                self._conn = sqlite3.connect(MEMORY_PATH)
            else:
                path = Path(db_path)
                if read_only:
                    uri = f"{path.resolve().as_uri()}?mode=ro"
                    self._conn = sqlite3.connect(uri, uri=True, timeout=timeout)
                else:
                    path.parent.mkdir(parents=True, exist_ok=True)
                    self._conn = sqlite3.connect(str(path), timeout=timeout)
                    self._conn.execute("PRAGMA journal_mode = WAL")
                    self._conn.execute("PRAGMA synchronous = NORMAL")
                self._conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)}")
        except (sqlite3.Error, OSError) as e:
            raise StoreUnavailableError(f"Cannot open store at {db_path}: {e}") from e

        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")

        if not read_only:
            self._create_tables()
        logger.debug(f"FixtureStore initialized at {db_path} (read_only={read_only})")

    def _create_tables(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS documents (
                uri TEXT PRIMARY KEY,
                content TEXT NOT NULL,
                permissions TEXT NOT NULL,
                inserted_at REAL NOT NULL
            )
        """)
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS document_collections (
                uri TEXT NOT NULL,
                collection TEXT NOT NULL,
                PRIMARY KEY (uri, collection),
                FOREIGN KEY (uri) REFERENCES documents(uri) ON DELETE CASCADE
            )
        """)
        self._conn.execute("""
            CREATE INDEX IF NOT EXISTS idx_document_collections_collection
            ON document_collections(collection)
        """)
        self._conn.commit()

    @contextmanager
    def _guard(self, action: str, per_document: bool = False) -> Iterator[None]:
        """Translate database-level failures into StoreUnavailableError.

        With ``per_document`` a lock or busy timeout becomes
        TransientStoreError, which a batch records and skips.
        """
        try:
            yield
        except sqlite3.OperationalError as e:
            if per_document and _is_transient(e):
                raise TransientStoreError(f"Store busy during {action}: {e}") from e
            raise StoreUnavailableError(f"Store unavailable during {action}: {e}") from e
        except sqlite3.ProgrammingError as e:
            raise StoreUnavailableError(f"Store unavailable during {action}: {e}") from e

    @property
    def path(self) -> Path | str:
        return self._db_path

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    def insert(
        self,
        document: Document,
        collections: Iterable[str] = (),
        overwrite: bool = False,
    ) -> StoredDocument:
        """Insert one document tagged with its own and the given collections.

        With ``overwrite`` an existing document under the same URI is replaced
        together with its tags; otherwise the insert fails with
        DuplicateURIError. The document and its tags are written in a single
        transaction.
        """
        tags = _tag_names(document.collections) | _tag_names(collections)
        content, permissions = _encode(document, tags)
        uri = document.uri

        try:
            with self._guard(f"insert of {uri}", per_document=True), self._conn:
                if overwrite:
                    self._conn.execute(
                        "DELETE FROM document_collections WHERE uri = ?", (uri,)
                    )
                    self._conn.execute("DELETE FROM documents WHERE uri = ?", (uri,))
                self._conn.execute(
                    """INSERT INTO documents (uri, content, permissions, inserted_at)
                       VALUES (?, ?, ?, ?)""",
                    (uri, content, permissions, _now_ts()),
                )
                self._conn.executemany(
                    "INSERT INTO document_collections (uri, collection) VALUES (?, ?)",
                    [(uri, tag) for tag in sorted(tags)],
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateURIError(uri) from e

        return StoredDocument(
            uri=uri,
            content=json.loads(content),
            collections=tags,
            permissions=tuple(document.permissions),
        )

    def delete(self, uri: str) -> bool:
        """Remove a document and its tags. Returns False if it was absent."""
        with self._guard(f"delete of {uri}"), self._conn:
            self._conn.execute("DELETE FROM document_collections WHERE uri = ?", (uri,))
            cursor = self._conn.execute("DELETE FROM documents WHERE uri = ?", (uri,))
        return cursor.rowcount > 0

    def reset(self, collections: str | Iterable[str] | None = None) -> int:
        """Delete every document in any of ``collections`` (all when None)."""
        with self._guard("reset"), self._conn:
            if collections is None:
                cursor = self._conn.execute("DELETE FROM documents")
                self._conn.execute("DELETE FROM document_collections")
                removed = cursor.rowcount
            else:
                uris = self.uris(collections)
                self._conn.executemany(
                    "DELETE FROM document_collections WHERE uri = ?",
                    [(u,) for u in uris],
                )
                self._conn.executemany(
                    "DELETE FROM documents WHERE uri = ?", [(u,) for u in uris]
                )
                removed = len(uris)
        logger.info(f"Cleared {removed} documents")
        return removed

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    def _tags_for(self, uri: str) -> frozenset[str]:
        rows = self._conn.execute(
            "SELECT collection FROM document_collections WHERE uri = ?", (uri,)
        ).fetchall()
        return frozenset(r["collection"] for r in rows)

    def _row_to_document(self, row: sqlite3.Row) -> StoredDocument:
        return StoredDocument(
            uri=row["uri"],
            content=json.loads(row["content"]),
            collections=self._tags_for(row["uri"]),
            permissions=tuple(
                Permission.from_dict(p) for p in json.loads(row["permissions"])
            ),
        )

    def get(self, uri: str) -> StoredDocument | None:
        """Get a document by URI."""
        with self._guard(f"lookup of {uri}"):
            row = self._conn.execute(
                "SELECT * FROM documents WHERE uri = ?", (uri,)
            ).fetchone()
            return self._row_to_document(row) if row else None

    def exists(self, uri: str) -> bool:
        with self._guard(f"lookup of {uri}"):
            row = self._conn.execute(
                "SELECT 1 FROM documents WHERE uri = ?", (uri,)
            ).fetchone()
        return row is not None

    def count(self, collection: str) -> int:
        """Number of documents tagged with ``collection`` (0 if unknown)."""
        with self._guard(f"count of {collection}"):
            return self._conn.execute(
                "SELECT COUNT(*) FROM document_collections WHERE collection = ?",
                (collection,),
            ).fetchone()[0]

    def estimate(self, collections: str | Iterable[str]) -> int:
        """Number of distinct documents in any of ``collections``."""
        names = _as_names(collections)
        if not names:
            return 0
        marks = ", ".join("?" for _ in names)
        with self._guard("estimate"):
            return self._conn.execute(
                f"""SELECT COUNT(DISTINCT uri) FROM document_collections
                    WHERE collection IN ({marks})""",
                names,
            ).fetchone()[0]

    def uris(self, collections: str | Iterable[str] | None = None) -> list[str]:
        """Sorted document URIs, optionally limited to some collections."""
        with self._guard("uri listing"):
            if collections is None:
                rows = self._conn.execute(
                    "SELECT uri FROM documents ORDER BY uri"
                ).fetchall()
            else:
                names = _as_names(collections)
                if not names:
                    return []
                marks = ", ".join("?" for _ in names)
                rows = self._conn.execute(
                    f"""SELECT DISTINCT uri FROM document_collections
                        WHERE collection IN ({marks}) ORDER BY uri""",
                    names,
                ).fetchall()
        return [r["uri"] for r in rows]

    def collections(self) -> dict[str, int]:
        """Every collection name with its member count."""
        with self._guard("collection listing"):
            rows = self._conn.execute("""
                SELECT collection, COUNT(*) AS total
                FROM document_collections
                GROUP BY collection
                ORDER BY collection
            """).fetchall()
        return {r["collection"]: r["total"] for r in rows}

    def search(
        self,
        collections: str | Iterable[str] | None = None,
        word: str | None = None,
        properties: dict[str, Any] | None = None,
    ) -> list[StoredDocument]:
        """Filter documents by collection, whole word, and property values.

        All given criteria must match. ``word`` is matched case-insensitively
        against whole tokens of string values; each ``properties`` entry
        matches a JSON property of that name at any depth whose value equals
        the expected value, or is an array containing it.
        """
        words = []
        if word is not None:
            words = [t.lower() for t in _WORD_RE.findall(word)]
            if not words:
                return []
        results = []
        for uri in self.uris(collections):
            doc = self.get(uri)
            if doc is None:
                continue
            if words and not _contains_word(doc.content, words):
                continue
            if properties and not all(
                _has_property(doc.content, name, value)
                for name, value in properties.items()
            ):
                continue
            results.append(doc)
        return results

    def stats(self) -> dict:
        """Return store statistics."""
        with self._guard("stats"):
            total = self._conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0]
        return {
            "documents": total,
            "collections": self.collections(),
            "path": str(self._db_path),
        }

    def __len__(self) -> int:
        return self.stats()["documents"]

    def __contains__(self, uri: object) -> bool:
        return isinstance(uri, str) and self.exists(uri)

    def close(self) -> None:
        """Close database connection."""
        self._conn.close()

    def __enter__(self) -> "FixtureStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
