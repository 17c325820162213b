"""Document and result types shared by the store and the loader."""

from dataclasses import dataclass, field
from typing import Any

CAPABILITIES = frozenset({"read", "update", "insert", "execute", "node-update"})


@dataclass(frozen=True)
class Permission:
    """Role/capability pair recorded with a document (never enforced)."""

    role: str
    capability: str

    def to_dict(self) -> dict:
        return {"role": self.role, "capability": self.capability}

    @classmethod
    def from_dict(cls, data: dict) -> "Permission":
        return cls(role=data["role"], capability=data["capability"])


DEFAULT_PERMISSIONS: tuple[Permission, ...] = (
    Permission("rest-reader", "read"),
    Permission("rest-writer", "update"),
)


@dataclass(frozen=True)
class Document:
    """A URI-addressed JSON payload waiting to be inserted.

    ``collections`` holds tags the document carries on its own; the batch
    collection is added on insertion.
    """

    uri: str
    content: dict[str, Any]
    collections: frozenset[str] = field(default_factory=frozenset)
    permissions: tuple[Permission, ...] = DEFAULT_PERMISSIONS


@dataclass(frozen=True)
class StoredDocument:
    """A document as read back from the store."""

    uri: str
    content: dict[str, Any]
    collections: frozenset[str]
    permissions: tuple[Permission, ...]


@dataclass
class BatchResult:
    """Outcome of inserting one batch into one collection."""

    collection: str
    inserted: list[str] = field(default_factory=list)
    failures: list[tuple[str, str]] = field(default_factory=list)

    @property
    def inserted_count(self) -> int:
        return len(self.inserted)

    @property
    def attempted(self) -> int:
        return len(self.inserted) + len(self.failures)


@dataclass
class LoadSummary:
    """Aggregate of every batch run by a load."""

    per_collection_inserted: dict[str, int] = field(default_factory=dict)
    batches: list[BatchResult] = field(default_factory=list)

    @property
    def total_inserted(self) -> int:
        return sum(self.per_collection_inserted.values())

    @property
    def failures(self) -> list[tuple[str, str]]:
        return [f for batch in self.batches for f in batch.failures]

    @property
    def ok(self) -> bool:
        return not self.failures

    def add(self, result: BatchResult) -> None:
        self.batches.append(result)
        self.per_collection_inserted[result.collection] = (
            self.per_collection_inserted.get(result.collection, 0)
            + result.inserted_count
        )
