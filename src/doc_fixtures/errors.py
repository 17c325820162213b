"""Exception hierarchy for fixture loading.

``DocumentError`` subclasses describe a problem with a single document (or
a lock that blocked its write) and are recovered inside a batch. ``StoreError`` subclasses mean the store itself
cannot be written and abort the whole load.
"""


class FixtureError(Exception):
    """Base class for all fixture loading errors."""


class DocumentError(FixtureError):
    """A single document could not be inserted."""


class MalformedDocumentError(DocumentError):
    """Document URI, payload, tags, or permissions are invalid."""


class DuplicateURIError(DocumentError):
    """A document with this URI already exists and overwrite is disabled."""

    def __init__(self, uri: str):
        super().__init__(f"Document already exists: {uri}")
        self.uri = uri


class TransientStoreError(DocumentError):
    """The store was locked or busy while writing this document."""


class StoreError(FixtureError):
    """The backing store cannot serve the request."""


class StoreUnavailableError(StoreError):
    """Store is closed, read-only, or otherwise unwritable."""


class LoadError(FixtureError):
    """A load aborted before all batches ran. ``__cause__`` holds the reason."""


class VerificationError(FixtureError):
    """Collection counts after a load differ from the expected counts."""

    def __init__(self, mismatches: dict[str, tuple[int, int]]):
        detail = ", ".join(
            f"{name}: expected {expected}, found {actual}"
            for name, (expected, actual) in sorted(mismatches.items())
        )
        super().__init__(f"Collection count mismatch ({detail})")
        self.mismatches = mismatches
