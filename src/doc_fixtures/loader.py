"""Batch loading of documents into named collections.

A batch never stops on a bad document: each failure is logged, recorded in
the BatchResult, and the next document is attempted. A store failure is
different; it aborts the load and reaches the caller as LoadError.
"""

from collections.abc import Iterable, Mapping, Sequence

from loguru import logger

from doc_fixtures.errors import DocumentError, LoadError, StoreError, VerificationError
from doc_fixtures.models import BatchResult, Document, LoadSummary
from doc_fixtures.store import FixtureStore

Batch = tuple[Sequence[Document], str]


def _check_batch(documents: Sequence[Document], collection: str) -> None:
    if not documents:
        raise ValueError("Batch must contain at least one document")
    if not isinstance(collection, str) or not collection.strip():
        raise ValueError("Batch collection name must not be empty")


def insert_batch(
    store: FixtureStore,
    documents: Sequence[Document],
    collection: str,
    overwrite: bool = False,
) -> BatchResult:
    """Insert ``documents`` in order, each tagged with ``collection``.

    Returns a BatchResult whose inserted and failed URIs together account
    for every document. StoreError propagates unchanged.
    """
    _check_batch(documents, collection)

    result = BatchResult(collection=collection)
    for doc in documents:
        try:
            store.insert(doc, collections=[collection], overwrite=overwrite)
        except DocumentError as e:
            result.failures.append((doc.uri, str(e)))
            logger.warning(f"Error inserting {doc.uri}: {e}")
            continue
        result.inserted.append(doc.uri)
        logger.info(f"Inserted document: {doc.uri} into collection: {collection}")

    return result


def load_all(
    store: FixtureStore,
    batches: Iterable[Batch],
    overwrite: bool = False,
    clear: bool = False,
) -> LoadSummary:
    """Run every batch in sequence and aggregate the results.

    Every batch is checked before the store is touched, so an empty batch
    raises ValueError with nothing cleared or inserted. With ``clear`` the
    batch collections are emptied first. Any StoreError
    is logged and re-raised as LoadError; batches after the failing one are
    not attempted.
    """
    batches = list(batches)
    for documents, collection in batches:
        _check_batch(documents, collection)
    summary = LoadSummary()

    try:
        logger.info("Starting test data loading")

        if clear:
            store.reset(sorted({collection for _, collection in batches}))

        for documents, collection in batches:
            result = insert_batch(store, documents, collection, overwrite=overwrite)
            summary.add(result)
            logger.info(
                f"Successfully inserted {result.inserted_count} documents "
                f"into {collection.upper()} collection"
            )
            if result.failures:
                logger.warning(
                    f"{len(result.failures)} documents failed in {collection}"
                )

        logger.info(f"Total documents inserted: {summary.total_inserted}")
        for collection, inserted in summary.per_collection_inserted.items():
            logger.info(f"{collection.capitalize()} collection: {inserted} documents")
    except StoreError as e:
        logger.error(f"Failure during data loading: {e}")
        raise LoadError(f"Load aborted: {e}") from e

    return summary


def verify_counts(store: FixtureStore, expected: Mapping[str, int]) -> dict[str, int]:
    """Compare collection counts against ``expected``.

    Returns the actual counts; raises VerificationError on any mismatch.
    """
    actual = {}
    mismatches = {}
    for collection, want in expected.items():
        got = store.count(collection)
        actual[collection] = got
        logger.info(f"Verification - {collection} collection count: {got}")
        if got != want:
            mismatches[collection] = (want, got)

    if mismatches:
        raise VerificationError(mismatches)
    return actual
