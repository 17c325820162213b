"""doc-fixtures entry point."""

import json
import sys

from loguru import logger


def _configure_logging() -> None:
    from doc_fixtures.config import settings

    logger.remove()
    logger.add(sys.stderr, level=settings.log_level.upper())


def _open_store():
    from doc_fixtures.config import settings
    from doc_fixtures.store import FixtureStore

    return FixtureStore(settings.get_db_path())


def _load() -> int:
    """Load the reference fixtures, verify counts, and run the sample queries.

    Run it against the configured database:
        FIXTURES_DB_PATH=./fixtures.db doc-fixtures load

    Returns the process exit status.
    """
    from doc_fixtures.config import settings
    from doc_fixtures.errors import LoadError, VerificationError
    from doc_fixtures.fixtures import (
        EXPECTED_COUNTS,
        SAMPLE_QUERIES,
        load_reference_fixtures,
    )
    from doc_fixtures.loader import verify_counts

    with _open_store() as store:
        try:
            summary = load_reference_fixtures(
                store,
                overwrite=settings.fixtures_overwrite,
                clear=settings.fixtures_clear,
            )
            verify_counts(store, EXPECTED_COUNTS)
        except (LoadError, VerificationError) as e:
            print(f"Load failed: {e}", file=sys.stderr)
            return 1

        print(f"Total documents inserted: {summary.total_inserted}")
        for collection, inserted in summary.per_collection_inserted.items():
            print(f"  {collection}: {inserted}")
        for uri, message in summary.failures:
            print(f"  failed {uri}: {message}")

        print("Sample queries:")
        for i, (description, query) in enumerate(SAMPLE_QUERIES, 1):
            hits = store.search(**query)
            print(f"  {i}. {description}: {len(hits)} documents")

    return 0


def _reset() -> int:
    from doc_fixtures.fixtures import EXPECTED_COUNTS

    with _open_store() as store:
        removed = store.reset(list(EXPECTED_COUNTS))
    print(f"Removed {removed} documents")
    return 0


def _count(collections: list[str]) -> int:
    with _open_store() as store:
        if collections:
            counts = {name: store.count(name) for name in collections}
        else:
            counts = store.collections()
    for name, total in counts.items():
        print(f"{name}: {total}")
    return 0


def _show(uri: str) -> int:
    with _open_store() as store:
        doc = store.get(uri)
    if doc is None:
        print(f"Not found: {uri}", file=sys.stderr)
        return 1
    print(
        json.dumps(
            {
                "uri": doc.uri,
                "collections": sorted(doc.collections),
                "permissions": [p.to_dict() for p in doc.permissions],
                "content": doc.content,
            },
            indent=2,
            ensure_ascii=False,
        )
    )
    return 0


def _cli() -> None:
    """CLI dispatcher: load (default), reset, count, or show subcommand."""
    from doc_fixtures.errors import StoreError

    _configure_logging()
    command = sys.argv[1] if len(sys.argv) >= 2 else "load"

    try:
        if command == "reset":
            status = _reset()
        elif command == "count":
            status = _count(sys.argv[2:])
        elif command == "show":
            if len(sys.argv) < 3:
                print("usage: doc-fixtures show <uri>", file=sys.stderr)
                status = 2
            else:
                status = _show(sys.argv[2])
        else:
            status = _load()
    except StoreError as e:
        print(f"Store error: {e}", file=sys.stderr)
        status = 1

    if status:
        sys.exit(status)


if __name__ == "__main__":
    _cli()
