"""
Helpers that keep migration bodies re-runnable.

Every helper leaves the store unchanged when it is already in the requested
state, so an apply() built from them can run any number of times.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from pymongo.collection import Collection

from .store import DocumentStore

__all__ = [
    "UpsertSummary",
    "ensure_index",
    "drop_index_if_exists",
    "upsert_documents",
    "ensure_document",
]


@dataclass
class UpsertSummary:
    inserted: int = 0
    replaced: int = 0


def ensure_index(collection: Collection, keys, name: str, **options: Any) -> bool:
    """
    Create an index unless an index with ``name`` already exists.

    Returns:
        True if the index was created
    """
    existing = {idx["name"] for idx in collection.list_indexes()}
    if name in existing:
        return False
    collection.create_index(keys, name=name, **options)
    return True


def drop_index_if_exists(collection: Collection, name: str) -> bool:
    existing = {idx["name"] for idx in collection.list_indexes()}
    if name not in existing:
        return False
    collection.drop_index(name)
    return True


def upsert_documents(
    store: DocumentStore,
    collection: str,
    key_fields: Sequence[str],
    documents: Iterable[dict],
) -> UpsertSummary:
    """Upsert each document by its natural key (the values of ``key_fields``)."""
    summary = UpsertSummary()
    for document in documents:
        key = {field: document[field] for field in key_fields}
        if store.upsert(collection, key, document):
            summary.inserted += 1
        else:
            summary.replaced += 1
    return summary


def ensure_document(store: DocumentStore, collection: str, key: dict, defaults: dict) -> bool:
    """
    Insert ``key`` + ``defaults`` only if no document matches ``key``.

    An existing document is left untouched, so counters and similar state are
    never reset by a re-run.

    Returns:
        True if the document was created
    """
    if store.find_one(collection, key) is not None:
        return False
    store.upsert(collection, key, {**defaults, **key})
    return True
