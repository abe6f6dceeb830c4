"""Document store - the minimal MongoDB surface the engine depends on."""

from __future__ import annotations

from typing import Any, Dict, Iterator, Optional, Protocol, Sequence

from pymongo import ASCENDING
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import OperationFailure

__all__ = ["DocumentStore", "MongoDocumentStore", "SortSpec"]

SortSpec = Sequence[tuple[str, int]]


class DocumentStore(Protocol):
    """
    Ordered document store offering find-by-key, upsert-by-key and bulk scan.

    Keys are equality filters on one or more fields. The runner and the stage
    migrator depend only on this interface, not on a query language.
    """

    def find_one(self, collection: str, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ...

    def scan(
        self,
        collection: str,
        query: Optional[Dict[str, Any]] = None,
        sort: Optional[SortSpec] = None,
    ) -> Iterator[Dict[str, Any]]:
        ...

    def upsert(self, collection: str, key: Dict[str, Any], document: Dict[str, Any]) -> bool:
        ...

    def update(self, collection: str, key: Dict[str, Any], fields: Dict[str, Any]) -> bool:
        ...

    def delete(self, collection: str, key: Dict[str, Any]) -> int:
        ...

    def count(self, collection: str, query: Optional[Dict[str, Any]] = None) -> int:
        ...

    def ensure_unique_index(self, collection: str, fields: Sequence[str], name: str) -> None:
        ...


class MongoDocumentStore:
    """
    DocumentStore backed by a pymongo Database.

    Documents returned by ``scan`` keep their ``_id`` so callers can write
    them back by identity; ``find_one`` strips it.
    """

    def __init__(self, db: Database):
        self._db = db

    @property
    def database(self) -> Database:
        return self._db

    def _get_collection(self, name: str) -> Collection:
        return self._db[name]

    @staticmethod
    def _strip_object_id(doc: Dict) -> Dict:
        stripped = dict(doc)
        stripped.pop("_id", None)
        return stripped

    def find_one(self, collection: str, key: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        document = self._get_collection(collection).find_one(key)
        if not document:
            return None
        return self._strip_object_id(document)

    def scan(
        self,
        collection: str,
        query: Optional[Dict[str, Any]] = None,
        sort: Optional[SortSpec] = None,
    ) -> Iterator[Dict[str, Any]]:
        cursor = self._get_collection(collection).find(query or {})
        if sort:
            cursor = cursor.sort(list(sort))
        for document in cursor:
            yield document

    def upsert(self, collection: str, key: Dict[str, Any], document: Dict[str, Any]) -> bool:
        """
        Replace the document matching ``key`` or insert it.

        Returns:
            True if a new document was inserted
        """
        body = {**document, **key}
        body.pop("_id", None)
        result = self._get_collection(collection).replace_one(key, body, upsert=True)
        return result.upserted_id is not None

    def update(self, collection: str, key: Dict[str, Any], fields: Dict[str, Any]) -> bool:
        """
        Set ``fields`` on the document matching ``key``.

        Returns:
            True if a document matched
        """
        result = self._get_collection(collection).update_one(key, {"$set": fields})
        return result.matched_count > 0

    def delete(self, collection: str, key: Dict[str, Any]) -> int:
        result = self._get_collection(collection).delete_one(key)
        return result.deleted_count

    def count(self, collection: str, query: Optional[Dict[str, Any]] = None) -> int:
        return self._get_collection(collection).count_documents(query or {})

    def ensure_unique_index(self, collection: str, fields: Sequence[str], name: str) -> None:
        """Create a unique index on ``fields`` unless one named ``name`` exists."""
        target = self._get_collection(collection)
        existing = {idx["name"] for idx in target.list_indexes()}
        if name in existing:
            return
        try:
            target.create_index(
                [(field, ASCENDING) for field in fields], name=name, unique=True
            )
        except OperationFailure as e:
            # An equivalent index under a different name already exists
            if e.code != 85:
                raise
