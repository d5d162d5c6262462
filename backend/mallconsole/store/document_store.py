"""Document store adapter.

A small collection/document API over the ``documents`` table. The console
treats it as a remote store: every call is a round-trip, nothing is cached,
and failures surface as ``DocumentStoreError`` with the backend message.

Usage:
    store = DocumentStore(async_session_factory)
    doc_id = await store.collection("shops").add({"name": "Zara"})
    shops = await store.collection("shops").where("floor", "Ground").get_all()
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from mallconsole.models.document import Document

logger = structlog.get_logger(__name__)


class _ServerTimestamp:
    """Sentinel replaced by the store's clock at write time."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


class DocumentStoreError(Exception):
    """Raised for any failure talking to the document store."""


def _encode(value: Any, now: datetime) -> Any:
    """Convert a field value into its JSON storage form."""
    if value is SERVER_TIMESTAMP:
        return now.isoformat()
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_encode(v, now) for v in value]
    if isinstance(value, dict):
        return {k: _encode(v, now) for k, v in value.items()}
    return value


def _snapshot(doc: Document) -> Dict[str, Any]:
    return {"id": doc.id, **(doc.data or {})}


def _field_clause(field: str, value: Any):
    """Equality clause on a JSON field, typed after the compared value."""
    element = Document.data[field]
    if isinstance(value, bool):
        return element.as_boolean() == value
    if isinstance(value, int):
        return element.as_integer() == value
    if isinstance(value, float):
        return element.as_float() == value
    return element.as_string() == str(value)


class Query:
    """Equality-filtered view of a collection. Filters combine with AND."""

    def __init__(
        self,
        store: "DocumentStore",
        collection: str,
        filters: Tuple[Tuple[str, Any], ...] = (),
    ):
        self._store = store
        self.collection = collection
        self.filters = filters

    def where(self, field: str, value: Any) -> "Query":
        return Query(self._store, self.collection, self.filters + ((field, value),))

    async def get_all(self) -> List[Dict[str, Any]]:
        """Fetch every matching document in storage order."""
        stmt = select(Document).where(Document.collection == self.collection)
        for field, value in self.filters:
            stmt = stmt.where(_field_clause(field, value))
        stmt = stmt.order_by(Document.seq)

        async with self._store.session() as session:
            result = await session.execute(stmt)
            docs = [_snapshot(d) for d in result.scalars().all()]

        logger.debug(
            "documents_fetched",
            collection=self.collection,
            filters=[f for f, _ in self.filters],
            count=len(docs),
        )
        return docs


class CollectionRef(Query):
    """A named collection: unfiltered query plus document writes."""

    def __init__(self, store: "DocumentStore", collection: str):
        super().__init__(store, collection)

    async def _find(self, session: AsyncSession, doc_id: str) -> Optional[Document]:
        result = await session.execute(
            select(Document).where(
                Document.collection == self.collection,
                Document.id == doc_id,
            )
        )
        return result.scalar_one_or_none()

    async def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """Fetch one document, or None if it does not exist."""
        async with self._store.session() as session:
            doc = await self._find(session, doc_id)
            return _snapshot(doc) if doc else None

    async def add(self, fields: Dict[str, Any]) -> str:
        """Insert a new document and return its store-assigned id."""
        now = datetime.now(timezone.utc)
        async with self._store.session() as session:
            doc = Document(
                collection=self.collection,
                data=_encode(fields, now),
                created_at=now,
                updated_at=now,
            )
            session.add(doc)
            await session.commit()
            logger.debug("document_added", collection=self.collection, doc_id=doc.id)
            return doc.id

    async def set(self, doc_id: str, fields: Dict[str, Any]) -> None:
        """Create or fully overwrite the document with the given id."""
        now = datetime.now(timezone.utc)
        async with self._store.session() as session:
            doc = await self._find(session, doc_id)
            if doc is None:
                doc = Document(id=doc_id, collection=self.collection, created_at=now)
                session.add(doc)
            doc.data = _encode(fields, now)
            doc.updated_at = now
            await session.commit()

    async def update(self, doc_id: str, fields: Dict[str, Any]) -> None:
        """Merge fields into an existing document.

        Raises:
            DocumentStoreError: If the document does not exist
        """
        now = datetime.now(timezone.utc)
        async with self._store.session() as session:
            doc = await self._find(session, doc_id)
            if doc is None:
                raise DocumentStoreError(f"No document to update: {self.collection}/{doc_id}")
            # Reassign so the JSON column is flagged dirty
            doc.data = {**(doc.data or {}), **_encode(fields, now)}
            doc.updated_at = now
            await session.commit()

    async def delete(self, doc_id: str) -> None:
        """Delete a document. Deleting a missing id is a no-op."""
        async with self._store.session() as session:
            doc = await self._find(session, doc_id)
            if doc is not None:
                await session.delete(doc)
                await session.commit()


class DocumentStore:
    """Entry point to the document store."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    def collection(self, name: str) -> CollectionRef:
        return CollectionRef(self, name)

    @property
    def engine(self) -> AsyncEngine:
        """Engine the store's sessions are bound to."""
        return self._session_factory.kw["bind"]

    def session(self) -> "_StoreSession":
        return _StoreSession(self._session_factory)


class _StoreSession:
    """Session context that rolls back and re-raises backend failures as DocumentStoreError."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._factory = session_factory
        self._session: Optional[AsyncSession] = None

    async def __aenter__(self) -> AsyncSession:
        try:
            self._session = self._factory()
        except SQLAlchemyError as e:
            raise DocumentStoreError(str(e)) from e
        return self._session

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        session = self._session
        try:
            if exc is not None:
                await session.rollback()
        finally:
            await session.close()
        if isinstance(exc, SQLAlchemyError):
            logger.error("document_store_failure", error=str(exc))
            raise DocumentStoreError(str(exc)) from exc
        return False
