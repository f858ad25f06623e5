"""
SQLAlchemy implementation of the collection/document store.

Every operation runs in its own session and commits on its own, so a write
is atomic per document and nothing spans two documents.
"""

import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vetclinic.core.exceptions import NotFoundError, StoreError
from vetclinic.db.base import Document
from vetclinic.db.session import SessionLocal
from vetclinic.domain.interfaces import IDocumentStore

logger = logging.getLogger(__name__)


def _matches(data: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    return all(data.get(key) == value for key, value in filters.items())


def _json_equals(key: str, value: Any):
    """SQL clause comparing one JSON field, or None when it must be checked in Python."""
    element = Document.data[key]
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return element.as_boolean() == value
    if isinstance(value, str):
        return element.as_string() == value
    if isinstance(value, int):
        return element.as_integer() == value
    return None


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    # SQLite hands timestamps back without an offset; they were written in UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _to_record(document: Document) -> Dict[str, Any]:
    record = dict(document.data or {})
    record["id"] = document.id
    record["created_at"] = _isoformat(document.created_at)
    record["updated_at"] = _isoformat(document.updated_at)
    return record


class SqlDocumentStore(IDocumentStore):
    """Document store persisted in the ``documents`` table."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _session(self, operation: str, collection: str):
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error(
                f"Store {operation} failed",
                extra={"context": {"collection": collection, "error": str(exc)}},
                exc_info=True,
            )
            raise StoreError(f"Store {operation} on {collection} failed: {exc}") from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def query(
        self, collection: str, filters: Optional[Mapping[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        filters = filters or {}
        stmt = select(Document).where(Document.collection == collection)
        for key, value in filters.items():
            clause = _json_equals(key, value)
            if clause is not None:
                stmt = stmt.where(clause)
        stmt = stmt.order_by(Document.created_at, Document.id)

        with self._session("query", collection) as session:
            documents = session.scalars(stmt).all()
            # Filters without a SQL form (None, floats, nested values) are applied here
            return [_to_record(doc) for doc in documents if _matches(doc.data, filters)]

    def get(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        with self._session("get", collection) as session:
            document = session.get(Document, record_id)
            if document is None or document.collection != collection:
                return None
            return _to_record(document)

    def create(self, collection: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        payload = {k: v for k, v in data.items() if k not in ("id", "created_at", "updated_at")}
        with self._session("create", collection) as session:
            document = Document(
                id=uuid.uuid4().hex,
                collection=collection,
                data=payload,
                created_at=now,
                updated_at=now,
            )
            session.add(document)
            session.flush()
            record = _to_record(document)
        logger.debug(
            "Document created",
            extra={"context": {"collection": collection, "id": record["id"]}},
        )
        return record

    def update(
        self, collection: str, record_id: str, partial: Mapping[str, Any]
    ) -> None:
        with self._session("update", collection) as session:
            document = session.get(Document, record_id)
            if document is None or document.collection != collection:
                raise NotFoundError.for_resource(collection, record_id)
            document.data.update(
                {k: v for k, v in partial.items() if k not in ("id", "created_at", "updated_at")}
            )
            document.updated_at = datetime.now(timezone.utc)

    def delete(self, collection: str, record_id: str) -> None:
        with self._session("delete", collection) as session:
            document = session.get(Document, record_id)
            if document is not None and document.collection == collection:
                session.delete(document)
