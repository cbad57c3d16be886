"""Document store access.

Builders never talk to ``pymongo`` directly. They receive a ``DocumentStore``
and open one ``snapshot()`` per report; the snapshot owns a client session
that is always ended when the ``with`` block exits. The process keeps a single
``MongoClient`` whose pool serves every concurrent request.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from functools import lru_cache
from typing import Any, Iterator, Mapping, Protocol

from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, PyMongoError

from ..core.errors import ReportError, StoreQueryError, StoreUnavailableError
from ..core.settings import get_settings

LOGGER = logging.getLogger(__name__)

Document = dict[str, Any]


class StoreReader(Protocol):
    def find(self, collection: str, query: Mapping[str, Any] | None = None) -> list[Document]:
        ...


class DocumentStore(Protocol):
    def snapshot(self): ...  # context manager yielding a ``StoreReader``

    def ping(self) -> bool:
        ...


def translate_error(exc: PyMongoError) -> ReportError:
    """Map a driver exception onto the report error taxonomy."""

    if isinstance(exc, ConnectionFailure):
        return StoreUnavailableError(f"Database non raggiungibile: {exc}")
    return StoreQueryError(f"Errore durante la lettura dal database: {exc}")


class MongoReader:
    def __init__(self, database, session) -> None:
        self._database = database
        self._session = session

    def find(self, collection: str, query: Mapping[str, Any] | None = None) -> list[Document]:
        try:
            cursor = self._database[collection].find(dict(query or {}), session=self._session)
            return list(cursor)
        except PyMongoError as exc:
            raise translate_error(exc) from exc


class MongoDocumentStore:
    def __init__(
        self,
        uri: str,
        database: str,
        *,
        max_pool_size: int = 10,
        server_selection_timeout_ms: int = 5000,
        client: MongoClient | None = None,
    ) -> None:
        self._client = client or MongoClient(
            uri,
            maxPoolSize=max_pool_size,
            serverSelectionTimeoutMS=server_selection_timeout_ms,
        )
        self._database = self._client[database]

    @contextmanager
    def snapshot(self) -> Iterator[MongoReader]:
        try:
            session = self._client.start_session()
        except PyMongoError as exc:
            raise translate_error(exc) from exc
        try:
            yield MongoReader(self._database, session)
        finally:
            session.end_session()

    def ping(self) -> bool:
        try:
            self._database.command("ping")
        except PyMongoError as exc:
            LOGGER.warning("Database ping failed: %s", exc)
            return False
        return True

    def close(self) -> None:
        self._client.close()


@lru_cache(maxsize=1)
def _default_store() -> MongoDocumentStore:
    settings = get_settings()
    return MongoDocumentStore(
        settings.mongodb_uri,
        settings.DATABASE_NAME,
        max_pool_size=settings.MONGO_MAX_POOL_SIZE,
        server_selection_timeout_ms=settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
    )


def get_store() -> DocumentStore:
    """FastAPI dependency returning the process-wide store."""

    return _default_store()


def close_store() -> None:
    if _default_store.cache_info().currsize:
        _default_store().close()
        _default_store.cache_clear()
