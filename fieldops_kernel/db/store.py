"""
Store adapters: flat, synchronous, whole-collection persistence.

Contract (every adapter):
    ``get_all(collection)`` returns every entity of a collection as a list of
    plain dicts (an unknown collection is empty).  ``set_all(collection,
    entities)`` replaces the collection wholesale.  There are no partial
    writes and no transactions spanning collections.

Concurrency:
    Adapters take no locks and carry no version token.  Two writers that
    interleave read-modify-write cycles on the same collection silently
    clobber each other (last write wins).  The ledger assumes a single
    active writer per session; callers needing more must serialise access
    themselves.
"""

from __future__ import annotations

import copy
from typing import Any, Protocol, runtime_checkable

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from fieldops_kernel.db.engine import session_scope
from fieldops_kernel.db.models import CollectionSnapshot
from fieldops_kernel.domain.clock import Clock, SystemClock
from fieldops_kernel.logging_config import get_logger

logger = get_logger("db.store")

INVENTORY_COLLECTION = "inventory"
CLIENT_COLLECTION = "clients"

Entity = dict[str, Any]


@runtime_checkable
class StoreAdapter(Protocol):
    """Get-all / set-all persistence per named collection."""

    def get_all(self, collection: str) -> list[Entity]:
        """Return a private copy of every entity in ``collection``."""
        ...

    def set_all(self, collection: str, entities: list[Entity]) -> None:
        """Replace ``collection`` with ``entities``."""
        ...


class InMemoryStore:
    """
    Dict-backed adapter for tests and embedding.

    Copies on read and on write so callers can never mutate stored state
    through an alias.
    """

    def __init__(self, initial: dict[str, list[Entity]] | None = None):
        self._collections: dict[str, list[Entity]] = copy.deepcopy(initial or {})

    def get_all(self, collection: str) -> list[Entity]:
        return copy.deepcopy(self._collections.get(collection, []))

    def set_all(self, collection: str, entities: list[Entity]) -> None:
        self._collections[collection] = copy.deepcopy(list(entities))
        logger.debug(
            "collection_written",
            extra={"collection": collection, "entity_count": len(entities)},
        )

    def collections(self) -> list[str]:
        return sorted(self._collections)


class SqlAlchemyStore:
    """
    Adapter persisting each collection as one JSON row.

    Each call opens its own ``session_scope``: reads and writes are
    individually atomic, nothing more.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        clock: Clock | None = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or SystemClock()

    def get_all(self, collection: str) -> list[Entity]:
        with session_scope(self._session_factory) as session:
            snapshot = session.get(CollectionSnapshot, collection)
            if snapshot is None:
                return []
            return copy.deepcopy(list(snapshot.payload))

    def set_all(self, collection: str, entities: list[Entity]) -> None:
        payload = copy.deepcopy(list(entities))
        with session_scope(self._session_factory) as session:
            snapshot = session.get(CollectionSnapshot, collection)
            if snapshot is None:
                snapshot = CollectionSnapshot(name=collection)
                session.add(snapshot)
            snapshot.payload = payload
            snapshot.entity_count = len(payload)
            snapshot.updated_at = self._clock.now_utc()
        logger.info(
            "collection_written",
            extra={"collection": collection, "entity_count": len(payload)},
        )

    def collections(self) -> list[str]:
        with session_scope(self._session_factory) as session:
            return list(session.scalars(select(CollectionSnapshot.name).order_by(CollectionSnapshot.name)))
