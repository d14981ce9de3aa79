"""Persistence layer - engine, ORM snapshot model, and store adapters."""

from fieldops_kernel.db.base import Base
from fieldops_kernel.db.engine import (
    build_engine,
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)
from fieldops_kernel.db.models import CollectionSnapshot
from fieldops_kernel.db.store import (
    CLIENT_COLLECTION,
    INVENTORY_COLLECTION,
    InMemoryStore,
    SqlAlchemyStore,
    StoreAdapter,
)

__all__ = [
    "Base",
    "CLIENT_COLLECTION",
    "CollectionSnapshot",
    "INVENTORY_COLLECTION",
    "InMemoryStore",
    "SqlAlchemyStore",
    "StoreAdapter",
    "build_engine",
    "create_tables",
    "get_engine",
    "get_session",
    "init_engine_from_url",
    "session_scope",
]
