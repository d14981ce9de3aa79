"""
Pytest fixtures for the field operations ledger test suite.

Provides:
- Structured logging configuration and ``captured_logs``
- Deterministic clock, sequential ids and fixed random source
- In-memory and SQLite-backed stores
- Item builders for lifecycle and history tests
"""

import json
import logging
from datetime import datetime
from io import StringIO

import pytest

from fieldops_config import get_active_config, reset_active_config
from fieldops_engines.lifecycle import Assign, transition
from fieldops_kernel.db.engine import build_engine, create_tables
from fieldops_kernel.db.store import InMemoryStore, SqlAlchemyStore
from fieldops_kernel.domain.clock import DeterministicClock
from fieldops_kernel.domain.identity import FixedRandomSource, SequentialIdAllocator
from fieldops_kernel.domain.inventory import new_inventory_item
from fieldops_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from sqlalchemy.orm import sessionmaker

FIXED_NOW = datetime(2024, 3, 15, 10, 30, 0)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture fieldops logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            service.import_csv(text)
            logs = captured_logs()
            assert any(r["message"] == "import_batch_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("fieldops")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Ports
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Clock fixed at FIXED_NOW."""
    return DeterministicClock(FIXED_NOW)


@pytest.fixture
def id_allocator():
    return SequentialIdAllocator(prefix="id-")


@pytest.fixture
def random_source():
    return FixedRandomSource(0)


@pytest.fixture
def config():
    reset_active_config()
    yield get_active_config(reload=True)
    reset_active_config()


# =============================================================================
# Stores
# =============================================================================


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def sqlite_session_factory():
    engine = build_engine("sqlite:///:memory:")
    create_tables(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def sqlite_store(sqlite_session_factory, deterministic_clock):
    return SqlAlchemyStore(sqlite_session_factory, deterministic_clock)


# =============================================================================
# Item builders
# =============================================================================


@pytest.fixture
def make_item():
    """Build an AVAILABLE item with an intake entry."""

    def _make(item_id="item-1", name="Drill-1", serial="SN-001", now=FIXED_NOW):
        return new_inventory_item(
            item_id=item_id,
            name=name,
            serial_number=serial,
            log_entry_id=f"log-{item_id}",
            now=now,
            actor="System",
            reason="initial intake",
        )

    return _make


@pytest.fixture
def assign_item(id_allocator):
    """Assign an item to a subject at ``now`` and return the new item."""

    def _assign(item, subject_id="CL-1", label="Acme", receiver="Bob", issuer="Alice", now=FIXED_NOW):
        result = transition(
            item=item,
            action=Assign(subject_id, label, receiver, issuer),
            actor_name=issuer,
            now=now,
            id_allocator=id_allocator,
        )
        assert result.error is None
        return result.item

    return _assign
