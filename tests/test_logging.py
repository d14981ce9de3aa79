"""Tests for the structured logging system (fieldops_kernel/logging_config.py)."""

import json
import logging
from io import StringIO

import pytest

from fieldops_engines.tracer import compute_input_fingerprint, traced_engine
from fieldops_kernel.domain.ledger import InventoryStatus
from fieldops_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


def _parse_log(stream: StringIO) -> dict:
    return _parse_all_logs(stream)[0]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "fieldops.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info(
            "transition_applied",
            extra={"item_id": "item-1", "new_status": InventoryStatus.ASSIGNED},
        )

        record = _parse_log(stream)
        assert record["item_id"] == "item-1"
        assert record["new_status"] == "Assigned"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        with LogContext.bind(actor="Alice", batch_id="b-1"):
            get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["actor"] == "Alice"
        assert record["batch_id"] == "b-1"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("test").error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_fieldops_exception_fields_extracted(self):
        from fieldops_kernel.exceptions import ForbiddenTransitionError

        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise ForbiddenTransitionError("item-1", "Available", "retire", "Bob")
        except ForbiddenTransitionError:
            get_logger("test").error("transition_failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "FORBIDDEN"
        assert record["exc_item_id"] == "item-1"
        assert record["exc_actor"] == "Bob"


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:

    def test_bind_restores_previous_values(self):
        with LogContext.bind(actor="outer"):
            with LogContext.bind(actor="inner", item_id="item-1"):
                assert LogContext.get_all() == {"actor": "inner", "item_id": "item-1"}
            assert LogContext.get_all() == {"actor": "outer"}
        assert LogContext.get_all() == {}

    def test_bind_ignores_none(self):
        with LogContext.bind(actor=None, collection="inventory"):
            assert LogContext.get_all() == {"collection": "inventory"}

    def test_clear(self):
        with LogContext.bind(actor="a", batch_id="b-1"):
            LogContext.clear()
            assert LogContext.get_all() == {}

    def test_unknown_field_rejected(self):
        with pytest.raises(KeyError):
            with LogContext.bind(request_id="r-1"):
                pass


class TestConfigureLogging:

    def test_idempotent(self):
        handler, _ = _make_handler()
        configure_logging(handler=handler)
        configure_logging(handler=handler)
        assert len(logging.getLogger("fieldops").handlers) == 1

    def test_reset_clears_handlers(self):
        handler, _ = _make_handler()
        configure_logging(handler=handler)
        reset_logging()
        assert logging.getLogger("fieldops").handlers == []


# ---------------------------------------------------------------------------
# Engine tracer
# ---------------------------------------------------------------------------


class TestEngineTracer:

    def test_trace_record_emitted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)

        @traced_engine("sample", "2.1", fingerprint_fields=("value",))
        def double(*, value):
            return value * 2

        assert double(value=21) == 42
        record = _parse_log(stream)
        assert record["message"] == "FIELDOPS_ENGINE_TRACE"
        assert record["engine_name"] == "sample"
        assert record["engine_version"] == "2.1"
        assert len(record["input_fingerprint"]) == 16

    def test_fingerprint_is_stable(self):
        a = compute_input_fingerprint(("actor_name", "is_privileged"), {"actor_name": "A", "is_privileged": False})
        b = compute_input_fingerprint(("actor_name", "is_privileged"), {"is_privileged": False, "actor_name": "A"})
        c = compute_input_fingerprint(("actor_name", "is_privileged"), {"actor_name": "B", "is_privileged": False})
        assert a == b
        assert a != c

    def test_fingerprint_canonicalizes_enums(self):
        by_enum = compute_input_fingerprint(("status",), {"status": InventoryStatus.RETIRED})
        by_value = compute_input_fingerprint(("status",), {"status": "Retired"})
        assert by_enum == by_value
