"""Tests for the structured logging system (wms_kernel/logging_config.py)."""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from wms_kernel.exceptions import ImmutabilityViolationError, OptimisticLockError
from wms_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)
from wms_modules.inbound.models import PurchaseOrderStatus

RECEIVED_AT = datetime(2024, 3, 1, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests, then restore the session setup."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
    configure_logging(level=logging.DEBUG)


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "wms_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("stock_adjusted", extra={"line_count": 3, "status": "ok"})

        record = _parse_log(stream)
        assert record["line_count"] == 3
        assert record["status"] == "ok"

    def test_domain_values_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        order_id = uuid4()
        get_logger("test").info(
            "values",
            extra={
                "order_id": order_id,
                "quantity": Decimal("12.50"),
                "status": PurchaseOrderStatus.SUBMITTED,
            },
        )

        record = _parse_log(stream)
        assert record["order_id"] == str(order_id)
        assert record["quantity"] == "12.50"
        assert record["status"] == "submitted"

    def test_unknown_values_fall_back_to_str(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)

        class Bin:
            def __str__(self):
                return "A-01-01-01"

        get_logger("test").info("placed", extra={"bin": Bin(), "received_at": RECEIVED_AT})

        record = _parse_log(stream)
        assert record["bin"] == "A-01-01-01"
        assert record["received_at"] == "2024-03-01T00:00:00+00:00"

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

    def test_kernel_exception_fields_extracted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise OptimisticLockError("PurchaseOrder", "po-1")
        except OptimisticLockError:
            get_logger("test").error("conflict", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "OPTIMISTIC_LOCK_CONFLICT"
        assert record["exc_entity_type"] == "PurchaseOrder"
        assert record["exc_entity_id"] == "po-1"

    def test_immutability_reason_extracted(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        try:
            raise ImmutabilityViolationError("Receipt", "r-1", "Receipts cannot be deleted")
        except ImmutabilityViolationError:
            get_logger("test").error("blocked", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "IMMUTABILITY_VIOLATION"
        assert record["exc_reason"] == "Receipts cannot be deleted"


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Context fields are attached to every record while bound."""

    def test_set_and_clear(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")

        LogContext.set(aggregate_id="po-1", command="submit_purchase_order")
        logger.info("with_context")
        LogContext.clear()
        logger.info("without_context")

        first, second = _parse_all_logs(stream)
        assert first["aggregate_id"] == "po-1"
        assert first["command"] == "submit_purchase_order"
        assert "aggregate_id" not in second

    def test_bind_restores_previous_values(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        actor = uuid4()

        LogContext.set(command="outer")
        with LogContext.bind(command="inner", actor_id=actor):
            logger.info("inside")
        logger.info("outside")

        inside, outside = _parse_all_logs(stream)
        assert inside["command"] == "inner"
        assert inside["actor_id"] == str(actor)
        assert outside["command"] == "outer"
        assert "actor_id" not in outside

    def test_bind_ignores_none(self):
        with LogContext.bind(command="x", aggregate_id=None):
            assert LogContext.get_all() == {"command": "x"}

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError):
            LogContext.set(request_id="r-1")
        assert LogContext.get_all() == {}


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:

    def test_idempotent(self):
        reset_logging()
        first, _ = _make_handler()
        second, _ = _make_handler()
        configure_logging(handler=first)
        configure_logging(handler=second)
        assert logging.getLogger("wms_kernel").handlers == [first]

    def test_level_filters(self):
        handler, stream = _make_handler()
        configure_logging(level=logging.WARNING, handler=handler)
        logger = get_logger("test")
        logger.info("dropped")
        logger.warning("kept")

        records = _parse_all_logs(stream)
        assert [r["message"] for r in records] == ["kept"]

    def test_does_not_propagate_to_root(self):
        configure_logging(handler=logging.NullHandler())
        assert logging.getLogger("wms_kernel").propagate is False
