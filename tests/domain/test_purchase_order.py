"""
Tests for the PurchaseOrder aggregate: creation, lines, lifecycle and
receiving.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from wms_kernel.domain.result import ErrorKind
from wms_kernel.domain.validation import NIL_UUID
from wms_kernel.domain.values import Money, Quantity
from wms_modules.inbound.models import (
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseOrderStatus,
)


def qty(value) -> Quantity:
    return Quantity(Decimal(str(value)))


def usd(value) -> Money:
    return Money(Decimal(str(value)), "USD")


def make_order(*quantities, order_number="po-1001") -> PurchaseOrder:
    order = PurchaseOrder.create(order_number, "Acme").value
    for q in quantities:
        assert order.add_line(uuid4(), qty(q), usd("12.50")).is_success
    return order


class TestPurchaseOrderCreate:
    """PurchaseOrder.create normalizes and validates header fields."""

    def test_creates_draft_with_normalized_number(self):
        result = PurchaseOrder.create("  po-1001 ", "  Acme ")
        assert result.is_success
        order = result.value
        assert order.order_number == "PO-1001"
        assert order.supplier_name == "Acme"
        assert order.status is PurchaseOrderStatus.DRAFT
        assert order.lines == ()

    def test_trims_notes(self):
        order = PurchaseOrder.create("PO-1", "Acme", notes="  rush  ").value
        assert order.notes == "rush"

    @pytest.mark.parametrize("number", ["", "   ", None])
    def test_order_number_required(self, number):
        result = PurchaseOrder.create(number, "Acme")
        assert result.is_failure
        assert result.error.code == "PurchaseOrder.OrderNumber"

    def test_order_number_length_limit(self):
        assert PurchaseOrder.create("X" * 50, "Acme").is_success
        result = PurchaseOrder.create("X" * 51, "Acme")
        assert result.error.code == "PurchaseOrder.OrderNumber"

    def test_supplier_required_and_bounded(self):
        assert PurchaseOrder.create("PO-1", " ").error.code == "PurchaseOrder.SupplierName"
        assert PurchaseOrder.create("PO-1", "S" * 201).error.code == "PurchaseOrder.SupplierName"
        assert PurchaseOrder.create("PO-1", "S" * 200).is_success


class TestPurchaseOrderLines:
    """add_line numbering, duplicate products and line validation."""

    def test_lines_are_numbered_in_order(self):
        order = make_order(1, 2, 3)
        assert [line.line_number for line in order.lines] == [1, 2, 3]
        assert all(line.purchase_order_id == order.id for line in order.lines)
        assert all(line.received_quantity.is_zero for line in order.lines)

    def test_duplicate_product_is_a_conflict(self):
        order = make_order()
        product = uuid4()
        assert order.add_line(product, qty(1), usd(1)).is_success
        result = order.add_line(product, qty(2), usd(1))
        assert result.is_failure
        assert result.error.kind is ErrorKind.CONFLICT
        assert result.error.code == "PurchaseOrderLine.ProductId"
        assert len(order.lines) == 1

    def test_zero_quantity_is_rejected(self):
        result = make_order().add_line(uuid4(), qty(0), usd(1))
        assert result.error.code == "PurchaseOrderLine.Quantity"

    def test_nil_product_is_rejected(self):
        result = make_order().add_line(NIL_UUID, qty(1), usd(1))
        assert result.error.code == "PurchaseOrderLine.ProductId"

    def test_cannot_add_to_cancelled_order(self):
        order = make_order(1)
        order.cancel()
        result = order.add_line(uuid4(), qty(1), usd(1))
        assert result.error.code == "PurchaseOrder.Status"

    def test_lines_tuple_is_a_snapshot(self):
        order = make_order(1)
        snapshot = order.lines
        order.add_line(uuid4(), qty(1), usd(1))
        assert len(snapshot) == 1

    def test_total_cost(self):
        order = make_order(20, 4)
        assert order.total_cost().value == usd("300.00")

    def test_total_cost_mixed_currencies_fails(self):
        order = make_order(1)
        order.add_line(uuid4(), qty(1), Money(Decimal("1"), "EUR"))
        assert order.total_cost().error.code == "Money.CurrencyMismatch"


class TestPurchaseOrderLifecycle:
    """submit and cancel follow the workflow."""

    def test_submit_from_draft(self):
        order = make_order(1)
        assert order.submit().is_success
        assert order.status is PurchaseOrderStatus.SUBMITTED

    def test_submit_twice_fails(self):
        order = make_order(1)
        order.submit()
        result = order.submit()
        assert result.error.code == "PurchaseOrder.Status"
        assert order.status is PurchaseOrderStatus.SUBMITTED

    @pytest.mark.parametrize("prepare", [
        lambda o: None,
        lambda o: o.submit(),
        lambda o: o.apply_receipt([(o.lines[0].id, qty(1))]),
    ])
    def test_cancel_from_open_states(self, prepare):
        order = make_order(5)
        prepare(order)
        assert order.cancel().is_success
        assert order.status is PurchaseOrderStatus.CANCELLED

    def test_cancel_twice_fails(self):
        order = make_order(1)
        order.cancel()
        assert order.cancel().error.code == "PurchaseOrder.Status"

    def test_cannot_cancel_fully_received(self):
        order = make_order(1)
        order.apply_receipt([(order.lines[0].id, qty(1))])
        result = order.cancel()
        assert result.error.code == "PurchaseOrder.Status"
        assert order.status is PurchaseOrderStatus.FULLY_RECEIVED

    def test_submit_cancelled_fails(self):
        order = make_order(1)
        order.cancel()
        assert order.submit().is_failure


class TestApplyReceipt:
    """Receiving accumulates per line and derives the status."""

    def test_partial_then_full(self):
        """Order 20, receive 5 then 15, then one more is rejected."""
        order = make_order(20)
        line = order.lines[0]
        order.submit()

        assert order.apply_receipt([(line.id, qty(5))]).is_success
        assert order.status is PurchaseOrderStatus.PARTIALLY_RECEIVED
        assert line.received_quantity == qty(5)

        assert order.apply_receipt([(line.id, qty(15))]).is_success
        assert order.status is PurchaseOrderStatus.FULLY_RECEIVED
        assert line.received_quantity == qty(20)

        result = order.apply_receipt([(line.id, qty(1))])
        assert result.is_failure
        assert result.error.code == "PurchaseOrder.Status"
        assert line.received_quantity == qty(20)

    def test_receiving_from_draft_is_allowed(self):
        order = make_order(10)
        assert order.apply_receipt([(order.lines[0].id, qty(3))]).is_success
        assert order.status is PurchaseOrderStatus.PARTIALLY_RECEIVED

    def test_status_is_fully_received_only_when_every_line_is(self):
        order = make_order(10, 4)
        first, second = order.lines
        order.apply_receipt([(first.id, qty(10))])
        assert order.status is PurchaseOrderStatus.PARTIALLY_RECEIVED
        order.apply_receipt([(second.id, qty(4))])
        assert order.status is PurchaseOrderStatus.FULLY_RECEIVED
        assert order.is_fully_received

    def test_over_receive_is_rejected(self):
        order = make_order(10)
        line = order.lines[0]
        result = order.apply_receipt([(line.id, qty(11))])
        assert result.error.code == "PurchaseOrderLine.OverReceive"
        assert line.received_quantity.is_zero
        assert order.status is PurchaseOrderStatus.DRAFT

    def test_zero_receive_is_rejected(self):
        order = make_order(10)
        result = order.apply_receipt([(order.lines[0].id, qty(0))])
        assert result.error.code == "PurchaseOrderLine.QuantityReceived"

    def test_unknown_line_is_not_found(self):
        order = make_order(10)
        result = order.apply_receipt([(uuid4(), qty(1))])
        assert result.error.kind is ErrorKind.NOT_FOUND
        assert result.error.code == "PurchaseOrderLine.Id"

    def test_duplicate_line_in_one_receipt(self):
        order = make_order(10)
        line_id = order.lines[0].id
        result = order.apply_receipt([(line_id, qty(1)), (line_id, qty(1))])
        assert result.error.code == "PurchaseOrder.ReceiptLines"
        assert order.lines[0].received_quantity.is_zero

    def test_empty_receipt(self):
        assert make_order(1).apply_receipt([]).error.code == "PurchaseOrder.ReceiptLines"

    def test_failure_on_later_line_leaves_earlier_lines_untouched(self):
        order = make_order(10, 2)
        first, second = order.lines
        result = order.apply_receipt([(first.id, qty(4)), (second.id, qty(3))])
        assert result.is_failure
        assert first.received_quantity.is_zero
        assert second.received_quantity.is_zero
        assert order.status is PurchaseOrderStatus.DRAFT

    def test_cancelled_order_rejects_receipts(self):
        order = make_order(10)
        order.cancel()
        result = order.apply_receipt([(order.lines[0].id, qty(1))])
        assert result.error.code == "PurchaseOrder.Status"


class TestPurchaseOrderLine:
    """Line-level receive guard."""

    def test_receive_accumulates(self):
        line = PurchaseOrderLine.create(uuid4(), uuid4(), qty(10), usd(1)).value
        line.receive(qty(4))
        line.receive(qty(6))
        assert line.is_fully_received
        assert line.remaining_quantity.is_zero

    def test_receive_beyond_ordered_leaves_line_unchanged(self):
        line = PurchaseOrderLine.create(uuid4(), uuid4(), qty(10), usd(1)).value
        line.receive(qty(9))
        assert line.receive(qty(2)).is_failure
        assert line.received_quantity == qty(9)
        assert line.remaining_quantity == qty(1)

    def test_line_total(self):
        line = PurchaseOrderLine.create(uuid4(), uuid4(), qty(20), usd("12.50")).value
        assert line.line_total == usd("250.00")
