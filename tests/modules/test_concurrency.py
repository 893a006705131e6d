"""
Optimistic concurrency: two sessions writing the same aggregate.

Uses a file-backed SQLite database so the two sessions have their own
connections.
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from wms_kernel.db.base import Base
from wms_kernel.db.immutability import register_immutability_listeners
from wms_kernel.exceptions import OptimisticLockError
from wms_modules._orm_registry import import_all_orm_models
from wms_modules.inbound.orm import PurchaseOrderModel
from wms_modules.inbound.service import (
    InboundService,
    PurchaseOrderLineRequest,
    ReceiptLineRequest,
)
from wms_modules.inventory.orm import InventoryItemModel
from wms_modules.inventory.service import InventoryService

RECEIVED_AT = datetime(2024, 3, 1, tzinfo=timezone.utc)


@pytest.fixture
def file_sessions(tmp_path):
    """Factory for sessions on a fresh file database."""
    engine = create_engine(f"sqlite:///{tmp_path / 'wms.db'}")

    @event.listens_for(engine, "connect")
    def _fk_on(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    import_all_orm_models()
    Base.metadata.create_all(engine)
    register_immutability_listeners()
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    opened = []

    def _open():
        session = factory()
        opened.append(session)
        return session

    yield _open

    for session in opened:
        session.close()
    engine.dispose()


@pytest.fixture
def seeded(file_sessions):
    """A product, a location, a 10-unit stock item and a 20-unit order."""
    session = file_sessions()
    inventory = InventoryService(session)
    product_id = inventory.create_product("SKU-1", "Widget").value
    location_id = inventory.create_location("A", 1, 1, 1).value
    inventory.create_inventory_item(product_id, location_id, 10)
    order_id = InboundService(session).create_purchase_order(
        "PO-1", "Acme", lines=[PurchaseOrderLineRequest(product_id, 20, 1)],
    ).value
    line_id = session.get(PurchaseOrderModel, order_id).lines[0].id
    return {
        "product_id": product_id,
        "location_id": location_id,
        "order_id": order_id,
        "line_id": line_id,
    }


class TestPurchaseOrderConcurrency:

    def test_stale_submit_raises(self, file_sessions, seeded):
        order_id = seeded["order_id"]
        session_a = file_sessions()
        session_b = file_sessions()

        stale = session_a.get(PurchaseOrderModel, order_id)
        assert stale is not None

        assert InboundService(session_b).cancel_purchase_order(order_id).is_success

        with pytest.raises(OptimisticLockError) as exc_info:
            InboundService(session_a).submit_purchase_order(order_id)
        assert exc_info.value.entity_type == "PurchaseOrder"

    def test_concurrent_receipts_cannot_both_commit(self, file_sessions, seeded):
        order_id, line_id = seeded["order_id"], seeded["line_id"]
        session_a = file_sessions()
        session_b = file_sessions()
        stale = session_a.get(PurchaseOrderModel, order_id)
        assert stale.lines[0].received_quantity == 0

        first = InboundService(session_b).apply_receipt(
            order_id, RECEIVED_AT, [ReceiptLineRequest(line_id, 15)],
        )
        assert first.is_success

        with pytest.raises(OptimisticLockError):
            InboundService(session_a).apply_receipt(
                order_id, RECEIVED_AT, [ReceiptLineRequest(line_id, 15)],
            )

        check = file_sessions()
        row = check.get(PurchaseOrderModel, order_id)
        assert row.lines[0].received_quantity == 15

    def test_retry_after_conflict_sees_fresh_state(self, file_sessions, seeded):
        order_id, line_id = seeded["order_id"], seeded["line_id"]
        session_a = file_sessions()
        stale = session_a.get(PurchaseOrderModel, order_id)
        assert stale.lines[0].received_quantity == 0
        InboundService(file_sessions()).apply_receipt(
            order_id, RECEIVED_AT, [ReceiptLineRequest(line_id, 15)],
        )

        service = InboundService(session_a)
        with pytest.raises(OptimisticLockError):
            service.apply_receipt(order_id, RECEIVED_AT, [ReceiptLineRequest(line_id, 15)])

        # The rollback expired the stale row; the retry is judged on fresh state.
        retry = service.apply_receipt(order_id, RECEIVED_AT, [ReceiptLineRequest(line_id, 15)])
        assert retry.error.code == "PurchaseOrderLine.OverReceive"


class TestInventoryConcurrency:

    def test_stale_adjustment_raises(self, file_sessions, seeded):
        product_id, location_id = seeded["product_id"], seeded["location_id"]
        session_a = file_sessions()
        session_b = file_sessions()
        stale_items = session_a.query(InventoryItemModel).all()
        assert [item.quantity for item in stale_items] == [10]

        assert InventoryService(session_b).adjust_stock(product_id, location_id, -4, "Pick").is_success

        with pytest.raises(OptimisticLockError) as exc_info:
            InventoryService(session_a).adjust_stock(product_id, location_id, -8, "Pick")
        assert exc_info.value.entity_type == "InventoryItem"

        check = file_sessions()
        item = check.query(InventoryItemModel).one()
        assert item.quantity == 6
        assert len(item.movements) == 2
