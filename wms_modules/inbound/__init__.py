"""
Inbound Module (``wms_modules.inbound``).

Responsibility
--------------
Purchase order lifecycle (draft -> submitted -> partially/fully received,
or cancelled) and the immutable receipts that record each receiving event.

Architecture
------------
Layer: **Modules**.  Imports from ``wms_kernel`` and ``wms_services`` but
never the reverse.

Invariants
----------
- A line's received quantity never exceeds its ordered quantity.
- An order is fully received iff every line is.
- Each service method owns its transaction boundary (commit / rollback).
"""

from wms_modules.inbound.config import InboundConfig
from wms_modules.inbound.models import (
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseOrderStatus,
    Receipt,
    ReceiptLine,
)
from wms_modules.inbound.selectors import InboundSelector
from wms_modules.inbound.service import (
    InboundService,
    PurchaseOrderLineRequest,
    ReceiptLineRequest,
)
from wms_modules.inbound.workflows import PURCHASE_ORDER_WORKFLOW

__all__ = [
    "InboundConfig",
    "InboundSelector",
    "InboundService",
    "PURCHASE_ORDER_WORKFLOW",
    "PurchaseOrder",
    "PurchaseOrderLine",
    "PurchaseOrderLineRequest",
    "PurchaseOrderStatus",
    "Receipt",
    "ReceiptLine",
    "ReceiptLineRequest",
]
