"""
Inventory Module (``wms_modules.inventory``).

Responsibility
--------------
Catalog reference data (products, locations) and the stock ledger: one
inventory item per (product, location) with an append-only list of typed
stock movements.

Invariants
----------
- Replaying an item's movements reproduces its current quantity.
- Stock never goes negative.
- Each service method owns its transaction boundary (commit / rollback).
"""

from wms_modules.inventory.config import InventoryConfig
from wms_modules.inventory.models import (
    INBOUND_MOVEMENT_TYPES,
    OUTBOUND_MOVEMENT_TYPES,
    InventoryItem,
    Location,
    MovementType,
    Product,
    StockMovement,
)
from wms_modules.inventory.selectors import (
    InventorySelector,
    LocationStock,
    StockLevel,
    StockMovementView,
)
from wms_modules.inventory.service import InventoryService

__all__ = [
    "INBOUND_MOVEMENT_TYPES",
    "OUTBOUND_MOVEMENT_TYPES",
    "InventoryConfig",
    "InventoryItem",
    "InventorySelector",
    "InventoryService",
    "Location",
    "LocationStock",
    "MovementType",
    "Product",
    "StockLevel",
    "StockMovement",
    "StockMovementView",
]
