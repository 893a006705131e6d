"""
Inventory read models (``wms_modules.inventory.selectors``).

Responsibility
--------------
Query side for the stock ledger: per-location stock levels, movement
history, and catalog lookups used by other modules.

Architecture position
---------------------
**Modules layer** -- read-only.  Never adds, flushes or commits.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from wms_kernel.domain.result import DomainError, Result
from wms_kernel.logging_config import get_logger
from wms_kernel.selectors.base import BaseSelector
from wms_modules.inventory.config import InventoryConfig
from wms_modules.inventory.models import MovementType
from wms_modules.inventory.orm import (
    InventoryItemModel,
    LocationModel,
    ProductModel,
    StockMovementModel,
)

logger = get_logger("modules.inventory.selectors")


@dataclass(frozen=True)
class LocationStock:
    location_id: UUID
    location_code: str
    quantity: Decimal


@dataclass(frozen=True)
class StockLevel:
    """Current stock of one product, per location (ordered by code) and in total."""
    product_id: UUID
    product_sku: str
    product_name: str
    locations: tuple[LocationStock, ...]
    total_quantity: Decimal


@dataclass(frozen=True)
class StockMovementView:
    id: UUID
    inventory_item_id: UUID
    sequence: int
    movement_type: MovementType
    quantity: Decimal
    reason: str
    recorded_at: datetime


class InventorySelector(BaseSelector[InventoryItemModel]):
    """Stock level and movement history queries."""

    def __init__(self, session: Session, config: InventoryConfig | None = None):
        super().__init__(session)
        self._config = config or InventoryConfig()

    def get_stock_level(self, product_id: UUID) -> Result[StockLevel]:
        product = self.session.get(ProductModel, product_id)
        if product is None:
            return Result.failure(DomainError.not_found(
                "Product.Id", "Product not found.",
            ))

        rows = self.session.execute(
            select(InventoryItemModel.location_id, LocationModel.code, InventoryItemModel.quantity)
            .join(LocationModel, LocationModel.id == InventoryItemModel.location_id)
            .where(InventoryItemModel.product_id == product_id)
            .order_by(LocationModel.code)
        ).all()

        locations = tuple(
            LocationStock(location_id=location_id, location_code=code, quantity=quantity)
            for location_id, code, quantity in rows
        )
        total = sum((loc.quantity for loc in locations), Decimal("0"))
        return Result.success(StockLevel(
            product_id=product.id,
            product_sku=product.sku,
            product_name=product.name,
            locations=locations,
            total_quantity=total,
        ))

    def get_movement_history(
        self,
        product_id: UUID,
        limit: int | None = None,
    ) -> list[StockMovementView]:
        """
        Movements across all of a product's locations, newest first.

        ``limit`` defaults to the configured history limit and is capped at
        ``max_history_limit``.  Unknown products yield an empty list.
        """
        if limit is None:
            limit = self._config.default_history_limit
        limit = min(limit, self._config.max_history_limit)
        if limit <= 0:
            return []

        item_ids = list(self.session.scalars(
            select(InventoryItemModel.id).where(InventoryItemModel.product_id == product_id)
        ))
        if not item_ids:
            return []

        stmt = (
            select(StockMovementModel)
            .where(StockMovementModel.inventory_item_id.in_(item_ids))
            .order_by(
                StockMovementModel.recorded_at.desc(),
                StockMovementModel.sequence.desc(),
            )
            .limit(limit)
        )
        return [
            StockMovementView(
                id=row.id,
                inventory_item_id=row.inventory_item_id,
                sequence=row.sequence,
                movement_type=MovementType(row.movement_type),
                quantity=row.quantity,
                reason=row.reason,
                recorded_at=row.recorded_at,
            )
            for row in self.session.scalars(stmt)
        ]

    # ------------------------------------------------------------------
    # Catalog lookups
    # ------------------------------------------------------------------

    def missing_products(self, product_ids: Iterable[UUID]) -> set[UUID]:
        """Identifiers in ``product_ids`` with no product row."""
        wanted = set(product_ids)
        if not wanted:
            return set()
        found = set(self.session.scalars(
            select(ProductModel.id).where(ProductModel.id.in_(wanted))
        ))
        return wanted - found

    def product_exists(self, product_id: UUID) -> bool:
        return not self.missing_products([product_id])

    def location_exists(self, location_id: UUID) -> bool:
        return self.session.get(LocationModel, location_id) is not None
