"""
SQLAlchemy ORM persistence models for the Inventory module.

Responsibility
--------------
Database-backed persistence for the catalog (products, locations) and the
stock ledger (inventory items and their movements).

Architecture position
---------------------
**Modules layer** -- ORM models consumed by ``InventoryService`` and
``InventorySelector``.  Inherits from ``TrackedBase`` (kernel db layer).

Invariants enforced
-------------------
* ``products.sku`` and ``locations.code`` are unique.
* One inventory item per (product, location).
* ``StockMovementModel`` rows are append-only (see
  ``wms_kernel.db.immutability``); ``sequence`` is unique per item.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wms_kernel.db.base import TrackedBase
from wms_kernel.domain.values import Quantity
from wms_modules.inventory.models import (
    InventoryItem,
    Location,
    MovementType,
    Product,
    StockMovement,
)

# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class ProductModel(TrackedBase):
    """A product row.  Maps to ``Product``."""

    __tablename__ = "products"

    __table_args__ = (
        UniqueConstraint("sku", name="uq_product_sku"),
    )

    sku: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    weight: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    length: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    width: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    height: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_domain(self) -> Product:
        return Product(
            id=self.id,
            sku=self.sku,
            name=self.name,
            description=self.description,
            weight=self.weight,
            length=self.length,
            width=self.width,
            height=self.height,
            is_active=self.is_active,
        )

    @classmethod
    def from_domain(cls, product: Product, created_by_id: UUID) -> ProductModel:
        return cls(
            id=product.id,
            sku=product.sku,
            name=product.name,
            description=product.description,
            weight=product.weight,
            length=product.length,
            width=product.width,
            height=product.height,
            is_active=product.is_active,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<ProductModel {self.sku}>"


class LocationModel(TrackedBase):
    """A storage location row.  Maps to ``Location``."""

    __tablename__ = "locations"

    __table_args__ = (
        UniqueConstraint("code", name="uq_location_code"),
        Index("idx_location_zone", "zone"),
    )

    code: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    zone: Mapped[str] = mapped_column(String(1), nullable=False)
    aisle: Mapped[int] = mapped_column(Integer, nullable=False)
    rack: Mapped[int] = mapped_column(Integer, nullable=False)
    bin: Mapped[int] = mapped_column(Integer, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def to_domain(self) -> Location:
        return Location(
            id=self.id,
            code=self.code,
            name=self.name,
            zone=self.zone,
            aisle=self.aisle,
            rack=self.rack,
            bin=self.bin,
            capacity=self.capacity,
            is_active=self.is_active,
        )

    @classmethod
    def from_domain(cls, location: Location, created_by_id: UUID) -> LocationModel:
        return cls(
            id=location.id,
            code=location.code,
            name=location.name,
            zone=location.zone,
            aisle=location.aisle,
            rack=location.rack,
            bin=location.bin,
            capacity=location.capacity,
            is_active=location.is_active,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<LocationModel {self.code}>"


# ---------------------------------------------------------------------------
# Stock ledger
# ---------------------------------------------------------------------------


class InventoryItemModel(TrackedBase):
    """
    On-hand quantity of one product at one location.

    Guarantees:
        - ``quantity`` equals the replay of ``movements``.
        - ``version`` increments on every stock change.
    """

    __tablename__ = "inventory_items"

    __table_args__ = (
        UniqueConstraint("product_id", "location_id", name="uq_inventory_product_location"),
        Index("idx_inventory_product", "product_id"),
    )

    product_id: Mapped[UUID] = mapped_column(ForeignKey("products.id"), nullable=False)
    location_id: Mapped[UUID] = mapped_column(ForeignKey("locations.id"), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    movements: Mapped[list[StockMovementModel]] = relationship(
        "StockMovementModel",
        back_populates="inventory_item",
        order_by="StockMovementModel.sequence",
        lazy="selectin",
    )
    location: Mapped[LocationModel] = relationship("LocationModel", lazy="joined")

    def to_domain(self) -> InventoryItem:
        return InventoryItem(
            id=self.id,
            product_id=self.product_id,
            location_id=self.location_id,
            quantity=Quantity(self.quantity),
            movements=[m.to_domain() for m in self.movements],
        )

    @classmethod
    def from_domain(cls, item: InventoryItem, created_by_id: UUID) -> InventoryItemModel:
        model = cls(
            id=item.id,
            product_id=item.product_id,
            location_id=item.location_id,
            quantity=item.quantity.value,
            created_by_id=created_by_id,
        )
        model.movements = [
            StockMovementModel.from_domain(m, created_by_id) for m in item.movements
        ]
        return model

    def apply_domain(self, item: InventoryItem, updated_by_id: UUID) -> None:
        """Copy the new quantity and append movements not yet persisted."""
        self.quantity = item.quantity.value
        self.updated_by_id = updated_by_id
        persisted = {m.id for m in self.movements}
        for movement in item.movements:
            if movement.id not in persisted:
                self.movements.append(StockMovementModel.from_domain(movement, updated_by_id))

    def __repr__(self) -> str:
        return f"<InventoryItemModel product={self.product_id} qty={self.quantity}>"


class StockMovementModel(TrackedBase):
    """An append-only stock ledger entry."""

    __tablename__ = "stock_movements"

    __table_args__ = (
        UniqueConstraint("inventory_item_id", "sequence", name="uq_stock_movement_sequence"),
        Index("idx_stock_movement_recorded_at", "recorded_at"),
    )

    inventory_item_id: Mapped[UUID] = mapped_column(
        ForeignKey("inventory_items.id"), nullable=False,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    movement_type: Mapped[str] = mapped_column(String(50), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(nullable=False)
    reason: Mapped[str] = mapped_column(String(500), nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(nullable=False)

    inventory_item: Mapped[InventoryItemModel] = relationship(
        "InventoryItemModel", back_populates="movements",
    )

    def to_domain(self) -> StockMovement:
        return StockMovement(
            id=self.id,
            inventory_item_id=self.inventory_item_id,
            movement_type=MovementType(self.movement_type),
            quantity=Quantity(self.quantity),
            reason=self.reason,
            recorded_at=self.recorded_at,
            sequence=self.sequence,
        )

    @classmethod
    def from_domain(cls, movement: StockMovement, created_by_id: UUID) -> StockMovementModel:
        return cls(
            id=movement.id,
            inventory_item_id=movement.inventory_item_id,
            sequence=movement.sequence,
            movement_type=movement.movement_type.value,
            quantity=movement.quantity.value,
            reason=movement.reason,
            recorded_at=movement.recorded_at,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<StockMovementModel #{self.sequence} {self.movement_type} {self.quantity}>"
