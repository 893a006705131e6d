"""
SQLAlchemy ORM persistence models for the Inbound module.

Responsibility
--------------
Database-backed persistence for purchase orders, their lines, and the
receipts recorded against them.

Architecture position
---------------------
**Modules layer** -- ORM models consumed by ``InboundService`` and
``InboundSelector``.  Inherits from ``TrackedBase`` (kernel db layer).

Invariants enforced
-------------------
* Quantities and money use ``Decimal`` (Numeric(38,9)) -- NEVER float.
* Enum fields stored as String(50) for readability and portability.
* ``purchase_orders.order_number`` is unique.
* A product appears at most once per purchase order.
* ``ReceiptModel`` / ``ReceiptLineModel`` are append-only (see
  ``wms_kernel.db.immutability``).
* Product references are plain UUID columns; the inventory catalog owns
  product existence.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.orm.attributes import flag_modified

from wms_kernel.db.base import TrackedBase
from wms_kernel.domain.values import Money, Quantity
from wms_modules.inbound.models import (
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseOrderStatus,
    Receipt,
    ReceiptLine,
)

# ---------------------------------------------------------------------------
# PurchaseOrderModel
# ---------------------------------------------------------------------------


class PurchaseOrderModel(TrackedBase):
    """
    A purchase order row.

    Maps to the ``PurchaseOrder`` aggregate in ``wms_modules.inbound.models``.
    """

    __tablename__ = "purchase_orders"

    __table_args__ = (
        UniqueConstraint("order_number", name="uq_purchase_order_number"),
        Index("idx_purchase_order_status", "status"),
    )

    order_number: Mapped[str] = mapped_column(String(50), nullable=False)
    supplier_name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="draft")
    expected_delivery_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    lines: Mapped[list[PurchaseOrderLineModel]] = relationship(
        "PurchaseOrderLineModel",
        back_populates="purchase_order",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderLineModel.line_number",
        lazy="selectin",
    )

    def to_domain(self) -> PurchaseOrder:
        return PurchaseOrder(
            id=self.id,
            order_number=self.order_number,
            supplier_name=self.supplier_name,
            status=PurchaseOrderStatus(self.status),
            expected_delivery_date=self.expected_delivery_date,
            notes=self.notes,
            lines=[line.to_domain() for line in self.lines],
        )

    @classmethod
    def from_domain(cls, order: PurchaseOrder, created_by_id: UUID) -> PurchaseOrderModel:
        model = cls(
            id=order.id,
            order_number=order.order_number,
            supplier_name=order.supplier_name,
            status=order.status.value,
            expected_delivery_date=order.expected_delivery_date,
            notes=order.notes,
            created_by_id=created_by_id,
        )
        model.lines = [
            PurchaseOrderLineModel.from_domain(line, created_by_id) for line in order.lines
        ]
        return model

    def apply_domain(self, order: PurchaseOrder, updated_by_id: UUID) -> None:
        """Copy mutable aggregate state back onto this row and its lines."""
        self.status = order.status.value
        self.notes = order.notes
        self.expected_delivery_date = order.expected_delivery_date
        self.updated_by_id = updated_by_id
        # Always bump the root version so concurrent receipts on the same
        # order conflict even when only line rows change.
        flag_modified(self, "updated_by_id")

        existing = {line.id: line for line in self.lines}
        for line in order.lines:
            row = existing.get(line.id)
            if row is None:
                self.lines.append(PurchaseOrderLineModel.from_domain(line, updated_by_id))
            elif row.received_quantity != line.received_quantity.value:
                row.received_quantity = line.received_quantity.value
                row.updated_by_id = updated_by_id

    def __repr__(self) -> str:
        return f"<PurchaseOrderModel {self.order_number} [{self.status}]>"


# ---------------------------------------------------------------------------
# PurchaseOrderLineModel
# ---------------------------------------------------------------------------


class PurchaseOrderLineModel(TrackedBase):
    """One ordered product on a purchase order."""

    __tablename__ = "purchase_order_lines"

    __table_args__ = (
        UniqueConstraint("purchase_order_id", "product_id", name="uq_po_line_product"),
        Index("idx_po_line_product", "product_id"),
    )

    purchase_order_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchase_orders.id"), nullable=False,
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    product_id: Mapped[UUID] = mapped_column(nullable=False)
    quantity: Mapped[Decimal] = mapped_column(nullable=False)
    unit_cost: Mapped[Decimal] = mapped_column(nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    received_quantity: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    purchase_order: Mapped[PurchaseOrderModel] = relationship(
        "PurchaseOrderModel", back_populates="lines",
    )

    def to_domain(self) -> PurchaseOrderLine:
        return PurchaseOrderLine(
            id=self.id,
            purchase_order_id=self.purchase_order_id,
            line_number=self.line_number,
            product_id=self.product_id,
            quantity=Quantity(self.quantity),
            unit_cost=Money(self.unit_cost, self.currency),
            received_quantity=Quantity(self.received_quantity),
        )

    @classmethod
    def from_domain(cls, line: PurchaseOrderLine, created_by_id: UUID) -> PurchaseOrderLineModel:
        return cls(
            id=line.id,
            purchase_order_id=line.purchase_order_id,
            line_number=line.line_number,
            product_id=line.product_id,
            quantity=line.quantity.value,
            unit_cost=line.unit_cost.amount,
            currency=line.unit_cost.currency,
            received_quantity=line.received_quantity.value,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return f"<PurchaseOrderLineModel #{self.line_number} {self.received_quantity}/{self.quantity}>"


# ---------------------------------------------------------------------------
# ReceiptModel
# ---------------------------------------------------------------------------


class ReceiptModel(TrackedBase):
    """
    An immutable receiving event against a purchase order.

    Guarantees:
        - Never updated or deleted once flushed.
        - Lines carry a snapshot of the order line's unit cost.
    """

    __tablename__ = "receipts"

    __table_args__ = (
        Index("idx_receipt_purchase_order", "purchase_order_id"),
        Index("idx_receipt_received_at", "received_at"),
    )

    purchase_order_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchase_orders.id"), nullable=False,
    )
    received_at: Mapped[datetime] = mapped_column(nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    lines: Mapped[list[ReceiptLineModel]] = relationship(
        "ReceiptLineModel",
        back_populates="receipt",
        order_by="ReceiptLineModel.line_number",
        lazy="selectin",
    )

    def to_domain(self) -> Receipt:
        return Receipt(
            id=self.id,
            purchase_order_id=self.purchase_order_id,
            received_at=self.received_at,
            notes=self.notes,
            lines=tuple(line.to_domain() for line in self.lines),
        )

    @classmethod
    def from_domain(cls, receipt: Receipt, created_by_id: UUID) -> ReceiptModel:
        model = cls(
            id=receipt.id,
            purchase_order_id=receipt.purchase_order_id,
            received_at=receipt.received_at,
            notes=receipt.notes,
            created_by_id=created_by_id,
        )
        model.lines = [
            ReceiptLineModel.from_domain(receipt.id, number, line, created_by_id)
            for number, line in enumerate(receipt.lines, start=1)
        ]
        return model

    def __repr__(self) -> str:
        return f"<ReceiptModel {self.id} po={self.purchase_order_id}>"


# ---------------------------------------------------------------------------
# ReceiptLineModel
# ---------------------------------------------------------------------------


class ReceiptLineModel(TrackedBase):
    """Quantity received for one purchase order line."""

    __tablename__ = "receipt_lines"

    __table_args__ = (
        Index("idx_receipt_line_receipt", "receipt_id"),
        Index("idx_receipt_line_po_line", "purchase_order_line_id"),
    )

    receipt_id: Mapped[UUID] = mapped_column(ForeignKey("receipts.id"), nullable=False)
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    purchase_order_line_id: Mapped[UUID] = mapped_column(
        ForeignKey("purchase_order_lines.id"), nullable=False,
    )
    product_id: Mapped[UUID] = mapped_column(nullable=False)
    quantity_received: Mapped[Decimal] = mapped_column(nullable=False)
    unit_cost: Mapped[Decimal] = mapped_column(nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    receipt: Mapped[ReceiptModel] = relationship("ReceiptModel", back_populates="lines")

    def to_domain(self) -> ReceiptLine:
        return ReceiptLine(
            id=self.id,
            purchase_order_line_id=self.purchase_order_line_id,
            product_id=self.product_id,
            quantity_received=Quantity(self.quantity_received),
            unit_cost=Money(self.unit_cost, self.currency),
        )

    @classmethod
    def from_domain(
        cls,
        receipt_id: UUID,
        line_number: int,
        line: ReceiptLine,
        created_by_id: UUID,
    ) -> ReceiptLineModel:
        return cls(
            id=line.id,
            receipt_id=receipt_id,
            line_number=line_number,
            purchase_order_line_id=line.purchase_order_line_id,
            product_id=line.product_id,
            quantity_received=line.quantity_received.value,
            unit_cost=line.unit_cost.amount,
            currency=line.unit_cost.currency,
            created_by_id=created_by_id,
        )
