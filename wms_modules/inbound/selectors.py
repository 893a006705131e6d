"""
Inbound read models (``wms_modules.inbound.selectors``).

Responsibility
--------------
Query side for purchase orders and receipts: list and detail views as
frozen DTOs, memoized in the read-model cache under deterministic keys.

Architecture position
---------------------
**Modules layer** -- read-only.  Never adds, flushes or commits.  Cache
entries are invalidated by ``InboundService`` after each committed write.

Cache keys
----------
==============================================  =====================
``inbound:purchase-orders:list:{status|all}``   list TTL (300s)
``inbound:purchase-orders:{id}``                detail TTL (600s)
``inbound:receipts:list:{order_id|all}``        list TTL (300s)
``inbound:receipts:{id}``                       detail TTL (600s)
==============================================  =====================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from wms_kernel.domain.result import DomainError, Result
from wms_kernel.logging_config import get_logger
from wms_kernel.selectors.base import BaseSelector
from wms_modules.inbound.config import InboundConfig
from wms_modules.inbound.models import PurchaseOrderStatus
from wms_modules.inbound.orm import PurchaseOrderModel, ReceiptModel
from wms_services.cache import CacheBackend

logger = get_logger("modules.inbound.selectors")


# ---------------------------------------------------------------------------
# Cache keys
# ---------------------------------------------------------------------------


def purchase_order_list_key(status: PurchaseOrderStatus | None = None) -> str:
    return f"inbound:purchase-orders:list:{status.value if status else 'all'}"


def purchase_order_key(order_id: UUID) -> str:
    return f"inbound:purchase-orders:{order_id}"


def receipt_list_key(order_id: UUID | None = None) -> str:
    return f"inbound:receipts:list:{order_id if order_id else 'all'}"


def receipt_key(receipt_id: UUID) -> str:
    return f"inbound:receipts:{receipt_id}"


# ---------------------------------------------------------------------------
# DTOs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PurchaseOrderLineView:
    id: UUID
    line_number: int
    product_id: UUID
    quantity: Decimal
    unit_cost_amount: Decimal
    unit_cost_currency: str
    received_quantity: Decimal


@dataclass(frozen=True)
class PurchaseOrderSummary:
    id: UUID
    order_number: str
    supplier_name: str
    status: PurchaseOrderStatus
    expected_delivery_date: date | None
    line_count: int


@dataclass(frozen=True)
class PurchaseOrderView:
    id: UUID
    order_number: str
    supplier_name: str
    status: PurchaseOrderStatus
    expected_delivery_date: date | None
    notes: str | None
    created_at: datetime
    updated_at: datetime | None
    lines: tuple[PurchaseOrderLineView, ...]


@dataclass(frozen=True)
class ReceiptLineView:
    id: UUID
    purchase_order_line_id: UUID
    product_id: UUID
    quantity_received: Decimal
    unit_cost_amount: Decimal
    unit_cost_currency: str


@dataclass(frozen=True)
class ReceiptSummary:
    id: UUID
    purchase_order_id: UUID
    received_at: datetime
    line_count: int


@dataclass(frozen=True)
class ReceiptView:
    id: UUID
    purchase_order_id: UUID
    received_at: datetime
    notes: str | None
    lines: tuple[ReceiptLineView, ...]


# ---------------------------------------------------------------------------
# Selector
# ---------------------------------------------------------------------------


class InboundSelector(BaseSelector[PurchaseOrderModel]):
    """
    Cached list/detail queries over purchase orders and receipts.

    Guarantees:
        - Returned DTOs are immutable and safe to share from the cache.
        - A detail miss (unknown id) is never cached.
    """

    def __init__(
        self,
        session: Session,
        cache: CacheBackend | None = None,
        config: InboundConfig | None = None,
    ):
        super().__init__(session)
        self._cache = cache
        self._config = config or InboundConfig()

    def list_purchase_orders(
        self,
        status: PurchaseOrderStatus | None = None,
    ) -> list[PurchaseOrderSummary]:
        key = purchase_order_list_key(status)
        cached = self._cached(key)
        if cached is not None:
            return list(cached)

        stmt = select(PurchaseOrderModel).order_by(
            PurchaseOrderModel.created_at.desc(), PurchaseOrderModel.order_number,
        )
        if status is not None:
            stmt = stmt.where(PurchaseOrderModel.status == status.value)

        summaries = tuple(
            PurchaseOrderSummary(
                id=row.id,
                order_number=row.order_number,
                supplier_name=row.supplier_name,
                status=PurchaseOrderStatus(row.status),
                expected_delivery_date=row.expected_delivery_date,
                line_count=len(row.lines),
            )
            for row in self.session.scalars(stmt)
        )
        self._store(key, summaries, self._config.list_cache_ttl_seconds)
        return list(summaries)

    def get_purchase_order(self, order_id: UUID) -> Result[PurchaseOrderView]:
        key = purchase_order_key(order_id)
        cached = self._cached(key)
        if cached is not None:
            return Result.success(cached)

        row = self.session.get(PurchaseOrderModel, order_id)
        if row is None:
            return Result.failure(DomainError.not_found(
                "PurchaseOrder.Id", "Purchase order not found.",
            ))

        view = PurchaseOrderView(
            id=row.id,
            order_number=row.order_number,
            supplier_name=row.supplier_name,
            status=PurchaseOrderStatus(row.status),
            expected_delivery_date=row.expected_delivery_date,
            notes=row.notes,
            created_at=row.created_at,
            updated_at=row.updated_at,
            lines=tuple(
                PurchaseOrderLineView(
                    id=line.id,
                    line_number=line.line_number,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_cost_amount=line.unit_cost,
                    unit_cost_currency=line.currency,
                    received_quantity=line.received_quantity,
                )
                for line in row.lines
            ),
        )
        self._store(key, view, self._config.detail_cache_ttl_seconds)
        return Result.success(view)

    def list_receipts(self, order_id: UUID | None = None) -> list[ReceiptSummary]:
        key = receipt_list_key(order_id)
        cached = self._cached(key)
        if cached is not None:
            return list(cached)

        stmt = select(ReceiptModel).order_by(ReceiptModel.received_at.desc())
        if order_id is not None:
            stmt = stmt.where(ReceiptModel.purchase_order_id == order_id)

        summaries = tuple(
            ReceiptSummary(
                id=row.id,
                purchase_order_id=row.purchase_order_id,
                received_at=row.received_at,
                line_count=len(row.lines),
            )
            for row in self.session.scalars(stmt)
        )
        self._store(key, summaries, self._config.list_cache_ttl_seconds)
        return list(summaries)

    def get_receipt(self, receipt_id: UUID) -> Result[ReceiptView]:
        key = receipt_key(receipt_id)
        cached = self._cached(key)
        if cached is not None:
            return Result.success(cached)

        row = self.session.get(ReceiptModel, receipt_id)
        if row is None:
            return Result.failure(DomainError.not_found(
                "Receipt.Id", "Receipt not found.",
            ))

        view = ReceiptView(
            id=row.id,
            purchase_order_id=row.purchase_order_id,
            received_at=row.received_at,
            notes=row.notes,
            lines=tuple(
                ReceiptLineView(
                    id=line.id,
                    purchase_order_line_id=line.purchase_order_line_id,
                    product_id=line.product_id,
                    quantity_received=line.quantity_received,
                    unit_cost_amount=line.unit_cost,
                    unit_cost_currency=line.currency,
                )
                for line in row.lines
            ),
        )
        self._store(key, view, self._config.detail_cache_ttl_seconds)
        return Result.success(view)

    def _cached(self, key: str):
        if self._cache is None:
            return None
        value = self._cache.get(key)
        if value is not None:
            logger.debug("inbound_cache_hit", extra={"cache_key": key})
        return value

    def _store(self, key: str, value, ttl_seconds: int) -> None:
        if self._cache is not None:
            self._cache.set(key, value, ttl_seconds)
