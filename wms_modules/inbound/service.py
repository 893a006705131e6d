"""
Inbound Module Service (``wms_modules.inbound.service``).

Responsibility
--------------
Command side for purchase orders and receipts: load the aggregate, run one
domain command, persist the result atomically, then invalidate the
read-model cache.

Architecture position
---------------------
**Modules layer** -- ``InboundService`` is the sole public entry point for
inbound writes.  It composes the pure aggregates in ``models`` with the
ORM rows in ``orm`` and an optional ``CacheBackend``.

Invariants enforced
-------------------
* Each public method owns the transaction boundary (``commit`` on success,
  ``rollback`` on failure or exception).
* A failed domain command is never persisted, even if it touched the
  in-memory aggregate.
* Cache invalidation runs only after a successful commit and removes every
  key the write could have affected.

Failure modes
-------------
* Business-rule violations  -> ``Result`` failure; session rolled back.
* Concurrent update of the same order  -> ``OptimisticLockError`` raised.
* Unexpected exception  -> session rolled back, exception re-raised.

Usage::

    service = InboundService(session, cache=cache)
    result = service.create_purchase_order(
        "po-1001", "Acme",
        lines=[PurchaseOrderLineRequest(product_id, 20, "12.50")],
        actor_id=actor_id,
    )
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from wms_kernel.db.base import SYSTEM_ACTOR_ID
from wms_kernel.domain.result import DomainError, Result
from wms_kernel.domain.values import Money, Quantity
from wms_kernel.exceptions import OptimisticLockError
from wms_kernel.logging_config import LogContext, get_logger
from wms_modules.inbound.config import InboundConfig
from wms_modules.inbound.models import (
    PurchaseOrder,
    PurchaseOrderStatus,
    Receipt,
    ReceiptLine,
    normalize_order_number,
)
from wms_modules.inbound.orm import PurchaseOrderModel, ReceiptModel
from wms_modules.inbound.selectors import (
    purchase_order_key,
    purchase_order_list_key,
    receipt_list_key,
)
from wms_services.cache import CacheBackend

logger = get_logger("modules.inbound.service")

Numeric = Decimal | int | str | float


class ProductCatalog(Protocol):
    """Resolves which product identifiers are unknown."""

    def missing_products(self, product_ids: Iterable[UUID]) -> set[UUID]: ...


@dataclass(frozen=True)
class PurchaseOrderLineRequest:
    """One requested line: product, ordered quantity and unit cost."""
    product_id: UUID
    quantity: Numeric
    unit_cost: Numeric
    currency: str | None = None


@dataclass(frozen=True)
class ReceiptLineRequest:
    """Quantity received against one purchase order line."""
    purchase_order_line_id: UUID
    quantity_received: Numeric


class InboundService:
    """
    Orchestrates purchase order and receipt commands.

    Contract
    --------
    * Every command returns ``Result``; callers inspect ``is_success``.
    * ``actor_id`` is recorded as ``created_by_id`` / ``updated_by_id``;
      ``SYSTEM_ACTOR_ID`` when omitted.

    Non-goals
    ---------
    * Does NOT touch inventory stock; receiving and stocking are separate.
    """

    def __init__(
        self,
        session: Session,
        cache: CacheBackend | None = None,
        config: InboundConfig | None = None,
        product_catalog: ProductCatalog | None = None,
    ):
        self._session = session
        self._cache = cache
        self._config = config or InboundConfig()
        if product_catalog is None:
            from wms_modules.inventory.selectors import InventorySelector

            product_catalog = InventorySelector(session)
        self._catalog = product_catalog

    # =========================================================================
    # Purchase Orders
    # =========================================================================

    def create_purchase_order(
        self,
        order_number: str,
        supplier_name: str,
        lines: Sequence[PurchaseOrderLineRequest],
        expected_delivery_date: date | None = None,
        notes: str | None = None,
        actor_id: UUID | None = None,
    ) -> Result[UUID]:
        """
        Create a draft purchase order with its lines.

        Checks, in order: at least one line; order number not taken
        (conflict); no product twice (conflict); every product known
        (not_found); then the order and per-line fields.
        """
        actor_id = actor_id or SYSTEM_ACTOR_ID
        with LogContext.bind(command="create_purchase_order", actor_id=actor_id):
            try:
                result = self._create_purchase_order(
                    order_number, supplier_name, lines, expected_delivery_date, notes, actor_id,
                )
                if result.is_failure:
                    return self._reject(result)

                try:
                    self._session.commit()
                except IntegrityError:
                    self._session.rollback()
                    logger.info(
                        "purchase_order_create_conflict",
                        extra={"order_number": normalize_order_number(order_number)},
                    )
                    return Result.failure(DomainError.conflict(
                        "PurchaseOrder.OrderNumber",
                        f"Order number '{normalize_order_number(order_number)}' already exists.",
                    ))

                logger.info(
                    "purchase_order_created",
                    extra={"order_id": str(result.value), "line_count": len(lines)},
                )
                self._invalidate_order_caches()
                return result

            except Exception:
                self._session.rollback()
                raise

    def _create_purchase_order(
        self,
        order_number: str,
        supplier_name: str,
        lines: Sequence[PurchaseOrderLineRequest],
        expected_delivery_date: date | None,
        notes: str | None,
        actor_id: UUID,
    ) -> Result[UUID]:
        if not lines:
            return Result.failure(DomainError.validation(
                "PurchaseOrder.Lines", "At least one line is required.",
            ))

        if isinstance(order_number, str) and order_number.strip():
            normalized = normalize_order_number(order_number)
            taken = self._session.scalar(
                select(PurchaseOrderModel.id).where(
                    PurchaseOrderModel.order_number == normalized,
                )
            )
            if taken is not None:
                return Result.failure(DomainError.conflict(
                    "PurchaseOrder.OrderNumber",
                    f"Order number '{normalized}' already exists.",
                ))

        product_ids = [line.product_id for line in lines]
        if len(set(product_ids)) != len(product_ids):
            return Result.failure(DomainError.conflict(
                "PurchaseOrderLine.ProductId", "Duplicate products are not allowed.",
            ))

        if self._catalog.missing_products(product_ids):
            return Result.failure(DomainError.not_found(
                "Product.Id", "One or more products were not found.",
            ))

        created = PurchaseOrder.create(order_number, supplier_name, expected_delivery_date, notes)
        if created.is_failure:
            return Result.failure(created.error)
        order = created.value

        for request in lines:
            quantity = Quantity.create(request.quantity)
            if quantity.is_failure:
                return Result.failure(quantity.error)
            unit_cost = Money.create(
                request.unit_cost, request.currency or self._config.default_currency,
            )
            if unit_cost.is_failure:
                return Result.failure(unit_cost.error)
            added = order.add_line(request.product_id, quantity.value, unit_cost.value)
            if added.is_failure:
                return Result.failure(added.error)

        self._session.add(PurchaseOrderModel.from_domain(order, actor_id))
        return Result.success(order.id)

    def submit_purchase_order(
        self,
        order_id: UUID,
        actor_id: UUID | None = None,
    ) -> Result[None]:
        """Move a draft order to submitted."""
        return self._run_order_command(order_id, "submit_purchase_order", PurchaseOrder.submit, actor_id)

    def cancel_purchase_order(
        self,
        order_id: UUID,
        actor_id: UUID | None = None,
    ) -> Result[None]:
        """Cancel an order that is neither fully received nor already cancelled."""
        return self._run_order_command(order_id, "cancel_purchase_order", PurchaseOrder.cancel, actor_id)

    def _run_order_command(self, order_id, command, action, actor_id) -> Result[None]:
        actor_id = actor_id or SYSTEM_ACTOR_ID
        with LogContext.bind(command=command, actor_id=actor_id, aggregate_id=order_id):
            try:
                row = self._session.get(PurchaseOrderModel, order_id)
                if row is None:
                    return self._reject(_order_not_found())

                order = row.to_domain()
                result = action(order)
                if result.is_failure:
                    return self._reject(result)

                row.apply_domain(order, actor_id)
                self._commit(order_id)
                logger.info(
                    "purchase_order_command_committed",
                    extra={"order_id": str(order_id), "status": order.status.value},
                )
                self._invalidate_order_caches(order_id)
                return result

            except Exception:
                self._session.rollback()
                raise

    # =========================================================================
    # Receipts
    # =========================================================================

    def apply_receipt(
        self,
        order_id: UUID,
        received_at: datetime | None,
        lines: Sequence[ReceiptLineRequest],
        notes: str | None = None,
        actor_id: UUID | None = None,
    ) -> Result[UUID]:
        """
        Record one receiving event and apply it to the purchase order.

        The receipt and the order's received quantities are written in one
        transaction; on any failure neither is persisted.  Receipt lines
        snapshot each order line's unit cost.
        """
        actor_id = actor_id or SYSTEM_ACTOR_ID
        with LogContext.bind(command="apply_receipt", actor_id=actor_id, aggregate_id=order_id):
            try:
                if not lines:
                    return self._reject(Result.failure(DomainError.validation(
                        "PurchaseOrder.ReceiptLines", "At least one receipt line is required.",
                    )))

                row = self._session.get(PurchaseOrderModel, order_id)
                if row is None:
                    return self._reject(_order_not_found())
                order = row.to_domain()

                received: list[tuple[UUID, Quantity]] = []
                for request in lines:
                    quantity = Quantity.create(request.quantity_received)
                    if quantity.is_failure:
                        return self._reject(quantity)
                    received.append((request.purchase_order_line_id, quantity.value))

                logger.info(
                    "receipt_apply_started",
                    extra={
                        "order_id": str(order_id),
                        "order_number": order.order_number,
                        "line_count": len(received),
                    },
                )

                applied = order.apply_receipt(received)
                if applied.is_failure:
                    return self._reject(applied)

                receipt_lines: list[ReceiptLine] = []
                for line_id, quantity in received:
                    line = order.get_line(line_id)
                    receipt_line = ReceiptLine.create(
                        line.id, line.product_id, quantity, line.unit_cost,
                    )
                    if receipt_line.is_failure:
                        return self._reject(receipt_line)
                    receipt_lines.append(receipt_line.value)

                receipt = Receipt.create(order.id, received_at, notes, receipt_lines)
                if receipt.is_failure:
                    return self._reject(receipt)

                row.apply_domain(order, actor_id)
                self._session.add(ReceiptModel.from_domain(receipt.value, actor_id))
                self._commit(order_id)

                logger.info(
                    "receipt_applied",
                    extra={
                        "order_id": str(order_id),
                        "receipt_id": str(receipt.value.id),
                        "status": order.status.value,
                        "total_quantity": str(receipt.value.total_quantity.value),
                    },
                )
                self._invalidate_order_caches(order_id)
                return Result.success(receipt.value.id)

            except Exception:
                self._session.rollback()
                raise

    # =========================================================================
    # Helpers
    # =========================================================================

    def _commit(self, order_id: UUID) -> None:
        try:
            self._session.commit()
        except StaleDataError as exc:
            self._session.rollback()
            logger.warning(
                "purchase_order_concurrent_update",
                extra={"order_id": str(order_id)},
            )
            raise OptimisticLockError("PurchaseOrder", str(order_id)) from exc

    def _reject(self, result: Result) -> Result:
        self._session.rollback()
        logger.info(
            "inbound_command_rejected",
            extra={
                "kind": result.error.kind.value,
                "code": result.error.code,
                "error_message": result.error.message,
            },
        )
        return Result.failure(result.error)

    def _invalidate_order_caches(self, order_id: UUID | None = None) -> None:
        if self._cache is None:
            return
        keys = [purchase_order_list_key(None)]
        keys.extend(purchase_order_list_key(status) for status in PurchaseOrderStatus)
        if order_id is not None:
            keys.append(purchase_order_key(order_id))
            keys.append(receipt_list_key(None))
            keys.append(receipt_list_key(order_id))
        for key in keys:
            self._cache.remove(key)
        logger.debug("inbound_cache_invalidated", extra={"key_count": len(keys)})


def _order_not_found() -> Result:
    return Result.failure(DomainError.not_found(
        "PurchaseOrder.Id", "Purchase order not found.",
    ))
