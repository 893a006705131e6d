"""
Inventory Module Service (``wms_modules.inventory.service``).

Responsibility
--------------
Command side for the stock ledger and the catalog: create inventory items,
apply signed stock adjustments, and register products and locations.

Architecture position
---------------------
**Modules layer** -- ``InventoryService`` is the sole public entry point for
inventory writes.  Composes the pure aggregates in ``models`` with the ORM
rows in ``orm``; the injected ``Clock`` stamps every stock movement.

Invariants enforced
-------------------
* Each public method owns the transaction boundary (``commit`` on success,
  ``rollback`` on failure or exception).
* Stock changes are persisted as the new quantity plus the appended
  movement, in one transaction.
* One inventory item per (product, location); the unique constraint is
  the final arbiter.

Failure modes
-------------
* Business-rule violations  -> ``Result`` failure; session rolled back.
* Concurrent adjustment of the same item  -> ``OptimisticLockError``.
* Unexpected exception  -> session rolled back, exception re-raised.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from wms_kernel.db.base import SYSTEM_ACTOR_ID
from wms_kernel.domain.clock import Clock, SystemClock
from wms_kernel.domain.result import DomainError, Result
from wms_kernel.domain.validation import is_blank
from wms_kernel.domain.values import Quantity
from wms_kernel.exceptions import OptimisticLockError
from wms_kernel.logging_config import LogContext, get_logger
from wms_modules.inventory.config import InventoryConfig
from wms_modules.inventory.models import InventoryItem, Location, Product
from wms_modules.inventory.orm import (
    InventoryItemModel,
    LocationModel,
    ProductModel,
)
from wms_modules.inventory.selectors import InventorySelector

logger = get_logger("modules.inventory.service")

Numeric = Decimal | int | str | float


class InventoryService:
    """
    Orchestrates stock ledger and catalog commands.

    Contract
    --------
    * Every command returns ``Result``; callers inspect ``is_success``.
    * ``actor_id`` is recorded as ``created_by_id`` / ``updated_by_id``;
      ``SYSTEM_ACTOR_ID`` when omitted.

    Guarantees
    ----------
    * Clock is injectable for deterministic movement timestamps.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: InventoryConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or InventoryConfig()
        self._selector = InventorySelector(session, self._config)

    # =========================================================================
    # Stock ledger
    # =========================================================================

    def create_inventory_item(
        self,
        product_id: UUID,
        location_id: UUID,
        initial_quantity: Numeric,
        reason: str | None = None,
        actor_id: UUID | None = None,
    ) -> Result[UUID]:
        """Open a ledger for (product, location) with one INITIAL movement."""
        actor_id = actor_id or SYSTEM_ACTOR_ID
        with LogContext.bind(command="create_inventory_item", actor_id=actor_id):
            try:
                quantity = Quantity.create(initial_quantity)
                if quantity.is_failure:
                    return self._reject(quantity)

                created = InventoryItem.create(
                    product_id,
                    location_id,
                    quantity.value,
                    reason if reason is not None else self._config.default_initial_reason,
                    clock=self._clock,
                )
                if created.is_failure:
                    return self._reject(created)

                missing = self._check_catalog(product_id, location_id)
                if missing is not None:
                    return self._reject(missing)

                if self._find_item(product_id, location_id) is not None:
                    return self._reject(_duplicate_item())

                return self._persist_new_item(created.value, actor_id)

            except Exception:
                self._session.rollback()
                raise

    def adjust_stock(
        self,
        product_id: UUID,
        location_id: UUID,
        adjustment: int,
        reason: str,
        actor_id: UUID | None = None,
    ) -> Result[Decimal]:
        """
        Apply a signed adjustment and return the new on-hand quantity.

        An unknown (product, location) pair with a positive adjustment opens
        a new ledger whose INITIAL movement carries the adjustment; with a
        negative adjustment it fails.
        """
        actor_id = actor_id or SYSTEM_ACTOR_ID
        with LogContext.bind(command="adjust_stock", actor_id=actor_id):
            try:
                if adjustment == 0:
                    return self._reject(Result.failure(DomainError.validation(
                        "InventoryItem.Adjustment", "Adjustment cannot be zero.",
                    )))
                if is_blank(reason):
                    return self._reject(Result.failure(DomainError.validation(
                        "StockMovement.Reason", "Reason is required for stock adjustments.",
                    )))

                row = self._find_item(product_id, location_id)
                if row is None:
                    return self._open_item_by_adjustment(
                        product_id, location_id, adjustment, reason, actor_id,
                    )

                item = row.to_domain()
                adjusted = item.adjust_stock(adjustment, reason, clock=self._clock)
                if adjusted.is_failure:
                    return self._reject(adjusted)

                row.apply_domain(item, actor_id)
                self._commit(item.id)

                logger.info(
                    "stock_adjusted",
                    extra={
                        "item_id": str(item.id),
                        "adjustment": str(adjustment),
                        "movement_type": adjusted.value.movement_type.value,
                        "new_quantity": str(item.quantity.value),
                        "reconciled": item.is_reconciled,
                    },
                )
                return Result.success(item.quantity.value)

            except Exception:
                self._session.rollback()
                raise

    def _open_item_by_adjustment(
        self,
        product_id: UUID,
        location_id: UUID,
        adjustment: int,
        reason: str,
        actor_id: UUID,
    ) -> Result[Decimal]:
        if adjustment < 0:
            return self._reject(Result.failure(DomainError.not_found(
                "InventoryItem.Id", "Cannot reduce stock for non-existent inventory item.",
            )))

        missing = self._check_catalog(product_id, location_id)
        if missing is not None:
            return self._reject(missing)

        quantity = Quantity.create(adjustment)
        if quantity.is_failure:
            return self._reject(quantity)

        created = InventoryItem.create(
            product_id, location_id, quantity.value, reason, clock=self._clock,
        )
        if created.is_failure:
            return self._reject(created)

        persisted = self._persist_new_item(created.value, actor_id)
        if persisted.is_failure:
            return persisted
        return Result.success(created.value.quantity.value)

    def _persist_new_item(self, item: InventoryItem, actor_id: UUID) -> Result[UUID]:
        self._session.add(InventoryItemModel.from_domain(item, actor_id))
        try:
            self._session.commit()
        except IntegrityError:
            self._session.rollback()
            return self._reject(_duplicate_item())

        logger.info(
            "inventory_item_opened",
            extra={
                "item_id": str(item.id),
                "product_id": str(item.product_id),
                "location_id": str(item.location_id),
                "quantity": str(item.quantity.value),
            },
        )
        return Result.success(item.id)

    # =========================================================================
    # Catalog
    # =========================================================================

    def create_product(
        self,
        sku: str,
        name: str,
        description: str | None = None,
        weight: Numeric = Decimal("0"),
        length: Numeric = Decimal("0"),
        width: Numeric = Decimal("0"),
        height: Numeric = Decimal("0"),
        actor_id: UUID | None = None,
    ) -> Result[UUID]:
        actor_id = actor_id or SYSTEM_ACTOR_ID
        with LogContext.bind(command="create_product", actor_id=actor_id):
            try:
                created = Product.create(
                    sku, name, description,
                    Decimal(str(weight)), Decimal(str(length)),
                    Decimal(str(width)), Decimal(str(height)),
                )
                if created.is_failure:
                    return self._reject(created)
                product = created.value

                taken = self._session.scalar(
                    select(ProductModel.id).where(ProductModel.sku == product.sku)
                )
                if taken is not None:
                    return self._reject(_duplicate_sku(product.sku))

                self._session.add(ProductModel.from_domain(product, actor_id))
                try:
                    self._session.commit()
                except IntegrityError:
                    self._session.rollback()
                    return self._reject(_duplicate_sku(product.sku))

                logger.info(
                    "product_created",
                    extra={"product_id": str(product.id), "sku": product.sku},
                )
                return Result.success(product.id)

            except Exception:
                self._session.rollback()
                raise

    def update_product(
        self,
        product_id: UUID,
        name: str,
        description: str | None = None,
        weight: Numeric = Decimal("0"),
        length: Numeric = Decimal("0"),
        width: Numeric = Decimal("0"),
        height: Numeric = Decimal("0"),
        actor_id: UUID | None = None,
    ) -> Result[None]:
        actor_id = actor_id or SYSTEM_ACTOR_ID
        with LogContext.bind(command="update_product", actor_id=actor_id, aggregate_id=product_id):
            try:
                row = self._session.get(ProductModel, product_id)
                if row is None:
                    return self._reject(_product_not_found())

                product = row.to_domain()
                updated = product.update(
                    name, description,
                    Decimal(str(weight)), Decimal(str(length)),
                    Decimal(str(width)), Decimal(str(height)),
                )
                if updated.is_failure:
                    return self._reject(updated)

                row.name = product.name
                row.description = product.description
                row.weight = product.weight
                row.length = product.length
                row.width = product.width
                row.height = product.height
                row.updated_by_id = actor_id
                self._commit(product_id, "Product")
                logger.info("product_updated", extra={"product_id": str(product_id)})
                return updated

            except Exception:
                self._session.rollback()
                raise

    def create_location(
        self,
        zone: str,
        aisle: int,
        rack: int,
        bin: int,
        name: str | None = None,
        capacity: int = 100,
        actor_id: UUID | None = None,
    ) -> Result[UUID]:
        actor_id = actor_id or SYSTEM_ACTOR_ID
        with LogContext.bind(command="create_location", actor_id=actor_id):
            try:
                created = Location.create(zone, aisle, rack, bin, name, capacity)
                if created.is_failure:
                    return self._reject(created)
                location = created.value

                taken = self._session.scalar(
                    select(LocationModel.id).where(LocationModel.code == location.code)
                )
                if taken is not None:
                    return self._reject(_duplicate_location(location.code))

                self._session.add(LocationModel.from_domain(location, actor_id))
                try:
                    self._session.commit()
                except IntegrityError:
                    self._session.rollback()
                    return self._reject(_duplicate_location(location.code))

                logger.info(
                    "location_created",
                    extra={"location_id": str(location.id), "code": location.code},
                )
                return Result.success(location.id)

            except Exception:
                self._session.rollback()
                raise

    # =========================================================================
    # Helpers
    # =========================================================================

    def _find_item(self, product_id: UUID, location_id: UUID) -> InventoryItemModel | None:
        return self._session.scalar(
            select(InventoryItemModel).where(
                InventoryItemModel.product_id == product_id,
                InventoryItemModel.location_id == location_id,
            )
        )

    def _check_catalog(self, product_id: UUID, location_id: UUID) -> Result | None:
        if not self._selector.product_exists(product_id):
            return _product_not_found()
        if not self._selector.location_exists(location_id):
            return Result.failure(DomainError.not_found(
                "Location.Id", "Location not found.",
            ))
        return None

    def _commit(self, entity_id: UUID, entity_type: str = "InventoryItem") -> None:
        try:
            self._session.commit()
        except StaleDataError as exc:
            self._session.rollback()
            logger.warning(
                "inventory_concurrent_update",
                extra={"entity_type": entity_type, "entity_id": str(entity_id)},
            )
            raise OptimisticLockError(entity_type, str(entity_id)) from exc

    def _reject(self, result: Result) -> Result:
        self._session.rollback()
        logger.info(
            "inventory_command_rejected",
            extra={
                "kind": result.error.kind.value,
                "code": result.error.code,
                "error_message": result.error.message,
            },
        )
        return Result.failure(result.error)


def _duplicate_item() -> Result:
    return Result.failure(DomainError.conflict(
        "InventoryItem.Duplicate",
        "An inventory item already exists for this product and location.",
    ))


def _duplicate_sku(sku: str) -> Result:
    return Result.failure(DomainError.conflict(
        "Product.Sku", f"Product with SKU '{sku}' already exists.",
    ))


def _duplicate_location(code: str) -> Result:
    return Result.failure(DomainError.conflict(
        "Location.Code", f"Location with code '{code}' already exists.",
    ))


def _product_not_found() -> Result:
    return Result.failure(DomainError.not_found("Product.Id", "Product not found."))
