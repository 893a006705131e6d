"""
Inbound Domain Models (``wms_modules.inbound.models``).

Responsibility
--------------
The two inbound aggregates:

* ``PurchaseOrder`` (root) owning an ordered list of ``PurchaseOrderLine``.
  Encapsulates the draft -> submitted -> partially/fully received /
  cancelled lifecycle and per-line ordered/received quantity tracking.
* ``Receipt`` (root) owning a tuple of ``ReceiptLine``.  An immutable record
  of one receiving event against a purchase order.

Architecture
------------
Layer: **Modules** -- pure domain objects, no I/O, no database identity
beyond their UUIDs.  Children hold their root's identifier, never a
reference to the root object; the root addresses its children by
position (``line_number``) and by id.

Invariants
----------
- ``PurchaseOrderLine.received_quantity <= quantity`` at all times;
  ``receive`` is the single point that enforces it.
- At most one line per product on a purchase order.
- ``PurchaseOrder.status`` changes only along ``PURCHASE_ORDER_WORKFLOW``.
- After ``apply_receipt`` succeeds the status is ``FULLY_RECEIVED`` iff
  every line is fully received, otherwise ``PARTIALLY_RECEIVED``.
- ``apply_receipt`` validates every entry before mutating any line, so a
  failed call leaves the aggregate untouched.
- ``Receipt`` and ``ReceiptLine`` are frozen; a receipt is created with its
  full line set and never amended.

Failure Modes
-------------
Every command returns ``Result``.  Business-rule violations are failures
with a ``DomainError``; nothing here raises for them.

Pairing a new ``Receipt`` with exactly one ``apply_receipt`` call is the
orchestrating service's job (see ``InboundService.apply_receipt``); each
aggregate only guards its own invariants.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from uuid import UUID, uuid4

from wms_kernel.domain.result import DomainError, Result
from wms_kernel.domain.validation import clean_optional, is_blank, is_empty_id
from wms_kernel.domain.values import Money, Quantity
from wms_kernel.logging_config import get_logger
from wms_modules.inbound.workflows import PURCHASE_ORDER_WORKFLOW

logger = get_logger("modules.inbound.models")

ORDER_NUMBER_MAX_LENGTH = 50
SUPPLIER_NAME_MAX_LENGTH = 200


class PurchaseOrderStatus(Enum):
    """Purchase order lifecycle states (values match the workflow states)."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    PARTIALLY_RECEIVED = "partially_received"
    FULLY_RECEIVED = "fully_received"
    CANCELLED = "cancelled"


# =============================================================================
# PurchaseOrderLine
# =============================================================================


@dataclass(eq=False)
class PurchaseOrderLine:
    """
    One product ordered on a purchase order.

    Contract: owned by exactly one ``PurchaseOrder`` (``purchase_order_id``);
    mutated only through ``receive``.  ``product_id`` is a reference only --
    product existence is checked by the caller at command time.
    """
    id: UUID
    purchase_order_id: UUID
    line_number: int
    product_id: UUID
    quantity: Quantity
    unit_cost: Money
    received_quantity: Quantity = field(default_factory=Quantity.zero)

    @classmethod
    def create(
        cls,
        purchase_order_id: UUID,
        product_id: UUID,
        quantity: Quantity,
        unit_cost: Money,
        line_number: int = 1,
    ) -> Result[PurchaseOrderLine]:
        if is_empty_id(purchase_order_id):
            return Result.failure(DomainError.validation(
                "PurchaseOrderLine.PurchaseOrderId", "PurchaseOrderId is required.",
            ))
        if is_empty_id(product_id):
            return Result.failure(DomainError.validation(
                "PurchaseOrderLine.ProductId", "ProductId is required.",
            ))
        if quantity.is_zero:
            return Result.failure(DomainError.validation(
                "PurchaseOrderLine.Quantity", "Quantity must be greater than zero.",
            ))
        return Result.success(cls(
            id=uuid4(),
            purchase_order_id=purchase_order_id,
            line_number=line_number,
            product_id=product_id,
            quantity=quantity,
            unit_cost=unit_cost,
        ))

    @property
    def is_fully_received(self) -> bool:
        return self.received_quantity >= self.quantity

    @property
    def remaining_quantity(self) -> Quantity:
        remaining = self.quantity.subtract(self.received_quantity)
        return remaining.unwrap_or(Quantity.zero())

    @property
    def line_total(self) -> Money:
        """Ordered quantity at unit cost."""
        return self.unit_cost.multiply(self.quantity.value)

    def check_receive(self, quantity_received: Quantity) -> Result[Quantity]:
        """
        Validate a receipt against this line without mutating it.

        Returns the cumulative received quantity the line would hold.
        """
        if quantity_received.is_zero:
            return Result.failure(DomainError.validation(
                "PurchaseOrderLine.QuantityReceived",
                "Received quantity must be greater than zero.",
            ))
        updated = self.received_quantity + quantity_received
        if updated > self.quantity:
            return Result.failure(DomainError.validation(
                "PurchaseOrderLine.OverReceive",
                f"Cannot receive more than ordered. Ordered: {self.quantity.value}, "
                f"already received: {self.received_quantity.value}, "
                f"receiving: {quantity_received.value}.",
            ))
        return Result.success(updated)

    def receive(self, quantity_received: Quantity) -> Result[None]:
        """Accumulate a received quantity; rejects zero and over-receipt."""
        checked = self.check_receive(quantity_received)
        if checked.is_failure:
            return Result.failure(checked.error)
        self.received_quantity = checked.value
        return Result.success(None)


# =============================================================================
# PurchaseOrder
# =============================================================================


class PurchaseOrder:
    """
    Purchase order aggregate root.

    Contract:
        Created in ``DRAFT`` via ``create``.  Mutated only by ``add_line``,
        ``submit``, ``cancel`` and ``apply_receipt``, each returning a
        ``Result``.  Never destroyed; the lifecycle ends in
        ``FULLY_RECEIVED`` or ``CANCELLED``.

    Guarantees:
        - ``order_number`` is trimmed upper case, at most 50 characters.
        - ``supplier_name`` is trimmed, at most 200 characters.
        - ``lines`` is exposed as a tuple in insertion order.
    """

    def __init__(
        self,
        id: UUID,
        order_number: str,
        supplier_name: str,
        status: PurchaseOrderStatus = PurchaseOrderStatus.DRAFT,
        expected_delivery_date: date | None = None,
        notes: str | None = None,
        lines: Iterable[PurchaseOrderLine] = (),
    ):
        self.id = id
        self.order_number = order_number
        self.supplier_name = supplier_name
        self.status = status
        self.expected_delivery_date = expected_delivery_date
        self.notes = notes
        self._lines: list[PurchaseOrderLine] = list(lines)

    @classmethod
    def create(
        cls,
        order_number: str,
        supplier_name: str,
        expected_delivery_date: date | None = None,
        notes: str | None = None,
    ) -> Result[PurchaseOrder]:
        if is_blank(order_number):
            return Result.failure(DomainError.validation(
                "PurchaseOrder.OrderNumber", "Order number is required.",
            ))
        if len(order_number) > ORDER_NUMBER_MAX_LENGTH:
            return Result.failure(DomainError.validation(
                "PurchaseOrder.OrderNumber",
                f"Order number cannot exceed {ORDER_NUMBER_MAX_LENGTH} characters.",
            ))
        if is_blank(supplier_name):
            return Result.failure(DomainError.validation(
                "PurchaseOrder.SupplierName", "Supplier name is required.",
            ))
        if len(supplier_name) > SUPPLIER_NAME_MAX_LENGTH:
            return Result.failure(DomainError.validation(
                "PurchaseOrder.SupplierName",
                f"Supplier name cannot exceed {SUPPLIER_NAME_MAX_LENGTH} characters.",
            ))

        order = cls(
            id=uuid4(),
            order_number=normalize_order_number(order_number),
            supplier_name=supplier_name.strip(),
            status=PurchaseOrderStatus(PURCHASE_ORDER_WORKFLOW.initial_state),
            expected_delivery_date=expected_delivery_date,
            notes=clean_optional(notes),
        )
        logger.debug(
            "purchase_order_created",
            extra={"order_id": str(order.id), "order_number": order.order_number},
        )
        return Result.success(order)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def lines(self) -> tuple[PurchaseOrderLine, ...]:
        return tuple(self._lines)

    def get_line(self, line_id: UUID) -> PurchaseOrderLine | None:
        for line in self._lines:
            if line.id == line_id:
                return line
        return None

    def line_for_product(self, product_id: UUID) -> PurchaseOrderLine | None:
        for line in self._lines:
            if line.product_id == product_id:
                return line
        return None

    @property
    def is_fully_received(self) -> bool:
        return bool(self._lines) and all(line.is_fully_received for line in self._lines)

    def total_cost(self) -> Result[Money]:
        """Sum of line totals; fails when lines are priced in different currencies."""
        if not self._lines:
            return Result.success(Money.zero())
        total = Result.success(Money.zero(self._lines[0].unit_cost.currency))
        for line in self._lines:
            total = total.bind(lambda running, line=line: running.add(line.line_total))
        return total

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def add_line(
        self,
        product_id: UUID,
        quantity: Quantity,
        unit_cost: Money,
    ) -> Result[PurchaseOrderLine]:
        if self.status is PurchaseOrderStatus.CANCELLED:
            return Result.failure(DomainError.validation(
                "PurchaseOrder.Status", "Cannot add lines to a cancelled purchase order.",
            ))
        if self.line_for_product(product_id) is not None:
            return Result.failure(DomainError.conflict(
                "PurchaseOrderLine.ProductId",
                "Product already exists on this purchase order.",
            ))

        created = PurchaseOrderLine.create(
            self.id, product_id, quantity, unit_cost,
            line_number=len(self._lines) + 1,
        )
        if created.is_failure:
            return created

        self._lines.append(created.value)
        return created

    def submit(self) -> Result[None]:
        if self.status is not PurchaseOrderStatus.DRAFT:
            return Result.failure(DomainError.validation(
                "PurchaseOrder.Status", "Only draft purchase orders can be submitted.",
            ))
        return self._transition("submit", PurchaseOrderStatus.SUBMITTED)

    def cancel(self) -> Result[None]:
        if self.status is PurchaseOrderStatus.FULLY_RECEIVED:
            return Result.failure(DomainError.validation(
                "PurchaseOrder.Status", "Cannot cancel a fully received purchase order.",
            ))
        if self.status is PurchaseOrderStatus.CANCELLED:
            return Result.failure(DomainError.validation(
                "PurchaseOrder.Status", "Purchase order is already cancelled.",
            ))
        return self._transition("cancel", PurchaseOrderStatus.CANCELLED)

    def apply_receipt(
        self,
        received_lines: Sequence[tuple[UUID, Quantity]],
    ) -> Result[None]:
        """
        Record received quantities against this order's lines.

        All entries are validated first (duplicates, unknown lines, zero
        and over-receipt); lines are only mutated once every entry passed.
        """
        if self.status is PurchaseOrderStatus.CANCELLED:
            return Result.failure(DomainError.validation(
                "PurchaseOrder.Status", "Cannot receive against a cancelled purchase order.",
            ))
        if self.status is PurchaseOrderStatus.FULLY_RECEIVED:
            return Result.failure(DomainError.validation(
                "PurchaseOrder.Status", "Purchase order is already fully received.",
            ))
        if not received_lines:
            return Result.failure(DomainError.validation(
                "PurchaseOrder.ReceiptLines", "At least one receipt line is required.",
            ))

        # Pass 1: validate everything, mutate nothing.
        seen: set[UUID] = set()
        planned: list[tuple[PurchaseOrderLine, Quantity]] = []
        for line_id, quantity in received_lines:
            if line_id in seen:
                return Result.failure(DomainError.validation(
                    "PurchaseOrder.ReceiptLines",
                    "Duplicate purchase order lines are not allowed.",
                ))
            seen.add(line_id)

            line = self.get_line(line_id)
            if line is None:
                return Result.failure(DomainError.not_found(
                    "PurchaseOrderLine.Id", "Purchase order line not found.",
                ))

            checked = line.check_receive(quantity)
            if checked.is_failure:
                logger.debug(
                    "purchase_order_receipt_rejected",
                    extra={
                        "order_id": str(self.id),
                        "line_id": str(line_id),
                        "code": checked.error.code,
                    },
                )
                return Result.failure(checked.error)
            planned.append((line, quantity))

        # Pass 2: apply.
        for line, quantity in planned:
            received = line.receive(quantity)
            if received.is_failure:  # pragma: no cover - pass 1 already checked
                return received

        target = (
            PurchaseOrderStatus.FULLY_RECEIVED
            if self.is_fully_received
            else PurchaseOrderStatus.PARTIALLY_RECEIVED
        )
        return self._transition("receive", target)

    def _transition(self, action: str, target: PurchaseOrderStatus) -> Result[None]:
        transition = PURCHASE_ORDER_WORKFLOW.find_transition(
            self.status.value, action, target.value,
        )
        if transition is None:
            return Result.failure(DomainError.validation(
                "PurchaseOrder.Status",
                f"Cannot {action} a purchase order in status {self.status.value}.",
            ))
        previous = self.status
        self.status = target
        if previous is not target:
            logger.info(
                "purchase_order_status_changed",
                extra={
                    "order_id": str(self.id),
                    "action": action,
                    "from_status": previous.value,
                    "to_status": target.value,
                },
            )
        return Result.success(None)

    def __repr__(self) -> str:
        return (
            f"<PurchaseOrder {self.order_number} status={self.status.value} "
            f"lines={len(self._lines)}>"
        )


def normalize_order_number(order_number: str) -> str:
    """Canonical form used for storage and uniqueness checks."""
    return order_number.strip().upper()


# =============================================================================
# Receipt
# =============================================================================


@dataclass(frozen=True)
class ReceiptLine:
    """
    Quantity received for one purchase order line in one receiving event.

    Contract: immutable.  ``unit_cost`` is a snapshot of the order line's
    cost at the time of receipt, not a live reference.
    """
    id: UUID
    purchase_order_line_id: UUID
    product_id: UUID
    quantity_received: Quantity
    unit_cost: Money

    @classmethod
    def create(
        cls,
        purchase_order_line_id: UUID,
        product_id: UUID,
        quantity_received: Quantity,
        unit_cost: Money,
    ) -> Result[ReceiptLine]:
        if is_empty_id(purchase_order_line_id):
            return Result.failure(DomainError.validation(
                "ReceiptLine.PurchaseOrderLineId", "PurchaseOrderLineId is required.",
            ))
        if is_empty_id(product_id):
            return Result.failure(DomainError.validation(
                "ReceiptLine.ProductId", "ProductId is required.",
            ))
        if quantity_received.is_zero:
            return Result.failure(DomainError.validation(
                "ReceiptLine.QuantityReceived",
                "Received quantity must be greater than zero.",
            ))
        return Result.success(cls(
            id=uuid4(),
            purchase_order_line_id=purchase_order_line_id,
            product_id=product_id,
            quantity_received=quantity_received,
            unit_cost=unit_cost,
        ))

    @property
    def line_total(self) -> Money:
        return self.unit_cost.multiply(self.quantity_received.value)


@dataclass(frozen=True)
class Receipt:
    """
    Immutable record of one receiving event against a purchase order.

    Contract: always constructed with its full, non-empty line set.
    """
    id: UUID
    purchase_order_id: UUID
    received_at: datetime
    notes: str | None
    lines: tuple[ReceiptLine, ...]

    @classmethod
    def create(
        cls,
        purchase_order_id: UUID,
        received_at: datetime | None,
        notes: str | None,
        lines: Iterable[ReceiptLine],
    ) -> Result[Receipt]:
        if is_empty_id(purchase_order_id):
            return Result.failure(DomainError.validation(
                "Receipt.PurchaseOrderId", "PurchaseOrderId is required.",
            ))
        if _is_unset_timestamp(received_at):
            return Result.failure(DomainError.validation(
                "Receipt.ReceivedAt", "ReceivedAt is required.",
            ))
        line_tuple = tuple(lines)
        if not line_tuple:
            return Result.failure(DomainError.validation(
                "Receipt.Lines", "Receipt must contain at least one line.",
            ))
        return Result.success(cls(
            id=uuid4(),
            purchase_order_id=purchase_order_id,
            received_at=received_at,
            notes=clean_optional(notes),
            lines=line_tuple,
        ))

    @property
    def total_quantity(self) -> Quantity:
        total = Quantity.zero()
        for line in self.lines:
            total = total + line.quantity_received
        return total


def _is_unset_timestamp(value: datetime | None) -> bool:
    if value is None:
        return True
    return value.replace(tzinfo=None) == datetime.min
