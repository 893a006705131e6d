"""
Inventory Domain Models (``wms_modules.inventory.models``).

Responsibility
--------------
The stock ledger and the catalog reference data it points at:

* ``InventoryItem`` (root) -- current quantity of one product at one
  location, owning the ordered, append-only list of ``StockMovement``
  records that explain every change to it.
* ``StockMovement`` -- one typed, reasoned ledger entry.  Quantity is always
  a non-negative magnitude; direction comes from ``MovementType``.
* ``Product`` and ``Location`` -- catalog entities that inventory items and
  purchase order lines reference by id.

Architecture
------------
Layer: **Modules** -- pure domain objects, no I/O.  Independent of the
inbound module: receiving a purchase order does not touch stock.

Invariants
----------
- Replaying an item's movements (inbound adds, outbound subtracts) always
  yields its current quantity.
- Movements are never edited or removed; every stock change appends one.
- ``remove_stock`` never takes the quantity below zero.
- Every ``MovementType`` is classified as inbound or outbound in
  ``INBOUND_MOVEMENT_TYPES`` / ``OUTBOUND_MOVEMENT_TYPES``; import fails if
  one is left unclassified.

Failure Modes
-------------
Commands return ``Result``; business-rule violations never raise.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from wms_kernel.domain.clock import Clock, SystemClock
from wms_kernel.domain.result import DomainError, Result
from wms_kernel.domain.validation import clean_optional, is_blank, is_empty_id
from wms_kernel.domain.values import Quantity
from wms_kernel.logging_config import get_logger

logger = get_logger("modules.inventory.models")

DEFAULT_INITIAL_REASON = "Initial stock"
REASON_MAX_LENGTH = 500


class MovementType(Enum):
    """Closed classification of why stock changed."""
    INITIAL = "initial"
    RECEIVED = "received"
    PICKED = "picked"
    ADJUSTMENT_IN = "adjustment_in"
    ADJUSTMENT_OUT = "adjustment_out"
    TRANSFER = "transfer"
    RETURN = "return"
    DAMAGED = "damaged"
    COUNT_CORRECTION = "count_correction"


INBOUND_MOVEMENT_TYPES: frozenset[MovementType] = frozenset({
    MovementType.INITIAL,
    MovementType.RECEIVED,
    MovementType.ADJUSTMENT_IN,
    MovementType.RETURN,
})

OUTBOUND_MOVEMENT_TYPES: frozenset[MovementType] = frozenset({
    MovementType.PICKED,
    MovementType.ADJUSTMENT_OUT,
    MovementType.TRANSFER,
    MovementType.DAMAGED,
    MovementType.COUNT_CORRECTION,
})

_unclassified = set(MovementType) - INBOUND_MOVEMENT_TYPES - OUTBOUND_MOVEMENT_TYPES
if _unclassified or INBOUND_MOVEMENT_TYPES & OUTBOUND_MOVEMENT_TYPES:
    raise RuntimeError(
        "Every MovementType must be exactly one of inbound/outbound; "
        f"unclassified: {sorted(m.value for m in _unclassified)}"
    )


def _now(clock: Clock | None) -> datetime:
    return (clock or SystemClock()).now()


# =============================================================================
# StockMovement
# =============================================================================


@dataclass(frozen=True)
class StockMovement:
    """
    Append-only audit entry for an inventory item.

    Contract: immutable once created.  ``sequence`` is the movement's
    1-based position in its item's ledger.
    """
    id: UUID
    inventory_item_id: UUID
    movement_type: MovementType
    quantity: Quantity
    reason: str
    recorded_at: datetime
    sequence: int = 1

    @classmethod
    def create(
        cls,
        inventory_item_id: UUID,
        movement_type: MovementType,
        quantity: Quantity,
        reason: str | None,
        *,
        recorded_at: datetime,
        sequence: int = 1,
    ) -> Result[StockMovement]:
        if is_empty_id(inventory_item_id):
            return Result.failure(DomainError.validation(
                "StockMovement.InventoryItemId", "Inventory item ID is required.",
            ))
        if is_blank(reason):
            return Result.failure(DomainError.validation(
                "StockMovement.Reason", "Reason is required for stock movements.",
            ))
        if len(reason) > REASON_MAX_LENGTH:
            return Result.failure(DomainError.validation(
                "StockMovement.Reason",
                f"Reason cannot exceed {REASON_MAX_LENGTH} characters.",
            ))
        return Result.success(cls(
            id=uuid4(),
            inventory_item_id=inventory_item_id,
            movement_type=movement_type,
            quantity=quantity,
            reason=reason.strip(),
            recorded_at=recorded_at,
            sequence=sequence,
        ))

    @property
    def is_inbound(self) -> bool:
        return self.movement_type in INBOUND_MOVEMENT_TYPES

    @property
    def is_outbound(self) -> bool:
        return not self.is_inbound

    @property
    def signed_quantity(self) -> Decimal:
        """Quantity with direction applied: positive in, negative out."""
        return self.quantity.value if self.is_inbound else -self.quantity.value


# =============================================================================
# InventoryItem
# =============================================================================


class InventoryItem:
    """
    Stock of one product at one location, with its full movement ledger.

    Contract:
        Created via ``create`` with an initial quantity and exactly one
        ``INITIAL`` movement.  Mutated only by ``add_stock``,
        ``remove_stock`` and ``adjust_stock``; each appends one movement and
        updates ``quantity`` together, or changes nothing.

    Non-goals:
        - Does NOT enforce (product, location) uniqueness -- the store does.
        - Does NOT restrict which movement types go through ``add_stock``
          versus ``remove_stock``; direction is advisory via
          ``StockMovement.is_inbound``.
    """

    def __init__(
        self,
        id: UUID,
        product_id: UUID,
        location_id: UUID,
        quantity: Quantity,
        movements: Iterable[StockMovement] = (),
    ):
        self.id = id
        self.product_id = product_id
        self.location_id = location_id
        self.quantity = quantity
        self._movements: list[StockMovement] = list(movements)

    @classmethod
    def create(
        cls,
        product_id: UUID,
        location_id: UUID,
        initial_quantity: Quantity,
        reason: str | None = None,
        *,
        clock: Clock | None = None,
    ) -> Result[InventoryItem]:
        if is_empty_id(product_id):
            return Result.failure(DomainError.validation(
                "InventoryItem.ProductId", "Product ID is required.",
            ))
        if is_empty_id(location_id):
            return Result.failure(DomainError.validation(
                "InventoryItem.LocationId", "Location ID is required.",
            ))

        item = cls(uuid4(), product_id, location_id, initial_quantity)
        movement = StockMovement.create(
            item.id,
            MovementType.INITIAL,
            initial_quantity,
            reason if reason is not None else DEFAULT_INITIAL_REASON,
            recorded_at=_now(clock),
            sequence=1,
        )
        if movement.is_failure:
            return Result.failure(movement.error)

        item._movements.append(movement.value)
        logger.debug(
            "inventory_item_created",
            extra={
                "item_id": str(item.id),
                "product_id": str(product_id),
                "location_id": str(location_id),
                "initial_quantity": str(initial_quantity.value),
            },
        )
        return Result.success(item)

    @property
    def movements(self) -> tuple[StockMovement, ...]:
        return tuple(self._movements)

    def add_stock(
        self,
        quantity: Quantity,
        movement_type: MovementType,
        reason: str,
        *,
        clock: Clock | None = None,
    ) -> Result[StockMovement]:
        movement = self._new_movement(movement_type, quantity, reason, clock)
        if movement.is_failure:
            return movement

        self.quantity = self.quantity + quantity
        self._movements.append(movement.value)
        return movement

    def remove_stock(
        self,
        quantity: Quantity,
        movement_type: MovementType,
        reason: str,
        *,
        clock: Clock | None = None,
    ) -> Result[StockMovement]:
        remaining = self.quantity.subtract(quantity)
        if remaining.is_failure:
            logger.debug(
                "inventory_item_insufficient_stock",
                extra={
                    "item_id": str(self.id),
                    "available": str(self.quantity.value),
                    "requested": str(quantity.value),
                },
            )
            return Result.failure(DomainError.validation(
                "InventoryItem.Quantity",
                f"Insufficient stock. Available: {self.quantity.value}, "
                f"Requested: {quantity.value}",
            ))

        movement = self._new_movement(movement_type, quantity, reason, clock)
        if movement.is_failure:
            return movement

        self.quantity = remaining.value
        self._movements.append(movement.value)
        return movement

    def adjust_stock(
        self,
        adjustment: int | Decimal,
        reason: str,
        *,
        clock: Clock | None = None,
    ) -> Result[StockMovement]:
        """Signed manual adjustment: positive adds, negative removes."""
        if adjustment == 0:
            return Result.failure(DomainError.validation(
                "InventoryItem.Adjustment", "Adjustment cannot be zero.",
            ))

        magnitude = Quantity.create(abs(adjustment))
        if magnitude.is_failure:
            return Result.failure(magnitude.error)

        if adjustment > 0:
            return self.add_stock(
                magnitude.value, MovementType.ADJUSTMENT_IN, reason, clock=clock,
            )
        return self.remove_stock(
            magnitude.value, MovementType.ADJUSTMENT_OUT, reason, clock=clock,
        )

    def replay(self) -> Decimal:
        """On-hand quantity reconstructed from the movement ledger."""
        return sum((m.signed_quantity for m in self._movements), Decimal("0"))

    @property
    def is_reconciled(self) -> bool:
        return self.replay() == self.quantity.value

    def _new_movement(
        self,
        movement_type: MovementType,
        quantity: Quantity,
        reason: str,
        clock: Clock | None,
    ) -> Result[StockMovement]:
        return StockMovement.create(
            self.id,
            movement_type,
            quantity,
            reason,
            recorded_at=_now(clock),
            sequence=len(self._movements) + 1,
        )

    def __repr__(self) -> str:
        return (
            f"<InventoryItem {self.id} product={self.product_id} "
            f"location={self.location_id} qty={self.quantity.value}>"
        )


# =============================================================================
# Catalog: Product
# =============================================================================

SKU_MAX_LENGTH = 50
NAME_MAX_LENGTH = 200


class Product:
    """
    A stock-keeping unit.

    Contract: SKU is trimmed upper case; dimensions and weight are
    non-negative Decimals.
    """

    def __init__(
        self,
        id: UUID,
        sku: str,
        name: str,
        description: str | None = None,
        weight: Decimal = Decimal("0"),
        length: Decimal = Decimal("0"),
        width: Decimal = Decimal("0"),
        height: Decimal = Decimal("0"),
        is_active: bool = True,
    ):
        self.id = id
        self.sku = sku
        self.name = name
        self.description = description
        self.weight = weight
        self.length = length
        self.width = width
        self.height = height
        self.is_active = is_active

    @classmethod
    def create(
        cls,
        sku: str,
        name: str,
        description: str | None = None,
        weight: Decimal = Decimal("0"),
        length: Decimal = Decimal("0"),
        width: Decimal = Decimal("0"),
        height: Decimal = Decimal("0"),
    ) -> Result[Product]:
        if is_blank(sku):
            return Result.failure(DomainError.validation("Product.Sku", "SKU is required."))
        if len(sku) > SKU_MAX_LENGTH:
            return Result.failure(DomainError.validation(
                "Product.Sku", f"SKU cannot exceed {SKU_MAX_LENGTH} characters.",
            ))
        checked = _check_product_details(name, weight, length, width, height)
        if checked.is_failure:
            return Result.failure(checked.error)

        return Result.success(cls(
            id=uuid4(),
            sku=sku.strip().upper(),
            name=name.strip(),
            description=clean_optional(description),
            weight=Decimal(weight),
            length=Decimal(length),
            width=Decimal(width),
            height=Decimal(height),
        ))

    def update(
        self,
        name: str,
        description: str | None,
        weight: Decimal,
        length: Decimal,
        width: Decimal,
        height: Decimal,
    ) -> Result[None]:
        checked = _check_product_details(name, weight, length, width, height)
        if checked.is_failure:
            return checked
        self.name = name.strip()
        self.description = clean_optional(description)
        self.weight = Decimal(weight)
        self.length = Decimal(length)
        self.width = Decimal(width)
        self.height = Decimal(height)
        return Result.success(None)

    def activate(self) -> None:
        self.is_active = True

    def deactivate(self) -> None:
        self.is_active = False

    @property
    def volume(self) -> Decimal:
        return self.length * self.width * self.height


def _check_product_details(
    name: str,
    weight: Decimal,
    length: Decimal,
    width: Decimal,
    height: Decimal,
) -> Result[None]:
    if is_blank(name):
        return Result.failure(DomainError.validation("Product.Name", "Name is required."))
    if len(name) > NAME_MAX_LENGTH:
        return Result.failure(DomainError.validation(
            "Product.Name", f"Name cannot exceed {NAME_MAX_LENGTH} characters.",
        ))
    if weight < 0:
        return Result.failure(DomainError.validation(
            "Product.Weight", "Weight cannot be negative.",
        ))
    if length < 0 or width < 0 or height < 0:
        return Result.failure(DomainError.validation(
            "Product.Dimensions", "Dimensions cannot be negative.",
        ))
    return Result.success(None)


# =============================================================================
# Catalog: Location
# =============================================================================

_LOCATION_CODE = re.compile(r"^([A-Z])-(\d{2})-(\d{2})-(\d{2})$")


class Location:
    """
    A warehouse storage bin addressed as Zone-Aisle-Rack-Bin.

    Contract: ``code`` has the form ``Z-AA-RR-BB`` (e.g. ``A-01-02-03``);
    aisle, rack and bin are 1..99; capacity is at least 1.
    """

    def __init__(
        self,
        id: UUID,
        code: str,
        name: str,
        zone: str,
        aisle: int,
        rack: int,
        bin: int,
        capacity: int = 100,
        is_active: bool = True,
    ):
        self.id = id
        self.code = code
        self.name = name
        self.zone = zone
        self.aisle = aisle
        self.rack = rack
        self.bin = bin
        self.capacity = capacity
        self.is_active = is_active

    @classmethod
    def create(
        cls,
        zone: str,
        aisle: int,
        rack: int,
        bin: int,
        name: str | None = None,
        capacity: int = 100,
    ) -> Result[Location]:
        if is_blank(zone) or len(zone) != 1 or not zone.isalpha() or not zone.isascii():
            return Result.failure(DomainError.validation(
                "Location.Zone", "Zone must be a single letter (A-Z).",
            ))
        for field_name, value in (("Aisle", aisle), ("Rack", rack), ("Bin", bin)):
            if value < 1 or value > 99:
                return Result.failure(DomainError.validation(
                    f"Location.{field_name}", f"{field_name} must be between 1 and 99.",
                ))
        if capacity < 1:
            return Result.failure(DomainError.validation(
                "Location.Capacity", "Capacity must be at least 1.",
            ))

        zone = zone.upper()
        code = f"{zone}-{aisle:02d}-{rack:02d}-{bin:02d}"
        default_name = f"Zone {zone}, Aisle {aisle}, Rack {rack}, Bin {bin}"
        return Result.success(cls(
            id=uuid4(),
            code=code,
            name=name.strip() if name is not None else default_name,
            zone=zone,
            aisle=aisle,
            rack=rack,
            bin=bin,
            capacity=capacity,
        ))

    @classmethod
    def create_from_code(
        cls,
        code: str,
        name: str | None = None,
        capacity: int = 100,
    ) -> Result[Location]:
        if is_blank(code):
            return Result.failure(DomainError.validation("Location.Code", "Code is required."))
        match = _LOCATION_CODE.match(code.strip().upper())
        if match is None:
            return Result.failure(DomainError.validation(
                "Location.Code",
                "Code must be in format 'Z-AA-RR-BB' (e.g., 'A-01-02-03').",
            ))
        zone, aisle, rack, bin_ = match.groups()
        return cls.create(zone, int(aisle), int(rack), int(bin_), name, capacity)

    def update_capacity(self, capacity: int) -> Result[None]:
        if capacity < 1:
            return Result.failure(DomainError.validation(
                "Location.Capacity", "Capacity must be at least 1.",
            ))
        self.capacity = capacity
        return Result.success(None)

    def activate(self) -> None:
        self.is_active = True

    def deactivate(self) -> None:
        self.is_active = False
