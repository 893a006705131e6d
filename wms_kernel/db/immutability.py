"""
ORM-Level Immutability Enforcement.

Receipts, receipt lines and stock movements are append-only history: once
written they are never edited or removed.  Any correction is a new record
(a new receipt, or a compensating stock movement).

SQLAlchemy fires mapper events before UPDATE/DELETE statements reach the
database.  We register listeners that intercept them:

    session.flush()
         |
         v
    [before_update] --> _check_*_update() --> ImmutabilityViolationError
         |
    [before_delete] --> _check_*_delete() --> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

Entity            | When Immutable
------------------|------------------------
ReceiptModel      | ALWAYS (from creation)
ReceiptLineModel  | ALWAYS (from creation)
StockMovementModel| ALWAYS (from creation)

Audit metadata (``updated_at``, ``updated_by_id``, ``version``) may still
change; only domain columns are checked.

Usage:

    from wms_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()

To temporarily disable (TESTS ONLY):

    unregister_immutability_listeners()
"""

from sqlalchemy import event, inspect

from wms_kernel.exceptions import ImmutabilityViolationError
from wms_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

AUDIT_METADATA_FIELDS = frozenset({"updated_at", "updated_by_id", "version"})


def _changed_fields(target) -> list[str]:
    state = inspect(target)
    changed = []
    for attr in state.mapper.column_attrs:
        if attr.key in AUDIT_METADATA_FIELDS:
            continue
        if state.attrs[attr.key].history.has_changes():
            changed.append(attr.key)
    return changed


def _block(target, entity_type: str, operation: str, reason: str) -> None:
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(target.id),
            "operation": operation,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(target.id),
        reason=reason,
    )


def _check_receipt_update(mapper, connection, target):
    changed = _changed_fields(target)
    if changed:
        _block(
            target, "Receipt", "UPDATE",
            f"Receipts are immutable; attempted to change {', '.join(changed)}",
        )


def _check_receipt_delete(mapper, connection, target):
    _block(target, "Receipt", "DELETE", "Receipts cannot be deleted")


def _check_receipt_line_update(mapper, connection, target):
    changed = _changed_fields(target)
    if changed:
        _block(
            target, "ReceiptLine", "UPDATE",
            f"Receipt lines are immutable; attempted to change {', '.join(changed)}",
        )


def _check_receipt_line_delete(mapper, connection, target):
    _block(target, "ReceiptLine", "DELETE", "Receipt lines cannot be deleted")


def _check_stock_movement_update(mapper, connection, target):
    changed = _changed_fields(target)
    if changed:
        _block(
            target, "StockMovement", "UPDATE",
            "Stock movements are append-only; record a compensating movement "
            f"instead of changing {', '.join(changed)}",
        )


def _check_stock_movement_delete(mapper, connection, target):
    _block(target, "StockMovement", "DELETE", "Stock movements cannot be deleted")


def _listeners():
    from wms_modules.inbound.orm import ReceiptLineModel, ReceiptModel
    from wms_modules.inventory.orm import StockMovementModel

    return (
        (ReceiptModel, "before_update", _check_receipt_update),
        (ReceiptModel, "before_delete", _check_receipt_delete),
        (ReceiptLineModel, "before_update", _check_receipt_line_update),
        (ReceiptLineModel, "before_delete", _check_receipt_line_delete),
        (StockMovementModel, "before_update", _check_stock_movement_update),
        (StockMovementModel, "before_delete", _check_stock_movement_delete),
    )


def register_immutability_listeners():
    """Register all immutability listeners.  Safe to call more than once."""
    for target, event_name, listener_fn in _listeners():
        if not event.contains(target, event_name, listener_fn):
            event.listen(target, event_name, listener_fn)


def unregister_immutability_listeners():
    """
    Remove immutability listeners.

    WARNING: Only use this in tests that intentionally violate immutability.
    """
    for target, event_name, listener_fn in _listeners():
        if event.contains(target, event_name, listener_fn):
            event.remove(target, event_name, listener_fn)
