"""
Typed Exception Hierarchy for the WMS Kernel.

===============================================================================
WHAT RAISES AND WHAT RETURNS
===============================================================================

Business-rule violations (zero quantity, over-receive, duplicate product,
cancelling a received order, ...) are NEVER raised.  Domain operations
return a ``Result`` carrying a ``DomainError`` instead
(see ``wms_kernel.domain.result``).

The exceptions in this module cover everything else:
  - Programming errors (reading the value of a failed Result)
  - Infrastructure conditions (optimistic lock conflicts)
  - Tampering with append-only records (immutability violations)
  - Broken configuration

Every exception has a CODE class attribute (machine-readable) and stores its
context as attributes, so it can be logged and serialized without parsing
the message.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    WmsKernelError (base)
    |
    +-- ResultAccessError
    |
    +-- ConcurrencyError
    |   +-- OptimisticLockError
    |
    +-- ImmutabilityError
    |   +-- ImmutabilityViolationError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Result          | RESULT_ACCESS               | .value on failure / .error on success
----------------|-----------------------------|-----------------------------------------
Concurrency     | OPTIMISTIC_LOCK_CONFLICT    | Aggregate changed by another transaction
----------------|-----------------------------|-----------------------------------------
Immutability    | IMMUTABILITY_VIOLATION      | UPDATE/DELETE of an append-only record
----------------|-----------------------------|-----------------------------------------
Configuration   | CONFIGURATION_ERROR         | Unknown key or invalid value in settings

===============================================================================
HANDLING PATTERNS
===============================================================================

1. CONCURRENCY (retry the whole command, never a fragment of it):

    try:
        result = service.apply_receipt(order_id, received_at, lines)
    except OptimisticLockError:
        result = service.apply_receipt(order_id, received_at, lines)

2. IMMUTABILITY (investigate -- something tried to rewrite history):

    except ImmutabilityViolationError as e:
        log.error("tamper_attempt", extra={"entity": e.entity_type})
"""


class WmsKernelError(Exception):
    """
    Base exception for all WMS kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "WMS_KERNEL_ERROR"


class ResultAccessError(WmsKernelError):
    """The wrong side of a Result was read (value of a failure or vice versa)."""

    code: str = "RESULT_ACCESS"

    def __init__(self, message: str):
        super().__init__(message)


# Concurrency-related exceptions


class ConcurrencyError(WmsKernelError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class OptimisticLockError(ConcurrencyError):
    """Optimistic locking conflict detected."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            f"Optimistic lock conflict on {entity_type} {entity_id}: "
            "entity was modified by another transaction"
        )


# Immutability-related exceptions


class ImmutabilityError(WmsKernelError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an immutable record.

    Receipts, receipt lines and stock movements are append-only from the
    moment they are created.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )


# Configuration-related exceptions


class ConfigurationError(WmsKernelError):
    """Settings could not be loaded or contain invalid values."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration for {key!r}: {reason}")
