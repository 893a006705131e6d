"""
Result -- Success-or-typed-failure return values.

Responsibility:
    Every domain operation that can violate a business rule returns a
    ``Result`` instead of raising.  A Result is either a success carrying a
    value or a failure carrying exactly one ``DomainError``.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by value objects, aggregates and services alike.

Invariants enforced:
    - A Result is never both successful and failed; a failure always
      carries an error and a success never does.
    - Errors are classified into a closed set of kinds (validation,
      conflict, not_found) so callers can map them to transport codes
      without parsing messages.

Failure modes:
    - ResultAccessError when reading ``value`` of a failure or ``error`` of
      a success.  That is a programming error, not a business failure.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from wms_kernel.exceptions import ResultAccessError

T = TypeVar("T")
U = TypeVar("U")


class ErrorKind(str, Enum):
    """Closed classification of expected business failures."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class DomainError:
    """
    A single business-rule failure.

    Contract:
        Carries the failure kind, a machine-readable dotted code naming the
        offending field or rule (e.g. ``PurchaseOrderLine.OverReceive``), and
        a human-readable message meant to be surfaced verbatim.
    """

    kind: ErrorKind
    code: str
    message: str

    @classmethod
    def validation(cls, code: str, message: str) -> DomainError:
        """Malformed or out-of-range input."""
        return cls(kind=ErrorKind.VALIDATION, code=code, message=message)

    @classmethod
    def conflict(cls, code: str, message: str) -> DomainError:
        """Input violates a uniqueness or duplication rule."""
        return cls(kind=ErrorKind.CONFLICT, code=code, message=message)

    @classmethod
    def not_found(cls, code: str, message: str) -> DomainError:
        """A referenced identifier does not resolve."""
        return cls(kind=ErrorKind.NOT_FOUND, code=code, message=message)

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.code}: {self.message}"


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of a domain operation.

    Contract:
        Build with ``Result.success(value)`` or ``Result.failure(error)``.
        Check ``is_success`` / ``is_failure`` (or ``bool(result)``) before
        reading ``value`` or ``error``.

    Guarantees:
        - Immutable (frozen dataclass)
        - ``error`` is non-None exactly when the result is a failure
        - ``map`` and ``bind`` short-circuit on failure, propagating the
          first error unchanged

    Non-goals:
        - Does NOT aggregate multiple errors -- operations stop on the
          first failure they meet.
    """

    _value: T | None = None
    _error: DomainError | None = None

    @classmethod
    def success(cls, value: T = None) -> Result[T]:  # type: ignore[assignment]
        """Create a successful result."""
        return cls(_value=value, _error=None)

    @classmethod
    def failure(cls, error: DomainError) -> Result[Any]:
        """Create a failed result."""
        if error is None:
            raise ResultAccessError("A failed Result requires an error")
        return cls(_value=None, _error=error)

    @property
    def is_success(self) -> bool:
        return self._error is None

    @property
    def is_failure(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> T:
        """The success value. Raises ResultAccessError on a failure."""
        if self._error is not None:
            raise ResultAccessError(
                f"Cannot access value of a failed Result ({self._error.code})"
            )
        return self._value  # type: ignore[return-value]

    @property
    def error(self) -> DomainError:
        """The failure. Raises ResultAccessError on a success."""
        if self._error is None:
            raise ResultAccessError("Cannot access error of a successful Result")
        return self._error

    def map(self, fn: Callable[[T], U]) -> Result[U]:
        """Transform the success value; failures pass through."""
        if self._error is not None:
            return Result.failure(self._error)
        return Result.success(fn(self._value))  # type: ignore[arg-type]

    def bind(self, fn: Callable[[T], Result[U]]) -> Result[U]:
        """Chain another Result-returning step; failures pass through."""
        if self._error is not None:
            return Result.failure(self._error)
        return fn(self._value)  # type: ignore[arg-type]

    def unwrap_or(self, default: T) -> T:
        """The success value, or ``default`` on failure."""
        if self._error is not None:
            return default
        return self._value  # type: ignore[return-value]

    def __bool__(self) -> bool:
        return self.is_success

    def __repr__(self) -> str:
        if self._error is not None:
            return f"Result.failure({self._error!s})"
        return f"Result.success({self._value!r})"
