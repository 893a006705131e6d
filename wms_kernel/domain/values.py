"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides the two value types every warehouse aggregate is built from:
    Quantity (a non-negative count of goods) and Money (a non-negative
    amount in a three-letter currency).  These replace raw Decimal/str
    wherever stock or cost appears in domain logic.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every aggregate.  Depends only on ``domain.result``.

Invariants enforced:
    - Quantity.value >= 0 always.  Subtraction that would go negative
      returns a failure instead of clamping.
    - Money.amount >= 0 always and is rounded to 2 decimal places
      (ROUND_HALF_UP) on construction.
    - Money.currency is three ASCII letters, upper-cased.
    - Decimal-only arithmetic (floats are converted through ``str``).

Failure modes:
    - ``create`` factories return ``Result.failure`` with a validation
      error for negative, non-finite or unparseable input.
    - Arithmetic that can fail (``Quantity.subtract``, ``Money.add``,
      ``Money.subtract``) returns a ``Result``; it never raises.
    - Direct construction with invalid data raises ValueError.  Domain code
      uses the ``create`` factories; direct construction is reserved for
      values already known to be valid (e.g. rows loaded from the store).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from wms_kernel.domain.result import DomainError, Result

Numeric = Union[Decimal, int, str, float]

_MONEY_QUANTUM = Decimal("0.01")
_ZERO = Decimal("0")


def _to_decimal(value: Numeric) -> Decimal | None:
    """Convert to a finite Decimal, or None when that is impossible."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    if not result.is_finite():
        return None
    return result


@dataclass(frozen=True, slots=True)
class Quantity:
    """
    Non-negative quantity of goods.

    Contract:
        Wraps a Decimal magnitude.  Direction (in/out) is never carried by
        sign; it lives on whatever records the movement.

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots)
        - value is always a finite, non-negative Decimal
        - ``add`` cannot fail; ``subtract`` returns a Result
    """

    value: Decimal

    def __post_init__(self) -> None:
        converted = _to_decimal(self.value)
        if converted is None:
            raise ValueError(f"Invalid quantity value: {self.value!r}")
        if converted < _ZERO:
            raise ValueError(f"Quantity cannot be negative: {converted}")
        object.__setattr__(self, "value", converted)

    @classmethod
    def create(cls, value: Numeric) -> Result[Quantity]:
        """Validate and build a Quantity."""
        converted = _to_decimal(value)
        if converted is None:
            return Result.failure(DomainError.validation(
                "Quantity.Invalid", f"Quantity '{value}' is not a number.",
            ))
        if converted < _ZERO:
            return Result.failure(DomainError.validation(
                "Quantity.Negative", "Quantity cannot be negative.",
            ))
        return Result.success(cls(converted))

    @classmethod
    def zero(cls) -> Quantity:
        return cls(_ZERO)

    @property
    def is_zero(self) -> bool:
        return self.value == _ZERO

    def add(self, other: Quantity) -> Quantity:
        """Sum of two quantities (always valid)."""
        return Quantity(self.value + other.value)

    def subtract(self, other: Quantity) -> Result[Quantity]:
        """Difference, or a failure when it would go below zero."""
        remaining = self.value - other.value
        if remaining < _ZERO:
            return Result.failure(DomainError.validation(
                "Quantity.InsufficientStock",
                f"Cannot subtract {other.value} from {self.value}.",
            ))
        return Result.success(Quantity(remaining))

    def __add__(self, other: Quantity) -> Quantity:
        if not isinstance(other, Quantity):
            return NotImplemented
        return self.add(other)

    def __lt__(self, other: Quantity) -> bool:
        if not isinstance(other, Quantity):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: Quantity) -> bool:
        if not isinstance(other, Quantity):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other: Quantity) -> bool:
        if not isinstance(other, Quantity):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other: Quantity) -> bool:
        if not isinstance(other, Quantity):
            return NotImplemented
        return self.value >= other.value

    def __str__(self) -> str:
        return f"{self.value:.2f}"

    def __repr__(self) -> str:
        return f"Quantity({self.value!r})"


@dataclass(frozen=True, slots=True)
class Money:
    """
    Non-negative monetary amount with its currency.

    Contract:
        Pairs a Decimal amount with a three-letter currency code -- they are
        never separated.  The amount is rounded to cents on construction.

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots)
        - amount is a non-negative Decimal with exactly 2 decimal places
        - currency is three upper-case ASCII letters
        - No silent currency mixing: ``add``/``subtract`` fail on mismatch

    Non-goals:
        - Does NOT perform currency conversion
        - Does NOT validate against an ISO 4217 registry beyond shape
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        converted = _to_decimal(self.amount)
        if converted is None:
            raise ValueError(f"Invalid amount: {self.amount!r}")
        if converted < _ZERO:
            raise ValueError(f"Money amount cannot be negative: {converted}")
        code = _normalize_currency(self.currency)
        if code is None:
            raise ValueError(f"Invalid currency code: {self.currency!r}")
        object.__setattr__(
            self, "amount", converted.quantize(_MONEY_QUANTUM, rounding=ROUND_HALF_UP)
        )
        object.__setattr__(self, "currency", code)

    @classmethod
    def create(cls, amount: Numeric, currency: str | None = "USD") -> Result[Money]:
        """Validate and build Money, rounding the amount to 2 places."""
        converted = _to_decimal(amount)
        if converted is None:
            return Result.failure(DomainError.validation(
                "Money.Invalid", f"Amount '{amount}' is not a number.",
            ))
        if converted < _ZERO:
            return Result.failure(DomainError.validation(
                "Money.Negative", "Amount cannot be negative.",
            ))
        if currency is None or not currency.strip():
            return Result.failure(DomainError.validation(
                "Money.InvalidCurrency", "Currency cannot be empty.",
            ))
        code = _normalize_currency(currency)
        if code is None:
            return Result.failure(DomainError.validation(
                "Money.InvalidCurrency", "Currency must be a 3-letter ISO code.",
            ))
        return Result.success(cls(converted, code))

    @classmethod
    def zero(cls, currency: str = "USD") -> Money:
        return cls(_ZERO, currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == _ZERO

    def add(self, other: Money) -> Result[Money]:
        """Sum in the same currency."""
        if self.currency != other.currency:
            return Result.failure(DomainError.validation(
                "Money.CurrencyMismatch",
                f"Cannot add {self.currency} and {other.currency}.",
            ))
        return Result.success(Money(self.amount + other.amount, self.currency))

    def subtract(self, other: Money) -> Result[Money]:
        """Difference in the same currency; never negative."""
        if self.currency != other.currency:
            return Result.failure(DomainError.validation(
                "Money.CurrencyMismatch",
                f"Cannot subtract {self.currency} and {other.currency}.",
            ))
        difference = self.amount - other.amount
        if difference < _ZERO:
            return Result.failure(DomainError.validation(
                "Money.Negative", "Result cannot be negative.",
            ))
        return Result.success(Money(difference, self.currency))

    def multiply(self, factor: Numeric) -> Money:
        """
        Scale by a non-negative factor (e.g. unit cost x quantity).

        Raises:
            ValueError: factor is negative or not a number.  Callers pass
                quantities, which are non-negative by construction.
        """
        converted = _to_decimal(factor)
        if converted is None or converted < _ZERO:
            raise ValueError(f"Factor must be a non-negative number: {factor!r}")
        return Money(self.amount * converted, self.currency)

    def __str__(self) -> str:
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"


def _normalize_currency(currency: str | None) -> str | None:
    if not isinstance(currency, str):
        return None
    code = currency.strip().upper()
    if len(code) != 3 or not (code.isascii() and code.isalpha()):
        return None
    return code
