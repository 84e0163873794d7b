"""Exact fixed-point currency values.

Every amount the engine produces passes through MonetaryValue, which wraps a
Decimal quantized to whole cents. Rounding happens in exactly one place
(``_to_cents``) and always uses ROUND_HALF_UP, so identical inputs produce
identical outputs down to the last digit.

Example:
    >>> wages = MonetaryValue("50000")
    >>> wages.times_rate("0.15")
    MonetaryValue(amount=Decimal('7500.00'))
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation
from functools import total_ordering
from typing import Union

CENT = Decimal("0.01")

# Largest amount accepted on an input entry (one quadrillion dollars). Sums of
# bounded entries stay far inside the default 28-digit decimal context.
MAX_AMOUNT = Decimal("1000000000000000")

MoneyLike = Union["MonetaryValue", Decimal, int, str]
RateLike = Union[Decimal, int, str]


def _to_decimal(value: MoneyLike | RateLike) -> Decimal:
    """Convert an accepted input to Decimal without passing through float."""
    if isinstance(value, MonetaryValue):
        return value.amount
    if isinstance(value, (bool, float)):
        raise TypeError(
            f"Currency math does not accept {type(value).__name__} values; "
            "use Decimal, int, or str"
        )
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value)
        except InvalidOperation as exc:
            raise ValueError(f"Not a decimal number: {value!r}") from exc
    else:
        raise TypeError(f"Unsupported monetary type: {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"Monetary values must be finite, got {value!r}")
    return result


def _to_cents(value: MoneyLike) -> Decimal:
    decimal_value = _to_decimal(value)
    try:
        cents = decimal_value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"Amount too large to hold to the cent: {decimal_value}") from exc
    # Collapse -0.00 so equal values print identically
    return cents if cents != 0 else Decimal("0.00")


@total_ordering
@dataclass(frozen=True)
class MonetaryValue:
    """A currency amount held exactly to the cent.

    Attributes:
        amount: Decimal quantized to two places.
    """

    amount: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", _to_cents(self.amount))

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def zero(cls) -> MonetaryValue:
        return cls(Decimal("0"))

    @classmethod
    def total(cls, values: Iterable[MonetaryValue]) -> MonetaryValue:
        """Sum monetary values; an empty iterable totals to zero."""
        result = Decimal("0")
        for value in values:
            result += value.amount
        return cls(result)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def __add__(self, other: object) -> MonetaryValue:
        if not isinstance(other, MonetaryValue):
            return NotImplemented
        return MonetaryValue(self.amount + other.amount)

    def __sub__(self, other: object) -> MonetaryValue:
        if not isinstance(other, MonetaryValue):
            return NotImplemented
        return MonetaryValue(self.amount - other.amount)

    def times(self, count: int) -> MonetaryValue:
        """Multiply by a whole number (e.g. a per-child credit)."""
        if isinstance(count, bool) or not isinstance(count, int):
            raise TypeError(f"count must be an int, got {type(count).__name__}")
        return MonetaryValue(self.amount * count)

    def times_rate(self, rate: RateLike) -> MonetaryValue:
        """Multiply by a rate such as Decimal("0.22"), rounding half-up to the cent.

        Args:
            rate: Decimal, int, or numeric string. Floats are rejected.

        Returns:
            The rounded product.
        """
        return MonetaryValue(self.amount * _to_decimal(rate))

    def whole_multiples_of(self, step: MonetaryValue) -> int:
        """Count whole ``step`` increments contained in this amount (floored)."""
        if step.amount <= 0:
            raise ValueError(f"step must be positive, got {step}")
        return int((self.amount / step.amount).to_integral_value(rounding=ROUND_FLOOR))

    def floor_at_zero(self) -> MonetaryValue:
        return self if self.amount > 0 else MonetaryValue.zero()

    def is_zero(self) -> bool:
        return self.amount == 0

    # -------------------------------------------------------------------------
    # Comparison / display
    # -------------------------------------------------------------------------

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, MonetaryValue):
            return NotImplemented
        return self.amount < other.amount

    def __str__(self) -> str:
        return str(self.amount)

    def format_usd(self) -> str:
        """Render as a dollar string, e.g. ``$6,307.50``."""
        sign = "-" if self.amount < 0 else ""
        return f"{sign}${abs(self.amount):,.2f}"
