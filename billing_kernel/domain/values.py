"""
Values -- Currency and Money.

Rates and quantities stay plain Decimal throughout billing; anything that is
an amount owed travels as Money so its currency cannot be lost or mixed.

Invariants:
    - Amounts are Decimal, never float.
    - Currency codes are checked against CurrencyRegistry on construction.
    - Addition refuses to mix currencies.
    - Nothing rounds implicitly; callers quantize() when a rule says so.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

from billing_kernel.domain.currency import CurrencyRegistry


@dataclass(frozen=True, slots=True)
class Currency:
    """A supported ISO 4217 code, upper-cased and stripped."""

    code: str

    def __post_init__(self) -> None:
        normalized = (self.code or "").strip().upper()
        if not CurrencyRegistry.is_valid(normalized):
            raise ValueError(f"Unsupported currency code: {self.code!r}")
        object.__setattr__(self, "code", normalized)

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    def __str__(self) -> str:
        return self.code


def _as_decimal(value: object) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        raise ValueError(f"Money amount must not be float: {value!r}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc


@dataclass(frozen=True, slots=True)
class Money:
    """A Decimal amount bound to its Currency."""

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", _as_decimal(self.amount))
        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency).__name__}")

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        return cls(amount=_as_decimal(amount), currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        return cls(amount=Decimal("0"), currency=currency)

    @classmethod
    def sum(cls, amounts: Iterable[Money], currency: str | Currency) -> Money:
        """Exact sum in ``currency``; an empty iterable gives zero."""
        total = cls.zero(currency)
        for amount in amounts:
            total = total + amount
        return total

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    def quantize(self, places: int = 2, rounding: str = ROUND_HALF_UP) -> Money:
        exponent = Decimal(1).scaleb(-places)
        return Money(self.amount.quantize(exponent, rounding=rounding), self.currency)

    def formatted(self) -> str:
        """``"AED 5,028.00"``, padded to the currency's minor units."""
        return f"{self.currency.code} {self.amount:,.{self.currency.decimal_places}f}"

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        if self.currency != other.currency:
            raise ValueError(f"Cannot add {self.currency} and {other.currency} amounts")
        return Money(self.amount + other.amount, self.currency)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"
