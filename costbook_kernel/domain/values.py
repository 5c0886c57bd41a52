"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides the monetary value types used by every calculation in the
    engine: Currency and Money.  These replace raw Decimals wherever
    contract amounts, costs, billings or balances appear in domain logic.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    No outward dependencies except costbook_kernel.domain.currency.

Invariants enforced:
    - All monetary amounts are Decimal, never float.
    - Currency codes are validated at construction time.
    - Arithmetic never mixes currencies silently.
    - Rounding to the minor unit is explicit (Money.round), half-up by default.

Failure modes:
    - InvalidCurrencyError on an unknown currency code.
    - CurrencyMismatchError when arithmetic mixes currencies.
    - ValueError when the amount is not a finite number or is a float.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from functools import total_ordering

from costbook_kernel.domain.currency import CurrencyRegistry
from costbook_kernel.exceptions import CurrencyMismatchError


@dataclass(frozen=True, slots=True)
class Currency:
    """
    ISO 4217 currency code value object.

    Guarantees:
        - Immutable and hashable
        - code is always uppercase and registered in CurrencyRegistry
    """

    code: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", CurrencyRegistry.validate(self.code))

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    @property
    def quantum(self) -> Decimal:
        """Quantize exponent for this currency's minor unit."""
        places = self.decimal_places
        return Decimal("1") if places == 0 else Decimal("0." + "0" * places)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


def _as_currency(currency: str | Currency) -> Currency:
    return currency if isinstance(currency, Currency) else Currency(currency)


def _as_decimal(value: Decimal | int | str) -> Decimal | None:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, str)) and not isinstance(value, bool):
        return Decimal(str(value))
    return None


@total_ordering
@dataclass(frozen=True, slots=True)
class Money:
    """
    An amount of one currency.

    Contract amounts, costs, billings and balances all travel as Money in
    the calculation helpers.  Amounts keep full precision until ``round()``
    is called; nothing rounds implicitly.  Adding, subtracting or comparing
    two different currencies raises CurrencyMismatchError, and there is no
    conversion between currencies.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if isinstance(self.amount, float):
            raise ValueError(f"Money amount must not be float: {self.amount!r}")
        try:
            amount = _as_decimal(self.amount)
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {self.amount!r}") from e
        if amount is None or not amount.is_finite():
            raise ValueError(f"Money amount must be a finite number: {self.amount!r}")
        object.__setattr__(self, "amount", amount)

        if not isinstance(self.currency, (str, Currency)):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")
        object.__setattr__(self, "currency", _as_currency(self.currency))

    @classmethod
    def of(cls, amount: Decimal | str | int, currency: str | Currency) -> Money:
        return cls(amount=amount, currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        return cls(amount=Decimal("0"), currency=currency)

    @classmethod
    def sum(cls, values: Iterable[Money], currency: str | Currency) -> Money:
        """Total of ``values``; zero in ``currency`` when there are none."""
        total = cls.zero(currency)
        for value in values:
            total = total + value
        return total

    @property
    def is_zero(self) -> bool:
        return not self.amount

    def round(self, rounding: str = ROUND_HALF_UP) -> Money:
        """Quantize to the currency's minor unit, half-up unless told otherwise."""
        return self._with(self.amount.quantize(self.currency.quantum, rounding=rounding))

    def _with(self, amount: Decimal) -> Money:
        return Money(amount=amount, currency=self.currency)

    def _other_amount(self, other: Money) -> Decimal:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency.code, other.currency.code)
        return other.amount

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self._with(self.amount + self._other_amount(other))

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self._with(self.amount - self._other_amount(other))

    def __mul__(self, factor: Decimal | int | str) -> Money:
        scalar = _as_decimal(factor)
        return NotImplemented if scalar is None else self._with(self.amount * scalar)

    def __truediv__(self, divisor: Decimal | int | str) -> Money:
        scalar = _as_decimal(divisor)
        return NotImplemented if scalar is None else self._with(self.amount / scalar)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        return self.amount < self._other_amount(other)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.code}"
