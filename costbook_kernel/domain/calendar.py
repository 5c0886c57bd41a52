"""
Calendar -- Month arithmetic and fiscal-calendar rules.

Responsibility:
    Owns the ``YearMonth`` value type and the pure functions that turn a
    tenant's fiscal definition (fiscal year + settlement month) into
    concrete calendar months: the forecast start month, the 12-month
    forecast window, and the fiscal year a date falls in.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - A settlement month is always within 1..12.
    - A forecast window is consecutive months with no gaps or repeats.
    - The fiscal year starts the month after the settlement month.

Failure modes:
    - InvalidSettlementMonthError for a settlement month outside 1..12.
    - InvalidFiscalYearError for a fiscal year or period that is not positive.
    - ValueError for a malformed ``YYYY-MM`` string or month outside 1..12.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from costbook_kernel.exceptions import InvalidFiscalYearError, InvalidSettlementMonthError

MONTHS_PER_YEAR = 12

_YEAR_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")


def validate_settlement_month(settlement_month: object) -> int:
    """Return ``settlement_month`` if it is an int in 1..12, else raise."""
    if (
        isinstance(settlement_month, bool)
        or not isinstance(settlement_month, int)
        or not 1 <= settlement_month <= MONTHS_PER_YEAR
    ):
        raise InvalidSettlementMonthError(settlement_month)
    return settlement_month


def validate_positive_int(value: object, field_name: str = "fiscal_year") -> int:
    """Return ``value`` if it is a positive int, else raise InvalidFiscalYearError."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidFiscalYearError(value, field_name)
    return value


@dataclass(frozen=True, order=True, slots=True)
class YearMonth:
    """
    A calendar month.

    Ordering compares (year, month) lexicographically, so sorting a list of
    YearMonth values yields chronological order.
    """

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= MONTHS_PER_YEAR:
            raise ValueError(f"Month must be 1..12, got {self.month}")
        if self.year < 1:
            raise ValueError(f"Year must be positive, got {self.year}")

    @classmethod
    def from_date(cls, d: date) -> YearMonth:
        return cls(d.year, d.month)

    @classmethod
    def parse(cls, value: str) -> YearMonth:
        """Parse ``YYYY-MM`` (a single-digit month is accepted)."""
        match = _YEAR_MONTH_RE.match(value.strip()) if isinstance(value, str) else None
        if match is None:
            raise ValueError(f"Expected YYYY-MM, got {value!r}")
        return cls(int(match.group(1)), int(match.group(2)))

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    def next(self) -> YearMonth:
        return self.plus_months(1)

    def plus_months(self, n: int) -> YearMonth:
        index = self.year * MONTHS_PER_YEAR + (self.month - 1) + n
        return YearMonth(index // MONTHS_PER_YEAR, index % MONTHS_PER_YEAR + 1)

    def contains(self, d: date) -> bool:
        return d.year == self.year and d.month == self.month

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def next_forecast_start_month(fiscal_year: int, settlement_month: int) -> YearMonth:
    """
    First month after the settlement month.

    A December settlement rolls into January of the following year;
    any other settlement month ``m`` gives ``(fiscal_year, m + 1)``.
    """
    validate_settlement_month(settlement_month)
    if settlement_month == MONTHS_PER_YEAR:
        return YearMonth(fiscal_year + 1, 1)
    return YearMonth(fiscal_year, settlement_month + 1)


def forecast_window(
    fiscal_year: int, settlement_month: int, months: int = MONTHS_PER_YEAR
) -> tuple[YearMonth, ...]:
    """Consecutive months beginning at the forecast start month."""
    start = next_forecast_start_month(fiscal_year, settlement_month)
    return tuple(start.plus_months(i) for i in range(months))


def resolve_fiscal_year(d: date, settlement_month: int) -> int:
    """
    Fiscal year that ``d`` falls in.

    The fiscal year is named by the calendar year of its first month, which
    is the month after ``settlement_month``.  With a March settlement,
    2025-04-01 through 2026-03-31 is fiscal year 2025.
    """
    validate_settlement_month(settlement_month)
    if settlement_month == MONTHS_PER_YEAR:
        return d.year
    if d.month > settlement_month:
        return d.year
    return d.year - 1


def fiscal_year_bounds(fiscal_year: int, settlement_month: int) -> tuple[date, date]:
    """Inclusive start and exclusive end dates of a fiscal year."""
    validate_settlement_month(settlement_month)
    if settlement_month == MONTHS_PER_YEAR:
        start = YearMonth(fiscal_year, 1)
    else:
        start = YearMonth(fiscal_year, settlement_month + 1)
    return start.first_day, start.plus_months(MONTHS_PER_YEAR).first_day
