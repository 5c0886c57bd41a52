"""Pure domain primitives: money, currency, calendar months, clock."""

from costbook_kernel.domain.calendar import (
    YearMonth,
    forecast_window,
    next_forecast_start_month,
    resolve_fiscal_year,
    validate_settlement_month,
)
from costbook_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from costbook_kernel.domain.values import Currency, Money

__all__ = [
    "Clock",
    "Currency",
    "DeterministicClock",
    "Money",
    "SystemClock",
    "YearMonth",
    "forecast_window",
    "next_forecast_start_month",
    "resolve_fiscal_year",
    "validate_settlement_month",
]
