"""
costbook_modules.forecast.models
================================

Frozen dataclasses for the 12-month cash-flow forecast.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from costbook_kernel.domain.calendar import YearMonth


@dataclass(frozen=True)
class ForecastRow:
    """
    One projected month.

    ``projected_inflow`` is ``scheduled_inflow + subscription_inflow``;
    ``running_balance`` is the balance after this month's flows.
    """
    month: YearMonth
    scheduled_inflow: Decimal
    subscription_inflow: Decimal
    projected_inflow: Decimal
    projected_outflow: Decimal
    net_flow: Decimal
    running_balance: Decimal
    below_threshold: bool = False

    @property
    def year_month(self) -> str:
        return str(self.month)


@dataclass(frozen=True)
class ForecastSummary:
    total_inflow: Decimal
    total_outflow: Decimal
    net_flow: Decimal
    opening_balance: Decimal
    closing_balance: Decimal
    average_balance: Decimal
    minimum_balance: Decimal
    maximum_balance: Decimal
    months_below_threshold: int
    minimum_cash_threshold: Decimal


@dataclass(frozen=True)
class CashFlowForecast:
    company_id: UUID
    start_month: YearMonth
    rows: tuple[ForecastRow, ...]
    summary: ForecastSummary
    currency: str = "JPY"
