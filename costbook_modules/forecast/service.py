"""
costbook_modules.forecast.service
=================================

Responsibility:
    Projects a tenant's cash position over the 12 months following the
    current settlement month.  Read-only and idempotent: the same data
    always yields the same forecast.

Inputs per month:
    inflow  = scheduled billing of non-subscription projects
            + subscription billing
    outflow = cost entries dated in the month

The opening balance is the latest ledger closing balance, or zero when the
tenant has no ledger rows.  A tenant without fiscal info cannot be
forecast (FiscalInfoNotFoundError).
"""

from __future__ import annotations

from collections import defaultdict
from uuid import UUID

from sqlalchemy.orm import Session

from costbook_kernel.domain.calendar import YearMonth, forecast_window
from costbook_kernel.domain.values import Money
from costbook_kernel.logging_config import get_logger
from costbook_kernel.services.tenancy import require_company
from costbook_modules.billing.service import ScheduledBillingService
from costbook_modules.fiscal.config import FiscalConfig
from costbook_modules.fiscal.service import FiscalCalendarService
from costbook_modules.forecast.config import ForecastConfig
from costbook_modules.forecast.helpers import build_forecast
from costbook_modules.forecast.models import CashFlowForecast
from costbook_modules.ledger.config import LedgerConfig
from costbook_modules.ledger.service import LedgerService
from costbook_modules.project.classification import DEFAULT_RULES, ClassificationRules
from costbook_modules.project.selectors import ProjectSelector

logger = get_logger("modules.forecast.service")


class CashFlowForecastService:
    """12-month cash-flow forecast for one tenant."""

    def __init__(
        self,
        session: Session,
        config: ForecastConfig | None = None,
        rules: ClassificationRules = DEFAULT_RULES,
    ):
        self.session = session
        self.config = config or ForecastConfig.with_defaults()
        currency = self.config.currency
        self._calendar = FiscalCalendarService(session, FiscalConfig(currency=currency), rules)
        self._ledger = LedgerService(session, LedgerConfig(currency=currency))
        self._billing = ScheduledBillingService(session, rules, currency=currency)
        self._projects = ProjectSelector(session, rules)

    def _subscription_totals(
        self, company_id: UUID, window: tuple[YearMonth, ...]
    ) -> dict[YearMonth, Money]:
        currency = self.config.currency
        totals: dict[YearMonth, Money] = defaultdict(lambda: Money.zero(currency))
        for billing in self._projects.subscription_billings(company_id, [str(m) for m in window]):
            month = YearMonth.parse(billing.year_month)
            totals[month] = totals[month] + Money.of(billing.amount, currency)
        return dict(totals)

    def _cost_totals(
        self, company_id: UUID, window: tuple[YearMonth, ...]
    ) -> dict[YearMonth, Money]:
        currency = self.config.currency
        totals: dict[YearMonth, Money] = defaultdict(lambda: Money.zero(currency))
        entries = self._projects.cost_entries_between(
            company_id, window[0].first_day, window[-1].next().first_day
        )
        for entry in entries:
            month = YearMonth.from_date(entry.entry_date)
            totals[month] = totals[month] + Money.of(entry.amount, currency)
        return dict(totals)

    def forecast(self, company_id: UUID) -> CashFlowForecast:
        require_company(company_id)
        fiscal = self._calendar.get_current_fiscal_info(company_id)
        window = forecast_window(fiscal.fiscal_year, fiscal.settlement_month)

        result = build_forecast(
            company_id=company_id,
            start_month=window[0],
            opening_balance=self._ledger.opening_balance_or_zero(company_id),
            scheduled=self._billing.monthly_totals(company_id, window),
            subscription=self._subscription_totals(company_id, window),
            costs=self._cost_totals(company_id, window),
            minimum_cash_threshold=self.config.minimum_cash_threshold,
            months=len(window),
        )

        logger.info(
            "cash_forecast_generated",
            extra={
                "company_id": str(company_id),
                "start_month": str(result.start_month),
                "month_count": len(result.rows),
                "closing_balance": str(result.summary.closing_balance),
                "months_below_threshold": result.summary.months_below_threshold,
            },
        )
        return result
