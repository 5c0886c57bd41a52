"""
costbook_modules.forecast.helpers
=================================

Pure construction of the cash-flow forecast from per-month amounts.

    running_balance[0] = opening + inflow[0] - outflow[0]
    running_balance[i] = running_balance[i-1] + inflow[i] - outflow[i]

A month with no data contributes zero.  The forecast always spans
consecutive months starting at ``start_month``.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from uuid import UUID

from costbook_kernel.domain.calendar import MONTHS_PER_YEAR, YearMonth
from costbook_kernel.domain.values import Money
from costbook_modules.forecast.models import CashFlowForecast, ForecastRow, ForecastSummary


def _amount(values: Mapping[YearMonth, Money], month: YearMonth, currency: str) -> Money:
    return values.get(month) or Money.zero(currency)


def summarize(
    rows: tuple[ForecastRow, ...],
    opening_balance: Money,
    minimum_cash_threshold: Decimal,
) -> ForecastSummary:
    currency = opening_balance.currency
    total_in = Money.sum([Money(r.projected_inflow, currency) for r in rows], currency)
    total_out = Money.sum([Money(r.projected_outflow, currency) for r in rows], currency)
    balances = [r.running_balance for r in rows]
    closing = balances[-1] if balances else opening_balance.amount
    average = (
        Money(sum(balances, Decimal("0")), currency) / len(balances)
        if balances
        else opening_balance
    ).round()
    return ForecastSummary(
        total_inflow=total_in.amount,
        total_outflow=total_out.amount,
        net_flow=(total_in - total_out).amount,
        opening_balance=opening_balance.amount,
        closing_balance=closing,
        average_balance=average.amount,
        minimum_balance=min(balances, default=opening_balance.amount),
        maximum_balance=max(balances, default=opening_balance.amount),
        months_below_threshold=sum(1 for r in rows if r.below_threshold),
        minimum_cash_threshold=minimum_cash_threshold,
    )


def build_forecast(
    company_id: UUID,
    start_month: YearMonth,
    opening_balance: Money,
    scheduled: Mapping[YearMonth, Money],
    subscription: Mapping[YearMonth, Money],
    costs: Mapping[YearMonth, Money],
    minimum_cash_threshold: Decimal = Decimal("0"),
    months: int = MONTHS_PER_YEAR,
) -> CashFlowForecast:
    currency = opening_balance.currency.code
    balance = opening_balance
    rows: list[ForecastRow] = []

    for offset in range(months):
        month = start_month.plus_months(offset)
        scheduled_in = _amount(scheduled, month, currency)
        subscription_in = _amount(subscription, month, currency)
        inflow = scheduled_in + subscription_in
        outflow = _amount(costs, month, currency)
        balance = balance + inflow - outflow
        rows.append(
            ForecastRow(
                month=month,
                scheduled_inflow=scheduled_in.amount,
                subscription_inflow=subscription_in.amount,
                projected_inflow=inflow.amount,
                projected_outflow=outflow.amount,
                net_flow=(inflow - outflow).amount,
                running_balance=balance.amount,
                below_threshold=balance.amount < minimum_cash_threshold,
            )
        )

    frozen_rows = tuple(rows)
    return CashFlowForecast(
        company_id=company_id,
        start_month=start_month,
        rows=frozen_rows,
        summary=summarize(frozen_rows, opening_balance, minimum_cash_threshold),
        currency=currency,
    )
