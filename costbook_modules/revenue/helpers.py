"""
costbook_modules.revenue.helpers
================================

Responsibility:
    Pure functions for percentage-of-completion (工事進行基準) revenue
    recognition.  No I/O, no session, no clock: every input is passed in
    and every output is a frozen dataclass.

Formulas:
    recognized_revenue = round_half_up(contract * rate / 100)
    profit             = recognized_revenue - total_cost
    profit_margin      = 0 if recognized_revenue == 0 else profit / revenue * 100
    cost_efficiency    = 0 if rate == 0 else total_cost / rate * 100

Failure modes:
    - InvalidProgressRateError for a rate outside 0..100.
    - CrossTenantAccessError for a progress record from another company.
    - ValidationError for a progress record of another project.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from costbook_kernel.db.types import round_ratio
from costbook_kernel.domain.values import Money
from costbook_kernel.exceptions import (
    CrossTenantAccessError,
    InvalidProgressRateError,
    ValidationError,
)
from costbook_modules.project.models import ProgressRecord, ProjectRecord
from costbook_modules.revenue.models import PortfolioTotals, ProjectFinancials

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def validate_progress_rate(rate: Decimal, record_id: object = None) -> Decimal:
    if rate is None or not isinstance(rate, Decimal) or not rate.is_finite():
        raise InvalidProgressRateError(rate, str(record_id) if record_id else None)
    if rate < _ZERO or rate > _HUNDRED:
        raise InvalidProgressRateError(rate, str(record_id) if record_id else None)
    return rate


def select_latest_progress(
    records: Iterable[ProgressRecord],
) -> ProgressRecord | None:
    """Latest record by ``progress_date``; ``sequence`` breaks same-day ties."""
    latest: ProgressRecord | None = None
    for record in records:
        if latest is None or (record.progress_date, record.sequence) > (
            latest.progress_date,
            latest.sequence,
        ):
            latest = record
    return latest


def recognized_revenue(contract_amount: Decimal, rate: Decimal, currency: str = "JPY") -> Decimal:
    """Contract amount times rate percent, rounded half-up to the minor unit."""
    validate_progress_rate(rate)
    return (Money.of(contract_amount, currency) * rate / _HUNDRED).round().amount


def profit_margin(revenue: Decimal, profit: Decimal) -> Decimal:
    if revenue == _ZERO:
        return round_ratio(_ZERO)
    return round_ratio(profit / revenue * _HUNDRED)


def cost_efficiency(total_cost: Decimal, rate: Decimal) -> Decimal:
    if rate == _ZERO:
        return round_ratio(_ZERO)
    return round_ratio(total_cost / rate * _HUNDRED)


def _check_ownership(project: ProjectRecord, records: Sequence[ProgressRecord]) -> None:
    for record in records:
        if record.company_id != project.company_id:
            raise CrossTenantAccessError(
                "ProgressRecord", str(record.id), str(project.company_id)
            )
        if record.project_id != project.id:
            raise ValidationError(
                f"Progress record {record.id} belongs to project "
                f"{record.project_id}, not {project.id}"
            )
        validate_progress_rate(record.progress_rate, record.id)


def compute_project_financials(
    project: ProjectRecord,
    progress_records: Sequence[ProgressRecord],
    total_cost: Decimal,
    currency: str = "JPY",
) -> ProjectFinancials | None:
    """
    Financials for a percentage-of-completion project.

    Returns None for subscription and overhead projects: their revenue is
    not recognized from progress.  A project with no progress records is
    at 0%.
    """
    if not project.recognizes_progress_revenue:
        return None

    _check_ownership(project, progress_records)
    latest = select_latest_progress(progress_records)
    rate = latest.progress_rate if latest is not None else _ZERO

    revenue = recognized_revenue(project.contract_amount, rate, currency)
    profit = revenue - total_cost

    return ProjectFinancials(
        project_id=project.id,
        business_number=project.business_number,
        name=project.name,
        contract_amount=project.contract_amount,
        progress_rate=rate,
        recognized_revenue=revenue,
        total_cost=total_cost,
        profit=profit,
        profit_margin=profit_margin(revenue, profit),
        cost_efficiency=cost_efficiency(total_cost, rate),
        latest_progress_date=latest.progress_date if latest is not None else None,
        currency=currency,
    )


def aggregate_portfolio(
    results: Iterable[ProjectFinancials], currency: str = "JPY"
) -> PortfolioTotals:
    """Sum across projects and recompute the margin from the sums."""
    items = list(results)
    total_contract = sum((r.contract_amount for r in items), _ZERO)
    total_revenue = sum((r.recognized_revenue for r in items), _ZERO)
    total_cost = sum((r.total_cost for r in items), _ZERO)
    total_profit = total_revenue - total_cost
    return PortfolioTotals(
        project_count=len(items),
        total_contract=total_contract,
        total_revenue=total_revenue,
        total_cost=total_cost,
        total_profit=total_profit,
        profit_margin=profit_margin(total_revenue, total_profit),
        currency=currency,
    )


def revenue_earned_between(
    contract_amount: Decimal,
    records: Sequence[ProgressRecord],
    start: date,
    end: date,
    currency: str = "JPY",
) -> Decimal:
    """
    Revenue recognized by progress dated in ``[start, end)``.

    The sum of recognized-revenue increments over that span equals the
    revenue at the last rate before ``end`` minus the revenue at the last
    rate before ``start``.
    """
    before_start = select_latest_progress(r for r in records if r.progress_date < start)
    before_end = select_latest_progress(r for r in records if r.progress_date < end)
    opening_rate = before_start.progress_rate if before_start is not None else _ZERO
    closing_rate = before_end.progress_rate if before_end is not None else _ZERO
    return recognized_revenue(contract_amount, closing_rate, currency) - recognized_revenue(
        contract_amount, opening_rate, currency
    )
