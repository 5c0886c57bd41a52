"""
costbook_modules.fiscal.helpers
===============================

Responsibility:
    Pure functions behind the fiscal calendar manager: choosing the
    current fiscal row, computing the months that move in and out of the
    12-month window when the definition changes, and summarizing the
    impact of a change.

Impact rule:
    old window = 12 months after ``from_.settlement_month`` in ``from_.fiscal_year``
    new window = 12 months after ``to.settlement_month`` in ``to.fiscal_year``
    revenue_impact = sum(dated revenue in months only in the new window)
                   - sum(dated revenue in months only in the old window)

    Dated revenue is scheduled billing of non-subscription projects,
    subscription billing, and recognized revenue of percentage-of-completion
    projects dated by their latest progress record.  ``cost_impact`` applies
    the same rule to cost entries.  Overhead projects are left out of
    revenue and of ``project_count``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from costbook_kernel.domain.calendar import YearMonth, forecast_window
from costbook_modules.billing.models import ScheduledBillingEntry
from costbook_modules.fiscal.models import FiscalDefinition, ImpactSummary
from costbook_modules.project.models import (
    CostEntry,
    ProgressRecord,
    ProjectKind,
    ProjectRecord,
    SubscriptionBilling,
)
from costbook_modules.revenue.helpers import recognized_revenue, select_latest_progress

_ZERO = Decimal("0")


def select_current_fiscal_info(rows):
    """The row with the greatest ``fiscal_year``, or None for no rows."""
    current = None
    for row in rows:
        if current is None or row.fiscal_year > current.fiscal_year:
            current = row
    return current


def shifted_months(
    from_: FiscalDefinition, to: FiscalDefinition
) -> tuple[tuple[YearMonth, ...], tuple[YearMonth, ...]]:
    """Months entering and leaving the window, each ascending."""
    old = set(forecast_window(from_.fiscal_year, from_.settlement_month))
    new = set(forecast_window(to.fiscal_year, to.settlement_month))
    return tuple(sorted(new - old)), tuple(sorted(old - new))


@dataclass(frozen=True)
class ImpactCounts:
    """Observed counts the recommendation rules are keyed on."""
    months_shifted: int
    project_count: int
    affected_subscription_billings: int
    affected_cost_entries: int
    ledger_row_count: int
    fiscal_year_changed: bool
    amounts_changed: bool


RECOMMENDATION_RULES: tuple[tuple[Callable[[ImpactCounts], bool], str], ...] = (
    (lambda c: True,
     "Back up fiscal, billing and ledger data before applying the change"),
    (lambda c: c.months_shifted > 0,
     "Review the annual payment schedule for the new fiscal window"),
    (lambda c: c.months_shifted > 0 or c.amounts_changed,
     "Recompute the cash-flow forecast"),
    (lambda c: c.project_count > 0,
     "Check payment dates of projects with amounts in shifted months"),
    (lambda c: c.affected_subscription_billings > 0,
     "Check the fiscal-year classification of subscription billings"),
    (lambda c: c.affected_cost_entries > 0,
     "Check the fiscal-year classification of cost entries"),
    (lambda c: c.fiscal_year_changed or c.ledger_row_count > 0,
     "Create bank balance ledger rows for the new fiscal year"),
    (lambda c: c.project_count > 0,
     "Recompute project fiscal summaries"),
)


def build_recommendations(counts: ImpactCounts) -> tuple[str, ...]:
    return tuple(message for applies, message in RECOMMENDATION_RULES if applies(counts))


def analyze_impact(
    from_: FiscalDefinition,
    to: FiscalDefinition,
    *,
    projects: Sequence[ProjectRecord],
    scheduled_billings: Iterable[ScheduledBillingEntry],
    subscription_billings: Iterable[SubscriptionBilling],
    cost_entries: Iterable[CostEntry],
    progress_by_project: Mapping[UUID, Sequence[ProgressRecord]],
    ledger_row_count: int = 0,
    currency: str = "JPY",
) -> ImpactSummary:
    """Deterministic impact of changing the fiscal definition.  No I/O."""
    added, removed = shifted_months(from_, to)
    added_set, removed_set = set(added), set(removed)

    def sign(month: YearMonth) -> int:
        if month in added_set:
            return 1
        if month in removed_set:
            return -1
        return 0

    kinds = {p.id: p.kind for p in projects}
    touched: set[UUID] = set()
    revenue_impact = _ZERO
    cost_impact = _ZERO

    for entry in scheduled_billings:
        kind = kinds.get(entry.project_id)
        if kind is not ProjectKind.PERCENTAGE_OF_COMPLETION:
            continue
        direction = sign(YearMonth.parse(entry.year_month))
        if direction:
            revenue_impact += direction * entry.amount
            touched.add(entry.project_id)

    # subscription billings are counted, their amounts stay out of revenue_impact
    affected_subscriptions = 0
    for billing in subscription_billings:
        if sign(YearMonth.parse(billing.year_month)):
            affected_subscriptions += 1
            if billing.project_id is not None and kinds.get(billing.project_id) not in (
                None,
                ProjectKind.OVERHEAD,
            ):
                touched.add(billing.project_id)

    for project in projects:
        if not project.recognizes_progress_revenue:
            continue
        latest = select_latest_progress(progress_by_project.get(project.id, ()))
        if latest is None:
            continue
        direction = sign(YearMonth.from_date(latest.progress_date))
        if direction:
            revenue_impact += direction * recognized_revenue(
                project.contract_amount, latest.progress_rate, currency
            )
            touched.add(project.id)

    affected_costs = 0
    for cost in cost_entries:
        direction = sign(YearMonth.from_date(cost.entry_date))
        if direction:
            cost_impact += direction * cost.amount
            affected_costs += 1
            if cost.project_id is not None and kinds.get(cost.project_id) not in (
                None,
                ProjectKind.OVERHEAD,
            ):
                touched.add(cost.project_id)

    counts = ImpactCounts(
        months_shifted=len(added) + len(removed),
        project_count=len(touched),
        affected_subscription_billings=affected_subscriptions,
        affected_cost_entries=affected_costs,
        ledger_row_count=ledger_row_count,
        fiscal_year_changed=from_.fiscal_year != to.fiscal_year,
        amounts_changed=revenue_impact != _ZERO or cost_impact != _ZERO,
    )

    return ImpactSummary(
        project_count=len(touched),
        revenue_impact=revenue_impact,
        cost_impact=cost_impact,
        recommendations=build_recommendations(counts),
        shifted_months_added=tuple(str(m) for m in added),
        shifted_months_removed=tuple(str(m) for m in removed),
        affected_subscription_billings=affected_subscriptions,
        affected_cost_entries=affected_costs,
        ledger_row_count=ledger_row_count,
    )
