"""
costbook_modules.revenue.models
===============================

Responsibility:
    Frozen dataclass results of percentage-of-completion revenue
    recognition: per-project financials, portfolio totals, and the report
    that bundles them.

Invariants enforced:
    - All monetary fields use ``Decimal`` -- never ``float``.
    - Ratio fields (margin, efficiency) are quantized to two places and
      always finite.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class ProjectFinancials:
    """
    Recognized revenue and profitability for one project.

    ``recognized_revenue`` is expressed in the currency's minor unit.
    ``cost_efficiency`` is the cost implied at 100% completion given the
    cost incurred so far.
    """
    project_id: UUID
    business_number: str
    name: str
    contract_amount: Decimal
    progress_rate: Decimal
    recognized_revenue: Decimal
    total_cost: Decimal
    profit: Decimal
    profit_margin: Decimal
    cost_efficiency: Decimal
    latest_progress_date: date | None = None
    currency: str = "JPY"


@dataclass(frozen=True)
class PortfolioTotals:
    """Sums across projects; ``profit_margin`` is derived from the sums."""
    project_count: int
    total_contract: Decimal
    total_revenue: Decimal
    total_cost: Decimal
    total_profit: Decimal
    profit_margin: Decimal
    currency: str = "JPY"


@dataclass(frozen=True)
class RevenueReport:
    company_id: UUID
    projects: tuple[ProjectFinancials, ...]
    totals: PortfolioTotals
