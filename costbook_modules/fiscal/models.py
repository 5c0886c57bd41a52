"""
costbook_modules.fiscal.models
==============================

Responsibility:
    Frozen dataclass value objects for a tenant's fiscal calendar: the
    current definition, the audit record of a mid-period change, the
    impact analysis of a proposed change, and the result of a year-end
    rollover.

Invariants enforced:
    - All monetary fields use ``Decimal`` -- never ``float``.
    - A fiscal definition always carries a settlement month within 1..12.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from costbook_kernel.domain.calendar import (
    YearMonth,
    next_forecast_start_month,
    validate_positive_int,
    validate_settlement_month,
)


@dataclass(frozen=True)
class FiscalDefinition:
    """A fiscal year named together with the month it settles in."""
    fiscal_year: int
    settlement_month: int

    def __post_init__(self):
        validate_positive_int(self.fiscal_year)
        validate_settlement_month(self.settlement_month)

    @property
    def forecast_start(self) -> YearMonth:
        return next_forecast_start_month(self.fiscal_year, self.settlement_month)


@dataclass(frozen=True)
class FiscalInfoSnapshot:
    """
    The tenant's current fiscal calendar.

    ``original_*`` record the definition in force before the first
    mid-period change and are never overwritten by later changes.
    """
    id: UUID
    company_id: UUID
    fiscal_year: int
    settlement_month: int
    current_period: int
    bank_balance: Decimal
    is_mid_period_change: bool = False
    change_reason: str | None = None
    original_fiscal_year: int | None = None
    original_settlement_month: int | None = None
    version: int = 1

    @property
    def definition(self) -> FiscalDefinition:
        return FiscalDefinition(self.fiscal_year, self.settlement_month)


@dataclass(frozen=True)
class ImpactSummary:
    """
    Effect of moving from one fiscal definition to another.

    Amounts are differences: what enters the new 12-month window minus
    what leaves the old one.
    """
    project_count: int
    revenue_impact: Decimal
    cost_impact: Decimal
    recommendations: tuple[str, ...] = ()
    shifted_months_added: tuple[str, ...] = ()
    shifted_months_removed: tuple[str, ...] = ()
    affected_subscription_billings: int = 0
    affected_cost_entries: int = 0
    ledger_row_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_count": self.project_count,
            "revenue_impact": str(self.revenue_impact),
            "cost_impact": str(self.cost_impact),
            "recommendations": list(self.recommendations),
            "shifted_months_added": list(self.shifted_months_added),
            "shifted_months_removed": list(self.shifted_months_removed),
            "affected_subscription_billings": self.affected_subscription_billings,
            "affected_cost_entries": self.affected_cost_entries,
            "ledger_row_count": self.ledger_row_count,
        }


@dataclass(frozen=True)
class FiscalPeriodChangeInfo:
    """Append-only audit record of one fiscal period change."""
    id: UUID
    company_id: UUID
    from_fiscal_year: int
    from_settlement_month: int
    to_fiscal_year: int
    to_settlement_month: int
    changed_at: datetime
    changed_by_id: UUID
    sequence: int
    reason: str | None = None
    impact_summary: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProjectCarryover:
    """Per-project outcome of a year-end rollover."""
    project_id: UUID
    business_number: str
    name: str
    contract_amount: Decimal
    earned: Decimal
    carryover: Decimal


@dataclass(frozen=True)
class RolloverResult:
    company_id: UUID
    from_fiscal_year: int
    to_fiscal_year: int
    projects_updated: int
    total_carryover: Decimal
    opening_bank_balance: Decimal
    ledger_month_opened: bool
    details: tuple[ProjectCarryover, ...] = ()
