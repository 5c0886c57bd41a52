"""
costbook_modules.fiscal
=======================

Responsibility:
    Fiscal calendar manager -- current fiscal definition per tenant,
    mid-period changes with an append-only audit trail and impact
    analysis, and the year-end rollover.

Architecture:
    Module layer.  May import from costbook_kernel and sibling modules
    (project, revenue, billing, ledger).  MUST NOT be imported by
    costbook_kernel, except the inline import in db.immutability.
"""

from costbook_modules.fiscal.config import FiscalConfig
from costbook_modules.fiscal.helpers import (
    analyze_impact,
    select_current_fiscal_info,
    shifted_months,
)
from costbook_modules.fiscal.models import (
    FiscalDefinition,
    FiscalInfoSnapshot,
    FiscalPeriodChangeInfo,
    ImpactSummary,
    ProjectCarryover,
    RolloverResult,
)
from costbook_modules.fiscal.service import FiscalCalendarService, next_forecast_start_month

__all__ = [
    "FiscalCalendarService",
    "FiscalConfig",
    "FiscalDefinition",
    "FiscalInfoSnapshot",
    "FiscalPeriodChangeInfo",
    "ImpactSummary",
    "ProjectCarryover",
    "RolloverResult",
    "analyze_impact",
    "next_forecast_start_month",
    "select_current_fiscal_info",
    "shifted_months",
]
