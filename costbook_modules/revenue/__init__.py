"""
costbook_modules.revenue
========================

Percentage-of-completion revenue recognition: pure calculators in
``helpers`` and a tenant report in ``service``.
"""

from costbook_modules.revenue.config import RevenueConfig
from costbook_modules.revenue.helpers import (
    aggregate_portfolio,
    compute_project_financials,
    recognized_revenue,
    select_latest_progress,
)
from costbook_modules.revenue.models import PortfolioTotals, ProjectFinancials, RevenueReport
from costbook_modules.revenue.service import RevenueRecognitionService

__all__ = [
    "PortfolioTotals",
    "ProjectFinancials",
    "RevenueConfig",
    "RevenueRecognitionService",
    "RevenueReport",
    "aggregate_portfolio",
    "compute_project_financials",
    "recognized_revenue",
    "select_latest_progress",
]
