"""
costbook_modules.revenue.service
================================

Responsibility:
    Builds the per-tenant progress/cost report.  Loads projects, progress
    records and cost totals in one query per table, excludes projects whose
    revenue is not recognized from progress, and delegates every figure to
    the pure helpers.

Usage::

    report = RevenueRecognitionService(session).project_financials_report(company_id)
    report.totals.profit_margin
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from costbook_kernel.logging_config import get_logger
from costbook_kernel.services.tenancy import require_company
from costbook_modules.project.selectors import ProjectSelector
from costbook_modules.revenue.config import RevenueConfig
from costbook_modules.revenue.helpers import aggregate_portfolio, compute_project_financials
from costbook_modules.revenue.models import ProjectFinancials, RevenueReport

logger = get_logger("modules.revenue.service")


class RevenueRecognitionService:
    """Read-only report over a tenant's percentage-of-completion projects."""

    def __init__(self, session: Session, config: RevenueConfig | None = None):
        self.session = session
        self.config = config or RevenueConfig.with_defaults()
        self._projects = ProjectSelector(session, self.config.classification)

    def project_financials_report(self, company_id: UUID) -> RevenueReport:
        require_company(company_id)
        currency = self.config.currency

        projects = self._projects.list_projects(company_id)
        progress = self._projects.progress_by_project(company_id)
        costs = self._projects.cost_totals_by_project(company_id)

        results: list[ProjectFinancials] = []
        excluded = 0
        for project in projects:
            financials = compute_project_financials(
                project,
                progress.get(project.id, []),
                costs.get(project.id, Decimal("0")),
                currency,
            )
            if financials is None:
                excluded += 1
                continue
            results.append(financials)

        totals = aggregate_portfolio(results, currency)
        logger.info(
            "revenue_report_generated",
            extra={
                "company_id": str(company_id),
                "project_count": totals.project_count,
                "excluded_count": excluded,
                "total_revenue": str(totals.total_revenue),
                "profit_margin": str(totals.profit_margin),
            },
        )
        return RevenueReport(company_id=company_id, projects=tuple(results), totals=totals)
