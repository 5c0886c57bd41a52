"""
ProjectSelector -- read path over the collaborator tables.

Every query is filtered by ``company_id``; a row addressed by id that
belongs to another company raises CrossTenantAccessError.  Each method
issues a single query per table so that report builders load a tenant's
data in one pass.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from costbook_kernel.exceptions import ProjectNotFoundError
from costbook_kernel.selectors.base import BaseSelector
from costbook_kernel.services.tenancy import ensure_same_tenant
from costbook_modules.project.classification import DEFAULT_RULES, ClassificationRules
from costbook_modules.project.models import (
    CostEntry,
    ProgressRecord,
    ProjectRecord,
    SubscriptionBilling,
)
from costbook_modules.project.orm import (
    CostEntryModel,
    ProgressRecordModel,
    ProjectModel,
    SubscriptionBillingModel,
)


class ProjectSelector(BaseSelector[ProjectModel]):
    """Tenant-scoped reads of projects, progress, costs and subscription billings."""

    def __init__(self, session: Session, rules: ClassificationRules = DEFAULT_RULES):
        super().__init__(session)
        self.rules = rules

    def get_project(self, company_id: UUID, project_id: UUID) -> ProjectRecord:
        row = self.session.get(ProjectModel, project_id)
        if row is None:
            raise ProjectNotFoundError(str(project_id))
        ensure_same_tenant("Project", project_id, row.company_id, company_id)
        return row.to_dto(self.rules)

    def list_projects(self, company_id: UUID) -> list[ProjectRecord]:
        rows = self.session.scalars(
            select(ProjectModel)
            .where(ProjectModel.company_id == company_id)
            .order_by(ProjectModel.business_number, ProjectModel.id)
        ).all()
        return [row.to_dto(self.rules) for row in rows]

    def progress_by_project(self, company_id: UUID) -> dict[UUID, list[ProgressRecord]]:
        rows = self.session.scalars(
            select(ProgressRecordModel)
            .where(ProgressRecordModel.company_id == company_id)
            .order_by(ProgressRecordModel.progress_date, ProgressRecordModel.sequence)
        ).all()
        grouped: dict[UUID, list[ProgressRecord]] = defaultdict(list)
        for row in rows:
            grouped[row.project_id].append(row.to_dto())
        return dict(grouped)

    def cost_totals_by_project(self, company_id: UUID) -> dict[UUID, Decimal]:
        rows = self.session.execute(
            select(CostEntryModel.project_id, func.sum(CostEntryModel.amount))
            .where(
                CostEntryModel.company_id == company_id,
                CostEntryModel.project_id.is_not(None),
            )
            .group_by(CostEntryModel.project_id)
        ).all()
        return {project_id: Decimal(str(total or 0)) for project_id, total in rows}

    def cost_entries_between(
        self, company_id: UUID, start: date, end: date
    ) -> list[CostEntry]:
        """Cost entries with ``start <= entry_date < end``."""
        rows = self.session.scalars(
            select(CostEntryModel)
            .where(
                CostEntryModel.company_id == company_id,
                CostEntryModel.entry_date >= start,
                CostEntryModel.entry_date < end,
            )
            .order_by(CostEntryModel.entry_date)
        ).all()
        return [row.to_dto() for row in rows]

    def subscription_billings(
        self, company_id: UUID, year_months: Iterable[str]
    ) -> list[SubscriptionBilling]:
        months = sorted(set(year_months))
        if not months:
            return []
        rows = self.session.scalars(
            select(SubscriptionBillingModel)
            .where(
                SubscriptionBillingModel.company_id == company_id,
                SubscriptionBillingModel.year_month.in_(months),
            )
            .order_by(SubscriptionBillingModel.year_month)
        ).all()
        return [row.to_dto() for row in rows]
