"""
costbook_modules.billing.service
================================

Responsibility:
    Maintains the scheduled (split) billing plan of each project and
    answers "how much is billed in month X" for the cash-flow forecast.

Invariants enforced:
    - At most one row per (project, month).  ``add`` rejects a duplicate;
      ``set_amount`` edits in place.  A month is never counted twice.
    - The project must belong to the calling tenant.
    - Amounts are never negative.
    - ``monthly_totals`` covers non-subscription projects only; subscription
      revenue comes from the subscription billing table.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from costbook_kernel.domain.calendar import YearMonth
from costbook_kernel.domain.clock import Clock
from costbook_kernel.domain.currency import CurrencyRegistry
from costbook_kernel.domain.values import Money
from costbook_kernel.exceptions import (
    InvalidAmountError,
    ScheduledBillingConflictError,
    ValidationError,
)
from costbook_kernel.logging_config import get_logger
from costbook_kernel.services.base import BaseService
from costbook_kernel.services.tenancy import require_company
from costbook_modules.billing.models import ScheduledBillingEntry
from costbook_modules.billing.orm import ScheduledBillingModel
from costbook_modules.project.classification import DEFAULT_RULES, ClassificationRules
from costbook_modules.project.models import ProjectKind, ProjectRecord
from costbook_modules.project.selectors import ProjectSelector

logger = get_logger("modules.billing.service")


def _to_year_month(value: str | YearMonth) -> YearMonth:
    if isinstance(value, YearMonth):
        return value
    try:
        return YearMonth.parse(value)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc


def _check_amount(amount: Decimal) -> Decimal:
    if not isinstance(amount, Decimal) or not amount.is_finite() or amount < 0:
        raise InvalidAmountError("amount", str(amount))
    return amount


class ScheduledBillingService(BaseService[ScheduledBillingModel]):
    """Per-project monthly billing plan."""

    def __init__(
        self,
        session: Session,
        rules: ClassificationRules = DEFAULT_RULES,
        currency: str = CurrencyRegistry.DEFAULT_CURRENCY,
        clock: Clock | None = None,
    ):
        super().__init__(session, clock)
        self.currency = currency
        self._projects = ProjectSelector(session, rules)

    def _project(self, company_id: UUID, project_id: UUID) -> ProjectRecord:
        require_company(company_id)
        return self._projects.get_project(company_id, project_id)

    def _find(self, project_id: UUID, month: YearMonth) -> ScheduledBillingModel | None:
        return self.session.scalars(
            select(ScheduledBillingModel)
            .where(
                ScheduledBillingModel.project_id == project_id,
                ScheduledBillingModel.year_month == str(month),
            )
            .with_for_update()
        ).first()

    def add(
        self,
        company_id: UUID,
        project_id: UUID,
        year_month: str | YearMonth,
        amount: Decimal,
        actor_id: UUID,
    ) -> ScheduledBillingEntry:
        """Insert a month.  Raises ScheduledBillingConflictError if it already exists."""
        self._project(company_id, project_id)
        month = _to_year_month(year_month)
        _check_amount(amount)

        if self._find(project_id, month) is not None:
            logger.warning(
                "scheduled_billing_conflict",
                extra={"project_id": str(project_id), "year_month": str(month)},
            )
            raise ScheduledBillingConflictError(str(project_id), str(month))

        row = ScheduledBillingModel(
            company_id=company_id,
            project_id=project_id,
            year_month=str(month),
            amount=amount,
            created_by_id=actor_id,
        )
        try:
            with self.session.begin_nested():
                self.session.add(row)
                self.session.flush()
        except IntegrityError as exc:
            raise ScheduledBillingConflictError(str(project_id), str(month)) from exc

        logger.info(
            "scheduled_billing_added",
            extra={
                "company_id": str(company_id),
                "project_id": str(project_id),
                "year_month": str(month),
                "amount": str(amount),
            },
        )
        return row.to_dto()

    def set_amount(
        self,
        company_id: UUID,
        project_id: UUID,
        year_month: str | YearMonth,
        amount: Decimal,
        actor_id: UUID,
    ) -> ScheduledBillingEntry:
        """Set a month's amount, inserting the month if it is not planned yet."""
        self._project(company_id, project_id)
        month = _to_year_month(year_month)
        _check_amount(amount)

        row = self._find(project_id, month)
        if row is None:
            return self.add(company_id, project_id, month, amount, actor_id)

        row.amount = amount
        row.updated_by_id = actor_id
        self.session.flush()
        logger.info(
            "scheduled_billing_updated",
            extra={
                "company_id": str(company_id),
                "project_id": str(project_id),
                "year_month": str(month),
                "amount": str(amount),
            },
        )
        return row.to_dto()

    def replace_project_schedule(
        self,
        company_id: UUID,
        project_id: UUID,
        schedule: Mapping[str | YearMonth, Decimal],
        actor_id: UUID,
    ) -> list[ScheduledBillingEntry]:
        """Replace a project's whole plan with ``schedule`` in one transaction."""
        self._project(company_id, project_id)
        months: dict[YearMonth, Decimal] = {}
        for key, amount in schedule.items():
            month = _to_year_month(key)
            if month in months:
                raise ScheduledBillingConflictError(str(project_id), str(month))
            months[month] = _check_amount(amount)

        with self.session.begin_nested():
            removed = self.session.execute(
                delete(ScheduledBillingModel)
                .where(ScheduledBillingModel.project_id == project_id)
                .execution_options(synchronize_session="fetch")
            ).rowcount
            rows = [
                ScheduledBillingModel(
                    company_id=company_id,
                    project_id=project_id,
                    year_month=str(month),
                    amount=amount,
                    created_by_id=actor_id,
                )
                for month, amount in sorted(months.items())
            ]
            self.session.add_all(rows)
            self.session.flush()

        logger.info(
            "scheduled_billing_schedule_replaced",
            extra={
                "company_id": str(company_id),
                "project_id": str(project_id),
                "removed_count": removed,
                "month_count": len(rows),
            },
        )
        return [row.to_dto() for row in rows]

    def list_for_project(self, company_id: UUID, project_id: UUID) -> list[ScheduledBillingEntry]:
        self._project(company_id, project_id)
        rows = self.session.scalars(
            select(ScheduledBillingModel)
            .where(ScheduledBillingModel.project_id == project_id)
            .order_by(ScheduledBillingModel.year_month)
        ).all()
        return [row.to_dto() for row in rows]

    def list_for_company(
        self, company_id: UUID, months: Iterable[YearMonth] | None = None
    ) -> list[ScheduledBillingEntry]:
        require_company(company_id)
        stmt = select(ScheduledBillingModel).where(
            ScheduledBillingModel.company_id == company_id
        )
        if months is not None:
            stmt = stmt.where(ScheduledBillingModel.year_month.in_([str(m) for m in months]))
        stmt = stmt.order_by(ScheduledBillingModel.project_id, ScheduledBillingModel.year_month)
        return [row.to_dto() for row in self.session.scalars(stmt)]

    def monthly_totals(
        self, company_id: UUID, months: Iterable[YearMonth]
    ) -> dict[YearMonth, Money]:
        """Planned billing per month for the tenant's non-subscription projects."""
        wanted = list(months)
        totals = {month: Money.zero(self.currency) for month in wanted}

        kinds = {p.id: p.kind for p in self._projects.list_projects(company_id)}
        for entry in self.list_for_company(company_id, wanted):
            if kinds.get(entry.project_id) is ProjectKind.SUBSCRIPTION:
                continue
            month = entry.month
            totals[month] = totals[month] + Money.of(entry.amount, self.currency)
        return totals
