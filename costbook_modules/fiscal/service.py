"""
costbook_modules.fiscal.service
===============================

Responsibility:
    The fiscal calendar manager.  Owns each tenant's fiscal definition
    (fiscal year + settlement month), applies mid-period changes with an
    append-only audit trail, analyzes the impact of a proposed change, and
    rolls the calendar over to the next fiscal year.

Invariants enforced:
    - The current fiscal row is the one with the greatest fiscal year.
    - A change validates the settlement month before any write.
    - A change locks the current row (``SELECT ... FOR UPDATE``) and is
      rejected with OptimisticLockError when the row's ``version`` moved.
    - ``original_*`` are set on the first change only.
    - Every change appends exactly one FiscalPeriodChange row; those rows
      are never updated or deleted.

Failure modes:
    - FiscalInfoNotFoundError: the tenant was never initialized.
    - InvalidSettlementMonthError / InvalidFiscalYearError: bad input.
    - NoFiscalChangeError: the requested definition is the current one.
    - FiscalInfoConflictError: a row already exists for the fiscal year.
    - OptimisticLockError: a concurrent writer changed the row.

Usage::

    calendar = FiscalCalendarService(session, clock=clock)
    change = calendar.change_fiscal_period(
        company_id, new_fiscal_year=2025, new_settlement_month=12,
        reason="Group alignment", actor_id=actor_id,
    )
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from costbook_kernel.domain.calendar import (
    YearMonth,
    fiscal_year_bounds,
    validate_positive_int,
    validate_settlement_month,
)
from costbook_kernel.domain.clock import Clock
from costbook_kernel.exceptions import (
    FiscalInfoConflictError,
    FiscalInfoNotFoundError,
    LedgerNotFoundError,
    MissingFieldError,
    NoFiscalChangeError,
    OptimisticLockError,
)
from costbook_kernel.logging_config import get_logger
from costbook_kernel.services.base import BaseService
from costbook_kernel.services.sequence_service import SequenceService
from costbook_kernel.services.tenancy import require_company
from costbook_modules.billing.service import ScheduledBillingService
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
from costbook_modules.fiscal.orm import (
    FiscalInfoModel,
    FiscalPeriodChangeModel,
    ProjectFiscalSummaryModel,
)
from costbook_modules.ledger.config import LedgerConfig
from costbook_modules.ledger.orm import BankBalanceHistoryModel
from costbook_modules.ledger.service import LedgerService
from costbook_modules.project.classification import DEFAULT_RULES, ClassificationRules
from costbook_modules.project.selectors import ProjectSelector
from costbook_modules.revenue.helpers import revenue_earned_between

logger = get_logger("modules.fiscal.service")

_ZERO = Decimal("0")


class FiscalCalendarService(BaseService[FiscalInfoModel]):
    """Fiscal calendar manager for one tenant at a time."""

    def __init__(
        self,
        session: Session,
        config: FiscalConfig | None = None,
        rules: ClassificationRules = DEFAULT_RULES,
        clock: Clock | None = None,
    ):
        super().__init__(session, clock)
        self.config = config or FiscalConfig.with_defaults()
        self._sequences = SequenceService(session)
        self._projects = ProjectSelector(session, rules)
        self._billing = ScheduledBillingService(
            session, rules, currency=self.config.currency, clock=self.clock
        )
        self._ledger = LedgerService(
            session, LedgerConfig(currency=self.config.currency), clock=self.clock
        )

    # ------------------------------------------------------------------
    # Current definition
    # ------------------------------------------------------------------

    def _current_row(self, company_id: UUID, lock: bool = False) -> FiscalInfoModel:
        require_company(company_id)
        stmt = select(FiscalInfoModel).where(FiscalInfoModel.company_id == company_id)
        if lock:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        row = select_current_fiscal_info(self.session.scalars(stmt).all())
        if row is None:
            logger.warning(
                "fiscal_info_missing",
                extra={"company_id": str(company_id)},
            )
            raise FiscalInfoNotFoundError(str(company_id))
        return row

    def get_current_fiscal_info(self, company_id: UUID) -> FiscalInfoSnapshot:
        """Current fiscal definition.  Raises FiscalInfoNotFoundError."""
        return self._current_row(company_id).to_dto()

    def initialize(
        self,
        company_id: UUID,
        fiscal_year: int,
        settlement_month: int | None,
        actor_id: UUID,
        current_period: int = 1,
        bank_balance: Decimal = _ZERO,
    ) -> FiscalInfoSnapshot:
        """Create the tenant's fiscal row for ``fiscal_year``."""
        require_company(company_id)
        if settlement_month is None:
            settlement_month = self.config.default_settlement_month
        validate_positive_int(fiscal_year)
        validate_settlement_month(settlement_month)
        validate_positive_int(current_period, "current_period")

        existing = self.session.scalars(
            select(FiscalInfoModel).where(
                FiscalInfoModel.company_id == company_id,
                FiscalInfoModel.fiscal_year == fiscal_year,
            )
        ).first()
        if existing is not None:
            raise FiscalInfoConflictError(str(company_id), fiscal_year)

        row = FiscalInfoModel(
            company_id=company_id,
            fiscal_year=fiscal_year,
            settlement_month=settlement_month,
            current_period=current_period,
            bank_balance=bank_balance,
            is_mid_period_change=False,
            created_by_id=actor_id,
        )
        try:
            with self.session.begin_nested():
                self.session.add(row)
                self.session.flush()
        except IntegrityError as exc:
            raise FiscalInfoConflictError(str(company_id), fiscal_year) from exc

        logger.info(
            "fiscal_info_initialized",
            extra={
                "company_id": str(company_id),
                "fiscal_year": fiscal_year,
                "settlement_month": settlement_month,
                "current_period": current_period,
            },
        )
        return row.to_dto()

    # ------------------------------------------------------------------
    # Mid-period change
    # ------------------------------------------------------------------

    def change_fiscal_period(
        self,
        company_id: UUID,
        new_fiscal_year: int,
        new_settlement_month: int,
        reason: str | None,
        actor_id: UUID,
        expected_version: int | None = None,
    ) -> FiscalPeriodChangeInfo:
        """
        Redefine the tenant's current fiscal year and settlement month.

        ``expected_version`` is the version the caller read.  Without it the
        version this session last saw is used.  Either way the locked row
        must still carry that version, otherwise the change is rejected
        before any write.
        """
        validate_settlement_month(new_settlement_month)
        validate_positive_int(new_fiscal_year)
        if self.config.require_change_reason and not (reason and reason.strip()):
            raise MissingFieldError("reason")

        if expected_version is None:
            expected_version = self._current_row(company_id).version
        row = self._current_row(company_id, lock=True)
        if row.version != expected_version:
            logger.warning(
                "fiscal_info_version_conflict",
                extra={
                    "company_id": str(company_id),
                    "expected_version": expected_version,
                    "actual_version": row.version,
                },
            )
            raise OptimisticLockError("FiscalInfo", str(row.id))

        from_ = FiscalDefinition(row.fiscal_year, row.settlement_month)
        to = FiscalDefinition(new_fiscal_year, new_settlement_month)
        if from_ == to:
            raise NoFiscalChangeError(str(company_id), new_fiscal_year, new_settlement_month)

        impact = self.analyze_change_impact(company_id, from_, to)

        change = FiscalPeriodChangeModel(
            company_id=company_id,
            from_fiscal_year=from_.fiscal_year,
            from_settlement_month=from_.settlement_month,
            to_fiscal_year=to.fiscal_year,
            to_settlement_month=to.settlement_month,
            changed_at=self.clock.now(),
            changed_by_id=actor_id,
            reason=reason,
            impact_summary=impact.to_dict(),
            sequence=self._sequences.next_value(SequenceService.FISCAL_PERIOD_CHANGE),
        )
        self.session.add(change)

        first_change = not row.is_mid_period_change
        if first_change:
            row.original_fiscal_year = from_.fiscal_year
            row.original_settlement_month = from_.settlement_month
        row.fiscal_year = to.fiscal_year
        row.settlement_month = to.settlement_month
        row.is_mid_period_change = True
        row.change_reason = reason
        row.updated_by_id = actor_id

        try:
            with self.session.begin_nested():
                self.session.flush()
        except StaleDataError as exc:
            logger.warning(
                "fiscal_info_stale_write",
                extra={"company_id": str(company_id), "fiscal_info_id": str(row.id)},
            )
            raise OptimisticLockError("FiscalInfo", str(row.id)) from exc
        except IntegrityError as exc:
            raise FiscalInfoConflictError(str(company_id), to.fiscal_year) from exc

        logger.info(
            "fiscal_period_changed",
            extra={
                "company_id": str(company_id),
                "from_fiscal_year": from_.fiscal_year,
                "from_settlement_month": from_.settlement_month,
                "to_fiscal_year": to.fiscal_year,
                "to_settlement_month": to.settlement_month,
                "first_change": first_change,
                "project_count": impact.project_count,
                "revenue_impact": str(impact.revenue_impact),
            },
        )
        return change.to_dto()

    def analyze_change_impact(
        self,
        company_id: UUID,
        from_: FiscalDefinition,
        to: FiscalDefinition,
    ) -> ImpactSummary:
        """Read-only, deterministic impact of moving from ``from_`` to ``to``."""
        require_company(company_id)
        added, removed = shifted_months(from_, to)
        months = sorted(set(added) | set(removed))

        if months:
            start = months[0].first_day
            end = months[-1].next().first_day
            cost_entries = self._projects.cost_entries_between(company_id, start, end)
        else:
            cost_entries = []

        ledger_rows = self.session.scalar(
            select(func.count())
            .select_from(BankBalanceHistoryModel)
            .where(BankBalanceHistoryModel.company_id == company_id)
        )

        impact = analyze_impact(
            from_,
            to,
            projects=self._projects.list_projects(company_id),
            scheduled_billings=self._billing.list_for_company(company_id, months),
            subscription_billings=self._projects.subscription_billings(
                company_id, [str(m) for m in months]
            ),
            cost_entries=cost_entries,
            progress_by_project=self._projects.progress_by_project(company_id),
            ledger_row_count=int(ledger_rows or 0),
            currency=self.config.currency,
        )
        logger.info(
            "fiscal_change_impact_analyzed",
            extra={
                "company_id": str(company_id),
                "months_added": len(impact.shifted_months_added),
                "months_removed": len(impact.shifted_months_removed),
                "project_count": impact.project_count,
            },
        )
        return impact

    def history(self, company_id: UUID) -> list[FiscalPeriodChangeInfo]:
        """All changes of a tenant in the order they were applied."""
        require_company(company_id)
        rows = self.session.scalars(
            select(FiscalPeriodChangeModel)
            .where(FiscalPeriodChangeModel.company_id == company_id)
            .order_by(FiscalPeriodChangeModel.sequence)
        ).all()
        return [row.to_dto() for row in rows]

    # ------------------------------------------------------------------
    # Year-end rollover
    # ------------------------------------------------------------------

    def _upsert_summary(
        self,
        company_id: UUID,
        project_id: UUID,
        fiscal_year: int,
        actor_id: UUID,
        opening: Decimal,
        recognized: Decimal | None = None,
        carryover: Decimal | None = None,
        keep_opening: bool = False,
    ) -> None:
        row = self.session.scalars(
            select(ProjectFiscalSummaryModel)
            .where(
                ProjectFiscalSummaryModel.project_id == project_id,
                ProjectFiscalSummaryModel.fiscal_year == fiscal_year,
            )
            .with_for_update()
        ).first()
        if row is None:
            row = ProjectFiscalSummaryModel(
                company_id=company_id,
                project_id=project_id,
                fiscal_year=fiscal_year,
                opening_contract_amount=opening,
                created_by_id=actor_id,
            )
            self.session.add(row)
        else:
            if not keep_opening:
                row.opening_contract_amount = opening
            row.updated_by_id = actor_id
        if recognized is not None:
            row.year_revenue_recognized = recognized
        if carryover is not None:
            row.closing_carryover_amount = carryover

    def rollover_fiscal_year(self, company_id: UUID, actor_id: UUID) -> RolloverResult:
        """
        Close the current fiscal year and open the next one.

        For each percentage-of-completion project, ``earned`` is the revenue
        recognized by progress dated inside the current fiscal year and
        ``carryover = max(contract - earned, 0)`` becomes next year's opening
        contract amount.
        """
        row = self._current_row(company_id, lock=True)
        current_year = row.fiscal_year
        next_year = current_year + 1
        currency = self.config.currency

        clash = self.session.scalars(
            select(FiscalInfoModel).where(
                FiscalInfoModel.company_id == company_id,
                FiscalInfoModel.fiscal_year == next_year,
            )
        ).first()
        if clash is not None:
            raise FiscalInfoConflictError(str(company_id), next_year)

        start, end = fiscal_year_bounds(current_year, row.settlement_month)
        progress = self._projects.progress_by_project(company_id)

        details: list[ProjectCarryover] = []
        for project in self._projects.list_projects(company_id):
            if not project.recognizes_progress_revenue:
                continue
            earned = revenue_earned_between(
                project.contract_amount, progress.get(project.id, []), start, end, currency
            )
            carryover = max(project.contract_amount - earned, _ZERO)
            details.append(
                ProjectCarryover(
                    project_id=project.id,
                    business_number=project.business_number,
                    name=project.name,
                    contract_amount=project.contract_amount,
                    earned=earned,
                    carryover=carryover,
                )
            )
            self._upsert_summary(
                company_id, project.id, current_year, actor_id,
                opening=project.contract_amount, recognized=earned,
                carryover=carryover, keep_opening=True,
            )
            self._upsert_summary(
                company_id, project.id, next_year, actor_id, opening=carryover,
            )

        try:
            opening_balance = self._ledger.latest_closing_balance(company_id).amount
        except LedgerNotFoundError:
            opening_balance = row.bank_balance or _ZERO

        next_row = FiscalInfoModel(
            company_id=company_id,
            fiscal_year=next_year,
            settlement_month=row.settlement_month,
            current_period=row.current_period + 1,
            bank_balance=opening_balance,
            is_mid_period_change=row.is_mid_period_change,
            change_reason=row.change_reason,
            original_fiscal_year=row.original_fiscal_year,
            original_settlement_month=row.original_settlement_month,
            created_by_id=actor_id,
        )
        try:
            with self.session.begin_nested():
                self.session.add(next_row)
                self.session.flush()
        except IntegrityError as exc:
            raise FiscalInfoConflictError(str(company_id), next_year) from exc

        next_start = YearMonth.from_date(fiscal_year_bounds(next_year, row.settlement_month)[0])
        ledger_opened = False
        existing_month = self.session.scalars(
            select(BankBalanceHistoryModel).where(
                BankBalanceHistoryModel.company_id == company_id,
                BankBalanceHistoryModel.fiscal_year == next_year,
                BankBalanceHistoryModel.balance_date == next_start.first_day,
            )
        ).first()
        if existing_month is None:
            self._ledger.upsert_month(
                company_id,
                next_year,
                next_start.first_day,
                opening=opening_balance,
                closing=opening_balance,
                income=_ZERO,
                expense=_ZERO,
                actor_id=actor_id,
            )
            ledger_opened = True

        self.session.flush()
        total_carryover = sum((d.carryover for d in details), _ZERO)
        logger.info(
            "fiscal_year_rolled_over",
            extra={
                "company_id": str(company_id),
                "from_fiscal_year": current_year,
                "to_fiscal_year": next_year,
                "projects_updated": len(details),
                "total_carryover": str(total_carryover),
                "ledger_month_opened": ledger_opened,
            },
        )
        return RolloverResult(
            company_id=company_id,
            from_fiscal_year=current_year,
            to_fiscal_year=next_year,
            projects_updated=len(details),
            total_carryover=total_carryover,
            opening_bank_balance=opening_balance,
            ledger_month_opened=ledger_opened,
            details=tuple(details),
        )


def next_forecast_start_month(fiscal_info: FiscalInfoSnapshot) -> YearMonth:
    """First forecast month for a tenant's current fiscal definition."""
    return fiscal_info.definition.forecast_start

