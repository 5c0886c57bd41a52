"""
costbook_modules.ledger.service
===============================

Responsibility:
    Records and reads the monthly bank balance ledger of a tenant.  One
    row per (company, fiscal year, month); a second write for the same
    month is a conflict unless the caller asks to replace it.

Invariants enforced:
    - ``balance_date`` is normalized to the first of the month before any
      lookup or write.
    - Income and expense are never negative.
    - Replacement deletes and inserts inside the caller's transaction, so
      a reader never sees the month missing.
    - A storage uniqueness violation surfaces as LedgerMonthConflictError.
    - Rows are only deleted through ``delete_month`` and ``reset``.

Usage::

    ledger = LedgerService(session)
    ledger.upsert_month(company_id, 2025, date(2025, 4, 17),
                        opening=Decimal("1000000"), closing=Decimal("1200000"),
                        income=Decimal("500000"), expense=Decimal("300000"),
                        actor_id=actor_id)
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from costbook_kernel.domain.calendar import YearMonth, validate_positive_int
from costbook_kernel.domain.clock import Clock
from costbook_kernel.domain.values import Money
from costbook_kernel.exceptions import (
    InvalidAmountError,
    LedgerEntryNotFoundError,
    LedgerMonthConflictError,
    LedgerNotFoundError,
    MissingFieldError,
)
from costbook_kernel.logging_config import get_logger
from costbook_kernel.services.base import BaseService
from costbook_kernel.services.sequence_service import SequenceService
from costbook_kernel.services.tenancy import ensure_same_tenant, require_company
from costbook_modules.ledger.config import LedgerConfig
from costbook_modules.ledger.models import BankBalanceEntry
from costbook_modules.ledger.orm import BankBalanceHistoryModel

logger = get_logger("modules.ledger.service")

_ZERO = Decimal("0")


def normalize_balance_date(value: date) -> date:
    """First day of the month ``value`` falls in."""
    if value is None:
        raise MissingFieldError("balance_date")
    return YearMonth.from_date(value).first_day


class LedgerService(BaseService[BankBalanceHistoryModel]):
    """Monthly bank balance ledger for one tenant at a time."""

    def __init__(
        self,
        session: Session,
        config: LedgerConfig | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(session, clock)
        self.config = config or LedgerConfig.with_defaults()
        self._sequences = SequenceService(session)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _check_amounts(self, **amounts: Decimal | None) -> None:
        for field_name, amount in amounts.items():
            if amount is None:
                continue
            if not isinstance(amount, Decimal) or not amount.is_finite():
                raise InvalidAmountError(field_name, str(amount))
            is_balance = field_name.endswith("_balance")
            if amount < _ZERO and not (is_balance and self.config.allow_negative_balances):
                logger.warning(
                    "ledger_amount_rejected",
                    extra={"field": field_name, "amount": str(amount)},
                )
                raise InvalidAmountError(field_name, str(amount))

    def _find_month(
        self, company_id: UUID, fiscal_year: int, balance_date: date, lock: bool = False
    ) -> BankBalanceHistoryModel | None:
        stmt = select(BankBalanceHistoryModel).where(
            BankBalanceHistoryModel.company_id == company_id,
            BankBalanceHistoryModel.fiscal_year == fiscal_year,
            BankBalanceHistoryModel.balance_date == balance_date,
        )
        if lock:
            stmt = stmt.with_for_update()
        return self.session.scalars(stmt).first()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert_month(
        self,
        company_id: UUID,
        fiscal_year: int,
        balance_date: date,
        opening: Decimal,
        closing: Decimal,
        income: Decimal,
        expense: Decimal,
        actor_id: UUID,
        replace: bool = False,
    ) -> BankBalanceEntry:
        """
        Record the ledger row for one month.

        Raises:
            LedgerMonthConflictError: a row exists for the month and
                ``replace`` is False, or a concurrent writer won the race.
            InvalidAmountError: negative income or expense.
        """
        require_company(company_id)
        validate_positive_int(fiscal_year)
        self._check_amounts(
            opening_balance=opening,
            closing_balance=closing,
            total_income=income,
            total_expense=expense,
        )
        month_start = normalize_balance_date(balance_date)
        month_label = str(YearMonth.from_date(month_start))

        existing = self._find_month(company_id, fiscal_year, month_start, lock=True)
        if existing is not None:
            if not replace:
                logger.warning(
                    "ledger_month_conflict",
                    extra={
                        "company_id": str(company_id),
                        "fiscal_year": fiscal_year,
                        "balance_month": month_label,
                    },
                )
                raise LedgerMonthConflictError(str(company_id), fiscal_year, month_label)
            self.session.delete(existing)
            self.session.flush()

        row = BankBalanceHistoryModel(
            company_id=company_id,
            fiscal_year=fiscal_year,
            balance_date=month_start,
            opening_balance=opening,
            closing_balance=closing,
            total_income=income,
            total_expense=expense,
            sequence=self._sequences.next_value(SequenceService.LEDGER_ENTRY),
            created_by_id=actor_id,
        )
        try:
            with self.session.begin_nested():
                self.session.add(row)
                self.session.flush()
        except IntegrityError as exc:
            logger.warning(
                "ledger_month_conflict",
                extra={
                    "company_id": str(company_id),
                    "fiscal_year": fiscal_year,
                    "balance_month": month_label,
                    "source": "storage",
                },
            )
            raise LedgerMonthConflictError(str(company_id), fiscal_year, month_label) from exc

        logger.info(
            "ledger_month_recorded",
            extra={
                "company_id": str(company_id),
                "fiscal_year": fiscal_year,
                "balance_month": month_label,
                "closing_balance": str(closing),
                "replaced": existing is not None,
            },
        )
        return row.to_dto(self.config.currency)

    def update_entry(
        self,
        company_id: UUID,
        entry_id: UUID,
        actor_id: UUID,
        *,
        opening: Decimal | None = None,
        closing: Decimal | None = None,
        income: Decimal | None = None,
        expense: Decimal | None = None,
    ) -> BankBalanceEntry:
        """Update the amounts of an existing row addressed by id."""
        self._check_amounts(
            opening_balance=opening,
            closing_balance=closing,
            total_income=income,
            total_expense=expense,
        )
        row = self.session.get(BankBalanceHistoryModel, entry_id, with_for_update=True)
        if row is None:
            raise LedgerEntryNotFoundError(str(entry_id))
        ensure_same_tenant("BankBalanceHistory", entry_id, row.company_id, company_id)

        if opening is not None:
            row.opening_balance = opening
        if closing is not None:
            row.closing_balance = closing
        if income is not None:
            row.total_income = income
        if expense is not None:
            row.total_expense = expense
        row.updated_by_id = actor_id
        self.session.flush()

        logger.info(
            "ledger_entry_updated",
            extra={"company_id": str(company_id), "entry_id": str(entry_id)},
        )
        return row.to_dto(self.config.currency)

    def delete_month(self, company_id: UUID, fiscal_year: int, balance_date: date) -> bool:
        """Delete one month's row.  Returns False when there was none."""
        require_company(company_id)
        month_start = normalize_balance_date(balance_date)
        row = self._find_month(company_id, fiscal_year, month_start, lock=True)
        if row is None:
            return False
        self.session.delete(row)
        self.session.flush()
        logger.info(
            "ledger_month_deleted",
            extra={
                "company_id": str(company_id),
                "fiscal_year": fiscal_year,
                "balance_month": str(YearMonth.from_date(month_start)),
            },
        )
        return True

    def reset(self, company_id: UUID, fiscal_year: int | None = None) -> int:
        """Delete every row of a tenant (optionally one fiscal year).  Returns the count."""
        require_company(company_id)
        stmt = delete(BankBalanceHistoryModel).where(
            BankBalanceHistoryModel.company_id == company_id
        )
        if fiscal_year is not None:
            stmt = stmt.where(BankBalanceHistoryModel.fiscal_year == fiscal_year)
        result = self.session.execute(stmt.execution_options(synchronize_session="fetch"))
        self.session.flush()
        logger.warning(
            "ledger_reset",
            extra={
                "company_id": str(company_id),
                "fiscal_year": fiscal_year,
                "deleted_count": result.rowcount,
            },
        )
        return result.rowcount

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_for_company(
        self, company_id: UUID, fiscal_year: int | None = None
    ) -> list[BankBalanceEntry]:
        require_company(company_id)
        stmt = select(BankBalanceHistoryModel).where(
            BankBalanceHistoryModel.company_id == company_id
        )
        if fiscal_year is not None:
            stmt = stmt.where(BankBalanceHistoryModel.fiscal_year == fiscal_year)
        stmt = stmt.order_by(
            BankBalanceHistoryModel.balance_date, BankBalanceHistoryModel.sequence
        )
        return [row.to_dto(self.config.currency) for row in self.session.scalars(stmt)]

    def latest_entry(self, company_id: UUID) -> BankBalanceEntry:
        require_company(company_id)
        row = self.session.scalars(
            select(BankBalanceHistoryModel)
            .where(BankBalanceHistoryModel.company_id == company_id)
            .order_by(
                BankBalanceHistoryModel.balance_date.desc(),
                BankBalanceHistoryModel.sequence.desc(),
            )
            .limit(1)
        ).first()
        if row is None:
            raise LedgerNotFoundError(str(company_id))
        return row.to_dto(self.config.currency)

    def latest_closing_balance(self, company_id: UUID) -> Money:
        """Closing balance of the most recent month.  Raises LedgerNotFoundError."""
        entry = self.latest_entry(company_id)
        return Money.of(entry.closing_balance, self.config.currency)

    def opening_balance_or_zero(self, company_id: UUID) -> Money:
        """Latest closing balance, or zero when the tenant has no ledger rows."""
        try:
            return self.latest_closing_balance(company_id)
        except LedgerNotFoundError:
            logger.info(
                "ledger_empty_defaulting_to_zero",
                extra={"company_id": str(company_id)},
            )
            return Money.zero(self.config.currency)
