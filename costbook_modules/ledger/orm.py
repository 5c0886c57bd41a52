"""
Bank Balance Ledger ORM Model (``costbook_modules.ledger.orm``).

One row per (company, fiscal year, month).  ``balance_date`` is always the
first day of the month, so the unique constraint is a per-month rule.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Index, UniqueConstraint
from sqlalchemy.orm import Mapped

from costbook_kernel.db.base import TrackedBase


class BankBalanceHistoryModel(TrackedBase):
    """
    ORM model for ``BankBalanceEntry``.

    Table: ``bank_balance_history``
    """

    __tablename__ = "bank_balance_history"

    company_id: Mapped[UUID]
    fiscal_year: Mapped[int]
    balance_date: Mapped[date]
    opening_balance: Mapped[Decimal]
    closing_balance: Mapped[Decimal]
    total_income: Mapped[Decimal]
    total_expense: Mapped[Decimal]
    sequence: Mapped[int]

    __table_args__ = (
        UniqueConstraint(
            "company_id", "fiscal_year", "balance_date",
            name="uq_bank_balance_history_company_year_month",
        ),
        Index("idx_bank_balance_history_company_date", "company_id", "balance_date"),
    )

    def to_dto(self, currency: str = "JPY"):
        from costbook_modules.ledger.models import BankBalanceEntry
        return BankBalanceEntry(
            id=self.id,
            company_id=self.company_id,
            fiscal_year=self.fiscal_year,
            balance_date=self.balance_date,
            opening_balance=self.opening_balance,
            closing_balance=self.closing_balance,
            total_income=self.total_income,
            total_expense=self.total_expense,
            sequence=self.sequence,
            currency=currency,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID) -> "BankBalanceHistoryModel":
        return cls(
            id=dto.id,
            company_id=dto.company_id,
            fiscal_year=dto.fiscal_year,
            balance_date=dto.balance_date,
            opening_balance=dto.opening_balance,
            closing_balance=dto.closing_balance,
            total_income=dto.total_income,
            total_expense=dto.total_expense,
            sequence=dto.sequence,
            created_by_id=created_by_id,
        )

    def __repr__(self) -> str:
        return (
            f"<BankBalanceHistoryModel(company_id={self.company_id!r}, "
            f"fiscal_year={self.fiscal_year!r}, balance_date={self.balance_date!r})>"
        )
