"""
Fiscal Calendar ORM Models (``costbook_modules.fiscal.orm``).

Responsibility
--------------
SQLAlchemy persistence for the fiscal calendar of each tenant, the
append-only log of fiscal period changes, and per-project fiscal-year
summaries written by the year-end rollover.

``FiscalPeriodChangeModel`` is protected by the ORM listeners in
``costbook_kernel.db.immutability``.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Boolean, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from costbook_kernel.db.base import Base, TrackedBase


# ---------------------------------------------------------------------------
# FiscalInfoModel
# ---------------------------------------------------------------------------

class FiscalInfoModel(TrackedBase):
    """
    ORM model for ``FiscalInfoSnapshot``.

    Table: ``fiscal_info``

    ``version`` is the optimistic concurrency counter; SQLAlchemy bumps it
    on every UPDATE and raises StaleDataError when the row changed under us.
    """

    __tablename__ = "fiscal_info"

    company_id: Mapped[UUID]
    fiscal_year: Mapped[int]
    settlement_month: Mapped[int]
    current_period: Mapped[int] = mapped_column(default=1)
    bank_balance: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    is_mid_period_change: Mapped[bool] = mapped_column(Boolean, default=False)
    change_reason: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    original_fiscal_year: Mapped[int | None]
    original_settlement_month: Mapped[int | None]
    version: Mapped[int] = mapped_column(nullable=False)

    __table_args__ = (
        UniqueConstraint("company_id", "fiscal_year", name="uq_fiscal_info_company_year"),
    )
    __mapper_args__ = {"version_id_col": version}

    def to_dto(self):
        from costbook_modules.fiscal.models import FiscalInfoSnapshot
        return FiscalInfoSnapshot(
            id=self.id,
            company_id=self.company_id,
            fiscal_year=self.fiscal_year,
            settlement_month=self.settlement_month,
            current_period=self.current_period,
            bank_balance=self.bank_balance,
            is_mid_period_change=self.is_mid_period_change,
            change_reason=self.change_reason,
            original_fiscal_year=self.original_fiscal_year,
            original_settlement_month=self.original_settlement_month,
            version=self.version,
        )

    def __repr__(self) -> str:
        return (
            f"<FiscalInfoModel(company_id={self.company_id!r}, "
            f"fiscal_year={self.fiscal_year!r}, settlement_month={self.settlement_month!r})>"
        )


# ---------------------------------------------------------------------------
# FiscalPeriodChangeModel
# ---------------------------------------------------------------------------

class FiscalPeriodChangeModel(Base):
    """
    ORM model for ``FiscalPeriodChangeInfo``.  Append-only.

    Table: ``fiscal_period_changes``
    """

    __tablename__ = "fiscal_period_changes"

    company_id: Mapped[UUID]
    from_fiscal_year: Mapped[int]
    from_settlement_month: Mapped[int]
    to_fiscal_year: Mapped[int]
    to_settlement_month: Mapped[int]
    changed_at: Mapped[datetime]
    changed_by_id: Mapped[UUID]
    reason: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    impact_summary: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    sequence: Mapped[int]

    __table_args__ = (
        Index("idx_fiscal_period_changes_company_sequence", "company_id", "sequence"),
    )

    def to_dto(self):
        from costbook_modules.fiscal.models import FiscalPeriodChangeInfo
        return FiscalPeriodChangeInfo(
            id=self.id,
            company_id=self.company_id,
            from_fiscal_year=self.from_fiscal_year,
            from_settlement_month=self.from_settlement_month,
            to_fiscal_year=self.to_fiscal_year,
            to_settlement_month=self.to_settlement_month,
            changed_at=self.changed_at,
            changed_by_id=self.changed_by_id,
            sequence=self.sequence,
            reason=self.reason,
            impact_summary=dict(self.impact_summary or {}),
        )


# ---------------------------------------------------------------------------
# ProjectFiscalSummaryModel
# ---------------------------------------------------------------------------

class ProjectFiscalSummaryModel(TrackedBase):
    """
    Contract position of one project in one fiscal year.

    Table: ``project_fiscal_summaries``
    """

    __tablename__ = "project_fiscal_summaries"

    company_id: Mapped[UUID]
    project_id: Mapped[UUID] = mapped_column(ForeignKey("projects.id"))
    fiscal_year: Mapped[int]
    opening_contract_amount: Mapped[Decimal]
    year_revenue_recognized: Mapped[Decimal | None]
    closing_carryover_amount: Mapped[Decimal | None]

    __table_args__ = (
        UniqueConstraint(
            "project_id", "fiscal_year", name="uq_project_fiscal_summaries_project_year"
        ),
        Index("idx_project_fiscal_summaries_company_year", "company_id", "fiscal_year"),
    )
