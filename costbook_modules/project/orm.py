"""
Project ORM Models (``costbook_modules.project.orm``).

Responsibility
--------------
SQLAlchemy persistence models for the collaborator tables -- projects,
progress records, cost entries and subscription billings.  The engine
only reads these tables; they are owned by the project and billing
screens of the surrounding application.

Architecture position
---------------------
**Modules layer** -- persistence.  Imports from ``costbook_kernel.db`` and
sibling ``models.py``.  MUST NOT be imported by ``costbook_kernel``
(except the inline registry import).
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from costbook_kernel.db.base import Base
from costbook_kernel.db.types import Percent
from costbook_modules.project.classification import (
    DEFAULT_RULES,
    ClassificationRules,
    classify_project,
)


# ---------------------------------------------------------------------------
# ProjectModel
# ---------------------------------------------------------------------------

class ProjectModel(Base):
    """
    ORM model for ``ProjectRecord``.

    Table: ``projects``
    """

    __tablename__ = "projects"

    company_id: Mapped[UUID]
    business_number: Mapped[str] = mapped_column(String(50), default="")
    name: Mapped[str] = mapped_column(String(200))
    contract_amount: Mapped[Decimal] = mapped_column(default=Decimal("0"))
    status: Mapped[str] = mapped_column(String(30), default="in_progress")

    __table_args__ = (
        Index("idx_projects_company_id", "company_id"),
    )

    def to_dto(self, rules: ClassificationRules = DEFAULT_RULES):
        from costbook_modules.project.models import ProjectRecord
        return ProjectRecord(
            id=self.id,
            company_id=self.company_id,
            business_number=self.business_number or "",
            name=self.name,
            contract_amount=self.contract_amount or Decimal("0"),
            kind=classify_project(self.business_number, self.name, rules),
            status=self.status,
        )

    def __repr__(self) -> str:
        return (
            f"<ProjectModel(id={self.id!r}, business_number={self.business_number!r}, "
            f"name={self.name!r})>"
        )


# ---------------------------------------------------------------------------
# ProgressRecordModel
# ---------------------------------------------------------------------------

class ProgressRecordModel(Base):
    """
    ORM model for ``ProgressRecord``.

    Table: ``project_progress``
    """

    __tablename__ = "project_progress"

    company_id: Mapped[UUID]
    project_id: Mapped[UUID] = mapped_column(ForeignKey("projects.id"))
    progress_rate: Mapped[Percent]
    progress_date: Mapped[date]
    notes: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    sequence: Mapped[int]

    __table_args__ = (
        Index("idx_project_progress_project_id", "project_id"),
        Index("idx_project_progress_company_id", "company_id"),
    )

    def to_dto(self):
        from costbook_modules.project.models import ProgressRecord
        return ProgressRecord(
            id=self.id,
            company_id=self.company_id,
            project_id=self.project_id,
            progress_rate=self.progress_rate,
            progress_date=self.progress_date,
            sequence=self.sequence,
            notes=self.notes,
        )


# ---------------------------------------------------------------------------
# CostEntryModel
# ---------------------------------------------------------------------------

class CostEntryModel(Base):
    """
    ORM model for ``CostEntry``.

    Table: ``cost_entries``
    """

    __tablename__ = "cost_entries"

    company_id: Mapped[UUID]
    project_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("projects.id"), nullable=True,
    )
    entry_date: Mapped[date]
    amount: Mapped[Decimal]

    __table_args__ = (
        Index("idx_cost_entries_company_id_entry_date", "company_id", "entry_date"),
        Index("idx_cost_entries_project_id", "project_id"),
    )

    def to_dto(self):
        from costbook_modules.project.models import CostEntry
        return CostEntry(
            id=self.id,
            company_id=self.company_id,
            project_id=self.project_id,
            entry_date=self.entry_date,
            amount=self.amount,
        )


# ---------------------------------------------------------------------------
# SubscriptionBillingModel
# ---------------------------------------------------------------------------

class SubscriptionBillingModel(Base):
    """
    ORM model for ``SubscriptionBilling``.

    Table: ``subscription_billings``
    """

    __tablename__ = "subscription_billings"

    company_id: Mapped[UUID]
    project_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("projects.id"), nullable=True,
    )
    year_month: Mapped[str] = mapped_column(String(7))
    amount: Mapped[Decimal]

    __table_args__ = (
        Index("idx_subscription_billings_company_id_year_month", "company_id", "year_month"),
    )

    def to_dto(self):
        from costbook_modules.project.models import SubscriptionBilling
        return SubscriptionBilling(
            id=self.id,
            company_id=self.company_id,
            project_id=self.project_id,
            year_month=self.year_month,
            amount=self.amount,
        )
