"""
Scheduled Billing ORM Model (``costbook_modules.billing.orm``).

At most one row per (project, month); the amount of a month is edited in
place, never added as a second row.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from costbook_kernel.db.base import TrackedBase


class ScheduledBillingModel(TrackedBase):
    """
    ORM model for ``ScheduledBillingEntry``.

    Table: ``scheduled_billings``
    """

    __tablename__ = "scheduled_billings"

    company_id: Mapped[UUID]
    project_id: Mapped[UUID] = mapped_column(ForeignKey("projects.id"))
    year_month: Mapped[str] = mapped_column(String(7))
    amount: Mapped[Decimal]

    __table_args__ = (
        UniqueConstraint("project_id", "year_month", name="uq_scheduled_billings_project_month"),
        Index("idx_scheduled_billings_company_month", "company_id", "year_month"),
    )

    def to_dto(self):
        from costbook_modules.billing.models import ScheduledBillingEntry
        return ScheduledBillingEntry(
            id=self.id,
            company_id=self.company_id,
            project_id=self.project_id,
            year_month=self.year_month,
            amount=self.amount,
        )

    def __repr__(self) -> str:
        return (
            f"<ScheduledBillingModel(project_id={self.project_id!r}, "
            f"year_month={self.year_month!r}, amount={self.amount!r})>"
        )
