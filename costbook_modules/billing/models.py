"""
costbook_modules.billing.models
===============================

Frozen dataclass for a planned (split) billing of one project in one month.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from costbook_kernel.domain.calendar import YearMonth


@dataclass(frozen=True)
class ScheduledBillingEntry:
    id: UUID
    company_id: UUID
    project_id: UUID
    year_month: str
    amount: Decimal

    @property
    def month(self) -> YearMonth:
        return YearMonth.parse(self.year_month)
