"""
costbook_modules.project.models
===============================

Responsibility:
    Frozen dataclass read models for the collaborator tables the engine
    consumes: projects, progress records, cost entries and subscription
    billings.  No business logic; structure only.

Invariants enforced:
    - All monetary fields use ``Decimal`` -- never ``float``.
    - ``ProjectRecord.kind`` is resolved once, when the row is loaded.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from uuid import UUID


class ProjectKind(Enum):
    """How a project's revenue is recognized."""
    PERCENTAGE_OF_COMPLETION = "percentage_of_completion"
    SUBSCRIPTION = "subscription"
    OVERHEAD = "overhead"


@dataclass(frozen=True)
class ProjectRecord:
    """
    A contracted construction project.

    ``kind`` is derived from ``business_number`` and ``name`` by the
    classification rule table; it is never stored.
    """
    id: UUID
    company_id: UUID
    business_number: str
    name: str
    contract_amount: Decimal
    kind: ProjectKind
    status: str = "in_progress"

    @property
    def recognizes_progress_revenue(self) -> bool:
        return self.kind is ProjectKind.PERCENTAGE_OF_COMPLETION


@dataclass(frozen=True)
class ProgressRecord:
    """A progress observation for a project, rate in percent."""
    id: UUID
    company_id: UUID
    project_id: UUID
    progress_rate: Decimal
    progress_date: date
    sequence: int
    notes: str | None = None


@dataclass(frozen=True)
class CostEntry:
    """A cost booked against a project (or against no project)."""
    id: UUID
    company_id: UUID
    project_id: UUID | None
    entry_date: date
    amount: Decimal


@dataclass(frozen=True)
class SubscriptionBilling:
    """A monthly subscription (CADDON) billing amount."""
    id: UUID
    company_id: UUID
    project_id: UUID | None
    year_month: str
    amount: Decimal
