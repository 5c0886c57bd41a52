"""
costbook_modules.ledger.models
==============================

Frozen dataclass for a monthly bank balance ledger row.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from costbook_kernel.domain.calendar import YearMonth


@dataclass(frozen=True)
class BankBalanceEntry:
    """
    Opening/closing balance and flows for one month of one fiscal year.

    ``balance_date`` is the first day of the month.
    """
    id: UUID
    company_id: UUID
    fiscal_year: int
    balance_date: date
    opening_balance: Decimal
    closing_balance: Decimal
    total_income: Decimal
    total_expense: Decimal
    sequence: int
    currency: str = "JPY"

    @property
    def month(self) -> YearMonth:
        return YearMonth.from_date(self.balance_date)

    @property
    def net_flow(self) -> Decimal:
        return self.total_income - self.total_expense
