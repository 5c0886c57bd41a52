"""
costbook_modules.ledger
=======================

Monthly bank balance ledger, one row per (company, fiscal year, month).
"""

from costbook_modules.ledger.config import LedgerConfig
from costbook_modules.ledger.models import BankBalanceEntry
from costbook_modules.ledger.service import LedgerService, normalize_balance_date

__all__ = [
    "BankBalanceEntry",
    "LedgerConfig",
    "LedgerService",
    "normalize_balance_date",
]
