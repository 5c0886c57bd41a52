"""
Costbook Modules.

Business modules over the costbook kernel.  Each module contains:
- Domain models (frozen dataclasses)
- ORM models (SQLAlchemy persistence)
- Pure helpers (the calculations)
- A service (imperative shell over a caller-owned Session)
- Configuration schema

Modules:
- project: collaborator read models and project classification
- fiscal: fiscal calendar, mid-period changes, impact analysis, rollover
- revenue: percentage-of-completion revenue recognition
- ledger: monthly bank balance ledger
- billing: scheduled (split) billing plans
- forecast: 12-month cash-flow forecast
"""

from costbook_modules import billing, fiscal, forecast, ledger, project, revenue

__all__ = ["billing", "fiscal", "forecast", "ledger", "project", "revenue"]
