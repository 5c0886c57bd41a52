"""
costbook_modules.billing
========================

Scheduled (split) billing plans, one amount per project per month.
"""

from costbook_modules.billing.models import ScheduledBillingEntry
from costbook_modules.billing.service import ScheduledBillingService

__all__ = ["ScheduledBillingEntry", "ScheduledBillingService"]
