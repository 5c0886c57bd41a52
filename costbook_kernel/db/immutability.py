"""
ORM-Level Immutability Enforcement.

===============================================================================
WHY THIS EXISTS
===============================================================================

The fiscal period change log is the audit trail of every mid-period
redefinition of a tenant's fiscal calendar.  A change can only be followed
by another change; an existing entry is never edited or removed.

SQLAlchemy fires events before UPDATE/DELETE operations reach the database.
We register listeners that intercept these events:

    session.flush()
         |
         v
    [before_update event] --> _reject_change_log_update() --> ImmutabilityViolationError
         |
         v
    [before_delete event] --> _reject_change_log_delete() --> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

If a check fails, ImmutabilityViolationError is raised and the flush is
aborted.  The database is never modified.

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity                      | When Immutable          | Why
----------------------------|-------------------------|------------------------------
FiscalPeriodChange          | ALWAYS (from creation)  | Append-only audit trail

Bulk ``session.execute(update(...))`` statements bypass mapper events.
Nothing in the costbook packages issues bulk statements against the change
log.

===============================================================================
USAGE
===============================================================================

    from costbook_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # Called once at startup, idempotent

To temporarily disable (TESTS ONLY):

    unregister_immutability_listeners()
"""

from sqlalchemy import event

from costbook_kernel.exceptions import ImmutabilityViolationError
from costbook_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _reject_change_log_update(mapper, connection, target):
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "FiscalPeriodChange",
            "entity_id": str(target.id),
            "operation": "UPDATE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="FiscalPeriodChange",
        entity_id=str(target.id),
        reason="Fiscal period change records are append-only",
    )


def _reject_change_log_delete(mapper, connection, target):
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "FiscalPeriodChange",
            "entity_id": str(target.id),
            "operation": "DELETE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="FiscalPeriodChange",
        entity_id=str(target.id),
        reason="Fiscal period change records cannot be deleted",
    )


def _safe_add_listener(target, event_name, listener_fn):
    if not event.contains(target, event_name, listener_fn):
        event.listen(target, event_name, listener_fn)


def _safe_remove_listener(target, event_name, listener_fn):
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def register_immutability_listeners():
    """
    Register all immutability enforcement event listeners.

    Safe to call more than once.  Call after models are importable and
    before any database operations begin.
    """
    from costbook_modules.fiscal.orm import FiscalPeriodChangeModel

    _safe_add_listener(FiscalPeriodChangeModel, "before_update", _reject_change_log_update)
    _safe_add_listener(FiscalPeriodChangeModel, "before_delete", _reject_change_log_delete)


def unregister_immutability_listeners():
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests that intentionally violate the rules.
    """
    from costbook_modules.fiscal.orm import FiscalPeriodChangeModel

    _safe_remove_listener(FiscalPeriodChangeModel, "before_update", _reject_change_log_update)
    _safe_remove_listener(FiscalPeriodChangeModel, "before_delete", _reject_change_log_delete)
