"""Database layer - engine, base classes, column types, and ORM listeners."""

from costbook_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from costbook_kernel.db.engine import create_tables, get_engine, get_session, session_scope
from costbook_kernel.db.types import CurrencyCode, Money, Percent, Sequence

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "Money",
    "Percent",
    "CurrencyCode",
    "Sequence",
]
