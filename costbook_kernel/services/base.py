"""
BaseService -- abstract base for all costbook services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every write-side service.  All concrete services inherit from
    BaseService, receiving a SQLAlchemy ``Session`` that they use via
    ``session.flush()`` -- never ``session.commit()``.

Invariants enforced:
    Services flush within the caller's transaction and never commit or
    rollback themselves.  The caller (HTTP handler, batch script, or test
    harness) owns commit/rollback.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from costbook_kernel.db.base import Base
from costbook_kernel.domain.clock import Clock, SystemClock

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all services.

    Guarantees:
        - The service never calls ``session.commit()`` or
          ``session.rollback()``.

    Non-goals:
        - Does NOT provide query-only (read) helpers -- those belong
          in selectors.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self.clock = clock or SystemClock()
