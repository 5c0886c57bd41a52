"""
Pytest fixtures for the costbook test suite.

Provides:
- A session-scoped engine with all tables created once
- Per-test sessions isolated by transaction rollback
- Structured-logging fixtures
- Deterministic clock and well-known tenant ids
- Factories for the collaborator tables (projects, progress, costs,
  subscription billings)

Environment Variables:
- DATABASE_URL: database to test against.  Defaults to in-memory SQLite;
  point it at PostgreSQL to exercise row locking for real.
"""

import json
import logging
import os
from collections.abc import Generator
from datetime import UTC, date, datetime
from decimal import Decimal
from io import StringIO
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session

from costbook_kernel.db.engine import drop_tables, init_engine_from_url, reset_engine
from costbook_kernel.db.immutability import unregister_immutability_listeners
from costbook_kernel.domain.clock import DeterministicClock
from costbook_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from costbook_kernel.services.sequence_service import SequenceService
from costbook_modules._orm_registry import create_all_tables
from costbook_modules.project.orm import (
    CostEntryModel,
    ProgressRecordModel,
    ProjectModel,
    SubscriptionBillingModel,
)

DEFAULT_DATABASE_URL = "sqlite://"

# Well-known tenants used across the suite
COMPANY_A = UUID("00000000-0000-4000-8000-00000000000a")
COMPANY_B = UUID("00000000-0000-4000-8000-00000000000b")

TEST_ACTOR_ID = uuid4()


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture costbook logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, ledger):
            ledger.upsert_month(...)
            logs = captured_logs()
            assert any(r["message"] == "ledger_month_recorded" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("costbook")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "postgres: mark test as requiring PostgreSQL"
    )


def get_database_url() -> str:
    """Get database URL from environment, or use in-memory SQLite."""
    return os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)


# =============================================================================
# Session-scoped DB infrastructure (create engine + tables ONCE per suite)
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    """Single engine for the entire test session."""
    eng = init_engine_from_url(get_database_url(), echo=False)
    yield eng
    reset_engine()


@pytest.fixture(scope="session")
def db_tables(db_engine):
    """Create all tables once per session, drop once at end.

    Immutability listeners are registered once and remain active.
    """
    drop_tables()
    create_all_tables()
    yield
    unregister_immutability_listeners()
    drop_tables()


# =============================================================================
# Per-test session with automatic rollback
# =============================================================================


@pytest.fixture(scope="function")
def session(db_tables, db_engine) -> Generator[Session, None, None]:
    """Provide a database session for testing.

    The session joins an outer transaction on a dedicated connection;
    ``session.commit()`` inside a test only releases a savepoint and the
    outer transaction is rolled back at teardown.
    """
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


# =============================================================================
# Common values
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2025, 4, 1, 9, 0, 0, tzinfo=UTC))


@pytest.fixture
def test_actor_id() -> UUID:
    return TEST_ACTOR_ID


@pytest.fixture
def company_id() -> UUID:
    return COMPANY_A


@pytest.fixture
def other_company_id() -> UUID:
    return COMPANY_B


# =============================================================================
# Collaborator table factories
# =============================================================================


@pytest.fixture
def make_project(session):
    """Insert a project and return its id."""

    def _make(
        company_id: UUID = COMPANY_A,
        business_number: str = "P-001",
        name: str = "Office build",
        contract_amount: Decimal = Decimal("10000000"),
    ) -> UUID:
        row = ProjectModel(
            company_id=company_id,
            business_number=business_number,
            name=name,
            contract_amount=contract_amount,
        )
        session.add(row)
        session.flush()
        return row.id

    return _make


@pytest.fixture
def add_progress(session):
    """Insert a progress record, sequenced the way the application writes them."""
    sequences = SequenceService(session)

    def _add(
        project_id: UUID,
        rate: Decimal,
        progress_date: date,
        company_id: UUID = COMPANY_A,
    ) -> UUID:
        row = ProgressRecordModel(
            company_id=company_id,
            project_id=project_id,
            progress_rate=rate,
            progress_date=progress_date,
            sequence=sequences.next_value(SequenceService.PROGRESS_RECORD),
        )
        session.add(row)
        session.flush()
        return row.id

    return _add


@pytest.fixture
def add_cost(session):
    """Insert a cost entry; ``project_id`` may be None for company-wide cost."""

    def _add(
        project_id: UUID | None,
        amount: Decimal,
        entry_date: date,
        company_id: UUID = COMPANY_A,
    ) -> UUID:
        row = CostEntryModel(
            company_id=company_id,
            project_id=project_id,
            entry_date=entry_date,
            amount=amount,
        )
        session.add(row)
        session.flush()
        return row.id

    return _add


@pytest.fixture
def add_subscription_billing(session):
    def _add(
        project_id: UUID | None,
        year_month: str,
        amount: Decimal,
        company_id: UUID = COMPANY_A,
    ) -> UUID:
        row = SubscriptionBillingModel(
            company_id=company_id,
            project_id=project_id,
            year_month=year_month,
            amount=amount,
        )
        session.add(row)
        session.flush()
        return row.id

    return _add
