"""Service fixtures shared by the module tests."""

from datetime import date
from decimal import Decimal

import pytest

from costbook_modules.billing.service import ScheduledBillingService
from costbook_modules.fiscal.config import FiscalConfig
from costbook_modules.fiscal.service import FiscalCalendarService
from costbook_modules.forecast.config import ForecastConfig
from costbook_modules.forecast.service import CashFlowForecastService
from costbook_modules.ledger.config import LedgerConfig
from costbook_modules.ledger.service import LedgerService
from costbook_modules.revenue.config import RevenueConfig
from costbook_modules.revenue.service import RevenueRecognitionService


@pytest.fixture
def fiscal_service(session, deterministic_clock):
    return FiscalCalendarService(session, FiscalConfig(), clock=deterministic_clock)


@pytest.fixture
def ledger_service(session, deterministic_clock):
    return LedgerService(session, LedgerConfig(), clock=deterministic_clock)


@pytest.fixture
def billing_service(session, deterministic_clock):
    return ScheduledBillingService(session, clock=deterministic_clock)


@pytest.fixture
def revenue_service(session):
    return RevenueRecognitionService(session, RevenueConfig())


@pytest.fixture
def forecast_service(session):
    return CashFlowForecastService(session, ForecastConfig())


@pytest.fixture
def initialized_company(fiscal_service, company_id, test_actor_id):
    """Company A on a March year end, fiscal year 2024."""
    return fiscal_service.initialize(
        company_id,
        fiscal_year=2024,
        settlement_month=3,
        actor_id=test_actor_id,
        bank_balance=Decimal("5000000"),
    )


@pytest.fixture
def poc_project(make_project, add_progress, add_cost, company_id):
    """Contract 10,000,000 at 80% with 6,000,000 of cost."""
    project_id = make_project(
        company_id=company_id,
        business_number="P-100",
        name="Warehouse",
        contract_amount=Decimal("10000000"),
    )
    add_progress(project_id, Decimal("40"), date(2024, 6, 30), company_id=company_id)
    add_progress(project_id, Decimal("80"), date(2024, 9, 30), company_id=company_id)
    add_cost(project_id, Decimal("6000000"), date(2024, 9, 15), company_id=company_id)
    return project_id
