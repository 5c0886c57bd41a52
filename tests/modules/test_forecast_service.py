"""
Tests for the 12-month cash-flow forecast.

Verifies:
- window placement from the current fiscal definition
- inflows from scheduled and subscription billing, outflows from costs
- opening balance from the ledger, or zero
- missing fiscal info is fatal
"""

from datetime import date
from decimal import Decimal

import pytest

from costbook_kernel.domain.calendar import YearMonth
from costbook_kernel.exceptions import FiscalInfoNotFoundError
from costbook_modules.forecast.config import ForecastConfig
from costbook_modules.forecast.service import CashFlowForecastService


class TestForecastWindow:
    def test_september_settlement(self, forecast_service, fiscal_service, company_id, test_actor_id):
        fiscal_service.initialize(company_id, 2024, 9, test_actor_id)

        forecast = forecast_service.forecast(company_id)

        assert forecast.start_month == YearMonth(2024, 10)
        assert [r.year_month for r in forecast.rows][0] == "2024-10"
        assert [r.year_month for r in forecast.rows][-1] == "2025-09"
        assert len(forecast.rows) == 12

    def test_december_settlement(self, forecast_service, fiscal_service, company_id, test_actor_id):
        fiscal_service.initialize(company_id, 2024, 12, test_actor_id)
        assert forecast_service.forecast(company_id).start_month == YearMonth(2025, 1)

    def test_follows_a_fiscal_change(
        self, forecast_service, fiscal_service, initialized_company, company_id, test_actor_id
    ):
        fiscal_service.change_fiscal_period(company_id, 2024, 6, None, test_actor_id)
        assert forecast_service.forecast(company_id).start_month == YearMonth(2024, 7)

    def test_missing_fiscal_info(self, forecast_service, other_company_id):
        with pytest.raises(FiscalInfoNotFoundError):
            forecast_service.forecast(other_company_id)


class TestForecastAmounts:
    def test_flows_and_running_balance(
        self, forecast_service, initialized_company, billing_service, ledger_service,
        poc_project, make_project, add_subscription_billing, add_cost, company_id,
        test_actor_id,
    ):
        subscription = make_project(business_number="C-3", name="Cloud plan")
        billing_service.add(company_id, poc_project, "2024-06", Decimal("500000"), test_actor_id)
        billing_service.add(company_id, subscription, "2024-06", Decimal("777"), test_actor_id)
        add_subscription_billing(subscription, "2024-07", Decimal("20000"))
        add_cost(None, Decimal("30000"), date(2025, 3, 31))
        add_cost(None, Decimal("1"), date(2025, 4, 1))
        ledger_service.upsert_month(
            company_id, 2024, date(2024, 3, 1),
            opening=Decimal("900000"), closing=Decimal("1000000"),
            income=Decimal("100000"), expense=Decimal("0"), actor_id=test_actor_id,
        )

        forecast = forecast_service.forecast(company_id)
        rows = {r.year_month: r for r in forecast.rows}

        assert rows["2024-04"].running_balance == Decimal("1000000")
        assert rows["2024-06"].scheduled_inflow == Decimal("500000")
        assert rows["2024-06"].running_balance == Decimal("1500000")
        assert rows["2024-07"].subscription_inflow == Decimal("20000")
        assert rows["2024-09"].projected_outflow == Decimal("6000000")
        assert rows["2024-09"].running_balance == Decimal("-4480000")
        assert rows["2025-03"].projected_outflow == Decimal("30000")

        summary = forecast.summary
        assert summary.opening_balance == Decimal("1000000")
        assert summary.total_inflow == Decimal("520000")
        assert summary.total_outflow == Decimal("6030000")
        assert summary.closing_balance == Decimal("-4510000")
        assert summary.minimum_balance == Decimal("-4510000")

    def test_opening_balance_defaults_to_zero(
        self, forecast_service, initialized_company, company_id
    ):
        forecast = forecast_service.forecast(company_id)
        assert forecast.summary.opening_balance == Decimal("0")
        assert all(r.running_balance == Decimal("0") for r in forecast.rows)

    def test_threshold(self, session, initialized_company, poc_project, company_id):
        service = CashFlowForecastService(
            session, ForecastConfig(minimum_cash_threshold=Decimal("1"))
        )
        forecast = service.forecast(company_id)
        # Zero opening balance: every month is under the threshold.
        assert forecast.summary.months_below_threshold == 12

    def test_idempotent(self, forecast_service, initialized_company, poc_project, company_id):
        assert forecast_service.forecast(company_id) == forecast_service.forecast(company_id)

    def test_logged(self, forecast_service, initialized_company, company_id, captured_logs):
        forecast_service.forecast(company_id)
        records = [r for r in captured_logs() if r["message"] == "cash_forecast_generated"]
        assert records[0]["start_month"] == "2024-04"
        assert records[0]["month_count"] == 12
