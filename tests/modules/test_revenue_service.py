"""Tests for the revenue recognition report."""

from datetime import date
from decimal import Decimal

import pytest

from costbook_kernel.exceptions import MissingFieldError
from costbook_modules.project.classification import ClassificationRules
from costbook_modules.revenue.config import RevenueConfig
from costbook_modules.revenue.service import RevenueRecognitionService


class TestProjectFinancialsReport:
    def test_worked_example(self, revenue_service, poc_project, company_id):
        report = revenue_service.project_financials_report(company_id)

        assert len(report.projects) == 1
        financials = report.projects[0]
        assert financials.project_id == poc_project
        assert financials.progress_rate == Decimal("80")
        assert financials.recognized_revenue == Decimal("8000000")
        assert financials.profit == Decimal("2000000")
        assert financials.profit_margin == Decimal("25")
        assert financials.cost_efficiency == Decimal("7500000")
        assert report.totals.total_revenue == Decimal("8000000")

    def test_subscription_and_overhead_excluded(
        self, revenue_service, poc_project, make_project, add_cost, company_id
    ):
        subscription = make_project(business_number="C-1", name="Cloud plan")
        make_project(business_number="IP", name="Head office")
        add_cost(subscription, Decimal("100"), date(2024, 9, 1))

        report = revenue_service.project_financials_report(company_id)
        assert [p.project_id for p in report.projects] == [poc_project]
        assert report.totals.total_cost == Decimal("6000000")

    def test_same_day_progress_uses_latest_written(
        self, revenue_service, make_project, add_progress, company_id
    ):
        project = make_project(contract_amount=Decimal("1000"))
        add_progress(project, Decimal("30"), date(2024, 9, 1))
        add_progress(project, Decimal("35"), date(2024, 9, 1))

        report = revenue_service.project_financials_report(company_id)
        assert report.projects[0].recognized_revenue == Decimal("350")

    def test_tenant_scoped(self, revenue_service, poc_project, other_company_id):
        report = revenue_service.project_financials_report(other_company_id)
        assert report.projects == ()
        assert report.totals.project_count == 0

    def test_custom_classification(self, session, poc_project, company_id):
        rules = ClassificationRules(subscription_number_prefixes=("P-",))
        service = RevenueRecognitionService(session, RevenueConfig(classification=rules))
        assert service.project_financials_report(company_id).projects == ()

    def test_missing_company(self, revenue_service):
        with pytest.raises(MissingFieldError):
            revenue_service.project_financials_report(None)

    def test_logged(self, revenue_service, poc_project, company_id, captured_logs):
        revenue_service.project_financials_report(company_id)
        records = [r for r in captured_logs() if r["message"] == "revenue_report_generated"]
        assert records[0]["project_count"] == 1
