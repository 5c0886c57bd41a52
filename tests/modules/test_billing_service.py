"""
Tests for scheduled (split) billing.

Verifies:
- one planned amount per (project, month)
- add rejects duplicates, set_amount updates in place
- schedule replacement
- monthly totals exclude subscription projects
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from costbook_kernel.domain.calendar import YearMonth
from costbook_kernel.exceptions import (
    CrossTenantAccessError,
    InvalidAmountError,
    ProjectNotFoundError,
    ScheduledBillingConflictError,
    ValidationError,
)


@pytest.fixture
def project_id(make_project):
    return make_project(business_number="P-200", name="School gym")


class TestAdd:
    def test_adds_month(self, billing_service, company_id, project_id, test_actor_id):
        entry = billing_service.add(
            company_id, project_id, "2025-11", Decimal("2500000"), test_actor_id
        )
        assert entry.year_month == "2025-11"
        assert entry.month == YearMonth(2025, 11)
        assert entry.amount == Decimal("2500000")

    def test_duplicate_month_rejected(self, billing_service, company_id, project_id, test_actor_id):
        billing_service.add(company_id, project_id, "2025-11", Decimal("1"), test_actor_id)
        with pytest.raises(ScheduledBillingConflictError):
            billing_service.add(company_id, project_id, "2025-11", Decimal("2"), test_actor_id)

        entries = billing_service.list_for_project(company_id, project_id)
        assert [e.amount for e in entries] == [Decimal("1")]

    def test_malformed_month(self, billing_service, company_id, project_id, test_actor_id):
        with pytest.raises(ValidationError):
            billing_service.add(company_id, project_id, "Nov 2025", Decimal("1"), test_actor_id)

    def test_negative_amount(self, billing_service, company_id, project_id, test_actor_id):
        with pytest.raises(InvalidAmountError):
            billing_service.add(company_id, project_id, "2025-11", Decimal("-1"), test_actor_id)

    def test_unknown_project(self, billing_service, company_id, test_actor_id):
        with pytest.raises(ProjectNotFoundError):
            billing_service.add(company_id, uuid4(), "2025-11", Decimal("1"), test_actor_id)

    def test_other_tenants_project(
        self, billing_service, other_company_id, project_id, test_actor_id
    ):
        with pytest.raises(CrossTenantAccessError):
            billing_service.add(other_company_id, project_id, "2025-11", Decimal("1"), test_actor_id)


class TestSetAmount:
    def test_updates_in_place(self, billing_service, company_id, project_id, test_actor_id):
        billing_service.add(company_id, project_id, "2025-11", Decimal("100"), test_actor_id)
        billing_service.set_amount(company_id, project_id, "2025-11", Decimal("300"), test_actor_id)

        entries = billing_service.list_for_project(company_id, project_id)
        assert len(entries) == 1
        assert entries[0].amount == Decimal("300")

    def test_inserts_missing_month(self, billing_service, company_id, project_id, test_actor_id):
        billing_service.set_amount(
            company_id, project_id, YearMonth(2025, 12), Decimal("50"), test_actor_id
        )
        assert len(billing_service.list_for_project(company_id, project_id)) == 1


class TestReplaceProjectSchedule:
    def test_replaces_whole_plan(self, billing_service, company_id, project_id, test_actor_id):
        billing_service.add(company_id, project_id, "2025-05", Decimal("1"), test_actor_id)

        billing_service.replace_project_schedule(
            company_id,
            project_id,
            {"2025-07": Decimal("700"), "2025-06": Decimal("600")},
            test_actor_id,
        )

        entries = billing_service.list_for_project(company_id, project_id)
        assert [(e.year_month, e.amount) for e in entries] == [
            ("2025-06", Decimal("600")),
            ("2025-07", Decimal("700")),
        ]

    def test_duplicate_months_in_schedule_rejected(
        self, billing_service, company_id, project_id, test_actor_id
    ):
        with pytest.raises(ScheduledBillingConflictError):
            billing_service.replace_project_schedule(
                company_id,
                project_id,
                {"2025-07": Decimal("1"), YearMonth(2025, 7): Decimal("2")},
                test_actor_id,
            )


class TestMonthlyTotals:
    def test_excludes_subscription_projects(
        self, billing_service, make_project, company_id, project_id, test_actor_id
    ):
        other = make_project(business_number="P-201", name="Clinic")
        subscription = make_project(business_number="C-5", name="Cloud plan")
        billing_service.add(company_id, project_id, "2025-11", Decimal("100"), test_actor_id)
        billing_service.add(company_id, other, "2025-11", Decimal("50"), test_actor_id)
        billing_service.add(company_id, subscription, "2025-11", Decimal("999"), test_actor_id)

        months = [YearMonth(2025, 11), YearMonth(2025, 12)]
        totals = billing_service.monthly_totals(company_id, months)

        assert totals[YearMonth(2025, 11)].amount == Decimal("150")
        assert totals[YearMonth(2025, 12)].is_zero

    def test_tenant_scoped(
        self, billing_service, make_project, company_id, other_company_id, test_actor_id
    ):
        foreign = make_project(company_id=other_company_id, business_number="P-9")
        billing_service.add(other_company_id, foreign, "2025-11", Decimal("10"), test_actor_id)
        totals = billing_service.monthly_totals(company_id, [YearMonth(2025, 11)])
        assert totals[YearMonth(2025, 11)].is_zero
