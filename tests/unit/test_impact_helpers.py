"""
Unit tests for fiscal change impact analysis.

Verifies:
- months entering and leaving the 12-month window
- revenue and cost impact signs
- overhead exclusion and project counting
- recommendation rules
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

from costbook_kernel.domain.calendar import YearMonth
from costbook_modules.billing.models import ScheduledBillingEntry
from costbook_modules.fiscal.helpers import (
    ImpactCounts,
    analyze_impact,
    build_recommendations,
    select_current_fiscal_info,
    shifted_months,
)
from costbook_modules.fiscal.models import FiscalDefinition
from costbook_modules.project.models import (
    CostEntry,
    ProgressRecord,
    ProjectKind,
    ProjectRecord,
    SubscriptionBilling,
)

COMPANY = uuid4()

MARCH_2024 = FiscalDefinition(2024, 3)      # window 2024-04 .. 2025-03
DECEMBER_2024 = FiscalDefinition(2024, 12)  # window 2025-01 .. 2025-12


def _project(kind=ProjectKind.PERCENTAGE_OF_COMPLETION, contract="1000000"):
    return ProjectRecord(
        id=uuid4(),
        company_id=COMPANY,
        business_number="P",
        name="Project",
        contract_amount=Decimal(contract),
        kind=kind,
    )


def _billing(project, month, amount):
    return ScheduledBillingEntry(
        id=uuid4(), company_id=COMPANY, project_id=project.id,
        year_month=month, amount=Decimal(amount),
    )


class _Row:
    def __init__(self, fiscal_year):
        self.fiscal_year = fiscal_year


class TestSelectCurrentFiscalInfo:
    def test_greatest_fiscal_year(self):
        rows = [_Row(2023), _Row(2025), _Row(2024)]
        assert select_current_fiscal_info(rows).fiscal_year == 2025

    def test_no_rows(self):
        assert select_current_fiscal_info([]) is None


class TestShiftedMonths:
    def test_march_to_december(self):
        added, removed = shifted_months(MARCH_2024, DECEMBER_2024)
        assert added == tuple(YearMonth(2025, m) for m in range(4, 13))
        assert removed == tuple(YearMonth(2024, m) for m in range(4, 13))

    def test_same_definition_shifts_nothing(self):
        assert shifted_months(MARCH_2024, MARCH_2024) == ((), ())


class TestAnalyzeImpact:
    def test_scheduled_billing_signs(self):
        project = _project()
        billings = [
            _billing(project, "2025-06", "300"),   # enters
            _billing(project, "2024-06", "100"),   # leaves
            _billing(project, "2025-02", "999"),   # in both windows
        ]
        impact = analyze_impact(
            MARCH_2024, DECEMBER_2024,
            projects=[project], scheduled_billings=billings, subscription_billings=[],
            cost_entries=[], progress_by_project={},
        )
        assert impact.revenue_impact == Decimal("200")
        assert impact.project_count == 1

    def test_subscription_project_billing_not_counted_as_scheduled(self):
        project = _project(kind=ProjectKind.SUBSCRIPTION)
        impact = analyze_impact(
            MARCH_2024, DECEMBER_2024,
            projects=[project], scheduled_billings=[_billing(project, "2025-06", "300")],
            subscription_billings=[], cost_entries=[], progress_by_project={},
        )
        assert impact.revenue_impact == Decimal("0")
        assert impact.project_count == 0

    def test_subscription_billings_counted_not_summed(self):
        project = _project()
        subscriptions = [
            SubscriptionBilling(uuid4(), COMPANY, None, "2025-07", Decimal("50")),
            SubscriptionBilling(uuid4(), COMPANY, None, "2024-07", Decimal("20")),
        ]
        costs = [
            CostEntry(uuid4(), COMPANY, project.id, date(2024, 8, 3), Decimal("70")),
            CostEntry(uuid4(), COMPANY, None, date(2025, 9, 9), Decimal("10")),
        ]
        impact = analyze_impact(
            MARCH_2024, DECEMBER_2024,
            projects=[project], scheduled_billings=[], subscription_billings=subscriptions,
            cost_entries=costs, progress_by_project={},
        )
        assert impact.revenue_impact == Decimal("0")
        assert impact.cost_impact == Decimal("-60")
        assert impact.affected_subscription_billings == 2
        assert impact.affected_cost_entries == 2
        assert impact.project_count == 1

    def test_recognized_revenue_dated_by_latest_progress(self):
        project = _project(contract="1000000")
        progress = {
            project.id: [
                ProgressRecord(uuid4(), COMPANY, project.id, Decimal("50"), date(2025, 5, 1), 1),
            ]
        }
        impact = analyze_impact(
            MARCH_2024, DECEMBER_2024,
            projects=[project], scheduled_billings=[], subscription_billings=[],
            cost_entries=[], progress_by_project=progress,
        )
        assert impact.revenue_impact == Decimal("500000")

    def test_overhead_projects_are_excluded(self):
        overhead = _project(kind=ProjectKind.OVERHEAD)
        costs = [CostEntry(uuid4(), COMPANY, overhead.id, date(2025, 8, 1), Decimal("40"))]
        impact = analyze_impact(
            MARCH_2024, DECEMBER_2024,
            projects=[overhead], scheduled_billings=[_billing(overhead, "2025-08", "100")],
            subscription_billings=[], cost_entries=costs, progress_by_project={},
        )
        assert impact.revenue_impact == Decimal("0")
        assert impact.project_count == 0
        assert impact.cost_impact == Decimal("40")

    def test_summary_is_serializable(self):
        impact = analyze_impact(
            MARCH_2024, DECEMBER_2024,
            projects=[], scheduled_billings=[], subscription_billings=[],
            cost_entries=[], progress_by_project={}, ledger_row_count=3,
        )
        data = impact.to_dict()
        assert data["revenue_impact"] == "0"
        assert data["shifted_months_added"][0] == "2025-04"
        assert data["ledger_row_count"] == 3


class TestRecommendations:
    def _counts(self, **overrides):
        values = dict(
            months_shifted=0, project_count=0, affected_subscription_billings=0,
            affected_cost_entries=0, ledger_row_count=0, fiscal_year_changed=False,
            amounts_changed=False,
        )
        values.update(overrides)
        return ImpactCounts(**values)

    def test_backup_always_recommended(self):
        assert build_recommendations(self._counts()) == (
            "Back up fiscal, billing and ledger data before applying the change",
        )

    def test_shifted_months_trigger_schedule_review(self):
        recommendations = build_recommendations(self._counts(months_shifted=18))
        assert "Review the annual payment schedule for the new fiscal window" in recommendations
        assert "Recompute the cash-flow forecast" in recommendations

    def test_ledger_rows_trigger_ledger_recommendation(self):
        recommendations = build_recommendations(self._counts(ledger_row_count=2))
        assert "Create bank balance ledger rows for the new fiscal year" in recommendations

    def test_rules_are_deterministic(self):
        counts = self._counts(project_count=2, affected_cost_entries=1, months_shifted=4)
        assert build_recommendations(counts) == build_recommendations(counts)
