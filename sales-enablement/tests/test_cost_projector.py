from __future__ import annotations

import pytest

import cost_projector
from errors import ValidationError
from schemas import CostAssumptions

EXAMPLE = CostAssumptions(
    revenue=10_000_000,
    target_growth_rate=0.20,
    average_deal_size=150_000,
    sales_cycle_length=90,
    conversion_rate=0.15,
    churn_rate=0.05,
    horizon_months=12,
)


class TestProjection:
    def test_example_scenario(self):
        projection = cost_projector.project(EXAMPLE)
        missed = projection.category_amount("missed_growth_revenue")

        assert projection.category_amount("inefficiency_loss") == pytest.approx(1_500_000)
        assert projection.category_amount("churn_impact") == pytest.approx(500_000)
        # (90 - 60) * 150_000 * 0.02
        assert projection.category_amount("extended_cycle_cost") == pytest.approx(90_000)
        assert missed == pytest.approx(10_000_000 / 12 * 0.20 / 12 * 12 * 13 / 2)
        assert projection.total_cost_of_inaction == pytest.approx(missed + 1_500_000 + 500_000 + 90_000)

    def test_cycle_at_baseline_costs_nothing(self):
        projection = cost_projector.project(EXAMPLE.model_copy(update={"sales_cycle_length": 60}))
        missed = projection.category_amount("missed_growth_revenue")
        assert projection.category_amount("extended_cycle_cost") == 0
        assert projection.total_cost_of_inaction == pytest.approx(missed + 1_500_000 + 500_000)

    def test_short_cycle_is_clamped_to_zero(self):
        projection = cost_projector.project(EXAMPLE.model_copy(update={"sales_cycle_length": 30}))
        assert projection.category_amount("extended_cycle_cost") == 0

    def test_total_equals_sum_of_categories(self):
        for cycle in (30, 60, 90, 145):
            projection = cost_projector.project(EXAMPLE.model_copy(update={"sales_cycle_length": cycle}))
            assert projection.total_cost_of_inaction == sum(c.amount for c in projection.categories)

    def test_always_reports_four_categories(self):
        projection = cost_projector.project(
            EXAMPLE.model_copy(update={"churn_rate": 0, "sales_cycle_length": 10})
        )
        assert [c.key for c in projection.categories] == [
            "missed_growth_revenue", "inefficiency_loss", "churn_impact", "extended_cycle_cost",
        ]
        assert projection.category_amount("churn_impact") == 0

    def test_is_deterministic(self):
        first = cost_projector.project(EXAMPLE)
        second = cost_projector.project(EXAMPLE)
        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_monthly_impact(self):
        projection = cost_projector.project(EXAMPLE.model_copy(update={"horizon_months": 6}))
        assert projection.monthly_impact == pytest.approx(projection.total_cost_of_inaction / 6)

    def test_scenarios(self):
        projection = cost_projector.project(EXAMPLE)
        by_name = {s.category: s for s in projection.scenarios}
        assert set(by_name) == {"Revenue Growth", "Sales Efficiency", "Customer Retention"}
        assert by_name["Sales Efficiency"].current_state == pytest.approx(8_500_000)
        assert by_name["Customer Retention"].impact == pytest.approx(250_000)


class TestTimeline:
    def test_month_values(self):
        projection = cost_projector.project(EXAMPLE)
        monthly = 10_000_000 / 12
        first = projection.timeline[0]
        assert first.month == 1
        assert first.with_action == pytest.approx(monthly * 1.20 ** (1 / 12))
        assert first.without_action == pytest.approx(monthly * 1.06 ** (1 / 12))
        assert first.gap == pytest.approx(first.with_action - first.without_action)
        assert projection.timeline[-1].with_action == pytest.approx(monthly * 1.20)

    @pytest.mark.parametrize("horizon, points", [(1, 1), (6, 6), (12, 12), (24, 12), (36, 12)])
    def test_length_is_capped(self, horizon, points):
        projection = cost_projector.project(EXAMPLE.model_copy(update={"horizon_months": horizon}))
        assert [p.month for p in projection.timeline] == list(range(1, points + 1))

    def test_gap_grows(self):
        gaps = [p.gap for p in cost_projector.project(EXAMPLE).timeline]
        assert gaps == sorted(gaps)


class TestValidation:
    def test_defaults_fill_omitted_fields(self):
        projection = cost_projector.project(CostAssumptions(revenue=1_200_000, average_deal_size=25_000))
        resolved = projection.assumptions
        assert resolved.target_growth_rate == 0.20
        assert resolved.sales_cycle_length == 90
        assert resolved.conversion_rate == 0.15
        assert resolved.churn_rate == 0.05
        assert resolved.horizon_months == 12
        assert len(projection.timeline) == 12

    @pytest.mark.parametrize("field, value", [
        ("revenue", None), ("revenue", 0), ("revenue", -5),
        ("average_deal_size", None), ("average_deal_size", 0),
    ])
    def test_insufficient_data(self, field, value):
        with pytest.raises(ValidationError) as exc:
            cost_projector.project(EXAMPLE.model_copy(update={field: value}))
        assert exc.value.code == "insufficientData"
        assert exc.value.field == field

    def test_negative_rate_rejected(self):
        with pytest.raises(ValidationError) as exc:
            cost_projector.project(EXAMPLE.model_copy(update={"churn_rate": -0.1}))
        assert exc.value.field == "churn_rate"

    def test_zero_horizon_rejected(self):
        with pytest.raises(ValidationError) as exc:
            cost_projector.project(EXAMPLE.model_copy(update={"horizon_months": 0}))
        assert exc.value.field == "horizon_months"
