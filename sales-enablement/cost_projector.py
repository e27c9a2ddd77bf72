# sales-enablement/cost_projector.py
"""
Cost-of-inaction projection. `project` is a pure function of its assumptions:
no clock, no randomness, no I/O.
"""
import logging
from typing import List

import config
from errors import ValidationError
from schemas import CostAssumptions, CostCategory, CostProjection, ImpactScenario, TimelinePoint

log = logging.getLogger(__name__)

REQUIRED_POSITIVE = {
    "revenue": "Current annual revenue is required.",
    "average_deal_size": "Average deal size is required.",
}


def resolve_assumptions(assumptions: CostAssumptions) -> CostAssumptions:
    """Fills omitted fields from COST_DEFAULTS and rejects unusable input."""
    values = assumptions.model_dump()

    for field, message in REQUIRED_POSITIVE.items():
        if values[field] is None or values[field] <= 0:
            raise ValidationError(message, field=field, code="insufficientData")

    for field, default in config.COST_DEFAULTS.items():
        if values[field] is None:
            values[field] = default
        elif values[field] < 0:
            raise ValidationError(f"{field} cannot be negative.", field=field, code="invalidValue")

    if values["horizon_months"] < 1 or int(values["horizon_months"]) != values["horizon_months"]:
        raise ValidationError("Horizon must be a whole number of months, at least 1.",
                              field="horizon_months", code="invalidValue")
    values["horizon_months"] = int(values["horizon_months"])
    return CostAssumptions(**values)


def build_timeline(monthly_revenue: float, growth_rate: float, horizon: int) -> List[TimelinePoint]:
    constants = config.COST_CONSTANTS
    without_action_rate = growth_rate * constants["growth_without_action_factor"]
    timeline = []
    for month in range(1, min(horizon, constants["timeline_cap_months"]) + 1):
        with_action = monthly_revenue * (1 + growth_rate) ** (month / 12)
        without_action = monthly_revenue * (1 + without_action_rate) ** (month / 12)
        timeline.append(TimelinePoint(
            month=month,
            with_action=with_action,
            without_action=without_action,
            gap=with_action - without_action,
        ))
    return timeline


def project(assumptions: CostAssumptions) -> CostProjection:
    resolved = resolve_assumptions(assumptions)
    constants = config.COST_CONSTANTS

    revenue = resolved.revenue
    growth = resolved.target_growth_rate
    horizon = resolved.horizon_months
    churn = resolved.churn_rate

    monthly_revenue = revenue / 12
    amounts = {
        "missed_growth_revenue": (monthly_revenue * growth / 12) * horizon * (horizon + 1) / 2,
        "inefficiency_loss": revenue * constants["inefficiency_rate"],
        "churn_impact": revenue * churn,
        "extended_cycle_cost": max(
            0.0,
            (resolved.sales_cycle_length - constants["cycle_baseline_days"])
            * resolved.average_deal_size * constants["cycle_cost_factor"],
        ),
    }
    categories = [
        CostCategory(key=key, name=name, amount=amounts[key])
        for key, name in config.COST_CATEGORIES.items()
    ]
    total = sum(category.amount for category in categories)

    scenarios = [
        ImpactScenario(
            category="Revenue Growth",
            current_state=revenue * (1 + constants["organic_growth_rate"]),
            with_improvement=revenue * (1 + growth),
            impact=amounts["missed_growth_revenue"],
        ),
        ImpactScenario(
            category="Sales Efficiency",
            current_state=revenue * (1 - constants["inefficiency_rate"]),
            with_improvement=revenue,
            impact=amounts["inefficiency_loss"],
        ),
        ImpactScenario(
            category="Customer Retention",
            current_state=revenue * (1 - churn),
            with_improvement=revenue * (1 - churn * constants["churn_reduction_factor"]),
            impact=amounts["churn_impact"] * constants["churn_reduction_factor"],
        ),
    ]

    log.debug("Projected cost of inaction %.2f over %d months", total, horizon)
    return CostProjection(
        total_cost_of_inaction=total,
        monthly_impact=total / horizon,
        timeline=build_timeline(monthly_revenue, growth, horizon),
        categories=categories,
        scenarios=scenarios,
        assumptions=resolved,
    )
