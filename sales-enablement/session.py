# sales-enablement/session.py
"""
Explicit per-session engine context.

A SessionContext owns one customer's ledger and form provenance and turns tool
activity (scoring a company, projecting costs, finishing a business case, logging
a real-world action) into AwardEvents. Event ids are derived from the session
key and the activity, so repeating an activity in the same session never awards
twice.
"""
import dataclasses
import hashlib
import logging
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

import config
import cost_projector
import fit_scorer
import unlock_gate
from competency_ledger import CompetencyLedger, points_for_action
from field_provenance import FieldProvenance
from schemas import AwardEvent, CompetencyCategory, CostAssumptions, CostProjection, CriteriaSet, ScoreBreakdown

log = logging.getLogger(__name__)

# Asset-store default value keys -> cost form fields.
COST_DEFAULT_FIELDS = {
    "currentRevenue": "revenue",
    "targetGrowthRate": "target_growth_rate",
    "averageDealSize": "average_deal_size",
    "salesCycleLength": "sales_cycle_length",
    "conversionRate": "conversion_rate",
    "churnRate": "churn_rate",
    "timeframe": "horizon_months",
}


@dataclass(frozen=True)
class EngineSession:
    customer_id: str
    record_id: str = ""
    session_key: str = ""
    access_token: str = dataclasses.field(default="", repr=False, compare=False)

    @classmethod
    def from_token(cls, customer_id: str, record_id: str, access_token: str) -> "EngineSession":
        # The token is never parsed; its digest keys award idempotency.
        digest = hashlib.sha256(access_token.encode("utf-8")).hexdigest()[:16]
        return cls(customer_id=customer_id, record_id=record_id, session_key=digest, access_token=access_token)


class SessionContext:
    def __init__(self, session: EngineSession, ledger: Optional[CompetencyLedger] = None):
        self.session = session
        self.ledger = ledger or CompetencyLedger(customer_id=session.customer_id)
        self._provenance: Dict[str, FieldProvenance] = {}
        self._emitted: List[AwardEvent] = []
        self.last_score: Optional[ScoreBreakdown] = None
        self.last_projection: Optional[CostProjection] = None

    @property
    def profile(self):
        return self.ledger.profile

    def event_id(self, activity: str, subject: str = "") -> str:
        parts = [self.session.customer_id, self.session.session_key, activity]
        if subject:
            parts.append(subject.strip().lower())
        return ":".join(parts)

    def _award(self, activity: str, subject: str = "") -> Optional[AwardEvent]:
        event_id = self.event_id(activity, subject)
        if self.ledger.has_applied(event_id):
            return None
        award = config.AWARD_CONFIG[activity]
        event = AwardEvent(
            event_id=event_id,
            customer_id=self.session.customer_id,
            points=award["points"],
            category=award["category"],
            reason=f"{award['reason']}: {subject}" if subject else award["reason"],
            activity=activity,
        )
        return self.apply(event)

    def apply(self, event: AwardEvent) -> Optional[AwardEvent]:
        """Applies an externally built event; returns it when it was new."""
        if self.ledger.has_applied(event.event_id):
            self.ledger.apply(event)
            return None
        self.ledger.apply(event)
        self._emitted.append(event)
        return event

    def drain_emitted(self) -> List[AwardEvent]:
        """Events applied since the last drain, in application order, for persistence."""
        events, self._emitted = self._emitted, []
        return events

    # --- Tools ---
    def score_entity(self, entity_name: str, strategy: fit_scorer.ScoringStrategy,
                     criteria: Optional[CriteriaSet] = None, attributes: Optional[dict] = None) -> ScoreBreakdown:
        breakdown = fit_scorer.score(entity_name, criteria or fit_scorer.default_criteria(), strategy, attributes)
        self._award("icp_rating", breakdown.entity_name)
        self.last_score = breakdown
        return breakdown

    def project_costs(self, assumptions: CostAssumptions) -> CostProjection:
        projection = cost_projector.project(assumptions)
        self._award("cost_projection")
        self.last_projection = projection
        return projection

    def complete_business_case(self, template: str = "pilot") -> Optional[AwardEvent]:
        return self._award("business_case", template)

    def record_action(self, action_type: str, category: CompetencyCategory, impact: str = "medium",
                      description: str = "", event_id: Optional[str] = None) -> Optional[AwardEvent]:
        event = AwardEvent(
            event_id=event_id or uuid.uuid4().hex,
            customer_id=self.session.customer_id,
            points=points_for_action(action_type, impact),
            category=category,
            reason=description or f"Real-world action: {action_type.replace('_', ' ')}",
        )
        return self.apply(event)

    def access_status(self) -> Dict[str, dict]:
        return unlock_gate.tool_access_status(self.profile)

    # --- Auto-population ---
    def provenance(self, tool_key: str) -> FieldProvenance:
        if tool_key not in self._provenance:
            self._provenance[tool_key] = FieldProvenance()
        return self._provenance[tool_key]

    def autopopulate(self, tool_key: str, form: dict, derived: dict) -> dict:
        return self.provenance(tool_key).auto_populate(form, derived)

    def edit_field(self, tool_key: str, form: dict, field: str, value) -> dict:
        return self.provenance(tool_key).edit(form, field, value)


def cost_form_defaults(assets: dict) -> dict:
    """Cost calculator fields derivable from the asset store; missing values are left out."""
    defaults = ((assets or {}).get("costCalculatorContent") or {}).get("defaultValues") or {}
    return {
        field: defaults[key]
        for key, field in COST_DEFAULT_FIELDS.items()
        if defaults.get(key) is not None
    }


def business_case_fields(breakdown: Optional[ScoreBreakdown], projection: Optional[CostProjection]) -> dict:
    """Business case fields derivable from the latest score and projection."""
    derived = {}
    if breakdown is not None:
        derived["company_name"] = breakdown.entity_name
        derived["fit_score"] = breakdown.overall_score
        derived["priority"] = breakdown.recommendation
    if projection is not None:
        derived["annual_cost_of_inaction"] = round(projection.total_cost_of_inaction)
        derived["monthly_impact"] = round(projection.monthly_impact)
    return derived
