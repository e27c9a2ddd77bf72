from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Optional, List, Dict
from sqlalchemy.orm import Session

import asset_client
import cost_projector
import fit_scorer
import unlock_gate
from award_service import persist_awards
from dependencies import get_context, get_current_session, get_db
from field_provenance import FieldProvenance
from schemas import CostAssumptions, CriteriaSet, Criterion, ScoreBreakdown
from session import EngineSession, SessionContext, business_case_fields, cost_form_defaults

router = APIRouter()

# --- Pydantic Models ---
class ScoreRequest(BaseModel):
    entity_name: str
    strategy: str = "random"
    criteria: Optional[List[Criterion]] = None
    scores: Optional[Dict[str, float]] = None
    rules: Optional[Dict[str, List[dict]]] = None
    attributes: Optional[dict] = None
    seed: Optional[int] = None

class BusinessCaseCompletion(BaseModel):
    template: str = "pilot"

class AutopopulateRequest(BaseModel):
    form: dict = {}
    system_fields: List[str] = []
    assumptions: Optional[CostAssumptions] = None
    score: Optional[ScoreBreakdown] = None

def _strategy_options(request: ScoreRequest) -> dict:
    if request.strategy == "manual":
        return {"scores": request.scores or {}}
    if request.strategy == "rule_based":
        return {"rules": request.rules or {}}
    if request.strategy == "random":
        return {"seed": request.seed}
    return {}

# --- API Endpoints ---
@router.post("/icp/score", tags=["ICP"])
def score_company(request: ScoreRequest, ctx: SessionContext = Depends(get_context), db: Session = Depends(get_db)):
    before = unlock_gate.tool_access_status(ctx.profile)
    strategy = fit_scorer.build_strategy(request.strategy, **_strategy_options(request))
    criteria = CriteriaSet(criteria=request.criteria) if request.criteria else None
    breakdown = ctx.score_entity(request.entity_name, strategy, criteria=criteria, attributes=request.attributes)
    result = persist_awards(db, ctx, before)
    return {"score": breakdown, "profile": ctx.profile, **result}

@router.post("/cost/project", tags=["Cost Calculator"])
def project_cost(assumptions: CostAssumptions, ctx: SessionContext = Depends(get_context), db: Session = Depends(get_db)):
    before = unlock_gate.tool_access_status(ctx.profile)
    projection = ctx.project_costs(assumptions)
    result = persist_awards(db, ctx, before)
    return {"projection": projection, "profile": ctx.profile, **result}

@router.post("/cost/autopopulate", tags=["Cost Calculator"])
def autopopulate_cost_form(request: AutopopulateRequest, ctx: SessionContext = Depends(get_context)):
    assets = asset_client.get_customer_assets(ctx.session.record_id, ctx.session.access_token)
    provenance = FieldProvenance(request.system_fields)
    form = provenance.auto_populate(request.form, cost_form_defaults(assets))
    return {"form": form, "system_fields": provenance.system_fields}

@router.post("/business-case/autopopulate", tags=["Business Case"])
def autopopulate_business_case(request: AutopopulateRequest, session: EngineSession = Depends(get_current_session)):
    projection = cost_projector.project(request.assumptions) if request.assumptions else None
    provenance = FieldProvenance(request.system_fields)
    form = provenance.auto_populate(request.form, business_case_fields(request.score, projection))
    return {"form": form, "system_fields": provenance.system_fields}

@router.post("/business-case/complete", tags=["Business Case"])
def complete_business_case(request: BusinessCaseCompletion, ctx: SessionContext = Depends(get_context), db: Session = Depends(get_db)):
    before = unlock_gate.tool_access_status(ctx.profile)
    ctx.complete_business_case(request.template)
    result = persist_awards(db, ctx, before)
    return {"profile": ctx.profile, **result}
