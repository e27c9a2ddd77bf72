from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import Optional
from sqlalchemy.orm import Session

import asset_client
import competency_ledger
import progress_store
import unlock_gate
from award_service import persist_awards
from celery_worker import autosave_progress
from dependencies import get_context, get_current_session, get_db
from schemas import CompetencyCategory
from session import EngineSession, SessionContext
from utils import time_ago

router = APIRouter()

# --- Pydantic Models ---
class ActionRequest(BaseModel):
    action_type: str
    category: CompetencyCategory
    impact: str = "medium"
    description: str = ""
    event_id: Optional[str] = None

# --- API Endpoints ---
@router.get("/competency", tags=["Competency"])
def get_competency(ctx: SessionContext = Depends(get_context), db: Session = Depends(get_db)):
    profile = ctx.profile
    recent = progress_store.recent_awards(db, profile.customer_id)
    return {
        "profile": profile,
        "tierProgress": competency_ledger.tier_progress(profile.total_points),
        "recentActivity": [
            {"id": row.event_id, "points": row.points, "category": row.category.value,
             "text": row.reason, "time": time_ago(row.created_at)}
            for row in recent
        ],
    }

@router.post("/competency/baseline", tags=["Competency"])
def seed_baseline(session: EngineSession = Depends(get_current_session), db: Session = Depends(get_db)):
    if progress_store.load_baseline(db, session.customer_id) is not None:
        return {"status": "Baseline already seeded.", "baseline": progress_store.load_baseline(db, session.customer_id)}
    assets = asset_client.get_customer_assets(session.record_id, session.access_token)
    if not assets:
        raise HTTPException(status_code=502, detail="Customer assets unavailable.")
    baseline = asset_client.competency_baseline(assets)
    progress_store.save_baseline(db, session.customer_id, baseline)
    db.commit()
    return {"status": "Baseline seeded.", "baseline": baseline}

@router.post("/actions", tags=["Competency"])
def record_action(request: ActionRequest, ctx: SessionContext = Depends(get_context), db: Session = Depends(get_db)):
    before = unlock_gate.tool_access_status(ctx.profile)
    ctx.record_action(request.action_type, request.category, impact=request.impact,
                      description=request.description, event_id=request.event_id)
    result = persist_awards(db, ctx, before)
    return {"profile": ctx.profile, **result}

@router.get("/tool-access", tags=["Competency"])
def get_tool_access(ctx: SessionContext = Depends(get_context)):
    return ctx.access_status()

@router.get("/progress/{tool_key}", tags=["Progress"])
def get_progress(tool_key: str, session: EngineSession = Depends(get_current_session), db: Session = Depends(get_db)):
    return {"tool_key": tool_key, "state": progress_store.get_user_progress(db, session.customer_id, tool_key)}

@router.put("/progress/{tool_key}", status_code=202, tags=["Progress"])
def save_progress(tool_key: str, state: dict, session: EngineSession = Depends(get_current_session)):
    # Fire-and-forget; the worker logs failures.
    autosave_progress.delay(session.customer_id, tool_key, state)
    return {"status": "queued"}
