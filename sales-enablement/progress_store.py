# sales-enablement/progress_store.py
"""
Storage operations over the SQLAlchemy models. Callers own the session and the
commit; these helpers only add, query and update rows.
"""
import logging
from datetime import timedelta
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from competency_ledger import CompetencyLedger
from models import (
    CompetencyBaseline,
    CompetencyCategoryType,
    CompetencySnapshot,
    PointsLedger,
    SessionActivity,
    TierAchievement,
    UserProgress,
)
from schemas import CATEGORY_FIELDS, AwardEvent, CompetencyProfile
from utils import ensure_timezone_aware, utc_now

log = logging.getLogger(__name__)


# --- Award events ---
def load_award_events(db: Session, customer_id: str) -> List[AwardEvent]:
    rows = db.query(PointsLedger).filter_by(customer_id=customer_id).order_by(PointsLedger.id).all()
    return [
        AwardEvent(
            event_id=row.event_id,
            customer_id=row.customer_id,
            points=row.points,
            category=row.category.value,
            reason=row.reason or "",
            activity=row.activity,
            created_at=ensure_timezone_aware(row.created_at) if row.created_at else utc_now(),
        )
        for row in rows
    ]

def record_award(db: Session, event: AwardEvent) -> bool:
    """Adds the event unless the customer already has an event with its id. Returns True when added."""
    if db.query(PointsLedger).filter_by(customer_id=event.customer_id, event_id=event.event_id).first():
        log.warning("Award event %s already recorded; skipping.", event.event_id)
        return False
    db.add(PointsLedger(
        event_id=event.event_id,
        customer_id=event.customer_id,
        category=CompetencyCategoryType(event.category.value),
        points=event.points,
        reason=event.reason,
        activity=event.activity,
        created_at=event.created_at,
    ))
    return True

def recent_awards(db: Session, customer_id: str, limit: int = 5) -> List[PointsLedger]:
    return (
        db.query(PointsLedger)
        .filter_by(customer_id=customer_id)
        .order_by(PointsLedger.id.desc())
        .limit(limit)
        .all()
    )

def customers_with_awards(db: Session) -> List[str]:
    return [row[0] for row in db.query(PointsLedger.customer_id).distinct().all()]


# --- Baseline & snapshots ---
def load_baseline(db: Session, customer_id: str) -> Optional[Dict[str, float]]:
    row = db.get(CompetencyBaseline, customer_id)
    if row is None:
        return None
    return {field: getattr(row, field) for field in CATEGORY_FIELDS.values()}

def save_baseline(db: Session, customer_id: str, scores: Dict[str, float]) -> bool:
    """Stores the baseline once; an existing baseline is never replaced."""
    if db.get(CompetencyBaseline, customer_id) is not None:
        return False
    db.add(CompetencyBaseline(
        customer_id=customer_id,
        **{field: float(scores.get(field) or 0) for field in CATEGORY_FIELDS.values()},
    ))
    return True

def save_snapshot(db: Session, profile: CompetencyProfile, events_applied: int) -> CompetencySnapshot:
    snapshot = db.get(CompetencySnapshot, profile.customer_id)
    if snapshot is None:
        snapshot = CompetencySnapshot(customer_id=profile.customer_id)
        db.add(snapshot)
        db.flush()
    snapshot.customer_analysis = profile.customer_analysis
    snapshot.value_communication = profile.value_communication
    snapshot.sales_execution = profile.sales_execution
    snapshot.total_points = profile.total_points
    snapshot.current_tier = profile.current_tier
    snapshot.unlocked = dict(profile.unlocked)
    snapshot.events_applied = events_applied
    return snapshot

def record_tier_achievement(db: Session, customer_id: str, tier: str) -> bool:
    if db.query(TierAchievement).filter_by(customer_id=customer_id, tier=tier).first():
        return False
    db.add(TierAchievement(customer_id=customer_id, tier=tier))
    return True


# --- Saved form state ---
def get_user_progress(db: Session, customer_id: str, tool_key: str) -> Optional[dict]:
    row = db.query(UserProgress).filter_by(customer_id=customer_id, tool_key=tool_key).first()
    return dict(row.state) if row else None

def save_user_progress(db: Session, customer_id: str, tool_key: str, state: dict) -> UserProgress:
    row = db.query(UserProgress).filter_by(customer_id=customer_id, tool_key=tool_key).first()
    if row is None:
        row = UserProgress(customer_id=customer_id, tool_key=tool_key)
        db.add(row)
    row.state = dict(state)
    row.updated_at = utc_now()
    return row


# --- Session metadata ---
def touch_session(db: Session, customer_id: str, session_key: str) -> SessionActivity:
    row = db.query(SessionActivity).filter_by(session_key=session_key).first()
    if row is None:
        row = SessionActivity(customer_id=customer_id, session_key=session_key, last_seen_at=utc_now())
        db.add(row)
    else:
        row.last_seen_at = utc_now()
    return row

def refresh_sessions(db: Session, lifetime: timedelta) -> Dict[str, int]:
    """Marks live sessions as refreshed and drops the ones past their lifetime."""
    now = utc_now()
    refreshed, expired = 0, 0
    for row in db.query(SessionActivity).all():
        if now - ensure_timezone_aware(row.last_seen_at) > lifetime:
            db.delete(row)
            expired += 1
        else:
            row.refreshed_at = now
            refreshed += 1
    return {"refreshed": refreshed, "expired": expired}


def load_ledger(db: Session, customer_id: str) -> CompetencyLedger:
    """Rebuilds a customer's ledger from the stored baseline and award log."""
    return CompetencyLedger.replay(
        load_award_events(db, customer_id),
        customer_id=customer_id,
        baseline=load_baseline(db, customer_id),
    )
