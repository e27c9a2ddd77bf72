# sales-enablement/award_service.py
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

import alert_client
import config
import progress_store
import unlock_gate
from session import SessionContext

log = logging.getLogger(__name__)

FOUNDATION_TIER = min(config.TIERS, key=config.TIERS.get)

def tiers_reached(total_points: int) -> List[str]:
    """Every tier whose threshold the total has met, lowest first."""
    return [
        name for name, threshold in sorted(config.TIERS.items(), key=lambda item: item[1])
        if total_points >= threshold
    ]

def persist_awards(db: Session, ctx: SessionContext, previous_access: Optional[Dict[str, dict]] = None) -> dict:
    """
    Writes the context's newly applied events, records every tier reached and
    commits. Only events the store accepted are reported back. Alerts for new
    tiers and unlocked tools go out after the commit.
    """
    emitted = ctx.drain_emitted()
    events = [event for event in emitted if progress_store.record_award(db, event)]
    if len(events) != len(emitted):
        # The store already held some of these; answer from what it holds.
        db.flush()
        ctx.ledger = progress_store.load_ledger(db, ctx.session.customer_id)

    profile = ctx.profile
    new_tiers = []
    if events:
        for tier in tiers_reached(profile.total_points):
            # The starting tier is recorded but not announced.
            if progress_store.record_tier_achievement(db, profile.customer_id, tier) and tier != FOUNDATION_TIER:
                new_tiers.append(tier)

    current_access = unlock_gate.tool_access_status(profile)
    unlocked = unlock_gate.newly_unlocked(previous_access, current_access) if previous_access is not None else []
    db.commit()

    for tier in new_tiers:
        log.info("Customer %s reached tier %s", profile.customer_id, tier)
        alert_client.trigger_tier_alert(profile.customer_id, tier, profile.total_points)
    for tool in unlocked:
        log.info("Customer %s unlocked %s", profile.customer_id, tool)
        alert_client.trigger_unlock_alert(profile.customer_id, tool, current_access[tool]["competency"])

    return {
        "awarded": [
            {"eventId": e.event_id, "points": e.points, "category": e.category.value, "reason": e.reason}
            for e in events
        ],
        "newTier": new_tiers[-1] if new_tiers else None,
        "newTiers": new_tiers,
        "unlocked": unlocked,
    }
