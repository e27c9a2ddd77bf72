# sales-enablement/unlock_gate.py
"""
Progressive tool access. Every function here is pure given a profile snapshot,
so it is safe to call on every request.
"""
import logging
from typing import Dict, List, Optional

import config
from schemas import CompetencyCategory, CompetencyProfile, UnlockProgress, UnlockRule, UnlockStatus

log = logging.getLogger(__name__)

RULES: Dict[str, UnlockRule] = {
    tool: UnlockRule(tool=tool, **rule) for tool, rule in config.UNLOCK_RULES.items()
}


def is_unlocked(tool: str, profile: CompetencyProfile) -> UnlockStatus:
    tool = getattr(tool, "value", tool)
    rule = RULES.get(tool)
    if rule is None:
        log.warning("Unlock check for unknown tool '%s'", tool)
        return UnlockStatus(
            tool=str(tool),
            unlocked=False,
            reason=config.UNLOCK_REASONS["unknown"],
            progress=UnlockProgress(completed=0, required=0, next_requirement=""),
        )

    hint = config.UNLOCK_HINTS[tool]
    if rule.category is None:
        return UnlockStatus(
            tool=tool,
            unlocked=True,
            reason=config.UNLOCK_REASONS["always"],
            progress=UnlockProgress(completed=0, required=0, next_requirement=hint),
            level=rule.level,
            competency=rule.competency,
        )

    current = profile.category_score(CompetencyCategory(rule.category))
    unlocked = current >= rule.threshold and profile.analyses_completed >= rule.prerequisite_analyses
    return UnlockStatus(
        tool=tool,
        unlocked=unlocked,
        reason=config.UNLOCK_REASONS["unlocked" if unlocked else "locked"],
        progress=UnlockProgress(completed=current, required=rule.threshold, next_requirement=hint),
        level=rule.level,
        competency=rule.competency,
    )


def unlock_flags(profile: CompetencyProfile) -> Dict[str, bool]:
    return {tool: is_unlocked(tool, profile).unlocked for tool in RULES}


def tool_access_status(profile: CompetencyProfile) -> Dict[str, dict]:
    """The {toolId: {hasAccess, reason, progress, level, competency}} surface consumed by routing/UI."""
    status = {}
    for tool in RULES:
        result = is_unlocked(tool, profile)
        status[tool] = {
            "hasAccess": result.unlocked,
            "reason": result.reason,
            "progress": {
                "completed": result.progress.completed,
                "required": result.progress.required,
                "nextRequirement": result.progress.next_requirement,
            },
            "level": result.level,
            "competency": result.competency,
        }
    return status


def newly_unlocked(previous: Optional[Dict[str, dict]], current: Dict[str, dict]) -> List[str]:
    """Tools that went from locked to unlocked between two access-status snapshots."""
    previous = previous or {}
    return [
        tool for tool, status in current.items()
        if status.get("hasAccess") and not previous.get(tool, {}).get("hasAccess")
    ]
