# sales-enablement/competency_ledger.py
"""
Competency ledger: folds AwardEvents into a CompetencyProfile.

Every event adds its points to the running total and points / 10 to its
category score (capped at 100). Events are applied in the order they are
given and each event id is applied at most once.
"""
import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

import config
import unlock_gate
from errors import DuplicateEventError
from schemas import CATEGORY_FIELDS, AwardEvent, CompetencyCategory, CompetencyProfile, TierProgress
from utils import round_half_up

log = logging.getLogger(__name__)


def current_tier(total_points: int) -> str:
    tier = None
    for name, threshold in sorted(config.TIERS.items(), key=lambda item: item[1]):
        if total_points >= threshold:
            tier = name
    return tier or next(iter(config.TIERS))


def tier_progress(total_points: int) -> TierProgress:
    ordered = sorted(config.TIERS.items(), key=lambda item: item[1])
    tier = current_tier(total_points)
    for index, (name, threshold) in enumerate(ordered):
        if name != tier:
            continue
        if index + 1 == len(ordered):
            return TierProgress(current_tier=tier)
        next_name, next_threshold = ordered[index + 1]
        span = next_threshold - threshold
        return TierProgress(
            current_tier=tier,
            next_tier=next_name,
            points_to_next=next_threshold - total_points,
            progress_pct=round((total_points - threshold) / span * 100, 1),
        )
    return TierProgress(current_tier=tier)


def points_for_action(action_type: str, impact: str = "medium") -> int:
    base = config.ACTION_POINTS.get(action_type, config.DEFAULT_ACTION_POINTS)
    multiplier = config.IMPACT_MULTIPLIERS.get(impact, 1.0)
    return round_half_up(base * multiplier)


class CompetencyLedger:
    def __init__(self, customer_id: str = "", baseline: Optional[Dict[str, float]] = None):
        self.customer_id = customer_id
        self.baseline = dict(baseline or {})
        self._applied_ids = set()
        self._duplicates_logged = set()
        self.events: List[AwardEvent] = []
        # Category progress in award points; scores are derived from these so thresholds hit exactly.
        self._category_points: Dict[str, Decimal] = {
            field: self._baseline_points(field) for field in CATEGORY_FIELDS.values()
        }
        self._profile = self._refresh(CompetencyProfile(customer_id=customer_id, **self._scores()))

    @classmethod
    def replay(cls, events: Iterable[AwardEvent], customer_id: str = "",
               baseline: Optional[Dict[str, float]] = None) -> "CompetencyLedger":
        """Rebuilds a ledger from a persisted event log, in log order."""
        ledger = cls(customer_id=customer_id, baseline=baseline)
        for event in events:
            ledger.apply(event)
        return ledger

    @property
    def profile(self) -> CompetencyProfile:
        return self._profile

    def has_applied(self, event_id: str) -> bool:
        return event_id in self._applied_ids

    def apply(self, event: AwardEvent, strict: bool = False) -> CompetencyProfile:
        """
        Applies one award and returns the updated profile.

        A repeated event id leaves the profile untouched; with ``strict=True`` it
        raises DuplicateEventError instead.
        """
        if event.event_id in self._applied_ids:
            if strict:
                raise DuplicateEventError(event.event_id)
            if event.event_id not in self._duplicates_logged:
                log.warning("Ignoring duplicate award event %s for %s", event.event_id, self.customer_id)
                self._duplicates_logged.add(event.event_id)
            return self._profile

        field = CATEGORY_FIELDS[CompetencyCategory(event.category)]
        self._category_points[field] += event.points
        update = self._scores()
        update["total_points"] = self._profile.total_points + event.points
        if event.activity in config.AWARD_CONFIG:
            update["analyses_completed"] = self._profile.analyses_completed + 1

        self._applied_ids.add(event.event_id)
        self.events.append(event)
        self._profile = self._refresh(self._profile.model_copy(update=update))
        return self._profile

    def reset(self, category: Optional[CompetencyCategory] = None) -> CompetencyProfile:
        """Explicitly resets one (or every) category score to its baseline. Points are kept."""
        categories = [CompetencyCategory(category)] if category else list(CompetencyCategory)
        for c in categories:
            self._category_points[CATEGORY_FIELDS[c]] = self._baseline_points(CATEGORY_FIELDS[c])
        self._profile = self._refresh(self._profile.model_copy(update=self._scores()))
        log.info("Reset %s for %s", ", ".join(c.value for c in categories), self.customer_id)
        return self._profile

    def _baseline_points(self, field: str) -> Decimal:
        score = min(float(config.CATEGORY_SCORE_CAP), max(0.0, float(self.baseline.get(field) or 0.0)))
        return Decimal(str(score)) * config.POINTS_PER_SCORE_UNIT

    def _scores(self) -> Dict[str, float]:
        cap = Decimal(config.CATEGORY_SCORE_CAP)
        return {
            field: float(min(cap, points / config.POINTS_PER_SCORE_UNIT))
            for field, points in self._category_points.items()
        }

    def _refresh(self, profile: CompetencyProfile) -> CompetencyProfile:
        profile = profile.model_copy(update={"current_tier": current_tier(profile.total_points)})
        return profile.model_copy(update={"unlocked": unlock_gate.unlock_flags(profile)})
