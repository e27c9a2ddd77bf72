# sales-enablement/fit_scorer.py
"""
Weighted fit scoring of a named entity (usually a prospect company) against a
CriteriaSet such as the ICP rubric.

Per-criterion scores come from a pluggable ScoringStrategy; the overall score is
the weight-normalised sum rounded half-up, and the priority band is derived from
that overall score only.
"""
import logging
import math
import random
from typing import Dict, List, Optional, Protocol

import httpx

import config
from errors import ConfigurationError, ScoringUnavailableError, ValidationError
from schemas import CriteriaSet, Criterion, CriterionScore, ScoreBreakdown
from utils import round_half_up

log = logging.getLogger(__name__)


class ScoringStrategy(Protocol):
    name: str

    def evaluate(self, entity_name: str, criterion: Criterion, attributes: dict) -> float:
        ...


class ManualScoringStrategy:
    """Scores typed in by a person, keyed by criterion name."""
    name = "manual"

    def __init__(self, scores: Dict[str, float]):
        self.scores = scores

    def evaluate(self, entity_name: str, criterion: Criterion, attributes: dict) -> float:
        if criterion.name not in self.scores:
            raise ValidationError(f"No score entered for '{criterion.name}'.",
                                  field=criterion.name, code="missingCriterionScore")
        return float(self.scores[criterion.name])


class RuleBasedScoringStrategy:
    """
    Evaluates per-criterion rule lists against the entity's attributes.
    Each passing rule contributes its points; the criterion score is capped at 100.
    """
    name = "rule_based"

    def __init__(self, rules: Dict[str, List[dict]]):
        self.rules = rules

    def evaluate(self, entity_name: str, criterion: Criterion, attributes: dict) -> float:
        criterion_rules = self.rules.get(criterion.name)
        if criterion_rules is None:
            raise ConfigurationError(f"No scoring rules configured for criterion '{criterion.name}'.")

        earned = 0.0
        for rule in criterion_rules:
            if _rule_passes(rule, attributes.get(rule["field"])):
                earned += rule.get("points", 0)
        return min(earned, 100.0)


def _rule_passes(rule: dict, field_value) -> bool:
    rule_type = rule["type"]
    if rule_type == "not_empty":
        return bool(field_value)
    if field_value is None:
        return False
    if rule_type == "equals":
        return str(field_value) == str(rule["value"])
    if rule_type == "in":
        return field_value in rule["value"]
    try:
        if rule_type == "gte":
            return float(field_value) >= float(rule["value"])
        if rule_type == "lte":
            return float(field_value) <= float(rule["value"])
    except (TypeError, ValueError):
        return False
    raise ConfigurationError(f"Unknown rule type '{rule_type}'.")


class ExternalServiceScoringStrategy:
    """Asks a remote evaluator for each criterion score."""
    name = "external"

    def __init__(self, url: Optional[str] = None, timeout: float = 30.0, client: Optional[httpx.Client] = None):
        self.url = url or config.SCORING_SERVICE_URL
        if not self.url:
            raise ConfigurationError("SCORING_SERVICE_URL is not set.")
        self.timeout = timeout
        self.client = client

    def evaluate(self, entity_name: str, criterion: Criterion, attributes: dict) -> float:
        payload = {
            "entity": entity_name,
            "criterion": criterion.name,
            "description": criterion.description,
            "attributes": attributes,
        }
        try:
            if self.client is not None:
                response = self.client.post(self.url, json=payload)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(self.url, json=payload)
            response.raise_for_status()
            return float(response.json()["score"])
        except httpx.HTTPError as e:
            log.error("Scoring service failed for %s / %s: %s", entity_name, criterion.name, e)
            raise ScoringUnavailableError(f"Scoring service unavailable: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise ScoringUnavailableError(f"Scoring service returned an unusable response: {e}") from e


class RandomRangeScoringStrategy:
    """Placeholder evaluator: a random integer in a fixed range. Seed it for repeatable runs."""
    name = "random"

    def __init__(self, seed: Optional[int] = None, score_range: tuple = config.RANDOM_SCORE_RANGE):
        self._rng = random.Random(seed)
        self.low, self.high = score_range

    def evaluate(self, entity_name: str, criterion: Criterion, attributes: dict) -> float:
        return float(self._rng.randint(self.low, self.high))


STRATEGIES = {
    "manual": ManualScoringStrategy,
    "rule_based": RuleBasedScoringStrategy,
    "external": ExternalServiceScoringStrategy,
    "random": RandomRangeScoringStrategy,
}


def build_strategy(kind: str, **options) -> ScoringStrategy:
    strategy_cls = STRATEGIES.get(kind)
    if strategy_cls is None:
        raise ConfigurationError(f"Unknown scoring strategy '{kind}'.")
    return strategy_cls(**options)


def default_criteria() -> CriteriaSet:
    return CriteriaSet(name="ICP", criteria=[Criterion(**c) for c in config.ICP_CRITERIA])


def validate_criteria(criteria: CriteriaSet) -> None:
    if not criteria.criteria:
        raise ConfigurationError(f"Criteria set '{criteria.name}' has no criteria.")
    negative = [c.name for c in criteria.criteria if c.weight < 0]
    if negative:
        raise ConfigurationError(f"Criteria set '{criteria.name}' has negative weights: {', '.join(negative)}.")
    total = criteria.total_weight
    if not math.isclose(total, 100, rel_tol=0, abs_tol=1e-9):
        raise ConfigurationError(f"Criteria set '{criteria.name}' weights sum to {total:g}, expected 100.")


def recommendation(overall_score: int) -> str:
    for lower_bound, label in config.PRIORITY_BANDS:
        if overall_score >= lower_bound:
            return label
    return config.PRIORITY_BANDS[-1][1]


def score(entity_name: str, criteria: CriteriaSet, strategy: ScoringStrategy,
          attributes: Optional[dict] = None) -> ScoreBreakdown:
    name = (entity_name or "").strip()
    if not name:
        raise ValidationError("Entity name is required.", field="entity_name", code="emptyEntityName")
    validate_criteria(criteria)
    attributes = attributes or {}

    scored: List[CriterionScore] = []
    for criterion in criteria.criteria:
        value = strategy.evaluate(name, criterion, attributes)
        if not 0 <= value <= 100:
            raise ConfigurationError(
                f"Strategy '{strategy.name}' returned {value:g} for '{criterion.name}', outside 0-100."
            )
        scored.append(CriterionScore(criterion=criterion.name, score=value, weight=criterion.weight))

    overall = round_half_up(sum(s.score * s.weight for s in scored) / 100)
    log.info("Scored '%s' against %s with %s strategy: %d", name, criteria.name, strategy.name, overall)
    return ScoreBreakdown(
        entity_name=name,
        overall_score=overall,
        recommendation=recommendation(overall),
        criteria=scored,
    )
