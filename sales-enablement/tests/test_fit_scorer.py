from __future__ import annotations

import httpx
import pytest

import fit_scorer
from errors import ConfigurationError, ScoringUnavailableError, ValidationError
from schemas import CriteriaSet, Criterion

MANUAL_SCORES = {
    "Company Size": 90,
    "Technology Stack": 80,
    "Market Segment": 70,
    "Growth Stage": 65,
}


def _criteria(*weights: float, name: str = "Test Rubric") -> CriteriaSet:
    return CriteriaSet(
        name=name,
        criteria=[Criterion(name=f"c{i}", weight=w) for i, w in enumerate(weights)],
    )


class TestScore:
    def test_weighted_sum_rounds_half_up(self):
        result = fit_scorer.score("Acme Corp", fit_scorer.default_criteria(),
                                  fit_scorer.ManualScoringStrategy(MANUAL_SCORES))
        # 90*30 + 80*25 + 70*25 + 65*20 = 7750 -> 77.5
        assert result.overall_score == 78
        assert result.recommendation == "Medium Priority"
        assert [c.criterion for c in result.criteria] == list(MANUAL_SCORES)
        assert [c.weight for c in result.criteria] == [30, 25, 25, 20]

    def test_entity_name_is_trimmed(self):
        result = fit_scorer.score("  Acme Corp  ", fit_scorer.default_criteria(),
                                  fit_scorer.ManualScoringStrategy(MANUAL_SCORES))
        assert result.entity_name == "Acme Corp"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_entity_name_rejected(self, name):
        with pytest.raises(ValidationError) as exc:
            fit_scorer.score(name, fit_scorer.default_criteria(), fit_scorer.RandomRangeScoringStrategy(seed=1))
        assert exc.value.field == "entity_name"

    def test_weights_not_summing_to_100_fail_with_set_name(self):
        with pytest.raises(ConfigurationError, match="Broken Rubric"):
            fit_scorer.score("Acme", _criteria(50, 40, name="Broken Rubric"),
                             fit_scorer.RandomRangeScoringStrategy(seed=1))

    def test_weights_are_not_renormalised(self):
        with pytest.raises(ConfigurationError):
            fit_scorer.score("Acme", _criteria(60, 60), fit_scorer.RandomRangeScoringStrategy(seed=1))

    def test_negative_weight_rejected(self):
        with pytest.raises(ConfigurationError, match="negative"):
            fit_scorer.validate_criteria(_criteria(110, -10))

    def test_empty_criteria_rejected(self):
        with pytest.raises(ConfigurationError):
            fit_scorer.validate_criteria(CriteriaSet(name="Empty", criteria=[]))

    def test_out_of_range_strategy_score_rejected(self):
        strategy = fit_scorer.ManualScoringStrategy({"c0": 120, "c1": 50})
        with pytest.raises(ConfigurationError, match="outside 0-100"):
            fit_scorer.score("Acme", _criteria(50, 50), strategy)

    @pytest.mark.parametrize("seed", range(25))
    def test_overall_score_matches_weighted_sum_and_stays_in_range(self, seed):
        criteria = _criteria(10, 20, 30, 40)
        result = fit_scorer.score("Acme", criteria, fit_scorer.RandomRangeScoringStrategy(seed=seed, score_range=(0, 100)))
        expected = sum(c.score * c.weight for c in result.criteria) / 100
        assert abs(result.overall_score - expected) <= 0.5
        assert 0 <= result.overall_score <= 100


class TestRecommendation:
    @pytest.mark.parametrize("value, band", [
        (100, "High Priority"),
        (80, "High Priority"),
        (79, "Medium Priority"),
        (60, "Medium Priority"),
        (59, "Low Priority"),
        (0, "Low Priority"),
    ])
    def test_bands(self, value, band):
        assert fit_scorer.recommendation(value) == band


class TestStrategies:
    def test_manual_missing_criterion(self):
        strategy = fit_scorer.ManualScoringStrategy({"Company Size": 90})
        with pytest.raises(ValidationError) as exc:
            fit_scorer.score("Acme", fit_scorer.default_criteria(), strategy)
        assert exc.value.code == "missingCriterionScore"
        assert exc.value.field == "Technology Stack"

    def test_random_is_repeatable_with_seed(self):
        criteria = fit_scorer.default_criteria()
        first = fit_scorer.score("Acme", criteria, fit_scorer.RandomRangeScoringStrategy(seed=42))
        second = fit_scorer.score("Acme", criteria, fit_scorer.RandomRangeScoringStrategy(seed=42))
        assert first == second
        assert all(60 <= c.score <= 100 for c in first.criteria)

    def test_rule_based(self):
        rules = {
            "Size": [
                {"field": "employees", "type": "gte", "value": 200, "points": 60},
                {"field": "revenue_band", "type": "in", "value": ["10-50M", "50M+"], "points": 40},
            ],
            "Stack": [
                {"field": "crm", "type": "equals", "value": "Salesforce", "points": 70},
                {"field": "website", "type": "not_empty", "points": 50},
            ],
        }
        criteria = CriteriaSet(name="Rules", criteria=[
            Criterion(name="Size", weight=50), Criterion(name="Stack", weight=50),
        ])
        attributes = {"employees": "350", "revenue_band": "1-10M", "crm": "Salesforce", "website": "acme.io"}
        result = fit_scorer.score("Acme", criteria, fit_scorer.RuleBasedScoringStrategy(rules), attributes)
        assert [c.score for c in result.criteria] == [60, 100]
        assert result.overall_score == 80

    def test_rule_based_missing_rules(self):
        strategy = fit_scorer.RuleBasedScoringStrategy({})
        with pytest.raises(ConfigurationError, match="Company Size"):
            fit_scorer.score("Acme", fit_scorer.default_criteria(), strategy)

    def test_external_service(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"score": 85})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        strategy = fit_scorer.ExternalServiceScoringStrategy(url="http://scoring.test/evaluate", client=client)
        result = fit_scorer.score("Acme", fit_scorer.default_criteria(), strategy)
        assert result.overall_score == 85
        assert result.recommendation == "High Priority"
        assert len(seen) == 4

    def test_external_service_failure(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
        strategy = fit_scorer.ExternalServiceScoringStrategy(url="http://scoring.test/evaluate", client=client)
        with pytest.raises(ScoringUnavailableError):
            fit_scorer.score("Acme", fit_scorer.default_criteria(), strategy)

    def test_external_service_requires_url(self, monkeypatch):
        monkeypatch.setattr(fit_scorer.config, "SCORING_SERVICE_URL", None)
        with pytest.raises(ConfigurationError):
            fit_scorer.ExternalServiceScoringStrategy()

    def test_build_strategy(self):
        assert isinstance(fit_scorer.build_strategy("random", seed=3), fit_scorer.RandomRangeScoringStrategy)
        with pytest.raises(ConfigurationError):
            fit_scorer.build_strategy("astrology")
