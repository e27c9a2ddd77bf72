# sales-enablement/schemas.py
"""Domain types shared by the scoring, projection and progression modules."""
import enum
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from utils import utc_now


class CompetencyCategory(str, enum.Enum):
    CUSTOMER_ANALYSIS = "customerAnalysis"
    VALUE_COMMUNICATION = "valueCommunication"
    SALES_EXECUTION = "salesExecution"


class ToolId(str, enum.Enum):
    ICP = "icp"
    COST_CALCULATOR = "costCalculator"
    BUSINESS_CASE = "businessCase"


# --- Fit Scoring ---
class Criterion(BaseModel):
    name: str
    weight: float
    description: str = ""


class CriteriaSet(BaseModel):
    name: str = "ICP"
    criteria: List[Criterion]

    @property
    def total_weight(self) -> float:
        return sum(c.weight for c in self.criteria)


class CriterionScore(BaseModel):
    criterion: str
    score: float
    weight: float


class ScoreBreakdown(BaseModel):
    entity_name: str
    overall_score: int
    recommendation: str
    criteria: List[CriterionScore]


# --- Cost of Inaction ---
class CostAssumptions(BaseModel):
    revenue: Optional[float] = None
    target_growth_rate: Optional[float] = None
    average_deal_size: Optional[float] = None
    sales_cycle_length: Optional[float] = None
    conversion_rate: Optional[float] = None
    churn_rate: Optional[float] = None
    horizon_months: Optional[int] = None


class TimelinePoint(BaseModel):
    month: int
    with_action: float
    without_action: float
    gap: float


class CostCategory(BaseModel):
    key: str
    name: str
    amount: float


class ImpactScenario(BaseModel):
    category: str
    current_state: float
    with_improvement: float
    impact: float


class CostProjection(BaseModel):
    total_cost_of_inaction: float
    monthly_impact: float
    timeline: List[TimelinePoint]
    categories: List[CostCategory]
    scenarios: List[ImpactScenario]
    assumptions: CostAssumptions

    def category_amount(self, key: str) -> float:
        for category in self.categories:
            if category.key == key:
                return category.amount
        raise KeyError(key)


# --- Competency Progression ---
class AwardEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    customer_id: str = ""
    points: int = Field(gt=0)
    category: CompetencyCategory
    reason: str = ""
    # Set for tool-completion awards; real-world actions leave it empty.
    activity: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)


class CompetencyProfile(BaseModel):
    customer_id: str = ""
    customer_analysis: float = 0.0
    value_communication: float = 0.0
    sales_execution: float = 0.0
    total_points: int = 0
    current_tier: str = "Customer Intelligence Foundation"
    analyses_completed: int = 0
    unlocked: Dict[str, bool] = {}

    def category_score(self, category: CompetencyCategory) -> float:
        return getattr(self, CATEGORY_FIELDS[CompetencyCategory(category)])


CATEGORY_FIELDS = {
    CompetencyCategory.CUSTOMER_ANALYSIS: "customer_analysis",
    CompetencyCategory.VALUE_COMMUNICATION: "value_communication",
    CompetencyCategory.SALES_EXECUTION: "sales_execution",
}


class TierProgress(BaseModel):
    current_tier: str
    next_tier: Optional[str] = None
    points_to_next: int = 0
    progress_pct: float = 100.0


# --- Tool Access ---
class UnlockRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    tool: str
    category: Optional[CompetencyCategory] = None
    threshold: float = 0
    prerequisite_analyses: int = 0
    level: str = ""
    competency: str = ""


class UnlockProgress(BaseModel):
    completed: float
    required: float
    next_requirement: str


class UnlockStatus(BaseModel):
    tool: str
    unlocked: bool
    reason: str
    progress: UnlockProgress
    level: str = ""
    competency: str = ""
