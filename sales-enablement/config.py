# sales-enablement/config.py

"""
Central configuration for the Sales Enablement engine.
-- Scoring rubric, cost formulas, competency progression and unlock rules --
"""
import os
from dotenv import load_dotenv

load_dotenv()

# --- Deployment Settings ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./sales_enablement.db")
REDIS_URL = os.getenv("REDIS_URL")
ASSET_STORE_URL = os.getenv("ASSET_STORE_URL", "https://api.airtable.com/v0")
ASSET_STORE_API_KEY = os.getenv("ASSET_STORE_API_KEY")
SCORING_SERVICE_URL = os.getenv("SCORING_SERVICE_URL")

# --- Competency Categories & Tools ---
CATEGORIES = ("customerAnalysis", "valueCommunication", "salesExecution")
TOOLS = ("icp", "costCalculator", "businessCase")

# --- ICP Rubric (weights must sum to 100) ---
ICP_CRITERIA = [
    {"name": "Company Size", "weight": 30, "description": "Based on estimated employee count and revenue"},
    {"name": "Technology Stack", "weight": 25, "description": "Alignment with target tech requirements"},
    {"name": "Market Segment", "weight": 25, "description": "Fit within ideal customer segments"},
    {"name": "Growth Stage", "weight": 20, "description": "Company maturity and growth trajectory"},
]

# Lower bound of each band; checked top-down.
PRIORITY_BANDS = [
    (80, "High Priority"),
    (60, "Medium Priority"),
    (0, "Low Priority"),
]

# Placeholder strategy range per criterion, inclusive.
RANDOM_SCORE_RANGE = (60, 100)

# --- Cost of Inaction ---
# Rates are fractions (0.20 == 20%).
COST_DEFAULTS = {
    "target_growth_rate": 0.20,
    "sales_cycle_length": 90,
    "conversion_rate": 0.15,
    "churn_rate": 0.05,
    "horizon_months": 12,
}

COST_CONSTANTS = {
    "inefficiency_rate": 0.15,
    "growth_without_action_factor": 0.3,
    "cycle_baseline_days": 60,
    "cycle_cost_factor": 0.02,
    "timeline_cap_months": 12,
    # Comparison scenarios only; not part of the total.
    "organic_growth_rate": 0.05,
    "churn_reduction_factor": 0.5,
}

COST_CATEGORIES = {
    "missed_growth_revenue": "Missed Growth Revenue",
    "inefficiency_loss": "Inefficiency Loss",
    "churn_impact": "Churn Impact",
    "extended_cycle_cost": "Extended Sales Cycle Cost",
}

# --- Competency Points System ---
AWARD_CONFIG = {
    "icp_rating": {"points": 50, "category": "customerAnalysis", "reason": "ICP fit score calculated"},
    "cost_projection": {"points": 75, "category": "valueCommunication", "reason": "Cost of inaction projected"},
    "business_case": {"points": 100, "category": "salesExecution", "reason": "Business case completed"},
}

POINTS_PER_SCORE_UNIT = 10
CATEGORY_SCORE_CAP = 100

TIERS = {
    "Customer Intelligence Foundation": 0,
    "Value Communication Developing": 1000,
    "Sales Strategy Proficient": 2500,
    "Revenue Development Advanced": 5000,
    "Market Execution Expert": 10000,
    "Revenue Intelligence Master": 20000,
}

ACTION_POINTS = {
    "customer_meeting": 100,
    "prospect_qualification": 75,
    "value_proposition_delivery": 150,
    "roi_presentation": 200,
    "proposal_creation": 250,
    "deal_closure": 500,
    "referral_generation": 300,
    "case_study_development": 400,
}
DEFAULT_ACTION_POINTS = 50

IMPACT_MULTIPLIERS = {
    "low": 0.8,
    "medium": 1.0,
    "high": 1.5,
    "critical": 2.0,
}

# --- Progressive Tool Access ---
UNLOCK_RULES = {
    "icp": {"category": None, "threshold": 0, "prerequisite_analyses": 0,
            "level": "Foundation", "competency": "Customer Intelligence"},
    "costCalculator": {"category": "valueCommunication", "threshold": 70, "prerequisite_analyses": 0,
                       "level": "Developing", "competency": "Value Quantification"},
    "businessCase": {"category": "salesExecution", "threshold": 70, "prerequisite_analyses": 0,
                     "level": "Proficient", "competency": "Strategic Development"},
}

UNLOCK_HINTS = {
    "icp": "Foundation methodology - always available",
    "costCalculator": "Build value communication competency to 70 by quantifying cost of inaction",
    "businessCase": "Build sales execution competency to 70 through deal progression activities",
}

UNLOCK_REASONS = {
    "always": "Foundation methodology - always available",
    "unlocked": "Competency threshold reached",
    "locked": "Additional competency development required",
    "unknown": "unknown tool",
}

# --- Timers ---
TIMER_CONFIG = {
    "session_refresh_seconds": 300,
    "autosave_seconds": 30,
    "session_lifetime_hours": 24,
}
