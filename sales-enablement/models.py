# models.py
import enum
from sqlalchemy import (
    Column,
    Integer,
    Float,
    String,
    DateTime,
    Enum,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

class CompetencyCategoryType(enum.Enum):
    customerAnalysis = "customerAnalysis"
    valueCommunication = "valueCommunication"
    salesExecution = "salesExecution"

class PointsLedger(Base):
    """Durable award event log; replayed in id order to rebuild a profile."""
    __tablename__ = 'points_ledger'
    __table_args__ = (UniqueConstraint('customer_id', 'event_id', name='uq_points_ledger_event'),)

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(String, nullable=False, index=True)
    customer_id = Column(String, nullable=False, index=True)
    category = Column(Enum(CompetencyCategoryType), nullable=False)
    points = Column(Integer, nullable=False)
    reason = Column(String, nullable=True)
    activity = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class CompetencyBaseline(Base):
    __tablename__ = 'competency_baselines'

    customer_id = Column(String, primary_key=True)
    customer_analysis = Column(Float, nullable=False, default=0)
    value_communication = Column(Float, nullable=False, default=0)
    sales_execution = Column(Float, nullable=False, default=0)
    seeded_at = Column(DateTime(timezone=True), server_default=func.now())

class CompetencySnapshot(Base):
    __tablename__ = 'competency_snapshots'

    customer_id = Column(String, primary_key=True)
    customer_analysis = Column(Float, nullable=False, default=0)
    value_communication = Column(Float, nullable=False, default=0)
    sales_execution = Column(Float, nullable=False, default=0)
    total_points = Column(Integer, nullable=False, default=0)
    current_tier = Column(String, nullable=False)
    unlocked = Column(JSON, nullable=False, default=dict)
    events_applied = Column(Integer, nullable=False, default=0)
    saved_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

class TierAchievement(Base):
    __tablename__ = 'tier_achievements'
    __table_args__ = (UniqueConstraint('customer_id', 'tier', name='uq_tier_achievement'),)

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(String, nullable=False, index=True)
    tier = Column(String, nullable=False)
    achieved_at = Column(DateTime(timezone=True), server_default=func.now())

class UserProgress(Base):
    __tablename__ = 'user_progress'
    __table_args__ = (UniqueConstraint('customer_id', 'tool_key', name='uq_user_progress'),)

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(String, nullable=False, index=True)
    tool_key = Column(String, nullable=False)
    state = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

class SessionActivity(Base):
    __tablename__ = 'session_activity'

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(String, nullable=False, index=True)
    session_key = Column(String, nullable=False, unique=True)
    last_seen_at = Column(DateTime(timezone=True), nullable=False)
    refreshed_at = Column(DateTime(timezone=True), nullable=True)
