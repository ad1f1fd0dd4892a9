"""
Cubo Estratégia ORM Models

Defines all database tables using SQLAlchemy 2.0 mapped_column style.

Architecture:
    - All models inherit from Base (defined in database.py)
    - Primary keys are string UUIDs generated application-side
    - Relationships defined with back_populates for bidirectional access
    - CASCADE deletes configured so removing a session cleans up children
    - UNIQUE constraints enforce business rules (one session per access code,
      at most one strategy portfolio per session)

Tables:
    - user_sessions: Access-code sessions with usage counters
    - roi_projects: ROI calculations (inputs + derived metrics) per session
    - strategy_sessions: Strategy portfolio configuration per session
    - strategy_projects: Projects scored on impact × complexity per portfolio
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Integer, Float, Text, Boolean, DateTime, ForeignKey, UniqueConstraint, String
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# SESSION TABLE
# ---------------------------------------------------------------------------

class UserSession(Base):
    """
    Access-code session. The code is the only identity the tool knows;
    every project and portfolio hangs off one of these rows.

    Rows are never deleted by the application.
    """
    __tablename__ = "user_sessions"
    __table_args__ = (
        UniqueConstraint("access_code", name="uq_session_access_code"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    access_code: Mapped[str] = mapped_column(Text, nullable=False)
    benchmark_clicks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    project_suggestions_clicks: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    roi_projects: Mapped[list["ROIProject"]] = relationship(
        "ROIProject", back_populates="session", cascade="all, delete-orphan"
    )
    strategy_session: Mapped[Optional["StrategySession"]] = relationship(
        "StrategySession", back_populates="session", uselist=False,
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<UserSession(id={self.id})>"


# ---------------------------------------------------------------------------
# ROI TABLE
# ---------------------------------------------------------------------------

class ROIProject(Base):
    """
    A saved ROI calculation. Inputs and derived metrics are stored together;
    the metrics are computed once at creation and never recomputed lazily.
    """
    __tablename__ = "roi_projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_sessions.id", ondelete="CASCADE"), nullable=False
    )
    project_name: Mapped[str] = mapped_column(Text, nullable=False)
    project_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Inputs
    investment_amount: Mapped[float] = mapped_column(Float, nullable=False)
    timeframe: Mapped[int] = mapped_column(Integer, nullable=False)
    expected_revenue: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    expected_costs: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    estimated_roi: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    risk_level: Mapped[str] = mapped_column(Text, nullable=False)
    calculation_model: Mapped[str] = mapped_column(Text, nullable=False)

    # Derived metrics (populated at creation)
    roi_result: Mapped[float] = mapped_column(Float, nullable=False)
    net_profit: Mapped[float] = mapped_column(Float, nullable=False)
    break_even_months: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    monthly_return: Mapped[float] = mapped_column(Float, nullable=False)
    risk_adjusted_roi: Mapped[float] = mapped_column(Float, nullable=False)
    npv: Mapped[float] = mapped_column(Float, nullable=False)
    irr: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    payback_period: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    session: Mapped["UserSession"] = relationship("UserSession", back_populates="roi_projects")

    def __repr__(self) -> str:
        return f"<ROIProject(id={self.id}, name='{self.project_name}', roi={self.roi_result})>"


# ---------------------------------------------------------------------------
# STRATEGY TABLES
# ---------------------------------------------------------------------------

class StrategySession(Base):
    """
    Strategy portfolio for a session (zero or one per session).
    Holds the company context used to prompt project suggestions.
    """
    __tablename__ = "strategy_sessions"
    __table_args__ = (
        UniqueConstraint("session_id", name="uq_strategy_session_per_user"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_sessions.id", ondelete="CASCADE"), nullable=False
    )
    portfolio_name: Mapped[str] = mapped_column(Text, nullable=False)
    context_history: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    context_initiatives: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    session: Mapped["UserSession"] = relationship(
        "UserSession", back_populates="strategy_session"
    )
    projects: Mapped[list["StrategyProject"]] = relationship(
        "StrategyProject", back_populates="strategy_session",
        cascade="all, delete-orphan", order_by="StrategyProject.created_at",
    )

    def __repr__(self) -> str:
        return f"<StrategySession(id={self.id}, name='{self.portfolio_name}')>"


class StrategyProject(Base):
    """A project placed on the impact × complexity matrix."""
    __tablename__ = "strategy_projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    strategy_session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("strategy_sessions.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    impact: Mapped[int] = mapped_column(Integer, nullable=False)
    complexity: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(Text, nullable=False)
    selected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    expected_return: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    strategy_session: Mapped["StrategySession"] = relationship(
        "StrategySession", back_populates="projects"
    )

    def __repr__(self) -> str:
        return f"<StrategyProject(id={self.id}, name='{self.name}', category={self.category})>"
