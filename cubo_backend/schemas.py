"""
Cubo Estratégia Pydantic Schemas

Defines request/response models for the FastAPI REST API.
Pydantic validates all incoming data and serializes outgoing responses.

Naming convention:
    - XxxCreate: request body for creating Xxx
    - XxxUpdate: request body for updating Xxx
    - XxxResponse: response body for Xxx
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator

from .engines.roi import MAX_TIMEFRAME_MONTHS, normalize_risk_level, normalize_calculation_model
from .engines.chart import CATEGORY_COLORS
from .errors import ValidationError as CuboValidationError


def _to_value_error(fn, value):
    # Surface domain validation as pydantic field errors (422)
    try:
        return fn(value)
    except CuboValidationError as e:
        raise ValueError(e.message)


# ---------------------------------------------------------------------------
# SESSION SCHEMAS
# ---------------------------------------------------------------------------

class SessionCreate(BaseModel):
    """Request body for find-or-create by access code."""
    access_code: str = Field(..., min_length=1, max_length=100)

    @field_validator("access_code")
    @classmethod
    def strip_code(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Access code is required")
        return v


class SessionResponse(BaseModel):
    id: str
    access_code: str
    benchmark_clicks: int = 0
    project_suggestions_clicks: int = 0
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SessionLoadResponse(SessionResponse):
    """Find-or-create result: created is False when an existing row was loaded."""
    created: bool


class SessionOverview(SessionResponse):
    roi_projects_count: int = 0
    strategy_sessions_count: int = 0


class SessionTotals(BaseModel):
    total_users: int
    total_benchmark_clicks: int
    total_project_suggestions_clicks: int
    total_roi_projects: int
    total_strategy_sessions: int


class SessionListResponse(BaseModel):
    sessions: list[SessionOverview]
    totals: SessionTotals


# ---------------------------------------------------------------------------
# ROI SCHEMAS
# ---------------------------------------------------------------------------

class ROICalculationRequest(BaseModel):
    """Inputs shared by every calculator variant."""
    investment_amount: float
    timeframe: int = Field(12, ge=1, le=MAX_TIMEFRAME_MONTHS, description="Months")
    expected_revenue: float = 0.0
    expected_costs: float = 0.0
    risk_level: str = "Medium"

    @field_validator("risk_level")
    @classmethod
    def validate_risk(cls, v):
        return _to_value_error(normalize_risk_level, v)


class ROIMetricsResponse(BaseModel):
    roi_result: float
    net_profit: float
    break_even_months: Optional[float] = None
    monthly_return: float
    risk_adjusted_roi: float
    npv: float
    irr: Optional[float] = None
    payback_period: Optional[float] = None


class ROIProjectCreate(ROICalculationRequest):
    """Request body for saving an ROI project."""
    project_name: str = Field(..., max_length=200)
    project_description: Optional[str] = None
    estimated_roi: Optional[float] = None
    calculation_model: str = "Simple"

    @field_validator("project_name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Project name is required")
        return v

    @field_validator("calculation_model")
    @classmethod
    def validate_model(cls, v):
        return _to_value_error(normalize_calculation_model, v)


class ROIProjectResponse(ROIMetricsResponse):
    id: str
    session_id: str
    project_name: str
    project_description: Optional[str] = None
    investment_amount: float
    timeframe: int
    expected_revenue: float
    expected_costs: float
    estimated_roi: Optional[float] = None
    risk_level: str
    calculation_model: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# STRATEGY SCHEMAS
# ---------------------------------------------------------------------------

class StrategyProjectCreate(BaseModel):
    """A project on the impact × complexity matrix."""
    name: str = Field(..., max_length=200)
    impact: int = Field(..., ge=1, le=10)
    complexity: int = Field(..., ge=1, le=10)
    category: str = "Core"
    selected: bool = True
    description: Optional[str] = None
    expected_return: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Project name is required")
        return v

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        if v not in CATEGORY_COLORS:
            raise ValueError(f"Invalid category: {v}. Must be one of {list(CATEGORY_COLORS)}")
        return v


class StrategyProjectUpdate(BaseModel):
    selected: Optional[bool] = None


class StrategyProjectResponse(BaseModel):
    id: str
    strategy_session_id: str
    name: str
    impact: int
    complexity: int
    category: str
    selected: bool
    description: Optional[str] = None
    expected_return: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class StrategyPortfolioSave(BaseModel):
    """
    Save the portfolio configuration. When projects is provided (even empty),
    the stored children are replaced in a single transaction; when omitted
    they are left untouched.
    """
    portfolio_name: str = "Novo Portfólio"
    context_history: Optional[str] = None
    context_initiatives: Optional[str] = None
    projects: Optional[list[StrategyProjectCreate]] = None

    @field_validator("portfolio_name")
    @classmethod
    def default_name(cls, v):
        return v.strip() or "Novo Portfólio"


class StrategyPortfolioResponse(BaseModel):
    id: str
    session_id: str
    portfolio_name: str
    context_history: Optional[str] = None
    context_initiatives: Optional[str] = None
    projects: list[StrategyProjectResponse] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class StrategyProjectsAdd(BaseModel):
    projects: list[StrategyProjectCreate] = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# TEXT-GENERATION PROXY SCHEMAS
# ---------------------------------------------------------------------------

class AIRequest(BaseModel):
    description: str
    type: Literal["benchmark", "suggestions"] = "benchmark"
    session_id: Optional[str] = None

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Description is required")
        return v


class SuggestedProject(BaseModel):
    """Suggestion as returned to the client (camelCase expectedReturn preserved)."""
    name: str
    category: str = "Core"
    impact: int = Field(5, ge=1, le=10)
    complexity: int = Field(5, ge=1, le=10)
    description: str = ""
    expectedReturn: str = ""

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        if v not in CATEGORY_COLORS:
            raise ValueError(f"Invalid category: {v}")
        return v

    @field_validator("impact", "complexity", mode="before")
    @classmethod
    def clamp_score(cls, v):
        # Generated scores occasionally fall outside the scale
        try:
            return min(10, max(1, int(round(float(v)))))
        except (TypeError, ValueError):
            raise ValueError(f"Invalid score: {v!r}")


class BenchmarkResponse(BaseModel):
    text: str


class SuggestionsResponse(BaseModel):
    projects: list[SuggestedProject]
