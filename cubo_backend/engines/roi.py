"""
Cubo Estratégia — ROI Formula Module

Canonical formula set for every calculator variant (Simple, Enterprise,
Strategic). All functions are pure and never return NaN or Infinity: invalid
inputs raise ValidationError, and undefined results (e.g. break-even for a
project that never recovers its investment) come back as None.

Formulas:
    net_profit        = revenue - costs - investment
    roi               = net_profit / investment × 100
    break_even_months = investment / ((revenue - costs) / months)
    monthly_return    = net_profit / months
    risk_adjusted_roi = roi × RISK_FACTORS[risk]
    npv               = Σ_{i=1..months} ((revenue - costs) / months) / (1 + r)^i - investment
    irr (approx.)     = ((revenue - costs) × risk_factor / investment)^(1 / (months / 12)) - 1
    payback_period    = investment / monthly_return

The IRR figure is a closed-form annualized approximation, not a root-find.
"""

import math
from dataclasses import dataclass, asdict
from typing import Optional

import numpy as np

from ..errors import ValidationError

# Monthly discount rate used by the NPV (1% a month)
MONTHLY_DISCOUNT_RATE = 0.01

# 100 years
MAX_TIMEFRAME_MONTHS = 1200

# Strictly decreasing from Low to High
RISK_FACTORS = {
    "Low": 0.95,
    "Medium": 0.85,
    "High": 0.70,
}

CALCULATION_MODELS = ["Simple", "Enterprise", "Strategic"]

_RISK_ALIASES = {
    "low": "Low", "baixo": "Low",
    "medium": "Medium", "médio": "Medium", "medio": "Medium",
    "high": "High", "alto": "High",
}

_MODEL_ALIASES = {
    "simple": "Simple", "simples": "Simple",
    "enterprise": "Enterprise", "empresarial": "Enterprise",
    "strategic": "Strategic", "estratégico": "Strategic", "estrategico": "Strategic",
}


def normalize_risk_level(value: str) -> str:
    """Map an English or Portuguese risk label to Low / Medium / High."""
    key = (value or "").strip().lower()
    if key not in _RISK_ALIASES:
        raise ValidationError(
            f"Invalid risk level: {value!r}. Must be one of {list(RISK_FACTORS)}",
            context={"field": "risk_level"},
        )
    return _RISK_ALIASES[key]


def normalize_calculation_model(value: str) -> str:
    """Map an English or Portuguese model label to Simple / Enterprise / Strategic."""
    key = (value or "").strip().lower()
    if key not in _MODEL_ALIASES:
        raise ValidationError(
            f"Invalid calculation model: {value!r}. Must be one of {CALCULATION_MODELS}",
            context={"field": "calculation_model"},
        )
    return _MODEL_ALIASES[key]


def risk_factor(risk_level: str) -> float:
    return RISK_FACTORS[normalize_risk_level(risk_level)]


# ---------------------------------------------------------------------------
# Input guards
# ---------------------------------------------------------------------------

def _require_finite(name: str, value: float) -> float:
    if value is None or not math.isfinite(value):
        raise ValidationError(f"{name} must be a finite number", context={"field": name})
    return float(value)


def _require_investment(investment: float) -> float:
    investment = _require_finite("investment_amount", investment)
    if investment <= 0:
        raise ValidationError(
            "Investment must be greater than zero",
            context={"field": "investment_amount", "value": investment},
        )
    return investment


def _require_months(months: float) -> float:
    months = _require_finite("timeframe", months)
    if months <= 0:
        raise ValidationError(
            "Timeframe must be at least one month",
            context={"field": "timeframe", "value": months},
        )
    if months > MAX_TIMEFRAME_MONTHS:
        raise ValidationError(
            f"Timeframe cannot exceed {MAX_TIMEFRAME_MONTHS} months",
            context={"field": "timeframe", "value": months},
        )
    return months


def _finite_or_none(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


def _require_result(name: str, value: float) -> float:
    if not math.isfinite(value):
        raise ValidationError(
            f"Inputs are too large to compute {name}",
            context={"field": name},
        )
    return value


# ---------------------------------------------------------------------------
# Formulas
# ---------------------------------------------------------------------------

def net_profit(investment: float, revenue: float, costs: float) -> float:
    return (
        _require_finite("expected_revenue", revenue)
        - _require_finite("expected_costs", costs)
        - _require_finite("investment_amount", investment)
    )


def roi_percent(investment: float, revenue: float, costs: float) -> float:
    """ROI as a percentage of the investment. Rejects investment <= 0."""
    investment = _require_investment(investment)
    return net_profit(investment, revenue, costs) / investment * 100


def break_even_months(
    investment: float, revenue: float, costs: float, months: float
) -> Optional[float]:
    """
    Months until the operating margin pays back the investment.
    None when the project has no positive monthly margin.
    """
    investment = _require_investment(investment)
    months = _require_months(months)
    monthly_margin = (revenue - costs) / months
    if monthly_margin <= 0:
        return None
    return _finite_or_none(investment / monthly_margin)


def monthly_return(investment: float, revenue: float, costs: float, months: float) -> float:
    months = _require_months(months)
    return net_profit(investment, revenue, costs) / months


def risk_adjusted_roi(roi: float, risk_level: str) -> float:
    return _require_finite("roi", roi) * risk_factor(risk_level)


def npv(
    investment: float,
    revenue: float,
    costs: float,
    months: float,
    monthly_rate: float = MONTHLY_DISCOUNT_RATE,
) -> float:
    """
    Net present value of an even monthly margin over the timeframe,
    discounted at a fixed monthly rate, minus the upfront investment.
    """
    investment = _require_investment(investment)
    months = _require_months(months)
    monthly_margin = (revenue - costs) / months
    periods = np.arange(1, int(math.ceil(months)) + 1)
    discounted = monthly_margin / np.power(1.0 + monthly_rate, periods)
    return float(discounted.sum()) - investment


def irr_approximation(
    investment: float,
    revenue: float,
    costs: float,
    months: float,
    risk_level: str,
) -> Optional[float]:
    """
    Annualized return approximation, as a percentage:
        ((revenue - costs) × risk_factor / investment)^(1 / years) - 1

    None when the risk-adjusted return is not positive (no real root).
    """
    investment = _require_investment(investment)
    months = _require_months(months)
    adjusted_return = (revenue - costs) * risk_factor(risk_level)
    if adjusted_return <= 0:
        return None
    years = months / 12
    try:
        growth = (adjusted_return / investment) ** (1 / years)
    except OverflowError:
        return None
    return _finite_or_none((growth - 1) * 100)


def payback_period(
    investment: float, revenue: float, costs: float, months: float
) -> Optional[float]:
    """Investment divided by monthly return; None when the return is not positive."""
    investment = _require_investment(investment)
    monthly = monthly_return(investment, revenue, costs, months)
    if monthly <= 0:
        return None
    return _finite_or_none(investment / monthly)


# ---------------------------------------------------------------------------
# Bundled calculation
# ---------------------------------------------------------------------------

@dataclass
class ROIInputs:
    investment_amount: float
    timeframe: float
    expected_revenue: float = 0.0
    expected_costs: float = 0.0
    risk_level: str = "Medium"


@dataclass
class ROIMetrics:
    roi_result: float
    net_profit: float
    break_even_months: Optional[float]
    monthly_return: float
    risk_adjusted_roi: float
    npv: float
    irr: Optional[float]
    payback_period: Optional[float]

    def to_dict(self) -> dict:
        return asdict(self)


def calculate_roi(inputs: ROIInputs) -> ROIMetrics:
    """
    Compute every derived metric for one project.

    Raises:
        ValidationError: investment <= 0, timeframe <= 0, negative revenue
            or costs, non-finite values, or an unknown risk level.
    """
    investment = _require_investment(inputs.investment_amount)
    months = _require_months(inputs.timeframe)
    revenue = _require_finite("expected_revenue", inputs.expected_revenue)
    costs = _require_finite("expected_costs", inputs.expected_costs)
    if revenue < 0:
        raise ValidationError("Expected revenue cannot be negative",
                              context={"field": "expected_revenue"})
    if costs < 0:
        raise ValidationError("Expected costs cannot be negative",
                              context={"field": "expected_costs"})
    risk = normalize_risk_level(inputs.risk_level)

    roi = _require_result("roi_result", roi_percent(investment, revenue, costs))
    return ROIMetrics(
        roi_result=roi,
        net_profit=_require_result("net_profit", net_profit(investment, revenue, costs)),
        break_even_months=break_even_months(investment, revenue, costs, months),
        monthly_return=monthly_return(investment, revenue, costs, months),
        risk_adjusted_roi=risk_adjusted_roi(roi, risk),
        npv=_require_result("npv", npv(investment, revenue, costs, months)),
        irr=irr_approximation(investment, revenue, costs, months, risk),
        payback_period=payback_period(investment, revenue, costs, months),
    )
