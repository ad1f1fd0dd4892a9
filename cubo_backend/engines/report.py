"""
Cubo Estratégia — Report Generator

Serializes the current project list into a self-contained, printable HTML
document. Nothing is persisted: the document is produced on demand and
handed to the browser, whose print dialog does the rest.

Templates live in cubo_backend/templates and are rendered with Jinja2
(autoescaped). An empty project list is refused with a ValidationError
carrying the EMPTY_REPORT code rather than producing an empty document.
"""

from datetime import datetime
from statistics import mean
from typing import Iterable, Optional

from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup

from ..errors import ValidationError
from .chart import CATEGORY_COLORS, plot_points, render_svg

ROI_FIELDS = [
    "project_name", "project_description", "calculation_model", "risk_level",
    "investment_amount", "timeframe", "expected_revenue", "expected_costs",
    "estimated_roi", "roi_result", "net_profit", "monthly_return",
    "break_even_months", "risk_adjusted_roi", "npv", "irr", "payback_period",
]

STRATEGY_FIELDS = [
    "name", "category", "impact", "complexity", "selected",
    "description", "expected_return",
]


def format_money(value) -> str:
    """R$ 1.234,56 (Brazilian grouping)."""
    if value is None:
        return "—"
    text = f"{value:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {text}"


def format_number(value, digits: int = 1, suffix: str = "") -> str:
    if value is None:
        return "—"
    text = f"{value:,.{digits}f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{text}{suffix}"


_env = Environment(
    loader=PackageLoader("cubo_backend", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
_env.filters["money"] = format_money
_env.filters["num"] = format_number


def _get(item, attr: str):
    if isinstance(item, dict):
        return item.get(attr)
    return getattr(item, attr, None)


def _rows(items: Iterable, fields: list[str]) -> list[dict]:
    return [{f: _get(item, f) for f in fields} for item in items]


def _require_items(items: list, what: str) -> None:
    if not items:
        raise ValidationError(
            f"Nothing to report: add at least one {what} first.",
            error_code="EMPTY_REPORT",
        )


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

def roi_summary(rows: list[dict]) -> dict:
    return {
        "count": len(rows),
        "total_investment": sum(r["investment_amount"] or 0 for r in rows),
        "total_net_profit": sum(r["net_profit"] or 0 for r in rows),
        "total_npv": sum(r["npv"] or 0 for r in rows),
        "average_roi": mean(r["roi_result"] or 0 for r in rows),
        "average_risk_adjusted_roi": mean(r["risk_adjusted_roi"] or 0 for r in rows),
    }


def strategy_summary(rows: list[dict]) -> dict:
    by_category = {c: 0 for c in CATEGORY_COLORS}
    for r in rows:
        by_category[r["category"]] = by_category.get(r["category"], 0) + 1
    return {
        "count": len(rows),
        "selected_count": sum(1 for r in rows if r["selected"]),
        "average_impact": mean(r["impact"] for r in rows),
        "average_complexity": mean(r["complexity"] for r in rows),
        "by_category": by_category,
    }


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def render_roi_report(projects: Iterable, generated_at: Optional[datetime] = None) -> str:
    """
    HTML report for ROI projects: one row per project with every stored
    field, followed by totals and averages.

    Raises:
        ValidationError (EMPTY_REPORT): no projects
    """
    rows = _rows(projects, ROI_FIELDS)
    _require_items(rows, "ROI project")
    generated_at = generated_at or datetime.now()
    return _env.get_template("roi_report.html").render(
        title="Relatório de ROI",
        generated_at=generated_at,
        projects=rows,
        summary=roi_summary(rows),
    )


def render_strategy_report(
    portfolio, projects: Iterable, generated_at: Optional[datetime] = None
) -> str:
    """
    HTML report for a strategy portfolio: context, the impact × complexity
    matrix, one card per project and category aggregates.

    Raises:
        ValidationError (EMPTY_REPORT): no projects
    """
    projects = list(projects)
    rows = _rows(projects, STRATEGY_FIELDS)
    _require_items(rows, "strategy project")
    generated_at = generated_at or datetime.now()
    return _env.get_template("strategy_report.html").render(
        title=_get(portfolio, "portfolio_name") or "Portfólio Estratégico",
        generated_at=generated_at,
        context_history=_get(portfolio, "context_history"),
        context_initiatives=_get(portfolio, "context_initiatives"),
        projects=rows,
        summary=strategy_summary(rows),
        colors=CATEGORY_COLORS,
        matrix_svg=Markup(render_svg(plot_points(projects))),
    )
