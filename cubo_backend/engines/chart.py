"""
Cubo Estratégia — Portfolio Matrix Transform

Maps strategy projects onto the impact × complexity matrix.

Canvas:
    A 0–100 square with a 10-unit margin on every side, so the plotting
    area spans [10, 90] on both axes.
        x = 10 + (complexity - 1) / 9 × 80
        y = 10 + (impact - 1) / 9 × 80          (y grows upwards)
        svg_y = 100 - y                          (SVG origin is top-left)

Scores outside [1, 10] are clamped before scaling so no point is ever drawn
off-canvas. Categories form a closed palette.
"""

from dataclasses import dataclass, asdict
from typing import Iterable

import numpy as np
from markupsafe import escape

from ..errors import ValidationError

SCORE_MIN = 1
SCORE_MAX = 10

CATEGORY_COLORS = {
    "Core": "#3b82f6",
    "Adjacente": "#8b5cf6",
    "Transformacional": "#ec4899",
}

QUADRANT_LABELS = [
    {"x": 75, "y": 75, "label": "Alto Impacto / Alta Complexidade"},
    {"x": 25, "y": 75, "label": "Alto Impacto / Baixa Complexidade"},
    {"x": 25, "y": 20, "label": "Baixo Impacto / Baixa Complexidade"},
    {"x": 75, "y": 20, "label": "Baixo Impacto / Alta Complexidade"},
]


@dataclass(frozen=True)
class PlotBounds:
    """Plotting area inside the 0–100 canvas."""
    min: float = 10.0
    max: float = 90.0
    canvas: float = 100.0

    @property
    def span(self) -> float:
        return self.max - self.min


@dataclass
class PlotPoint:
    name: str
    category: str
    color: str
    impact: float
    complexity: float
    selected: bool
    x: float
    y: float
    svg_y: float

    def to_dict(self) -> dict:
        return asdict(self)


def _get(project, attr: str, default=None):
    # Support both dict and ORM objects
    if isinstance(project, dict):
        return project.get(attr, default)
    return getattr(project, attr, default)


def category_color(category: str) -> str:
    if category not in CATEGORY_COLORS:
        raise ValidationError(
            f"Invalid category: {category!r}. Must be one of {list(CATEGORY_COLORS)}",
            context={"field": "category"},
        )
    return CATEGORY_COLORS[category]


def scale_scores(scores, bounds: PlotBounds = PlotBounds()) -> np.ndarray:
    """Clamp scores to [1, 10] and scale them linearly into the plot area."""
    clamped = np.clip(np.asarray(scores, dtype=float), SCORE_MIN, SCORE_MAX)
    return bounds.min + (clamped - SCORE_MIN) / (SCORE_MAX - SCORE_MIN) * bounds.span


def plot_points(projects: Iterable, bounds: PlotBounds = PlotBounds()) -> list[PlotPoint]:
    """
    Transform projects ({name, impact, complexity, category, selected}) into
    plot coordinates. An empty input yields an empty list.
    """
    projects = list(projects)
    if not projects:
        return []

    xs = scale_scores([_get(p, "complexity") for p in projects], bounds)
    ys = scale_scores([_get(p, "impact") for p in projects], bounds)

    points = []
    for project, x, y in zip(projects, xs, ys):
        category = _get(project, "category")
        points.append(PlotPoint(
            name=_get(project, "name", ""),
            category=category,
            color=category_color(category),
            impact=float(_get(project, "impact")),
            complexity=float(_get(project, "complexity")),
            selected=bool(_get(project, "selected", True)),
            x=float(x),
            y=float(y),
            svg_y=float(bounds.canvas - y),
        ))
    return points


def axis_ticks(bounds: PlotBounds = PlotBounds()) -> list[dict]:
    """Tick positions for scores 1..10; identical on both axes."""
    positions = scale_scores(range(SCORE_MIN, SCORE_MAX + 1), bounds)
    return [
        {"value": value, "position": float(pos)}
        for value, pos in zip(range(SCORE_MIN, SCORE_MAX + 1), positions)
    ]


def chart_payload(projects: Iterable, bounds: PlotBounds = PlotBounds()) -> dict:
    """Everything a renderer needs: points, axes, quadrants and legend."""
    return {
        "bounds": {"min": bounds.min, "max": bounds.max, "canvas": bounds.canvas},
        "points": [p.to_dict() for p in plot_points(projects, bounds)],
        "ticks": axis_ticks(bounds),
        "quadrants": QUADRANT_LABELS,
        "legend": [{"category": c, "color": col} for c, col in CATEGORY_COLORS.items()],
        "x_label": "Complexidade",
        "y_label": "Impacto",
    }


def render_svg(points: list[PlotPoint], bounds: PlotBounds = PlotBounds()) -> str:
    """Draw the matrix as a standalone SVG fragment (used in printed reports)."""
    lo, hi, canvas = bounds.min, bounds.max, bounds.canvas
    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {canvas:g} {canvas:g}" '
        'width="420" height="420" font-family="sans-serif">',
        f'<line x1="{lo:g}" y1="{canvas - lo:g}" x2="{hi:g}" y2="{canvas - lo:g}" '
        'stroke="#374151" stroke-width="0.6"/>',
        f'<line x1="{lo:g}" y1="{canvas - lo:g}" x2="{lo:g}" y2="{canvas - hi:g}" '
        'stroke="#374151" stroke-width="0.6"/>',
    ]
    for tick in axis_ticks(bounds):
        pos = tick["position"]
        parts.append(
            f'<text x="{pos:.2f}" y="{canvas - lo + 5:g}" font-size="3" '
            f'text-anchor="middle" fill="#6b7280">{tick["value"]}</text>'
        )
        parts.append(
            f'<text x="{lo - 3:g}" y="{canvas - pos + 1:.2f}" font-size="3" '
            f'text-anchor="middle" fill="#6b7280">{tick["value"]}</text>'
        )
    parts.append(
        f'<text x="{canvas / 2:g}" y="{canvas - 1:g}" font-size="4" text-anchor="middle" '
        'fill="#374151">Complexidade</text>'
    )
    parts.append(
        f'<text x="3" y="{canvas / 2:g}" font-size="4" text-anchor="middle" fill="#374151" '
        f'transform="rotate(-90 3 {canvas / 2:g})">Impacto</text>'
    )
    for point in points:
        opacity = "1" if point.selected else "0.4"
        parts.append(
            f'<circle cx="{point.x:.2f}" cy="{point.svg_y:.2f}" r="2.2" '
            f'fill="{point.color}" fill-opacity="{opacity}" stroke="#ffffff" stroke-width="0.4">'
            f'<title>{escape(point.name or "")}</title></circle>'
        )
    parts.append("</svg>")
    return "".join(parts)
