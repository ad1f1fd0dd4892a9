"""Tests for the ROI formulas and the portfolio matrix transform."""

import math

import pytest
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from cubo_backend.engines.roi import (
    MAX_TIMEFRAME_MONTHS, ROIInputs, calculate_roi, break_even_months, irr_approximation,
    monthly_return, net_profit, normalize_calculation_model, normalize_risk_level, npv,
    payback_period, risk_adjusted_roi, risk_factor, roi_percent,
)
from cubo_backend.engines.chart import (
    CATEGORY_COLORS, axis_ticks, chart_payload, plot_points, render_svg,
)
from cubo_backend.errors import ValidationError


class TestRiskFactors:
    def test_factors(self):
        assert risk_factor("Low") == 0.95
        assert risk_factor("Medium") == 0.85
        assert risk_factor("High") == 0.70

    def test_portuguese_labels(self):
        assert normalize_risk_level("Baixo") == "Low"
        assert normalize_risk_level("Médio") == "Medium"
        assert normalize_risk_level("alto") == "High"

    def test_unknown_risk_rejected(self):
        with pytest.raises(ValidationError):
            normalize_risk_level("Extreme")

    def test_model_labels(self):
        assert normalize_calculation_model("Empresarial") == "Enterprise"
        assert normalize_calculation_model("strategic") == "Strategic"
        with pytest.raises(ValidationError):
            normalize_calculation_model("Quantum")


class TestFormulas:
    def test_net_profit(self):
        assert net_profit(10000, 20000, 5000) == 5000

    def test_roi_percent(self):
        assert abs(roi_percent(10000, 20000, 5000) - 50.0) < 1e-9

    def test_roi_rejects_zero_investment(self):
        with pytest.raises(ValidationError):
            roi_percent(0, 20000, 5000)

    def test_roi_rejects_negative_investment(self):
        with pytest.raises(ValidationError):
            roi_percent(-1, 20000, 5000)

    def test_break_even(self):
        # monthly margin 15000 / 12 = 1250 → 10000 / 1250 = 8 months
        assert abs(break_even_months(10000, 20000, 5000, 12) - 8.0) < 1e-9

    def test_break_even_without_margin(self):
        assert break_even_months(10000, 5000, 5000, 12) is None
        assert break_even_months(10000, 1000, 5000, 12) is None

    def test_monthly_return(self):
        assert abs(monthly_return(10000, 20000, 5000, 12) - 5000 / 12) < 1e-9

    def test_zero_months_rejected(self):
        with pytest.raises(ValidationError):
            monthly_return(10000, 20000, 5000, 0)

    def test_risk_adjusted(self):
        assert abs(risk_adjusted_roi(50.0, "High") - 35.0) < 1e-9

    def test_npv(self):
        margin = 15000 / 12
        expected = sum(margin / 1.01 ** i for i in range(1, 13)) - 10000
        assert abs(npv(10000, 20000, 5000, 12) - expected) < 1e-6

    def test_npv_no_margin(self):
        assert abs(npv(10000, 5000, 5000, 12) + 10000) < 1e-9

    def test_irr_approximation(self):
        # 12 months → one year: 15000 × 0.85 / 10000 - 1 = 27.5 %
        assert abs(irr_approximation(10000, 20000, 5000, 12, "Medium") - 27.5) < 1e-9

    def test_irr_none_without_return(self):
        assert irr_approximation(10000, 5000, 5000, 12, "Medium") is None

    def test_payback(self):
        assert abs(payback_period(10000, 20000, 5000, 12) - 24.0) < 1e-9

    def test_payback_none_when_not_profitable(self):
        assert payback_period(10000, 15000, 5000, 12) is None

    def test_non_finite_rejected(self):
        with pytest.raises(ValidationError):
            net_profit(10000, float("nan"), 0)
        with pytest.raises(ValidationError):
            roi_percent(float("inf"), 0, 0)


class TestCalculateROI:
    def test_break_even_scenario(self):
        m = calculate_roi(ROIInputs(10000, 12, 15000, 5000, "Médio"))
        assert m.net_profit == 0
        assert m.roi_result == 0
        assert m.monthly_return == 0
        assert m.risk_adjusted_roi == 0
        assert m.payback_period is None
        assert abs(m.break_even_months - 12.0) < 1e-9

    def test_profitable_scenario(self):
        m = calculate_roi(ROIInputs(10000, 12, 20000, 5000, "Médio"))
        assert m.net_profit == 5000
        assert abs(m.roi_result - 50.0) < 1e-9
        assert abs(m.monthly_return - 416.6667) < 1e-3
        assert abs(m.risk_adjusted_roi - 42.5) < 1e-9

    def test_no_value_is_nan(self):
        m = calculate_roi(ROIInputs(1, 1, 0, 1e9, "High"))
        for value in m.to_dict().values():
            assert value is None or math.isfinite(value)

    def test_negative_revenue_rejected(self):
        with pytest.raises(ValidationError):
            calculate_roi(ROIInputs(10000, 12, -1, 0))

    def test_negative_costs_rejected(self):
        with pytest.raises(ValidationError):
            calculate_roi(ROIInputs(10000, 12, 0, -1))

    def test_irr_overflow_is_absent(self):
        m = calculate_roi(ROIInputs(1, 1, 1e26, 0, "Low"))
        assert m.irr is None
        assert math.isfinite(m.roi_result)
        assert math.isfinite(m.npv)

    def test_timeframe_upper_bound(self):
        assert math.isfinite(npv(1000, 5000, 0, MAX_TIMEFRAME_MONTHS))
        with pytest.raises(ValidationError):
            npv(1000, 5000, 0, 10 ** 19)
        with pytest.raises(ValidationError):
            calculate_roi(ROIInputs(1000, MAX_TIMEFRAME_MONTHS + 1, 5000, 0))

    def test_results_too_large_rejected(self):
        with pytest.raises(ValidationError):
            calculate_roi(ROIInputs(1e-300, 12, 1e300, 0))

    def test_risk_monotonicity(self):
        """Higher risk never yields a higher risk-adjusted ROI for a profitable project."""
        values = [
            calculate_roi(ROIInputs(10000, 12, 20000, 5000, r)).risk_adjusted_roi
            for r in ("Low", "Medium", "High")
        ]
        assert values[0] > values[1] > values[2]

    def test_more_revenue_more_roi(self):
        low = calculate_roi(ROIInputs(10000, 12, 15000, 5000)).roi_result
        high = calculate_roi(ROIInputs(10000, 12, 25000, 5000)).roi_result
        assert high > low


class TestChart:
    def _project(self, impact, complexity, category="Core", **kw):
        return {"name": "P", "impact": impact, "complexity": complexity,
                "category": category, "selected": True, **kw}

    def test_corners(self):
        low, high = plot_points([self._project(1, 1), self._project(10, 10)])
        assert (low.x, low.y) == (10.0, 10.0)
        assert (high.x, high.y) == (90.0, 90.0)

    def test_svg_y_flipped(self):
        (p,) = plot_points([self._project(10, 1)])
        assert p.y == 90.0
        assert p.svg_y == 10.0

    def test_midpoint(self):
        (p,) = plot_points([self._project(5.5, 5.5)])
        assert abs(p.x - 50.0) < 1e-9
        assert abs(p.y - 50.0) < 1e-9

    def test_out_of_range_clamped(self):
        (p,) = plot_points([self._project(15, -3)])
        assert p.y == 90.0
        assert p.x == 10.0

    def test_points_stay_inside_plot_area(self):
        projects = [self._project(i, 11 - i) for i in range(0, 13)]
        for p in plot_points(projects):
            assert 10.0 <= p.x <= 90.0
            assert 10.0 <= p.y <= 90.0

    def test_category_colors(self):
        points = plot_points([self._project(5, 5, c) for c in CATEGORY_COLORS])
        assert [p.color for p in points] == ["#3b82f6", "#8b5cf6", "#ec4899"]

    def test_unknown_category(self):
        with pytest.raises(ValidationError):
            plot_points([self._project(5, 5, "Experimental")])

    def test_empty(self):
        assert plot_points([]) == []
        payload = chart_payload([])
        assert payload["points"] == []
        assert len(payload["ticks"]) == 10

    def test_ticks_match_scores(self):
        ticks = axis_ticks()
        assert ticks[0] == {"value": 1, "position": 10.0}
        assert ticks[-1] == {"value": 10, "position": 90.0}

    def test_svg_escapes_names(self):
        svg = render_svg(plot_points([self._project(5, 5, name="<script>")]))
        assert "<script>" not in svg
        assert "&lt;script&gt;" in svg
