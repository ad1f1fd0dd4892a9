"""Reusable UI components for the Cubo Estratégia frontend."""

import streamlit as st
import pandas as pd
import plotly.graph_objects as go

from cubo_frontend.api_client import APIError, BackendError, NoActiveSession, ValidationError


def format_brl(value) -> str:
    """R$ 1.234,56"""
    if value is None:
        return "—"
    text = f"{value:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {text}"


def format_pct(value, digits: int = 1) -> str:
    if value is None:
        return "—"
    return f"{value:,.{digits}f}%".replace(".", ",")


def format_months(value) -> str:
    if value is None:
        return "Não se paga"
    return f"{value:,.1f} meses".replace(".", ",")


def metric_card(label: str, value: str, delta: str = None, help: str = None):
    """Display a metric in a styled card."""
    st.metric(label=label, value=value, delta=delta, help=help)


def roi_metric_cards(metrics: dict):
    """The eight ROI metrics, two rows of four."""
    row1 = st.columns(4)
    with row1[0]:
        metric_card("ROI", format_pct(metrics["roi_result"]))
    with row1[1]:
        metric_card("Lucro líquido", format_brl(metrics["net_profit"]))
    with row1[2]:
        metric_card("Retorno mensal", format_brl(metrics["monthly_return"]))
    with row1[3]:
        metric_card("Break-even", format_months(metrics["break_even_months"]))

    row2 = st.columns(4)
    with row2[0]:
        metric_card("ROI ajustado ao risco", format_pct(metrics["risk_adjusted_roi"]))
    with row2[1]:
        metric_card("VPL (1% a.m.)", format_brl(metrics["npv"]))
    with row2[2]:
        metric_card("TIR (aprox.)", format_pct(metrics["irr"]),
                    help="Aproximação anualizada, não é a TIR exata.")
    with row2[3]:
        metric_card("Payback", format_months(metrics["payback_period"]))


def strategy_matrix_chart(payload: dict) -> go.Figure:
    """Impact × complexity scatter from the /strategy/chart payload."""
    bounds = payload["bounds"]
    fig = go.Figure()

    # One trace per category so the legend matches the closed palette
    for entry in payload["legend"]:
        pts = [p for p in payload["points"] if p["category"] == entry["category"]]
        fig.add_trace(go.Scatter(
            x=[p["x"] for p in pts],
            y=[p["y"] for p in pts],
            mode="markers+text",
            name=entry["category"],
            text=[p["name"] for p in pts],
            textposition="top center",
            marker=dict(
                color=entry["color"], size=16,
                opacity=[1.0 if p["selected"] else 0.35 for p in pts],
                line=dict(color="white", width=2),
            ),
            customdata=[[p["impact"], p["complexity"]] for p in pts],
            hovertemplate=(
                "%{text}<br>Impacto: %{customdata[0]}<br>"
                "Complexidade: %{customdata[1]}<extra></extra>"
            ),
        ))

    mid = (bounds["min"] + bounds["max"]) / 2
    for x0, x1, y0, y1 in [
        (mid, mid, bounds["min"], bounds["max"]),
        (bounds["min"], bounds["max"], mid, mid),
    ]:
        fig.add_shape(type="line", x0=x0, x1=x1, y0=y0, y1=y1,
                      line=dict(color="#cbd5e1", dash="dash"))
    for q in payload["quadrants"]:
        fig.add_annotation(x=q["x"], y=q["y"], text=q["label"], showarrow=False,
                           font=dict(size=10, color="#94a3b8"))

    tickvals = [t["position"] for t in payload["ticks"]]
    ticktext = [str(t["value"]) for t in payload["ticks"]]
    fig.update_layout(
        xaxis=dict(title=payload["x_label"], range=[0, bounds["canvas"]],
                   tickvals=tickvals, ticktext=ticktext, zeroline=False),
        yaxis=dict(title=payload["y_label"], range=[0, bounds["canvas"]],
                   tickvals=tickvals, ticktext=ticktext, zeroline=False),
        template="plotly_white",
        height=560,
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
    )
    return fig


def roi_comparison_chart(projects: list[dict]) -> go.Figure:
    """ROI vs risk-adjusted ROI per saved project."""
    if not projects:
        return go.Figure()

    df = pd.DataFrame(projects)
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=df["project_name"], y=df["roi_result"],
        name="ROI", marker_color="#3b82f6",
        hovertemplate="%{x}<br>ROI: %{y:.1f}%<extra></extra>",
    ))
    fig.add_trace(go.Bar(
        x=df["project_name"], y=df["risk_adjusted_roi"],
        name="ROI ajustado ao risco", marker_color="#8b5cf6",
        hovertemplate="%{x}<br>Ajustado: %{y:.1f}%<extra></extra>",
    ))
    fig.update_layout(
        title="Comparativo de ROI",
        yaxis_title="%",
        barmode="group",
        template="plotly_white",
        height=400,
    )
    return fig


def show_api_error(error: APIError):
    """
    Show an error where it belongs: validation inline, backend failures as a
    toast that keeps the page (and its form state) in place.
    """
    if isinstance(error, ValidationError):
        st.error(error.message)
    elif isinstance(error, NoActiveSession):
        st.warning("Sessão não encontrada. Informe seu código de acesso novamente.")
    elif isinstance(error, BackendError):
        st.toast(f"⚠️ {error.message}")
        st.warning("Seus dados continuam na tela. Tente salvar novamente.")
    else:
        st.error(error.message)
