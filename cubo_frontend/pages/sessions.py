"""Tab 3: Sessions — admin overview of access codes and usage."""

import streamlit as st
import pandas as pd

from cubo_frontend.api_client import APIError
from cubo_frontend.components import metric_card, show_api_error
from cubo_frontend.state import get_api


def render():
    st.header("Sessões")

    search = st.text_input("Buscar por código", key="sessions_search")
    try:
        data = get_api().list_sessions(search=search or None)
    except APIError as e:
        show_api_error(e)
        st.info("Verifique se o backend está rodando: "
                "`uvicorn cubo_backend.main:app --port 8050`")
        return

    totals = data["totals"]
    cols = st.columns(5)
    with cols[0]:
        metric_card("Usuários", str(totals["total_users"]))
    with cols[1]:
        metric_card("Projetos ROI", str(totals["total_roi_projects"]))
    with cols[2]:
        metric_card("Portfólios", str(totals["total_strategy_sessions"]))
    with cols[3]:
        metric_card("Benchmarks", str(totals["total_benchmark_clicks"]))
    with cols[4]:
        metric_card("Sugestões", str(totals["total_project_suggestions_clicks"]))

    if not data["sessions"]:
        st.info("Nenhuma sessão encontrada.")
        return

    df = pd.DataFrame([{
        "Código": s["access_code"],
        "Projetos ROI": s["roi_projects_count"],
        "Portfólios": s["strategy_sessions_count"],
        "Benchmarks": s["benchmark_clicks"],
        "Sugestões": s["project_suggestions_clicks"],
        "Criada em": s["created_at"],
        "Atualizada em": s["updated_at"],
    } for s in data["sessions"]])
    st.dataframe(df, use_container_width=True, hide_index=True)
