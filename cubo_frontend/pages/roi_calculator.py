"""Tab 1: ROI Calculator — live metrics, saved projects, benchmarks and reports."""

import streamlit as st
import pandas as pd

from cubo_frontend.api_client import APIError, NoActiveSession, ProxyError
from cubo_frontend.components import (
    format_brl, format_pct, roi_comparison_chart, roi_metric_cards, show_api_error,
)
from cubo_frontend.state import get_api, get_handle

RISK_OPTIONS = {"Baixo": "Low", "Médio": "Medium", "Alto": "High"}
MODEL_OPTIONS = {"Simples": "Simple", "Empresarial": "Enterprise", "Estratégico": "Strategic"}


def _form_inputs() -> dict:
    col1, col2 = st.columns(2)
    with col1:
        name = st.text_input("Nome do projeto", key="roi_name")
        model = st.selectbox("Modelo de cálculo", list(MODEL_OPTIONS), key="roi_model")
        investment = st.number_input("Investimento (R$)", min_value=0.0, step=1000.0,
                                     key="roi_investment")
        revenue = st.number_input("Receita esperada (R$)", min_value=0.0, step=1000.0,
                                  key="roi_revenue")
    with col2:
        risk = st.selectbox("Nível de risco", list(RISK_OPTIONS), index=1, key="roi_risk")
        timeframe = st.number_input("Prazo (meses)", min_value=1, max_value=240, value=12,
                                    key="roi_timeframe")
        costs = st.number_input("Custos esperados (R$)", min_value=0.0, step=1000.0,
                                key="roi_costs")
        estimated = st.number_input("ROI estimado (%)", value=0.0, key="roi_estimated")
    description = st.text_area("Descrição", key="roi_description")

    return {
        "project_name": name,
        "project_description": description or None,
        "calculation_model": MODEL_OPTIONS[model],
        "risk_level": RISK_OPTIONS[risk],
        "investment_amount": investment,
        "timeframe": int(timeframe),
        "expected_revenue": revenue,
        "expected_costs": costs,
        "estimated_roi": estimated or None,
    }


def _preview(inputs: dict):
    if inputs["investment_amount"] <= 0:
        st.info("Informe um investimento maior que zero para ver os resultados.")
        return
    try:
        metrics = get_api().calculate_roi({
            k: inputs[k] for k in
            ("investment_amount", "timeframe", "expected_revenue", "expected_costs", "risk_level")
        })
    except APIError as e:
        show_api_error(e)
        return
    roi_metric_cards(metrics)


def _save(inputs: dict):
    if not inputs["project_name"].strip():
        st.error("Informe o nome do projeto.")
        return
    if inputs["investment_amount"] <= 0:
        st.error("O investimento deve ser maior que zero.")
        return
    try:
        get_api().create_roi_project(get_handle(), inputs)
    except APIError as e:
        show_api_error(e)
        return
    st.success(f"Projeto '{inputs['project_name']}' salvo.")


def _saved_projects():
    handle = get_handle()
    st.subheader("Projetos salvos")
    try:
        projects = get_api().list_roi_projects(handle)
    except NoActiveSession:
        st.info("Entre com seu código de acesso para salvar e listar projetos.")
        return
    except APIError as e:
        show_api_error(e)
        return

    if not projects:
        st.info("Nenhum projeto salvo nesta sessão.")
        return

    df = pd.DataFrame([{
        "Projeto": p["project_name"],
        "Modelo": p["calculation_model"],
        "Risco": p["risk_level"],
        "Investimento": format_brl(p["investment_amount"]),
        "Lucro líquido": format_brl(p["net_profit"]),
        "ROI": format_pct(p["roi_result"]),
        "ROI ajustado": format_pct(p["risk_adjusted_roi"]),
        "VPL": format_brl(p["npv"]),
    } for p in projects])
    st.dataframe(df, use_container_width=True, hide_index=True)
    st.plotly_chart(roi_comparison_chart(projects), use_container_width=True)

    names = {f"{p['project_name']} ({p['id'][:8]})": p["id"] for p in projects}
    col1, col2 = st.columns([3, 1])
    with col1:
        to_delete = st.selectbox("Excluir projeto", list(names), key="roi_delete_select")
    with col2:
        st.write("")
        if st.button("Excluir", key="roi_delete_btn"):
            try:
                get_api().delete_roi_project(handle, names[to_delete])
                st.rerun()
            except APIError as e:
                show_api_error(e)

    _exports(handle)


def _exports(handle):
    st.subheader("Relatórios")
    api = get_api()
    col1, col2 = st.columns(2)
    with col1:
        st.link_button("Abrir relatório para impressão", api.roi_report_url(handle))
    with col2:
        st.link_button("Baixar planilha (Excel)", api.roi_excel_url(handle))


def _benchmarks(inputs: dict):
    st.subheader("Benchmarks de mercado")
    default = inputs["project_description"] or inputs["project_name"]
    description = st.text_area("Descreva o projeto", value=default or "", key="bench_desc")
    if st.button("Buscar benchmarks", key="bench_btn"):
        with st.spinner("Consultando benchmarks..."):
            try:
                st.session_state["bench_text"] = get_api().fetch_benchmark(
                    description, get_handle()
                )
                st.session_state.pop("bench_error", None)
            except ProxyError as e:
                st.session_state["bench_error"] = e.message
            except APIError as e:
                show_api_error(e)

    if st.session_state.get("bench_error"):
        st.warning(f"Não foi possível obter benchmarks: {st.session_state['bench_error']}")
    elif st.session_state.get("bench_text"):
        st.markdown(st.session_state["bench_text"])


def render():
    st.header("Calculadora de ROI")

    inputs = _form_inputs()
    _preview(inputs)
    if st.button("Salvar projeto", type="primary"):
        _save(inputs)

    st.divider()
    _benchmarks(inputs)
    st.divider()
    _saved_projects()
