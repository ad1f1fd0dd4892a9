"""Cubo Estratégia — Streamlit Frontend Entry Point."""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import streamlit as st

st.set_page_config(
    page_title="Cubo Estratégia",
    page_icon="🧊",
    layout="wide",
    initial_sidebar_state="expanded",
)

from cubo_frontend.api_client import APIError
from cubo_frontend.components import show_api_error
from cubo_frontend.pages import roi_calculator, strategy, sessions
from cubo_frontend.state import get_api, get_handle, set_handle, clear_handle


def _open(code: str):
    try:
        handle, created = get_api().open_session(code)
    except APIError as e:
        show_api_error(e)
        return
    set_handle(handle)
    st.session_state["session_notice"] = (
        "Nova sessão criada." if created else "Sessão carregada com seus dados."
    )
    st.rerun()


def session_sidebar():
    handle = get_handle()

    # Auto-resume from ?code=... on a fresh page load
    if handle is None and st.query_params.get("code") and not st.session_state.get("resume_tried"):
        st.session_state["resume_tried"] = True
        _open(st.query_params["code"])

    st.sidebar.subheader("Sessão")
    if handle is None:
        with st.sidebar.form("access_form"):
            code = st.text_input("Código de acesso", type="password")
            submitted = st.form_submit_button("Entrar")
        if submitted:
            _open(code)
        st.sidebar.caption("Use o mesmo código para retomar seus projetos depois.")
    else:
        st.sidebar.success(f"Sessão ativa: {handle.access_code[:2]}***")
        notice = st.session_state.pop("session_notice", None)
        if notice:
            st.sidebar.caption(notice)
        if st.sidebar.button("Sair"):
            clear_handle()
            st.rerun()


def main():
    st.sidebar.title("Cubo Estratégia")
    st.sidebar.caption("ROI e portfólio estratégico de projetos")

    session_sidebar()

    # Tab navigation
    tabs = [
        "Calculadora de ROI",
        "Portfólio Estratégico",
        "Sessões",
    ]

    default_tab = st.session_state.get("active_tab", 0)
    if default_tab >= len(tabs):
        default_tab = 0

    st.sidebar.divider()
    selected_tab = st.sidebar.radio("Navegação", tabs, index=default_tab, key="nav_radio")
    tab_index = tabs.index(selected_tab)
    st.session_state["active_tab"] = tab_index

    st.sidebar.divider()
    st.sidebar.caption(f"Backend: {get_api().base_url}")

    if tab_index == 0:
        roi_calculator.render()
    elif tab_index == 1:
        strategy.render()
    elif tab_index == 2:
        sessions.render()


if __name__ == "__main__":
    main()
