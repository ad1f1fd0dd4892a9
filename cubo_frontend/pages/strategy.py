"""Tab 2: Strategy Portfolio — impact × complexity matrix with AI suggestions."""

import streamlit as st

from cubo_frontend.api_client import APIError, NoActiveSession, ProxyError
from cubo_frontend.components import show_api_error, strategy_matrix_chart
from cubo_frontend.state import get_api, get_handle

CATEGORIES = ["Core", "Adjacente", "Transformacional"]
DEFAULT_NAME = "Novo Portfólio"


def _config_form(handle, portfolio: dict):
    with st.form("strategy_config"):
        name = st.text_input("Nome do portfólio",
                             value=(portfolio or {}).get("portfolio_name", DEFAULT_NAME))
        history = st.text_area("Histórico da empresa",
                               value=(portfolio or {}).get("context_history") or "")
        initiatives = st.text_area("Iniciativas atuais",
                                   value=(portfolio or {}).get("context_initiatives") or "")
        submitted = st.form_submit_button("Salvar portfólio", type="primary")

    if submitted:
        try:
            get_api().save_strategy(handle, name, history or None, initiatives or None)
            st.success("Portfólio salvo.")
            st.rerun()
        except APIError as e:
            show_api_error(e)
    return history, initiatives


def _add_project_form(handle):
    with st.expander("Adicionar projeto manualmente"):
        with st.form("strategy_add", clear_on_submit=True):
            name = st.text_input("Nome")
            category = st.selectbox("Categoria", CATEGORIES)
            col1, col2 = st.columns(2)
            with col1:
                impact = st.slider("Impacto", 1, 10, 5)
            with col2:
                complexity = st.slider("Complexidade", 1, 10, 5)
            description = st.text_area("Descrição")
            expected = st.text_input("Retorno esperado")
            submitted = st.form_submit_button("Adicionar")

        if submitted:
            if not name.strip():
                st.error("Informe o nome do projeto.")
                return
            try:
                get_api().add_strategy_projects(handle, [{
                    "name": name, "category": category,
                    "impact": impact, "complexity": complexity,
                    "description": description or None,
                    "expected_return": expected or None,
                }])
                st.rerun()
            except APIError as e:
                show_api_error(e)


def _suggestions(handle, history: str, initiatives: str):
    st.subheader("Sugestões de projetos")
    context = "\n".join(t for t in (history, initiatives) if t)
    description = st.text_area("Contexto para as sugestões", value=context, key="sugg_desc")

    if st.button("Gerar sugestões", key="sugg_btn"):
        with st.spinner("Gerando sugestões..."):
            try:
                st.session_state["suggestions"] = get_api().suggest_projects(description, handle)
                st.session_state.pop("sugg_error", None)
            except ProxyError as e:
                st.session_state["sugg_error"] = e.message
            except APIError as e:
                show_api_error(e)

    if st.session_state.get("sugg_error"):
        st.warning(f"Não foi possível gerar sugestões: {st.session_state['sugg_error']}")
        return

    suggestions = st.session_state.get("suggestions") or []
    if not suggestions:
        return

    chosen = []
    for i, s in enumerate(suggestions):
        label = f"**{s['name']}** · {s['category']} · impacto {s['impact']} · complexidade {s['complexity']}"
        if st.checkbox(label, key=f"sugg_pick_{i}"):
            chosen.append(s)
        st.caption(f"{s['description']} — {s['expectedReturn']}")

    if st.button("Adicionar selecionados ao portfólio", key="sugg_add"):
        if not chosen:
            st.error("Selecione pelo menos um projeto.")
            return
        try:
            get_api().add_strategy_projects(handle, [{
                "name": s["name"], "category": s["category"],
                "impact": s["impact"], "complexity": s["complexity"],
                "description": s["description"] or None,
                "expected_return": s["expectedReturn"] or None,
            } for s in chosen])
        except APIError as e:
            show_api_error(e)
            return
        st.session_state.pop("suggestions", None)
        st.rerun()


def _project_list(handle, projects: list):
    st.subheader(f"Projetos ({len(projects)})")
    for p in projects:
        col1, col2, col3 = st.columns([1, 6, 1])
        with col1:
            selected = st.checkbox("Incluir", value=p["selected"], key=f"sel_{p['id']}",
                                   label_visibility="collapsed")
            if selected != p["selected"]:
                try:
                    get_api().set_project_selected(handle, p["id"], selected)
                    st.rerun()
                except APIError as e:
                    show_api_error(e)
        with col2:
            st.markdown(f"**{p['name']}** · {p['category']} · "
                        f"impacto {p['impact']} · complexidade {p['complexity']}")
            if p.get("description"):
                st.caption(p["description"])
        with col3:
            if st.button("Remover", key=f"del_{p['id']}"):
                try:
                    get_api().delete_strategy_project(handle, p["id"])
                    st.rerun()
                except APIError as e:
                    show_api_error(e)


def _report(handle):
    st.link_button("Abrir relatório para impressão", get_api().strategy_report_url(handle))


def render():
    st.header("Portfólio Estratégico")

    handle = get_handle()
    api = get_api()
    try:
        portfolio = api.get_strategy(handle)
    except NoActiveSession:
        st.info("Entre com seu código de acesso para montar o portfólio.")
        return
    except APIError as e:
        show_api_error(e)
        return

    history, initiatives = _config_form(handle, portfolio)
    projects = (portfolio or {}).get("projects", [])

    try:
        chart = api.get_strategy_chart(handle)
        st.plotly_chart(strategy_matrix_chart(chart), use_container_width=True)
    except APIError as e:
        show_api_error(e)

    _add_project_form(handle)
    st.divider()
    _suggestions(handle, history, initiatives)
    st.divider()

    if not projects:
        st.info("Nenhum projeto no portfólio ainda.")
        return
    _project_list(handle, projects)

    st.divider()
    col1, col2 = st.columns(2)
    with col1:
        _report(handle)
    with col2:
        if st.button("Limpar portfólio"):
            try:
                api.save_strategy(handle, portfolio["portfolio_name"],
                                  portfolio.get("context_history"),
                                  portfolio.get("context_initiatives"), projects=[])
                st.rerun()
            except APIError as e:
                show_api_error(e)
