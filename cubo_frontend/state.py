"""Per-browser-session state: the API client and the active session handle."""

from typing import Optional

import streamlit as st

from cubo_frontend.api_client import CuboAPI, SessionHandle

_API_KEY = "cubo_api"
_HANDLE_KEY = "cubo_session"


def get_api() -> CuboAPI:
    """One client (and so one benchmark cache) per browser session."""
    if _API_KEY not in st.session_state:
        st.session_state[_API_KEY] = CuboAPI()
    return st.session_state[_API_KEY]


def get_handle() -> Optional[SessionHandle]:
    return st.session_state.get(_HANDLE_KEY)


def set_handle(handle: SessionHandle):
    st.session_state[_HANDLE_KEY] = handle
    st.query_params["code"] = handle.access_code


def clear_handle():
    """Forget the session locally; nothing is deleted on the server."""
    st.session_state.pop(_HANDLE_KEY, None)
    if "code" in st.query_params:
        del st.query_params["code"]
