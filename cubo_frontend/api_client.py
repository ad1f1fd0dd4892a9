"""
Cubo Estratégia — Frontend API Client

Centralized HTTP client for all backend API calls.
All pages use this module instead of making direct HTTP requests.

Session-scoped calls take an explicit SessionHandle. Passing None raises
NoActiveSession before any network traffic, so a page can never write to
"whatever session happens to be current".

Every failure is raised as one of the APIError subclasses, mirroring the
backend error codes, so pages can decide where to show it:
    ValidationError  → inline, next to the form
    NoActiveSession  → ask for the access code again
    BackendError     → toast; in-memory form state is kept
    ProxyError       → benchmark / suggestions area only

Usage:
    from cubo_frontend.api_client import CuboAPI
    api = CuboAPI()
    handle, created = api.open_session("EQUIPE-42")
    projects = api.list_roi_projects(handle)
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import requests

from cubo_frontend.benchmark_cache import BenchmarkCache

logger = logging.getLogger("cubo.frontend")

# Backend URL — configurable via environment
API_BASE = os.environ.get("CUBO_API_BASE", "http://127.0.0.1:8050")
DEFAULT_TIMEOUT_SECONDS = 30
AI_TIMEOUT_SECONDS = float(os.environ.get("AI_TIMEOUT_SECONDS", "60"))


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class APIError(Exception):
    """Base class for every failure the client reports."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.context = context or {}


class ValidationError(APIError):
    pass


class NoActiveSession(APIError):
    pass


class BackendError(APIError):
    pass


class ProxyError(APIError):
    pass


_ERRORS_BY_CODE = {
    "VALIDATION_ERROR": ValidationError,
    "EMPTY_REPORT": ValidationError,
    "NO_ACTIVE_SESSION": NoActiveSession,
    "BACKEND_ERROR": BackendError,
    "PROXY_ERROR": ProxyError,
    "PROXY_TIMEOUT": ProxyError,
}


def error_from_response(response: requests.Response) -> APIError:
    """Translate an error response into the matching APIError subclass."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    detail = body.get("detail") or response.reason or f"HTTP {response.status_code}"
    if not isinstance(detail, str):
        detail = str(detail)
    code = body.get("error_code")

    cls = _ERRORS_BY_CODE.get(code)
    if cls is None:
        if response.status_code in (400, 422):
            cls = ValidationError
        elif response.status_code == 502:
            cls = ProxyError
        elif response.status_code >= 500:
            cls = BackendError
        else:
            cls = APIError
    return cls(detail, error_code=code, status_code=response.status_code,
               context=body.get("context") or {})


@dataclass(frozen=True)
class SessionHandle:
    """The active access-code session, passed explicitly to every scoped call."""
    session_id: str
    access_code: str


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class CuboAPI:
    """HTTP client wrapper for the Cubo Estratégia backend API."""

    def __init__(
        self,
        base_url: str = API_BASE,
        cache: Optional[BenchmarkCache] = None,
        ai_timeout: float = AI_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()
        self.cache = cache if cache is not None else BenchmarkCache()
        self.ai_timeout = ai_timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _request(
        self,
        method: str,
        path: str,
        json_data=None,
        params: dict = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        network_error=BackendError,
    ) -> requests.Response:
        try:
            r = self.session.request(
                method, self._url(path), json=json_data, params=params, timeout=timeout
            )
        except requests.Timeout as e:
            logger.warning(f"{method} {path} timed out after {timeout}s")
            raise network_error("O servidor demorou demais para responder. Tente novamente.",
                                error_code="TIMEOUT") from e
        except requests.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise network_error("Não foi possível contatar o servidor. Tente novamente.") from e

        if r.status_code >= 400:
            raise error_from_response(r)
        return r

    def _get(self, path: str, params: dict = None):
        return self._request("GET", path, params=params).json()

    def _post(self, path: str, json_data=None):
        return self._request("POST", path, json_data=json_data).json()

    def _put(self, path: str, json_data=None):
        return self._request("PUT", path, json_data=json_data).json()

    def _patch(self, path: str, json_data=None):
        return self._request("PATCH", path, json_data=json_data).json()

    def _delete(self, path: str):
        return self._request("DELETE", path).json()

    @staticmethod
    def _require(handle: Optional[SessionHandle]) -> str:
        if handle is None or not handle.session_id:
            raise NoActiveSession("Nenhuma sessão ativa. Informe seu código de acesso.",
                                  error_code="NO_ACTIVE_SESSION")
        return handle.session_id

    # ---- Health ----
    def health(self) -> dict:
        return self._get("/health")

    # ---- Sessions ----
    def open_session(self, access_code: str) -> tuple[SessionHandle, bool]:
        """Find-or-create by code. Returns (handle, created)."""
        code = (access_code or "").strip()
        if not code:
            raise ValidationError("Informe um código de acesso.",
                                  error_code="VALIDATION_ERROR",
                                  context={"field": "access_code"})
        data = self._post("/api/sessions", json_data={"access_code": code})
        return SessionHandle(session_id=data["id"], access_code=data["access_code"]), data["created"]

    def get_session(self, handle: Optional[SessionHandle]) -> dict:
        sid = self._require(handle)
        return self._get(f"/api/sessions/{sid}")

    def list_sessions(self, search: str = None) -> dict:
        params = {"search": search} if search else None
        return self._get("/api/sessions", params=params)

    # ---- ROI ----
    def calculate_roi(self, inputs: dict) -> dict:
        """Stateless metric preview; works without a session."""
        return self._post("/api/roi/calculate", json_data=inputs)

    def list_roi_projects(self, handle: Optional[SessionHandle]) -> list:
        sid = self._require(handle)
        return self._get(f"/api/sessions/{sid}/roi-projects")

    def create_roi_project(self, handle: Optional[SessionHandle], data: dict) -> dict:
        sid = self._require(handle)
        return self._post(f"/api/sessions/{sid}/roi-projects", json_data=data)

    def delete_roi_project(self, handle: Optional[SessionHandle], project_id: str) -> dict:
        sid = self._require(handle)
        return self._delete(f"/api/sessions/{sid}/roi-projects/{project_id}")

    # ---- Strategy ----
    def get_strategy(self, handle: Optional[SessionHandle]) -> Optional[dict]:
        """The saved portfolio, or None when the session has none yet."""
        sid = self._require(handle)
        try:
            return self._get(f"/api/sessions/{sid}/strategy")
        except APIError as e:
            if e.error_code == "NO_PORTFOLIO":
                return None
            raise

    def save_strategy(
        self,
        handle: Optional[SessionHandle],
        portfolio_name: str,
        context_history: str = None,
        context_initiatives: str = None,
        projects: list = None,
    ) -> dict:
        """Save the configuration; a projects list replaces the stored ones."""
        sid = self._require(handle)
        body = {
            "portfolio_name": portfolio_name,
            "context_history": context_history,
            "context_initiatives": context_initiatives,
        }
        if projects is not None:
            body["projects"] = projects
        return self._put(f"/api/sessions/{sid}/strategy", json_data=body)

    def add_strategy_projects(self, handle: Optional[SessionHandle], projects: list) -> dict:
        sid = self._require(handle)
        if not projects:
            raise ValidationError("Selecione pelo menos um projeto.",
                                  error_code="VALIDATION_ERROR",
                                  context={"field": "projects"})
        return self._post(f"/api/sessions/{sid}/strategy/projects",
                          json_data={"projects": projects})

    def set_project_selected(
        self, handle: Optional[SessionHandle], project_id: str, selected: bool
    ) -> dict:
        sid = self._require(handle)
        return self._patch(f"/api/sessions/{sid}/strategy/projects/{project_id}",
                           json_data={"selected": selected})

    def delete_strategy_project(self, handle: Optional[SessionHandle], project_id: str) -> dict:
        sid = self._require(handle)
        return self._delete(f"/api/sessions/{sid}/strategy/projects/{project_id}")

    def get_strategy_chart(self, handle: Optional[SessionHandle]) -> dict:
        sid = self._require(handle)
        return self._get(f"/api/sessions/{sid}/strategy/chart")

    # ---- Export ----
    # Reports open in a browser tab straight from the backend; nothing is
    # fetched or stored by the frontend.
    def roi_report_url(self, handle: Optional[SessionHandle]) -> str:
        sid = self._require(handle)
        return self._url(f"/api/export/roi-report/{sid}")

    def strategy_report_url(self, handle: Optional[SessionHandle]) -> str:
        sid = self._require(handle)
        return self._url(f"/api/export/strategy-report/{sid}")

    def roi_excel_url(self, handle: Optional[SessionHandle]) -> str:
        sid = self._require(handle)
        return self._url(f"/api/export/roi-excel/{sid}")

    # ---- Text generation ----
    def _generate(self, description: str, request_type: str,
                  handle: Optional[SessionHandle]) -> dict:
        body = {"description": description, "type": request_type}
        if handle is not None:
            body["session_id"] = handle.session_id
        return self._request(
            "POST", "/api/ai/benchmarks", json_data=body,
            timeout=self.ai_timeout, network_error=ProxyError,
        ).json()

    def fetch_benchmark(self, description: str, handle: Optional[SessionHandle] = None) -> str:
        """
        Benchmark text for a project description.

        Served from the cache when the same description (ignoring case and
        surrounding whitespace) was asked for within the TTL; cache hits do
        not count as clicks.
        """
        if not (description or "").strip():
            raise ValidationError("Descreva o projeto para buscar benchmarks.",
                                  error_code="VALIDATION_ERROR",
                                  context={"field": "description"})
        cached = self.cache.get(description)
        if cached is not None:
            return cached

        text = self._generate(description.strip(), "benchmark", handle)["text"]
        self.cache.put(description, text)
        return text

    def suggest_projects(self, description: str, handle: Optional[SessionHandle] = None) -> list:
        """Project suggestions ({name, category, impact, complexity, ...})."""
        if not (description or "").strip():
            raise ValidationError("Descreva o contexto da empresa para gerar sugestões.",
                                  error_code="VALIDATION_ERROR",
                                  context={"field": "description"})
        return self._generate(description.strip(), "suggestions", handle)["projects"]
