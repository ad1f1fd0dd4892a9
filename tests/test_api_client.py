"""Tests for the frontend API client (no backend needed)."""

import json

import pytest
import requests
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from cubo_frontend.api_client import (
    APIError, BackendError, CuboAPI, NoActiveSession, ProxyError, SessionHandle,
    ValidationError, error_from_response,
)
from cubo_frontend.benchmark_cache import BenchmarkCache

HANDLE = SessionHandle(session_id="abc", access_code="EQUIPE-42")


def _response(status: int, body=None) -> requests.Response:
    r = requests.Response()
    r.status_code = status
    r.reason = "Error" if status >= 400 else "OK"
    r._content = json.dumps(body).encode() if body is not None else b""
    r.headers["Content-Type"] = "application/json"
    return r


class RecordingSession:
    """Stands in for requests.Session; replies from a queue and records calls."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        reply = self.responses.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def api():
    client = CuboAPI(base_url="http://backend.test", cache=BenchmarkCache())
    client.session = RecordingSession()
    return client


class TestNoActiveSession:
    @pytest.mark.parametrize("call", [
        lambda api: api.list_roi_projects(None),
        lambda api: api.create_roi_project(None, {"project_name": "X"}),
        lambda api: api.get_strategy(None),
        lambda api: api.save_strategy(None, "Plano"),
        lambda api: api.add_strategy_projects(None, [{"name": "A"}]),
        lambda api: api.roi_report_url(None),
        lambda api: api.strategy_report_url(None),
    ])
    def test_raised_before_any_request(self, api, call):
        with pytest.raises(NoActiveSession):
            call(api)
        assert api.session.calls == []


class TestErrorMapping:
    @pytest.mark.parametrize("status,code,expected", [
        (422, "VALIDATION_ERROR", ValidationError),
        (422, "EMPTY_REPORT", ValidationError),
        (404, "NO_ACTIVE_SESSION", NoActiveSession),
        (503, "BACKEND_ERROR", BackendError),
        (502, "PROXY_ERROR", ProxyError),
        (500, None, BackendError),
        (502, None, ProxyError),
        (404, "NOT_FOUND", APIError),
    ])
    def test_by_code_and_status(self, status, code, expected):
        err = error_from_response(_response(status, {"detail": "falhou", "error_code": code}))
        assert type(err) is expected
        assert err.message == "falhou"
        assert err.status_code == status

    def test_non_json_body(self):
        err = error_from_response(_response(500))
        assert isinstance(err, BackendError)

    def test_connection_error_is_backend_error(self, api):
        api.session = RecordingSession(requests.ConnectionError("refused"))
        with pytest.raises(BackendError):
            api.list_roi_projects(HANDLE)

    def test_ai_timeout_is_proxy_error(self, api):
        api.session = RecordingSession(requests.Timeout("slow"))
        with pytest.raises(ProxyError):
            api.fetch_benchmark("CRM")


class TestSessions:
    def test_open_session(self, api):
        api.session = RecordingSession(
            _response(201, {"id": "abc", "access_code": "EQUIPE-42", "created": True})
        )
        handle, created = api.open_session(" EQUIPE-42 ")
        assert handle == HANDLE
        assert created is True
        method, url, kwargs = api.session.calls[0]
        assert (method, url) == ("POST", "http://backend.test/api/sessions")
        assert kwargs["json"] == {"access_code": "EQUIPE-42"}

    def test_blank_code_not_sent(self, api):
        with pytest.raises(ValidationError):
            api.open_session("  ")
        assert api.session.calls == []

    def test_missing_portfolio_is_none(self, api):
        api.session = RecordingSession(
            _response(404, {"detail": "none", "error_code": "NO_PORTFOLIO"})
        )
        assert api.get_strategy(HANDLE) is None


class TestBenchmarks:
    def test_second_call_served_from_cache(self, api):
        api.session = RecordingSession(_response(200, {"text": "benchmarks"}))
        assert api.fetch_benchmark("CRM para vendas", HANDLE) == "benchmarks"
        assert api.fetch_benchmark("  crm PARA vendas", HANDLE) == "benchmarks"
        assert len(api.session.calls) == 1
        _, _, kwargs = api.session.calls[0]
        assert kwargs["json"]["session_id"] == "abc"
        assert kwargs["timeout"] == api.ai_timeout

    def test_blank_description(self, api):
        with pytest.raises(ValidationError):
            api.fetch_benchmark("   ")
        assert api.session.calls == []

    def test_proxy_failure_not_cached(self, api):
        api.session = RecordingSession(
            _response(502, {"detail": "falhou", "error_code": "PROXY_ERROR"}),
            _response(200, {"text": "ok"}),
        )
        with pytest.raises(ProxyError):
            api.fetch_benchmark("CRM")
        assert api.fetch_benchmark("CRM") == "ok"

    def test_suggestions(self, api):
        api.session = RecordingSession(_response(200, {"projects": [{"name": "A"}]}))
        assert api.suggest_projects("Varejo") == [{"name": "A"}]
        _, _, kwargs = api.session.calls[0]
        assert kwargs["json"] == {"description": "Varejo", "type": "suggestions"}


class TestReportLinks:
    def test_urls_point_at_backend_without_fetching(self, api):
        assert api.roi_report_url(HANDLE) == "http://backend.test/api/export/roi-report/abc"
        assert api.strategy_report_url(HANDLE) == "http://backend.test/api/export/strategy-report/abc"
        assert api.roi_excel_url(HANDLE) == "http://backend.test/api/export/roi-excel/abc"
        assert api.session.calls == []
