"""Tests for FastAPI endpoints."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from cubo_backend.ai.llm_provider import LLMProvider, LLMResponse
from cubo_backend.errors import ProxyError
from cubo_backend.main import app
from cubo_backend.routers.ai import get_llm_provider

ROI_BODY = {
    "project_name": "Automação do atendimento",
    "investment_amount": 10000,
    "timeframe": 12,
    "expected_revenue": 20000,
    "expected_costs": 5000,
    "risk_level": "Médio",
    "calculation_model": "Simples",
}


class FailingProvider(LLMProvider):
    def get_name(self) -> str:
        return "failing"

    def complete(self, prompt: str, system_prompt: str = "") -> LLMResponse:
        raise ProxyError("The text-generation service failed. Try again.")


class GarbageProvider(LLMProvider):
    def get_name(self) -> str:
        return "garbage"

    def complete(self, prompt: str, system_prompt: str = "") -> LLMResponse:
        return LLMResponse(content="not json at all")


def _add_strategy_projects(client, session_id, *names):
    return client.post(f"/api/sessions/{session_id}/strategy/projects", json={"projects": [
        {"name": n, "impact": 6, "complexity": 3, "category": "Core"} for n in names
    ]})


class TestHealth:
    def test_root(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["status"] == "running"

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


class TestSessions:
    def test_create_then_load(self, client):
        first = client.post("/api/sessions", json={"access_code": "EQUIPE-42"})
        second = client.post("/api/sessions", json={"access_code": " EQUIPE-42 "})
        assert first.status_code == 201
        assert first.json()["created"] is True
        assert second.status_code == 200
        assert second.json()["created"] is False
        assert first.json()["id"] == second.json()["id"]

    def test_blank_code(self, client):
        resp = client.post("/api/sessions", json={"access_code": "   "})
        assert resp.status_code == 422
        assert resp.json()["error_code"] == "VALIDATION_ERROR"

    def test_unknown_session(self, client):
        resp = client.get("/api/sessions/does-not-exist")
        assert resp.status_code == 404
        assert resp.json()["error_code"] == "NO_ACTIVE_SESSION"

    def test_click_counter(self, client, session_id):
        resp = client.post(f"/api/sessions/{session_id}/clicks/benchmark")
        assert resp.status_code == 200
        assert resp.json()["benchmark_clicks"] == 1

    def test_admin_overview(self, client, session_id):
        client.post(f"/api/sessions/{session_id}/roi-projects", json=ROI_BODY)
        data = client.get("/api/sessions").json()
        assert data["totals"]["total_users"] == 1
        assert data["sessions"][0]["roi_projects_count"] == 1


class TestROI:
    def test_calculate(self, client):
        resp = client.post("/api/roi/calculate", json={
            "investment_amount": 10000, "timeframe": 12,
            "expected_revenue": 15000, "expected_costs": 5000, "risk_level": "Médio",
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["roi_result"] == 0
        assert data["net_profit"] == 0
        assert data["payback_period"] is None

    def test_calculate_zero_investment(self, client):
        resp = client.post("/api/roi/calculate", json={"investment_amount": 0, "timeframe": 12})
        assert resp.status_code == 422
        assert resp.json()["error_code"] == "VALIDATION_ERROR"

    def test_calculate_huge_revenue(self, client):
        resp = client.post("/api/roi/calculate", json={
            "investment_amount": 1, "timeframe": 1,
            "expected_revenue": 1e26, "risk_level": "Low",
        })
        assert resp.status_code == 200
        assert resp.json()["irr"] is None

    def test_calculate_timeframe_too_long(self, client):
        resp = client.post("/api/roi/calculate", json={
            "investment_amount": 1000, "timeframe": 10 ** 9, "expected_revenue": 5000,
        })
        assert resp.status_code == 422
        assert resp.json()["error_code"] == "VALIDATION_ERROR"

    def test_save_timeframe_too_long(self, client, session_id):
        resp = client.post(f"/api/sessions/{session_id}/roi-projects",
                           json={**ROI_BODY, "timeframe": 1201})
        assert resp.status_code == 422

    def test_calculate_unknown_risk(self, client):
        resp = client.post("/api/roi/calculate", json={
            "investment_amount": 100, "timeframe": 12, "risk_level": "Extremo",
        })
        assert resp.status_code == 422

    def test_save_list_delete(self, client, session_id):
        resp = client.post(f"/api/sessions/{session_id}/roi-projects", json=ROI_BODY)
        assert resp.status_code == 201
        project = resp.json()
        assert project["risk_level"] == "Medium"
        assert project["calculation_model"] == "Simple"
        assert abs(project["roi_result"] - 50.0) < 1e-9

        listed = client.get(f"/api/sessions/{session_id}/roi-projects").json()
        assert [p["id"] for p in listed] == [project["id"]]

        resp = client.delete(f"/api/sessions/{session_id}/roi-projects/{project['id']}")
        assert resp.status_code == 200
        resp = client.delete(f"/api/sessions/{session_id}/roi-projects/{project['id']}")
        assert resp.status_code == 404
        assert resp.json()["error_code"] == "NOT_FOUND"

    def test_save_without_session(self, client):
        resp = client.post("/api/sessions/missing/roi-projects", json=ROI_BODY)
        assert resp.status_code == 404
        assert resp.json()["error_code"] == "NO_ACTIVE_SESSION"

    def test_save_without_name(self, client, session_id):
        resp = client.post(f"/api/sessions/{session_id}/roi-projects",
                           json={**ROI_BODY, "project_name": "  "})
        assert resp.status_code == 422


class TestStrategy:
    def test_no_portfolio(self, client, session_id):
        resp = client.get(f"/api/sessions/{session_id}/strategy")
        assert resp.status_code == 404
        assert resp.json()["error_code"] == "NO_PORTFOLIO"

    def test_save_and_load(self, client, session_id):
        resp = client.put(f"/api/sessions/{session_id}/strategy", json={
            "portfolio_name": "Plano 2025",
            "context_history": "Rede de lojas",
            "projects": [{"name": "App", "impact": 9, "complexity": 7,
                          "category": "Transformacional"}],
        })
        assert resp.status_code == 200
        data = client.get(f"/api/sessions/{session_id}/strategy").json()
        assert data["portfolio_name"] == "Plano 2025"
        assert [p["name"] for p in data["projects"]] == ["App"]

    def test_invalid_score(self, client, session_id):
        resp = client.put(f"/api/sessions/{session_id}/strategy", json={
            "projects": [{"name": "App", "impact": 11, "complexity": 7, "category": "Core"}],
        })
        assert resp.status_code == 422

    def test_invalid_category(self, client, session_id):
        resp = _add_strategy_projects(client, session_id, "A")
        assert resp.status_code == 201
        resp = client.post(f"/api/sessions/{session_id}/strategy/projects", json={"projects": [
            {"name": "B", "impact": 5, "complexity": 5, "category": "Outro"}
        ]})
        assert resp.status_code == 422

    def test_append_toggle_delete(self, client, session_id):
        data = _add_strategy_projects(client, session_id, "A", "B").json()
        assert data["portfolio_name"] == "Novo Portfólio"
        pid = data["projects"][0]["id"]

        resp = client.patch(f"/api/sessions/{session_id}/strategy/projects/{pid}",
                            json={"selected": False})
        assert resp.status_code == 200
        assert resp.json()["selected"] is False

        resp = client.delete(f"/api/sessions/{session_id}/strategy/projects/{pid}")
        assert resp.status_code == 200
        data = client.get(f"/api/sessions/{session_id}/strategy").json()
        assert len(data["projects"]) == 1

    def test_append_empty(self, client, session_id):
        resp = client.post(f"/api/sessions/{session_id}/strategy/projects", json={"projects": []})
        assert resp.status_code == 422

    def test_chart(self, client, session_id):
        empty = client.get(f"/api/sessions/{session_id}/strategy/chart").json()
        assert empty["points"] == []

        _add_strategy_projects(client, session_id, "A")
        chart = client.get(f"/api/sessions/{session_id}/strategy/chart").json()
        (point,) = chart["points"]
        assert abs(point["x"] - (10 + 2 / 9 * 80)) < 1e-9
        assert abs(point["y"] - (10 + 5 / 9 * 80)) < 1e-9
        assert point["color"] == "#3b82f6"


class TestExport:
    def test_empty_reports_refused(self, client, session_id):
        for path in ("roi-report", "strategy-report", "roi-excel"):
            resp = client.get(f"/api/export/{path}/{session_id}")
            assert resp.status_code == 422
            assert resp.json()["error_code"] == "EMPTY_REPORT"

    def test_roi_report(self, client, session_id):
        client.post(f"/api/sessions/{session_id}/roi-projects", json=ROI_BODY)
        resp = client.get(f"/api/export/roi-report/{session_id}")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert "Automação do atendimento" in resp.text
        assert "window.print()" in resp.text

    def test_strategy_report(self, client, session_id):
        _add_strategy_projects(client, session_id, "A", "B")
        resp = client.get(f"/api/export/strategy-report/{session_id}")
        assert resp.status_code == 200
        assert "<svg" in resp.text

    def test_roi_excel(self, client, session_id):
        client.post(f"/api/sessions/{session_id}/roi-projects", json=ROI_BODY)
        resp = client.get(f"/api/export/roi-excel/{session_id}")
        assert resp.status_code == 200
        assert "spreadsheetml" in resp.headers["content-type"]
        assert resp.content[:2] == b"PK"


class TestAIProxy:
    def test_benchmark(self, client, session_id):
        resp = client.post("/api/ai/benchmarks", json={
            "description": "CRM para vendas", "type": "benchmark", "session_id": session_id,
        })
        assert resp.status_code == 200
        assert resp.json()["text"]
        session = client.get(f"/api/sessions/{session_id}").json()
        assert session["benchmark_clicks"] == 1

    def test_suggestions(self, client, session_id):
        resp = client.post("/api/ai/benchmarks", json={
            "description": "Varejo regional", "type": "suggestions", "session_id": session_id,
        })
        assert resp.status_code == 200
        projects = resp.json()["projects"]
        assert len(projects) == 3
        assert "expectedReturn" in projects[0]
        session = client.get(f"/api/sessions/{session_id}").json()
        assert session["project_suggestions_clicks"] == 1

    def test_without_session(self, client):
        resp = client.post("/api/ai/benchmarks", json={"description": "CRM"})
        assert resp.status_code == 200

    def test_unknown_session_does_not_block_generation(self, client):
        resp = client.post("/api/ai/benchmarks", json={
            "description": "CRM", "type": "benchmark", "session_id": "does-not-exist",
        })
        assert resp.status_code == 200
        assert resp.json()["text"]

    def test_empty_description(self, client):
        resp = client.post("/api/ai/benchmarks", json={"description": "  "})
        assert resp.status_code == 422

    def test_unknown_type(self, client):
        resp = client.post("/api/ai/benchmarks", json={"description": "CRM", "type": "poem"})
        assert resp.status_code == 422

    def test_provider_failure(self, client):
        app.dependency_overrides[get_llm_provider] = lambda: FailingProvider()
        resp = client.post("/api/ai/benchmarks", json={"description": "CRM"})
        assert resp.status_code == 502
        assert resp.json()["error_code"] == "PROXY_ERROR"

    def test_unparsable_suggestions(self, client):
        app.dependency_overrides[get_llm_provider] = lambda: GarbageProvider()
        resp = client.post("/api/ai/benchmarks", json={"description": "CRM", "type": "suggestions"})
        assert resp.status_code == 502
        assert resp.json()["error_code"] == "PROXY_ERROR"
