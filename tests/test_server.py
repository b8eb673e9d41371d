"""Тесты FastAPI-сервера: эндпоинты, фильтры, маппинг ошибок."""

from __future__ import annotations

import httpx
import pytest

import cofa
from conftest import make_events
from cofa.config import Settings
from cofa.server import _state, app
from cofa.services.analytics_service import AnalyticsService
from cofa.tools import ToolRegistry


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _events():
    return (
        make_events(55, skill_name="GroupManagement", exception="Missing user context in tenant")
        + make_events(12, skill_name="LicenseCheck", exception="Insufficient permissions for operation")
        + make_events(3, skill_name="UserProfile", exception="Invalid parameter in skill input")
    )


@pytest.fixture(autouse=True)
def _setup_state():
    """Установить _state сервера напрямую, без lifespan."""
    settings = Settings(resolved_ratio=0.0)
    service = AnalyticsService(settings, event_source=_events)
    service.connect()
    _state.settings = settings
    _state.service = service
    _state.tools = ToolRegistry(service)
    yield
    _state.settings = _state.service = _state.tools = None


@pytest.fixture
def _http_client():
    """httpx.AsyncClient для тестирования FastAPI через ASGI transport."""
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://testserver")


# ---------------------------------------------------------------------------
# GET /health
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_health_returns_ok(_http_client) -> None:
    async with _http_client as client:
        resp = await client.get("/health")

    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["version"] == cofa.__version__
    assert data["connected"] is True


# ---------------------------------------------------------------------------
# Аналитика и кластеры
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_analytics_snapshot(_http_client) -> None:
    async with _http_client as client:
        resp = await client.get("/api/v1/analytics")

    assert resp.status_code == 200
    data = resp.json()
    assert data["totalFailures"] == 70
    assert data["criticalClusters"] == 1
    assert [c["failureCount"] for c in data["clusters"]] == [55, 12, 3]


@pytest.mark.asyncio
async def test_clusters_filtered_by_severity(_http_client) -> None:
    async with _http_client as client:
        resp = await client.get("/api/v1/clusters", params={"severity": "medium"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == 1
    assert data["data"][0]["rootCause"]["category"] == "auth"


@pytest.mark.asyncio
async def test_clusters_reject_unknown_severity(_http_client) -> None:
    async with _http_client as client:
        resp = await client.get("/api/v1/clusters", params={"severity": "urgent"})

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_cluster_by_id(_http_client) -> None:
    async with _http_client as client:
        resp = await client.get("/api/v1/clusters/cluster_UserProfile_Invalid_parameter_in")

    assert resp.status_code == 200
    assert resp.json()["name"] == "UserProfile - Input Validation"


@pytest.mark.asyncio
async def test_unknown_cluster_returns_404(_http_client) -> None:
    async with _http_client as client:
        resp = await client.get("/api/v1/clusters/cluster_missing")

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Cluster cluster_missing not found"


# ---------------------------------------------------------------------------
# Логи, тренды, рекомендации
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_logs_with_filter_and_limit(_http_client) -> None:
    async with _http_client as client:
        resp = await client.get("/api/v1/logs", params={"skill_name": "LicenseCheck", "limit": 5})

    data = resp.json()
    assert data["count"] == 5
    assert data["total"] == 70
    assert {log["skillName"] for log in data["data"]} == {"LicenseCheck"}


@pytest.mark.asyncio
async def test_trends(_http_client) -> None:
    async with _http_client as client:
        resp = await client.get("/api/v1/trends", params={"time_range": "24h"})

    data = resp.json()
    assert data["timeRange"] == "24h"
    assert data["overview"]["totalClusters"] == 3
    assert data["byRootCause"] == {"grounding": 55, "auth": 12, "input": 3}


@pytest.mark.asyncio
async def test_global_recommendations(_http_client) -> None:
    async with _http_client as client:
        resp = await client.get("/api/v1/recommendations")

    data = resp.json()
    assert resp.status_code == 200
    assert data["topPriorities"][0]["impact"] == "Critical"


@pytest.mark.asyncio
async def test_recommendations_for_unknown_cluster_returns_404(_http_client) -> None:
    async with _http_client as client:
        resp = await client.get("/api/v1/recommendations", params={"cluster_id": "cluster_x"})

    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Инструменты
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_tools(_http_client) -> None:
    async with _http_client as client:
        resp = await client.get("/api/v1/tools")

    assert resp.status_code == 200
    assert len(resp.json()) == 5


@pytest.mark.asyncio
async def test_call_tool(_http_client) -> None:
    async with _http_client as client:
        resp = await client.post("/api/v1/tools/get_clusters", json={"minClusterSize": 10})

    data = resp.json()
    assert resp.status_code == 200
    assert data["success"] is True
    assert data["data"]["count"] == 2


@pytest.mark.asyncio
async def test_call_tool_without_body(_http_client) -> None:
    async with _http_client as client:
        resp = await client.post("/api/v1/tools/analyze_trends")

    assert resp.status_code == 200
    assert resp.json()["data"]["timeRange"] == "7d"


@pytest.mark.asyncio
async def test_call_tool_domain_error_is_in_body(_http_client) -> None:
    async with _http_client as client:
        resp = await client.post("/api/v1/tools/get_recommendations", json={"clusterId": "nope"})

    data = resp.json()
    assert resp.status_code == 200
    assert data["isError"] is True
    assert data["error"] == "Error: Cluster nope not found"


@pytest.mark.asyncio
async def test_call_unknown_tool_returns_404(_http_client) -> None:
    async with _http_client as client:
        resp = await client.post("/api/v1/tools/nope", json={})

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Unknown tool: nope"


def test_main_exits_on_invalid_configuration(monkeypatch, tmp_path, capsys) -> None:
    from cofa.server import main

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("COFA_SERVER_PORT", "0")

    with pytest.raises(SystemExit) as exc_info:
        main()

    assert exc_info.value.code == 2
    err = capsys.readouterr().err
    assert "Ошибка конфигурации" in err
    assert "COFA_" in err
