"""Тесты реестра инструментов: диспетчеризация, валидация, размеченные ошибки."""

from __future__ import annotations

from conftest import make_events
from cofa.config import Settings
from cofa.services.analytics_service import AnalyticsService
from cofa.tools import ToolRegistry


def _registry() -> ToolRegistry:
    def source():
        return (
            make_events(25, skill_name="PasswordReset", exception="API timeout during graph call")
            + make_events(4, skill_name="UserProfile", exception="Invalid parameter in skill input")
        )

    return ToolRegistry(AnalyticsService(Settings(resolved_ratio=0.0), event_source=source))


def test_list_tools_exposes_all_operations() -> None:
    names = [t.name for t in _registry().list_tools()]

    assert names == [
        "get_failure_analytics",
        "get_clusters",
        "get_failure_logs",
        "analyze_trends",
        "get_recommendations",
    ]


def test_tool_schema_uses_wire_names() -> None:
    specs = {t.name: t for t in _registry().list_tools()}

    assert "minClusterSize" in specs["get_clusters"].input_schema["properties"]
    assert "timeRange" in specs["analyze_trends"].input_schema["properties"]


def test_get_clusters_tool_applies_filters() -> None:
    result = _registry().call_tool("get_clusters", {"severity": "high"})

    assert result.success is True
    assert result.is_error is False
    assert result.data["count"] == 1
    assert result.data["data"][0]["failureCount"] == 25
    assert result.data["filters"] == {"severity": "high"}


def test_get_failure_logs_tool_reports_total() -> None:
    result = _registry().call_tool("get_failure_logs", {"skillName": "UserProfile", "limit": 2})

    assert result.data["count"] == 2
    assert result.data["total"] == 29


def test_analytics_tool_returns_snapshot() -> None:
    result = _registry().call_tool("get_failure_analytics")

    assert result.data["totalFailures"] == 29
    assert len(result.data["clusters"]) == 2


def test_unknown_tool_is_labeled_error() -> None:
    result = _registry().call_tool("drop_tables", {})

    assert result.is_error is True
    assert result.success is False
    assert result.error == "Error: Unknown tool: drop_tables"


def test_invalid_arguments_are_labeled_error() -> None:
    result = _registry().call_tool("analyze_trends", {"timeRange": "1y"})

    assert result.is_error is True
    assert result.error.startswith("Invalid arguments")


def test_unknown_argument_is_rejected() -> None:
    result = _registry().call_tool("get_clusters", {"colour": "red"})

    assert result.is_error is True


def test_missing_cluster_is_labeled_error() -> None:
    result = _registry().call_tool("get_recommendations", {"clusterId": "cluster_x"})

    assert result.is_error is True
    assert result.error == "Error: Cluster cluster_x not found"


def test_recommendations_tool_for_existing_cluster() -> None:
    registry = _registry()
    cluster_id = registry.call_tool("get_clusters").data["data"][0]["id"]

    result = registry.call_tool("get_recommendations", {"clusterId": cluster_id})

    assert result.success is True
    assert result.data["clusterId"] == cluster_id
    assert result.data["priority"] == "high"
