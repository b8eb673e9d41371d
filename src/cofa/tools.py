"""Реестр именованных инструментов поверх аналитического фасада.

Каждый инструмент — pydantic-модель аргументов плюс обработчик.
``call_tool`` никогда не бросает доменные ошибки наружу: неизвестный
инструмент, невалидные аргументы и отсутствующий кластер возвращаются
как ``ToolResult`` с ``is_error=True``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cofa.exceptions import CofaError, UnknownToolError
from cofa.models.common import Severity, TimeRange
from cofa.services.analytics_service import AnalyticsService

logger = logging.getLogger(__name__)


# --- Аргументы инструментов ---


class _ToolArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class FailureAnalyticsArgs(_ToolArgs):
    refresh: bool = Field(False, description="Whether to refresh the data before returning")


class ClustersArgs(_ToolArgs):
    severity: Severity | None = Field(None, description="Filter by severity level")
    resolved: bool | None = Field(None, description="Filter by resolution status")
    min_cluster_size: int | None = Field(
        None, ge=1, alias="minClusterSize", description="Minimum cluster size threshold",
    )


class FailureLogsArgs(_ToolArgs):
    skill_name: str | None = Field(None, alias="skillName", description="Filter by specific skill name")
    limit: int | None = Field(None, ge=1, description="Maximum number of logs to return")


class TrendsArgs(_ToolArgs):
    time_range: TimeRange = Field(TimeRange.WEEK, alias="timeRange", description="Time range for analysis")


class RecommendationsArgs(_ToolArgs):
    cluster_id: str | None = Field(
        None, alias="clusterId", description="Specific cluster to get recommendations for",
    )


# --- Описание и результат ---


class ToolSpec(BaseModel):
    """Публичное описание инструмента для клиентов."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    input_schema: dict[str, Any] = Field(alias="inputSchema")


class ToolResult(BaseModel):
    """Результат вызова инструмента."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    data: Any = None
    error: str | None = None
    is_error: bool = Field(False, alias="isError")
    generated_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        alias="generatedAt",
    )


@dataclass(frozen=True)
class _RegisteredTool:
    name: str
    description: str
    args_model: type[_ToolArgs]
    handler: Callable[[Any], Any]


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [_dump(v) for v in value]
    if isinstance(value, dict):
        return {k: _dump(v) for k, v in value.items()}
    return value


class ToolRegistry:
    """Набор инструментов get_failure_analytics / get_clusters / … над одним фасадом."""

    def __init__(self, service: AnalyticsService) -> None:
        self._service = service
        self._tools: dict[str, _RegisteredTool] = {}
        self._register_defaults()

    def _register(
        self,
        name: str,
        description: str,
        args_model: type[_ToolArgs],
        handler: Callable[[Any], Any],
    ) -> None:
        if name in self._tools:
            logger.warning("Инструмент '%s' уже зарегистрирован, перезаписываем", name)
        self._tools[name] = _RegisteredTool(name, description, args_model, handler)

    def _register_defaults(self) -> None:
        service = self._service

        def failure_analytics(args: FailureAnalyticsArgs) -> Any:
            return service.get_failure_analytics(refresh=args.refresh)

        def clusters(args: ClustersArgs) -> Any:
            found = service.get_clusters(
                severity=args.severity,
                resolved=args.resolved,
                min_cluster_size=args.min_cluster_size,
            )
            return {
                "data": _dump(found),
                "count": len(found),
                "filters": args.model_dump(mode="json", by_alias=True, exclude_none=True),
            }

        def failure_logs(args: FailureLogsArgs) -> Any:
            logs, total = service.get_failure_logs(skill_name=args.skill_name, limit=args.limit)
            return {
                "data": _dump(logs),
                "count": len(logs),
                "total": total,
                "filters": args.model_dump(mode="json", by_alias=True, exclude_none=True),
            }

        def trends(args: TrendsArgs) -> Any:
            return service.analyze_trends(args.time_range)

        def recommendations(args: RecommendationsArgs) -> Any:
            return service.get_recommendations(args.cluster_id)

        self._register(
            "get_failure_analytics",
            "Get complete copilot failure analytics data including clusters and logs",
            FailureAnalyticsArgs,
            failure_analytics,
        )
        self._register(
            "get_clusters",
            "Get processed failure clusters with filtering options",
            ClustersArgs,
            clusters,
        )
        self._register(
            "get_failure_logs",
            "Get raw failure logs with filtering options",
            FailureLogsArgs,
            failure_logs,
        )
        self._register(
            "analyze_trends",
            "Get trend analysis and insights from failure data",
            TrendsArgs,
            trends,
        )
        self._register(
            "get_recommendations",
            "Get recommendations for failure remediation",
            RecommendationsArgs,
            recommendations,
        )

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    def list_tools(self) -> list[ToolSpec]:
        return [
            ToolSpec(
                name=tool.name,
                description=tool.description,
                input_schema=tool.args_model.model_json_schema(by_alias=True),
            )
            for tool in self._tools.values()
        ]

    def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        """Вызвать инструмент по имени; ошибки возвращаются как размеченный результат."""
        logger.debug("Вызов инструмента '%s' с аргументами %s", name, arguments)
        try:
            tool = self._tools.get(name)
            if tool is None:
                raise UnknownToolError(name)
            args = tool.args_model.model_validate(arguments or {})
            data = tool.handler(args)
        except ValidationError as exc:
            logger.warning("Невалидные аргументы инструмента '%s': %s", name, exc)
            return ToolResult(success=False, error=f"Invalid arguments: {exc}", is_error=True)
        except CofaError as exc:
            logger.warning("Ошибка инструмента '%s': %s", name, exc)
            return ToolResult(success=False, error=f"Error: {exc}", is_error=True)

        return ToolResult(success=True, data=_dump(data))
