"""Pydantic-модели ответов аналитического фасада: тренды и рекомендации."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from cofa.models.common import Severity, TimeRange


class TrendOverview(BaseModel):
    """Распределение кластеров по направлению тренда."""

    model_config = ConfigDict(populate_by_name=True)

    total_clusters: int = Field(0, alias="totalClusters")
    increasing_trends: int = Field(0, alias="increasingTrends")
    decreasing_trends: int = Field(0, alias="decreasingTrends")
    stable_trends: int = Field(0, alias="stableTrends")


class TrendAnalysis(BaseModel):
    """Результат analyze_trends."""

    model_config = ConfigDict(populate_by_name=True)

    overview: TrendOverview
    by_root_cause: dict[str, int] = Field(default_factory=dict, alias="byRootCause")
    by_severity: dict[str, int] = Field(default_factory=dict, alias="bySeverity")
    time_range: TimeRange = Field(TimeRange.WEEK, alias="timeRange")
    insights: list[str] = Field(default_factory=list)


class ClusterRecommendations(BaseModel):
    """Рекомендации по конкретному кластеру."""

    model_config = ConfigDict(populate_by_name=True)

    cluster_id: str = Field(alias="clusterId")
    cluster_name: str = Field(alias="clusterName")
    priority: Severity
    recommendations: list[str] = Field(default_factory=list)
    confidence_score: float = Field(alias="confidenceScore")
    impact_assessment: str = Field(alias="impactAssessment")


class PriorityItem(BaseModel):
    """Один приоритетный кластер в глобальных рекомендациях."""

    model_config = ConfigDict(populate_by_name=True)

    cluster_id: str = Field(alias="clusterId")
    name: str
    recommendation: str | None = None
    impact: str = "Critical"


class GlobalRecommendations(BaseModel):
    """Рекомендации по всему снимку — без привязки к кластеру."""

    model_config = ConfigDict(populate_by_name=True)

    top_priorities: list[PriorityItem] = Field(default_factory=list, alias="topPriorities")
    systemwide_insights: list[str] = Field(default_factory=list, alias="systemwideInsights")


class ConnectionState(BaseModel):
    """Состояние подключения фасада к источнику событий.

    Передаётся в фасад явно; модульного глобального состояния нет.
    """

    connected: bool = False
    server_name: str = "cofa-mock-source"
    last_checked: datetime | None = None
