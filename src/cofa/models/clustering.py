"""Pydantic-модели для результатов кластеризации падений."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from cofa.models.common import RootCauseCategory, Severity, Trend
from cofa.models.events import FailureEvent


class RootCause(BaseModel):
    """Предполагаемая корневая причина кластера."""

    category: RootCauseCategory
    description: str
    confidence: float = Field(ge=0.0, le=1.0)


class FailureCluster(BaseModel):
    """Кластер — группа падений с общим отпечатком «скилл + начало ошибки».

    Пересчитывается при каждом вызове кластеризации и нигде не хранится.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    summary: str
    failure_count: int = Field(alias="failureCount")
    representative_prompts: list[str] = Field(default_factory=list, alias="representativePrompts")
    common_exceptions: list[str] = Field(default_factory=list, alias="commonExceptions")
    root_cause: RootCause = Field(alias="rootCause")
    recommendations: list[str] = Field(default_factory=list)
    affected_skills: list[str] = Field(default_factory=list, alias="affectedSkills")
    severity: Severity
    first_seen: datetime = Field(alias="firstSeen")
    last_seen: datetime = Field(alias="lastSeen")
    trend: Trend
    resolved: bool = False
    tags: list[str] = Field(default_factory=list)
    failure_logs: list[FailureEvent] = Field(default_factory=list, alias="failureLogs")


class AnalyticsSnapshot(BaseModel):
    """Снимок аналитики: события, кластеры и агрегированные счётчики."""

    model_config = ConfigDict(populate_by_name=True)

    clusters: list[FailureCluster] = Field(default_factory=list)
    failure_logs: list[FailureEvent] = Field(default_factory=list, alias="failureLogs")
    total_failures: int = Field(0, alias="totalFailures")
    critical_clusters: int = Field(0, alias="criticalClusters")
    resolved_clusters: int = Field(0, alias="resolvedClusters")
    last_updated: str = Field(alias="lastUpdated")
