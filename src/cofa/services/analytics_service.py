"""Аналитический фасад над движком кластеризации.

Держит один снимок (события + кластеры), пересобирает его по запросу
и отдаёт срезы с пост-фильтрацией. Бизнес-логики кластеризации здесь нет:
каждая операция — получить снимок, отфильтровать, вернуть модель.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from collections.abc import Callable
from datetime import datetime, timezone

from cofa.config import Settings
from cofa.exceptions import ClusterNotFoundError
from cofa.models.analytics import (
    ClusterRecommendations,
    ConnectionState,
    GlobalRecommendations,
    PriorityItem,
    TrendAnalysis,
    TrendOverview,
)
from cofa.models.clustering import AnalyticsSnapshot, FailureCluster
from cofa.models.common import Severity, TimeRange, Trend
from cofa.models.events import FailureEvent
from cofa.services.clustering_service import ClusteringConfig, ClusteringService
from cofa.services.mock_data_service import MockDataGenerator

logger = logging.getLogger(__name__)

EventSource = Callable[[], list[FailureEvent]]

SYSTEMWIDE_INSIGHTS: tuple[str, ...] = (
    "Implement comprehensive input validation across all skills",
    "Enhance error handling and retry mechanisms",
    "Add proactive monitoring for context resolution failures",
    "Review and update service principal permissions quarterly",
)

_TOP_PRIORITIES_LIMIT = 3


class AnalyticsService:
    """Операции get_clusters / get_failure_logs / analyze_trends / get_recommendations.

    Args:
        settings: Настройки приложения.
        event_source: Функция без аргументов, возвращающая свежий список
            событий. По умолчанию — ``MockDataGenerator``.
        connection: Начальное состояние подключения к источнику.
        rng: Генератор для пометки кластеров как resolved.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        event_source: EventSource | None = None,
        connection: ConnectionState | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._settings = settings
        if event_source is None:
            generator = MockDataGenerator(settings.mock_seed)
            count = settings.mock_event_count

            def _generate() -> list[FailureEvent]:
                return generator.generate(count)

            event_source = _generate

        self._event_source = event_source
        self._connection = connection or ConnectionState()
        self._rng = rng or random.Random(settings.mock_seed)
        self._clustering = ClusteringService(
            ClusteringConfig(min_cluster_size=settings.min_cluster_size)
        )
        self._snapshot: AnalyticsSnapshot | None = None

    # --- Connection ---

    @property
    def connection(self) -> ConnectionState:
        return self._connection

    def connect(self) -> ConnectionState:
        """Пометить источник подключённым и вернуть новое состояние."""
        self._connection = self._connection.model_copy(
            update={"connected": True, "last_checked": datetime.now(timezone.utc)}
        )
        logger.info("Подключено к источнику событий %s", self._connection.server_name)
        return self._connection

    # --- Snapshot ---

    @property
    def snapshot(self) -> AnalyticsSnapshot:
        if self._snapshot is None:
            return self.refresh()
        return self._snapshot

    def refresh(self) -> AnalyticsSnapshot:
        """Перечитать события из источника и пересобрать кластеры."""
        events = self._event_source()
        clusters = [
            self._mark_resolved(c)
            for c in self._clustering.cluster_failures(events)
        ]
        self._snapshot = AnalyticsSnapshot(
            clusters=clusters,
            failure_logs=events,
            total_failures=len(events),
            critical_clusters=sum(1 for c in clusters if c.severity is Severity.CRITICAL),
            resolved_clusters=sum(1 for c in clusters if c.resolved),
            last_updated=datetime.now(timezone.utc).isoformat(),
        )
        logger.info(
            "Снимок обновлён: %d падений, %d кластеров",
            len(events),
            len(clusters),
        )
        return self._snapshot

    def _mark_resolved(self, cluster: FailureCluster) -> FailureCluster:
        if self._rng.random() < self._settings.resolved_ratio:
            return cluster.model_copy(update={"resolved": True})
        return cluster

    # --- Operations ---

    def get_failure_analytics(self, refresh: bool = False) -> AnalyticsSnapshot:
        if refresh:
            return self.refresh()
        return self.snapshot

    def get_clusters(
        self,
        *,
        severity: Severity | None = None,
        resolved: bool | None = None,
        min_cluster_size: int | None = None,
    ) -> list[FailureCluster]:
        """Кластеры текущего снимка с пост-фильтрацией."""
        clusters = self.snapshot.clusters
        if severity is not None:
            clusters = [c for c in clusters if c.severity == severity]
        if resolved is not None:
            clusters = [c for c in clusters if c.resolved == resolved]
        if min_cluster_size:
            clusters = [c for c in clusters if c.failure_count >= min_cluster_size]
        return clusters

    def get_cluster(self, cluster_id: str) -> FailureCluster:
        for c in self.snapshot.clusters:
            if c.id == cluster_id:
                return c
        raise ClusterNotFoundError(cluster_id)

    def get_failure_logs(
        self,
        *,
        skill_name: str | None = None,
        limit: int | None = None,
    ) -> tuple[list[FailureEvent], int]:
        """События снимка с фильтром по скиллу. Возвращает (события, всего в снимке)."""
        logs = self.snapshot.failure_logs
        if skill_name:
            logs = [log for log in logs if log.skill_name == skill_name]
        limit = limit or self._settings.logs_default_limit
        return logs[:limit], self.snapshot.total_failures

    def analyze_trends(self, time_range: TimeRange = TimeRange.WEEK) -> TrendAnalysis:
        """Сводка по трендам, корневым причинам и severity кластеров снимка.

        ``time_range`` только передаётся в ответ: кластеры не фильтруются по времени.
        """
        clusters = self.snapshot.clusters
        trends = Counter(c.trend for c in clusters)

        by_root_cause: dict[str, int] = {}
        by_severity: dict[str, int] = {}
        for c in clusters:
            category = c.root_cause.category.value
            by_root_cause[category] = by_root_cause.get(category, 0) + c.failure_count
            by_severity[c.severity.value] = by_severity.get(c.severity.value, 0) + 1

        return TrendAnalysis(
            overview=TrendOverview(
                total_clusters=len(clusters),
                increasing_trends=trends[Trend.INCREASING],
                decreasing_trends=trends[Trend.DECREASING],
                stable_trends=trends[Trend.STABLE],
            ),
            by_root_cause=by_root_cause,
            by_severity=by_severity,
            time_range=time_range,
            insights=_build_insights(clusters, by_root_cause),
        )

    def get_recommendations(
        self,
        cluster_id: str | None = None,
    ) -> ClusterRecommendations | GlobalRecommendations:
        """Рекомендации по кластеру или, без ``cluster_id``, по всему снимку."""
        if cluster_id:
            cluster = self.get_cluster(cluster_id)
            return ClusterRecommendations(
                cluster_id=cluster.id,
                cluster_name=cluster.name,
                priority=cluster.severity,
                recommendations=cluster.recommendations,
                confidence_score=cluster.root_cause.confidence,
                impact_assessment=(
                    "High business impact"
                    if cluster.severity is Severity.CRITICAL
                    else "Moderate impact"
                ),
            )

        critical = self.get_clusters(severity=Severity.CRITICAL)
        return GlobalRecommendations(
            top_priorities=[
                PriorityItem(
                    cluster_id=c.id,
                    name=c.name,
                    recommendation=c.recommendations[0] if c.recommendations else None,
                )
                for c in critical[:_TOP_PRIORITIES_LIMIT]
            ],
            systemwide_insights=list(SYSTEMWIDE_INSIGHTS),
        )


def _build_insights(
    clusters: list[FailureCluster],
    by_root_cause: dict[str, int],
) -> list[str]:
    """Короткие текстовые выводы по снимку."""
    if not clusters:
        return ["No failure clusters detected"]

    insights: list[str] = []
    top_category, top_count = max(by_root_cause.items(), key=lambda kv: kv[1])
    insights.append(
        f"{top_category.capitalize()}-related failures are the primary driver of incidents "
        f"({top_count} failures)"
    )

    by_skill: Counter[str] = Counter()
    for c in clusters:
        for skill in c.affected_skills:
            by_skill[skill] += c.failure_count
    top_skill, skill_count = by_skill.most_common(1)[0]
    insights.append(f"{top_skill} skill shows highest failure count ({skill_count} failures)")

    critical = sum(1 for c in clusters if c.severity is Severity.CRITICAL)
    if critical:
        insights.append(f"{critical} critical cluster(s) require immediate attention")
    return insights
