"""Сервис кластеризации падений скиллов по грубому отпечатку ошибки.

Алгоритм:
1. Ключ группы: ``skill_name + "_" + первые три слова exception через "_"``.
   Группы собираются в dict, порядок ключей — порядок первого появления.
2. Группы меньше ``min_cluster_size`` отбрасываются без следа.
3. Для каждой оставшейся группы вычисляются корневая причина (поиск
   ключевых слов по всем текстам ошибок группы), рекомендации, severity
   (по размеру), тренд (по половинам отсортированной по времени группы),
   имя, summary и теги.
4. Кластеры сортируются по убыванию числа падений; сортировка стабильная,
   при равенстве сохраняется порядок первого появления ключа.

Функция тотальная: на любых входных данных возвращает список, не бросает.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

from cofa.knowledge.root_causes import classify
from cofa.models.clustering import FailureCluster
from cofa.models.common import Severity, Trend
from cofa.models.events import FailureEvent

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ClusteringConfig:
    """Параметры алгоритма кластеризации."""

    min_cluster_size: int = 3

    key_exception_words: int = 3
    representative_sample_size: int = 5

    # Нижние границы уровней severity — строгое сравнение (count > bound)
    critical_above: int = 50
    high_above: int = 20
    medium_above: int = 10

    trend_increase_ratio: float = 1.2
    trend_decrease_ratio: float = 0.8

    high_volume_above: int = 50


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _grouping_key(event: FailureEvent, words: int) -> str:
    """Отпечаток события: скилл + первые слова текста ошибки."""
    tokens = (event.exception or "").split()[:words]
    return f"{event.skill_name or ''}_{'_'.join(tokens)}"


def _timestamp_key(event: FailureEvent) -> datetime:
    """Ключ сортировки по времени, устойчивый к naive/aware и отсутствию значения."""
    ts = event.timestamp
    if ts is None:
        return _EPOCH
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def _unique(values) -> list:
    """Уникальные значения в порядке первого появления."""
    return list(dict.fromkeys(values))


# ---------------------------------------------------------------------------
# ClusteringService
# ---------------------------------------------------------------------------

class ClusteringService:
    """Группирует падения скиллов в кластеры и выводит их атрибуты."""

    def __init__(self, config: ClusteringConfig | None = None) -> None:
        self._config = config or ClusteringConfig()

    def cluster_failures(
        self,
        events: Sequence[FailureEvent],
        min_cluster_size: int | None = None,
    ) -> list[FailureCluster]:
        """Кластеризовать события и вернуть кластеры по убыванию размера."""
        threshold = (
            self._config.min_cluster_size
            if min_cluster_size is None
            else min_cluster_size
        )

        groups: dict[str, list[FailureEvent]] = {}
        for event in events:
            key = _grouping_key(event, self._config.key_exception_words)
            groups.setdefault(key, []).append(event)

        clusters = [
            self._build_cluster(key, members)
            for key, members in groups.items()
            if len(members) >= threshold
        ]
        clusters.sort(key=lambda c: -c.failure_count)

        clustered = sum(c.failure_count for c in clusters)
        logger.info(
            "Сгруппировано %d падений в %d кластеров (%d групп, %d падений ниже порога %d)",
            len(events),
            len(clusters),
            len(groups),
            len(events) - clustered,
            threshold,
        )
        return clusters

    # --- Cluster building ---

    def _build_cluster(self, key: str, members: list[FailureEvent]) -> FailureCluster:
        """Создать FailureCluster из группы событий."""
        count = len(members)
        skill_name = members[0].skill_name or ""
        profile = classify(m.exception for m in members)
        skills = _unique(m.skill_name or "" for m in members)

        first = min(members, key=_timestamp_key)
        last = max(members, key=_timestamp_key)

        logger.debug(
            "Кластер %s: %d падений, категория %s", key, count, profile.category.value,
        )

        return FailureCluster(
            id=f"cluster_{key}",
            name=profile.render_name(skill_name),
            summary=profile.render_summary(skill_name, count),
            failure_count=count,
            representative_prompts=_unique(
                m.prompt for m in members[: self._config.representative_sample_size]
            ),
            common_exceptions=_unique(m.exception or "" for m in members),
            root_cause=profile.to_root_cause(),
            recommendations=profile.render_recommendations(skill_name),
            affected_skills=skills,
            severity=self._severity(count),
            first_seen=first.timestamp or _EPOCH,
            last_seen=last.timestamp or _EPOCH,
            trend=self._trend(members),
            resolved=False,
            tags=self._tags(profile.category.value, skills, members),
            failure_logs=list(members),
        )

    def _severity(self, count: int) -> Severity:
        cfg = self._config
        if count > cfg.critical_above:
            return Severity.CRITICAL
        if count > cfg.high_above:
            return Severity.HIGH
        if count > cfg.medium_above:
            return Severity.MEDIUM
        return Severity.LOW

    def _trend(self, members: list[FailureEvent]) -> Trend:
        """Сравнить размеры половин группы, отсортированной по времени.

        Половины режутся по индексу, а не по времени, поэтому результат
        определяется только размером группы. Это не настоящий тренд.
        """
        ordered = sorted(members, key=_timestamp_key)
        midpoint = len(ordered) // 2
        first_half = ordered[:midpoint]
        second_half = ordered[midpoint:]

        if len(second_half) > len(first_half) * self._config.trend_increase_ratio:
            return Trend.INCREASING
        if len(second_half) < len(first_half) * self._config.trend_decrease_ratio:
            return Trend.DECREASING
        return Trend.STABLE

    def _tags(
        self,
        category: str,
        skills: list[str],
        members: list[FailureEvent],
    ) -> list[str]:
        tags = [category]
        tags.extend(s.lower() for s in skills)
        if len(members) > self._config.high_volume_above:
            tags.append("high-volume")
        if any(m.context_missing for m in members):
            tags.append("context-missing")
        return tags


def cluster(
    events: Sequence[FailureEvent],
    min_cluster_size: int = 3,
) -> list[FailureCluster]:
    """Кластеризовать падения с настройками по умолчанию."""
    return ClusteringService().cluster_failures(events, min_cluster_size)
