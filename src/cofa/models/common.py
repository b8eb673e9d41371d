"""Общие перечисления доменной модели."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Срочность кластера — грубая оценка по числу падений."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Trend(str, Enum):
    """Направление динамики кластера."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class RootCauseCategory(str, Enum):
    """Категория корневой причины. Порядок членов — приоритет классификации."""

    GROUNDING = "grounding"
    TIMEOUT = "timeout"
    AUTH = "auth"
    INPUT = "input"
    API = "api"


class TimeRange(str, Enum):
    """Окно анализа трендов."""

    DAY = "24h"
    WEEK = "7d"
    MONTH = "30d"
