"""Каталог известных корневых причин падений скиллов.

Каждая категория — запись с ключевыми словами для сопоставления,
описанием, уверенностью и фиксированными шагами по устранению.
Диспетчеризация по категории идёт через словарь, а не через цепочку if.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from cofa.models.clustering import RootCause
from cofa.models.common import RootCauseCategory


@dataclass(frozen=True)
class RootCauseProfile:
    """Неизменяемые данные одной категории корневой причины."""

    category: RootCauseCategory
    keywords: tuple[str, ...]
    description: str
    confidence: float
    display_name: str
    summary_template: str
    recommendations: tuple[str, ...]

    def matches(self, exceptions_lower: Iterable[str]) -> bool:
        """Есть ли хотя бы одно ключевое слово хотя бы в одном тексте ошибки."""
        return any(kw in text for text in exceptions_lower for kw in self.keywords)

    def to_root_cause(self) -> RootCause:
        return RootCause(
            category=self.category,
            description=self.description,
            confidence=self.confidence,
        )

    def render_name(self, skill_name: str) -> str:
        return f"{skill_name} - {self.display_name}"

    def render_summary(self, skill_name: str, count: int) -> str:
        return self.summary_template.format(skill=skill_name, count=count)

    def render_recommendations(self, skill_name: str) -> list[str]:
        return [step.format(skill=skill_name) for step in self.recommendations]


ROOT_CAUSE_PROFILES: dict[RootCauseCategory, RootCauseProfile] = {
    RootCauseCategory.GROUNDING: RootCauseProfile(
        category=RootCauseCategory.GROUNDING,
        keywords=("context", "tenant"),
        description="Missing or invalid user/tenant context",
        confidence=0.85,
        display_name="Context Issues",
        summary_template="Missing user context in {skill} queries ({count} failures)",
        recommendations=(
            "Fix grounding logic for userObject in tenant context",
            "Add validation for required context fields",
            "Implement fallback context resolution",
        ),
    ),
    RootCauseCategory.TIMEOUT: RootCauseProfile(
        category=RootCauseCategory.TIMEOUT,
        keywords=("timeout", "network"),
        description="API timeouts or network connectivity issues",
        confidence=0.90,
        display_name="Timeout Failures",
        summary_template="API timeouts in {skill} operations ({count} failures)",
        recommendations=(
            "Increase API timeout thresholds",
            "Implement retry logic with exponential backoff",
            "Add circuit breaker pattern for failing services",
        ),
    ),
    RootCauseCategory.AUTH: RootCauseProfile(
        category=RootCauseCategory.AUTH,
        keywords=("permission", "unauthorized", "authentication"),
        description="Authorization or permission issues",
        confidence=0.88,
        display_name="Permission Errors",
        summary_template="Permission errors in {skill} execution ({count} failures)",
        recommendations=(
            "Review and update service principal permissions",
            "Implement proper token refresh mechanism",
            "Add user permission validation before skill execution",
        ),
    ),
    RootCauseCategory.INPUT: RootCauseProfile(
        category=RootCauseCategory.INPUT,
        keywords=("parameter", "input", "invalid"),
        description="Invalid or missing skill input parameters",
        confidence=0.82,
        display_name="Input Validation",
        summary_template="Invalid inputs to {skill} skill ({count} failures)",
        recommendations=(
            "Update {skill} skill to handle null values gracefully",
            "Add input parameter validation",
            "Provide better error messages for missing inputs",
        ),
    ),
    RootCauseCategory.API: RootCauseProfile(
        category=RootCauseCategory.API,
        keywords=(),
        description="General API or service issues",
        confidence=0.70,
        display_name="API Failures",
        summary_template="Service errors in {skill} API calls ({count} failures)",
        recommendations=(
            "Monitor API health and performance",
            "Review service dependencies",
            "Implement comprehensive error handling",
        ),
    ),
}

FALLBACK_CATEGORY = RootCauseCategory.API


def classify(exceptions: Iterable[str | None]) -> RootCauseProfile:
    """Выбрать профиль по объединению всех текстов ошибок группы.

    Категории проверяются в порядке объявления ``RootCauseCategory``,
    первое совпадение побеждает. Без совпадений — ``api``.
    """
    lowered = [(text or "").lower() for text in exceptions]
    for category in RootCauseCategory:
        if category is FALLBACK_CATEGORY:
            continue
        profile = ROOT_CAUSE_PROFILES[category]
        if profile.matches(lowered):
            return profile
    return ROOT_CAUSE_PROFILES[FALLBACK_CATEGORY]
