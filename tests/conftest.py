"""Общие фабрики и фикстуры для тестов cofa."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from cofa.models.events import FailureEvent

BASE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_failure_event(**overrides) -> FailureEvent:
    """Фабрика FailureEvent с разумными дефолтами."""
    defaults: dict = {
        "evaluation_id": "eval_000001",
        "session_id": "session_1",
        "prompt": "Add user to Security group",
        "skill_name": "GroupManagement",
        "skill_inputs": {"parameters": {"action": "execute"}},
        "exception": "Resource not found in directory",
        "timestamp": BASE_TIME,
    }
    defaults.update(overrides)
    return FailureEvent.model_validate(defaults)


def make_events(
    count: int,
    *,
    start: datetime = BASE_TIME,
    step: timedelta = timedelta(hours=1),
    **overrides,
) -> list[FailureEvent]:
    """Серия однотипных событий с возрастающими timestamp и уникальными ID."""
    return [
        make_failure_event(
            evaluation_id=f"eval_{i:06d}",
            timestamp=start + step * i,
            **overrides,
        )
        for i in range(count)
    ]
