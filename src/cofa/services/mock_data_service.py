"""Генератор синтетических падений скиллов для демо и тестов."""

from __future__ import annotations

import logging
import random
import string
from datetime import datetime, timedelta, timezone

from cofa.models.events import FailureEvent

logger = logging.getLogger(__name__)

SKILLS: tuple[str, ...] = (
    "GroupManagement",
    "PasswordReset",
    "LicenseCheck",
    "UserProfile",
    "DirectorySync",
    "SecurityPolicy",
    "AccessReview",
    "ConditionalAccess",
)

PROMPTS: tuple[str, ...] = (
    "Add user to Security group",
    "Reset password for user@domain.com",
    "Check license assignment for team",
    "Update user profile information",
    "Sync directory changes",
    "Apply security policy to group",
    "Review access permissions",
    "Configure conditional access rule",
)

EXCEPTIONS: tuple[str, ...] = (
    "Missing user context in tenant",
    "API timeout during graph call",
    "Insufficient permissions for operation",
    "Invalid parameter in skill input",
    "Network connectivity issue",
    "Authentication token expired",
    "Resource not found in directory",
    "Concurrent modification conflict",
)

_ID_ALPHABET = string.ascii_lowercase + string.digits


class MockDataGenerator:
    """Генерирует события падений за последние ``days`` дней.

    Использует собственный экземпляр ``random.Random``: при заданном seed
    и фиксированном ``now`` результат воспроизводим.
    """

    def __init__(
        self,
        seed: int | None = None,
        *,
        now: datetime | None = None,
        days: int = 30,
    ) -> None:
        self._rng = random.Random(seed)
        self._now = now
        self._days = days

    def generate(self, count: int = 500) -> list[FailureEvent]:
        now = self._now or datetime.now(timezone.utc)
        events = [self._make_event(i, now) for i in range(count)]
        logger.debug("Сгенерировано %d синтетических падений", len(events))
        return events

    def _make_event(self, index: int, now: datetime) -> FailureEvent:
        rng = self._rng
        timestamp = (now - timedelta(days=rng.randrange(self._days))).replace(
            hour=rng.randrange(24),
            minute=rng.randrange(60),
        )
        return FailureEvent(
            evaluation_id=f"eval_{self._random_id()}",
            session_id=f"session_{self._random_id()}",
            prompt=rng.choice(PROMPTS),
            skill_name=rng.choice(SKILLS),
            skill_inputs={
                "userObject": {"id": f"user_{index}"} if rng.random() > 0.3 else None,
                "parameters": {"action": "execute"},
            },
            exception=rng.choice(EXCEPTIONS),
            timestamp=timestamp,
            error_code=f"ERR_{rng.randint(1000, 9999)}",
            user_id=f"user_{rng.randrange(100)}" if rng.random() > 0.2 else None,
            context_missing=["userContext", "tenantInfo"] if rng.random() > 0.7 else [],
        )

    def _random_id(self, length: int = 9) -> str:
        return "".join(self._rng.choices(_ID_ALPHABET, k=length))
