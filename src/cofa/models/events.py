"""Pydantic-модель входного события — одного упавшего вызова скилла."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FailureEvent(BaseModel):
    """Зафиксированный неуспешный вызов скилла Copilot.

    Поля, которых может не быть в источнике, сделаны Optional.
    ``extra="allow"`` принимает недокументированные поля без ошибок
    валидации. Модель неизменяема: движок кластеризации только читает события.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    evaluation_id: str = Field(alias="evaluationId")
    session_id: str = Field(alias="sessionId")
    prompt: str = ""
    skill_name: str = Field(alias="skillName")
    skill_inputs: dict[str, Any] = Field(default_factory=dict, alias="skillInputs")
    exception: str = ""
    timestamp: datetime
    error_code: str | None = Field(None, alias="errorCode")
    user_id: str | None = Field(None, alias="userId")
    context_missing: list[str] | None = Field(None, alias="contextMissing")
