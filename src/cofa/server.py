"""HTTP-сервер cofa — REST API аналитики падений скиллов."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from cofa import __version__
from cofa.exceptions import ClusterNotFoundError, UnknownToolError
from cofa.models.common import Severity, TimeRange

logger = logging.getLogger(__name__)


# --- Модели ответов ---


class HealthResponse(BaseModel):
    """JSON-ответ GET /health."""

    status: str
    version: str
    connected: bool


class ErrorResponse(BaseModel):
    """Стандартный ответ при ошибке."""

    detail: str


# --- Состояние приложения ---


class _AppState:
    """Долгоживущие объекты, разделяемые между запросами."""

    def __init__(self) -> None:
        self.settings: Any = None
        self.service: Any = None
        self.tools: Any = None


_state = _AppState()


# --- Lifespan ---


@asynccontextmanager
async def _lifespan(app: FastAPI):  # noqa: ARG001
    """Инициализация при старте."""
    from cofa.config import load_settings
    from cofa.logging_config import setup_logging
    from cofa.services.analytics_service import AnalyticsService
    from cofa.tools import ToolRegistry

    settings = load_settings()
    setup_logging(settings.log_level)

    logger.info("cofa server v%s запускается", __version__)

    service = AnalyticsService(settings)
    service.connect()

    _state.settings = settings
    _state.service = service
    _state.tools = ToolRegistry(service)

    yield

    logger.info("cofa server останавливается")


# --- FastAPI ---


app = FastAPI(
    title="cofa",
    description="Аналитика падений Copilot-скиллов — REST API",
    version=__version__,
    lifespan=_lifespan,
)

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Не найдено"}}


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


# --- Маршруты ---


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Проверка работоспособности сервера."""
    connected = bool(_state.service is not None and _state.service.connection.connected)
    return HealthResponse(status="ok", version=__version__, connected=connected)


@app.get("/api/v1/analytics")
async def get_analytics(refresh: bool = False) -> dict[str, Any]:
    """Полный снимок: кластеры, события и счётчики."""
    snapshot = _state.service.get_failure_analytics(refresh=refresh)
    return _dump(snapshot)


@app.get("/api/v1/clusters")
async def get_clusters(
    severity: Severity | None = None,
    resolved: bool | None = None,
    min_cluster_size: int | None = Query(None, ge=1),
) -> dict[str, Any]:
    """Кластеры текущего снимка с фильтрами."""
    clusters = _state.service.get_clusters(
        severity=severity,
        resolved=resolved,
        min_cluster_size=min_cluster_size,
    )
    return {"data": [_dump(c) for c in clusters], "count": len(clusters)}


@app.get("/api/v1/clusters/{cluster_id:path}", responses=_NOT_FOUND)
async def get_cluster(cluster_id: str) -> dict[str, Any]:
    try:
        cluster = _state.service.get_cluster(cluster_id)
    except ClusterNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return _dump(cluster)


@app.get("/api/v1/logs")
async def get_failure_logs(
    skill_name: str | None = None,
    limit: int | None = Query(None, ge=1),
) -> dict[str, Any]:
    """Сырые события снимка с фильтром по скиллу."""
    logs, total = _state.service.get_failure_logs(skill_name=skill_name, limit=limit)
    return {"data": [_dump(log) for log in logs], "count": len(logs), "total": total}


@app.get("/api/v1/trends")
async def analyze_trends(time_range: TimeRange = TimeRange.WEEK) -> dict[str, Any]:
    return _dump(_state.service.analyze_trends(time_range))


@app.get("/api/v1/recommendations", responses=_NOT_FOUND)
async def get_recommendations(cluster_id: str | None = None) -> dict[str, Any]:
    """Рекомендации по кластеру (``?cluster_id=``) или глобальные."""
    try:
        result = _state.service.get_recommendations(cluster_id)
    except ClusterNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return _dump(result)


@app.get("/api/v1/tools")
async def list_tools() -> list[dict[str, Any]]:
    return [_dump(t) for t in _state.tools.list_tools()]


@app.post("/api/v1/tools/{name}", responses=_NOT_FOUND)
async def call_tool(name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
    """Вызвать инструмент по имени.

    Неизвестный инструмент — 404. Прочие ошибки инструмента (невалидные
    аргументы, отсутствующий кластер) возвращаются телом с ``isError=true``.
    """
    if not _state.tools.has_tool(name):
        raise HTTPException(status_code=404, detail=str(UnknownToolError(name)))
    return _dump(_state.tools.call_tool(name, arguments))


def main() -> None:
    """Точка входа консольного скрипта cofa-server."""
    import sys

    from cofa.config import load_settings
    from cofa.exceptions import ConfigurationError

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(
            f"Ошибка конфигурации: {exc}\n\n"
            f"Переменные окружения задаются с префиксом COFA_.",
            file=sys.stderr,
        )
        sys.exit(2)

    import uvicorn

    uvicorn.run(
        "cofa.server:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
