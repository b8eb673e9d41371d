"""Конфигурация приложения, загружаемая из переменных окружения."""

from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from cofa.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Конфигурация приложения cofa.

    Все значения задаются через переменные окружения с префиксом ``COFA_``
    или через файл ``.env`` в рабочей директории.
    """

    model_config = SettingsConfigDict(
        env_prefix="COFA_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    min_cluster_size: int = Field(default=3, ge=1, description="Минимальный размер группы, чтобы она стала кластером")

    mock_event_count: int = Field(default=500, ge=0, description="Количество синтетических падений в одном снимке")
    mock_seed: int | None = Field(default=None, description="Seed генератора mock-данных (None = случайный)")
    resolved_ratio: float = Field(
        default=0.2, ge=0.0, le=1.0,
        description="Доля кластеров, помечаемых как resolved при построении снимка",
    )

    logs_default_limit: int = Field(default=100, ge=1, description="Лимит get_failure_logs по умолчанию")

    log_level: str = Field(default="INFO", description="Уровень логирования")

    server_host: str = Field(default="0.0.0.0", description="Хост для HTTP-сервера")
    server_port: int = Field(default=8090, ge=1, le=65535, description="Порт для HTTP-сервера")


def load_settings(**overrides: Any) -> Settings:
    """Загрузить настройки из окружения с явными переопределениями.

    Raises:
        ConfigurationError: Значение из окружения или переопределение
            не прошло валидацию.
    """
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc
