"""Логирование cofa: один обработчик на корневом логгере, шумные библиотеки приглушены."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Логгеры HTTP-стека, которые на INFO пишут строку на каждый запрос
QUIET_LOGGERS: tuple[str, ...] = ("httpx", "uvicorn.access")

_HANDLER_NAME = "cofa"


def setup_logging(level: str = "INFO", *, stream: TextIO | None = None) -> logging.Handler:
    """Настроить логирование для CLI и сервера.

    Неизвестное имя уровня трактуется как INFO. Повторный вызов заменяет
    ранее установленный обработчик cofa, не трогая чужие (например, pytest).

    Args:
        level: Имя уровня логирования (DEBUG, INFO, WARNING, ERROR).
        stream: Куда писать; по умолчанию stderr, чтобы не мешать JSON в stdout.

    Returns:
        Установленный обработчик.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(numeric_level)
    logging.getLogger("cofa").setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, numeric_level))

    return handler
