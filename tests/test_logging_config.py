"""Тесты настройки логирования."""

from __future__ import annotations

import io
import logging

import pytest

from cofa.logging_config import QUIET_LOGGERS, setup_logging


@pytest.fixture(autouse=True)
def _restore_logging():
    """Вернуть корневой и пакетный логгеры в исходное состояние после теста."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    names = ("cofa", *QUIET_LOGGERS)
    levels = {name: logging.getLogger(name).level for name in names}
    root_level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(root_level)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)


def _cofa_handlers() -> list[logging.Handler]:
    return [h for h in logging.getLogger().handlers if h.get_name() == "cofa"]


def test_repeated_setup_keeps_single_handler() -> None:
    setup_logging("INFO")
    setup_logging("DEBUG")

    assert len(_cofa_handlers()) == 1
    assert logging.getLogger("cofa").level == logging.DEBUG


def test_foreign_handlers_are_preserved() -> None:
    foreign = logging.NullHandler()
    logging.getLogger().addHandler(foreign)

    setup_logging("INFO")

    assert foreign in logging.getLogger().handlers


def test_http_loggers_are_quieted() -> None:
    setup_logging("DEBUG")

    for name in QUIET_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING


def test_unknown_level_falls_back_to_info() -> None:
    setup_logging("verbose")

    assert logging.getLogger("cofa").level == logging.INFO


def test_records_use_pipe_format() -> None:
    stream = io.StringIO()
    setup_logging("INFO", stream=stream)

    logging.getLogger("cofa.services.clustering_service").info("Кластеров: %d", 4)

    line = stream.getvalue().strip()
    assert line.endswith("| INFO    | cofa.services.clustering_service | Кластеров: 4")
