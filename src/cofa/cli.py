"""Точка входа CLI cofa: сгенерировать падения, кластеризовать, вывести отчёт."""

from __future__ import annotations

import argparse
import logging
import sys

from cofa import __version__

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cofa",
        description="Кластеризация падений Copilot-скиллов и поиск корневых причин",
    )
    parser.add_argument(
        "--count",
        type=int,
        default=None,
        help="Количество синтетических падений (переопределяет COFA_MOCK_EVENT_COUNT)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed генератора (переопределяет COFA_MOCK_SEED)",
    )
    parser.add_argument(
        "--min-cluster-size",
        type=int,
        default=None,
        help="Минимальный размер кластера (переопределяет COFA_MIN_CLUSTER_SIZE)",
    )
    parser.add_argument(
        "--severity",
        choices=["low", "medium", "high", "critical"],
        default=None,
        help="Показать только кластеры указанной срочности",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Уровень логирования (переопределяет COFA_LOG_LEVEL)",
    )
    parser.add_argument(
        "--output-format",
        choices=["text", "json"],
        default="text",
        help="Формат вывода (по умолчанию: text)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"cofa {__version__}",
    )
    return parser


def run(args: argparse.Namespace) -> int:
    """Собрать зависимости и построить отчёт. Возвращает код выхода."""
    # Отложенные импорты — чтобы --help работал быстро
    from cofa.config import load_settings
    from cofa.exceptions import ConfigurationError
    from cofa.logging_config import setup_logging
    from cofa.models.common import Severity
    from cofa.services.analytics_service import AnalyticsService

    # 1. Загрузка настроек
    overrides: dict[str, object] = {}
    if args.count is not None:
        overrides["mock_event_count"] = args.count
    if args.seed is not None:
        overrides["mock_seed"] = args.seed
    if args.min_cluster_size is not None:
        overrides["min_cluster_size"] = args.min_cluster_size
    try:
        settings = load_settings(**overrides)
    except ConfigurationError as exc:
        print(f"Ошибка конфигурации: {exc}", file=sys.stderr)
        return 2

    # 2. Настройка логирования
    setup_logging(args.log_level or settings.log_level)

    # 3. Снимок и фильтрация
    service = AnalyticsService(settings)
    snapshot = service.get_failure_analytics()
    severity = Severity(args.severity) if args.severity else None
    clusters = service.get_clusters(severity=severity)

    # 4. Вывод отчёта
    if args.output_format == "json":
        import json

        output = {
            "total_failures": snapshot.total_failures,
            "cluster_count": len(clusters),
            "clusters": [
                c.model_dump(mode="json", by_alias=True, exclude={"failure_logs"})
                for c in clusters
            ],
        }
        print(json.dumps(output, indent=2, ensure_ascii=False))
    else:
        _print_clusters(clusters, snapshot.total_failures)

    return 0


def _print_clusters(clusters: list[FailureCluster], total_failures: int) -> None:  # noqa: F821
    """Вывод кластеров в stdout, каждый в своей рамке."""

    print(
        f"=== Кластеры падений "
        f"({len(clusters)} кластеров из {total_failures} падений) ==="
    )
    print()

    if not clusters:
        print("Кластеры не найдены.")
        print()
        return

    for i, cluster in enumerate(clusters, 1):
        root_cause = cluster.root_cause
        lines = [
            f"Кластер #{i}: {cluster.name} ({cluster.failure_count} падений)",
            _normalize_single_line(cluster.summary),
            f"Причина: {root_cause.category.value} ({root_cause.confidence:.2f})"
            f" | Срочность: {cluster.severity.value}"
            f" | Тренд: {cluster.trend.value}",
            f"Период: {cluster.first_seen:%Y-%m-%d %H:%M} — {cluster.last_seen:%Y-%m-%d %H:%M}",
        ]
        if cluster.tags:
            lines.append(f"Теги: {', '.join(cluster.tags)}")
        if cluster.recommendations:
            lines.append("Рекомендации:")
            for step in cluster.recommendations:
                step_text = step if len(step) <= 80 else step[:77] + "..."
                lines.append(f"  -> {step_text}")

        for line in _render_box(lines):
            print(line)
        print()


def _normalize_single_line(value: str) -> str:
    """Схлопнуть переводы строк/табуляцию в одну строку для рамочного вывода."""
    return " ".join(value.replace("\t", " ").split())


def _render_box(lines: list[str]) -> list[str]:
    """Отрендерить список строк в Unicode-рамку."""
    if not lines:
        return []

    width = max(len(line) for line in lines)
    top = f"╔{'═' * (width + 2)}╗"
    bottom = f"╚{'═' * (width + 2)}╝"
    body = [f"║ {line.ljust(width)} ║" for line in lines]

    return [top, *body, bottom]


def main() -> None:
    """Точка входа консольного скрипта cofa."""
    parser = build_parser()
    args = parser.parse_args()
    sys.exit(run(args))


if __name__ == "__main__":
    main()
