"""cofa — аналитика падений Copilot-скиллов: кластеризация и корневые причины."""

__version__ = "0.1.0"
