"""Data models and schemas"""
from .models import (
    CHART_MODES,
    METRIC_KEYS,
    METRIC_LABELS,
    AskuraMemory,
    ChartContext,
    ChartMode,
    ChatMessage,
    KpiCard,
    MetricKey,
    Row,
    finite,
)

__all__ = [
    "CHART_MODES",
    "METRIC_KEYS",
    "METRIC_LABELS",
    "AskuraMemory",
    "ChartContext",
    "ChartMode",
    "ChatMessage",
    "KpiCard",
    "MetricKey",
    "Row",
    "finite",
]
