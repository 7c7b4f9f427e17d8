"""Aggregates and KPI cards"""
from .aggregates import (
    Trend,
    average,
    best_period,
    find_row,
    format_number,
    growth,
    kpi_cards,
    metric_values,
    pct_change,
    period_value,
    supplier_totals,
    total,
    trend,
    worst_period,
)

__all__ = [
    "Trend",
    "average",
    "best_period",
    "find_row",
    "format_number",
    "growth",
    "kpi_cards",
    "metric_values",
    "pct_change",
    "period_value",
    "supplier_totals",
    "total",
    "trend",
    "worst_period",
]
