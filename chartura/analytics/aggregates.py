"""Aggregates over the fixed six-column schema."""
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from chartura.models import KpiCard, Row, finite


@dataclass
class Trend:
    rises: int
    falls: int
    flat: int

    @property
    def direction(self) -> str:
        if self.rises > self.falls:
            return "up"
        if self.falls > self.rises:
            return "down"
        return "flat"


def metric_values(rows: Sequence[Row], metric: str) -> List[float]:
    return [finite(r.get(metric)) for r in rows]


def total(rows: Sequence[Row], metric: str) -> float:
    return math.fsum(metric_values(rows, metric))


def average(rows: Sequence[Row], metric: str) -> float:
    if not rows:
        return 0.0
    return total(rows, metric) / len(rows)


def pct_change(a: float, b: float) -> float:
    """Percentage change from a to b; 0 when a is zero or not finite."""
    if not math.isfinite(a) or a == 0:
        return 0.0
    return finite((b - a) / a * 100)


def _extreme(rows: Sequence[Row], metric: str, better) -> Optional[Tuple[str, float]]:
    if not rows:
        return None
    best = rows[0]
    best_val = finite(best.get(metric))
    for row in rows[1:]:
        value = finite(row.get(metric))
        if better(value, best_val):
            best, best_val = row, value
    return best.period, best_val


def best_period(rows: Sequence[Row], metric: str = "revenue") -> Optional[Tuple[str, float]]:
    """First period holding the maximum value of ``metric``."""
    return _extreme(rows, metric, lambda v, cur: v > cur)


def worst_period(rows: Sequence[Row], metric: str = "revenue") -> Optional[Tuple[str, float]]:
    return _extreme(rows, metric, lambda v, cur: v < cur)


def growth(rows: Sequence[Row], metric: str = "revenue") -> float:
    if not rows:
        return 0.0
    return pct_change(finite(rows[0].get(metric)), finite(rows[-1].get(metric)))


def find_row(rows: Sequence[Row], period: str) -> Optional[Row]:
    wanted = period.strip().lower()
    for row in rows:
        if row.period.lower() == wanted:
            return row
    return None


def period_value(rows: Sequence[Row], period: str, metric: str) -> Optional[float]:
    row = find_row(rows, period)
    return finite(row.get(metric)) if row is not None else None


def supplier_totals(rows: Sequence[Row], metric: str = "revenue") -> Dict[str, float]:
    totals: Dict[str, float] = {}
    for row in rows:
        name = row.supplier or "Unknown"
        totals[name] = totals.get(name, 0.0) + finite(row.get(metric))
    return totals


def trend(rows: Sequence[Row], metric: str) -> Trend:
    values = metric_values(rows, metric)
    rises = falls = flat = 0
    for prev, cur in zip(values, values[1:]):
        if cur > prev:
            rises += 1
        elif cur < prev:
            falls += 1
        else:
            flat += 1
    return Trend(rises=rises, falls=falls, flat=flat)


def format_number(value: float) -> str:
    """Thousands separators and at most three fraction digits."""
    value = finite(value)
    if float(value).is_integer():
        return f"{int(value):,}"
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def kpi_cards(rows: Sequence[Row]) -> List[KpiCard]:
    best = best_period(rows, "revenue")
    return [
        KpiCard(label="Total Revenue", value=format_number(total(rows, "revenue")), hint="sum of all periods"),
        KpiCard(label="Best Year", value=best[0] if best else "", hint="by revenue"),
        KpiCard(label="Growth", value=f"{growth(rows, 'revenue'):.1f}%", hint="first → last"),
    ]
