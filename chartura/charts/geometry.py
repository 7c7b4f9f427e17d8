"""Chart geometry: linear scales, smoothed paths and pie-slice arcs."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from chartura.charts.svg import fmt, num

Point = Tuple[float, float]

# Slices within this much of a full turn are drawn as a whole circle
_FULL_TURN_EPS = 1e-9


def scale_linear(domain_min: float, domain_max: float, range_min: float, range_max: float) -> Callable[[float], float]:
    """Map ``[domain_min, domain_max]`` linearly onto ``[range_min, range_max]``.

    A zero-width domain is treated as width 1 so the mapping stays finite.
    """
    d = (domain_max - domain_min) or 1
    r = range_max - range_min

    def scale(value: float) -> float:
        return range_min + ((num(value) - domain_min) / d) * r

    return scale


def y_domain(values: Sequence[float]) -> Tuple[float, float]:
    """Value domain anchored at zero: ``[min(values, 0), max(values)]``."""
    if not values:
        return 0.0, 1.0
    lo = min(min(values), 0.0)
    hi = max(values)
    if hi == lo:
        hi = lo + 1.0
    return lo, hi


def smooth_path(points: Sequence[Point]) -> str:
    """Quadratic-bezier path through the points.

    Each segment curves from the previous point towards the midpoint of the
    pair, and a final ``T`` command lands on the last point.
    """
    if not points:
        return ""
    commands: List[str] = []
    last = len(points) - 1
    for i, (x, y) in enumerate(points):
        if i == 0:
            commands.append(f"M {fmt(x)} {fmt(y)}")
            continue
        x0, y0 = points[i - 1]
        xm, ym = (x0 + x) / 2, (y0 + y) / 2
        commands.append(f"Q {fmt(x0)} {fmt(y0)}, {fmt(xm)} {fmt(ym)}")
        if i == last:
            commands.append(f"T {fmt(x)} {fmt(y)}")
    return " ".join(commands)


def area_path(points: Sequence[Point], baseline: float) -> str:
    """Smoothed path closed down to a horizontal baseline."""
    if not points:
        return ""
    first_x = points[0][0]
    last_x = points[-1][0]
    return f"{smooth_path(points)} L {fmt(last_x)} {fmt(baseline)} L {fmt(first_x)} {fmt(baseline)} Z"


@dataclass
class ArcSlice:
    index: int
    value: float
    fraction: float
    path: str
    label_x: float
    label_y: float


def arc_slices(values: Sequence[float], cx: float, cy: float, radius: float, label_offset: float = 14.0) -> List[ArcSlice]:
    """Pie slices clockwise from twelve o'clock; negative values count as zero.

    Returns an empty list when the values sum to zero. Zero-width slices get
    an empty path.
    """
    clean = [max(num(v), 0.0) for v in values]
    total = math.fsum(clean)
    if total <= 0:
        return []

    slices: List[ArcSlice] = []
    start = -math.pi / 2
    for i, value in enumerate(clean):
        angle = value / total * math.pi * 2
        end = start + angle
        mid = (start + end) / 2
        if angle <= 0:
            d = ""
        elif angle >= math.pi * 2 - _FULL_TURN_EPS:
            # SVG arcs cannot start and end on the same point.
            d = (
                f"M {fmt(cx)} {fmt(cy - radius)} "
                f"A {fmt(radius)} {fmt(radius)} 0 1 1 {fmt(cx)} {fmt(cy + radius)} "
                f"A {fmt(radius)} {fmt(radius)} 0 1 1 {fmt(cx)} {fmt(cy - radius)} Z"
            )
        else:
            large = 1 if angle > math.pi else 0
            x1, y1 = cx + radius * math.cos(start), cy + radius * math.sin(start)
            x2, y2 = cx + radius * math.cos(end), cy + radius * math.sin(end)
            d = (
                f"M {fmt(x1)} {fmt(y1)} A {fmt(radius)} {fmt(radius)} 0 {large} 1 {fmt(x2)} {fmt(y2)} "
                f"L {fmt(cx)} {fmt(cy)} Z"
            )
        slices.append(ArcSlice(
            index=i,
            value=value,
            fraction=value / total,
            path=d,
            label_x=cx + (radius + label_offset) * math.cos(mid),
            label_y=cy + (radius + label_offset) * math.sin(mid),
        ))
        start = end
    return slices
