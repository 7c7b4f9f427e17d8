"""SVG renderers, one per chart mode."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from chartura.analytics import format_number, metric_values, supplier_totals
from chartura.charts import svg
from chartura.charts.geometry import Point, arc_slices, area_path, scale_linear, smooth_path, y_domain
from chartura.models import METRIC_LABELS, ChartContext, Row

logger = logging.getLogger(__name__)

WIDTH, HEIGHT = 720, 320
PAD_L, PAD_R, PAD_T, PAD_B = 56, 24, 40, 42
# Right padding when a secondary axis is drawn
PAD_R_SECONDARY = 56
GRID_TICKS = 4

PIE_WIDTH, PIE_HEIGHT = 360, 280

PRIMARY = "#0ea5e9"
SECONDARY = "#f59e0b"
PALETTE = ("#0ea5e9", "#6366f1", "#06b6d4", "#22c55e", "#f59e0b", "#ef4444", "#a855f7", "#14b8a6")


@dataclass
class _Frame:
    """Plot area of the cartesian charts."""

    count: int
    pad_r: int = PAD_R

    @property
    def plot_w(self) -> float:
        return WIDTH - PAD_L - self.pad_r

    @property
    def plot_h(self) -> float:
        return HEIGHT - PAD_T - PAD_B

    @property
    def bottom(self) -> float:
        return PAD_T + self.plot_h

    @property
    def right(self) -> float:
        return PAD_L + self.plot_w

    def x_index(self) -> Callable[[float], float]:
        return scale_linear(0, max(self.count - 1, 1), PAD_L, self.right)

    def y_scale(self, lo: float, hi: float) -> Callable[[float], float]:
        return scale_linear(lo, hi, self.bottom, PAD_T)


def _label(metric: str) -> str:
    return METRIC_LABELS.get(metric, metric)


def _title(title: Optional[str]) -> str:
    return svg.text(PAD_L, 22, title, size=14, fill="#334155", weight=600) if title else ""


def _no_data(width: int, height: int, title: Optional[str]) -> str:
    return svg.document(
        width, height,
        [_title(title), svg.text(width / 2, height / 2, "No data", size=14, fill="#9ca3af", anchor="middle")],
        label=title or "No data",
    )


def _grid_and_axes(frame: _Frame, lo: float, hi: float, y: Callable[[float], float]) -> List[str]:
    parts = []
    for i in range(GRID_TICKS + 1):
        value = lo + i / GRID_TICKS * (hi - lo)
        gy = y(value)
        parts.append(svg.line(PAD_L, gy, frame.right, gy, stroke="#e5e7eb", dash="4 4"))
        parts.append(svg.text(PAD_L - 8, gy + 4, format_number(round(value, 2)), anchor="end"))
    parts.append(svg.line(PAD_L, PAD_T, PAD_L, frame.bottom))
    parts.append(svg.line(PAD_L, frame.bottom, frame.right, frame.bottom))
    return parts


def _right_axis(frame: _Frame, lo: float, hi: float, y: Callable[[float], float]) -> List[str]:
    parts = [svg.line(frame.right, PAD_T, frame.right, frame.bottom)]
    for i in range(GRID_TICKS + 1):
        value = lo + i / GRID_TICKS * (hi - lo)
        parts.append(svg.text(frame.right + 8, y(value) + 4, format_number(round(value, 2)), fill=SECONDARY))
    return parts


def _x_labels(xs: Sequence[float], labels: Sequence[str], frame: _Frame) -> List[str]:
    return [svg.text(x, frame.bottom + 18, label, anchor="middle") for x, label in zip(xs, labels)]


def _legend(primary: str, secondary: Optional[str]) -> List[str]:
    x = WIDTH - PAD_R
    if secondary:
        return [
            svg.text(x, 22, f"{_label(primary)} (left) · {_label(secondary)} (right)", anchor="end"),
        ]
    return [svg.text(x, 22, _label(primary), anchor="end")]


def _secondary_line(rows: Sequence[Row], metric: str, xs: Sequence[float], frame: _Frame) -> List[str]:
    values = metric_values(rows, metric)
    lo, hi = y_domain(values)
    y2 = frame.y_scale(lo, hi)
    points: List[Point] = [(x, y2(v)) for x, v in zip(xs, values)]
    parts = _right_axis(frame, lo, hi, y2)
    parts.append(svg.path(smooth_path(points), stroke=SECONDARY, stroke_width=2, stroke_dasharray="6 4", fill="none"))
    parts.extend(svg.circle(x, y, 3, fill=SECONDARY) for x, y in points)
    return parts


def _gradients() -> str:
    return svg.element(
        "defs",
        svg.linear_gradient("chartura-line", [("0%", "#0ea5e9"), ("100%", "#6366f1")])
        + svg.linear_gradient(
            "chartura-fill", [("0%", "rgba(14,165,233,0.28)"), ("100%", "rgba(99,102,241,0.00)")], vertical=True
        ),
    )


def _render_curve(rows: Sequence[Row], context: ChartContext, title: Optional[str], *, filled: bool) -> str:
    secondary = context.secondary
    frame = _Frame(count=len(rows), pad_r=PAD_R_SECONDARY if secondary else PAD_R)
    values = metric_values(rows, context.y_a)
    lo, hi = y_domain(values)
    x, y = frame.x_index(), frame.y_scale(lo, hi)
    xs = [x(i) for i in range(len(rows))]
    points: List[Point] = [(px, y(v)) for px, v in zip(xs, values)]

    parts = [_gradients(), _title(title), *_legend(context.y_a, secondary), *_grid_and_axes(frame, lo, hi, y)]
    parts.append(svg.path(area_path(points, frame.bottom), fill="url(#chartura-fill)", fill_opacity=1 if filled else 0.5))
    parts.append(svg.path(smooth_path(points), stroke="url(#chartura-line)", stroke_width=3, fill="none"))
    if not filled:
        parts.extend(
            svg.circle(px, py, 3.5, fill=PRIMARY, title=f"{r.period}: {format_number(v)}")
            for (px, py), r, v in zip(points, rows, values)
        )
    parts.extend(_x_labels(xs, [r.period for r in rows], frame))
    if secondary:
        parts.extend(_secondary_line(rows, secondary, xs, frame))
    return svg.document(WIDTH, HEIGHT, parts, label=title or f"{_label(context.y_a)} by period")


def render_line(rows: Sequence[Row], context: ChartContext, title: Optional[str] = None) -> str:
    if not rows:
        return _no_data(WIDTH, HEIGHT, title)
    return _render_curve(rows, context, title, filled=False)


def render_area(rows: Sequence[Row], context: ChartContext, title: Optional[str] = None) -> str:
    if not rows:
        return _no_data(WIDTH, HEIGHT, title)
    return _render_curve(rows, context, title, filled=True)


def render_bar(rows: Sequence[Row], context: ChartContext, title: Optional[str] = None) -> str:
    if not rows:
        return _no_data(WIDTH, HEIGHT, title)
    secondary = context.secondary
    frame = _Frame(count=len(rows), pad_r=PAD_R_SECONDARY if secondary else PAD_R)
    values = metric_values(rows, context.y_a)
    lo, hi = y_domain(values)
    y = frame.y_scale(lo, hi)
    band = frame.plot_w / len(rows)
    bar_w = band * 0.6
    centers = [PAD_L + band * (i + 0.5) for i in range(len(rows))]
    baseline = y(0)

    parts = [_title(title), *_legend(context.y_a, secondary), *_grid_and_axes(frame, lo, hi, y)]
    for cx, row, value in zip(centers, rows, values):
        top = y(value)
        parts.append(svg.rect(
            cx - bar_w / 2, min(top, baseline), bar_w, abs(baseline - top),
            fill=PRIMARY, rx=4, title=f"{row.period}: {format_number(value)}",
        ))
    parts.extend(_x_labels(centers, [r.period for r in rows], frame))
    if secondary:
        parts.extend(_secondary_line(rows, secondary, centers, frame))
    return svg.document(WIDTH, HEIGHT, parts, label=title or f"{_label(context.y_a)} by period")


def render_scatter(rows: Sequence[Row], context: ChartContext, title: Optional[str] = None) -> str:
    """yA against yB when the secondary metric is on, otherwise yA against period order."""
    if not rows:
        return _no_data(WIDTH, HEIGHT, title)
    frame = _Frame(count=len(rows))
    y_metric = context.y_a
    ys = metric_values(rows, y_metric)
    y_lo, y_hi = y_domain(ys)
    y = frame.y_scale(y_lo, y_hi)

    parts = [_title(title), *_grid_and_axes(frame, y_lo, y_hi, y)]
    x_metric = context.secondary
    if x_metric:
        xs_raw = metric_values(rows, x_metric)
        x_lo, x_hi = y_domain(xs_raw)
        x = scale_linear(x_lo, x_hi, PAD_L, frame.right)
        xs = [x(v) for v in xs_raw]
        for i in range(GRID_TICKS + 1):
            value = x_lo + i / GRID_TICKS * (x_hi - x_lo)
            parts.append(svg.text(x(value), frame.bottom + 18, format_number(round(value, 2)), anchor="middle"))
        parts.append(svg.text(WIDTH - PAD_R, 22, f"{_label(y_metric)} vs {_label(x_metric)}", anchor="end"))
    else:
        x = frame.x_index()
        xs = [x(i) for i in range(len(rows))]
        parts.extend(_x_labels(xs, [r.period for r in rows], frame))
        parts.extend(_legend(y_metric, None))

    for px, row, value in zip(xs, rows, ys):
        parts.append(svg.circle(px, y(value), 5, fill=PRIMARY, title=f"{row.period}: {format_number(value)}"))
    return svg.document(WIDTH, HEIGHT, parts, label=title or f"{_label(y_metric)} scatter")


def render_dual(rows: Sequence[Row], context: ChartContext, title: Optional[str] = None) -> str:
    """Two series on independent left and right axes."""
    if not rows:
        return _no_data(WIDTH, HEIGHT, title)
    y_b = context.y_b if context.y_b and context.y_b != context.y_a else None
    if y_b is None:
        y_b = "revenue" if context.y_a == "units" else "units"
    dual = ChartContext(mode="line", y_a=context.y_a, y_b=y_b, secondary_on=True)
    return _render_curve(rows, dual, title, filled=False)


def render_pie(rows: Sequence[Row], context: ChartContext, title: Optional[str] = None) -> str:
    """Donut of supplier totals for the primary metric."""
    totals = supplier_totals(rows, context.y_a)
    labels = list(totals)
    cx, cy = PIE_WIDTH / 2, PIE_HEIGHT / 2
    outer = min(PIE_WIDTH, PIE_HEIGHT) * 0.42
    inner = outer * 0.58
    slices = arc_slices([totals[k] for k in labels], cx, cy, outer)
    if not slices:
        return _no_data(PIE_WIDTH, PIE_HEIGHT, title)

    total_value = sum(s.value for s in slices)
    mask = svg.element(
        "mask",
        svg.rect(0, 0, PIE_WIDTH, PIE_HEIGHT, fill="white") + svg.circle(cx, cy, inner, fill="black"),
        id="chartura-donut-hole",
    )
    wedges = "".join(
        svg.path(s.path, fill=PALETTE[s.index % len(PALETTE)], opacity=0.95)
        for s in slices if s.path
    )
    parts = [
        svg.element("defs", mask),
        svg.element("g", wedges, mask="url(#chartura-donut-hole)"),
        svg.text(cx, cy - 2, "Total", size=14, fill="#0f172a", anchor="middle"),
        svg.text(cx, cy + 16, format_number(total_value), size=16, fill="#0f172a", anchor="middle", weight=600),
    ]
    if title:
        parts.append(svg.text(12, 20, title, size=13, fill="#334155", weight=600))
    for s in slices:
        if s.value <= 0:
            continue
        color = PALETTE[s.index % len(PALETTE)]
        parts.append(svg.circle(s.label_x, s.label_y, 3, fill=color))
        parts.append(svg.text(s.label_x + 6, s.label_y + 4, labels[s.index], fill="#334155"))
    return svg.document(PIE_WIDTH, PIE_HEIGHT, parts, label=title or f"{_label(context.y_a)} share by supplier")


RENDERERS: Dict[str, Callable[[Sequence[Row], ChartContext, Optional[str]], str]] = {
    "line": render_line,
    "area": render_area,
    "bar": render_bar,
    "scatter": render_scatter,
    "dual": render_dual,
    "pie": render_pie,
}


def render_chart(rows: Sequence[Row], context: ChartContext, title: Optional[str] = None) -> str:
    """Render ``rows`` as an SVG document for ``context.mode``."""
    renderer = RENDERERS.get(context.mode)
    if renderer is None:
        raise ValueError(f"Unknown chart mode: {context.mode}")
    logger.debug("Rendering %s chart of %s for %d rows", context.mode, context.y_a, len(rows))
    return renderer(rows, context, title)
