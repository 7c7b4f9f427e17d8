"""Small helpers for building SVG markup as strings."""
from __future__ import annotations

import html
import math
from typing import Any, Iterable, Optional, Sequence, Tuple

SVG_NS = "http://www.w3.org/2000/svg"


def esc(text: Any) -> str:
    """Escape text for SVG interpolation."""
    return html.escape(str(text), quote=True)


def num(value: Any, default: float = 0.0) -> float:
    """Safe numeric coercion for SVG coordinates."""
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def fmt(value: Any) -> str:
    return f"{num(value):.2f}"


def _attrs(attrs: dict[str, Any]) -> str:
    parts = []
    for key, value in attrs.items():
        if value is None:
            continue
        name = key.rstrip("_").replace("_", "-")
        if isinstance(value, float):
            value = fmt(value)
        parts.append(f'{name}="{esc(value)}"')
    return " ".join(parts)


def element(tag: str, content: Optional[str] = None, **attrs: Any) -> str:
    attr_text = _attrs(attrs)
    opening = f"<{tag} {attr_text}" if attr_text else f"<{tag}"
    if content is None:
        return f"{opening}/>"
    return f"{opening}>{content}</{tag}>"


def text(x: float, y: float, content: Any, *, size: int = 11, fill: str = "#64748b",
         anchor: str = "start", weight: Optional[int] = None) -> str:
    return element(
        "text", esc(content),
        x=float(x), y=float(y), font_size=size, fill=fill, text_anchor=anchor, font_weight=weight,
    )


def line(x1: float, y1: float, x2: float, y2: float, *, stroke: str = "#cbd5e1",
         dash: Optional[str] = None, width: Optional[float] = None) -> str:
    return element(
        "line", x1=float(x1), y1=float(y1), x2=float(x2), y2=float(y2),
        stroke=stroke, stroke_dasharray=dash, stroke_width=width,
    )


def circle(cx: float, cy: float, r: float, *, fill: str, title: Optional[str] = None) -> str:
    content = element("title", esc(title)) if title is not None else None
    return element("circle", content, cx=float(cx), cy=float(cy), r=float(r), fill=fill)


def rect(x: float, y: float, width: float, height: float, *, fill: str, rx: Optional[float] = None,
         title: Optional[str] = None) -> str:
    content = element("title", esc(title)) if title is not None else None
    return element(
        "rect", content,
        x=float(x), y=float(y), width=float(max(width, 0.0)), height=float(max(height, 0.0)),
        rx=None if rx is None else float(rx), fill=fill,
    )


def path(d: str, **attrs: Any) -> str:
    return element("path", d=d, **attrs)


def linear_gradient(gradient_id: str, stops: Sequence[Tuple[str, str]], *, vertical: bool = False) -> str:
    inner = "".join(element("stop", offset=offset, stop_color=color) for offset, color in stops)
    x2, y2 = ("0", "1") if vertical else ("1", "0")
    return element("linearGradient", inner, id=gradient_id, x1="0", y1="0", x2=x2, y2=y2)


def document(width: int, height: int, parts: Iterable[str], *, label: str = "chart") -> str:
    """Wrap the given elements in a standalone SVG document."""
    body = "\n".join(p for p in parts if p)
    return (
        f'<svg xmlns="{SVG_NS}" viewBox="0 0 {width} {height}" width="{width}" height="{height}" '
        f'role="img" aria-label="{esc(label)}">\n{body}\n</svg>'
    )
