"""Hand-drawn SVG charts"""
from .geometry import ArcSlice, arc_slices, area_path, scale_linear, smooth_path, y_domain
from .renderers import RENDERERS, render_chart

__all__ = [
    "ArcSlice",
    "RENDERERS",
    "arc_slices",
    "area_path",
    "render_chart",
    "scale_linear",
    "smooth_path",
    "y_domain",
]
