import re

import pytest

from chartura.charts import arc_slices, area_path, render_chart, scale_linear, smooth_path, y_domain
from chartura.data import default_rows
from chartura.models import CHART_MODES, ChartContext, Row


def test_scale_linear():
    assert scale_linear(0, 10, 0, 100)(5) == 50
    assert scale_linear(0, 10, 100, 0)(10) == 0
    # zero-width domain is treated as width 1
    assert scale_linear(5, 5, 0, 100)(6) == 100


def test_y_domain_is_anchored_at_zero():
    assert y_domain([3, 9]) == (0, 9)
    assert y_domain([-4, 2]) == (-4, 2)
    assert y_domain([]) == (0, 1)
    assert y_domain([0, 0]) == (0, 1)


def test_smooth_path():
    assert smooth_path([]) == ""
    assert smooth_path([(1, 2)]) == "M 1.00 2.00"
    assert smooth_path([(0, 0), (10, 10), (20, 0)]) == (
        "M 0.00 0.00 Q 0.00 0.00, 5.00 5.00 Q 10.00 10.00, 15.00 5.00 T 20.00 0.00"
    )


def test_area_path_closes_to_baseline():
    d = area_path([(0, 0), (10, 10)], 50)
    assert d.startswith("M 0.00 0.00")
    assert d.endswith("L 10.00 50.00 L 0.00 50.00 Z")
    assert area_path([], 50) == ""


def test_arc_slices_half_and_half():
    first, second = arc_slices([1, 1], 0, 0, 10)
    assert first.fraction == second.fraction == 0.5
    assert first.path == "M 0.00 -10.00 A 10.00 10.00 0 0 1 0.00 10.00 L 0.00 0.00 Z"


def test_arc_slices_large_arc_flag():
    big, small = arc_slices([3, 1], 0, 0, 10)
    assert " 0 1 1 " in big.path
    assert " 0 0 1 " in small.path


def test_single_slice_is_a_full_circle():
    (only,) = arc_slices([5], 50, 50, 10)
    assert only.fraction == 1
    assert only.path.count(" A ") == 2


def test_arc_slices_edge_cases():
    assert arc_slices([0, 0], 0, 0, 10) == []
    negative, positive = arc_slices([-5, 5], 0, 0, 10)
    assert negative.path == ""
    assert negative.fraction == 0
    assert positive.fraction == 1


@pytest.mark.parametrize("mode", CHART_MODES)
def test_every_mode_renders_finite_svg(mode):
    svg = render_chart(default_rows(), ChartContext(mode=mode))
    assert svg.startswith("<svg")
    assert svg.endswith("</svg>")
    assert not re.search(r"\b(nan|inf)\b", svg)


@pytest.mark.parametrize("mode", CHART_MODES)
def test_no_rows_renders_placeholder(mode):
    assert "No data" in render_chart([], ChartContext(mode=mode))


def test_line_chart_labels_and_points():
    svg = render_chart(default_rows(), ChartContext(mode="line"))
    for year in ("2020", "2025"):
        assert f">{year}<" in svg
    assert "<title>2025: 590</title>" in svg
    assert svg.count("<circle") == 6


def test_secondary_series_overlay():
    svg = render_chart(default_rows(), ChartContext(mode="line", y_b="units", secondary_on=True))
    assert 'stroke-dasharray="6 4"' in svg
    assert "units (right)" in svg


def test_secondary_ignored_when_switched_off():
    svg = render_chart(default_rows(), ChartContext(mode="line", y_b="units", secondary_on=False))
    assert 'stroke-dasharray="6 4"' not in svg


def test_bar_chart_draws_one_bar_per_row():
    svg = render_chart(default_rows(), ChartContext(mode="bar", y_a="units"))
    assert svg.count("<rect") == 6
    assert "<title>2020: 240</title>" in svg


def test_dual_defaults_secondary_metric():
    assert "units (right)" in render_chart(default_rows(), ChartContext(mode="dual"))
    assert "revenue (right)" in render_chart(default_rows(), ChartContext(mode="dual", y_a="units"))


def test_scatter_plots_metric_against_metric():
    svg = render_chart(default_rows(), ChartContext(mode="scatter", y_b="units", secondary_on=True))
    assert "revenue vs units" in svg
    assert svg.count("<circle") == 6


def test_pie_is_supplier_donut():
    svg = render_chart(default_rows(), ChartContext(mode="pie"))
    for name in ("Northstar", "BluePeak", "Skyline", "Total", "2,620"):
        assert name in svg
    assert "chartura-donut-hole" in svg


def test_pie_with_zero_total_has_no_data():
    rows = [Row(period="2020", revenue=0, supplier="A")]
    assert "No data" in render_chart(rows, ChartContext(mode="pie"))


def test_text_is_escaped():
    rows = [Row(period="<b>&", revenue=1, supplier="A&B")]
    svg = render_chart(rows, ChartContext(mode="bar"), title='Q1 "<script>"')
    assert "<b>" not in svg
    assert "&lt;b&gt;&amp;" in svg
    assert "&lt;script&gt;" in svg


def test_unknown_mode_is_rejected():
    with pytest.raises(ValueError):
        ChartContext(mode="radar")  # type: ignore[arg-type]
