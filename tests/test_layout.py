"""
tests/test_layout
~~~~~~~~~~~~~~~~~
"""

import pytest

from oncoplot.plot import DEFAULT_STYLE, LayoutFlags, StyleConfig, plan_layout


@pytest.mark.api
def test_default_plan_panels():
    """
    Ensures the default flags yield top bar, matrix, side bar and a trailing legend.
    """
    plan = plan_layout(LayoutFlags())
    assert plan.kinds == ["top_bar", "side_bar_scale", "matrix", "side_bar", "legend"]
    assert plan.rows == ("top_bar", "matrix", "legend")
    assert plan.cols == ("main", "side_bar")
    assert "annotation" not in plan
    assert len(plan) == 5


@pytest.mark.api
def test_full_plan_order_and_positions():
    """
    Ensures every optional track lands in its grid cell, legend last.
    """
    flags = LayoutFlags(titv=True, expression=True, annotation=2, sample_labels=True)
    plan = plan_layout(flags)
    assert plan.kinds == [
        "expression_scale",
        "top_bar",
        "side_bar_scale",
        "expression",
        "matrix",
        "side_bar",
        "annotation",
        "titv",
        "titv_legend",
        "legend",
    ]
    matrix = plan.get("matrix")
    annotation = plan.get("annotation")
    titv = plan.get("titv")
    assert annotation.row == matrix.row + 1
    assert titv.row == annotation.row + 1
    assert annotation.col == matrix.col == 1
    assert plan.get("expression").col == 0
    legend = plan.panels[-1]
    assert legend.kind == "legend"
    assert legend.col == 0 and legend.col_span == 3
    assert legend.bbox[0] == 0.0 and legend.bbox[2] == pytest.approx(1.0)


@pytest.mark.api
def test_plan_without_bars():
    """
    Ensures disabling both bars drops their panels and scales.
    """
    plan = plan_layout(LayoutFlags(row_bar=False, col_bar=False, titv=True))
    assert plan.kinds == ["matrix", "titv", "legend"]
    assert plan.cols == ("main",)


@pytest.mark.api
def test_bbox_fractions_follow_relative_sizes():
    """
    Ensures grid boxes are proportional to the style's relative sizes and tile the figure.
    """
    plan = plan_layout(LayoutFlags())
    top_bar = plan.get("top_bar")
    matrix = plan.get("matrix")
    side_bar = plan.get("side_bar")
    assert top_bar.bbox == pytest.approx((0.0, 0.8, 0.8, 0.2))
    assert matrix.bbox == pytest.approx((0.0, 0.2, 0.8, 0.6))
    assert side_bar.bbox == pytest.approx((0.8, 0.2, 0.2, 0.6))
    assert plan.get("legend").bbox == pytest.approx((0.0, 0.0, 1.0, 0.2))
    assert sum(plan.heights) == pytest.approx(20.0)
    assert matrix.height == DEFAULT_STYLE["matrix_height"]


@pytest.mark.api
def test_margins_depend_on_flags():
    """
    Ensures matrix margins respond to sample labels and to the presence of both bars.
    """
    default = plan_layout(LayoutFlags()).get("matrix").margins
    assert default == (0.5, 5.0, 0.0, 3.0)
    labelled = plan_layout(LayoutFlags(sample_labels=True)).get("matrix").margins
    assert labelled[0] == DEFAULT_STYLE["barcode_mar"]
    bare = plan_layout(LayoutFlags(row_bar=False, col_bar=False)).get("matrix").margins
    assert bare == (0.5, 5.0, 2.5, 5.0)
    assert plan_layout(LayoutFlags()).get("legend").margins == (0.0, 0.5, 0.0, 0.0)


@pytest.mark.api
def test_style_overrides_change_plan():
    """
    Ensures style overrides reshape the grid and invalid overrides are refused.

    Raises:
        KeyError: If a style key is unknown.
        ValueError: If a relative size is not positive.
    """
    style = StyleConfig()
    style.update({"matrix_height": 4.0, "gene_mar": 8.0})
    plan = plan_layout(LayoutFlags(), style)
    assert plan.get("matrix").bbox[3] == pytest.approx(4.0 / 12.0)
    assert plan.get("matrix").margins[1] == 8.0
    with pytest.raises(KeyError):
        style.set("not_a_key", 1)
    style.set("legend_height", 0)
    with pytest.raises(ValueError):
        plan_layout(LayoutFlags(), style)


@pytest.mark.api
def test_plan_lookup_and_flag_validation():
    """
    Ensures unknown panel lookups and negative annotation counts raise.

    Raises:
        KeyError: If a panel kind is not planned.
        ValueError: If the annotation count is negative.
    """
    plan = plan_layout(LayoutFlags())
    with pytest.raises(KeyError):
        plan.get("titv")
    with pytest.raises(ValueError):
        LayoutFlags(annotation=-1)
