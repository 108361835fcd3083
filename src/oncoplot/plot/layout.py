"""
oncoplot/plot/layout
~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from .style import Margins, StyleConfig

# Grid rows, top to bottom, and grid columns, left to right
ROW_KINDS = ("top_bar", "matrix", "annotation", "titv", "legend")
COL_KINDS = ("expression", "main", "side_bar")

_ROW_SIZE_KEYS = {
    "top_bar": "top_bar_height",
    "matrix": "matrix_height",
    "annotation": "annotation_height",
    "titv": "titv_height",
    "legend": "legend_height",
}
_COL_SIZE_KEYS = {
    "expression": "expression_width",
    "main": "main_width",
    "side_bar": "side_bar_width",
}


@dataclass(frozen=True)
class LayoutFlags:
    """
    Data class for the optional tracks of one oncoplot.

    Attributes:
        row_bar (bool): Per-gene side bar right of the matrix.
        col_bar (bool): Per-sample bar above the matrix.
        titv (bool): Transition/transversion track below the annotation.
        expression (bool): Per-gene expression bar left of the matrix.
        annotation (int): Number of annotation features (0 disables the track).
        sample_labels (bool): Sample names drawn below the bottom-most matrix panel.
    """

    row_bar: bool = True
    col_bar: bool = True
    titv: bool = False
    expression: bool = False
    annotation: int = 0
    sample_labels: bool = False

    def __post_init__(self) -> None:
        annotation = int(self.annotation)
        if annotation < 0:
            raise ValueError("annotation must be a non-negative feature count")
        object.__setattr__(self, "annotation", annotation)


@dataclass(frozen=True)
class PanelDescriptor:
    """
    Data class for one panel of the plan.

    Attributes:
        kind (str): Panel kind, e.g. "matrix" or "side_bar_scale".
        row (int): Grid row index.
        col (int): Grid column index of the leftmost spanned column.
        height (float): Relative height of the grid row.
        width (float): Relative width of the spanned columns.
        margins (Margins): Inner margins in text lines (bottom, left, top, right).
        bbox (Tuple[float, float, float, float]): Grid cell in figure coordinates
            [x0, y0, w, h]; margins apply inside it.
        col_span (int): Number of spanned grid columns.
    """

    kind: str
    row: int
    col: int
    height: float
    width: float
    margins: Margins
    bbox: Tuple[float, float, float, float]
    col_span: int = 1


@dataclass(frozen=True)
class PanelPlan:
    """
    Data class for the ordered panels of one oncoplot and the grid they sit on.
    """

    panels: Tuple[PanelDescriptor, ...]
    rows: Tuple[str, ...]
    cols: Tuple[str, ...]
    heights: Tuple[float, ...]
    widths: Tuple[float, ...]

    @property
    def kinds(self) -> List[str]:
        return [p.kind for p in self.panels]

    def get(self, kind: str) -> PanelDescriptor:
        """
        Returns the panel of a given kind.

        Raises:
            KeyError: If the plan has no such panel.
        """
        for panel in self.panels:
            if panel.kind == kind:
                return panel
        raise KeyError(f"No {kind!r} panel in plan. Available panels: {self.kinds}")

    def __contains__(self, kind: object) -> bool:
        return any(p.kind == kind for p in self.panels)

    def __iter__(self) -> Iterator[PanelDescriptor]:
        return iter(self.panels)

    def __len__(self) -> int:
        return len(self.panels)


def _panel_margins(kind: str, flags: LayoutFlags, style: StyleConfig) -> Margins:
    """
    Returns the inner margins of a panel kind under the given flags.
    """
    gene_mar = float(style["gene_mar"])
    bottom = float(style["barcode_mar"]) if flags.sample_labels else 0.5
    top = 0.0 if flags.col_bar else 2.5
    right = 3.0 if flags.row_bar else 5.0
    margins: Dict[str, Margins] = {
        "top_bar": (0.25, gene_mar, 2.0, right),
        "side_bar_scale": (0.25, 0.0, 1.0, 2.0),
        "expression_scale": (0.25, 1.0, 1.0, 0.0),
        "expression": (bottom, 1.0, top, 0.0),
        "matrix": (bottom, gene_mar, top, right),
        "side_bar": (bottom, 0.0, top, 1.0),
        "annotation": (0.0, gene_mar, 0.0, right),
        "titv": (0.0, gene_mar, 0.0, right),
        "titv_legend": (0.0, 0.0, 1.0, 6.0),
        "legend": (0.0, 0.5, 0.0, 0.0),
    }
    return margins[kind]


def _grid(flags: LayoutFlags) -> Tuple[List[str], List[str], List[Tuple[str, str, str]]]:
    """
    Resolves present rows, present columns, and (kind, row kind, column kind) panels.
    """
    rows = [
        kind
        for kind, present in zip(
            ROW_KINDS,
            (flags.col_bar, True, flags.annotation > 0, flags.titv, True),
        )
        if present
    ]
    cols = [
        kind
        for kind, present in zip(COL_KINDS, (flags.expression, True, flags.row_bar))
        if present
    ]

    cells: List[Tuple[str, str, str]] = []
    if flags.col_bar:
        if flags.expression:
            cells.append(("expression_scale", "top_bar", "expression"))
        cells.append(("top_bar", "top_bar", "main"))
        if flags.row_bar:
            cells.append(("side_bar_scale", "top_bar", "side_bar"))
    if flags.expression:
        cells.append(("expression", "matrix", "expression"))
    cells.append(("matrix", "matrix", "main"))
    if flags.row_bar:
        cells.append(("side_bar", "matrix", "side_bar"))
    if flags.annotation > 0:
        cells.append(("annotation", "annotation", "main"))
    if flags.titv:
        cells.append(("titv", "titv", "main"))
        if flags.row_bar:
            cells.append(("titv_legend", "titv", "side_bar"))
    # The legend spans every column
    cells.append(("legend", "legend", "*"))
    return rows, cols, cells


def plan_layout(flags: LayoutFlags, style: Optional[StyleConfig] = None) -> PanelPlan:
    """
    Computes the ordered panel plan for one oncoplot.

    Rows run top to bottom (top bar, matrix, annotation, TiTv, legend) and columns left
    to right (expression, main, side bar); panels are listed row by row. The legend is
    always the last panel.

    Args:
        flags (LayoutFlags): Optional tracks to include.
        style (Optional[StyleConfig]): Style providing relative sizes and margins.
            Defaults to the default style.

    Returns:
        PanelPlan: Panels with grid position, relative size, margins and figure bbox.
    """
    style = style if style is not None else StyleConfig()
    rows, cols, cells = _grid(flags)
    heights = [style.size(_ROW_SIZE_KEYS[r]) for r in rows]
    widths = [style.size(_COL_SIZE_KEYS[c]) for c in cols]
    total_h, total_w = sum(heights), sum(widths)

    # Cursor walks: rows downward from the top edge, columns rightward from the left edge
    row_y: Dict[str, Tuple[float, float]] = {}
    y_cursor = 1.0
    for kind, h in zip(rows, heights):
        y0 = y_cursor - h / total_h
        row_y[kind] = (y0, h / total_h)
        y_cursor = y0
    col_x: Dict[str, Tuple[float, float]] = {}
    x_cursor = 0.0
    for kind, w in zip(cols, widths):
        col_x[kind] = (x_cursor, w / total_w)
        x_cursor += w / total_w

    panels: List[PanelDescriptor] = []
    for kind, row_kind, col_kind in cells:
        row = rows.index(row_kind)
        y0, h = row_y[row_kind]
        if col_kind == "*":
            col, span, x0, w, width = 0, len(cols), 0.0, 1.0, total_w
        else:
            col, span = cols.index(col_kind), 1
            x0, w = col_x[col_kind]
            width = widths[col]
        panels.append(
            PanelDescriptor(
                kind=kind,
                row=row,
                col=col,
                height=heights[row],
                width=width,
                margins=_panel_margins(kind, flags, style),
                bbox=(x0, y0, w, h),
                col_span=span,
            )
        )

    return PanelPlan(
        panels=tuple(panels),
        rows=tuple(rows),
        cols=tuple(cols),
        heights=tuple(heights),
        widths=tuple(widths),
    )
