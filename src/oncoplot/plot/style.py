"""
oncoplot/plot/style
~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Sequence, Tuple, TypedDict, TypeAlias, Union

from matplotlib.colors import Colormap

# Type alias for style values
StyleValue: TypeAlias = Union[
    str,
    float,
    int,
    bool,
    None,
    Sequence[float],
    Sequence[str],
    Mapping[str, float],
    Colormap,
]

# Panel margins in text lines: (bottom, left, top, right)
Margins: TypeAlias = Tuple[float, float, float, float]


class StyleDefaults(TypedDict):
    """
    Type class for oncoplot style defaults.

    Sizes, margins, "bg_color", "na_color", "fallback_color" and
    "numeric_annotation_cmap" feed layout planning and color assignment. Grid line
    widths, "border_color", "bar_color", font sizes, legend settings, "show_title" and
    the "highlight_*" marker settings are read by renderers only.
    """

    figsize: Tuple[float, float]
    top_bar_height: float
    matrix_height: float
    annotation_height: float
    titv_height: float
    legend_height: float
    expression_width: float
    main_width: float
    side_bar_width: float
    gene_mar: float
    barcode_mar: float
    sepwd_genes: float
    sepwd_samples: float
    bg_color: str
    border_color: str
    na_color: str
    fallback_color: str
    bar_color: str
    numeric_annotation_cmap: Union[str, Colormap]
    font_size: float
    sample_name_font_size: float
    title_font_size: float
    legend_font_size: float
    annotation_font_size: float
    legend_ncol: int
    annotation_legend_rows: int
    show_title: bool
    highlight_marker: str
    highlight_color: str
    highlight_size: float


DEFAULT_STYLE: StyleDefaults = {
    "figsize": (12, 7),
    # Relative panel heights (grid rows)
    "top_bar_height": 4.0,
    "matrix_height": 12.0,
    "annotation_height": 1.0,
    "titv_height": 2.5,
    "legend_height": 4.0,
    # Relative panel widths (grid columns)
    "expression_width": 1.0,
    "main_width": 4.0,
    "side_bar_width": 1.0,
    # Margins reserved for gene names (left) and sample names (bottom), in lines
    "gene_mar": 5.0,
    "barcode_mar": 4.0,
    # Grid line widths between matrix cells
    "sepwd_genes": 0.5,
    "sepwd_samples": 0.25,
    "bg_color": "#f5f5f5",
    "border_color": "white",
    "na_color": "#f2f2f2",
    "fallback_color": "#808080",
    # Significance and expression bars
    "bar_color": "#f2f2f2",
    "numeric_annotation_cmap": "YlOrBr",
    "font_size": 0.8,
    "sample_name_font_size": 1.0,
    "title_font_size": 1.5,
    "legend_font_size": 1.2,
    "annotation_font_size": 1.2,
    "legend_ncol": 2,
    # Levels per legend column before an annotation legend wraps
    "annotation_legend_rows": 4,
    "show_title": True,
    # Marker drawn on highlighted cells
    "highlight_marker": "o",
    "highlight_color": "white",
    "highlight_size": 0.9,
}


class StyleConfig:
    """
    Class for storing oncoplot style defaults and overrides.
    """

    def __init__(self, defaults: Optional[Mapping[str, StyleValue]] = None) -> None:
        """
        Initializes the StyleConfig instance.

        Args:
            defaults (Optional[Mapping[str, StyleValue]]): Base style defaults. Defaults to None.
        """
        if defaults is None:
            defaults = DEFAULT_STYLE
        self._defaults: Dict[str, StyleValue] = dict(defaults)
        self._overrides: Dict[str, StyleValue] = {}

    def get(self, key: str, default: Optional[StyleValue] = None) -> StyleValue:
        """
        Gets a style value, overrides first.
        """
        if key in self._overrides:
            return self._overrides[key]
        return self._defaults.get(key, default)

    def set(self, key: str, value: StyleValue) -> None:
        """
        Overrides a style value.

        Args:
            key (str): Style key.
            value (StyleValue): Style value to set.

        Raises:
            KeyError: If the key is not a known style key.
        """
        if key not in self._defaults:
            raise KeyError(f"Unknown style key {key!r}")
        self._overrides[key] = value

    def update(self, overrides: Mapping[str, StyleValue]) -> None:
        """
        Applies multiple overrides at once.

        Args:
            overrides (Mapping[str, StyleValue]): Mapping of style keys to values.

        Raises:
            KeyError: If any key is not a known style key.
        """
        unknown = [k for k in overrides if k not in self._defaults]
        if unknown:
            raise KeyError(f"Unknown style key(s) {unknown}")
        self._overrides.update(overrides)

    def size(self, key: str) -> float:
        """
        Returns a relative panel size as a positive float.

        Raises:
            ValueError: If the configured size is not positive.
        """
        value = float(self.get(key))
        if value <= 0:
            raise ValueError(f"Style size {key!r} must be positive (got {value})")
        return value

    def as_dict(self) -> Dict[str, StyleValue]:
        """
        Returns a merged view of defaults and overrides.

        Returns:
            Dict[str, StyleValue]: Merged style dictionary.
        """
        merged = dict(self._defaults)
        merged.update(self._overrides)
        return merged

    def __getitem__(self, key: str) -> StyleValue:
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._overrides or key in self._defaults
