"""
oncoplot/core/colors
~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union, TYPE_CHECKING

import numpy as np
import pandas as pd
import matplotlib
from matplotlib.colors import Colormap, ListedColormap, Normalize, hsv_to_rgb, to_hex

if TYPE_CHECKING:
    from .alteration import Alteration

NA_LABEL = "NA"
NA_COLOR = "#f2f2f2"
FALLBACK_COLOR = "#808080"
BACKGROUND_COLOR = "#f5f5f5"

# Classic variant-classification palette
VARIANT_COLORS: Dict[str, str] = {
    "Nonstop_Mutation": "#A6CEE3",
    "Frame_Shift_Del": "#1F78B4",
    "IGR": "#B2DF8A",
    "Missense_Mutation": "#33A02C",
    "Silent": "#FB9A99",
    "Nonsense_Mutation": "#E31A1C",
    "RNA": "#FDBF6F",
    "Splice_Site": "#FF7F00",
    "Intron": "#CAB2D6",
    "Frame_Shift_Ins": "#6A3D9A",
    "In_Frame_Del": "#9E0142",
    "ITD": "#D53E4F",
    "In_Frame_Ins": "#F46D43",
    "Translation_Start_Site": "#000000",
    "Multi_Hit": "#EE82EE",
    "Amp": "#4169E1",
    "Del": "#7B3294",
    "Complex_Event": "#C2A5CF",
}

# Transition/transversion classes (complements folded)
TITV_COLORS: Dict[str, str] = {
    "C>T": "#F44336",
    "C>G": "#3F51B5",
    "C>A": "#2196F3",
    "T>A": "#4CAF50",
    "T>C": "#FFC107",
    "T>G": "#FF9800",
}

QUALITATIVE_PALETTES: Tuple[str, ...] = (
    "Set1",
    "Dark2",
    "Set2",
    "Paired",
    "tab20",
    "tab20b",
    "tab20c",
)

_GOLDEN_RATIO = 0.618033988749895


def normalize_color(color) -> str:
    """
    Normalizes any Matplotlib color specification to lowercase "#rrggbb".

    Raises:
        ValueError: If the color cannot be interpreted.
    """
    return to_hex(color, keep_alpha=False).lower()


def is_missing(label) -> bool:
    """True for None, NaN, and the literal "NA" label."""
    if label is None:
        return True
    if isinstance(label, str):
        return label == NA_LABEL
    try:
        return bool(pd.isna(label))
    except (TypeError, ValueError):
        return False


class ColorTable(MappingABC):
    """
    Class for a read-only label → color mapping, total over the labels it was built for.
    """

    def __init__(
        self,
        colors: Mapping[str, str],
        *,
        na_color: str = NA_COLOR,
        fallback_color: str = FALLBACK_COLOR,
        background: str = BACKGROUND_COLOR,
    ) -> None:
        self._colors: Dict[str, str] = dict(colors)
        self.na_color = normalize_color(na_color)
        self.fallback_color = normalize_color(fallback_color)
        self.background = normalize_color(background)

    def __getitem__(self, label: str) -> str:
        return self._colors[label]

    def __iter__(self) -> Iterator[str]:
        return iter(self._colors)

    def __len__(self) -> int:
        return len(self._colors)

    def color_for(self, label) -> str:
        """
        Returns the color of a label, never failing.

        Args:
            label: Category label. Missing values resolve to the NA color.

        Returns:
            str: Mapped color, NA color, or the fallback color for unmapped labels.
        """
        if is_missing(label):
            return self.na_color
        return self._colors.get(str(label), self.fallback_color)

    def alteration_colors(
        self,
        alteration: Alteration,
        *,
        background: Optional[str] = None,
    ) -> Tuple[str, Optional[str]]:
        """
        Returns the (fill, mark) colors of one matrix cell.

        Mutation-only cells are filled with the mutation color. Copy-number-only cells
        keep the background fill with a copy-number mark. Composite cells are filled
        with the copy-number color and marked with the mutation color.

        Args:
            alteration (Alteration): Parsed cell contents.

        Kwargs:
            background (Optional[str]): Fill of cells without a mutation. Defaults to the
                table background.

        Returns:
            Tuple[str, Optional[str]]: Fill color and optional inset mark color.
        """
        background = self.background if background is None else normalize_color(background)
        if alteration.is_composite:
            return self.color_for(alteration.copy_number), self.color_for(alteration.mutation)
        if alteration.mutation is not None:
            return self.color_for(alteration.mutation), None
        if alteration.copy_number is not None:
            return background, self.color_for(alteration.copy_number)
        return background, None

    def listed_colormap(
        self,
        labels: Sequence[str],
        *,
        background: Optional[str] = None,
    ) -> ListedColormap:
        """
        Builds a colormap indexed by category code.

        Args:
            labels (Sequence[str]): Labels in code order (code 1 first).

        Kwargs:
            background (Optional[str]): Color of code 0. Defaults to the table background.

        Returns:
            ListedColormap: Colormap with `len(labels) + 1` entries.
        """
        background = self.background if background is None else normalize_color(background)
        colors = [background] + [self.color_for(lab) for lab in labels]
        return ListedColormap(colors)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._colors)

    def __repr__(self) -> str:
        return f"ColorTable({self._colors!r})"


class ColorAssigner:
    """
    Class for deterministic, collision-free color assignment to category labels.

    Resolution order per label: caller override, built-in palette (when its color is
    not already claimed), then generated colors. "NA" always resolves to the NA color.
    """

    def __init__(
        self,
        overrides: Optional[Mapping[str, str]] = None,
        *,
        builtin: Optional[Mapping[str, str]] = None,
        palettes: Sequence[str] = QUALITATIVE_PALETTES,
        na_color: str = NA_COLOR,
        fallback_color: str = FALLBACK_COLOR,
        background: str = BACKGROUND_COLOR,
    ) -> None:
        """
        Initializes the ColorAssigner instance.

        Args:
            overrides (Optional[Mapping[str, str]]): Caller-supplied label → color map.
                Defaults to None.

        Kwargs:
            builtin (Optional[Mapping[str, str]]): Built-in palette keyed by well-known
                labels, e.g. VARIANT_COLORS. Defaults to None.
            palettes (Sequence[str]): Matplotlib colormap names used, in order, for
                generated colors. Defaults to QUALITATIVE_PALETTES.
            na_color (str): Color of missing values. Defaults to "#f2f2f2".
            fallback_color (str): Color of labels the table was not built for.
                Defaults to "#808080".
            background (str): Fill of unaltered cells, never generated for a label.
                Defaults to "#f5f5f5".

        Raises:
            ValueError: If override colors are invalid, duplicated, or equal the NA color.
        """
        self.na_color = normalize_color(na_color)
        self.fallback_color = normalize_color(fallback_color)
        self.background = normalize_color(background)
        self.palettes = tuple(palettes)
        self.builtin = {str(k): normalize_color(v) for k, v in (builtin or {}).items()}

        # The NA label is pinned to the NA color
        self.overrides: Dict[str, str] = {}
        for label, color in (overrides or {}).items():
            if is_missing(label):
                continue
            self.overrides[str(label)] = normalize_color(color)
        self._validate()

    def _validate(self) -> None:
        seen: Dict[str, str] = {}
        for label, color in self.overrides.items():
            if color == self.na_color:
                raise ValueError(
                    f"Override color {color!r} for {label!r} is reserved for missing values"
                )
            if color in seen:
                raise ValueError(
                    f"Override color {color!r} is assigned to both {seen[color]!r} and {label!r}"
                )
            seen[color] = label

    def _generated(self) -> Iterator[str]:
        """
        Yields candidate colors: qualitative palettes first, then a golden-ratio HSV walk.
        """
        for name in self.palettes:
            cmap = matplotlib.colormaps[name]
            if isinstance(cmap, ListedColormap):
                candidates = list(cmap.colors)
            else:
                candidates = [cmap(x) for x in np.linspace(0.0, 1.0, 12)]
            for color in candidates:
                yield normalize_color(color)
        hue = 0.0
        step = 0
        while True:
            hue = (hue + _GOLDEN_RATIO) % 1.0
            sat = 0.45 + 0.4 * ((step * 0.381966) % 1.0)
            val = 0.65 + 0.3 * ((step * 0.754878) % 1.0)
            step += 1
            yield normalize_color(hsv_to_rgb((hue, sat, val)))

    def assign(self, labels: Iterable, *, reserved: Iterable[str] = ()) -> ColorTable:
        """
        Assigns a color to every distinct label.

        Args:
            labels (Iterable): Labels in first-seen order. Missing values map to "NA".

        Kwargs:
            reserved (Iterable[str]): Colors already used elsewhere that generated colors
                must avoid. Defaults to ().

        Returns:
            ColorTable: Injective mapping over the distinct labels.
        """
        ordered: List[str] = []
        has_na = False
        for label in labels:
            if is_missing(label):
                has_na = True
                continue
            label = str(label)
            if label not in ordered:
                ordered.append(label)

        claimed = set(self.overrides.values())
        claimed.update((self.na_color, self.background))
        claimed.update(normalize_color(c) for c in reserved)

        table: Dict[str, str] = {}
        pending: List[str] = []
        for label in ordered:
            if label in self.overrides:
                table[label] = self.overrides[label]
                continue
            color = self.builtin.get(label)
            if color is not None and color not in claimed:
                table[label] = color
                claimed.add(color)
                continue
            pending.append(label)

        generator = self._generated()
        for label in pending:
            color = next(generator)
            while color in claimed:
                color = next(generator)
            table[label] = color
            claimed.add(color)

        ordered_table = {label: table[label] for label in ordered}
        if has_na:
            ordered_table[NA_LABEL] = self.na_color
        return ColorTable(
            ordered_table,
            na_color=self.na_color,
            fallback_color=self.fallback_color,
            background=self.background,
        )


def numeric_colors(
    values: Iterable,
    cmap: Union[str, Colormap] = "YlOrBr",
    *,
    na_color: str = NA_COLOR,
    vmin: Optional[float] = None,
    vmax: Optional[float] = None,
) -> List[str]:
    """
    Maps numeric values through a Matplotlib colormap.

    Args:
        values (Iterable): Numeric values; missing values map to `na_color`.
        cmap (Union[str, Colormap]): Colormap or colormap name. Defaults to "YlOrBr".

    Kwargs:
        na_color (str): Color of missing values. Defaults to "#f2f2f2".
        vmin (Optional[float]): Lower bound. Defaults to the finite minimum.
        vmax (Optional[float]): Upper bound. Defaults to the finite maximum.

    Returns:
        List[str]: One color per value.
    """
    arr = pd.to_numeric(pd.Series(list(values), dtype=object), errors="coerce").to_numpy(dtype=float)
    finite = arr[np.isfinite(arr)]
    if finite.size == 0:
        return [normalize_color(na_color)] * int(arr.size)
    lo = float(finite.min()) if vmin is None else float(vmin)
    hi = float(finite.max()) if vmax is None else float(vmax)
    colormap = cmap if isinstance(cmap, Colormap) else matplotlib.colormaps[cmap]
    norm = Normalize(vmin=lo, vmax=hi)
    out: List[str] = []
    for x in arr:
        if not np.isfinite(x):
            out.append(normalize_color(na_color))
        elif hi == lo:
            out.append(normalize_color(colormap(0.5)))
        else:
            out.append(normalize_color(colormap(float(norm(x)))))
    return out
