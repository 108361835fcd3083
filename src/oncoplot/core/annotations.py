"""
oncoplot/core/annotations
~~~~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from matplotlib.colors import ListedColormap

from .colors import NA_LABEL, ColorAssigner, ColorTable, is_missing, numeric_colors
from .errors import MissingAnnotationRowsError
from .records import SAMPLE_COL


@dataclass(frozen=True)
class CategoricalEncoding:
    """
    Data class for a categorical feature's level ↔ index encoding.

    Levels are ordered for display with "NA" last; `colors[i]` is the color of `levels[i]`.
    """

    feature: str
    levels: Tuple[str, ...]
    colors: Tuple[str, ...]

    @property
    def has_na(self) -> bool:
        return NA_LABEL in self.levels

    def index_of(self, level) -> int:
        """
        Returns the index of a level; missing values resolve to the "NA" level.

        Raises:
            KeyError: If the level is not encoded.
        """
        key = NA_LABEL if is_missing(level) else str(level)
        try:
            return self.levels.index(key)
        except ValueError:
            raise KeyError(f"Level {key!r} is not encoded for feature {self.feature!r}") from None

    def level_of(self, index: int) -> str:
        """
        Returns the level stored at an index.

        Raises:
            KeyError: If the index is out of range.
        """
        index = int(index)
        if index < 0 or index >= len(self.levels):
            raise KeyError(f"No level at index {index} for feature {self.feature!r}")
        return self.levels[index]

    def encode(self, values: Iterable) -> np.ndarray:
        return np.array([self.index_of(v) for v in values], dtype=np.int64)

    def decode(self, indices: Iterable[int]) -> List[str]:
        return [self.level_of(i) for i in indices]

    def colormap(self) -> ListedColormap:
        """Colormap whose i-th color belongs to level i."""
        return ListedColormap(list(self.colors), name=self.feature)


@dataclass(frozen=True, eq=False)
class AlignedAnnotation:
    """
    Data class for annotation rows aligned one-to-one with matrix columns.
    """

    samples: Tuple[str, ...]
    features: Tuple[str, ...]
    table: pd.DataFrame
    encodings: Dict[str, CategoricalEncoding]
    colors: Dict[str, ColorTable]
    cell_colors: pd.DataFrame

    @property
    def numeric_features(self) -> List[str]:
        return [f for f in self.features if f not in self.encodings]

    def codes(self, feature: str) -> np.ndarray:
        """
        Returns the level indices of a categorical feature in sample order.

        Raises:
            KeyError: If the feature is numeric or unknown.
        """
        if feature not in self.encodings:
            raise KeyError(f"Feature {feature!r} has no categorical encoding")
        return self.encodings[feature].encode(self.table[feature].tolist())


class AnnotationTable:
    """
    Class for storing sample-keyed clinical features (categorical or numeric).
    """

    def __init__(
        self,
        df: pd.DataFrame,
        *,
        sample_col: str = SAMPLE_COL,
        features: Optional[Sequence[str]] = None,
    ) -> None:
        """
        Initializes the AnnotationTable instance.

        Args:
            df (pd.DataFrame): One row per sample.

        Kwargs:
            sample_col (str): Sample identifier column. Defaults to "Tumor_Sample_Barcode".
            features (Optional[Sequence[str]]): Feature columns to keep, in display order.
                Defaults to every column other than `sample_col`.

        Raises:
            ValueError: If the sample column is missing or duplicated, or a requested
                feature does not exist.
        """
        if sample_col not in df.columns:
            raise ValueError(
                f"Annotation table is missing sample column {sample_col!r}. "
                f"Available columns: {list(df.columns)}"
            )
        available = [str(c) for c in df.columns if c != sample_col]
        if features is None:
            features = available
        features = [str(f) for f in features]
        unknown = [f for f in features if f not in available]
        if unknown:
            raise ValueError(
                f"Annotation feature(s) {unknown} not found. Available features: {available}"
            )
        if not features:
            raise ValueError("Annotation table has no feature columns")

        table = df.copy()
        table.columns = [str(c) for c in table.columns]
        table[sample_col] = table[sample_col].astype(str)
        if table[sample_col].duplicated().any():
            dupes = table.loc[table[sample_col].duplicated(), sample_col].unique().tolist()
            raise ValueError(f"Annotation table has duplicated samples: {dupes}")
        self.sample_col = sample_col
        self.features: List[str] = list(dict.fromkeys(features))
        self.df = table.set_index(sample_col)[self.features]

    @property
    def samples(self) -> List[str]:
        return self.df.index.tolist()

    def is_numeric(self, feature: str) -> bool:
        """True if the feature holds numbers (booleans are categorical)."""
        col = self.df[feature]
        return pd.api.types.is_numeric_dtype(col) and not pd.api.types.is_bool_dtype(col)

    def require(self, samples: Iterable[str]) -> None:
        """
        Ensures every sample has an annotation row.

        Raises:
            MissingAnnotationRowsError: If any sample is absent from the table.
        """
        present = set(self.df.index)
        missing = [s for s in samples if s not in present]
        if missing:
            raise MissingAnnotationRowsError(missing)

    def values(self, feature: str, samples: Optional[Sequence[str]] = None) -> pd.Series:
        """
        Returns one feature's values, optionally aligned to samples.

        Categorical values are returned as strings with missing values (including the
        literal "NA") as None.

        Raises:
            KeyError: If the feature is unknown.
        """
        if feature not in self.df.columns:
            raise KeyError(f"Unknown annotation feature {feature!r}")
        col = self.df[feature]
        if samples is not None:
            samples = list(samples)
            self.require(samples)
            col = col.loc[samples]
        if self.is_numeric(feature):
            return col.astype(float)
        return col.map(lambda v: None if is_missing(v) else str(v)).astype(object)

    def levels(
        self,
        feature: str,
        samples: Optional[Sequence[str]] = None,
        level_order: Optional[Sequence[str]] = None,
    ) -> List[str]:
        """
        Returns the distinct levels of a categorical feature.

        Args:
            feature (str): Feature name.
            samples (Optional[Sequence[str]]): Restrict to these samples. Defaults to None.
            level_order (Optional[Sequence[str]]): Levels to place first, in this order;
                absent ones are skipped. Defaults to None.

        Returns:
            List[str]: Listed levels first, remaining levels in first-seen order, "NA" last
                when missing values occur.
        """
        vals = self.values(feature, samples).tolist()
        seen = list(dict.fromkeys(v for v in vals if v is not None))
        ordered = [str(v) for v in (level_order or []) if str(v) in seen]
        ordered += [v for v in seen if v not in ordered]
        if any(v is None for v in vals):
            ordered.append(NA_LABEL)
        return ordered

    def align(
        self,
        samples: Sequence[str],
        colors: Optional[Mapping[str, Mapping[str, str]]] = None,
        *,
        level_order: Optional[Mapping[str, Sequence[str]]] = None,
        numeric_cmap: str = "YlOrBr",
    ) -> AlignedAnnotation:
        """
        Aligns the table to the matrix column order and encodes every feature.

        Args:
            samples (Sequence[str]): Matrix columns, in matrix order.
            colors (Optional[Mapping[str, Mapping[str, str]]]): Per-feature level → color
                overrides. Defaults to None.

        Kwargs:
            level_order (Optional[Mapping[str, Sequence[str]]]): Per-feature level order
                used for encodings and legends. Defaults to None.
            numeric_cmap (str): Colormap of numeric features. Defaults to "YlOrBr".

        Returns:
            AlignedAnnotation: Exactly one row per sample, in sample order.

        Raises:
            MissingAnnotationRowsError: If a matrix column has no annotation row.
        """
        samples = [str(s) for s in samples]
        self.require(samples)
        colors = colors or {}
        level_order = level_order or {}

        table = self.df.loc[samples, self.features].copy()
        encodings: Dict[str, CategoricalEncoding] = {}
        tables: Dict[str, ColorTable] = {}
        cell_colors = pd.DataFrame(index=pd.Index(samples), columns=self.features, dtype=object)
        # Generated colors stay distinct across features
        used: List[str] = []
        for feature in self.features:
            if self.is_numeric(feature):
                cell_colors[feature] = numeric_colors(table[feature].tolist(), numeric_cmap)
                continue
            levels = self.levels(feature, samples, level_order.get(feature))
            color_table = ColorAssigner(colors.get(feature)).assign(levels, reserved=used)
            used.extend(color_table.values())
            encodings[feature] = CategoricalEncoding(
                feature=feature,
                levels=tuple(levels),
                colors=tuple(color_table.color_for(lev) for lev in levels),
            )
            tables[feature] = color_table
            values = self.values(feature, samples)
            cell_colors[feature] = [color_table.color_for(v) for v in values.tolist()]

        return AlignedAnnotation(
            samples=tuple(samples),
            features=tuple(self.features),
            table=table,
            encodings=encodings,
            colors=tables,
            cell_colors=cell_colors,
        )
