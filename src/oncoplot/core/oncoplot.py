"""
oncoplot/core/oncoplot
~~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from .alteration import CNV_EVENTS
from .annotations import AlignedAnnotation, AnnotationTable
from .colors import VARIANT_COLORS, ColorAssigner, ColorTable
from .errors import InsufficientGenesError
from .matrix import OncoMatrix, build_onco_matrix
from .records import RecordSource
from .sorting import ByAnnotation, SortSpec, sort_matrix
from .tracks import (
    altered_summary,
    expression_values,
    gene_summary,
    highlight_cells,
    percent_altered,
    sample_summary,
    side_bar_data,
    significance_scores,
    titv_fractions,
    top_bar_data,
    top_genes,
)
from ..plot.layout import LayoutFlags, PanelPlan, plan_layout
from ..plot.style import StyleConfig


@dataclass(frozen=True, eq=False)
class OncoplotData:
    """
    Data class for everything a renderer needs to draw one oncoplot.

    Attributes:
        matrix (OncoMatrix): Final, sorted matrix.
        colors (ColorTable): Colors of every category shown in the matrix and bars.
        genes (Tuple[str, ...]): Row order.
        samples (Tuple[str, ...]): Column order.
        annotation (Optional[AlignedAnnotation]): Annotation aligned to `samples`.
        plan (PanelPlan): Ordered panel plan.
        top_bar (Optional[pd.DataFrame]): Per-sample category counts (samples × categories).
        side_bar (Optional[pd.DataFrame]): Per-gene label counts (genes × labels).
        titv (Optional[pd.DataFrame]): Per-sample substitution percentages.
        expression (Optional[pd.Series]): Per-gene expression values.
        significance (Optional[pd.Series]): Per-gene -log10(q) side-bar scores.
        highlights (Optional[pd.DataFrame]): Boolean genes × samples highlight mask.
        percent_altered (pd.Series): Rounded percentage of the cohort altered per gene.
        title (str): Figure title.
    """

    matrix: OncoMatrix
    colors: ColorTable
    genes: Tuple[str, ...]
    samples: Tuple[str, ...]
    annotation: Optional[AlignedAnnotation]
    plan: PanelPlan
    top_bar: Optional[pd.DataFrame]
    side_bar: Optional[pd.DataFrame]
    titv: Optional[pd.DataFrame]
    expression: Optional[pd.Series]
    significance: Optional[pd.Series]
    highlights: Optional[pd.DataFrame]
    percent_altered: pd.Series
    title: str

    @property
    def legend_labels(self) -> List[str]:
        """Single categories present in the matrix, in code order."""
        return self.matrix.component_labels()


class Oncoplot:
    """
    Class for orchestrating matrix construction, annotation, sorting, and layout.
    """

    def __init__(
        self,
        source: RecordSource,
        cohort_size: Optional[int] = None,
        *,
        cnv_events: Optional[Iterable[str]] = None,
        style: Optional[StyleConfig] = None,
    ) -> None:
        """
        Initializes the Oncoplot instance.

        Args:
            source (RecordSource): Mutation record source.
            cohort_size (Optional[int]): Cohort size used for percentages and the title.
                Defaults to the number of cohort samples of the source.

        Kwargs:
            cnv_events (Optional[Iterable[str]]): Categories that denote copy-number events.
                Defaults to the source's own setting, else ("Amp", "Del").
            style (Optional[StyleConfig]): Style configuration. Defaults to the default style.

        Raises:
            ValueError: If the cohort size is not positive.
        """
        self.source = source
        if cnv_events is None:
            cnv_events = getattr(source, "cnv_events", CNV_EVENTS)
        self.cnv_events: Tuple[str, ...] = tuple(cnv_events)
        self.cohort_size = len(source.samples()) if cohort_size is None else int(cohort_size)
        if self.cohort_size <= 0:
            raise ValueError("cohort_size must be positive")
        self.style = style if style is not None else StyleConfig()
        self.matrix: Optional[OncoMatrix] = None
        self.significance: Optional[pd.Series] = None
        self.annotation_table: Optional[AnnotationTable] = None
        self.annotation_colors: Optional[Mapping[str, Mapping[str, str]]] = None
        self.spec: Optional[SortSpec] = None
        self.data: Optional[OncoplotData] = None

    def build(
        self,
        genes: Optional[Iterable[str]] = None,
        *,
        top: int = 20,
        q_values: Optional[Union[Mapping[str, Any], pd.Series]] = None,
        q_threshold: float = 0.1,
        genes_to_ignore: Optional[Iterable[str]] = None,
        add_missing: bool = True,
        remove_non_mutated: bool = True,
    ) -> Oncoplot:
        """
        Builds the alteration matrix from an explicit gene list, significance results,
        or the most altered genes.

        Args:
            genes (Optional[Iterable[str]]): Explicit genes, in row order. Defaults to None.

        Kwargs:
            top (int): Number of most altered genes used when neither `genes` nor
                `q_values` is given. Defaults to 20.
            q_values (Optional[Union[Mapping[str, Any], pd.Series]]): Gene → q-value of a
                significance analysis; genes below `q_threshold` are plotted with their
                scores as side bar. Defaults to None.
            q_threshold (float): Significance cutoff. Defaults to 0.1.
            genes_to_ignore (Optional[Iterable[str]]): Genes removed from the matrix.
                Defaults to None.
            add_missing (bool): Keep explicit genes without records as empty rows.
                Defaults to True.
            remove_non_mutated (bool): Drop cohort samples without any alteration in the
                plotted genes. Defaults to True.

        Returns:
            Oncoplot: The Oncoplot instance (for method chaining).

        Raises:
            ValueError: If both `genes` and `q_values` are given.
            InsufficientGenesError: If no gene qualifies.
        """
        if genes is not None and q_values is not None:
            raise ValueError("Provide either genes or q_values, not both")
        if isinstance(genes, str):
            raise TypeError("genes must be an iterable of gene identifiers, not a string")
        self.matrix = None
        self.significance = None
        self.annotation_table = None
        self.annotation_colors = None
        self.spec = None
        self.data = None

        # Resolve the gene list
        significance = None
        fill = False
        if genes is not None:
            gene_list = [str(g) for g in genes]
            fill = add_missing
        elif q_values is not None:
            significance = significance_scores(q_values, q_threshold)
            gene_list = list(significance.index)
        else:
            summary = gene_summary(self.source, cnv_events=self.cnv_events)
            gene_list = top_genes(summary, top, genes_to_ignore=genes_to_ignore)
        if not gene_list:
            raise InsufficientGenesError(0)

        matrix = build_onco_matrix(
            self.source,
            gene_list,
            add_missing=fill,
            add_unaltered_samples=not remove_non_mutated,
            cnv_events=self.cnv_events,
        )
        if genes_to_ignore is not None:
            matrix = matrix.drop_genes(genes_to_ignore)
        if significance is not None:
            significance = significance.reindex(matrix.genes)

        self.matrix = matrix
        self.significance = significance
        return self

    def annotate(
        self,
        table: Union[AnnotationTable, pd.DataFrame],
        features: Optional[Sequence[str]] = None,
        colors: Optional[Mapping[str, Mapping[str, str]]] = None,
    ) -> Oncoplot:
        """
        Attaches a clinical annotation table.

        Args:
            table (Union[AnnotationTable, pd.DataFrame]): Annotation table; a DataFrame is
                read with the default sample column.
            features (Optional[Sequence[str]]): Features to show, in display order.
                Defaults to every feature of the table.
            colors (Optional[Mapping[str, Mapping[str, str]]]): Per-feature level → color
                overrides. Defaults to None.

        Returns:
            Oncoplot: The Oncoplot instance (for method chaining).

        Raises:
            RuntimeError: If build() has not been called, or sort() already has.
        """
        # Validation
        if self.matrix is None:
            raise RuntimeError("build() must be called before annotate()")
        if self.spec is not None:
            raise RuntimeError("annotate() must be called before sort()")
        if isinstance(table, AnnotationTable):
            if features is not None:
                table = AnnotationTable(
                    table.df.reset_index(),
                    sample_col=table.sample_col,
                    features=features,
                )
        else:
            table = AnnotationTable(table, features=features)
        self.annotation_table = table
        self.annotation_colors = colors
        self.data = None
        return self

    def sort(self, spec: Optional[SortSpec] = None) -> Oncoplot:
        """
        Sorts genes and samples.

        Args:
            spec (Optional[SortSpec]): Sort policies. Defaults to frequency sort.

        Returns:
            Oncoplot: The Oncoplot instance (for method chaining).

        Raises:
            RuntimeError: If build() has not been called.
        """
        if self.matrix is None:
            raise RuntimeError("build() must be called before sort()")
        spec = spec if spec is not None else SortSpec()
        self.matrix = sort_matrix(self.matrix, spec, annotation=self.annotation_table)
        self.spec = spec
        self.data = None
        return self

    def _level_order(self) -> Dict[str, Sequence[str]]:
        if self.spec is not None and isinstance(self.spec.samples, ByAnnotation):
            policy = self.spec.samples
            if policy.level_order is not None:
                return {policy.feature: policy.level_order}
        return {}

    def finalize(
        self,
        *,
        row_bar: bool = True,
        col_bar: bool = True,
        titv: bool = False,
        expression: Optional[Union[Mapping[str, float], pd.Series]] = None,
        highlight: Optional[Tuple[str, Any]] = None,
        sample_labels: bool = False,
        colors: Optional[Mapping[str, str]] = None,
        log_col_bar: bool = False,
        include_col_bar_cn: bool = True,
        col_bar_genes_only: bool = False,
    ) -> Oncoplot:
        """
        Assembles the renderer contract: colors, aligned annotation, track data and
        the panel plan. Every fatal condition is raised here, before any drawing.

        Kwargs:
            row_bar (bool): Per-gene side bar. Defaults to True.
            col_bar (bool): Per-sample top bar. Defaults to True.
            titv (bool): Transition/transversion track. Defaults to False.
            expression (Optional[Union[Mapping[str, float], pd.Series]]): Per-gene
                expression values. Defaults to None.
            highlight (Optional[Tuple[str, Any]]): (record field, value) pair whose cells
                are marked. Defaults to None.
            sample_labels (bool): Show sample names. Defaults to False.
            colors (Optional[Mapping[str, str]]): Category → color overrides.
                Defaults to None.
            log_col_bar (bool): Top bar on log10 scale. Defaults to False.
            include_col_bar_cn (bool): Count copy-number events in the top bar.
                Defaults to True.
            col_bar_genes_only (bool): Top bar counts only the plotted genes.
                Defaults to False.

        Returns:
            Oncoplot: The Oncoplot instance (for method chaining).

        Raises:
            RuntimeError: If build() has not been called.
            InsufficientGenesError: If fewer than two genes remain.
            MissingAnnotationRowsError: If a plotted sample has no annotation row.
            AdditionalFeatureNotFoundError: If the highlight field does not exist.
        """
        # Validation
        if self.matrix is None:
            raise RuntimeError("build() must be called before finalize()")
        if self.spec is None:
            self.sort()
        matrix = self.matrix
        if matrix.shape[0] < 2:
            raise InsufficientGenesError(matrix.shape[0])
        if highlight is not None and (isinstance(highlight, str) or len(highlight) != 2):
            raise ValueError("highlight must be a (field, value) pair")
        genes, samples = matrix.genes, matrix.samples

        annotation = None
        if self.annotation_table is not None:
            annotation = self.annotation_table.align(
                samples,
                self.annotation_colors,
                level_order=self._level_order(),
                numeric_cmap=self.style["numeric_annotation_cmap"],
            )

        # Track data
        top_bar = None
        if col_bar:
            summary = sample_summary(
                self.source,
                genes=genes if col_bar_genes_only else None,
                include_cn=include_col_bar_cn,
                cnv_events=self.cnv_events,
            )
            top_bar = top_bar_data(summary, samples, log_scale=log_col_bar)
        side_bar = None
        significance = None
        if row_bar:
            if self.significance is not None:
                significance = self.significance.reindex(genes)
            else:
                side_bar = side_bar_data(matrix)
        titv_data = titv_fractions(self.source, samples) if titv else None
        expr = expression_values(expression, genes) if expression is not None else None
        highlights = None
        if highlight is not None:
            feature, level = highlight
            highlights = highlight_cells(
                self.source, feature, level, genes, samples, cnv_events=self.cnv_events
            )

        # Colors cover single categories, composite cell labels and extra top-bar categories
        labels = matrix.component_labels()
        labels += [lab for lab in matrix.present_labels() if lab not in labels]
        if top_bar is not None:
            labels += [c for c in top_bar.columns if c not in labels]
        color_table = ColorAssigner(
            colors,
            builtin=VARIANT_COLORS,
            na_color=self.style["na_color"],
            fallback_color=self.style["fallback_color"],
            background=self.style["bg_color"],
        ).assign(labels)

        flags = LayoutFlags(
            row_bar=row_bar,
            col_bar=col_bar,
            titv=titv,
            expression=expr is not None,
            annotation=0 if annotation is None else len(annotation.features),
            sample_labels=sample_labels,
        )
        plan = plan_layout(flags, self.style)

        n_altered = int(matrix.binary().any(axis=0).sum())
        self.data = OncoplotData(
            matrix=matrix,
            colors=color_table,
            genes=tuple(genes),
            samples=tuple(samples),
            annotation=annotation,
            plan=plan,
            top_bar=top_bar,
            side_bar=side_bar,
            titv=titv_data,
            expression=expr,
            significance=significance,
            highlights=highlights,
            percent_altered=percent_altered(matrix, self.cohort_size),
            title=altered_summary(n_altered, self.cohort_size),
        )
        return self

    def write_matrix(self, path_or_buf=None) -> Optional[str]:
        """
        Writes the current matrix as tab-separated text.

        Args:
            path_or_buf: File path or buffer. Defaults to None (return a string).

        Returns:
            Optional[str]: The text when `path_or_buf` is None.

        Raises:
            RuntimeError: If build() has not been called.
        """
        if self.matrix is None:
            raise RuntimeError("build() must be called before write_matrix()")
        return self.matrix.to_tsv(path_or_buf)
