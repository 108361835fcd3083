"""
oncoplot/core/tracks
~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union, TYPE_CHECKING

import numpy as np
import pandas as pd

from .alteration import CNV_EVENTS
from .colors import TITV_COLORS
from .errors import AdditionalFeatureNotFoundError
from ..util.warnings import EmptyHighlightWarning, warn

if TYPE_CHECKING:
    from .matrix import OncoMatrix
    from .records import RecordSource

REF_ALLELE_COL = "Reference_Allele"
ALT_ALLELE_COL = "Tumor_Seq_Allele2"

TITV_CLASSES = tuple(TITV_COLORS)
# Protein-altering classes; highlights skip everything else unless asked
NON_SYNONYMOUS_CLASSES = (
    "Frame_Shift_Del",
    "Frame_Shift_Ins",
    "Splice_Site",
    "Translation_Start_Site",
    "Nonsense_Mutation",
    "Nonstop_Mutation",
    "In_Frame_Del",
    "In_Frame_Ins",
    "Missense_Mutation",
)
# Purine-reference substitutions fold onto their pyrimidine complement
_COMPLEMENT = {"A": "T", "C": "G", "G": "C", "T": "A"}


def _record_frame(
    source: RecordSource,
    genes: Optional[Iterable[str]] = None,
    samples: Optional[Iterable[str]] = None,
    cnv_events: Iterable[str] = CNV_EVENTS,
) -> pd.DataFrame:
    """
    Flattens records into (sample, gene, category, is_cn) rows.

    A record's explicit copy-number label contributes its own row.
    """
    cnv = set(cnv_events)
    rows = []
    for rec in source.records(genes=genes, samples=samples):
        rows.append((rec.sample, rec.gene, rec.category, rec.category in cnv))
        if rec.copy_number:
            rows.append((rec.sample, rec.gene, rec.copy_number, True))
    return pd.DataFrame(rows, columns=["sample", "gene", "category", "is_cn"])


def _order_categories(counts: pd.DataFrame) -> pd.DataFrame:
    totals = counts.sum(axis=0)
    cols = sorted(counts.columns, key=lambda c: (-int(totals[c]), str(c)))
    return counts[cols]


def gene_summary(
    source: RecordSource,
    *,
    cnv_events: Iterable[str] = CNV_EVENTS,
) -> pd.DataFrame:
    """
    Summarizes records per gene.

    Args:
        source (RecordSource): Mutation record source.

    Kwargs:
        cnv_events (Iterable[str]): Categories that denote copy-number events.
            Defaults to ("Amp", "Del").

    Returns:
        pd.DataFrame: One row per gene with a count column per category, plus "total",
            "MutatedSamples" and "AlteredSamples". Rows are ordered by descending altered
            then mutated sample count, ties by gene identifier.
    """
    frame = _record_frame(source, cnv_events=cnv_events)
    if frame.empty:
        return pd.DataFrame(columns=["total", "MutatedSamples", "AlteredSamples"], dtype=int)
    counts = _order_categories(pd.crosstab(frame["gene"], frame["category"]))
    counts.columns.name = None
    counts.index.name = None
    counts["total"] = counts.sum(axis=1)
    mutated = frame.loc[~frame["is_cn"]].groupby("gene")["sample"].nunique()
    altered = frame.groupby("gene")["sample"].nunique()
    counts["MutatedSamples"] = mutated.reindex(counts.index, fill_value=0).astype(int)
    counts["AlteredSamples"] = altered.reindex(counts.index, fill_value=0).astype(int)
    order = sorted(
        counts.index,
        key=lambda g: (-int(counts.at[g, "AlteredSamples"]), -int(counts.at[g, "MutatedSamples"]), g),
    )
    return counts.loc[order]


def top_genes(
    summary: pd.DataFrame,
    top: int = 20,
    *,
    genes_to_ignore: Optional[Iterable[str]] = None,
) -> List[str]:
    """
    Returns the leading genes of a gene summary.

    Args:
        summary (pd.DataFrame): Output of `gene_summary`.
        top (int): Number of genes. Defaults to 20.

    Kwargs:
        genes_to_ignore (Optional[Iterable[str]]): Genes excluded before selection.
            Defaults to None.

    Returns:
        List[str]: At most `top` genes in summary order.
    """
    if top < 1:
        raise ValueError("top must be a positive integer")
    ignore = set(genes_to_ignore or ())
    return [g for g in summary.index if g not in ignore][:top]


def sample_summary(
    source: RecordSource,
    genes: Optional[Iterable[str]] = None,
    *,
    include_cn: bool = True,
    cnv_events: Iterable[str] = CNV_EVENTS,
) -> pd.DataFrame:
    """
    Counts records per sample and category.

    Args:
        source (RecordSource): Mutation record source.
        genes (Optional[Iterable[str]]): Restrict to these genes. Defaults to None.

    Kwargs:
        include_cn (bool): Count copy-number events. Defaults to True.
        cnv_events (Iterable[str]): Categories that denote copy-number events.
            Defaults to ("Amp", "Del").

    Returns:
        pd.DataFrame: Cohort samples as rows (zero rows for samples without records),
            categories as columns ordered by descending total.
    """
    frame = _record_frame(source, genes=None if genes is None else list(genes), cnv_events=cnv_events)
    if not include_cn:
        frame = frame.loc[~frame["is_cn"]]
    cohort = source.samples()
    if frame.empty:
        return pd.DataFrame(index=pd.Index(cohort), dtype=int)
    counts = _order_categories(pd.crosstab(frame["sample"], frame["category"]))
    counts.columns.name = None
    counts.index.name = None
    return counts.reindex(cohort, fill_value=0).astype(int)


def top_bar_data(
    summary: pd.DataFrame,
    samples: Sequence[str],
    *,
    log_scale: bool = False,
) -> pd.DataFrame:
    """
    Aligns per-sample category counts to the matrix columns.

    Args:
        summary (pd.DataFrame): Output of `sample_summary`.
        samples (Sequence[str]): Matrix columns, in matrix order.

    Kwargs:
        log_scale (bool): Rescale each sample so its stacked height is log10 of its total
            while keeping category proportions. Defaults to False.

    Returns:
        pd.DataFrame: Samples as rows, categories as columns.
    """
    data = summary.reindex(list(samples), fill_value=0).astype(float)
    if not log_scale:
        return data
    # Samples without records keep a zero-height bar
    totals = data.sum(axis=1)
    safe = totals.where(totals > 0, 1.0)
    return data.mul(np.log10(safe) / safe, axis=0)


def side_bar_data(matrix: OncoMatrix) -> pd.DataFrame:
    """
    Counts cells per gene and category label.

    Returns:
        pd.DataFrame: Genes as rows (matrix order), present labels as columns (code order).
    """
    labels = matrix.present_labels()
    counts = {
        label: (matrix.numeric == matrix.codes.code(label)).sum(axis=1).astype(int)
        for label in labels
    }
    return pd.DataFrame(counts, index=matrix.labels.index.copy(), columns=labels).fillna(0).astype(int)


def parse_q_value(q: Any) -> float:
    """
    Parses one q-value; a leading "<" is stripped and 0 becomes machine epsilon.

    Raises:
        ValueError: If the value is not numeric.
    """
    text = str(q).strip()
    if text.startswith("<"):
        text = text[1:].strip()
    value = float(text)
    if value == 0:
        value = float(np.finfo(float).eps)
    return value


def significance_scores(
    q_values: Union[Mapping[str, Any], pd.Series],
    q_threshold: float = 0.1,
) -> pd.Series:
    """
    Converts significance q-values into side-bar scores.

    Args:
        q_values (Union[Mapping[str, Any], pd.Series]): Gene → q-value, in ranking order.
        q_threshold (float): Genes with q below this value are kept. Defaults to 0.1.

    Returns:
        pd.Series: -log10(q) for the significant genes, in input order.
    """
    series = pd.Series(q_values) if not isinstance(q_values, pd.Series) else q_values
    parsed = pd.Series(
        [parse_q_value(q) for q in series.tolist()],
        index=[str(g) for g in series.index],
        dtype=float,
    )
    kept = parsed[parsed < float(q_threshold)]
    return -np.log10(kept)


def expression_values(
    values: Union[Mapping[str, float], pd.Series],
    genes: Sequence[str],
) -> pd.Series:
    """
    Aligns per-gene expression values to the matrix rows; absent genes get 0.
    """
    series = pd.Series(values) if not isinstance(values, pd.Series) else values
    series = pd.to_numeric(series, errors="coerce")
    series.index = [str(g) for g in series.index]
    return series.reindex(list(genes)).fillna(0.0).astype(float)


def titv_class(ref: Any, alt: Any) -> Optional[str]:
    """
    Returns the folded substitution class of a single-nucleotide change, or None.
    """
    if not isinstance(ref, str) or not isinstance(alt, str):
        return None
    ref, alt = ref.upper(), alt.upper()
    if len(ref) != 1 or len(alt) != 1 or ref == alt:
        return None
    if ref not in _COMPLEMENT or alt not in _COMPLEMENT:
        return None
    if ref in ("A", "G"):
        ref, alt = _COMPLEMENT[ref], _COMPLEMENT[alt]
    return f"{ref}>{alt}"


def titv_fractions(
    source: RecordSource,
    samples: Sequence[str],
    *,
    ref_col: str = REF_ALLELE_COL,
    alt_col: str = ALT_ALLELE_COL,
) -> pd.DataFrame:
    """
    Computes the percentage contribution of each substitution class per sample.

    Args:
        source (RecordSource): Mutation record source; every gene is considered.
        samples (Sequence[str]): Matrix columns, in matrix order.

    Kwargs:
        ref_col (str): Reference allele field. Defaults to "Reference_Allele".
        alt_col (str): Alternate allele field. Defaults to "Tumor_Seq_Allele2".

    Returns:
        pd.DataFrame: Samples as rows, the six classes as columns, rows summing to 100
            (all zeros for samples without single-nucleotide substitutions).
    """
    samples = list(samples)
    counts = pd.DataFrame(0.0, index=pd.Index(samples), columns=list(TITV_CLASSES))
    for rec in source.records(samples=samples):
        cls = titv_class(rec.fields.get(ref_col), rec.fields.get(alt_col))
        if cls is not None:
            counts.at[rec.sample, cls] += 1
    totals = counts.sum(axis=1)
    return counts.div(totals.where(totals > 0, 1.0), axis=0) * 100.0


def highlight_cells(
    source: RecordSource,
    feature: str,
    level: Any,
    genes: Sequence[str],
    samples: Sequence[str],
    *,
    include_synonymous: bool = False,
    cnv_events: Iterable[str] = CNV_EVENTS,
) -> pd.DataFrame:
    """
    Marks matrix cells whose records carry `feature == level`.

    Args:
        source (RecordSource): Mutation record source.
        feature (str): Record field to inspect.
        level (Any): Field value to highlight.
        genes (Sequence[str]): Matrix rows.
        samples (Sequence[str]): Matrix columns.

    Kwargs:
        include_synonymous (bool): Also inspect records outside NON_SYNONYMOUS_CLASSES
            and `cnv_events`, e.g. "Silent". Defaults to False.
        cnv_events (Iterable[str]): Copy-number categories, always inspected.
            Defaults to ("Amp", "Del").

    Returns:
        pd.DataFrame: Boolean frame, genes × samples.

    Raises:
        AdditionalFeatureNotFoundError: If the field does not exist in the source.
    """
    fields = source.fields()
    if feature not in fields:
        raise AdditionalFeatureNotFoundError(feature, fields)
    genes, samples = list(genes), list(samples)
    mask = pd.DataFrame(False, index=pd.Index(genes), columns=pd.Index(samples))
    target = str(level)
    kept = set(NON_SYNONYMOUS_CLASSES) | set(cnv_events)
    for rec in source.records(genes=genes, samples=samples):
        if not include_synonymous and rec.category not in kept:
            continue
        value = rec.fields.get(feature)
        if value is not None and not pd.isna(value) and str(value) == target:
            mask.at[rec.gene, rec.sample] = True
    if not mask.to_numpy().any():
        warn(f"No samples are enriched for {target!r} in {feature!r}", EmptyHighlightWarning)
    return mask


def percent_altered(matrix: OncoMatrix, cohort_size: int) -> pd.Series:
    """
    Returns the rounded percentage of the cohort altered per gene.

    Raises:
        ValueError: If the cohort size is not positive.
    """
    if cohort_size <= 0:
        raise ValueError("cohort_size must be positive")
    counts = matrix.altered_counts("genes")
    return np.round(100.0 * counts / float(cohort_size)).astype(int)


def altered_summary(n_altered: int, cohort_size: int) -> str:
    """
    Formats the figure title, e.g. "Altered in 2 (66.67%) of 3 samples.".
    """
    if cohort_size <= 0:
        raise ValueError("cohort_size must be positive")
    pct = round(round(n_altered / cohort_size, 4) * 100, 2)
    return f"Altered in {n_altered} ({pct:g}%) of {cohort_size} samples."
