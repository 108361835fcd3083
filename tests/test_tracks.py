"""
tests/test_tracks
~~~~~~~~~~~~~~~~~
"""

import numpy as np
import pandas as pd
import pytest

from oncoplot import MafTable
from oncoplot.core.errors import AdditionalFeatureNotFoundError
from oncoplot.core.tracks import (
    TITV_CLASSES,
    altered_summary,
    expression_values,
    gene_summary,
    highlight_cells,
    parse_q_value,
    percent_altered,
    sample_summary,
    side_bar_data,
    significance_scores,
    titv_class,
    titv_fractions,
    top_bar_data,
    top_genes,
)
from oncoplot.util.warnings import EmptyHighlightWarning


@pytest.mark.api
def test_gene_summary_counts_and_order(rich_source):
    """
    Ensures per-gene counts and the altered-then-mutated ranking.

    Args:
        rich_source (MafTable): Rich record source.
    """
    summary = gene_summary(rich_source)
    assert summary.index.tolist() == ["TP53", "KRAS", "EGFR"]
    assert summary.loc["TP53", "total"] == 5
    assert summary.loc["KRAS", "AlteredSamples"] == 3
    assert summary.loc["KRAS", "MutatedSamples"] == 1
    assert summary.loc["EGFR", "Amp"] == 1
    assert summary.columns.tolist()[:3] == ["Amp", "Missense_Mutation", "Del"]
    assert summary.columns.tolist()[-3:] == ["total", "MutatedSamples", "AlteredSamples"]


@pytest.mark.api
def test_top_genes(rich_source):
    """
    Ensures top gene selection honors the limit and the ignore list.

    Args:
        rich_source (MafTable): Rich record source.
    """
    summary = gene_summary(rich_source)
    assert top_genes(summary, 2) == ["TP53", "KRAS"]
    assert top_genes(summary, 5, genes_to_ignore=["TP53"]) == ["KRAS", "EGFR"]
    with pytest.raises(ValueError):
        top_genes(summary, 0)


@pytest.mark.api
def test_sample_summary_covers_cohort(rich_source):
    """
    Ensures every cohort sample gets a row and copy-number counts can be excluded.

    Args:
        rich_source (MafTable): Rich record source.
    """
    summary = sample_summary(rich_source)
    assert summary.index.tolist() == ["S1", "S2", "S3", "S4", "S5", "S6", "S7"]
    assert summary.columns.tolist()[0] == "Amp"
    assert summary.loc["S7"].sum() == 0
    assert summary.loc["S2", "Amp"] == 1

    mutations = sample_summary(rich_source, include_cn=False)
    assert "Amp" not in mutations.columns
    assert mutations.loc["S6"].sum() == 0

    kras = sample_summary(rich_source, ["KRAS"])
    assert kras.loc["S6", "Amp"] == 1
    assert kras.loc["S1"].sum() == 0


@pytest.mark.api
def test_top_bar_data_alignment_and_log_scale(rich_source):
    """
    Ensures top-bar rows follow matrix columns and the log scale preserves proportions.

    Args:
        rich_source (MafTable): Rich record source.
    """
    summary = sample_summary(rich_source)
    data = top_bar_data(summary, ["S6", "S1", "S7"])
    assert data.index.tolist() == ["S6", "S1", "S7"]
    assert data.loc["S1"].sum() == 2

    logged = top_bar_data(summary, ["S6", "S1", "S7"], log_scale=True)
    assert logged.loc["S1"].sum() == pytest.approx(np.log10(2))
    assert logged.loc["S1", "Missense_Mutation"] == pytest.approx(logged.loc["S1", "Nonsense_Mutation"])
    assert logged.loc["S7"].sum() == 0


@pytest.mark.api
def test_side_bar_data(rich_matrix):
    """
    Ensures side-bar counts are per gene and per present label.

    Args:
        rich_matrix (OncoMatrix): Rich matrix.
    """
    data = side_bar_data(rich_matrix)
    assert data.index.tolist() == rich_matrix.genes
    assert data.columns.tolist() == rich_matrix.present_labels()
    assert data.loc["TP53", "Multi_Hit"] == 1
    assert data.loc["TP53"].sum() == 3
    assert data.loc["EGFR", "Frame_Shift_Del;Amp"] == 1
    assert data.loc["KRAS", "Splice_Site"] == 0


@pytest.mark.api
def test_significance_scores():
    """
    Ensures q-values are parsed, filtered by threshold and converted to -log10.
    """
    scores = significance_scores({"A": "<1e-5", "B": 0, "C": 0.5, "D": "0.01"})
    assert scores.index.tolist() == ["A", "B", "D"]
    assert scores["A"] == pytest.approx(5.0)
    assert scores["D"] == pytest.approx(2.0)
    assert scores["B"] == pytest.approx(-np.log10(np.finfo(float).eps))
    assert parse_q_value(" < 0.2") == pytest.approx(0.2)
    with pytest.raises(ValueError):
        parse_q_value("n/a")


@pytest.mark.api
def test_expression_values_fill_missing_genes():
    """
    Ensures expression values align to genes with zeros for absent ones.
    """
    values = expression_values({"TP53": 2.5, "MYC": 1.0}, ["TP53", "KRAS"])
    assert values.index.tolist() == ["TP53", "KRAS"]
    assert values.tolist() == [2.5, 0.0]


@pytest.mark.api
def test_titv_class_folds_purines():
    """
    Ensures purine-reference substitutions fold onto the pyrimidine complement.
    """
    assert titv_class("G", "A") == "C>T"
    assert titv_class("A", "G") == "T>C"
    assert titv_class("c", "a") == "C>A"
    assert titv_class("C", "C") is None
    assert titv_class("CT", "A") is None
    assert titv_class("-", "A") is None
    assert titv_class(None, "A") is None


@pytest.mark.api
def test_titv_fractions(rich_source):
    """
    Ensures per-sample class percentages, with zeros for samples without SNPs.

    Args:
        rich_source (MafTable): Rich record source.
    """
    samples = ["S1", "S2", "S3", "S4", "S5", "S6"]
    fractions = titv_fractions(rich_source, samples)
    assert fractions.columns.tolist() == list(TITV_CLASSES)
    assert fractions.index.tolist() == samples
    assert fractions.loc["S1", "C>T"] == pytest.approx(50.0)
    assert fractions.loc["S1", "C>A"] == pytest.approx(50.0)
    assert fractions.loc["S2", "C>T"] == pytest.approx(100.0)
    assert fractions.loc["S3", "T>C"] == pytest.approx(100.0)
    assert fractions.loc["S4", "C>A"] == pytest.approx(100.0)
    assert fractions.loc["S5"].sum() == 0
    assert fractions.loc["S6"].sum() == 0


@pytest.mark.api
def test_highlight_cells(rich_source, rich_matrix):
    """
    Ensures cells whose records carry the requested value are marked.

    Args:
        rich_source (MafTable): Rich record source.
        rich_matrix (OncoMatrix): Rich matrix.
    """
    mask = highlight_cells(rich_source, "Hotspot", "yes", rich_matrix.genes, rich_matrix.samples)
    assert mask.shape == rich_matrix.shape
    assert bool(mask.at["TP53", "S1"])
    assert bool(mask.at["KRAS", "S4"])
    assert int(mask.to_numpy().sum()) == 2


@pytest.mark.api
def test_highlight_cells_skip_synonymous_records():
    """
    Ensures synonymous records are only highlighted when explicitly included.
    """
    records = pd.DataFrame(
        {
            "Tumor_Sample_Barcode": ["S1", "S2"],
            "Hugo_Symbol": ["TP53", "TP53"],
            "Variant_Classification": ["Silent", "Missense_Mutation"],
            "Hotspot": ["yes", "no"],
        }
    )
    source = MafTable(records)
    with pytest.warns(EmptyHighlightWarning):
        mask = highlight_cells(source, "Hotspot", "yes", ["TP53"], ["S1", "S2"])
    assert not mask.to_numpy().any()

    mask = highlight_cells(
        source, "Hotspot", "yes", ["TP53"], ["S1", "S2"], include_synonymous=True
    )
    assert bool(mask.at["TP53", "S1"])
    assert not bool(mask.at["TP53", "S2"])


@pytest.mark.api
def test_highlight_cells_errors(rich_source, rich_matrix):
    """
    Ensures unknown fields raise and unmatched values warn.

    Raises:
        AdditionalFeatureNotFoundError: If the field does not exist.
    """
    with pytest.raises(AdditionalFeatureNotFoundError):
        highlight_cells(rich_source, "Nope", "yes", rich_matrix.genes, rich_matrix.samples)
    with pytest.warns(EmptyHighlightWarning):
        mask = highlight_cells(rich_source, "Hotspot", "maybe", rich_matrix.genes, rich_matrix.samples)
    assert not mask.to_numpy().any()


@pytest.mark.api
def test_percent_altered_and_title(rich_matrix):
    """
    Ensures per-gene percentages are rounded against the cohort and titles format cleanly.

    Args:
        rich_matrix (OncoMatrix): Rich matrix.
    """
    pct = percent_altered(rich_matrix, 7)
    assert pct.to_dict() == {"TP53": 43, "KRAS": 43, "EGFR": 29}
    assert altered_summary(2, 3) == "Altered in 2 (66.67%) of 3 samples."
    assert altered_summary(3, 4) == "Altered in 3 (75%) of 4 samples."
    with pytest.raises(ValueError):
        altered_summary(1, 0)
