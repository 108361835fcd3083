"""
tests/test_matrix
~~~~~~~~~~~~~~~~~
"""

import io

import pandas as pd
import pytest

from oncoplot import OncoMatrix, build_onco_matrix
from oncoplot.util.warnings import UnresolvableGeneWarning


def _assert_parity(matrix):
    """
    Asserts label/code parity of a matrix.

    Args:
        matrix (OncoMatrix): Matrix to check.
    """
    assert matrix.labels.index.equals(matrix.numeric.index)
    assert matrix.labels.columns.equals(matrix.numeric.columns)
    for gene in matrix.genes:
        for sample in matrix.samples:
            assert matrix.numeric.at[gene, sample] == matrix.codes.code(matrix.labels.at[gene, sample])


@pytest.mark.api
def test_builder_rows_are_requested_genes(scenario_matrix):
    """
    Ensures rows are exactly the requested genes and columns follow the cohort.

    Args:
        scenario_matrix (OncoMatrix): Scenario matrix.
    """
    assert scenario_matrix.genes == ["G1", "G2", "G3"]
    assert scenario_matrix.samples == ["S1", "S2", "S3"]
    assert scenario_matrix.labels.loc["G3"].tolist() == ["", "", ""]
    assert scenario_matrix.labels.at["G2", "S2"] == "Silent"
    _assert_parity(scenario_matrix)


@pytest.mark.api
def test_builder_add_missing_keeps_zero_row(scenario_source):
    """
    Ensures a requested gene without records becomes an all-zero row with add_missing.

    Args:
        scenario_source (MafTable): Scenario record source.
    """
    matrix = build_onco_matrix(scenario_source, ["G1", "G4"], add_missing=True)
    assert matrix.genes == ["G1", "G4"]
    assert (matrix.numeric.loc["G4"] == 0).all()


@pytest.mark.api
def test_builder_drops_unresolvable_genes_with_warning(scenario_source):
    """
    Ensures absent genes are dropped with a warning naming them.

    Args:
        scenario_source (MafTable): Scenario record source.
    """
    with pytest.warns(UnresolvableGeneWarning, match="G4"):
        matrix = build_onco_matrix(scenario_source, ["G1", "G4"])
    assert matrix.genes == ["G1"]
    assert matrix.samples == ["S1", "S2"]


@pytest.mark.api
def test_builder_collapses_cells(rich_matrix):
    """
    Ensures multi-hit, composite and complex cells collapse as expected.

    Args:
        rich_matrix (OncoMatrix): Rich matrix.
    """
    labels = rich_matrix.labels
    assert labels.at["TP53", "S1"] == "Multi_Hit"
    assert labels.at["TP53", "S2"] == "Missense_Mutation;Amp"
    assert labels.at["KRAS", "S3"] == "Amp"
    assert labels.at["EGFR", "S5"] == "Frame_Shift_Del;Amp"
    assert labels.at["KRAS", "S6"] == "Complex_Event"
    assert rich_matrix.samples == ["S1", "S2", "S3", "S4", "S5", "S6"]
    assert rich_matrix.codes.labels == [
        "Splice_Site",
        "Missense_Mutation",
        "Multi_Hit",
        "Amp",
        "Del",
        "Complex_Event",
        "Frame_Shift_Del;Amp",
        "Missense_Mutation;Amp",
    ]
    _assert_parity(rich_matrix)


@pytest.mark.api
def test_builder_rejects_empty_request(scenario_source):
    """
    Ensures an empty gene request is rejected.

    Raises:
        ValueError: If no genes are requested.
    """
    with pytest.raises(ValueError):
        build_onco_matrix(scenario_source, [])


@pytest.mark.api
def test_cell_and_binary_views(rich_matrix):
    """
    Ensures cell lookup and mutation-only binary views agree with the labels.

    Args:
        rich_matrix (OncoMatrix): Rich matrix.
    """
    assert rich_matrix.cell("EGFR", "S5").copy_number == "Amp"
    altered = rich_matrix.binary()
    mutated = rich_matrix.binary(mutations_only=True)
    assert bool(altered.at["KRAS", "S3"]) and not bool(mutated.at["KRAS", "S3"])
    assert bool(mutated.at["TP53", "S2"])
    assert rich_matrix.altered_counts("genes").to_dict() == {"TP53": 3, "KRAS": 3, "EGFR": 2}
    assert rich_matrix.altered_counts("genes", mutations_only=True).to_dict() == {
        "TP53": 3,
        "KRAS": 1,
        "EGFR": 1,
    }
    assert rich_matrix.component_labels() == [
        "Splice_Site",
        "Missense_Mutation",
        "Multi_Hit",
        "Amp",
        "Del",
        "Complex_Event",
        "Frame_Shift_Del",
    ]


@pytest.mark.api
def test_derived_matrices_keep_parity(rich_matrix):
    """
    Ensures reorder, drop, select and append operations keep label/code parity.

    Args:
        rich_matrix (OncoMatrix): Rich matrix.
    """
    reordered = rich_matrix.reorder(genes=["EGFR", "TP53", "KRAS"], samples=rich_matrix.samples[::-1])
    assert reordered.genes == ["EGFR", "TP53", "KRAS"]
    assert reordered.codes == rich_matrix.codes
    _assert_parity(reordered)

    dropped = rich_matrix.drop_genes(["KRAS", "NOPE"])
    assert dropped.genes == ["TP53", "EGFR"]
    _assert_parity(dropped)

    selected = rich_matrix.select_samples(["S5", "S1"])
    assert selected.samples == ["S5", "S1"]
    _assert_parity(selected)

    extended = rich_matrix.with_samples(["S1", "S7"])
    assert extended.samples[-1] == "S7"
    assert (extended.numeric["S7"] == 0).all()
    _assert_parity(extended)

    # Source matrix is untouched
    assert rich_matrix.samples == ["S1", "S2", "S3", "S4", "S5", "S6"]


@pytest.mark.api
def test_reorder_requires_permutation(rich_matrix):
    """
    Ensures reorder rejects orders that are not permutations.

    Raises:
        ValueError: If a key is missing or unknown.
    """
    with pytest.raises(ValueError):
        rich_matrix.reorder(genes=["TP53", "KRAS"])
    with pytest.raises(KeyError):
        rich_matrix.select_samples(["S1", "S99"])


@pytest.mark.api
def test_duplicate_keys_raise():
    """
    Ensures duplicate genes or samples are rejected.

    Raises:
        ValueError: If keys repeat.
    """
    labels = pd.DataFrame([["Silent"], ["Silent"]], index=["G1", "G1"], columns=["S1"])
    with pytest.raises(ValueError):
        OncoMatrix(labels)


@pytest.mark.api
def test_labels_without_codes_raise():
    """
    Ensures labels absent from an explicit code table are rejected.

    Raises:
        ValueError: If a label has no code.
    """
    from oncoplot.core.alteration import CategoryCodes

    labels = pd.DataFrame([["Silent", "Amp"]], index=["G1"], columns=["S1", "S2"])
    with pytest.raises(ValueError):
        OncoMatrix(labels, CategoryCodes(["Silent"]))


@pytest.mark.api
def test_tsv_format_and_round_trip(rich_matrix):
    """
    Ensures the delimited text format has a sample-only header and round-trips labels.

    Args:
        rich_matrix (OncoMatrix): Rich matrix.
    """
    text = rich_matrix.to_tsv()
    lines = text.split("\n")
    assert lines[0] == "\t".join(rich_matrix.samples)
    assert lines[1].startswith("TP53\tMulti_Hit\tMissense_Mutation;Amp\t")
    assert '"' not in text

    restored = OncoMatrix.read_tsv(io.StringIO(text))
    assert restored.genes == rich_matrix.genes
    assert restored.samples == rich_matrix.samples
    assert restored.labels.to_numpy().tolist() == rich_matrix.labels.to_numpy().tolist()
    _assert_parity(restored)


@pytest.mark.api
def test_tsv_round_trip_through_file(scenario_matrix, tmp_path):
    """
    Ensures writing to and reading from a file preserves empty rows.

    Args:
        scenario_matrix (OncoMatrix): Scenario matrix with an all-empty row.
        tmp_path (Path): Temporary directory.
    """
    path = tmp_path / "onco_matrix.txt"
    scenario_matrix.to_tsv(path)
    restored = OncoMatrix.read_tsv(path)
    assert restored.labels.loc["G3"].tolist() == ["", "", ""]
    assert restored.labels.at["G1", "S2"] == "Nonsense_Mutation"


@pytest.mark.api
def test_tsv_round_trip_without_samples(scenario_source):
    """
    Ensures a matrix with genes but no sample columns keeps its genes through text.

    Args:
        scenario_source (MafTable): Scenario record source.
    """
    matrix = build_onco_matrix(
        scenario_source, ["G8", "G9"], add_missing=True, add_unaltered_samples=False
    )
    assert matrix.shape == (2, 0)
    text = matrix.to_tsv()
    assert text.split("\n")[0] == ""

    restored = OncoMatrix.read_tsv(io.StringIO(text))
    assert restored.shape == (2, 0)
    assert restored.genes == ["G8", "G9"]
    assert restored.samples == []
    _assert_parity(restored)


@pytest.mark.api
def test_tsv_rejects_tabs_in_identifiers():
    """
    Ensures identifiers containing tabs cannot be written.

    Raises:
        ValueError: If an identifier contains a tab.
    """
    labels = pd.DataFrame([["Silent"]], index=["G\t1"], columns=["S1"])
    with pytest.raises(ValueError):
        OncoMatrix(labels).to_tsv()
