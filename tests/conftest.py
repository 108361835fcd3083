"""
tests/conftest
~~~~~~~~~~~~~~
"""

import pandas as pd
import pytest

from oncoplot import AnnotationTable, MafTable, OncoMatrix, build_onco_matrix


@pytest.fixture(scope="session")
def scenario_df():
    """
    Returns three records: G1 altered in S1 and S2, G2 altered in S2.

    Returns:
        pd.DataFrame: MAF-like record table.
    """
    return pd.DataFrame(
        {
            "Tumor_Sample_Barcode": ["S1", "S2", "S2"],
            "Hugo_Symbol": ["G1", "G1", "G2"],
            "Variant_Classification": ["Missense_Mutation", "Nonsense_Mutation", "Silent"],
            "Reference_Allele": ["C", "G", "A"],
            "Tumor_Seq_Allele2": ["T", "A", "G"],
        }
    )


@pytest.fixture(scope="session")
def scenario_source(scenario_df):
    """
    Returns a record source over the scenario records with cohort S1, S2, S3.

    Args:
        scenario_df (pd.DataFrame): Scenario records.

    Returns:
        MafTable: Record source; S3 has no records.
    """
    return MafTable(scenario_df, cohort=["S1", "S2", "S3"])


@pytest.fixture(scope="session")
def scenario_matrix(scenario_source):
    """
    Returns the G1/G2/G3 × S1/S2/S3 matrix; G3 and S3 carry no alteration.

    Args:
        scenario_source (MafTable): Scenario record source.

    Returns:
        OncoMatrix: Unsorted matrix.
    """
    return build_onco_matrix(scenario_source, ["G1", "G2", "G3"], add_missing=True)


@pytest.fixture(scope="session")
def rich_df():
    """
    Returns records covering multi-hit, copy-number and composite cells.

    Returns:
        pd.DataFrame: MAF-like record table with a copy-number column "CN".
    """
    rows = [
        ("S1", "TP53", "Missense_Mutation", None, "C", "T", "yes"),
        ("S1", "TP53", "Nonsense_Mutation", None, "C", "A", "no"),
        ("S2", "TP53", "Missense_Mutation", "Amp", "G", "A", "no"),
        ("S3", "KRAS", "Amp", None, None, None, "no"),
        ("S3", "TP53", "Splice_Site", None, "A", "G", "no"),
        ("S4", "KRAS", "Missense_Mutation", None, "G", "T", "yes"),
        ("S4", "EGFR", "Del", None, None, None, "no"),
        ("S5", "EGFR", "Frame_Shift_Del", None, "T", "-", "no"),
        ("S5", "EGFR", "Amp", None, None, None, "no"),
        ("S6", "KRAS", "Amp", None, None, None, "no"),
        ("S6", "KRAS", "Del", None, None, None, "no"),
    ]
    return pd.DataFrame(
        rows,
        columns=[
            "Tumor_Sample_Barcode",
            "Hugo_Symbol",
            "Variant_Classification",
            "CN",
            "Reference_Allele",
            "Tumor_Seq_Allele2",
            "Hotspot",
        ],
    )


@pytest.fixture(scope="session")
def rich_source(rich_df):
    """
    Returns a record source over the rich records with an unaltered cohort sample S7.

    Args:
        rich_df (pd.DataFrame): Rich records.

    Returns:
        MafTable: Record source reading copy-number labels from "CN".
    """
    return MafTable(
        rich_df,
        copy_number_col="CN",
        cohort=["S1", "S2", "S3", "S4", "S5", "S6", "S7"],
    )


@pytest.fixture(scope="session")
def rich_matrix(rich_source):
    """
    Returns the TP53/KRAS/EGFR matrix over the altered samples.

    Args:
        rich_source (MafTable): Rich record source.

    Returns:
        OncoMatrix: Unsorted matrix.
    """
    return build_onco_matrix(rich_source, ["TP53", "KRAS", "EGFR"])


@pytest.fixture(scope="session")
def grouped_matrix():
    """
    Returns a 2 × 4 matrix whose staircase order is S1, S2, S3, S4.

    Returns:
        OncoMatrix: Matrix built directly from labels.
    """
    labels = pd.DataFrame(
        [
            ["Missense_Mutation", "Missense_Mutation", "", ""],
            ["", "", "Missense_Mutation", "Missense_Mutation"],
        ],
        index=["G1", "G2"],
        columns=["S1", "S2", "S3", "S4"],
    )
    return OncoMatrix(labels)


@pytest.fixture(scope="session")
def group_annotation():
    """
    Returns an annotation with group B for S1 and group A for S2-S4.

    Returns:
        AnnotationTable: Annotation with a categorical "Group" and a numeric "Score".
    """
    df = pd.DataFrame(
        {
            "Tumor_Sample_Barcode": ["S1", "S2", "S3", "S4", "S9"],
            "Group": ["B", "A", "A", "A", "C"],
            "Score": [1.0, 3.0, float("nan"), 2.0, 0.0],
        }
    )
    return AnnotationTable(df)


@pytest.fixture(scope="session")
def rich_annotation_df():
    """
    Returns clinical annotation rows for every rich cohort sample.

    Returns:
        pd.DataFrame: Annotation with "Subtype" (one missing value) and "Age".
    """
    return pd.DataFrame(
        {
            "Tumor_Sample_Barcode": ["S1", "S2", "S3", "S4", "S5", "S6", "S7"],
            "Subtype": ["Basal", "Basal", "LumA", "LumA", "Basal", None, "LumB"],
            "Age": [51, 63, 47, 70, 58, 66, 39],
        }
    )
