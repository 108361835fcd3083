"""
oncoplot/core/records
~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Protocol

import pandas as pd

from .alteration import CNV_EVENTS

SAMPLE_COL = "Tumor_Sample_Barcode"
GENE_COL = "Hugo_Symbol"
CATEGORY_COL = "Variant_Classification"


@dataclass(frozen=True)
class MutationRecord:
    """
    Data class for one alteration attributed to a (gene, sample) pair.
    """

    sample: str
    gene: str
    category: str
    copy_number: Optional[str] = None
    fields: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)


class RecordSource(Protocol):
    """
    Class for defining the iteration contract of a mutation record source.
    Protocol only; see MafTable for the pandas-backed implementation.
    """

    def samples(self) -> List[str]:
        """Distinct samples of the cohort, in cohort order."""
        ...

    def genes(self) -> List[str]:
        """Distinct genes with at least one record."""
        ...

    def fields(self) -> List[str]:
        """Names of every field carried by the records."""
        ...

    def records(
        self,
        genes: Optional[Iterable[str]] = None,
        samples: Optional[Iterable[str]] = None,
    ) -> Iterator[MutationRecord]:
        """Iterates records, optionally restricted to genes and/or samples."""
        ...


class MafTable:
    """
    Class for serving mutation records from a MAF-like pandas DataFrame.

    Note: the table is copied on construction and treated as immutable.
    """

    def __init__(
        self,
        df: pd.DataFrame,
        *,
        sample_col: str = SAMPLE_COL,
        gene_col: str = GENE_COL,
        category_col: str = CATEGORY_COL,
        copy_number_col: Optional[str] = None,
        cohort: Optional[Iterable[str]] = None,
        cnv_events: Iterable[str] = CNV_EVENTS,
    ) -> None:
        """
        Initializes the MafTable instance.

        Args:
            df (pd.DataFrame): One row per record.

        Kwargs:
            sample_col (str): Sample identifier column. Defaults to "Tumor_Sample_Barcode".
            gene_col (str): Gene identifier column. Defaults to "Hugo_Symbol".
            category_col (str): Category column. Defaults to "Variant_Classification".
            copy_number_col (Optional[str]): Optional copy-number label column. Defaults to None.
            cohort (Optional[Iterable[str]]): All sequenced samples, including samples
                without records. Defaults to the samples of `df` in first-seen order.
            cnv_events (Iterable[str]): Categories that denote copy-number events.
                Defaults to ("Amp", "Del").
        """
        self.df = df.copy()
        self.sample_col = sample_col
        self.gene_col = gene_col
        self.category_col = category_col
        self.copy_number_col = copy_number_col
        self.cnv_events = tuple(cnv_events)

        self._validate()

        # Identifiers are handled as strings throughout
        for col in (sample_col, gene_col, category_col):
            self.df[col] = self.df[col].astype(str)
        record_samples = list(dict.fromkeys(self.df[sample_col].tolist()))
        if cohort is None:
            self._cohort = record_samples
        else:
            self._cohort = list(dict.fromkeys(str(s) for s in cohort))
            cohort_set = set(self._cohort)
            unknown = [s for s in record_samples if s not in cohort_set]
            # Samples with records always belong to the cohort
            self._cohort.extend(unknown)

    def _validate(self) -> None:
        """
        Validates required columns and identifier completeness.

        Raises:
            ValueError: If a required column is missing or holds missing identifiers.
        """
        required = [self.sample_col, self.gene_col, self.category_col]
        if self.copy_number_col is not None:
            required.append(self.copy_number_col)
        missing = [c for c in required if c not in self.df.columns]
        if missing:
            raise ValueError(
                f"Record table is missing required column(s) {missing}. "
                f"Available columns: {list(self.df.columns)}"
            )
        for col in (self.sample_col, self.gene_col, self.category_col):
            if self.df[col].isna().any():
                raise ValueError(f"Record table column {col!r} contains missing values")

    def samples(self) -> List[str]:
        """
        Returns the cohort samples.

        Returns:
            List[str]: Cohort samples in cohort order.
        """
        return list(self._cohort)

    def genes(self) -> List[str]:
        """
        Returns the genes with at least one record.

        Returns:
            List[str]: Genes in first-seen order.
        """
        return list(dict.fromkeys(self.df[self.gene_col].tolist()))

    def fields(self) -> List[str]:
        """
        Returns the column names of the record table.

        Returns:
            List[str]: Field names.
        """
        return [str(c) for c in self.df.columns]

    @property
    def cohort_size(self) -> int:
        return len(self._cohort)

    def records(
        self,
        genes: Optional[Iterable[str]] = None,
        samples: Optional[Iterable[str]] = None,
    ) -> Iterator[MutationRecord]:
        """
        Iterates records in table order.

        Args:
            genes (Optional[Iterable[str]]): Restrict to these genes. Defaults to None.
            samples (Optional[Iterable[str]]): Restrict to these samples. Defaults to None.

        Yields:
            MutationRecord: One record per table row.
        """
        sub = self.df
        if genes is not None:
            sub = sub[sub[self.gene_col].isin(list(genes))]
        if samples is not None:
            sub = sub[sub[self.sample_col].isin(list(samples))]
        for row in sub.to_dict(orient="records"):
            copy_number = None
            if self.copy_number_col is not None:
                cn = row.get(self.copy_number_col)
                if cn is not None and not pd.isna(cn) and str(cn) != "":
                    copy_number = str(cn)
            yield MutationRecord(
                sample=row[self.sample_col],
                gene=row[self.gene_col],
                category=row[self.category_col],
                copy_number=copy_number,
                fields=row,
            )
