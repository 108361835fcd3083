"""
oncoplot/core/matrix
~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

import csv
import io
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, TYPE_CHECKING

import numpy as np
import pandas as pd

from .alteration import (
    CNV_EVENTS,
    NO_ALTERATION,
    Alteration,
    CategoryCodes,
    collapse_categories,
    order_labels,
)
from ..util.warnings import UnresolvableGeneWarning, warn

if TYPE_CHECKING:
    from .records import RecordSource


class OncoMatrix:
    """
    Immutable pair of gene × sample matrices: category labels and integer codes.

    Note: both matrices always share identical row (gene) and column (sample) keys
    and ordering. Every operation returns a new, re-validated OncoMatrix.
    """

    def __init__(
        self,
        labels: pd.DataFrame,
        codes: Optional[CategoryCodes] = None,
        *,
        cnv_events: Iterable[str] = CNV_EVENTS,
    ) -> None:
        """
        Initializes OncoMatrix.

        Args:
            labels (pd.DataFrame): Cell labels with genes as index and samples as columns.
                Missing values are read as "no alteration".
            codes (Optional[CategoryCodes]): Code table. Defaults to a table derived
                from the labels present.

        Kwargs:
            cnv_events (Iterable[str]): Categories read as copy-number events when a
                label holds a single part. Defaults to ("Amp", "Del").
        """
        self.cnv_events = tuple(cnv_events)
        labels = labels.copy().fillna(NO_ALTERATION).astype(str)
        labels.index = pd.Index([str(g) for g in labels.index])
        labels.columns = pd.Index([str(s) for s in labels.columns])
        self.labels = labels

        distinct = pd.unique(labels.to_numpy().ravel()) if labels.size else []
        # Parsing validates every label and fixes the code priority order
        alterations = [Alteration.from_label(lab, self.cnv_events) for lab in distinct]
        if codes is None:
            codes = CategoryCodes(order_labels(alterations))
        self.codes = codes
        self.numeric = self._encode(labels, codes)

        self._validate()

    @staticmethod
    def _encode(labels: pd.DataFrame, codes: CategoryCodes) -> pd.DataFrame:
        """
        Encodes a label frame through a code table.

        Raises:
            ValueError: If a label has no code.
        """
        lookup = codes.as_dict()
        unknown = sorted(set(labels.to_numpy().ravel().tolist()) - set(lookup))
        if unknown:
            raise ValueError(f"Labels without a category code: {unknown}")
        values = np.vectorize(lookup.__getitem__, otypes=[np.int64])(labels.to_numpy())
        return pd.DataFrame(values, index=labels.index.copy(), columns=labels.columns.copy())

    def _validate(self) -> None:
        """
        Validates key uniqueness and label/code parity.

        Raises:
            ValueError: If the matrices are inconsistent.
        """
        if self.labels.index.has_duplicates:
            raise ValueError("OncoMatrix genes must be unique")
        if self.labels.columns.has_duplicates:
            raise ValueError("OncoMatrix samples must be unique")
        if not (
            self.numeric.index.equals(self.labels.index)
            and self.numeric.columns.equals(self.labels.columns)
        ):
            raise ValueError("Label and numeric matrices must share row and column keys")

    # --------------------------------------------------------
    # Accessors
    # --------------------------------------------------------

    @property
    def genes(self) -> List[str]:
        return self.labels.index.tolist()

    @property
    def samples(self) -> List[str]:
        return self.labels.columns.tolist()

    @property
    def shape(self) -> Tuple[int, int]:
        return self.labels.shape

    def cell(self, gene: str, sample: str) -> Alteration:
        """
        Returns the alteration of one cell.

        Args:
            gene (str): Gene identifier.
            sample (str): Sample identifier.

        Returns:
            Alteration: Parsed cell contents.
        """
        return Alteration.from_label(self.labels.at[gene, sample], self.cnv_events)

    def present_labels(self) -> List[str]:
        """
        Returns the non-empty labels present in the matrix.

        Returns:
            List[str]: Labels in code order.
        """
        present = set(np.unique(self.numeric.to_numpy()).tolist())
        return [lab for lab in self.codes.labels if self.codes.code(lab) in present]

    def component_labels(self) -> List[str]:
        """
        Returns every single category present, composite labels split into parts.

        Returns:
            List[str]: Distinct categories in code order of their first appearance.
        """
        out: Dict[str, None] = {}
        for lab in self.present_labels():
            alt = Alteration.from_label(lab, self.cnv_events)
            for part in (alt.mutation, alt.copy_number):
                if part is not None:
                    out.setdefault(part)
        return list(out)

    def binary(self, *, mutations_only: bool = False) -> pd.DataFrame:
        """
        Returns a boolean altered/not-altered frame.

        Kwargs:
            mutations_only (bool): Count only cells carrying a point mutation, ignoring
                copy-number-only cells. Defaults to False.

        Returns:
            pd.DataFrame: Boolean frame aligned to the matrix.
        """
        values = self.numeric.to_numpy()
        if mutations_only:
            mut_codes = [
                self.codes.code(lab)
                for lab in self.codes.labels
                if Alteration.from_label(lab, self.cnv_events).mutation is not None
            ]
            mask = np.isin(values, mut_codes)
        else:
            mask = values != 0
        return pd.DataFrame(mask, index=self.labels.index.copy(), columns=self.labels.columns.copy())

    def altered_counts(self, axis: str = "genes", *, mutations_only: bool = False) -> pd.Series:
        """
        Counts altered cells per gene or per sample.

        Args:
            axis (str): One of {"genes", "samples"}. Defaults to "genes".

        Kwargs:
            mutations_only (bool): Count only point-mutation cells. Defaults to False.

        Returns:
            pd.Series: Integer counts keyed by gene or sample.
        """
        if axis not in {"genes", "samples"}:
            raise ValueError("axis must be 'genes' or 'samples'")
        mask = self.binary(mutations_only=mutations_only)
        return mask.sum(axis=1 if axis == "genes" else 0).astype(int)

    # --------------------------------------------------------
    # Derived matrices
    # --------------------------------------------------------

    def _derive(self, labels: pd.DataFrame) -> OncoMatrix:
        return OncoMatrix(labels, self.codes, cnv_events=self.cnv_events)

    def reorder(
        self,
        genes: Optional[Sequence[str]] = None,
        samples: Optional[Sequence[str]] = None,
    ) -> OncoMatrix:
        """
        Returns the matrix with rows and/or columns permuted.

        Args:
            genes (Optional[Sequence[str]]): New gene order (a permutation). Defaults to None.
            samples (Optional[Sequence[str]]): New sample order (a permutation). Defaults to None.

        Returns:
            OncoMatrix: Reordered matrix with identical cell contents.

        Raises:
            ValueError: If an order is not a permutation of the current keys.
        """
        genes = self.genes if genes is None else list(genes)
        samples = self.samples if samples is None else list(samples)
        if sorted(genes) != sorted(self.genes):
            raise ValueError("Gene order must be a permutation of the matrix genes")
        if sorted(samples) != sorted(self.samples):
            raise ValueError("Sample order must be a permutation of the matrix samples")
        return self._derive(self.labels.loc[genes, samples])

    def subset(
        self,
        genes: Optional[Sequence[str]] = None,
        samples: Optional[Sequence[str]] = None,
    ) -> OncoMatrix:
        """
        Returns the matrix restricted to (and ordered by) the given keys.

        Raises:
            KeyError: If a key is absent from the matrix.
        """
        genes = self.genes if genes is None else list(genes)
        samples = self.samples if samples is None else list(samples)
        known_genes, known_samples = set(self.genes), set(self.samples)
        missing = [g for g in genes if g not in known_genes]
        missing += [s for s in samples if s not in known_samples]
        if missing:
            raise KeyError(f"Keys absent from the matrix: {missing}")
        return self._derive(self.labels.loc[genes, samples])

    def select_samples(self, samples: Sequence[str]) -> OncoMatrix:
        """
        Returns the matrix restricted to the given samples, in the given order.
        """
        return self.subset(samples=samples)

    def drop_genes(self, genes: Iterable[str]) -> OncoMatrix:
        """
        Returns the matrix without the given genes (unknown genes are ignored).
        """
        drop = set(genes)
        return self._derive(self.labels.loc[[g for g in self.genes if g not in drop], :])

    def with_samples(self, samples: Iterable[str]) -> OncoMatrix:
        """
        Returns the matrix with unaltered columns appended for samples not yet present.

        Args:
            samples (Iterable[str]): Samples to include.

        Returns:
            OncoMatrix: Matrix whose new columns are all "no alteration".
        """
        current = set(self.samples)
        extra = [s for s in dict.fromkeys(str(s) for s in samples) if s not in current]
        if not extra:
            return self
        filler = pd.DataFrame(NO_ALTERATION, index=self.labels.index, columns=extra)
        return self._derive(pd.concat([self.labels, filler], axis=1))

    # --------------------------------------------------------
    # Delimited text format
    # --------------------------------------------------------

    def to_tsv(self, path_or_buf=None) -> Optional[str]:
        """
        Writes the label matrix as tab-separated text.

        The header row holds the sample identifiers only, the first column holds
        gene identifiers, cells hold the composite labels and nothing is quoted.

        Args:
            path_or_buf: File path or buffer. Defaults to None (return a string).

        Returns:
            Optional[str]: The text when `path_or_buf` is None.

        Raises:
            ValueError: If an identifier or label contains a tab or newline.
        """
        tokens = self.genes + self.samples + self.codes.labels
        bad = [t for t in tokens if "\t" in t or "\n" in t or "\r" in t]
        if bad:
            raise ValueError(f"Identifiers or labels contain tabs or newlines: {bad}")
        return self.labels.to_csv(
            path_or_buf,
            sep="\t",
            index_label=False,
            quoting=csv.QUOTE_NONE,
            lineterminator="\n",
        )

    @classmethod
    def read_tsv(
        cls,
        path_or_buf,
        *,
        cnv_events: Iterable[str] = CNV_EVENTS,
    ) -> OncoMatrix:
        """
        Reads a matrix written by `to_tsv`.

        Args:
            path_or_buf: File path or buffer.

        Kwargs:
            cnv_events (Iterable[str]): Categories read as copy-number events.
                Defaults to ("Amp", "Del").

        Returns:
            OncoMatrix: Matrix with codes derived from the labels present.
        """
        if hasattr(path_or_buf, "read"):
            text = path_or_buf.read()
        else:
            with open(path_or_buf, encoding="utf-8", newline="") as handle:
                text = handle.read()
        header, _, body = text.partition("\n")
        if header.rstrip("\r") == "":
            # No sample columns: rows hold the gene identifier only
            genes = [line.rstrip("\r").split("\t")[0] for line in body.split("\n") if line]
            df = pd.DataFrame(
                index=pd.Index(genes), columns=pd.Index([], dtype=object), dtype=object
            )
            return cls(df, cnv_events=cnv_events)

        # A header one field shorter than the rows makes pandas use column 0 as index
        df = pd.read_csv(
            io.StringIO(text),
            sep="\t",
            dtype=str,
            keep_default_na=False,
            na_filter=False,
            quoting=csv.QUOTE_NONE,
        )
        df.index = pd.Index([str(g) for g in df.index])
        return cls(df, cnv_events=cnv_events)

    def __repr__(self) -> str:
        n_genes, n_samples = self.shape
        return f"OncoMatrix(genes={n_genes}, samples={n_samples}, categories={len(self.codes)})"


def build_onco_matrix(
    source: RecordSource,
    genes: Iterable[str],
    *,
    add_missing: bool = False,
    add_unaltered_samples: Optional[bool] = None,
    cnv_events: Iterable[str] = CNV_EVENTS,
) -> OncoMatrix:
    """
    Builds the gene × sample alteration matrix for the requested genes.

    Args:
        source (RecordSource): Mutation record source.
        genes (Iterable[str]): Genes to include as rows, in row order.

    Kwargs:
        add_missing (bool): Keep requested genes without records as all-zero rows
            instead of dropping them with a warning. Defaults to False.
        add_unaltered_samples (Optional[bool]): Keep cohort samples without any
            alteration in the requested genes as all-zero columns. Defaults to
            `add_missing`.
        cnv_events (Iterable[str]): Categories that denote copy-number events.
            Defaults to ("Amp", "Del").

    Returns:
        OncoMatrix: Matrix with one row per (kept) requested gene.

    Raises:
        ValueError: If no genes are requested.
    """
    requested = list(dict.fromkeys(str(g) for g in genes))
    if not requested:
        raise ValueError("At least one gene must be requested")
    available = set(source.genes())
    missing = [g for g in requested if g not in available]
    if missing and not add_missing:
        warn(
            f"{len(missing)} requested gene(s) not found in records and ignored: {missing}",
            UnresolvableGeneWarning,
        )
        requested = [g for g in requested if g in available]

    # Gather categories per cell in record order
    cnv = set(cnv_events)
    mutations: Dict[Tuple[str, str], List[str]] = {}
    copy_numbers: Dict[Tuple[str, str], List[str]] = {}
    for rec in source.records(genes=requested):
        key = (rec.gene, rec.sample)
        mutations.setdefault(key, [])
        copy_numbers.setdefault(key, [])
        if rec.category in cnv:
            copy_numbers[key].append(rec.category)
        else:
            mutations[key].append(rec.category)
        if rec.copy_number:
            copy_numbers[key].append(rec.copy_number)
    cells = {key: collapse_categories(mutations[key], copy_numbers[key]) for key in mutations}

    # Resolve columns: altered samples in cohort order, optionally the full cohort
    include_unaltered = add_missing if add_unaltered_samples is None else add_unaltered_samples
    altered = {s for (_g, s), alt in cells.items() if alt.is_altered}
    samples = [s for s in source.samples() if include_unaltered or s in altered]
    seen = set(samples)
    for _g, s in cells:
        if s in altered and s not in seen:
            samples.append(s)
            seen.add(s)

    data = [
        [cells[(g, s)].label if (g, s) in cells else NO_ALTERATION for s in samples]
        for g in requested
    ]
    labels = pd.DataFrame(data, index=pd.Index(requested), columns=pd.Index(samples), dtype=object)
    codes = CategoryCodes(order_labels(cells.values()))
    return OncoMatrix(labels, codes, cnv_events=cnv_events)
