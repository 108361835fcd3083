"""
oncoplot/core/errors
~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from typing import Iterable, List


class OncoplotError(Exception):
    """
    Base class for fatal conditions that abort an oncoplot before layout.
    """


class InsufficientGenesError(OncoplotError, ValueError):
    """
    Fewer than two genes remain after filtering.
    """

    def __init__(self, n_genes: int) -> None:
        self.n_genes = int(n_genes)
        super().__init__(
            f"Oncoplot requires at least two genes for plotting (got {self.n_genes})"
        )


class UnknownSampleError(OncoplotError, ValueError):
    """
    None of the samples of an explicit sample order are present in the matrix.
    """

    def __init__(self, samples: Iterable[str]) -> None:
        self.samples: List[str] = list(samples)
        super().__init__(
            f"None of the provided samples are present in the matrix: {self.samples}"
        )


class MissingAnnotationRowsError(OncoplotError, ValueError):
    """
    Matrix columns (samples) are absent from a supplied annotation table.
    """

    def __init__(self, samples: Iterable[str]) -> None:
        self.samples: List[str] = list(samples)
        super().__init__(
            f"{len(self.samples)} matrix sample(s) missing from annotation table: {self.samples}"
        )


class AdditionalFeatureNotFoundError(OncoplotError, ValueError):
    """
    A requested highlight feature is not a field of the record source.
    """

    def __init__(self, feature: str, available: Iterable[str]) -> None:
        self.feature = feature
        self.available: List[str] = list(available)
        super().__init__(
            f"Column {feature!r} not found in records. Available fields: {self.available}"
        )


class UnknownAnnotationLevelError(OncoplotError, ValueError):
    """
    None of the levels of an explicit annotation order occur in the annotated feature.
    """

    def __init__(self, feature: str, requested: Iterable[str], available: Iterable[str]) -> None:
        self.feature = feature
        self.requested: List[str] = list(requested)
        self.available: List[str] = list(available)
        super().__init__(
            f"Values in provided annotation order {self.requested} do not match values of "
            f"{feature!r}. Available levels: {self.available}"
        )
