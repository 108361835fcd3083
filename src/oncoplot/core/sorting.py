"""
oncoplot/core/sorting
~~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union, TYPE_CHECKING

import numpy as np
from scipy.cluster.hierarchy import leaves_list, linkage

from .colors import NA_LABEL
from .errors import UnknownAnnotationLevelError, UnknownSampleError
from ..util.warnings import (
    UnknownAnnotationLevelWarning,
    UnknownSampleWarning,
    UnresolvableGeneWarning,
    warn,
)

if TYPE_CHECKING:
    from .annotations import AnnotationTable
    from .matrix import OncoMatrix


# ------------------------------------------------------------
# Sort policies
# ------------------------------------------------------------


@dataclass(frozen=True)
class ByFrequency:
    """
    Genes by descending altered-sample count; samples in staircase order.

    Attributes:
        mutations_only (bool): Count only cells carrying a point mutation.
    """

    mutations_only: bool = False


@dataclass(frozen=True)
class ByGeneList:
    """
    Listed genes first, in the given order.

    Attributes:
        genes (Tuple[str, ...]): Explicit gene order.
        sort_within (bool): Order the remaining genes by frequency instead of keeping
            their current order.
    """

    genes: Tuple[str, ...]
    sort_within: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.genes, str):
            raise TypeError("genes must be a sequence of gene identifiers, not a string")
        object.__setattr__(self, "genes", tuple(dict.fromkeys(str(g) for g in self.genes)))


@dataclass(frozen=True)
class ByAnnotation:
    """
    Samples grouped by one annotation feature, staircase order within groups.

    Attributes:
        feature (str): Annotation feature to group by.
        level_order (Optional[Tuple[str, ...]]): Explicit group order; takes precedence
            over `group_by_size`.
        group_by_size (bool): Largest groups first when no explicit order is given.
    """

    feature: str
    level_order: Optional[Tuple[str, ...]] = None
    group_by_size: bool = True

    def __post_init__(self) -> None:
        if self.level_order is not None:
            if isinstance(self.level_order, str):
                raise TypeError("level_order must be a sequence of levels, not a string")
            object.__setattr__(self, "level_order", tuple(str(v) for v in self.level_order))


@dataclass(frozen=True)
class ByPattern:
    """
    Samples ordered by hierarchical clustering of their alteration bit patterns.

    Attributes:
        method (str): SciPy linkage method. Defaults to "average".
        metric (str): SciPy distance metric. Defaults to "hamming".
    """

    method: str = "average"
    metric: str = "hamming"


@dataclass(frozen=True)
class BySampleList:
    """
    Samples restricted to, and ordered by, an explicit list.
    """

    samples: Tuple[str, ...]

    def __post_init__(self) -> None:
        if isinstance(self.samples, str):
            raise TypeError("samples must be a sequence of sample identifiers, not a string")
        object.__setattr__(self, "samples", tuple(dict.fromkeys(str(s) for s in self.samples)))


GenePolicy = Union[ByFrequency, ByGeneList]
SamplePolicy = Union[ByFrequency, ByAnnotation, ByPattern, BySampleList]


@dataclass(frozen=True)
class SortSpec:
    """
    Data class pairing one gene-ordering policy with one sample-ordering policy.
    """

    genes: GenePolicy = field(default_factory=ByFrequency)
    samples: SamplePolicy = field(default_factory=ByFrequency)

    def __post_init__(self) -> None:
        if not isinstance(self.genes, (ByFrequency, ByGeneList)):
            raise TypeError(f"Unsupported gene sort policy: {type(self.genes).__name__}")
        if not isinstance(self.samples, (ByFrequency, ByAnnotation, ByPattern, BySampleList)):
            raise TypeError(f"Unsupported sample sort policy: {type(self.samples).__name__}")


# ------------------------------------------------------------
# Orders
# ------------------------------------------------------------


def gene_frequency_order(
    matrix: OncoMatrix,
    genes: Optional[Sequence[str]] = None,
    *,
    mutations_only: bool = False,
) -> List[str]:
    """
    Orders genes by descending altered-sample count, ties broken by gene identifier.

    Args:
        matrix (OncoMatrix): Matrix providing the counts.
        genes (Optional[Sequence[str]]): Genes to order. Defaults to every matrix gene.

    Kwargs:
        mutations_only (bool): Count only point-mutation cells. Defaults to False.

    Returns:
        List[str]: Ordered genes.
    """
    counts = matrix.altered_counts("genes", mutations_only=mutations_only)
    genes = matrix.genes if genes is None else list(genes)
    return sorted(genes, key=lambda g: (-int(counts[g]), g))


def staircase_order(
    matrix: OncoMatrix,
    samples: Optional[Sequence[str]] = None,
    *,
    mutations_only: bool = False,
) -> List[str]:
    """
    Orders samples so that, gene by gene in row order, altered samples come first.

    The result is the descending lexicographic order of the samples' altered/not-altered
    vectors over the current gene order, ties broken by sample identifier.

    Args:
        matrix (OncoMatrix): Matrix providing the alteration pattern.
        samples (Optional[Sequence[str]]): Samples to order. Defaults to every matrix sample.

    Kwargs:
        mutations_only (bool): Consider only point-mutation cells. Defaults to False.

    Returns:
        List[str]: Ordered samples.
    """
    samples = matrix.samples if samples is None else list(samples)
    if not samples:
        return []
    binary = matrix.binary(mutations_only=mutations_only).loc[:, samples].to_numpy()
    rank = {s: i for i, s in enumerate(sorted(samples))}
    id_rank = np.array([rank[s] for s in samples])
    # np.lexsort treats the last key as primary
    keys = [id_rank] + [1 - binary[r].astype(np.int64) for r in range(binary.shape[0] - 1, -1, -1)]
    order = np.lexsort(keys)
    return [samples[i] for i in order]


def _gene_order(matrix: OncoMatrix, policy: GenePolicy) -> List[str]:
    if isinstance(policy, ByFrequency):
        return gene_frequency_order(matrix, mutations_only=policy.mutations_only)

    known = set(matrix.genes)
    unknown = [g for g in policy.genes if g not in known]
    if unknown:
        warn(
            f"{len(unknown)} gene(s) in the explicit gene order are absent from the matrix "
            f"and ignored: {unknown}",
            UnresolvableGeneWarning,
        )
    listed = [g for g in policy.genes if g in known]
    listed_set = set(listed)
    rest = [g for g in matrix.genes if g not in listed_set]
    if policy.sort_within:
        rest = gene_frequency_order(matrix, rest)
    return listed + rest


def _annotation_order(
    matrix: OncoMatrix,
    policy: ByAnnotation,
    annotation: AnnotationTable,
) -> List[str]:
    base = staircase_order(matrix)
    values = annotation.values(policy.feature, base)

    if annotation.is_numeric(policy.feature):
        vals = values.to_numpy(dtype=float)
        order = sorted(
            range(len(base)),
            key=lambda i: (bool(np.isnan(vals[i])), 0.0 if np.isnan(vals[i]) else -vals[i], i),
        )
        return [base[i] for i in order]

    # Groups keep staircase order internally; first-seen follows staircase order
    groups: Dict[str, List[str]] = {}
    for sample, value in zip(base, values.tolist()):
        groups.setdefault(NA_LABEL if value is None else value, []).append(sample)
    present = [lev for lev in groups if lev != NA_LABEL]

    def by_size(levels: List[str]) -> List[str]:
        if not policy.group_by_size:
            return levels
        return sorted(levels, key=lambda lev: (-len(groups[lev]), present.index(lev)))

    if policy.level_order is not None:
        listed = [lev for lev in dict.fromkeys(policy.level_order) if lev in groups]
        if not listed:
            raise UnknownAnnotationLevelError(policy.feature, policy.level_order, list(groups))
        rest = [lev for lev in present if lev not in listed]
        if rest:
            warn(
                f"Level(s) {rest} of {policy.feature!r} are missing from the provided "
                "annotation order and are placed after the listed levels",
                UnknownAnnotationLevelWarning,
            )
        ordered = listed + by_size(rest)
    else:
        ordered = by_size(present)
    if NA_LABEL in groups and NA_LABEL not in ordered:
        ordered.append(NA_LABEL)

    return [s for lev in ordered for s in groups[lev]]


def _pattern_order(matrix: OncoMatrix, policy: ByPattern) -> List[str]:
    base = staircase_order(matrix)
    if len(base) < 2:
        return base
    bits = matrix.binary().loc[:, base].to_numpy().T.astype(np.float64)
    patterns, first_pos, inverse = np.unique(bits, axis=0, return_index=True, return_inverse=True)
    inverse = np.asarray(inverse).reshape(-1)
    if patterns.shape[0] < 2:
        return base

    if patterns.shape[0] == 2:
        leaves = np.array([0, 1])
    else:
        Z = linkage(patterns, method=policy.method, metric=policy.metric, optimal_ordering=True)
        leaves = leaves_list(Z)

    # Orientation: denser end first, then whichever end the staircase reaches first
    density = patterns.sum(axis=1)
    head = (-density[leaves[0]], first_pos[leaves[0]])
    tail = (-density[leaves[-1]], first_pos[leaves[-1]])
    if tail < head:
        leaves = leaves[::-1]

    rank = {int(p): pos for pos, p in enumerate(leaves)}
    order = sorted(range(len(base)), key=lambda i: (rank[int(inverse[i])], i))
    return [base[i] for i in order]


def _sample_list_order(matrix: OncoMatrix, policy: BySampleList) -> List[str]:
    known = set(matrix.samples)
    unknown = [s for s in policy.samples if s not in known]
    kept = [s for s in policy.samples if s in known]
    if not kept:
        raise UnknownSampleError(policy.samples)
    if unknown:
        warn(
            f"{len(unknown)} sample(s) in the explicit sample order are absent from the "
            f"matrix and ignored: {unknown}",
            UnknownSampleWarning,
        )
    return kept


def sort_matrix(
    matrix: OncoMatrix,
    spec: Optional[SortSpec] = None,
    *,
    annotation: Optional[AnnotationTable] = None,
) -> OncoMatrix:
    """
    Reorders genes, then samples, without changing cell contents.

    Args:
        matrix (OncoMatrix): Matrix to sort.
        spec (Optional[SortSpec]): Gene and sample policies. Defaults to frequency sort
            on both axes.

    Kwargs:
        annotation (Optional[AnnotationTable]): Raw annotation table; required by
            ByAnnotation. Defaults to None.

    Returns:
        OncoMatrix: Sorted matrix. BySampleList additionally restricts the columns to
            the listed samples.

    Raises:
        ValueError: If ByAnnotation is requested without an annotation table.
        UnknownSampleError: If no sample of an explicit sample list is in the matrix.
        UnknownAnnotationLevelError: If no level of an explicit level order occurs.
        MissingAnnotationRowsError: If a matrix sample has no annotation row.
    """
    spec = spec if spec is not None else SortSpec()
    matrix = matrix.reorder(genes=_gene_order(matrix, spec.genes))

    policy = spec.samples
    if isinstance(policy, BySampleList):
        return matrix.select_samples(_sample_list_order(matrix, policy))
    if isinstance(policy, ByAnnotation):
        if annotation is None:
            raise ValueError("Sorting by annotation requires an annotation table")
        order = _annotation_order(matrix, policy, annotation)
    elif isinstance(policy, ByPattern):
        order = _pattern_order(matrix, policy)
    else:
        order = staircase_order(matrix, mutations_only=policy.mutations_only)
    return matrix.reorder(samples=order)
