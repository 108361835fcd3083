"""
oncoplot/core
~~~~~~~~~~~~~
"""

from .alteration import Alteration, CategoryCodes, collapse_categories
from .annotations import AlignedAnnotation, AnnotationTable, CategoricalEncoding
from .colors import TITV_COLORS, VARIANT_COLORS, ColorAssigner, ColorTable, numeric_colors
from .errors import (
    AdditionalFeatureNotFoundError,
    InsufficientGenesError,
    MissingAnnotationRowsError,
    OncoplotError,
    UnknownAnnotationLevelError,
    UnknownSampleError,
)
from .matrix import OncoMatrix, build_onco_matrix
from .oncoplot import Oncoplot, OncoplotData
from .records import MafTable, MutationRecord, RecordSource
from .sorting import (
    ByAnnotation,
    ByFrequency,
    ByGeneList,
    ByPattern,
    BySampleList,
    SortSpec,
    sort_matrix,
)

__all__ = [
    "AdditionalFeatureNotFoundError",
    "AlignedAnnotation",
    "Alteration",
    "AnnotationTable",
    "ByAnnotation",
    "ByFrequency",
    "ByGeneList",
    "ByPattern",
    "BySampleList",
    "CategoricalEncoding",
    "CategoryCodes",
    "ColorAssigner",
    "ColorTable",
    "InsufficientGenesError",
    "MafTable",
    "MissingAnnotationRowsError",
    "MutationRecord",
    "OncoMatrix",
    "Oncoplot",
    "OncoplotData",
    "OncoplotError",
    "RecordSource",
    "SortSpec",
    "TITV_COLORS",
    "UnknownAnnotationLevelError",
    "UnknownSampleError",
    "VARIANT_COLORS",
    "build_onco_matrix",
    "collapse_categories",
    "numeric_colors",
    "sort_matrix",
]
