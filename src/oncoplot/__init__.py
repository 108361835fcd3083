"""
oncoplot
~~~~~~~~

Oncoplot: matrix ordering and color assignment for mutation landscape plots
"""

from .core.annotations import AnnotationTable
from .core.colors import ColorAssigner
from .core.matrix import OncoMatrix, build_onco_matrix
from .core.oncoplot import Oncoplot, OncoplotData
from .core.records import MafTable
from .core.sorting import SortSpec, sort_matrix

__all__ = [
    "AnnotationTable",
    "ColorAssigner",
    "MafTable",
    "OncoMatrix",
    "Oncoplot",
    "OncoplotData",
    "SortSpec",
    "build_onco_matrix",
    "sort_matrix",
]

__version__ = "0.1.0"
