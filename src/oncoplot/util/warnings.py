"""
oncoplot/util/warnings
"""

from __future__ import annotations

import warnings
from typing import Type


class OncoplotWarning(RuntimeWarning):
    """
    Base category for non-fatal conditions reported while preparing an oncoplot.
    """


class UnresolvableGeneWarning(OncoplotWarning):
    """
    Requested genes are absent from the record source and were excluded.
    """


class UnknownSampleWarning(OncoplotWarning):
    """
    Samples in an explicit sample order are absent from the matrix and were ignored.
    """


class UnknownAnnotationLevelWarning(OncoplotWarning):
    """
    An explicit annotation level order does not cover every level present.
    """


class EmptyHighlightWarning(OncoplotWarning):
    """
    A highlight feature matched no cells of the matrix.
    """


def warn(message: str, category: Type[Warning] = OncoplotWarning, stacklevel: int = 2) -> None:
    """
    Emits a warning with a default stacklevel.

    Args:
        message (str): Warning message text.
        category (Type[Warning]): Warning category class. Defaults to OncoplotWarning.
        stacklevel (int): Stacklevel to report. Defaults to 2.
    """
    warnings.warn(message, category=category, stacklevel=stacklevel)
