"""
oncoplot/util
~~~~~~~~~~~~~
"""

from .warnings import (
    EmptyHighlightWarning,
    OncoplotWarning,
    UnknownAnnotationLevelWarning,
    UnknownSampleWarning,
    UnresolvableGeneWarning,
    warn,
)

__all__ = [
    "EmptyHighlightWarning",
    "OncoplotWarning",
    "UnknownAnnotationLevelWarning",
    "UnknownSampleWarning",
    "UnresolvableGeneWarning",
    "warn",
]
