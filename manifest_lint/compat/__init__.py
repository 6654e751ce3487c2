"""Browser-compatibility checks against MDN-style data."""

from .checker import CompatibilityChecker, first_stable_version
from .index import CompatContainer, CompatibilityIndex, CompatLeaf, SupportStatement

__all__ = [
    "CompatibilityChecker",
    "CompatibilityIndex",
    "CompatContainer",
    "CompatLeaf",
    "SupportStatement",
    "first_stable_version",
]
