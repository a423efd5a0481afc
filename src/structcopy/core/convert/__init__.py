"""Leaf conversion between compatible scalar types."""

from structcopy.core.convert.operations import convert_leaf, is_convertible

__all__ = [
    "convert_leaf",
    "is_convertible",
]
