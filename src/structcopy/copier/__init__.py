"""Structural copier and its entry points."""

from structcopy.copier.copier import (
    Copier,
    PreconditionError,
    StructCopyError,
    copy_into,
    copy_of,
)

__all__ = [
    "Copier",
    "copy_into",
    "copy_of",
    "StructCopyError",
    "PreconditionError",
]
