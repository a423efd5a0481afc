"""Core type definitions for structcopy."""

from enum import Enum, auto
from typing import Final

type Copy[T] = T
"""Type alias indicating a value is an independent deep copy.

When you see `Copy[T]` in a return type, the returned value shares no mutable
state with its source (readable streams excepted, which are aliased). Mutating
one side never affects the other.
"""


class Skip(Enum):
    """Marker returned when a subtree is left uncopied."""

    SKIP = auto()

    def __repr__(self) -> str:
        return "SKIP"


SKIP: Final = Skip.SKIP
