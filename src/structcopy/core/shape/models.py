"""Shape models: categories, capabilities and field metadata.

A shape is the coarse runtime representation of a value or a declared type.
Copying only ever descends when source and destination agree on shape.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Protocol, runtime_checkable

type AliasPredicate = Callable[[Any], bool]
"""Decides whether a source value is shared into the destination instead of copied."""


class Shape(Enum):
    """Runtime representation category of a value or declared type."""

    REFERENCE = auto()  # Nullable slot, None, or a stream that is aliased
    STRUCT = auto()  # Dataclass, Pydantic model or NamedTuple
    SEQUENCE = auto()  # list, tuple and other non-string sequences
    MAPPING = auto()  # dict and other mappings
    LEAF = auto()  # Scalars, strings, enums, sets and opaque objects


@runtime_checkable
class Readable(Protocol):
    """Anything that can be read from like a stream."""

    def read(self, size: int = -1, /) -> Any: ...


@dataclass(slots=True, frozen=True)
class FieldSpec:
    """Declared field of a struct type."""

    name: str
    annotation: Any
    required: bool  # No default and no default factory
    init: bool  # Accepted by the type's constructor
    frozen: bool  # Rejects assignment after construction
