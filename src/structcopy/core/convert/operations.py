"""Pure functions for leaf conversion.

A leaf is copied into a slot of a different declared type only when Pydantic's
validation of that type accepts it. Strict mode (the default) only admits
lossless widening such as int -> float; lax mode additionally admits
conversions Pydantic considers safe, such as 3.0 -> 3 or "7" -> 7.
"""

from __future__ import annotations

import typing
from functools import lru_cache
from typing import Annotated, Any, Literal

from pydantic import ConfigDict, TypeAdapter, ValidationError

from structcopy.core.shape.operations import unwrap_annotation
from structcopy.core.types import SKIP, Skip


def _build_adapter(tp: Any) -> TypeAdapter[Any]:
    return TypeAdapter(tp, config=ConfigDict(arbitrary_types_allowed=True))


_cached_adapter = lru_cache(maxsize=256)(_build_adapter)


def _adapter(tp: Any) -> TypeAdapter[Any]:
    """Get a validator for a leaf type, cached when the type is hashable."""
    try:
        hash(tp)
    except TypeError:
        # Annotated metadata is not always hashable
        return _build_adapter(tp)
    return _cached_adapter(tp)


def _literal_match(value: Any, options: tuple[Any, ...]) -> bool:
    # True == 1, so types must agree as well
    return any(type(value) is type(option) and value == option for option in options)


def _fits_float(value: int) -> bool:
    try:
        return float(value) == value
    except OverflowError:
        return False


def convert_leaf(value: Any, tp: Any, *, strict: bool = True) -> Any | Skip:
    """Convert a leaf value to a declared type if the conversion is lossless.

    `Annotated` constraints (for example Pydantic's `Field(gt=0)`) are
    validated as well; values that violate them are not convertible.

    Args:
        value: Source leaf value.
        tp: Declared type of the destination slot.
        strict: Use Pydantic strict validation (lossless only).

    Returns:
        The value itself when it already is an instance of tp, the converted
        value when validation accepts it, or SKIP when it does not.
    """
    base = unwrap_annotation(tp)
    constrained = typing.get_origin(tp) is Annotated
    if base is Any and not constrained:
        return value

    origin = typing.get_origin(base)
    if origin is Literal:
        return value if _literal_match(value, typing.get_args(base)) else SKIP

    cls = origin if origin is not None else base
    if not constrained and isinstance(cls, type) and origin is None and isinstance(value, cls):
        return value
    # Strict float validation accepts any int, even one it has to round
    if cls is float and isinstance(value, int) and not _fits_float(value):
        return SKIP

    try:
        return _adapter(tp).validate_python(value, strict=strict)
    except ValidationError:
        return SKIP


def is_convertible(value: Any, tp: Any, *, strict: bool = True) -> bool:
    """Check if a leaf value can be copied into a slot of the declared type."""
    return convert_leaf(value, tp, strict=strict) is not SKIP
