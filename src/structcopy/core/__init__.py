"""Core functionalities: stateless introspection and conversion primitives.

Architecture Note:
    core/ contains pure, stateless functions over runtime type information.
    The recursive copy itself lives in copier/.
"""

from structcopy.core.convert import convert_leaf, is_convertible
from structcopy.core.shape import (
    AliasPredicate,
    FieldSpec,
    Readable,
    Shape,
    accepts_alias,
    build_struct,
    is_frozen,
    is_readable_stream,
    is_stream_type,
    is_struct_type,
    shape_of_type,
    shape_of_value,
    struct_fields,
    unwrap_annotation,
    zero_value,
)
from structcopy.core.types import SKIP, Copy, Skip

__all__ = [
    # Types
    "Copy",
    "Skip",
    "SKIP",
    # Shape
    "Shape",
    "Readable",
    "FieldSpec",
    "AliasPredicate",
    "shape_of_value",
    "shape_of_type",
    "struct_fields",
    "build_struct",
    "zero_value",
    "unwrap_annotation",
    "is_struct_type",
    "is_stream_type",
    "is_readable_stream",
    "is_frozen",
    "accepts_alias",
    # Convert
    "convert_leaf",
    "is_convertible",
]
