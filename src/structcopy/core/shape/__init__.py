"""Shape functionality: categories, field introspection and zero values."""

from structcopy.core.shape.models import AliasPredicate, FieldSpec, Readable, Shape
from structcopy.core.shape.operations import (
    accepts_alias,
    annotation_metadata,
    build_struct,
    is_frozen,
    is_readable_stream,
    is_stream_type,
    is_struct_type,
    is_union,
    shape_of_type,
    shape_of_value,
    split_optional,
    struct_fields,
    unwrap_annotation,
    zero_value,
)

__all__ = [
    # Models
    "Shape",
    "Readable",
    "FieldSpec",
    "AliasPredicate",
    # Operations
    "shape_of_value",
    "shape_of_type",
    "struct_fields",
    "build_struct",
    "zero_value",
    "unwrap_annotation",
    "annotation_metadata",
    "split_optional",
    "is_union",
    "is_struct_type",
    "is_stream_type",
    "is_readable_stream",
    "is_frozen",
    "accepts_alias",
]
