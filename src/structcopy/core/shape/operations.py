"""Pure functions for runtime type introspection.

Everything here is stateless apart from the per-class field table cache,
which is populated once per struct type and never mutated afterwards.
"""

from __future__ import annotations

import dataclasses
import inspect
import io
import logging
import typing
from collections import OrderedDict, defaultdict, deque
from collections.abc import (
    Mapping,
    MutableMapping,
    MutableSequence,
    MutableSet,
    Sequence,
    Set,
)
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from functools import lru_cache
from types import NoneType, UnionType
from typing import Annotated, Any, ForwardRef, Literal, TypeAliasType, TypeVar, Union

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from structcopy.core.shape.models import AliasPredicate, FieldSpec, Readable, Shape

logger = logging.getLogger(__name__)

_ZERO_TYPES: frozenset[type] = frozenset(
    {
        bool,
        int,
        float,
        complex,
        str,
        bytes,
        bytearray,
        list,
        tuple,
        dict,
        set,
        frozenset,
        Decimal,
        Fraction,
        OrderedDict,
        defaultdict,
        deque,
    }
)

# Sequences that are copied whole rather than element by element
_LEAF_SEQUENCES = (str, bytes, bytearray, range)

# Abstract container annotations and the concrete type used for their zero value
_ABSTRACT_ZEROS: dict[type, type] = {
    Sequence: list,
    MutableSequence: list,
    Mapping: dict,
    MutableMapping: dict,
    Set: set,
    MutableSet: set,
}


def unwrap_annotation(tp: Any) -> Any:
    """Strip annotation wrappers that carry no runtime shape.

    Removes `Annotated` metadata, resolves `type` aliases and `NewType`s to
    their underlying type, and maps TypeVars, `object`, unresolved forward
    references and missing annotations to `Any`.

    Args:
        tp: Declared type as found in an annotation.

    Returns:
        The underlying type, or `Any` when nothing concrete is declared.
    """
    while True:
        origin = typing.get_origin(tp)
        if origin is Annotated:
            tp = typing.get_args(tp)[0]
        elif isinstance(tp, TypeAliasType):
            tp = tp.__value__
        elif isinstance(origin, TypeAliasType):
            # Parameters are dropped: alias bodies refer to their own TypeVars
            tp = origin.__value__
        elif isinstance(tp, TypeVar):
            tp = tp.__bound__ if tp.__bound__ is not None else Any
        elif hasattr(tp, "__supertype__"):
            tp = tp.__supertype__
        elif tp is object or isinstance(tp, str | ForwardRef):
            return Any
        else:
            return tp


def is_union(tp: Any) -> bool:
    """Check if a declared type is a union (`X | Y` or `Union[X, Y]`)."""
    return typing.get_origin(tp) in (Union, UnionType)


def split_optional(tp: Any) -> tuple[Any, bool]:
    """Separate `None` from a union.

    Args:
        tp: Declared type, already unwrapped.

    Returns:
        Tuple of (type without None, whether None was part of it).
    """
    if not is_union(tp):
        return tp, False
    members = typing.get_args(tp)
    rest = tuple(m for m in members if m is not NoneType)
    if len(rest) == len(members):
        return tp, False
    if len(rest) == 1:
        return rest[0], True
    return Union[rest], True  # noqa: UP007


def is_struct_type(cls: Any) -> bool:
    """Check if a class has named, introspectable fields.

    Dataclasses, Pydantic models and NamedTuples qualify.

    Args:
        cls: Class to check.

    Returns:
        True if instances of cls are copied field by field.
    """
    if not isinstance(cls, type):
        return False
    if dataclasses.is_dataclass(cls) or issubclass(cls, BaseModel):
        return True
    return issubclass(cls, tuple) and hasattr(cls, "_fields")


def is_stream_type(cls: type) -> bool:
    """Check if a declared class describes a stream slot."""
    return cls is Readable or issubclass(cls, (io.IOBase, typing.IO))


def is_readable_stream(value: Any) -> bool:
    """Default alias predicate: values that can be read from like a stream.

    Streams cannot be cloned safely, so copies share the same object.

    Args:
        value: Source value.

    Returns:
        True if value is a stream instance (not a class) with a `read` method.
    """
    return not isinstance(value, type) and isinstance(value, Readable)


def is_frozen(obj: Any) -> bool:
    """Check if a struct instance rejects field assignment."""
    cls = type(obj)
    if dataclasses.is_dataclass(cls):
        return bool(cls.__dataclass_params__.frozen)  # type: ignore[attr-defined]
    if issubclass(cls, BaseModel):
        return bool(cls.model_config.get("frozen", False))
    return isinstance(obj, tuple)


def shape_of_value(value: Any, alias: AliasPredicate | None = None) -> Shape:
    """Classify a live value.

    Args:
        value: Value to classify.
        alias: Optional predicate; values it accepts are REFERENCE.

    Returns:
        The value's shape.
    """
    if value is None or (alias is not None and alias(value)):
        return Shape.REFERENCE
    if is_struct_type(type(value)):
        return Shape.STRUCT
    if isinstance(value, _LEAF_SEQUENCES):
        return Shape.LEAF
    if isinstance(value, Mapping):
        return Shape.MAPPING
    if isinstance(value, Sequence):
        return Shape.SEQUENCE
    return Shape.LEAF


def shape_of_type(tp: Any) -> Shape | None:
    """Classify a declared type.

    Args:
        tp: Declared type (annotation or class).

    Returns:
        The declared shape, or None when the declaration does not fix one
        (`Any`, non-optional unions, unresolvable annotations). In that case
        the source value decides.
    """
    tp = unwrap_annotation(tp)
    if tp is Any:
        return None
    if split_optional(tp)[1]:
        return Shape.REFERENCE
    if is_union(tp):
        return None
    origin = typing.get_origin(tp)
    if origin is Literal:
        return Shape.LEAF
    cls = origin if origin is not None else tp
    if not isinstance(cls, type):
        return None
    if is_struct_type(cls):
        return Shape.STRUCT
    if is_stream_type(cls):
        return Shape.REFERENCE
    if issubclass(cls, _LEAF_SEQUENCES):
        return Shape.LEAF
    if issubclass(cls, Mapping):
        return Shape.MAPPING
    if issubclass(cls, Sequence):
        return Shape.SEQUENCE
    return Shape.LEAF


def accepts_alias(tp: Any, value: Any) -> bool:
    """Check if a declared slot can hold an aliased value as is.

    Args:
        tp: Declared type of the destination slot.
        value: Aliased source value.

    Returns:
        True if the slot is untyped, an abstract stream protocol (`IO`,
        `Readable`), or a class value is an instance of (optionally wrapped in
        `X | None` or another union).
    """
    tp = unwrap_annotation(tp)
    if tp is Any:
        return True
    tp, _ = split_optional(tp)
    if is_union(tp):
        return any(accepts_alias(member, value) for member in typing.get_args(tp))
    cls = typing.get_origin(tp) or tp
    if not isinstance(cls, type):
        return True
    return cls is Readable or issubclass(cls, typing.IO) or isinstance(value, cls)


def annotation_metadata(tp: Any) -> tuple[Any, ...]:
    """Get the `Annotated` metadata of a declared type, outermost first."""
    metadata: tuple[Any, ...] = ()
    while typing.get_origin(tp) is Annotated:
        metadata += tp.__metadata__
        tp = typing.get_args(tp)[0]
    return metadata


def _resolve_hint(annotation: Any, owner: type) -> Any:
    """Evaluate one annotation in the namespace of the class declaring it."""
    if not isinstance(annotation, str | ForwardRef):
        return annotation
    holder = type(
        owner.__name__,
        (),
        {"__annotations__": {"hint": annotation}, "__module__": owner.__module__},
    )
    localns = {**vars(owner), owner.__name__: owner}
    try:
        return typing.get_type_hints(holder, localns=localns, include_extras=True)["hint"]
    except (NameError, TypeError, SyntaxError) as e:
        logger.debug("Treating %s.%r as Any: %s", owner.__qualname__, annotation, e)
        return Any


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as e:
        logger.debug("Resolving annotations of %s one by one: %s", cls.__qualname__, e)

    # Only the annotations that fail to resolve degrade to Any
    hints: dict[str, Any] = {}
    for base in reversed(cls.__mro__):
        for name, annotation in inspect.get_annotations(base).items():
            hints[name] = _resolve_hint(annotation, base)
    return hints


def _field_annotation(info: FieldInfo) -> Any:
    # Constraints such as gt or max_length live in metadata, not the annotation
    if not info.metadata:
        return info.annotation
    return Annotated[info.annotation, *info.metadata]


@lru_cache(maxsize=256)
def struct_fields(cls: type) -> tuple[FieldSpec, ...]:
    """Get the declared fields of a struct type.

    Results are cached per class since field declarations don't change at
    runtime.

    Args:
        cls: Dataclass, Pydantic model or NamedTuple class.

    Returns:
        Field specs in declaration order.

    Raises:
        TypeError: If cls is not a struct type.
    """
    if issubclass(cls, BaseModel):
        return tuple(
            FieldSpec(
                name=name,
                annotation=_field_annotation(info),
                required=info.is_required(),
                init=True,
                frozen=bool(info.frozen),
            )
            for name, info in cls.model_fields.items()
        )

    if dataclasses.is_dataclass(cls):
        hints = _type_hints(cls)
        return tuple(
            FieldSpec(
                name=f.name,
                annotation=hints.get(f.name, f.type),
                required=(
                    f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
                ),
                init=f.init,
                frozen=False,
            )
            for f in dataclasses.fields(cls)
        )

    if is_struct_type(cls):
        hints = _type_hints(cls)
        return tuple(
            FieldSpec(
                name=name,
                annotation=hints.get(name, Any),
                required=name not in cls._field_defaults,  # type: ignore[attr-defined]
                init=True,
                frozen=True,
            )
            for name in cls._fields  # type: ignore[attr-defined]
        )

    raise TypeError(f"{cls.__name__} is not a dataclass, Pydantic model or NamedTuple")


def build_struct[T](cls: type[T], values: Mapping[str, Any]) -> T:
    """Construct a fresh struct instance.

    Fields missing from values take their declared default, or the zero value
    of their annotation when they have none. Pydantic models are built without
    validation since values are already typed copies.

    Args:
        cls: Struct class to instantiate.
        values: Field values keyed by field name; only constructor fields.

    Returns:
        New instance of cls.
    """
    kwargs = dict(values)
    for spec in struct_fields(cls):
        if spec.init and spec.required and spec.name not in kwargs:
            kwargs[spec.name] = zero_value(spec.annotation)
    if issubclass(cls, BaseModel):
        return cls.model_construct(**kwargs)
    return cls(**kwargs)


def zero_value(tp: Any) -> Any:
    """Get the fresh state of a declared type.

    Args:
        tp: Declared type.

    Returns:
        None for optional and untyped slots, the empty/zero instance for
        builtin scalars and containers, the first member of an enum, the
        first option of a Literal, and a default-initialized instance for
        struct types. None for anything else.
    """
    tp = unwrap_annotation(tp)
    if tp is Any or split_optional(tp)[1]:
        return None
    if is_union(tp):
        return zero_value(typing.get_args(tp)[0])
    origin = typing.get_origin(tp)
    if origin is Literal:
        return typing.get_args(tp)[0]
    cls = origin if origin is not None else tp
    if not isinstance(cls, type):
        return None
    if is_struct_type(cls):
        return build_struct(cls, {})
    if issubclass(cls, Enum):
        return next(iter(cls), None)
    if cls in _ZERO_TYPES:
        return cls()
    if cls in _ABSTRACT_ZEROS:
        return _ABSTRACT_ZEROS[cls]()
    return None
