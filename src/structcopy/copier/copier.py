"""Structural copier: recursive deep copy driven by runtime type information.

Usage:
    # Copy into an existing destination, possibly of a different type
    internal = InternalRequest()
    copy_into(internal, request)

    # Allocate and return an independent copy
    retry = copy_of(request)

    # Reuse a configured copier
    copier = Copier(alias=lambda v: isinstance(v, Connection))
    copier.copy_into(dst, src)

Copying never fails on data: a shape mismatch, a field present on only one
side, a leaf that does not convert, or an unwritable destination leaves that
subtree at its default and the copy carries on. Only caller errors (a missing
destination, a non-composite source for copy_of) raise.
"""

from __future__ import annotations

import copy
import logging
import typing
from collections import defaultdict
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from inspect import isabstract
from typing import TYPE_CHECKING, Annotated, Any, cast

from pydantic import ValidationError

from structcopy.core.convert import convert_leaf
from structcopy.core.shape import (
    AliasPredicate,
    Shape,
    accepts_alias,
    annotation_metadata,
    build_struct,
    is_frozen,
    is_readable_stream,
    is_union,
    shape_of_type,
    shape_of_value,
    split_optional,
    struct_fields,
    unwrap_annotation,
    zero_value,
)
from structcopy.core.types import SKIP, Copy, Skip

if TYPE_CHECKING:
    from structcopy.config import CopierSettings

logger = logging.getLogger(__name__)

_COMPOSITE = frozenset({Shape.STRUCT, Shape.SEQUENCE, Shape.MAPPING})
_MISSING = object()


class StructCopyError(Exception):
    """Base class for structcopy errors."""

    pass


class PreconditionError(StructCopyError, TypeError):
    """Raised when a copy entry point is called with invalid arguments.

    This signals a bug in the calling code, never a data condition.
    """

    pass


def _name(tp: Any) -> str:
    return getattr(tp, "__qualname__", None) or repr(tp)


class Copier:
    """Deep copies values between compatible, not necessarily identical, types.

    The root destination given to copy_into is filled in place and owned by
    the caller: its fields without a source counterpart keep their contents.
    Every nested struct is rebuilt from a fresh instance, so stale nested
    values never survive a copy.

    Args:
        alias: Predicate selecting source values that are shared instead of
            copied. Defaults to readable streams; None aliases nothing.
        strict: Only admit lossless leaf conversions.
        copy_leaves: Deep copy mutable opaque leaves (sets, plain objects).
            When False they are assigned by reference.
    """

    def __init__(
        self,
        *,
        alias: AliasPredicate | None = is_readable_stream,
        strict: bool = True,
        copy_leaves: bool = True,
    ) -> None:
        """Initialize copier.

        Args:
            alias: Predicate for values to share rather than copy.
            strict: Use strict leaf conversion.
            copy_leaves: Deep copy opaque leaves.
        """
        self._alias = alias
        self._strict = strict
        self._copy_leaves = copy_leaves

    @classmethod
    def from_settings(cls, settings: CopierSettings) -> Copier:
        """Create a copier from loaded settings.

        Args:
            settings: Settings, typically read from STRUCTCOPY_* variables.

        Returns:
            Copier configured accordingly.
        """
        return cls(
            alias=is_readable_stream if settings.alias_streams else None,
            strict=settings.strict,
            copy_leaves=settings.copy_leaves,
        )

    def copy_into(self, dst: Any, src: Any) -> None:
        """Copy src into an existing destination.

        Structs get every field they share by name with src; mutable
        sequences and mappings have their contents replaced. Immutable
        destinations (frozen structs, tuples, scalars) are left unchanged.

        Args:
            dst: Caller-owned destination.
            src: Value to copy from.

        Raises:
            PreconditionError: If dst is None.
        """
        if dst is None:
            raise PreconditionError("copy_into destination cannot be None")
        self._copy_root(dst, src)

    def copy_of[T](self, src: T) -> Copy[T]:
        """Allocate a new value of src's type and copy src into it.

        Args:
            src: Struct, sequence or mapping to copy.

        Returns:
            Independent copy of src.

        Raises:
            PreconditionError: If src is None or not a composite value.
        """
        shape = shape_of_value(src)
        if shape not in _COMPOSITE:
            raise PreconditionError(
                f"copy_of source must be a struct, sequence or mapping, got {type(src).__name__}"
            )
        result = self._copy_shaped(src, type(src), shape)
        return cast(T, result)

    # Root: fill in place

    def _copy_root(self, dst: Any, src: Any) -> None:
        if src is None:
            return
        if self._is_aliased(src):
            logger.debug("Skipping aliased %s: root destination cannot be rebound", _name(type(src)))
            return

        src_shape = shape_of_value(src)
        dst_shape = shape_of_value(dst)
        if src_shape is not dst_shape:
            logger.debug(
                "Skipping root: shape mismatch %s -> %s", src_shape.name, dst_shape.name
            )
            return

        match dst_shape:
            case Shape.STRUCT:
                self._fill_struct(dst, src)
            case Shape.SEQUENCE if isinstance(dst, MutableSequence):
                items = self._copy_elements(src, type(dst))
                if items is not SKIP:
                    dst.clear()
                    dst.extend(items)
            case Shape.MAPPING if isinstance(dst, MutableMapping):
                entries = self._copy_entries(src, type(dst))
                dst.clear()
                dst.update(entries)
            case _:
                logger.debug("Skipping root: %s is not writable", _name(type(dst)))

    def _fill_struct(self, dst: Any, src: Any) -> None:
        if is_frozen(dst):
            logger.debug("Skipping root: %s is frozen", _name(type(dst)))
            return
        src_names = {spec.name for spec in struct_fields(type(src))}
        for spec in struct_fields(type(dst)):
            if spec.frozen or spec.name not in src_names:
                continue
            value = getattr(src, spec.name, _MISSING)
            if value is _MISSING:
                continue
            copied = self._copy(value, spec.annotation)
            if copied is SKIP:
                continue
            try:
                setattr(dst, spec.name, copied)
            except ValidationError as e:
                # Models validating assignment may still reject composite values
                logger.debug(
                    "Skipping %s.%s: assignment rejected (%d errors)",
                    _name(type(dst)),
                    spec.name,
                    e.error_count(),
                )

    # Nested: build fresh values

    def _copy(self, src: Any, tp: Any) -> Any | Skip:
        """Copy src into a new value of declared type tp, or SKIP."""
        metadata = annotation_metadata(tp)
        tp = unwrap_annotation(tp)

        if self._is_aliased(src):
            if accepts_alias(tp, src):
                return src
            logger.debug("Skipping aliased %s: slot %s rejects it", _name(type(src)), _name(tp))
            return SKIP
        if src is None:
            # Null reference: destination keeps its zero value
            return SKIP

        tp, _ = split_optional(tp)
        if is_union(tp):
            for member in typing.get_args(tp):
                copied = self._copy(src, Annotated[member, *metadata] if metadata else member)
                if copied is not SKIP:
                    return copied
            return SKIP

        src_shape = shape_of_value(src)
        dst_shape = shape_of_type(tp)
        if dst_shape is None:
            # Untyped slot: the source decides
            tp, dst_shape = type(src), src_shape
        if src_shape is not dst_shape:
            logger.debug(
                "Skipping %s -> %s: shape mismatch %s -> %s",
                _name(type(src)),
                _name(tp),
                src_shape.name,
                dst_shape.name,
            )
            return SKIP
        if dst_shape is Shape.LEAF and metadata:
            return self._copy_leaf(src, Annotated[tp, *metadata])
        return self._copy_shaped(src, tp, dst_shape)

    def _copy_shaped(self, src: Any, tp: Any, shape: Shape) -> Any | Skip:
        match shape:
            case Shape.STRUCT:
                return self._build_struct(src, typing.get_origin(tp) or tp)
            case Shape.SEQUENCE:
                return self._build_sequence(src, tp)
            case Shape.MAPPING:
                return self._build_mapping(src, tp)
            case _:
                return self._copy_leaf(src, tp)

    def _build_struct(self, src: Any, cls: type) -> Any:
        src_names = {spec.name for spec in struct_fields(type(src))}
        values: dict[str, Any] = {}
        for spec in struct_fields(cls):
            # Fields outside __init__ are left for the type to compute
            if not spec.init or spec.name not in src_names:
                continue
            value = getattr(src, spec.name, _MISSING)
            if value is _MISSING:
                continue
            copied = self._copy(value, spec.annotation)
            if copied is not SKIP:
                values[spec.name] = copied
        return build_struct(cls, values)

    def _copy_elements(self, src: Sequence[Any], tp: Any) -> list[Any] | Skip:
        origin = typing.get_origin(tp) or tp
        args = typing.get_args(tp)
        if isinstance(origin, type) and issubclass(origin, tuple) and args:
            if args[-1] is Ellipsis:
                element_types = [args[0]] * len(src)
            else:
                element_types = list(args)
            if len(element_types) != len(src):
                logger.debug(
                    "Skipping %s: length %d does not fit %s", _name(type(src)), len(src), tp
                )
                return SKIP
        else:
            element_types = [args[0] if args else Any] * len(src)

        items = []
        for item, element_type in zip(src, element_types, strict=True):
            copied = self._copy(item, element_type)
            items.append(zero_value(element_type) if copied is SKIP else copied)
        return items

    def _build_sequence(self, src: Sequence[Any], tp: Any) -> Any | Skip:
        items = self._copy_elements(src, tp)
        if items is SKIP:
            return SKIP
        origin = typing.get_origin(tp) or tp
        if not isinstance(origin, type) or isabstract(origin):
            origin = type(src) if type(src) in (list, tuple) else list
        return origin(items)

    def _copy_entries(self, src: Mapping[Any, Any], tp: Any) -> dict[Any, Any]:
        args = typing.get_args(tp)
        value_type = args[1] if len(args) == 2 else Any
        entries = {}
        for key, value in src.items():
            # Keys are shared, only values are copied
            copied = self._copy(value, value_type)
            entries[key] = zero_value(value_type) if copied is SKIP else copied
        return entries

    def _build_mapping(self, src: Mapping[Any, Any], tp: Any) -> Any:
        entries = self._copy_entries(src, tp)
        origin = typing.get_origin(tp) or tp
        if not isinstance(origin, type) or isabstract(origin):
            return entries
        if issubclass(origin, defaultdict):
            result = origin(getattr(src, "default_factory", None))
            result.update(entries)
            return result
        return origin(entries)

    def _copy_leaf(self, src: Any, tp: Any) -> Any | Skip:
        converted = convert_leaf(src, tp, strict=self._strict)
        if converted is SKIP:
            logger.debug("Skipping %s -> %s: not convertible", _name(type(src)), _name(tp))
            return SKIP
        if not self._copy_leaves:
            return converted
        try:
            return copy.deepcopy(converted)
        except (TypeError, copy.Error) as e:
            # Unpicklable leaves such as locks are shared as is
            logger.debug("Sharing %s: cannot be deep copied (%s)", _name(type(src)), e)
            return converted

    def _is_aliased(self, value: Any) -> bool:
        return self._alias is not None and value is not None and self._alias(value)


def copy_into(dst: Any, src: Any, *, alias: AliasPredicate | None = is_readable_stream) -> None:
    """Deep copy src into an existing destination.

    Can copy between different struct types: only fields that exist on both
    sides and hold convertible values are copied. Everything else is ignored.

    Args:
        dst: Caller-owned destination.
        src: Value to copy from.
        alias: Predicate for values to share rather than copy.

    Raises:
        PreconditionError: If dst is None.
    """
    Copier(alias=alias).copy_into(dst, src)


def copy_of[T](src: T, *, alias: AliasPredicate | None = is_readable_stream) -> Copy[T]:
    """Return a deep copy of src, allocating a new value of the same type.

    Args:
        src: Struct, sequence or mapping to copy.
        alias: Predicate for values to share rather than copy.

    Returns:
        Independent copy of src.

    Raises:
        PreconditionError: If src is None or not a composite value.
    """
    return Copier(alias=alias).copy_of(src)
