import collections.abc
import io
import types
import typing
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Any, Union
from uuid import UUID

_NATIVE_TYPES: tuple[type, ...] = (
    bool,
    str,
    int,
    float,
    complex,
    Decimal,
    Fraction,
    datetime,
    date,
    time,
    timedelta,
    UUID,
    type(None),
)

_BUFFER_TYPES: tuple[type, ...] = (bytes, bytearray, memoryview)

_COLLECTION_ORIGINS: tuple[type, ...] = (
    list,
    tuple,
    set,
    frozenset,
    dict,
    collections.abc.Iterable,
    collections.abc.Collection,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Mapping,
    collections.abc.MutableMapping,
)


def unwrap_optional(tp: Any) -> Any:
    """Return ``X`` for ``Optional[X]`` / ``X | None``, otherwise ``tp``."""
    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(tp) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def strip_annotated(tp: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[X, *meta]`` into ``(X, meta)``."""
    if typing.get_origin(tp) is typing.Annotated:
        args = typing.get_args(tp)
        return args[0], tuple(args[1:])
    return tp, ()


def is_buffer(tp: Any) -> bool:
    if not isinstance(tp, type):
        return False
    return issubclass(tp, _BUFFER_TYPES) or issubclass(
        tp, (io.RawIOBase, io.BufferedIOBase)
    )


def is_native(tp: Any) -> bool:
    """Check whether ``tp`` is a primitive-like type.

    Unknown or untyped members (``Any``, missing annotations, type variables)
    count as native so the index treats them as leaves.

    Args:
        tp: The declared type to check. Binary buffers count as native.

    Returns:
        True if values of the type are formatted as a single scalar.
    """
    if tp is None or tp is Any:
        return True

    tp, _ = strip_annotated(tp)
    tp = unwrap_optional(tp)

    origin = typing.get_origin(tp)
    if origin is typing.Literal:
        return True

    # parameterized generics such as list[str]
    if origin is not None:
        return False

    if not isinstance(tp, type):
        return True

    if issubclass(tp, Enum) or issubclass(tp, _NATIVE_TYPES):
        return True

    return is_buffer(tp)


def is_collection(tp: Any) -> bool:
    tp, _ = strip_annotated(tp)
    tp = unwrap_optional(tp)
    origin = typing.get_origin(tp) or tp
    if not isinstance(origin, type):
        return False
    if issubclass(origin, (str, bytes, bytearray)):
        return False
    return origin in _COLLECTION_ORIGINS or issubclass(origin, (list, tuple, set, frozenset, dict))


def is_native_value(value: Any) -> bool:
    if value is None:
        return True
    return is_native(type(value))


def is_nullable(tp: Any) -> bool:
    """Check whether ``tp`` is ``Optional[X]`` / ``X | None``."""
    tp, _ = strip_annotated(tp)
    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        return type(None) in typing.get_args(tp)
    return False


def is_sequence(tp: Any) -> bool:
    """Check whether ``tp`` is a collection whose values are not keyed."""
    if not is_collection(tp):
        return False
    tp = unwrap_optional(strip_annotated(tp)[0])
    origin = typing.get_origin(tp) or tp
    return not issubclass(origin, (dict, collections.abc.Mapping))
