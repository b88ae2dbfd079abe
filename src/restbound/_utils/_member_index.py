"""Per-type index of readable members, addressed by dotted paths.

An index is built once per class and shared process-wide. It lists the
fields, properties and zero-argument methods of the class and, for fields and
properties of a non-primitive, non-collection type, the members of that type,
recursively. Indexes are read-only once published.

Paths look like ``user.profile.id`` or ``user.display_name()``; matching is
case-insensitive and at most one method call is allowed per path.
"""

import functools
import inspect
import threading
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional

from pydantic import BaseModel

from ..models.errors import InvalidPathError
from ._primitives import (
    is_collection,
    is_native,
    is_nullable,
    strip_annotated,
    unwrap_optional,
)

# Members declared on these classes are never indexed.
_EXCLUDED_OWNERS: frozenset[type] = frozenset({object, BaseModel, typing.Generic})


class MemberKind(str, Enum):
    FIELD = "field"
    PROPERTY = "property"
    METHOD = "method"


@dataclass(frozen=True)
class MemberDescriptor:
    """A readable member of a class.

    Attributes:
        name: Name used in paths; methods carry a trailing ``()``.
        kind: Field, property or zero-argument method.
        value_type: Declared type, with ``Annotated`` metadata removed.
        attribute: Attribute name used to read the member from an instance.
        tags: ``Annotated`` metadata declared on the member.
        children: Members of ``value_type`` when it is a nested class.
        nullable: Whether the declared type admits None.
    """

    name: str
    kind: MemberKind
    value_type: Any
    attribute: str
    tags: tuple[Any, ...] = ()
    children: tuple["MemberDescriptor", ...] = ()
    nullable: bool = False

    @property
    def is_method(self) -> bool:
        return self.kind is MemberKind.METHOD

    def get_value(self, owner: Any) -> Any:
        if self.is_method:
            return getattr(owner, self.attribute)()
        return getattr(owner, self.attribute)

    def find(self, name: str) -> Optional["MemberDescriptor"]:
        return _find(self.children, name)

    def get_tag(self, tag_type: type) -> Any:
        for tag in self.tags:
            if isinstance(tag, tag_type):
                return tag
        return None

    def has_tag(self, *tag_types: type) -> bool:
        return any(isinstance(tag, tag_types) for tag in self.tags)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class MemberValue:
    member: MemberDescriptor
    value_type: Any
    path_name: str
    value: Any

    def __str__(self) -> str:
        return self.path_name


class MemberNamer:
    """Decides which members a traversal visits and how they are named.

    The default namer accepts every member, names it after the member itself
    and joins ancestor names with ``.``. Subclasses override the hooks.
    """

    def __init__(self) -> None:
        self._path: list[str] = []

    def can_enter(self, member: MemberDescriptor) -> bool:
        return True

    def can_map(self, member: MemberDescriptor) -> bool:
        return True

    def get_name(self, member: MemberDescriptor) -> str:
        return member.name

    def on_enter(self, member: MemberDescriptor) -> None:
        self._path.append(self.get_name(member))

    def on_leave(self) -> None:
        self._path.pop()

    def get_path(self) -> str:
        return ".".join(self._path)

    def get_full_name(self, name: str) -> str:
        path = self.get_path()
        if not path:
            return name
        return f"{path}.{name}"

    def __str__(self) -> str:
        return self.get_path()


def _find(
    members: tuple[MemberDescriptor, ...], name: str
) -> Optional[MemberDescriptor]:
    lowered = name.lower()
    for member in members:
        if member.name.lower() == lowered:
            return member
    return None


def _indexed_classes(cls: type) -> list[type]:
    return [klass for klass in reversed(cls.__mro__) if klass not in _EXCLUDED_OWNERS]


def _type_hints(obj: Any) -> dict[str, Any]:
    try:
        return typing.get_type_hints(obj, include_extras=True)
    except Exception:
        # unresolvable forward references: fall back to the raw annotations
        if isinstance(obj, type):
            hints: dict[str, Any] = {}
            for klass in reversed(obj.__mro__):
                hints.update(getattr(klass, "__annotations__", {}) or {})
            return hints
        return dict(getattr(obj, "__annotations__", {}) or {})


def _field_hints(cls: type) -> dict[str, Any]:
    if issubclass(cls, BaseModel):
        # pydantic moves Annotated metadata into FieldInfo.metadata
        hints: dict[str, Any] = {}
        for name, field in cls.model_fields.items():
            annotation = field.annotation
            if field.metadata:
                annotation = typing.Annotated[(annotation, *field.metadata)]
            hints[name] = annotation
        return hints
    return _type_hints(cls)


def _is_void(func: Any) -> bool:
    hints = _type_hints(func)
    if "return" in hints:
        return hints["return"] is None or hints["return"] is type(None)
    return func.__annotations__.get("return", inspect.Parameter.empty) in (None, "None")


def _is_valid_method(name: str, func: Any) -> bool:
    if not inspect.isfunction(func):
        return False

    if name.startswith("__") and name.endswith("__") and name != "__str__":
        return False

    if getattr(func, "__type_params__", ()):
        return False

    try:
        parameters = list(inspect.signature(func).parameters.values())
    except (TypeError, ValueError):
        return False

    if len(parameters) != 1 or parameters[0].kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        return False

    return not _is_void(func)


def _split_declared_type(declared: Any) -> tuple[Any, tuple[Any, ...]]:
    value_type, tags = strip_annotated(declared)
    inner = unwrap_optional(value_type)
    # Optional[Annotated[X, ...]]
    inner_type, inner_tags = strip_annotated(inner)
    if inner_tags:
        return unwrap_optional(inner_type), tags + inner_tags
    return inner, tags


def _expandable(value_type: Any) -> bool:
    return (
        typing.get_origin(value_type) is None
        and isinstance(value_type, type)
        and not is_native(value_type)
        and not is_collection(value_type)
    )


def _member(
    name: str,
    kind: MemberKind,
    declared: Any,
    building: tuple[type, ...],
) -> MemberDescriptor:
    value_type, tags = _split_declared_type(declared)

    children: tuple[MemberDescriptor, ...] = ()
    if kind is not MemberKind.METHOD and _expandable(value_type):
        # a type already under construction becomes a leaf
        if value_type not in building:
            children = _build_members(value_type, building + (value_type,))

    return MemberDescriptor(
        name=f"{name}()" if kind is MemberKind.METHOD else name,
        kind=kind,
        value_type=value_type,
        attribute=name,
        tags=tags,
        children=children,
        nullable=is_nullable(declared),
    )


def _build_members(
    cls: type, building: tuple[type, ...]
) -> tuple[MemberDescriptor, ...]:
    declared: dict[str, tuple[MemberKind, Any]] = {}

    for name, hint in _field_hints(cls).items():
        if name.startswith("_") or typing.get_origin(hint) is typing.ClassVar:
            continue
        if hint is typing.ClassVar:
            continue
        declared[name] = (MemberKind.FIELD, hint)

    methods: dict[str, Any] = {}
    for klass in _indexed_classes(cls):
        for name, attribute in vars(klass).items():
            if isinstance(attribute, property):
                if not name.startswith("_") and attribute.fget is not None:
                    declared[name] = (
                        MemberKind.PROPERTY,
                        _type_hints(attribute.fget).get("return", Any),
                    )
            elif isinstance(attribute, functools.cached_property):
                if not name.startswith("_"):
                    declared[name] = (
                        MemberKind.PROPERTY,
                        _type_hints(attribute.func).get("return", Any),
                    )
            elif isinstance(attribute, (staticmethod, classmethod)):
                methods.pop(name, None)
            elif _is_valid_method(name, attribute):
                methods[name] = _type_hints(attribute).get("return", Any)
            else:
                methods.pop(name, None)

    members = [
        _member(name, kind, hint, building) for name, (kind, hint) in declared.items()
    ]
    members.extend(
        _member(name, MemberKind.METHOD, hint, building)
        for name, hint in methods.items()
        if name not in declared
    )
    return tuple(members)


class TypeIndex:
    """Index of the readable members of one class."""

    def __init__(self, cls: type) -> None:
        self.type = cls
        self.members: tuple[MemberDescriptor, ...] = _build_members(cls, (cls,))

    def find(self, name: str) -> Optional[MemberDescriptor]:
        return _find(self.members, name)

    def resolve(self, owner: Any, path: str) -> Any:
        """Read the value at ``path`` from ``owner``.

        Args:
            owner: Instance of the indexed class.
            path: Dotted member path, e.g. ``address.street`` or ``greeting()``.

        Returns:
            The value, or None as soon as an intermediate value is None.

        Raises:
            ValueError: If ``path`` is empty.
            InvalidPathError: If the path holds more than one method call or a
                segment does not match a member.
        """
        if not path:
            raise ValueError("path must not be empty")

        segments = path.split(".")
        if sum("()" in segment for segment in segments) > 1:
            raise InvalidPathError(
                "Multiple method calls in the same path are not allowed."
            )

        find = self.find
        for position, segment in enumerate(segments):
            member = find(segment)
            if member is None:
                raise InvalidPathError.member_not_found(segment, position)

            owner = member.get_value(owner)
            if owner is None:
                return None
            find = member.find

        return owner

    def iter_values(
        self, owner: Any, namer: Optional[MemberNamer] = None
    ) -> Iterator[MemberValue]:
        """Yield every leaf value of ``owner`` accepted by ``namer``."""
        namer = namer or MemberNamer()
        for member in self.members:
            yield from _iter_member_values(member, owner, namer)

    def __repr__(self) -> str:
        return f"TypeIndex({self.type.__qualname__}, members={[m.name for m in self.members]})"


def _iter_member_values(
    member: MemberDescriptor, owner: Any, namer: MemberNamer
) -> Iterator[MemberValue]:
    if not member.children:
        if namer.can_map(member):
            yield MemberValue(
                member,
                member.value_type,
                namer.get_full_name(namer.get_name(member)),
                member.get_value(owner),
            )
        return

    if not namer.can_enter(member):
        return

    value = member.get_value(owner)
    if value is None:
        return

    namer.on_enter(member)
    try:
        for child in member.children:
            yield from _iter_member_values(child, value, namer)
    finally:
        namer.on_leave()


_type_indexes: dict[type, TypeIndex] = {}
_type_indexes_lock = threading.Lock()


def get_type_index(cls: type) -> TypeIndex:
    """Return the shared index for ``cls``, building it on first use.

    Concurrent first calls may each build an index; only the first one
    published is kept and returned to every caller.
    """
    index = _type_indexes.get(cls)
    if index is not None:
        return index

    built = TypeIndex(cls)
    with _type_indexes_lock:
        return _type_indexes.setdefault(cls, built)


def resolve_path(owner: Any, path: str) -> Any:
    return get_type_index(type(owner)).resolve(owner, path)


def clear_type_index_cache() -> None:
    """Drop every published index. Intended for tests."""
    with _type_indexes_lock:
        _type_indexes.clear()
