from collections.abc import Iterable, Mapping
from typing import Any, Iterator, Optional, Union
from urllib.parse import quote_plus

from .._metadata import PathOnly, QueryArg, QueryIgnore
from ._formatting import ValueFormatter
from ._member_index import MemberDescriptor, MemberNamer, get_type_index
from ._primitives import is_native_value
from ._url import join_url

QueryPairs = Union[Mapping[str, Any], Iterable[tuple[str, Any]]]


class QueryNamer(MemberNamer):
    """Selects the members of an object that become query arguments.

    Methods and members tagged ``QueryIgnore`` or ``PathOnly`` are skipped. With
    ``attributes_only`` only members tagged ``QueryArg`` are kept, which also
    stops descent into untagged nested objects.
    """

    def __init__(self, attributes_only: bool = False) -> None:
        super().__init__()
        self.attributes_only = attributes_only

    def can_enter(self, member: MemberDescriptor) -> bool:
        return self.can_map(member)

    def can_map(self, member: MemberDescriptor) -> bool:
        if member.is_method or member.has_tag(QueryIgnore, PathOnly):
            return False

        if not self.attributes_only:
            return True

        return member.has_tag(QueryArg)

    def get_name(self, member: MemberDescriptor) -> str:
        tag = member.get_tag(QueryArg)
        if tag is not None and tag.name:
            return tag.name
        return member.name


class QueryBuilder:
    """Insertion-ordered query arguments.

    Setting a key twice keeps its first position and the last value.
    """

    def __init__(self, formatter: Optional[ValueFormatter] = None) -> None:
        self._items: dict[str, str] = {}
        self._formatter = formatter or ValueFormatter()

    def set(
        self, key: str, value: Any, allow_empty_or_null: bool = True
    ) -> "QueryBuilder":
        """Set one argument.

        Args:
            key: Argument name.
            value: Value, formatted with the builder's formatter; collections
                are joined with commas.
            allow_empty_or_null: When False, values formatting to None or ``""``
                are dropped instead of stored as ``""``.
        """
        formatted = self._leaf_value(value)
        if allow_empty_or_null or formatted:
            self._items[key] = formatted or ""
        return self

    def add_range(self, pairs: QueryPairs) -> "QueryBuilder":
        items = pairs.items() if isinstance(pairs, Mapping) else pairs
        for key, value in items:
            self.set(key, value)
        return self

    def add_all(self, query: Optional["QueryBuilder"]) -> "QueryBuilder":
        if query is not None:
            self.add_range(query._items.items())
        return self

    def merge(self, query: Optional["QueryBuilder"]) -> "QueryBuilder":
        """Return a new builder with this builder's arguments, then ``query``'s."""
        merged = QueryBuilder(self._formatter).add_range(self._items.items())
        return merged.add_all(query)

    def add(
        self,
        obj: Any,
        attributes_only: bool = False,
        allow_empty_or_null: bool = False,
    ) -> "QueryBuilder":
        """Add the members of ``obj`` as arguments.

        Nested objects produce dotted keys (``user.name``); collections are
        joined with commas. Primitive values and None add nothing.

        Args:
            obj: Object to read arguments from.
            attributes_only: Keep only members tagged ``QueryArg``.
            allow_empty_or_null: Keep members whose value formats to None or
                ``""`` (as ``""``).
        """
        if obj is None or is_native_value(obj):
            return self

        if isinstance(obj, Mapping):
            for key, value in obj.items():
                self.set(str(key), value, allow_empty_or_null)
            return self

        index = get_type_index(type(obj))
        for member_value in index.iter_values(obj, QueryNamer(attributes_only)):
            self.set(
                member_value.path_name,
                member_value.value,
                allow_empty_or_null,
            )

        return self

    def entries(self) -> list[tuple[str, str]]:
        return list(self._items.items())

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._items.get(key, default)

    def to_query_string(self) -> str:
        if not self._items:
            return ""
        return "?" + "&".join(
            f"{quote_plus(key, safe='.[]')}={quote_plus(value)}"
            for key, value in self._items.items()
        )

    def build_url(self, *url_parts: Optional[str]) -> str:
        """Join ``url_parts`` with ``/`` and append the query string."""
        return join_url(*url_parts) + self.to_query_string()

    def _leaf_value(self, value: Any) -> Optional[str]:
        if is_native_value(value):
            return self._formatter.format(value)

        if not isinstance(value, Iterable):
            return None

        formatted = (self._formatter.format(item) for item in value)
        return ",".join(item for item in formatted if item)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __str__(self) -> str:
        return self.to_query_string()

    def __repr__(self) -> str:
        return f"QueryBuilder({self._items!r})"


def flatten(
    obj: Any,
    attributes_only: bool = False,
    allow_empty_or_null: bool = True,
    formatter: Optional[ValueFormatter] = None,
) -> list[tuple[str, str]]:
    """Flatten ``obj`` into ordered ``(key, value)`` query pairs.

    Examples:
        ```python
        flatten(Person(name="John", age=None))  # [("name", "John"), ("age", "")]
        ```
    """
    return (
        QueryBuilder(formatter)
        .add(obj, attributes_only, allow_empty_or_null=allow_empty_or_null)
        .entries()
    )
