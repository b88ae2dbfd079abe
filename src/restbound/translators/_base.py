from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Iterator, Optional, Protocol, runtime_checkable

import httpx
from pydantic import TypeAdapter

from .._metadata import BODY_EXCLUDED_MARKERS, FormField
from .._utils._formatting import ValueFormatter
from .._utils._member_index import get_type_index

if TYPE_CHECKING:
    from .._config import ClientSettings


@dataclass
class HttpContent:
    """Encoded request body plus the headers describing it."""

    content: Any
    media_type: Optional[str] = None
    headers: dict[str, str] = field(default_factory=dict)

    def request_kwargs(self) -> dict[str, Any]:
        headers = dict(self.headers)
        if self.media_type and not any(k.lower() == "content-type" for k in headers):
            headers["Content-Type"] = self.media_type
        return {"content": self.content, "headers": headers}


class ContentTranslator(ABC):
    """Serializer / deserializer pair bound to one media type."""

    media_type: str = ""

    def __init__(self, formatter: Optional[ValueFormatter] = None) -> None:
        self.formatter = formatter or ValueFormatter()

    @abstractmethod
    def parse(self, content: Any) -> Optional[HttpContent]:
        """Encode ``content`` as a request body; None means no body."""

    @abstractmethod
    def serialize(self, content: Any) -> str:
        """Encode ``content`` as text."""

    @abstractmethod
    def deserialize(self, content: str, target: Any = None) -> Any:
        """Decode ``content`` into ``target``, or into plain Python values when
        ``target`` is None."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(media_type={self.media_type!r})"


@runtime_checkable
class ResponseDeserializer(Protocol):
    """Decodes a response for one request type, bypassing the translators."""

    def deserialize(self, response: httpx.Response, settings: "ClientSettings") -> Any: ...


@lru_cache(maxsize=256)
def _cached_adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def type_adapter(target: Any) -> TypeAdapter[Any]:
    try:
        return _cached_adapter(target)
    except TypeError:
        # unhashable annotation
        return TypeAdapter(target)


def validate_python(value: Any, target: Any = None) -> Any:
    if target is None or target is Any:
        return value
    return type_adapter(target).validate_python(value)


def body_excluded_fields(cls: type) -> set[str]:
    """Names of the members of ``cls`` kept out of request bodies."""
    if issubclass(cls, Mapping):
        return set()
    return {
        member.attribute
        for member in get_type_index(cls).members
        if not member.is_method and member.has_tag(*BODY_EXCLUDED_MARKERS)
    }


def to_jsonable(content: Any) -> Any:
    cls = type(content)
    return type_adapter(cls).dump_python(
        content,
        mode="json",
        by_alias=True,
        exclude=body_excluded_fields(cls) or None,
    )


def dump_json(content: Any) -> bytes:
    cls = type(content)
    return type_adapter(cls).dump_json(
        content,
        by_alias=True,
        exclude=body_excluded_fields(cls) or None,
    )


def form_fields(content: Any) -> Iterator[tuple[str, Any]]:
    """Yield ``(name, value)`` for the non-None body members of ``content``.

    ``FormField`` renames a member; members tagged ``QueryArg`` or ``PathOnly``
    are skipped.
    """
    if isinstance(content, Mapping):
        for key, value in content.items():
            if value is not None:
                yield str(key), value
        return

    for member in get_type_index(type(content)).members:
        if member.is_method or member.has_tag(*BODY_EXCLUDED_MARKERS):
            continue

        value = member.get_value(content)
        if value is None:
            continue

        tag = member.get_tag(FormField)
        yield (tag.name if tag is not None else member.name), value
