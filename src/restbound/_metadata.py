"""Declarative metadata for request types.

Request classes are described with class decorators, and their members with
markers placed inside ``typing.Annotated``:

```python
from typing import Annotated

from pydantic import BaseModel

from restbound import PathOnly, QueryArg, content_type, request


@request("/users/{id}/posts", method="POST", response_type=Post)
@content_type("application/json")
class CreatePost(BaseModel):
    id: Annotated[int, PathOnly()]
    notify: Annotated[bool, QueryArg("notify_followers")] = False
    title: str
    body: str
```

The decorators record a ``RequestMetadata`` entry in a process-wide table keyed
by class. Lookups walk the MRO, so subclasses inherit their parent's entry.
"""

import dataclasses
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

T = TypeVar("T", bound=type)


@dataclass(frozen=True)
class QueryArg:
    """Marks a member as a query argument, optionally renaming it."""

    name: Optional[str] = None


@dataclass(frozen=True)
class QueryIgnore:
    """Keeps a member out of the query string."""


@dataclass(frozen=True)
class PathOnly:
    """Uses a member only in path templates, never in the query or the body."""


@dataclass(frozen=True)
class FormField:
    """Renames a member in ``multipart/form-data`` and url-encoded bodies."""

    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("FormField name must not be empty")


BODY_EXCLUDED_MARKERS: tuple[type, ...] = (QueryArg, PathOnly)


@dataclass(frozen=True)
class RequestMetadata:
    """Route and content negotiation details of a request type.

    Attributes:
        path: Path template, e.g. ``/users/{id}``.
        method: HTTP method used when the caller does not pick one.
        media_type: Media type of the body and of the expected response.
        response_type: Type the response body is decoded into.
        deserializer: Custom response deserializer; bypasses the translators.
    """

    path: Optional[str] = None
    method: str = "GET"
    media_type: Optional[str] = None
    response_type: Any = None
    deserializer: Any = None


_request_metadata: dict[type, RequestMetadata] = {}
_request_metadata_lock = threading.Lock()


def _update_metadata(cls: type, **changes: Any) -> None:
    with _request_metadata_lock:
        current = _request_metadata.get(cls)
        if current is None:
            inherited = get_request_metadata(cls)
            current = inherited if inherited is not None else RequestMetadata()
        _request_metadata[cls] = dataclasses.replace(current, **changes)


def request(
    path: str,
    *,
    method: str = "GET",
    response_type: Any = None,
    deserializer: Any = None,
) -> Callable[[T], T]:
    """Declare the route of a request type."""

    def decorator(cls: T) -> T:
        changes: dict[str, Any] = {"path": path, "method": method.upper()}
        if response_type is not None:
            changes["response_type"] = response_type
        if deserializer is not None:
            changes["deserializer"] = deserializer
        _update_metadata(cls, **changes)
        return cls

    return decorator


def content_type(media_type: str) -> Callable[[T], T]:
    """Declare the media type used for a request type's body and response."""

    def decorator(cls: T) -> T:
        _update_metadata(cls, media_type=media_type)
        return cls

    return decorator


def get_request_metadata(cls: type) -> Optional[RequestMetadata]:
    for klass in getattr(cls, "__mro__", (cls,)):
        metadata = _request_metadata.get(klass)
        if metadata is not None:
            return metadata
    return None


def get_content_type(cls: type) -> Optional[str]:
    metadata = get_request_metadata(cls)
    return metadata.media_type if metadata is not None else None
