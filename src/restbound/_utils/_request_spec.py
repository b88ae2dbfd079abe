import dataclasses
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .._metadata import get_request_metadata
from ..models.media_types import MediaType, NonStandardBodyMethods
from ._formatting import ValueFormatter
from ._primitives import is_native_value
from ._query import QueryBuilder
from ._url import UrlTemplate

DEFAULT_METHOD = "GET"
BODYLESS_METHODS = ("GET", "DELETE")


@dataclass
class RequestSpec:
    """Per-call request options.

    Everything left unset is filled from the ``@request`` metadata of the body
    type when the request is built. A ``path`` starting with ``http://`` or
    ``https://`` is used as is and the client base URL is ignored.
    """

    method: Optional[str] = None
    path: Optional[str] = None
    query: QueryBuilder = field(default_factory=QueryBuilder)
    headers: dict[str, str] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)
    allow_non_standard_body: NonStandardBodyMethods = NonStandardBodyMethods.NONE
    media_type: Optional[str] = None
    response_type: Any = None
    deserializer: Any = None
    timeout: Optional[float] = None

    def clone(self, method: Optional[str] = None) -> "RequestSpec":
        """Shallow copy, optionally with another method. Collections are shared."""
        return dataclasses.replace(self, method=method or self.method)

    def can_add_body(self) -> bool:
        method = (self.method or DEFAULT_METHOD).upper()
        return (
            method not in BODYLESS_METHODS
            or self.allow_non_standard_body.allows(method)
        )


class RequestSpecBuilder:
    """Resolves a ``RequestSpec`` against a request body.

    The path template is expanded with the body's members and the body's query
    arguments are merged after the explicit ones. For ``GET`` every member goes
    to the query string; for other methods only members tagged ``QueryArg``
    do. Bodies of the ``@query`` media type send every member to the query
    string whatever the method.
    """

    def __init__(
        self,
        spec: Optional[RequestSpec] = None,
        formatter: Optional[ValueFormatter] = None,
    ) -> None:
        spec = spec or RequestSpec()
        self._formatter = formatter or ValueFormatter()
        self._spec = spec
        self._method = spec.method
        self._path_template = spec.path.strip() if spec.path else None
        self._query = QueryBuilder(self._formatter).add_all(spec.query)
        self._headers: dict[str, str] = dict(spec.headers)
        self._cookies: dict[str, str] = dict(spec.cookies)
        self._media_type = spec.media_type
        self._response_type = spec.response_type
        self._deserializer = spec.deserializer
        self._body: Any = None

    @property
    def method(self) -> Optional[str]:
        return self._method

    def apply_request_object(self, body: Any) -> "RequestSpecBuilder":
        self._body = body
        if body is None or is_native_value(body):
            return self

        metadata = get_request_metadata(type(body))
        if metadata is None:
            return self

        if not self._method:
            self.set_method(metadata.method)
        if not self._path_template:
            self.set_path(metadata.path)
        if not self._media_type:
            self._media_type = metadata.media_type
        if self._response_type is None:
            self._response_type = metadata.response_type
        if self._deserializer is None:
            self._deserializer = metadata.deserializer
        return self

    def set_path(self, path: Optional[str]) -> "RequestSpecBuilder":
        path = path.strip() if path else None
        if path:
            self._path_template = path
        return self

    def set_method(self, method: Optional[str]) -> "RequestSpecBuilder":
        if method:
            self._method = method.upper()
        return self

    def add_query(self, query: Optional[QueryBuilder]) -> "RequestSpecBuilder":
        self._query.add_all(query)
        return self

    def add_headers(self, headers: Mapping[str, str]) -> "RequestSpecBuilder":
        self._headers.update(headers)
        return self

    def add_cookie(self, name: str, value: str) -> "RequestSpecBuilder":
        self._cookies[name] = value
        return self

    def build(self) -> RequestSpec:
        method = (self._method or DEFAULT_METHOD).upper()
        return dataclasses.replace(
            self._spec,
            method=method,
            path=self._build_path(),
            query=self._build_query(method),
            headers=self._headers,
            cookies=self._cookies,
            media_type=self._media_type,
            response_type=self._response_type,
            deserializer=self._deserializer,
        )

    def _build_path(self) -> Optional[str]:
        return UrlTemplate(self._path_template, self._formatter).expand(self._body)

    def _build_query(self, method: str) -> QueryBuilder:
        attributes_only = (
            method != DEFAULT_METHOD and self._media_type != MediaType.QUERY_STRING
        )
        return (
            QueryBuilder(self._formatter)
            .merge(self._query)
            .add(self._body, attributes_only=attributes_only)
        )
