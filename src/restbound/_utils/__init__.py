from ._errors import handle_validation_errors, validate_body
from ._formatting import ValueFormatter
from ._logger import ApiClientLogger
from ._member_index import (
    MemberDescriptor,
    MemberKind,
    TypeIndex,
    clear_type_index_cache,
    get_type_index,
    resolve_path,
)
from ._query import QueryBuilder, QueryNamer, flatten
from ._request_spec import RequestSpec, RequestSpecBuilder
from ._ssl_context import get_httpx_client_kwargs
from ._url import UrlTemplate, find_placeholders, is_absolute_url, join_url

__all__ = [
    "ApiClientLogger",
    "MemberDescriptor",
    "MemberKind",
    "QueryBuilder",
    "QueryNamer",
    "RequestSpec",
    "RequestSpecBuilder",
    "TypeIndex",
    "UrlTemplate",
    "ValueFormatter",
    "clear_type_index_cache",
    "find_placeholders",
    "flatten",
    "get_httpx_client_kwargs",
    "get_type_index",
    "handle_validation_errors",
    "is_absolute_url",
    "join_url",
    "resolve_path",
    "validate_body",
]
