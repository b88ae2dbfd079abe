"""Declarative HTTP requests on top of httpx.

```python
from typing import Annotated

from pydantic import BaseModel

from restbound import ApiClient, QueryArg, request


class User(BaseModel):
    id: int
    name: str


@request("/users/{id}", response_type=User)
class GetUser(BaseModel):
    id: int
    expand: Annotated[str, QueryArg("$expand")] = "profile"


with ApiClient("https://api.example.com") as client:
    user = client.get(GetUser(id=123)).data
```
"""

from ._config import (
    ClientSettings,
    Config,
    configure_default_settings,
    get_default_settings,
    reset_default_settings,
)
from ._metadata import (
    FormField,
    PathOnly,
    QueryArg,
    QueryIgnore,
    RequestMetadata,
    content_type,
    get_content_type,
    get_request_metadata,
    request,
)
from ._services import ApiClient, ApiClientFactory, BaseService
from ._utils import (
    ApiClientLogger,
    QueryBuilder,
    RequestSpec,
    UrlTemplate,
    flatten,
    get_type_index,
    resolve_path,
)
from .handlers import (
    ErrorHandler,
    HttpErrorHandler,
    RecoveryContext,
    RecoveryHandler,
    ServerErrorRecoveryHandler,
    ThrottleRecoveryHandler,
)
from .models import (
    ApiResponse,
    BaseUrlMissingError,
    DispatchOutcome,
    DispatchStatus,
    InvalidPathError,
    MediaType,
    NonStandardBodyMethods,
    RequestError,
    RestboundError,
    ThrottlingError,
    UnauthorizedError,
    UnsupportedMediaTypeError,
    ValidationFailedError,
)
from .translators import (
    ContentTranslator,
    ResponseDeserializer,
    TranslatorRegistry,
    register_default_translator,
)

__all__ = [
    "ApiClient",
    "ApiClientFactory",
    "ApiClientLogger",
    "ApiResponse",
    "BaseService",
    "BaseUrlMissingError",
    "ClientSettings",
    "Config",
    "ContentTranslator",
    "DispatchOutcome",
    "DispatchStatus",
    "ErrorHandler",
    "FormField",
    "HttpErrorHandler",
    "InvalidPathError",
    "MediaType",
    "NonStandardBodyMethods",
    "PathOnly",
    "QueryArg",
    "QueryBuilder",
    "QueryIgnore",
    "RecoveryContext",
    "RecoveryHandler",
    "RequestError",
    "RequestMetadata",
    "RequestSpec",
    "ResponseDeserializer",
    "RestboundError",
    "ServerErrorRecoveryHandler",
    "ThrottleRecoveryHandler",
    "ThrottlingError",
    "TranslatorRegistry",
    "UnauthorizedError",
    "UnsupportedMediaTypeError",
    "UrlTemplate",
    "ValidationFailedError",
    "configure_default_settings",
    "content_type",
    "flatten",
    "get_content_type",
    "get_default_settings",
    "get_request_metadata",
    "get_type_index",
    "register_default_translator",
    "request",
    "reset_default_settings",
    "resolve_path",
]
