import base64
import inspect
from typing import Any, Optional

from httpx import AsyncClient, Client, Request, Response

from .._config import ClientSettings, Config
from .._utils._errors import validate_body
from .._utils._logger import ApiClientLogger
from .._utils._request_spec import RequestSpec, RequestSpecBuilder
from .._utils.constants import (
    HEADER_API_KEY,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_TYPE,
)
from ..handlers import ErrorHandler
from ..models.media_types import MediaType
from ..models.response import ApiResponse, DispatchOutcome, DispatchStatus
from ._base_service import BaseService


class ApiClient(BaseService):
    """Sends declaratively described requests and decodes their responses.

    Request bodies are plain objects (pydantic models, dataclasses, annotated
    classes). The ``@request`` and ``@content_type`` decorators of the body
    type supply the route and the media type; ``RequestSpec`` overrides them
    per call.

    Examples:
        ```python
        with ApiClient("https://api.example.com") as client:
            client.set_bearer_authentication(token)
            user = client.get(GetUser(id=123)).data
        ```

    Args:
        base_url: Base URL joined in front of relative request paths.
        config: Full connection settings; ``base_url`` overrides its URL.
        settings: Client settings; the process-wide defaults when omitted.
        logger: Traffic logger.
        client: Existing sync httpx client. Not closed by this client.
        async_client: Existing async httpx client. Not closed by this client.
            Async requests carry ``default_headers`` plus any of its own
            default headers not already set. Its base URL is used when no
            other base URL is set.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        config: Optional[Config] = None,
        settings: Optional[ClientSettings] = None,
        logger: Optional[ApiClientLogger] = None,
        client: Optional[Client] = None,
        async_client: Optional[AsyncClient] = None,
    ) -> None:
        config = config or Config()
        if base_url:
            config = config.model_copy(update={"base_url": base_url})
        super().__init__(
            config, settings, logger, client=client, async_client=async_client
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> "ApiClient":
        """Build a client from ``RESTBOUND_URL``, ``RESTBOUND_ACCESS_TOKEN`` and
        ``RESTBOUND_TIMEOUT``. The access token, when set, is sent as a bearer
        token.

        Raises:
            BaseUrlMissingError: If ``RESTBOUND_URL`` is not set.
        """
        return cls(config=Config.from_env(), **kwargs)

    # Authentication

    def set_basic_authentication(self, username: str, password: str) -> "ApiClient":
        credentials = base64.b64encode(f"{username}:{password}".encode("utf-8"))
        return self.set_authentication("Basic", credentials.decode("ascii"))

    def set_bearer_authentication(self, token: str) -> "ApiClient":
        return self.set_authentication("Bearer", token)

    def set_api_key_authentication(
        self, api_key: str, header_name: str = HEADER_API_KEY
    ) -> "ApiClient":
        self.default_headers[header_name] = api_key
        return self

    def set_authentication(self, scheme: str, value: str) -> "ApiClient":
        self.default_headers[HEADER_AUTHORIZATION] = f"{scheme} {value}"
        return self

    def clear_authentication(self) -> "ApiClient":
        self.default_headers.pop(HEADER_AUTHORIZATION, None)
        return self

    # Request assembly

    def _prepare(
        self, body: Any, info: Optional[RequestSpec], for_async: bool = False
    ) -> tuple[RequestSpec, Request]:
        if self.settings.validate_request:
            validate_body(body)

        spec = (
            RequestSpecBuilder(info, self.settings.formatter)
            .apply_request_object(body)
            .build()
        )

        content = None
        if body is not None and spec.can_add_body():
            content = self.settings.try_parse_content(body, spec.media_type)

        return spec, self.build_request(spec, content, for_async=for_async)

    def _outcome(self, response: Response, recovered: bool) -> DispatchOutcome:
        if not response.is_success:
            handler = self.settings.get_handler(ErrorHandler, response)
            if handler is not None:
                error = handler.map_error(response, self.settings)
                self.logger.log_error(error, response)
                return DispatchOutcome(DispatchStatus.FAILED, response, error)

        status = DispatchStatus.RECOVERED if recovered else DispatchStatus.SUCCESS
        return DispatchOutcome(status, response)

    def _dispatch(
        self, body: Any, info: Optional[RequestSpec]
    ) -> tuple[RequestSpec, DispatchOutcome]:
        spec, request = self._prepare(body, info)
        response, recovered = self.send_with_recovery(request)
        return spec, self._outcome(response, recovered)

    async def _dispatch_async(
        self, body: Any, info: Optional[RequestSpec]
    ) -> tuple[RequestSpec, DispatchOutcome]:
        spec, request = self._prepare(body, info, for_async=True)
        response, recovered = await self.send_with_recovery_async(request)
        return spec, self._outcome(response, recovered)

    def dispatch(
        self, body: Any = None, info: Optional[RequestSpec] = None
    ) -> DispatchOutcome:
        """Send a request and report the outcome instead of raising mapped
        errors.

        Validation, path and media type errors are still raised since nothing
        was sent. Transport errors propagate unchanged.
        """
        return self._dispatch(body, info)[1]

    async def dispatch_async(
        self, body: Any = None, info: Optional[RequestSpec] = None
    ) -> DispatchOutcome:
        return (await self._dispatch_async(body, info))[1]

    # Raw responses

    def send_http_request(
        self, body: Any = None, info: Optional[RequestSpec] = None
    ) -> Response:
        """Send a request and return the final ``httpx.Response``.

        Raises:
            RequestError: Or another error mapped by the error handlers.
        """
        return self.dispatch(body, info).unwrap()

    async def send_http_request_async(
        self, body: Any = None, info: Optional[RequestSpec] = None
    ) -> Response:
        return (await self.dispatch_async(body, info)).unwrap()

    def send_request(
        self, body: Any = None, info: Optional[RequestSpec] = None
    ) -> ApiResponse[None]:
        """Send a request without decoding the response body."""
        return ApiResponse.from_response(self.send_http_request(body, info))

    async def send_request_async(
        self, body: Any = None, info: Optional[RequestSpec] = None
    ) -> ApiResponse[None]:
        response = await self.send_http_request_async(body, info)
        return ApiResponse.from_response(response)

    # Typed responses

    def _with_method(
        self, info: Optional[RequestSpec], method: Optional[str]
    ) -> Optional[RequestSpec]:
        if method is None:
            return info
        return (info or RequestSpec()).clone(method.upper())

    def _deserializer(self, spec: RequestSpec) -> Any:
        deserializer = spec.deserializer
        if inspect.isclass(deserializer):
            return deserializer()
        return deserializer

    def _response_media_type(
        self, response: Response, spec: RequestSpec
    ) -> Optional[str]:
        content_type = response.headers.get(HEADER_CONTENT_TYPE)
        if content_type and content_type in self.settings.translators:
            return content_type

        if spec.media_type == MediaType.QUERY_STRING:
            # the request went out as a query string; the answer uses the default
            return None
        return spec.media_type

    def _decode(
        self, response: Response, spec: RequestSpec, response_type: Any
    ) -> Any:
        return self.settings.deserialize(
            response.text,
            self._response_media_type(response, spec),
            response_type or spec.response_type,
        )

    def send(
        self,
        body: Any = None,
        info: Optional[RequestSpec] = None,
        *,
        method: Optional[str] = None,
        response_type: Any = None,
    ) -> ApiResponse[Any]:
        """Send a request and decode the response body.

        Args:
            body: Request object. Its members fill the path template, the query
                string and, for methods with a body, the request content.
            info: Per-call overrides: method, path, query, headers, cookies.
            method: HTTP method; overrides ``info`` and the ``@request``
                metadata.
            response_type: Type the body is decoded into; defaults to the
                ``response_type`` of the ``@request`` metadata. Without either,
                plain Python values are returned.

        Returns:
            ApiResponse: Status, headers and decoded data. ``data`` is None for
                204 responses.

        Raises:
            ValidationFailedError: If the body fails validation.
            InvalidPathError: If a path placeholder does not resolve.
            UnsupportedMediaTypeError: If no translator decodes the response.
            RequestError: Or another error mapped by the error handlers.
        """
        spec, outcome = self._dispatch(body, self._with_method(info, method))
        response = outcome.unwrap()

        if response.status_code == 204:
            return ApiResponse.from_response(response)

        deserializer = self._deserializer(spec)
        if deserializer is not None:
            data = deserializer.deserialize(response, self.settings)
        else:
            data = self._decode(response, spec, response_type)

        return ApiResponse.from_response(response, data)

    async def send_async(
        self,
        body: Any = None,
        info: Optional[RequestSpec] = None,
        *,
        method: Optional[str] = None,
        response_type: Any = None,
    ) -> ApiResponse[Any]:
        spec, outcome = await self._dispatch_async(
            body, self._with_method(info, method)
        )
        response = outcome.unwrap()

        if response.status_code == 204:
            return ApiResponse.from_response(response)

        deserializer = self._deserializer(spec)
        if deserializer is None:
            data = self._decode(response, spec, response_type)
        elif hasattr(deserializer, "deserialize_async"):
            data = await deserializer.deserialize_async(response, self.settings)
        else:
            data = deserializer.deserialize(response, self.settings)

        return ApiResponse.from_response(response, data)

    def get(
        self,
        body: Any = None,
        info: Optional[RequestSpec] = None,
        *,
        response_type: Any = None,
    ) -> ApiResponse[Any]:
        return self.send(body, info, method="GET", response_type=response_type)

    def post(
        self,
        body: Any = None,
        info: Optional[RequestSpec] = None,
        *,
        response_type: Any = None,
    ) -> ApiResponse[Any]:
        return self.send(body, info, method="POST", response_type=response_type)

    def put(
        self,
        body: Any = None,
        info: Optional[RequestSpec] = None,
        *,
        response_type: Any = None,
    ) -> ApiResponse[Any]:
        return self.send(body, info, method="PUT", response_type=response_type)

    def patch(
        self,
        body: Any = None,
        info: Optional[RequestSpec] = None,
        *,
        response_type: Any = None,
    ) -> ApiResponse[Any]:
        return self.send(body, info, method="PATCH", response_type=response_type)

    def delete(
        self,
        body: Any = None,
        info: Optional[RequestSpec] = None,
        *,
        response_type: Any = None,
    ) -> ApiResponse[Any]:
        return self.send(body, info, method="DELETE", response_type=response_type)

    async def get_async(
        self,
        body: Any = None,
        info: Optional[RequestSpec] = None,
        *,
        response_type: Any = None,
    ) -> ApiResponse[Any]:
        return await self.send_async(
            body, info, method="GET", response_type=response_type
        )

    async def post_async(
        self,
        body: Any = None,
        info: Optional[RequestSpec] = None,
        *,
        response_type: Any = None,
    ) -> ApiResponse[Any]:
        return await self.send_async(
            body, info, method="POST", response_type=response_type
        )

    async def put_async(
        self,
        body: Any = None,
        info: Optional[RequestSpec] = None,
        *,
        response_type: Any = None,
    ) -> ApiResponse[Any]:
        return await self.send_async(
            body, info, method="PUT", response_type=response_type
        )

    async def patch_async(
        self,
        body: Any = None,
        info: Optional[RequestSpec] = None,
        *,
        response_type: Any = None,
    ) -> ApiResponse[Any]:
        return await self.send_async(
            body, info, method="PATCH", response_type=response_type
        )

    async def delete_async(
        self,
        body: Any = None,
        info: Optional[RequestSpec] = None,
        *,
        response_type: Any = None,
    ) -> ApiResponse[Any]:
        return await self.send_async(
            body, info, method="DELETE", response_type=response_type
        )

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
