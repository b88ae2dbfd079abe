from typing import Any, Optional

from httpx import AsyncClient, Client, Headers, Request, Response

from .._config import ClientSettings, Config, get_default_settings
from .._utils._logger import ApiClientLogger
from .._utils._query import QueryBuilder
from .._utils._request_spec import RequestSpec
from .._utils._ssl_context import get_httpx_client_kwargs
from .._utils._url import is_absolute_url
from .._utils.constants import (
    HEADER_ACCEPT,
    HEADER_AUTHORIZATION,
    HEADER_COOKIE,
    HEADER_USER_AGENT,
    USER_AGENT,
)
from ..handlers import RecoveryContext, RecoveryHandler
from ..models.errors import BaseUrlMissingError
from ..translators import HttpContent


class BaseService:
    """Owns the httpx transport and runs the recovery stage.

    Args:
        config: Base URL, access token and timeout.
        settings: Client settings; the process-wide defaults when omitted.
        logger: Traffic logger; a ``restbound`` logger when omitted.
        client: Existing sync client to use. It is not closed by this service.
        async_client: Existing async client to use. It is not closed by this
            service. Requests are built with ``default_headers``; the async path
            adds the default headers of this client that are not already set.
    """

    def __init__(
        self,
        config: Config,
        settings: Optional[ClientSettings] = None,
        logger: Optional[ApiClientLogger] = None,
        *,
        client: Optional[Client] = None,
        async_client: Optional[AsyncClient] = None,
    ) -> None:
        if not config.base_url:
            for given in (client, async_client):
                if given is not None and str(given.base_url):
                    config = config.model_copy(update={"base_url": str(given.base_url)})
                    break
        self._config = config
        self.settings = settings or get_default_settings()
        self.logger = logger or ApiClientLogger(
            log_response_headers_on_error=self.settings.log_response_headers_on_error
        )
        self.default_args = QueryBuilder(self.settings.formatter)

        client_kwargs: dict[str, Any] = {
            **get_httpx_client_kwargs(config.timeout),  # SSL, timeout, redirects
            "headers": Headers(self._initial_headers),
        }
        self._owns_client = client is None
        self._owns_client_async = async_client is None
        self._client = client if client is not None else Client(**client_kwargs)
        self._client_async = (
            async_client if async_client is not None else AsyncClient(**client_kwargs)
        )

        super().__init__()

    @property
    def base_url(self) -> Optional[str]:
        return self._config.base_url

    @property
    def _initial_headers(self) -> dict[str, str]:
        return {
            HEADER_ACCEPT: self.settings.default_media_type,
            HEADER_USER_AGENT: USER_AGENT,
            **self.auth_headers,
        }

    @property
    def auth_headers(self) -> dict[str, str]:
        if not self._config.secret:
            return {}
        return {HEADER_AUTHORIZATION: f"Bearer {self._config.secret}"}

    @property
    def default_headers(self) -> Headers:
        """Headers sent with every request. Changes apply to later requests."""
        return self._client.headers

    def build_request(
        self,
        spec: RequestSpec,
        content: Optional[HttpContent] = None,
        *,
        for_async: bool = False,
    ) -> Request:
        """Turn a resolved ``RequestSpec`` into an ``httpx.Request``.

        With ``for_async``, the default headers of a caller supplied async
        client are added where the request does not set them.

        Raises:
            BaseUrlMissingError: If no base URL is set and the path is not an
                absolute URL.
        """
        if not self.base_url and not is_absolute_url(spec.path):
            raise BaseUrlMissingError()

        query = self.default_args.merge(spec.query)
        if is_absolute_url(spec.path):
            url = query.build_url(spec.path)
        else:
            url = query.build_url(self.base_url, spec.path)

        headers: dict[str, str] = dict(spec.headers)
        if spec.cookies:
            headers[HEADER_COOKIE] = "; ".join(
                f"{name}={value}" for name, value in spec.cookies.items()
            )

        kwargs: dict[str, Any] = {}
        if content is not None:
            content_kwargs = content.request_kwargs()
            headers.update(content_kwargs.pop("headers"))
            kwargs.update(content_kwargs)
        if spec.timeout is not None:
            kwargs["timeout"] = spec.timeout

        request = self._client.build_request(
            spec.method or "GET", url, headers=headers, **kwargs
        )
        if for_async and not self._owns_client_async:
            for name, value in self._client_async.headers.items():
                if name not in request.headers:
                    request.headers[name] = value
        return request

    def _send_once(self, request: Request) -> Response:
        self.logger.log_request(request)
        response = self._client.send(request)
        self.logger.log_response(response)
        return response

    async def _send_once_async(self, request: Request) -> Response:
        self.logger.log_request(request)
        response = await self._client_async.send(request)
        self.logger.log_response(response)
        return response

    def _can_recover(self, response: Response, attempt: int) -> bool:
        limit = self.settings.max_recovery_attempts
        return not response.is_success and (limit is None or attempt < limit)

    def _recovery_context(
        self, request: Request, response: Response, attempt: int
    ) -> RecoveryContext:
        return RecoveryContext(
            request,
            response,
            self.settings,
            self._send_once,
            self._send_once_async,
            attempt,
        )

    def send_with_recovery(self, request: Request) -> tuple[Response, bool]:
        """Send ``request`` and let the recovery handlers replace a failed
        response.

        The loop stops at the first successful response or once
        ``max_recovery_attempts`` recoveries ran. It also stops when no handler
        accepts the response or a handler returns it unchanged.

        Returns:
            tuple[Response, bool]: The final response and whether a recovery
                handler replaced it.
        """
        response = self._send_once(request)

        attempt = 0
        while self._can_recover(response, attempt):
            handler = self.settings.get_handler(RecoveryHandler, response)
            if handler is None:
                break
            recovered = handler.recover(
                self._recovery_context(request, response, attempt + 1)
            )
            if recovered is response:
                break
            attempt += 1
            response = recovered

        return response, attempt > 0

    async def send_with_recovery_async(self, request: Request) -> tuple[Response, bool]:
        response = await self._send_once_async(request)

        attempt = 0
        while self._can_recover(response, attempt):
            handler = self.settings.get_handler(RecoveryHandler, response)
            if handler is None:
                break
            recovered = await handler.recover_async(
                self._recovery_context(request, response, attempt + 1)
            )
            if recovered is response:
                break
            attempt += 1
            response = recovered

        return response, attempt > 0

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    async def aclose(self) -> None:
        if self._owns_client_async:
            await self._client_async.aclose()
        self.close()
