import asyncio
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Awaitable, Callable

import httpx

if TYPE_CHECKING:
    from .._config import ClientSettings


class HttpHandler(ABC):
    """Base class of the response handlers run by the client."""

    @abstractmethod
    def can_handle(self, response: httpx.Response) -> bool:
        """Return True if this handler should process ``response``."""


class RecoveryContext:
    """State handed to a recovery handler for one failed response.

    Attributes:
        request: The request that produced ``response``.
        response: The failed response.
        settings: Settings of the client that sent the request.
        attempt: 1 for the first recovery of this request, then 2, 3...
    """

    def __init__(
        self,
        request: httpx.Request,
        response: httpx.Response,
        settings: "ClientSettings",
        send: Callable[[httpx.Request], httpx.Response],
        send_async: Callable[[httpx.Request], Awaitable[httpx.Response]],
        attempt: int = 1,
    ) -> None:
        self.request = request
        self.response = response
        self.settings = settings
        self.attempt = attempt
        self._send = send
        self._send_async = send_async

    def resend(self) -> httpx.Response:
        """Send the original request again."""
        return self._send(self.request)

    async def resend_async(self) -> httpx.Response:
        return await self._send_async(self.request)


class RecoveryHandler(HttpHandler):
    """Replaces a failed response with a new one, usually by resending.

    Whatever ``recover`` returns replaces the failed response, successful or
    not. Returning ``context.response`` itself ends the recovery stage.
    """

    @abstractmethod
    def recover(self, context: RecoveryContext) -> httpx.Response:
        """Return the response that replaces ``context.response``."""

    async def recover_async(self, context: RecoveryContext) -> httpx.Response:
        """Async variant of ``recover``; runs ``recover`` in a worker thread
        unless overridden."""
        return await asyncio.to_thread(self.recover, context)


class ErrorHandler(HttpHandler):
    """Turns a final failed response into an exception."""

    @abstractmethod
    def map_error(
        self, response: httpx.Response, settings: "ClientSettings"
    ) -> Exception:
        """Return the exception describing ``response``."""
