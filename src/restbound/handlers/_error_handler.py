import json
from typing import TYPE_CHECKING, Any, Optional

import httpx

from ..models.errors import RequestError, ThrottlingError, UnauthorizedError
from ._base import ErrorHandler
from ._headers import get_request_limit, get_retry_after

if TYPE_CHECKING:
    from .._config import ClientSettings


def response_url(response: httpx.Response) -> Optional[str]:
    try:
        return str(response.request.url)
    except RuntimeError:
        return None


def _error_message(body: str) -> Optional[str]:
    try:
        parsed: Any = json.loads(body)
    except ValueError:
        return None

    if not isinstance(parsed, dict):
        return None

    message = parsed.get("message") or parsed.get("error") or parsed.get("detail")
    return message if isinstance(message, str) else None


class HttpErrorHandler(ErrorHandler):
    """Maps every unsuccessful response to an exception.

    429 becomes ``ThrottlingError``, 401 ``UnauthorizedError`` and anything
    else ``RequestError``. When the body is a JSON object, its ``message``,
    ``error`` or ``detail`` entry is used as the error message.
    """

    def can_handle(self, response: httpx.Response) -> bool:
        return not response.is_success

    def map_error(
        self, response: httpx.Response, settings: "ClientSettings"
    ) -> Exception:
        url = response_url(response)
        headers = dict(response.headers)

        if response.status_code == 429:
            return ThrottlingError(
                get_retry_after(response.headers),
                get_request_limit(response.headers),
                url=url,
                headers=headers,
            )

        body = response.text
        if response.status_code == 401:
            return UnauthorizedError(body, url=url, headers=headers)

        return RequestError(
            response.status_code,
            body,
            url=url,
            headers=headers,
            message=_error_message(body),
        )
