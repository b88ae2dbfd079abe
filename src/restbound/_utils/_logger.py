from logging import Logger, getLogger
from typing import Optional

import httpx


class ApiClientLogger:
    """Logs the traffic of the clients sharing it.

    Requests and responses are logged at DEBUG, mapped errors at ERROR.
    """

    def __init__(
        self,
        logger: Optional[Logger] = None,
        log_response_headers_on_error: bool = False,
    ) -> None:
        self.logger = logger or getLogger("restbound")
        self.log_response_headers_on_error = log_response_headers_on_error

    def log_request(self, request: httpx.Request) -> None:
        self.logger.debug(f"Request: {request.method} {request.url}")
        headers = dict(request.headers)
        if "authorization" in headers:
            headers["authorization"] = "[REDACTED]"
        self.logger.debug(f"HEADERS: {headers}")

    def log_response(self, response: httpx.Response) -> None:
        self.logger.debug(
            f"Response: {response.status_code} {response.reason_phrase} "
            f"({response.request.method} {response.request.url})"
        )

    def log_error(
        self,
        error: BaseException,
        response: Optional[httpx.Response] = None,
    ) -> None:
        if response is None:
            self.logger.error(f"Request failed: {error}")
            return

        self.logger.error(
            f"Request failed with status {response.status_code} "
            f"({response.request.method} {response.request.url}): {error}"
        )
        if self.log_response_headers_on_error:
            self.logger.error(f"RESPONSE HEADERS: {dict(response.headers)}")
