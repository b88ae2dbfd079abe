from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Optional, TypeVar

import httpx

T = TypeVar("T")


@dataclass
class ApiResponse(Generic[T]):
    """Status, headers and decoded body of a completed request.

    Attributes:
        status_code: HTTP status code.
        reason_phrase: Reason phrase, or the standard phrase for the status.
        url: URL of the request that produced the response.
        headers: Response headers, looked up case-insensitively.
        data: Decoded body; None for 204 responses and raw requests.
    """

    status_code: int
    reason_phrase: str
    url: Optional[str] = None
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    data: Optional[T] = None

    @classmethod
    def from_response(
        cls, response: httpx.Response, data: Optional[T] = None
    ) -> "ApiResponse[T]":
        try:
            url: Optional[str] = str(response.request.url)
        except RuntimeError:
            url = None

        return cls(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase or str(response.status_code),
            url=url,
            headers=httpx.Headers(response.headers),
            data=data,
        )

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def get_header(self, name: str) -> Optional[str]:
        values = self.headers.get_list(name)
        return values[0] if values else None

    def get_headers(self, name: str) -> list[str]:
        return self.headers.get_list(name)

    def has_header(self, name: str) -> bool:
        return name in self.headers


class DispatchStatus(str, Enum):
    SUCCESS = "success"
    RECOVERED = "recovered"
    FAILED = "failed"


@dataclass
class DispatchOutcome:
    """Result of sending one request, without raising.

    Attributes:
        status: ``SUCCESS`` when the first response was kept, ``RECOVERED``
            when a recovery handler replaced it, ``FAILED`` when an error
            handler mapped the final response to ``error``.
        response: The final response.
        error: The mapped error for ``FAILED`` outcomes.
    """

    status: DispatchStatus
    response: httpx.Response
    error: Optional[Exception] = None

    @property
    def failed(self) -> bool:
        return self.status is DispatchStatus.FAILED

    def unwrap(self) -> httpx.Response:
        """Return the response, or raise the mapped error."""
        if self.error is not None:
            raise self.error
        return self.response
