from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional


class RestboundError(Exception):
    """Base class for every error raised by restbound."""


class BaseUrlMissingError(RestboundError):
    def __init__(
        self,
        message="A base URL must be set. Pass base_url to the client, give the request an absolute URL, or set the RESTBOUND_URL environment variable.",
    ):
        self.message = message
        super().__init__(self.message)


class InvalidPathError(RestboundError, ValueError):
    """A member path does not resolve against the members of a type.

    Attributes:
        segment: The offending path segment, if a single segment is to blame.
        position: 0-based position of ``segment`` in the path.
    """

    def __init__(
        self,
        message: str,
        segment: Optional[str] = None,
        position: Optional[int] = None,
    ) -> None:
        self.segment = segment
        self.position = position
        super().__init__(message)

    @staticmethod
    def member_not_found(segment: str, position: int) -> "InvalidPathError":
        if segment.endswith("()"):
            return InvalidPathError(
                f'Method "{segment[:-2]}" not found in path. '
                f"Invalid segment at position {position}.",
                segment,
                position,
            )
        return InvalidPathError(
            f'Member "{segment}" not found in path. '
            f"Invalid segment at position {position}.",
            segment,
            position,
        )


class UnsupportedMediaTypeError(RestboundError):
    def __init__(self, media_type: Optional[str]) -> None:
        self.media_type = media_type
        super().__init__(f"No translator registered for media type {media_type!r}.")


class ValidationFailedError(RestboundError):
    """The request body failed validation; nothing was sent."""

    def __init__(self, message: str, errors: Optional[list[Any]] = None) -> None:
        self.errors = errors or []
        super().__init__(message)


class RequestError(RestboundError):
    """An unsuccessful response that no other error type describes.

    Attributes:
        status_code: HTTP status of the response.
        response: Raw response body.
        url: URL of the originating request.
        headers: Response headers.
    """

    def __init__(
        self,
        status_code: Optional[int] = None,
        response: Optional[str] = None,
        *,
        url: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        message: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.response = response
        self.url = url
        self.headers: dict[str, str] = dict(headers or {})
        super().__init__(message or f"Error code: {status_code}")


class UnauthorizedError(RequestError):
    def __init__(
        self,
        response: Optional[str] = None,
        *,
        url: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__(
            401,
            response,
            url=url,
            headers=headers,
            message="The server rejected the API credentials.",
        )


class ThrottlingError(RestboundError):
    """The server reported that the request limit has been reached.

    Attributes:
        retry_after: Seconds to wait before retrying.
        request_limit: Request limit reported by the server (0 if unknown).
        is_fatal: True when the caller should give up instead of waiting.
        retry_at: UTC time at which a retry becomes reasonable.
    """

    def __init__(
        self,
        retry_after: int,
        request_limit: int,
        message: str = "The request limit has been reached.",
        *,
        is_fatal: bool = False,
        url: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.retry_after = retry_after
        self.request_limit = request_limit
        self.is_fatal = is_fatal
        self.url = url
        self.headers: dict[str, str] = dict(headers or {})
        self.retry_at: datetime = datetime.now(timezone.utc) + timedelta(
            seconds=retry_after
        )
        super().__init__(message)
