from ._base import ErrorHandler, HttpHandler, RecoveryContext, RecoveryHandler
from ._error_handler import HttpErrorHandler
from ._headers import (
    REQUEST_LIMIT_HEADERS,
    RETRY_AFTER_HEADER,
    get_request_limit,
    get_retry_after,
)
from ._recovery import (
    ServerErrorRecoveryHandler,
    ThrottleRecoveryHandler,
    is_retryable_status_code,
)

__all__ = [
    "ErrorHandler",
    "HttpErrorHandler",
    "HttpHandler",
    "REQUEST_LIMIT_HEADERS",
    "RETRY_AFTER_HEADER",
    "RecoveryContext",
    "RecoveryHandler",
    "ServerErrorRecoveryHandler",
    "ThrottleRecoveryHandler",
    "get_request_limit",
    "get_retry_after",
    "is_retryable_status_code",
]
