from .errors import (
    BaseUrlMissingError,
    InvalidPathError,
    RequestError,
    RestboundError,
    ThrottlingError,
    UnauthorizedError,
    UnsupportedMediaTypeError,
    ValidationFailedError,
)
from .media_types import MediaType, NonStandardBodyMethods
from .response import ApiResponse, DispatchOutcome, DispatchStatus

__all__ = [
    "ApiResponse",
    "BaseUrlMissingError",
    "DispatchOutcome",
    "DispatchStatus",
    "InvalidPathError",
    "MediaType",
    "NonStandardBodyMethods",
    "RequestError",
    "RestboundError",
    "ThrottlingError",
    "UnauthorizedError",
    "UnsupportedMediaTypeError",
    "ValidationFailedError",
]
