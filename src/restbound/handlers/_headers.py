import math
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Mapping, Optional

RETRY_AFTER_HEADER = "Retry-After"
REQUEST_LIMIT_HEADERS = (
    "X-RateLimit-Limit",
    "X-Rate-Limit-Limit",
    "RequestLimit",
    "Rate-Limit-Limit",
)


def _get(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is not None:
        return value

    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


def get_retry_after(headers: Mapping[str, str]) -> int:
    """Parse the Retry-After header (RFC 7231).

    Args:
        headers: HTTP response headers

    Returns:
        int: Seconds to wait before retrying, rounded up. 0 when the header is
            missing or invalid; dates in the past also give 0.
    """
    retry_after = _get(headers, RETRY_AFTER_HEADER)
    if not retry_after:
        return 0

    try:
        return max(int(retry_after.strip()), 0)
    except ValueError:
        pass

    try:
        retry_date = parsedate_to_datetime(retry_after)
        delta = (retry_date - datetime.now(retry_date.tzinfo)).total_seconds()
        return max(math.ceil(delta), 0)
    except (ValueError, TypeError):
        return 0


def get_request_limit(headers: Mapping[str, str]) -> int:
    """Return the request limit from the first rate-limit header present, or 0."""
    for name in REQUEST_LIMIT_HEADERS:
        value = _get(headers, name)
        if value is None:
            continue
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0
