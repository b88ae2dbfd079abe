import io
from typing import Any, Optional

from ._base import HttpContent

_OCTET_STREAM = "application/octet-stream"


def is_buffer_content(content: Any) -> bool:
    """True for raw bytes and binary streams."""
    return isinstance(content, (bytes, bytearray, memoryview)) or (
        isinstance(content, io.IOBase) and not isinstance(content, io.TextIOBase)
    )


def buffer_content(content: Any, media_type: Optional[str] = None) -> HttpContent:
    """Build an ``HttpContent`` that sends ``content`` unchanged.

    Seekable streams are read so the request can be resent; other streams are
    sent chunked as they are read.
    """
    media_type = media_type or _OCTET_STREAM
    if isinstance(content, (bytes, bytearray, memoryview)):
        return HttpContent(bytes(content), media_type)

    if content.seekable():
        return HttpContent(content.read(), media_type)

    return HttpContent(iter(lambda: content.read(65536), b""), media_type)
