import os
import ssl
from typing import Any, Optional

import certifi
import httpx

from .constants import DEFAULT_TIMEOUT


def _env_path(name: str) -> Optional[str]:
    """Read a path from the environment, expanding ``$VARS`` and ``~``."""
    value = os.environ.get(name)
    if not value:
        return None
    return os.path.expanduser(os.path.expandvars(value))


def create_ssl_context() -> ssl.SSLContext:
    """Build the client SSL context.

    ``SSL_CERT_FILE`` wins over ``REQUESTS_CA_BUNDLE``; without either the
    certifi bundle is used. ``SSL_CERT_DIR`` adds a directory of CA files.
    """
    return ssl.create_default_context(
        cafile=_env_path("SSL_CERT_FILE")
        or _env_path("REQUESTS_CA_BUNDLE")
        or certifi.where(),
        capath=_env_path("SSL_CERT_DIR"),
    )


def get_httpx_client_kwargs(timeout: Optional[float] = None) -> dict[str, Any]:
    """Keyword arguments shared by the sync and async httpx clients."""
    return {
        "verify": create_ssl_context(),
        "timeout": httpx.Timeout(timeout if timeout is not None else DEFAULT_TIMEOUT),
        "follow_redirects": True,
    }
