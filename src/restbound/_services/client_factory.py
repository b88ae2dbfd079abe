import threading
from typing import Any, Optional

from .._config import ClientSettings, Config, get_default_settings
from .._utils._logger import ApiClientLogger
from .api_client import ApiClient

DEFAULT_CLIENT_NAME = "restbound.default"


class ApiClientFactory:
    """Builds ``ApiClient`` instances from named registrations.

    Every client built by one factory shares its settings and logger.

    Examples:
        ```python
        factory = ApiClientFactory()
        factory.register("billing", base_url="https://billing.example.com", secret=token)
        client = factory.create_client("billing")
        ```
    """

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        logger: Optional[ApiClientLogger] = None,
    ) -> None:
        self.settings = settings or get_default_settings()
        self.logger = logger or ApiClientLogger(
            log_response_headers_on_error=self.settings.log_response_headers_on_error
        )
        self._registrations: dict[str, tuple[Config, dict[str, str]]] = {
            DEFAULT_CLIENT_NAME: (Config(), {})
        }
        self._lock = threading.Lock()

    def register(
        self,
        name: Optional[str] = None,
        *,
        headers: Optional[dict[str, str]] = None,
        **config: Any,
    ) -> "ApiClientFactory":
        """Register the connection settings of a named client.

        Args:
            name: Registration name; blank names register the default client.
            headers: Extra default headers of the clients built for ``name``.
            **config: ``Config`` fields: ``base_url``, ``secret``, ``timeout``.
        """
        key = name.strip() if name and name.strip() else DEFAULT_CLIENT_NAME
        with self._lock:
            self._registrations[key] = (Config(**config), dict(headers or {}))
        return self

    def create_client(self, name: Optional[str] = None) -> ApiClient:
        """Build a new client for ``name``, or for the default registration.

        Raises:
            KeyError: If nothing is registered under ``name``.
        """
        key = name.strip() if name and name.strip() else DEFAULT_CLIENT_NAME
        with self._lock:
            if key not in self._registrations:
                raise KeyError(f"No client registered under the name {key!r}.")
            config, headers = self._registrations[key]

        client = ApiClient(config=config, settings=self.settings, logger=self.logger)
        client.default_headers.update(headers)
        return client

    def names(self) -> list[str]:
        with self._lock:
            return list(self._registrations)
