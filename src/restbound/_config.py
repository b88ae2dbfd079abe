import os
import threading
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ._utils._formatting import (
    DEFAULT_DATE_TIME_FORMAT,
    DEFAULT_TIME_FORMAT,
    ValueFormatter,
)
from ._utils.constants import (
    DEFAULT_TIMEOUT,
    ENV_ACCESS_TOKEN,
    ENV_BASE_URL,
    ENV_TIMEOUT,
)
from .handlers import HttpErrorHandler, HttpHandler
from .models.errors import BaseUrlMissingError
from .models.media_types import MediaType
from .translators import (
    ContentTranslator,
    HttpContent,
    TranslatorRegistry,
    buffer_content,
    is_buffer_content,
)


class Config(BaseModel):
    base_url: Optional[str] = None
    secret: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "Config":
        """Read the connection settings from the environment.

        Raises:
            BaseUrlMissingError: If ``RESTBOUND_URL`` is not set.
        """
        base_url = os.environ.get(ENV_BASE_URL)
        if not base_url:
            raise BaseUrlMissingError()

        timeout = os.environ.get(ENV_TIMEOUT)
        return cls(
            base_url=base_url,
            secret=os.environ.get(ENV_ACCESS_TOKEN),
            timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
        )


def _default_handlers() -> tuple[HttpHandler, ...]:
    return (HttpErrorHandler(),)


class ClientSettings(BaseModel):
    """Immutable settings shared by the clients built from them.

    Attributes:
        date_time_format: ``strftime`` format of naive datetimes in paths,
            queries and form bodies.
        time_format: Format of ``timedelta`` and ``time`` values.
        default_media_type: Media type used when a request type declares none.
        validate_request: Validate pydantic request bodies before sending.
        log_response_headers_on_error: Add the response headers to error logs.
        max_recovery_attempts: How many times the recovery stage may run for
            one request. None removes the bound.
        handlers: Recovery and error handlers, consulted in order.
        translators: Content translators keyed by media type.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    date_time_format: str = DEFAULT_DATE_TIME_FORMAT
    time_format: str = DEFAULT_TIME_FORMAT
    default_media_type: str = MediaType.JSON
    validate_request: bool = True
    log_response_headers_on_error: bool = False
    max_recovery_attempts: Optional[int] = Field(default=1, ge=1)
    handlers: tuple[HttpHandler, ...] = Field(default_factory=_default_handlers)
    translators: TranslatorRegistry = Field(default_factory=TranslatorRegistry)

    @property
    def formatter(self) -> ValueFormatter:
        return ValueFormatter(self.date_time_format, self.time_format)

    def with_handlers(self, *handlers: HttpHandler) -> "ClientSettings":
        """Return a copy whose handlers are ``handlers`` followed by the
        current ones, so the new handlers are consulted first."""
        return self.model_copy(update={"handlers": (*handlers, *self.handlers)})

    def with_translators(self, *translators: ContentTranslator) -> "ClientSettings":
        """Return a copy with ``translators`` added to a copy of the registry."""
        registry = self.translators.copy().register(*translators)
        return self.model_copy(update={"translators": registry})

    def format_value(self, value: Any) -> Optional[str]:
        return self.formatter.format(value)

    def resolve_media_type(self, media_type: Optional[str]) -> str:
        return media_type or self.default_media_type

    def deserialize(
        self, content: str, media_type: Optional[str], target: Any = None
    ) -> Any:
        """Decode ``content`` with the translator registered for ``media_type``.

        Raises:
            UnsupportedMediaTypeError: If no translator matches.
        """
        translator = self.translators.require(self.resolve_media_type(media_type))
        return translator.deserialize(content, target)

    def try_parse_content(
        self, body: Any, media_type: Optional[str]
    ) -> Optional[HttpContent]:
        """Encode ``body`` for the request, or return None when there is
        nothing to send.

        Raw bytes and binary streams are sent as they are. Other bodies go
        through the translator of ``media_type``; without one, no content is
        produced.
        """
        if body is None:
            return None

        translator = self.translators.lookup(self.resolve_media_type(media_type))
        if is_buffer_content(body) and (media_type is None or translator is None):
            return buffer_content(body, media_type)

        if translator is None:
            return None

        return translator.parse(body)

    def get_handler(
        self, handler_type: type, response: httpx.Response
    ) -> Optional[HttpHandler]:
        """Return the first handler of ``handler_type`` accepting ``response``."""
        for handler in self.handlers:
            if isinstance(handler, handler_type) and handler.can_handle(response):
                return handler
        return None


_default_settings: Optional[ClientSettings] = None
_default_settings_lock = threading.Lock()


def configure_default_settings(settings: ClientSettings) -> None:
    """Install the process-wide default settings.

    Must run before the first client is built without explicit settings.

    Raises:
        RuntimeError: If the default settings are already set.
    """
    global _default_settings
    with _default_settings_lock:
        if _default_settings is not None:
            raise RuntimeError("Default client settings are already configured.")
        _default_settings = settings


def get_default_settings() -> ClientSettings:
    global _default_settings
    with _default_settings_lock:
        if _default_settings is None:
            _default_settings = ClientSettings()
        return _default_settings


def reset_default_settings() -> None:
    """Forget the process-wide default settings. Intended for tests."""
    global _default_settings
    with _default_settings_lock:
        _default_settings = None
