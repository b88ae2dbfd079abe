import threading
from typing import Iterable, Optional

from .._utils._media_types import MediaTypeMap
from ..models.errors import UnsupportedMediaTypeError
from ._base import ContentTranslator
from ._form import FormDataTranslator, FormUrlEncodedTranslator
from ._json import JsonTranslator
from ._query_string import QueryStringTranslator
from ._xml import XmlTranslator

_default_bindings: list[tuple[str, ContentTranslator]] = [
    (translator.media_type, translator)
    for translator in (
        JsonTranslator(),
        XmlTranslator(),
        FormDataTranslator(),
        FormUrlEncodedTranslator(),
        QueryStringTranslator(),
    )
]
_default_bindings_lock = threading.Lock()


def register_default_translator(
    translator: ContentTranslator, media_type: Optional[str] = None
) -> None:
    """Add ``translator`` to the table new registries start from.

    Registries created earlier are not affected.
    """
    key = media_type or translator.media_type
    with _default_bindings_lock:
        _default_bindings.append((key, translator))


def default_translators() -> list[tuple[str, ContentTranslator]]:
    with _default_bindings_lock:
        return list(_default_bindings)


class TranslatorRegistry:
    """Content translators keyed by media type.

    Lookups fall back to the structured suffix of a media type, so
    ``application/problem+json`` resolves to the JSON translator unless an
    exact entry exists.

    Args:
        translators: Translators to register. When omitted, the registry starts
            from the process-wide default table.
    """

    def __init__(self, translators: Optional[Iterable[ContentTranslator]] = None) -> None:
        self._translators: MediaTypeMap[ContentTranslator] = MediaTypeMap()
        if translators is None:
            for media_type, translator in default_translators():
                self._translators.set(media_type, translator)
        else:
            self.register(*translators)

    def register(self, *translators: ContentTranslator) -> "TranslatorRegistry":
        for translator in translators:
            self._translators.set(translator.media_type, translator)
        return self

    def register_as(
        self, media_type: str, translator: ContentTranslator
    ) -> "TranslatorRegistry":
        self._translators.set(media_type, translator)
        return self

    def remove(self, media_type: str) -> bool:
        return self._translators.remove(media_type)

    def lookup(self, media_type: Optional[str]) -> Optional[ContentTranslator]:
        return self._translators.get(media_type)

    def require(self, media_type: Optional[str]) -> ContentTranslator:
        """Return the translator for ``media_type``.

        Raises:
            UnsupportedMediaTypeError: If nothing is registered for it.
        """
        found, translator = self._translators.lookup(media_type)
        if not found or translator is None:
            raise UnsupportedMediaTypeError(media_type)
        return translator

    def redirect_for(self, media_type: str) -> Optional[str]:
        return self._translators.redirect_for(media_type)

    def media_types(self) -> list[str]:
        return self._translators.keys()

    def copy(self) -> "TranslatorRegistry":
        registry = TranslatorRegistry(())
        for media_type, translator in self._translators.items():
            registry.register_as(media_type, translator)
        return registry

    def __contains__(self, media_type: object) -> bool:
        return media_type in self._translators

    def __len__(self) -> int:
        return len(self._translators)

    def __repr__(self) -> str:
        return f"TranslatorRegistry({self.media_types()!r})"
