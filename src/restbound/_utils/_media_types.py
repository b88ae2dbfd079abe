"""Media type keys and a map that honours RFC 6839 structured suffixes.

``MediaTypeMap`` resolves a lookup in three steps: an exact entry, a cached
redirect recorded by an earlier lookup, then the structured suffix form of the
key (``application/vnd.acme+json`` -> ``application/json``). A suffix hit is
cached so the next lookup for the same key skips the derivation. Setting an
exact entry drops any redirect cached for that key.
"""

from typing import Generic, Iterator, Optional, TypeVar

from ._rwlock import ReadWriteLock

TValue = TypeVar("TValue")


def normalize_media_type(value: str) -> str:
    """Strip parameters and whitespace and lower-case ``value``.

    ``"Application/JSON; charset=utf-8"`` becomes ``"application/json"``.
    """
    key = value.strip()
    semicolon = key.find(";")
    if semicolon >= 0:
        key = key[:semicolon]
    return key.strip().lower()


def structured_suffix_media_type(normalized: str) -> str:
    """Return ``type/suffix`` for ``type/subtype+suffix``, else ``""``."""
    slash = normalized.find("/")
    if slash < 0 or slash == len(normalized) - 1:
        return ""

    media_type = normalized[:slash]
    subtype = normalized[slash + 1 :]

    plus = subtype.rfind("+")
    if plus < 0 or plus == len(subtype) - 1:
        return ""

    return f"{media_type}/{subtype[plus + 1 :]}"


class MediaTypeMap(Generic[TValue]):
    """Thread-safe map keyed by media type.

    Reads take a shared lock; recording a suffix redirect re-checks the
    entries under the exclusive lock before writing.
    """

    def __init__(self) -> None:
        self._values: dict[str, TValue] = {}
        self._redirects: dict[str, str] = {}
        self._lock = ReadWriteLock()

    def set(self, key: str, value: TValue) -> None:
        if not key or not key.strip():
            raise ValueError("Media type key must not be empty.")

        key = normalize_media_type(key)
        with self._lock.write():
            self._values[key] = value
            self._redirects.pop(key, None)

    def remove(self, key: str) -> bool:
        if not key or not key.strip():
            return False

        key = normalize_media_type(key)
        with self._lock.write():
            self._redirects.pop(key, None)
            return self._values.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock.write():
            self._values.clear()
            self._redirects.clear()

    def lookup(self, media_type: Optional[str]) -> tuple[bool, Optional[TValue]]:
        """Resolve ``media_type`` to ``(found, value)``."""
        if not media_type or not media_type.strip():
            return False, None

        exact = normalize_media_type(media_type)
        if not exact:
            return False, None

        with self._lock.read():
            if exact in self._values:
                return True, self._values[exact]

            cached = self._redirects.get(exact)
            if cached is not None and cached in self._values:
                return True, self._values[cached]

        suffix = structured_suffix_media_type(exact)
        if not suffix:
            return False, None

        with self._lock.write():
            if exact in self._values:
                return True, self._values[exact]

            if suffix in self._values:
                self._redirects[exact] = suffix
                return True, self._values[suffix]

            return False, None

    def get(self, media_type: Optional[str], default: Optional[TValue] = None) -> Optional[TValue]:
        found, value = self.lookup(media_type)
        return value if found else default

    def redirect_for(self, media_type: str) -> Optional[str]:
        """Return the cached suffix key for ``media_type``, if any."""
        with self._lock.read():
            return self._redirects.get(normalize_media_type(media_type))

    def keys(self) -> list[str]:
        with self._lock.read():
            return list(self._values)

    def values(self) -> list[TValue]:
        with self._lock.read():
            return list(self._values.values())

    def items(self) -> list[tuple[str, TValue]]:
        with self._lock.read():
            return list(self._values.items())

    def __getitem__(self, media_type: str) -> TValue:
        found, value = self.lookup(media_type)
        if not found:
            raise KeyError(media_type)
        return value  # type: ignore[return-value]

    def __setitem__(self, media_type: str, value: TValue) -> None:
        self.set(media_type, value)

    def __delitem__(self, media_type: str) -> None:
        if not self.remove(media_type):
            raise KeyError(media_type)

    def __contains__(self, media_type: object) -> bool:
        return isinstance(media_type, str) and self.lookup(media_type)[0]

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._values)
