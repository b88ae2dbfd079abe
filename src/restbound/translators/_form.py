import io
from collections.abc import Mapping
from typing import Any, Iterable, Optional
from urllib.parse import parse_qsl, urlencode

import httpx

from .._metadata import BODY_EXCLUDED_MARKERS, FormField
from .._utils._member_index import MemberDescriptor, get_type_index
from .._utils._primitives import is_collection, is_native, is_sequence
from ..models.media_types import MediaType
from ._base import ContentTranslator, HttpContent, form_fields, validate_python


_SEQUENCE_TYPES = (list, tuple, set, frozenset)


def _items(value: Any) -> Iterable[Any]:
    return value if isinstance(value, _SEQUENCE_TYPES) else (value,)


def _form_members(target: Any) -> dict[str, MemberDescriptor]:
    """Body members of ``target`` keyed by the name they are sent under."""
    if (
        not isinstance(target, type)
        or is_native(target)
        or is_collection(target)
        or issubclass(target, Mapping)
    ):
        return {}

    members: dict[str, MemberDescriptor] = {}
    for member in get_type_index(target).members:
        if member.is_method or member.has_tag(*BODY_EXCLUDED_MARKERS):
            continue
        tag = member.get_tag(FormField)
        members[tag.name if tag is not None else member.name] = member
    return members


def _to_dict(pairs: list[tuple[str, str]], target: Any = None) -> dict[str, Any]:
    """Group decoded pairs by key.

    A repeated key becomes a list. Keys of sequence-typed members of
    ``target`` are always lists, and ``FormField`` names map back to the
    member they rename.
    """
    grouped: dict[str, list[str]] = {}
    for key, value in pairs:
        grouped.setdefault(key, []).append(value)

    members = _form_members(target)
    values: dict[str, Any] = {}
    for key, items in grouped.items():
        member = members.get(key)
        if member is not None and is_sequence(member.value_type):
            values[member.attribute] = items
            continue
        name = member.attribute if member is not None else key
        values[name] = items[0] if len(items) == 1 else items
    return values


class FormUrlEncodedTranslator(ContentTranslator):
    """``application/x-www-form-urlencoded`` bodies.

    One pair per non-None member; ``FormField`` renames a member. List values
    repeat the key.
    """

    media_type = MediaType.FORM_URL_ENCODED

    def _pairs(self, content: Any) -> list[tuple[str, Any]]:
        pairs: list[tuple[str, Any]] = []
        for name, value in form_fields(content):
            for item in _items(value):
                if isinstance(item, (bytes, bytearray, memoryview)):
                    pairs.append((name, bytes(item)))
                    continue
                formatted = self.formatter.format(item)
                if formatted is not None:
                    pairs.append((name, formatted))
        return pairs

    def parse(self, content: Any) -> Optional[HttpContent]:
        if content is None:
            return None
        return HttpContent(self.serialize(content).encode("utf-8"), self.media_type)

    def serialize(self, content: Any) -> str:
        if content is None:
            return ""
        return urlencode(self._pairs(content))

    def deserialize(self, content: str, target: Any = None) -> Any:
        if content is None:
            return None
        pairs = parse_qsl(content.strip(), keep_blank_values=True)
        return validate_python(_to_dict(pairs, target), target)


def _is_file(value: Any) -> bool:
    return isinstance(value, (bytes, bytearray, memoryview)) or isinstance(
        value, io.IOBase
    )


def _read_file(value: Any) -> bytes:
    if isinstance(value, io.IOBase):
        data = value.read()
        return data.encode("utf-8") if isinstance(data, str) else data
    return bytes(value)


class FormDataTranslator(ContentTranslator):
    """``multipart/form-data`` bodies, encoded by httpx.

    Text members become plain parts. Bytes and binary streams become file
    parts named after their member, with an ``application/octet-stream``
    content type. Parts keep the member order.
    """

    media_type = MediaType.FORM_DATA

    def _files(self, content: Any) -> list[tuple[str, tuple[Any, ...]]]:
        files: list[tuple[str, tuple[Any, ...]]] = []
        for name, value in form_fields(content):
            # one part per item, like repeated keys in a url-encoded body
            items = (value,) if _is_file(value) else _items(value)
            for item in items:
                if _is_file(item):
                    files.append(
                        (name, (name, _read_file(item), "application/octet-stream"))
                    )
                else:
                    # no filename: a plain form field
                    files.append((name, (None, self.formatter.format(item) or "")))
        return files

    def _encode(self, content: Any) -> tuple[bytes, str]:
        files = self._files(content)
        if not files:
            return b"", self.media_type

        request = httpx.Request("POST", "http://localhost", files=files)
        return request.read(), request.headers["Content-Type"]

    def parse(self, content: Any) -> Optional[HttpContent]:
        if content is None:
            return None

        body, media_type = self._encode(content)
        return HttpContent(body, media_type)

    def serialize(self, content: Any) -> str:
        if content is None:
            return ""
        return self._encode(content)[0].decode("utf-8", "replace")

    def deserialize(self, content: str, target: Any = None) -> Any:
        """Decode a multipart body whose first line is the boundary delimiter."""
        if content is None or not content.strip():
            return None

        text = content.lstrip()
        delimiter = text.split("\r\n", 1)[0].split("\n", 1)[0].strip()
        if not delimiter.startswith("--"):
            raise ValueError("Multipart content must start with a boundary line.")

        pairs: list[tuple[str, str]] = []
        for part in text.split(delimiter)[1:]:
            if part.startswith("--"):
                break

            head, _, body = part.lstrip("\r\n").partition("\r\n\r\n")
            name = None
            for line in head.split("\r\n"):
                if line.lower().startswith("content-disposition:"):
                    for param in line.split(";")[1:]:
                        key, _, value = param.strip().partition("=")
                        if key == "name":
                            name = value.strip('"').replace("%22", '"')
            if name is not None:
                pairs.append((name, body[:-2] if body.endswith("\r\n") else body))

        return validate_python(_to_dict(pairs, target), target)
