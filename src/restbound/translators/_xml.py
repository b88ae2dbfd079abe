import re
import xml.etree.ElementTree as ET
from typing import Any, Optional

from ..models.media_types import MediaType
from ._base import ContentTranslator, HttpContent, to_jsonable, validate_python

_XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>\n'
_TAG_NAME = re.compile(r"^[A-Za-z_][\w.-]*$")
_ENTRY_TAG = "entry"


def _element(tag: str, value: Any) -> ET.Element:
    if _TAG_NAME.match(tag):
        element = ET.Element(tag)
    else:
        element = ET.Element(_ENTRY_TAG, name=tag)

    if value is None:
        element.set("nil", "true")
    elif isinstance(value, dict):
        if not value:
            element.set("type", "object")
        for key, item in value.items():
            element.append(_element(str(key), item))
    elif isinstance(value, list):
        element.set("type", "list")
        for item in value:
            element.append(_element("item", item))
    elif isinstance(value, bool):
        element.text = "true" if value else "false"
    else:
        element.text = str(value)

    return element


def _read(element: ET.Element) -> Any:
    if element.get("nil") == "true":
        return None

    if element.get("type") == "list":
        return [_read(child) for child in element]

    children = list(element)
    if children or element.get("type") == "object":
        values = {}
        for child in children:
            key = child.get("name") if child.tag == _ENTRY_TAG else None
            values[key if key is not None else child.tag] = _read(child)
        return values

    return element.text or ""


class XmlTranslator(ContentTranslator):
    """XML bodies.

    The root element is named after the class of the serialized value. Members
    become child elements; list items are ``<item>`` elements under a parent
    marked ``type="list"`` and None values are empty elements marked
    ``nil="true"``. Decoding reads the tree back into plain values and
    validates them against the target type with pydantic.
    """

    media_type = MediaType.XML

    def parse(self, content: Any) -> Optional[HttpContent]:
        if content is None:
            return None
        return HttpContent(
            self.serialize(content).encode("utf-8"), "application/xml; charset=utf-8"
        )

    def serialize(self, content: Any) -> str:
        if content is None:
            return ""

        root = _element(type(content).__name__, to_jsonable(content))
        ET.indent(root)
        return _XML_DECLARATION + ET.tostring(root, encoding="unicode")

    def deserialize(self, content: str, target: Any = None) -> Any:
        if content is None or not content.strip():
            return None

        return validate_python(_read(ET.fromstring(content.strip())), target)
