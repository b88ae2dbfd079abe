import json
from typing import Any, Optional

from ..models.media_types import MediaType
from ._base import ContentTranslator, HttpContent, dump_json, type_adapter


class JsonTranslator(ContentTranslator):
    """JSON bodies through pydantic.

    Works with pydantic models, dataclasses, typed dicts and plain Python
    values. Members tagged ``QueryArg`` or ``PathOnly`` are not written.
    """

    media_type = MediaType.JSON

    def parse(self, content: Any) -> Optional[HttpContent]:
        encoded = dump_json(content)
        if not encoded or encoded == b"null":
            return None
        return HttpContent(encoded, "application/json; charset=utf-8")

    def serialize(self, content: Any) -> str:
        return dump_json(content).decode("utf-8")

    def deserialize(self, content: str, target: Any = None) -> Any:
        if content is None or not content.strip():
            return None

        if target is None or target is Any:
            return json.loads(content)

        return type_adapter(target).validate_json(content)
