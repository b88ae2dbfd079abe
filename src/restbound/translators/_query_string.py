from collections.abc import Mapping
from typing import Any, Optional
from urllib.parse import parse_qsl

from .._utils._member_index import MemberDescriptor, get_type_index
from .._utils._primitives import is_collection, is_native, is_sequence
from .._utils._query import QueryBuilder, QueryNamer
from ..models.media_types import MediaType
from ._base import ContentTranslator, HttpContent, validate_python


def _read_members(
    values: dict[str, str], members: tuple[MemberDescriptor, ...], prefix: str = ""
) -> dict[str, Any]:
    """Rebuild the fields of a flattened object from its query arguments.

    Dotted keys fill nested objects, comma-joined values fill sequences and an
    empty value of a nullable member reads as None.
    """
    namer = QueryNamer()
    fields: dict[str, Any] = {}
    for member in members:
        if not namer.can_map(member):
            continue

        key = prefix + namer.get_name(member)
        if member.children:
            nested = _read_members(values, member.children, key + ".")
            if nested:
                fields[member.attribute] = nested
            continue

        if key not in values:
            continue

        value = values[key]
        if is_sequence(member.value_type):
            fields[member.attribute] = [item for item in value.split(",") if item]
        elif value == "" and member.nullable:
            fields[member.attribute] = None
        else:
            fields[member.attribute] = value
    return fields


class QueryStringTranslator(ContentTranslator):
    """Sends the whole request object in the query string.

    Registered under the pseudo media type ``@query``. Produces no body.
    """

    media_type = MediaType.QUERY_STRING

    def parse(self, content: Any) -> Optional[HttpContent]:
        return None

    def serialize(self, content: Any) -> str:
        query = QueryBuilder(self.formatter).add(content, allow_empty_or_null=True)
        return query.to_query_string().lstrip("?")

    def deserialize(self, content: str, target: Any = None) -> Any:
        if content is None:
            return None

        values = dict(parse_qsl(content.strip().lstrip("?"), keep_blank_values=True))
        if (
            isinstance(target, type)
            and not is_native(target)
            and not is_collection(target)
            and not issubclass(target, Mapping)
        ):
            return validate_python(
                _read_members(values, get_type_index(target).members), target
            )
        return validate_python(values, target)
