from dataclasses import dataclass
from typing import Any, Optional

from ._formatting import ValueFormatter
from ._member_index import get_type_index

NULL_PLACEHOLDER_VALUE = "Null"


@dataclass(frozen=True)
class TemplatePlaceholder:
    """A ``{name}`` span of a path template.

    Attributes:
        name: Text between the braces.
        start: Offset of the opening brace.
        length: Length of ``name``; the span is ``length + 2`` characters.
    """

    name: str
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length + 2

    def __str__(self) -> str:
        return self.name


def find_placeholders(template: str) -> list[TemplatePlaceholder]:
    """Scan ``template`` left to right for ``{...}`` spans.

    An opening brace without a closing brace after it ends the scan; text
    after it is left untouched.
    """
    placeholders: list[TemplatePlaceholder] = []
    start_index = 0

    while start_index < len(template):
        open_brace = template.find("{", start_index)
        if open_brace == -1:
            break

        close_brace = template.find("}", open_brace)
        if close_brace == -1:
            break

        name = template[open_brace + 1 : close_brace]
        placeholders.append(TemplatePlaceholder(name, open_brace, len(name)))
        start_index = close_brace + 1

    return placeholders


class UrlTemplate:
    """Expands ``{member.path}`` placeholders of a path template.

    Examples:
        ```python
        UrlTemplate("/users/{id}").expand(User(id=123))  # "/users/123"
        ```
    """

    def __init__(self, template: Optional[str], formatter: Optional[ValueFormatter] = None) -> None:
        self.template = template
        self._formatter = formatter or ValueFormatter()

    def expand(self, parameters: Any) -> Optional[str]:
        """Replace every placeholder with the matching member of ``parameters``.

        Args:
            parameters: Object the placeholder paths are resolved against. May
                be None when the template has no placeholders.

        Returns:
            The expanded path. Placeholders resolving to None render as ``Null``.

        Raises:
            ValueError: If the template has placeholders and ``parameters`` is None.
            InvalidPathError: If a placeholder does not resolve.
        """
        template = self.template
        if not template:
            return template

        placeholders = find_placeholders(template)
        if not placeholders:
            return template

        if parameters is None:
            raise ValueError(
                f"Template {template!r} has placeholders but no parameters were given."
            )

        index = get_type_index(type(parameters))
        expanded = template
        # last to first so earlier offsets stay valid
        for placeholder in reversed(placeholders):
            value = self._formatter.format(index.resolve(parameters, placeholder.name))
            if value is None:
                value = NULL_PLACEHOLDER_VALUE
            expanded = expanded[: placeholder.start] + value + expanded[placeholder.end :]

        return expanded

    def __str__(self) -> str:
        return self.template or ""


def is_absolute_url(path: Optional[str]) -> bool:
    if not path:
        return False
    lowered = path.lstrip().lower()
    return lowered.startswith("http://") or lowered.startswith("https://")


def join_url(*parts: Optional[str]) -> str:
    """Join the non-empty parts with ``/`` after trimming their slashes."""
    trimmed = (part.strip("/") for part in parts if part)
    return "/".join(part for part in trimmed if part)
