import dataclasses
from contextlib import contextmanager
from typing import Any, Generator

from pydantic import BaseModel, TypeAdapter, ValidationError

from ..models.errors import ValidationFailedError
from ._primitives import is_native_value


@contextmanager
def handle_validation_errors() -> Generator[None, None, None]:
    """Context manager turning pydantic validation failures into
    ``ValidationFailedError``.

    Yields:
        None: The context manager yields control to the wrapped code.

    Raises:
        ValidationFailedError: With the pydantic error list attached.
    """
    try:
        yield
    except ValidationError as e:
        raise ValidationFailedError(
            f"Request validation failed for {e.title}: {e.error_count()} error(s)",
            e.errors(),
        ) from e


def validate_body(body: Any) -> None:
    """Re-validate a request body against its declared type.

    Only pydantic models and dataclasses are checked; None, primitive values
    and anything else pass through.

    Raises:
        ValidationFailedError: If the body does not satisfy its type.
    """
    if body is None or is_native_value(body):
        return

    with handle_validation_errors():
        if isinstance(body, BaseModel):
            # aliased fields validate under their alias
            type(body).model_validate(body.model_dump(by_alias=True))
        elif dataclasses.is_dataclass(body) and not isinstance(body, type):
            adapter = TypeAdapter(type(body))
            adapter.validate_python(adapter.dump_python(body, by_alias=True))
