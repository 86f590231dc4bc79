"""
Schema checks applied wherever data crosses into application state.

Every boundary (storage reads, analyzer responses, decoded markdown) goes
through ``safe_parse``. Collections are validated record by record with
``validate_each`` so one bad record costs only itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")
Schema = Union[type[BaseModel], TypeAdapter]


@dataclass(slots=True)
class ParseResult(Generic[T]):
    success: bool
    output: T | None = None
    issues: list[dict[str, Any]] = field(default_factory=list)


def _issues(exc: ValidationError) -> list[dict[str, Any]]:
    return [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in exc.errors()
    ]


def safe_parse(schema: Schema, data: Any) -> ParseResult:
    """Validate ``data`` against a model class or ``TypeAdapter`` without raising."""
    try:
        if isinstance(schema, TypeAdapter):
            output = schema.validate_python(data)
        else:
            output = schema.model_validate(data)
    except ValidationError as exc:
        return ParseResult(success=False, issues=_issues(exc))
    return ParseResult(success=True, output=output)


def validate_each(model: type[BaseModel], records: Iterable[Any], *, source: str) -> list:
    """Validate records one by one, dropping and logging the ones that fail."""
    accepted = []
    for index, record in enumerate(records):
        if isinstance(record, BaseModel):
            record = record.model_dump(by_alias=True)
        result = safe_parse(model, record)
        if result.success:
            accepted.append(result.output)
        else:
            logger.warning(
                f"Dropping invalid {model.__name__} #{index} from {source}: {result.issues}"
            )
    return accepted
