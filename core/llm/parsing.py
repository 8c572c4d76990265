"""
Strict decoding of model output.

Model output is validated against a pydantic schema as a whole. There is no
brace scanning or partial recovery: anything that is not exactly one JSON
object of the right shape (optionally inside a markdown code fence) is
rejected, and the caller falls back to its safe default.
"""

from __future__ import annotations

import re
from typing import Type, TypeVar

from pydantic import BaseModel, ValidationError

from core.schemas.errors import ParseError

T = TypeVar("T", bound=BaseModel)

_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?```$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Remove one enclosing ```json ... ``` fence, if present."""
    text = text.strip()
    match = _FENCE_RE.match(text)
    if match:
        return match.group(1).strip()
    return text


def decode_strict(text: str, model: Type[T]) -> T:
    """
    Validate ``text`` as a JSON document for ``model``.

    Raises:
        ParseError: not JSON, or JSON that does not match the schema
    """
    payload = strip_code_fence(text)
    try:
        return model.model_validate_json(payload)
    except ValidationError as e:
        raise ParseError(
            f"Output does not match {model.__name__}: {e.error_count()} error(s)",
            details={"schema": model.__name__, "errors": e.errors(include_url=False)[:5]},
        ) from e
