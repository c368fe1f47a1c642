"""Strict deserialization of model output into pydantic models."""

from __future__ import annotations

import json
import re
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from catcircle.errors import AssistantResponseError

M = TypeVar("M", bound=BaseModel)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


def extract_json(text: str) -> dict[str, Any]:
    """Extract a JSON object from text that may contain markdown fences.

    Raises ``ValueError`` when no JSON object can be found.
    """
    text = text.strip()

    # 1. Clean JSON response (possibly with trailing text)
    if text.startswith("{"):
        try:
            obj, _ = json.JSONDecoder().raw_decode(text)
        except json.JSONDecodeError:
            pass
        else:
            if isinstance(obj, dict):
                return obj

    # 2. ```json ... ``` or ``` ... ``` fenced block
    match = _FENCE_RE.search(text)
    if match:
        obj = json.loads(match.group(1).strip())
        if isinstance(obj, dict):
            return obj

    # 3. First { onwards
    try:
        start = text.index("{")
        obj, _ = json.JSONDecoder().raw_decode(text, idx=start)
    except (ValueError, json.JSONDecodeError):
        pass
    else:
        if isinstance(obj, dict):
            return obj

    raise ValueError(
        f"Could not extract JSON from model response (length={len(text)}). "
        f"First 300 chars: {text[:300]!r}"
    )


def parse_structured(raw: str, model: type[M]) -> M:
    """Parse ``raw`` into ``model`` or raise ``AssistantResponseError``. Never guesses."""
    try:
        data = extract_json(raw)
    except ValueError as exc:  # JSONDecodeError is a ValueError
        raise AssistantResponseError(f"{model.__name__}: {exc}") from exc
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise AssistantResponseError(
            f"{model.__name__} failed validation: {exc.error_count()} error(s): {exc}"
        ) from exc
