"""Shared base model — camelCase on the wire, snake_case in Python."""

from __future__ import annotations

import time
import uuid

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every stored record.

    Stored blobs keep the original ``accountName`` / ``coinBalance`` shape.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def now_ms() -> int:
    """Epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


def new_id(prefix: str = "", length: int = 9) -> str:
    """Short random id, optionally prefixed (``owner_ab12c``)."""
    token = uuid.uuid4().hex[:length]
    return f"{prefix}_{token}" if prefix else token


def dump_wire(value: object) -> object:
    """Convert models (possibly nested in lists/dicts) to camelCase JSON data."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json", exclude_none=True)
    if isinstance(value, list):
        return [dump_wire(v) for v in value]
    if isinstance(value, dict):
        return {k: dump_wire(v) for k, v in value.items()}
    return value
