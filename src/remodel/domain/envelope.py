"""Helpers for reading resources out of API response bodies."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

DEFAULT_DATA_FIELD = "data"
DEFAULT_ERROR_FIELD = "status_code"


def unwrap(body: object, data_field: str | None = DEFAULT_DATA_FIELD) -> object:
    """Return ``body[data_field]`` when the body nests its payload, else the body."""
    if data_field and isinstance(body, Mapping):
        mapping = cast(Mapping[str, object], body)
        if data_field in mapping:
            return mapping[data_field]
    return body


def unwrap_one(body: object, data_field: str | None = DEFAULT_DATA_FIELD) -> dict[str, object]:
    """Unwrap a single resource; anything that is not a mapping yields ``{}``."""
    payload = unwrap(body, data_field)
    if isinstance(payload, Mapping):
        return dict(cast(Mapping[str, object], payload))
    return {}


def unwrap_many(
    body: object, data_field: str | None = DEFAULT_DATA_FIELD
) -> list[dict[str, object]]:
    """Unwrap a collection; a lone mapping is treated as a one-item collection."""
    payload = unwrap(body, data_field)
    if isinstance(payload, Mapping):
        return [dict(cast(Mapping[str, object], payload))]
    if isinstance(payload, list):
        items = cast(list[object], payload)
        return [
            dict(cast(Mapping[str, object], item)) for item in items if isinstance(item, Mapping)
        ]
    return []


def has_api_error(resource: object, marker: str = DEFAULT_ERROR_FIELD) -> bool:
    """True when ``resource`` carries the field an API uses to flag an error."""
    if not isinstance(resource, Mapping):
        return False
    return cast(Mapping[str, object], resource).get(marker) is not None
