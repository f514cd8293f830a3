"""Record persistence lifecycle."""

from __future__ import annotations

from .attributes import AttributeStore
from .capabilities import Action, Capabilities
from .endpoints import resolve_endpoint, resolve_item_endpoint
from .envelope import has_api_error, unwrap, unwrap_many, unwrap_one
from .errors import (
    ActionNotPermittedError,
    ApiResponseError,
    MissingIdentityError,
    MissingPrimaryKeyConfigurationError,
    RecordError,
    TransportError,
    ValidationFailedError,
)
from .record import Record, RecordOptions
from .relations import Relation, iter_related
from .validation import (
    AcceptAll,
    PydanticValidator,
    ValidationResult,
    Validator,
    run_validation_gate,
)

__all__ = [
    "AcceptAll",
    "Action",
    "ActionNotPermittedError",
    "ApiResponseError",
    "AttributeStore",
    "Capabilities",
    "MissingIdentityError",
    "MissingPrimaryKeyConfigurationError",
    "PydanticValidator",
    "Record",
    "RecordError",
    "RecordOptions",
    "Relation",
    "TransportError",
    "ValidationFailedError",
    "ValidationResult",
    "Validator",
    "has_api_error",
    "iter_related",
    "resolve_endpoint",
    "resolve_item_endpoint",
    "run_validation_gate",
    "unwrap",
    "unwrap_many",
    "unwrap_one",
]
