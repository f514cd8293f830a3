"""Errors raised by the record persistence lifecycle."""

from __future__ import annotations

from typing import TYPE_CHECKING

from remodel.config.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class RecordError(Exception):
    """Base class for failures surfaced by record operations."""


class ActionNotPermittedError(RecordError):
    """Raised when a record type does not declare the requested action."""

    def __init__(self, action: str, record_type: str) -> None:
        super().__init__(f"{action.capitalize()} action not allowed for {record_type}")
        self.action = action
        self.record_type = record_type


class MissingIdentityError(RecordError):
    """Raised when an action addressed by key is attempted on a record without one."""

    def __init__(self, record_type: str) -> None:
        super().__init__(f"{record_type} has no primary key value")
        self.record_type = record_type


class ValidationFailedError(RecordError):
    """Raised when an outgoing payload does not pass its validator."""

    def __init__(self, field_errors: Mapping[str, Sequence[str]]) -> None:
        self.field_errors: dict[str, list[str]] = {
            name: list(messages) for name, messages in field_errors.items()
        }
        summary = "; ".join(
            f"{name}: {', '.join(messages)}" for name, messages in self.field_errors.items()
        )
        super().__init__(f"Validation failed: {summary}" if summary else "Validation failed")


class TransportError(RecordError):
    """Raised when the transport could not complete a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ApiResponseError(TransportError):
    """Raised when a successful response body carries the API's error marker."""

    def __init__(self, message: str, *, payload: object, status_code: int | None = None) -> None:
        super().__init__(message, status_code=status_code)
        self.payload = payload


class MissingPrimaryKeyConfigurationError(RecordError, ConfigurationError):
    """Raised when a keyed operation is used on a record type without a primary key."""

    def __init__(self, record_type: str) -> None:
        super().__init__(f"No primary key defined on {record_type}")
        self.record_type = record_type
