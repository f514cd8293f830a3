"""Validation gate applied to outgoing payloads before they are sent."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pydantic import BaseModel, ValidationError

from .errors import ValidationFailedError

if TYPE_CHECKING:
    from collections.abc import Mapping

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating one payload.

    ``attributes`` is what should be sent when validation passes; validators may
    normalise values, so callers must not reuse the payload they passed in.
    """

    attributes: dict[str, object] = field(default_factory=dict)
    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return not self.errors

    @property
    def failed(self) -> bool:
        return bool(self.errors)

    @classmethod
    def ok(cls, attributes: Mapping[str, object]) -> ValidationResult:
        return cls(attributes=dict(attributes))

    @classmethod
    def fail(cls, errors: Mapping[str, list[str]]) -> ValidationResult:
        return cls(errors={name: list(messages) for name, messages in errors.items()})


@runtime_checkable
class Validator(Protocol):
    def validate(self, payload: Mapping[str, object]) -> ValidationResult: ...


class AcceptAll:
    """Validator that passes every payload through unchanged."""

    def validate(self, payload: Mapping[str, object]) -> ValidationResult:
        return ValidationResult.ok(payload)

    def __repr__(self) -> str:
        return "AcceptAll()"


class PydanticValidator:
    """Validate payloads against a pydantic model.

    Only the fields present in the payload are returned, so the same model can
    back a partial update as long as its fields are optional.
    """

    def __init__(self, model: type[BaseModel], *, by_alias: bool = False) -> None:
        self.model = model
        self.by_alias = by_alias

    def __repr__(self) -> str:
        return f"PydanticValidator({self.model.__name__})"

    def validate(self, payload: Mapping[str, object]) -> ValidationResult:
        try:
            instance = self.model.model_validate(dict(payload))
        except ValidationError as exc:
            return ValidationResult.fail(_field_errors(exc))
        return ValidationResult.ok(
            instance.model_dump(mode="json", exclude_unset=True, by_alias=self.by_alias)
        )


def _field_errors(exc: ValidationError) -> dict[str, list[str]]:
    errors: defaultdict[str, list[str]] = defaultdict(list)
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "__root__"
        errors[location].append(error["msg"])
    return dict(errors)


def run_validation_gate(validator: Validator, payload: Mapping[str, object]) -> dict[str, object]:
    """Return the attributes to send, or raise ``ValidationFailedError``."""
    result = validator.validate(payload)
    if result.failed:
        log.debug("Validation failed with %s: %s", validator, result.errors)
        raise ValidationFailedError(result.errors)
    return result.attributes
