from __future__ import annotations

import pytest
from pydantic import BaseModel, Field

from remodel.domain import (
    AcceptAll,
    PydanticValidator,
    ValidationFailedError,
    ValidationResult,
    Validator,
    run_validation_gate,
)


class Contact(BaseModel):
    name: str
    age: int = Field(ge=0)
    email: str | None = None


def test_accept_all_passes_payload_through() -> None:
    result = AcceptAll().validate({"anything": 1})

    assert result.passed
    assert result.attributes == {"anything": 1}


def test_pydantic_validator_returns_only_given_fields() -> None:
    result = PydanticValidator(Contact).validate({"name": "Ada", "age": "36"})

    assert result.passed
    assert result.attributes == {"name": "Ada", "age": 36}


def test_pydantic_validator_collects_errors_per_field() -> None:
    result = PydanticValidator(Contact).validate({"age": -1})

    assert result.failed
    assert set(result.errors) == {"name", "age"}
    assert all(result.errors[field] for field in ("name", "age"))


def test_gate_raises_with_field_errors() -> None:
    with pytest.raises(ValidationFailedError) as exc:
        run_validation_gate(PydanticValidator(Contact), {"name": "Ada"})

    assert list(exc.value.field_errors) == ["age"]
    assert "age" in str(exc.value)


def test_gate_returns_validated_attributes() -> None:
    assert run_validation_gate(PydanticValidator(Contact), {"name": "Ada", "age": 3}) == {
        "name": "Ada",
        "age": 3,
    }


def test_custom_validators_plug_in() -> None:
    class NoEmpty:
        def validate(self, payload: dict[str, object]) -> ValidationResult:
            empty = [name for name, value in payload.items() if value in ("", None)]
            if empty:
                return ValidationResult.fail({name: ["must not be empty"] for name in empty})
            return ValidationResult.ok(payload)

    validator = NoEmpty()

    assert isinstance(validator, Validator)
    with pytest.raises(ValidationFailedError) as exc:
        run_validation_gate(validator, {"name": ""})
    assert exc.value.field_errors == {"name": ["must not be empty"]}
