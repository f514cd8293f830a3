"""Per-record-type declaration of permitted remote actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from remodel.config.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable


class Action(StrEnum):
    GET = "get"
    POST = "post"
    PATCH = "patch"
    PUT = "put"
    DELETE = "delete"

    @property
    def http_method(self) -> str:
        return self.value.upper()

    @property
    def requires_identity(self) -> bool:
        return self in KEYED_ACTIONS


KEYED_ACTIONS = frozenset({Action.PATCH, Action.PUT, Action.DELETE})
CREATE_ACTIONS = frozenset({Action.POST})
UPDATE_ACTIONS = frozenset({Action.PATCH, Action.PUT})


def _coerce(action: Action | str) -> Action:
    try:
        return Action(action)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown action: {action!r}") from exc


def _coerce_all(actions: Iterable[Action | str]) -> tuple[Action, ...]:
    ordered: list[Action] = []
    for action in actions:
        coerced = _coerce(action)
        if coerced not in ordered:
            ordered.append(coerced)
    return tuple(ordered)


@dataclass(frozen=True, slots=True)
class Capabilities:
    """Which actions a record type may perform, and which verbs create and update."""

    allowed: tuple[Action, ...] = field(default_factory=lambda: tuple(Action))
    create_method: Action = Action.POST
    update_method: Action = Action.PATCH

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed", _coerce_all(self.allowed))
        create = _coerce(self.create_method)
        update = _coerce(self.update_method)
        if create not in CREATE_ACTIONS:
            raise ConfigurationError(f"create method must be post, got {create}")
        if update not in UPDATE_ACTIONS:
            raise ConfigurationError(f"update method must be patch or put, got {update}")
        object.__setattr__(self, "create_method", create)
        object.__setattr__(self, "update_method", update)

    @classmethod
    def of(
        cls,
        *actions: Action | str,
        create_method: Action | str = Action.POST,
        update_method: Action | str = Action.PATCH,
    ) -> Capabilities:
        return cls(
            allowed=_coerce_all(actions),
            create_method=_coerce(create_method),
            update_method=_coerce(update_method),
        )

    @classmethod
    def read_only(cls) -> Capabilities:
        return cls.of(Action.GET)

    def is_allowed(self, action: Action | str) -> bool:
        try:
            return Action(action) in self.allowed
        except ValueError:
            return False

    def is_denied(self, action: Action | str) -> bool:
        return not self.is_allowed(action)
