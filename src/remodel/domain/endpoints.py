"""Resolve the remote path for an action on a record."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from .capabilities import Action
from .errors import ActionNotPermittedError, MissingIdentityError

if TYPE_CHECKING:
    from .capabilities import Capabilities


class Addressable(Protocol):
    """What the resolver needs to know about a record."""

    @classmethod
    def record_type_name(cls) -> str: ...

    @classmethod
    def endpoint(cls) -> str: ...

    @classmethod
    def capabilities(cls) -> Capabilities: ...

    def get_key(self) -> object: ...

    def exists(self) -> bool: ...


def join_path(base: str, key: object) -> str:
    return f"{base.rstrip('/')}/{key}"


def ensure_allowed(record_type: type[Addressable], action: Action | str) -> Action:
    """Return ``action`` as an ``Action`` or raise if the record type does not permit it."""
    if not record_type.capabilities().is_allowed(action):
        raise ActionNotPermittedError(str(action), record_type.record_type_name())
    return Action(action)


def resolve_endpoint(action: Action | str, record: Addressable) -> str:
    """Return the path ``action`` should be sent to for ``record``.

    The capability check runs before the identity check, so a forbidden action
    is reported even when the record also has no key.
    """
    record_type = type(record)
    resolved = ensure_allowed(record_type, action)
    base = record_type.endpoint()
    if not resolved.requires_identity:
        return base
    if not record.exists():
        raise MissingIdentityError(record_type.record_type_name())
    return join_path(base, record.get_key())


def resolve_item_endpoint(record_type: type[Addressable], key: object) -> str:
    """Return the path used to fetch a single record by key."""
    ensure_allowed(record_type, Action.GET)
    if key is None:
        raise MissingIdentityError(record_type.record_type_name())
    return join_path(record_type.endpoint(), key)
