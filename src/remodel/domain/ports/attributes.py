"""Port for attribute storage with change tracking."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping


@runtime_checkable
class DirtyTracker(Protocol):
    """Holds current attribute values against the last synced baseline."""

    def __contains__(self, name: object) -> bool: ...

    def get(self, name: str, default: object = None) -> object: ...

    def set(self, name: str, value: object) -> None: ...

    def fill(self, attributes: Mapping[str, object]) -> None: ...

    def all(self) -> dict[str, object]: ...

    def replace(self, attributes: Mapping[str, object]) -> None: ...

    def original(self, name: str, default: object = None) -> object: ...

    def is_dirty(self, *names: str) -> bool: ...

    def is_clean(self, *names: str) -> bool: ...

    def get_dirty(self) -> dict[str, object]: ...

    def sync_original(self, *names: str) -> None: ...

    def sync_changes(self, changes: Mapping[str, object] | None = None) -> None: ...

    def get_changes(self) -> dict[str, object]: ...

    def was_changed(self, *names: str) -> bool: ...
