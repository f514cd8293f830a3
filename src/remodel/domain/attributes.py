"""In-memory attribute store that tracks changes against a synced baseline."""

from __future__ import annotations

from copy import deepcopy
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

_MISSING = object()


class AttributeStore:
    """Current attribute values plus the snapshot taken at the last sync.

    A fresh store has an empty baseline, so every attribute it is created with
    counts as dirty until ``sync_original`` is called.
    """

    __slots__ = ("_changes", "_current", "_original")

    def __init__(self, attributes: Mapping[str, object] | None = None) -> None:
        self._current: dict[str, object] = dict(attributes or {})
        self._original: dict[str, object] = {}
        self._changes: dict[str, object] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._current

    def __iter__(self) -> Iterator[str]:
        return iter(self._current)

    def __len__(self) -> int:
        return len(self._current)

    def get(self, name: str, default: object = None) -> object:
        return self._current.get(name, default)

    def set(self, name: str, value: object) -> None:
        self._current[name] = value

    def fill(self, attributes: Mapping[str, object]) -> None:
        for name, value in attributes.items():
            self.set(name, value)

    def all(self) -> dict[str, object]:
        return dict(self._current)

    def replace(self, attributes: Mapping[str, object]) -> None:
        self._current = dict(attributes)

    def original(self, name: str, default: object = None) -> object:
        return self._original.get(name, default)

    def get_dirty(self) -> dict[str, object]:
        dirty: dict[str, object] = {}
        for name, value in self._current.items():
            original = self._original.get(name, _MISSING)
            if original is _MISSING or original != value:
                dirty[name] = value
        return dirty

    def is_dirty(self, *names: str) -> bool:
        dirty = self.get_dirty()
        if not names:
            return bool(dirty)
        return any(name in dirty for name in names)

    def is_clean(self, *names: str) -> bool:
        return not self.is_dirty(*names)

    def sync_original(self, *names: str) -> None:
        """Take the current values as the baseline, for ``names`` only when given."""
        # Deep copy so in-place edits of nested values still show up as dirty.
        if not names:
            self._original = deepcopy(self._current)
            return
        for name in names:
            if name in self._current:
                self._original[name] = deepcopy(self._current[name])

    def sync_changes(self, changes: Mapping[str, object] | None = None) -> None:
        self._changes = dict(changes) if changes is not None else self.get_dirty()

    def get_changes(self) -> dict[str, object]:
        return dict(self._changes)

    def was_changed(self, *names: str) -> bool:
        if not names:
            return bool(self._changes)
        return any(name in self._changes for name in names)
