"""Declared relations between record types."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, cast

from .envelope import unwrap_many

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .ports.transport import Transport
    from .record import Record


@dataclass(frozen=True)
class Relation[TRecord: Record]:
    """Named accessor for records nested under an owning record.

    ``many`` relations hold a list of ``record_type`` instances, the others a
    single instance or ``None``.
    """

    name: str
    record_type: type[TRecord]
    many: bool = True

    def records(self, owner: Record) -> list[TRecord]:
        value = owner.get_relation(self.name)
        if value is None:
            return []
        if isinstance(value, Sequence):
            items = cast(Sequence[TRecord | None], value)
            return [item for item in items if item is not None]
        return [cast(TRecord, value)]

    def hydrate(self, transport: Transport, raw: object) -> list[TRecord] | TRecord | None:
        """Build related records from the nested payload of a response."""
        if self.many:
            return [self.record_type.hydrate(transport, item) for item in unwrap_many(raw, None)]
        if isinstance(raw, Mapping):
            return self.record_type.hydrate(transport, cast(Mapping[str, object], raw))
        return None


def iter_related(owner: Record) -> Iterator[tuple[Relation[Record], Record]]:
    """Yield every related record reachable one level down from ``owner``."""
    for relation in type(owner).options.relations:
        for related in relation.records(owner):
            yield relation, related
