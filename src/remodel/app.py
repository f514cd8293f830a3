"""Application entry points working on records chosen at runtime."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from remodel.domain.capabilities import Action, Capabilities
from remodel.domain.record import Record, RecordOptions

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from remodel.domain.ports.transport import Transport

log = getLogger(__name__)


def record_type_for(
    endpoint: str,
    *,
    primary_key: str = "id",
    data_field: str | None = "data",
    update_method: Action | str = Action.PATCH,
) -> type[Record]:
    """Build a permissive record type for an endpoint named on the command line."""
    name = "".join(part.capitalize() for part in endpoint.strip("/").split("/")) or "Resource"
    options = RecordOptions(
        endpoint=endpoint.strip("/"),
        primary_key=primary_key,
        data_field=data_field or None,
        capabilities=Capabilities(update_method=Action(update_method)),
    )
    return Record.define(name, options)


def show_record(transport: Transport, record_type: type[Record], key: str) -> Record:
    record = record_type.find(transport, key)
    if record is None:
        raise ValueError(f"{record_type.endpoint()} {key} not found")
    return record


def list_records(
    transport: Transport, record_type: type[Record], params: Mapping[str, object] | None = None
) -> list[Record]:
    records = record_type.all(transport, **(params or {}))
    log.info("Fetched %d %s records", len(records), record_type.endpoint())
    return records


def create_record(
    transport: Transport, record_type: type[Record], attributes: Mapping[str, object]
) -> Record:
    record = record_type(transport)
    created = record.create(attributes)
    if created is False:
        raise ValueError("record already has a key; use update instead")
    log.info("Created %s %s", record_type.endpoint(), created.get_key())
    return created


def update_record(
    transport: Transport,
    record_type: type[Record],
    key: str,
    attributes: Mapping[str, object],
) -> Record:
    record = show_record(transport, record_type, key)
    updated = record.update(attributes)
    if updated is False:
        raise ValueError(f"{record_type.endpoint()} {key} has no key to update")
    log.info("Updated %s %s: %s", record_type.endpoint(), key, sorted(updated.get_changes()))
    return updated


def delete_records(transport: Transport, record_type: type[Record], keys: Sequence[str]) -> int:
    return record_type.destroy_many(transport, list(keys))
