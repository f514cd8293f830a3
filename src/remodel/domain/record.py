"""Records that persist themselves against a remote API.

A ``Record`` subclass describes one remote resource type. Its ``RecordOptions``
are fixed at class definition time::

    class User(Record, options=RecordOptions(endpoint="users")):
        pass

Instances behave like local rows: attributes are read and written directly,
``save`` decides between insert, update or nothing at all, and ``delete``
removes the remote resource.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, ClassVar, Literal, Self, cast

from .attributes import AttributeStore
from .capabilities import Action, Capabilities
from .endpoints import ensure_allowed, resolve_endpoint, resolve_item_endpoint
from .envelope import (
    DEFAULT_DATA_FIELD,
    DEFAULT_ERROR_FIELD,
    has_api_error,
    unwrap_many,
    unwrap_one,
)
from .errors import (
    ApiResponseError,
    MissingPrimaryKeyConfigurationError,
    TransportError,
)
from .relations import Relation, iter_related
from .validation import AcceptAll, Validator, run_validation_gate

if TYPE_CHECKING:
    from .ports.attributes import DirtyTracker
    from .ports.transport import RawResource, Transport

log = getLogger(__name__)

type RelationValue = Record | list[Record] | None


@dataclass(frozen=True, slots=True)
class RecordOptions:
    """Static description of a remote resource type."""

    endpoint: str | None = None
    primary_key: str | None = "id"
    data_field: str | None = DEFAULT_DATA_FIELD
    capabilities: Capabilities = field(default_factory=Capabilities)
    store_validator: Validator = field(default_factory=AcceptAll)
    update_validator: Validator = field(default_factory=AcceptAll)
    relations: tuple[Relation[Any], ...] = ()
    error_field: str = DEFAULT_ERROR_FIELD
    hidden: frozenset[str] = frozenset()
    attribute_store: Callable[[], DirtyTracker] = AttributeStore

    def __post_init__(self) -> None:
        names = [relation.name for relation in self.relations]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate relation names: {', '.join(duplicates)}")
        if self.primary_key is not None and self.primary_key in names:
            raise ValueError("primary key cannot also be a relation")

    def relation(self, name: str) -> Relation[Any] | None:
        for relation in self.relations:
            if relation.name == name:
                return relation
        return None


class Record:
    """Base class for remotely persisted records.

    Attribute access falls through to the attribute store, so ``user.name`` and
    ``user["name"]`` are equivalent. Names that collide with methods of this
    class, or that start with an underscore, are only reachable through item
    access.
    """

    options: ClassVar[RecordOptions] = RecordOptions()

    def __init_subclass__(cls, *, options: RecordOptions | None = None, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if options is not None:
            cls.options = options

    def __init__(
        self,
        transport: Transport,
        attributes: Mapping[str, object] | None = None,
        **values: object,
    ) -> None:
        self._transport = transport
        self._attributes: DirtyTracker = type(self).options.attribute_store()
        self._relations: dict[str, RelationValue] = {}
        self._was_recently_created = False
        self.fill({**(attributes or {}), **values})

    # -- type level configuration -------------------------------------------------

    @classmethod
    def record_type_name(cls) -> str:
        return cls.__name__

    @classmethod
    def endpoint(cls) -> str:
        return cls.options.endpoint or cls.__name__.lower()

    @classmethod
    def capabilities(cls) -> Capabilities:
        return cls.options.capabilities

    @classmethod
    def define(cls, name: str, options: RecordOptions) -> type[Self]:
        """Create a record type at runtime, e.g. for endpoints chosen by a user."""
        return cast(type[Self], type(name, (cls,), {}, options=options))

    # -- attribute access ---------------------------------------------------------

    def __getattr__(self, name: str) -> object:
        if name.startswith("_"):
            raise AttributeError(name)
        attributes = self.__dict__.get("_attributes")
        if attributes is not None and name in attributes:
            return attributes.get(name)
        if type(self).options.relation(name) is not None:
            return self.get_relation(name)
        raise AttributeError(f"{type(self).__name__} has no attribute {name!r}")

    def __setattr__(self, name: str, value: object) -> None:
        if name.startswith("_") or isinstance(getattr(type(self), name, None), property):
            object.__setattr__(self, name, value)
        elif type(self).options.relation(name) is not None:
            self.set_relation(name, cast(RelationValue, value))
        else:
            self.set_attribute(name, value)

    def __getitem__(self, name: str) -> object:
        if name not in self._attributes:
            raise KeyError(name)
        return self._attributes.get(name)

    def __setitem__(self, name: str, value: object) -> None:
        self.set_attribute(name, value)

    def __contains__(self, name: object) -> bool:
        return name in self._attributes

    def __repr__(self) -> str:
        key_name = self.get_key_name()
        key = f" {key_name}={self.get_key()!r}" if key_name else ""
        return f"<{type(self).__name__}{key}>"

    def get_attribute(self, name: str, default: object = None) -> object:
        return self._attributes.get(name, default)

    def set_attribute(self, name: str, value: object) -> Self:
        self._attributes.set(name, value)
        return self

    def get_attributes(self) -> dict[str, object]:
        return self._attributes.all()

    def fill(self, attributes: Mapping[str, object]) -> Self:
        options = type(self).options
        for name, value in attributes.items():
            if options.relation(name) is not None:
                self.set_relation(name, cast(RelationValue, value))
            else:
                self.set_attribute(name, value)
        return self

    def get_original(self, name: str, default: object = None) -> object:
        return self._attributes.original(name, default)

    def is_dirty(self, *names: str) -> bool:
        return self._attributes.is_dirty(*names)

    def is_clean(self, *names: str) -> bool:
        return self._attributes.is_clean(*names)

    def get_dirty(self) -> dict[str, object]:
        return self._attributes.get_dirty()

    def was_changed(self, *names: str) -> bool:
        """Whether the last successful update sent any of ``names``."""
        return self._attributes.was_changed(*names)

    def get_changes(self) -> dict[str, object]:
        return self._attributes.get_changes()

    # -- relations -----------------------------------------------------------------

    def get_relation(self, name: str) -> RelationValue:
        self._require_relation(name)
        return self._relations.get(name)

    def set_relation(self, name: str, value: RelationValue | Iterable[Record]) -> Self:
        relation = self._require_relation(name)
        if relation.many and value is not None and not isinstance(value, Record):
            self._relations[name] = list(value)
        else:
            self._relations[name] = cast(RelationValue, value)
        return self

    def _require_relation(self, name: str) -> Relation[Any]:
        relation = type(self).options.relation(name)
        if relation is None:
            raise ValueError(f"{type(self).__name__} declares no relation {name!r}")
        return relation

    # -- identity ------------------------------------------------------------------

    def get_key_name(self) -> str | None:
        return type(self).options.primary_key

    def get_key(self) -> object:
        key_name = self.get_key_name()
        if key_name is None:
            return None
        return self._attributes.get(key_name)

    def exists(self) -> bool:
        return self.get_key() is not None

    @property
    def was_recently_created(self) -> bool:
        return self._was_recently_created

    def is_same_as(self, other: object) -> bool:
        """Same record type and the same remote identity."""
        return (
            isinstance(other, Record)
            and type(other) is type(self)
            and self.exists()
            and self.get_key() == other.get_key()
        )

    def is_not_same_as(self, other: object) -> bool:
        return not self.is_same_as(other)

    def has_api_error(self) -> bool:
        return has_api_error(self._attributes.all(), type(self).options.error_field)

    # -- persistence ---------------------------------------------------------------

    def save(self) -> Self:
        """Insert or update the remote resource, or do nothing if there is nothing to send."""
        self.before_save()

        if self.exists():
            if self.is_dirty():
                self._perform_update()
            else:
                log.debug("Skipping save of %r: no changes", self)
        else:
            self._perform_insert()

        self.after_save()
        return self

    def create(
        self, attributes: Mapping[str, object] | None = None, **values: object
    ) -> Self | Literal[False]:
        if self.exists():
            return False
        return self.fill({**(attributes or {}), **values}).save()

    def update(
        self, attributes: Mapping[str, object] | None = None, **values: object
    ) -> Self | Literal[False]:
        if not self.exists():
            return False
        return self.fill({**(attributes or {}), **values}).save()

    def push(self) -> bool:
        """Save this record and, depth first, every record reachable through its relations.

        The first failure propagates; records saved before it stay saved.
        """
        self.save()
        for _relation, related in iter_related(self):
            related.push()
        return True

    def delete(self) -> bool | None:
        """Delete the remote resource.

        Returns ``None`` without contacting the API when the record was never
        persisted. On success the key is cleared, so ``exists()`` is ``False``.
        """
        key_name = self.get_key_name()
        if key_name is None:
            raise MissingPrimaryKeyConfigurationError(type(self).record_type_name())

        if not self.exists():
            return None

        self.before_delete()

        key = self.get_key()
        path = resolve_endpoint(Action.DELETE, self)
        body = self._transport.invoke(Action.DELETE, path)
        self._raise_for_api_error(body)

        self._attributes.set(key_name, None)
        self._attributes.sync_original()
        self._was_recently_created = False
        log.info("Deleted %s %s", type(self).record_type_name(), key)

        self.after_delete()
        return True

    def package(self) -> dict[str, object]:
        """Attributes sent when the record is created."""
        attributes = self._attributes.all()
        key_name = self.get_key_name()
        if key_name is not None and attributes.get(key_name) is None:
            attributes.pop(key_name, None)
        return attributes

    def _perform_update(self) -> None:
        options = type(self).options
        dirty = self._attributes.get_dirty()
        payload = run_validation_gate(options.update_validator, dirty)
        action = options.capabilities.update_method
        path = resolve_endpoint(action, self)

        body = self._transport.invoke(action, path, payload)
        self._raise_for_api_error(body)

        self._attributes.sync_changes(payload)
        self._reconcile(body, unsent=dirty.keys() - payload.keys())

    def _perform_insert(self) -> None:
        options = type(self).options
        attributes = self.package()
        payload = run_validation_gate(options.store_validator, attributes)
        action = options.capabilities.create_method
        path = resolve_endpoint(action, self)

        body = self._transport.invoke(action, path, payload)
        self._raise_for_api_error(body)

        self._reconcile(body, unsent=attributes.keys() - payload.keys())
        self._was_recently_created = True
        if not self.exists():
            log.warning("Created %s but the response carried no key", type(self).record_type_name())

    def _reconcile(self, body: RawResource, unsent: Iterable[str] = ()) -> None:
        """Merge the returned resource and commit everything except ``unsent``.

        Attributes the validator left out of the request stay dirty with their
        local values so a later save can still send them.
        """
        returned = unwrap_one(body, type(self).options.data_field)
        attributes, _relations = self._split_relations(returned)
        skipped = set(unsent)
        for name in skipped:
            attributes.pop(name, None)
        self._attributes.fill(attributes)
        if skipped:
            log.warning(
                "%s fields not sent and left dirty: %s",
                type(self).record_type_name(),
                ", ".join(sorted(skipped)),
            )
            committed = [name for name in self._attributes.all() if name not in skipped]
            if committed:
                self._attributes.sync_original(*committed)
        else:
            self._attributes.sync_original()
        log.debug("Reconciled %r with %d returned attributes", self, len(attributes))

    def _raise_for_api_error(self, body: RawResource) -> None:
        options = type(self).options
        if has_api_error(body, options.error_field):
            body_mapping = cast(Mapping[str, object], body)
            raise ApiResponseError(
                f"{type(self).record_type_name()} request returned an error: {body}",
                payload=body,
                status_code=_as_status(body_mapping.get(options.error_field)),
            )

    def _split_relations(
        self, attributes: Mapping[str, object]
    ) -> tuple[dict[str, object], dict[str, object]]:
        plain = dict(attributes)
        nested: dict[str, object] = {}
        for relation in type(self).options.relations:
            if relation.name in plain:
                nested[relation.name] = plain.pop(relation.name)
        return plain, nested

    # -- hooks ---------------------------------------------------------------------

    def before_save(self) -> None:
        """Called before every save."""

    def after_save(self) -> None:
        """Called after every save that did not raise."""

    def before_delete(self) -> None:
        """Called before the delete request is issued."""

    def after_delete(self) -> None:
        """Called after a successful delete."""

    # -- loading -------------------------------------------------------------------

    @classmethod
    def hydrate(cls, transport: Transport, attributes: Mapping[str, object]) -> Self:
        """Build an already persisted record from a resource returned by the API."""
        record = cls(transport)
        plain, nested = record._split_relations(attributes)
        record._attributes.replace(plain)
        record._load_relations(nested)
        record._attributes.sync_original()
        return record

    def _load_relations(self, nested: Mapping[str, object]) -> None:
        options = type(self).options
        for name, raw in nested.items():
            relation = options.relation(name)
            if relation is not None:
                self._relations[name] = relation.hydrate(self._transport, raw)

    @classmethod
    def find(cls, transport: Transport, key: object) -> Self | None:
        """Fetch one record by key, or ``None`` if the API reports it missing."""
        path = resolve_item_endpoint(cls, key)
        try:
            body = transport.invoke(Action.GET, path)
        except TransportError as exc:
            if exc.status_code == 404:
                log.debug("%s %s not found", cls.record_type_name(), key)
                return None
            raise
        attributes = unwrap_one(body, cls.options.data_field)
        if not attributes:
            return None
        return cls.hydrate(transport, attributes)

    @classmethod
    def all(cls, transport: Transport, **params: object) -> list[Self]:
        """Fetch the collection, passing ``params`` as query parameters."""
        ensure_allowed(cls, Action.GET)
        body = transport.invoke(Action.GET, cls.endpoint(), params=params or None)
        return [cls.hydrate(transport, item) for item in unwrap_many(body, cls.options.data_field)]

    @classmethod
    def destroy_many(cls, transport: Transport, *ids: object) -> int:
        """Delete the records with the given keys one by one; return how many were deleted.

        Accepts ``destroy_many(t, 1, 2)`` as well as a single iterable of keys.
        """
        keys = _normalize_ids(ids)
        count = 0
        for key in keys:
            record = cls.find(transport, key)
            if record is not None and record.delete():
                count += 1
        log.info("Destroyed %d of %d %s records", count, len(keys), cls.record_type_name())
        return count

    def fresh(self) -> Self | None:
        if not self.exists():
            return None
        return type(self).find(self._transport, self.get_key())

    def refresh(self) -> Self:
        """Reload attributes and relations from the API, discarding local changes."""
        if not self.exists():
            return self
        fresh = self.fresh()
        if fresh is None:
            raise TransportError(
                f"{type(self).record_type_name()} {self.get_key()} no longer exists",
                status_code=404,
            )
        self._attributes.replace(fresh.get_attributes())
        self._relations = dict(fresh._relations)
        self._attributes.sync_original()
        return self

    def replicate(self, except_: Iterable[str] | None = None) -> Self:
        """Copy into a new, non-persisted record without the key and ``except_`` attributes."""
        excluded = set(except_ or ())
        key_name = self.get_key_name()
        if key_name is not None:
            excluded.add(key_name)
        attributes = {
            name: value for name, value in self._attributes.all().items() if name not in excluded
        }
        replica = type(self)(self._transport, attributes)
        replica._relations = dict(self._relations)
        return replica

    # -- serialization -------------------------------------------------------------

    def to_dict(self) -> dict[str, object]:
        hidden = type(self).options.hidden
        data: dict[str, object] = {
            name: value for name, value in self._attributes.all().items() if name not in hidden
        }
        for name, value in self._relations.items():
            if name in hidden:
                continue
            if isinstance(value, list):
                data[name] = [item.to_dict() for item in value]
            elif value is None:
                data[name] = None
            else:
                data[name] = value.to_dict()
        return data

    def to_json(self, *, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)


def _normalize_ids(ids: tuple[object, ...]) -> list[object]:
    if len(ids) != 1:
        return list(ids)
    only = ids[0]
    if isinstance(only, Iterable) and not isinstance(only, (str, bytes, bytearray)):
        return list(cast(Iterable[object], only))
    return list(ids)


def _as_status(value: object) -> int | None:
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None
