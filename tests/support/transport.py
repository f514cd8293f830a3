"""In-memory transport that records calls and serves scripted responses."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

from remodel.domain.capabilities import Action
from remodel.domain.errors import TransportError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from remodel.domain.ports.transport import RawResource


@dataclass(frozen=True, slots=True)
class Call:
    action: Action
    path: str
    payload: dict[str, object] | None = None
    params: dict[str, object] | None = None


class FakeTransport:
    """Scripted responses win; otherwise POST assigns an id, PATCH/PUT echo, GET is a 404."""

    def __init__(self, *, next_id: int = 1) -> None:
        self.calls: list[Call] = []
        self._next_id = next_id
        self._scripted: defaultdict[tuple[Action, str], list[RawResource | Exception]] = (
            defaultdict(list)
        )

    def respond(self, action: Action | str, path: str, result: RawResource | Exception) -> None:
        self._scripted[(Action(action), path)].append(result)

    def paths(self) -> list[tuple[Action, str]]:
        return [(call.action, call.path) for call in self.calls]

    def invoke(
        self,
        action: Action,
        path: str,
        payload: Mapping[str, object] | None = None,
        *,
        params: Mapping[str, object] | None = None,
    ) -> RawResource:
        self.calls.append(
            Call(
                action=action,
                path=path,
                payload=dict(payload) if payload is not None else None,
                params=dict(params) if params is not None else None,
            )
        )
        queue = self._scripted.get((action, path))
        if queue:
            result = queue.pop(0)
            if isinstance(result, Exception):
                raise result
            return result
        return self._default(action, path, payload)

    def _default(
        self, action: Action, path: str, payload: Mapping[str, object] | None
    ) -> RawResource:
        if action is Action.POST:
            created = {**(payload or {}), "id": self._next_id}
            self._next_id += 1
            return {"data": created}
        if action in {Action.PATCH, Action.PUT}:
            return {"data": dict(payload or {})}
        if action is Action.DELETE:
            return None
        raise TransportError(f"GET {path} failed with HTTP 404", status_code=404)
