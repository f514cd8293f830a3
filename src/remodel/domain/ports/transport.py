"""Port for the transport that carries record actions to the remote API."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from remodel.domain.capabilities import Action

type RawResource = dict[str, object] | list[object] | None


@runtime_checkable
class Transport(Protocol):
    """Issues one request per call and returns the decoded body.

    Implementations raise ``TransportError`` for anything other than a
    successful response; an empty body is returned as ``None``.
    """

    def invoke(
        self,
        action: Action,
        path: str,
        payload: Mapping[str, object] | None = None,
        *,
        params: Mapping[str, object] | None = None,
    ) -> RawResource: ...
