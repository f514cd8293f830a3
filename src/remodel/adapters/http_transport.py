"""Transport that sends record actions to a JSON HTTP API."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, cast

import httpx

from remodel.config.api import get_api_config
from remodel.domain.errors import TransportError

from .http_resilience import ResilientClient

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import TracebackType

    from httpx._types import QueryParamTypes

    from remodel.config.api import ApiConfig
    from remodel.config.http_resilience import ResilienceConfig
    from remodel.domain.capabilities import Action
    from remodel.domain.ports.transport import RawResource, Transport

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class HttpTransport:
    """One HTTP request per ``invoke``; non-2xx responses become ``TransportError``."""

    config: ApiConfig = field(default_factory=get_api_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _client: ResilientClient | None = field(default=None, init=False, repr=False)

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def client(self) -> ResilientClient:
        if self._client is None:
            self._client = self.client_factory(self.config.resilience)
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def invoke(
        self,
        action: Action,
        path: str,
        payload: Mapping[str, object] | None = None,
        *,
        params: Mapping[str, object] | None = None,
    ) -> RawResource:
        method = action.http_method
        log.debug("%s %s payload=%s params=%s", method, path, payload, params)
        try:
            if payload is None:
                response = self.client.request(
                    method, path, params=cast("QueryParamTypes | None", params)
                )
            else:
                response = self.client.request(
                    method,
                    path,
                    json=dict(payload),
                    params=cast("QueryParamTypes | None", params),
                )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            log.warning("%s %s failed with HTTP %s", method, path, status)
            raise TransportError(
                f"{method} {path} failed with HTTP {status}", status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            log.error("%s %s failed: %s", method, path, exc)
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(
                f"{method} {path} returned a body that is not JSON",
                status_code=response.status_code,
            ) from exc


if TYPE_CHECKING:
    _transport_check: Transport = HttpTransport()
