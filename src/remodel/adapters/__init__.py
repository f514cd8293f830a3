"""Adapters connecting records to concrete transports."""

from __future__ import annotations

from .http_resilience import ResilientClient
from .http_transport import HttpTransport

__all__ = ["HttpTransport", "ResilientClient"]
