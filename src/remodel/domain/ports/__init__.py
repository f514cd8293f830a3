"""Ports consumed by the record lifecycle."""

from __future__ import annotations

from .attributes import DirtyTracker
from .transport import RawResource, Transport

__all__ = ["DirtyTracker", "RawResource", "Transport"]
