from __future__ import annotations

import pytest

from tests.support.transport import FakeTransport


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
