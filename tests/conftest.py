from __future__ import annotations

import pytest
from fakes import FakeMapProvider, FakeTransport, RecordingNotifier

from pyfiremap.config import FireMapConfig


@pytest.fixture
def config() -> FireMapConfig:
    return FireMapConfig(backend_url="http://backend.test/", refresh_interval=10.0)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def provider() -> FakeMapProvider:
    return FakeMapProvider()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
