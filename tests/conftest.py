"""Pytest fixtures shared by every test.

All tests are network-isolated - socket connections are blocked by default.
"""

from __future__ import annotations

import socket
from collections.abc import Iterator

import pytest

from tests.fakes import FakeProgressReporter, InMemoryFileSystem
from tests.support.errors import NetworkIsolationError

# =============================================================================
# Network Isolation - Block all socket connections in tests
# =============================================================================


def _blocked_socket_connect(self: socket.socket, *args: object, **kwargs: object) -> None:
    """Raise an error if any test tries to make a real network connection."""
    _ = (self, kwargs)
    raise NetworkIsolationError(str(args))


@pytest.fixture(autouse=True)
def block_network_access(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Block all network access in tests.

    HTTP code is exercised through httpx.MockTransport or FakeValuationService.
    """
    monkeypatch.setattr(socket.socket, "connect", _blocked_socket_connect)
    yield


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer environment variables out of config-dependent tests."""
    for name in (
        "DOMETRICS_WEIGHTS_PATH",
        "DOMETRICS_USE_VALUATION",
        "VALUATION_API_KEY",
        "VALUATION_BASE_URL",
        "VALUATION_MODEL",
        "VALUATION_TIMEOUT_SECONDS",
        "TRACKED_DOMAINS_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def in_memory_fs() -> InMemoryFileSystem:
    """Provide an in-memory filesystem for tests."""
    return InMemoryFileSystem()


@pytest.fixture
def fake_progress() -> FakeProgressReporter:
    return FakeProgressReporter()
