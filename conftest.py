"""
Shared pytest fixtures.

Provides an in-memory stand-in for the connector capability and a sleep
recorder, so retry and registry behaviour can be tested without a database
or real waiting.
"""

import os
from typing import Dict, List, Optional, Sequence

import pytest

from connection_management import (
    CloseError,
    ConnectionError,
    ConnectionRegistry,
    RetryingConnector,
    RetryPolicy,
)


class FakeHandle:
    """Live-connection stand-in returned by FakeConnector."""

    def __init__(self, uri: str, serial: int):
        self.uri = uri
        self.serial = serial
        self.closed = False

    def __repr__(self):
        return f"FakeHandle({self.uri!r}, #{self.serial})"


class FakeConnector:
    """
    Scriptable connector.

    Args:
        script: Per-URI list of outcomes consumed one per ``open`` call.
            ``None`` means succeed, an exception instance is raised. Once a
            URI's script is exhausted, further calls succeed.
        always_fail: URIs whose every ``open`` raises a fresh ConnectionError.
        close_failures: URIs whose handles raise CloseError on ``close``.
    """

    def __init__(
        self,
        script: Optional[Dict[str, List[Optional[Exception]]]] = None,
        always_fail: Sequence[str] = (),
        close_failures: Sequence[str] = (),
    ):
        self.script = {uri: list(outcomes) for uri, outcomes in (script or {}).items()}
        self.always_fail = set(always_fail)
        self.close_failures = set(close_failures)
        self.open_calls = []
        self.raised = []
        self.closed = []
        self._serial = 0

    def open(self, uri, options):
        self.open_calls.append((uri, options))
        error = None
        if uri in self.always_fail:
            error = ConnectionError(f"{uri} unreachable (call {len(self.open_calls)})")
        elif self.script.get(uri):
            error = self.script[uri].pop(0)
        if error is not None:
            self.raised.append(error)
            raise error
        self._serial += 1
        return FakeHandle(uri, self._serial)

    def close(self, handle):
        if handle.uri in self.close_failures:
            raise CloseError(f"cannot close {handle.uri}")
        handle.closed = True
        self.closed.append(handle)

    def uris_opened(self):
        return [uri for uri, _ in self.open_calls]


class RecordingSleep:
    """Sleep replacement remembering every requested wait, in seconds."""

    def __init__(self):
        self.waits = []

    def __call__(self, seconds):
        self.waits.append(float(seconds))


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def fake_connector():
    return FakeConnector()


@pytest.fixture
def make_registry(recording_sleep):
    """Factory building a registry around a FakeConnector with no real waiting."""

    def _make(connector=None, retry_policy=None, **kwargs):
        connector = connector or FakeConnector()
        retrying = RetryingConnector(connector, sleep=recording_sleep)
        policy = retry_policy or RetryPolicy(max_attempts=3, base_interval_ms=10, backoff_factor=2)
        return ConnectionRegistry(retrying_connector=retrying, retry_policy=policy, **kwargs)

    return _make


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every DOCDB_* variable so settings tests see pure defaults."""
    for name in list(os.environ):
        if name.upper().startswith("DOCDB_"):
            monkeypatch.delenv(name, raising=False)
    return monkeypatch
