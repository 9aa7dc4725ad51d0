"""Pytest configuration and fixtures for Tradfri bridge tests."""

import threading
import time

import pytest

from core.errors import RequestError
from core.session import HubSession
from models.types import freeze_bulb_table


class FakeTransport:
    """In-memory stand-in for the CoAP transport.

    Records every request and flags requests that overlap in time, which
    would mean two requests were interleaved on the wire.
    """

    def __init__(self, responses=None, delay=0.0):
        self.responses = responses or {}
        self.delay = delay
        self.requests = []
        self.threads = []
        self.fail_paths = set()
        self.overlapped = False
        self.opened = False
        self.closed = False
        self._active = 0
        self._guard = threading.Lock()

    def open(self, timeout=None):
        self.opened = True

    def request(self, method, path, payload=b'', timeout=None):
        with self._guard:
            self._active += 1
            if self._active > 1:
                self.overlapped = True
        try:
            if self.delay:
                time.sleep(self.delay)
            with self._guard:
                self.requests.append((method, path, payload))
                self.threads.append(threading.get_ident())
            if path in self.fail_paths:
                raise RequestError(f"{method} {path} failed with 5.03 Service Unavailable")
            return self.responses.get(path, b'')
        finally:
            with self._guard:
                self._active -= 1

    def close(self):
        self.closed = True

    def puts(self):
        return [(path, payload) for method, path, payload in self.requests if method == 'PUT']


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def session(transport):
    return HubSession(transport, '192.168.1.20:5684')


@pytest.fixture
def bulb_table():
    """Two bulbs, as configured in a typical living room."""
    return freeze_bulb_table({"Floor Lamp": "65538", "Bedside Lamp": "65537"})


@pytest.fixture
def make_transport():
    """Factory for transports with canned responses or artificial latency."""
    return FakeTransport
