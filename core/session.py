"""Hub session shared by all bulb controllers.

The hub speaks request/response over one logical channel, so the session
owns its transport exclusively and runs every request/response pair under a
lock. Bulb controllers call get() and put() from whatever thread the
accessory layer uses for their callbacks.
"""

import logging
import threading

from core.errors import RequestError, SessionError
from core.transport import CoapTransport
from models.types import DEVICES_PATH, HubAddress

_LOGGER = logging.getLogger(__name__)

DEFAULT_IDENTITY = 'Client_identity'
DEFAULT_REQUEST_TIMEOUT = 10.0


class HubSession:
    """Secure, serialised request channel to one hub."""

    def __init__(self, transport, host: str, timeout: float | None = DEFAULT_REQUEST_TIMEOUT):
        """Wrap an already open transport.

        Args:
            transport: Object with request(method, path, payload, timeout) and close()
            host: host:port of the hub, for logging
            timeout: Per-request timeout in seconds (None waits forever)
        """
        self.transport = transport
        self.host = host
        self.timeout = timeout
        self._lock = threading.Lock()
        self._closed = False

    @classmethod
    def connect(cls, address: HubAddress, identity: str, secret: str,
                timeout: float | None = DEFAULT_REQUEST_TIMEOUT,
                transport_factory=CoapTransport) -> 'HubSession':
        """Open a session and complete the DTLS handshake.

        The handshake is verified by reading the hub's device list, so a wrong
        secret or an unreachable hub fails here rather than on the first command.

        Raises:
            SessionError: If the handshake cannot complete
        """
        _LOGGER.info("Connecting to gateway on %s...", address.netloc)
        transport = transport_factory(address, identity, secret)
        try:
            transport.open(timeout)
            transport.request('GET', DEVICES_PATH, b'', timeout)
        except Exception as e:
            transport.close()
            raise SessionError(f"Could not establish session with {address.netloc}: {e}") from e

        _LOGGER.info("Connected to gateway on %s", address.netloc)
        return cls(transport, address.netloc, timeout)

    def _request(self, method: str, path: str, payload: bytes = b'') -> bytes:
        with self._lock:
            if self._closed:
                raise RequestError(f"Session with {self.host} is closed")
            _LOGGER.debug("%s %s %s", method, path, payload.decode('utf-8', 'replace'))
            return self.transport.request(method, path, payload, self.timeout)

    def get(self, path: str) -> bytes:
        """Read a resource.

        Raises:
            RequestError: On transport failure or a non-success response
        """
        return self._request('GET', path)

    def put(self, path: str, body: bytes):
        """Write a resource. Not retried on failure.

        Raises:
            RequestError: On transport failure or a non-success response
        """
        self._request('PUT', path, body)

    def close(self):
        """Close the connection. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self.transport.close()
        _LOGGER.info("Closed session with %s", self.host)

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
