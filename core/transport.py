"""Secure CoAP transport to the Tradfri hub.

The hub only speaks CoAP over DTLS with a pre-shared key. aiocoap provides
the protocol (with its tinydtls backend for DTLS); this module runs it on a
private asyncio event loop in a daemon thread and exposes a blocking
request() call so the rest of the bridge stays synchronous.
"""

import asyncio
import concurrent.futures
import logging
import threading

from aiocoap import CON, GET, PUT, Context, Message
from aiocoap.error import Error as CoapError

from core.errors import RequestError
from models.types import HubAddress

_LOGGER = logging.getLogger(__name__)

METHODS = {
    'GET': GET,
    'PUT': PUT,
}


class CoapTransport:
    """Blocking DTLS-PSK CoAP client bound to one hub."""

    def __init__(self, address: HubAddress, identity: str, secret: str):
        self.address = address
        self.identity = identity
        self._secret = secret
        self._loop = None
        self._thread = None
        self._context = None

    @property
    def base_uri(self) -> str:
        return f"coaps://{self.address.netloc}"

    def open(self, timeout: float | None = None):
        """Start the event loop thread and create the CoAP client context."""
        if self._context is not None:
            return

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever,
            name=f"coap-{self.address.netloc}",
            daemon=True,
        )
        self._thread.start()

        try:
            self._context = self._run(self._create_context(), timeout)
        except Exception:
            self._stop_loop()
            raise

    async def _create_context(self) -> Context:
        context = await Context.create_client_context()
        context.client_credentials.load_from_dict({
            f"{self.base_uri}/*": {
                'dtls': {
                    'psk': self._secret.encode('utf-8'),
                    'client-identity': self.identity.encode('utf-8'),
                }
            }
        })
        return context

    def request(self, method: str, path: str, payload: bytes = b'',
                timeout: float | None = None) -> bytes:
        """Send one confirmable request and wait for its response.

        Args:
            method: 'GET' or 'PUT'
            path: Resource path, e.g. '/15001/65538'
            payload: Request body
            timeout: Seconds to wait for the response (None waits forever)

        Returns:
            Response payload bytes

        Raises:
            RequestError: On transport failure, timeout or non-success response code
        """
        if self._context is None:
            raise RequestError("Transport is not open")
        if method not in METHODS:
            raise RequestError(f"Unsupported method: {method}")

        message = Message(code=METHODS[method], mtype=CON, uri=f"{self.base_uri}{path}", payload=payload)
        response = self._run(self._send(message), timeout)

        if not response.code.is_successful():
            raise RequestError(f"{method} {path} failed with {response.code}")
        return response.payload

    async def _send(self, message: Message):
        return await self._context.request(message).response

    def _run(self, coro, timeout: float | None):
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        try:
            return future.result(timeout)
        except concurrent.futures.TimeoutError as e:
            future.cancel()
            raise RequestError(f"No response from hub within {timeout}s") from e
        except (CoapError, OSError) as e:
            raise RequestError(str(e) or e.__class__.__name__) from e

    def close(self):
        """Shut down the CoAP context and stop the loop thread."""
        if self._loop is None:
            return
        if self._context is not None:
            try:
                self._run(self._context.shutdown(), 5)
            except RequestError as e:
                _LOGGER.warning("Unclean CoAP shutdown: %s", e)
            self._context = None
        self._stop_loop()

    def _stop_loop(self):
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)
        self._loop.close()
        self._loop = None
        self._thread = None
