"""Hub discovery over multicast DNS.

Tradfri hubs advertise a _coap._udp service on the local segment. Only the
first hub that answers is used by locate_hub(); networks with several hubs
should pin the hub host in configuration instead (see discover_hubs() for
listing every responder).
"""

import logging
import queue
import time

from zeroconf import ServiceBrowser, ServiceListener, Zeroconf

from core.errors import DiscoveryError
from models.types import HubAddress

_LOGGER = logging.getLogger(__name__)

SERVICE_TYPE = '_coap._udp.local.'
DEFAULT_DISCOVERY_TIMEOUT = 30.0
RESOLVE_TIMEOUT_MS = 3000


class _HubListener(ServiceListener):
    """Queues the names of services as they appear."""

    def __init__(self):
        self.names = queue.Queue()

    def add_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        self.names.put(name)

    def update_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        pass

    def remove_service(self, zc: Zeroconf, type_: str, name: str) -> None:
        pass


def _resolve(zc: Zeroconf, name: str) -> HubAddress | None:
    info = zc.get_service_info(SERVICE_TYPE, name, timeout=RESOLVE_TIMEOUT_MS)
    if info is None or not info.port:
        return None
    addresses = info.parsed_addresses()
    if not addresses:
        return None
    return HubAddress(addresses[0], info.port)


def _start_browser(zeroconf_factory, browser_factory):
    try:
        zc = zeroconf_factory()
    except OSError as e:
        raise DiscoveryError(f"Could not start service discovery: {e}") from e

    listener = _HubListener()
    try:
        browser = browser_factory(zc, SERVICE_TYPE, listener)
    except Exception as e:
        zc.close()
        raise DiscoveryError(f"Could not browse for {SERVICE_TYPE}: {e}") from e
    return zc, browser, listener


def locate_hub(timeout: float | None = DEFAULT_DISCOVERY_TIMEOUT,
               zeroconf_factory=Zeroconf, browser_factory=ServiceBrowser) -> HubAddress:
    """Find the address of the first hub that answers.

    Args:
        timeout: Seconds to wait for an answer, or None to wait indefinitely

    Returns:
        HubAddress of the first hub that could be resolved

    Raises:
        DiscoveryError: If discovery cannot start or no hub answers in time
    """
    zc, browser, listener = _start_browser(zeroconf_factory, browser_factory)
    deadline = None if timeout is None else time.monotonic() + timeout

    try:
        while True:
            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                break
            try:
                name = listener.names.get(timeout=remaining)
            except queue.Empty:
                break

            address = _resolve(zc, name)
            if address is None:
                _LOGGER.warning("Could not resolve %s, waiting for another answer", name)
                continue
            _LOGGER.info("Found hub %s at %s", name, address)
            return address
    finally:
        browser.cancel()
        zc.close()

    raise DiscoveryError(f"No hub answered within {timeout}s")


def discover_hubs(wait: float = 5.0, zeroconf_factory=Zeroconf,
                  browser_factory=ServiceBrowser) -> list[tuple[str, HubAddress]]:
    """List every hub that answers within `wait` seconds.

    Returns:
        List of (service name, address) tuples in the order hubs answered
    """
    zc, browser, listener = _start_browser(zeroconf_factory, browser_factory)
    names = []
    try:
        time.sleep(wait)
        while True:
            try:
                names.append(listener.names.get_nowait())
            except queue.Empty:
                break

        hubs = []
        for name in dict.fromkeys(names):
            address = _resolve(zc, name)
            if address is not None:
                hubs.append((name, address))
        return hubs
    finally:
        browser.cancel()
        zc.close()
