"""Tests for hub discovery in core/locator.py

Zeroconf and its browser are replaced by fakes, so no multicast traffic
is generated.
"""

import pytest
from unittest.mock import MagicMock

from core.errors import DiscoveryError
from core.locator import SERVICE_TYPE, discover_hubs, locate_hub
from models.types import HubAddress


def make_info(address, port):
    info = MagicMock()
    info.port = port
    info.parsed_addresses.return_value = [address]
    return info


class FakeZeroconf:
    """Resolves service names from a fixed table."""

    def __init__(self, services):
        self.services = services
        self.closed = False

    def get_service_info(self, type_, name, timeout=3000):
        assert type_ == SERVICE_TYPE
        return self.services.get(name)

    def close(self):
        self.closed = True


def browser_announcing(*names):
    """Browser factory that announces the given services straight away."""
    browsers = []

    def factory(zc, type_, listener):
        assert type_ == '_coap._udp.local.'
        for name in names:
            listener.add_service(zc, type_, name)
        browser = MagicMock()
        browsers.append(browser)
        return browser

    factory.browsers = browsers
    return factory


class TestLocateHub:
    """Test locate_hub."""

    def test_first_answer_wins(self):
        zc = FakeZeroconf({
            'gw-a._coap._udp.local.': make_info('192.168.1.20', 5684),
            'gw-b._coap._udp.local.': make_info('192.168.1.21', 5684),
        })
        browser = browser_announcing('gw-a._coap._udp.local.', 'gw-b._coap._udp.local.')

        address = locate_hub(timeout=1, zeroconf_factory=lambda: zc, browser_factory=browser)

        assert address == HubAddress('192.168.1.20', 5684)
        assert zc.closed
        browser.browsers[0].cancel.assert_called_once()

    def test_skips_unresolvable_answer(self):
        zc = FakeZeroconf({'gw-b._coap._udp.local.': make_info('192.168.1.21', 5685)})
        browser = browser_announcing('gw-a._coap._udp.local.', 'gw-b._coap._udp.local.')

        address = locate_hub(timeout=1, zeroconf_factory=lambda: zc, browser_factory=browser)

        assert address == HubAddress('192.168.1.21', 5685)

    def test_timeout_raises(self):
        zc = FakeZeroconf({})
        browser = browser_announcing()

        with pytest.raises(DiscoveryError, match='No hub answered'):
            locate_hub(timeout=0.05, zeroconf_factory=lambda: zc, browser_factory=browser)

        assert zc.closed

    def test_zeroconf_start_failure(self):
        def broken():
            raise OSError('No multicast interface')

        with pytest.raises(DiscoveryError, match='Could not start'):
            locate_hub(timeout=1, zeroconf_factory=broken, browser_factory=browser_announcing())

    def test_browser_start_failure(self):
        zc = FakeZeroconf({})

        def broken(zc, type_, listener):
            raise RuntimeError('browser failed')

        with pytest.raises(DiscoveryError):
            locate_hub(timeout=1, zeroconf_factory=lambda: zc, browser_factory=broken)

        assert zc.closed


class TestDiscoverHubs:
    """Test discover_hubs."""

    def test_lists_every_hub(self):
        zc = FakeZeroconf({
            'gw-a._coap._udp.local.': make_info('192.168.1.20', 5684),
            'gw-b._coap._udp.local.': make_info('192.168.1.21', 5684),
        })
        browser = browser_announcing('gw-a._coap._udp.local.', 'gw-b._coap._udp.local.',
                                     'gw-a._coap._udp.local.')

        hubs = discover_hubs(wait=0, zeroconf_factory=lambda: zc, browser_factory=browser)

        assert hubs == [
            ('gw-a._coap._udp.local.', HubAddress('192.168.1.20', 5684)),
            ('gw-b._coap._udp.local.', HubAddress('192.168.1.21', 5684)),
        ]
        assert zc.closed

    def test_no_hubs(self):
        hubs = discover_hubs(wait=0, zeroconf_factory=lambda: FakeZeroconf({}),
                             browser_factory=browser_announcing())
        assert hubs == []


class TestHubAddress:
    def test_netloc_ipv4(self):
        assert HubAddress('192.168.1.20', 5684).netloc == '192.168.1.20:5684'

    def test_netloc_ipv6(self):
        assert HubAddress('fe80::1', 5684).netloc == '[fe80::1]:5684'

    def test_netloc_hostname(self):
        assert str(HubAddress('gw-b072bf257a41.local', 5684)) == 'gw-b072bf257a41.local:5684'
