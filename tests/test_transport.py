"""Tests for CoapTransport in core/transport.py

aiocoap's Context is mocked; the private event loop thread is real.
"""

import asyncio
from types import SimpleNamespace

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from aiocoap import CON, GET, PUT

from core.errors import RequestError
from core.transport import CoapTransport
from models.types import HubAddress


def make_response(payload=b'', successful=True):
    response = MagicMock()
    response.payload = payload
    response.code.is_successful.return_value = successful
    return response


@pytest.fixture
def context():
    ctx = MagicMock()
    ctx.shutdown = AsyncMock()
    ctx.responses = []

    async def respond():
        return ctx.responses.pop(0)

    ctx.request.side_effect = lambda message: SimpleNamespace(response=respond())
    return ctx


@pytest.fixture
def transport(context):
    with patch('core.transport.Context') as mock_context:
        mock_context.create_client_context = AsyncMock(return_value=context)
        t = CoapTransport(HubAddress('192.168.1.20', 5684), 'Client_identity', 'secret')
        t.open(timeout=5)
        yield t
        t.close()


class TestOpen:
    def test_registers_psk_credentials(self, transport, context):
        context.client_credentials.load_from_dict.assert_called_once_with({
            'coaps://192.168.1.20:5684/*': {
                'dtls': {'psk': b'secret', 'client-identity': b'Client_identity'},
            }
        })

    def test_request_before_open(self):
        t = CoapTransport(HubAddress('192.168.1.20', 5684), 'Client_identity', 'secret')
        with pytest.raises(RequestError, match='not open'):
            t.request('GET', '/15001')


class TestRequest:
    def test_get(self, transport, context):
        context.responses.append(make_response(b'[65538]'))

        assert transport.request('GET', '/15001', timeout=5) == b'[65538]'

        message = context.request.call_args[0][0]
        assert message.code == GET
        assert message.mtype == CON

    def test_put_uri_and_payload(self, transport, context):
        context.responses.append(make_response())

        transport.request('PUT', '/15001/65538', b'{"3311":[{"5850":1}]}', timeout=5)

        message = context.request.call_args[0][0]
        assert message.code == PUT
        assert message.payload == b'{"3311":[{"5850":1}]}'
        assert message.opt.uri_path == ('15001', '65538')

    def test_error_code(self, transport, context):
        context.responses.append(make_response(successful=False))

        with pytest.raises(RequestError):
            transport.request('PUT', '/15001/65538', b'{}', timeout=5)

    def test_transport_error(self, transport, context):
        async def broken():
            raise OSError('Network is unreachable')

        context.request.side_effect = lambda message: SimpleNamespace(response=broken())

        with pytest.raises(RequestError, match='unreachable'):
            transport.request('GET', '/15001', timeout=5)

    def test_timeout(self, transport, context):
        async def stalled():
            await asyncio.sleep(10)

        context.request.side_effect = lambda message: SimpleNamespace(response=stalled())

        with pytest.raises(RequestError, match='No response'):
            transport.request('GET', '/15001', timeout=0.05)

    def test_unsupported_method(self, transport):
        with pytest.raises(RequestError):
            transport.request('DELETE', '/15001/65538')


class TestClose:
    def test_close_shuts_context_down(self, context):
        with patch('core.transport.Context') as mock_context:
            mock_context.create_client_context = AsyncMock(return_value=context)
            t = CoapTransport(HubAddress('192.168.1.20', 5684), 'Client_identity', 'secret')
            t.open(timeout=5)

        t.close()
        t.close()

        context.shutdown.assert_awaited_once()
        with pytest.raises(RequestError):
            t.request('GET', '/15001')
