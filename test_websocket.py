"""Tests for the aiohttp WebSocket transport against a local server."""

import pytest
import pytest_asyncio
from aiohttp import WSMsgType, test_utils, web

from connection.base import Message, MessageType, TransportClosed, TransportError
from connection.factory import create_connection
from connection.websocket import WebSocketTransport

SEEN_HEADERS = web.AppKey('seen_headers', list)


async def echo_handler(request: web.Request) -> web.WebSocketResponse:
    """Echo text frames; 'binary' is answered with a binary frame, 'bye' closes."""
    ws = web.WebSocketResponse()
    await ws.prepare(request)
    request.app[SEEN_HEADERS].append(request.headers.copy())

    async for msg in ws:
        if msg.type != WSMsgType.TEXT:
            break
        if msg.data == 'bye':
            await ws.close()
        elif msg.data == 'binary':
            await ws.send_bytes('bïnary'.encode('utf-8'))
        else:
            await ws.send_str(msg.data)
    return ws


@pytest_asyncio.fixture
async def server():
    app = web.Application()
    app[SEEN_HEADERS] = []
    app.router.add_get('/ws', echo_handler)
    test_server = test_utils.TestServer(app)
    await test_server.start_server()
    yield test_server
    await test_server.close()


def ws_url(server) -> str:
    return str(server.make_url('/ws')).replace('http://', 'ws://', 1)


@pytest.mark.asyncio
async def test_send_and_receive_text(server):
    transport = await WebSocketTransport.dial(ws_url(server))

    await transport.send('hello')
    assert await transport.receive() == 'hello'
    await transport.close()


@pytest.mark.asyncio
async def test_binary_frames_are_decoded(server):
    transport = await WebSocketTransport.dial(ws_url(server))

    await transport.send('binary')
    assert await transport.receive() == 'bïnary'
    await transport.close()


@pytest.mark.asyncio
async def test_server_close_raises_transport_closed(server):
    transport = await WebSocketTransport.dial(ws_url(server))

    await transport.send('bye')
    with pytest.raises(TransportClosed):
        await transport.receive()
    await transport.close()


@pytest.mark.asyncio
async def test_send_after_close(server):
    transport = await WebSocketTransport.dial(ws_url(server))
    await transport.close()
    await transport.close()

    with pytest.raises(TransportClosed):
        await transport.send('late')


@pytest.mark.asyncio
async def test_dial_failure(server):
    url = ws_url(server).replace('/ws', '/missing')

    with pytest.raises(TransportError, match='fail to connect to'):
        await WebSocketTransport.dial(url)


@pytest.mark.asyncio
async def test_create_connection_sends_headers(server):
    connection = await create_connection(ws_url(server), headers=['X-Token: secret: 1'])

    await connection.send('ping')
    reply = await connection.messages.get()
    await connection.close()

    assert reply == Message(type=MessageType.RESPONSE, data='ping')
    assert connection.hostname == '127.0.0.1'
    assert server.app[SEEN_HEADERS][0]['X-Token'] == 'secret: 1'


@pytest.mark.asyncio
async def test_create_connection_rejects_url_without_host():
    with pytest.raises(ValueError, match='invalid url'):
        await create_connection('not a url')


@pytest.mark.asyncio
async def test_create_connection_sends_repeated_headers(server):
    connection = await create_connection(ws_url(server), headers=['X-Tag: a', 'X-Tag: b'])
    await connection.close()

    assert server.app[SEEN_HEADERS][0].getall('X-Tag') == ['a', 'b']
