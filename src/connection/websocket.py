"""WebSocket transport built on the aiohttp client.

This module provides the concrete transport used by the CLI. It opens an
aiohttp ClientSession, performs the WebSocket handshake and then moves whole
text messages in both directions.

The transport handles:
    - Custom request headers for the handshake
    - Optional TLS certificate verification bypass for development servers
    - Mapping aiohttp frame types and errors onto TransportClosed/TransportError

Example:
    Basic usage::

        transport = await WebSocketTransport.dial('wss://example.com/ws')
        await transport.send('{"ping": 1}')
        reply = await transport.receive()
        await transport.close()

    With headers::

        transport = await WebSocketTransport.dial(
            'wss://example.com/ws',
            headers={'Authorization': 'Bearer token'},
        )
"""
from __future__ import annotations

import logging
from typing import Mapping, Optional

import aiohttp
from aiohttp import WSMsgType
from multidict import CIMultiDict

from connection.base import BaseTransport, TransportClosed, TransportError

logger = logging.getLogger(__name__)

_CLOSE_TYPES = (WSMsgType.CLOSE, WSMsgType.CLOSING, WSMsgType.CLOSED)


class WebSocketTransport(BaseTransport):
    """Transport over an aiohttp client WebSocket.

    Attributes:
        url: URL the transport is connected to
        session: aiohttp session that owns the socket
        ws: Active client WebSocket
    """

    def __init__(
        self,
        url: str,
        session: aiohttp.ClientSession,
        ws: aiohttp.ClientWebSocketResponse
    ) -> None:
        self.url = url
        self.session = session
        self.ws = ws
        self._closed = False

    @classmethod
    async def dial(
        cls,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        skip_ssl_verification: bool = False
    ) -> WebSocketTransport:
        """Open a WebSocket connection to url.

        Args:
            url: ws:// or wss:// URL.
            headers: Extra headers for the handshake request; a name may
                appear more than once.
            skip_ssl_verification: Accept any TLS certificate. Only meant
                for testing against development servers.

        Returns:
            Connected transport.

        Raises:
            TransportError: If the handshake fails.
        """
        session = aiohttp.ClientSession()
        try:
            ws = await session.ws_connect(
                url,
                headers=CIMultiDict(headers) if headers else None,
                ssl=False if skip_ssl_verification else True,
            )
        except (aiohttp.ClientError, OSError) as e:
            await session.close()
            raise TransportError(f'fail to connect to {url}: {e}') from e

        logger.info('Connected to %s', url)
        return cls(url, session, ws)

    async def send(self, text: str) -> None:
        if self._closed or self.ws.closed:
            raise TransportClosed('connection is closed')
        try:
            await self.ws.send_str(text)
        except ConnectionResetError as e:
            raise TransportClosed(str(e)) from e
        except (aiohttp.ClientError, OSError) as e:
            raise TransportError(str(e)) from e

    async def receive(self) -> str:
        try:
            msg = await self.ws.receive()
        except (aiohttp.ClientError, OSError) as e:
            raise TransportError(str(e)) from e

        if msg.type == WSMsgType.TEXT:
            return msg.data
        if msg.type == WSMsgType.BINARY:
            return msg.data.decode('utf-8', errors='replace')
        if msg.type in _CLOSE_TYPES:
            raise TransportClosed('connection closed')
        if msg.type == WSMsgType.ERROR:
            raise TransportError(str(self.ws.exception() or 'websocket error'))

        raise TransportError(f'unexpected websocket message type: {msg.type}')

    async def close(self) -> None:
        """Close the socket and its session."""
        if self._closed:
            return
        self._closed = True

        try:
            await self.ws.close()
        finally:
            await self.session.close()
        logger.info('Disconnected from %s', self.url)
