"""Connection factory for dialling a WebSocket URL.

This module turns command-line style connection options into a started
Connection: it parses ``Name: value`` header strings, dials the URL with the
aiohttp transport, and launches the background receive task.

Example:
    Connect with a header::

        connection = await create_connection(
            'wss://example.com/ws',
            headers=['Authorization: Bearer token'],
        )

    Skip certificate checks for a local server::

        connection = await create_connection('wss://localhost:8443', skip_ssl_verification=True)
"""
from __future__ import annotations

import logging
from typing import Iterable
from urllib.parse import urlparse

from multidict import CIMultiDict

from connection.connection import Connection
from connection.websocket import WebSocketTransport

logger = logging.getLogger(__name__)


def parse_headers(raw_headers: Iterable[str]) -> CIMultiDict:
    """Parse ``Name: value`` strings into a header mapping.

    The value may itself contain colons; only the first one separates the
    name from the value. A repeated name keeps every value, in order.

    Args:
        raw_headers: Header strings as given on the command line.

    Returns:
        Case-insensitive multi-valued mapping of header name to value.

    Raises:
        ValueError: If a header has no colon or an empty name.
    """
    headers: CIMultiDict = CIMultiDict()
    for raw in raw_headers:
        name, sep, value = raw.partition(':')
        name = name.strip()
        if not sep or not name:
            raise ValueError(f'invalid header: {raw}')
        headers.add(name, value.strip())
    return headers


async def create_connection(
    url: str,
    headers: Iterable[str] = (),
    skip_ssl_verification: bool = False
) -> Connection:
    """Dial url and return a started Connection.

    Args:
        url: ws:// or wss:// URL.
        headers: ``Name: value`` strings sent with the handshake.
        skip_ssl_verification: Accept any TLS certificate.

    Returns:
        Connection whose receive task is already running.

    Raises:
        ValueError: If the URL has no host or a header is malformed.
        TransportError: If the connection cannot be established.
    """
    hostname = urlparse(url).hostname
    if not hostname:
        raise ValueError(f'invalid url: {url}')

    parsed_headers = parse_headers(headers)

    logger.debug('Dialling %s with %d extra header(s)', url, len(parsed_headers))
    transport = await WebSocketTransport.dial(
        url,
        headers=parsed_headers,
        skip_ssl_verification=skip_ssl_verification,
    )

    connection = Connection(transport, hostname=hostname)
    connection.start()
    return connection
