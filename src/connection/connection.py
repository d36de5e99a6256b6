"""Connection lifecycle: sending, background receiving and teardown.

The Connection owns a transport and runs one background task that drains it,
republishing every inbound message as a RESPONSE on a bounded MessageStream.
Commands send through the connection and consume from the stream.

Teardown ordering:
    1. close() marks the connection closed, closes the transport and seals
       the stream so the receive task cannot stay parked on a full buffer
    2. the receive task sees the read failure and exits quietly
    3. the receive task waits until no send is in flight
    4. the stream is closed, so consumers see end-of-stream

Example:
    Basic usage::

        connection = Connection(transport, hostname='example.com')
        connection.start()
        sent = await connection.send('{"ping": 1}')
        reply = await connection.messages.get()
        await connection.close()
"""
from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import AsyncIterator, Deque, Optional

from connection.base import BaseTransport, Message, MessageType, TransportClosed, TransportError

logger = logging.getLogger(__name__)

MESSAGE_BUFFER_SIZE = 100


class MessageStream:
    """Bounded FIFO of inbound messages with an explicit end-of-stream.

    get() blocks until a message is available or the stream is closed, and
    returns None only for end-of-stream. Messages buffered before close()
    are still handed out. A cancelled get() never consumes a message, so a
    consumer that gives up waiting leaves the next message for whoever
    reads after it.
    """

    def __init__(self, maxsize: int = MESSAGE_BUFFER_SIZE) -> None:
        self._items: Deque[Message] = deque()
        self._maxsize = maxsize
        self._sealed = False
        self._closed = False
        self._cond = asyncio.Condition()

    @property
    def closed(self) -> bool:
        return self._closed

    async def put(self, msg: Message) -> bool:
        """Append a message, waiting while the buffer is full.

        Returns:
            False if the stream no longer accepts messages and msg was dropped.
        """
        async with self._cond:
            await self._cond.wait_for(
                lambda: self._sealed or len(self._items) < self._maxsize
            )
            if self._sealed:
                return False
            self._items.append(msg)
            self._cond.notify_all()
            return True

    async def get(self) -> Optional[Message]:
        """Return the next message, or None once the stream is closed and drained."""
        async with self._cond:
            await self._cond.wait_for(lambda: self._items or self._closed)
            if not self._items:
                return None
            msg = self._items.popleft()
            self._cond.notify_all()
            return msg

    async def poll(self) -> Optional[Message]:
        """Return a buffered message without waiting for a new one."""
        async with self._cond:
            if not self._items:
                return None
            msg = self._items.popleft()
            self._cond.notify_all()
            return msg

    async def seal(self) -> None:
        """Stop accepting messages; buffered ones can still be read."""
        async with self._cond:
            self._sealed = True
            self._cond.notify_all()

    async def close(self) -> None:
        """Seal the stream and signal end-of-stream to consumers."""
        async with self._cond:
            self._sealed = True
            self._closed = True
            self._cond.notify_all()

    def __len__(self) -> int:
        return len(self._items)

    def __aiter__(self) -> AsyncIterator[Message]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[Message]:
        while True:
            msg = await self.get()
            if msg is None:
                return
            yield msg


class Connection:
    """A live message connection with a background receive task.

    Attributes:
        transport: Transport the connection reads from and writes to
        hostname: Host part of the target URL, used to pick macro files
    """

    def __init__(
        self,
        transport: BaseTransport,
        hostname: str = '',
        buffer_size: int = MESSAGE_BUFFER_SIZE
    ) -> None:
        """Initialize the connection without starting it.

        Args:
            transport: Connected transport.
            hostname: Host the transport is connected to.
            buffer_size: How many responses may wait unread before the
                receive task stops reading.
        """
        self.transport = transport
        self.hostname = hostname
        self._messages = MessageStream(buffer_size)
        self._in_flight = 0
        self._sends_done = asyncio.Event()
        self._sends_done.set()
        self._closed = False
        self._reader_task: Optional[asyncio.Task] = None

    @property
    def messages(self) -> MessageStream:
        """Inbound RESPONSE messages in arrival order."""
        return self._messages

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Start the background receive task. Calling it again is a no-op."""
        if self._reader_task is None:
            self._reader_task = asyncio.create_task(self._handle_responses())

    async def send(self, text: str) -> Message:
        """Send a request and return it as a REQUEST message.

        The call counts as in flight until the transport accepts the write,
        and the inbound stream is not closed while any send is in flight.

        Args:
            text: Request payload.

        Returns:
            The message that was sent.

        Raises:
            TransportClosed: If the connection was already closed.
            TransportError: If the transport fails to write.
        """
        if self._closed:
            raise TransportClosed('connection is closed')

        self._in_flight += 1
        self._sends_done.clear()
        try:
            await self.transport.send(text)
        finally:
            self._in_flight -= 1
            if self._in_flight == 0:
                self._sends_done.set()

        logger.debug('sent %d characters', len(text))
        return Message(type=MessageType.REQUEST, data=text)

    async def close(self) -> None:
        """Close the connection. A second call returns immediately.

        Returns once the receive task has finished and the stream is closed.
        """
        if self._closed:
            return
        self._closed = True

        await self.transport.close()
        await self._messages.seal()

        if self._reader_task is None:
            await self._sends_done.wait()
            await self._messages.close()
            return

        await self._reader_task

    async def __aenter__(self) -> Connection:
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _handle_responses(self) -> None:
        """Read from the transport until it fails, then close the stream."""
        try:
            while True:
                try:
                    data = await self.transport.receive()
                except TransportClosed:
                    if not self._closed:
                        logger.warning('Connection closed by the server')
                    return
                except TransportError as e:
                    if not self._closed:
                        logger.error('Fail to read from connection: %s', e)
                    return

                accepted = await self._messages.put(
                    Message(type=MessageType.RESPONSE, data=data)
                )
                if not accepted:
                    return
        finally:
            await self._sends_done.wait()
            await self._messages.close()
