"""Base transport interface and message model for WebSocket sessions.

This module defines the value types exchanged between the connection and the
command engine, and the abstract transport that concrete WebSocket clients
implement. Concrete implementations should inherit from BaseTransport and
implement all abstract methods.

The module provides:
    - MessageType enum distinguishing outbound requests from inbound responses
    - Message, the immutable unit of data commands operate on
    - TransportError / TransportClosed for read and write failures
    - BaseTransport abstract base class defining the transport interface

Example:
    Implementing a custom transport::

        class LoopbackTransport(BaseTransport):
            async def send(self, text: str) -> None:
                await self._queue.put(text)

            async def receive(self) -> str:
                return await self._queue.get()
"""
from __future__ import annotations

import abc
from dataclasses import dataclass
from enum import Enum


class MessageType(Enum):
    """Direction of a message relative to this client.

    Attributes:
        NOT_DEFINED: Placeholder for messages of unknown origin
        REQUEST: Message sent by this client
        RESPONSE: Message received from the server
    """

    NOT_DEFINED = 0
    REQUEST = 1
    RESPONSE = 2

    def __str__(self) -> str:
        if self is MessageType.REQUEST:
            return "Request"
        if self is MessageType.RESPONSE:
            return "Response"
        return "Not defined"


@dataclass(frozen=True)
class Message:
    """A single message on the connection.

    Attributes:
        type: Whether the message was sent or received
        data: Raw text payload
    """

    type: MessageType
    data: str


class TransportError(ConnectionError):
    """Raised when the transport fails to read or write a message."""


class TransportClosed(TransportError):
    """Raised when the transport has been closed, by the peer or locally."""


class BaseTransport(abc.ABC):
    """Abstract base class for message transports.

    A transport moves whole text messages over an already established
    connection. It knows nothing about requests, responses or commands;
    Connection layers that on top.

    Implementations must be safe to close while a receive() is pending:
    the pending call should then raise TransportClosed or TransportError.
    """

    @abc.abstractmethod
    async def send(self, text: str) -> None:
        """Transmit one text message.

        Args:
            text: Message payload

        Raises:
            TransportError: If the message could not be written
        """

    @abc.abstractmethod
    async def receive(self) -> str:
        """Wait for the next message and return its text payload.

        Raises:
            TransportClosed: If the connection was closed
            TransportError: If reading failed for any other reason
        """

    @abc.abstractmethod
    async def close(self) -> None:
        """Release the underlying connection.

        This method should be idempotent.
        """
