"""Shared fixtures: an in-memory transport, scripted editors and contexts."""
from __future__ import annotations

import asyncio
import io
from typing import List, Optional

import pytest

from connection.base import BaseTransport, TransportClosed
from connection.connection import Connection
from editor.base import BaseEditor
from macros.execution.context import ExecutionContext
from output.formatter import Formatter

_CLOSED = object()


class EchoTransport(BaseTransport):
    """Transport that answers every request with the same text.

    Messages can also be pushed with feed(), and a peer close or read
    failure simulated with disconnect() / fail().
    """

    def __init__(self, echo: bool = True) -> None:
        self.echo = echo
        self.sent: List[str] = []
        self.close_calls = 0
        self.send_gate: Optional[asyncio.Event] = None
        self.send_error: Optional[Exception] = None
        self._incoming: asyncio.Queue = asyncio.Queue()

    def feed(self, text: str) -> None:
        self._incoming.put_nowait(text)

    def disconnect(self) -> None:
        self._incoming.put_nowait(_CLOSED)

    def fail(self, error: Exception) -> None:
        self._incoming.put_nowait(error)

    async def send(self, text: str) -> None:
        if self.send_gate is not None:
            await self.send_gate.wait()
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(text)
        if self.echo:
            self.feed(text)

    async def receive(self) -> str:
        item = await self._incoming.get()
        if item is _CLOSED:
            raise TransportClosed('connection closed')
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self) -> None:
        self.close_calls += 1
        self.disconnect()


class ScriptedEditor(BaseEditor):
    """Editor returning prepared lines; exceptions in the script are raised."""

    def __init__(self, *lines) -> None:
        self.lines = list(lines)
        self.calls = []

    async def edit(self, keys, initial: str = '') -> str:
        self.calls.append(initial)
        item = self.lines.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture(autouse=True)
def plain_console(monkeypatch):
    """Keep rich from emitting colour codes into captured output."""
    monkeypatch.delenv('FORCE_COLOR', raising=False)
    monkeypatch.setenv('NO_COLOR', '1')


@pytest.fixture
def transport() -> EchoTransport:
    return EchoTransport()


@pytest.fixture
def make_context(transport):
    """Build an ExecutionContext around a started connection.

    Must be called from inside a running event loop.
    """
    def _make(
        request_lines=(),
        cmd_lines=(),
        macro=None,
        output_file=None,
        conn_transport=None,
        buffer_size: int = 100
    ) -> ExecutionContext:
        connection = Connection(conn_transport or transport, hostname='example.com', buffer_size=buffer_size)
        connection.start()
        return ExecutionContext(
            output=io.StringIO(),
            formatter=Formatter(),
            connection=connection,
            request_editor=ScriptedEditor(*request_lines),
            cmd_editor=ScriptedEditor(*cmd_lines),
            output_file=output_file,
            macro=macro,
        )

    return _make
