"""Command implementations.

Every command is an Executer: a small immutable value with one coroutine,
execute(ctx), that performs one step and returns the command to run next,
or None when the chain is finished. Errors are raised and end the chain.

Typical chains:
    - edit -> Send -> PrintMessage: the user types a request, it is sent,
      and the sent message is printed
    - wait -> PrintMessage: the next response is printed
    - editcmd -> <parsed command> -> ...: the interactive prompt

Commands are frozen dataclasses, so two commands built from the same input
compare equal.
"""
from __future__ import annotations

import abc
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from rich.console import Console

from connection.base import Message, MessageType, TransportError
from macros.errors import (
    CommandError,
    ConnectionClosedError,
    Interrupted,
    ParseError,
    ResponseTimeoutError,
    SendError,
)
from macros.execution.context import ExecutionContext
from macros.execution.runner_core import run_chain
from output.formatter import FormatError

logger = logging.getLogger(__name__)

REQUEST_MARKER = '->'
RESPONSE_MARKER = '<-'


def _print_styled(ctx: ExecutionContext, text: str, style: str) -> None:
    console = Console(file=ctx.output, highlight=False, markup=False, soft_wrap=True)
    console.print(text, style=style)


class Executer(abc.ABC):
    """A single step of a command chain."""

    @abc.abstractmethod
    async def execute(self, ctx: ExecutionContext) -> Optional['Executer']:
        """Run the step.

        Args:
            ctx: Collaborators for this session.

        Returns:
            The command to run next, or None if the chain is finished.

        Raises:
            CommandError: If the chain must stop.
        """


@dataclass(frozen=True)
class Exit(Executer):
    """Ends the session by raising Interrupted."""

    async def execute(self, ctx: ExecutionContext) -> Optional[Executer]:
        raise Interrupted()


@dataclass(frozen=True)
class Edit(Executer):
    """Opens the request editor and sends what the user wrote.

    The sent request is printed, marker included, by the PrintMessage that
    follows Send.

    Attributes:
        content: Text the editor starts with
    """

    content: str = ''

    async def execute(self, ctx: ExecutionContext) -> Optional[Executer]:
        request = await ctx.request_editor.edit(ctx.input, self.content)
        if not request:
            return None
        return Send(request)


@dataclass(frozen=True)
class CmdEdit(Executer):
    """Opens the command editor and runs the command the user typed.

    A line that fails to parse is reported on the output and ends the chain
    quietly; editor errors propagate.
    """

    async def execute(self, ctx: ExecutionContext) -> Optional[Executer]:
        from macros.parser import CommandFactory

        raw = await ctx.cmd_editor.edit(ctx.input, '')
        try:
            return CommandFactory(ctx.macro).create(raw)
        except ParseError as e:
            _print_styled(ctx, str(e), 'red')
            return None


@dataclass(frozen=True)
class Send(Executer):
    """Sends a request over the connection.

    Attributes:
        request: Raw request text
    """

    request: str

    async def execute(self, ctx: ExecutionContext) -> Optional[Executer]:
        try:
            msg = await ctx.connection.send(self.request)
        except TransportError as e:
            raise SendError(f'fail to send request: {e}') from e
        return PrintMessage(msg)


@dataclass(frozen=True)
class WaitForResponse(Executer):
    """Waits for the next response.

    A timeout only abandons the wait: a response that arrives later stays
    in the stream for the next reader.

    Attributes:
        timeout: Seconds to wait; 0 waits without limit
    """

    timeout: float = 0

    async def execute(self, ctx: ExecutionContext) -> Optional[Executer]:
        stream = ctx.connection.messages
        if self.timeout == 0:
            msg = await stream.get()
        else:
            try:
                msg = await asyncio.wait_for(stream.get(), self.timeout)
            except asyncio.TimeoutError:
                raise ResponseTimeoutError('timeout') from None

        if msg is None:
            raise ConnectionClosedError('connection closed')
        return PrintMessage(msg)


@dataclass(frozen=True)
class PrintMessage(Executer):
    """Prints a message, and appends it to the output file if there is one.

    Attributes:
        msg: Message to print
    """

    msg: Message

    async def execute(self, ctx: ExecutionContext) -> Optional[Executer]:
        msg = self.msg
        try:
            text = ctx.formatter.format_message(msg)
        except FormatError as e:
            raise CommandError(f'fail to format message: {e}, data: {msg.data!r}') from e

        if msg.type == MessageType.REQUEST:
            _print_styled(ctx, REQUEST_MARKER, 'green')
        else:
            _print_styled(ctx, RESPONSE_MARKER, 'red')
        ctx.output.write(f'{text}\n')

        if ctx.output_file is not None:
            try:
                file_text = ctx.formatter.format_for_file(msg)
            except FormatError as e:
                raise CommandError(f'fail to format message for output file: {e}') from e
            ctx.output_file.write(f'{file_text}\n')

        return None


@dataclass(frozen=True)
class Sequence(Executer):
    """Runs each sub-command's full chain in order.

    Attributes:
        commands: Sub-commands in execution order
    """

    commands: Tuple[Executer, ...]

    async def execute(self, ctx: ExecutionContext) -> Optional[Executer]:
        for command in self.commands:
            await run_chain(command, ctx)
        return None


@dataclass(frozen=True)
class Repeat(Executer):
    """Runs a sub-command's full chain a fixed number of times.

    Attributes:
        times: Number of runs, positive
        command: Sub-command to run
    """

    times: int
    command: Executer

    async def execute(self, ctx: ExecutionContext) -> Optional[Executer]:
        for i in range(self.times):
            logger.debug('repeat %d/%d', i + 1, self.times)
            await run_chain(self.command, ctx)
        return None


@dataclass(frozen=True)
class Sleep(Executer):
    """Pauses the chain.

    Attributes:
        duration: Seconds to sleep
    """

    duration: float

    async def execute(self, ctx: ExecutionContext) -> Optional[Executer]:
        await asyncio.sleep(self.duration)
        return None
