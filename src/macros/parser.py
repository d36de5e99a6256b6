"""Command line parser.

This module turns one line of raw text into an Executer. The first run of
whitespace separates the command keyword from the rest of the line; the rest
is kept as a single argument so payloads keep their embedded spaces.

Supported commands:
    - ``exit``: end the session
    - ``edit [content]``: open the request editor, optionally pre-filled
    - ``editcmd``: open the command editor
    - ``send <request>``: send a request
    - ``print <Request|Response> <message>``: print a message as if it was
      sent or received
    - ``wait [seconds]``: wait for a response, without limit by default
    - ``sleep <seconds>``: pause
    - ``repeat <times> <command>``: run a command several times
    - anything else: a macro from the repository

Example:
    Parse commands::

        factory = CommandFactory(macro_repo)
        factory.create('send {"ping": 1}')   # Send('{"ping": 1}')
        factory.create('repeat 3 wait 5')    # Repeat(3, WaitForResponse(5.0))
        factory.create('login alice')        # the 'login' macro
"""
from __future__ import annotations

import math
from typing import TYPE_CHECKING, List, Optional

from connection.base import Message, MessageType
from macros.errors import (
    EmptyCommandError,
    EmptyRequestError,
    InvalidTimeoutError,
    ParseError,
    UnknownCommandError,
)
from macros.execution.commands import (
    CmdEdit,
    Edit,
    Executer,
    Exit,
    PrintMessage,
    Repeat,
    Send,
    Sleep,
    WaitForResponse,
)

if TYPE_CHECKING:
    from macros.repository import MacroRepo

MESSAGE_TYPES = {
    'Request': MessageType.REQUEST,
    'Response': MessageType.RESPONSE,
}


def split_command(raw: str) -> List[str]:
    """Split raw into at most two parts: keyword and remainder."""
    return raw.split(None, 1)


def _parse_seconds(value: str) -> Optional[float]:
    try:
        seconds = float(value)
    except ValueError:
        return None
    if not math.isfinite(seconds) or seconds < 0:
        return None
    return seconds


class CommandFactory:
    """Creates commands from raw text.

    Attributes:
        macro: Repository consulted for keywords that are not built in
    """

    def __init__(self, macro: Optional['MacroRepo'] = None) -> None:
        self.macro = macro

    def create(self, raw: str) -> Executer:
        """Parse one command line.

        Args:
            raw: Command text as typed by the user or read from a macro.

        Returns:
            The command to execute.

        Raises:
            ParseError: If the line is empty, malformed, or names an
                unknown command.
        """
        parts = split_command(raw)
        if not parts:
            raise EmptyCommandError()

        cmd = parts[0]
        rest = parts[1] if len(parts) > 1 else ''

        if cmd == 'exit':
            return Exit()
        elif cmd == 'edit':
            return Edit(rest)
        elif cmd == 'editcmd':
            return CmdEdit()
        elif cmd == 'send':
            if not rest:
                raise EmptyRequestError()
            return Send(rest)
        elif cmd == 'print':
            return self._create_print(raw, rest)
        elif cmd == 'wait':
            return self._create_wait(rest)
        elif cmd == 'sleep':
            return self._create_sleep(raw, rest)
        elif cmd == 'repeat':
            return self._create_repeat(raw, rest)

        if self.macro is None:
            raise UnknownCommandError(cmd)
        return self.macro.get(cmd, rest)

    def _create_print(self, raw: str, rest: str) -> Executer:
        args = split_command(rest)
        if len(args) < 2:
            raise ParseError(f'not enough arguments for print command: {raw}')

        msg_type = MESSAGE_TYPES.get(args[0])
        if msg_type is None:
            raise ParseError(f'invalid message type: {args[0]}')

        return PrintMessage(Message(type=msg_type, data=args[1]))

    def _create_wait(self, rest: str) -> Executer:
        if not rest:
            return WaitForResponse()

        timeout = _parse_seconds(rest.strip())
        if timeout is None:
            raise InvalidTimeoutError(rest)
        return WaitForResponse(timeout)

    def _create_sleep(self, raw: str, rest: str) -> Executer:
        if not rest:
            raise ParseError(f'not enough arguments for sleep command: {raw}')

        duration = _parse_seconds(rest.strip())
        if duration is None:
            raise ParseError(f'invalid sleep duration: {rest}')
        return Sleep(duration)

    def _create_repeat(self, raw: str, rest: str) -> Executer:
        args = split_command(rest)
        if len(args) < 2:
            raise ParseError(f'not enough arguments for repeat command: {raw}')

        try:
            times = int(args[0])
        except ValueError:
            times = 0
        if times <= 0:
            raise ParseError(f'invalid repeat times: {args[0]}')

        return Repeat(times, self.create(args[1]))
