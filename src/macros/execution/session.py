"""Command session management.

This module provides the CommandSession class that drives command chains:
startup commands (from the command line or an input file) run first, then,
in interactive mode, the command editor is opened again and again until the
user exits.

Responses that arrive while the user is idle are printed before the next
prompt, so nothing the server sends is hidden behind the editor.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from macros.errors import Interrupted
from macros.execution.commands import CmdEdit, Executer, PrintMessage
from macros.execution.context import ExecutionContext
from macros.execution.runner_core import run_chain
from macros.parser import CommandFactory

logger = logging.getLogger(__name__)


class CommandSession:
    """Drives command chains against one execution context.

    Attributes:
        ctx: Execution context shared by every command
        factory: Parser for startup commands
    """

    def __init__(self, ctx: ExecutionContext, factory: Optional[CommandFactory] = None) -> None:
        self.ctx = ctx
        self.factory = factory if factory is not None else CommandFactory(ctx.macro)
        self.commands_executed = 0

    async def execute(self, command: Executer) -> None:
        """Run one chain to completion."""
        await run_chain(command, self.ctx)
        self.commands_executed += 1

    async def run_command(self, raw: str) -> None:
        """Parse and run one command line.

        Raises:
            ParseError: If the line does not parse.
            CommandError: If the chain fails.
        """
        await self.execute(self.factory.create(raw))

    async def run(self, commands: Iterable[str] = (), interactive: bool = True) -> None:
        """Run startup commands, then the interactive prompt.

        Returns normally when a command raises Interrupted (``exit``, or
        Ctrl-D in an editor). Every other error propagates.

        Args:
            commands: Command lines to run first, in order.
            interactive: Open the command editor after the startup commands.
        """
        try:
            for raw in commands:
                logger.debug('startup command: %s', raw)
                await self.run_command(raw)

            while interactive:
                await self.print_pending()
                await self.execute(CmdEdit())
        except Interrupted as e:
            logger.debug('session ended: %s', e)

    async def print_pending(self) -> int:
        """Print responses that arrived since the last command.

        Returns:
            How many messages were printed.
        """
        printed = 0
        while True:
            msg = await self.ctx.connection.messages.poll()
            if msg is None:
                return printed
            await run_chain(PrintMessage(msg), self.ctx)
            printed += 1
