"""Core chain execution logic.

A command chain starts from one Executer; each execute() call returns the
next step until one returns None. run_chain drives that loop and is shared
by the session driver and by compound commands (Sequence, Repeat), which is
what guarantees a sub-chain fully finishes before the next one starts.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from macros.execution.commands import Executer
    from macros.execution.context import ExecutionContext

logger = logging.getLogger(__name__)


async def run_chain(command: Optional['Executer'], ctx: 'ExecutionContext') -> None:
    """Execute command and every command it leads to.

    Args:
        command: First step of the chain; None is an empty chain.
        ctx: Execution context passed to each step.

    Raises:
        CommandError: Whatever the failing step raised; the rest of the
            chain is abandoned.
    """
    while command is not None:
        logger.debug('executing %s', type(command).__name__)
        command = await command.execute(ctx)
