"""Command execution package.

This package separates command implementation, chain execution and session
management.

Components:
- commands: Executer and the command implementations
- context: ExecutionContext handed to every command
- runner_core: run_chain, the loop that follows a command chain
- session: CommandSession, the startup and interactive driver

The session module is imported directly (``macros.execution.session``)
because it depends on the parser, which depends on this package.
"""
from __future__ import annotations

from .commands import (
    CmdEdit,
    Edit,
    Executer,
    Exit,
    PrintMessage,
    Repeat,
    Send,
    Sequence,
    Sleep,
    WaitForResponse,
)
from .context import ExecutionContext
from .runner_core import run_chain

__all__ = [
    'CmdEdit',
    'Edit',
    'Executer',
    'ExecutionContext',
    'Exit',
    'PrintMessage',
    'Repeat',
    'Send',
    'Sequence',
    'Sleep',
    'WaitForResponse',
    'run_chain',
]
