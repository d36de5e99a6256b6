"""Execution context handed to every command.

The context bundles the collaborators commands need: where to write, how to
format, which connection to talk to, which editors to open and which macros
exist. The command engine only reads it; the CLI (or a test) builds it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, TextIO

if TYPE_CHECKING:
    from connection.connection import Connection
    from editor.base import BaseEditor
    from macros.repository import MacroRepo
    from output.formatter import Formatter


@dataclass
class ExecutionContext:
    """Collaborators available to commands during execution.

    Attributes:
        output: Text sink for everything shown to the user
        formatter: Turns messages into display and file text
        connection: Connection requests are sent over
        request_editor: Editor used by the ``edit`` command
        cmd_editor: Editor used by the ``editcmd`` command
        input: Key input source for the editors, None for the terminal
        output_file: Optional sink that every printed message is appended to
        macro: Macro repository, None when no macros are loaded
    """

    output: TextIO
    formatter: 'Formatter'
    connection: 'Connection'
    request_editor: 'BaseEditor'
    cmd_editor: 'BaseEditor'
    input: Any = None
    output_file: Optional[TextIO] = None
    macro: Optional['MacroRepo'] = None
