"""Base editor interface for interactive line input.

Commands that need text from the user (request bodies, command lines) go
through an Editor so the command engine never touches the terminal itself.
Concrete implementations should inherit from BaseEditor.

Example:
    Implementing a scripted editor for tests::

        class ScriptedEditor(BaseEditor):
            def __init__(self, lines):
                self.lines = list(lines)

            async def edit(self, keys, initial=''):
                return self.lines.pop(0)
"""
from __future__ import annotations

import abc
from typing import Any


class BaseEditor(abc.ABC):
    """Abstract line editor."""

    @abc.abstractmethod
    async def edit(self, keys: Any, initial: str = '') -> str:
        """Let the user edit a line and return the result.

        Args:
            keys: Key input source, or None for the terminal.
            initial: Text the buffer starts with.

        Returns:
            The accepted text, possibly empty.

        Raises:
            EditorAborted: If the user abandons the edit.
        """

    def close(self) -> None:
        """Release editor resources. The default does nothing."""
