"""prompt_toolkit based line editor.

Wraps a PromptSession so the request and command editors get line editing,
optional persistent history, and Ctrl-C/Ctrl-D handling. The session is
created lazily and rebuilt when a different key input source is passed in.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory

from editor.base import BaseEditor
from macros.errors import EditorAborted

logger = logging.getLogger(__name__)


class PromptEditor(BaseEditor):
    """Line editor backed by a prompt_toolkit PromptSession.

    Attributes:
        prompt: Text shown before the input buffer
        history_file: File the history is persisted to, if any
    """

    def __init__(
        self,
        prompt: str = '',
        history_file: Optional[Path] = None,
        multiline: bool = False,
        output: Any = None
    ) -> None:
        """Initialize the editor.

        Args:
            prompt: Prompt text, for example ':' for the command editor.
            history_file: Where to keep history between runs. In-memory
                history is used when None.
            multiline: Accept newlines in the buffer (Alt+Enter submits).
            output: prompt_toolkit Output override, mainly for tests.
        """
        self.prompt = prompt
        self.history_file = history_file
        self.multiline = multiline
        self._output = output
        self._history = None
        self._session: Optional[PromptSession] = None
        self._keys: Any = None

    async def edit(self, keys: Any, initial: str = '') -> str:
        session = self._session_for(keys)
        try:
            return await session.prompt_async(self.prompt, default=initial)
        except (EOFError, KeyboardInterrupt) as e:
            raise EditorAborted() from e

    def close(self) -> None:
        self._session = None
        self._keys = None

    def _session_for(self, keys: Any) -> PromptSession:
        if self._session is not None and keys is self._keys:
            return self._session

        if self._history is None:
            self._history = self._create_history()

        self._session = PromptSession(
            history=self._history,
            multiline=self.multiline,
            input=keys,
            output=self._output,
        )
        self._keys = keys
        return self._session

    def _create_history(self):
        if self.history_file is None:
            return InMemoryHistory()
        try:
            self.history_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning('Cannot create history directory %s: %s', self.history_file.parent, e)
            return InMemoryHistory()
        return FileHistory(str(self.history_file))
