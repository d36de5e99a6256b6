"""Message formatting for the terminal and for output files.

Payloads that parse as a JSON object or array are re-serialized: indented with
sorted keys for the screen, compact with sorted keys for files. Anything else
(plain text, JSON scalars, broken JSON) is passed through unchanged.

Example:
    Format a response::

        formatter = Formatter()
        msg = Message(MessageType.RESPONSE, '{"status": 200, "body": "ok"}')
        formatter.format_message(msg)
        # '{\\n  "body": "ok",\\n  "status": 200\\n}'
        formatter.format_for_file(msg)
        # '{"body":"ok","status":200}'
"""
from __future__ import annotations

import json
from typing import Any, Optional

from connection.base import Message, MessageType

_KNOWN_TYPES = (MessageType.REQUEST, MessageType.RESPONSE)


class FormatError(ValueError):
    """Raised when a message cannot be formatted."""


class Formatter:
    """Formats messages for display and for file output."""

    def format_message(self, msg: Message) -> str:
        """Return human-oriented text for msg."""
        self._check_type(msg)
        data = self._parse_structured(msg.data)
        if data is None:
            return msg.data
        return json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False)

    def format_for_file(self, msg: Message) -> str:
        """Return compact, stable text for msg."""
        self._check_type(msg)
        data = self._parse_structured(msg.data)
        if data is None:
            return msg.data
        return json.dumps(data, separators=(',', ':'), sort_keys=True, ensure_ascii=False)

    @staticmethod
    def _check_type(msg: Message) -> None:
        if msg.type not in _KNOWN_TYPES:
            raise FormatError(f'unknown message type: {msg.type}')

    @staticmethod
    def _parse_structured(data: str) -> Optional[Any]:
        try:
            parsed = json.loads(data)
        except ValueError:
            return None
        if isinstance(parsed, (dict, list)):
            return parsed
        return None
