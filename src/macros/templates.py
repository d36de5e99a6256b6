"""Macro step templates with positional placeholders.

A macro step is a raw command line that may contain ``{0}``, ``{1}``, ...
placeholders. Expanding the template replaces each placeholder with the
argument at that position. Other braces are left alone, so JSON payloads
can be written in macros without escaping.

Example:
    Expand a template::

        templates = Templates(['send {"user": "{0}"}', 'wait 5'])
        templates.expand(['alice'])
        # ['send {"user": "alice"}', 'wait 5']
"""
from __future__ import annotations

import re
from typing import List, Sequence, Tuple

from macros.errors import MacroArgumentError, MacroError

PLACEHOLDER_RE = re.compile(r"\{(?P<index>\d+)\}")


class Templates:
    """Ordered raw command templates of one macro."""

    def __init__(self, steps: Sequence[str]) -> None:
        """Validate and store the steps.

        Raises:
            MacroError: If there are no steps or a step is not a string.
        """
        if not steps:
            raise MacroError('macro has no commands')
        for step in steps:
            if not isinstance(step, str):
                raise MacroError(f'macro command must be a string, got {step!r}')
        self.steps: Tuple[str, ...] = tuple(steps)

    def expand(self, args: Sequence[str]) -> List[str]:
        """Return the steps with placeholders replaced by args.

        Raises:
            MacroArgumentError: If a step refers to a missing argument.
        """
        def substitute(match: re.Match) -> str:
            index = int(match.group('index'))
            if index >= len(args):
                raise MacroArgumentError(
                    f'not enough arguments for macro: expected at least {index + 1}, got {len(args)}'
                )
            return args[index]

        return [PLACEHOLDER_RE.sub(substitute, step) for step in self.steps]

    def __len__(self) -> int:
        return len(self.steps)
