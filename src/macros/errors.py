"""Exceptions raised while parsing and executing commands and macros."""
from __future__ import annotations


class CommandError(Exception):
    """Base class for errors that abort a command chain."""


class ParseError(CommandError, ValueError):
    """A raw command line could not be turned into a command."""


class EmptyCommandError(ParseError):
    def __init__(self) -> None:
        super().__init__('empty command')


class EmptyRequestError(ParseError):
    def __init__(self) -> None:
        super().__init__('empty request')


class InvalidTimeoutError(ParseError):
    def __init__(self, value: str) -> None:
        super().__init__(f'invalid timeout: {value}')
        self.value = value


class UnknownCommandError(ParseError):
    def __init__(self, name: str) -> None:
        super().__init__(f'unknown command: {name}')
        self.name = name


class MacroArgumentError(ParseError):
    """A macro step refers to an argument that was not supplied."""


class RecursiveMacroError(ParseError):
    def __init__(self, name: str) -> None:
        super().__init__(f'recursive macro: {name}')
        self.name = name


class SendError(CommandError):
    pass


class ConnectionClosedError(CommandError):
    pass


class ResponseTimeoutError(CommandError, TimeoutError):
    pass


class Interrupted(CommandError):
    """Signals the driver to stop; not a failure."""

    def __init__(self, message: str = 'interrupted') -> None:
        super().__init__(message)


class EditorAborted(Interrupted):
    """The user left an editor with Ctrl-C or Ctrl-D."""


class MacroError(ValueError):
    """Base class for macro definition and loading errors."""


class DuplicateMacroError(MacroError):
    def __init__(self, name: str) -> None:
        super().__init__(f'duplicate macro: {name}')
        self.name = name


class EmptyMacroError(MacroError):
    def __init__(self, name: str) -> None:
        super().__init__(f'empty macro: {name}')
        self.name = name


class MacroVersionError(MacroError):
    def __init__(self, version: object) -> None:
        super().__init__(f'unsupported macro version: {version}')
        self.version = version


class MacroLoadError(MacroError):
    pass
