"""macros package exposing the command parser, macro repository and session driver."""

from .parser import CommandFactory
from .repository import MacroRepo, load_from_file, load_macro_for_domain
from .execution.session import CommandSession

__all__ = [
    'CommandFactory',
    'CommandSession',
    'MacroRepo',
    'load_from_file',
    'load_macro_for_domain',
]
