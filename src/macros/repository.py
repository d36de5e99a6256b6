"""Macro repository and YAML macro loading.

A macro file describes named command sequences and the domains they apply
to::

    version: "1"
    source: example api
    domains:
      - example.com
    macro:
      ping:
        - 'send {"type": "ping"}'
        - wait 5
      login:
        - 'send {"type": "login", "user": "{0}"}'
        - wait

When the client connects to ``api.example.com`` every file whose domain list
contains a suffix of that hostname is loaded, and all of them are merged into
one repository. A macro name defined in two eligible files aborts the load.

Example:
    Load macros for a host::

        repo = load_macro_for_domain(Path('~/.wsshell/macro').expanduser(), 'api.example.com')
        if repo is not None:
            command = repo.get('login', 'alice')
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

from macros.errors import (
    DuplicateMacroError,
    EmptyMacroError,
    MacroError,
    MacroLoadError,
    MacroVersionError,
    RecursiveMacroError,
    UnknownCommandError,
)
from macros.execution.commands import Executer, Sequence as CommandSequence
from macros.templates import Templates

logger = logging.getLogger(__name__)

SUPPORTED_VERSION = '1'
MACRO_FILE_SUFFIXES = ('.yaml', '.yml')


class MacroRepo:
    """Named macro templates restricted to a set of domain suffixes.

    The repository is filled while loading and only read afterwards.

    Attributes:
        domains: Hostname suffixes the macros apply to
        source: Free-form label from the macro file
    """

    def __init__(self, domains: Sequence[str] = (), source: str = '') -> None:
        self.domains: List[str] = list(domains)
        self.source = source
        self._macro: Dict[str, Templates] = {}
        # names currently being expanded, innermost last
        self._expanding: List[str] = []

    def add_commands(self, name: str, raw_commands: Sequence[str]) -> None:
        """Register a macro.

        Args:
            name: Macro name, used as the command keyword.
            raw_commands: Command lines, optionally with ``{N}`` placeholders.

        Raises:
            DuplicateMacroError: If the name is already registered.
            EmptyMacroError: If raw_commands is empty.
            MacroError: If a command is not a string.
        """
        if name in self._macro:
            raise DuplicateMacroError(name)
        if not raw_commands:
            raise EmptyMacroError(name)

        self._macro[name] = Templates(raw_commands)

    def merge(self, other: MacroRepo) -> None:
        """Add every macro of other; on a name clash nothing is added.

        Raises:
            DuplicateMacroError: For the first clashing name.
        """
        for name in other._macro:
            if name in self._macro:
                raise DuplicateMacroError(name)
        self._macro.update(other._macro)

    def get(self, name: str, arg_string: str = '') -> Executer:
        """Expand a macro into a command.

        Each step is parsed as a full command line, so steps may call other
        macros. A single-step macro yields that step's command directly.

        Args:
            name: Macro name.
            arg_string: Whitespace separated positional arguments.

        Returns:
            The expanded command.

        Raises:
            UnknownCommandError: If no macro has that name.
            RecursiveMacroError: If the macro expands into itself, directly
                or through other macros.
            ParseError: If an expanded step does not parse.
        """
        from macros.parser import CommandFactory

        templates = self._macro.get(name)
        if templates is None:
            raise UnknownCommandError(name)
        if name in self._expanding:
            raise RecursiveMacroError(' -> '.join(self._expanding + [name]))

        factory = CommandFactory(self)
        self._expanding.append(name)
        try:
            commands = [factory.create(raw) for raw in templates.expand(arg_string.split())]
        finally:
            self._expanding.pop()
        if len(commands) == 1:
            return commands[0]
        return CommandSequence(tuple(commands))

    def names(self) -> List[str]:
        return sorted(self._macro)

    def matches_domain(self, domain: str) -> bool:
        """Check whether the macros apply to domain (a hostname)."""
        if not domain:
            return False
        return any(suffix and domain.endswith(suffix) for suffix in self.domains)

    def __contains__(self, name: str) -> bool:
        return name in self._macro

    def __len__(self) -> int:
        return len(self._macro)


def parse_config(text: str) -> MacroRepo:
    """Build a repository from the text of a macro file.

    The version is checked before any macro is registered.

    Raises:
        MacroVersionError: If version is not "1".
        MacroLoadError: If the document is not valid YAML or has the wrong shape.
        MacroError: If a macro is empty, duplicated or malformed.
    """
    try:
        cfg = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise MacroLoadError(f'invalid macro file: {e}') from e

    if not isinstance(cfg, dict):
        raise MacroLoadError('macro file must be a mapping')

    version = cfg.get('version')
    if version is None or str(version) != SUPPORTED_VERSION:
        raise MacroVersionError(version)

    domains = cfg.get('domains') or []
    macros = cfg.get('macro') or {}
    if not isinstance(domains, list):
        raise MacroLoadError('domains must be a list')
    if not isinstance(macros, dict):
        raise MacroLoadError('macro must be a mapping of names to command lists')

    repo = MacroRepo(domains=[str(d) for d in domains], source=str(cfg.get('source') or ''))
    for name, raw_commands in macros.items():
        if raw_commands is not None and not isinstance(raw_commands, list):
            raise MacroLoadError(f'macro {name} must be a list of commands')
        try:
            repo.add_commands(str(name), raw_commands or [])
        except MacroError as e:
            raise MacroLoadError(f'fail to add macro: {e}') from e

    return repo


def load_from_file(path: Union[str, Path]) -> MacroRepo:
    """Load one macro file.

    Raises:
        MacroLoadError: If the file cannot be read.
        MacroError: If its content is invalid.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding='utf-8')
    except OSError as e:
        raise MacroLoadError(f'fail to open macro file {path}: {e}') from e

    return parse_config(text)


def load_macro_for_domain(macro_dir: Union[str, Path], domain: str) -> Optional[MacroRepo]:
    """Load and merge every macro file in macro_dir that applies to domain.

    Files are read in name order; directories and files without a
    .yaml/.yml suffix are skipped.

    Args:
        macro_dir: Directory holding macro files.
        domain: Hostname of the connection target.

    Returns:
        The merged repository, or None if the directory does not exist or no
        file applies to the domain.

    Raises:
        MacroLoadError: If the directory cannot be listed or two eligible
            files define the same macro.
        MacroError: If an eligible or ineligible file is invalid.
    """
    macro_dir = Path(macro_dir)
    if not macro_dir.is_dir():
        logger.debug('Macro directory %s does not exist', macro_dir)
        return None

    try:
        files = sorted(macro_dir.iterdir())
    except OSError as e:
        raise MacroLoadError(f'fail to read macro directory {macro_dir}: {e}') from e

    merged: Optional[MacroRepo] = None
    for path in files:
        if path.is_dir() or path.suffix not in MACRO_FILE_SUFFIXES:
            continue

        file_macro = load_from_file(path)
        if not file_macro.matches_domain(domain):
            logger.debug('Skipping %s: no domain matches %s', path.name, domain)
            continue

        if merged is None:
            merged = MacroRepo(domains=[domain])
        try:
            merged.merge(file_macro)
        except DuplicateMacroError as e:
            raise MacroLoadError(f'fail to load macro from file {path.name}: {e}') from e

        logger.info('Loaded %d macro(s) from %s', len(file_macro), path.name)

    return merged
