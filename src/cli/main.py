"""Command-line interface for interactive WebSocket sessions.

This module wires the collaborators together: it dials the URL, loads the
macros that apply to the target host, builds the execution context and runs
a CommandSession until the user exits or a command fails.

Modes:
    - Request mode (``-r``): send one request, wait for one response, exit
    - Script mode (``-i``): run the commands from a file, exit
    - Interactive mode (default): prompt for commands until ``exit`` or Ctrl-D

Example:
    Interactive session::

        wsshell wss://echo.example.com/ws

    One request with a five second timeout, appending messages to a file::

        wsshell wss://echo.example.com/ws -r '{"ping": 1}' -t 5 -o log.jsonl

Note:
    Macros are read from ``~/.wsshell/macro`` unless ``--macro-dir`` is given.
    Only files whose ``domains`` list matches the target host are used.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, TextIO
from urllib.parse import urlparse

from connection.base import TransportError
from connection.factory import create_connection
from editor.prompt import PromptEditor
from macros.errors import CommandError, MacroError
from macros.execution.context import ExecutionContext
from macros.execution.session import CommandSession
from macros.parser import CommandFactory
from macros.repository import load_macro_for_domain
from output.formatter import Formatter

logger = logging.getLogger(__name__)

HOME_DIR = Path('~/.wsshell').expanduser()
DEFAULT_MACRO_DIR = HOME_DIR / 'macro'
REQUEST_HISTORY_FILE = HOME_DIR / 'history'
COMMAND_HISTORY_FILE = HOME_DIR / 'cmd_history'

LOG_FORMAT = '[%(levelname)s] %(name)s: %(message)s'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='wsshell',
        description='Interactive command-line client for WebSocket servers',
        epilog='Type "exit" or press Ctrl+D to leave an interactive session'
    )
    parser.add_argument('url', help='WebSocket URL (e.g., wss://example.com/ws)')
    parser.add_argument(
        '-r', '--request',
        help='Send this request, wait for one response and exit'
    )
    parser.add_argument(
        '-t', '--timeout', type=float, default=0,
        help='Seconds to wait for the response to --request (default: no limit)'
    )
    parser.add_argument(
        '-i', '--input', type=Path,
        help='Run the commands from this file (one per line) and exit'
    )
    parser.add_argument(
        '-o', '--output', type=Path,
        help='Append every sent and received message to this file'
    )
    parser.add_argument(
        '-H', '--header', action='append', default=[],
        help='Handshake header as "Name: value" (repeatable)'
    )
    parser.add_argument(
        '-k', '--insecure', action='store_true',
        help='Skip TLS certificate verification'
    )
    parser.add_argument(
        '--macro-dir', type=Path, default=DEFAULT_MACRO_DIR,
        help=f'Directory with macro files (default: {DEFAULT_MACRO_DIR})'
    )
    parser.add_argument(
        '--list-macros', action='store_true',
        help='Print the macros available for the URL and exit'
    )
    parser.add_argument(
        '-v', '--verbose', action='store_true',
        help='Enable debug logging'
    )
    return parser


def read_command_file(path: Path) -> List[str]:
    """Read command lines, skipping blank lines and ``#`` comments."""
    commands = []
    for line in path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        commands.append(line)
    return commands


def startup_commands(args: argparse.Namespace) -> List[str]:
    """Build the command lines to run before (or instead of) the prompt."""
    if args.request:
        if args.timeout < 0:
            raise ValueError(f'invalid timeout: {args.timeout}')
        commands = [f'send {args.request}']
        commands.append(f'wait {args.timeout:g}' if args.timeout else 'wait')
        return commands
    if args.input:
        return read_command_file(args.input)
    return []


async def run(args: argparse.Namespace, output: Optional[TextIO] = None) -> int:
    """Run a session for parsed arguments and return the exit status."""
    if output is None:
        output = sys.stdout
    domain = _hostname(args.url)
    macro = load_macro_for_domain(args.macro_dir, domain)

    if args.list_macros:
        for name in (macro.names() if macro else []):
            output.write(f'{name}\n')
        return 0

    commands = startup_commands(args)
    interactive = not args.request and not args.input

    connection = await create_connection(
        args.url,
        headers=args.header,
        skip_ssl_verification=args.insecure,
    )

    output_file: Optional[TextIO] = None
    request_editor = PromptEditor(prompt='', history_file=REQUEST_HISTORY_FILE, multiline=True)
    cmd_editor = PromptEditor(prompt=':', history_file=COMMAND_HISTORY_FILE)
    status = 0
    try:
        if args.output:
            output_file = args.output.open('a', encoding='utf-8')

        ctx = ExecutionContext(
            output=output,
            formatter=Formatter(),
            connection=connection,
            request_editor=request_editor,
            cmd_editor=cmd_editor,
            output_file=output_file,
            macro=macro,
        )
        session = CommandSession(ctx, CommandFactory(macro))
        await session.run(commands, interactive=interactive)
    finally:
        request_editor.close()
        cmd_editor.close()
        await connection.close()
        if output_file is not None:
            try:
                output_file.close()
            except OSError as e:
                logger.error('fail to close output file %s: %s', args.output, e)
                status = 1

    return status


def _hostname(url: str) -> str:
    return urlparse(url).hostname or ''


async def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point.

    Parses arguments, configures logging and runs the session. Errors that
    end a session are logged and turned into exit status 1; leaving with
    ``exit`` or Ctrl-D is a clean exit.
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT
    )

    try:
        return await run(args)
    except (CommandError, MacroError, TransportError, ValueError, OSError) as e:
        logger.error('%s', e)
        return 1


def run_cli() -> None:
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print('\nInterrupted')
        sys.exit(130)


if __name__ == '__main__':
    run_cli()
