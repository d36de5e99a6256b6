"""Tests for macro templates, the macro repository and macro file loading."""

import pytest

from macros.errors import (
    DuplicateMacroError,
    EmptyMacroError,
    MacroArgumentError,
    MacroLoadError,
    MacroVersionError,
    RecursiveMacroError,
    UnknownCommandError,
)
from macros.execution.commands import Repeat, Send, Sequence, WaitForResponse
from macros.parser import CommandFactory
from macros.repository import MacroRepo, load_from_file, load_macro_for_domain, parse_config
from macros.templates import Templates

EXAMPLE_MACROS = """
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
"""


def test_template_substitutes_positional_arguments():
    templates = Templates(['send {0} {1} {0}', 'wait'])

    assert templates.expand(['a', 'b']) == ['send a b a', 'wait']


def test_template_leaves_other_braces_alone():
    templates = Templates(['send {"user": "{0}", "tags": {}}'])

    assert templates.expand(['bob']) == ['send {"user": "bob", "tags": {}}']


def test_template_missing_argument():
    with pytest.raises(MacroArgumentError, match='not enough arguments'):
        Templates(['send {1}']).expand(['only-one'])


def test_add_commands_rejects_duplicates_and_empty():
    repo = MacroRepo()
    repo.add_commands('ping', ['send ping'])

    with pytest.raises(DuplicateMacroError, match='duplicate macro: ping'):
        repo.add_commands('ping', ['send other'])
    with pytest.raises(EmptyMacroError):
        repo.add_commands('nothing', [])


def test_get_expands_into_sequence():
    repo = MacroRepo()
    repo.add_commands('greet', ['send hello {0}', 'wait'])

    command = repo.get('greet', 'world')

    assert isinstance(command, Sequence)
    assert command.commands[0] == Send('hello world')
    assert command.commands[1] == WaitForResponse()


def test_single_step_macro_is_not_wrapped():
    repo = MacroRepo()
    repo.add_commands('hello', ['send hello'])

    assert repo.get('hello') == Send('hello')


def test_expansion_is_repeatable():
    repo = MacroRepo()
    repo.add_commands('greet', ['send hello {0}', 'repeat 2 wait 1'])

    first = repo.get('greet', 'world')
    second = repo.get('greet', 'world')

    assert first == second
    assert first == Sequence((Send('hello world'), Repeat(2, WaitForResponse(1.0))))


def test_macros_can_call_macros():
    repo = MacroRepo()
    repo.add_commands('greet', ['send hello {0}', 'wait'])
    repo.add_commands('greet_twice', ['greet {0}', 'greet {1}'])

    command = CommandFactory(repo).create('greet_twice ann bob')

    assert command == Sequence((
        Sequence((Send('hello ann'), WaitForResponse())),
        Sequence((Send('hello bob'), WaitForResponse())),
    ))


def test_macro_calling_itself_is_rejected():
    repo = MacroRepo()
    repo.add_commands('loop', ['send x', 'loop'])

    with pytest.raises(RecursiveMacroError, match='recursive macro: loop'):
        CommandFactory(repo).create('loop')


def test_mutually_recursive_macros_are_rejected():
    repo = MacroRepo()
    repo.add_commands('ping', ['send ping', 'pong'])
    repo.add_commands('pong', ['repeat 2 ping'])

    with pytest.raises(RecursiveMacroError, match='ping -> pong -> ping'):
        repo.get('ping')


def test_failed_expansion_does_not_poison_later_ones():
    repo = MacroRepo()
    repo.add_commands('loop', ['loop'])
    repo.add_commands('hello', ['send hello'])

    with pytest.raises(RecursiveMacroError):
        repo.get('loop')

    assert repo.get('hello') == Send('hello')
    with pytest.raises(RecursiveMacroError, match='recursive macro: loop -> loop$'):
        repo.get('loop')


def test_get_unknown_macro():
    with pytest.raises(UnknownCommandError, match='unknown command: missing'):
        MacroRepo().get('missing', '')


def test_merge_conflict_leaves_repository_unchanged():
    target = MacroRepo()
    target.add_commands('shared', ['send a'])
    other = MacroRepo()
    other.add_commands('extra', ['send b'])
    other.add_commands('shared', ['send c'])

    with pytest.raises(DuplicateMacroError):
        target.merge(other)

    assert target.names() == ['shared']
    assert target.get('shared') == Send('a')


def test_matches_domain():
    repo = MacroRepo(domains=['example.com', ''])

    assert repo.matches_domain('api.example.com')
    assert repo.matches_domain('example.com')
    assert not repo.matches_domain('example.org')
    assert not repo.matches_domain('')
    assert not MacroRepo().matches_domain('example.com')


def test_parse_config():
    repo = parse_config(EXAMPLE_MACROS)

    assert repo.names() == ['login', 'ping']
    assert repo.domains == ['example.com']
    assert repo.source == 'example api'
    assert repo.get('login', 'ann') == Send('{"type": "login", "user": "ann"}')


def test_parse_config_rejects_other_versions():
    text = EXAMPLE_MACROS.replace('version: "1"', 'version: "2"')

    with pytest.raises(MacroVersionError, match='unsupported macro version: 2'):
        parse_config(text)


def test_version_is_checked_before_macros():
    with pytest.raises(MacroVersionError):
        parse_config('version: "2"\nmacro:\n  empty: []\n')


def test_parse_config_requires_version():
    with pytest.raises(MacroVersionError):
        parse_config('macro:\n  ping: [send ping]\n')


@pytest.mark.parametrize('text', ['- just\n- a list\n', 'version: "1"\nmacro: [a, b]\n', 'version: "1"\nmacro:\n  x: []\n'])
def test_parse_config_rejects_bad_shapes(text):
    with pytest.raises(MacroLoadError):
        parse_config(text)


def test_load_from_file(tmp_path):
    path = tmp_path / 'example.yaml'
    path.write_text(EXAMPLE_MACROS)

    assert load_from_file(path).names() == ['login', 'ping']


def test_load_from_missing_file(tmp_path):
    with pytest.raises(MacroLoadError, match='fail to open macro file'):
        load_from_file(tmp_path / 'missing.yaml')


def test_load_macro_for_domain_merges_matching_files(tmp_path):
    (tmp_path / 'a.yaml').write_text(EXAMPLE_MACROS)
    (tmp_path / 'b.yml').write_text(
        'version: "1"\ndomains: [api.example.com]\nmacro:\n  status: [send status]\n'
    )
    (tmp_path / 'c.yaml').write_text(
        'version: "1"\ndomains: [example.org]\nmacro:\n  other: [send other]\n'
    )
    (tmp_path / 'notes.txt').write_text('not a macro file')
    (tmp_path / 'nested.yaml').mkdir()

    repo = load_macro_for_domain(tmp_path, 'api.example.com')

    assert repo.names() == ['login', 'ping', 'status']


def test_load_macro_for_domain_conflict_aborts(tmp_path):
    (tmp_path / 'a.yaml').write_text(EXAMPLE_MACROS)
    (tmp_path / 'b.yaml').write_text(
        'version: "1"\ndomains: [example.com]\nmacro:\n  ping: [send ping]\n'
    )

    with pytest.raises(MacroLoadError, match='duplicate macro: ping'):
        load_macro_for_domain(tmp_path, 'example.com')


def test_load_macro_for_domain_without_matches(tmp_path):
    (tmp_path / 'a.yaml').write_text(EXAMPLE_MACROS)

    assert load_macro_for_domain(tmp_path, 'example.org') is None
    assert load_macro_for_domain(tmp_path / 'missing', 'example.com') is None


def test_load_macro_for_domain_skips_sources_without_domains(tmp_path):
    (tmp_path / 'a.yaml').write_text('version: "1"\nmacro:\n  ping: [send ping]\n')

    assert load_macro_for_domain(tmp_path, 'example.com') is None
