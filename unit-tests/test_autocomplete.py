#!/usr/bin/env python3

"""Tests for path validation and interactive shell autocompletion."""

import shlex
from unittest import mock

import pytest
from prompt_toolkit.document import Document

# Registers the commands the completer dispatches on.
import vaultcommander.cli

import vaultcommander.autocomplete as autocomplete
from vaultcommander.autocomplete import PathValidator, CommandCompleter
from vaultcommander.error import CommandError, InvalidPathError
from vaultcommander.subfolder import FileItem, DirItem

_ = vaultcommander.cli


def snapshot():
    return [DirItem('a'), FileItem('a/b'), FileItem('a/c'), FileItem('d'),
            DirItem('email'), FileItem('email/my work')]


strings_to_test = (
    '\\"k',
    'a/b',
    'c ',
    'c\\ ',
    r"e\'f",
    r'g\"',
    'i\\',
    'k\\"',
    r'r\s',
    r'"\"k',
    '"c ',
    '"c\\ ',
    '"e\'f',
    r'"g\"',
    r'"i\\',
    r"'",
    r"''",
    r"'a'",
)


@pytest.mark.parametrize('string_to_test', strings_to_test)
def test_escape_in_double_quotes(string_to_test):
    """A completed path inside double quotes splits back to the original."""
    escaped = autocomplete.escape_string(True, string_to_test)
    assert shlex.split('"' + escaped + '"') == [string_to_test]


@pytest.mark.parametrize('string_to_test', strings_to_test)
def test_escape_without_quotes(string_to_test):
    """A bare completed path splits back to the original."""
    escaped = autocomplete.escape_string(False, string_to_test)
    assert shlex.split(escaped) == [string_to_test]


def test_suggestion_scoping():
    validator = PathValidator([FileItem('a/b'), FileItem('a/c'), FileItem('d')])
    assert not validator.accepts('a/x')
    assert validator.suggestions('a/x') == [FileItem('a/b'), FileItem('a/c')]


@pytest.mark.parametrize('query, expected', [
    ('a/x', ['a/b', 'a/c']),
    ('x', ['a/', 'a/b', 'a/c', 'd', 'email/', 'email/my work']),
    ('email/x/y', []),
    ('a/b', []),
    ('a/', []),
])
def test_suggestions(query, expected):
    validator = PathValidator.all(snapshot())
    assert [str(x) for x in validator.suggestions(query)] == expected


@pytest.mark.parametrize('factory, query, expected', [
    (PathValidator.all, 'a', True),
    (PathValidator.all, 'a/b/', True),
    (PathValidator.files, 'a', False),
    (PathValidator.files, 'a/b', True),
    (PathValidator.dirs, 'a/', True),
    (PathValidator.dirs, 'd', False),
    (PathValidator.all, 'A/b', False),
])
def test_accepts(factory, query, expected):
    assert factory(snapshot()).accepts(query) is expected


def test_accepts_non_text():
    with pytest.raises(InvalidPathError):
        PathValidator(snapshot()).accepts(None)


def test_completions():
    validator = PathValidator.all(snapshot())
    assert [str(x) for x in validator.completions('a')] == ['a/', 'a/b', 'a/c']
    assert [str(x) for x in validator.completions('a/')] == ['a/b', 'a/c']
    assert [str(x) for x in validator.completions('em')] == ['email/', 'email/my work']
    assert validator.completions('a/b') == []


def test_require():
    validator = PathValidator.files(snapshot())
    assert validator.require('a/b/', 'get') == 'a/b'
    with pytest.raises(CommandError) as e:
        validator.require('a/x', 'get')
    assert e.value.command == 'get'
    assert 'a/b' in e.value.message and 'a/c' in e.value.message
    assert 'email' not in e.value.message


def completions(text, items=None):
    params = mock.Mock()
    params.store.list.return_value = snapshot() if items is None else items
    completer = CommandCompleter(params, vaultcommander.cli.commands, vaultcommander.cli.aliases)
    return [x.text for x in completer.get_completions(Document(text), None)]


def test_complete_command():
    assert completions('ge') == ['gen', 'generate', 'get']
    assert 'edit' in completions('e')


def test_complete_path():
    assert completions('get a') == ['a/b', 'a/c']
    assert completions('get em') == [r'email/my\ work']
    assert completions('ls ') == ['a/', 'email/']
    assert completions('mv a') == ['a/', 'a/b', 'a/c']
    assert completions('get -f ') == ['a/b', 'a/c', 'd', r'email/my\ work']
    assert completions('generate ') == []


def test_complete_subcommand():
    assert completions('sync c') == ['config']
    assert completions('sync ') == ['config', 'exec']
