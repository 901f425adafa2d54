#  _   __          ____
# | | / /__ ___ __/ / /_
# | |/ / _ `/ // / / __/
# |___/\_,_/\_,_/_/\__/
#
# Vault Commander
# Copyright 2024 Vault Commander contributors
#

import logging
import shlex
from typing import Iterable, List, Tuple

from prompt_toolkit.completion import Completion, Completer

from .error import CommandError
from .params import VaultParams
from .subfolder import CredentialItem, PATH_DELIMITER, normalize_query, matches

MAX_SUGGESTIONS = 10

FILE_PATH_COMMANDS = {'get', 'edit', 'rm'}
DIR_PATH_COMMANDS = {'ls', 'tree', 'insert'}
ANY_PATH_COMMANDS = {'mv'}


class PathValidator:
    """Membership and "did you mean" queries over a snapshot of vault items.

    The snapshot is taken once, from a recursive listing, and never refreshed:
    the validator does not touch the filesystem.
    """

    def __init__(self, items):    # type: (Iterable[CredentialItem]) -> None
        self._items = tuple(items)    # type: Tuple[CredentialItem, ...]

    @classmethod
    def all(cls, items):
        return cls(items)

    @classmethod
    def files(cls, items):
        return cls(x for x in items if x.is_file())

    @classmethod
    def dirs(cls, items):
        return cls(x for x in items if x.is_dir())

    @property
    def items(self):    # type: () -> Tuple[CredentialItem, ...]
        return self._items

    def accepts(self, query):    # type: (str) -> bool
        return matches(self._items, query)

    def suggestions(self, query):    # type: (str) -> List[CredentialItem]
        if self.accepts(query):
            return []
        base = tuple(normalize_query(query)[:-1])
        if not base:
            return list(self._items)
        return [x for x in self._items
                if len(x.path.components) > len(base) and x.path.components[:len(base)] == base]

    def completions(self, prefix):    # type: (str) -> List[CredentialItem]
        return [x for x in self._items if str(x).startswith(prefix) and len(str(x)) > len(prefix)]

    def require(self, query, command):    # type: (str, str) -> str
        if self.accepts(query):
            return PATH_DELIMITER.join(normalize_query(query))
        message = f'"{query}" is not a valid path'
        suggestions = self.suggestions(query)
        if suggestions:
            names = [str(x) for x in suggestions[:MAX_SUGGESTIONS]]
            if len(suggestions) > MAX_SUGGESTIONS:
                names.append('...')
            message += '. Did you mean: ' + ', '.join(names)
        raise CommandError(command, message)


def escape_string(have_initial_double_quote, string):
    """Replace special characters in string, for interactive shell quoting, as part of tab-completion."""
    if have_initial_double_quote:
        tuple_ = (
            ('\\', '\\\\'),
            ('"', r'\"'),
        )
    else:
        tuple_ = (
            ('\\', '\\\\'),
            ("'", r"\'"),
            (' ', r'\ '),
            ('"', r'\"'),
        )
    for from_str, to_str in tuple_:
        string = string.replace(from_str, to_str)
    return string


class CommandCompleter(Completer):
    def __init__(self, params, commands, aliases):
        # type: (CommandCompleter, VaultParams, dict, dict) -> None
        Completer.__init__(self)
        self.params = params
        self.commands = commands
        self.aliases = aliases

    @staticmethod
    def fix_input(txt):
        is_escape = False
        is_quote = False
        is_double_quote = False
        for c in txt:
            if c == '\\':
                is_escape = not is_escape
            elif not is_escape:
                if c == '\'':
                    if is_double_quote:
                        return None
                    is_quote = not is_quote
                elif c == '"':
                    if is_quote:
                        return None
                    is_double_quote = not is_double_quote
            else:
                is_escape = False

        if is_quote:
            txt = txt + '\''

        if is_double_quote:
            txt = txt + '"'

        return txt

    def get_validator(self, cmd):
        items = self.params.store.list(None, recursive=True)
        if cmd in FILE_PATH_COMMANDS:
            return PathValidator.files(items)
        if cmd in DIR_PATH_COMMANDS:
            return PathValidator.dirs(items)
        return PathValidator.all(items)

    def get_completions(self, document, complete_event):
        try:
            if not document.is_cursor_at_the_end:
                return
            pos = document.text.find(' ')
            if pos == -1:
                cmds = [x for x in self.commands if x.startswith(document.text)]
                if self.aliases:
                    cmds.extend(x for x in self.aliases if x.startswith(document.text))
                for c in sorted(set(cmds)):
                    yield Completion(c, start_position=-len(document.text))
                return

            cmd = document.text[:pos]
            cmd = self.aliases.get(cmd, cmd)
            raw_input = document.text[pos + 1:].lstrip()
            have_initial_double_quote = bool(raw_input) and raw_input[0] == '"'

            command = self.commands.get(cmd)
            subcommands = getattr(command, 'subcommands', None)
            if subcommands is not None:
                if ' ' not in raw_input:
                    for verb in subcommands:
                        if verb.startswith(raw_input):
                            yield Completion(verb, display=verb, start_position=-len(raw_input))
                return

            if cmd == 'help':
                for c in sorted(self.commands):
                    if c.startswith(raw_input):
                        yield Completion(c, display=c, start_position=-len(raw_input))
                return

            if cmd not in FILE_PATH_COMMANDS | DIR_PATH_COMMANDS | ANY_PATH_COMMANDS:
                return

            if not raw_input or raw_input.endswith(' ') and not raw_input.endswith('\\ '):
                word = ''
            else:
                args = CommandCompleter.fix_input(raw_input)
                if args is None:
                    return
                words = shlex.split(args)
                word = words[-1] if words else ''
            if word.startswith('-'):
                return

            escaped_word = escape_string(have_initial_double_quote, word)
            for item in self.get_validator(cmd).completions(word):
                text = escape_string(have_initial_double_quote, str(item))
                yield Completion(text=text, display=text, start_position=-len(escaped_word))

        except Exception as e:
            logging.debug('Completion exception: %s', e)
