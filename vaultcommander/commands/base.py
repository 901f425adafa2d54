#  _   __          ____
# | | / /__ ___ __/ / /_
# | |/ / _ `/ // / / __/
# |___/\_,_/\_,_/_/\__/
#
# Vault Commander
# Copyright 2024 Vault Commander contributors
#

import abc
import argparse
import collections
import getpass
import json
import logging
import shlex
import sys
from collections import OrderedDict
from typing import Optional, Sequence, List, Any, Dict

from tabulate import tabulate

from .. import error
from ..autocomplete import PathValidator
from ..params import VaultParams

aliases = {}                 # type: Dict[str, str]
commands = {}                # type: Dict[str, Command]
command_info = OrderedDict()


json_output_parser = argparse.ArgumentParser(add_help=False)
json_output_parser.add_argument('--format', dest='format', action='store', choices=['table', 'json'],
                                default='table', help='format of output')


class CommandError(error.CommandError):
    def __init__(self, message):
        super().__init__('', message)


class ParseError(Exception):
    pass


def register_commands(commands, aliases, command_info):
    from .record import register_commands as record_commands, register_command_info as record_command_info
    record_commands(commands)
    record_command_info(aliases, command_info)

    from .folder import register_commands as folder_commands, register_command_info as folder_command_info
    folder_commands(commands)
    folder_command_info(aliases, command_info)

    from .sync import register_commands as sync_commands, register_command_info as sync_command_info
    sync_commands(commands)
    sync_command_info(aliases, command_info)

    from .utils import register_commands as misc_commands, register_command_info as misc_command_info
    misc_commands(commands)
    misc_command_info(aliases, command_info)


def user_choice(question, choice, default='', show_choice=True):
    choices = [ch.lower() for ch in choice]

    while True:
        pr = question
        if show_choice:
            pr = pr + ' [' + '/'.join(choices) + ']'

        pr = pr + ': '
        result = input(pr)

        if len(result) == 0:
            return default

        if any(map(lambda x: x.upper() == result.upper(), choices)):
            return result

        logging.error('Error: invalid input')


def prompt_passphrase(prompt='Enter the vault passphrase: '):    # type: (str) -> str
    passphrase = getpass.getpass(prompt=prompt, stream=None).strip()
    if not passphrase:
        raise CommandError('Passphrase cannot be empty')
    return passphrase


def raise_parse_exception(m):
    raise ParseError(m)


def suppress_exit(*args):
    raise ParseError()


def dump_report_data(data, headers, title=None, fmt='', **kwargs):
    # type: (List[List], Sequence[str], Optional[str], Optional[str], ...) -> Optional[str]
    # kwargs:
    #           row_number: boolean        - Add row number. table only
    #           no_header: boolean         - Do not print header
    if fmt == 'json':
        data_list = []
        for row in data:
            obj = {}
            for index, column in enumerate(row):
                name = headers[index] if headers and index < len(headers) else "#{:0>2}".format(index)
                if name != '#' and column is not None:
                    obj[name] = column
            data_list.append(obj)
        return json.dumps(data_list, indent=2)

    if title:
        print('\n{0}\n'.format(title))
    row_number = kwargs.get('row_number') is True
    if row_number and headers:
        headers = ['#'] + list(headers)
        data = [[i + 1] + list(row) for i, row in enumerate(data)]
    tablefmt = 'simple'
    if kwargs.get('no_header'):
        headers = ()
        tablefmt = 'plain'
    print(tabulate(data, headers=headers, tablefmt=tablefmt))
    return None


class CliCommand(abc.ABC):
    @abc.abstractmethod
    def execute_args(self, params, args, **kwargs):   # type: (VaultParams, str, ...) -> Any
        pass

    def clean_up(self):
        print('', end='\r', file=sys.stderr, flush=True)


class Command(CliCommand):
    def execute(self, params, **kwargs):     # type: (VaultParams, Any) -> Any
        raise NotImplementedError()

    def execute_args(self, params, args, **kwargs):
        # type: (VaultParams, str, ...) -> Any
        try:
            d = {}
            d.update(kwargs)
            parser = self._get_parser_safe()
            args = '' if args is None else args
            if parser:
                opts = parser.parse_args(shlex.split(args))
                d.update(opts.__dict__)

            return self.execute(params, **d)
        except ParseError as e:
            # raised empty by suppress_exit after --help
            if str(e):
                raise CommandError(str(e))

    def get_parser(self):   # type: () -> Optional[argparse.ArgumentParser]
        return None

    def _ensure_parser(func):
        def _wrapper(self):
            parser = func(self)
            if parser:
                if parser.exit != suppress_exit:
                    parser.exit = suppress_exit
                if parser.error != raise_parse_exception:
                    parser.error = raise_parse_exception
            return parser
        return _wrapper

    @_ensure_parser
    def _get_parser_safe(self):
        return self.get_parser()
    _ensure_parser = staticmethod(_ensure_parser)


class GroupCommand(CliCommand):
    def __init__(self):
        self._commands = collections.OrderedDict()     # type: dict[str, CliCommand]
        self._command_info = {}    # type: dict[str, str]
        self._aliases = {}         # type: dict[str, str]
        self.default_verb = ''

    def register_command(self, verb, command, description=None, alias=None):
        # type: (Any, CliCommand, Optional[str], Optional[str]) -> None
        verb = verb.lower()
        self._commands[verb] = command
        if not description and isinstance(command, Command):
            parser = command.get_parser()
            if parser:
                description = parser.description
        if description:
            self._command_info[verb] = description
        if alias:
            self._aliases[alias] = verb

    def execute_args(self, params, args, **kwargs):  # type: (VaultParams, str, dict) -> Any
        if args.startswith('-- '):
            args = args[3:].strip()
        pos = args.find(' ')
        if pos > 0:
            verb = args[:pos].strip()
            args = args[pos + 1:].strip()
        else:
            verb = args.strip()
            args = ''

        print_help = False
        if not verb:
            verb = self.default_verb
            print_help = True
        if verb:
            verb = verb.lower()

        if verb in self._aliases:
            verb = self._aliases[verb]

        command = self._commands.get(verb)
        if not command:
            print_help = True
            if verb not in ['--help', '-h', 'help', '']:
                logging.warning('Invalid command: %s', verb)

        if print_help:
            self.print_help(**kwargs)

        if command:
            kwargs['action'] = verb
            return command.execute_args(params, args, **kwargs)

    def print_help(self, **kwargs):
        print(f'{kwargs.get("command")} command [--options]')
        table = []
        headers = ['Command', 'Description']
        for verb in self._commands.keys():
            row = [verb, self._command_info.get(verb) or '']
            table.append(row)
        print('')
        dump_report_data(table, headers=headers)
        print('')

    @property
    def subcommands(self):
        return self._commands


class CredentialMixin:
    @staticmethod
    def get_validator(params, kind='all'):    # type: (VaultParams, str) -> PathValidator
        snapshot = params.store.list(None, recursive=True)
        if kind == 'files':
            return PathValidator.files(snapshot)
        if kind == 'dirs':
            return PathValidator.dirs(snapshot)
        return PathValidator.all(snapshot)

    @staticmethod
    def resolve_path(params, name, command, kind='all', validator=None):
        # type: (VaultParams, str, str, str, Optional[PathValidator]) -> str
        if not name:
            raise error.CommandError(command, 'Path argument is required')
        validator = validator or CredentialMixin.get_validator(params, kind)
        return validator.require(name, command)
