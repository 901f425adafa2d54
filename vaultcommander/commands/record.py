#  _   __          ____
# | | / /__ ___ __/ / /_
# | |/ / _ `/ // / / __/
# |___/\_,_/\_,_/_/\__/
#
# Vault Commander
# Copyright 2024 Vault Commander contributors
#

import argparse
import logging

from colorama import Fore, Style

from .base import Command, CredentialMixin, prompt_passphrase, user_choice
from .. import generator
from ..error import CommandError, NoChangeError
from ..params import VaultParams
from ..record import MetadataPatch, parse_key_value


def register_commands(commands):
    commands['insert'] = RecordInsertCommand()
    commands['get'] = RecordGetCommand()
    commands['edit'] = RecordEditCommand()
    commands['rm'] = RecordRemoveCommand()


def register_command_info(aliases, command_info):
    aliases['add'] = 'insert'
    aliases['g'] = 'get'
    aliases['e'] = 'edit'

    for p in [insert_parser, get_parser, edit_parser, rm_parser]:
        command_info[p.prog] = p.description


insert_parser = argparse.ArgumentParser(prog='insert', description='Insert a new credential into the vault')
insert_parser.add_argument('-m', '--metadata', dest='metadata', action='extend', nargs='+', metavar='KEY=VALUE',
                           help='metadata entries. Can be repeated.')
insert_parser.add_argument('-l', '--length', dest='length', type=int, action='store',
                           help='length of the generated password')
insert_parser.add_argument('name', type=str, action='store', help='credential path')
insert_parser.add_argument('password', nargs='?', type=str, action='store',
                           help='credential secret. Generated when omitted')


get_parser = argparse.ArgumentParser(prog='get', description='Decrypt and display a credential')
get_parser.add_argument('-f', '--full', dest='full', action='store_true', help='display the metadata as well')
get_parser.add_argument('-c', '--clipboard', dest='clipboard', action='store_true',
                        help='copy the secret to the clipboard')
get_parser.add_argument('name', type=str, action='store', help='credential path')


edit_parser = argparse.ArgumentParser(prog='edit', description='Change the secret or the metadata of a credential')
edit_parser.add_argument('-a', '--add-metadata', dest='add_metadata', action='extend', nargs='+',
                         metavar='KEY=VALUE',
                         help='add or replace a metadata entry. Can be repeated.')
edit_parser.add_argument('-r', '--remove-metadata', dest='remove_metadata', action='extend', nargs='+', metavar='KEY',
                         help='remove a metadata entry. Can be repeated.')
edit_parser.add_argument('name', type=str, action='store', help='credential path')
edit_parser.add_argument('password', nargs='?', type=str, action='store', help='new credential secret')


rm_parser = argparse.ArgumentParser(prog='rm', description='Remove a credential from the vault')
rm_parser.add_argument('-f', '--force', dest='force', action='store_true', help='do not prompt')
rm_parser.add_argument('name', type=str, action='store', help='credential path')


class RecordInsertCommand(Command):
    def get_parser(self):
        return insert_parser

    def execute(self, params, **kwargs):    # type: (VaultParams, ...) -> None
        name = kwargs.get('name')
        metadata = [parse_key_value(x) for x in kwargs.get('metadata') or []]

        password = kwargs.get('password')
        generated = password is None
        if generated:
            length = kwargs.get('length') or params.password_length
            try:
                password = generator.generate(length)
            except ValueError as e:
                raise CommandError('insert', str(e))

        path = params.store.insert(name, password, metadata)
        logging.info('Credential "%s" added', path)
        if generated:
            print(f'The generated password for {path} is:\n{Style.BRIGHT}{password}{Style.RESET_ALL}')


class RecordGetCommand(Command, CredentialMixin):
    def get_parser(self):
        return get_parser

    def execute(self, params, **kwargs):    # type: (VaultParams, ...) -> None
        path = self.resolve_path(params, kwargs.get('name'), 'get', kind='files')
        passphrase = prompt_passphrase()
        text = params.store.get(path, passphrase, full=kwargs.get('full') is True)
        if kwargs.get('clipboard'):
            secret = text.split('\n', 1)[0]
            import pyperclip
            pyperclip.copy(secret)
            logging.info('Secret of "%s" copied to clipboard', path)
        else:
            print(text)


class RecordEditCommand(Command, CredentialMixin):
    def get_parser(self):
        return edit_parser

    def execute(self, params, **kwargs):    # type: (VaultParams, ...) -> None
        path = self.resolve_path(params, kwargs.get('name'), 'edit', kind='files')
        add_metadata = [parse_key_value(x) for x in kwargs.get('add_metadata') or []]
        patch = MetadataPatch.from_args(add_metadata, kwargs.get('remove_metadata'))
        password = kwargs.get('password')
        if password is None and patch.is_empty():
            raise NoChangeError(f'Nothing to change in "{path}". Provide a new secret or metadata changes')

        passphrase = prompt_passphrase()
        params.store.edit(path, passphrase, new_secret=password, metadata_patch=patch)
        logging.info('Credential "%s" updated', path)


class RecordRemoveCommand(Command, CredentialMixin):
    def get_parser(self):
        return rm_parser

    def execute(self, params, **kwargs):    # type: (VaultParams, ...) -> None
        path = self.resolve_path(params, kwargs.get('name'), 'rm', kind='files')
        if not kwargs.get('force') and not params.batch_mode:
            answer = user_choice(f'Do you want to delete "{Fore.RED}{path}{Fore.RESET}"?', 'yn', default='n')
            if answer.lower() != 'y':
                return
        params.store.remove(path)
        logging.info('Credential "%s" removed', path)
