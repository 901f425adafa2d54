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

from .base import Command, CommandError, dump_report_data, prompt_passphrase
from .. import __version__
from .. import generator
from ..params import VaultParams, save_config


def register_commands(commands):
    commands['init'] = InitCommand()
    commands['generate'] = GenerateCommand()
    commands['version'] = VersionCommand()


def register_command_info(aliases, command_info):
    aliases['gen'] = 'generate'
    aliases['v'] = 'version'
    for p in [init_parser, generate_parser, version_parser]:
        command_info[p.prog] = p.description


init_parser = argparse.ArgumentParser(prog='init', description='Create the vault keys and repository')
init_parser.add_argument('--name', dest='name', action='store', help='owner name')
init_parser.add_argument('--email', dest='email', action='store', help='owner email')


version_parser = argparse.ArgumentParser(prog='version', description='Display version and configuration')


generate_parser = argparse.ArgumentParser(prog='generate', description='Generate a new password')
generate_parser.add_argument('-l', '--length', dest='length', type=int, action='store',
                             help='length of the password')


class InitCommand(Command):
    def get_parser(self):
        return init_parser

    def execute(self, params, **kwargs):    # type: (VaultParams, ...) -> None
        engine = params.engine
        if engine.has_keys():
            logging.warning('Vault keys already exist in %s', engine.key_dir)
        else:
            user = params.user or {}
            name = kwargs.get('name') or user.get('name') or input('Name: ').strip()
            email = kwargs.get('email') or user.get('email') or input('Email: ').strip()
            if not name or not email:
                raise CommandError('Name and email are required')

            passphrase = prompt_passphrase('Choose a vault passphrase: ')
            confirmation = prompt_passphrase('Confirm the vault passphrase: ')
            if passphrase != confirmation:
                raise CommandError('Passphrases do not match')

            engine.generate_keys(passphrase)
            params.user = {'name': name, 'email': email}
            logging.info('Vault keys for %s <%s> created in %s', name, email, engine.key_dir)

        root = params.transport.init_repository()
        save_config(params)
        logging.info('Vault initialized in %s', root)


class GenerateCommand(Command):
    def get_parser(self):
        return generate_parser

    def execute(self, params, **kwargs):    # type: (VaultParams, ...) -> None
        length = kwargs.get('length')
        if length is None:
            length = params.password_length
        try:
            print(generator.generate(length))
        except ValueError as e:
            raise CommandError(str(e))


class VersionCommand(Command):
    def get_parser(self):
        return version_parser

    def execute(self, params, **kwargs):    # type: (VaultParams, ...) -> None
        table = [
            ['Version', __version__],
            ['Config file', params.config_filename],
            ['Vault', params.vault_root],
            ['Keys', params.key_dir],
            ['Remote', f'{params.remote}/{params.branch}'],
        ]
        dump_report_data(table, headers=(), no_header=True)
