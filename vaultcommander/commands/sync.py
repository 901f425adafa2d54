#  _   __          ____
# | | / /__ ___ __/ / /_
# | |/ / _ `/ // / / __/
# |___/\_,_/\_,_/_/\__/
#
# Vault Commander
# Copyright 2024 Vault Commander contributors
#

import argparse
import getpass
import logging

from .base import Command, GroupCommand, CommandError, prompt_passphrase
from ..params import VaultParams
from ..sync import SyncCoordinator, SYNC_CREDENTIAL_PATH


def register_commands(commands):
    commands['sync'] = SyncCommand()


def register_command_info(aliases, command_info):
    aliases['s'] = 'sync'
    command_info['sync'] = 'Synchronize the vault with a remote git repository'


sync_config_parser = argparse.ArgumentParser(prog='sync config',
                                             description='Store the remote credentials and register the remote')
sync_config_parser.add_argument('--uri', dest='uri', action='store', help='remote repository URI')
sync_config_parser.add_argument('--username', dest='username', action='store', help='remote user name')


sync_exec_parser = argparse.ArgumentParser(prog='sync exec', description='Commit, fetch and push the vault')


class SyncCommand(GroupCommand):
    def __init__(self):
        super(SyncCommand, self).__init__()
        self.register_command('config', SyncConfigCommand(), 'Configure the remote repository')
        self.register_command('exec', SyncExecCommand(), 'Synchronize with the remote repository')


class SyncConfigCommand(Command):
    def get_parser(self):
        return sync_config_parser

    def execute(self, params, **kwargs):    # type: (VaultParams, ...) -> None
        uri = kwargs.get('uri') or input('Remote repository URI: ').strip()
        if not uri:
            raise CommandError('Remote URI cannot be empty')
        username = kwargs.get('username') or input('Remote user name: ').strip()
        if not username:
            raise CommandError('User name cannot be empty')
        token = getpass.getpass(prompt='Remote access token: ', stream=None)
        if not token:
            raise CommandError('Access token cannot be empty')

        coordinator = SyncCoordinator(params.store, params.transport)
        coordinator.set_remote(username, token, uri)
        logging.info('Remote credentials stored in "%s"', SYNC_CREDENTIAL_PATH)


class SyncExecCommand(Command):
    def get_parser(self):
        return sync_exec_parser

    def execute(self, params, **kwargs):    # type: (VaultParams, ...) -> None
        passphrase = prompt_passphrase()
        coordinator = SyncCoordinator(params.store, params.transport)
        coordinator.sync(passphrase)
        logging.info('Vault synchronized')
