#  _   __          ____
# | | / /__ ___ __/ / /_
# | |/ / _ `/ // / / __/
# |___/\_,_/\_,_/_/\__/
#
# Vault Commander
# Copyright 2024 Vault Commander contributors
#
import json
import logging
import os
from pathlib import Path
from typing import Optional

DEFAULT_HOME = '~/.vault-commander'
DEFAULT_CONFIG_FILE = 'config.json'
DEFAULT_PASSWORD_LENGTH = 10
CONFIG_ENV_VARIABLE = 'VAULT_COMMANDER_CONFIG'
DEBUG_ENV_VARIABLE = 'VAULT_COMMANDER_DEBUG'


class VaultParams:
    def __init__(self, config_filename='', config=None):
        self.config_filename = config_filename
        self.config = config or {}
        self.vault_root = os.path.join(DEFAULT_HOME, 'vault')
        self.key_dir = os.path.join(DEFAULT_HOME, 'keys')
        self.remote = 'origin'
        self.branch = 'main'
        self.password_length = DEFAULT_PASSWORD_LENGTH
        self.user = {}
        self.commands = []
        self.debug = False
        self.batch_mode = False
        self._engine = None
        self._store = None
        self._transport = None

    @property
    def engine(self):
        if self._engine is None:
            from .crypto import PemKeyEngine
            self._engine = PemKeyEngine(self.key_dir)
        return self._engine

    @engine.setter
    def engine(self, value):
        self._engine = value
        self._store = None

    @property
    def store(self):
        if self._store is None:
            from .vault import VaultStore
            self._store = VaultStore(self.vault_root, self.engine)
        return self._store

    @store.setter
    def store(self, value):
        self._store = value

    @property
    def transport(self):
        if self._transport is None:
            from .sync import GitTransport
            self._transport = GitTransport(os.path.expanduser(self.vault_root), remote=self.remote,
                                           branch=self.branch)
        return self._transport

    @transport.setter
    def transport(self, value):
        self._transport = value


def get_default_path():    # type: () -> Path
    return Path(DEFAULT_HOME).expanduser()


def load_config_properties(params):    # type: (VaultParams) -> None
    config = params.config
    if 'vault_root' in config:
        params.vault_root = config['vault_root']
    if 'key_dir' in config:
        params.key_dir = config['key_dir']
    if 'remote' in config:
        params.remote = config['remote']
    if 'branch' in config:
        params.branch = config['branch']
    if isinstance(config.get('password_length'), int) and config['password_length'] > 0:
        params.password_length = config['password_length']
    if isinstance(config.get('user'), dict):
        params.user = config['user']
    if config.get('debug') is True:
        params.debug = True


def get_params_from_config(config_filename=None):    # type: (Optional[str]) -> VaultParams
    if os.getenv(DEBUG_ENV_VARIABLE):
        logging.getLogger().setLevel(logging.DEBUG)
        logging.info('Debug ON')

    config_filename = config_filename or os.getenv(CONFIG_ENV_VARIABLE)
    if config_filename:
        logging.debug('Using config file %s', config_filename)
        config_filename = os.path.expanduser(config_filename)
    else:
        config_filename = str(get_default_path().joinpath(DEFAULT_CONFIG_FILE))

    params = VaultParams(config_filename=config_filename)
    if os.getenv(DEBUG_ENV_VARIABLE):
        params.debug = True
    if os.path.exists(config_filename):
        try:
            with open(config_filename) as config_file:
                params.config = json.load(config_file)
            load_config_properties(params)
        except json.JSONDecodeError as e:
            logging.error('Unable to parse JSON configuration file "%s": %s', os.path.abspath(config_filename), e)
        except IOError as ioe:
            logging.warning('Error: Unable to open config file %s: %s', config_filename, ioe)

    return params


def save_config(params):    # type: (VaultParams) -> None
    config = dict(params.config)
    config['vault_root'] = params.vault_root
    config['key_dir'] = params.key_dir
    config['remote'] = params.remote
    config['branch'] = params.branch
    config['password_length'] = params.password_length
    if params.user:
        config['user'] = params.user
    params.config = config

    folder = os.path.dirname(os.path.abspath(params.config_filename))
    os.makedirs(folder, exist_ok=True)
    with open(params.config_filename, 'w') as fd:
        json.dump(config, fd, ensure_ascii=False, indent=2)
    logging.debug('Configuration saved to %s', params.config_filename)
