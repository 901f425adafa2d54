import os
import shutil
import tempfile
from unittest import mock

from helper import FakeEngine, PASSPHRASE
from vaultcommander.params import VaultParams
from vaultcommander.vault import VaultStore

CREDENTIALS = [
    ('email/personal', 'hunter2', [('username', 'me@example.com')]),
    ('email/work', 'p4ss', [('username', 'me@corp.example'), ('url', 'https://mail.corp.example')]),
    ('bank/checking', 'kx9=z', []),
    ('wifi', 'letmein', [('ssid', 'home')]),
]


class VaultEnvironment:
    def __init__(self):
        self.folder = tempfile.mkdtemp(prefix='vault-commander-test-')
        self.vault_root = os.path.join(self.folder, 'vault')
        self.key_dir = os.path.join(self.folder, 'keys')
        self.config_filename = os.path.join(self.folder, 'config.json')

    def cleanup(self):
        shutil.rmtree(self.folder, ignore_errors=True)


def get_empty_params(env):    # type: (VaultEnvironment) -> VaultParams
    params = VaultParams(config_filename=env.config_filename)
    params.vault_root = env.vault_root
    params.key_dir = env.key_dir
    params.engine = FakeEngine()
    params.transport = mock.Mock()
    os.makedirs(env.vault_root, exist_ok=True)
    return params


def get_synced_params(env):    # type: (VaultEnvironment) -> VaultParams
    params = get_empty_params(env)
    store = params.store    # type: VaultStore
    for path, secret, metadata in CREDENTIALS:
        store.insert(path, secret, metadata)
    return params


def passphrase_prompt(passphrase=PASSPHRASE):
    return mock.patch('getpass.getpass', return_value=passphrase)
