import json
import os
from unittest import TestCase, mock

from data_vault import VaultEnvironment
from vaultcommander import params as params_module
from vaultcommander.params import get_params_from_config, save_config, CONFIG_ENV_VARIABLE


class TestParams(TestCase):
    def setUp(self):
        self.env = VaultEnvironment()

    def tearDown(self):
        self.env.cleanup()

    def write_config(self, config):
        with open(self.env.config_filename, 'w') as f:
            json.dump(config, f)

    def test_load_config(self):
        self.write_config({
            'vault_root': self.env.vault_root,
            'key_dir': self.env.key_dir,
            'remote': 'upstream',
            'branch': 'trunk',
            'password_length': 24,
            'debug': True,
            'user': {'name': 'Jane', 'email': 'jane@example.com'},
        })
        params = get_params_from_config(self.env.config_filename)
        self.assertEqual(params.vault_root, self.env.vault_root)
        self.assertEqual(params.key_dir, self.env.key_dir)
        self.assertEqual(params.remote, 'upstream')
        self.assertEqual(params.branch, 'trunk')
        self.assertEqual(params.password_length, 24)
        self.assertTrue(params.debug)
        self.assertEqual(params.transport.remote, 'upstream')
        self.assertEqual(params.store.root, self.env.vault_root)

    def test_config_from_environment(self):
        self.write_config({'password_length': 32})
        with mock.patch.dict(os.environ, {CONFIG_ENV_VARIABLE: self.env.config_filename}):
            params = get_params_from_config()
        self.assertEqual(params.config_filename, self.env.config_filename)
        self.assertEqual(params.password_length, 32)

    def test_invalid_values_are_ignored(self):
        self.write_config({'password_length': 'long', 'user': 'jane'})
        params = get_params_from_config(self.env.config_filename)
        self.assertEqual(params.password_length, params_module.DEFAULT_PASSWORD_LENGTH)
        self.assertEqual(params.user, {})

    def test_broken_config(self):
        with open(self.env.config_filename, 'w') as f:
            f.write('{not json')
        with mock.patch('logging.error') as mock_error:
            params = get_params_from_config(self.env.config_filename)
        mock_error.assert_called_once()
        self.assertEqual(params.config, {})

    def test_save_config(self):
        params = get_params_from_config(os.path.join(self.env.folder, 'nested', 'config.json'))
        params.vault_root = self.env.vault_root
        params.user = {'name': 'Jane', 'email': 'jane@example.com'}
        save_config(params)
        loaded = get_params_from_config(params.config_filename)
        self.assertEqual(loaded.vault_root, self.env.vault_root)
        self.assertEqual(loaded.user, params.user)
