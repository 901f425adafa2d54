import json
from unittest import TestCase, mock

from data_vault import get_empty_params, get_synced_params, passphrase_prompt, VaultEnvironment
from helper import PASSPHRASE
from vaultcommander.commands import record, sync, utils
from vaultcommander.crypto import PemKeyEngine
from vaultcommander.error import CommandError, NotConfiguredError
from vaultcommander.sync import SYNC_CREDENTIAL_PATH


class TestUtils(TestCase):
    def setUp(self):
        self.env = VaultEnvironment()

    def tearDown(self):
        self.env.cleanup()

    def test_init(self):
        params = get_empty_params(self.env)
        params.engine.has_keys = mock.Mock(return_value=False)
        params.transport.init_repository.return_value = self.env.vault_root
        cmd = utils.InitCommand()
        with mock.patch('builtins.input', side_effect=['Jane', 'jane@example.com']), passphrase_prompt():
            cmd.execute(params)
        self.assertEqual(params.engine.generated, [PASSPHRASE])
        params.transport.init_repository.assert_called_once()
        with open(self.env.config_filename) as f:
            config = json.load(f)
        self.assertEqual(config['user'], {'name': 'Jane', 'email': 'jane@example.com'})
        self.assertEqual(config['vault_root'], self.env.vault_root)
        self.assertEqual(config['password_length'], 10)

    def test_init_then_get_with_padded_passphrase(self):
        params = get_empty_params(self.env)
        params.engine = PemKeyEngine(self.env.key_dir)
        params.transport.init_repository.return_value = self.env.vault_root
        with passphrase_prompt(' my secret '):
            utils.InitCommand().execute(params, name='Jane', email='jane@example.com')
        params.store.insert('wifi', 'letmein')
        with passphrase_prompt(' my secret '), mock.patch('builtins.print') as mock_print:
            record.RecordGetCommand().execute(params, name='wifi')
        mock_print.assert_called_once_with('letmein')
        self.assertEqual(params.store.get('wifi', 'my secret'), 'letmein')

    def test_init_blank_passphrase(self):
        params = get_empty_params(self.env)
        params.engine.has_keys = mock.Mock(return_value=False)
        with passphrase_prompt('   '), self.assertRaises(CommandError):
            utils.InitCommand().execute(params, name='Jane', email='jane@example.com')
        self.assertEqual(params.engine.generated, [])

    def test_init_passphrase_mismatch(self):
        params = get_empty_params(self.env)
        params.engine.has_keys = mock.Mock(return_value=False)
        cmd = utils.InitCommand()
        with mock.patch('getpass.getpass', side_effect=['one', 'two']):
            with self.assertRaises(CommandError):
                cmd.execute(params, name='Jane', email='jane@example.com')
        self.assertEqual(params.engine.generated, [])
        params.transport.init_repository.assert_not_called()

    def test_init_existing_keys(self):
        params = get_empty_params(self.env)
        params.transport.init_repository.return_value = self.env.vault_root
        with mock.patch('getpass.getpass') as mock_getpass:
            utils.InitCommand().execute(params)
        mock_getpass.assert_not_called()
        params.transport.init_repository.assert_called_once()

    def test_generate(self):
        params = get_empty_params(self.env)
        cmd = utils.GenerateCommand()
        with mock.patch('builtins.print') as mock_print:
            cmd.execute_args(params, '-l 16')
        self.assertEqual(len(mock_print.call_args.args[0]), 16)

        with mock.patch('builtins.print') as mock_print:
            cmd.execute_args(params, '')
        self.assertEqual(len(mock_print.call_args.args[0]), params.password_length)

        with self.assertRaises(CommandError):
            cmd.execute_args(params, '-l -1')

    def test_generate_help(self):
        params = get_empty_params(self.env)
        with mock.patch('builtins.print'), mock.patch('sys.stdout'):
            self.assertIsNone(utils.GenerateCommand().execute_args(params, '--help'))

    def test_version(self):
        params = get_empty_params(self.env)
        with mock.patch('builtins.print'):
            utils.VersionCommand().execute(params)


class TestSyncCommands(TestCase):
    def setUp(self):
        self.env = VaultEnvironment()
        self.params = get_synced_params(self.env)
        self.params.transport.remote = 'origin'

    def tearDown(self):
        self.env.cleanup()

    def test_config_and_exec(self):
        cmd = sync.SyncCommand()
        with mock.patch('builtins.input', side_effect=['https://git.example/vault.git', 'me']), \
                mock.patch('getpass.getpass', return_value='t0ken'):
            cmd.execute_args(self.params, 'config')
        self.assertEqual(self.params.store.get(SYNC_CREDENTIAL_PATH, PASSPHRASE), 't0ken')
        self.params.transport.add_remote.assert_called_once_with('https://git.example/vault.git')

        with passphrase_prompt():
            cmd.execute_args(self.params, 'exec')
        self.params.transport.fetch.assert_called_once_with('origin', ('me', 't0ken'), keep_local=['config/git'])
        self.params.transport.push.assert_called_once_with('origin', ('me', 't0ken'))

    def test_config_options(self):
        cmd = sync.SyncCommand()
        with mock.patch('builtins.input') as mock_input, mock.patch('getpass.getpass', return_value='t0ken'):
            cmd.execute_args(self.params, 'config --uri https://git.example/vault.git --username me')
        mock_input.assert_not_called()
        self.assertEqual(self.params.store.get(SYNC_CREDENTIAL_PATH, PASSPHRASE, full=True),
                         't0ken\nuri=https://git.example/vault.git\nusername=me')

    def test_exec_not_configured(self):
        with passphrase_prompt(), self.assertRaises(NotConfiguredError):
            sync.SyncCommand().execute_args(self.params, 'exec')
