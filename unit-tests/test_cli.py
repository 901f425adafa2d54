from collections import OrderedDict
from unittest import TestCase, mock

from data_vault import get_synced_params, passphrase_prompt, VaultEnvironment
from helper import PASSPHRASE
from vaultcommander import cli
from vaultcommander.commands import base
from vaultcommander.error import CommandError


class TestCommandLineInterface(TestCase):
    def setUp(self):
        self.env = VaultEnvironment()
        self.params = get_synced_params(self.env)

    def tearDown(self):
        self.env.cleanup()

    def test_command_import(self):
        commands = {}
        aliases = {}
        command_info = OrderedDict()
        base.register_commands(commands, aliases, command_info)
        for name in ('init', 'ls', 'tree', 'insert', 'get', 'edit', 'rm', 'mv', 'sync', 'generate'):
            self.assertIn(name, commands)
            self.assertIn(name, command_info)
        self.assertTrue(all(x in commands for x in aliases.values()))

    def test_do_command(self):
        with passphrase_prompt(), mock.patch('builtins.print') as mock_print:
            cli.do_command(self.params, 'get email/work')
        mock_print.assert_called_with('p4ss')

    def test_do_command_alias(self):
        with passphrase_prompt(), mock.patch('builtins.print') as mock_print:
            cli.do_command(self.params, 'g wifi')
        mock_print.assert_called_with('letmein')

    def test_do_command_invalid_path(self):
        with self.assertRaises(CommandError):
            cli.do_command(self.params, 'get email/home')

    def test_parse_error(self):
        with self.assertRaises(CommandError):
            cli.do_command(self.params, 'get --unknown wifi')

    def test_help(self):
        with mock.patch('builtins.print'):
            cli.do_command(self.params, 'help')
            cli.do_command(self.params, 'help insert')
            cli.do_command(self.params, 'help sync')
            cli.do_command(self.params, 'unknown-command')

    def test_batch_loop(self):
        self.params.batch_mode = True
        self.params.commands = ['insert social/forum s3cret -m username=me', 'rm -f wifi', 'q']
        self.assertEqual(cli.loop(self.params), 0)
        self.assertEqual(self.params.store.get('social/forum', PASSPHRASE, full=True), 's3cret\nusername=me')
        self.assertFalse(self.params.store.exists('wifi'))

    def test_batch_loop_stops_on_error(self):
        self.params.batch_mode = True
        self.params.commands = ['insert wifi other', 'rm -f email/work', 'q']
        with mock.patch('logging.error') as mock_error:
            self.assertEqual(cli.loop(self.params), 1)
        self.assertIn('AlreadyExists :: ', mock_error.call_args.args[0])
        self.assertTrue(self.params.store.exists('email/work'))

    def test_runcommands(self):
        with passphrase_prompt(), mock.patch('builtins.print'):
            errno = cli.runcommands(self.params, ['get wifi', 'get nothing'], quiet=True)
        self.assertEqual(errno, 1)
