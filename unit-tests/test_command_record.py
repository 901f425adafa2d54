from unittest import TestCase, mock

from data_vault import get_synced_params, passphrase_prompt, VaultEnvironment
from helper import PASSPHRASE
from vaultcommander.commands import record
from vaultcommander.error import AlreadyExistsError, CommandError, EncryptionError, MalformedRecordError, \
    NoChangeError


class TestRecord(TestCase):
    def setUp(self):
        self.env = VaultEnvironment()
        self.params = get_synced_params(self.env)

    def tearDown(self):
        mock.patch.stopall()
        self.env.cleanup()

    def test_insert(self):
        cmd = record.RecordInsertCommand()
        cmd.execute_args(self.params, 'social/forum s3cret -m username=me -m url=https://forum.example/?a=b')
        self.assertEqual(self.params.store.get('social/forum', PASSPHRASE, full=True),
                         's3cret\nusername=me\nurl=https://forum.example/?a=b')

    def test_insert_generated(self):
        cmd = record.RecordInsertCommand()
        with mock.patch('builtins.print') as mock_print:
            cmd.execute_args(self.params, 'social/forum')
            cmd.execute_args(self.params, 'social/chat -l 24')
        self.assertEqual(mock_print.call_count, 2)
        self.assertEqual(len(self.params.store.get('social/forum', PASSPHRASE)), 10)
        self.assertEqual(len(self.params.store.get('social/chat', PASSPHRASE)), 24)

    def test_insert_negative_length(self):
        cmd = record.RecordInsertCommand()
        with self.assertRaises(CommandError) as e:
            cmd.execute_args(self.params, 'social/forum -l -5')
        self.assertEqual(e.exception.command, 'insert')
        self.assertFalse(self.params.store.exists('social/forum'))

    def test_bad_arguments_reported_once(self):
        cmd = record.RecordGetCommand()
        with mock.patch('logging.error') as mock_error, self.assertRaises(CommandError) as e:
            cmd.execute_args(self.params, '--bogus email/work')
        self.assertIn('--bogus', e.exception.message)
        mock_error.assert_not_called()

    def test_help_is_not_an_error(self):
        cmd = record.RecordGetCommand()
        with mock.patch('sys.stdout'):
            self.assertIsNone(cmd.execute_args(self.params, '--help'))

    def test_insert_bad_metadata(self):
        cmd = record.RecordInsertCommand()
        with self.assertRaises(MalformedRecordError) as e:
            cmd.execute(self.params, name='social/forum', password='x', metadata=['username'])
        self.assertEqual(e.exception.message, 'Invalid metadata format. expected "key=value"')
        self.assertFalse(self.params.store.exists('social/forum'))

    def test_double_insert(self):
        cmd = record.RecordInsertCommand()
        cmd.execute(self.params, name='x/y', password='s1')
        with self.assertRaises(AlreadyExistsError):
            cmd.execute(self.params, name='x/y', password='s2')
        self.assertEqual(self.params.store.get('x/y', PASSPHRASE), 's1')

    def test_get(self):
        cmd = record.RecordGetCommand()
        with passphrase_prompt(), mock.patch('builtins.print') as mock_print:
            cmd.execute_args(self.params, 'email/work')
            mock_print.assert_called_with('p4ss')
            cmd.execute_args(self.params, '-f email/work/')
            mock_print.assert_called_with('p4ss\nusername=me@corp.example\nurl=https://mail.corp.example')

    def test_get_clipboard(self):
        cmd = record.RecordGetCommand()
        with passphrase_prompt(), mock.patch('pyperclip.copy') as mock_copy, mock.patch('builtins.print') as mock_print:
            cmd.execute_args(self.params, '-f -c email/work')
        mock_copy.assert_called_once_with('p4ss')
        mock_print.assert_not_called()

    def test_get_invalid_path(self):
        cmd = record.RecordGetCommand()
        with passphrase_prompt() as mock_getpass:
            with self.assertRaises(CommandError) as e:
                cmd.execute(self.params, name='email/home')
            with self.assertRaises(CommandError):
                cmd.execute(self.params, name='email')
        self.assertIn('email/personal', e.exception.message)
        self.assertIn('email/work', e.exception.message)
        mock_getpass.assert_not_called()

    def test_get_wrong_passphrase(self):
        cmd = record.RecordGetCommand()
        with passphrase_prompt('wrong'), self.assertRaises(EncryptionError):
            cmd.execute(self.params, name='wifi')

    def test_edit(self):
        cmd = record.RecordEditCommand()
        with passphrase_prompt():
            cmd.execute_args(self.params, 'email/work -a url=x -r username')
            self.assertEqual(self.params.store.get('email/work', PASSPHRASE, full=True), 'p4ss\nurl=x')
            cmd.execute_args(self.params, 'email/work n3w')
            self.assertEqual(self.params.store.get('email/work', PASSPHRASE, full=True), 'n3w\nurl=x')

    def test_edit_no_change(self):
        cmd = record.RecordEditCommand()
        with passphrase_prompt() as mock_getpass:
            with self.assertRaises(NoChangeError):
                cmd.execute(self.params, name='wifi')
        mock_getpass.assert_not_called()

    def test_remove(self):
        cmd = record.RecordRemoveCommand()
        cmd.execute_args(self.params, '-f bank/checking')
        self.assertFalse(self.params.store.exists('bank'))

    def test_remove_confirmation(self):
        cmd = record.RecordRemoveCommand()
        with mock.patch('builtins.input', return_value='n'):
            cmd.execute(self.params, name='wifi')
        self.assertTrue(self.params.store.exists('wifi'))
        with mock.patch('builtins.input', return_value='y'):
            cmd.execute(self.params, name='wifi')
        self.assertFalse(self.params.store.exists('wifi'))

    def test_remove_folder(self):
        cmd = record.RecordRemoveCommand()
        with self.assertRaises(CommandError):
            cmd.execute(self.params, name='email', force=True)
        self.assertTrue(self.params.store.exists('email/work'))
