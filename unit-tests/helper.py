from vaultcommander.error import EncryptionError

PASSPHRASE = 'correct horse'


class FakeEngine:
    """Reversible stand-in for the key pair engine. Ciphertext is the reversed plaintext."""

    prefix = b'FAKE1:'

    def __init__(self, passphrase=PASSPHRASE):
        self.passphrase = passphrase
        self.key_dir = ''
        self.recipients = []
        self.generated = []

    def has_keys(self):
        return True

    def generate_keys(self, passphrase):
        self.generated.append(passphrase)
        return self.key_dir

    def encrypt(self, plaintext, recipient_key=None):
        self.recipients.append(recipient_key)
        return self.prefix + plaintext.encode('utf-8')[::-1]

    def decrypt(self, ciphertext, passphrase):
        if passphrase != self.passphrase:
            raise EncryptionError('Bad passphrase')
        if not ciphertext.startswith(self.prefix):
            raise EncryptionError('Not a fake ciphertext')
        return ciphertext[len(self.prefix):][::-1].decode('utf-8')
