#  _   __          ____
# | | / /__ ___ __/ / /_
# | |/ / _ `/ // / / __/
# |___/\_,_/\_,_/_/\__/
#
# Vault Commander
# Copyright 2024 Vault Commander contributors
#

import logging
import os
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.ciphers import Cipher
from cryptography.hazmat.primitives.ciphers.algorithms import AES
from cryptography.hazmat.primitives.ciphers.modes import GCM
from cryptography.hazmat.primitives.hashes import Hash, SHA256

from .error import EncryptionError

_CRYPTO_BACKEND = default_backend()
_CURVE = ec.SECP256R1()

ENVELOPE_VERSION = b'\x01'
PRIVATE_KEY_FILE = 'vault.key'
PUBLIC_KEY_FILE = 'vault.pub'


def get_random_bytes(length):
    return secrets.token_bytes(length)


def generate_ec_key():
    private_key = ec.generate_private_key(curve=_CURVE, backend=_CRYPTO_BACKEND)
    return private_key, private_key.public_key()


def load_ec_public_key(public_key):
    return ec.EllipticCurvePublicKey.from_encoded_point(_CURVE, public_key)


def unload_ec_public_key(public_key):
    return public_key.public_bytes(encoding=serialization.Encoding.X962,
                                   format=serialization.PublicFormat.UncompressedPoint)


def unload_private_key_pem(private_key, passphrase):    # type: (ec.EllipticCurvePrivateKey, str) -> bytes
    if not passphrase:
        raise EncryptionError('Passphrase cannot be empty')
    return private_key.private_bytes(encoding=serialization.Encoding.PEM,
                                     format=serialization.PrivateFormat.PKCS8,
                                     encryption_algorithm=serialization.BestAvailableEncryption(passphrase.encode('utf-8')))


def unload_public_key_pem(public_key):
    return public_key.public_bytes(encoding=serialization.Encoding.PEM,
                                   format=serialization.PublicFormat.SubjectPublicKeyInfo)


def load_private_key_pem(pem, passphrase):    # type: (bytes, str) -> ec.EllipticCurvePrivateKey
    try:
        key = serialization.load_pem_private_key(pem, (passphrase or '').encode('utf-8'), _CRYPTO_BACKEND)
    except (ValueError, TypeError) as e:
        raise EncryptionError(f'Cannot unlock private key: {e}')
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise EncryptionError('Private key is not an EC key')
    return key


def load_public_key_pem(pem):    # type: (bytes) -> ec.EllipticCurvePublicKey
    try:
        key = serialization.load_pem_public_key(pem, _CRYPTO_BACKEND)
    except ValueError as e:
        raise EncryptionError(f'Cannot load public key: {e}')
    if not isinstance(key, ec.EllipticCurvePublicKey):
        raise EncryptionError('Public key is not an EC key')
    return key


def encrypt_aes_v2(data, key, nonce=None):
    nonce = nonce or get_random_bytes(12)
    cipher = Cipher(AES(key), GCM(nonce), backend=_CRYPTO_BACKEND)
    encrypter = cipher.encryptor()
    encrypted_data = encrypter.update(data) + encrypter.finalize()
    return nonce + encrypted_data + encrypter.tag


def decrypt_aes_v2(data, key):
    nonce = data[:12]
    cipher = Cipher(AES(key), GCM(nonce), backend=_CRYPTO_BACKEND)
    decrypter = cipher.decryptor()
    decrypted_data = decrypter.update(data[12:-16]) + decrypter.finalize_with_tag(data[-16:])
    return decrypted_data


def _derive_key(shared_secret):
    digest = Hash(SHA256(), backend=_CRYPTO_BACKEND)
    digest.update(shared_secret)
    return digest.finalize()


def encrypt_ec(data, ec_public_key):
    e_private_key, e_public_key = generate_ec_key()
    shared_secret = e_private_key.exchange(ec.ECDH(), ec_public_key)
    return unload_ec_public_key(e_public_key) + encrypt_aes_v2(data, _derive_key(shared_secret))


def decrypt_ec(data, ec_private_key):
    ephemeral_public_key = load_ec_public_key(data[:65])
    shared_secret = ec_private_key.exchange(ec.ECDH(), ephemeral_public_key)
    return decrypt_aes_v2(data[65:], _derive_key(shared_secret))


def encrypt(plaintext, recipient_key):    # type: (str, ec.EllipticCurvePublicKey) -> bytes
    if isinstance(recipient_key, bytes):
        recipient_key = load_public_key_pem(recipient_key)
    return ENVELOPE_VERSION + encrypt_ec(plaintext.encode('utf-8'), recipient_key)


def decrypt(ciphertext, private_key):    # type: (bytes, ec.EllipticCurvePrivateKey) -> str
    # version + ephemeral point + nonce + tag
    if len(ciphertext) < 1 + 65 + 12 + 16 or ciphertext[:1] != ENVELOPE_VERSION:
        raise EncryptionError('Unsupported or corrupted ciphertext')
    try:
        data = decrypt_ec(ciphertext[1:], private_key)
    except (InvalidTag, ValueError) as e:
        raise EncryptionError(f'Cannot decrypt credential: {e or "authentication failed"}')
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError:
        raise EncryptionError('Decrypted credential is not valid UTF-8')


class PemKeyEngine:
    """Encryption engine backed by a PEM key pair stored in ``key_dir``.

    The private key is kept encrypted with the passphrase; it is loaded for
    every decrypt call and never cached.
    """

    def __init__(self, key_dir):    # type: (str) -> None
        self.key_dir = os.path.expanduser(key_dir)

    @property
    def private_key_path(self):
        return os.path.join(self.key_dir, PRIVATE_KEY_FILE)

    @property
    def public_key_path(self):
        return os.path.join(self.key_dir, PUBLIC_KEY_FILE)

    def has_keys(self):
        return os.path.isfile(self.private_key_path) and os.path.isfile(self.public_key_path)

    def generate_keys(self, passphrase):    # type: (str) -> str
        if self.has_keys():
            raise EncryptionError(f'Keys already exist in {self.key_dir}')
        private_key, public_key = generate_ec_key()
        private_pem = unload_private_key_pem(private_key, passphrase)
        public_pem = unload_public_key_pem(public_key)
        try:
            os.makedirs(self.key_dir, mode=0o700, exist_ok=True)
            fd = os.open(self.private_key_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            with os.fdopen(fd, 'wb') as f:
                f.write(private_pem)
            with open(self.public_key_path, 'wb') as f:
                f.write(public_pem)
        except OSError as e:
            raise EncryptionError(f'Cannot write keys to {self.key_dir}: {e}')
        logging.debug('Key pair written to %s', self.key_dir)
        return self.key_dir

    def _read(self, path):
        try:
            with open(path, 'rb') as f:
                return f.read()
        except FileNotFoundError:
            raise EncryptionError(f'Key file {path} not found. Run "init" first')
        except OSError as e:
            raise EncryptionError(f'Cannot read key file {path}: {e}')

    def default_recipient(self):    # type: () -> bytes
        return self._read(self.public_key_path)

    def encrypt(self, plaintext, recipient_key=None):    # type: (str, bytes) -> bytes
        return encrypt(plaintext, recipient_key or self.default_recipient())

    def decrypt(self, ciphertext, passphrase):    # type: (bytes, str) -> str
        private_key = load_private_key_pem(self._read(self.private_key_path), passphrase)
        return decrypt(ciphertext, private_key)
