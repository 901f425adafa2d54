#  _   __          ____
# | | / /__ ___ __/ / /_
# | |/ / _ `/ // / / __/
# |___/\_,_/\_,_/_/\__/
#
# Vault Commander
# Copyright 2024 Vault Commander contributors
#

class Error(Exception):
    """Base class for exceptions in this module."""
    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class CommandError(Error):
    def __init__(self, command, message):
        super().__init__(message)
        self.command = command

    def __str__(self):
        if self.command:
            return f'{self.command}: {self.message}'
        else:
            return super().__str__()


class VaultError(Error):
    """Failure raised by the vault engine.

    ``kind`` names the failure category; it is what the command line prints
    in front of the message.
    """
    kind = 'VaultError'


class InvalidPathError(VaultError):
    kind = 'InvalidPath'


class AlreadyExistsError(VaultError):
    kind = 'AlreadyExists'


class NotFoundError(VaultError):
    kind = 'NotFound'


class NoChangeError(VaultError):
    kind = 'NoChange'


class MalformedRecordError(VaultError):
    kind = 'MalformedRecord'

    def __init__(self, message, line=None):
        super().__init__(message)
        self.line = line


class InvalidSecretError(VaultError):
    kind = 'InvalidSecret'


class NotConfiguredError(VaultError):
    kind = 'NotConfigured'


class EncryptionError(VaultError):
    kind = 'EncryptionFailure'


class TransportError(VaultError):
    kind = 'TransportFailure'

    def __init__(self, message, command=None, stderr=None):
        super().__init__(message)
        self.command = command
        self.stderr = stderr


class VaultIOError(VaultError):
    kind = 'IoFailure'
