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
import tempfile
from typing import Dict, List, Optional

from . import record as record_codec
from .error import AlreadyExistsError, EncryptionError, InvalidPathError, NoChangeError, NotFoundError, \
    VaultError, VaultIOError
from .record import CredentialRecord, MetadataPatch
from .subfolder import VaultPath, CredentialItem, FileItem, DirItem, classify, is_reserved_entry

TEMP_FILE_PREFIX = '.vctmp-'


class VaultStore:
    """Credential storage on top of a directory tree.

    Every credential is a single file whose content is the engine ciphertext of
    the encoded record. Folders are plain directories and exist only as long as
    they hold at least one credential.
    """

    def __init__(self, root, engine):
        self.root = os.path.abspath(os.path.expanduser(root))
        self.engine = engine

    def _fs_path(self, path):    # type: (VaultPath) -> str
        return path.to_fs_path(self.root)

    def item_at(self, path):    # type: (VaultPath) -> Optional[CredentialItem]
        path = VaultPath.parse(path)
        fs_path = self._fs_path(path)
        if os.path.isdir(fs_path):
            return DirItem(path)
        if os.path.isfile(fs_path):
            return FileItem(path)
        return None

    def exists(self, path):
        return self.item_at(path) is not None

    def _require_file(self, path):    # type: (VaultPath) -> str
        item = self.item_at(path)
        if item is None or not item.is_file():
            raise NotFoundError(f'Credential "{path}" not found')
        return self._fs_path(path)

    def _check_ancestors(self, path):    # type: (VaultPath) -> None
        for ancestor in path.ancestors():
            if os.path.isfile(self._fs_path(ancestor)):
                raise InvalidPathError(f'"{ancestor}" is a credential, not a folder')

    def _encrypt(self, text, recipient):
        try:
            return self.engine.encrypt(text, recipient)
        except VaultError:
            raise
        except Exception as e:
            raise EncryptionError(f'Encryption failed: {e}')

    def _decrypt(self, data, passphrase):
        try:
            return self.engine.decrypt(data, passphrase)
        except VaultError:
            raise
        except Exception as e:
            raise EncryptionError(f'Decryption failed: {e}')

    def _write_atomic(self, fs_path, data):    # type: (str, bytes) -> None
        folder = os.path.dirname(fs_path)
        tmp_path = None
        try:
            os.makedirs(folder, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=TEMP_FILE_PREFIX, dir=folder)
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, fs_path)
            tmp_path = None
        except OSError as e:
            raise VaultIOError(f'Cannot write "{fs_path}": {e}')
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def _read(self, fs_path):    # type: (str) -> bytes
        try:
            with open(fs_path, 'rb') as f:
                return f.read()
        except OSError as e:
            raise VaultIOError(f'Cannot read "{fs_path}": {e}')

    def _prune_empty_folders(self, path):    # type: (Optional[VaultPath]) -> None
        while path is not None:
            fs_path = self._fs_path(path)
            try:
                if not os.path.isdir(fs_path) or os.listdir(fs_path):
                    break
                os.rmdir(fs_path)
                logging.debug('Removed empty folder "%s"', path)
            except OSError as e:
                raise VaultIOError(f'Cannot remove folder "{path}": {e}')
            path = path.parent

    def insert(self, path, secret, metadata=None, recipient=None):
        # type: (VaultPath, str, Optional[Dict[str, str]], Optional[bytes]) -> VaultPath
        path = VaultPath.parse(path)
        if self.exists(path):
            raise AlreadyExistsError(f'"{path}" already exists')
        self._check_ancestors(path)

        text = record_codec.encode(CredentialRecord(secret, metadata))
        data = self._encrypt(text, recipient)
        fs_path = self._fs_path(path)
        try:
            os.makedirs(os.path.dirname(fs_path), exist_ok=True)
            fd = os.open(fs_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
        except FileExistsError:
            raise AlreadyExistsError(f'"{path}" already exists')
        except OSError as e:
            raise VaultIOError(f'Cannot write credential "{path}": {e}')
        logging.debug('Credential "%s" created', path)
        return path

    def load(self, path, passphrase):    # type: (VaultPath, str) -> CredentialRecord
        path = VaultPath.parse(path)
        fs_path = self._require_file(path)
        text = self._decrypt(self._read(fs_path), passphrase)
        return record_codec.decode(text)

    def get(self, path, passphrase, full=False):    # type: (VaultPath, str, bool) -> str
        rec = self.load(path, passphrase)
        if full:
            return record_codec.encode(rec)
        return rec.secret

    def edit(self, path, passphrase, new_secret=None, metadata_patch=None, recipient=None):
        # type: (VaultPath, str, Optional[str], Optional[MetadataPatch], Optional[bytes]) -> CredentialRecord
        path = VaultPath.parse(path)
        fs_path = self._require_file(path)
        if isinstance(metadata_patch, MetadataPatch) and metadata_patch.is_empty():
            metadata_patch = None
        if new_secret is None and metadata_patch is None:
            raise NoChangeError(f'Nothing to change in "{path}"')

        rec = record_codec.decode(self._decrypt(self._read(fs_path), passphrase))
        if new_secret is not None:
            rec.secret = new_secret
        if metadata_patch is not None:
            rec = metadata_patch.apply(rec)

        data = self._encrypt(record_codec.encode(rec), recipient)
        self._write_atomic(fs_path, data)
        logging.debug('Credential "%s" updated', path)
        return rec

    def remove(self, path):    # type: (VaultPath) -> None
        path = VaultPath.parse(path)
        fs_path = self._require_file(path)
        try:
            os.remove(fs_path)
        except OSError as e:
            raise VaultIOError(f'Cannot remove credential "{path}": {e}')
        self._prune_empty_folders(path.parent)
        logging.debug('Credential "%s" removed', path)

    def move(self, source, destination):    # type: (VaultPath, VaultPath) -> CredentialItem
        source = VaultPath.parse(source)
        destination = VaultPath.parse(destination)
        item = self.item_at(source)
        if item is None:
            raise NotFoundError(f'"{source}" not found')
        if self.exists(destination):
            raise AlreadyExistsError(f'"{destination}" already exists')
        if item.is_dir() and destination.is_relative_to(source):
            raise InvalidPathError(f'Cannot move "{source}" into itself')
        self._check_ancestors(destination)

        dst_fs_path = self._fs_path(destination)
        try:
            os.makedirs(os.path.dirname(dst_fs_path), exist_ok=True)
            os.rename(self._fs_path(source), dst_fs_path)
        except OSError as e:
            raise VaultIOError(f'Cannot move "{source}" to "{destination}": {e}')
        self._prune_empty_folders(source.parent)
        logging.debug('"%s" moved to "%s"', source, destination)
        return DirItem(destination) if item.is_dir() else FileItem(destination)

    def list(self, path=None, recursive=False):    # type: (Optional[VaultPath], bool) -> List[CredentialItem]
        if path is None:
            fs_path = self.root
            if not os.path.isdir(fs_path):
                raise NotFoundError(f'Vault "{self.root}" is not initialized')
        else:
            path = VaultPath.parse(path)
            item = self.item_at(path)
            if item is None:
                raise NotFoundError(f'"{path}" not found')
            if item.is_file():
                return [item]
            fs_path = self._fs_path(path)

        items = []
        try:
            for folder, dirs, files in os.walk(fs_path):
                if folder == self.root:
                    dirs[:] = [x for x in dirs if not is_reserved_entry(x)]
                    files = [x for x in files if not is_reserved_entry(x)]
                for name in dirs + files:
                    if name.startswith(TEMP_FILE_PREFIX):
                        continue
                    entry = classify(self.root, os.path.join(folder, name))
                    if entry is not None:
                        items.append(entry)
                if not recursive:
                    break
        except OSError as e:
            raise VaultIOError(f'Cannot list "{path or self.root}": {e}')

        items.sort(key=lambda x: x.path)
        return items
