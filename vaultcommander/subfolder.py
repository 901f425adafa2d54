#  _   __          ____
# | | / /__ ___ __/ / /_
# | |/ / _ `/ // / / __/
# |___/\_,_/\_,_/_/\__/
#
# Vault Commander
# Copyright 2024 Vault Commander contributors
#
import os
from typing import Iterable, List, Optional, Tuple

from .error import InvalidPathError

PATH_DELIMITER = '/'
RESERVED_ROOT_NAMES = frozenset(['.git'])


def normalize_query(raw):    # type: (str) -> List[str]
    """Split a path typed by the user into segments.

    One trailing delimiter is dropped. No segment is rejected here: a query that
    cannot name anything simply does not match.
    """
    if not isinstance(raw, str):
        raise InvalidPathError(f'Path must be text, got {type(raw).__name__}')
    if raw.endswith(PATH_DELIMITER):
        raw = raw[:-1]
    return raw.split(PATH_DELIMITER)


def base_prefix(raw):    # type: (str) -> str
    components = normalize_query(raw)
    return PATH_DELIMITER.join(components[:-1])


def matches(items, raw):    # type: (Iterable[CredentialItem], str) -> bool
    components = tuple(normalize_query(raw))
    return any(x.path.components == components for x in items)


class VaultPath:
    """Vault-relative path of a credential or of a folder holding credentials."""

    __slots__ = ('_components',)

    def __init__(self, components):    # type: (Iterable[str]) -> None
        components = tuple(components)
        if len(components) == 0:
            raise InvalidPathError('Path is empty')
        for component in components:
            if not isinstance(component, str):
                raise InvalidPathError(f'Path segment must be text, got {type(component).__name__}')
            if component in ('', '.', '..'):
                raise InvalidPathError(f'"{PATH_DELIMITER.join(components)}": invalid path segment "{component}"')
            if os.sep in component or (os.altsep and os.altsep in component):
                raise InvalidPathError(f'"{component}": path segment contains a separator')
        if components[0] in RESERVED_ROOT_NAMES:
            raise InvalidPathError(f'"{components[0]}" is reserved')
        self._components = components

    @classmethod
    def parse(cls, raw):    # type: (str) -> VaultPath
        if isinstance(raw, VaultPath):
            return raw
        if not isinstance(raw, str):
            raise InvalidPathError(f'Path must be text, got {type(raw).__name__}')
        if raw.startswith(PATH_DELIMITER):
            raise InvalidPathError(f'"{raw}": path must be relative to the vault root')
        return cls(normalize_query(raw))

    @property
    def components(self):    # type: () -> Tuple[str, ...]
        return self._components

    @property
    def name(self):
        return self._components[-1]

    @property
    def parent(self):    # type: () -> Optional[VaultPath]
        if len(self._components) > 1:
            return VaultPath(self._components[:-1])
        return None

    def ancestors(self):    # type: () -> Iterable[VaultPath]
        for i in range(1, len(self._components)):
            yield VaultPath(self._components[:i])

    def joinpath(self, *components):
        return VaultPath(self._components + tuple(components))

    def is_relative_to(self, other):    # type: (VaultPath) -> bool
        return self._components[:len(other.components)] == other.components

    def relative_to(self, other):    # type: (VaultPath) -> Tuple[str, ...]
        if not self.is_relative_to(other):
            raise InvalidPathError(f'"{self}" is not under "{other}"')
        return self._components[len(other.components):]

    def to_fs_path(self, root):    # type: (str) -> str
        return os.path.join(root, *self._components)

    def __eq__(self, other):
        if isinstance(other, VaultPath):
            return self._components == other._components
        return NotImplemented

    def __lt__(self, other):
        if isinstance(other, VaultPath):
            return self._components < other._components
        return NotImplemented

    def __hash__(self):
        return hash(self._components)

    def __str__(self):
        return PATH_DELIMITER.join(self._components)

    def __repr__(self):
        return f'VaultPath({str(self)!r})'


class CredentialItem:
    FileType = 'file'
    DirType = 'dir'

    def __init__(self, item_type, path):    # type: (str, VaultPath) -> None
        self.type = item_type
        self.path = path

    def is_dir(self):
        return self.type == CredentialItem.DirType

    def is_file(self):
        return self.type == CredentialItem.FileType

    def matches(self, raw):    # type: (str) -> bool
        return self.path.components == tuple(normalize_query(raw))

    def __eq__(self, other):
        if isinstance(other, CredentialItem):
            return self.type == other.type and self.path == other.path
        return NotImplemented

    def __hash__(self):
        return hash((self.type, self.path))

    def __str__(self):
        return str(self.path) + (PATH_DELIMITER if self.is_dir() else '')

    def __repr__(self):
        return f'{type(self).__name__}({str(self.path)!r})'


class FileItem(CredentialItem):
    def __init__(self, path):
        super().__init__(CredentialItem.FileType, VaultPath.parse(path))


class DirItem(CredentialItem):
    def __init__(self, path):
        super().__init__(CredentialItem.DirType, VaultPath.parse(path))


def is_reserved_entry(name):    # type: (str) -> bool
    return name in RESERVED_ROOT_NAMES


def classify(root, fs_path):    # type: (str, str) -> Optional[CredentialItem]
    """Turn a filesystem entry under the vault root into a File or a Dir.

    Returns None for entries that are neither a regular file nor a directory
    (sockets, dangling links) and for the vault root itself.
    """
    rel_path = os.path.relpath(fs_path, root)
    if rel_path in ('', os.curdir) or rel_path.startswith(os.pardir):
        return None
    path = VaultPath(rel_path.split(os.sep))
    if os.path.isdir(fs_path):
        return DirItem(path)
    if os.path.isfile(fs_path):
        return FileItem(path)
    return None
