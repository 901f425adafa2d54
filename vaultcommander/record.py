#  _   __          ____
# | | / /__ ___ __/ / /_
# | |/ / _ `/ // / / __/
# |___/\_,_/\_,_/_/\__/
#
# Vault Commander
# Copyright 2024 Vault Commander contributors
#
import collections
from typing import Dict, Iterable, List, Optional, Tuple

from .error import InvalidSecretError, MalformedRecordError

LINE_BREAKS = ('\n', '\r')

PatchOperation = collections.namedtuple('PatchOperation', 'action key value')


def _has_line_break(value):    # type: (str) -> bool
    return any(x in value for x in LINE_BREAKS)


def parse_key_value(value):    # type: (str) -> Tuple[str, str]
    key, sep, val = value.partition('=')
    if not sep:
        raise MalformedRecordError('Invalid metadata format. expected "key=value"')
    return key, val


class CredentialRecord:
    """Decrypted content of a credential: the secret and its ordered metadata."""

    def __init__(self, secret, metadata=None):
        # type: (str, Optional[Dict[str, str]]) -> None
        self.secret = secret
        self.metadata = collections.OrderedDict()    # type: Dict[str, str]
        if metadata:
            items = metadata.items() if isinstance(metadata, dict) else metadata
            for key, value in items:
                self.metadata[key] = value

    def copy(self):
        return CredentialRecord(self.secret, self.metadata)

    def __eq__(self, other):
        if isinstance(other, CredentialRecord):
            return self.secret == other.secret and list(self.metadata.items()) == list(other.metadata.items())
        return NotImplemented

    def __repr__(self):
        return f'CredentialRecord(secret=***, metadata={list(self.metadata.keys())})'


class MetadataPatch:
    SET = 'set'
    DELETE = 'delete'

    def __init__(self, operations=None):    # type: (Optional[Iterable[PatchOperation]]) -> None
        self.operations = list(operations or [])    # type: List[PatchOperation]

    @classmethod
    def from_args(cls, add_metadata=None, remove_metadata=None):
        # type: (Optional[Iterable[Tuple[str, str]]], Optional[Iterable[str]]) -> MetadataPatch
        patch = cls()
        for key, value in add_metadata or []:
            patch.set(key, value)
        for key in remove_metadata or []:
            patch.delete(key)
        return patch

    def set(self, key, value):
        self.operations.append(PatchOperation(MetadataPatch.SET, key, value))
        return self

    def delete(self, key):
        self.operations.append(PatchOperation(MetadataPatch.DELETE, key, None))
        return self

    def is_empty(self):
        return len(self.operations) == 0

    def apply(self, record):    # type: (CredentialRecord) -> CredentialRecord
        result = record.copy()
        for op in self.operations:
            if op.action == MetadataPatch.SET:
                result.metadata[op.key] = op.value
            elif op.action == MetadataPatch.DELETE:
                result.metadata.pop(op.key, None)
        return result

    def __len__(self):
        return len(self.operations)

    def __bool__(self):
        return not self.is_empty()


def encode(record):    # type: (CredentialRecord) -> str
    if not isinstance(record.secret, str):
        raise InvalidSecretError('Secret must be text')
    if _has_line_break(record.secret):
        raise InvalidSecretError('Secret cannot contain line breaks')

    lines = [record.secret]
    for key, value in record.metadata.items():
        if not key or '=' in key or _has_line_break(key):
            raise MalformedRecordError(f'Invalid metadata key "{key}"')
        value = '' if value is None else str(value)
        if _has_line_break(value):
            raise MalformedRecordError(f'Metadata "{key}" value cannot contain line breaks')
        lines.append(f'{key}={value}')
    return '\n'.join(lines)


def decode(text):    # type: (str) -> CredentialRecord
    if text.endswith('\n'):
        text = text[:-1]
    lines = text.split('\n')
    record = CredentialRecord(lines[0])
    for index, line in enumerate(lines[1:], start=1):
        key, sep, value = line.partition('=')
        if not sep:
            raise MalformedRecordError(f'Line {index}: expected "key=value"', line=index)
        if key in record.metadata:
            raise MalformedRecordError(f'Line {index}: duplicate metadata key "{key}"', line=index)
        record.metadata[key] = value
    return record
