#  _   __          ____
# | | / /__ ___ __/ / /_
# | |/ / _ `/ // / / __/
# |___/\_,_/\_,_/_/\__/
#
# Vault Commander
# Copyright 2024 Vault Commander contributors
#
"""
Vault synchronization over git.

The git credentials live inside the vault itself, as an ordinary credential at
``config/git``: the token is the secret, ``uri`` and ``username`` are metadata.
Syncing therefore needs the passphrase first, to read the record that unlocks
the remote. This is the only place where the sync layer reads the vault.
"""

import datetime
import logging
import os
import subprocess
from typing import List, Optional, Sequence, Tuple

from .error import NotConfiguredError, NotFoundError, TransportError
from .subfolder import VaultPath
from .vault import VaultStore

TRANSPORT_NAME = 'git'
SYNC_CREDENTIAL_PATH = VaultPath(('config', TRANSPORT_NAME))

USERNAME_ENV = 'VAULT_COMMANDER_GIT_USERNAME'
TOKEN_ENV = 'VAULT_COMMANDER_GIT_TOKEN'
# Answers git credential requests from the environment, so the token never
# lands on the command line or on disk.
CREDENTIAL_HELPER = f'!f() {{ echo "username=${USERNAME_ENV}"; echo "password=${TOKEN_ENV}"; }}; f'
COMMIT_IDENTITY = ['-c', 'user.name=vault-commander', '-c', 'user.email=vault-commander@localhost']


class GitTransport:
    def __init__(self, root, remote='origin', branch='main', git='git'):
        self.root = root
        self.remote = remote
        self.branch = branch
        self.git = git

    def is_repository(self):
        return os.path.isdir(os.path.join(self.root, '.git'))

    def _run(self, args, auth=None, check=True):
        # type: (List[str], Optional[Tuple[str, str]], bool) -> subprocess.CompletedProcess
        cmd = [self.git]
        # git output is matched in English
        env = os.environ.copy()
        env['LC_ALL'] = 'C'
        if auth:
            username, token = auth
            env[USERNAME_ENV] = username or ''
            env[TOKEN_ENV] = token or ''
            env['GIT_TERMINAL_PROMPT'] = '0'
            cmd.extend(['-c', 'credential.helper=', '-c', f'credential.helper={CREDENTIAL_HELPER}'])
        cmd.extend(args)
        logging.debug('Running: git %s', ' '.join(args))
        try:
            result = subprocess.run(cmd, cwd=self.root, env=env, capture_output=True, text=True, check=False)
        except OSError as e:
            raise TransportError(f'Cannot run git: {e}', command=' '.join(args))
        if check and result.returncode != 0:
            stderr = (result.stderr or '').strip()
            raise TransportError(f'git {args[0]} failed: {stderr}', command=' '.join(args), stderr=stderr)
        return result

    def init_repository(self):    # type: () -> str
        os.makedirs(self.root, exist_ok=True)
        if not self.is_repository():
            self._run(['init', '--initial-branch', self.branch])
            logging.debug('Initialized git repository in %s', self.root)
        return self.root

    def add_remote(self, uri):    # type: (str) -> None
        result = self._run(['remote'], check=False)
        remotes = (result.stdout or '').split()
        if self.remote in remotes:
            self._run(['remote', 'set-url', self.remote, uri])
        else:
            self._run(['remote', 'add', self.remote, uri])
        logging.debug('Remote "%s" set to %s', self.remote, uri)

    def commit_all(self, message=None):    # type: (Optional[str]) -> bool
        self._run(['add', '--all'])
        status = self._run(['status', '--porcelain'])
        if not status.stdout.strip():
            return False
        message = message or f'vault: sync [{datetime.datetime.now(datetime.timezone.utc).isoformat()}]'
        self._run(COMMIT_IDENTITY + ['commit', '--quiet', '-m', message])
        return True

    def fetch(self, remote, auth, keep_local=()):    # type: (str, Tuple[str, str], Sequence[str]) -> bool
        """Fetch the branch and merge it into the local history.

        The first sync of a second machine merges two unrelated histories.
        Conflicts limited to ``keep_local`` files resolve to the local version.
        """
        result = self._run(['fetch', remote, self.branch], auth=auth, check=False)
        if result.returncode != 0:
            stderr = (result.stderr or '').strip()
            if "couldn't find remote ref" in stderr:
                logging.info('Remote branch "%s" does not exist yet', self.branch)
                return False
            raise TransportError(f'git fetch failed: {stderr}', command='fetch', stderr=stderr)

        merge = self._run(COMMIT_IDENTITY + ['merge', '--no-edit', '--allow-unrelated-histories', 'FETCH_HEAD'],
                          check=False)
        if merge.returncode == 0:
            return True

        stderr = (merge.stderr or merge.stdout or '').strip()
        conflicts = (self._run(['diff', '--name-only', '--diff-filter=U'], check=False).stdout or '').split()
        if conflicts and set(conflicts) <= set(keep_local):
            for name in conflicts:
                self._run(['checkout', '--ours', '--', name])
                self._run(['add', '--', name])
            self._run(COMMIT_IDENTITY + ['commit', '--quiet', '--no-edit'])
            logging.info('Kept the local version of %s', ', '.join(conflicts))
            return True

        self._run(['merge', '--abort'], check=False)
        if conflicts:
            message = (f'Merge with {remote}/{self.branch} failed. Conflicting credentials: {", ".join(conflicts)}. '
                       'Resolve the conflict manually in the vault repository')
        else:
            message = f'Merge with {remote}/{self.branch} failed: {stderr}'
        raise TransportError(message, command='merge', stderr=stderr)

    def push(self, remote, auth):    # type: (str, Tuple[str, str]) -> None
        self._run(['push', remote, f'HEAD:{self.branch}'], auth=auth)


class SyncCoordinator:
    def __init__(self, store, transport):    # type: (VaultStore, GitTransport) -> None
        self.store = store
        self.transport = transport

    def set_remote(self, username, token, uri):    # type: (str, str, str) -> None
        self.store.insert(SYNC_CREDENTIAL_PATH, token, {'uri': uri, 'username': username})
        self.transport.add_remote(uri)
        logging.info('Remote %s configured', uri)

    def credentials(self, passphrase):    # type: (str) -> Tuple[str, str]
        try:
            rec = self.store.load(SYNC_CREDENTIAL_PATH, passphrase)
        except NotFoundError:
            raise NotConfiguredError('Sync is not configured. Run "sync config" first')
        username = rec.metadata.get('username')
        if username is None:
            raise NotConfiguredError(f'"{SYNC_CREDENTIAL_PATH}" has no username')
        return username, rec.secret

    def sync(self, passphrase):    # type: (str) -> None
        auth = self.credentials(passphrase)
        remote = self.transport.remote
        if self.transport.commit_all():
            logging.info('Local changes committed')
        self.transport.fetch(remote, auth, keep_local=[str(SYNC_CREDENTIAL_PATH)])
        logging.info('Fetched from %s', remote)
        self.transport.push(remote, auth)
        logging.info('Pushed to %s', remote)
