#  _   __          ____
# | | / /__ ___ __/ / /_
# | |/ / _ `/ // / / __/
# |___/\_,_/\_,_/_/\__/
#
# Vault Commander
# Copyright 2024 Vault Commander contributors
#

import argparse
import logging
from typing import Optional

from .base import Command, CredentialMixin, dump_report_data, json_output_parser
from .. import display
from ..params import VaultParams
from ..subfolder import VaultPath


def register_commands(commands):
    commands['ls'] = FolderListCommand()
    commands['tree'] = FolderTreeCommand()
    commands['mv'] = FolderMoveCommand()


def register_command_info(aliases, command_info):
    aliases['dir'] = 'ls'
    aliases['move'] = 'mv'
    for p in [ls_parser, tree_parser, mv_parser]:
        command_info[p.prog] = p.description


ls_parser = argparse.ArgumentParser(prog='ls', description='List folder contents', parents=[json_output_parser])
ls_parser.add_argument('-R', '--recursive', dest='recursive', action='store_true', help='list subfolders recursively')
ls_parser.add_argument('-l', '--list', dest='detail', action='store_true', help='show detailed list')
ls_parser.add_argument('path', nargs='?', type=str, action='store', help='folder path')


tree_parser = argparse.ArgumentParser(prog='tree', description='Display the vault folder structure')
tree_parser.add_argument('path', nargs='?', type=str, action='store', help='folder path')


mv_parser = argparse.ArgumentParser(prog='mv', description='Move or rename a credential or a folder')
mv_parser.add_argument('src', nargs='?', type=str, action='store', help='source credential or folder path')
mv_parser.add_argument('dst', nargs='?', type=str, action='store', help='destination path')


class FolderListCommand(Command, CredentialMixin):
    def get_parser(self):
        return ls_parser

    def execute(self, params, **kwargs):    # type: (VaultParams, ...) -> Optional[str]
        base = None
        name = kwargs.get('path')
        if name:
            base = VaultPath.parse(self.resolve_path(params, name, 'ls', kind='dirs'))

        items = params.store.list(base, recursive=kwargs.get('recursive') is True)
        fmt = kwargs.get('format') or 'table'
        if fmt == 'json':
            table = [[str(x.path), x.type] for x in items]
            return dump_report_data(table, headers=['path', 'type'], fmt='json')
        if len(items) == 0:
            logging.info('Folder is empty')
            return
        display.formatted_items(items, base=base, verbose=kwargs.get('detail') is True)


class FolderTreeCommand(Command, CredentialMixin):
    def get_parser(self):
        return tree_parser

    def execute(self, params, **kwargs):    # type: (VaultParams, ...) -> None
        base = None
        name = kwargs.get('path')
        if name:
            base = VaultPath.parse(self.resolve_path(params, name, 'tree', kind='dirs'))
        items = params.store.list(base, recursive=True)
        root_name = f'{base}/' if base else 'vault'
        print(display.formatted_tree(items, root_name, base=base))


class FolderMoveCommand(Command, CredentialMixin):
    def get_parser(self):
        return mv_parser

    def execute(self, params, **kwargs):    # type: (VaultParams, ...) -> None
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not dst:
            parser = self.get_parser()
            parser.print_help()
            return
        source = self.resolve_path(params, src, 'mv')
        item = params.store.move(source, dst)
        logging.info('"%s" moved to "%s"', source, item)
