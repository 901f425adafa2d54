#  _   __          ____
# | | / /__ ___ __/ / /_
# | |/ / _ `/ // / / __/
# |___/\_,_/\_,_/_/\__/
#
# Vault Commander
# Copyright 2024 Vault Commander contributors
#
import shutil
from collections import OrderedDict
from typing import Iterable, List, Optional

from asciitree import LeftAligned, BoxStyle, drawing
from colorama import init, Fore, Style
from tabulate import tabulate

from . import __version__
from .error import VaultError
from .subfolder import CredentialItem, VaultPath

init()


class bcolors:
    HEADER = '\033[95m'
    OKBLUE = '\033[94m'
    OKGREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'


def vault_colorize(text, color):
    if color == 'red':
        return f'{Fore.RED}{text}{Fore.RESET}'
    if color == 'green':
        return f'{Fore.GREEN}{text}{Fore.RESET}'
    if color == 'blue':
        return f'{Fore.BLUE}{text}{Fore.RESET}'
    if color == 'yellow':
        return f'{Fore.YELLOW}{text}{Fore.RESET}'
    if color == 'gray':
        return f'{Fore.LIGHTBLACK_EX}{text}{Fore.RESET}'
    return text


def welcome():
    lines = [
        r' _   __          ____    _____                              __       ',
        r'| | / /__ ___ __/ / /_  / ___/__  __ _  __ _  ___ ____  ___/ /__ ____',
        r'| |/ / _ `/ // / / __/ / /__/ _ \/  ` \/  ` \/ _ `/ _ \/ _  / -_) __/',
        r'|___/\_,_/\_,_/_/\__/  \___/\___/_/_/_/_/_/_/\_,_/_//_/\_,_/\__/_/   ',
        '',
    ]

    width = shutil.get_terminal_size(fallback=(160, 50)).columns
    print(Style.RESET_ALL)
    for line in lines:
        if len(line) > width:
            line = line[:width]
        print(Fore.LIGHTYELLOW_EX + line)
    print(Fore.LIGHTBLACK_EX + f'{("v" + __version__):>69}\n' + Style.RESET_ALL)


def format_error(e):    # type: (VaultError) -> str
    return vault_colorize(f'{e.kind} :: {e.message}', 'red')


def format_item(item, base=None):    # type: (CredentialItem, Optional[VaultPath]) -> str
    if base is not None and item.path.is_relative_to(base) and item.path != base:
        name = '/'.join(item.path.relative_to(base))
    else:
        name = str(item.path)
    if item.is_dir():
        return vault_colorize(name + '/', 'blue')
    return name


def formatted_items(items, base=None, verbose=False):
    # type: (Iterable[CredentialItem], Optional[VaultPath], bool) -> None
    """Print listing entries, folders first."""
    items = sorted(items, key=lambda x: (not x.is_dir(), x.path))
    if verbose:
        table = [[i + 1, 'Folder' if x.is_dir() else 'Credential', format_item(x, base)]
                 for i, x in enumerate(items)]
        print(tabulate(table, headers=['#', 'Type', 'Path']))
    else:
        for item in items:
            print(format_item(item, base))


def build_tree(items, base=None):    # type: (Iterable[CredentialItem], Optional[VaultPath]) -> OrderedDict
    tree = OrderedDict()
    for item in sorted(items, key=lambda x: x.path):
        components = item.path.components
        if base is not None:
            if not item.path.is_relative_to(base) or item.path == base:
                continue
            components = item.path.relative_to(base)
        node = tree
        for i, component in enumerate(components):
            is_last = i == len(components) - 1
            name = component + '/' if not is_last or item.is_dir() else component
            node = node.setdefault(name, OrderedDict())
    return tree


def formatted_tree(items, root_name, base=None):    # type: (List[CredentialItem], str, Optional[VaultPath]) -> str
    tr = LeftAligned(draw=BoxStyle(gfx=drawing.BOX_LIGHT))
    return tr({root_name: build_tree(items, base)})
