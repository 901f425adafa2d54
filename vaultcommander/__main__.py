# -*- coding: utf-8 -*-
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
import re
import shlex
import sys

from . import __version__
from . import cli
from .params import get_params_from_config


def usage(m):
    print(m)
    parser.print_help()
    cli.display_command_help(show_shell=True)
    sys.exit(1)


parser = argparse.ArgumentParser(prog='vault-commander', add_help=False, allow_abbrev=False)
parser.add_argument('--version', dest='version', action='store_true', help='Display version')
parser.add_argument('--config', dest='config', action='store', help='Config file to use')
parser.add_argument('--debug', dest='debug', action='store_true', help='Turn on debug mode')
parser.add_argument('--batch-mode', dest='batch_mode', action='store_true', help='Run commands without prompting.')
parser.add_argument('command', nargs='?', type=str, action='store', help='Command')
parser.add_argument('options', nargs='*', action='store', help='Options')
parser.error = usage


def main():
    logging.basicConfig(format='%(message)s')

    sys.argv[0] = re.sub(r'(-script\.pyw?|\.exe)?$', '', sys.argv[0])
    opts, flags = parser.parse_known_args(sys.argv[1:])

    params = get_params_from_config(opts.config)

    if opts.batch_mode:
        params.batch_mode = True

    if opts.debug:
        params.debug = opts.debug

    logging.getLogger().setLevel(logging.DEBUG if params.debug else logging.WARNING if params.batch_mode else logging.INFO)

    if opts.version:
        print(f'Vault Commander, version {__version__}')
        return

    if flags and len(flags) > 0:
        if flags[0] in ('-h', '--help'):
            flags.clear()
            opts.command = '?'
    elif opts.command == 'help' and len(opts.options) == 0:
        opts.command = '?'
    if (opts.command or '') == '?':
        usage('')

    if not opts.command:
        opts.command = 'shell'

    if opts.command in {'shell', '-'}:
        if opts.command == '-':
            params.batch_mode = True
    else:
        flags = ' '.join([shlex.quote(x) for x in flags]) if flags is not None else ''
        options = ' '.join([shlex.quote(x) for x in opts.options]) if opts.options is not None else ''
        options = ' -- ' + options if options.startswith('-') else options
        command = ' '.join([opts.command, options, flags])
        params.commands.append(command)
        params.commands.append('q')
        params.batch_mode = True

    errno = cli.loop(params)
    sys.exit(errno)


if __name__ == '__main__':
    main()
