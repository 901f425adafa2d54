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
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.shortcuts import CompleteStyle

from . import display
from .autocomplete import CommandCompleter
from .commands import register_commands, aliases, commands, command_info
from .commands.base import CliCommand, Command, GroupCommand
from .display import bcolors
from .error import CommandError, Error, VaultError
from .params import VaultParams

current_command = None  # type: Optional[CliCommand]
stack = []
register_commands(commands, aliases, command_info)


def display_command_help(show_shell=False):
    alias_lookup = {x[1]: x[0] for x in aliases.items()}
    print(f'\n{bcolors.BOLD}Commands:{bcolors.ENDC}')
    width = max(len(x) + len(alias_lookup.get(x, '')) + 3 for x in command_info)
    for cmd, description in command_info.items():
        name = f'{cmd} ({alias_lookup[cmd]})' if cmd in alias_lookup else cmd
        print(f'  {name:<{width}}   {description}')

    if show_shell:
        print(f'\n{bcolors.BOLD}Shell Commands:{bcolors.ENDC}')
        shell_commands = [
            ('clear (c)', 'Clear the screen.'),
            ('history (h)', 'Show command history.'),
            ('shell', 'Use the interactive shell.'),
            ('quit (q)', 'Quit.')
        ]
        for cmd, description in shell_commands:
            print(f'  {cmd:<{width}}   {description}')

    print(f"\nType '{bcolors.BOLD}help <command>{bcolors.ENDC}' to display help on a specific command")


def command_and_args_from_cmd(command_line):
    args = ''
    pos = command_line.find(' ')
    if pos > 0:
        cmd = command_line[:pos]
        args = command_line[pos + 1:].strip()
    else:
        cmd = command_line.strip()

    return cmd, args


def display_help(cmd):
    cmd = aliases.get(cmd, cmd)
    command = commands.get(cmd)
    if isinstance(command, Command):
        parser = command.get_parser()
        if parser:
            parser.print_help()
            return
    if isinstance(command, GroupCommand):
        command.print_help(command=cmd)
        return
    display_command_help(show_shell=True)


def do_command(params, command_line):    # type: (VaultParams, str) -> Optional[str]
    if command_line.lower() in ('h', 'history'):
        for i, line in enumerate(reversed(stack), start=1):
            print(f'{i:>4}  {line}')
        return

    if len(stack) == 0 or stack[-1] != command_line:
        stack.append(command_line)

    if command_line.lower() in ('c', 'cls', 'clear'):
        print(chr(27) + "[2J")
        return

    cmd, args = command_and_args_from_cmd(command_line)
    if not cmd:
        return
    if cmd in ('help', '?'):
        display_help(args)
        return

    orig_cmd = cmd
    if cmd in aliases and cmd not in commands:
        cmd = aliases[cmd]

    if cmd in commands:
        command = commands[cmd]
        global current_command
        current_command = command
        return command.execute_args(params, args, command=orig_cmd)
    else:
        logging.warning('Invalid command: %s', cmd)
        display_command_help()


def report_error(e):    # type: (Exception) -> None
    if isinstance(e, CommandError):
        if e.command:
            logging.warning('%s: %s', e.command, e.message)
        else:
            logging.warning('%s', e.message)
    elif isinstance(e, VaultError):
        logging.error(display.format_error(e))
    elif isinstance(e, Error):
        logging.error('Error: %s', e.message)
    else:
        logging.debug(e, exc_info=True)
        logging.error('An unexpected error occurred: %s', e)


def runcommands(params, commands=None, quiet=False):    # type: (VaultParams, Optional[list], bool) -> int
    if commands is None:
        commands = params.commands
    error_no = 0
    for command in commands:
        if not quiet:
            logging.info('Executing [%s]...', command)
        try:
            result = do_command(params, command)
            if result is not None:
                print(result)
        except (EOFError, KeyboardInterrupt):
            logging.warning('Canceled')
            error_no = 1
        except Exception as e:
            report_error(e)
            error_no = 1
    return error_no


def get_prompt(params):    # type: (VaultParams) -> str
    if params.batch_mode:
        return ''
    return 'Vault> '


def loop(params):  # type: (VaultParams) -> int
    error_no = 0

    logging.getLogger().setLevel(logging.DEBUG if params.debug else logging.WARNING if params.batch_mode else logging.INFO)
    prompt_session = None
    if not params.batch_mode:
        if os.isatty(0) and os.isatty(1):
            completer = CommandCompleter(params, commands, aliases)
            prompt_session = PromptSession(multiline=False,
                                           completer=completer,
                                           complete_style=CompleteStyle.MULTI_COLUMN,
                                           complete_while_typing=False)

        display.welcome()
        if not params.engine.has_keys():
            logging.info('The vault is not initialized. Type "init" to create it')

    while True:
        command = ''
        if len(params.commands) > 0:
            command = params.commands[0].strip()
            params.commands = params.commands[1:]

        if not command:
            try:
                if prompt_session is not None:
                    command = prompt_session.prompt(get_prompt(params))
                else:
                    command = input(get_prompt(params))
            except EOFError:
                break
            except KeyboardInterrupt:
                continue
            command = command.strip()

        if command.lower() in ('q', 'quit'):
            break

        try:
            if params.batch_mode:
                logging.info('> %s', command)
            error_no = 1
            result = do_command(params, command)
            error_no = 0
            if result:
                print(result)
        except (EOFError, KeyboardInterrupt):
            logging.warning('Canceled')
        except Exception as e:
            report_error(e)
        finally:
            global current_command
            try:
                if current_command:
                    current_command.clean_up()
            finally:
                current_command = None

        if params.batch_mode and error_no != 0:
            break

    if not params.batch_mode:
        logging.info('\nGoodbye.\n')

    return error_no
