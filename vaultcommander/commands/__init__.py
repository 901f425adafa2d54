#  _   __          ____
# | | / /__ ___ __/ / /_
# | |/ / _ `/ // / / __/
# |___/\_,_/\_,_/_/\__/
#
# Vault Commander
# Copyright 2024 Vault Commander contributors
#

from .base import register_commands, aliases, commands, command_info

__all__ = ['register_commands', 'aliases', 'commands', 'command_info']
