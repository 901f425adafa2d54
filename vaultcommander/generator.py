#  _   __          ____
# | | / /__ ___ __/ / /_
# | |/ / _ `/ // / / __/
# |___/\_,_/\_,_/_/\__/
#
# Vault Commander
# Copyright 2024 Vault Commander contributors
#

import string
from secrets import choice

from Cryptodome.Random.random import shuffle

DEFAULT_PASSWORD_LENGTH = 10
SYMBOLS = '!@#$%()+;<>=?[]{}^.,'
CHARACTER_CLASSES = (string.ascii_lowercase, string.ascii_uppercase, string.digits, SYMBOLS)
ALPHABET = ''.join(CHARACTER_CLASSES)


def generate(length=DEFAULT_PASSWORD_LENGTH):    # type: (int) -> str
    """Random secret of ``length`` characters.

    Secrets long enough to hold one character of every class get one of each.
    """
    if length < 0:
        raise ValueError(f'Password length cannot be negative: {length}')

    chars = []
    if length >= len(CHARACTER_CLASSES):
        chars.extend(choice(x) for x in CHARACTER_CLASSES)
    chars.extend(choice(ALPHABET) for _ in range(length - len(chars)))
    shuffle(chars)
    return ''.join(chars)
