# -*- coding: utf-8 -*-
#  _   __          ____
# | | / /__ ___ __/ / /_
# | |/ / _ `/ // / / __/
# |___/\_,_/\_,_/_/\__/
#
# Vault Commander
# Copyright 2024 Vault Commander contributors
#

__version__ = '1.0.0'
