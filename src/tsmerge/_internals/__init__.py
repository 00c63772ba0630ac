# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""tsmerge internals.

Warning:
    Non-public package (implementation detail), provided for didactical
    and educational purposes only. Subject to change without notice,
    including removal.

"""

import tsmerge

__all__ = ()

PROG_NAME = tsmerge.__distribution_name__
VERSION = tsmerge.__version__
AUTHOR = tsmerge.__author__
