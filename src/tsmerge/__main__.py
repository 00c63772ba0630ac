# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib
"""Run [`tsmerge.cli.tsmerge`][] on import."""

import sys

if __name__ == '__main__':
    from tsmerge.cli import tsmerge

    sys.exit(tsmerge())
