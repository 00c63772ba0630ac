# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Helper functions for the tsmerge command-line.

Warning:
    Non-public module (implementation detail), provided for didactical and
    educational purposes only. Subject to change without notice, including
    removal.

"""

from __future__ import annotations

import json
import os
import pathlib
import re
import sys
from typing import TYPE_CHECKING, TextIO

import click

import tsmerge
from tsmerge import _types, catalog, matcher, merge, plurals
from tsmerge._internals import cli_messages as _msg

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

if TYPE_CHECKING:
    from collections.abc import Mapping

    from typing_extensions import Any

__author__ = tsmerge.__author__
__version__ = tsmerge.__version__

PROG_NAME = _msg.PROG_NAME
CONFIG_FILENAME = 'config.toml'

_MERGE_SETTINGS: Mapping[str, tuple[type, str]] = {
    'similarity-threshold': (float, 'a number'),
    'vanish-after': (int, 'an integer'),
    'strict-plurals': (bool, 'a boolean'),
    'keep-obsolete': (bool, 'a boolean'),
    'fuzzy': (bool, 'a boolean'),
}

# `app_pt_BR.ts`, `app_ast.ts`, `pt-BR.ts`, `fr.ts`
_LANGUAGE_SUFFIX = re.compile(
    r"(?:^([a-z]{2}(?:[_-][A-Z]{2})?)|_([a-z]{2,3}(?:[_-][A-Z]{2})?))\Z"
)


# Configuration
# =============


def config_filename() -> pathlib.Path:
    """Return the filename of the user configuration file.

    The file is named `config.toml`, located within the configuration
    directory as determined by the `TSMERGE_PATH` environment variable,
    or by [`click.get_app_dir`][] in POSIX mode.

    """
    path = pathlib.Path(
        os.getenv(PROG_NAME.upper() + '_PATH')
        or click.get_app_dir(PROG_NAME, force_posix=True)
    )
    return path / CONFIG_FILENAME


def load_user_config() -> dict[str, Any]:
    """Load the user config from the application directory.

    The filename is obtained via [`config_filename`][].

    Returns:
        The user configuration, as a nested `dict`.

    Raises:
        OSError:
            There was an OS error accessing the file.
        ValueError:
            The data loaded from the file is not a valid TOML file.

    """
    filename = config_filename()
    with filename.open('rb') as fileobj:
        return tomllib.load(fileobj)


def toml_key(*parts: str) -> str:
    """Return a formatted TOML key, given its parts."""

    def escape(string: str) -> str:
        translated = string.translate({
            0: r'\u0000',
            8: r'\b',
            9: r'\t',
            10: r'\n',
            12: r'\f',
            13: r'\r',
            ord('"'): r'\"',
            ord('\\'): r'\\',
            127: r'\u007F',
        })
        return (
            f'"{translated}"'
            if translated != string or not re.fullmatch(r'[\w-]+', string)
            else string
        )

    return '.'.join(map(escape, parts))


def validate_user_config(config: Any, /) -> list[str]:  # noqa: ANN401,C901
    """Check that `config` is a valid user configuration.

    Args:
        config: The parsed user configuration.

    Returns:
        The TOML keys of all unknown settings, which are to be ignored.

    Raises:
        TypeError:
            A setting, or a settings table, has the wrong type.
        ValueError:
            A setting has a disallowed value.

    """
    if not isinstance(config, dict):
        msg = 'user configuration is not a table'
        raise TypeError(msg)
    unknown: list[str] = []
    for section, table in config.items():
        if section not in {'merge', 'plurals'}:
            unknown.append(toml_key(section))
            continue
        if not isinstance(table, dict):
            msg = f'{toml_key(section)} is not a table'
            raise TypeError(msg)
        for key, value in table.items():
            path = toml_key(section, key)
            if section == 'plurals':
                if not isinstance(value, str):
                    msg = f'{path} is not a string'
                    raise TypeError(msg)
                if value not in plurals.PLURAL_FAMILIES:
                    msg = f'{path} names an unknown plural family {value!r}'
                    raise ValueError(msg)
                continue
            if key not in _MERGE_SETTINGS:
                unknown.append(path)
                continue
            type_, description = _MERGE_SETTINGS[key]
            ok = (
                isinstance(value, (int, float)) and not isinstance(value, bool)
                if type_ is float
                else isinstance(value, type_)
                and (type_ is bool or not isinstance(value, bool))
            )
            if not ok:
                msg = f'{path} is not {description}'
                raise TypeError(msg)
            if key == 'similarity-threshold' and not 0.0 <= value <= 1.0:
                msg = f'{path} is not between 0 and 1'
                raise ValueError(msg)
            if key == 'vanish-after' and value < 0:
                msg = f'{path} is negative'
                raise ValueError(msg)
    return unknown


def merge_options_from_config(
    config: Mapping[str, Any],
    /,
    *,
    threshold: float | None = None,
    vanish_after: int | None = None,
    strict_plurals: bool | None = None,
    keep_obsolete: bool | None = None,
    fuzzy: bool | None = None,
) -> merge.MergeOptions:
    """Combine the user configuration and command-line overrides.

    The configuration must already be validated.  Overrides that are
    `None` leave the configured (or default) value in place.

    """
    settings = config.get('merge', {})
    defaults = merge.MergeOptions()

    def pick(override: Any, key: str, default: Any) -> Any:  # noqa: ANN401
        if override is not None:
            return override
        return settings.get(key, default)

    return merge.MergeOptions(
        threshold=float(
            pick(threshold, 'similarity-threshold', defaults.threshold)
        ),
        vanish_after=pick(vanish_after, 'vanish-after', defaults.vanish_after),
        strict_plurals=pick(
            strict_plurals, 'strict-plurals', defaults.strict_plurals
        ),
        keep_obsolete=pick(
            keep_obsolete, 'keep-obsolete', defaults.keep_obsolete
        ),
        fuzzy=pick(fuzzy, 'fuzzy', defaults.fuzzy),
        similarity=matcher.levenshtein_similarity,
    )


def plural_rules_from_config(
    config: Mapping[str, Any], /
) -> plurals.PluralRuleTable:
    """Return the plural rule table with the configured overrides."""
    overrides = config.get('plurals', {})
    if not overrides:
        return plurals.DEFAULT_TABLE
    return plurals.PluralRuleTable(overrides)


# Extraction records
# ==================


def load_extraction(fileobj: TextIO, /) -> list[_types.ExtractedMessage]:
    """Load the extraction records from a JSON file.

    Raises:
        json.JSONDecodeError:
            The file is not valid JSON.
        TypeError:
            The records are malformed; see
            [`_types.validate_extraction_records`][].
        ValueError:
            Likewise.

    """
    data = json.load(fileobj)
    return _types.extracted_messages_from_json(data)


# Catalog files
# =============


def guess_language(path: str | os.PathLike[str], /) -> str:
    """Guess the target language from a catalog file name.

    The language tag is either the whole file stem, or the end of the
    stem after an underscore.

    Returns:
        The language tag, or the empty string if no tag is recognizable.

    Examples:
        >>> guess_language('translations/app_pt_BR.ts')
        'pt_BR'
        >>> guess_language('de.ts')
        'de'
        >>> guess_language('myapp.ts')
        ''

    """
    stem = pathlib.PurePath(os.fspath(path)).stem
    match = _LANGUAGE_SUFFIX.search(stem)
    if match is None:
        return ''
    return (match.group(1) or match.group(2)).replace('-', '_')


def format_stats_line(
    path: str, stats: catalog.CatalogStatistics, /
) -> str:
    """Format the statistics of a catalog for display."""
    return str(
        _msg.TranslatedString(
            _msg.Label.STATS_LINE,
            path=path,
            translated=stats.translated,
            unfinished=stats.unfinished,
            obsolete=stats.obsolete,
            vanished=stats.vanished,
            percent=100.0 * stats.completion(),
        )
    )
