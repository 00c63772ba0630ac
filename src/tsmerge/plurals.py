# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Plural rule table for target languages.

Maps a language tag to the number of plural forms, and to the rule
selecting a plural form index for a cardinal number.  The rules follow
the usual gettext `Plural-Forms` expressions for each language family.

"""

from __future__ import annotations

import logging
import types
from typing import TYPE_CHECKING, Callable

from typing_extensions import NamedTuple

from tsmerge._types import UnsupportedLanguageError

if TYPE_CHECKING:
    from collections.abc import Mapping

__all__ = (
    'DEFAULT_TABLE',
    'PLURAL_FAMILIES',
    'PluralFamily',
    'PluralRuleTable',
    'normalize_language_tag',
)

logger = logging.getLogger(__name__)


class PluralFamily(NamedTuple):
    """A family of languages sharing the same plural rule.

    Attributes:
        form_count:
            The number of plural forms.
        rule:
            The function selecting a plural form index for a cardinal
            number.
        expression:
            The rule as a gettext `Plural-Forms` expression.  For
            documentation purposes only.

    """

    form_count: int
    """"""
    rule: Callable[[int], int]
    """"""
    expression: str
    """"""


def _lithuanian(n: int) -> int:
    if n % 10 == 1 and n % 100 != 11:
        return 0
    if n % 10 >= 2 and (n % 100 < 10 or n % 100 >= 20):  # noqa: PLR2004
        return 1
    return 2


def _slavic(n: int) -> int:
    if n % 10 == 1 and n % 100 != 11:
        return 0
    if 2 <= n % 10 <= 4 and (n % 100 < 10 or n % 100 >= 20):  # noqa: PLR2004
        return 1
    return 2


def _polish(n: int) -> int:
    if n == 1:
        return 0
    if 2 <= n % 10 <= 4 and (n % 100 < 10 or n % 100 >= 20):  # noqa: PLR2004
        return 1
    return 2


def _arabic(n: int) -> int:
    if n in {0, 1, 2}:
        return n
    if 3 <= n % 100 <= 10:  # noqa: PLR2004
        return 3
    if n % 100 >= 11:  # noqa: PLR2004
        return 4
    return 5


def _maltese(n: int) -> int:
    if n == 1:
        return 0
    if n == 0 or 1 < n % 100 < 11:  # noqa: PLR2004
        return 1
    if 10 < n % 100 < 20:  # noqa: PLR2004
        return 2
    return 3


PLURAL_FAMILIES: Mapping[str, PluralFamily] = types.MappingProxyType({
    'one': PluralFamily(1, lambda n: 0, '0'),
    'english': PluralFamily(2, lambda n: int(n != 1), 'n != 1'),
    'french': PluralFamily(2, lambda n: int(n > 1), 'n > 1'),
    'latvian': PluralFamily(
        3,
        lambda n: 0 if n % 10 == 1 and n % 100 != 11 else 1 if n else 2,
        'n%10==1 && n%100!=11 ? 0 : n != 0 ? 1 : 2',
    ),
    'irish': PluralFamily(
        5,
        lambda n: 0 if n == 1 else 1 if n == 2 else 2 if n < 7 else 3 if n < 11 else 4,  # noqa: E501,PLR2004
        'n==1 ? 0 : n==2 ? 1 : n<7 ? 2 : n<11 ? 3 : 4',
    ),
    'romanian': PluralFamily(
        3,
        lambda n: 0 if n == 1 else 1 if n == 0 or 0 < n % 100 < 20 else 2,  # noqa: PLR2004
        'n==1 ? 0 : (n==0 || (n%100 > 0 && n%100 < 20)) ? 1 : 2',
    ),
    'lithuanian': PluralFamily(
        3,
        _lithuanian,
        'n%10==1 && n%100!=11 ? 0 : '
        'n%10>=2 && (n%100<10 || n%100>=20) ? 1 : 2',
    ),
    'slavic': PluralFamily(
        3,
        _slavic,
        'n%10==1 && n%100!=11 ? 0 : '
        'n%10>=2 && n%10<=4 && (n%100<10 || n%100>=20) ? 1 : 2',
    ),
    'czech': PluralFamily(
        3,
        lambda n: 0 if n == 1 else 1 if 2 <= n <= 4 else 2,  # noqa: PLR2004
        'n==1 ? 0 : (n>=2 && n<=4) ? 1 : 2',
    ),
    'polish': PluralFamily(
        3,
        _polish,
        'n==1 ? 0 : n%10>=2 && n%10<=4 && (n%100<10 || n%100>=20) ? 1 : 2',
    ),
    'slovenian': PluralFamily(
        4,
        lambda n: {1: 0, 2: 1, 3: 2, 4: 2}.get(n % 100, 3),
        'n%100==1 ? 0 : n%100==2 ? 1 : n%100==3 || n%100==4 ? 2 : 3',
    ),
    'macedonian': PluralFamily(
        2,
        lambda n: 0 if n == 1 or n % 10 == 1 else 1,
        'n==1 || n%10==1 ? 0 : 1',
    ),
    'arabic': PluralFamily(
        6,
        _arabic,
        'n==0 ? 0 : n==1 ? 1 : n==2 ? 2 : '
        'n%100>=3 && n%100<=10 ? 3 : n%100>=11 ? 4 : 5',
    ),
    'welsh': PluralFamily(
        4,
        lambda n: 0 if n == 1 else 1 if n == 2 else 2 if n not in {8, 11} else 3,  # noqa: E501,PLR2004
        'n==1 ? 0 : n==2 ? 1 : (n != 8 && n != 11) ? 2 : 3',
    ),
    'maltese': PluralFamily(
        4,
        _maltese,
        'n==1 ? 0 : n==0 || (n%100>1 && n%100<11) ? 1 : '
        '(n%100>10 && n%100<20) ? 2 : 3',
    ),
    'icelandic': PluralFamily(
        2,
        lambda n: int(n % 10 != 1 or n % 100 == 11),  # noqa: PLR2004
        'n%10!=1 || n%100==11',
    ),
})
"""Known plural rule families, by name."""

_LANGUAGE_FAMILIES: Mapping[str, str] = types.MappingProxyType({
    **dict.fromkeys(
        [
            'bo', 'dz', 'id', 'ja', 'jv', 'ka', 'km', 'kn', 'ko', 'lo',
            'ms', 'my', 'su', 'th', 'vi', 'yo', 'zh',
        ],
        'one',
    ),
    **dict.fromkeys(
        [
            'af', 'an', 'as', 'ast', 'az', 'bg', 'bn', 'ca', 'da', 'de',
            'el', 'en', 'eo', 'es', 'et', 'eu', 'fa', 'fi', 'fo', 'fur',
            'fy', 'gl', 'gu', 'he', 'hi', 'hu', 'hy', 'it', 'kk', 'ku',
            'ky', 'lb', 'ml', 'mn', 'mr', 'nb', 'ne', 'nl', 'nn', 'no',
            'or', 'pa', 'ps', 'pt', 'sq', 'sv', 'sw', 'ta', 'te', 'tk',
            'tr', 'ug', 'ur', 'uz',
        ],
        'english',
    ),
    **dict.fromkeys(
        [
            'ach', 'ak', 'am', 'br', 'fil', 'fr', 'ln', 'mg', 'oc', 'pt_br',
            'ti', 'tl', 'wa',
        ],
        'french',
    ),
    'lv': 'latvian',
    'ga': 'irish',
    'ro': 'romanian',
    'lt': 'lithuanian',
    **dict.fromkeys(['be', 'bs', 'hr', 'ru', 'sr', 'uk'], 'slavic'),
    **dict.fromkeys(['cs', 'sk'], 'czech'),
    'pl': 'polish',
    'sl': 'slovenian',
    'mk': 'macedonian',
    'ar': 'arabic',
    'cy': 'welsh',
    'mt': 'maltese',
    'is': 'icelandic',
})


def normalize_language_tag(tag: str, /) -> str:
    """Normalize a language tag for plural rule lookup.

    Lowercase the tag, treat `-` like `_`, and remove any `.codeset`
    or `@modifier` suffixes.

    Examples:
        >>> normalize_language_tag('pt-BR')
        'pt_br'
        >>> normalize_language_tag('sr_RS@latin')
        'sr_rs'
        >>> normalize_language_tag('de_DE.UTF-8')
        'de_de'

    """
    tag = tag.strip().partition('@')[0].partition('.')[0]
    return tag.replace('-', '_').lower()


class PluralRuleTable:
    """A lookup table from language tags to plural rules.

    Read-only after construction, so a single table may be shared
    between independent merges.

    """

    def __init__(self, overrides: Mapping[str, str] | None = None) -> None:
        """Initialize the table.

        Args:
            overrides:
                A mapping of language tags to plural family names (see
                [`PLURAL_FAMILIES`][]), taking precedence over the
                built-in data.

        Raises:
            ValueError:
                An override names an unknown plural family.

        """
        table = dict(_LANGUAGE_FAMILIES)
        for tag, family in (overrides or {}).items():
            if family not in PLURAL_FAMILIES:
                msg = (
                    f'Unknown plural family {family!r} '
                    f'for language {tag!r}'
                )
                raise ValueError(msg)
            table[normalize_language_tag(tag)] = family
        self._table: Mapping[str, str] = types.MappingProxyType(table)

    def family(self, language: str, /) -> PluralFamily | None:
        """Return the plural family for the language, if known.

        The full tag (e.g. `pt_BR`) is tried before the bare language
        (e.g. `pt`).

        """
        tag = normalize_language_tag(language)
        name = self._table.get(tag)
        if name is None:
            name = self._table.get(tag.partition('_')[0])
        return PLURAL_FAMILIES[name] if name is not None else None

    def is_known(self, language: str, /) -> bool:
        """Return true if the table has plural rules for the language."""
        return self.family(language) is not None

    def _lookup(self, language: str, strict: bool) -> PluralFamily | None:  # noqa: FBT001
        family = self.family(language)
        if family is None:
            if strict:
                raise UnsupportedLanguageError(language)
            logger.debug(
                'No plural rules for language %r, assuming one form',
                language,
            )
        return family

    def form_count(self, language: str, /, *, strict: bool = False) -> int:
        """Return the number of plural forms of the language.

        Unknown languages have exactly one form, unless `strict` is
        true.

        Raises:
            UnsupportedLanguageError:
                `strict` is true and the language is unknown.

        """
        family = self._lookup(language, strict)
        return family.form_count if family is not None else 1

    def form_index(
        self, language: str, n: int, /, *, strict: bool = False
    ) -> int:
        """Return the plural form index to use for the cardinal `n`.

        The index lies within `range(self.form_count(language))`.
        Negative numbers select the same form as their absolute value.

        Raises:
            UnsupportedLanguageError:
                `strict` is true and the language is unknown.

        """
        family = self._lookup(language, strict)
        return family.rule(abs(n)) if family is not None else 0


DEFAULT_TABLE = PluralRuleTable()
"""The plural rule table with only the built-in data."""
