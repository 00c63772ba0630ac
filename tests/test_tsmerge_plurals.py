# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

from __future__ import annotations

import hypothesis
import pytest
from hypothesis import strategies

import tests
from tsmerge import _types, plurals


class TestLanguageTags:
    @pytest.mark.parametrize(
        ['tag', 'expected'],
        [
            ('de', 'de'),
            ('pt-BR', 'pt_br'),
            ('PT_br', 'pt_br'),
            ('sr_RS@latin', 'sr_rs'),
            ('de_DE.UTF-8', 'de_de'),
            (' fr ', 'fr'),
        ],
    )
    def test_100_normalize(self, tag: str, expected: str) -> None:
        assert plurals.normalize_language_tag(tag) == expected


class TestPluralRuleTable:
    @pytest.mark.parametrize(
        ['language', 'form_count'],
        [
            ('ja', 1),
            ('zh_CN', 1),
            ('de', 2),
            ('en_US', 2),
            ('fr', 2),
            ('pt', 2),
            ('pt_BR', 2),
            ('ru', 3),
            ('pl', 3),
            ('cs', 3),
            ('sl', 4),
            ('cy', 4),
            ('ga', 5),
            ('ar', 6),
        ],
    )
    def test_100_form_count(self, language: str, form_count: int) -> None:
        assert plurals.DEFAULT_TABLE.form_count(language) == form_count
        assert plurals.DEFAULT_TABLE.is_known(language)

    @pytest.mark.parametrize(
        ['language', 'n', 'index'],
        [
            ('de', 1, 0),
            ('de', 0, 1),
            ('de', 2, 1),
            ('fr', 0, 0),
            ('fr', 1, 0),
            ('fr', 2, 1),
            ('pt_BR', 0, 0),
            ('pt', 0, 1),
            ('ru', 1, 0),
            ('ru', 3, 1),
            ('ru', 5, 2),
            ('ru', 11, 2),
            ('ru', 21, 0),
            ('ru', 22, 1),
            ('pl', 1, 0),
            ('pl', 22, 1),
            ('pl', 21, 2),
            ('cs', 4, 1),
            ('cs', 5, 2),
            ('ar', 0, 0),
            ('ar', 1, 1),
            ('ar', 2, 2),
            ('ar', 5, 3),
            ('ar', 11, 4),
            ('ar', 100, 5),
            ('ja', 7, 0),
            ('de', -1, 0),
        ],
    )
    def test_200_form_index(self, language: str, n: int, index: int) -> None:
        assert plurals.DEFAULT_TABLE.form_index(language, n) == index

    @tests.hypothesis_settings_coverage_compatible
    @hypothesis.given(
        family=strategies.sampled_from(sorted(plurals.PLURAL_FAMILIES)),
        n=strategies.integers(min_value=-(10**6), max_value=10**6),
    )
    def test_201_form_index_in_range(self, family: str, n: int) -> None:
        table = plurals.PluralRuleTable({'xx': family})
        index = table.form_index('xx', n)
        assert 0 <= index < table.form_count('xx')

    def test_300_unknown_language_has_one_form(self) -> None:
        table = plurals.DEFAULT_TABLE
        assert not table.is_known('tlh')
        assert table.family('tlh') is None
        assert table.form_count('tlh') == 1
        assert table.form_index('tlh', 5) == 0
        assert table.form_count('') == 1

    def test_301_unknown_language_in_strict_mode(self) -> None:
        table = plurals.DEFAULT_TABLE
        with pytest.raises(_types.UnsupportedLanguageError) as excinfo:
            table.form_count('tlh', strict=True)
        assert excinfo.value.language == 'tlh'
        with pytest.raises(_types.UnsupportedLanguageError):
            table.form_index('tlh', 1, strict=True)
        assert table.form_count('de', strict=True) == 2

    def test_400_overrides(self) -> None:
        table = plurals.PluralRuleTable({'tlh': 'slavic', 'de-AT': 'one'})
        assert table.form_count('tlh') == 3
        assert table.form_count('de_AT') == 1
        assert table.form_count('de') == 2
        assert not plurals.DEFAULT_TABLE.is_known('tlh')

    def test_401_override_with_unknown_family(self) -> None:
        with pytest.raises(ValueError, match='Unknown plural family'):
            plurals.PluralRuleTable({'xx': 'klingon'})

    def test_500_families_are_consistent(self) -> None:
        for name, family in plurals.PLURAL_FAMILIES.items():
            assert family.form_count >= 1, name
            indices = {family.rule(n) for n in range(1000)}
            assert indices == set(range(family.form_count)), name
