# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

from __future__ import annotations

import pytest

from tsmerge import catalog
from tsmerge._types import MessageEntry, MessageKey, Status


def _entry(
    context: str, source: str, status: Status = Status.TRANSLATED
) -> MessageEntry:
    return MessageEntry(
        MessageKey(context, source),
        translations=[source.upper()],
        status=status,
    )


class TestCatalog:
    def test_100_empty(self) -> None:
        cat = catalog.Catalog('de')
        assert len(cat) == 0
        assert not list(cat)
        assert cat.contexts() == []
        assert cat.version == catalog.DEFAULT_TS_VERSION
        assert cat.source_language == ''

    def test_200_document_order(self) -> None:
        cat = catalog.Catalog('de')
        cat.add(_entry('B', 'one'))
        cat.add(_entry('A', 'two'))
        cat.add(_entry('B', 'three'))
        assert cat.contexts() == ['B', 'A']
        assert [e.key.source_text for e in cat] == ['one', 'three', 'two']
        assert cat.keys() == [
            MessageKey('B', 'one'),
            MessageKey('B', 'three'),
            MessageKey('A', 'two'),
        ]
        assert [e.key.source_text for e in cat.entries('B')] == [
            'one',
            'three',
        ]
        assert cat.entries('missing') == []

    def test_201_empty_context_groups_are_kept(self) -> None:
        cat = catalog.Catalog('de')
        cat.add_context('Empty')
        cat.add(_entry('Full', 'x'))
        cat.add_context('Full')
        assert cat.contexts() == ['Empty', 'Full']
        assert len(cat) == 1

    def test_300_lookup(self) -> None:
        cat = catalog.Catalog('de')
        entry = _entry('A', 'one')
        cat.add(entry)
        assert MessageKey('A', 'one') in cat
        assert MessageKey('A', 'one', 'verb') not in cat
        assert 'A//one' not in cat
        assert cat.get(MessageKey('A', 'one')) is entry
        assert cat[MessageKey('A', 'one')] is entry
        assert cat.get(MessageKey('A', 'two')) is None
        with pytest.raises(KeyError):
            cat[MessageKey('A', 'two')]

    def test_301_duplicate_keys_are_rejected(self) -> None:
        cat = catalog.Catalog('de')
        cat.add(_entry('A', 'one'))
        with pytest.raises(ValueError, match='Duplicate message'):
            cat.add(_entry('A', 'one', Status.UNFINISHED))
        assert len(cat) == 1

    def test_400_copy_is_deep(self) -> None:
        cat = catalog.Catalog('de', source_language='en')
        cat.extra_attributes['x-tool'] = 'future'
        cat.context_comments['A'] = 'first'
        cat.add_context('Empty')
        cat.add(_entry('A', 'one'))
        duplicate = cat.copy()
        assert list(duplicate) == list(cat)
        assert duplicate.contexts() == cat.contexts()
        assert duplicate.source_language == 'en'
        duplicate[MessageKey('A', 'one')].translations[0] = 'changed'
        duplicate.extra_attributes['x-tool'] = 'past'
        duplicate.context_comments['A'] = 'second'
        assert cat[MessageKey('A', 'one')].translations == ['ONE']
        assert cat.extra_attributes == {'x-tool': 'future'}
        assert cat.context_comments == {'A': 'first'}

    def test_401_copy_header(self) -> None:
        cat = catalog.Catalog('pt_BR', source_language='en', version='2.0')
        cat.add(_entry('A', 'one'))
        header = cat.copy_header()
        assert len(header) == 0
        assert header.contexts() == []
        assert header.language == 'pt_BR'
        assert header.source_language == 'en'
        assert header.version == '2.0'

    def test_500_statistics(self) -> None:
        cat = catalog.Catalog('de')
        cat.add(_entry('A', 'one'))
        cat.add(_entry('A', 'two'))
        cat.add(_entry('A', 'three', Status.UNFINISHED))
        cat.add(_entry('B', 'four', Status.OBSOLETE))
        cat.add(_entry('B', 'five', Status.VANISHED))
        stats = cat.statistics()
        assert stats == (2, 1, 1, 1)
        assert stats.current == 3
        assert stats.completion() == pytest.approx(2 / 3)

    def test_501_statistics_of_empty_catalog(self) -> None:
        stats = catalog.Catalog('de').statistics()
        assert stats == catalog.CatalogStatistics(0, 0, 0, 0)
        assert stats.completion() == 1.0

    def test_600_repr(self) -> None:
        cat = catalog.Catalog('de')
        cat.add(_entry('A', 'one'))
        assert repr(cat) == "Catalog(language='de', contexts=1, messages=1)"
