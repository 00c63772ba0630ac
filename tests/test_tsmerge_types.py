# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

from __future__ import annotations

import xml.etree.ElementTree as ET

import hypothesis
import pytest
from hypothesis import strategies
from typing_extensions import Any

import tests
from tsmerge import _types


@pytest.mark.parametrize(
    ['path', 'expected'],
    [
        pytest.param([], '$', id='root'),
        pytest.param([3, 'location', 'line'], '$[3].location.line', id='dot'),
        pytest.param([0, 'file name'], '$[0]["file name"]', id='space'),
        pytest.param([1, '2nd'], '$[1]["2nd"]', id='leading-digit'),
        pytest.param([0, ''], '$[0][""]', id='empty-key'),
    ],
)
def test_100_json_path(path: list[str | int], expected: str) -> None:
    assert _types.json_path(path) == expected


class TestMessageKey:
    def test_100_identity_is_exact(self) -> None:
        key = _types.MessageKey('Dialog', 'Save')
        assert key == _types.MessageKey('Dialog', 'Save', '')
        assert key != _types.MessageKey('Dialog', 'Save ')
        assert key != _types.MessageKey('Dialog', 'save')
        assert key != _types.MessageKey('Dialog', 'Save', 'verb')
        assert key != _types.MessageKey('dialog', 'Save')

    def test_200_str(self) -> None:
        assert str(_types.MessageKey('Dialog', 'Save')) == 'Dialog//Save'
        assert (
            str(_types.MessageKey('Dialog', 'Save', 'verb'))
            == 'Dialog//Save//verb'
        )


class TestMessageEntry:
    def test_100_defaults(self) -> None:
        entry = _types.MessageEntry(_types.MessageKey('C', 'text'))
        assert entry.translations == ['']
        assert entry.status == _types.Status.UNFINISHED
        assert not entry.numerus
        assert not entry.locations
        assert not entry.is_complete()
        assert not entry.has_translation()

    def test_101_empty_translations_become_one_slot(self) -> None:
        entry = _types.MessageEntry(
            _types.MessageKey('C', 'text'), translations=[]
        )
        assert entry.translations == ['']

    @pytest.mark.parametrize(
        ['translations', 'complete', 'has_translation'],
        [
            (['a'], True, True),
            ([''], False, False),
            (['a', ''], False, True),
            (['', ''], False, False),
            (['a', 'b', 'c'], True, True),
        ],
    )
    def test_200_completeness(
        self,
        translations: list[str],
        complete: bool,
        has_translation: bool,
    ) -> None:
        entry = _types.MessageEntry(
            _types.MessageKey('C', 'text'),
            translations=translations,
            numerus=len(translations) > 1,
        )
        assert entry.is_complete() == complete
        assert entry.has_translation() == has_translation

    def test_201_length_variants_count_as_translation(self) -> None:
        variant = ET.Element('lengthvariant')
        variant.text = 'Guardar'
        entry = _types.MessageEntry(
            _types.MessageKey('C', 'Save'), translation_elements=[variant]
        )
        assert entry.has_translation()
        assert not entry.is_complete()
        duplicate = entry.copy()
        assert duplicate == entry
        assert duplicate.translation_elements[0] is not variant

    @pytest.mark.parametrize(
        ['before', 'count', 'after', 'resized'],
        [
            (['a', 'b'], 2, ['a', 'b'], False),
            (['a', 'b'], 3, ['a', 'b', ''], True),
            (['a', 'b', 'c'], 2, ['a', 'b'], True),
            (['a'], 6, ['a', '', '', '', '', ''], True),
        ],
    )
    def test_300_resize_translations(
        self,
        before: list[str],
        count: int,
        after: list[str],
        resized: bool,
    ) -> None:
        entry = _types.MessageEntry(
            _types.MessageKey('C', '%n files'),
            translations=before,
            numerus=True,
        )
        assert entry.resize_translations(count) == resized
        assert entry.translations == after

    def test_400_copy_is_independent(self) -> None:
        entry = _types.MessageEntry(
            _types.MessageKey('C', 'text'),
            locations=[_types.Location('a.cpp', 1)],
            translations=['Text'],
            status=_types.Status.TRANSLATED,
            extra_attributes={'id': 'x'},
        )
        duplicate = entry.copy()
        assert duplicate == entry
        assert duplicate is not entry
        duplicate.translations[0] = 'Texto'
        duplicate.locations.append(_types.Location('b.cpp', 2))
        duplicate.extra_attributes['id'] = 'y'
        assert entry.translations == ['Text']
        assert entry.locations == [_types.Location('a.cpp', 1)]
        assert entry.extra_attributes == {'id': 'x'}

    def test_401_copy_with_new_key(self) -> None:
        entry = _types.MessageEntry(
            _types.MessageKey('C', 'old'), translations=['alt']
        )
        renamed = entry.copy(key=_types.MessageKey('C', 'new'))
        assert renamed.key == _types.MessageKey('C', 'new')
        assert renamed.translations == ['alt']
        assert entry.key == _types.MessageKey('C', 'old')

    def test_500_entries_are_unhashable(self) -> None:
        entry = _types.MessageEntry(_types.MessageKey('C', 'text'))
        with pytest.raises(TypeError):
            hash(entry)


class TestStatus:
    @pytest.mark.parametrize(
        ['status', 'live'],
        [
            (_types.Status.TRANSLATED, True),
            (_types.Status.UNFINISHED, True),
            (_types.Status.OBSOLETE, False),
            (_types.Status.VANISHED, False),
        ],
    )
    def test_100_is_live(self, status: _types.Status, live: bool) -> None:
        assert status.is_live() == live


class TestErrors:
    def test_100_hierarchy(self) -> None:
        for cls in (
            _types.ParseError,
            _types.MalformedInputError,
            _types.InconsistentNumerusError,
            _types.UnsupportedLanguageError,
        ):
            assert issubclass(cls, _types.CatalogError)
        assert issubclass(_types.CatalogError, ValueError)

    @pytest.mark.parametrize(
        ['error', 'expected'],
        [
            pytest.param(
                _types.ParseError('Bad'), 'Bad', id='reason-only'
            ),
            pytest.param(
                _types.ParseError('Bad', path='x.ts'),
                "Bad ('x.ts')",
                id='with-path',
            ),
            pytest.param(
                _types.ParseError('Malformed XML', position=(3, 14)),
                'Malformed XML (line 3, column 14)',
                id='with-position',
            ),
            pytest.param(
                _types.ParseError(
                    'Missing source',
                    path='x.ts',
                    element='TS/context[2]/message[5]',
                ),
                "Missing source ('x.ts', at TS/context[2]/message[5])",
                id='with-element',
            ),
        ],
    )
    def test_200_parse_error_str(
        self, error: _types.ParseError, expected: str
    ) -> None:
        assert str(error) == expected

    def test_300_errors_name_their_message(self) -> None:
        key = _types.MessageKey('Dialog', 'Save', 'verb')
        assert 'Dialog//Save//verb' in str(_types.MalformedInputError(key))
        assert 'Dialog//Save//verb' in str(
            _types.InconsistentNumerusError(key)
        )
        assert _types.InconsistentNumerusError(key).key == key
        error = _types.UnsupportedLanguageError('xx')
        assert error.language == 'xx'
        assert "'xx'" in str(error)


class TestExtractionRecords:
    def test_100_valid_records(self) -> None:
        records = [
            tests.extraction_record('Dialog', 'Save', 'dialog.cpp', 12),
            tests.extraction_record(
                'Dialog',
                '%n files',
                'dialog.cpp',
                comment='status',
                numerus=True,
                extracomment='shown after copying',
            ),
        ]
        messages = _types.extracted_messages_from_json(records)
        assert messages == [
            _types.ExtractedMessage(
                _types.MessageKey('Dialog', 'Save'),
                _types.Location('dialog.cpp', 12),
            ),
            _types.ExtractedMessage(
                _types.MessageKey('Dialog', '%n files', 'status'),
                _types.Location('dialog.cpp', None),
                numerus=True,
                extra_comment='shown after copying',
            ),
        ]

    def test_101_empty_file_path_is_syntactically_valid(self) -> None:
        records = [tests.extraction_record('Dialog', 'Save', '')]
        (message,) = _types.extracted_messages_from_json(records)
        assert message.location == _types.Location('', None)

    @pytest.mark.parametrize(
        ['records', 'exc_type', 'fragment'],
        [
            pytest.param(
                {'context': 'C'},
                TypeError,
                'not a list',
                id='not-a-list',
            ),
            pytest.param(['C'], TypeError, '$[0] is not an object', id='str'),
            pytest.param(
                [{'context': 'C', 'location': {'filename': 'a.cpp'}}],
                ValueError,
                "$[0] is missing required entry 'source'",
                id='missing-source',
            ),
            pytest.param(
                [{'context': 'C', 'source': 7, 'location': {'filename': ''}}],
                TypeError,
                '$[0].source is not a string',
                id='source-not-a-string',
            ),
            pytest.param(
                [
                    {
                        'context': 'C',
                        'source': 's',
                        'numerus': 'yes',
                        'location': {'filename': 'a.cpp'},
                    }
                ],
                TypeError,
                '$[0].numerus is not a boolean',
                id='numerus-not-a-boolean',
            ),
            pytest.param(
                [{'context': 'C', 'source': 's', 'location': 'a.cpp'}],
                TypeError,
                '$[0].location is not an object',
                id='location-not-an-object',
            ),
            pytest.param(
                [{'context': 'C', 'source': 's', 'location': {'line': 3}}],
                ValueError,
                "$[0].location is missing required entry 'filename'",
                id='missing-filename',
            ),
            pytest.param(
                [
                    tests.extraction_record('C', 's', 'a.cpp', 1),
                    tests.extraction_record('C', 't', 'a.cpp', 0),
                ],
                ValueError,
                '$[1].location.line is not a positive integer',
                id='line-zero',
            ),
            pytest.param(
                [
                    {
                        'context': 'C',
                        'source': 's',
                        'location': {'filename': 'a.cpp', 'line': True},
                    }
                ],
                TypeError,
                '$[0].location.line is not an integer',
                id='line-boolean',
            ),
            pytest.param(
                [
                    {
                        'context': 'C',
                        'source': 's',
                        'location': {'filename': 'a.cpp', 'column': 3},
                    }
                ],
                ValueError,
                "$[0].location uses unknown entry 'column'",
                id='unknown-location-entry',
            ),
            pytest.param(
                [{**tests.extraction_record('C', 's'), 'id': 'x'}],
                ValueError,
                "$[0] uses unknown entry 'id'",
                id='unknown-entry',
            ),
        ],
    )
    def test_200_invalid_records(
        self,
        records: Any,
        exc_type: type[Exception],
        fragment: str,
    ) -> None:
        with pytest.raises(exc_type) as excinfo:
            _types.extracted_messages_from_json(records)
        assert fragment in str(excinfo.value)

    @tests.hypothesis_settings_coverage_compatible
    @hypothesis.given(
        records=strategies.lists(
            strategies.builds(
                tests.extraction_record,
                tests.contexts,
                tests.source_texts,
                strategies.sampled_from(['a.cpp', 'b.cpp']),
                strategies.one_of(
                    strategies.none(), strategies.integers(min_value=1)
                ),
                comment=strategies.sampled_from(['', 'verb']),
                numerus=strategies.booleans(),
            ),
            max_size=8,
        )
    )
    def test_300_conversion_preserves_order_and_content(
        self, records: list[dict[str, Any]]
    ) -> None:
        messages = _types.extracted_messages_from_json(records)
        assert len(messages) == len(records)
        for record, message in zip(records, messages):
            assert message.key.context == record['context']
            assert message.key.source_text == record['source']
            assert message.key.disambiguation == record.get('comment', '')
            assert message.location.file_path == (
                record['location']['filename']
            )
            assert message.location.line == record['location'].get('line')
            assert message.numerus == record.get('numerus', False)
