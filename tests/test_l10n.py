# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Test the localization machinery of the command-line messages."""

from __future__ import annotations

import contextlib
import datetime
import errno
import gettext
import io
import os
import re
import string
from typing import TYPE_CHECKING, cast

import hypothesis
import pytest
from hypothesis import strategies

from tsmerge._internals import cli_messages as msg

if TYPE_CHECKING:
    from collections.abc import Iterator

all_templates: dict[msg.TranslatableString, msg.MsgTemplate] = {}
for enum_class in msg.MSG_TEMPLATE_CLASSES:
    all_templates.update({
        cast('msg.TranslatableString', v.value): v for v in enum_class
    })

all_enum_values = tuple(sorted(all_templates.values(), key=str))
plural_enum_values = tuple(
    v
    for v in all_enum_values
    if cast('msg.TranslatableString', v.value).plural
)
filename_error_messages = tuple(
    e
    for e in sorted(msg.ErrMsgTemplate, key=str)
    if e.value.fields() == ['error', 'filename']
)
error_codes = tuple(sorted(errno.errorcode, key=errno.errorcode.__getitem__))


@pytest.fixture(scope='class')
def use_debug_translations() -> Iterator[None]:
    """Force the use of debug translations (pytest class fixture)."""
    with pytest.MonkeyPatch.context() as monkeypatch:
        monkeypatch.setattr(msg, 'translation', msg.DebugTranslations())
        yield


@contextlib.contextmanager
def null_translations() -> Iterator[None]:
    """Force the use of no-op translations in this context."""
    with pytest.MonkeyPatch.context() as monkeypatch:
        monkeypatch.setattr(msg, 'translation', gettext.NullTranslations())
        yield


def _dummy_fields(value: msg.TranslatableString) -> dict[str, object]:
    return dict.fromkeys(value.fields(), 1)


@pytest.mark.usefixtures('use_debug_translations')
class TestDebugTranslations:
    @hypothesis.given(value=strategies.text(max_size=100))
    @hypothesis.example('{')
    def test_100_unknown_strings_are_untouched(self, value: str) -> None:
        assert msg.translation.gettext(value) == value

    @hypothesis.given(value=strategies.sampled_from(all_enum_values))
    def test_101_known_strings_name_their_template(
        self, value: msg.MsgTemplate
    ) -> None:
        inner = cast('msg.TranslatableString', value.value)
        translated = msg.translation.pgettext(
            inner.l10n_context, inner.singular
        )
        assert translated.startswith(str(value))
        suffix = translated.removeprefix(str(value))
        assert not suffix or suffix.startswith('(')

    @pytest.mark.parametrize('count', [0, 1, 7])
    def test_102_plural_templates_name_their_template(
        self, count: int
    ) -> None:
        rendered = msg.TranslatedString(
            msg.InfoMsgTemplate.KEPT_OBSOLETE, count=count
        )
        assert str(rendered) == (
            f'InfoMsgTemplate.KEPT_OBSOLETE(count={count!r})'
        )

    def test_103_trimmed_filename_is_marked(self) -> None:
        rendered = msg.TranslatedString(
            msg.ErrMsgTemplate.CANNOT_LOAD_CATALOG,
            error='Is a directory',
            filename=None,
        ).maybe_without_filename()
        assert str(rendered) == (
            "ErrMsgTemplate.CANNOT_LOAD_CATALOG(error='Is a directory', "
            'filename=None)'
        )


class TestTranslatedStrings:
    @pytest.mark.parametrize(
        ['template', 'count', 'expected'],
        [
            (
                msg.InfoMsgTemplate.REMOVED_OBSOLETE,
                1,
                'Removed 1 obsolete entry',
            ),
            (
                msg.InfoMsgTemplate.REMOVED_OBSOLETE,
                2,
                'Removed 2 obsolete entries',
            ),
            (
                msg.InfoMsgTemplate.REMOVED_OBSOLETE,
                0,
                'Removed 0 obsolete entries',
            ),
            (
                msg.InfoMsgTemplate.SAME_TEXT_HEURISTIC,
                1,
                'Reused 1 translation of a similar source text',
            ),
            (
                msg.InfoMsgTemplate.SAME_TEXT_HEURISTIC,
                4,
                'Reused 4 translations of similar source texts',
            ),
        ],
    )
    def test_100_plural_selection(
        self, template: msg.InfoMsgTemplate, count: int, expected: str
    ) -> None:
        with null_translations():
            assert str(msg.TranslatedString(template, count=count)) == (
                expected
            )

    @hypothesis.given(value=strategies.sampled_from(all_enum_values))
    def test_101_all_templates_render(self, value: msg.MsgTemplate) -> None:
        """Every template renders when given all of its fields."""
        inner = cast('msg.TranslatableString', value.value)
        with null_translations():
            rendered = str(msg.TranslatedString(value, **_dummy_fields(inner)))
        assert rendered
        assert '{' not in rendered

    @hypothesis.given(value=strategies.sampled_from(plural_enum_values))
    def test_102_plural_forms_share_fields(
        self, value: msg.MsgTemplate
    ) -> None:
        inner = cast('msg.TranslatableString', value.value)
        formatter = string.Formatter()
        plural_fields = {
            field
            for _lit, field, _spec, _conv in formatter.parse(inner.plural)
            if field is not None
        }
        assert plural_fields == set(inner.fields())
        assert 'count' in plural_fields

    def test_103_equality_and_hashing(self) -> None:
        with null_translations():
            ts0 = msg.TranslatedString(msg.Label.WARNING_LABEL)
            ts1 = msg.TranslatedString(msg.Label.WARNING_LABEL)
            ts2 = msg.TranslatedString(msg.Label.TSMERGE_01)
            assert ts0 == ts1 == 'Warning'
            assert ts0 != ts2
            assert len({ts0, ts1, ts2}) == 2

    @hypothesis.given(
        value=strategies.sampled_from(filename_error_messages),
        errno_=strategies.sampled_from(error_codes),
    )
    def test_104_filename_can_be_trimmed(
        self, value: msg.ErrMsgTemplate, errno_: int
    ) -> None:
        error = os.strerror(errno_)
        with null_translations():
            ts0 = msg.TranslatedString(value, error=error, filename=None)
            ts1 = ts0.maybe_without_filename()
            assert str(ts0) != str(ts1)
            assert error in str(ts1)

    def test_105_filename_is_kept_when_given(self) -> None:
        with null_translations():
            ts = msg.TranslatedString(
                msg.ErrMsgTemplate.CANNOT_WRITE_CATALOG,
                error='Permission denied',
                filename='app_de.ts',
            )
            assert ts.maybe_without_filename() is ts
            assert str(ts) == (
                "Cannot write catalog: Permission denied: 'app_de.ts'."
            )

    @pytest.mark.parametrize('s', ['{spam}', '{spam}abc', '{', '}', '{{{'])
    def test_200_interpolation_failures(self, s: str) -> None:
        with null_translations():
            ts1 = msg.TranslatedString(s)
            ts2 = msg.TranslatedString(s, spam='eggs')
            if '{spam}' in s:
                with pytest.raises(KeyError, match=r'spam'):
                    str(ts1)
                assert str(ts2) == s.replace('{spam}', 'eggs')
            else:
                pattern = re.compile(
                    r"Single (?:\{|\}|'\{'|'\}')"
                    r'(?: encountered in the pattern string)?'
                )
                with pytest.raises(ValueError, match=pattern):
                    str(ts1)
                with pytest.raises(ValueError, match=pattern):
                    str(ts2)

    @hypothesis.given(
        s=strategies.text(
            strategies.sampled_from(string.ascii_lowercase + '{}'),
            min_size=1,
            max_size=20,
        )
    )
    def test_201_constants_are_not_interpolated(self, s: str) -> None:
        with null_translations():
            assert str(msg.TranslatedString.constant(s)) == s

    @hypothesis.given(
        s=strategies.text(
            strategies.sampled_from(string.ascii_lowercase + '{}'),
            min_size=1,
            max_size=20,
        )
    )
    def test_202_non_format_strings_are_not_interpolated(
        self, s: str
    ) -> None:
        with null_translations():
            inner = msg.TranslatableString(
                '',
                '{spam}' + s,
                flags=frozenset({'no-python-brace-format'}),
            )
            ts = msg.TranslatedString(inner, spam='eggs')
            assert str(ts) == '{spam}' + s


class TestPoFile:
    BUILD_TIME = datetime.datetime(
        2025, 1, 1, 12, 0, tzinfo=datetime.timezone.utc
    )

    def _po_file(self) -> str:
        buffer = io.StringIO()
        msg._write_po_file(
            buffer, version='1.0', build_time=self.BUILD_TIME
        )
        return buffer.getvalue()

    def test_100_header(self) -> None:
        contents = self._po_file()
        assert contents.startswith('# English translation for tsmerge.\n')
        assert '"Project-Id-Version: tsmerge 1.0\\n"\n' in contents
        assert '"POT-Creation-Date: 2025-01-01 12:00+0000\\n"\n' in contents
        assert '"Plural-Forms: nplurals=2; plural=(n != 1);\\n"\n' in (
            contents
        )

    def test_101_every_template_is_listed(self) -> None:
        contents = self._po_file()
        for value in all_enum_values:
            assert f'Message-ID: {value}\n' in contents, str(value)

    def test_102_plural_entries(self) -> None:
        contents = self._po_file()
        assert (
            'msgid "Removed {count} obsolete entry"\n'
            'msgid_plural "Removed {count} obsolete entries"\n'
            'msgstr[0] ""\n'
            'msgstr[1] ""\n'
        ) in contents

    def test_103_reproducible_with_source_date_epoch(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(
            'SOURCE_DATE_EPOCH', str(int(self.BUILD_TIME.timestamp()))
        )
        first = io.StringIO()
        second = io.StringIO()
        msg._write_po_file(first, version='1.0')
        msg._write_po_file(second, version='1.0')
        assert first.getvalue() == second.getvalue()
        assert 'POT-Creation-Date: 2025-01-01 12:00+0000' in first.getvalue()
