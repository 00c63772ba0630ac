# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Messages for the command-line interface of `tsmerge`.

Every user-visible diagnostic and help text of the command-line
interface is a member of one of the template enums below.  Templates
are looked up through [`gettext`][] only when rendered, so the active
[`translation`][] may be swapped out at any time.

!!! warning

    Non-public module (implementation detail), provided for didactical and
    educational purposes only.  Subject to change without notice, including
    removal.

"""

from __future__ import annotations

import datetime
import enum
import functools
import gettext
import inspect
import os
import pathlib
import string
import sys
import textwrap
import types
from typing import TYPE_CHECKING, NamedTuple, TextIO, Union, cast

from typing_extensions import TypeAlias, override

from tsmerge import _internals

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Mapping

    from typing_extensions import Any, Self

__all__ = ('PROG_NAME',)

PROG_NAME = _internals.PROG_NAME
VERSION = _internals.VERSION
AUTHOR = _internals.AUTHOR

BRACE_FLAGS = frozenset({'python-brace-format', 'no-python-brace-format'})
PERCENT_FLAGS = frozenset({'python-format', 'no-python-format'})


def _locale_dirs() -> Iterator[pathlib.Path]:
    if sys.platform.startswith('win') and os.environ.get('APPDATA'):
        yield pathlib.Path(os.environ['APPDATA'], 'locale')
    elif os.environ.get('XDG_DATA_HOME'):
        yield pathlib.Path(os.environ['XDG_DATA_HOME'], 'locale')
    else:
        yield pathlib.Path.home() / '.local' / 'share' / 'locale'
    yield pathlib.Path(sys.prefix, 'share', 'locale')
    yield pathlib.Path(sys.base_prefix, 'share', 'locale')


def load_translations(
    localedirs: Iterable[str | os.PathLike[str]] | None = None,
    languages: list[str] | None = None,
) -> gettext.NullTranslations:  # pragma: no cover
    """Load the message catalog of tsmerge.

    The first locale directory with a matching `tsmerge.mo` catalog
    wins.  Without any, untranslated (English) messages are used.

    Args:
        localedirs:
            The locale directories to search.  Defaults to the user's
            data directory, then the installation prefixes.
        languages:
            The languages to try, as for [`gettext.translation`][].
            Defaults to the usual locale environment variables.

    """
    for localedir in localedirs if localedirs is not None else _locale_dirs():
        try:
            return gettext.translation(
                PROG_NAME, localedir=os.fspath(localedir), languages=languages
            )
        except OSError:
            continue
    return gettext.NullTranslations()


translation = load_translations()


class DebugTranslations(gettext.NullTranslations):
    """Translations that name the template instead of translating it.

    Known templates render as `EnumClass.MEMBER(field=...)`, listing
    the replacement values; fields dropped via
    [`TranslatableString.maybe_without_filename`][] are shown as
    `None`.  Unknown messages pass through untranslated.

    """

    def __init__(self, fp: Any = None) -> None:  # noqa: ANN401
        super().__init__(fp)
        self._index: dict[
            tuple[str, str], tuple[MsgTemplate, frozenset[str]]
        ] = {}
        for member in _all_templates():
            value = cast('TranslatableString', member.value)
            variants: list[tuple[TranslatableString, frozenset[str]]] = [
                (value, frozenset())
            ]
            short = value.maybe_without_filename()
            if short != value:
                variants.append((short, frozenset({'filename'})))
            for variant, dropped in variants:
                for text in (variant.singular, variant.plural):
                    if text:
                        self._index.setdefault(
                            (variant.l10n_context, text), (member, dropped)
                        )

    def _describe(
        self, context: str, message: str, plural: str = '', n: int = 1
    ) -> str:
        try:
            member, dropped = self._index[context, message]
        except KeyError:
            return plural if plural and n != 1 else message
        fields = ', '.join(
            f'{name}=None' if name in dropped else f'{name}={{{name}!r}}'
            for name in cast('TranslatableString', member.value).fields()
        )
        return f'{member}({fields})' if fields else str(member)

    @override
    def gettext(self, message: str, /) -> str:
        return self._describe('', message)

    @override
    def ngettext(self, msgid1: str, msgid2: str, n: int, /) -> str:
        return self._describe('', msgid1, msgid2, n)

    @override
    def pgettext(self, context: str, message: str, /) -> str:
        return self._describe(context, message)

    @override
    def npgettext(
        self, context: str, msgid1: str, msgid2: str, n: int, /
    ) -> str:
        return self._describe(context, msgid1, msgid2, n)


def _unwrap(text: str, *, fix_sentence_endings: bool) -> str:
    """Join a (possibly indented) paragraph of prose into a single line.

    Examples:
        >>> _unwrap('''
        ...     Merge the records.  Then
        ...     save.
        ... ''', fix_sentence_endings=True)
        'Merge the records.  Then save.'

    """
    return ' '.join(
        textwrap.wrap(
            inspect.cleandoc(text),
            width=sys.maxsize,
            fix_sentence_endings=fix_sentence_endings,
        )
    )


class TranslatableString(NamedTuple):
    """A message template, as it appears in the `.po` file.

    Attributes:
        l10n_context:
            The `msgctxt` of the message, e.g. "Error message".
        singular:
            The message, or its singular form.
        plural:
            The plural form of the message, if it reports a count.
        flags:
            `.po` flags of the message, notably which formatting style
            it uses.
        translator_comments:
            Commentary for the translator.

    """

    l10n_context: str
    """"""
    singular: str
    """"""
    plural: str = ''
    """"""
    flags: frozenset[str] = frozenset()
    """"""
    translator_comments: str = ''
    """"""

    def fields(self) -> list[str]:
        """Return the replacement field names, in order of appearance."""
        if 'python-brace-format' not in self.flags:
            return []
        names: list[str] = []
        for _text, name, _spec, _conv in string.Formatter().parse(
            self.singular
        ):
            if name is not None and name not in names:
                names.append(name)
        return names

    def maybe_without_filename(self) -> Self:
        """Drop the `": {filename!r}"` part from the message, if any.

        This suits messages such as `"Cannot write catalog: {error}:
        {filename!r}."` when the offending file has no name (standard
        input or output).

        """
        marker = ': {filename!r}'
        return self._replace(
            singular=self.singular.replace(marker, '', 1),
            plural=self.plural.replace(marker, '', 1),
        )

    def rewrapped(self) -> Self:
        """Normalize the message and comment whitespace."""
        return self._replace(
            l10n_context=self.l10n_context.strip(),
            singular=_unwrap(self.singular, fix_sentence_endings=True),
            plural=_unwrap(self.plural, fix_sentence_endings=True),
            translator_comments=_unwrap(
                self.translator_comments, fix_sentence_endings=False
            ),
        )

    def with_comments(self, comments: str, /) -> Self:
        """Replace the translator comments.

        Non-empty comments get the customary `TRANSLATORS:` prefix.

        """
        comments = _unwrap(comments, fix_sentence_endings=False)
        if comments and not comments.startswith('TRANSLATORS:'):
            comments = f'TRANSLATORS: {comments}'
        return self._replace(translator_comments=comments)

    def validate_flags(self, *extra_flags: str) -> Self:
        """Add the extra flags, then check the flags against the message.

        Raises:
            ValueError:
                A brace or percent character appears without a flag
                saying whether it is a format placeholder, or a format
                flag is given for a message without placeholders.

        Examples:
            >>> TranslatableString('', 'Nothing to do.').validate_flags()
            ... # doctest: +NORMALIZE_WHITESPACE
            TranslatableString(l10n_context='', singular='Nothing to do.',
                               plural='', flags=frozenset(),
                               translator_comments='')
            >>> TranslatableString('', 'Saved {count}').validate_flags()
            Traceback (most recent call last):
                ...
            ValueError: 'Saved {count}' contains braces but no brace flag
            >>> brace = frozenset({'python-brace-format'})
            >>> TranslatableString('', 'Saved {count}', flags=brace).fields()
            ['count']

        """
        flags = frozenset(f.strip() for f in self.flags.union(extra_flags))
        text = self.singular
        if '{' in text and not flags & BRACE_FLAGS:
            msg = f'{text!r} contains braces but no brace flag'
            raise ValueError(msg)
        if '%' in text and not flags & PERCENT_FLAGS:
            msg = f'{text!r} contains percent signs but no percent flag'
            raise ValueError(msg)
        if (
            flags & {'python-format', 'python-brace-format'}
            and '{' not in text
            and '%' not in text
        ):
            msg = f'{text!r} has a format flag but no placeholders'
            raise ValueError(msg)
        return self._replace(flags=flags)


def translatable(
    context: str,
    single: str,
    /,
    flags: Iterable[str] | str = (),
    plural: str = '',
    comments: str = '',
) -> TranslatableString:
    """Return a normalized and validated [`TranslatableString`][]."""
    flag_set = frozenset({flags} if isinstance(flags, str) else flags)
    return (
        TranslatableString(context, single, plural=plural, flags=flag_set)
        .rewrapped()
        .with_comments(comments)
        .validate_flags()
    )


def commented(comments: str = '', /) -> Callable[..., TranslatableString]:
    """Return [`translatable`][] with the translator comments filled in."""
    return functools.partial(translatable, comments=comments)


def _escape_braces(text: str) -> str:
    return text.replace('{', '{{').replace('}', '}}')


class TranslatedString:
    """A lazily translated and formatted message.

    Translation happens on first stringification, using the module's
    current [`translation`][].  For templates with a plural form, the
    `count` replacement value selects the form.  Nested
    `TranslatedString` values are rendered first.

    """

    def __init__(
        self,
        template: str | TranslatableString | MsgTemplate,
        args_dict: Mapping[str, Any] = types.MappingProxyType({}),
        /,
        **kwargs: Any,  # noqa: ANN401
    ) -> None:
        if isinstance(template, MSG_TEMPLATE_CLASSES):
            template = cast('TranslatableString', template.value)
        self.template: str | TranslatableString = template
        self.kwargs = {**args_dict, **kwargs}
        self._rendered: str | None = None

    def __bool__(self) -> bool:
        return bool(str(self))

    def __eq__(self, other: object) -> bool:  # pragma: no cover
        return str(self) == other

    def __hash__(self) -> int:  # pragma: no cover
        return hash(str(self))

    def __repr__(self) -> str:  # pragma: no cover
        return f'{type(self).__name__}({self.template!r}, {self.kwargs!r})'

    def _pattern(self) -> str:
        template = self.template
        if isinstance(template, str):
            return translation.gettext(template)
        ctx = template.l10n_context
        if template.plural:
            n = self.kwargs.get('count', 1)
            pattern = (
                translation.npgettext(
                    ctx, template.singular, template.plural, n
                )
                if ctx
                else translation.ngettext(
                    template.singular, template.plural, n
                )
            )
        else:
            pattern = (
                translation.pgettext(ctx, template.singular)
                if ctx
                else translation.gettext(template.singular)
            )
        if 'no-python-brace-format' in template.flags:
            pattern = _escape_braces(pattern)
        return pattern

    def __str__(self) -> str:
        if self._rendered is None:
            values = {
                key: str(val) if isinstance(val, TranslatedString) else val
                for key, val in self.kwargs.items()
            }
            self._rendered = self._pattern().format(**values)
        return self._rendered

    @classmethod
    def constant(cls, text: str) -> Self:
        """Wrap a literal text that must not be formatted."""
        return cls(_escape_braces(text))

    def maybe_without_filename(self) -> Self:
        """Drop the filename from the message if it is missing.

        Only applies when the `filename` value is `None` and the
        template contains `": {filename!r}"`; see
        [`TranslatableString.maybe_without_filename`][].

        """
        if isinstance(self.template, str) or (
            self.kwargs.get('filename') is not None
        ):
            return self
        shortened = self.template.maybe_without_filename()
        if shortened == self.template:
            return self
        return type(self)(shortened, self.kwargs)


class Label(enum.Enum):
    """Labels for the `tsmerge` command-line.

    Includes help text (long-form and short-form), help metavar names,
    and diagnostic labels.

    """

    WARNING_LABEL = commented(
        'This is a short label that will be prepended to '
        'a warning message, e.g., "Warning: No plural rules known '
        'for language \'xx\'."',
    )(
        'Label :: Diagnostics :: Marker',
        'Warning',
    )
    """"""
    TSMERGE_01 = commented(
        'This is the first paragraph of the command help text, '
        'but it also appears (in truncated form, if necessary) '
        'as one-line help text for this command.  '
        'The translation should thus be as concise as possible.',
    )(
        'Label :: Help text :: Explanation',
        'Merge freshly extracted source strings into '
        'Qt Linguist translation catalogs.',
    )
    """"""
    TSMERGE_02 = commented(
        '',
    )(
        'Label :: Help text :: Explanation',
        'The currently implemented subcommands are "merge" '
        '(for updating catalogs from an extraction pass) and "stats" '
        '(for reporting translation progress).  '
        'See the respective `--help` output for instructions.',
    )
    """"""
    TSMERGE_EPILOG_01 = commented(
        '',
    )(
        'Label :: Help text :: Explanation',
        'Configuration is read from the file config.toml in the '
        'directory given by the `TSMERGE_PATH` variable, which defaults '
        'to `~/.tsmerge` on UNIX-like systems and '
        r'`C:\Users\<user>\AppData\Roaming\Tsmerge` on Windows.',
    )
    """"""
    TSMERGE_MERGE_01 = commented(
        'This is the first paragraph of the command help text, '
        'but it also appears (in truncated form, if necessary) '
        'as one-line help text for this command.  '
        'The translation should thus be as concise as possible.',
    )(
        'Label :: Help text :: Explanation',
        'Merge extracted source strings into translation catalogs.',
    )
    """"""
    TSMERGE_MERGE_02 = commented(
        '',
    )(
        'Label :: Help text :: Explanation',
        'Read the extraction records from {extracted_metavar!s} '
        '(a JSON file, or "-" for standard input), and merge them into '
        'each {catalog_metavar!s}.  Existing translations are kept, '
        'translations of similar messages are reused but marked '
        'unfinished, and messages no longer in the sources are kept '
        'as obsolete.  Missing catalogs are created.',
        flags='python-brace-format',
    )
    """"""
    TSMERGE_MERGE_03 = commented(
        '',
    )(
        'Label :: Help text :: Explanation',
        'If a catalog cannot be merged, it is left untouched, the '
        'remaining catalogs are still merged, and the exit status '
        'is 1.',
    )
    """"""
    TSMERGE_STATS_01 = commented(
        'This is the first paragraph of the command help text, '
        'but it also appears (in truncated form, if necessary) '
        'as one-line help text for this command.  '
        'The translation should thus be as concise as possible.',
    )(
        'Label :: Help text :: Explanation',
        'Show the translation progress of translation catalogs.',
    )
    """"""
    TSMERGE_STATS_02 = commented(
        '',
    )(
        'Label :: Help text :: Explanation',
        'For each {catalog_metavar!s}, count the translated, unfinished, '
        'obsolete and vanished messages, and compute the share of '
        'current messages that are translated.',
        flags='python-brace-format',
    )
    """"""
    DEBUG_OPTION_HELP_TEXT = commented(
        '',
    )(
        'Label :: Help text :: One-line description',
        'also emit debug information (implies --verbose)',
    )
    """"""
    HELP_OPTION_HELP_TEXT = commented(
        '',
    )(
        'Label :: Help text :: One-line description',
        'show this help text, then exit',
    )
    """"""
    QUIET_OPTION_HELP_TEXT = commented(
        '',
    )(
        'Label :: Help text :: One-line description',
        'suppress even warnings, emit only errors',
    )
    """"""
    VERBOSE_OPTION_HELP_TEXT = commented(
        '',
    )(
        'Label :: Help text :: One-line description',
        'emit extra/progress information to standard error',
    )
    """"""
    VERSION_OPTION_HELP_TEXT = commented(
        '',
    )(
        'Label :: Help text :: One-line description',
        'show applicable version information, then exit',
    )
    """"""
    LANGUAGE_HELP_TEXT = commented(
        '',
    )(
        'Label :: Help text :: One-line description',
        'use {metavar!s} as the target language of new catalogs '
        '(default: guessed from the file name)',
        flags='python-brace-format',
    )
    """"""
    SOURCE_LANGUAGE_HELP_TEXT = commented(
        '',
    )(
        'Label :: Help text :: One-line description',
        'use {metavar!s} as the source language of new catalogs',
        flags='python-brace-format',
    )
    """"""
    THRESHOLD_HELP_TEXT = commented(
        '',
    )(
        'Label :: Help text :: One-line description',
        'reuse translations of similar messages only if their '
        'similarity is at least {metavar!s}, between 0 and 1 '
        '(default: 0.6)',
        flags='python-brace-format',
    )
    """"""
    VANISH_AFTER_HELP_TEXT = commented(
        '',
    )(
        'Label :: Help text :: One-line description',
        'mark obsolete messages as vanished once they stayed obsolete '
        'for {metavar!s} further passes (default: 1)',
        flags='python-brace-format',
    )
    """"""
    STRICT_PLURALS_HELP_TEXT = commented(
        '',
    )(
        'Label :: Help text :: One-line description',
        'fail for languages without known plural rules',
    )
    """"""
    NO_OBSOLETE_HELP_TEXT = commented(
        '',
    )(
        'Label :: Help text :: One-line description',
        'remove messages no longer in the sources, '
        'instead of keeping them as obsolete',
    )
    """"""
    NO_FUZZY_HELP_TEXT = commented(
        '',
    )(
        'Label :: Help text :: One-line description',
        'never reuse translations of similar messages',
    )
    """"""
    DRY_RUN_HELP_TEXT = commented(
        '',
    )(
        'Label :: Help text :: One-line description',
        'merge as usual, but do not write any catalogs',
    )
    """"""
    REPORT_JSON_HELP_TEXT = commented(
        '',
    )(
        'Label :: Help text :: One-line description',
        'print the change reports as JSON to standard output',
    )
    """"""
    OUTPUT_HELP_TEXT = commented(
        '',
    )(
        'Label :: Help text :: One-line description',
        'write the merged catalog to {metavar!s} instead '
        '(only with a single catalog)',
        flags='python-brace-format',
    )
    """"""
    COMMANDS_LABEL = commented(
        '',
    )(
        'Label :: Help text :: Option group name',
        'Commands',
    )
    """"""
    LOGGING_LABEL = commented(
        '',
    )(
        'Label :: Help text :: Option group name',
        'Logging',
    )
    """"""
    MERGE_BEHAVIOR_LABEL = commented(
        '',
    )(
        'Label :: Help text :: Option group name',
        'Merge behavior',
    )
    """"""
    MERGE_BEHAVIOR_EPILOG = commented(
        '',
    )(
        'Label :: Help text :: Explanation',
        'These options override the [merge] settings of the '
        'configuration file.',
    )
    """"""
    NEW_CATALOG_LABEL = commented(
        '',
    )(
        'Label :: Help text :: Option group name',
        'New catalogs',
    )
    """"""
    OUTPUT_LABEL = commented(
        '',
    )(
        'Label :: Help text :: Option group name',
        'Output',
    )
    """"""
    OPTIONS_LABEL = commented(
        '',
    )(
        'Label :: Help text :: Option group name',
        'Options',
    )
    """"""
    OTHER_OPTIONS_LABEL = commented(
        '',
    )(
        'Label :: Help text :: Option group name',
        'Other options',
    )
    """"""
    METAVAR_CATALOG = commented(
        '',
    )(
        'Label :: Help text :: Metavar :: merge',
        'CATALOG',
    )
    """"""
    METAVAR_EXTRACTED = commented(
        '',
    )(
        'Label :: Help text :: Metavar :: merge',
        'EXTRACTED',
    )
    """"""
    METAVAR_LANGUAGE = commented(
        '',
    )(
        'Label :: Help text :: Metavar :: merge',
        'LANG',
    )
    """"""
    METAVAR_PASSES = commented(
        '',
    )(
        'Label :: Help text :: Metavar :: merge',
        'N',
    )
    """"""
    METAVAR_PATH = commented(
        '',
    )(
        'Label :: Help text :: Metavar :: merge',
        'PATH',
    )
    """"""
    METAVAR_SCORE = commented(
        '',
    )(
        'Label :: Help text :: Metavar :: merge',
        'SCORE',
    )
    """"""
    VERSION_INFO_MAJOR_LIBRARY_TEXT = commented(
        'This message reports on the version of a major library that '
        'tsmerge uses, such as click or rapidfuzz.',
    )(
        'Label :: Info Message',
        'Using {dependency_name_and_version}',
        flags='python-brace-format',
    )
    """"""
    SUPPORTED_PLURAL_FAMILIES = commented(
        'This is part of the version output, emitting lists of '
        'plural rule families.  A comma-separated English list of '
        'items follows, with standard English punctuation.',
    )(
        'Label :: Info Message',
        'Supported plural rule families:',
    )
    """"""
    SUPPORTED_SUBCOMMANDS = commented(
        'This is part of the version output, emitting lists of '
        'subcommands.  A comma-separated English list of items follows, '
        'with standard English punctuation.',
    )(
        'Label :: Info Message',
        'Supported subcommands:',
    )
    """"""
    STATS_LINE = commented(
        '"path" is the catalog file; "percent" is the share of '
        'current messages that are translated.',
    )(
        'Label :: Info Message',
        '{path}: {translated} translated, {unfinished} unfinished, '
        '{obsolete} obsolete, {vanished} vanished ({percent:.1f}% done)',
        flags=('python-brace-format', 'no-python-format'),
    )
    """"""


class DebugMsgTemplate(enum.Enum):
    """Debug messages for the `tsmerge` command-line."""

    LOADED_USER_CONFIG = commented(
        '',
    )(
        'Debug message',
        'Loaded user configuration from {filename!r}.',
        flags='python-brace-format',
    )
    """"""
    LANGUAGE_GUESSED = commented(
        '"path" is the catalog file, "language" the language tag '
        'derived from its name.',
    )(
        'Debug message',
        'Guessed language {language!r} for {path!r}.',
        flags='python-brace-format',
    )
    """"""
    NOT_WRITING_DRY_RUN = commented(
        '',
    )(
        'Debug message',
        'Not writing {path!r}: dry run.',
        flags='python-brace-format',
    )
    """"""


class InfoMsgTemplate(enum.Enum):
    """Info messages for the `tsmerge` command-line."""

    UPDATING_CATALOG = commented(
        '',
    )(
        'Info message',
        'Updating {path!r}...',
        flags='python-brace-format',
    )
    """"""
    CREATING_CATALOG = commented(
        '"language" is the target language of the new catalog.',
    )(
        'Info message',
        'Creating {path!r} for language {language!r}...',
        flags='python-brace-format',
    )
    """"""
    FOUND_SOURCE_TEXTS = commented(
        '"count" is the number of distinct source texts in the '
        'extraction pass, "new" and "existing" partition it.',
    )(
        'Info message',
        'Found {count} source text ({new} new and {existing} '
        'already existing)',
        plural='Found {count} source texts ({new} new and {existing} '
        'already existing)',
        flags='python-brace-format',
    )
    """"""
    SAME_TEXT_HEURISTIC = commented(
        'A fuzzy match reuses the translation of a similar, '
        'no longer existing source text.',
    )(
        'Info message',
        'Reused {count} translation of a similar source text',
        plural='Reused {count} translations of similar source texts',
        flags='python-brace-format',
    )
    """"""
    KEPT_OBSOLETE = commented(
        '',
    )(
        'Info message',
        'Kept {count} obsolete entry',
        plural='Kept {count} obsolete entries',
        flags='python-brace-format',
    )
    """"""
    REMOVED_OBSOLETE = commented(
        '',
    )(
        'Info message',
        'Removed {count} obsolete entry',
        plural='Removed {count} obsolete entries',
        flags='python-brace-format',
    )
    """"""
    VANISHED_ENTRIES = commented(
        '',
    )(
        'Info message',
        'Marked {count} long obsolete entry as vanished',
        plural='Marked {count} long obsolete entries as vanished',
        flags='python-brace-format',
    )
    """"""


class WarnMsgTemplate(enum.Enum):
    """Warning messages for the `tsmerge` command-line."""

    UNKNOWN_PLURAL_RULES = commented(
        '',
    )(
        'Warning message',
        'No plural rules known for language {language!r}.  '
        'Plural messages will have a single form, and stay unfinished.',
        flags='python-brace-format',
    )
    """"""
    UNKNOWN_CONFIG_SETTING = commented(
        '"key" is a TOML key, such as merge.threshold.',
    )(
        'Warning message',
        'Ignoring unknown configuration setting {key!s}.',
        flags='python-brace-format',
    )
    """"""
    NUMERUS_FORMS_ADJUSTED = commented(
        '"count" is the number of plural messages, "forms" the '
        'number of plural forms of the catalog language.',
    )(
        'Warning message',
        'Adjusted {count} plural message to {forms} plural forms.',
        plural='Adjusted {count} plural messages to {forms} plural forms.',
        flags='python-brace-format',
    )
    """"""


class ErrMsgTemplate(enum.Enum):
    """Error messages for the `tsmerge` command-line."""

    CANNOT_LOAD_EXTRACTION = commented(
        '"error" is supplied by the operating system (errno/strerror).',
    )(
        'Error message',
        'Cannot load extraction records: {error}: {filename!r}.',
        flags='python-brace-format',
    )
    """"""
    CANNOT_DECODE_EXTRACTION = commented(
        '"error" is supplied by the JSON decoder.',
    )(
        'Error message',
        'Cannot load extraction records: cannot decode JSON: {error}.',
        flags='python-brace-format',
    )
    """"""
    INVALID_EXTRACTION = commented(
        '"error" names the offending record entry, as a JSONPath '
        'selector like $[3].location.line.',
    )(
        'Error message',
        'Invalid extraction records: {error}.',
        flags='python-brace-format',
    )
    """"""
    CANNOT_LOAD_CATALOG = commented(
        '"error" is supplied by the operating system (errno/strerror).',
    )(
        'Error message',
        'Cannot load catalog: {error}: {filename!r}.',
        flags='python-brace-format',
    )
    """"""
    CANNOT_PARSE_CATALOG = commented(
        '"error" describes the problem and names the offending '
        'element or position in the document.',
    )(
        'Error message',
        'Cannot parse catalog: {error}.',
        flags='python-brace-format',
    )
    """"""
    CANNOT_MERGE_CATALOG = commented(
        '"error" describes the problem and names the offending message.',
    )(
        'Error message',
        'Cannot merge into {path!r}: {error}.',
        flags='python-brace-format',
    )
    """"""
    CANNOT_WRITE_CATALOG = commented(
        '"error" is supplied by the operating system (errno/strerror).',
    )(
        'Error message',
        'Cannot write catalog: {error}: {filename!r}.',
        flags='python-brace-format',
    )
    """"""
    CANNOT_GUESS_LANGUAGE = commented(
        '"option" is the command-line option to set the language.',
    )(
        'Error message',
        'Cannot determine the language of new catalog {path!r}.  '
        'Use {option!s} to set it.',
        flags='python-brace-format',
    )
    """"""
    CANNOT_LOAD_USER_CONFIG = commented(
        '"error" is supplied by the operating system (errno/strerror).',
    )(
        'Error message',
        'Cannot load user config: {error}: {filename!r}.',
        flags='python-brace-format',
    )
    """"""
    INVALID_USER_CONFIG = commented(
        '"error" names the offending setting and the problem.',
    )(
        'Error message',
        'The user configuration file is invalid.  {error!s}.',
        flags='python-brace-format',
    )
    """"""
    OUTPUT_NEEDS_SINGLE_CATALOG = commented(
        '"option" is the command-line option naming the output file.',
    )(
        'Error message',
        'The {option!s} option requires exactly one catalog.',
        flags='python-brace-format',
    )
    """"""


MsgTemplate: TypeAlias = Union[
    Label,
    DebugMsgTemplate,
    InfoMsgTemplate,
    WarnMsgTemplate,
    ErrMsgTemplate,
]
"""A type alias for all enums containing translatable strings as values."""
MSG_TEMPLATE_CLASSES = (
    Label,
    DebugMsgTemplate,
    InfoMsgTemplate,
    WarnMsgTemplate,
    ErrMsgTemplate,
)
"""A collection all enums containing translatable strings as values."""


def _all_templates() -> Iterator[MsgTemplate]:
    for enum_class in MSG_TEMPLATE_CLASSES:
        yield from enum_class


_PO_ESCAPES = {
    ord('\b'): r'\b',
    ord('\t'): r'\t',
    ord('\n'): r'\n',
    ord('\f'): r'\f',
    ord('\r'): r'\r',
    ord('"'): r'\"',
    ord('\\'): r'\\',
}


def _po_quote(text: str) -> str:
    r"""Quote a text as a `.po` string, one source line per line.

    Examples:
        >>> print(_po_quote('Language: en\nMIME-Version: 1.0\n'))
        "Language: en\n"
        "MIME-Version: 1.0\n"
        >>> _po_quote('')
        '""'

    """
    return '\n'.join(
        f'"{line.translate(_PO_ESCAPES)}"'
        for line in text.splitlines(keepends=True) or ['']
    )


def _po_entry(member: MsgTemplate) -> Iterator[str]:
    value = cast('TranslatableString', member.value)
    yield '\n'
    if value.translator_comments:
        yield f'#. {value.translator_comments}\n'
        yield '#.\n'
        yield f'#. Message-ID: {member}\n'
    else:
        yield f'#. TRANSLATORS: Message-ID: {member}\n'
    if value.flags:
        yield f'#, {", ".join(sorted(value.flags))}\n'
    if value.l10n_context:
        yield f'msgctxt {_po_quote(value.l10n_context)}\n'
    yield f'msgid {_po_quote(value.singular)}\n'
    if value.plural:
        yield f'msgid_plural {_po_quote(value.plural)}\n'
        yield 'msgstr[0] ""\n'
        yield 'msgstr[1] ""\n'
    else:
        yield 'msgstr ""\n'


def _build_time() -> datetime.datetime:
    epoch = os.environ.get('SOURCE_DATE_EPOCH')
    if epoch:
        return datetime.datetime.fromtimestamp(
            int(epoch), tz=datetime.timezone.utc
        )
    return datetime.datetime.now().astimezone()


def _write_po_file(
    fileobj: TextIO,
    /,
    *,
    version: str = VERSION,
    build_time: datetime.datetime | None = None,
) -> None:
    """Write the English message template (`.pot`) of tsmerge.

    Entries are grouped by `msgctxt` and sorted by enum member name.
    The creation date honors `$SOURCE_DATE_EPOCH`.  The file object
    must accept UTF-8 text, and stays open.

    Raises:
        ValueError:
            Two templates share the same context and message.

    """
    by_context: dict[str, dict[str, MsgTemplate]] = {}
    for member in _all_templates():
        value = cast('TranslatableString', member.value)
        seen = by_context.setdefault(value.l10n_context, {})
        if value.singular in seen:
            msg = f'{seen[value.singular]} and {member} share their message'
            raise ValueError(msg)
        seen[value.singular] = member
    when = build_time or _build_time()
    year = when.strftime('%Y')
    stamp = when.strftime('%Y-%m-%d %H:%M%z')
    fileobj.write(
        f'# English translation for {PROG_NAME}.\n'
        f'# Copyright (C) {year} {AUTHOR}\n'
        f'# This file is distributed under the same license as {PROG_NAME}.\n'
        f'# {AUTHOR}, {year}.\n'
        '#\n'
        'msgid ""\n'
        'msgstr ""\n'
    )
    header = {
        'Project-Id-Version': f'{PROG_NAME} {version}',
        'POT-Creation-Date': stamp,
        'PO-Revision-Date': stamp,
        'Last-Translator': AUTHOR,
        'Language': 'en',
        'Language-Team': 'English',
        'MIME-Version': '1.0',
        'Content-Type': 'text/plain; charset=UTF-8',
        'Content-Transfer-Encoding': '8bit',
        'Plural-Forms': 'nplurals=2; plural=(n != 1);',
    }
    fileobj.writelines(
        _po_quote(f'{key}: {value}\n') + '\n' for key, value in header.items()
    )
    for members in by_context.values():
        for member in sorted(members.values(), key=str):
            fileobj.writelines(_po_entry(member))


if __name__ == '__main__':
    _write_po_file(sys.stdout)
