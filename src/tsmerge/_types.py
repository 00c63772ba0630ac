# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Types used by tsmerge."""

from __future__ import annotations

import copy
import enum
import json
from typing import TYPE_CHECKING

from typing_extensions import NamedTuple

if TYPE_CHECKING:
    import xml.etree.ElementTree as ET
    from collections.abc import Iterable, Sequence

    from typing_extensions import Any, Self

__all__ = (
    'CatalogError',
    'ExtractedMessage',
    'InconsistentNumerusError',
    'Location',
    'MalformedInputError',
    'MessageEntry',
    'MessageKey',
    'ParseError',
    'Status',
    'UnsupportedLanguageError',
)


class MessageKey(NamedTuple):
    """The identity of a translatable message.

    Two messages are the same message iff all three parts compare
    equal.  Source texts are compared exactly, without any
    normalization.

    Attributes:
        context:
            The logical grouping name, usually the name of the UI class
            the message belongs to.
        source_text:
            The text in the source language.  May embed positional
            placeholders such as `%1` or `%n`.
        disambiguation:
            A free-text comment distinguishing otherwise identical
            source texts.  Empty if unused.

    """

    context: str
    """"""
    source_text: str
    """"""
    disambiguation: str = ''
    """"""

    def __str__(self) -> str:
        parts = [self.context, self.source_text]
        if self.disambiguation:
            parts.append(self.disambiguation)
        return '//'.join(parts)


class Location(NamedTuple):
    """A single occurrence of a message in the sources.

    Attributes:
        file_path:
            The file containing the message, relative to a stable
            project root.
        line:
            The line number (1-based), or `None` if unknown.

    """

    file_path: str
    """"""
    line: int | None = None
    """"""


class Status(str, enum.Enum):
    """The translation status of a message entry.

    Attributes:
        TRANSLATED:
            The translation is complete and current.
        UNFINISHED:
            The translation is missing, partial, or needs review.
        OBSOLETE:
            The message no longer occurs in the sources, but its
            translation is kept for reference.
        VANISHED:
            The message has been obsolete for several merge passes.
            Kept for auditing, but excluded from completion statistics.

    """

    TRANSLATED = 'translated'
    """"""
    UNFINISHED = 'unfinished'
    """"""
    OBSOLETE = 'obsolete'
    """"""
    VANISHED = 'vanished'
    """"""

    def is_live(self) -> bool:
        """Return true if the status belongs to a current message."""
        return self in {Status.TRANSLATED, Status.UNFINISHED}


class ExtractedMessage(NamedTuple):
    """A single record produced by the source string extractor.

    Attributes:
        key:
            The message key.
        location:
            Where the extractor found this occurrence.
        numerus:
            True if the message is a plural message.
        extra_comment:
            An optional developer comment for the translator.

    """

    key: MessageKey
    """"""
    location: Location
    """"""
    numerus: bool = False
    """"""
    extra_comment: str = ''
    """"""


class MessageEntry:
    """A message within a catalog, together with its translations.

    Attributes:
        key:
            The message key.  Read-only.
        locations:
            The occurrences of this message, in extraction order.
        translations:
            The translated strings: one for ordinary messages, one per
            plural form for numerus messages.
        status:
            The translation status.
        numerus:
            True if this is a plural message.
        old_source_text:
            The previous source text, if this entry inherited its
            translation from a similar message.
        old_disambiguation:
            The previous disambiguation comment, likewise.
        extra_comment:
            The developer comment for the translator.
        translator_comment:
            The translator's own comment.
        obsolete_passes:
            The number of consecutive merge passes during which this
            entry matched nothing.
        extra_attributes:
            Unrecognized attributes of the persisted message element,
            kept verbatim.
        translation_attributes:
            Unrecognized attributes of the persisted translation
            element, kept verbatim.
        translation_elements:
            Unrecognized child elements of the persisted translation
            element, such as Qt's `<lengthvariant>`s, kept verbatim.
        extra_elements:
            Unrecognized child elements of the persisted message
            element, kept verbatim.

    """

    def __init__(  # noqa: PLR0913
        self,
        key: MessageKey,
        /,
        *,
        locations: Iterable[Location] = (),
        translations: Iterable[str] = ('',),
        status: Status = Status.UNFINISHED,
        numerus: bool = False,
        old_source_text: str = '',
        old_disambiguation: str = '',
        extra_comment: str = '',
        translator_comment: str = '',
        obsolete_passes: int = 0,
        extra_attributes: dict[str, str] | None = None,
        translation_attributes: dict[str, str] | None = None,
        translation_elements: list[ET.Element] | None = None,
        extra_elements: list[ET.Element] | None = None,
    ) -> None:
        self._key = key
        self.locations = list(locations)
        self.translations = list(translations) or ['']
        self.status = status
        self.numerus = numerus
        self.old_source_text = old_source_text
        self.old_disambiguation = old_disambiguation
        self.extra_comment = extra_comment
        self.translator_comment = translator_comment
        self.obsolete_passes = obsolete_passes
        self.extra_attributes = dict(extra_attributes or {})
        self.translation_attributes = dict(translation_attributes or {})
        self.translation_elements = list(translation_elements or [])
        self.extra_elements = list(extra_elements or [])

    @property
    def key(self) -> MessageKey:
        """The message key."""
        return self._key

    def is_complete(self) -> bool:
        """Return true if every translation string is non-empty."""
        return all(self.translations)

    def has_translation(self) -> bool:
        """Return true if there is anything a translator wrote.

        That is a non-empty translation string, or unrecognized
        translation content.

        """
        return any(self.translations) or bool(self.translation_elements)

    def resize_translations(self, count: int, /) -> bool:
        """Pad or truncate the translations to exactly `count` strings.

        Returns:
            True if the translations had to be resized.

        """
        current = len(self.translations)
        if current == count:
            return False
        if current < count:
            self.translations.extend([''] * (count - current))
        else:
            del self.translations[count:]
        return True

    def copy(self, *, key: MessageKey | None = None) -> Self:
        """Return an independent copy, optionally under a new key."""
        return self.__class__(
            self.key if key is None else key,
            locations=self.locations,
            translations=self.translations,
            status=self.status,
            numerus=self.numerus,
            old_source_text=self.old_source_text,
            old_disambiguation=self.old_disambiguation,
            extra_comment=self.extra_comment,
            translator_comment=self.translator_comment,
            obsolete_passes=self.obsolete_passes,
            extra_attributes=self.extra_attributes,
            translation_attributes=self.translation_attributes,
            translation_elements=[
                copy.deepcopy(e) for e in self.translation_elements
            ],
            extra_elements=[copy.deepcopy(e) for e in self.extra_elements],
        )

    def _comparison_tuple(self) -> tuple[Any, ...]:
        return (
            self.key,
            self.locations,
            self.translations,
            self.status,
            self.numerus,
            self.old_source_text,
            self.old_disambiguation,
            self.extra_comment,
            self.translator_comment,
            self.obsolete_passes,
            self.extra_attributes,
            self.translation_attributes,
            [_element_signature(e) for e in self.translation_elements],
            [_element_signature(e) for e in self.extra_elements],
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MessageEntry):
            return NotImplemented
        return self._comparison_tuple() == other._comparison_tuple()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}({self.key!r}, '
            f'status={self.status.value!r}, numerus={self.numerus!r}, '
            f'translations={self.translations!r}, '
            f'locations={self.locations!r})'
        )


def _element_signature(element: ET.Element, /) -> tuple[Any, ...]:
    return (
        element.tag,
        tuple(element.attrib.items()),
        element.text,
        tuple(_element_signature(child) for child in element),
        element.tail,
    )


# Errors
# ======


class CatalogError(ValueError):
    """Base class for all catalog merging and serialization errors."""


class ParseError(CatalogError):
    """The persisted catalog document is malformed.

    Attributes:
        reason:
            What is wrong.
        path:
            The file name of the document, if known.
        element:
            The path to the offending element, such as
            `TS/context[2]/message[5]`, if known.
        position:
            The `(line, column)` position of an XML syntax error, if
            known.

    """

    def __init__(
        self,
        reason: str,
        /,
        *,
        path: str | None = None,
        element: str | None = None,
        position: tuple[int, int] | None = None,
    ) -> None:
        super().__init__(reason)
        self.reason = reason
        self.path = path
        self.element = element
        self.position = position

    def __str__(self) -> str:
        where = []
        if self.path:
            where.append(repr(self.path))
        if self.position is not None:
            line, column = self.position
            where.append(f'line {line}, column {column}')
        if self.element:
            where.append(f'at {self.element}')
        return f'{self.reason} ({", ".join(where)})' if where else self.reason


class MalformedInputError(CatalogError):
    """An extracted message cannot be attributed to a source file.

    Raised for records with an empty file path whose key is not already
    present in the existing catalog.

    """

    def __init__(self, key: MessageKey, /) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f'New message without a source file: {str(self.key)!r}'


class InconsistentNumerusError(CatalogError):
    """A message key was extracted both as plural and as non-plural."""

    def __init__(self, key: MessageKey, /) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return (
            f'Message extracted both as plural and as non-plural: '
            f'{str(self.key)!r}'
        )


class UnsupportedLanguageError(CatalogError):
    """The plural rule table has no entry for the language."""

    def __init__(self, language: str, /) -> None:
        super().__init__(language)
        self.language = language

    def __str__(self) -> str:
        return f'No plural rules known for language {self.language!r}'


# Extraction records
# ==================


def json_path(path: Sequence[str | int], /) -> str:
    r"""Transform a series of keys and indices into a JSONPath selector.

    The resulting selector is rooted at `$` and uses shorthand dot
    notation where possible.

    Examples:
        >>> json_path([3, 'location', 'line'])
        '$[3].location.line'
        >>> json_path([0, 'file name'])
        '$[0]["file name"]'

    """

    def needs_longhand(x: str | int) -> bool:
        initial = (
            frozenset('abcdefghijklmnopqrstuvwxyz')
            | frozenset('ABCDEFGHIJKLMNOPQRSTUVWXYZ')
            | frozenset('_')
        )
        chars = initial | frozenset('0123456789')
        return not (
            isinstance(x, str)
            and x
            and set(x).issubset(chars)
            and x[:1] in initial
        )

    chunks = ['$']
    chunks.extend(
        f'[{json.dumps(x)}]' if needs_longhand(x) else f'.{x}' for x in path
    )
    return ''.join(chunks)


def validate_extraction_records(obj: Any, /) -> None:  # noqa: ANN401,C901
    """Check that `obj` is a valid list of extraction records.

    Each record is a JSON object with the string entries `context` and
    `source`, the optional string entries `comment` and `extracomment`,
    the optional boolean entry `numerus`, and a `location` object with
    a string `filename` and an optional positive integer `line`.

    Raises:
        TypeError:
            An entry, or the record list itself, has the wrong type.
        ValueError:
            An entry is not allowed, or has a disallowed value.

    """
    err_not_a_list = 'extraction records are not a list'

    def err_not_a(what: str, path: Sequence[str | int], /) -> str:
        return f'extraction record entry {json_path(path)} is not {what}'

    def err_missing(key: str, path: Sequence[str | int], /) -> str:
        return (
            f'extraction record {json_path(path)} is missing '
            f'required entry {key!r}'
        )

    def err_unknown(key: str, path: Sequence[str | int], /) -> str:
        return (
            f'extraction record {json_path(path)} uses unknown '
            f'entry {key!r}'
        )

    if not isinstance(obj, list):
        raise TypeError(err_not_a_list)
    for i, record in enumerate(obj):
        if not isinstance(record, dict):
            raise TypeError(err_not_a('an object', [i]))
        for key in ('context', 'source', 'location'):
            if key not in record:
                raise ValueError(err_missing(key, [i]))
        for key, value in record.items():
            if key in {'context', 'source', 'comment', 'extracomment'}:
                if not isinstance(value, str):
                    raise TypeError(err_not_a('a string', [i, key]))
            elif key == 'numerus':
                if not isinstance(value, bool):
                    raise TypeError(err_not_a('a boolean', [i, key]))
            elif key == 'location':
                if not isinstance(value, dict):
                    raise TypeError(err_not_a('an object', [i, key]))
                if 'filename' not in value:
                    raise ValueError(err_missing('filename', [i, key]))
                if not isinstance(value['filename'], str):
                    raise TypeError(
                        err_not_a('a string', [i, key, 'filename'])
                    )
                line = value.get('line')
                if line is not None and (
                    not isinstance(line, int) or isinstance(line, bool)
                ):
                    raise TypeError(err_not_a('an integer', [i, key, 'line']))
                if line is not None and line < 1:
                    raise ValueError(
                        err_not_a('a positive integer', [i, key, 'line'])
                    )
                for subkey in value:
                    if subkey not in {'filename', 'line'}:
                        raise ValueError(err_unknown(subkey, [i, key]))
            else:
                raise ValueError(err_unknown(key, [i]))


def extracted_messages_from_json(obj: Any, /) -> list[ExtractedMessage]:  # noqa: ANN401
    """Convert validated JSON extraction records to extracted messages.

    Raises:
        TypeError:
            See [`validate_extraction_records`][].
        ValueError:
            See [`validate_extraction_records`][].

    """
    validate_extraction_records(obj)
    return [
        ExtractedMessage(
            key=MessageKey(
                record['context'],
                record['source'],
                record.get('comment', ''),
            ),
            location=Location(
                record['location']['filename'],
                record['location'].get('line'),
            ),
            numerus=record.get('numerus', False),
            extra_comment=record.get('extracomment', ''),
        )
        for record in obj
    ]
