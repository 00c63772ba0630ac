# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Read and write catalogs in the Qt Linguist TS format.

The TS format is an XML document: a `<TS>` root carrying the language,
holding `<context>` groups, which in turn hold `<message>` records with
their locations, source text, optional comments, and translation.

Writing is canonical: parsing a written document and writing it again
yields the identical bytes.  Attributes and elements that this module
does not understand are kept and written back unchanged, after the
known content of the respective element.

"""

from __future__ import annotations

import copy
import logging
import os
import re
import tempfile
import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING

from typing_extensions import NamedTuple

from tsmerge import plurals
from tsmerge._types import (
    Location,
    MessageEntry,
    MessageKey,
    ParseError,
    Status,
)
from tsmerge.catalog import DEFAULT_TS_VERSION, Catalog

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

__all__ = ('ParseError', 'dumps', 'emit', 'load', 'parse', 'save')

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'
DOCTYPE = '<!DOCTYPE TS>'
INDENT = '    '
OBSOLETE_PASSES_TAG = 'extra-tsmerge-obsolete-passes'

_STATUS_BY_TYPE = {
    None: Status.TRANSLATED,
    'unfinished': Status.UNFINISHED,
    'obsolete': Status.OBSOLETE,
    'vanished': Status.VANISHED,
}
_TYPE_BY_STATUS = {v: k for k, v in _STATUS_BY_TYPE.items()}

_KNOWN_MESSAGE_CHILDREN = frozenset({
    'location',
    'source',
    'oldsource',
    'comment',
    'oldcomment',
    'extracomment',
    'translatorcomment',
    'translation',
    OBSOLETE_PASSES_TAG,
})

# Characters that XML 1.0 cannot represent, not even as character
# references.  Qt writes these as `<byte value="x.."/>` elements.
_UNREPRESENTABLE = re.compile('[\x00-\x08\x0b\x0c\x0e-\x1f]')
_DIGITS = re.compile('[0-9]+')


# Parsing
# =======


class _Path:
    """Build parse errors for a document."""

    def __init__(self, source_path: str | None) -> None:
        self.source_path = source_path

    def error(self, reason: str, element_path: str) -> ParseError:
        return ParseError(reason, path=self.source_path, element=element_path)


def _indexed_children(
    element: ET.Element, path: str, /
) -> Iterator[tuple[ET.Element, str]]:
    counts: dict[str, int] = {}
    for child in element:
        tag = str(child.tag)
        counts[tag] = counts.get(tag, 0) + 1
        yield child, f'{path}/{tag}[{counts[tag]}]'


def _opaque(element: ET.Element, /) -> ET.Element:
    kept = copy.deepcopy(element)
    kept.tail = None
    return kept


def _decode_byte(element: ET.Element, path: str, tracker: _Path, /) -> str:
    value = element.get('value', '')
    try:
        return chr(
            int(value[1:], 16) if value[:1] in {'x', 'X'} else int(value)
        )
    except (ValueError, OverflowError):
        msg = f'Invalid byte value {value!r}'
        raise tracker.error(msg, path) from None


def _read_mixed(
    element: ET.Element, path: str, tracker: _Path, /
) -> tuple[str, list[ET.Element]]:
    """Return the text of an element, and its other child elements.

    `<byte>` markup is decoded into the text.  The text around the
    other child elements is joined up.

    """
    parts = [element.text or '']
    unknown: list[ET.Element] = []
    for child in element:
        if child.tag == 'byte':
            parts.append(_decode_byte(child, path, tracker))
        else:
            unknown.append(_opaque(child))
        parts.append(child.tail or '')
    return ''.join(parts), unknown


def _read_text(element: ET.Element, path: str, tracker: _Path, /) -> str:
    """Return the text content of an element, decoding `<byte>` markup."""
    text, unknown = _read_mixed(element, path, tracker)
    if unknown:
        msg = f'Unexpected markup <{unknown[0].tag}> in text'
        raise tracker.error(msg, path)
    return text


def _parse_location(
    element: ET.Element, path: str, tracker: _Path, /
) -> Location:
    filename = element.get('filename')
    if filename is None:
        msg = 'Location without a file name'
        raise tracker.error(msg, path)
    line = element.get('line')
    if line is None:
        return Location(filename)
    if not _DIGITS.fullmatch(line) or int(line) < 1:
        msg = f'Invalid line number {line!r}'
        raise tracker.error(msg, path)
    return Location(filename, int(line))


class _Translation(NamedTuple):
    texts: list[str]
    status: Status
    attributes: dict[str, str]
    elements: list[ET.Element]


def _parse_translation(
    element: ET.Element,
    path: str,
    tracker: _Path,
    /,
    *,
    numerus: bool,
) -> _Translation:
    attributes = dict(element.attrib)
    type_ = attributes.pop('type', None)
    if type_ not in _STATUS_BY_TYPE:
        msg = f'Unknown translation type {type_!r}'
        raise tracker.error(msg, path)
    status = _STATUS_BY_TYPE[type_]
    if not numerus:
        text, unknown = _read_mixed(element, path, tracker)
        # Whitespace-only text with a line break only lays out the
        # unknown children.
        if unknown and not text.strip() and '\n' in text:
            text = ''
        return _Translation([text], status, attributes, unknown)
    forms = []
    for child, child_path in _indexed_children(element, path):
        if child.tag != 'numerusform':
            msg = f'Unexpected element <{child.tag}> in plural translation'
            raise tracker.error(msg, child_path)
        forms.append(_read_text(child, child_path, tracker))
    return _Translation(forms or [''], status, attributes, [])


def _parse_message(  # noqa: C901
    element: ET.Element,
    path: str,
    tracker: _Path,
    /,
    *,
    context: str,
) -> MessageEntry:
    attributes = dict(element.attrib)
    numerus_flag = attributes.pop('numerus', 'no')
    if numerus_flag not in {'yes', 'no'}:
        msg = f'Invalid numerus flag {numerus_flag!r}'
        raise tracker.error(msg, path)
    numerus = numerus_flag == 'yes'
    texts: dict[str, str] = {}
    locations: list[Location] = []
    extra_elements: list[ET.Element] = []
    translation: _Translation | None = None
    obsolete_passes = 0
    for child, child_path in _indexed_children(element, path):
        tag = child.tag
        if tag not in _KNOWN_MESSAGE_CHILDREN:
            extra_elements.append(_opaque(child))
        elif tag == 'location':
            locations.append(_parse_location(child, child_path, tracker))
        elif tag == 'translation':
            if translation is not None:
                msg = 'Duplicate <translation> element'
                raise tracker.error(msg, child_path)
            translation = _parse_translation(
                child, child_path, tracker, numerus=numerus
            )
        elif tag == OBSOLETE_PASSES_TAG:
            value = (child.text or '').strip()
            if not _DIGITS.fullmatch(value):
                msg = f'Invalid obsolete pass count {value!r}'
                raise tracker.error(msg, child_path)
            obsolete_passes = int(value)
        else:
            if tag in texts:
                msg = f'Duplicate <{tag}> element'
                raise tracker.error(msg, child_path)
            texts[tag] = _read_text(child, child_path, tracker)
    if 'source' not in texts:
        msg = 'Message without a <source> element'
        raise tracker.error(msg, path)
    if translation is None:
        translation = _Translation([''], Status.UNFINISHED, {}, [])
    status = translation.status
    if status == Status.OBSOLETE:
        obsolete_passes = max(obsolete_passes, 1)
    return MessageEntry(
        MessageKey(context, texts['source'], texts.get('comment', '')),
        locations=locations,
        translations=translation.texts,
        status=status,
        numerus=numerus,
        old_source_text=texts.get('oldsource', ''),
        old_disambiguation=texts.get('oldcomment', ''),
        extra_comment=texts.get('extracomment', ''),
        translator_comment=texts.get('translatorcomment', ''),
        obsolete_passes=obsolete_passes,
        extra_attributes=attributes,
        translation_attributes=translation.attributes,
        translation_elements=translation.elements,
        extra_elements=extra_elements,
    )


def _parse_context(
    element: ET.Element,
    path: str,
    tracker: _Path,
    catalog: Catalog,
    /,
) -> None:
    name_element = element.find('name')
    if name_element is None:
        msg = 'Context without a <name> element'
        raise tracker.error(msg, path)
    name = _read_text(name_element, f'{path}/name[1]', tracker)
    catalog.add_context(name)
    extras = catalog.context_extra_elements.setdefault(name, [])
    seen_name = False
    for child, child_path in _indexed_children(element, path):
        if child.tag == 'name':
            if seen_name:
                msg = 'Duplicate <name> element'
                raise tracker.error(msg, child_path)
            seen_name = True
        elif child.tag == 'comment':
            catalog.context_comments[name] = _read_text(
                child, child_path, tracker
            )
        elif child.tag == 'message':
            entry = _parse_message(child, child_path, tracker, context=name)
            if entry.key in catalog:
                msg = f'Duplicate message {str(entry.key)!r}'
                raise tracker.error(msg, child_path)
            catalog.add(entry)
        else:
            extras.append(_opaque(child))
    if not extras:
        del catalog.context_extra_elements[name]


def parse(data: str | bytes, /, *, path: str | None = None) -> Catalog:
    """Parse a TS document into a catalog.

    Args:
        data:
            The document, either as text or as encoded bytes.
        path:
            The file name of the document, for error messages.

    Returns:
        The catalog, with entries in document order.

    Raises:
        ParseError:
            The document is not well-formed XML, or not a well-formed
            TS document.  The error names the offending element or the
            position of the XML syntax error.

    """
    tracker = _Path(path)
    if isinstance(data, str):
        data = data.encode('utf-8')
    try:
        root = ET.fromstring(data)  # noqa: S314
    except ET.ParseError as exc:
        raise ParseError(
            'Malformed XML', path=path, position=exc.position
        ) from exc
    if root.tag != 'TS':
        msg = f'Unexpected root element <{root.tag}>'
        raise tracker.error(msg, str(root.tag))
    attributes = dict(root.attrib)
    catalog = Catalog(
        attributes.pop('language', ''),
        source_language=attributes.pop('sourcelanguage', ''),
        version=attributes.pop('version', DEFAULT_TS_VERSION),
    )
    catalog.extra_attributes = attributes
    for child, child_path in _indexed_children(root, 'TS'):
        if child.tag == 'context':
            _parse_context(child, child_path, tracker, catalog)
        else:
            catalog.extra_elements.append(_opaque(child))
    logger.debug(
        'Parsed %d messages in %d contexts from %r',
        len(catalog),
        len(catalog.contexts()),
        path or '<string>',
    )
    return catalog


def load(path: str | os.PathLike[str], /) -> Catalog:
    """Load a catalog from a TS file.

    Raises:
        OSError:
            The file cannot be read.
        ParseError:
            See [`parse`][].

    """
    with open(path, 'rb') as infile:
        return parse(infile.read(), path=os.fspath(path))


# Writing
# =======


def _escape(text: str, /, *, attribute: bool = False) -> str:
    text = (
        text.replace('&', '&amp;')
        .replace('<', '&lt;')
        .replace('>', '&gt;')
        .replace('"', '&quot;')
        .replace("'", '&apos;')
        .replace('\r', '&#13;')
    )
    if attribute:
        text = text.replace('\n', '&#10;').replace('\t', '&#9;')
        return _UNREPRESENTABLE.sub('', text)
    return _UNREPRESENTABLE.sub(
        lambda m: f'<byte value="x{ord(m.group()):x}"/>', text
    )


def _attributes(attributes: Mapping[str, str], /) -> str:
    return ''.join(
        f' {name}="{_escape(value, attribute=True)}"'
        for name, value in attributes.items()
    )


def _text_element(tag: str, text: str, depth: int, /) -> str:
    return f'{INDENT * depth}<{tag}>{_escape(text)}</{tag}>'


def _opaque_xml(element: ET.Element, /) -> str:
    # Attribute values come out escaped; raw carriage returns can only
    # be in text, where the parser would turn them into line feeds.
    return ET.tostring(element, encoding='unicode').replace('\r', '&#13;')


def _opaque_element(element: ET.Element, depth: int, /) -> str:
    return INDENT * depth + _opaque_xml(element)


def _emit_message(
    entry: MessageEntry,
    lines: list[str],
    /,
    *,
    form_count: int,
) -> None:
    attributes = {'numerus': 'yes'} if entry.numerus else {}
    attributes.update(entry.extra_attributes)
    lines.append(f'{INDENT}<message{_attributes(attributes)}>')
    for location in entry.locations:
        loc_attributes = {'filename': location.file_path}
        if location.line is not None:
            loc_attributes['line'] = str(location.line)
        lines.append(f'{INDENT * 2}<location{_attributes(loc_attributes)}/>')
    lines.append(_text_element('source', entry.key.source_text, 2))
    if entry.old_source_text:
        lines.append(_text_element('oldsource', entry.old_source_text, 2))
    if entry.key.disambiguation:
        lines.append(_text_element('comment', entry.key.disambiguation, 2))
    if entry.old_disambiguation:
        lines.append(_text_element('oldcomment', entry.old_disambiguation, 2))
    if entry.extra_comment:
        lines.append(_text_element('extracomment', entry.extra_comment, 2))
    if entry.translator_comment:
        lines.append(
            _text_element('translatorcomment', entry.translator_comment, 2)
        )
    translation_attributes = {}
    type_ = _TYPE_BY_STATUS[entry.status]
    if type_ is not None:
        translation_attributes['type'] = type_
    translation_attributes.update(entry.translation_attributes)
    open_tag = f'<translation{_attributes(translation_attributes)}>'
    if entry.numerus:
        forms = list(entry.translations[:form_count])
        forms.extend([''] * (form_count - len(forms)))
        lines.append(f'{INDENT * 2}{open_tag}')
        lines.extend(_text_element('numerusform', form, 3) for form in forms)
        lines.append(f'{INDENT * 2}</translation>')
    elif entry.translation_elements and not entry.translations[0]:
        lines.append(f'{INDENT * 2}{open_tag}')
        lines.extend(
            _opaque_element(e, 3) for e in entry.translation_elements
        )
        lines.append(f'{INDENT * 2}</translation>')
    else:
        text = _escape(entry.translations[0]) + ''.join(
            _opaque_xml(e) for e in entry.translation_elements
        )
        lines.append(f'{INDENT * 2}{open_tag}{text}</translation>')
    if entry.obsolete_passes > 1:
        lines.append(
            _text_element(OBSOLETE_PASSES_TAG, str(entry.obsolete_passes), 2)
        )
    lines.extend(_opaque_element(e, 2) for e in entry.extra_elements)
    lines.append(f'{INDENT}</message>')


def emit(
    catalog: Catalog,
    /,
    *,
    plural_rules: plurals.PluralRuleTable = plurals.DEFAULT_TABLE,
) -> str:
    """Write a catalog as a TS document.

    Plural messages are written with exactly as many plural forms as
    the catalog language has, padding with empty forms or dropping
    surplus forms as necessary.

    Args:
        catalog:
            The catalog to write.
        plural_rules:
            The plural rule table to consult for the catalog language.

    Returns:
        The TS document, as text.  Encode as UTF-8 before storing.

    """
    form_count = plural_rules.form_count(catalog.language)
    root_attributes = {'version': catalog.version}
    if catalog.language:
        root_attributes['language'] = catalog.language
    if catalog.source_language:
        root_attributes['sourcelanguage'] = catalog.source_language
    root_attributes.update(catalog.extra_attributes)
    lines = [XML_DECLARATION, DOCTYPE, f'<TS{_attributes(root_attributes)}>']
    for context in catalog.contexts():
        lines.extend(('<context>', _text_element('name', context, 1)))
        if context in catalog.context_comments:
            lines.append(
                _text_element('comment', catalog.context_comments[context], 1)
            )
        for entry in catalog.entries(context):
            _emit_message(entry, lines, form_count=form_count)
        lines.extend(
            _opaque_element(e, 1)
            for e in catalog.context_extra_elements.get(context, ())
        )
        lines.append('</context>')
    lines.extend(_opaque_element(e, 0) for e in catalog.extra_elements)
    lines.append('</TS>')
    return '\n'.join(lines) + '\n'


def dumps(
    catalog: Catalog,
    /,
    *,
    plural_rules: plurals.PluralRuleTable = plurals.DEFAULT_TABLE,
) -> bytes:
    """Write a catalog as a UTF-8 encoded TS document.

    See [`emit`][] for details.

    """
    return emit(catalog, plural_rules=plural_rules).encode('utf-8')


def save(
    catalog: Catalog,
    path: str | os.PathLike[str],
    /,
    *,
    plural_rules: plurals.PluralRuleTable = plurals.DEFAULT_TABLE,
) -> None:
    """Write a catalog to a TS file, in UTF-8.

    The document is written to a temporary file in the target
    directory first, which then replaces the target.  On failure, an
    existing target file is left untouched.

    Raises:
        OSError:
            The file cannot be written.

    """
    document = dumps(catalog, plural_rules=plural_rules)
    target = os.fspath(path)
    directory = os.path.dirname(os.path.abspath(target))
    with tempfile.NamedTemporaryFile(
        'wb',
        dir=directory,
        prefix='.' + os.path.basename(target) + '.',
        suffix='.tmp',
        delete=False,
    ) as outfile:
        outfile.write(document)
    try:
        os.replace(outfile.name, target)
    except OSError:
        os.unlink(outfile.name)
        raise
    logger.debug('Wrote %d messages to %r', len(catalog), target)
