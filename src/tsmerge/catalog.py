# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""In-memory translation catalogs."""

from __future__ import annotations

import collections
import copy
from typing import TYPE_CHECKING

from typing_extensions import NamedTuple

from tsmerge._types import MessageEntry, MessageKey, Status

if TYPE_CHECKING:
    import xml.etree.ElementTree as ET
    from collections.abc import Iterator

    from typing_extensions import Self

__all__ = ('Catalog', 'CatalogStatistics')

DEFAULT_TS_VERSION = '2.1'


class CatalogStatistics(NamedTuple):
    """Status counts of a catalog.

    Attributes:
        translated:
            Number of translated entries.
        unfinished:
            Number of unfinished entries.
        obsolete:
            Number of obsolete entries.
        vanished:
            Number of vanished entries.

    """

    translated: int
    """"""
    unfinished: int
    """"""
    obsolete: int
    """"""
    vanished: int
    """"""

    @property
    def current(self) -> int:
        """The number of entries for messages still in the sources."""
        return self.translated + self.unfinished

    def completion(self) -> float:
        """Return the ratio of translated to current entries.

        Obsolete and vanished entries do not count.  An empty catalog is
        complete.

        """
        return self.translated / self.current if self.current else 1.0


class Catalog:
    """The translated messages of one language.

    Entries are grouped by context.  Both the contexts and the entries
    within each context keep their insertion order, which is also the
    document order when serialized.  An index from message keys to
    entries provides constant-time lookup.

    Not safe for concurrent mutation.

    Attributes:
        language:
            The target language tag.
        source_language:
            The source language tag, or the empty string if unset.
        version:
            The version of the persisted document format.
        extra_attributes:
            Unrecognized document attributes, kept verbatim.
        extra_elements:
            Unrecognized top-level document elements, kept verbatim.
        context_comments:
            Context-level comments, by context name.
        context_extra_elements:
            Unrecognized context-level elements, by context name.

    """

    def __init__(
        self,
        language: str = '',
        *,
        source_language: str = '',
        version: str = DEFAULT_TS_VERSION,
    ) -> None:
        self.language = language
        self.source_language = source_language
        self.version = version
        self.extra_attributes: dict[str, str] = {}
        self.extra_elements: list[ET.Element] = []
        self.context_comments: dict[str, str] = {}
        self.context_extra_elements: dict[str, list[ET.Element]] = {}
        self._groups: collections.OrderedDict[str, list[MessageEntry]] = (
            collections.OrderedDict()
        )
        self._index: dict[MessageKey, MessageEntry] = {}

    def add(self, entry: MessageEntry, /) -> None:
        """Append an entry to the end of its context group.

        The context group is created on first use, after all existing
        groups.

        Raises:
            ValueError:
                The catalog already holds an entry with the same key.

        """
        if entry.key in self._index:
            msg = f'Duplicate message in catalog: {str(entry.key)!r}'
            raise ValueError(msg)
        self._groups.setdefault(entry.key.context, []).append(entry)
        self._index[entry.key] = entry

    def add_context(self, context: str, /) -> None:
        """Ensure that the context group exists, even if empty."""
        self._groups.setdefault(context, [])

    def get(self, key: MessageKey, /) -> MessageEntry | None:
        """Return the entry for the key, or `None`."""
        return self._index.get(key)

    def __getitem__(self, key: MessageKey, /) -> MessageEntry:
        return self._index[key]

    def __contains__(self, key: object, /) -> bool:
        return key in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[MessageEntry]:
        """Iterate over all entries in document order."""
        for entries in self._groups.values():
            yield from entries

    def contexts(self) -> list[str]:
        """Return the context names, in document order."""
        return list(self._groups)

    def entries(self, context: str, /) -> list[MessageEntry]:
        """Return the entries of the context, in document order."""
        return list(self._groups.get(context, ()))

    def keys(self) -> list[MessageKey]:
        """Return all message keys, in document order."""
        return [entry.key for entry in self]

    def copy(self) -> Self:
        """Return an independent deep copy of this catalog."""
        new = self.copy_header()
        for context in self._groups:
            new.add_context(context)
        for entry in self:
            new.add(entry.copy())
        return new

    def copy_header(self) -> Self:
        """Return an empty catalog with the same document-level data.

        The document-level data comprises the languages, the format
        version, the context comments, and all unrecognized attributes
        and elements outside of messages.

        """
        new = self.__class__(
            self.language,
            source_language=self.source_language,
            version=self.version,
        )
        new.extra_attributes = dict(self.extra_attributes)
        new.extra_elements = copy.deepcopy(self.extra_elements)
        new.context_comments = dict(self.context_comments)
        new.context_extra_elements = copy.deepcopy(
            self.context_extra_elements
        )
        return new

    def statistics(self) -> CatalogStatistics:
        """Return the status counts of this catalog."""
        counts = collections.Counter(entry.status for entry in self)
        return CatalogStatistics(
            translated=counts[Status.TRANSLATED],
            unfinished=counts[Status.UNFINISHED],
            obsolete=counts[Status.OBSOLETE],
            vanished=counts[Status.VANISHED],
        )

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}(language={self.language!r}, '
            f'contexts={len(self._groups)}, messages={len(self)})'
        )
