# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Find the existing catalog entry that an extracted message reuses.

A message either matches an existing entry exactly (same key), or
fuzzily (same context, similar source text), or not at all.  The
similarity measure is pluggable: any function from a pair of source
texts to a score between 0 and 1 will do, together with a threshold.

"""

from __future__ import annotations

import enum
import logging
import math
import re
from typing import TYPE_CHECKING, Callable

from rapidfuzz.distance import Levenshtein
from typing_extensions import NamedTuple, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from tsmerge._types import Location, MessageEntry, MessageKey
    from tsmerge.catalog import Catalog

__all__ = (
    'DEFAULT_SIMILARITY_THRESHOLD',
    'MatchKind',
    'MatchVerdict',
    'Matcher',
    'SimilarityFunction',
    'levenshtein_similarity',
    'match',
)

logger = logging.getLogger(__name__)

SimilarityFunction: TypeAlias = Callable[[str, str], float]
"""Score the similarity of an old and a new source text, from 0 to 1."""

DEFAULT_SIMILARITY_THRESHOLD = 0.6
"""The minimum score for a fuzzy match."""

_PLACEHOLDER = re.compile(r'%L?(?:[1-9][0-9]?|n)')
_WHITESPACE = re.compile(r'\s+')


def normalize_source_text(text: str, /) -> str:
    """Normalize whitespace and positional placeholders.

    Collapse whitespace runs to a single space, strip the text, and
    replace each placeholder (`%1` to `%99`, `%n`, and their
    localized `%L` variants) with `%`.

    Examples:
        >>> normalize_source_text('  Copy %1 to\\n  %L2 ')
        'Copy % to %'

    """
    text = _WHITESPACE.sub(' ', text).strip()
    return _PLACEHOLDER.sub('%', text)


def levenshtein_similarity(old: str, new: str, /) -> float:
    """Score two source texts by normalized Levenshtein similarity.

    Texts that differ only in whitespace or in the numbering of their
    placeholders score 1.  Otherwise, the score is one minus the edit
    distance divided by the length of the longer text.

    """
    if normalize_source_text(old) == normalize_source_text(new):
        return 1.0
    return Levenshtein.normalized_similarity(old, new)


class MatchKind(str, enum.Enum):
    """The kind of match found for an extracted message.

    Attributes:
        EXACT:
            An entry with the same key exists.
        FUZZY:
            An entry with the same context and a similar source text
            exists.
        NEW:
            No suitable entry exists.

    """

    EXACT = 'exact'
    """"""
    FUZZY = 'fuzzy'
    """"""
    NEW = 'new'
    """"""


class MatchVerdict(NamedTuple):
    """The outcome of matching an extracted message.

    Attributes:
        kind:
            The kind of match.
        entry:
            The matched existing entry, or `None` for new messages.
        score:
            The similarity score: 1 for exact matches, 0 for new
            messages.

    """

    kind: MatchKind
    """"""
    entry: MessageEntry | None = None
    """"""
    score: float = 0.0
    """"""


def _compatible_disambiguation(a: str, b: str, /) -> bool:
    return not (a and b and a != b)


def _same_file_distance(
    candidate: MessageEntry,
    locations: Sequence[Location],
    /,
) -> float:
    """Return the smallest line distance within a shared file.

    Shared files without line information count as distance 0.  Returns
    infinity if the candidate shares no file with `locations`.

    """
    best = math.inf
    for old in candidate.locations:
        for new in locations:
            if not old.file_path or old.file_path != new.file_path:
                continue
            if old.line is None or new.line is None:
                distance = 0.0
            else:
                distance = float(abs(old.line - new.line))
            best = min(best, distance)
    return best


class Matcher:
    """Match extracted messages against an existing catalog.

    The catalog is never modified.  Entries whose key occurs anywhere in
    the current extraction pass are claimed by their own exact match and
    are thus never offered as fuzzy candidates.  This keeps every
    verdict independent of the order in which messages are matched.

    """

    def __init__(
        self,
        catalog: Catalog,
        /,
        *,
        extracted_keys: Iterable[MessageKey] = (),
        similarity: SimilarityFunction = levenshtein_similarity,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        fuzzy: bool = True,
    ) -> None:
        """Initialize the matcher.

        Args:
            catalog:
                The existing catalog.
            extracted_keys:
                All message keys of the current extraction pass.
            similarity:
                The similarity function for fuzzy matching.
            threshold:
                The minimum similarity score for a fuzzy match.
            fuzzy:
                If false, only ever report exact matches or new
                messages.

        Raises:
            ValueError:
                The threshold is not within the unit interval.

        """
        if not 0.0 <= threshold <= 1.0:
            msg = f'Similarity threshold out of range: {threshold!r}'
            raise ValueError(msg)
        self.catalog = catalog
        self.similarity = similarity
        self.threshold = threshold
        self.fuzzy = fuzzy
        claimed = frozenset(extracted_keys)
        self._candidates: dict[str, list[tuple[int, MessageEntry]]] = {}
        for position, entry in enumerate(catalog):
            if entry.key in claimed or not entry.has_translation():
                continue
            self._candidates.setdefault(entry.key.context, []).append(
                (position, entry)
            )

    def match(
        self,
        key: MessageKey,
        locations: Sequence[Location] = (),
        numerus: bool = False,  # noqa: FBT001,FBT002
    ) -> MatchVerdict:
        """Find the entry that the extracted message should reuse.

        Args:
            key:
                The key of the extracted message.
            locations:
                The new locations of the extracted message.  Used to
                break ties between fuzzy candidates.
            numerus:
                True if the extracted message is a plural message.

        Returns:
            The match verdict.  Among several fuzzy candidates, prefer
            the highest score, then candidates sharing a file with the
            new message, then the smallest line distance, then the
            earliest position in the catalog.

        """
        entry = self.catalog.get(key)
        if entry is not None:
            return MatchVerdict(MatchKind.EXACT, entry, 1.0)
        if not self.fuzzy:
            return MatchVerdict(MatchKind.NEW)
        best: tuple[tuple[float, bool, float, int], MessageEntry] | None = (
            None
        )
        for position, candidate in self._candidates.get(key.context, ()):
            if candidate.numerus != numerus:
                continue
            if not _compatible_disambiguation(
                candidate.key.disambiguation, key.disambiguation
            ):
                continue
            score = self.similarity(
                candidate.key.source_text, key.source_text
            )
            if score < self.threshold:
                continue
            distance = _same_file_distance(candidate, locations)
            rank = (-score, math.isinf(distance), distance, position)
            if best is None or rank < best[0]:
                best = (rank, candidate)
        if best is None:
            return MatchVerdict(MatchKind.NEW)
        score = -best[0][0]
        logger.debug(
            'Fuzzy match %r -> %r (score %.3f)',
            best[1].key.source_text,
            key.source_text,
            score,
        )
        return MatchVerdict(MatchKind.FUZZY, best[1], score)


def match(  # noqa: PLR0913
    key: MessageKey,
    locations: Sequence[Location],
    numerus: bool,  # noqa: FBT001
    catalog: Catalog,
    /,
    *,
    extracted_keys: Iterable[MessageKey] = (),
    similarity: SimilarityFunction = levenshtein_similarity,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> MatchVerdict:
    """Match a single extracted message against the catalog.

    A convenience wrapper around [`Matcher.match`][].  When matching
    many messages, construct a [`Matcher`][] once instead.

    """
    matcher = Matcher(
        catalog,
        extracted_keys=extracted_keys,
        similarity=similarity,
        threshold=threshold,
    )
    return matcher.match(key, locations, numerus)
