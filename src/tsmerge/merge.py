# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Merge an extraction pass into an existing translation catalog.

The merge is a pure function: it reads the extracted messages and the
existing catalog, and returns a new catalog plus a report of what
changed.  The existing catalog is never modified, and on failure, no
partial result is returned.

"""

from __future__ import annotations

import collections
import dataclasses
import logging
from typing import TYPE_CHECKING

from typing_extensions import NamedTuple

from tsmerge import plurals
from tsmerge._types import (
    InconsistentNumerusError,
    MalformedInputError,
    MessageEntry,
    MessageKey,
    Status,
)
from tsmerge.matcher import (
    DEFAULT_SIMILARITY_THRESHOLD,
    MatchKind,
    Matcher,
    SimilarityFunction,
    levenshtein_similarity,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from typing_extensions import Any

    from tsmerge._types import ExtractedMessage, Location
    from tsmerge.catalog import Catalog

__all__ = (
    'ChangeReport',
    'FuzzyMatch',
    'MergeOptions',
    'merge',
)

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class MergeOptions:
    """Tunable settings for a merge pass.

    Attributes:
        similarity:
            The similarity function for fuzzy matching.
        threshold:
            The minimum similarity score for a fuzzy match.
        fuzzy:
            If false, disable fuzzy matching.
        vanish_after:
            The number of additional passes an obsolete entry may stay
            unclaimed before it becomes vanished.
        strict_plurals:
            If true, fail on languages without known plural rules
            instead of assuming a single plural form.
        keep_obsolete:
            If false, drop unclaimed entries instead of keeping them as
            obsolete or vanished.

    """

    similarity: SimilarityFunction = levenshtein_similarity
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    fuzzy: bool = True
    vanish_after: int = 1
    strict_plurals: bool = False
    keep_obsolete: bool = True

    def __post_init__(self) -> None:
        if self.vanish_after < 0:
            msg = f'vanish_after must not be negative: {self.vanish_after!r}'
            raise ValueError(msg)


class FuzzyMatch(NamedTuple):
    """A translation carried over from a similar message.

    Attributes:
        context:
            The shared context.
        old_source_text:
            The source text of the existing entry.
        new_source_text:
            The source text of the extracted message.
        score:
            The similarity score.

    """

    context: str
    """"""
    old_source_text: str
    """"""
    new_source_text: str
    """"""
    score: float
    """"""


@dataclasses.dataclass
class ChangeReport:
    """What a merge pass changed.

    Attributes:
        exact_matches:
            Extracted messages that matched an existing entry exactly.
        fuzzy_matches:
            Extracted messages that inherited a similar message's
            translation.
        new_entries:
            Extracted messages without any existing counterpart.
        newly_obsolete:
            Existing entries that became obsolete during this pass.
        newly_vanished:
            Obsolete entries that became vanished during this pass.
        revived:
            Obsolete or vanished entries that occur in the sources
            again.
        dropped:
            Unclaimed existing entries that were removed.
        numerus_mismatches:
            Plural messages whose translation count had to be adjusted
            to the language's plural form count.

    """

    exact_matches: int = 0
    fuzzy_matches: list[FuzzyMatch] = dataclasses.field(default_factory=list)
    new_entries: int = 0
    newly_obsolete: int = 0
    newly_vanished: int = 0
    revived: int = 0
    dropped: int = 0
    numerus_mismatches: list[MessageKey] = dataclasses.field(
        default_factory=list
    )

    @property
    def total(self) -> int:
        """The number of distinct extracted messages."""
        return self.exact_matches + len(self.fuzzy_matches) + self.new_entries

    def is_clean(self) -> bool:
        """Return true if the pass matched everything exactly.

        That is, nothing was fuzzily matched, added, obsoleted,
        vanished, revived, dropped or resized.

        """
        return not (
            self.fuzzy_matches
            or self.new_entries
            or self.newly_obsolete
            or self.newly_vanished
            or self.revived
            or self.dropped
            or self.numerus_mismatches
        )

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible representation of the report."""
        return {
            'exact_matches': self.exact_matches,
            'fuzzy_matches': [
                {
                    'context': m.context,
                    'old_source': m.old_source_text,
                    'new_source': m.new_source_text,
                    'score': round(m.score, 4),
                }
                for m in self.fuzzy_matches
            ],
            'new_entries': self.new_entries,
            'newly_obsolete': self.newly_obsolete,
            'newly_vanished': self.newly_vanished,
            'revived': self.revived,
            'dropped': self.dropped,
            'numerus_mismatches': [
                {
                    'context': k.context,
                    'source': k.source_text,
                    'comment': k.disambiguation,
                }
                for k in self.numerus_mismatches
            ],
        }


class _Occurrences(NamedTuple):
    locations: list[Location]
    numerus: bool
    extra_comment: str


def _collect_occurrences(
    extracted: Iterable[ExtractedMessage],
    existing: Catalog,
    /,
) -> collections.OrderedDict[MessageKey, _Occurrences]:
    """Group the extracted records by key, validating them on the way.

    Raises:
        InconsistentNumerusError:
            A key was extracted both as plural and as non-plural.
        MalformedInputError:
            A new message has a location without a file path.

    """
    grouped: collections.OrderedDict[MessageKey, _Occurrences] = (
        collections.OrderedDict()
    )
    for record in extracted:
        if not record.location.file_path and record.key not in existing:
            raise MalformedInputError(record.key)
        occurrences = grouped.get(record.key)
        if occurrences is None:
            grouped[record.key] = _Occurrences(
                [record.location], record.numerus, record.extra_comment
            )
            continue
        if occurrences.numerus != record.numerus:
            raise InconsistentNumerusError(record.key)
        occurrences.locations.append(record.location)
        if record.extra_comment and not occurrences.extra_comment:
            grouped[record.key] = occurrences._replace(
                extra_comment=record.extra_comment
            )
    return grouped


def _revive(entry: MessageEntry, /) -> None:
    entry.status = (
        Status.TRANSLATED if entry.is_complete() else Status.UNFINISHED
    )
    entry.obsolete_passes = 0


def _retire(
    entry: MessageEntry,
    /,
    *,
    options: MergeOptions,
    report: ChangeReport,
) -> bool:
    """Age an unclaimed entry.

    Returns:
        True if the entry is kept, false if it is dropped.

    """
    if not entry.has_translation() or not options.keep_obsolete:
        report.dropped += 1
        logger.debug('Dropping unclaimed message %r', str(entry.key))
        return False
    entry.locations.clear()
    if entry.status.is_live():
        entry.status = Status.OBSOLETE
        entry.obsolete_passes = 1
        report.newly_obsolete += 1
        logger.debug('Message %r is now obsolete', str(entry.key))
    elif entry.status == Status.OBSOLETE:
        entry.obsolete_passes = max(entry.obsolete_passes, 1) + 1
        if entry.obsolete_passes > options.vanish_after:
            entry.status = Status.VANISHED
            report.newly_vanished += 1
            logger.debug('Message %r has vanished', str(entry.key))
    return True


def merge(
    extracted: Iterable[ExtractedMessage],
    existing: Catalog,
    /,
    *,
    plural_rules: plurals.PluralRuleTable = plurals.DEFAULT_TABLE,
    options: MergeOptions | None = None,
) -> tuple[Catalog, ChangeReport]:
    """Merge an extraction pass into an existing catalog.

    Args:
        extracted:
            The extracted messages, in extraction order.  Several
            records may share a key; their locations are concatenated.
        existing:
            The existing catalog.  Not modified.
        plural_rules:
            The plural rule table to consult for the catalog language.
        options:
            Merge settings.  Defaults to [`MergeOptions()`][MergeOptions].

    Returns:
        A tuple of the updated catalog and the change report.  The
        updated catalog lists the extracted messages in extraction
        order, grouped by context, followed within each context by the
        entries kept as obsolete or vanished.  Contexts of the existing
        catalog which were empty, or which carry a comment or
        unrecognized elements, are kept even if no entries remain in
        them; those not already present come last.

    Raises:
        InconsistentNumerusError:
            A key was extracted both as plural and as non-plural.
        MalformedInputError:
            A new message has a location without a file path.
        UnsupportedLanguageError:
            `options.strict_plurals` is set and the plural rule table
            does not know the catalog language.

    """
    if options is None:
        options = MergeOptions()
    grouped = _collect_occurrences(extracted, existing)
    form_count = plural_rules.form_count(
        existing.language, strict=options.strict_plurals
    )
    plurals_known = plural_rules.is_known(existing.language)

    matcher = Matcher(
        existing,
        extracted_keys=grouped.keys(),
        similarity=options.similarity,
        threshold=options.threshold,
        fuzzy=options.fuzzy,
    )
    report = ChangeReport()
    updated = existing.copy_header()
    claimed: set[MessageKey] = set()

    for key, occurrences in grouped.items():
        verdict = matcher.match(
            key, occurrences.locations, occurrences.numerus
        )
        if verdict.kind == MatchKind.EXACT:
            assert verdict.entry is not None  # noqa: S101
            entry = verdict.entry.copy()
            report.exact_matches += 1
            if not entry.status.is_live():
                _revive(entry)
                report.revived += 1
        elif verdict.kind == MatchKind.FUZZY:
            assert verdict.entry is not None  # noqa: S101
            old = verdict.entry
            entry = old.copy(key=key)
            entry.status = Status.UNFINISHED
            entry.obsolete_passes = 0
            entry.old_source_text = old.key.source_text
            entry.old_disambiguation = (
                old.key.disambiguation
                if old.key.disambiguation != key.disambiguation
                else ''
            )
            report.fuzzy_matches.append(
                FuzzyMatch(
                    key.context,
                    old.key.source_text,
                    key.source_text,
                    verdict.score,
                )
            )
        else:
            entry = MessageEntry(
                key,
                translations=[''] * (form_count if occurrences.numerus else 1),
                status=Status.UNFINISHED,
                numerus=occurrences.numerus,
            )
            report.new_entries += 1
        if verdict.entry is not None:
            claimed.add(verdict.entry.key)
        entry.numerus = occurrences.numerus
        entry.locations = list(occurrences.locations)
        if occurrences.extra_comment:
            entry.extra_comment = occurrences.extra_comment
        updated.add(entry)

    for old in existing:
        if old.key in claimed:
            continue
        entry = old.copy()
        if _retire(entry, options=options, report=report):
            updated.add(entry)

    for context in existing.contexts():
        if (
            not existing.entries(context)
            or context in existing.context_comments
            or context in existing.context_extra_elements
        ):
            updated.add_context(context)

    for entry in updated:
        if entry.numerus:
            expected = form_count
        elif len(entry.translations) != 1:
            expected = 1
        else:
            continue
        if entry.resize_translations(expected):
            report.numerus_mismatches.append(entry.key)
            if entry.status.is_live():
                entry.status = Status.UNFINISHED
        if entry.numerus and not plurals_known and entry.status.is_live():
            entry.status = Status.UNFINISHED

    logger.info(
        'Merged %d messages into %r catalog: %d exact, %d fuzzy, %d new, '
        '%d newly obsolete, %d newly vanished',
        report.total,
        existing.language,
        report.exact_matches,
        len(report.fuzzy_matches),
        report.new_entries,
        report.newly_obsolete,
        report.newly_vanished,
    )
    return updated, report
