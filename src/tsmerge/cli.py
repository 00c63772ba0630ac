# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

# ruff: noqa: TRY400

"""Command-line interface for tsmerge."""

from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING, NoReturn

import click

from tsmerge import _internals, _types, catalog, merge, plurals, ts
from tsmerge._internals import cli_helpers, cli_machinery
from tsmerge._internals import cli_messages as _msg

if TYPE_CHECKING:
    from collections.abc import Sequence

    from typing_extensions import Any

__all__ = ('tsmerge',)

PROG_NAME = _internals.PROG_NAME
VERSION = _internals.VERSION

logger = logging.getLogger(PROG_NAME)


@click.group(
    context_settings={'help_option_names': ['-h', '--help']},
    epilog=_msg.TranslatedString(_msg.Label.TSMERGE_EPILOG_01),
    cls=cli_machinery.TopLevelCLIEntryPoint,
    help=(
        _msg.TranslatedString(_msg.Label.TSMERGE_01),
        _msg.TranslatedString(_msg.Label.TSMERGE_02),
    ),
)
@cli_machinery.version_option(cli_machinery.tsmerge_version_option_callback)
@cli_machinery.color_forcing_pseudo_option
@cli_machinery.standard_logging_options
def tsmerge() -> None:
    """Merge extracted source strings into Qt Linguist catalogs.

    This is a [`click`][CLICK]-powered command-line interface function,
    and not intended for programmatic use.  Call with `--help` for full
    documentation of the interface.  (See also
    [`click.testing.CliRunner`][] for controlled, programmatic
    invocation.)

    [CLICK]: https://pypi.org/package/click/

    """


def _fail(ctx: click.Context, message: _msg.TranslatedString, /) -> NoReturn:
    logger.error(message, extra={'color': ctx.color})
    ctx.exit(1)


def _load_user_config(ctx: click.Context, /) -> dict[str, Any]:
    """Load and validate the user configuration, or exit.

    A missing configuration file is an empty configuration.  Unknown
    settings are warned about, and ignored.

    """
    try:
        config = cli_helpers.load_user_config()
    except FileNotFoundError:
        return {}
    except OSError as exc:
        _fail(
            ctx,
            _msg.TranslatedString(
                _msg.ErrMsgTemplate.CANNOT_LOAD_USER_CONFIG,
                error=exc.strerror,
                filename=exc.filename,
            ).maybe_without_filename(),
        )
    except ValueError as exc:
        _fail(
            ctx,
            _msg.TranslatedString(
                _msg.ErrMsgTemplate.CANNOT_LOAD_USER_CONFIG,
                error=str(exc),
                filename=None,
            ).maybe_without_filename(),
        )
    try:
        unknown_keys = cli_helpers.validate_user_config(config)
    except (TypeError, ValueError) as exc:
        _fail(
            ctx,
            _msg.TranslatedString(
                _msg.ErrMsgTemplate.INVALID_USER_CONFIG,
                error=exc,
            ),
        )
    for key in unknown_keys:
        logger.warning(
            _msg.TranslatedString(
                _msg.WarnMsgTemplate.UNKNOWN_CONFIG_SETTING, key=key
            ),
            extra={'color': ctx.color},
        )
    logger.debug(
        _msg.TranslatedString(
            _msg.DebugMsgTemplate.LOADED_USER_CONFIG,
            filename=os.fspath(cli_helpers.config_filename()),
        ),
    )
    return config


def _load_extraction(
    ctx: click.Context, path: str, /
) -> list[_types.ExtractedMessage]:
    """Load the extraction records from `path` (or stdin), or exit."""
    try:
        if path == '-':
            return cli_helpers.load_extraction(click.get_text_stream('stdin'))
        with open(path, encoding='utf-8') as infile:
            return cli_helpers.load_extraction(infile)
    except json.JSONDecodeError as exc:
        _fail(
            ctx,
            _msg.TranslatedString(
                _msg.ErrMsgTemplate.CANNOT_DECODE_EXTRACTION,
                error=exc.msg,
            ),
        )
    except OSError as exc:
        _fail(
            ctx,
            _msg.TranslatedString(
                _msg.ErrMsgTemplate.CANNOT_LOAD_EXTRACTION,
                error=exc.strerror,
                filename=exc.filename,
            ).maybe_without_filename(),
        )
    except (TypeError, ValueError) as exc:
        _fail(
            ctx,
            _msg.TranslatedString(
                _msg.ErrMsgTemplate.INVALID_EXTRACTION,
                error=exc,
            ),
        )


def _open_catalog(
    ctx: click.Context,
    path: str,
    /,
    *,
    language: str | None,
    source_language: str | None,
) -> catalog.Catalog | None:
    """Load the catalog at `path`, or start a new one if it is missing.

    Returns:
        The catalog, or `None` if it cannot be loaded.  The error has
        then already been logged.

    """
    try:
        existing = ts.load(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.error(
            _msg.TranslatedString(
                _msg.ErrMsgTemplate.CANNOT_LOAD_CATALOG,
                error=exc.strerror,
                filename=exc.filename,
            ).maybe_without_filename(),
            extra={'color': ctx.color},
        )
        return None
    except _types.ParseError as exc:
        logger.error(
            _msg.TranslatedString(
                _msg.ErrMsgTemplate.CANNOT_PARSE_CATALOG, error=exc
            ),
            extra={'color': ctx.color},
        )
        return None
    else:
        logger.info(
            _msg.TranslatedString(
                _msg.InfoMsgTemplate.UPDATING_CATALOG, path=path
            ),
            extra={'color': ctx.color},
        )
        return existing
    if not language:
        language = cli_helpers.guess_language(path)
        if language:
            logger.debug(
                _msg.TranslatedString(
                    _msg.DebugMsgTemplate.LANGUAGE_GUESSED,
                    language=language,
                    path=path,
                ),
            )
    if not language:
        logger.error(
            _msg.TranslatedString(
                _msg.ErrMsgTemplate.CANNOT_GUESS_LANGUAGE,
                path=path,
                option='--language',
            ),
            extra={'color': ctx.color},
        )
        return None
    logger.info(
        _msg.TranslatedString(
            _msg.InfoMsgTemplate.CREATING_CATALOG,
            path=path,
            language=language,
        ),
        extra={'color': ctx.color},
    )
    return catalog.Catalog(language, source_language=source_language or '')


def _log_summary(
    ctx: click.Context,
    updated: catalog.Catalog,
    report: merge.ChangeReport,
    /,
    *,
    options: merge.MergeOptions,
    plural_rules: plurals.PluralRuleTable,
) -> None:
    def info(template: _msg.InfoMsgTemplate, **kwargs: Any) -> None:  # noqa: ANN401
        logger.info(
            _msg.TranslatedString(template, **kwargs),
            extra={'color': ctx.color},
        )

    info(
        _msg.InfoMsgTemplate.FOUND_SOURCE_TEXTS,
        count=report.total,
        new=report.new_entries,
        existing=report.exact_matches + len(report.fuzzy_matches),
    )
    if report.fuzzy_matches:
        info(
            _msg.InfoMsgTemplate.SAME_TEXT_HEURISTIC,
            count=len(report.fuzzy_matches),
        )
    stats = updated.statistics()
    if options.keep_obsolete and stats.obsolete + stats.vanished:
        info(
            _msg.InfoMsgTemplate.KEPT_OBSOLETE,
            count=stats.obsolete + stats.vanished,
        )
    if report.newly_vanished:
        info(
            _msg.InfoMsgTemplate.VANISHED_ENTRIES,
            count=report.newly_vanished,
        )
    if report.dropped:
        info(_msg.InfoMsgTemplate.REMOVED_OBSOLETE, count=report.dropped)
    if report.numerus_mismatches:
        logger.warning(
            _msg.TranslatedString(
                _msg.WarnMsgTemplate.NUMERUS_FORMS_ADJUSTED,
                count=len(report.numerus_mismatches),
                forms=plural_rules.form_count(updated.language),
            ),
            extra={'color': ctx.color},
        )


@tsmerge.command(
    'merge',
    context_settings={'help_option_names': ['-h', '--help']},
    cls=cli_machinery.CommandWithHelpGroups,
    help=(
        _msg.TranslatedString(_msg.Label.TSMERGE_MERGE_01),
        _msg.TranslatedString(
            _msg.Label.TSMERGE_MERGE_02,
            extracted_metavar=_msg.TranslatedString(
                _msg.Label.METAVAR_EXTRACTED
            ),
            catalog_metavar=_msg.TranslatedString(_msg.Label.METAVAR_CATALOG),
        ),
        _msg.TranslatedString(_msg.Label.TSMERGE_MERGE_03),
    ),
)
@click.option(
    '--threshold',
    metavar=_msg.TranslatedString(_msg.Label.METAVAR_SCORE),
    callback=cli_machinery.validate_threshold,
    help=_msg.TranslatedString(
        _msg.Label.THRESHOLD_HELP_TEXT,
        metavar=_msg.TranslatedString(_msg.Label.METAVAR_SCORE),
    ),
    cls=cli_machinery.MergeBehaviorOption,
)
@click.option(
    '--vanish-after',
    metavar=_msg.TranslatedString(_msg.Label.METAVAR_PASSES),
    callback=cli_machinery.validate_pass_count,
    help=_msg.TranslatedString(
        _msg.Label.VANISH_AFTER_HELP_TEXT,
        metavar=_msg.TranslatedString(_msg.Label.METAVAR_PASSES),
    ),
    cls=cli_machinery.MergeBehaviorOption,
)
@click.option(
    '--strict-plurals',
    is_flag=True,
    help=_msg.TranslatedString(_msg.Label.STRICT_PLURALS_HELP_TEXT),
    cls=cli_machinery.MergeBehaviorOption,
)
@click.option(
    '--no-obsolete',
    is_flag=True,
    help=_msg.TranslatedString(_msg.Label.NO_OBSOLETE_HELP_TEXT),
    cls=cli_machinery.MergeBehaviorOption,
)
@click.option(
    '--no-fuzzy',
    is_flag=True,
    help=_msg.TranslatedString(_msg.Label.NO_FUZZY_HELP_TEXT),
    cls=cli_machinery.MergeBehaviorOption,
)
@click.option(
    '--language',
    metavar=_msg.TranslatedString(_msg.Label.METAVAR_LANGUAGE),
    help=_msg.TranslatedString(
        _msg.Label.LANGUAGE_HELP_TEXT,
        metavar=_msg.TranslatedString(_msg.Label.METAVAR_LANGUAGE),
    ),
    cls=cli_machinery.NewCatalogOption,
)
@click.option(
    '--source-language',
    metavar=_msg.TranslatedString(_msg.Label.METAVAR_LANGUAGE),
    help=_msg.TranslatedString(
        _msg.Label.SOURCE_LANGUAGE_HELP_TEXT,
        metavar=_msg.TranslatedString(_msg.Label.METAVAR_LANGUAGE),
    ),
    cls=cli_machinery.NewCatalogOption,
)
@click.option(
    '-o',
    '--output',
    metavar=_msg.TranslatedString(_msg.Label.METAVAR_PATH),
    type=click.Path(dir_okay=False),
    help=_msg.TranslatedString(
        _msg.Label.OUTPUT_HELP_TEXT,
        metavar=_msg.TranslatedString(_msg.Label.METAVAR_PATH),
    ),
    cls=cli_machinery.OutputOption,
)
@click.option(
    '--dry-run',
    is_flag=True,
    help=_msg.TranslatedString(_msg.Label.DRY_RUN_HELP_TEXT),
    cls=cli_machinery.OutputOption,
)
@click.option(
    '--report-json',
    is_flag=True,
    help=_msg.TranslatedString(_msg.Label.REPORT_JSON_HELP_TEXT),
    cls=cli_machinery.OutputOption,
)
@cli_machinery.version_option(cli_machinery.tsmerge_version_option_callback)
@cli_machinery.color_forcing_pseudo_option
@cli_machinery.standard_logging_options
@click.argument(
    'extracted',
    metavar=_msg.TranslatedString(_msg.Label.METAVAR_EXTRACTED),
    required=True,
)
@click.argument(
    'catalogs',
    metavar=_msg.TranslatedString(_msg.Label.METAVAR_CATALOG),
    nargs=-1,
    required=True,
    type=click.Path(dir_okay=False),
)
@click.pass_context
def tsmerge_merge(  # noqa: PLR0913
    ctx: click.Context,
    /,
    *,
    extracted: str,
    catalogs: Sequence[str],
    threshold: float | None = None,
    vanish_after: int | None = None,
    strict_plurals: bool = False,
    no_obsolete: bool = False,
    no_fuzzy: bool = False,
    language: str | None = None,
    source_language: str | None = None,
    output: str | None = None,
    dry_run: bool = False,
    report_json: bool = False,
) -> None:
    """Merge extracted source strings into translation catalogs.

    This is a [`click`][CLICK]-powered command-line interface function,
    and not intended for programmatic use.  Call with `--help` for full
    documentation of the interface.  (See also
    [`click.testing.CliRunner`][] for controlled, programmatic
    invocation.)

    [CLICK]: https://pypi.org/package/click/

    """
    if output is not None and len(catalogs) != 1:
        _fail(
            ctx,
            _msg.TranslatedString(
                _msg.ErrMsgTemplate.OUTPUT_NEEDS_SINGLE_CATALOG,
                option='--output',
            ),
        )
    config = _load_user_config(ctx)
    options = cli_helpers.merge_options_from_config(
        config,
        threshold=threshold,
        vanish_after=vanish_after,
        strict_plurals=True if strict_plurals else None,
        keep_obsolete=False if no_obsolete else None,
        fuzzy=False if no_fuzzy else None,
    )
    plural_rules = cli_helpers.plural_rules_from_config(config)
    extracted_messages = _load_extraction(ctx, extracted)
    has_plurals = any(m.numerus for m in extracted_messages)

    reports: list[dict[str, Any]] = []
    failed = False
    for path in catalogs:
        existing = _open_catalog(
            ctx, path, language=language, source_language=source_language
        )
        if existing is None:
            failed = True
            continue
        if (
            has_plurals
            and not options.strict_plurals
            and not plural_rules.is_known(existing.language)
        ):
            logger.warning(
                _msg.TranslatedString(
                    _msg.WarnMsgTemplate.UNKNOWN_PLURAL_RULES,
                    language=existing.language,
                ),
                extra={'color': ctx.color},
            )
        try:
            updated, report = merge.merge(
                extracted_messages,
                existing,
                plural_rules=plural_rules,
                options=options,
            )
        except _types.CatalogError as exc:
            logger.error(
                _msg.TranslatedString(
                    _msg.ErrMsgTemplate.CANNOT_MERGE_CATALOG,
                    path=path,
                    error=exc,
                ),
                extra={'color': ctx.color},
            )
            failed = True
            continue
        _log_summary(
            ctx, updated, report, options=options, plural_rules=plural_rules
        )
        target = output if output is not None else path
        if dry_run:
            logger.debug(
                _msg.TranslatedString(
                    _msg.DebugMsgTemplate.NOT_WRITING_DRY_RUN, path=target
                ),
            )
        else:
            try:
                ts.save(updated, target, plural_rules=plural_rules)
            except OSError as exc:
                logger.error(
                    _msg.TranslatedString(
                        _msg.ErrMsgTemplate.CANNOT_WRITE_CATALOG,
                        error=exc.strerror,
                        filename=exc.filename,
                    ).maybe_without_filename(),
                    extra={'color': ctx.color},
                )
                failed = True
                continue
        reports.append({'catalog': path, **report.as_dict()})
    if report_json:
        click.echo(
            json.dumps(reports, ensure_ascii=False, indent=2),
            color=ctx.color,
        )
    if failed:
        ctx.exit(1)


@tsmerge.command(
    'stats',
    context_settings={'help_option_names': ['-h', '--help']},
    cls=cli_machinery.CommandWithHelpGroups,
    help=(
        _msg.TranslatedString(_msg.Label.TSMERGE_STATS_01),
        _msg.TranslatedString(
            _msg.Label.TSMERGE_STATS_02,
            catalog_metavar=_msg.TranslatedString(_msg.Label.METAVAR_CATALOG),
        ),
    ),
)
@cli_machinery.version_option(cli_machinery.tsmerge_version_option_callback)
@cli_machinery.color_forcing_pseudo_option
@cli_machinery.standard_logging_options
@click.argument(
    'catalogs',
    metavar=_msg.TranslatedString(_msg.Label.METAVAR_CATALOG),
    nargs=-1,
    required=True,
    type=click.Path(dir_okay=False),
)
@click.pass_context
def tsmerge_stats(
    ctx: click.Context,
    /,
    *,
    catalogs: Sequence[str],
) -> None:
    """Show the translation progress of translation catalogs.

    This is a [`click`][CLICK]-powered command-line interface function,
    and not intended for programmatic use.  Call with `--help` for full
    documentation of the interface.

    [CLICK]: https://pypi.org/package/click/

    """
    failed = False
    for path in catalogs:
        try:
            loaded = ts.load(path)
        except OSError as exc:
            logger.error(
                _msg.TranslatedString(
                    _msg.ErrMsgTemplate.CANNOT_LOAD_CATALOG,
                    error=exc.strerror,
                    filename=exc.filename,
                ).maybe_without_filename(),
                extra={'color': ctx.color},
            )
            failed = True
            continue
        except _types.ParseError as exc:
            logger.error(
                _msg.TranslatedString(
                    _msg.ErrMsgTemplate.CANNOT_PARSE_CATALOG, error=exc
                ),
                extra={'color': ctx.color},
            )
            failed = True
            continue
        click.echo(
            cli_helpers.format_stats_line(path, loaded.statistics()),
            color=ctx.color,
        )
    if failed:
        ctx.exit(1)


if __name__ == '__main__':
    tsmerge()
