# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib


"""Command-line machinery for tsmerge.

Warning:
    Non-public module (implementation detail), provided for didactical and
    educational purposes only. Subject to change without notice, including
    removal.

"""

from __future__ import annotations

import contextlib
import importlib.metadata
import inspect
import logging
from typing import TYPE_CHECKING, Callable, TypeVar

import click
from typing_extensions import Any, ParamSpec

from tsmerge import _internals, plurals
from tsmerge._internals import cli_messages as _msg

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

PROG_NAME = _internals.PROG_NAME
VERSION = _internals.VERSION
VERSION_OUTPUT_WRAPPING_WIDTH = 72
SUBCOMMANDS = ('merge', 'stats')

# Error messages
NOT_A_NUMBER = 'not a number'
NOT_A_SCORE = 'not a number between 0 and 1'
NOT_AN_INTEGER = 'not an integer'
NOT_A_NONNEGATIVE_INTEGER = 'not a non-negative integer'


# Logging
# =======


class ClickEchoStderrHandler(logging.Handler):
    """A [`logging.Handler`][] writing to standard error via [`click.echo`][].

    Honors a `color` attribute on the log record, as passed via the
    `extra` argument of the logging calls.

    """

    def emit(self, record: logging.LogRecord) -> None:
        click.echo(
            self.format(record),
            err=True,
            color=getattr(record, 'color', None),
        )


class TsmergeFormatter(logging.Formatter):
    """Format log records as console diagnostics of the `tsmerge` tool.

    Every line of the message is prefixed with `"tsmerge: "`, followed
    by a level label for debug messages (`"Debug: "`) and for warnings
    (`"Warning: "`, highlighted and translated).  Informational and
    error messages carry no label.

    """

    def __init__(self, *, prog_name: str = PROG_NAME) -> None:
        super().__init__()
        self.prog_name = prog_name

    def _label(self, levelno: int, /) -> str:
        if levelno == logging.DEBUG:
            return 'Debug: '
        if levelno == logging.WARNING:
            label = _msg.TranslatedString(_msg.Label.WARNING_LABEL)
            return f'{click.style(str(label), bold=True)}: '
        return ''

    def format(self, record: logging.LogRecord) -> str:
        prefix = f'{self.prog_name}: {self._label(record.levelno)}'
        text = ''.join(
            prefix + line
            for line in record.getMessage().splitlines(True)  # noqa: FBT003
        )
        if record.exc_info:
            text += '\n' + self.formatException(record.exc_info)
        return text


class StandardCLILogging:
    """The shared console handlers of the command-line interface.

    The package handler only passes records from the `tsmerge` logger
    hierarchy, the warnings handler only those from `py.warnings`.
    Both start out at level `WARNING`; see [`adjust_logging_level`][].

    """

    package_name = PROG_NAME
    formatter = TsmergeFormatter()
    cli_handler = ClickEchoStderrHandler()
    cli_handler.addFilter(logging.Filter(name=package_name))
    cli_handler.setFormatter(formatter)
    cli_handler.setLevel(logging.WARNING)
    warnings_handler = ClickEchoStderrHandler()
    warnings_handler.addFilter(logging.Filter(name='py.warnings'))
    warnings_handler.setFormatter(formatter)
    warnings_handler.setLevel(logging.WARNING)

    @classmethod
    @contextlib.contextmanager
    def ensure_standard_logging(cls) -> Iterator[None]:
        """Attach the console handlers for the duration of the context.

        Python warnings are diverted to the logging system meanwhile.
        Handlers that are already attached are left alone, so the
        context may be nested.

        """
        attached: list[tuple[logging.Logger, logging.Handler]] = []
        for name, handler in (
            (cls.package_name, cls.cli_handler),
            ('py.warnings', cls.warnings_handler),
        ):
            logger = logging.getLogger(name)
            if handler not in logger.handlers:
                logger.addHandler(handler)
                attached.append((logger, handler))
        capturing = bool(attached)
        if capturing:
            logging.captureWarnings(True)  # noqa: FBT003
        try:
            yield
        finally:
            if capturing:
                logging.captureWarnings(False)  # noqa: FBT003
            for logger, handler in attached:
                logger.removeHandler(handler)


P = ParamSpec('P')
R = TypeVar('R')


def adjust_logging_level(
    ctx: click.Context,
    /,
    param: click.Parameter | None = None,
    value: int | None = None,
) -> None:
    """Set the level of log records emitted to standard error.

    Shared callback of the `--debug`, `--verbose` and `--quiet` flags,
    so it may run several times per invocation.

    """
    if param is None or value is None or ctx.resilient_parsing:
        return
    StandardCLILogging.cli_handler.setLevel(value)
    logging.getLogger(StandardCLILogging.package_name).setLevel(value)


# Option parsing and grouping
# ===========================


class OptionGroupOption(click.Option):
    """A [`click.Option`][] belonging to a named section of the help text.

    The help text may be any object that stringifies to the help text,
    such as a translated string.

    Attributes:
        option_group_name:
            The heading of the help section.
        epilog:
            Text printed after the options of the help section.

    """

    option_group_name: object = ''
    """"""
    epilog: object = ''
    """"""

    def __init__(self, *args: Any, **kwargs: Any) -> None:  # noqa: ANN401
        if self.__class__ == __class__:  # type: ignore[name-defined]
            raise NotImplementedError
        # click.Option insists on string help texts; set it afterwards.
        unset = object()
        help = kwargs.pop('help', unset)  # noqa: A001
        super().__init__(*args, **kwargs)
        if help is not unset:  # pragma: no branch
            self.help = help


class StandardOption(OptionGroupOption):
    pass


class MergeBehaviorOption(OptionGroupOption):
    option_group_name = _msg.TranslatedString(_msg.Label.MERGE_BEHAVIOR_LABEL)
    epilog = _msg.TranslatedString(_msg.Label.MERGE_BEHAVIOR_EPILOG)


class NewCatalogOption(OptionGroupOption):
    option_group_name = _msg.TranslatedString(_msg.Label.NEW_CATALOG_LABEL)


class OutputOption(OptionGroupOption):
    option_group_name = _msg.TranslatedString(_msg.Label.OUTPUT_LABEL)


class LoggingOption(OptionGroupOption):
    option_group_name = _msg.TranslatedString(_msg.Label.LOGGING_LABEL)


def _text(text: object, /) -> str:
    """Render a help text object; sequences are separate paragraphs."""
    if isinstance(text, (list, tuple)):
        return '\n\n'.join(str(x) for x in text)
    return str(text)


class CommandWithHelpGroups(click.Command):
    """A [`click.Command`][] listing its options in help sections.

    Options derived from [`OptionGroupOption`][] are listed under their
    group heading, followed by the group epilog; all other options are
    listed under "Options" (or "Other options").  Help texts, epilogs
    and metavars may be arbitrary objects that stringify to text,
    which is how translated help texts are implemented.

    """

    def collect_usage_pieces(self, ctx: click.Context) -> list[str]:
        pieces = [str(self.options_metavar)] if self.options_metavar else []
        for param in self.get_params(ctx):
            pieces.extend(str(x) for x in param.get_usage_pieces(ctx))
        return pieces

    def get_help_option(self, ctx: click.Context) -> click.Option | None:
        names = self.get_help_option_names(ctx)
        if not names or not self.add_help_option:  # pragma: no cover
            return None

        def show_help(
            ctx: click.Context,
            param: click.Parameter,
            value: bool,  # noqa: FBT001
        ) -> None:
            del param
            if value and not ctx.resilient_parsing:
                click.echo(ctx.get_help(), color=ctx.color)
                ctx.exit()

        return StandardOption(
            names,
            is_flag=True,
            is_eager=True,
            expose_value=False,
            callback=show_help,
            help=_msg.TranslatedString(_msg.Label.HELP_OPTION_HELP_TEXT),
        )

    def get_short_help_str(self, limit: int = 45) -> str:
        if self.short_help:  # pragma: no cover
            return inspect.cleandoc(_text(self.short_help)).strip()
        if not self.help:  # pragma: no cover
            return ''
        return click.utils.make_default_short_help(
            _text(self.help), limit
        ).strip()

    @staticmethod
    def _write_paragraph(formatter: click.HelpFormatter, text: str) -> None:
        text = inspect.cleandoc(text)
        if text:
            formatter.write_paragraph()
            with formatter.indentation():
                formatter.write_text(text)

    def format_help_text(
        self,
        ctx: click.Context,
        formatter: click.HelpFormatter,
    ) -> None:
        del ctx
        if self.help is not None:  # pragma: no branch
            self._write_paragraph(
                formatter, _text(self.help).partition('\f')[0]
            )

    def format_options(
        self,
        ctx: click.Context,
        formatter: click.HelpFormatter,
    ) -> None:
        sections: dict[str, list[tuple[str, str]]] = {}
        epilogs: dict[str, str] = {}
        ungrouped: list[tuple[str, str]] = []
        params = list(self.params)
        help_option = self.get_help_option(ctx)
        if help_option is not None and help_option not in params:
            params.append(help_option)
        for param in params:
            record = param.get_help_record(ctx)
            if record is None:
                continue
            record = (record[0], _text(record[1]))
            if isinstance(param, OptionGroupOption):
                heading = _text(param.option_group_name)
                sections.setdefault(heading, []).append(record)
                epilogs.setdefault(heading, _text(param.epilog))
            else:  # pragma: no cover
                ungrouped.append(record)
        if ungrouped:  # pragma: no cover
            label = (
                _msg.Label.OTHER_OPTIONS_LABEL
                if sections
                else _msg.Label.OPTIONS_LABEL
            )
            sections[_text(_msg.TranslatedString(label))] = ungrouped
        for heading, records in sections.items():
            with formatter.section(heading):
                formatter.write_dl(records)
            self._write_paragraph(formatter, epilogs.get(heading, ''))
        self.format_commands(ctx, formatter)

    def format_commands(
        self,
        ctx: click.Context,
        formatter: click.HelpFormatter,
    ) -> None:
        """List the subcommands, if this is a [`click.Group`][]."""
        if not isinstance(self, click.Group):
            return
        commands = [
            (name, cmd)
            for name in self.list_commands(ctx)
            if (cmd := self.get_command(ctx, name)) is not None
            and not cmd.hidden
        ]
        if not commands:  # pragma: no cover
            return
        limit = formatter.width - 6 - max(len(name) for name, _ in commands)
        label = _text(_msg.TranslatedString(_msg.Label.COMMANDS_LABEL))
        with formatter.section(label):
            formatter.write_dl([
                (name, cmd.get_short_help_str(limit)) for name, cmd in commands
            ])

    def format_epilog(
        self,
        ctx: click.Context,
        formatter: click.HelpFormatter,
    ) -> None:
        del ctx
        if self.epilog:  # pragma: no branch
            self._write_paragraph(formatter, _text(self.epilog))


class TopLevelCLIEntryPoint(CommandWithHelpGroups, click.Group):
    """The group class for the top-level `tsmerge` command.

    Calling the group as a function attaches the console log handlers
    first; see [`StandardCLILogging`][].  Calling `.main` directly (as
    [`click.testing.CliRunner`][] does) skips this.

    """

    def __call__(  # pragma: no cover
        self,
        *args: Any,  # noqa: ANN401
        **kwargs: Any,  # noqa: ANN401
    ) -> Any:  # noqa: ANN401
        """"""  # noqa: D419
        with StandardCLILogging.ensure_standard_logging():
            return self.main(*args, **kwargs)


# Actual option groups and callbacks used by tsmerge
# ==================================================


def color_forcing_callback(
    ctx: click.Context,
    param: click.Parameter,
    value: Any,  # noqa: ANN401
) -> None:
    """Disable automatic color (and text highlighting)."""
    del param, value
    ctx.color = False


def validate_threshold(
    ctx: click.Context,
    param: click.Parameter,
    value: Any,  # noqa: ANN401
) -> float | None:
    """Check that the similarity threshold is a number between 0 and 1.

    Raises:
        click.BadParameter: The parameter value is invalid.

    """
    del ctx, param
    if value is None:
        return value
    try:
        score = float(value)
    except ValueError as exc:
        raise click.BadParameter(NOT_A_NUMBER) from exc
    if not 0.0 <= score <= 1.0:
        raise click.BadParameter(NOT_A_SCORE)
    return score


def validate_pass_count(
    ctx: click.Context,
    param: click.Parameter,
    value: Any,  # noqa: ANN401
) -> int | None:
    """Check that the pass count is a non-negative integer.

    Raises:
        click.BadParameter: The parameter value is invalid.

    """
    del ctx, param
    if value is None or isinstance(value, int):
        count = value
    else:
        try:
            count = int(value, 10)
        except ValueError as exc:
            raise click.BadParameter(NOT_AN_INTEGER) from exc
    if count is not None and count < 0:
        raise click.BadParameter(NOT_A_NONNEGATIVE_INTEGER)
    return count


def wrap_item_list(
    label: str, items: Sequence[str], /, *, width: int
) -> str:
    """Format `items` as a comma-separated sentence after `label`.

    Lines that would exceed `width` are continued on an indented line.

    Examples:
        >>> wrap_item_list('Colors:', ['red', 'green'], width=72)
        'Colors: red, green.'
        >>> print(wrap_item_list('Colors:', ['red', 'green'], width=12))
        Colors: red,
            green.

    """
    pieces = [label]
    length = len(label)
    for i, item in enumerate(items, start=1):
        word = item + ('.' if i == len(items) else ',')
        if length + 1 + len(word) <= width:
            pieces.append(' ' + word)
            length += 1 + len(word)
        else:
            pieces.append('\n    ' + word)
            length = 4 + len(word)
    return ''.join(pieces)


def print_version_info_types(
    version_info_types: Mapping[_msg.Label, Sequence[str]],
    /,
    *,
    ctx: click.Context,
) -> None:
    for message_label, items in version_info_types.items():
        if not items:  # pragma: no cover
            continue
        label = str(_msg.TranslatedString(message_label))
        text = wrap_item_list(
            label, items, width=VERSION_OUTPUT_WRAPPING_WIDTH
        )
        click.echo(
            click.style(label, bold=True) + text.removeprefix(label),
            color=ctx.color,
        )


def tsmerge_version_option_callback(
    ctx: click.Context,
    param: click.Parameter,
    value: bool,  # noqa: FBT001
) -> None:
    del param
    if not value or ctx.resilient_parsing:
        return
    click.echo(
        ' '.join([click.style(PROG_NAME, bold=True), VERSION]),
        color=ctx.color,
    )
    for dependency in ('click', 'rapidfuzz'):
        click.echo(
            str(
                _msg.TranslatedString(
                    _msg.Label.VERSION_INFO_MAJOR_LIBRARY_TEXT,
                    dependency_name_and_version=(
                        f'{dependency} '
                        f'{importlib.metadata.version(dependency)}'
                    ),
                )
            ),
            color=ctx.color,
        )
    click.echo()
    print_version_info_types(
        {
            _msg.Label.SUPPORTED_SUBCOMMANDS: SUBCOMMANDS,
            _msg.Label.SUPPORTED_PLURAL_FAMILIES: sorted(
                plurals.PLURAL_FAMILIES
            ),
        },
        ctx=ctx,
    )
    ctx.exit()


def version_option(
    version_option_callback: Callable[
        [click.Context, click.Parameter, Any], Any
    ],
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    return click.option(
        '--version',
        is_flag=True,
        is_eager=True,
        expose_value=False,
        callback=version_option_callback,
        cls=StandardOption,
        help=_msg.TranslatedString(_msg.Label.VERSION_OPTION_HELP_TEXT),
    )


color_forcing_pseudo_option = click.option(
    '--_pseudo-option-color-forcing',
    '_color_forcing',
    is_flag=True,
    is_eager=True,
    expose_value=False,
    hidden=True,
    callback=color_forcing_callback,
    help='(pseudo-option)',
)


def _logging_flag(
    *names: str, level: int, help_label: _msg.Label
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    return click.option(
        *names,
        'logging_level',
        is_flag=True,
        flag_value=level,
        expose_value=False,
        callback=adjust_logging_level,
        help=_msg.TranslatedString(help_label),
        cls=LoggingOption,
    )


debug_option = _logging_flag(
    '--debug',
    level=logging.DEBUG,
    help_label=_msg.Label.DEBUG_OPTION_HELP_TEXT,
)
verbose_option = _logging_flag(
    '-v',
    '--verbose',
    level=logging.INFO,
    help_label=_msg.Label.VERBOSE_OPTION_HELP_TEXT,
)
quiet_option = _logging_flag(
    '-q',
    '--quiet',
    level=logging.ERROR,
    help_label=_msg.Label.QUIET_OPTION_HELP_TEXT,
)


def standard_logging_options(f: Callable[P, R]) -> Callable[P, R]:
    """Add the `--debug`, `-v`/`--verbose` and `-q`/`--quiet` options."""
    return debug_option(verbose_option(quiet_option(f)))
