# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

from __future__ import annotations

import contextlib
import json
import os
import sys
from typing import TYPE_CHECKING

import hypothesis
from hypothesis import strategies
from typing_extensions import NamedTuple, Self

from tsmerge import _types, cli
from tsmerge._internals import cli_helpers

__all__ = ()

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    import click.testing
    import pytest
    from typing_extensions import Any


# Sample documents
# ================


SAMPLE_TS_DOCUMENT = """\
<?xml version="1.0" encoding="utf-8"?>
<!DOCTYPE TS>
<TS version="2.1" language="pt">
<context>
    <name>MainWindow</name>
    <message>
        <location filename="../mainwindow.cpp" line="95"/>
        <source>Save</source>
        <translation>Guardar</translation>
    </message>
    <message>
        <location filename="../mainwindow.cpp" line="102"/>
        <location filename="../mainwindow.cpp" line="230"/>
        <source>Open %1</source>
        <comment>menu entry</comment>
        <translation type="unfinished">Abrir %1</translation>
    </message>
    <message numerus="yes">
        <location filename="../mainwindow.cpp" line="310"/>
        <source>%n file(s) copied</source>
        <extracomment>status bar</extracomment>
        <translation>
            <numerusform>%n ficheiro copiado</numerusform>
            <numerusform>%n ficheiros copiados</numerusform>
        </translation>
    </message>
    <message>
        <source>Quit</source>
        <translatorcomment>keep it short</translatorcomment>
        <translation type="obsolete">Sair</translation>
    </message>
</context>
<context>
    <name>PropertiesDialog</name>
    <message>
        <location filename="../properties.cpp" line="12"/>
        <source>Font</source>
        <translation type="unfinished"></translation>
    </message>
    <message>
        <source>Shell</source>
        <translation type="vanished">Consola</translation>
        <extra-tsmerge-obsolete-passes>3</extra-tsmerge-obsolete-passes>
    </message>
</context>
</TS>
"""
"""A TS document in canonical form, covering every status."""

SAMPLE_TS_DOCUMENT_WITH_EXTRAS = """\
<?xml version="1.0" encoding="utf-8"?>
<!DOCTYPE TS>
<TS version="2.1" language="ar" sourcelanguage="en" x-tool="future">
<context>
    <name>Dialog</name>
    <comment>the main dialog</comment>
    <message id="dlg.ok" x-flag="1">
        <location filename="dialog.cpp" line="7"/>
        <source>OK</source>
        <translation x-variants="2">حسنا</translation>
        <x-note lang="en">reviewed</x-note>
    </message>
    <x-context-data>kept</x-context-data>
</context>
<x-dependencies><dependency catalog="qtbase_ar" /></x-dependencies>
</TS>
"""
"""A TS document in canonical form, with unknown attributes and elements."""


def extraction_record(  # noqa: PLR0913
    context: str,
    source: str,
    filename: str = 'main.cpp',
    line: int | None = None,
    *,
    comment: str = '',
    numerus: bool = False,
    extracomment: str = '',
) -> dict[str, Any]:
    """Return an extraction record, as found in extraction JSON files."""
    record: dict[str, Any] = {
        'context': context,
        'source': source,
        'location': {'filename': filename},
    }
    if line is not None:
        record['location']['line'] = line
    if comment:
        record['comment'] = comment
    if numerus:
        record['numerus'] = True
    if extracomment:
        record['extracomment'] = extracomment
    return record


def extracted(
    records: Sequence[dict[str, Any]], /
) -> list[_types.ExtractedMessage]:
    """Convert extraction records to extracted messages."""
    return _types.extracted_messages_from_json(list(records))


def write_extraction(
    filename: str, records: Sequence[dict[str, Any]], /
) -> None:
    with open(filename, 'w', encoding='UTF-8') as outfile:
        json.dump(list(records), outfile)


# Hypothesis strategies
# =====================


contexts = strategies.sampled_from(['MainWindow', 'Dialog', 'Settings'])
"""A small pool of context names, so that keys collide often."""

source_texts = strategies.text(
    strategies.characters(
        codec='utf-8',
        exclude_categories=('Cs', 'Cc', 'Cn', 'Co'),
    ),
    min_size=1,
    max_size=24,
)
"""Source texts without control characters."""

locations = strategies.builds(
    _types.Location,
    strategies.sampled_from(['a.cpp', 'b.cpp', 'ui/c.ui']),
    strategies.one_of(
        strategies.none(), strategies.integers(min_value=1, max_value=500)
    ),
)


@strategies.composite
def extraction_passes(
    draw: strategies.DrawFn,
    *,
    max_size: int = 12,
) -> list[_types.ExtractedMessage]:
    """Draw an extraction pass with consistent numerus flags per key."""
    keys = draw(
        strategies.lists(
            strategies.builds(
                _types.MessageKey,
                contexts,
                source_texts,
                strategies.sampled_from(['', 'verb', 'noun']),
            ),
            min_size=1,
            max_size=max_size,
            unique=True,
        )
    )
    numerus = {key: draw(strategies.booleans()) for key in keys}
    chosen = draw(
        strategies.lists(
            strategies.sampled_from(keys), min_size=1, max_size=2 * max_size
        )
    )
    return [
        _types.ExtractedMessage(key, draw(locations), numerus[key])
        for key in chosen
    ]


hypothesis_settings_coverage_compatible = (
    hypothesis.settings(
        # Running under coverage with the Python tracer increases
        # running times 40-fold, on my machines.  Sadly, not every
        # Python version offers the C tracer, so sometimes the Python
        # tracer is used anyway.
        deadline=(
            40 * deadline
            if (deadline := hypothesis.settings().deadline) is not None
            else None
        ),
        suppress_health_check=(hypothesis.HealthCheck.too_slow,),
    )
    if sys.gettrace() is not None
    else hypothesis.settings()
)


# CLI machinery
# =============


@contextlib.contextmanager
def isolated_config(
    monkeypatch: pytest.MonkeyPatch,
    runner: click.testing.CliRunner,
    config: Any = None,  # noqa: ANN401
) -> Iterator[None]:
    """Run within an isolated filesystem, with an isolated user config.

    If `config` is given, it is written as the user configuration
    file, verbatim if it is a string, else as TOML-ish key/value tables.

    """
    prog_name = cli.PROG_NAME
    env_name = prog_name.replace(' ', '_').upper() + '_PATH'
    with runner.isolated_filesystem():
        monkeypatch.setenv('HOME', os.getcwd())
        monkeypatch.setenv('USERPROFILE', os.getcwd())
        monkeypatch.delenv(env_name, raising=False)
        config_filename = cli_helpers.config_filename()
        os.makedirs(config_filename.parent, exist_ok=True)
        if config is not None:
            with config_filename.open('w', encoding='UTF-8') as outfile:
                outfile.write(
                    config if isinstance(config, str) else _as_toml(config)
                )
        yield


def _as_toml(config: dict[str, dict[str, Any]]) -> str:
    lines = []
    for section, table in config.items():
        lines.append(f'[{cli_helpers.toml_key(section)}]')
        lines.extend(
            f'{cli_helpers.toml_key(key)} = {json.dumps(value)}'
            for key, value in table.items()
        )
    return '\n'.join(lines) + '\n'


class ReadableResult(NamedTuple):
    """Helper class for formatting and testing click.testing.Result objects."""

    exception: BaseException | None
    exit_code: int
    output: str
    stderr: str

    @classmethod
    def parse(cls, r: click.testing.Result, /) -> Self:
        try:
            stderr = r.stderr
        except ValueError:
            stderr = r.output
        return cls(r.exception, r.exit_code, r.output or '', stderr or '')

    def clean_exit(
        self, *, output: str = '', empty_stderr: bool = False
    ) -> bool:
        """Return whether the invocation exited cleanly.

        Args:
            output:
                An expected output string.

        """
        return (
            (
                not self.exception
                or (
                    isinstance(self.exception, SystemExit)
                    and self.exit_code == 0
                )
            )
            and (not output or output in self.output)
            and (not empty_stderr or not self.stderr)
        )

    def error_exit(
        self, *, error: str | type[BaseException] = BaseException
    ) -> bool:
        """Return whether the invocation exited uncleanly.

        Args:
            error:
                An expected error message, or an expected exception
                type.

        """
        if isinstance(error, str):
            return (
                isinstance(self.exception, SystemExit)
                and self.exit_code > 0
                and (not error or error in self.stderr)
            )
        return isinstance(self.exception, error)
