# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

from __future__ import annotations

import datetime

import hypothesis
import pytest

import tests
from tsmerge import catalog, ts

# https://hypothesis.readthedocs.io/en/latest/settings.html#settings-profiles
hypothesis.settings.register_profile('ci', max_examples=1000)
hypothesis.settings.register_profile('dev', max_examples=10)
hypothesis.settings.register_profile(
    'debug', max_examples=10, verbosity=hypothesis.Verbosity.verbose
)
hypothesis.settings.register_profile(
    'flaky', deadline=datetime.timedelta(milliseconds=150)
)


@pytest.fixture
def sample_catalog() -> catalog.Catalog:
    """Return a freshly parsed copy of the sample TS document."""
    return ts.parse(tests.SAMPLE_TS_DOCUMENT, path='sample_pt.ts')
