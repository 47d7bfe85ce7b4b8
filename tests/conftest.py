"""
Pytest configuration and shared fixtures.
"""

import pytest

from infotag import Config, create_empty, flush_warnings
from infotag.processor import _diagnostics

# ---------- Constants ----------

SAMPLE_TAG = {
    "TITLE": "Rainmaker",
    "ARTIST": "Iron Maiden",
    "TRACKNUM": "02",
}

SAMPLE_NAMES = [
    "01 - Wildest Dreams.mp3",
    "02 - Rainmaker.mp3",
    "03 - No More Lies.mp3",
    "not matching at all.mp3",
]

CONFIG_ATTRS = [
    "DEFAULT_CASE",
    "DEFAULT_WEED",
    "TRUNC_MARKER",
    "DEFAULT_VERBOSE",
    "LOG_FILE",
    "MAX_WORKERS",
    "MIN_ITEMS_FOR_PARALLEL",
]

# ---------- Fixtures ----------

@pytest.fixture(autouse=True)
def clean_state():
    """Reset diagnostics and configuration around every test."""
    saved = {attr: getattr(Config, attr) for attr in CONFIG_ATTRS}
    flush_warnings()
    _diagnostics.last_error = ''
    yield
    flush_warnings()
    _diagnostics.last_error = ''
    for attr, value in saved.items():
        setattr(Config, attr, value)

@pytest.fixture
def empty_tag():
    return create_empty()

@pytest.fixture
def sample_names():
    return list(SAMPLE_NAMES)

@pytest.fixture
def sample_tag():
    tag = create_empty()
    tag.update(SAMPLE_TAG)
    return tag
