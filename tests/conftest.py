"""Shared test fixtures for cmdtarget.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Payload classes used by several test
modules live in ``tests/unit/sample_commands.py``.
"""
from __future__ import annotations

import pytest


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "cmdtarget"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"
