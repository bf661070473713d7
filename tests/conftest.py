from __future__ import annotations

import pytest

from octidx.utils.loggers import get_logger


@pytest.fixture(autouse=True, scope="session")
def _package_logger():
    # Bind the package handler before any CliRunner swaps out sys.stderr.
    return get_logger()
