from __future__ import annotations

import os
from pathlib import Path
import shutil

import pytest


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep SQLBRIDGE_* variables of the developer's shell out of the tests."""
    for name in list(os.environ):
        if name.upper().startswith("SQLBRIDGE_"):
            monkeypatch.delenv(name)


@pytest.fixture
def temp_dir(tmp_path_factory: pytest.TempPathFactory) -> Path:
    """Scratch directory for profile files and SQLite databases."""
    path = tmp_path_factory.mktemp("sqlbridge")
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
