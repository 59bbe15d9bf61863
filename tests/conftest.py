import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'forgecraft' and tests/ importable for helpers
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from forgecraft.core.config import clear_all_caches
from forgecraft.core.utils.stdlib_logging import reset_stdlib_logging_for_tests
from forgecraft.data import clear_caches as clear_data_caches


@pytest.fixture(autouse=True)
def _isolate_forgecraft_settings(tmp_path_factory, monkeypatch):
    """Fresh caches and a private FORGECRAFT_HOME for every test.

    Any FORGECRAFT_* variable from the developer shell would leak into the
    layered settings, so all of them are cleared first.
    """
    for key in list(os.environ):
        if key.startswith("FORGECRAFT_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("FORGECRAFT_HOME", str(tmp_path_factory.mktemp("forgecraft-home")))

    clear_all_caches()
    clear_data_caches()
    yield
    clear_all_caches()
    reset_stdlib_logging_for_tests()


@pytest.fixture
def isolated_project_env(tmp_path, monkeypatch):
    """Empty project directory that is also the working directory."""
    project = tmp_path / "demo-app"
    project.mkdir()
    monkeypatch.chdir(project)
    return project


@pytest.fixture
def bundled_templates() -> Path:
    from forgecraft.data import get_data_path

    return get_data_path("templates")
