# backend/tests/conftest.py
"""
Pytest configuration for notify relay backend tests.

- Ensures that the project root (backend/) is added to sys.path
  so that `import notify_relay.*` works correctly in tests.
- Points both backend databases at in-memory SQLite by default so that
  importing notify_relay.main never needs a reachable MySQL server.
- Provides SQLite-file backed BackendClient fixtures; the real transaction
  code runs against them.
"""

import os
import sys
from pathlib import Path

import pytest


def _ensure_project_root_in_sys_path() -> None:
    # This file is located at: backend/tests/conftest.py
    # parents[1] -> backend/
    project_root = Path(__file__).resolve().parents[1]
    project_root_str = str(project_root)

    if project_root_str not in sys.path:
        sys.path.insert(0, project_root_str)


def _ensure_test_env_vars() -> None:
    """
    Set dummy environment variables required for tests.

    These values are only for local testing and do NOT contain real secrets.
    """
    os.environ.setdefault("DB_URL_SYSTEM1", "sqlite://")
    os.environ.setdefault("DB_URL_SYSTEM2", "sqlite://")
    # テスト中は combined.log / error.log を作らず、手元の .env も読まない
    os.environ.setdefault("LOG_FILE", "none")
    os.environ.setdefault("LOG_ERROR_FILE", "none")
    os.environ.setdefault("DOTENV_PATH", os.devnull)


_ensure_project_root_in_sys_path()
_ensure_test_env_vars()


from notify_relay.backends import BackendRegistry  # noqa: E402
from notify_relay.utils.log_config import reset_logging  # noqa: E402

from helpers import make_sqlite_backend  # noqa: E402


@pytest.fixture
def system1(tmp_path):
    client = make_sqlite_backend("1", tmp_path / "system1.db")
    yield client
    client.dispose()


@pytest.fixture
def system2(tmp_path):
    client = make_sqlite_backend("2", tmp_path / "system2.db")
    yield client
    client.dispose()


@pytest.fixture
def registry(system1, system2):
    return BackendRegistry([system1, system2])


@pytest.fixture(autouse=True)
def _reset_package_logging():
    yield
    reset_logging()
