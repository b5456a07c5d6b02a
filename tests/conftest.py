import os
from pathlib import Path
import sys

import pytest

# Kivy parses sys.argv on import; keep it away from pytest's arguments
os.environ.setdefault("KIVY_NO_ARGS", "1")
os.environ.setdefault("KIVY_NO_CONSOLELOG", "1")
os.environ.setdefault("KIVY_NO_FILELOG", "1")

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from gymlog import settings  # noqa: E402
from gymlog.db import init_db  # noqa: E402
from gymlog.templates import save_template  # noqa: E402
from tests.utils import SAMPLE_TEMPLATE, USER_ID  # noqa: E402


@pytest.fixture(autouse=True)
def settings_file(tmp_path, monkeypatch):
    """Point the settings module at a private file for every test."""
    path = tmp_path / "settings.json"
    monkeypatch.setattr(settings, "SETTINGS_PATH", path)
    settings.reset_cache()
    yield path
    settings.reset_cache()


@pytest.fixture
def empty_db(tmp_path: Path) -> Path:
    """Create a temporary database with the schema and no rows."""
    return init_db(tmp_path / "gymlog.db")


@pytest.fixture
def sample_db(empty_db: Path) -> Path:
    """Create a temporary database holding the 'Push Day' template."""
    save_template(SAMPLE_TEMPLATE, USER_ID, db_path=empty_db)
    return empty_db


@pytest.fixture
def recovery_base(tmp_path: Path) -> Path:
    return tmp_path / "session_recovery"
