from datetime import datetime, timezone

import pytest

from agency import config
from agency.lib.store import DocumentStore


@pytest.fixture
def agency_home(monkeypatch, tmp_path):
    """Isolated agency root per test.

    Points AGENCY_HOME at a temp directory and clears the cached config so
    every test starts from defaults.
    """
    home = tmp_path / "agency"
    home.mkdir()
    monkeypatch.setenv("AGENCY_HOME", str(home))
    for key in list(config.DEFAULT_CONFIG):
        monkeypatch.delenv(f"AGENCY_{key.upper()}", raising=False)
    config.clear_cache()

    yield home

    config.clear_cache()


@pytest.fixture
def store(agency_home):
    return DocumentStore()


@pytest.fixture
def fixed_now():
    return datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
