import asyncio

import pytest
from fastapi.testclient import TestClient

from app.config import Settings, get_settings
from app.database import dispose_engine, get_sessionmaker, init_models
from app.main import app


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Every test starts from an unconfigured environment."""
    for name in Settings.model_fields:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    asyncio.run(dispose_engine())
    app.state.url_warnings.reset()
    yield
    get_settings.cache_clear()
    asyncio.run(dispose_engine())


@pytest.fixture
def set_env(monkeypatch):
    def _set(**values):
        for key, value in values.items():
            monkeypatch.setenv(key, value)
        get_settings.cache_clear()
        asyncio.run(dispose_engine())

    return _set


@pytest.fixture
def store(tmp_path, set_env):
    """A throwaway SQLite store; returns the session factory."""
    set_env(DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'payments.db'}")
    asyncio.run(init_models())
    return get_sessionmaker()


@pytest.fixture
def client():
    return TestClient(app)
