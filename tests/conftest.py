"""Shared fixtures for the restaurant voice agent tests."""

import pytest

from restaurant_voice.config import Config
from restaurant_voice.services.record_store import RecordStore


@pytest.fixture
def config():
    """Configuration independent of the environment and any .env file."""
    return Config(
        _env_file=None,
        openai_api_key="test-key",
        agent_phone=None,
        restaurant_name="Trattoria Test",
        opening_hours="täglich von 11:30 bis 22:00 Uhr",
        restaurant_address="Musterstraße 12, 10115 Berlin",
    )


@pytest.fixture
def record_store(tmp_path):
    """A fresh SQLite record store in a temporary directory."""
    store = RecordStore(tmp_path / "voice_agent.db")
    store.initialize()
    yield store
    store.close()
