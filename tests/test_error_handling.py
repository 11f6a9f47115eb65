"""Tests for error handling in the ShopSense API.

Tests the mapping of engine exceptions to JSON error responses: rejected
messages, failed history writes and bad configuration.
"""

import logging

import pytest
from fastapi.testclient import TestClient

from src.api.config import Settings
from src.api.main import build_engine, build_store, create_app
from src.personalization.exceptions import CatalogLoadError
from src.personalization.storage import InMemoryStore, JSONFileStore

# Configure logging for tests
logging.basicConfig(level=logging.WARNING)


class FailingStore(InMemoryStore):
    async def set(self, key: str, value: str) -> None:
        raise OSError("disk full")


def memory_settings(**overrides) -> Settings:
    return Settings(storage_backend="memory", _env_file=None, **overrides)


def test_empty_message_rejected_by_validation():
    """Test that an empty message fails request validation."""
    with TestClient(create_app(memory_settings(), store=InMemoryStore())) as client:
        response = client.post("/assistant/messages", json={"text": ""})

    assert response.status_code == 422


def test_whitespace_message_rejected():
    """Test that a whitespace-only message returns 422 with error details."""
    with TestClient(create_app(memory_settings(), store=InMemoryStore())) as client:
        response = client.post("/assistant/messages", json={"text": "   "})
        history = client.get("/assistant/messages").json()

    assert response.status_code == 422
    data = response.json()
    assert data["error"] == "InvalidMessageError"
    assert "empty" in data["message"]
    assert history == []


def test_persistence_failure_returns_503():
    """Test that a failed history write returns the reply in the error details."""
    with TestClient(create_app(memory_settings(), store=FailingStore())) as client:
        response = client.post("/assistant/messages", json={"text": "compare"})
        history = client.get("/assistant/messages").json()

    assert response.status_code == 503
    data = response.json()
    assert data["error"] == "PersistenceError"
    assert data["details"]["intent"] == "compare"
    assert data["details"]["reply"].startswith("I can help you compare products.")
    assert data["details"]["key"] == "ai_messages"

    # In-memory history keeps both messages
    assert [m["text"] for m in history] == ["compare", data["details"]["reply"]]


def test_missing_catalog_file(tmp_path):
    settings = memory_settings(catalog_path=str(tmp_path / "missing.csv"))

    with pytest.raises(FileNotFoundError):
        build_engine(settings, store=InMemoryStore())


def test_malformed_catalog_file(tmp_path):
    csv_path = tmp_path / "catalog.csv"
    csv_path.write_text("id,name\n1,Lamp\n")

    with pytest.raises(CatalogLoadError):
        build_engine(memory_settings(catalog_path=str(csv_path)), store=InMemoryStore())


def test_redis_backend_requires_url():
    with pytest.raises(ValueError):
        build_store(Settings(storage_backend="redis", redis_url=None, _env_file=None))


def test_file_backend_store(tmp_path):
    store = build_store(
        Settings(storage_backend="file", history_dir=str(tmp_path), _env_file=None)
    )

    assert isinstance(store, JSONFileStore)


def test_corrupt_history_starts_empty(tmp_path):
    """Test that an unreadable stored history does not prevent startup."""
    (tmp_path / "ai_messages.json").write_text("{not json")
    settings = Settings(storage_backend="file", history_dir=str(tmp_path), _env_file=None)

    with TestClient(create_app(settings)) as client:
        assert client.get("/assistant/messages").json() == []
        assert client.post("/assistant/messages", json={"text": "hi"}).status_code == 200
