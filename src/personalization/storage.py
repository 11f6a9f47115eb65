"""Key-value store collaborators used for conversation persistence.

Every store exposes the same small async interface (``get``, ``set``,
``delete``) over string values. Writes replace the whole value; the last writer
wins and nothing is merged.
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from src.personalization.exceptions import PersistenceError

# Configure module logger
logger = logging.getLogger(__name__)

# The only key owned by the engine
CONVERSATION_KEY = "ai_messages"


class KeyValueStore(ABC):
    """Async string key-value store."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Replace the value stored under ``key``."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored."""


class InMemoryStore(KeyValueStore):
    """Dict-backed store, lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JSONFileStore(KeyValueStore):
    """Stores each key as a ``<key>.json`` file inside a directory.

    Writes go to a temporary file in the same directory which then replaces the
    target, so readers see either the old or the new value.
    """

    def __init__(self, directory: str):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    async def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None

        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            raise PersistenceError(key, e) from e

    async def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise PersistenceError(key, e) from e

        logger.debug(f"Saved {len(value)} bytes to {path}")

    async def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(key, e) from e


class RedisStore(KeyValueStore):
    """Store backed by a ``redis.asyncio`` client.

    Keys are namespaced with ``prefix``. The client must be created with
    ``decode_responses=True`` so values come back as strings.
    """

    def __init__(self, client, prefix: str = "shopsense"):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "shopsense") -> "RedisStore":
        import redis.asyncio as redis

        logger.info(f"Connecting to Redis at {url}")
        return cls(redis.from_url(url, decode_responses=True), prefix=prefix)

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.client.get(self._key(key))
        except Exception as e:
            raise PersistenceError(key, e) from e

    async def set(self, key: str, value: str) -> None:
        try:
            await self.client.set(self._key(key), value)
        except Exception as e:
            raise PersistenceError(key, e) from e

    async def delete(self, key: str) -> None:
        try:
            await self.client.delete(self._key(key))
        except Exception as e:
            raise PersistenceError(key, e) from e

    async def close(self) -> None:
        await self.client.aclose()
