"""Settings for the HTTP shell.

Values come from ``SHOPSENSE_``-prefixed environment variables or a ``.env``
file. The engine itself takes plain constructor arguments; only the shell reads
configuration.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

StorageBackend = Literal["memory", "file", "redis"]


class Settings(BaseSettings):

    app_name: str = "ShopSense API"
    log_level: str = "INFO"

    # Catalog CSV; the built-in demo catalog is used when unset
    catalog_path: Optional[str] = None

    # Conversation history persistence
    storage_backend: StorageBackend = "file"
    history_dir: str = "data/history"
    redis_url: Optional[str] = None

    # Engine tuning
    recommendation_limit: int = 5
    min_scan_confidence: float = 0.5
    scan_seed: Optional[int] = None

    model_config = SettingsConfigDict(env_prefix="SHOPSENSE_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, read once."""
    return Settings()
