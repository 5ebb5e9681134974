"""Client configuration: environment-driven via pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="SHOP_", extra="ignore")

    api_base_url: str = "http://localhost:3001"
    session_file: Path = Path.home() / ".storefront" / "session.json"
    request_timeout: float = 15.0


@lru_cache
def get_settings() -> ClientSettings:
    return ClientSettings()
