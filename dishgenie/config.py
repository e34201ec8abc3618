from enum import Enum
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from dishgenie.domain.errors import ConfigurationError


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class CatalogBackend(Enum):
    sql = "sql"
    firestore = "firestore"


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    env: Env = Env.local
    log_level: str = "INFO"

    openrouter_api_key: SecretStr | None = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    app_url: str = "https://mydishgenie.vercel.app"
    app_title: str = "MyDishGenie"
    primary_model: str = "google/gemini-flash-1.5"
    fallback_model: str = "openai/gpt-4o-mini"

    catalog_backend: CatalogBackend = CatalogBackend.sql
    db_url: str = "sqlite+aiosqlite:///dishgenie.db"
    recipes_collection: str = "recipes"
    firebase_credentials: Path = Path("firebase_key.json")
    catalog_limit: int = Field(default=500, ge=1, le=500)

    prompt_dish_limit: int = Field(default=30, ge=1)
    min_catalog_matches: int = Field(default=3, ge=3)

    def require_api_key(self) -> str:
        key = self.openrouter_api_key
        if key is None or not key.get_secret_value():
            raise ConfigurationError(
                "Server configuration error: OpenRouter API key is not set."
            )
        return key.get_secret_value()
