from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MONGODB_URI = "mongodb://localhost:27017"
DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:3000",
    "https://app.valoresposi.it/crm/",
    "http://app.valoresposi.it/crm/",
    "https://www.app.valoresposi.it/crm/",
    "http://www.app.valoresposi.it/crm/",
)


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "CRM Export API"
    APP_ENV: str = Field(default="development", validation_alias=AliasChoices("APP_ENV", "NODE_ENV"))

    MONGODB_URI: str | None = None
    DATABASE_NAME: str = "test"
    MONGO_MAX_POOL_SIZE: int = 10
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = 5000

    # Comma separated; ALLOWED_DOMAINS extends the default list.
    ALLOWED_ORIGINS: str = ",".join(DEFAULT_ALLOWED_ORIGINS)
    ALLOWED_DOMAINS: str = ""

    LOG_LEVEL: str = "INFO"

    HOST: str = "0.0.0.0"
    PORT: int = 3000

    @property
    def mongodb_uri(self) -> str:
        return self.MONGODB_URI or DEFAULT_MONGODB_URI

    @property
    def database_configured(self) -> bool:
        return bool(self.MONGODB_URI)

    @property
    def is_development(self) -> bool:
        return self.APP_ENV.strip().lower() == "development"

    @property
    def cors_origins(self) -> list[str]:
        origins = _split_csv(self.ALLOWED_ORIGINS)
        for domain in _split_csv(self.ALLOWED_DOMAINS):
            if domain not in origins:
                origins.append(domain)
        return origins


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


settings = get_settings()
