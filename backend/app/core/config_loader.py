# backend/app/core/config_loader.py

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Credentials are optional at startup; whoever needs one checks it per call.
    AMADEUS_API_KEY: str = ""
    AMADEUS_API_SECRET: str = ""
    AMADEUS_BASE_URL: str = "https://test.api.amadeus.com"

    LLM_API_KEY: str = ""
    LLM_BASE_URL: Optional[str] = None
    LLM_MODEL: str = "gpt-4o-mini"
    LLM_TIMEOUT_SECONDS: float = 30.0

    FLIGHT_TIMEOUT_SECONDS: float = 20.0

    DB_PATH: str = "data.sqlite3"
    JWT_SECRET_KEY: str = "supersecret"

    SEARCH_TIMEZONE: str = "UTC"
    LOG_DIR: Optional[str] = None
    LOG_LEVEL: str = "DEBUG"
    environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
