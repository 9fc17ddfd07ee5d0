"""
Application configuration using Pydantic Settings
"""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings loaded from environment variables and ``.env``
    """
    # Database
    DATABASE_URL: str = "sqlite:///questledger.db"

    # Key of the budget document inside budget_documents
    DOCUMENT_KEY: str = "default"

    # Application
    DEBUG: bool = False

    # Persist after every action
    AUTOSAVE: bool = True

    # Raise on an undecodable document instead of starting from a fresh seed
    STRICT_LOAD: bool = False

    # Background badge check
    BADGE_CHECK_INTERVAL_SECONDS: int = 60

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    def get_sqlalchemy_url(self) -> str:
        """
        Normalise DATABASE_URL for SQLAlchemy (bare file paths become sqlite URLs)
        """
        url = self.DATABASE_URL
        if "://" not in url:
            return f"sqlite:///{url}"
        return url


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance (singleton)
    """
    return Settings()
