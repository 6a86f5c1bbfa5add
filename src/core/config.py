"""Configuration management for taskdesk."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Document store Configuration
    sqlite_db_path: str = Field(
        default="./data/taskdesk.db", description="Path to the SQLite file backing the document collections"
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    environment: str = Field(default="development", description="Deployment environment name")

    # Pagination
    default_page_limit: int = Field(default=10, description="Page size used when a list request omits 'limit'")

    @property
    def is_production(self) -> bool:
        """Return True when running in the production environment."""
        return self.environment.lower() == "production"


# Application Constants
class Constants:
    """Application-wide constants."""

    # HTTP Status Codes (the API keeps its historical taxonomy)
    HTTP_BAD_REQUEST: int = 400
    HTTP_PAYMENT_REQUIRED: int = 402  # used for missing/invalid create payloads
    HTTP_NOT_FOUND: int = 404  # used for a missing identifier
    HTTP_SERVER_ERROR: int = 500  # used for records that do not exist

    # Pagination Defaults
    DEFAULT_PAGE: int = 1


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
