"""Configuration management for taskdeck."""

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

    # Storage Configuration
    sqlite_db_path: str = Field(default="./data/taskdeck.db", description="SQLite document store file path")

    # Session Assertion Configuration
    secret_key: str | None = Field(default=None, description="Process-wide secret used to sign session assertions")
    token_ttl_seconds: int = Field(
        default=30 * 24 * 60 * 60, description="Lifetime of an issued session assertion (in seconds)"
    )

    # Password Hashing
    bcrypt_rounds: int = Field(default=12, description="bcrypt cost factor for new password hashes")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    environment: str = Field(default="development", description="Deployment environment name")

    @property
    def is_production(self) -> bool:
        """Whether the service runs in production."""
        return self.environment.lower() == "production"

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # Task Field Limits
    TASK_TITLE_MAX_LENGTH: int = 100
    TASK_DESCRIPTION_MAX_LENGTH: int = 500

    # Account Field Limits
    ACCOUNT_NAME_MAX_LENGTH: int = 50
    ACCOUNT_BIO_MAX_LENGTH: int = 200
    PASSWORD_MIN_LENGTH: int = 6

    # Pagination Defaults
    DEFAULT_PAGE: int = 1
    DEFAULT_PAGE_LIMIT: int = 10
    MAX_PAGE_LIMIT: int = 100

    # Sorting
    DEFAULT_SORT_FIELD: str = "createdAt"
    DEFAULT_SORT_ORDER: str = "desc"
    PRIORITY_RANK: dict[str, int] = {"high": 3, "medium": 2, "low": 1}  # noqa: RUF012

    # Collections
    ACCOUNTS_COLLECTION: str = "accounts"
    TASKS_COLLECTION: str = "tasks"


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
