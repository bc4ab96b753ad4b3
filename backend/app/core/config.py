from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings

DEFAULT_PARENT_FOLDER_ID = "1IzXUWJfucyb47Dr32QSVIxBKmoMrWF6J"
DEFAULT_SHEET_ID = "1x9Xo2S6m0bV0fKq2cQx1bTnWQ8x3hB7pY4rZ5sLdE2A"


class Settings(BaseSettings):
    """Application settings."""

    # App
    APP_NAME: str = "SSVI Inspection Intake"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # Database (optional - persistence and dashboard degrade without it)
    DATABASE_URL: str | None = None

    # Google credentials. The refresh token wins when both are configured.
    GOOGLE_OAUTH_CLIENT_ID: str | None = None
    GOOGLE_OAUTH_CLIENT_SECRET: str | None = None
    GOOGLE_OAUTH_REFRESH_TOKEN: str | None = None
    GOOGLE_DRIVE_SERVICE_ACCOUNT_JSON: str | None = None

    # Google Drive / Sheets targets
    GOOGLE_DRIVE_PARENT_FOLDER_ID: str | None = None
    GOOGLE_SHEET_ID: str | None = None
    GOOGLE_SHEET_RANGE: str = "Sheet1!A:G"
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Dates
    LOCAL_TIMEZONE: str = "Asia/Bangkok"
    DATE_YEAR_ERA: Literal["gregorian", "buddhist"] = "gregorian"

    # Duplicate submission debounce
    DEDUPE_WINDOW_MS: int = 10_000
    DEDUPE_MAX_ENTRIES: int = 10_000

    # Server-side timestamp burn-in / compression of incoming photos
    EVIDENCE_PACKAGING_ENABLED: bool = False

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def async_database_url(self) -> str | None:
        """DATABASE_URL rewritten for the asyncpg driver."""
        url = self.DATABASE_URL
        if not url:
            return None
        if url.startswith("postgres://"):
            return "postgresql+asyncpg://" + url[len("postgres://"):]
        if url.startswith("postgresql://"):
            return "postgresql+asyncpg://" + url[len("postgresql://"):]
        return url

    @property
    def parent_folder_id(self) -> str:
        return self.GOOGLE_DRIVE_PARENT_FOLDER_ID or DEFAULT_PARENT_FOLDER_ID

    @property
    def sheet_id(self) -> str:
        return self.GOOGLE_SHEET_ID or DEFAULT_SHEET_ID

    @property
    def has_refresh_token(self) -> bool:
        return bool(
            self.GOOGLE_OAUTH_REFRESH_TOKEN
            and self.GOOGLE_OAUTH_CLIENT_ID
            and self.GOOGLE_OAUTH_CLIENT_SECRET
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
