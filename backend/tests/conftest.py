import pytest

from app.core.config import Settings
from helpers import FakeDrive, FakeSheets


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL=None,
        GOOGLE_OAUTH_CLIENT_ID=None,
        GOOGLE_OAUTH_CLIENT_SECRET=None,
        GOOGLE_OAUTH_REFRESH_TOKEN=None,
        GOOGLE_DRIVE_SERVICE_ACCOUNT_JSON=None,
        GOOGLE_DRIVE_PARENT_FOLDER_ID="parent-root",
        GOOGLE_SHEET_ID="sheet-1",
    )


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'ssvi.db'}"


@pytest.fixture
def drive() -> FakeDrive:
    return FakeDrive()


@pytest.fixture
def sheets() -> FakeSheets:
    return FakeSheets()
