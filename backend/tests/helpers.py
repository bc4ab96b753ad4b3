import io
import itertools
from typing import Optional

from PIL import Image

from app.bridges.drive import StorageError
from app.bridges.sheets import SpreadsheetError


class FakeDrive:
    """In-memory stand-in for DriveBridge."""

    def __init__(self, fail_on_upload: Optional[str] = None):
        self.folders: dict[tuple[str, str], str] = {}
        self.uploads: list[dict] = []
        self.created: list[tuple[str, str]] = []
        self.fail_on_upload = fail_on_upload
        self._ids = itertools.count(1)

    async def find_folder(self, name: str, parent_id: str) -> Optional[str]:
        return self.folders.get((name, parent_id))

    async def create_folder(self, name: str, parent_id: str) -> str:
        folder_id = f"folder-{next(self._ids)}"
        self.folders[(name, parent_id)] = folder_id
        self.created.append((name, parent_id))
        return folder_id

    async def upload_file(self, folder_id: str, filename: str, content_type: str, content: bytes) -> str:
        if filename == self.fail_on_upload:
            raise StorageError(f"upload rejected: {filename}")
        file_id = f"file-{next(self._ids)}"
        self.uploads.append({
            "id": file_id,
            "folder_id": folder_id,
            "filename": filename,
            "content_type": content_type,
            "size": len(content),
        })
        return file_id


class FakeSheets:
    def __init__(self, fail: bool = False):
        self.rows: list[tuple[str, str, list]] = []
        self.fail = fail

    async def append_row(self, spreadsheet_id: str, range_: str, values: list) -> None:
        if self.fail:
            raise SpreadsheetError("quota exceeded")
        self.rows.append((spreadsheet_id, range_, values))


def make_jpeg(width: int = 640, height: int = 480, color=(40, 120, 200)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="JPEG", quality=95)
    return buf.getvalue()


class StaticTokens:
    """Token provider that always returns the same bearer token."""

    def __init__(self, token: str = "tok"):
        self.token = token

    async def get_token(self) -> str:
        return self.token


class FailingWriter:
    """Record writer whose write blows up with an unexpected error."""

    async def write(self, submission):
        raise RuntimeError("writer crashed")
