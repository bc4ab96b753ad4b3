"""
Google Drive v3 bridge.

Folder lookup, folder creation and multipart file upload over httpx.
Every failure surfaces as StorageError.
"""

import json
import logging
import uuid
from typing import Optional

import httpx

from app.bridges.google_auth import GoogleAuthError, TokenProvider

logger = logging.getLogger(__name__)

DRIVE_FILES_URL = "https://www.googleapis.com/drive/v3/files"
DRIVE_UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
INVALID_RESPONSE = "Drive API returned an invalid response"


class StorageError(Exception):
    """Remote storage call failed."""


def _quote_query_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def folder_query(name: str, parent_id: str) -> str:
    return (
        f"name = '{_quote_query_value(name)}'"
        f" and mimeType = '{FOLDER_MIME_TYPE}'"
        f" and '{_quote_query_value(parent_id)}' in parents"
        " and trashed = false"
    )


class DriveBridge:
    """Thin async client for the Drive files endpoints."""

    def __init__(self, http: httpx.AsyncClient, tokens: TokenProvider):
        self.http = http
        self.tokens = tokens

    async def _headers(self) -> dict[str, str]:
        try:
            token = await self.tokens.get_token()
        except GoogleAuthError as e:
            raise StorageError(str(e)) from e
        return {"Authorization": f"Bearer {token}"}

    async def _send(self, method: str, url: str, **kwargs) -> dict:
        headers = {**kwargs.pop("headers", {}), **(await self._headers())}
        try:
            response = await self.http.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise StorageError(f"Drive request failed: {e}") from e

        if response.status_code not in (200, 201):
            logger.warning(f"[DRIVE] {method} {url} failed: {response.status_code} {response.text}")
            raise StorageError(f"Drive API error {response.status_code}")
        try:
            data = response.json()
        except ValueError as e:
            logger.warning(f"[DRIVE] {method} {url} returned non-JSON body: {response.text[:200]}")
            raise StorageError(INVALID_RESPONSE) from e
        if not isinstance(data, dict):
            raise StorageError(INVALID_RESPONSE)
        return data

    @staticmethod
    def _file_id(data: dict) -> str:
        file_id = data.get("id")
        if not file_id:
            raise StorageError(INVALID_RESPONSE)
        return file_id

    async def find_folder(self, name: str, parent_id: str) -> Optional[str]:
        data = await self._send(
            "GET",
            DRIVE_FILES_URL,
            params={
                "q": folder_query(name, parent_id),
                "fields": "files(id)",
                "supportsAllDrives": "true",
                "includeItemsFromAllDrives": "true",
            },
        )
        files = data.get("files") or []
        return self._file_id(files[0]) if files else None

    async def create_folder(self, name: str, parent_id: str) -> str:
        data = await self._send(
            "POST",
            DRIVE_FILES_URL,
            params={"fields": "id", "supportsAllDrives": "true"},
            json={"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent_id]},
        )
        folder_id = self._file_id(data)
        logger.info(f"[DRIVE] Created folder {name} ({folder_id})")
        return folder_id

    async def upload_file(self, folder_id: str, filename: str, content_type: str, content: bytes) -> str:
        boundary = uuid.uuid4().hex
        metadata = json.dumps({"name": filename, "parents": [folder_id]}, ensure_ascii=False)
        body = (
            f"--{boundary}\r\n"
            "Content-Type: application/json; charset=UTF-8\r\n\r\n"
            f"{metadata}\r\n"
            f"--{boundary}\r\n"
            f"Content-Type: {content_type}\r\n\r\n"
        ).encode("utf-8") + content + f"\r\n--{boundary}--\r\n".encode("utf-8")

        data = await self._send(
            "POST",
            DRIVE_UPLOAD_URL,
            params={"uploadType": "multipart", "fields": "id", "supportsAllDrives": "true"},
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
            content=body,
        )
        return self._file_id(data)
