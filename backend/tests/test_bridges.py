"""
SSVI - Google Drive / Sheets / OAuth bridge tests

Outbound HTTP is served by httpx.MockTransport; the OAuth token endpoint by
a google-auth transport stub.
"""

import asyncio
import json
from urllib.parse import parse_qs

import httpx
import pytest
from google.auth import transport

from app.bridges.drive import FOLDER_MIME_TYPE, INVALID_RESPONSE, DriveBridge, StorageError, folder_query
from app.bridges.google_auth import (
    GoogleAuthError,
    build_token_provider,
    refresh_token_provider,
)
from app.bridges.sheets import SheetsBridge, SpreadsheetError
from helpers import StaticTokens


def run(coro):
    return asyncio.run(coro)


def client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TokenEndpointResponse(transport.Response):
    def __init__(self, status: int, payload: dict):
        self._status = status
        self._data = json.dumps(payload).encode("utf-8")

    @property
    def status(self):
        return self._status

    @property
    def headers(self):
        return {"content-type": "application/json"}

    @property
    def data(self):
        return self._data


class TokenEndpoint(transport.Request):
    """Answers every token grant with one canned response."""

    def __init__(self, status: int = 200, payload: dict = None):
        self.status = status
        self.payload = payload or {"access_token": "ya29.x", "expires_in": 3600, "token_type": "Bearer"}
        self.grants = []

    def __call__(self, url, method="GET", body=None, headers=None, timeout=None, **kwargs):
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        self.grants.append({k: v[0] for k, v in parse_qs(body or "").items()})
        return TokenEndpointResponse(self.status, self.payload)


class TestFolderQuery:

    def test_query_matches_name_parent_and_excludes_trash(self):
        q = folder_query("สามชุก_250226", "parent-1")
        assert "name = 'สามชุก_250226'" in q
        assert f"mimeType = '{FOLDER_MIME_TYPE}'" in q
        assert "'parent-1' in parents" in q
        assert "trashed = false" in q

    def test_quotes_are_escaped(self):
        assert "name = 'O\\'Brien'" in folder_query("O'Brien", "p")


class TestDriveBridge:

    def test_find_folder_returns_first_match(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["q"] = request.url.params["q"]
            return httpx.Response(200, json={"files": [{"id": "abc"}, {"id": "def"}]})

        async def go():
            async with client(handler) as http:
                return await DriveBridge(http, StaticTokens()).find_folder("A", "P")

        assert run(go()) == "abc"
        assert seen["auth"] == "Bearer tok"
        assert "'P' in parents" in seen["q"]

    def test_find_folder_none_when_empty(self):
        async def go():
            async with client(lambda r: httpx.Response(200, json={"files": []})) as http:
                return await DriveBridge(http, StaticTokens()).find_folder("A", "P")

        assert run(go()) is None

    def test_create_folder_posts_metadata(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "new-folder"})

        async def go():
            async with client(handler) as http:
                return await DriveBridge(http, StaticTokens()).create_folder("สามชุก", "P")

        assert run(go()) == "new-folder"
        assert captured["body"] == {"name": "สามชุก", "mimeType": FOLDER_MIME_TYPE, "parents": ["P"]}

    def test_upload_sends_multipart_related(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["content_type"] = request.headers["Content-Type"]
            captured["body"] = request.content
            return httpx.Response(200, json={"id": "file-1"})

        async def go():
            async with client(handler) as http:
                return await DriveBridge(http, StaticTokens()).upload_file(
                    "F", "building.jpg", "image/jpeg", b"\xff\xd8jpeg-bytes"
                )

        assert run(go()) == "file-1"
        assert "uploadType=multipart" in captured["url"]
        assert captured["content_type"].startswith("multipart/related; boundary=")
        assert b'"name": "building.jpg"' in captured["body"]
        assert b'"parents": ["F"]' in captured["body"]
        assert b"Content-Type: image/jpeg" in captured["body"]
        assert b"\xff\xd8jpeg-bytes" in captured["body"]

    def test_api_error_raises_storage_error(self):
        async def go():
            async with client(lambda r: httpx.Response(403, json={"error": "forbidden"})) as http:
                await DriveBridge(http, StaticTokens()).upload_file("F", "a.jpg", "image/jpeg", b"x")

        with pytest.raises(StorageError):
            run(go())

    def test_transport_error_raises_storage_error(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        async def go():
            async with client(handler) as http:
                await DriveBridge(http, StaticTokens()).find_folder("A", "P")

        with pytest.raises(StorageError):
            run(go())


class TestSheetsBridge:

    def test_append_row(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["path"] = request.url.path
            captured["params"] = dict(request.url.params)
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"updates": {"updatedRows": 1}})

        async def go():
            async with client(handler) as http:
                await SheetsBridge(http, StaticTokens()).append_row("sheet-1", "Sheet1!A:G", ["a", "b"])

        run(go())
        assert captured["path"] == "/v4/spreadsheets/sheet-1/values/Sheet1!A:G:append"
        assert captured["params"]["valueInputOption"] == "USER_ENTERED"
        assert captured["body"] == {"values": [["a", "b"]]}

    def test_error_raises(self):
        async def go():
            async with client(lambda r: httpx.Response(429, text="quota")) as http:
                await SheetsBridge(http, StaticTokens()).append_row("s", "Sheet1!A:G", [])

        with pytest.raises(SpreadsheetError):
            run(go())


class TestDriveInvalidReplies:

    def test_non_json_body(self):
        """A 200 HTML page from a proxy is a storage failure."""
        async def go():
            async with client(lambda r: httpx.Response(200, text="<html>proxy</html>")) as http:
                await DriveBridge(http, StaticTokens()).upload_file("F", "a.jpg", "image/jpeg", b"x")

        with pytest.raises(StorageError, match=INVALID_RESPONSE):
            run(go())

    def test_upload_reply_without_id(self):
        async def go():
            async with client(lambda r: httpx.Response(200, json={"kind": "drive#file"})) as http:
                await DriveBridge(http, StaticTokens()).upload_file("F", "a.jpg", "image/jpeg", b"x")

        with pytest.raises(StorageError, match=INVALID_RESPONSE):
            run(go())

    def test_created_folder_without_id(self):
        async def go():
            async with client(lambda r: httpx.Response(200, json={})) as http:
                await DriveBridge(http, StaticTokens()).create_folder("A", "P")

        with pytest.raises(StorageError):
            run(go())

    def test_listing_entry_without_id(self):
        async def go():
            async with client(lambda r: httpx.Response(200, json={"files": [{"name": "A"}]})) as http:
                await DriveBridge(http, StaticTokens()).find_folder("A", "P")

        with pytest.raises(StorageError):
            run(go())


class TestTokenProviders:

    def test_refresh_token_grant_and_cache(self):
        """One grant serves repeated calls until the token expires."""
        endpoint = TokenEndpoint()
        provider = refresh_token_provider("cid", "secret", "refresh", request=endpoint)

        async def go():
            return [await provider.get_token(), await provider.get_token()]

        assert run(go()) == ["ya29.x", "ya29.x"]
        assert len(endpoint.grants) == 1
        assert endpoint.grants[0]["grant_type"] == "refresh_token"
        assert endpoint.grants[0]["refresh_token"] == "refresh"
        assert endpoint.grants[0]["client_id"] == "cid"

    def test_rejected_token_raises(self):
        endpoint = TokenEndpoint(status=400, payload={"error": "invalid_grant"})
        provider = refresh_token_provider("cid", "secret", "bad", request=endpoint)

        with pytest.raises(GoogleAuthError):
            run(provider.get_token())

    def test_auth_failure_becomes_storage_error(self):
        endpoint = TokenEndpoint(status=400, payload={"error": "invalid_grant"})
        tokens = refresh_token_provider("cid", "secret", "bad", request=endpoint)

        async def go():
            async with client(lambda r: httpx.Response(200, json={"files": []})) as http:
                await DriveBridge(http, tokens).find_folder("A", "P")

        with pytest.raises(StorageError):
            run(go())

    def test_refresh_token_takes_priority(self, settings):
        settings.GOOGLE_OAUTH_CLIENT_ID = "cid"
        settings.GOOGLE_OAUTH_CLIENT_SECRET = "secret"
        settings.GOOGLE_OAUTH_REFRESH_TOKEN = "refresh"
        settings.GOOGLE_DRIVE_SERVICE_ACCOUNT_JSON = '{"client_email": "sa@example.com"}'

        provider = build_token_provider(settings, request=TokenEndpoint())
        assert provider is not None
        assert provider.credentials.refresh_token == "refresh"

    def test_unconfigured_returns_none(self, settings):
        assert build_token_provider(settings, request=TokenEndpoint()) is None

    def test_invalid_service_account_json_returns_none(self, settings):
        settings.GOOGLE_DRIVE_SERVICE_ACCOUNT_JSON = "{not json"
        assert build_token_provider(settings, request=TokenEndpoint()) is None

    def test_service_account_without_key_returns_none(self, settings):
        settings.GOOGLE_DRIVE_SERVICE_ACCOUNT_JSON = '{"client_email": "sa@example.com"}'
        assert build_token_provider(settings, request=TokenEndpoint()) is None
