"""
Google OAuth access tokens for Drive and Sheets.

Two credential sources are supported:
- OAuth refresh token (client id + secret + refresh token) - preferred
- Service-account JSON

Both are google-auth credential objects. google-auth tracks expiry and
performs the token grant; the blocking refresh runs in a worker thread.
"""

import asyncio
import json
import logging
from typing import Optional

from google.auth import credentials as google_credentials
from google.auth import exceptions as google_exceptions
from google.auth import transport
from google.auth.transport.requests import Request
from google.oauth2 import credentials as user_credentials
from google.oauth2 import service_account

from app.core.config import Settings

logger = logging.getLogger(__name__)

TOKEN_URI = "https://oauth2.googleapis.com/token"
SCOPES = [
    "https://www.googleapis.com/auth/drive.file",
    "https://www.googleapis.com/auth/spreadsheets",
]


class GoogleAuthError(Exception):
    """Access token could not be obtained."""


class TokenProvider:
    """Hands out a bearer token, refreshing the credentials when stale."""

    def __init__(
        self,
        credentials: google_credentials.Credentials,
        request: Optional[transport.Request] = None,
    ):
        self.credentials = credentials
        self._request = request or Request()
        self._lock = asyncio.Lock()

    async def get_token(self) -> str:
        async with self._lock:
            if not self.credentials.valid:
                try:
                    await asyncio.to_thread(self.credentials.refresh, self._request)
                except google_exceptions.GoogleAuthError as e:
                    raise GoogleAuthError(f"Token refresh failed: {e}") from e
            return self.credentials.token


def refresh_token_provider(
    client_id: str,
    client_secret: str,
    refresh_token: str,
    request: Optional[transport.Request] = None,
) -> TokenProvider:
    creds = user_credentials.Credentials(
        token=None,
        refresh_token=refresh_token,
        client_id=client_id,
        client_secret=client_secret,
        token_uri=TOKEN_URI,
    )
    return TokenProvider(creds, request)


def service_account_provider(info: dict, request: Optional[transport.Request] = None) -> TokenProvider:
    creds = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    return TokenProvider(creds, request)


def build_token_provider(
    settings: Settings,
    request: Optional[transport.Request] = None,
) -> Optional[TokenProvider]:
    """Pick credentials from settings. Returns None when Google is not configured."""
    if settings.has_refresh_token:
        logger.info("[GOOGLE] Using OAuth refresh token credentials")
        return refresh_token_provider(
            client_id=settings.GOOGLE_OAUTH_CLIENT_ID,
            client_secret=settings.GOOGLE_OAUTH_CLIENT_SECRET,
            refresh_token=settings.GOOGLE_OAUTH_REFRESH_TOKEN,
            request=request,
        )

    raw = settings.GOOGLE_DRIVE_SERVICE_ACCOUNT_JSON
    if not raw:
        logger.warning("[GOOGLE] No Google credentials found. Drive and Sheets are disabled.")
        return None

    try:
        provider = service_account_provider(json.loads(raw), request)
    except (ValueError, KeyError) as e:
        logger.error(f"[GOOGLE] Invalid service account JSON: {e}")
        return None

    logger.info(f"[GOOGLE] Using service account {provider.credentials.service_account_email}")
    return provider
