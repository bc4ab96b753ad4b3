"""Google Sheets v4 bridge - append one summary row per inspection."""

import logging
from urllib.parse import quote

import httpx

from app.bridges.google_auth import GoogleAuthError, TokenProvider

logger = logging.getLogger(__name__)

SHEETS_URL = "https://sheets.googleapis.com/v4/spreadsheets"


class SpreadsheetError(Exception):
    """Spreadsheet append failed."""


class SheetsBridge:
    def __init__(self, http: httpx.AsyncClient, tokens: TokenProvider):
        self.http = http
        self.tokens = tokens

    async def append_row(self, spreadsheet_id: str, range_: str, values: list) -> None:
        try:
            token = await self.tokens.get_token()
        except GoogleAuthError as e:
            raise SpreadsheetError(str(e)) from e

        url = f"{SHEETS_URL}/{spreadsheet_id}/values/{quote(range_, safe='!:')}:append"
        try:
            response = await self.http.post(
                url,
                params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
                headers={"Authorization": f"Bearer {token}"},
                json={"values": [values]},
            )
        except httpx.HTTPError as e:
            raise SpreadsheetError(f"Sheets request failed: {e}") from e

        if response.status_code != 200:
            raise SpreadsheetError(f"Sheets API error {response.status_code}: {response.text}")
