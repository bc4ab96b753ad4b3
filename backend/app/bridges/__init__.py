"""
SSVI - Google Workspace Bridges

Outbound integration layer for:
- Google OAuth (refresh token / service account access tokens)
- Google Drive (evidence folders and photo uploads)
- Google Sheets (inspection summary rows)
"""

from .drive import DriveBridge, StorageError
from .google_auth import GoogleAuthError, TokenProvider, build_token_provider
from .sheets import SheetsBridge, SpreadsheetError

__all__ = [
    "DriveBridge",
    "StorageError",
    "GoogleAuthError",
    "TokenProvider",
    "build_token_provider",
    "SheetsBridge",
    "SpreadsheetError",
]
