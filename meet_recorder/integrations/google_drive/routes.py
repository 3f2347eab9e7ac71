"""
Google Drive integration API routes.

Includes:
- OAuth flow endpoints
- Recording listing (enriched with Calendar matches) and download
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Depends
from pydantic import BaseModel

from ...auth import User, get_current_user
from ...config import settings
from ...models import (
    DownloadRecordingRequest,
    DownloadRecordingResponse,
    ListRecordingsResponse,
)
from .client import get_drive


router = APIRouter(tags=["drive"])


# --------------------------------------------------------------------------- #
# Response Models
# --------------------------------------------------------------------------- #

class DriveAuthUrlResponse(BaseModel):
    auth_url: str
    instructions: str


class DriveStatusResponse(BaseModel):
    connected: bool
    email: Optional[str] = None


def get_download_dir() -> Path:
    """Directory recordings are downloaded into."""
    return settings.downloads_dir


# --------------------------------------------------------------------------- #
# OAuth Endpoints
# --------------------------------------------------------------------------- #

@router.get("/integrations/drive/status", response_model=DriveStatusResponse)
def drive_status(user: User = Depends(get_current_user)):
    """Get Google Drive connection status."""
    drive = get_drive(user.id)
    connected = drive.is_connected()
    return DriveStatusResponse(
        connected=connected,
        email=drive.get_user_email() if connected else None,
    )


@router.get("/integrations/drive/auth-url", response_model=DriveAuthUrlResponse)
def drive_auth_url(
    redirect_uri: str = Query(..., description="OAuth callback URL registered with Google"),
    user: User = Depends(get_current_user),
):
    """Get the Google Drive OAuth authorization URL."""
    drive = get_drive(user.id)
    return DriveAuthUrlResponse(
        auth_url=drive.get_auth_url(redirect_uri=redirect_uri),
        instructions="Visit the URL to authorize, then call /integrations/drive/auth?code=YOUR_CODE",
    )


@router.get("/integrations/drive/auth", response_model=DriveStatusResponse)
def drive_auth(
    code: str = Query(..., description="Authorization code returned by Google"),
    redirect_uri: str = Query(..., description="Must match the redirect_uri used in auth-url"),
    state: Optional[str] = Query(default=None),
    user: User = Depends(get_current_user),
):
    """Complete Google Drive OAuth using the query parameters of the redirect callback."""
    drive = get_drive(user.id)
    if not drive.complete_auth(code, redirect_uri):
        raise HTTPException(status_code=400, detail="Failed to complete authentication")
    return DriveStatusResponse(connected=True, email=drive.get_user_email())


@router.post("/integrations/drive/disconnect", response_model=DriveStatusResponse)
def drive_disconnect(user: User = Depends(get_current_user)):
    """Disconnect Google Drive integration."""
    get_drive(user.id).disconnect()
    return DriveStatusResponse(connected=False, email=None)


# --------------------------------------------------------------------------- #
# Recordings
# --------------------------------------------------------------------------- #

@router.get("/api/recordings/list", response_model=ListRecordingsResponse, response_model_exclude_none=True)
async def list_recordings(user: User = Depends(get_current_user)):
    """
    List video recordings in the user's Drive.

    Each recording is matched against Calendar events of the last 30 days
    (when Calendar is connected) and gets a suggested download file name.
    """
    from ...orchestrator import list_recordings as run_list_recordings

    return await run_list_recordings(user)


@router.post("/api/recordings/download", response_model=DownloadRecordingResponse)
async def download_recording(
    request: DownloadRecordingRequest,
    user: User = Depends(get_current_user),
    download_dir: Path = Depends(get_download_dir),
):
    """Download a recording to the local downloads directory."""
    from ...orchestrator import download_recording as run_download_recording

    return await run_download_recording(user, request, download_dir)
