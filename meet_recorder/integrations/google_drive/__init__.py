"""
Google Drive integration for Meet Recorder.

Provides OAuth authentication, recording listing and download.
"""
from .client import (
    DriveIntegration,
    get_drive,
)
from .routes import router

__all__ = [
    "DriveIntegration",
    "get_drive",
    # API Router
    "router",
]
