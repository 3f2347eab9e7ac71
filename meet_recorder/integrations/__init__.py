"""
Integrations package for Meet Recorder.

Each Google API the service talks to has its own subfolder with a client
(built on the shared OAuth base in ``google``) and its API routes.
"""
from .google_calendar import CalendarIntegration, get_calendar
from .google_drive import DriveIntegration, get_drive

__all__ = [
    # Calendar
    "CalendarIntegration",
    "get_calendar",
    # Drive
    "DriveIntegration",
    "get_drive",
]
