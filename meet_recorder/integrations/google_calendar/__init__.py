"""
Google Calendar integration for Meet Recorder.

Provides OAuth authentication and Meet event creation.
"""
from .client import (
    CalendarIntegration,
    get_calendar,
)
from .routes import router

__all__ = [
    "CalendarIntegration",
    "get_calendar",
    # API Router
    "router",
]
