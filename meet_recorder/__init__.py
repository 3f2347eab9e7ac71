"""
Meet Recorder - Python package.

This package contains:
- Google OAuth connection management (Calendar, Drive)
- Meet event creation on Google Calendar
- Recording listing and download from Google Drive
- Meeting identifier extraction, recording-to-event matching and
  download file naming
- Orchestrator and FastAPI API
"""

__version__ = "0.1.0"

__all__ = [
    "models",
    "errors",
    "recordings",
    "integrations",
    "orchestrator",
    "api",
]
