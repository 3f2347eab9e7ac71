"""
Google Calendar integration API routes.

Includes:
- OAuth flow endpoints
- Meeting creation with an attached Google Meet link
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Depends
from pydantic import BaseModel

from ...auth import User, get_current_user
from ...models import CreateMeetingRequest, CreateMeetingResponse
from .client import get_calendar


router = APIRouter(tags=["calendar"])


# --------------------------------------------------------------------------- #
# Response Models
# --------------------------------------------------------------------------- #

class CalendarAuthUrlResponse(BaseModel):
    auth_url: str
    instructions: str


class CalendarStatusResponse(BaseModel):
    connected: bool
    email: Optional[str] = None


# --------------------------------------------------------------------------- #
# OAuth Endpoints
# --------------------------------------------------------------------------- #

@router.get("/integrations/calendar/status", response_model=CalendarStatusResponse)
def calendar_status(user: User = Depends(get_current_user)):
    """Get Google Calendar connection status."""
    calendar = get_calendar(user.id)
    connected = calendar.is_connected()
    return CalendarStatusResponse(
        connected=connected,
        email=calendar.get_user_email() if connected else None,
    )


@router.get("/integrations/calendar/auth-url", response_model=CalendarAuthUrlResponse)
def calendar_auth_url(
    redirect_uri: str = Query(..., description="OAuth callback URL registered with Google"),
    user: User = Depends(get_current_user),
):
    """Get the Google Calendar OAuth authorization URL."""
    calendar = get_calendar(user.id)
    return CalendarAuthUrlResponse(
        auth_url=calendar.get_auth_url(redirect_uri=redirect_uri),
        instructions="Visit the URL to authorize, then call /integrations/calendar/auth?code=YOUR_CODE",
    )


@router.get("/integrations/calendar/auth", response_model=CalendarStatusResponse)
def calendar_auth(
    code: str = Query(..., description="Authorization code returned by Google"),
    redirect_uri: str = Query(..., description="Must match the redirect_uri used in auth-url"),
    state: Optional[str] = Query(default=None),
    user: User = Depends(get_current_user),
):
    """Complete Google Calendar OAuth using the query parameters of the redirect callback."""
    calendar = get_calendar(user.id)
    if not calendar.complete_auth(code, redirect_uri):
        raise HTTPException(status_code=400, detail="Failed to complete authentication")
    return CalendarStatusResponse(connected=True, email=calendar.get_user_email())


@router.post("/integrations/calendar/disconnect", response_model=CalendarStatusResponse)
def calendar_disconnect(user: User = Depends(get_current_user)):
    """Disconnect Google Calendar integration."""
    get_calendar(user.id).disconnect()
    return CalendarStatusResponse(connected=False, email=None)


# --------------------------------------------------------------------------- #
# Meetings
# --------------------------------------------------------------------------- #

@router.post("/api/calendar/create-meeting", response_model=CreateMeetingResponse)
async def create_meeting(
    request: CreateMeetingRequest,
    user: User = Depends(get_current_user),
):
    """Create a calendar event with a Google Meet link."""
    from ...orchestrator import create_meeting as run_create_meeting

    return await run_create_meeting(user, request)
