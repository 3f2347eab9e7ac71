"""
Token storage for Google OAuth credentials using Supabase.

Stores tokens in the database, per user per service.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..supabase_client import get_db


TOKENS_TABLE = "integration_tokens"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def save_token(user_id: str, service: str, token_data: Dict[str, Any]) -> None:
    """
    Save OAuth token data for a service.

    Args:
        user_id: The user's ID
        service: The service name (e.g., "google_calendar", "google_drive")
        token_data: Token data including access token, refresh token, etc.
    """
    db = get_db()

    # Upsert - insert or update on conflict
    db.table(TOKENS_TABLE).upsert({
        "user_id": user_id,
        "service": service,
        "token_data": {**token_data, "updated_at": _now()},
        "updated_at": _now(),
    }, on_conflict="user_id,service").execute()


def get_token(user_id: str, service: str) -> Optional[Dict[str, Any]]:
    """
    Get OAuth token data for a service.

    Returns:
        Token data dict or None if not found
    """
    db = get_db()

    result = db.table(TOKENS_TABLE).select("token_data").eq("user_id", user_id).eq("service", service).execute()

    if result.data:
        return result.data[0]["token_data"]
    return None


def delete_token(user_id: str, service: str) -> bool:
    """
    Delete OAuth token for a service.

    Returns:
        True if token was deleted, False if it didn't exist
    """
    db = get_db()

    result = db.table(TOKENS_TABLE).delete().eq("user_id", user_id).eq("service", service).execute()

    return len(result.data) > 0


def has_token(user_id: str, service: str) -> bool:
    """Check if a service has stored credentials for a user."""
    return get_token(user_id, service) is not None
