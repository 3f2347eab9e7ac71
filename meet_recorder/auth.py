"""
Authentication module for the Meet Recorder backend.

Application sign-in is handled by Supabase; every request carries the
Supabase access token as a bearer token. Google credentials are looked up
per user afterwards (see integrations.google.oauth).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError

from .config import settings

logger = logging.getLogger(__name__)


# HTTP Bearer token scheme for extracting JWT from Authorization header
security = HTTPBearer(auto_error=False)

JWT_ALGORITHMS = ["HS256"]
JWT_AUDIENCE = "authenticated"


@dataclass
class User:
    """Authenticated user information extracted from JWT."""
    id: str  # Supabase user UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_token(token: str) -> dict:
    """
    Verify a Supabase JWT and return its payload.

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=JWT_ALGORITHMS,
            audience=JWT_AUDIENCE,
        )
    except JWTError as e:
        logger.info("Rejected session token: %s", e)
        raise _unauthorized(f"Invalid authentication token: {e}")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """
    FastAPI dependency to get the current authenticated user.

    Usage:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            return {"user_id": user.id}

    Raises:
        HTTPException: If the token is missing, invalid, or expired
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Unauthorized - sign in again")

    payload = verify_token(credentials.credentials)

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Token missing user ID")

    user_metadata = payload.get("user_metadata") or {}

    return User(
        id=user_id,
        email=payload.get("email"),
        full_name=user_metadata.get("full_name"),
        avatar_url=user_metadata.get("avatar_url"),
    )
