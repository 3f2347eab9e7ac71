"""
Shared Google OAuth handling for the Calendar and Drive clients.

``GoogleOAuthClient`` loads a user's stored token, refreshes it when it has
expired and refuses to build an API service without usable credentials.
"""
from .oauth import GoogleOAuthClient

__all__ = ["GoogleOAuthClient"]
