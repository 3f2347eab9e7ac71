"""
Base class for Google OAuth integrations.

Provides common OAuth flow, credential management, and service initialization
for the Google API integrations (Calendar, Drive).
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build

from ...config import settings
from ...errors import UnauthorizedError
from ..token_storage import (
    get_token,
    save_token,
    delete_token,
    has_token,
)

logger = logging.getLogger(__name__)


class GoogleOAuthClient(ABC):
    """
    Abstract base class for Google OAuth integrations.

    Provides common OAuth flow, credential management, and API service
    initialization. Subclasses must define class attributes and implement
    `get_user_email()`.

    Class Attributes (must be defined by subclasses):
        SERVICE_NAME: Token storage key (e.g., "google_calendar")
        DISPLAY_NAME: Name used in error messages (e.g., "Google Calendar")
        API_NAME: Google API name (e.g., "calendar", "drive")
        API_VERSION: API version (e.g., "v3")
        SCOPES: List of OAuth scopes required
    """

    # Subclasses must define these
    SERVICE_NAME: str
    DISPLAY_NAME: str
    API_NAME: str
    API_VERSION: str
    SCOPES: List[str]

    def __init__(self, user_id: str):
        """
        Initialize the Google OAuth client.

        Args:
            user_id: The user's ID. Required for per-user token operations.
        """
        if not user_id:
            raise ValueError("user_id is required")

        self._user_id = user_id
        self._credentials_dict = settings.google_credentials_dict

        self._service = None
        self._credentials: Optional[Credentials] = None
        self._refresh_failed = False

    # ----------------------------------------------------------------------- #
    # Connection Status
    # ----------------------------------------------------------------------- #

    def is_connected(self) -> bool:
        """Check if the integration is connected and has valid credentials."""
        if not has_token(self._user_id, self.SERVICE_NAME):
            logger.debug("[%s] No token found for user %s", self.SERVICE_NAME, self._user_id)
            return False

        creds = self._get_credentials()
        if creds is None:
            return False
        if not creds.valid:
            logger.info(
                "[%s] Credentials not valid for user %s (expired: %s)",
                self.SERVICE_NAME, self._user_id, creds.expired,
            )
            return False
        return True

    def require_credentials(self) -> Credentials:
        """
        Return live credentials or fail before any API call is attempted.

        Raises:
            UnauthorizedError: If no token is stored, the token is invalid or
                refreshing it failed
        """
        creds = self._get_credentials()
        if creds is None or not creds.valid:
            reason = "refresh failed" if self._refresh_failed else "not connected"
            raise UnauthorizedError(
                f"Unauthorized - sign in again to grant {self.DISPLAY_NAME} access",
                details={"service": self.SERVICE_NAME, "reason": reason},
            )
        return creds

    @abstractmethod
    def get_user_email(self) -> Optional[str]:
        """
        Get the email address of the connected user.

        Each Google API has a different way to retrieve this,
        so subclasses must implement this method.
        """

    # ----------------------------------------------------------------------- #
    # OAuth Flow
    # ----------------------------------------------------------------------- #

    def _flow(self, redirect_uri: str) -> Flow:
        return Flow.from_client_config(
            self._credentials_dict,
            scopes=self.SCOPES,
            redirect_uri=redirect_uri,
        )

    def get_auth_url(self, redirect_uri: str) -> str:
        """
        Get the OAuth authorization URL for the user to visit.

        Args:
            redirect_uri: The redirect URI for OAuth callback.
        """
        auth_url, _ = self._flow(redirect_uri).authorization_url(
            access_type="offline",
            prompt="consent",
        )
        return auth_url

    def complete_auth(self, authorization_code: str, redirect_uri: str) -> bool:
        """
        Complete the OAuth flow with the authorization code.

        Args:
            authorization_code: The code returned after user authorization
            redirect_uri: Must match the redirect_uri used in get_auth_url()

        Returns:
            True if authentication was successful
        """
        try:
            flow = self._flow(redirect_uri)
            flow.fetch_token(code=authorization_code)
        except Exception:
            logger.exception("[%s] Error completing OAuth for user %s", self.SERVICE_NAME, self._user_id)
            return False

        creds = flow.credentials
        save_token(self._user_id, self.SERVICE_NAME, self._token_payload(creds))

        self._credentials = creds
        self._service = None  # Reset service to use new credentials
        self._refresh_failed = False
        return True

    def disconnect(self) -> bool:
        """
        Disconnect by removing stored credentials.

        Returns:
            True if credentials were removed
        """
        self._credentials = None
        self._service = None
        return delete_token(self._user_id, self.SERVICE_NAME)

    # ----------------------------------------------------------------------- #
    # Credentials & Service
    # ----------------------------------------------------------------------- #

    def _token_payload(self, creds: Credentials) -> Dict[str, Any]:
        return {
            "token": creds.token,
            "refresh_token": creds.refresh_token,
            "token_uri": creds.token_uri,
            "client_id": creds.client_id,
            "client_secret": creds.client_secret,
            "scopes": list(creds.scopes) if creds.scopes else self.SCOPES,
            "expiry": creds.expiry.isoformat() if creds.expiry else None,
        }

    def _get_credentials(self) -> Optional[Credentials]:
        """Get or refresh credentials from token storage."""
        if self._credentials and self._credentials.valid:
            return self._credentials

        token_data = get_token(self._user_id, self.SERVICE_NAME)
        if not token_data:
            return None

        try:
            expiry = None
            if token_data.get("expiry"):
                # google-auth compares expiry against a naive UTC datetime
                expiry = datetime.fromisoformat(token_data["expiry"]).replace(tzinfo=None)

            creds = Credentials(
                token=token_data.get("token"),
                refresh_token=token_data.get("refresh_token"),
                token_uri=token_data.get("token_uri"),
                client_id=token_data.get("client_id"),
                client_secret=token_data.get("client_secret"),
                scopes=token_data.get("scopes", self.SCOPES),
                expiry=expiry,
            )
        except (TypeError, ValueError):
            logger.exception("[%s] Stored token for user %s is malformed", self.SERVICE_NAME, self._user_id)
            return None

        # Refresh if expired or token is invalid
        if (creds.expired or not creds.valid) and creds.refresh_token:
            try:
                creds.refresh(Request())
            except RefreshError as e:
                logger.warning(
                    "[%s] Refreshing token for user %s failed: %s",
                    self.SERVICE_NAME, self._user_id, e,
                )
                self._refresh_failed = True
                return None
            save_token(self._user_id, self.SERVICE_NAME, self._token_payload(creds))

        self._credentials = creds
        return creds

    def _get_service(self):
        """
        Get the Google API service, initializing if needed.

        Raises:
            UnauthorizedError: If not authenticated
        """
        if self._service:
            return self._service

        creds = self.require_credentials()
        self._service = build(
            self.API_NAME,
            self.API_VERSION,
            credentials=creds,
            cache_discovery=False,
        )
        return self._service
