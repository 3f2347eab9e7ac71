"""
Configuration management for the Meet Recorder backend.

Uses Pydantic Settings for type-safe configuration with .env file support.
"""
import json
from pathlib import Path
from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


_PACKAGE_DIR = Path(__file__).parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=_PACKAGE_DIR / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    downloads_dir: Path = Field(
        default=_PACKAGE_DIR / "downloads",
        description="Flat directory that downloaded recordings are written into",
    )

    # Supabase Settings
    supabase_url: str = Field(default="", description="Supabase project URL")
    supabase_anon_key: str = Field(default="", description="Supabase anonymous/public key")
    supabase_service_role_key: str = Field(default="", description="Supabase service role key (for backend)")
    supabase_jwt_secret: str = Field(default="", description="Supabase JWT secret for token verification")

    # Google Credentials (required)
    google_credentials_json: str = Field(
        default="",
        description="Google OAuth credentials as JSON string"
    )

    # Upstream calls
    upstream_timeout_seconds: float = Field(default=30.0, gt=0)
    download_timeout_seconds: float = Field(default=1800.0, gt=0)
    download_chunk_size: int = Field(default=8 * 1024 * 1024, gt=0)

    # Recording matching
    calendar_lookback_days: int = Field(default=30, ge=1)
    match_window_hours: float = Field(default=4.0, gt=0)
    recordings_page_size: int = Field(default=50, ge=1, le=1000)

    # API Settings
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    frontend_url: str = Field(default="http://localhost:3000")


    @property
    def google_credentials_dict(self) -> Optional[Dict[str, Any]]:
        """
        Get Google credentials as a dictionary.

        Parses the GOOGLE_CREDENTIALS_JSON environment variable.

        Returns:
            Parsed credentials dictionary or None if not set

        Raises:
            ValueError: If credentials are set but cannot be parsed
        """
        if not self.google_credentials_json:
            return None
        try:
            return json.loads(self.google_credentials_json)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse GOOGLE_CREDENTIALS_JSON: {e}")

    def validate_config(self) -> list[str]:
        """Validate configuration and return list of warnings/errors."""
        issues = []

        if not self.supabase_url:
            issues.append("SUPABASE_URL is not set")

        if not self.supabase_service_role_key:
            issues.append("SUPABASE_SERVICE_ROLE_KEY is not set")

        if not self.supabase_jwt_secret:
            issues.append("SUPABASE_JWT_SECRET is not set")

        try:
            creds = self.google_credentials_dict
            if not creds:
                issues.append(
                    "GOOGLE_CREDENTIALS_JSON is not set. "
                    "Please set the GOOGLE_CREDENTIALS_JSON environment variable."
                )
        except ValueError as e:
            issues.append(str(e))

        # Ensure the download directory exists
        if not self.downloads_dir.exists():
            try:
                self.downloads_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                issues.append(f"Cannot create downloads directory {self.downloads_dir}: {e}")

        return issues


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    issues = settings.validate_config()

    if issues:
        raise ValueError(f"Invalid configuration: {issues}")

    return settings


settings = get_settings()
