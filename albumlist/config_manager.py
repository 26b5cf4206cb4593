"""Configuration management for the album list playlist builder."""

import os
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

from albumlist.exceptions import ConfigurationError

BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_SCOPES = "playlist-modify-private playlist-modify-public"
DEFAULT_DESCRIPTION = "Generated from album list"
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


class Config:
    """Configuration container with validation."""

    def __init__(self):
        """Initialize configuration from config.py file or environment (.env aware)."""
        try:
            import sys

            # Add project root to path to import config
            if str(BASE_DIR) not in sys.path:
                sys.path.insert(0, str(BASE_DIR))

            try:
                import config as config_module
                self._load_from_module(config_module)
            except ImportError:
                self._load_from_env()
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Failed to load configuration: {e}")

        # Validation is explicit so tests can build a Config and then load or
        # validate it step by step.

    def _load_from_module(self, config_module) -> None:
        """Load configuration from config.py module."""
        # Spotify application
        self.spotify_client_id = getattr(config_module, 'SPOTIFY_CLIENT_ID', None)
        self.spotify_redirect_uri = getattr(config_module, 'SPOTIFY_REDIRECT_URI', None)
        self.scopes = getattr(config_module, 'SPOTIFY_SCOPES', DEFAULT_SCOPES)

        # Authorization
        self.auth_timeout = _optional_float(getattr(config_module, 'AUTH_TIMEOUT', None))

        # Search and API behaviour
        self.search_limit = int(getattr(config_module, 'SEARCH_LIMIT', 10))
        self.request_timeout = float(getattr(config_module, 'REQUEST_TIMEOUT', 30))
        self.max_retries = int(getattr(config_module, 'MAX_RETRIES', 3))
        self.retry_delay = float(getattr(config_module, 'RETRY_DELAY', 2.0))

        # Playlist
        self.playlist_description = getattr(config_module, 'PLAYLIST_DESCRIPTION', DEFAULT_DESCRIPTION)

        # Logging
        self.log_level = getattr(config_module, 'LOG_LEVEL', 'INFO')
        self.log_format = getattr(config_module, 'LOG_FORMAT', DEFAULT_LOG_FORMAT)

    def _load_from_env(self) -> None:
        """Load configuration from environment variables (fallback), reading .env first."""
        load_dotenv(BASE_DIR / ".env")

        # Spotify application
        self.spotify_client_id = os.getenv('SPOTIFY_CLIENT_ID')
        self.spotify_redirect_uri = os.getenv('SPOTIFY_REDIRECT_URI')
        self.scopes = os.getenv('SPOTIFY_SCOPES', DEFAULT_SCOPES)

        # Authorization
        self.auth_timeout = _optional_float(os.getenv('AUTH_TIMEOUT'))

        # Search and API behaviour
        self.search_limit = int(os.getenv('SEARCH_LIMIT', '10'))
        self.request_timeout = float(os.getenv('REQUEST_TIMEOUT', '30'))
        self.max_retries = int(os.getenv('MAX_RETRIES', '3'))
        self.retry_delay = float(os.getenv('RETRY_DELAY', '2.0'))

        # Playlist
        self.playlist_description = os.getenv('PLAYLIST_DESCRIPTION', DEFAULT_DESCRIPTION)

        # Logging
        self.log_level = os.getenv('LOG_LEVEL', 'INFO')
        self.log_format = os.getenv('LOG_FORMAT', DEFAULT_LOG_FORMAT)

    def _validate(self) -> None:
        """Validate required configuration values."""
        if not self.spotify_client_id:
            raise ConfigurationError(
                "SPOTIFY_CLIENT_ID is required. Set it in config.py, .env or the environment."
            )

        if self.spotify_client_id == "YOUR_CLIENT_ID_HERE":
            raise ConfigurationError(
                "Please update SPOTIFY_CLIENT_ID in config.py with your app's client id."
            )

        if not self.spotify_redirect_uri:
            raise ConfigurationError(
                "SPOTIFY_REDIRECT_URI is required. Set it in config.py, .env or the environment."
            )

        parsed = urlparse(self.spotify_redirect_uri)
        try:
            port = parsed.port
        except ValueError:
            port = None
        if parsed.scheme != "http" or not parsed.hostname or not port:
            raise ConfigurationError(
                f"SPOTIFY_REDIRECT_URI must be a local http URL with an explicit port, "
                f"got {self.spotify_redirect_uri!r}"
            )

        if self.search_limit < 1 or self.search_limit > 50:
            raise ConfigurationError("SEARCH_LIMIT must be between 1 and 50.")

        if str(self.log_level).upper() not in LOG_LEVELS:
            raise ConfigurationError(
                f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}"
            )

    @property
    def scope_list(self):
        """Requested scopes as a list, accepting a space-separated string or a sequence."""
        if isinstance(self.scopes, str):
            return self.scopes.split()
        return list(self.scopes)

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary."""
        return {
            'spotify_client_id': self.spotify_client_id,
            'spotify_redirect_uri': self.spotify_redirect_uri,
            'scopes': self.scope_list,
            'auth_timeout': self.auth_timeout,
            'search_limit': self.search_limit,
            'request_timeout': self.request_timeout,
            'max_retries': self.max_retries,
            'retry_delay': self.retry_delay,
            'playlist_description': self.playlist_description,
            'log_level': self.log_level,
        }

    def __repr__(self) -> str:
        """String representation (sanitized - no client id)."""
        return (
            f"Config(redirect_uri={self.spotify_redirect_uri}, "
            f"search_limit={self.search_limit}, "
            f"max_retries={self.max_retries})"
        )
