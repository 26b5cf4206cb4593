"""
Custom exception hierarchy for the album list playlist builder.

This module defines domain-specific exceptions so callers can tell a
per-entry miss (never raised, returned as None) apart from the fatal
configuration, authorization and transport failures that end a run.
"""
from typing import Optional


class AlbumListError(Exception):
    """Base exception for all album list errors."""
    pass


class ConfigurationError(AlbumListError):
    """Configuration error (missing or invalid settings)."""
    pass


class DataError(AlbumListError):
    """Base class for data-related errors."""
    pass


class ListFileNotFoundError(DataError):
    """The album list file does not exist."""
    pass


class AuthorizationError(AlbumListError):
    """The browser authorization handshake failed."""
    pass


class StateMismatchError(AuthorizationError):
    """The redirect echoed a state value other than the one we generated."""
    pass


class TokenExchangeError(AuthorizationError):
    """The token endpoint rejected the authorization code."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthorizationTimeoutError(AuthorizationError):
    """No redirect arrived before the configured timeout."""
    pass


class APIError(AlbumListError):
    """Base class for all API-related errors."""
    pass


class SpotifyAPIError(APIError):
    """Error communicating with the Spotify Web API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(SpotifyAPIError):
    """API rate limit exceeded and retries exhausted."""
    pass
