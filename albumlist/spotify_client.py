"""
Spotify Web API Client

Provides a small interface to the bearer-authenticated Spotify Web API with:
- Current user lookup and playlist creation
- Album search
- Album track page fetching (the caller follows `next` pointers)
- Appending track URIs to a playlist
- Retry with exponential backoff for rate-limited and 5xx responses

Every other non-success response raises SpotifyAPIError; nothing here
swallows transport failures.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from albumlist.exceptions import RateLimitError, SpotifyAPIError
from albumlist.models import Playlist, SearchCandidate, Token

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.spotify.com/v1"
MAX_TRACKS_PER_REQUEST = 100
ALBUM_TRACKS_PAGE_SIZE = 50
MAX_RETRY_AFTER = 60.0


class SpotifyClient:
    """
    Client for the Spotify Web API, bound to one access token for the run.

    The token is never refreshed; a 401 mid-run is fatal like any other
    non-retryable response.
    """

    def __init__(
        self,
        token: Token,
        base_url: str = API_BASE_URL,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        timeout: float = 30,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the Spotify API client.

        Args:
            token: Access token from the authorization flow
            base_url: Web API root (default: https://api.spotify.com/v1)
            max_retries: Attempts for 429/5xx responses (default: 3)
            retry_delay: Base delay for exponential backoff (default: 2.0)
            timeout: Request timeout in seconds (default: 30)
            session: Optional requests session to reuse
        """
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(self._get_headers())

        logger.debug(f"SpotifyClient initialized for {self.base_url}")

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API requests."""
        return {
            "Authorization": f"Bearer {self.token.access_token}",
            "Content-Type": "application/json",
        }

    def _url(self, path_or_url: str) -> str:
        if path_or_url.startswith("http://") or path_or_url.startswith("https://"):
            return path_or_url
        return f"{self.base_url}/{path_or_url.lstrip('/')}"

    @staticmethod
    def _is_retryable(status_code: int) -> bool:
        return status_code == 429 or status_code >= 500

    def _retry_wait(self, response: requests.Response, attempt: int) -> float:
        """Seconds to wait before the next attempt, honoring Retry-After on 429."""
        retry_after = response.headers.get("Retry-After")
        if response.status_code == 429 and retry_after:
            try:
                wait = max(float(retry_after), 0.0)
            except ValueError:
                wait = None
            if wait is not None:
                if wait > MAX_RETRY_AFTER:
                    logger.warning(
                        f"Retry-After of {wait}s exceeds {MAX_RETRY_AFTER}s, waiting {MAX_RETRY_AFTER}s instead"
                    )
                return min(wait, MAX_RETRY_AFTER)
        return self.retry_delay * (2 ** attempt)

    def _request(self, method: str, path_or_url: str, **kwargs) -> Any:
        """
        Execute a request, retrying only rate-limited and server-error responses.

        Args:
            method: HTTP method
            path_or_url: API path relative to base_url, or an absolute URL
            **kwargs: Passed through to requests (params, json, ...)

        Returns:
            Decoded JSON body, or an empty dict for empty bodies

        Raises:
            RateLimitError: 429 persisted through every attempt
            SpotifyAPIError: any other non-success response or transport error
        """
        url = self._url(path_or_url)
        for attempt in range(self.max_retries):
            try:
                r = self.session.request(method, url, timeout=self.timeout, **kwargs)
            except requests.exceptions.RequestException as e:
                raise SpotifyAPIError(f"{method} {url} failed: {e}") from e

            if r.ok:
                if not r.content:
                    return {}
                try:
                    return r.json()
                except ValueError as e:
                    raise SpotifyAPIError(
                        f"{method} {url} returned a non-JSON body: {e}", status_code=r.status_code
                    ) from e

            if self._is_retryable(r.status_code) and attempt < self.max_retries - 1:
                wait_time = self._retry_wait(r, attempt)
                logger.warning(
                    f"Spotify returned {r.status_code} for {method} {url}, retrying in {wait_time}s "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                time.sleep(wait_time)
                continue

            error_cls = RateLimitError if r.status_code == 429 else SpotifyAPIError
            raise error_cls(f"{method} {url} -> {r.status_code}: {r.text}", status_code=r.status_code)

        raise SpotifyAPIError(f"Max retries ({self.max_retries}) exceeded for {method} {url}")

    def get_current_user(self) -> Dict[str, Any]:
        """Return the profile of the user who authorized the token."""
        return self._request("GET", "/me")

    def create_playlist(self, user_id: str, name: str, public: bool = False, description: str = "") -> Playlist:
        """
        Create an empty playlist owned by `user_id`.

        Args:
            user_id: Spotify user id from get_current_user()
            name: Playlist name
            public: Whether the playlist is public (default: False)
            description: Playlist description

        Returns:
            The created Playlist (id and public URL)
        """
        payload = {"name": name, "public": public, "description": description}
        data = self._request("POST", f"/users/{user_id}/playlists", json=payload)
        playlist = Playlist(id=data["id"], url=(data.get("external_urls") or {}).get("spotify", ""))
        logger.info(f"Created playlist '{name}' ({playlist.id})")
        return playlist

    def search_albums(self, query: str, limit: int = 10) -> List[SearchCandidate]:
        """
        Search the catalog for albums.

        Args:
            query: Search query (may contain field qualifiers like `album:`)
            limit: Maximum number of results

        Returns:
            Candidates in the order ranked by the search service
        """
        params = {"q": query, "type": "album", "limit": limit}
        data = self._request("GET", "/search", params=params)
        items = (data.get("albums") or {}).get("items") or []
        candidates = [SearchCandidate.from_api(i) for i in items if i]
        logger.debug(f"Search '{query}' returned {len(candidates)} albums")
        return candidates

    def album_tracks_url(self, album_id: str, page_size: int = ALBUM_TRACKS_PAGE_SIZE) -> str:
        """URL of the first page of an album's track listing."""
        return f"{self.base_url}/albums/{album_id}/tracks?limit={page_size}"

    def get_album_tracks_page(self, url: str) -> Dict[str, Any]:
        """Fetch one page of album tracks; the page carries `items` and `next`."""
        return self._request("GET", url)

    def add_tracks_to_playlist(self, playlist_id: str, uris: List[str]) -> Dict[str, Any]:
        """
        Append up to MAX_TRACKS_PER_REQUEST track URIs to the end of a playlist.

        Raises:
            ValueError: more URIs than one request accepts
        """
        if len(uris) > MAX_TRACKS_PER_REQUEST:
            raise ValueError(
                f"At most {MAX_TRACKS_PER_REQUEST} tracks per request, got {len(uris)}"
            )
        return self._request("POST", f"/playlists/{playlist_id}/tracks", json={"uris": list(uris)})

    def __repr__(self) -> str:
        return f"SpotifyClient(base_url={self.base_url})"
