"""
Pytest fixtures for albumlist-to-spotify tests

Provides common test data and a fake Spotify client for use across all test modules.
"""
import os
import webbrowser
from typing import Dict, List, Optional
from urllib.parse import parse_qs, urlparse

import pytest

from albumlist.models import AlbumEntry, Playlist, SearchCandidate
from albumlist.spotify_client import MAX_TRACKS_PER_REQUEST


class FakeSpotifyClient:
    """In-memory stand-in for SpotifyClient that records every call.

    Args:
        search_results: query string -> candidates returned for it
        album_tracks: album id -> number of tracks on the album
        page_size: tracks per page when paginating album tracks
    """

    def __init__(
        self,
        search_results: Optional[Dict[str, List[SearchCandidate]]] = None,
        album_tracks: Optional[Dict[str, int]] = None,
        page_size: int = 50
    ):
        self.search_results = search_results or {}
        self.album_tracks = album_tracks or {}
        self.page_size = page_size
        self.searches: List[str] = []
        self.page_requests: List[str] = []
        self.appends: List[tuple] = []
        self.created: List[dict] = []

    @staticmethod
    def track_uri(album_id: str, n: int) -> str:
        return f"spotify:track:{album_id}-{n:03d}"

    def get_current_user(self):
        return {"id": "user-1"}

    def create_playlist(self, user_id, name, public=False, description=""):
        self.created.append({"user_id": user_id, "name": name, "public": public, "description": description})
        return Playlist(id="pl-1", url="https://open.spotify.com/playlist/pl-1")

    def search_albums(self, query, limit=10):
        self.searches.append(query)
        return list(self.search_results.get(query, []))[:limit]

    def album_tracks_url(self, album_id, page_size=50):
        return f"https://api.test/albums/{album_id}/tracks?offset=0"

    def get_album_tracks_page(self, url):
        self.page_requests.append(url)
        parsed = urlparse(url)
        album_id = parsed.path.split("/")[2]
        offset = int(parse_qs(parsed.query)["offset"][0])
        total = self.album_tracks.get(album_id, 0)
        end = min(offset + self.page_size, total)
        items = [{"uri": self.track_uri(album_id, n)} for n in range(offset, end)]
        next_url = f"https://api.test/albums/{album_id}/tracks?offset={end}" if end < total else None
        return {"items": items, "next": next_url}

    def add_tracks_to_playlist(self, playlist_id, uris):
        assert len(uris) <= MAX_TRACKS_PER_REQUEST
        self.appends.append((playlist_id, list(uris)))
        return {"snapshot_id": f"snap-{len(self.appends)}"}

    @property
    def appended_uris(self) -> List[str]:
        return [u for _, batch in self.appends for u in batch]


def candidate(album_id: str, name: str, artist: str = "") -> SearchCandidate:
    return SearchCandidate(id=album_id, name=name, primary_artist_name=artist)


@pytest.fixture
def fake_client():
    return FakeSpotifyClient()


@pytest.fixture
def sample_entries():
    """Sample list entries for testing."""
    return [
        AlbumEntry("Radiohead", "OK Computer"),
        AlbumEntry("Simon & Garfunkel", "Bridge over Troubled Water"),
        AlbumEntry("The Beatles", "Sgt. Pepper’s Lonely Hearts Club Band"),
    ]


@pytest.fixture
def sample_list_file(tmp_path):
    """Create a sample album list file for testing."""
    list_path = tmp_path / "albums.txt"
    list_path.write_text(
        "Radiohead - OK Computer\n"
        "\n"
        "Godspeed You! Black Emperor - F#A#∞ - Remastered\n"
        "   \n"
        "Son Lux - Tomorrows I\n",
        encoding="utf-8",
    )
    return list_path


@pytest.fixture
def mock_search_response():
    """Mock Spotify album search API response."""
    return {
        "albums": {
            "items": [
                {
                    "id": "6dVIqQ8qmQ5GBnJ9shOYGE",
                    "name": "OK Computer",
                    "artists": [{"id": "4Z8W4fKeB5YxbusRsdQVPb", "name": "Radiohead"}],
                },
                {
                    "id": "7dxKtc08dYeRVHt3p9CZJn",
                    "name": "OK Computer OKNOTOK 1997 2017",
                    "artists": [{"id": "4Z8W4fKeB5YxbusRsdQVPb", "name": "Radiohead"}],
                },
                None,
                {"id": "no-artists", "name": "Compilation", "artists": []},
            ],
            "next": None,
        }
    }


def pytest_terminal_summary(terminalreporter, exitstatus, config):
    """Print a concise, one-line summary at the end of the test run."""
    stats = getattr(terminalreporter, "stats", {})

    def _count(key):
        return len(stats.get(key, [])) if stats.get(key) is not None else 0

    passed = _count('passed')
    failed = _count('failed')
    skipped = _count('skipped')
    errors = _count('error')

    total = passed + failed + skipped + errors

    terminalreporter.write_sep("=", "pytest summary")
    terminalreporter.write_line(
        f"Total: {total}  Passed: {passed}  Failed: {failed}  Skipped: {skipped}  Errors: {errors}"
    )


@pytest.fixture(autouse=True)
def no_external_opens(monkeypatch):
    """Prevent tests from opening external applications or URLs."""
    monkeypatch.setattr(webbrowser, 'open', lambda *a, **k: None)

    if hasattr(os, 'startfile'):
        monkeypatch.setattr(os, 'startfile', lambda *a, **k: None)
